import asyncio
import csv
import signal

import pytest

from audio_audit.db import Base, VocabEntry, create_db_engine, get_db_session
from audio_audit.pipeline.__main__ import (
    _install_stop_handler,
    apply_overrides,
    main,
    parse_arguments,
)
from audio_audit.pipeline.config import AuditConfig
from conftest import touch

ENV_VARS = [
    "DATABASE_URL",
    "BUCKET_NAME",
    "BUCKET_ENDPOINT",
    "BUCKET_KEY_ID",
    "BUCKET_ACCESS_KEY",
    "BUCKET_REGION",
    "LOCAL_STORAGE_DIR",
    "AUDIT_COURSE",
    "AUDIT_MAX_RATE",
    "AUDIT_CONCURRENCY",
    "AUDIT_VOCAB_LIMIT",
    "AUDIT_ACTIVITIES_LIMIT",
    "AUDIO_PREFIXES",
    "AUDIT_CHECK_TIMEOUT",
    "AUDIT_OUTPUT_DIR",
]


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return monkeypatch


def test_overrides_take_precedence_over_env() -> None:
    config = AuditConfig(database_url="sqlite://", max_rate=50.0)
    args = parse_arguments(
        ["--categories", "vocab", "--limit", "10", "--max-rate", "0", "--course", "jp"]
    )

    apply_overrides(config, args)

    assert config.categories == ["vocab"]
    assert config.vocab_limit == 10
    assert config.activities_limit == 10
    assert config.max_rate is None
    assert config.course == "jp"


def test_missing_configuration_exits_before_work(clean_env, capsys) -> None:
    assert main([]) == 2
    assert "DATABASE_URL is required" in capsys.readouterr().err


def test_dry_run_does_not_touch_storage(clean_env, tmp_path, capsys) -> None:
    clean_env.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'content.db'}")
    clean_env.setenv("LOCAL_STORAGE_DIR", str(tmp_path / "bucket"))

    assert main(["--dry-run"]) == 0
    assert "DRY RUN" in capsys.readouterr().out
    assert not (tmp_path / "reports").exists()


def test_full_run_writes_reports(clean_env, tmp_path, capsys) -> None:
    database_url = f"sqlite:///{tmp_path / 'content.db'}"
    engine = create_db_engine(database_url)
    Base.metadata.create_all(bind=engine)
    with get_db_session(engine) as session:
        session.add_all([VocabEntry(word="cat"), VocabEntry(word="dog")])
        session.commit()
    engine.dispose()
    touch(tmp_path / "bucket", "audio/jp/cat.mp3")
    clean_env.setenv("DATABASE_URL", database_url)

    exit_code = main(
        [
            "--local-dir",
            str(tmp_path / "bucket"),
            "--output-dir",
            str(tmp_path / "out"),
            "--max-rate",
            "200",
        ]
    )

    assert exit_code == 0
    with open(tmp_path / "out" / "vocab.csv", newline="", encoding="utf-8") as f:
        assert list(csv.reader(f)) == [["word"], ["dog"]]
    with open(tmp_path / "out" / "activities.csv", newline="", encoding="utf-8") as f:
        assert list(csv.reader(f)) == [["word"]]
    assert "AUDIT SUMMARY" in capsys.readouterr().out


def test_malformed_database_url_exits_with_configuration_error(clean_env, tmp_path, capsys) -> None:
    clean_env.setenv("DATABASE_URL", "not a url")
    clean_env.setenv("LOCAL_STORAGE_DIR", str(tmp_path / "bucket"))

    assert main([]) == 2
    assert "not a valid SQLAlchemy database URL" in capsys.readouterr().err


def test_missing_database_driver_exits_with_configuration_error(clean_env, tmp_path, capsys) -> None:
    clean_env.setenv("DATABASE_URL", "nosuchdialect://user@host/content")
    clean_env.setenv("LOCAL_STORAGE_DIR", str(tmp_path / "bucket"))

    assert main([]) == 2
    assert "DATABASE_URL cannot be used" in capsys.readouterr().err


def test_dry_run_fails_when_database_is_unreachable(clean_env, tmp_path, capsys) -> None:
    clean_env.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'missing' / 'content.db'}")
    clean_env.setenv("LOCAL_STORAGE_DIR", str(tmp_path / "bucket"))

    assert main(["--dry-run"]) == 2
    assert "database is not reachable" in capsys.readouterr().err


class RecordingLoop:
    def __init__(self):
        self.handlers = {}

    def add_signal_handler(self, sig, callback):
        self.handlers[sig] = callback

    def remove_signal_handler(self, sig):
        return self.handlers.pop(sig, None) is not None


def test_second_interrupt_is_not_intercepted() -> None:
    loop = RecordingLoop()
    stop_event = asyncio.Event()

    assert _install_stop_handler(loop, stop_event) is True
    loop.handlers[signal.SIGINT]()

    assert stop_event.is_set()
    assert signal.SIGINT not in loop.handlers
