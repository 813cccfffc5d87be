import pytest

from audio_audit.errors import ConfigurationError
from audio_audit.pipeline.config import AuditConfig

CLOUD_ENV = {
    "DATABASE_URL": "sqlite:///content.db",
    "BUCKET_NAME": "ll-app",
    "BUCKET_KEY_ID": "id",
    "BUCKET_ACCESS_KEY": "secret",
}


def test_defaults_from_minimal_env() -> None:
    config = AuditConfig.from_env(CLOUD_ENV)

    assert config.validate() == []
    assert config.max_rate == 50.0
    assert config.concurrency == 20
    assert config.audio_prefixes == ["audio/jp", "audio/ru"]
    assert config.categories == ["vocab", "activities"]
    assert config.output_dir == "reports"
    assert config.use_local_storage is False


def test_env_overrides() -> None:
    config = AuditConfig.from_env(
        {
            **CLOUD_ENV,
            "AUDIT_COURSE": "jp-101",
            "AUDIT_MAX_RATE": "12.5",
            "AUDIT_CONCURRENCY": "4",
            "AUDIT_VOCAB_LIMIT": "2000",
            "AUDIT_ACTIVITIES_LIMIT": "200",
            "AUDIO_PREFIXES": "audio/v2, audio/jp ,",
            "AUDIT_CHECK_TIMEOUT": "0",
        }
    )

    assert config.course == "jp-101"
    assert config.max_rate == 12.5
    assert config.concurrency == 4
    assert config.limit_for("vocab") == 2000
    assert config.limit_for("activities") == 200
    assert config.audio_prefixes == ["audio/v2", "audio/jp"]
    assert config.check_timeout is None


def test_zero_rate_means_unlimited() -> None:
    config = AuditConfig.from_env({**CLOUD_ENV, "AUDIT_MAX_RATE": "0"})

    assert config.max_rate is None
    assert config.validate() == []


def test_missing_required_values_fail_fast() -> None:
    config = AuditConfig.from_env({})

    errors = config.validate()
    assert "DATABASE_URL is required" in errors
    assert any("BUCKET_NAME" in e for e in errors)
    with pytest.raises(ConfigurationError) as excinfo:
        config.require_valid()
    assert excinfo.value.errors == errors


def test_local_storage_does_not_need_bucket_credentials() -> None:
    config = AuditConfig.from_env(
        {"DATABASE_URL": "sqlite://", "LOCAL_STORAGE_DIR": "/mnt/bucket"}
    )

    assert config.use_local_storage is True
    assert config.validate() == []


def test_unparseable_numbers_are_reported() -> None:
    config = AuditConfig.from_env(
        {**CLOUD_ENV, "AUDIT_MAX_RATE": "fast", "AUDIT_CONCURRENCY": "many"}
    )

    errors = config.validate()
    assert any("AUDIT_MAX_RATE" in e for e in errors)
    assert any("AUDIT_CONCURRENCY" in e for e in errors)


def test_invalid_values() -> None:
    config = AuditConfig(
        database_url="sqlite://",
        local_storage_dir="/tmp",
        concurrency=0,
        categories=["vocab", "grammar"],
        vocab_limit=0,
    )

    errors = config.validate()
    assert "concurrency must be at least 1" in errors
    assert any("grammar" in e for e in errors)
    assert "vocab_limit must be at least 1" in errors


def test_malformed_database_url_is_reported() -> None:
    config = AuditConfig.from_env({**CLOUD_ENV, "DATABASE_URL": "not a url"})

    errors = config.validate()
    assert "DATABASE_URL is not a valid SQLAlchemy database URL" in errors
