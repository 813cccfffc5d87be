import pytest

from audio_audit.audit.paths import (
    MAX_STEM_LENGTH,
    build_candidate_paths,
    build_filename,
    sanitize_identifier,
)


def test_sanitize_keeps_case_and_spaces() -> None:
    assert sanitize_identifier("Good Morning") == "Good Morning"
    assert sanitize_identifier("こんにちは") == "こんにちは"


def test_sanitize_removes_dots() -> None:
    assert sanitize_identifier("Mr. Smith") == "Mr Smith"
    assert sanitize_identifier("etc...") == "etc"


def test_sanitize_replaces_path_unsafe_characters() -> None:
    assert sanitize_identifier("either/or") == "either_or"
    assert sanitize_identifier("back\\slash") == "back_slash"
    assert sanitize_identifier("what?") == "what_"
    assert sanitize_identifier("a#b[c]") == "a_b_c_"


def test_sanitize_strips_control_characters_and_whitespace() -> None:
    assert sanitize_identifier("  cat\n") == "cat"
    assert sanitize_identifier("d\x00o\x7fg") == "dog"


def test_sanitize_truncates_long_identifiers() -> None:
    stem = sanitize_identifier("a" * (MAX_STEM_LENGTH + 50))
    assert len(stem) == MAX_STEM_LENGTH


@pytest.mark.parametrize("identifier", ["", ".", "...", "   ", "\n\t", "\x00"])
def test_sanitize_never_returns_empty(identifier: str) -> None:
    assert sanitize_identifier(identifier) == "_"


@pytest.mark.parametrize(
    "identifier", ["cat", "../../etc/passwd", "a/b\\c", "Ça va?", "", "x" * 1000]
)
def test_filename_is_flat_and_has_audio_extension(identifier: str) -> None:
    filename = build_filename(identifier)
    assert filename.endswith(".mp3")
    assert len(filename) > len(".mp3")
    assert "/" not in filename
    assert build_filename(identifier) == filename


def test_candidate_paths_follow_prefix_order() -> None:
    assert build_candidate_paths("cat") == ["audio/jp/cat.mp3", "audio/ru/cat.mp3"]
    assert build_candidate_paths("cat", ["audio/ru/", "/audio/jp"]) == [
        "audio/ru/cat.mp3",
        "audio/jp/cat.mp3",
    ]


def test_candidate_paths_drop_duplicate_prefixes() -> None:
    assert build_candidate_paths("cat", ["audio", "audio/"]) == ["audio/cat.mp3"]


def test_candidate_paths_without_prefixes_use_bucket_root() -> None:
    assert build_candidate_paths("cat", []) == ["cat.mp3"]
    assert build_candidate_paths("cat", [""]) == ["cat.mp3"]
