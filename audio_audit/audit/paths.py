"""Storage key construction for audio files referenced by content records."""

import re
from typing import Sequence

AUDIO_EXTENSION = ".mp3"
DEFAULT_AUDIO_PREFIXES = ("audio/jp", "audio/ru")
MAX_STEM_LENGTH = 200

_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")
_UNSAFE_CHARS = re.compile(r"[/\\:*?\"<>|#\[\]]")


def sanitize_identifier(identifier: str, max_length: int = MAX_STEM_LENGTH) -> str:
    """
    Turn a record identifier into the file stem used in storage.

    Strategy:
    - Keep the original case (audio files are uploaded under the word itself)
    - Drop dots, as the upload tooling did ("Mr. Smith" -> "Mr Smith")
    - Replace path separators and other path-unsafe characters with "_"
    - Strip control characters, which object stores reject
    - Trim surrounding whitespace and cap the length

    Args:
        identifier: Word or audio reference read from the database
        max_length: Maximum stem length (default 200)

    Returns:
        A non-empty file stem, "_" when nothing usable is left
    """
    if not identifier:
        return "_"

    stem = _CONTROL_CHARS.sub("", str(identifier))
    stem = stem.replace(".", "")
    stem = _UNSAFE_CHARS.sub("_", stem)
    stem = stem.strip()

    if len(stem) > max_length:
        stem = stem[:max_length].rstrip()

    return stem if stem else "_"


def build_filename(identifier: str) -> str:
    """Generate filename: {sanitized identifier}.mp3"""
    return f"{sanitize_identifier(identifier)}{AUDIO_EXTENSION}"


def build_candidate_paths(
    identifier: str, prefixes: Sequence[str] = DEFAULT_AUDIO_PREFIXES
) -> list[str]:
    """
    Build the ordered list of storage keys to probe for one identifier.

    The first prefix is the current layout; later ones are legacy layouts that
    are only probed when earlier candidates are absent.

    Args:
        identifier: Word or audio reference read from the database
        prefixes: Directory prefixes in probe order

    Returns:
        One key per distinct prefix, e.g. ["audio/jp/cat.mp3", "audio/ru/cat.mp3"]
    """
    filename = build_filename(identifier)
    paths = []
    for prefix in prefixes:
        prefix = prefix.strip("/")
        path = f"{prefix}/{filename}" if prefix else filename
        if path not in paths:
            paths.append(path)
    return paths or [filename]
