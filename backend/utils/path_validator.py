"""Path sanitization for repository paths received from the frontend.

Every filesystem access in the backend goes through
``validate_and_canonicalize_path`` first.
"""

import unicodedata
from pathlib import Path

from utils.errors import (
    EmptyPath,
    InvalidCharacters,
    InvalidOrInaccessible,
    NotADirectory,
    PathNotFound,
    UnsafePattern,
)

UNSAFE_PATTERNS = ("..", "~")
ALLOWED_CONTROL_CHARS = {"\n", "\r", "\t"}


def _has_invalid_characters(path: str) -> bool:
    if "\0" in path:
        return True
    return any(
        unicodedata.category(ch) == "Cc" and ch not in ALLOWED_CONTROL_CHARS
        for ch in path
    )


def validate_and_canonicalize_path(path: str) -> Path:
    """
    Validate a raw path string and resolve it to a canonical directory.

    The string checks run before anything touches the filesystem, so a path
    rejected for its content is never resolved.

    Args:
        path: Raw path as typed or picked in the frontend.

    Returns:
        Path: Absolute, symlink-resolved path of an existing directory. This is
        a point-in-time guarantee only.

    Raises:
        EmptyPath, UnsafePattern, InvalidCharacters, InvalidOrInaccessible,
        PathNotFound, NotADirectory: in that order of precedence.
    """
    if not path:
        raise EmptyPath()

    if any(pattern in path for pattern in UNSAFE_PATTERNS):
        raise UnsafePattern()

    if _has_invalid_characters(path):
        raise InvalidCharacters()

    try:
        canonical_path = Path(path).resolve(strict=True)
    except (OSError, RuntimeError, ValueError):
        # RuntimeError: symlink loop on older interpreters
        # ValueError: lone surrogates cannot be encoded for the OS
        raise InvalidOrInaccessible() from None

    if not canonical_path.exists():
        raise PathNotFound()

    if not canonical_path.is_dir():
        raise NotADirectory()

    return canonical_path
