"""Filesystem-only checks that a directory looks like a JJ repository."""

from pathlib import Path

from utils.errors import MalformedRepositoryStructure, NotARepository

JJ_METADATA_DIR = ".jj"
JJ_STORE_SUBPATH = ("repo", "store")


def probe_repository(canonical_path: Path) -> Path:
    """
    Check for ``.jj`` and ``.jj/repo/store`` under a canonical path.

    Passing this check does not mean ``jj`` will accept the repository; it
    only rejects the obvious non-repositories before a process is spawned.

    Args:
        canonical_path: Output of ``validate_and_canonicalize_path``.

    Returns:
        Path: The ``.jj`` metadata directory.

    Raises:
        NotARepository: If ``.jj`` is missing or not a directory.
        MalformedRepositoryStructure: If ``.jj/repo/store`` is missing.
    """
    jj_dir = canonical_path / JJ_METADATA_DIR
    if not jj_dir.is_dir():
        raise NotARepository()

    store_dir = jj_dir.joinpath(*JJ_STORE_SUBPATH)
    if not store_dir.exists():
        raise MalformedRepositoryStructure()

    return jj_dir
