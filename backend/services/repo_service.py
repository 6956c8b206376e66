"""Repository operations exposed to the frontend.

Each call validates the path, probes the directory layout and only then runs
jj. Nothing is shared between calls, so concurrent requests are independent.
"""

import logging

from models.change import JJChange
from utils.jj_log_parser import parse_jj_log
from utils.jj_runner import check_status, fetch_log
from utils.path_validator import validate_and_canonicalize_path
from utils.repo_probe import probe_repository

logger = logging.getLogger(__name__)


async def validate_jj_repo(path: str) -> bool:
    """
    Check that a path is a JJ repository jj itself accepts.

    Args:
        path: Raw path from the frontend.

    Returns:
        bool: True if `jj status` succeeds in the repository.

    Raises:
        JJViewerError: Any classified validation, structure or tool failure.
    """
    canonical_path = validate_and_canonicalize_path(path)
    probe_repository(canonical_path)
    return await check_status(canonical_path)


async def get_jj_changes(path: str) -> list[JJChange]:
    """
    Load the most recent changes of a JJ repository, newest first.

    Args:
        path: Raw path from the frontend.

    Returns:
        list[JJChange]: Up to MAX_CHANGES_LIMIT records in jj's order.

    Raises:
        JJViewerError: Any classified validation, structure, tool or parse failure.
    """
    canonical_path = validate_and_canonicalize_path(path)
    probe_repository(canonical_path)
    log_output = await fetch_log(canonical_path)
    changes = parse_jj_log(log_output)
    logger.debug("Loaded %d changes from %s", len(changes), canonical_path)
    return changes


def greet(name: str) -> str:
    return f"Hello, {name}! You've been greeted from Python!"
