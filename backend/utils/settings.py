"""Environment-driven settings for the backend."""

import logging
import math
import os

logger = logging.getLogger(__name__)

DEFAULT_JJ_BINARY = "jj"
DEFAULT_COMMAND_TIMEOUT = 30.0
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8000


def get_jj_binary() -> str:
    """Get the jj executable from ``JJ_BINARY``, defaulting to ``jj`` on PATH."""
    raw = os.getenv("JJ_BINARY", "").strip()
    return raw or DEFAULT_JJ_BINARY


def get_command_timeout() -> float:
    """Get the per-command timeout in seconds from ``JJ_COMMAND_TIMEOUT``.

    Returns:
        A positive, finite float. Falls back to 30 seconds if unset or invalid.
    """
    raw = os.getenv("JJ_COMMAND_TIMEOUT", "").strip()
    if raw == "":
        return DEFAULT_COMMAND_TIMEOUT
    try:
        value = float(raw)
    except ValueError:
        value = -1.0
    if not math.isfinite(value) or value <= 0:
        logger.warning(
            "Invalid JJ_COMMAND_TIMEOUT value '%s'. Falling back to %s.",
            raw,
            DEFAULT_COMMAND_TIMEOUT,
        )
        return DEFAULT_COMMAND_TIMEOUT
    return value


def get_log_level() -> int:
    """Get the root log level from ``JJ_VIEWER_LOG_LEVEL``."""
    raw = os.getenv("JJ_VIEWER_LOG_LEVEL", DEFAULT_LOG_LEVEL).strip().upper()
    level = logging.getLevelName(raw)
    if isinstance(level, int):
        return level
    logger.warning(
        "Invalid JJ_VIEWER_LOG_LEVEL value '%s'. Falling back to '%s'.",
        raw,
        DEFAULT_LOG_LEVEL,
    )
    return logging.INFO


def get_host() -> str:
    """Get the interface to serve on from ``JJ_VIEWER_HOST``."""
    raw = os.getenv("JJ_VIEWER_HOST", "").strip()
    return raw or DEFAULT_HOST


def get_port() -> int:
    """Get the TCP port to serve on from ``JJ_VIEWER_PORT``.

    Returns:
        An int in 1-65535. Falls back to 8000 if unset or invalid.
    """
    raw = os.getenv("JJ_VIEWER_PORT", "").strip()
    if raw == "":
        return DEFAULT_PORT
    try:
        value = int(raw)
    except ValueError:
        value = 0
    if not 0 < value < 65536:
        logger.warning(
            "Invalid JJ_VIEWER_PORT value '%s'. Falling back to %s.",
            raw,
            DEFAULT_PORT,
        )
        return DEFAULT_PORT
    return value
