"""Running the jj binary as a child process.

Commands are always passed as an argument vector, never through a shell.
The child is killed if the awaiting task is cancelled or times out.
"""

import asyncio
import errno
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from utils.errors import (
    NotARepository,
    PermissionDenied,
    ToolExitFailure,
    ToolInvocationError,
    ToolNotFound,
    ToolTerminatedBySignal,
    ToolTimedOut,
)
from utils.jj_log_parser import JJ_LOG_TEMPLATE
from utils.settings import get_command_timeout, get_jj_binary

logger = logging.getLogger(__name__)

# Caps latency and memory on large repositories. Not user-configurable.
MAX_CHANGES_LIMIT = 100

STATUS_ARGS = ("status", "--no-pager")
LOG_ARGS = (
    "log",
    "--template",
    JJ_LOG_TEMPLATE,
    "--limit",
    str(MAX_CHANGES_LIMIT),
    "--no-pager",
)


@dataclass
class JJResult:
    """Exit status and decoded output of one jj invocation."""

    returncode: int
    stdout: str
    stderr: str

    @property
    def terminated_by_signal(self) -> bool:
        return self.returncode < 0


async def _terminate(process: asyncio.subprocess.Process) -> None:
    if process.returncode is not None:
        return
    try:
        process.kill()
    except ProcessLookupError:
        pass
    await process.wait()


async def run_jj(
    args: tuple[str, ...],
    cwd: Path,
    *,
    binary: Optional[str] = None,
    timeout: Optional[float] = None,
) -> JJResult:
    """
    Run jj with a fixed argument vector and capture its output.

    Args:
        args: Arguments after the binary name.
        cwd: Canonical repository path used as the working directory.
        binary: Executable to run. Defaults to ``JJ_BINARY`` / ``jj``.
        timeout: Seconds to wait. Defaults to ``JJ_COMMAND_TIMEOUT``.

    Returns:
        JJResult: Exit code plus stdout/stderr decoded as UTF-8.

    Raises:
        ToolNotFound: If the executable cannot be found.
        PermissionDenied: If the executable or cwd cannot be accessed.
        ToolTimedOut: If the command does not finish in time.
        ToolInvocationError: For any other OS-level failure to spawn.
    """
    binary = binary or get_jj_binary()
    timeout = timeout if timeout is not None else get_command_timeout()
    logger.debug("Running %s %s in %s", binary, args[0] if args else "", cwd)

    spawn = asyncio.ensure_future(
        asyncio.create_subprocess_exec(
            binary,
            *args,
            cwd=str(cwd),
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    )
    try:
        process = await asyncio.shield(spawn)
    except asyncio.CancelledError:
        # The shielded spawn still finishes; kill whatever child it produced
        try:
            await _terminate(await spawn)
        except OSError:
            pass  # spawn failed, nothing to reap
        raise
    except FileNotFoundError:
        raise ToolNotFound() from None
    except PermissionError:
        raise PermissionDenied() from None
    except OSError as exc:
        if exc.errno == errno.ETIMEDOUT:
            raise ToolTimedOut() from None
        raise ToolInvocationError(str(exc)) from exc

    try:
        stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        logger.warning("jj %s timed out after %ss in %s", args[0], timeout, cwd)
        raise ToolTimedOut() from None
    finally:
        # Runs on timeout and on cancellation of the awaiting task
        await _terminate(process)

    return JJResult(
        returncode=process.returncode,
        stdout=stdout.decode("utf-8", errors="replace"),
        stderr=stderr.decode("utf-8", errors="replace"),
    )


async def check_status(canonical_path: Path) -> bool:
    """
    Run `jj status --no-pager` and interpret its exit code.

    Returns:
        bool: True on exit code 0.

    Raises:
        NotARepository: On exit code 1.
        ToolTerminatedBySignal: If the process was killed by a signal.
        ToolExitFailure: On any other exit code.
    """
    result = await run_jj(STATUS_ARGS, canonical_path)

    if result.returncode == 0:
        return True
    if result.returncode == 1:
        raise NotARepository("Not a valid JJ repository")
    if result.terminated_by_signal:
        raise ToolTerminatedBySignal()
    raise ToolExitFailure(result.returncode, result.stderr)


async def fetch_log(canonical_path: Path) -> str:
    """
    Run `jj log` with JJ_LOG_TEMPLATE limited to MAX_CHANGES_LIMIT records.

    Returns:
        str: Raw stdout, ready for ``parse_jj_log``.

    Raises:
        ToolTerminatedBySignal: If the process was killed by a signal.
        ToolExitFailure: On a non-zero exit code.
    """
    result = await run_jj(LOG_ARGS, canonical_path)

    if result.returncode == 0:
        return result.stdout
    if result.terminated_by_signal:
        raise ToolTerminatedBySignal("JJ log command")
    raise ToolExitFailure(result.returncode, result.stderr, command="JJ log command")
