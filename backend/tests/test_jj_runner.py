"""Tests for jj_runner module.

These tests run small shell scripts in place of the real jj binary, so they
exercise actual process spawning, exit codes, timeouts and cancellation.
"""

import asyncio
import os
import stat
import sys
import time
from pathlib import Path
from unittest.mock import patch

import pytest

from utils.errors import (
    NotARepository,
    PermissionDenied,
    ToolExitFailure,
    ToolNotFound,
    ToolTerminatedBySignal,
    ToolTimedOut,
)
from utils.jj_runner import (
    LOG_ARGS,
    MAX_CHANGES_LIMIT,
    STATUS_ARGS,
    check_status,
    fetch_log,
    run_jj,
)

pytestmark = pytest.mark.skipif(sys.platform == "win32", reason="uses POSIX shell scripts")


def write_fake_jj(directory: Path, body: str) -> Path:
    """Write an executable /bin/sh script standing in for jj."""
    script = directory / "fake-jj"
    script.write_text("#!/bin/sh\n" + body + "\n", encoding="utf-8")
    script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return script


@pytest.fixture
def repo_dir(tmp_path):
    repo = tmp_path / "repo"
    (repo / ".jj" / "repo" / "store").mkdir(parents=True)
    return repo.resolve()


@pytest.fixture
def use_fake_jj(tmp_path, monkeypatch):
    def install(body: str) -> Path:
        script = write_fake_jj(tmp_path, body)
        monkeypatch.setenv("JJ_BINARY", str(script))
        return script

    return install


def test_run_jj_captures_output_and_exit_code(tmp_path, repo_dir):
    script = write_fake_jj(tmp_path, 'echo "out $1"; echo "err" >&2; exit 3')

    result = asyncio.run(run_jj(("status",), repo_dir, binary=str(script), timeout=10))

    assert result.returncode == 3
    assert result.stdout == "out status\n"
    assert result.stderr == "err\n"
    assert not result.terminated_by_signal


def test_run_jj_uses_repo_as_cwd(tmp_path, repo_dir):
    script = write_fake_jj(tmp_path, "pwd -P")

    result = asyncio.run(run_jj(("status",), repo_dir, binary=str(script), timeout=10))

    assert Path(result.stdout.strip()) == repo_dir


def test_log_arguments_are_passed_as_a_vector(tmp_path, repo_dir):
    """Test that the template reaches jj as one argument, unsplit by any shell."""
    args_file = tmp_path / "args.txt"
    script = write_fake_jj(tmp_path, f'for a in "$@"; do printf "%s\\n" "$a"; done > "{args_file}"')

    asyncio.run(run_jj(LOG_ARGS, repo_dir, binary=str(script), timeout=10))

    assert args_file.read_text(encoding="utf-8").splitlines() == list(LOG_ARGS)
    assert LOG_ARGS[0] == "log"
    assert LOG_ARGS[LOG_ARGS.index("--limit") + 1] == str(MAX_CHANGES_LIMIT) == "100"
    assert LOG_ARGS[-1] == "--no-pager"
    assert STATUS_ARGS == ("status", "--no-pager")


def test_invalid_utf8_output_is_replaced(tmp_path, repo_dir):
    script = write_fake_jj(tmp_path, r"printf 'caf\351\n'")

    result = asyncio.run(run_jj(("status",), repo_dir, binary=str(script), timeout=10))

    assert result.stdout == "caf�\n"


def test_missing_binary(tmp_path, repo_dir):
    with pytest.raises(ToolNotFound, match="JJ command not found"):
        asyncio.run(run_jj(STATUS_ARGS, repo_dir, binary=str(tmp_path / "no-such-jj"), timeout=10))


def test_non_executable_binary(tmp_path, repo_dir):
    script = tmp_path / "not-executable"
    script.write_text("#!/bin/sh\nexit 0\n", encoding="utf-8")
    script.chmod(0o644)

    with pytest.raises(PermissionDenied, match="Permission denied"):
        asyncio.run(run_jj(STATUS_ARGS, repo_dir, binary=str(script), timeout=10))


def test_timeout_kills_process(tmp_path, repo_dir):
    pid_file = tmp_path / "pid"
    script = write_fake_jj(tmp_path, f'echo $$ > "{pid_file}"; exec sleep 30')

    started = time.monotonic()
    with pytest.raises(ToolTimedOut, match="JJ command timed out"):
        asyncio.run(run_jj(STATUS_ARGS, repo_dir, binary=str(script), timeout=1.0))

    assert time.monotonic() - started < 10
    pid = int(pid_file.read_text(encoding="utf-8").strip())
    with pytest.raises(ProcessLookupError):
        os.kill(pid, 0)


def test_cancellation_kills_process(tmp_path, repo_dir):
    """Test that abandoning the awaiting task leaves no orphaned process."""
    pid_file = tmp_path / "pid"
    script = write_fake_jj(tmp_path, f'echo $$ > "{pid_file}"; exec sleep 30')

    async def cancel_midway():
        task = asyncio.create_task(run_jj(STATUS_ARGS, repo_dir, binary=str(script), timeout=60))
        for _ in range(100):
            if pid_file.exists() and pid_file.read_text(encoding="utf-8").strip():
                break
            await asyncio.sleep(0.05)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    asyncio.run(cancel_midway())

    pid = int(pid_file.read_text(encoding="utf-8").strip())
    with pytest.raises(ProcessLookupError):
        os.kill(pid, 0)


def test_cancellation_during_spawn_reaps_process(tmp_path, repo_dir):
    """Test that a cancel arriving before the spawn completes still kills the child."""
    script = write_fake_jj(tmp_path, "exec sleep 30")
    real_exec = asyncio.create_subprocess_exec
    spawned = []

    async def slow_exec(*args, **kwargs):
        await asyncio.sleep(0.3)
        process = await real_exec(*args, **kwargs)
        spawned.append(process)
        return process

    async def cancel_during_spawn():
        task = asyncio.create_task(run_jj(STATUS_ARGS, repo_dir, binary=str(script), timeout=60))
        await asyncio.sleep(0.05)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    with patch("utils.jj_runner.asyncio.create_subprocess_exec", new=slow_exec):
        asyncio.run(cancel_during_spawn())

    assert len(spawned) == 1
    assert spawned[0].returncode is not None


def test_status_success(use_fake_jj, repo_dir):
    use_fake_jj('[ "$1" = status ] && [ "$2" = --no-pager ] && exit 0; exit 9')

    assert asyncio.run(check_status(repo_dir)) is True


def test_status_exit_one_is_not_a_repository(use_fake_jj, repo_dir):
    use_fake_jj("exit 1")

    with pytest.raises(NotARepository, match="Not a valid JJ repository"):
        asyncio.run(check_status(repo_dir))


def test_status_other_exit_code(use_fake_jj, repo_dir):
    use_fake_jj('echo "  store is corrupt  " >&2; exit 2')

    with pytest.raises(ToolExitFailure) as exc_info:
        asyncio.run(check_status(repo_dir))

    assert exc_info.value.code == 2
    assert "store is corrupt" in exc_info.value.stderr
    assert str(exc_info.value) == "JJ command failed with exit code 2: store is corrupt"


def test_status_killed_by_signal(use_fake_jj, repo_dir):
    use_fake_jj("kill -9 $$")

    with pytest.raises(ToolTerminatedBySignal, match="JJ command was terminated"):
        asyncio.run(check_status(repo_dir))


def test_fetch_log_returns_stdout(use_fake_jj, repo_dir):
    use_fake_jj(r"printf 'a1\nc1\nfix bug\nAlice\n2024-01-01\n---\n'")

    assert asyncio.run(fetch_log(repo_dir)) == "a1\nc1\nfix bug\nAlice\n2024-01-01\n---\n"


def test_fetch_log_failure(use_fake_jj, repo_dir):
    use_fake_jj('echo "bad revset" >&2; exit 1')

    with pytest.raises(ToolExitFailure, match="JJ log command failed with exit code 1: bad revset"):
        asyncio.run(fetch_log(repo_dir))


def test_fetch_log_killed_by_signal(use_fake_jj, repo_dir):
    use_fake_jj("kill -9 $$")

    with pytest.raises(ToolTerminatedBySignal, match="JJ log command was terminated"):
        asyncio.run(fetch_log(repo_dir))


def test_timeout_from_environment(use_fake_jj, repo_dir, monkeypatch):
    use_fake_jj("exec sleep 30")
    monkeypatch.setenv("JJ_COMMAND_TIMEOUT", "0.3")

    with pytest.raises(ToolTimedOut):
        asyncio.run(check_status(repo_dir))
