"""Async subprocess runner for the command-line signal tools.

skopeo, trivy and cosign are invoked through :func:`run_tool`, which
enforces a timeout, kills the child on timeout or cancellation, and
returns ``None`` whenever the tool cannot produce a result. Callers
decide what a non-zero exit status means.
"""

from __future__ import annotations

import asyncio
import logging
import shutil
from dataclasses import dataclass

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT: float = 120.0


@dataclass(frozen=True)
class ToolOutput:
    """Captured result of a finished tool invocation."""

    returncode: int
    stdout: str
    stderr: str


def tool_available(name: str) -> bool:
    """Return True if ``name`` resolves to an executable on PATH."""
    return shutil.which(name) is not None


async def run_tool(
    argv: list[str],
    *,
    timeout: float = DEFAULT_TIMEOUT,
) -> ToolOutput | None:
    """Run a command and capture its output.

    Args:
        argv: Command and arguments. ``argv[0]`` is looked up on PATH.
        timeout: Seconds to wait before killing the process.

    Returns:
        ToolOutput for a process that exited on its own, or None if the
        tool is not installed, could not be started, or timed out.
    """
    executable = shutil.which(argv[0])
    if executable is None:
        logger.info("%s not available on PATH", argv[0])
        return None

    try:
        proc = await asyncio.create_subprocess_exec(
            executable,
            *argv[1:],
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as exc:
        logger.warning("Could not start %s: %s", argv[0], exc)
        return None

    try:
        stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        logger.warning("%s timed out after %.0fs", argv[0], timeout)
        await _kill(proc)
        return None
    except asyncio.CancelledError:
        await _kill(proc)
        raise

    return ToolOutput(
        returncode=proc.returncode if proc.returncode is not None else -1,
        stdout=stdout.decode("utf-8", errors="replace"),
        stderr=stderr.decode("utf-8", errors="replace"),
    )


async def _kill(proc: asyncio.subprocess.Process) -> None:
    """Kill a child process and reap it."""
    if proc.returncode is None:
        try:
            proc.kill()
        except ProcessLookupError:
            return
        await proc.wait()
