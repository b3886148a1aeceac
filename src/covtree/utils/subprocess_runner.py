"""Async runner for Go toolchain commands such as ``go tool cover -func``."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import shlex
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = logging.getLogger(__name__)


@dataclass
class SubprocessResult:
    """Captured outcome of a toolchain command."""

    returncode: int
    """Exit code, or -1 when the command never ran to completion."""

    stdout: str
    stderr: str

    timed_out: bool = False
    """True if the command was killed after exceeding its timeout."""


class SubprocessError(Exception):
    """A toolchain command could not be started, failed, or timed out."""

    def __init__(self, message: str, result: SubprocessResult) -> None:
        super().__init__(message)
        self.result = result


async def run_subprocess(command: Sequence[str], *, timeout: float = 60.0) -> SubprocessResult:
    """Run *command* in the current directory and return its decoded output.

    Raises:
        ValueError: If command is empty or timeout is not positive.
        SubprocessError: If the command cannot be started, exits non-zero,
            or runs longer than *timeout* seconds.
    """
    if not command:
        raise ValueError("Command cannot be empty")
    if timeout <= 0:
        raise ValueError(f"Timeout must be positive, got {timeout}")

    program = command[0]
    logger.debug("Running %s (timeout=%ss)", shlex.join(command), timeout)

    try:
        process = await asyncio.create_subprocess_exec(
            *command,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as exc:
        result = SubprocessResult(returncode=-1, stdout="", stderr=str(exc))
        raise SubprocessError(f"couldn't start {program}: {exc}", result) from exc

    try:
        stdout_bytes, stderr_bytes = await asyncio.wait_for(process.communicate(), timeout)
    except TimeoutError:
        with contextlib.suppress(ProcessLookupError):
            process.kill()
        await process.wait()
        logger.warning("%s killed after %s seconds", program, timeout)
        result = SubprocessResult(
            returncode=-1,
            stdout="",
            stderr=f"killed after {timeout} seconds",
            timed_out=True,
        )
        raise SubprocessError(f"{program} timed out", result) from None

    result = SubprocessResult(
        returncode=process.returncode if process.returncode is not None else -1,
        stdout=stdout_bytes.decode("utf-8", errors="replace"),
        stderr=stderr_bytes.decode("utf-8", errors="replace"),
    )
    logger.debug("%s exited with code %d", program, result.returncode)

    if result.returncode != 0:
        raise SubprocessError(f"{program} exited with code {result.returncode}", result)
    return result
