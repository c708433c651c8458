"""Run git as an async subprocess."""

import asyncio
import logging
import os
from dataclasses import dataclass
from pathlib import Path

from commands.git.errors import GitError

logger = logging.getLogger(__name__)

_GIT_ENV = {"GIT_TERMINAL_PROMPT": "0", "LC_ALL": "C"}


@dataclass(frozen=True)
class ExecResult:
    argv: tuple[str, ...]
    cwd: Path
    returncode: int
    stdout: str
    stderr: str

    @property
    def output(self) -> str:
        return f"{self.stdout}\n{self.stderr}"


class ExecError(GitError):
    """Raised when git exits non-zero in check mode."""

    def __init__(self, result: ExecResult) -> None:
        detail = (result.stderr or result.stdout).strip()
        super().__init__(
            f"git failed ({result.returncode}): {' '.join(result.argv[1:])}\n{detail}",
            stderr=result.stderr,
        )
        self.result = result


async def run_git(args: list[str], *, cwd: Path, check: bool = True) -> ExecResult:
    """Run `git <args>` in cwd and capture its output."""
    argv = ("git", *args)
    logger.debug("[%s] %s", cwd, " ".join(argv))
    proc = await asyncio.create_subprocess_exec(
        *argv,
        cwd=cwd,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
        env={**os.environ, **_GIT_ENV},
    )
    try:
        stdout, stderr = await proc.communicate()
    except asyncio.CancelledError:
        if proc.returncode is None:
            logger.debug("Killing cancelled git process %s", proc.pid)
            proc.kill()
            await proc.wait()
        raise
    result = ExecResult(
        argv=argv,
        cwd=cwd,
        returncode=proc.returncode if proc.returncode is not None else -1,
        stdout=stdout.decode("utf-8", errors="replace"),
        stderr=stderr.decode("utf-8", errors="replace"),
    )
    if check and result.returncode != 0:
        raise ExecError(result)
    return result
