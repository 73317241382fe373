"""
External process helpers — blocking invocation with captured output and
scoped temporary files that are removed on every exit path.
"""

from __future__ import annotations

import contextlib
import logging
import os
import subprocess
import sys
import tempfile
from dataclasses import dataclass
from typing import Callable, Iterable, Iterator

from .errors import EnvironmentPrecondition, ProcessFailure

logger = logging.getLogger(__name__)


@dataclass
class ProcessResult:
    """Captured outcome of one external process run."""
    command: list[str]
    returncode: int
    stdout: bytes = b""
    stderr: bytes = b""

    @property
    def stderr_text(self) -> str:
        return self.stderr.decode("utf-8", errors="replace")

    def check(self, ok_codes: Iterable[int] = (0,)) -> "ProcessResult":
        """Raise ProcessFailure unless the exit status is in *ok_codes*."""
        if self.returncode not in tuple(ok_codes):
            raise ProcessFailure(self.command, self.returncode, self.stderr_text)
        return self


Runner = Callable[..., ProcessResult]


def _startupinfo():
    """Hide the console window Windows opens for child processes."""
    if not sys.platform.startswith("win32"):
        return None
    info = subprocess.STARTUPINFO()
    info.dwFlags |= subprocess.STARTF_USESHOWWINDOW
    info.wShowWindow = subprocess.SW_HIDE
    return info


def run_process(
    command: list[str],
    input_bytes: bytes | None = None,
    cwd: str | None = None,
) -> ProcessResult:
    """Run *command* to completion and capture its output.

    No timeout is applied. A missing executable raises
    ``EnvironmentPrecondition``; the exit status is returned unchecked.
    """
    logger.debug("[Process] Running: %s", " ".join(command))
    try:
        completed = subprocess.run(
            command,
            input=input_bytes,
            capture_output=True,
            cwd=cwd,
            check=False,
            startupinfo=_startupinfo(),
        )
    except FileNotFoundError as exc:
        raise EnvironmentPrecondition(
            f"executable not found: {command[0]}"
        ) from exc

    result = ProcessResult(
        command=list(command),
        returncode=completed.returncode,
        stdout=completed.stdout or b"",
        stderr=completed.stderr or b"",
    )
    if result.returncode != 0:
        logger.debug(
            "[Process] %s exited with %d: %s",
            command[0], result.returncode, result.stderr_text.strip(),
        )
    return result


@contextlib.contextmanager
def temporary_file(content: bytes, suffix: str = "",
                   prefix: str = ".format_applier_") -> Iterator[str]:
    """Write *content* to a temp file and yield its path.

    The file is removed when the block exits, whether normally or through
    an exception.
    """
    fd, tmp_path = tempfile.mkstemp(suffix=suffix, prefix=prefix)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(content)
        yield tmp_path
    finally:
        try:
            os.unlink(tmp_path)
        except OSError as exc:
            logger.warning("[Process] Failed to remove %s: %s", tmp_path, exc)
