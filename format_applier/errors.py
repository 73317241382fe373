"""
Error taxonomy — every failure raised by format_applier derives from
``FormatApplierError`` so callers can report it with one ``except``.
"""

from __future__ import annotations

import signal as _signal


class FormatApplierError(Exception):
    """Base class for all format_applier errors."""


class ProcessFailure(FormatApplierError):
    """An external tool exited non-zero or was killed by a signal."""

    def __init__(self, command: list[str], returncode: int, stderr: str = ""):
        self.command = list(command)
        self.returncode = returncode
        self.stderr = stderr
        tool = command[0] if command else "process"
        if self.signal is not None:
            status = f"killed by signal {self.signal_name}"
        else:
            status = f"exited with status {returncode}"
        message = f"{tool} {status}"
        if stderr.strip():
            message += f": {stderr.strip()}"
        super().__init__(message)

    @property
    def signal(self) -> int | None:
        """Signal number when the child was terminated by a signal."""
        return -self.returncode if self.returncode < 0 else None

    @property
    def signal_name(self) -> str:
        if self.signal is None:
            return ""
        try:
            return _signal.Signals(self.signal).name
        except ValueError:
            return str(self.signal)


class MalformedOutput(FormatApplierError):
    """A tool's structured output is missing required elements or attributes."""


class RangeOverlap(FormatApplierError):
    """Two edits cover overlapping byte ranges."""


class RangeOutOfBounds(FormatApplierError):
    """An edit or position lies outside the document."""


class EncodingAlignment(FormatApplierError):
    """A byte offset falls inside a multi-byte encoded character."""


class EnvironmentPrecondition(FormatApplierError):
    """The environment cannot support the operation (no file, no git, no tool)."""
