"""
Restrictions — the part of a document a formatter invocation may touch.

Either a single byte range or a list of 1-based inclusive line ranges.
Line ranges coming from a diff are passed through verbatim.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from ..errors import MalformedOutput

_LINE_RANGE_RE = re.compile(r"^(\d+):(\d+)$")


@dataclass(frozen=True)
class ByteRange:
    """``length`` bytes starting at ``offset``."""
    offset: int
    length: int

    def to_arguments(self) -> list[str]:
        return [f"--offset={self.offset}", f"--length={self.length}"]


@dataclass(frozen=True)
class LineRange:
    """1-based inclusive line range."""
    start: int
    end: int

    def __str__(self) -> str:
        return f"{self.start}:{self.end}"

    @classmethod
    def parse(cls, token: str) -> "LineRange":
        """Parse a ``start:end`` token."""
        m = _LINE_RANGE_RE.match(token.strip())
        if not m:
            raise MalformedOutput(f"invalid line range token: {token!r}")
        start, end = int(m.group(1)), int(m.group(2))
        if start < 1 or end < start:
            raise MalformedOutput(f"invalid line range: {token!r}")
        return cls(start, end)


@dataclass(frozen=True)
class LineRestriction:
    """A set of line ranges passed to the formatter as ``--lines`` flags."""
    ranges: tuple[LineRange, ...] = field(default_factory=tuple)

    def to_arguments(self) -> list[str]:
        return [f"--lines={r}" for r in self.ranges]


Restriction = ByteRange | LineRestriction


def diff_restriction(ranges: list[LineRange]) -> LineRestriction | None:
    """Adapt DiffProvider output into a formatter restriction.

    Returns None when there are no changed lines, meaning the operation
    is a no-op and the formatter must not be invoked.
    """
    if not ranges:
        return None
    return LineRestriction(tuple(ranges))
