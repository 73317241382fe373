"""
Edit model — the replacements returned by one formatter invocation.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Edit:
    """Replace ``length`` bytes at ``offset`` with ``text``."""
    offset: int
    length: int
    text: str | None = None   # None → pure deletion

    @property
    def end(self) -> int:
        return self.offset + self.length

    def encoded_text(self, encoding: str) -> bytes:
        return (self.text or "").encode(encoding)


@dataclass
class EditBatch:
    """Ordered edits plus the formatter's cursor and incompleteness flag."""
    edits: list[Edit] = field(default_factory=list)
    cursor: int | None = None   # byte offset into the formatted result
    incomplete: bool = False

    def __len__(self) -> int:
        return len(self.edits)

    def ordered(self) -> list[Edit]:
        """Edits in application order: offset descending, then length descending."""
        return sorted(self.edits, key=lambda e: (e.offset, e.length), reverse=True)
