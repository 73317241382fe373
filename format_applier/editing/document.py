"""
Document — an in-memory text buffer addressable both by character position
and by byte offset into a single canonical encoding.

Uniform ``\\r\\n`` or ``\\r`` line endings are normalized to ``\\n`` on
construction and the detected style is restored by ``export_text``. A
document with mixed line endings is kept verbatim. Either way the bytes
handed to external tools and the offsets they return refer to the same text.
"""

from __future__ import annotations

import bisect
import codecs
import logging
from typing import Iterable

from ..errors import EncodingAlignment, EnvironmentPrecondition, RangeOutOfBounds

logger = logging.getLogger(__name__)

DEFAULT_ENCODING = "utf-8"

# Document.newline for text whose line endings are mixed
MIXED_NEWLINES = ""


def normalize_newlines(text: str) -> str:
    """Convert ``\\r\\n`` and lone ``\\r`` line endings to ``\\n``."""
    return text.replace("\r\n", "\n").replace("\r", "\n")


def detect_newline(text: str) -> str:
    """Return the line ending used throughout *text*.

    ``\\n`` when there are no line endings, ``MIXED_NEWLINES`` when more
    than one style occurs.
    """
    crlf = text.count("\r\n")
    styles = [
        style for style, count in (
            ("\r\n", crlf),
            ("\r", text.count("\r") - crlf),
            ("\n", text.count("\n") - crlf),
        ) if count
    ]
    if not styles:
        return "\n"
    if len(styles) > 1:
        return MIXED_NEWLINES
    return styles[0]


def check_encoding(encoding: str) -> None:
    """Reject codecs whose per-character bytes don't add up to the whole.

    Byte offsets are summed character by character, so codecs that emit a
    byte-order mark (``utf-16``, ``utf-32``, ``utf-8-sig``) cannot be used.
    """
    try:
        codecs.lookup(encoding)
        consistent = "aa".encode(encoding) == "a".encode(encoding) * 2
    except (LookupError, UnicodeError) as exc:
        raise EnvironmentPrecondition(
            f"unusable text encoding {encoding!r}: {exc}"
        ) from exc
    if not consistent:
        raise EnvironmentPrecondition(
            f"encoding {encoding!r} emits a byte-order mark or shift state; "
            f"use a fixed-endian variant such as utf-16-le or utf-8"
        )


class Document:
    """Mutable text buffer with char <-> byte offset translation."""

    def __init__(self, text: str = "", encoding: str = DEFAULT_ENCODING,
                 name: str | None = None, newline: str | None = None) -> None:
        check_encoding(encoding)
        self.encoding = encoding
        self.name = name
        if newline is None:
            # Detect and normalize; an explicit newline means text is canonical
            newline = detect_newline(text)
            if newline != MIXED_NEWLINES:
                text = normalize_newlines(text)
        self.newline = newline
        self._text = text
        self._starts: list[int] | None = None

    @classmethod
    def from_file(cls, path: str, encoding: str = DEFAULT_ENCODING) -> "Document":
        with open(path, "r", encoding=encoding, newline="") as f:
            return cls(f.read(), encoding=encoding, name=path)

    # ------------------------------------------------------------------
    # Content
    # ------------------------------------------------------------------

    @property
    def text(self) -> str:
        return self._text

    def __len__(self) -> int:
        return len(self._text)

    def __repr__(self) -> str:
        return f"Document(name={self.name!r}, chars={len(self._text)})"

    def encode(self) -> bytes:
        """Return the canonical byte encoding of the content."""
        return self._text.encode(self.encoding)

    def export_text(self) -> str:
        """The content with the source file's line endings restored."""
        if self.newline in (MIXED_NEWLINES, "\n"):
            return self._text
        return self._text.replace("\n", self.newline)

    def canonicalize(self, text: str) -> str:
        """Bring foreign text (e.g. a baseline snapshot) into this document's form."""
        if self.newline == MIXED_NEWLINES:
            return text
        return normalize_newlines(text)

    @property
    def byte_size(self) -> int:
        return self._char_starts()[-1]

    def copy(self, text: str | None = None) -> "Document":
        """A document with the same settings, holding *text* if given."""
        return Document(
            self._text if text is None else text,
            encoding=self.encoding, name=self.name, newline=self.newline,
        )

    def set_text(self, text: str) -> None:
        """Replace the whole content with canonical *text*."""
        self._text = text
        self._starts = None

    def splice(self, replacements: Iterable[tuple[int, int, str]]) -> str:
        """Return the text with ``(start, end, text)`` char replacements made.

        *replacements* must be ordered by descending position and must not
        overlap. The result is joined once; the document is not modified.
        """
        pieces = []
        tail = len(self._text)
        for start, end, text in replacements:
            if not 0 <= start <= end <= tail:
                raise RangeOutOfBounds(
                    f"char range [{start}, {end}) outside document or out of order"
                )
            pieces.append(self._text[end:tail])
            pieces.append(text)
            tail = start
        pieces.append(self._text[:tail])
        return "".join(reversed(pieces))

    # ------------------------------------------------------------------
    # Position translation
    # ------------------------------------------------------------------

    def _char_starts(self) -> list[int]:
        """Byte offset of every char start, plus the total byte size."""
        if self._starts is None:
            starts = [0]
            total = 0
            for ch in self._text:
                total += len(ch.encode(self.encoding))
                starts.append(total)
            if total != len(self.encode()):
                raise EnvironmentPrecondition(
                    f"encoding {self.encoding!r} is stateful; byte offsets "
                    f"cannot be computed per character"
                )
            self._starts = starts
        return self._starts

    def char_to_byte(self, pos: int, approximate: bool = True) -> int:
        """Translate a character position to a byte offset.

        In approximate mode positions outside the buffer are clamped to its
        ends. In exact mode they raise ``RangeOutOfBounds``.
        """
        starts = self._char_starts()
        if pos < 0 or pos >= len(starts):
            if not approximate:
                raise RangeOutOfBounds(
                    f"char position {pos} outside document of "
                    f"{len(self._text)} chars"
                )
            pos = min(max(pos, 0), len(starts) - 1)
        return starts[pos]

    def byte_to_char(self, offset: int, exact: bool = True) -> int:
        """Translate a byte offset to a character position.

        Exact mode raises ``EncodingAlignment`` when *offset* bisects an
        encoded character and ``RangeOutOfBounds`` when it lies outside the
        document. Approximate mode clamps, then rounds down to the start of
        the enclosing character.
        """
        starts = self._char_starts()
        if offset < 0 or offset > starts[-1]:
            if exact:
                raise RangeOutOfBounds(
                    f"byte offset {offset} outside document of "
                    f"{starts[-1]} bytes"
                )
            offset = min(max(offset, 0), starts[-1])
        index = bisect.bisect_left(starts, offset)
        if starts[index] == offset:
            return index
        if exact:
            raise EncodingAlignment(
                f"byte offset {offset} falls inside a multi-byte "
                f"{self.encoding} character at position {index - 1}"
            )
        return index - 1
