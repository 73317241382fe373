"""
Edit applier — applies a formatter's byte-offset edits to a Document.

Edits are applied bottom-up (offset descending, then length descending) so
that applying one edit never shifts the offset of an edit still waiting to be
applied. The whole batch is validated before the document is touched: either
every edit lands or none does.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..errors import EncodingAlignment, RangeOutOfBounds, RangeOverlap
from .document import Document
from .edits import Edit, EditBatch

logger = logging.getLogger(__name__)


@dataclass
class ApplyResult:
    """Result of applying an edit batch."""
    document: Document
    cursor: int | None = None   # character position in the edited document
    edits_applied: int = 0
    incomplete: bool = False


class EditApplier:
    """Apply an EditBatch to a Document in place."""

    def apply(
        self,
        document: Document,
        cursor_byte: int | None,
        batch: EditBatch,
    ) -> ApplyResult:
        """Apply every edit of *batch* to *document*.

        Parameters
        ----------
        document:
            The snapshot the formatter was run on. Mutated in place.
        cursor_byte:
            Cursor byte offset in the pre-edit document, or None.
        batch:
            The formatter's edits and optional relocated cursor.

        Returns
        -------
        ApplyResult
            The edited document and the new cursor character position.

        Raises
        ------
        RangeOutOfBounds, RangeOverlap, EncodingAlignment
            Raised before any edit is applied.
        """
        ordered = batch.ordered()
        spans = self._validate(document, ordered)
        new_text = document.splice(
            (start, end, edit.text or "")
            for edit, (start, end) in zip(ordered, spans)
        )
        # The formatter's cursor refers to the formatted text, so it is
        # resolved before the document itself changes.
        formatted = document.copy(new_text)
        if batch.cursor is not None:
            cursor = formatted.byte_to_char(batch.cursor, exact=True)
        elif cursor_byte is not None:
            for edit in ordered:
                cursor_byte = self._shift_cursor(cursor_byte, edit, document.encoding)
            cursor = formatted.byte_to_char(cursor_byte, exact=False)
        else:
            cursor = None
        document.set_text(new_text)

        if ordered:
            logger.debug(
                "[Format] Applied %d edit(s) to %s", len(ordered),
                document.name or "<buffer>",
            )
        return ApplyResult(
            document=document,
            cursor=cursor,
            edits_applied=len(ordered),
            incomplete=batch.incomplete,
        )

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    @staticmethod
    def _validate(document: Document, ordered: list[Edit]) -> list[tuple[int, int]]:
        """Check bounds, overlap and alignment; return char spans in order.

        Char spans are computed against the pre-edit document and handed to
        ``Document.splice`` bottom-up.
        """
        size = document.byte_size
        for edit in ordered:
            if edit.offset < 0 or edit.length < 0 or edit.end > size:
                raise RangeOutOfBounds(
                    f"edit [{edit.offset}, {edit.end}) outside document of "
                    f"{size} bytes"
                )

        # ordered is descending, so each edit must end at or before the
        # start of the edit applied just before it.
        for later, earlier in zip(ordered, ordered[1:]):
            if earlier.end > later.offset:
                raise RangeOverlap(
                    f"edit [{earlier.offset}, {earlier.end}) overlaps "
                    f"[{later.offset}, {later.end})"
                )

        spans = []
        for edit in ordered:
            try:
                start = document.byte_to_char(edit.offset, exact=True)
                end = document.byte_to_char(edit.end, exact=True)
            except EncodingAlignment:
                logger.warning(
                    "[Format] Edit [%d, %d) is not aligned to %s characters",
                    edit.offset, edit.end, document.encoding,
                )
                raise
            spans.append((start, end))
        return spans

    # ------------------------------------------------------------------
    # Cursor tracking
    # ------------------------------------------------------------------

    @staticmethod
    def _shift_cursor(cursor: int, edit: Edit, encoding: str) -> int:
        """Carry a pre-edit cursor byte offset across one applied edit."""
        if cursor < edit.offset:
            return cursor
        if cursor < edit.end:
            return edit.offset
        return cursor + len(edit.encoded_text(encoding)) - edit.length
