"""
Formatting operations — format a region, a whole buffer, or only the lines
that changed relative to a baseline snapshot or a git revision.

Each operation reads the document snapshot, asks clang-format for edits
against those exact bytes and applies them with EditApplier. Nothing is
applied if any step fails.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .clang_format import ClangFormat, FormatOptions, FormatRequest
from .diff_provider import DiffProvider
from .editing.applier import EditApplier
from .editing.document import Document
from .editing.restriction import (
    ByteRange, LineRange, LineRestriction, Restriction, diff_restriction,
)
from .errors import EnvironmentPrecondition
from .git_utils import DEFAULT_REVISION, GitRevisionLookup

logger = logging.getLogger(__name__)


@dataclass
class FormatOutcome:
    """Result of one formatting operation."""
    document: Document
    cursor: int | None = None   # character position
    incomplete: bool = False
    edits_applied: int = 0
    skipped: bool = False       # no changed lines: formatter not invoked

    @property
    def changed(self) -> bool:
        return self.edits_applied > 0


class FormatSession:
    """Wires the formatter, diff provider and revision lookup together."""

    def __init__(
        self,
        formatter: ClangFormat | None = None,
        diff_provider: DiffProvider | None = None,
        revisions: GitRevisionLookup | None = None,
        applier: EditApplier | None = None,
    ) -> None:
        self.formatter = formatter or ClangFormat()
        self.diff_provider = diff_provider or DiffProvider()
        self.revisions = revisions or GitRevisionLookup()
        self.applier = applier or EditApplier()

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def format_region(
        self,
        document: Document,
        start: int,
        end: int,
        options: FormatOptions,
        cursor: int | None = None,
    ) -> FormatOutcome:
        """Format the characters between *start* and *end*.

        Positions are translated to bytes approximately: anything outside
        the buffer is clamped. *cursor* is a character position.
        """
        if end < start:
            start, end = end, start
        start_byte = document.char_to_byte(start, approximate=True)
        end_byte = document.char_to_byte(end, approximate=True)
        restriction = ByteRange(start_byte, end_byte - start_byte)
        return self._run(document, restriction, options, cursor)

    def format_buffer(
        self,
        document: Document,
        options: FormatOptions,
        cursor: int | None = None,
    ) -> FormatOutcome:
        """Format the whole document."""
        return self.format_region(document, 0, len(document), options, cursor)

    def format_lines(
        self,
        document: Document,
        ranges: list[LineRange],
        options: FormatOptions,
        cursor: int | None = None,
    ) -> FormatOutcome:
        """Format the given 1-based inclusive line ranges."""
        if not ranges:
            return self.format_buffer(document, options, cursor)
        return self._run(document, LineRestriction(tuple(ranges)), options, cursor)

    def format_changes(
        self,
        document: Document,
        baseline: bytes,
        options: FormatOptions,
        cursor: int | None = None,
    ) -> FormatOutcome:
        """Format only the lines of *document* that differ from *baseline*.

        When nothing changed the formatter is not invoked and the document
        is returned untouched.
        """
        # Compare against the baseline in the document's canonical form
        baseline = document.canonicalize(
            baseline.decode(document.encoding, errors="replace")
        ).encode(document.encoding)
        ranges = self.diff_provider.changed_lines(baseline, document.encode())
        restriction = diff_restriction(ranges)
        if restriction is None:
            logger.info(
                "[Format] No changed lines in %s, nothing to format",
                document.name or "<buffer>",
            )
            return FormatOutcome(document=document, cursor=cursor, skipped=True)
        return self._run(document, restriction, options, cursor)

    def format_vc_diff(
        self,
        document: Document,
        path: str | None,
        options: FormatOptions,
        revision: str = DEFAULT_REVISION,
        cursor: int | None = None,
    ) -> FormatOutcome:
        """Format the lines changed since *revision* of the file at *path*."""
        if not path:
            raise EnvironmentPrecondition(
                "document has no file name; cannot look up its revision"
            )
        baseline = self.revisions.show(path, revision)
        return self.format_changes(document, baseline, options, cursor)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _run(
        self,
        document: Document,
        restriction: Restriction,
        options: FormatOptions,
        cursor: int | None,
    ) -> FormatOutcome:
        cursor_byte = (
            document.char_to_byte(cursor, approximate=True)
            if cursor is not None else None
        )
        request = FormatRequest(
            content=document.encode(),
            restriction=restriction,
            options=options,
            cursor=cursor_byte,
        )
        batch = self.formatter.format(request)
        result = self.applier.apply(document, cursor_byte, batch)

        if result.incomplete:
            logger.warning(
                "[Format] %s: incomplete (syntax errors)",
                document.name or "<buffer>",
            )
        return FormatOutcome(
            document=result.document,
            cursor=result.cursor,
            incomplete=result.incomplete,
            edits_applied=result.edits_applied,
        )
