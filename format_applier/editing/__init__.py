"""Byte-offset edit application on in-memory documents."""

from .document import Document, check_encoding, detect_newline, normalize_newlines
from .edits import Edit, EditBatch
from .applier import EditApplier, ApplyResult
from .restriction import (
    ByteRange, LineRange, LineRestriction, Restriction, diff_restriction,
)

__all__ = [
    "Document", "check_encoding", "detect_newline", "normalize_newlines",
    "Edit", "EditBatch",
    "EditApplier", "ApplyResult",
    "ByteRange", "LineRange", "LineRestriction", "Restriction",
    "diff_restriction",
]
