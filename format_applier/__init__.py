"""Apply clang-format replacements to in-memory documents."""

from .clang_format import ClangFormat, FormatOptions, FormatRequest, parse_replacements
from .diff_provider import DiffProvider
from .editing import Document, Edit, EditApplier, EditBatch
from .formatting import FormatOutcome, FormatSession
from .git_utils import GitRevisionLookup

__all__ = [
    "ClangFormat", "FormatOptions", "FormatRequest", "parse_replacements",
    "DiffProvider",
    "Document", "Edit", "EditApplier", "EditBatch",
    "FormatOutcome", "FormatSession",
    "GitRevisionLookup",
]
