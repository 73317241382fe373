"""
CLI entry point — argument parsing and main execution flow.
"""

import argparse
import json
import logging
import os
import shutil
import sys

from tqdm import tqdm

from .clang_format import ClangFormat
from .config import Config
from .diff_provider import DiffProvider
from .editing.document import Document, check_encoding
from .editing.restriction import LineRange
from .errors import EnvironmentPrecondition, FormatApplierError
from .formatting import FormatOutcome, FormatSession
from .git_utils import GitRevisionLookup
from .log import setup_logger

logger = logging.getLogger(__name__)

# --vc-diff given without a revision
_CONFIGURED_REVISION = ""


def _parse_line_range(value: str) -> LineRange:
    try:
        return LineRange.parse(value)
    except FormatApplierError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="format-applier",
        description="Run clang-format and apply its replacements in place",
    )
    parser.add_argument("files", nargs="+", help="Source files to format")
    parser.add_argument("--style", default=None,
                        help="clang-format style (default: from config)")
    parser.add_argument("--fallback-style", default=None,
                        help="Style used when no .clang-format file is found")
    parser.add_argument("--assume-filename", default=None,
                        help="File name used for style discovery "
                             "(default: the file being formatted)")

    scope = parser.add_mutually_exclusive_group()
    scope.add_argument("--lines", action="append", type=_parse_line_range,
                       metavar="START:END",
                       help="Format only these 1-based lines (repeatable)")
    scope.add_argument("--offset", type=int, default=None,
                       help="Character offset where formatting starts")
    scope.add_argument("--vc-diff", nargs="?", const=_CONFIGURED_REVISION,
                       default=None, metavar="REV",
                       help="Format only lines changed since REV "
                            "(default: from config, usually HEAD)")
    scope.add_argument("--diff-against", default=None, metavar="PATH",
                       help="Format only lines that differ from PATH")
    parser.add_argument("--length", type=int, default=None,
                        help="Number of characters to format (with --offset)")

    parser.add_argument("--cursor", type=int, default=None,
                        help="Cursor character position (counting each line "
                             "ending as one character); the relocated cursor "
                             "is reported as a JSON header line")
    parser.add_argument("-i", "--in-place", action="store_true",
                        help="Write the result back to each file")
    parser.add_argument("--config", default=None,
                        help="Path to .format_applier.yaml config file")
    parser.add_argument("--verbose", action="store_true",
                        help="Log debug output to stderr")
    parser.add_argument("--no-log-file", action="store_true",
                        help="Do not write a log file")
    return parser


def _write_atomic(path: str, text: str, encoding: str) -> None:
    """Write *text* to *path* via temp file + rename."""
    abs_path = os.path.abspath(path)
    tmp_path = abs_path + ".format_applier_tmp"
    try:
        with open(tmp_path, "w", encoding=encoding, newline="") as f:
            f.write(text)
        shutil.copymode(abs_path, tmp_path)
        os.replace(tmp_path, abs_path)
    except OSError:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise


def format_file(
    path: str,
    args: argparse.Namespace,
    cfg: Config,
    session: FormatSession,
) -> FormatOutcome:
    """Run the operation selected on the command line against one file."""
    document = Document.from_file(path, encoding=cfg.ENCODING)
    options = cfg.format_options(
        assume_filename=args.assume_filename or path,
        style=args.style,
        fallback_style=args.fallback_style,
    )

    if args.lines:
        return session.format_lines(document, args.lines, options, args.cursor)
    if args.vc_diff is not None:
        revision = args.vc_diff or cfg.REVISION
        return session.format_vc_diff(document, path, options,
                                      revision=revision, cursor=args.cursor)
    if args.diff_against:
        with open(args.diff_against, "rb") as f:
            baseline = f.read()
        return session.format_changes(document, baseline, options, args.cursor)
    if args.offset is not None:
        end = len(document) if args.length is None else args.offset + args.length
        return session.format_region(document, args.offset, end, options,
                                     args.cursor)
    return session.format_buffer(document, options, args.cursor)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.length is not None and args.offset is None:
        parser.error("--length requires --offset")
    if args.cursor is not None and args.in_place:
        parser.error("--cursor cannot be combined with --in-place")

    # ── 0. Load config ──
    cfg = Config.load(args.config)
    try:
        check_encoding(cfg.ENCODING)
    except EnvironmentPrecondition as exc:
        parser.error(str(exc))
    setup_logger(None if args.no_log_file else cfg.LOG_DIR, verbose=args.verbose)

    session = FormatSession(
        formatter=ClangFormat(cfg.CLANG_FORMAT_BINARY),
        diff_provider=DiffProvider(cfg.DIFF_BINARY),
        revisions=GitRevisionLookup(cfg.GIT_BINARY),
    )

    files = args.files
    show_progress = args.in_place and len(files) > 1
    failures = 0
    for path in tqdm(files, unit="file", desc="Formatting",
                     disable=not show_progress):
        try:
            outcome = format_file(path, args, cfg, session)
            if args.in_place and outcome.changed:
                _write_atomic(path, outcome.document.export_text(), cfg.ENCODING)
        except (FormatApplierError, OSError, UnicodeDecodeError) as exc:
            failures += 1
            logger.error("[Format] %s: %s", path, exc)
            print(f"error: {path}: {exc}", file=sys.stderr)
            continue

        logger.info(
            "[Format] %s: %d edit(s)%s", path, outcome.edits_applied,
            " (skipped, no changes)" if outcome.skipped else "",
        )
        if args.in_place:
            continue

        if args.cursor is not None:
            header = {"Cursor": outcome.cursor,
                      "IncompleteFormat": outcome.incomplete}
            sys.stdout.write(json.dumps(header) + "\n")
        sys.stdout.write(outcome.document.export_text())

    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
