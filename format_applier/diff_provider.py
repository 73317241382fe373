"""
Diff provider — asks GNU diff which lines of the current snapshot differ
from a baseline snapshot.

diff is told to print nothing for unchanged groups and ``start:end`` (line
numbers in the new file) for every changed group that has new lines, so
pure deletions produce no token.
"""

from __future__ import annotations

import logging

from .editing.restriction import LineRange
from .process import Runner, run_process, temporary_file

logger = logging.getLogger(__name__)

DEFAULT_BINARY = "diff"

# Exit statuses of diff(1)
_NO_DIFFERENCES = 0
_DIFFERENCES_FOUND = 1

_CHANGED_GROUP_FORMAT = "--changed-group-format=%(N=0?:%dF:%dL )"
_UNCHANGED_GROUP_FORMAT = "--unchanged-group-format="


def parse_line_ranges(output: str) -> list[LineRange]:
    """Parse whitespace-separated ``start:end`` tokens."""
    return [LineRange.parse(token) for token in output.split()]


class DiffProvider:
    """Compute changed line ranges between two byte snapshots."""

    def __init__(self, binary: str = DEFAULT_BINARY, runner: Runner = run_process) -> None:
        self.binary = binary
        self._runner = runner

    def build_command(self, original_path: str, current_path: str) -> list[str]:
        return [
            self.binary,
            "-a",   # treat both files as text
            _CHANGED_GROUP_FORMAT,
            _UNCHANGED_GROUP_FORMAT,
            original_path,
            current_path,
        ]

    def changed_lines(self, original: bytes, current: bytes) -> list[LineRange]:
        """Return the line ranges of *current* that differ from *original*.

        An empty list means the snapshots are identical (or only lost lines).

        Raises
        ------
        ProcessFailure
            diff reported trouble (status 2 or more) or was killed.
        MalformedOutput
            diff printed something other than ``start:end`` tokens.
        """
        with temporary_file(original, prefix=".format_applier_orig_") as orig_path, \
                temporary_file(current, prefix=".format_applier_new_") as new_path:
            command = self.build_command(orig_path, new_path)
            result = self._runner(command).check(
                ok_codes=(_NO_DIFFERENCES, _DIFFERENCES_FOUND)
            )

        if result.returncode == _NO_DIFFERENCES:
            logger.debug("[Diff] No differences")
            return []

        ranges = parse_line_ranges(result.stdout.decode("ascii", errors="replace"))
        logger.debug("[Diff] Changed lines: %s", " ".join(str(r) for r in ranges))
        return ranges
