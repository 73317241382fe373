"""
Git integration — fetch a tracked file's content at a historical revision.
"""

from __future__ import annotations

import logging
import os

from .errors import EnvironmentPrecondition
from .process import ProcessResult, Runner, run_process

logger = logging.getLogger(__name__)

DEFAULT_BINARY = "git"
DEFAULT_REVISION = "HEAD"


class GitRevisionLookup:
    """Read file snapshots out of the git repository containing them."""

    def __init__(self, binary: str = DEFAULT_BINARY, runner: Runner = run_process) -> None:
        self.binary = binary
        self._runner = runner

    def _run_git(self, args: list[str], cwd: str) -> ProcessResult:
        return self._runner([self.binary, *args], cwd=cwd)

    def toplevel(self, path: str) -> str:
        """Return the work tree root containing *path*."""
        directory = os.path.dirname(os.path.abspath(path))
        result = self._run_git(["rev-parse", "--show-toplevel"], cwd=directory)
        if result.returncode != 0:
            raise EnvironmentPrecondition(
                f"{path} is not inside a git work tree"
            )
        return result.stdout.decode("utf-8").strip()

    def is_tracked(self, path: str) -> bool:
        directory = os.path.dirname(os.path.abspath(path))
        result = self._run_git(
            ["ls-files", "--error-unmatch", "--", os.path.basename(path)],
            cwd=directory,
        )
        return result.returncode == 0

    def show(self, path: str, revision: str = DEFAULT_REVISION) -> bytes:
        """Return the content of *path* as of *revision*.

        Raises
        ------
        EnvironmentPrecondition
            *path* is outside a git work tree or not tracked.
        ProcessFailure
            ``git show`` failed (e.g. unknown revision).
        """
        root = self.toplevel(path)
        if not self.is_tracked(path):
            raise EnvironmentPrecondition(f"{path} is not tracked by git")

        relative = os.path.relpath(os.path.realpath(path), os.path.realpath(root))
        object_name = f"{revision}:{relative.replace(os.sep, '/')}"
        result = self._run_git(["show", object_name], cwd=root).check()
        logger.debug(
            "[Git] Loaded %s (%d bytes)", object_name, len(result.stdout),
        )
        return result.stdout
