"""Tests for external process helpers."""

import os
import sys

import pytest

from format_applier.errors import EnvironmentPrecondition, ProcessFailure
from format_applier.process import ProcessResult, run_process, temporary_file


def _python(code: str) -> list[str]:
    return [sys.executable, "-c", code]


class TestRunProcess:
    def test_captures_stdout_and_stdin(self):
        result = run_process(
            _python("import sys; sys.stdout.write(sys.stdin.read().upper())"),
            input_bytes=b"int x;",
        )
        assert result.returncode == 0
        assert result.stdout == b"INT X;"

    def test_non_zero_exit_is_returned(self):
        result = run_process(_python("import sys; sys.stderr.write('bad'); sys.exit(3)"))
        assert result.returncode == 3
        assert result.stderr_text == "bad"

    def test_check_raises_process_failure(self):
        result = run_process(_python("import sys; sys.stderr.write('bad'); sys.exit(3)"))
        with pytest.raises(ProcessFailure) as info:
            result.check()
        assert info.value.returncode == 3
        assert info.value.signal is None
        assert "bad" in str(info.value)

    def test_check_accepts_listed_codes(self):
        result = ProcessResult(["diff"], 1)
        assert result.check(ok_codes=(0, 1)) is result

    @pytest.mark.skipif(sys.platform.startswith("win"), reason="POSIX signals")
    def test_signal_termination(self):
        result = run_process(
            _python("import os, signal; os.kill(os.getpid(), signal.SIGTERM)")
        )
        with pytest.raises(ProcessFailure) as info:
            result.check()
        assert info.value.signal == 15
        assert "SIGTERM" in str(info.value)

    def test_missing_executable(self):
        with pytest.raises(EnvironmentPrecondition):
            run_process(["no-such-tool-format-applier"])


class TestTemporaryFile:
    def test_removed_after_use(self):
        with temporary_file(b"hello") as path:
            with open(path, "rb") as f:
                assert f.read() == b"hello"
        assert not os.path.exists(path)

    def test_removed_on_error(self):
        with pytest.raises(RuntimeError):
            with temporary_file(b"x") as path:
                raise RuntimeError("boom")
        assert not os.path.exists(path)

    def test_removed_when_process_fails(self):
        with pytest.raises(ProcessFailure):
            with temporary_file(b"x") as path:
                run_process(_python("import sys; sys.exit(2)")).check()
        assert not os.path.exists(path)
