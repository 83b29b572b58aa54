"""Tests for the subprocess adapter and session capture."""

import os
import sys

import pytest

from lazi.infrastructure.process import SubprocessRunner, platform_shell, script_argv
from lazi.infrastructure.session import capture_session

posix_only = pytest.mark.skipif(os.name == "nt", reason="uses /bin/sh")


def test_script_argv():
    assert script_argv("/tmp/a.sh", "bash") == ["bash", "/tmp/a.sh"]
    assert script_argv("C:/a.ps1", "powershell") == [
        "powershell", "-ExecutionPolicy", "Bypass", "-File", "C:/a.ps1",
    ]


def test_platform_shell_flag():
    _, flag = platform_shell()
    assert flag in ("-c", "/c")


@posix_only
class TestSubprocessRunner:
    """Runs real child processes through /bin/sh."""

    def test_run_shell_captures_output(self):
        result = SubprocessRunner(echo=False).run_shell("echo out; echo err >&2; exit 3")
        assert result.exit_code == 3
        assert result.stdout == "out"
        assert result.stderr == "err"
        assert result.error is None

    def test_echo_tees_to_terminal(self, capsys):
        SubprocessRunner(echo=True).run_shell("echo visible")
        assert "visible" in capsys.readouterr().out

    def test_missing_executable_reports_error(self):
        result = SubprocessRunner(echo=False).spawn(["/nonexistent/lazi-binary"])
        assert result.exit_code == 1
        assert result.error

    def test_spawn_returns_exit_code(self):
        result = SubprocessRunner().spawn([sys.executable, "-c", "raise SystemExit(4)"])
        assert result.exit_code == 4

    def test_run_script_removes_temp_file(self, tmp_path):
        marker = tmp_path / "seen"
        script = f'echo "$0" > "{marker}"\necho done'
        result = SubprocessRunner(echo=False).run_script(script, "bash")
        assert result.exit_code == 0
        assert result.stdout == "done"
        script_path = marker.read_text(encoding="utf-8").strip()
        assert script_path.endswith(".sh")
        assert not os.path.exists(script_path)


def test_capture_session():
    session = capture_session()
    assert session.session_id.isdigit()
    assert session.working_dir == os.getcwd()
    assert session.hostname
