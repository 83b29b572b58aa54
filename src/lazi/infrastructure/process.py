"""
Subprocess adapter.

Output of captured runs is copied to this process's stdout/stderr as it
arrives and also collected for the log record.
"""

import logging
import os
import subprocess
import sys
import tempfile
import threading
from collections.abc import Sequence
from pathlib import Path
from typing import IO

from lazi.domain.interfaces import ProcessRunnerInterface
from lazi.domain.models import ProcessResult
from lazi.domain.scripts import ScriptType

logger = logging.getLogger(__name__)


def platform_shell() -> tuple[str, str]:
    """Shell executable and its command flag for the current platform."""
    if os.name == "nt":
        return os.environ.get("ComSpec", "cmd.exe"), "/c"
    return "/bin/sh", "-c"


def script_argv(path: str, script_type: str) -> list[str]:
    """Interpreter command line for a script file."""
    if ScriptType.parse(script_type) is ScriptType.POWERSHELL:
        return ["powershell", "-ExecutionPolicy", "Bypass", "-File", path]
    return ["bash", path]


def _pump(source: IO[str], sink: IO[str] | None, chunks: list[str]) -> None:
    for line in iter(source.readline, ""):
        chunks.append(line)
        if sink is not None:
            sink.write(line)
            sink.flush()
    source.close()


class SubprocessRunner(ProcessRunnerInterface):
    """
    Runs commands with stdin inherited and stdout/stderr teed.

    Args:
        echo: Copy child output to the terminal while capturing it
    """

    def __init__(self, echo: bool = True):
        self._echo = echo

    def _run_captured(self, argv: Sequence[str]) -> ProcessResult:
        logger.debug("Running %s", argv)
        try:
            process = subprocess.Popen(
                list(argv),
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
                bufsize=1,
            )
        except OSError as e:
            logger.debug("Failed to start %s: %s", argv[0], e)
            return ProcessResult(exit_code=1, error=str(e))

        assert process.stdout is not None
        assert process.stderr is not None
        out: list[str] = []
        err: list[str] = []
        out_sink = sys.stdout if self._echo else None
        err_sink = sys.stderr if self._echo else None
        readers = [
            threading.Thread(target=_pump, args=(process.stdout, out_sink, out), daemon=True),
            threading.Thread(target=_pump, args=(process.stderr, err_sink, err), daemon=True),
        ]
        for reader in readers:
            reader.start()
        exit_code = process.wait()
        for reader in readers:
            reader.join()

        return ProcessResult(
            exit_code=exit_code,
            stdout="".join(out).strip(),
            stderr="".join(err).strip(),
        )

    def run_shell(self, command: str) -> ProcessResult:
        shell, flag = platform_shell()
        return self._run_captured([shell, flag, command])

    def run_script(self, script: str, script_type: str) -> ProcessResult:
        suffix = ScriptType.parse(script_type).extension
        fd, path = tempfile.mkstemp(prefix="lazi-", suffix=suffix)
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as f:
                f.write(script)
            return self._run_captured(script_argv(path, script_type))
        finally:
            Path(path).unlink(missing_ok=True)

    def spawn(self, argv: Sequence[str]) -> ProcessResult:
        logger.debug("Spawning %s", argv)
        try:
            exit_code = subprocess.call(list(argv))
        except OSError as e:
            return ProcessResult(exit_code=1, error=str(e))
        return ProcessResult(exit_code=exit_code)
