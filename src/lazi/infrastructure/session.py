"""Capture of the invoking session's identity for log records."""

import getpass
import os
import socket

from lazi.domain.models import SessionInfo


def _user() -> str:
    try:
        return getpass.getuser()
    except (KeyError, OSError):
        return os.environ.get("USERNAME", "unknown")


def capture_session() -> SessionInfo:
    """
    Describe the current terminal session.

    The session id is the parent process id, so every command typed into
    the same shell shares one id.
    """
    return SessionInfo(
        session_id=str(os.getppid() or os.getpid()),
        working_dir=os.getcwd(),
        user=_user(),
        hostname=socket.gethostname(),
        shell=os.environ.get("SHELL") or os.environ.get("ComSpec") or "unknown",
    )
