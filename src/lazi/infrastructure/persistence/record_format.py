"""
Plain-text layout of log records.

Each record is a block of ``Key: value`` lines opened by a header line
``[Log-<id>] [<timestamp>] <title>``. Records are separated by a line
holding exactly ``---``. The format is meant to be read by people as
much as by this module, so payload text is written as-is (no escaping).
"""

import logging
import re

from lazi.domain.models import (
    BatchEndPayload,
    BatchStartPayload,
    BatchStepPayload,
    EventEndPayload,
    EventStartPayload,
    EventStepPayload,
    LogRecord,
    RecordKind,
    SessionInfo,
    SinglePayload,
)

logger = logging.getLogger(__name__)

SEPARATOR = "---"
HEADER_RE = re.compile(r"^\[Log-(\d+)\] \[(.*?)\] (.*)$")
SESSION_RE = re.compile(r"^(.*?) \| (.*?)@(.*?) \| (.*)$")
STEP_TITLE_RE = re.compile(r"^STEP-(\d+): (.*)$")

# Multi-line fields; the value runs until the next header in the set
# that is allowed to follow it, or to the end of the record.
BLOCK_FIELDS = ("Output", "Errors", "Script-Content", "Step-Code")
_BLOCK_TERMINATORS = {
    "Output": ("Errors",),
    "Errors": (),
    "Script-Content": (),
    "Step-Code": (),
}
_EMPTY_MARKERS = {"(no output)", "(none)"}


class MalformedRecord(ValueError):
    """A fragment between separators that is not a record."""


# =============================================================================
# WRITING
# =============================================================================


def _session_lines(session: SessionInfo | None) -> list[str]:
    if session is None:
        return []
    return [
        f"Session: {session.session_id} | {session.user}@{session.hostname} | {session.working_dir}",
        f"Shell: {session.shell}",
    ]


def _block(key: str, text: str, empty: str | None = None) -> list[str]:
    text = text.rstrip()
    if not text:
        return [f"{key}: {empty}"] if empty is not None else []
    return [f"{key}:", text]


def format_record(record: LogRecord) -> str:
    """
    Render a record as text, without the trailing separator.

    Payload text containing a separator line cannot be read back intact;
    such records are written anyway and a warning is logged.
    """
    p = record.payload
    kind = record.kind
    lines: list[str]

    if isinstance(p, SinglePayload):
        title = f"{p.command_name} ({p.command_executed})"
        lines = [f"Event-Type: {kind.value}"]
        lines += _session_lines(record.session)
        lines.append(f"Exit Code: {p.exit_code}")
        lines += _block("Output", p.stdout, "(no output)")
        lines += _block("Errors", p.stderr)
    elif isinstance(p, EventStartPayload):
        title = f"EVENT-START: {p.script_name}"
        lines = [
            f"Event-Type: {kind.value}",
            f"Script-Type: {p.script_type}",
            f"Total-Steps: {p.total_steps}",
        ]
        lines += _session_lines(record.session)
        if p.script_content is not None:
            lines += _block("Script-Content", p.script_content)
    elif isinstance(p, EventStepPayload):
        title = f"STEP-{p.step_number}: {p.step_name}"
        lines = [f"Event-Type: {kind.value}", f"Parent-Event: {record.parent_id}"]
        if p.step_code is not None:
            lines += _block("Step-Code", p.step_code)
    elif isinstance(p, EventEndPayload):
        title = f"EVENT-END: {p.script_name}"
        lines = [
            f"Event-Type: {kind.value}",
            f"Parent-Event: {record.parent_id}",
            f"Overall-Exit-Code: {p.exit_code}",
            f"Total-Duration: {p.duration:.2f}s",
        ]
        lines += _block("Output", p.stdout, "(no output)")
        lines += _block("Errors", p.stderr, "(none)")
    elif isinstance(p, BatchStartPayload):
        title = "EVENT-START: Batch Execution"
        lines = [f"Event-Type: {kind.value}", f"Total-Commands: {p.total_commands}"]
        lines += _session_lines(record.session)
    elif isinstance(p, BatchStepPayload):
        title = f"STEP-{p.step_number}: {p.command_name}"
        lines = [
            f"Event-Type: {kind.value}",
            f"Parent-Event: {record.parent_id}",
            f"Command: {p.command}",
            f"Exit-Code: {p.exit_code}",
            f"Status: {'Success' if p.success else 'Failed'}",
        ]
        if p.error:
            lines.append(f"Error: {p.error}")
    elif isinstance(p, BatchEndPayload):
        title = "EVENT-END: Batch Execution"
        lines = [
            f"Event-Type: {kind.value}",
            f"Parent-Event: {record.parent_id}",
            f"Total-Commands: {p.total_commands}",
            f"Successful: {p.successful}",
            f"Failed: {p.failed}",
            f"Duration: {p.duration:.2f}s",
        ]
    else:
        raise TypeError(f"Unsupported payload: {type(p).__name__}")

    text = "\n".join([f"[Log-{record.log_id}] [{record.timestamp}] {title}", *lines])
    if any(line == SEPARATOR for line in text.splitlines()):
        logger.warning(
            "Log-%d contains a '%s' line; it will not read back intact",
            record.log_id,
            SEPARATOR,
        )
    return text


# =============================================================================
# READING
# =============================================================================


def split_fragments(text: str) -> list[str]:
    """Split store content on separator lines; blank fragments are dropped."""
    fragments: list[str] = []
    current: list[str] = []
    for line in text.replace("\r\n", "\n").split("\n"):
        if line == SEPARATOR:
            fragments.append("\n".join(current))
            current = []
        else:
            current.append(line)
    fragments.append("\n".join(current))
    return [f.strip("\n") for f in fragments if f.strip()]


def _read_fields(lines: list[str]) -> dict[str, str]:
    fields: dict[str, str] = {}
    i = 0
    while i < len(lines):
        key, sep, value = lines[i].partition(":")
        if not sep:
            i += 1
            continue
        value = value.strip()
        if key in BLOCK_FIELDS and not value:
            stops = _BLOCK_TERMINATORS[key]
            body: list[str] = []
            i += 1
            while i < len(lines):
                if any(lines[i].startswith(f"{stop}:") for stop in stops):
                    break
                body.append(lines[i])
                i += 1
            fields[key] = "\n".join(body).rstrip()
            continue
        fields.setdefault(key, "" if value in _EMPTY_MARKERS else value)
        i += 1
    return fields


def _int(fields: dict[str, str], key: str, default: int = 0) -> int:
    value = fields.get(key, "")
    try:
        return int(value)
    except ValueError:
        return default


def _seconds(fields: dict[str, str], key: str) -> float:
    value = fields.get(key, "").removesuffix("s")
    try:
        return float(value)
    except ValueError:
        return 0.0


def _session(fields: dict[str, str]) -> SessionInfo | None:
    match = SESSION_RE.match(fields.get("Session", ""))
    if match is None:
        return None
    session_id, user, hostname, working_dir = match.groups()
    return SessionInfo(
        session_id=session_id,
        working_dir=working_dir,
        user=user,
        hostname=hostname,
        shell=fields.get("Shell", ""),
    )


def _parent(fields: dict[str, str]) -> int | None:
    value = fields.get("Parent-Event", "")
    return int(value) if value.isdigit() else None


_TITLE_PREFIXES = {
    "start": "EVENT-START: ",
    "step": "STEP-",
    "end": "EVENT-END: ",
}


def _after_colon(title: str) -> str:
    return title.partition(": ")[2] or title


def _balanced(text: str) -> bool:
    depth = 0
    for ch in text:
        depth += {"(": 1, ")": -1}.get(ch, 0)
        if depth < 0:
            return False
    return depth == 0


def split_single_title(title: str) -> tuple[str, str]:
    """
    Split ``<name> (<command>)`` at the first " (" leaving both parts balanced.

    Names such as ``rerun-5 (build)`` and commands such as ``echo (x)`` both
    contain parentheses. A title without the suffix is name and command.
    """
    if title.endswith(")"):
        start = title.find(" (")
        while start != -1:
            name, command = title[:start], title[start + 2 : -1]
            if _balanced(name) and _balanced(command):
                return name, command
            start = title.find(" (", start + 1)
    return title, title


def _check_title(log_id: int, kind: RecordKind, title: str) -> None:
    role = "start" if kind.is_start else "step" if kind.is_step else "end"
    prefix = _TITLE_PREFIXES[role]
    if not title.startswith(prefix):
        raise MalformedRecord(f"Log-{log_id}: {kind.value} without {prefix.strip()} line")


def parse_record(fragment: str) -> LogRecord:
    """
    Parse one fragment into a record.

    A fragment with no ``Event-Type`` line is a single record in the
    legacy layout.

    Raises:
        MalformedRecord: If the header line or the kind is unrecognized
    """
    lines = fragment.replace("\r\n", "\n").split("\n")
    header = HEADER_RE.match(lines[0])
    if header is None:
        raise MalformedRecord(f"Missing [Log-n] header: {lines[0][:60]!r}")
    log_id = int(header.group(1))
    timestamp = header.group(2)
    title = header.group(3)
    fields = _read_fields(lines[1:])

    try:
        kind = RecordKind(fields.get("Event-Type", RecordKind.SINGLE.value))
    except ValueError as e:
        raise MalformedRecord(f"Log-{log_id}: unknown Event-Type") from e

    if kind is not RecordKind.SINGLE:
        _check_title(log_id, kind, title)

    if kind is RecordKind.SINGLE:
        name, command = split_single_title(title)
        payload = SinglePayload(
            command_name=name,
            command_executed=command,
            exit_code=_int(fields, "Exit Code"),
            stdout=fields.get("Output", ""),
            stderr=fields.get("Errors", ""),
        )
        return LogRecord(log_id, timestamp, kind, payload, None, _session(fields), fragment)

    if kind is RecordKind.EVENT_START:
        start_payload = EventStartPayload(
            script_name=_after_colon(title),
            script_type=fields.get("Script-Type", ""),
            total_steps=_int(fields, "Total-Steps"),
            script_content=fields.get("Script-Content"),
        )
        return LogRecord(log_id, timestamp, kind, start_payload, None, _session(fields), fragment)

    if kind is RecordKind.BATCH_START:
        batch_start = BatchStartPayload(total_commands=_int(fields, "Total-Commands"))
        return LogRecord(log_id, timestamp, kind, batch_start, None, _session(fields), fragment)

    step_match = STEP_TITLE_RE.match(title)
    step_number = int(step_match.group(1)) if step_match else 0
    step_name = step_match.group(2) if step_match else title

    if kind is RecordKind.EVENT_STEP:
        step_payload = EventStepPayload(
            step_number=step_number,
            step_name=step_name,
            step_code=fields.get("Step-Code"),
        )
        return LogRecord(log_id, timestamp, kind, step_payload, _parent(fields), None, fragment)

    if kind is RecordKind.BATCH_STEP:
        batch_step = BatchStepPayload(
            step_number=step_number,
            command_name=step_name,
            command=fields.get("Command", ""),
            exit_code=_int(fields, "Exit-Code"),
            success=fields.get("Status") == "Success",
            error=fields.get("Error") or None,
        )
        return LogRecord(log_id, timestamp, kind, batch_step, _parent(fields), None, fragment)

    if kind is RecordKind.EVENT_END:
        end_payload = EventEndPayload(
            script_name=_after_colon(title),
            exit_code=_int(fields, "Overall-Exit-Code"),
            duration=_seconds(fields, "Total-Duration"),
            stdout=fields.get("Output", ""),
            stderr=fields.get("Errors", ""),
        )
        return LogRecord(log_id, timestamp, kind, end_payload, _parent(fields), None, fragment)

    batch_end = BatchEndPayload(
        total_commands=_int(fields, "Total-Commands"),
        successful=_int(fields, "Successful"),
        failed=_int(fields, "Failed"),
        duration=_seconds(fields, "Duration"),
    )
    return LogRecord(log_id, timestamp, kind, batch_end, _parent(fields), None, fragment)


def parse_store(text: str) -> list[LogRecord]:
    """Parse store content, skipping fragments that are not records."""
    records: list[LogRecord] = []
    for fragment in split_fragments(text):
        try:
            records.append(parse_record(fragment))
        except MalformedRecord as e:
            logger.debug("Skipping fragment: %s", e)
    return records
