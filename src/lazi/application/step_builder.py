"""
Build a script from recorded workflow steps.

Pulls the stored code of arbitrary event-step records, possibly from
different events, and concatenates it under a fresh header.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from lazi.application.event_model import EventQueries
from lazi.domain.exceptions import StepNotFoundError
from lazi.domain.log_index import LogIndex
from lazi.domain.models import (
    AssembledScript,
    EventStartPayload,
    EventStepPayload,
    LogRecord,
    RecordKind,
    ScriptSection,
)
from lazi.domain.scripts import ScriptType, script_header

logger = logging.getLogger(__name__)

DEFAULT_SCRIPT_NAME = "Combined Script"


@dataclass(frozen=True)
class StepBuildResult:
    script: AssembledScript
    skipped: tuple[int, ...] = ()  # step ids without stored code
    mixed_types: tuple[str, ...] = ()  # set when parent events disagree on type


def _parent_script_type(index: LogIndex, step: LogRecord) -> str | None:
    if step.parent_id is None:
        return None
    parent = index.get(step.parent_id, where=lambda r: r.kind is RecordKind.EVENT_START)
    if parent is None or not isinstance(parent.payload, EventStartPayload):
        return None
    return parent.payload.script_type or None


def build_script_from_steps(
    queries: EventQueries,
    step_ids: Sequence[int],
    script_type: ScriptType | str | None = None,
    name: str | None = None,
    default_type: ScriptType = ScriptType.POWERSHELL,
    generated_at: str = "",
) -> StepBuildResult:
    """
    Concatenate the stored code of the given steps, in the given order.

    The script type is ``script_type`` if given, else the type of the first
    usable step's parent event, else ``default_type``.

    Raises:
        StepNotFoundError: Listing every id that is absent or not an event-step
    """
    index = queries.index()
    missing: list[int] = []
    usable: list[tuple[LogRecord, EventStepPayload, str | None]] = []
    skipped: list[int] = []

    for step_id in step_ids:
        record = index.get(step_id, where=lambda r: r.kind is RecordKind.EVENT_STEP)
        if record is None or not isinstance(record.payload, EventStepPayload):
            missing.append(step_id)
            continue
        if not record.payload.step_code:
            logger.warning("Log-%d: no code stored (skipping)", step_id)
            skipped.append(step_id)
            continue
        usable.append((record, record.payload, _parent_script_type(index, record)))

    if missing:
        raise StepNotFoundError(tuple(missing))

    parent_types = tuple(dict.fromkeys(t or default_type.value for _, _, t in usable))
    if script_type is not None:
        resolved = ScriptType.parse(script_type) if isinstance(script_type, str) else script_type
    else:
        resolved = default_type
        first_type = usable[0][2] if usable else None
        if first_type:
            try:
                resolved = ScriptType.parse(first_type)
            except ValueError:
                logger.warning(
                    "Unknown script type %r on parent event; using %s",
                    first_type,
                    resolved.value,
                )

    mixed = parent_types if len(parent_types) > 1 and script_type is None else ()
    if mixed:
        logger.warning("Steps have different script types: %s", ", ".join(mixed))

    extra = [
        f"Script Name: {name or DEFAULT_SCRIPT_NAME}",
        *([f"Generated: {generated_at}"] if generated_at else []),
        f"Source Steps: {', '.join(str(i) for i in step_ids)}",
    ]
    sections: list[ScriptSection] = []
    body: list[str] = []
    for position, (record, payload, _) in enumerate(usable, start=1):
        label = f"Step {position} (from Log-{record.log_id}: {payload.step_name})"
        code = payload.step_code or ""
        sections.append(ScriptSection(node_id=str(record.log_id), label=label, code=code))
        body.append(f"# {label}\n{code}\n\n")

    text = script_header(resolved, extra) + "".join(body)
    return StepBuildResult(
        script=AssembledScript(script_type=resolved.value, text=text, sections=tuple(sections)),
        skipped=tuple(skipped),
        mixed_types=mixed,
    )
