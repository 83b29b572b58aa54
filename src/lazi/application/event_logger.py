"""Execution log writer.

Builds LogRecords with ids from the allocator and appends them to the
store. Writing is best-effort: every method returns the new log id, or
None when the store could not be written, and never raises for I/O.
"""

import logging
from collections.abc import Callable
from datetime import datetime

from lazi.domain.interfaces import IdAllocatorInterface, LogStoreInterface
from lazi.domain.models import (
    BatchEndPayload,
    BatchStartPayload,
    BatchStepPayload,
    EventEndPayload,
    EventStartPayload,
    EventStepPayload,
    LogRecord,
    Payload,
    ProcessResult,
    RecordKind,
    SessionInfo,
    SinglePayload,
)

logger = logging.getLogger(__name__)


def local_timestamp() -> str:
    return datetime.now().astimezone().isoformat(timespec="seconds")


class EventLogger:
    """Emits single, event and batch records to a log store.

    Session details are taken from ``session_provider`` for the record
    kinds that carry them (single, event-start, batch-start).
    """

    def __init__(
        self,
        store: LogStoreInterface,
        allocator: IdAllocatorInterface,
        session_provider: Callable[[], SessionInfo],
        clock: Callable[[], str] = local_timestamp,
    ) -> None:
        self._store = store
        self._allocator = allocator
        self._session = session_provider
        self._now = clock

    def _emit(
        self,
        kind: RecordKind,
        payload: Payload,
        parent_id: int | None = None,
        with_session: bool = False,
    ) -> int | None:
        log_id = self._allocator.next_id()
        record = LogRecord(
            log_id=log_id,
            timestamp=self._now(),
            kind=kind,
            payload=payload,
            parent_id=parent_id,
            session=self._session() if with_session else None,
        )
        try:
            self._store.append(record)
        except OSError as e:
            logger.warning("Error writing %s record: %s", kind.value, e)
            return None
        logger.debug("Wrote Log-%d (%s)", log_id, kind.value)
        return log_id

    def write_single(
        self, command_name: str, command_executed: str, result: ProcessResult
    ) -> int | None:
        """Record one command execution."""
        payload = SinglePayload(
            command_name=command_name,
            command_executed=command_executed,
            exit_code=result.exit_code,
            stdout=result.stdout,
            stderr=result.stderr or (result.error or ""),
        )
        return self._emit(RecordKind.SINGLE, payload, with_session=True)

    # -------------------------------------------------------------------------
    # Script execution events
    # -------------------------------------------------------------------------

    def start_event(
        self,
        script_name: str,
        script_type: str,
        total_steps: int,
        script_content: str | None = None,
    ) -> int | None:
        payload = EventStartPayload(
            script_name=script_name,
            script_type=script_type,
            total_steps=total_steps,
            script_content=script_content,
        )
        return self._emit(RecordKind.EVENT_START, payload, with_session=True)

    def log_step(
        self,
        event_id: int,
        step_number: int,
        step_name: str,
        step_code: str | None = None,
    ) -> int | None:
        payload = EventStepPayload(
            step_number=step_number, step_name=step_name, step_code=step_code
        )
        return self._emit(RecordKind.EVENT_STEP, payload, parent_id=event_id)

    def end_event(
        self,
        event_id: int,
        script_name: str,
        result: ProcessResult,
        duration: float,
    ) -> int | None:
        payload = EventEndPayload(
            script_name=script_name,
            exit_code=result.exit_code,
            duration=duration,
            stdout=result.stdout,
            stderr=result.stderr or (result.error or ""),
        )
        return self._emit(RecordKind.EVENT_END, payload, parent_id=event_id)

    # -------------------------------------------------------------------------
    # Batch events
    # -------------------------------------------------------------------------

    def batch_start(self, total_commands: int) -> int | None:
        payload = BatchStartPayload(total_commands=total_commands)
        return self._emit(RecordKind.BATCH_START, payload, with_session=True)

    def batch_step(
        self,
        event_id: int,
        step_number: int,
        command_name: str,
        command: str,
        exit_code: int,
        error: str | None = None,
    ) -> int | None:
        payload = BatchStepPayload(
            step_number=step_number,
            command_name=command_name,
            command=command,
            exit_code=exit_code,
            success=exit_code == 0 and error is None,
            error=error,
        )
        return self._emit(RecordKind.BATCH_STEP, payload, parent_id=event_id)

    def batch_end(
        self,
        event_id: int,
        total_commands: int,
        successful: int,
        failed: int,
        duration: float,
    ) -> int | None:
        payload = BatchEndPayload(
            total_commands=total_commands,
            successful=successful,
            failed=failed,
            duration=duration,
        )
        return self._emit(RecordKind.BATCH_END, payload, parent_id=event_id)
