"""
Batch orchestration.

``lazi run build THEN quick "make test" THEN logs -n 1`` is split at the
separator token into independent sub-invocations that run one after
another; each becomes a step of one batch event.
"""

import logging
import shlex
import time
from collections.abc import Callable, Sequence

from lazi.application.event_logger import EventLogger
from lazi.domain.interfaces import ProcessRunnerInterface
from lazi.domain.models import BatchResult

logger = logging.getLogger(__name__)

DEFAULT_SEPARATOR = "THEN"

StepListener = Callable[[int, int, Sequence[str]], None]


def split_batch_commands(
    tokens: Sequence[str], separator: str = DEFAULT_SEPARATOR
) -> list[list[str]]:
    """
    Partition tokens at every separator; empty partitions are dropped.

    A result of length 1 means the input is not a batch.
    """
    batches: list[list[str]] = []
    current: list[str] = []
    for token in tokens:
        if token == separator:
            if current:
                batches.append(current)
            current = []
        else:
            current.append(token)
    if current:
        batches.append(current)
    return batches


class BatchOrchestrator:
    """
    Runs sub-invocations sequentially and records them as one batch event.

    Sub-invocations are spawned as ``[*argv_prefix, *tokens]`` attached to
    the terminal. A failing step never stops the loop.
    """

    def __init__(
        self,
        event_logger: EventLogger,
        runner: ProcessRunnerInterface,
        argv_prefix: Sequence[str],
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._events = event_logger
        self._runner = runner
        self._argv_prefix = list(argv_prefix)
        self._clock = clock

    def run_batch(
        self,
        batches: Sequence[Sequence[str]],
        on_step: StepListener | None = None,
    ) -> BatchResult:
        total = len(batches)
        started = self._clock()
        event_id = self._events.batch_start(total)
        if event_id is None:
            logger.warning("Batch start could not be logged; steps will not be recorded")

        successful = 0
        failed = 0
        for step_number, tokens in enumerate(batches, start=1):
            if on_step is not None:
                on_step(step_number, total, tokens)
            result = self._runner.spawn([*self._argv_prefix, *tokens])
            ok = result.exit_code == 0 and result.error is None
            if ok:
                successful += 1
            else:
                failed += 1
                logger.debug("Batch step %d failed with exit code %d", step_number, result.exit_code)
            if event_id is not None:
                self._events.batch_step(
                    event_id,
                    step_number,
                    command_name=tokens[0] if tokens else "",
                    command=shlex.join(tokens),
                    exit_code=result.exit_code,
                    error=result.error,
                )

        duration = self._clock() - started
        if event_id is not None:
            self._events.batch_end(event_id, total, successful, failed, duration)
        return BatchResult(
            event_id=event_id,
            total=total,
            successful=successful,
            failed=failed,
            duration=duration,
        )
