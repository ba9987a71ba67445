"""Poll-until-terminal bookkeeping shared by the sync and async clients.

States:
    PENDING -> any non-terminal status ("INITIAL", "PROCESSING", ...)
    DONE    -> terminal success, the result is returned
    FAILED  -> terminal failure ("FAIL"), TaskNotCompletedError

The loop itself (request, wait, cancellation) lives in the clients; PollLoop
only classifies observed results and decides how long to wait next.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from kandinsky.core.generation.errors import (
    CensoredImageError,
    DeadlineExceededError,
    PollCancelledError,
    TaskNotCompletedError,
)
from kandinsky.core.generation.models import TaskResult, TaskState

logger = logging.getLogger(__name__)


@dataclass
class PollLoop:
    """State of one await-completion call.

    Args:
        uuid: Task identifier being polled
        interval_s: Fixed wait between status checks
        timeout_s: Overall deadline in seconds (None polls until terminal)
        clock: Monotonic clock used for the deadline
        reject_censored: Treat censored DONE results as failures
    """

    uuid: str
    interval_s: float
    timeout_s: float | None
    clock: Callable[[], float]
    reject_censored: bool = False
    attempts: int = 0
    started: float = field(init=False)

    def __post_init__(self) -> None:
        self.started = self.clock()

    def observe(self, result: TaskResult) -> TaskResult | None:
        """Record one status check.

        Returns:
            The result when the task is DONE, None while it is still pending

        Raises:
            TaskNotCompletedError: If the service reported FAIL
            CensoredImageError: If the result is censored and reject_censored is set
        """
        self.attempts += 1
        state = result.state

        if state is TaskState.DONE:
            if self.reject_censored and result.censored:
                raise CensoredImageError(self.uuid)
            logger.info("Task %s done after %d status checks", self.uuid, self.attempts)
            return result

        if state is TaskState.FAILED:
            logger.warning("Task %s failed after %d status checks", self.uuid, self.attempts)
            raise TaskNotCompletedError(self.uuid)

        logger.debug(
            "Task %s pending (status=%s, check %d)", self.uuid, result.status, self.attempts
        )
        return None

    def next_delay(self) -> float:
        """Seconds to wait before the next status check.

        The wait is shortened to the remaining time when a deadline is set, so
        one final check happens at the deadline.

        Raises:
            DeadlineExceededError: If the deadline has already passed
        """
        if self.timeout_s is None:
            return self.interval_s

        remaining = self.started + self.timeout_s - self.clock()
        if remaining <= 0:
            raise DeadlineExceededError(self.uuid, self.timeout_s, self.attempts)
        return min(self.interval_s, remaining)

    def cancelled(self) -> PollCancelledError:
        logger.info("Polling task %s cancelled", self.uuid)
        return PollCancelledError(self.uuid, self.attempts)
