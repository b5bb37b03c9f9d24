"""Step scheduler driving timed combat sequences.

Enemy turns, post-skill settle time and the between-encounter interlude
are sequences of steps separated by delays. Rather than blocking, each
sequence is queued here and advanced by the host calling ``tick(dt)``.
With every delay at zero, ``kick()`` runs a whole sequence synchronously.

Example:
    >>> scheduler = StepScheduler()
    >>> scheduler.wait(0.3).then(lambda: print("strike"))
    >>> scheduler.tick(0.2)   # nothing yet
    >>> scheduler.tick(0.2)
    strike
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Callable

from skirmish.core.exceptions import TurnManagementError
from skirmish.core.logging import get_logger


logger = get_logger(__name__)


class Step:
    """A unit of scheduled work."""

    label: str = ""

    def advance(self, dt: float) -> float | None:
        """Advance the step by dt seconds.

        Args:
            dt: Time available to this step.

        Returns:
            Unused time if the step completed, None if it is still pending.
        """
        raise NotImplementedError


@dataclass
class ActionStep(Step):
    """Run a callable once."""

    action: Callable[[], None]
    label: str = "action"

    def advance(self, dt: float) -> float | None:
        self.action()
        return dt


@dataclass
class DelayStep(Step):
    """Wait a fixed number of seconds."""

    seconds: float
    label: str = "delay"
    _remaining: float = field(init=False)

    def __post_init__(self) -> None:
        self._remaining = self.seconds

    def advance(self, dt: float) -> float | None:
        self._remaining -= dt
        if self._remaining > 0:
            return None
        leftover = -self._remaining
        self._remaining = 0.0
        return leftover


@dataclass
class WaitUntilStep(Step):
    """Block until a predicate holds (e.g. an interlude was completed)."""

    predicate: Callable[[], bool]
    label: str = "wait_until"

    def advance(self, dt: float) -> float | None:
        return dt if self.predicate() else None


class StepScheduler:
    """FIFO queue of steps advanced by an external clock.

    Only one drain runs at a time. A step's action may enqueue further
    steps (they run in the same drain if no delay intervenes) or clear the
    queue entirely.

    Attributes:
        elapsed: Total seconds ticked so far.
    """

    def __init__(self) -> None:
        """Initialize an empty scheduler."""
        self._steps: deque[Step] = deque()
        self._draining = False
        self.elapsed = 0.0

    @property
    def is_idle(self) -> bool:
        """Check whether no steps are pending.

        Returns:
            True if the queue is empty.
        """
        return not self._steps

    @property
    def pending(self) -> list[str]:
        return [step.label for step in self._steps]

    # =========================================================================
    # Queueing
    # =========================================================================

    def then(self, action: Callable[[], None], label: str = "action") -> StepScheduler:
        """Queue a callable.

        Args:
            action: Callable to run.
            label: Name used in logs and ``pending``.

        Returns:
            Self, for chaining.
        """
        self._steps.append(ActionStep(action, label))
        return self

    def wait(self, seconds: float, label: str = "delay") -> StepScheduler:
        """Queue a delay.

        Args:
            seconds: Seconds to wait.
            label: Name used in logs and ``pending``.

        Returns:
            Self, for chaining.

        Raises:
            TurnManagementError: If seconds is negative.
        """
        if seconds < 0:
            raise TurnManagementError(
                "Delay cannot be negative",
                details={"seconds": seconds, "label": label},
            )
        self._steps.append(DelayStep(seconds, label))
        return self

    def wait_until(self, predicate: Callable[[], bool], label: str = "wait_until") -> StepScheduler:
        """Queue a blocking wait on a predicate.

        Returns:
            Self, for chaining.
        """
        self._steps.append(WaitUntilStep(predicate, label))
        return self

    def clear(self) -> None:
        """Drop every pending step."""
        if self._steps:
            logger.debug("Scheduler cleared", dropped=len(self._steps))
        self._steps.clear()

    # =========================================================================
    # Advancing
    # =========================================================================

    def tick(self, dt: float) -> None:
        """Advance the clock and run every step that becomes ready.

        Re-entrant calls (from inside a running step) return immediately;
        the outer drain picks up anything they would have run.

        Args:
            dt: Seconds elapsed since the previous tick.

        Raises:
            TurnManagementError: If dt is negative.
        """
        if dt < 0:
            raise TurnManagementError("Cannot tick backwards", details={"dt": dt})
        if self._draining:
            return

        self.elapsed += dt
        self._draining = True
        remaining = dt
        try:
            while self._steps:
                step = self._steps[0]
                leftover = step.advance(remaining)
                if leftover is None:
                    break
                # The action may have cleared or replaced the queue.
                if self._steps and self._steps[0] is step:
                    self._steps.popleft()
                remaining = leftover
        finally:
            self._draining = False

    def kick(self) -> None:
        """Run every step that is ready without advancing the clock."""
        self.tick(0.0)

    def run_until_idle(self, step: float = 0.1, max_seconds: float = 600.0) -> None:
        """Tick in fixed increments until the queue empties.

        Intended for headless hosts and tests. Stops at a blocking wait
        that cannot complete.

        Args:
            step: Seconds per tick.
            max_seconds: Upper bound on simulated time.

        Raises:
            TurnManagementError: If the queue has not drained within max_seconds.
        """
        if step <= 0:
            raise TurnManagementError("Tick step must be positive", details={"step": step})
        simulated = 0.0
        self.kick()
        while self._steps:
            if isinstance(self._steps[0], WaitUntilStep) and not self._steps[0].predicate():
                return
            if simulated >= max_seconds:
                raise TurnManagementError(
                    "Scheduler did not become idle",
                    details={"pending": self.pending, "simulated": simulated},
                )
            self.tick(step)
            simulated += step


__all__ = [
    "Step",
    "ActionStep",
    "DelayStep",
    "WaitUntilStep",
    "StepScheduler",
]
