"""
Auto-Rotate Arbiter
===================
Decides whether idle auto-rotation may run.

Any interaction suspends rotation. When the last active interaction ends,
a single resume deadline is scheduled; a newer end replaces it and a new
interaction cancels it. Rotation resumes once the deadline passes.
"""

import logging
import time
from enum import Enum, auto
from typing import Callable, Optional, Set

logger = logging.getLogger(__name__)


class AutoRotateMode(Enum):
    """Arbiter state."""
    IDLE_ROTATING = auto()
    SUSPENDED = auto()


class AutoRotateArbiter:
    """
    Two-state machine with one scheduled resume deadline.

    Interactions are identified by a source name ("pointer", "key:w", ...)
    so that releasing one input does not resume rotation while another is
    still held. Instantaneous interactions such as a wheel tick use
    ``pulse``.

    Args:
        enabled: Auto-rotate feature flag; when False, rotation never runs
        resume_delay: Seconds between the last interaction end and resume
        clock: Monotonic time source in seconds
    """

    def __init__(self, enabled: bool = False, resume_delay: float = 1.0,
                 clock: Callable[[], float] = time.monotonic):
        self.enabled = enabled
        self.resume_delay = resume_delay
        self._clock = clock

        self.mode = AutoRotateMode.IDLE_ROTATING
        self.resume_deadline: Optional[float] = None
        self._active: Set[str] = set()

    @property
    def suspended(self) -> bool:
        return self.mode == AutoRotateMode.SUSPENDED

    @property
    def active_interactions(self) -> Set[str]:
        return set(self._active)

    def set_enabled(self, enabled: bool):
        """Toggle the feature at runtime. Interaction tracking is kept."""
        self.enabled = enabled

    def begin(self, source: str):
        """An interaction started: suspend and cancel any pending resume."""
        self._active.add(source)
        self.resume_deadline = None
        if self.mode != AutoRotateMode.SUSPENDED:
            logger.debug("Auto-rotate suspended by %s", source)
        self.mode = AutoRotateMode.SUSPENDED

    def end(self, source: str):
        """
        An interaction ended.

        The deadline is (re)scheduled only once no interaction is active.
        Ending an interaction that never began still counts as an end.
        """
        self._active.discard(source)
        if self._active:
            return
        if self.mode != AutoRotateMode.SUSPENDED:
            # Nothing suspended us; there is nothing to resume from.
            return
        self.resume_deadline = self._clock() + self.resume_delay
        logger.debug("Auto-rotate resume scheduled at %.3f", self.resume_deadline)

    def pulse(self, source: str):
        """Begin and immediately end an interaction (wheel ticks)."""
        self.begin(source)
        self.end(source)

    def update(self, now: Optional[float] = None) -> AutoRotateMode:
        """Advance the state machine to ``now``; call once per frame tick."""
        if self.mode == AutoRotateMode.SUSPENDED and self.resume_deadline is not None:
            if now is None:
                now = self._clock()
            if now >= self.resume_deadline:
                self.resume_deadline = None
                self.mode = AutoRotateMode.IDLE_ROTATING
                logger.debug("Auto-rotate resumed")
        return self.mode

    def should_rotate(self, now: Optional[float] = None) -> bool:
        """True when the feature is on and the arbiter is idle-rotating."""
        if not self.enabled:
            return False
        return self.update(now) == AutoRotateMode.IDLE_ROTATING
