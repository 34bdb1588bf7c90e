"""State machine for a single pipeline run.

Validating -> RunningInternal -> {InternalFailed | RunningExternal}
-> {StartupError | Killed | Completed}. Cancellation moves either running
state straight to Cancelled. Every other state is terminal.
"""

from __future__ import annotations

import logging
from enum import Enum

logger = logging.getLogger(__name__)


class PipelineState(Enum):
    """All states of a pipeline run."""

    VALIDATING = "validating"
    RUNNING_INTERNAL = "running:internal"
    RUNNING_EXTERNAL = "running:external"

    # Terminal
    VALIDATION_FAILED = "validation_failed"
    INTERNAL_FAILED = "internal_failed"
    STARTUP_ERROR = "startup_error"
    KILLED = "killed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class InvalidTransitionError(Exception):
    """Raised when a run attempts a transition the table does not allow."""

    def __init__(self, current: PipelineState, target: PipelineState) -> None:
        self.current = current
        self.target = target
        super().__init__(f"Invalid transition from {current.value} to {target.value}")


VALID_TRANSITIONS: dict[PipelineState, set[PipelineState]] = {
    PipelineState.VALIDATING: {
        PipelineState.RUNNING_INTERNAL,
        PipelineState.VALIDATION_FAILED,
    },
    PipelineState.RUNNING_INTERNAL: {
        PipelineState.INTERNAL_FAILED,
        PipelineState.RUNNING_EXTERNAL,
        PipelineState.CANCELLED,
    },
    PipelineState.RUNNING_EXTERNAL: {
        PipelineState.STARTUP_ERROR,
        PipelineState.KILLED,
        PipelineState.COMPLETED,
        PipelineState.CANCELLED,
    },
    PipelineState.VALIDATION_FAILED: set(),
    PipelineState.INTERNAL_FAILED: set(),
    PipelineState.STARTUP_ERROR: set(),
    PipelineState.KILLED: set(),
    PipelineState.COMPLETED: set(),
    PipelineState.CANCELLED: set(),
}

TERMINAL_STATES: frozenset[PipelineState] = frozenset(
    state for state, targets in VALID_TRANSITIONS.items() if not targets
)


class PipelineRun:
    """Tracks the state of one run; a fresh instance is made per execution."""

    def __init__(self) -> None:
        self._state = PipelineState.VALIDATING
        self._history: list[PipelineState] = [PipelineState.VALIDATING]

    @property
    def state(self) -> PipelineState:
        return self._state

    @property
    def history(self) -> tuple[PipelineState, ...]:
        return tuple(self._history)

    @property
    def is_terminal(self) -> bool:
        return self._state in TERMINAL_STATES

    def can_transition(self, target: PipelineState) -> bool:
        return target in VALID_TRANSITIONS[self._state]

    def transition(self, target: PipelineState) -> None:
        if not self.can_transition(target):
            raise InvalidTransitionError(self._state, target)
        logger.debug("Pipeline %s -> %s", self._state.value, target.value)
        self._state = target
        self._history.append(target)
