"""Run state machine for the verification engine.

NOT_STARTED -> TRANSFER_IN_PROGRESS -> TRANSFER_REFUSED (terminal)
TRANSFER_IN_PROGRESS -> TRANSFER_COMPLETE -> CLASSIFYING -> REPORTED (terminal)
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum


class RunState(Enum):
    """Lifecycle states of a single verification run."""

    NOT_STARTED = "NOT_STARTED"
    TRANSFER_IN_PROGRESS = "TRANSFER_IN_PROGRESS"
    TRANSFER_REFUSED = "TRANSFER_REFUSED"
    TRANSFER_COMPLETE = "TRANSFER_COMPLETE"
    CLASSIFYING = "CLASSIFYING"
    REPORTED = "REPORTED"


ALLOWED_TRANSITIONS: dict[RunState, set[RunState]] = {
    RunState.NOT_STARTED: {RunState.TRANSFER_IN_PROGRESS},
    RunState.TRANSFER_IN_PROGRESS: {
        RunState.TRANSFER_REFUSED,
        RunState.TRANSFER_COMPLETE,
    },
    RunState.TRANSFER_REFUSED: set(),
    RunState.TRANSFER_COMPLETE: {RunState.CLASSIFYING},
    RunState.CLASSIFYING: {RunState.REPORTED},
    RunState.REPORTED: set(),
}


@dataclass
class StateTransition:
    """Represents a state change of a run.

    Attributes:
        previous_state: State before transition.
        new_state: State after transition.
        timestamp: When the transition happened (UTC).
    """

    previous_state: RunState
    new_state: RunState
    timestamp: datetime


def determine_state_transition(
    current: RunState, new_state: RunState
) -> StateTransition:
    """Validate and build a transition between two run states.

    Args:
        current: Current run state.
        new_state: Requested next state.

    Returns:
        StateTransition: The transition event.

    Raises:
        ValueError: If the transition is not allowed by the state machine.
    """
    if new_state not in ALLOWED_TRANSITIONS[current]:
        raise ValueError(
            f"Illegal run state transition: {current.value} -> {new_state.value}"
        )

    return StateTransition(
        previous_state=current,
        new_state=new_state,
        timestamp=datetime.now(timezone.utc),
    )
