"""State machine constants and transition logic for the pipeline orchestrator.

Two small machines live here: the project lifecycle (created processing,
written once to a terminal status) and a single video render job as
observed through status polling.
"""

from clipforge.errors import InvalidTransition

# Project states
PROCESSING = "processing"
COMPLETED = "completed"
FAILED = "failed"

TERMINAL_STATES = {COMPLETED, FAILED}

# Allowed project transitions
PROJECT_TRANSITIONS = {
    PROCESSING: {COMPLETED, FAILED},
    COMPLETED: set(),
    FAILED: set(),
}

# Render job states, as normalized from the assembler's raw status strings
RENDER_SUCCEEDED = "succeeded"
RENDER_FAILED = "failed"


def is_terminal(status: str) -> bool:
    return status in TERMINAL_STATES


def check_transition(current: str, new: str) -> None:
    """Raise InvalidTransition unless current -> new is allowed.

    Writing the same status again is not a no-op: a terminal status is
    written exactly once.

    Args:
        current: Status stored on the project
        new: Requested status
    """
    if new not in PROJECT_TRANSITIONS:
        raise InvalidTransition(f"Unknown project status: {new}")
    allowed = PROJECT_TRANSITIONS.get(current, set())
    if new not in allowed:
        raise InvalidTransition(f"Cannot move project from {current} to {new}")
