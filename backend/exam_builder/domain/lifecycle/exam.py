from typing import Set

# Explicit allowed state transitions
ALLOWED_EXAM_TRANSITIONS: dict[str, Set[str]] = {
    "draft": {"published"},
    "published": {"draft"},
}

def assert_exam_transition(*, from_status: str, to_status: str) -> None:
    """
    Guards exam lifecycle transitions.
    Single source of truth for status changes.
    """
    allowed = ALLOWED_EXAM_TRANSITIONS.get(from_status, set())

    if to_status not in allowed:
        raise ValueError(
            f"Illegal exam transition: {from_status} → {to_status}"
        )
