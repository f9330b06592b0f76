from typing import Set

SAVED = "saved"
SAVING = "saving"
ERROR = "error"

# A failed save is not retried on its own; only a new attempt leaves `error`
ALLOWED_SAVE_TRANSITIONS: dict[str, Set[str]] = {
    SAVED: {SAVING},
    SAVING: {SAVED, ERROR},
    ERROR: {SAVING},
}

def assert_save_transition(*, from_status: str, to_status: str) -> None:
    allowed = ALLOWED_SAVE_TRANSITIONS.get(from_status, set())

    if to_status not in allowed:
        raise ValueError(
            f"Illegal save status transition: {from_status} → {to_status}"
        )
