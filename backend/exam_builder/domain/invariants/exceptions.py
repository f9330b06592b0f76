class InvariantViolation(Exception):
    """Raised when a domain rule on exams, blocks or rows is broken."""


class GroupingError(InvariantViolation):
    """
    Raised when a group/ungroup request cannot be honoured.

    The message is user-facing and shown as-is by the editor.
    """
