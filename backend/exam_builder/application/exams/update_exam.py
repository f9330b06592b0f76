from typing import Any, Dict, Optional
from exam_builder.models.exam import Exam
from exam_builder.utils.audit import log_action
from exam_builder.utils.transaction import transactional
from ._lookup import get_exam


# Wire name -> column
ALLOWED_UPDATE_FIELDS = {
    "title": "title",
    "description": "description",
    "timeLimit": "time_limit",
    "passingScore": "passing_score",
}


def update_exam(
    *,
    exam_id: str,
    actor_id: Optional[str],
    data: Dict[str, Any],
) -> Exam:
    """
    Update exam metadata. Questions are replaced through save_exam_questions.

    Design rules:
    - Only whitelisted fields are mutable
    - No silent no-op updates
    """

    exam = get_exam(exam_id)

    if "title" in data and not (data["title"] or "").strip():
        raise ValueError("Title cannot be empty")

    changed_fields: list[str] = []

    with transactional():
        for field, column in ALLOWED_UPDATE_FIELDS.items():
            if field in data and getattr(exam, column) != data[field]:
                setattr(exam, column, data[field])
                changed_fields.append(field)

        if not changed_fields:
            # Explicitly fail instead of silently succeeding
            raise ValueError("No valid fields provided for update")

        log_action(
            action="exam.update",
            entity_type="exam",
            entity_id=exam.id,
            actor_id=actor_id,
            payload={
                "fields": changed_fields,
            },
        )

    return exam
