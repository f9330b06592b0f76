from typing import Any, Dict, Optional
from exam_builder.extensions import db
from exam_builder.models.exam import Exam
from exam_builder.utils.audit import log_action
from exam_builder.utils.transaction import transactional


def create_exam(
    *,
    actor_id: Optional[str],
    data: Dict[str, Any],
) -> Exam:
    """
    Create a new exam in DRAFT state with no questions.

    Edge cases handled:
    - Missing or blank title
    """

    title: str | None = (data.get("title") or "").strip()

    if not title:
        raise ValueError("Title is required")

    exam = Exam()
    exam.title = title
    exam.description = data.get("description")
    exam.time_limit = data.get("timeLimit")
    exam.passing_score = data.get("passingScore")
    exam.status = "draft"
    exam.points = 0
    exam.created_by = actor_id

    with transactional():
        db.session.add(exam)
        db.session.flush()  # ensures exam.id is available

        log_action(
            action="exam.create",
            entity_type="exam",
            entity_id=exam.id,
            actor_id=actor_id,
            payload={
                "title": exam.title,
                "status": exam.status,
            },
        )

    return exam
