# exam_builder/application/exams/publish_exam.py
from typing import Dict, Optional
from exam_builder.domain.invariants.exam import assert_exam
from exam_builder.domain.lifecycle.exam import assert_exam_transition
from exam_builder.utils.audit import log_action
from exam_builder.utils.transaction import transactional
from ._lookup import get_exam


def _transition(exam_id: str, actor_id: Optional[str], to_status: str) -> Dict[str, str]:
    exam = get_exam(exam_id)

    with transactional():
        # Lifecycle transition enforcement
        assert_exam_transition(from_status=exam.status, to_status=to_status)

        exam.status = to_status

        # Publish-specific invariants
        assert_exam(exam, publish=to_status == "published")

        log_action(
            action="exam.publish" if to_status == "published" else "exam.unpublish",
            entity_type="exam",
            entity_id=exam.id,
            actor_id=actor_id,
            payload={"questions": len(exam.questions)},
        )

    return {"exam_id": exam.id, "status": exam.status}


def publish_exam(*, exam_id: str, actor_id: Optional[str]) -> Dict[str, str]:
    """
    Make an exam available to students.

    Responsibilities:
    - transactional boundary
    - lifecycle + invariant enforcement
    - audit logging
    """
    return _transition(exam_id, actor_id, "published")


def unpublish_exam(*, exam_id: str, actor_id: Optional[str]) -> Dict[str, str]:
    return _transition(exam_id, actor_id, "draft")
