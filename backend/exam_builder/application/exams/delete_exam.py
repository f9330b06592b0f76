from typing import Optional
from exam_builder.utils.audit import log_action
from exam_builder.utils.transaction import transactional
from ._lookup import get_exam


def delete_exam(
    *,
    exam_id: str,
    actor_id: Optional[str],
) -> None:
    """
    Soft-delete an exam. Its questions stay in place so attempts keep
    resolving them.
    """

    exam = get_exam(exam_id)

    with transactional():
        exam.soft_delete()

        log_action(
            action="exam.delete",
            entity_type="exam",
            entity_id=exam.id,
            actor_id=actor_id,
            payload={},
        )
