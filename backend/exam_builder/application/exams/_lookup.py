from exam_builder.models.exam import Exam


def get_exam(exam_id: str) -> Exam:
    """Live (not soft-deleted) exam or a 404."""
    return (
        Exam.query
        .filter_by(id=exam_id, deleted_at=None)
        .first_or_404(description="Exam not found")
    )
