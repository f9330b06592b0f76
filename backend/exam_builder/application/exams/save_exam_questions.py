import uuid
from typing import Any, Dict, List, Optional
from flask import current_app
from exam_builder.extensions import db
from exam_builder.models.exam import Exam
from exam_builder.models.exam_question import ExamQuestion
from exam_builder.domain.invariants.exam import assert_question_rows
from exam_builder.utils.audit import log_action
from exam_builder.utils.transaction import transactional
from ._lookup import get_exam


def _reusable_ids(exam: Exam, rows: List[Dict[str, Any]]) -> set:
    """Row ids that can be kept as primary keys (not owned by another exam)."""
    wanted = {row.get("id") for row in rows if row.get("id")}
    if not wanted:
        return set()

    foreign = {
        q.id for q in
        ExamQuestion.query.filter(
            ExamQuestion.id.in_(wanted),
            ExamQuestion.exam_id != exam.id,
        ).all()
    }
    return {i for i in wanted - foreign if isinstance(i, str) and len(i) <= 36}


def _build_question(exam: Exam, row: Dict[str, Any], question_id: str) -> ExamQuestion:
    question = ExamQuestion()
    question.id = question_id
    question.exam_id = exam.id
    question.type = row["type"]
    question.question = row.get("question") or ""
    question.options = row.get("options")
    # ESSAY rows never carry a gradable answer
    question.correct_answer = None if row["type"] == "ESSAY" else row.get("correctAnswer")
    question.explanation = row.get("explanation") or ""
    question.points = row.get("points") or 0
    question.order = row["order"]
    question.difficulty = row.get("difficulty") or current_app.config["DEFAULT_QUESTION_DIFFICULTY"]
    question.tags = row.get("tags") or []
    question.case_sensitive = bool(row.get("caseSensitive"))
    question.partial_credit = bool(row.get("partialCredit"))
    question.min_length = row.get("minLength")
    question.max_length = row.get("maxLength")
    question.audio_url = row.get("audioUrl")
    question.max_audio_plays = row.get("maxAudioPlays")
    return question


def save_exam_questions(
    *,
    exam_id: str,
    rows: List[Dict[str, Any]],
    actor_id: Optional[str] = None,
) -> List[ExamQuestion]:
    """
    Replace an exam's whole question set with `rows`.

    The replacement is all-or-nothing: old rows are deleted and new ones
    inserted inside one transaction. There is no version check, so the last
    writer wins.
    """
    assert_question_rows(rows)

    exam = get_exam(exam_id)
    reusable = _reusable_ids(exam, rows)

    with transactional():
        previous = len(exam.questions)

        # Orphans are deleted on flush, which frees their ids for reuse
        exam.questions = []
        db.session.flush()

        seen = set()
        questions = []
        for row in sorted(rows, key=lambda r: r["order"]):
            question_id = row.get("id")
            if question_id not in reusable or question_id in seen:
                question_id = str(uuid.uuid4())
            seen.add(question_id)
            questions.append(_build_question(exam, row, question_id))

        exam.questions = questions
        exam.points = sum(q.points for q in questions)

        log_action(
            action="exam.questions.replace",
            entity_type="exam",
            entity_id=exam.id,
            actor_id=actor_id,
            payload={
                "previous": previous,
                "count": len(questions),
                "points": exam.points,
            },
        )

    current_app.logger.info(
        "Replaced %d questions on exam %s (%d points)", len(questions), exam.id, exam.points
    )
    return questions
