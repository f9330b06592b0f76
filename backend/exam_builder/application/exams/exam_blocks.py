from typing import Any, Dict, List, Optional
from flask import current_app
from exam_builder.blocks.registry import BLOCK_GROUP
from exam_builder.blocks.conversion import blocks_to_rows, rows_to_blocks, total_points
from exam_builder.domain.invariants.block import assert_blocks
from exam_builder.normalizers.question import normalize_question
from exam_builder.utils.order import renumber
from .save_exam_questions import save_exam_questions
from ._lookup import get_exam


def load_exam_rows(*, exam_id: str) -> List[Dict[str, Any]]:
    exam = get_exam(exam_id)
    return [normalize_question(q) for q in sorted(exam.questions, key=lambda q: q.order)]


def load_exam_blocks(*, exam_id: str) -> Dict[str, Any]:
    """Decode the stored rows into the editor's block tree."""
    blocks = rows_to_blocks(load_exam_rows(exam_id=exam_id))

    return {
        "examId": exam_id,
        "blocks": blocks,
        "totalPoints": total_points(blocks),
    }


def save_exam_blocks(
    *,
    exam_id: str,
    blocks: List[Dict[str, Any]],
    actor_id: Optional[str] = None,
) -> Dict[str, Any]:
    """Convert an edited block tree to rows and replace the exam's questions with them."""
    # Clients may send blocks in display order without order fields
    renumber(blocks)
    for block in blocks:
        if block.get("type") == BLOCK_GROUP:
            renumber(block.get("children") or [])
    assert_blocks(blocks)

    rows = blocks_to_rows(
        blocks,
        difficulty=current_app.config["DEFAULT_QUESTION_DIFFICULTY"],
    )
    save_exam_questions(exam_id=exam_id, rows=rows, actor_id=actor_id)

    return {
        "examId": exam_id,
        "count": len(rows),
        "totalPoints": total_points(blocks),
    }
