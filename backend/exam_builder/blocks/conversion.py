"""
Block list <-> question rows.

`blocks_to_rows` is what every save goes through (flatten, then extract);
`rows_to_blocks` is what every load goes through (decode, then regroup).
"""
from typing import Any, Dict, Iterable, List, Mapping

from exam_builder.blocks.decoders import decode_row_with_group
from exam_builder.blocks.extractors import (
    extract_correct_answer,
    extract_options,
    extract_question,
    question_type,
)
from exam_builder.blocks.grouping import FlatBlock, flatten, regroup
from exam_builder.blocks.registry import coerce_points, is_informative, is_interactive
from exam_builder.config import BaseConfig


def block_to_row(flat: FlatBlock, order: int, difficulty: str = BaseConfig.DEFAULT_QUESTION_DIFFICULTY) -> Dict[str, Any]:
    block = flat.block
    block_type = block.get("type")

    row: Dict[str, Any] = {
        "id": block.get("id"),
        "type": question_type(block),
        "question": extract_question(block),
        "options": extract_options(block, flat.group_id),
        "correctAnswer": extract_correct_answer(block),
        "explanation": block.get("explanation") or "",
        "points": 0 if is_informative(block_type) else coerce_points(block.get("points")),
        "order": order,
        "difficulty": difficulty,
        "tags": [],
        "caseSensitive": bool(block.get("caseSensitive")),
        "partialCredit": bool(block.get("partialCredit")),
    }

    if block_type == "essay":
        row["minLength"] = block.get("minWords")
        row["maxLength"] = block.get("maxWords")
    elif block_type == "audio":
        # Legacy exam-taking views read the audio columns directly
        row["audioUrl"] = block.get("url") or None
        row["maxAudioPlays"] = block.get("maxReplays")

    return row


def blocks_to_rows(blocks: Iterable[Dict[str, Any]], difficulty: str = BaseConfig.DEFAULT_QUESTION_DIFFICULTY) -> List[Dict[str, Any]]:
    return [
        block_to_row(flat, order, difficulty=difficulty)
        for order, flat in enumerate(flatten(blocks))
    ]


def rows_to_blocks(rows: Iterable[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    rows = list(rows)

    def sort_key(indexed):
        index, row = indexed
        order = row.get("order") if isinstance(row, Mapping) else None
        return (order if isinstance(order, int) else index, index)

    ordered = [row for _, row in sorted(enumerate(rows), key=sort_key)]
    return regroup(decode_row_with_group(row) for row in ordered)


def total_points(blocks: Iterable[Dict[str, Any]]) -> int:
    """
    Score of a top-level block list.

    A group's own points already sum its children, and grouped children are
    not present at top level, so nothing is counted twice.
    """
    return sum(
        coerce_points(block.get("points"))
        for block in blocks
        if is_interactive(block.get("type"))
    )
