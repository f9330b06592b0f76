from typing import Any, Dict, List

from exam_builder.blocks.extractors import is_multi_step
from exam_builder.blocks.registry import BLOCK_GROUP, assert_known_type, is_informative
from .exceptions import InvariantViolation

def assert_block_order(blocks):
    orders = [block.get("order") for block in blocks]
    if not orders:
        return

    expected = list(range(len(orders)))
    if orders != expected:
        raise InvariantViolation(
            f"Block orders are not consecutive starting from 0: {orders}"
        )

def assert_block_points(block):
    points = block.get("points") or 0
    if not isinstance(points, int) or points < 0:
        raise InvariantViolation(
            f"Block {block.get('id')} has invalid points: {points!r}"
        )

    if is_informative(block.get("type")) and points:
        raise InvariantViolation(
            f"{block.get('type')} block must not carry points."
        )

def assert_block_group(group):
    children = group.get("children") or []

    for child in children:
        if child.get("type") == BLOCK_GROUP:
            raise InvariantViolation("Block groups cannot be nested.")

    assert_block_order(children)

    expected = sum(child.get("points") or 0 for child in children)
    if (group.get("points") or 0) != expected:
        raise InvariantViolation(
            f"Group {group.get('id')} points {group.get('points')} "
            f"do not match the sum of its children ({expected})."
        )

def assert_block(block):
    assert_known_type(block.get("type"))
    assert_block_points(block)

    if block.get("type") == BLOCK_GROUP:
        assert_block_group(block)
        for child in block.get("children") or []:
            assert_block(child)

def assert_blocks(blocks):
    assert_block_order(blocks)

    for block in blocks:
        assert_block(block)


# ------------------------
# Authoring validation (non-blocking)
# ------------------------

def _missing(value) -> bool:
    return not (value or "").strip() if isinstance(value, str) or value is None else False


def collect_block_errors(block: Dict[str, Any]) -> List[str]:
    """
    Human readable problems with a block's content.

    Unlike the assert_* helpers these never raise; the editor shows them next
    to the block and keeps going.
    """
    errors: List[str] = []
    block_type = block.get("type")

    if block_type == "multiple_choice":
        if is_multi_step(block):
            for item in block["multipleChoiceItems"]:
                if not item.get("correctOptionId"):
                    errors.append(f"Select the correct option for '{item.get('question') or item.get('id')}'")
        else:
            if _missing(block.get("question")):
                errors.append("Question text is required")
            if len(block.get("options") or []) < 2:
                errors.append("At least two options are required")
            option_ids = {opt.get("id") for opt in block.get("options") or []}
            if block.get("correctOptionId") not in option_ids:
                errors.append("Select the correct option")

    elif block_type == "true_false":
        if not block.get("items") or any(_missing(i.get("statement")) for i in block["items"]):
            errors.append("Every statement needs text")

    elif block_type == "short_answer":
        if not block.get("items"):
            errors.append("Add at least one question")
        elif any(_missing(i.get("correctAnswer")) for i in block["items"]):
            errors.append("Every question needs a correct answer")

    elif block_type == "essay":
        if _missing(block.get("prompt")):
            errors.append("Prompt is required")
        min_words, max_words = block.get("minWords"), block.get("maxWords")
        if min_words and max_words and min_words > max_words:
            errors.append("Minimum words cannot exceed maximum words")

    elif block_type == "fill_blanks":
        if not any("[" in (i.get("content") or "") for i in block.get("items") or []):
            errors.append("Mark at least one blank with [brackets]")

    elif block_type == "match":
        if len(block.get("pairs") or []) < 2:
            errors.append("At least two pairs are required")

    elif block_type == "ordering":
        if len(block.get("items") or []) < 2:
            errors.append("At least two items are required")

    elif block_type == "drag_drop":
        category_ids = {c.get("id") for c in block.get("categories") or []}
        if not category_ids:
            errors.append("Add at least one category")
        if any(i.get("correctCategoryId") not in category_ids for i in block.get("items") or []):
            errors.append("Every item needs a valid category")

    elif block_type == "multi_select":
        if not block.get("correctOptions"):
            errors.append("Add at least one correct option")

    elif block_type in ("audio", "image", "video"):
        if _missing(block.get("url")):
            errors.append("Media URL is required")

    elif block_type == "text":
        if _missing(block.get("content")):
            errors.append("Content is required")

    elif block_type == "title":
        if _missing(block.get("title")):
            errors.append("Title is required")

    elif block_type == "recording":
        if _missing(block.get("instruction")):
            errors.append("Instruction is required")

    return errors
