"""
Block variant registry.

Single source of truth for the closed set of block kinds the exam builder
knows about, which of them are scored, and what an empty instance of each
looks like when an author drops it on the canvas.
"""
import copy
import uuid
from typing import Any, Dict

from exam_builder.domain.invariants.exceptions import InvariantViolation

BLOCK_GROUP = "block_group"

INFORMATIVE_TYPES = frozenset({
    "audio",
    "image",
    "video",
    "text",
    "title",
    "recording",
})

INTERACTIVE_TYPES = frozenset({
    "multiple_choice",
    "true_false",
    "short_answer",
    "essay",
    "fill_blanks",
    "match",
    "ordering",
    "drag_drop",
    "multi_select",
    BLOCK_GROUP,
})

BLOCK_TYPES = INFORMATIVE_TYPES | INTERACTIVE_TYPES

# Fields shared by every block, on top of id/type
COMMON_FIELDS: Dict[str, Any] = {
    "order": 0,
    "points": 0,
    "explanation": None,
    "required": True,
    "partialCredit": False,
}

# Default points for a freshly inserted interactive block
DEFAULT_POINTS = 1

_TEMPLATES: Dict[str, Dict[str, Any]] = {
    "multiple_choice": {
        "question": "",
        "options": [],
        "correctOptionId": "",
        "multipleChoiceItems": [],
    },
    "true_false": {
        "title": "",
        "items": [],
    },
    "short_answer": {
        "context": "",
        "items": [],
        "caseSensitive": False,
    },
    "essay": {
        "prompt": "",
        "minWords": None,
        "maxWords": None,
        "aiGrading": False,
    },
    "fill_blanks": {
        "title": "",
        "items": [],
    },
    "match": {
        "title": "",
        "pairs": [],
    },
    "ordering": {
        "title": "",
        "instruction": "",
        "items": [],
    },
    "drag_drop": {
        "title": "",
        "instruction": "",
        "categories": [],
        "items": [],
    },
    "multi_select": {
        "title": "",
        "instruction": "",
        "correctOptions": [],
        "incorrectOptions": [],
    },
    "audio": {
        "title": "",
        "url": "",
        "maxReplays": 3,
    },
    "image": {
        "url": "",
        "alt": "",
        "caption": "",
    },
    "video": {
        "url": "",
        "title": "",
    },
    "text": {
        "content": "",
    },
    "recording": {
        "instruction": "",
        "timeLimit": None,
        "aiGrading": False,
    },
    "title": {
        "title": "",
    },
    BLOCK_GROUP: {
        "children": [],
    },
}


def is_informative(block_type: str) -> bool:
    return block_type in INFORMATIVE_TYPES


def is_interactive(block_type: str) -> bool:
    return block_type in INTERACTIVE_TYPES


def coerce_points(value: Any) -> int:
    """Stored points as a non-negative int; anything unreadable counts as 0."""
    if isinstance(value, bool):
        return 0

    try:
        points = int(value)
    except (TypeError, ValueError, OverflowError):
        return 0

    return max(points, 0)


def assert_known_type(block_type: str) -> None:
    if block_type not in BLOCK_TYPES:
        raise InvariantViolation(f"Unknown block type: {block_type!r}")


def template(block_type: str) -> Dict[str, Any]:
    """
    Empty instance of a kind, without an id.

    This is what the template catalog hands to the editor; the caller owns
    the returned dict.
    """
    assert_known_type(block_type)

    block: Dict[str, Any] = {"type": block_type}
    block.update(copy.deepcopy(COMMON_FIELDS))
    block.update(copy.deepcopy(_TEMPLATES[block_type]))

    if is_interactive(block_type) and block_type != BLOCK_GROUP:
        block["points"] = DEFAULT_POINTS

    return block


def new_block(block_type: str, **fields: Any) -> Dict[str, Any]:
    """Create a ready-to-insert block, overriding template fields with `fields`."""
    block = template(block_type)
    block["id"] = str(uuid.uuid4())
    block.update(fields)

    if is_informative(block_type):
        block["points"] = 0

    return block


def catalog() -> Dict[str, Dict[str, Any]]:
    """Template catalog keyed by block type."""
    return {
        block_type: {
            "interactive": is_interactive(block_type),
            "template": template(block_type),
        }
        for block_type in sorted(BLOCK_TYPES)
    }
