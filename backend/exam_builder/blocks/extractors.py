"""
Block -> question row extractors.

Each block degrades to three row fields: the prompt string, the options
payload and the correct answer. Kinds the question table has no type for are
stored as ESSAY with `originalBlockType` and the block's own fields packed
into the options object, which is what lets the decoders rebuild them.
"""
import json
import re
from typing import Any, Callable, Dict, List, Optional, Union

from exam_builder.blocks.registry import is_informative

MULTIPLE_CHOICE = "MULTIPLE_CHOICE"
TRUE_FALSE = "TRUE_FALSE"
SHORT_ANSWER = "SHORT_ANSWER"
ESSAY = "ESSAY"
FILL_BLANK = "FILL_BLANK"
MATCHING = "MATCHING"
ORDERING = "ORDERING"
DRAG_DROP = "DRAG_DROP"

QUESTION_TYPES = (
    MULTIPLE_CHOICE,
    TRUE_FALSE,
    SHORT_ANSWER,
    ESSAY,
    FILL_BLANK,
    MATCHING,
    ORDERING,
    DRAG_DROP,
)

NATIVE_QUESTION_TYPES = {
    "multiple_choice": MULTIPLE_CHOICE,
    "true_false": TRUE_FALSE,
    "short_answer": SHORT_ANSWER,
    "essay": ESSAY,
    "fill_blanks": FILL_BLANK,
    "match": MATCHING,
    "ordering": ORDERING,
    "drag_drop": DRAG_DROP,
}

ORIGINAL_BLOCK_TYPE = "originalBlockType"
GROUP_ID = "groupId"

# Stored in place of an empty joined answer for multi-step multiple choice.
# TODO: replace with an empty list once the exam-taking side accepts it.
MULTI_STEP_SENTINEL = "multi-step"

TRUE_LABEL = "Verdadero"
FALSE_LABEL = "Falso"

BLANK_PATTERN = re.compile(r"\[([^\]]+)\]")

Options = Union[Dict[str, Any], List[str], None]
CorrectAnswer = Union[str, List[str], None]


def is_multi_step(block: Dict[str, Any]) -> bool:
    return block.get("type") == "multiple_choice" and bool(block.get("multipleChoiceItems"))


def question_type(block: Dict[str, Any]) -> str:
    if is_multi_step(block):
        return ESSAY
    return NATIVE_QUESTION_TYPES.get(block.get("type"), ESSAY)


def _first(items: Optional[list]) -> Dict[str, Any]:
    return items[0] if items else {}


def _pack(value: Any) -> str:
    # Same byte layout as JSON.stringify on the editor side
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


# ------------------------
# Question text
# ------------------------

_QUESTION_EXTRACTORS: Dict[str, Callable[[Dict[str, Any]], Any]] = {
    "multiple_choice": lambda b: b.get("question"),
    "true_false": lambda b: _first(b.get("items")).get("statement") or b.get("title"),
    "short_answer": lambda b: _first(b.get("items")).get("question") or b.get("context"),
    "essay": lambda b: b.get("prompt"),
    "fill_blanks": lambda b: _first(b.get("items")).get("content") or b.get("title"),
    "match": lambda b: b.get("title"),
    "ordering": lambda b: b.get("instruction") or b.get("title"),
    "drag_drop": lambda b: b.get("instruction") or b.get("title"),
    "text": lambda b: b.get("content"),
    "image": lambda b: b.get("alt") or b.get("caption"),
    "audio": lambda b: b.get("title"),
    "video": lambda b: b.get("title"),
    "recording": lambda b: b.get("instruction"),
    "multi_select": lambda b: b.get("instruction") or b.get("title"),
    "title": lambda b: b.get("title"),
}


def extract_question(block: Dict[str, Any]) -> str:
    extractor = _QUESTION_EXTRACTORS.get(block.get("type"))
    if extractor is None:
        return ""
    return extractor(block) or ""


# ------------------------
# Options payload
# ------------------------

def _tagged(block_type: str, **fields: Any) -> Dict[str, Any]:
    return {ORIGINAL_BLOCK_TYPE: block_type, **fields}


def _multiple_choice_options(block):
    if is_multi_step(block):
        return _tagged(
            "multiple_choice",
            multipleChoiceItems=block.get("multipleChoiceItems") or [],
        )
    return [opt.get("text", "") for opt in block.get("options") or []]


def _essay_options(block):
    # Plain essays stay untagged so legacy readers treat them as before
    if block.get("aiGrading"):
        return {"aiGrading": True}
    return None


def _drag_drop_options(block):
    return {
        "title": block.get("title") or "",
        "instruction": block.get("instruction") or "",
        "categories": block.get("categories") or [],
        "dragItems": block.get("items") or [],
    }


_OPTIONS_EXTRACTORS: Dict[str, Callable[[Dict[str, Any]], Options]] = {
    "multiple_choice": _multiple_choice_options,
    "true_false": lambda b: {
        "title": b.get("title") or "",
        "items": b.get("items") or [],
    },
    "short_answer": lambda b: {
        "context": b.get("context") or "",
        "items": b.get("items") or [],
    },
    "essay": _essay_options,
    "fill_blanks": lambda b: {
        "title": b.get("title") or "",
        "items": b.get("items") or [],
    },
    "match": lambda b: {"pairs": b.get("pairs") or []},
    "ordering": lambda b: {
        "title": b.get("title") or "",
        "instruction": b.get("instruction") or "",
        "items": b.get("items") or [],
    },
    "drag_drop": _drag_drop_options,
    "audio": lambda b: _tagged("audio", url=b.get("url") or "", maxReplays=b.get("maxReplays")),
    "image": lambda b: _tagged(
        "image",
        url=b.get("url") or "",
        alt=b.get("alt") or "",
        caption=b.get("caption") or "",
    ),
    "video": lambda b: _tagged("video", url=b.get("url") or "", title=b.get("title") or ""),
    "text": lambda b: _tagged("text", content=b.get("content") or ""),
    "recording": lambda b: _tagged(
        "recording",
        instruction=b.get("instruction") or "",
        timeLimit=b.get("timeLimit"),
        aiGrading=bool(b.get("aiGrading")),
    ),
    "multi_select": lambda b: _tagged(
        "multi_select",
        title=b.get("title") or "",
        instruction=b.get("instruction") or "",
        correctOptions=b.get("correctOptions") or [],
        incorrectOptions=b.get("incorrectOptions") or [],
    ),
    "title": lambda b: _tagged("title", title=b.get("title") or ""),
}


def extract_options(block: Dict[str, Any], group_id: Optional[str] = None) -> Options:
    """
    Options payload for the row; `group_id` is merged in when the block was
    flattened out of a group.
    """
    extractor = _OPTIONS_EXTRACTORS.get(block.get("type"))
    options = extractor(block) if extractor else None

    if not group_id:
        return options

    if options is None:
        return {GROUP_ID: group_id}

    if isinstance(options, list):
        return {"options": options, GROUP_ID: group_id}

    return {**options, GROUP_ID: group_id}


# ------------------------
# Correct answer
# ------------------------

def _multiple_choice_answer(block):
    if is_multi_step(block):
        joined = ",".join(
            item.get("correctOptionId")
            for item in block.get("multipleChoiceItems") or []
            if item.get("correctOptionId")
        )
        return joined or MULTI_STEP_SENTINEL

    for opt in block.get("options") or []:
        if opt.get("id") == block.get("correctOptionId"):
            return opt.get("text", "")
    return ""


def _true_false_answer(block):
    return TRUE_LABEL if _first(block.get("items")).get("correctAnswer") else FALSE_LABEL


def _fill_blanks_answer(block):
    tokens: List[str] = []
    for item in block.get("items") or []:
        tokens.extend(BLANK_PATTERN.findall(item.get("content") or ""))
    return tokens or ""


def _ordering_answer(block):
    items = sorted(block.get("items") or [], key=lambda item: item.get("correctPosition", 0))
    return [item.get("text", "") for item in items]


_ANSWER_EXTRACTORS: Dict[str, Callable[[Dict[str, Any]], CorrectAnswer]] = {
    "multiple_choice": _multiple_choice_answer,
    "true_false": _true_false_answer,
    "short_answer": lambda b: _first(b.get("items")).get("correctAnswer") or "",
    "essay": lambda b: None,
    "fill_blanks": _fill_blanks_answer,
    "match": lambda b: _pack([
        {"left": p.get("left", ""), "right": p.get("right", "")}
        for p in b.get("pairs") or []
    ]),
    "ordering": _ordering_answer,
    "drag_drop": lambda b: _pack([
        {"item": i.get("text", ""), "category": i.get("correctCategoryId", "")}
        for i in b.get("items") or []
    ]),
    "multi_select": lambda b: [opt.get("text", "") for opt in b.get("correctOptions") or []],
}


def extract_correct_answer(block: Dict[str, Any]) -> CorrectAnswer:
    if is_informative(block.get("type")):
        return None

    extractor = _ANSWER_EXTRACTORS.get(block.get("type"))
    return extractor(block) if extractor else None
