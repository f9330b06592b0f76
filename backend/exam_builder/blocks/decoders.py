"""
Question row -> block decoders.

Decoding is total: whatever a stored row looks like, the caller gets a block
back. Unknown kinds and unknown `originalBlockType` tags degrade to a `text`
block holding the raw question so one corrupt row cannot abort a load.
"""
import json
import logging
import uuid
from typing import Any, Callable, Dict, Mapping, Optional

from exam_builder.blocks import extractors as ex
from exam_builder.blocks.grouping import FlatBlock
from exam_builder.blocks.registry import coerce_points, is_informative, template

logger = logging.getLogger(__name__)

DEFAULT_MAX_REPLAYS = 3


def parse_options(raw: Any):
    """Options as list/dict, or None when absent or malformed."""
    if isinstance(raw, (list, dict)):
        return raw

    if isinstance(raw, str) and raw.strip():
        try:
            parsed = json.loads(raw)
        except ValueError:
            logger.warning("Ignoring malformed options payload")
            return None
        if isinstance(parsed, (list, dict)):
            return parsed

    return None


def _object(options) -> Dict[str, Any]:
    return options if isinstance(options, dict) else {}


def _with_ids(items, prefix: str) -> list:
    """Copy sub-items, filling in positional ids for legacy rows that lack them."""
    result = []
    for index, item in enumerate(items or []):
        if not isinstance(item, dict):
            continue
        item = dict(item)
        item.setdefault("id", f"{prefix}{index}")
        result.append(item)
    return result


def _base(block_type: str, row: Mapping[str, Any]) -> Dict[str, Any]:
    block = template(block_type)
    block["id"] = row.get("id") or str(uuid.uuid4())
    block["order"] = row.get("order") or 0
    block["points"] = 0 if is_informative(block_type) else coerce_points(row.get("points"))
    block["explanation"] = row.get("explanation") or None
    block["partialCredit"] = bool(row.get("partialCredit"))
    return block


def _text(row, options=None) -> Dict[str, Any]:
    block = _base("text", row)
    block["content"] = _object(options).get("content") or row.get("question") or ""
    return block


# ------------------------
# Native kinds
# ------------------------

def _multi_step(row, items) -> Dict[str, Any]:
    block = _base("multiple_choice", row)
    block["question"] = row.get("question") or ""
    # Sub-items that are not objects cannot be edited or extracted
    block["multipleChoiceItems"] = [
        dict(item) for item in (items if isinstance(items, list) else []) if isinstance(item, dict)
    ]
    return block


def _decode_multiple_choice(row, options):
    if isinstance(options, dict):
        if options.get("multipleChoiceItems"):
            return _multi_step(row, options["multipleChoiceItems"])
        # Grouped rows wrap the plain option list
        options = options.get("options")

    texts = [str(text) for text in options] if isinstance(options, list) else []

    block = _base("multiple_choice", row)
    block["question"] = row.get("question") or ""
    block["options"] = [{"id": f"opt{i}", "text": text} for i, text in enumerate(texts)]

    correct = row.get("correctAnswer")
    if isinstance(correct, list):
        correct = correct[0] if correct else None
    block["correctOptionId"] = f"opt{texts.index(correct)}" if correct in texts else ""
    return block


def _decode_true_false(row, options):
    block = _base("true_false", row)
    opts = _object(options)

    if "items" in opts:
        block["title"] = opts.get("title") or ""
        block["items"] = _with_ids(opts["items"], "item")
        return block

    block["items"] = [{
        "id": "item1",
        "statement": row.get("question") or "",
        "correctAnswer": row.get("correctAnswer") == ex.TRUE_LABEL,
    }]
    return block


def _decode_short_answer(row, options):
    block = _base("short_answer", row)
    block["caseSensitive"] = bool(row.get("caseSensitive"))
    opts = _object(options)

    if "items" in opts:
        block["context"] = opts.get("context") or ""
        block["items"] = _with_ids(opts["items"], "item")
        return block

    correct = row.get("correctAnswer")
    if isinstance(correct, list):
        correct = correct[0] if correct else ""

    block["items"] = [{
        "id": "item1",
        "question": row.get("question") or "",
        "correctAnswer": correct or "",
    }]
    return block


def _decode_fill_blank(row, options):
    block = _base("fill_blanks", row)
    opts = _object(options)

    if "items" in opts:
        block["title"] = opts.get("title") or ""
        block["items"] = _with_ids(opts["items"], "item")
        return block

    block["items"] = [{
        "id": "item1",
        "content": opts.get("content") or row.get("question") or "",
    }]
    return block


def _decode_matching(row, options):
    block = _base("match", row)
    block["title"] = row.get("question") or ""
    block["pairs"] = _with_ids(_object(options).get("pairs"), "pair")
    return block


def _decode_ordering(row, options):
    block = _base("ordering", row)
    opts = _object(options)

    if "instruction" in opts:
        block["title"] = opts.get("title") or ""
        block["instruction"] = opts.get("instruction") or ""
    else:
        block["title"] = row.get("question") or ""

    block["items"] = _with_ids(opts.get("items"), "item")
    return block


def _decode_drag_drop(row, options):
    block = _base("drag_drop", row)
    opts = _object(options)

    if "instruction" in opts:
        block["title"] = opts.get("title") or ""
        block["instruction"] = opts.get("instruction") or ""
    else:
        block["title"] = row.get("question") or ""

    block["categories"] = _with_ids(opts.get("categories"), "cat")
    block["items"] = _with_ids(opts.get("dragItems"), "item")
    return block


# ------------------------
# ESSAY and the kinds overloaded onto it
# ------------------------

def _decode_essay_block(row, opts):
    block = _base("essay", row)
    block["prompt"] = row.get("question") or ""
    block["minWords"] = row.get("minLength") or None
    block["maxWords"] = row.get("maxLength") or None
    block["aiGrading"] = bool(opts.get("aiGrading"))
    return block


def _decode_audio(row, opts):
    block = _base("audio", row)
    block["title"] = row.get("question") or ""
    block["url"] = opts.get("url") or row.get("audioUrl") or ""
    if "maxReplays" in opts:
        block["maxReplays"] = opts["maxReplays"]
    else:
        block["maxReplays"] = row.get("maxAudioPlays") or DEFAULT_MAX_REPLAYS
    return block


def _decode_image(row, opts):
    block = _base("image", row)
    block["url"] = opts.get("url") or opts.get("imageUrl") or ""
    if ex.ORIGINAL_BLOCK_TYPE in opts:
        block["alt"] = opts.get("alt") or ""
        block["caption"] = opts.get("caption") or ""
    else:
        block["alt"] = row.get("question") or ""
    return block


def _decode_video(row, opts):
    block = _base("video", row)
    block["url"] = opts.get("url") or ""
    block["title"] = opts.get("title") or row.get("question") or ""
    return block


def _decode_recording(row, opts):
    block = _base("recording", row)
    block["instruction"] = opts.get("instruction") or row.get("question") or ""
    block["timeLimit"] = opts.get("timeLimit")
    block["aiGrading"] = bool(opts.get("aiGrading"))
    return block


def _decode_multi_select(row, opts):
    block = _base("multi_select", row)
    block["title"] = opts.get("title") or ""
    block["instruction"] = opts.get("instruction") or ""
    block["correctOptions"] = _with_ids(opts.get("correctOptions"), "correct")
    block["incorrectOptions"] = _with_ids(opts.get("incorrectOptions"), "incorrect")
    return block


def _decode_title(row, opts):
    block = _base("title", row)
    block["title"] = opts.get("title") or row.get("question") or ""
    return block


def _decode_tagged_multiple_choice(row, opts):
    return _multi_step(row, opts.get("multipleChoiceItems") or [])


_TAGGED_DECODERS: Dict[str, Callable[[Mapping[str, Any], Dict[str, Any]], Dict[str, Any]]] = {
    "text": _text,
    "image": _decode_image,
    "audio": _decode_audio,
    "video": _decode_video,
    "recording": _decode_recording,
    "multi_select": _decode_multi_select,
    "title": _decode_title,
    "multiple_choice": _decode_tagged_multiple_choice,
}


def _is_legacy_audio(row) -> bool:
    # Rows written before tagging existed: an audio URL and no essay bounds
    return bool(row.get("audioUrl")) and not row.get("minLength") and not row.get("maxLength")


def _decode_essay(row, options):
    opts = _object(options)
    tag = opts.get(ex.ORIGINAL_BLOCK_TYPE)

    if tag:
        decoder = _TAGGED_DECODERS.get(tag) if isinstance(tag, str) else None
        if decoder is None:
            logger.warning("Unknown originalBlockType %r, decoding as text", tag)
            return _text(row)
        return decoder(row, opts)

    if opts.get("multipleChoiceItems"):
        return _multi_step(row, opts["multipleChoiceItems"])

    if _is_legacy_audio(row):
        return _decode_audio(row, opts)

    if opts.get("imageUrl"):
        return _decode_image(row, opts)

    return _decode_essay_block(row, opts)


_DECODERS: Dict[str, Callable[[Mapping[str, Any], Any], Dict[str, Any]]] = {
    ex.MULTIPLE_CHOICE: _decode_multiple_choice,
    ex.TRUE_FALSE: _decode_true_false,
    ex.SHORT_ANSWER: _decode_short_answer,
    ex.ESSAY: _decode_essay,
    ex.FILL_BLANK: _decode_fill_blank,
    ex.MATCHING: _decode_matching,
    ex.ORDERING: _decode_ordering,
    ex.DRAG_DROP: _decode_drag_drop,
}


def group_id_of(options) -> Optional[str]:
    return _object(options).get(ex.GROUP_ID) or None


def decode_row_with_group(row: Any) -> FlatBlock:
    if not isinstance(row, Mapping):
        logger.warning("Skipping non-mapping question row, decoding as empty text")
        return FlatBlock(block=_text({}))

    options = parse_options(row.get("options"))
    kind = str(row.get("type") or "").upper()
    decoder = _DECODERS.get(kind)

    if decoder is None:
        logger.warning("Unknown question type %r, decoding as text", row.get("type"))
        block = _text(row)
    else:
        block = decoder(row, options)

    return FlatBlock(block=block, group_id=group_id_of(options))


def decode_row(row: Any) -> Dict[str, Any]:
    return decode_row_with_group(row).block
