"""
Flatten/regroup of `block_group` wrappers.

The question table has no notion of grouping, so a group's children are
stored as ordinary top-level rows tagged with the group's id. `flatten`
produces that tagged sequence and `regroup` reverses it on load.
"""
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from exam_builder.blocks.registry import BLOCK_GROUP, COMMON_FIELDS, coerce_points
from exam_builder.utils.order import renumber


@dataclass
class FlatBlock:
    """A block plus the id of the group it was flattened out of, if any."""

    block: Dict[str, Any]
    group_id: Optional[str] = None


def group_points(children: Iterable[Dict[str, Any]]) -> int:
    return sum(coerce_points(child.get("points")) for child in children)


def make_group(group_id: str, children: List[Dict[str, Any]]) -> Dict[str, Any]:
    group: Dict[str, Any] = {"id": group_id, "type": BLOCK_GROUP}
    group.update(COMMON_FIELDS)
    group["children"] = renumber(children)
    group["points"] = group_points(children)
    return group


def flatten(blocks: Iterable[Dict[str, Any]]) -> List[FlatBlock]:
    flat: List[FlatBlock] = []

    for block in blocks:
        if block.get("type") == BLOCK_GROUP:
            for child in block.get("children") or []:
                flat.append(FlatBlock(block=child, group_id=block["id"]))
        else:
            flat.append(FlatBlock(block=block))

    return flat


def regroup(flat_blocks: Iterable[FlatBlock]) -> List[Dict[str, Any]]:
    """
    Rebuild group wrappers from tagged blocks.

    A group lands where its first child was seen; its children keep their
    relative order even if other rows were interleaved between them.
    """
    flat_blocks = list(flat_blocks)

    members: Dict[str, List[Dict[str, Any]]] = {}
    for item in flat_blocks:
        if item.group_id:
            members.setdefault(item.group_id, []).append(item.block)

    result: List[Dict[str, Any]] = []
    emitted = set()

    for item in flat_blocks:
        if not item.group_id:
            result.append(item.block)
            continue

        if item.group_id in emitted:
            continue

        emitted.add(item.group_id)
        result.append(make_group(item.group_id, members[item.group_id]))

    return renumber(result)
