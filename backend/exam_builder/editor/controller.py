"""
Ordering & mutation controller for the exam canvas.

Owns the top-level block list and the selection set. Every mutation keeps
`order` contiguous (top level and, separately, inside each group) and then
notifies `on_change` with the current list.
"""
import logging
import uuid
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Set, Tuple

from exam_builder.blocks.conversion import total_points
from exam_builder.blocks.grouping import group_points, make_group
from exam_builder.blocks.registry import BLOCK_GROUP, is_informative, new_block
from exam_builder.domain.invariants.block import collect_block_errors
from exam_builder.domain.invariants.exceptions import GroupingError, InvariantViolation
from exam_builder.utils.order import move as move_item, renumber

logger = logging.getLogger(__name__)

REORDER = "reorder"
INSERT_AT_INDEX = "insert-at-index"
REMOVE = "remove"

# Structural keys an in-place edit may not touch
IMMUTABLE_FIELDS = {"id", "type", "children"}


@dataclass
class DropTarget:
    """What the drag-and-drop layer resolved a drop to."""

    kind: str
    active_id: Optional[str] = None
    over_id: Optional[str] = None
    index: Optional[int] = None
    block_type: Optional[str] = None


class BlockListController:
    def __init__(
        self,
        blocks: Optional[Iterable[Dict[str, Any]]] = None,
        on_change: Optional[Callable[[List[Dict[str, Any]]], None]] = None,
    ):
        self.blocks: List[Dict[str, Any]] = renumber(list(blocks or []))
        self.selected_ids: Set[str] = set()
        self.errors: Dict[str, List[str]] = {}
        self.on_change = on_change

    # ------------------------
    # Lookups
    # ------------------------

    def index_of(self, block_id: str) -> int:
        for index, block in enumerate(self.blocks):
            if block["id"] == block_id:
                return index
        raise KeyError(block_id)

    def locate(self, block_id: str) -> Tuple[Optional[Dict[str, Any]], Dict[str, Any]]:
        """(parent group or None, block) for a top-level block or a group child."""
        for block in self.blocks:
            if block["id"] == block_id:
                return None, block
            if block.get("type") == BLOCK_GROUP:
                for child in block.get("children") or []:
                    if child["id"] == block_id:
                        return block, child
        raise KeyError(block_id)

    def find(self, block_id: str) -> Optional[Dict[str, Any]]:
        try:
            return self.locate(block_id)[1]
        except KeyError:
            return None

    def total_points(self) -> int:
        return total_points(self.blocks)

    # ------------------------
    # Insert
    # ------------------------

    def insert(self, block_type: str, index: Optional[int] = None, **fields: Any) -> Dict[str, Any]:
        return self.insert_block(new_block(block_type, **fields), index=index)

    def insert_block(self, block: Dict[str, Any], index: Optional[int] = None) -> Dict[str, Any]:
        if index is None or index > len(self.blocks):
            index = len(self.blocks)

        self.blocks.insert(max(index, 0), block)
        self.selected_ids = {block["id"]}
        self._changed()

        logger.debug("Inserted %s block %s at %s", block.get("type"), block["id"], index)
        return block

    # ------------------------
    # Reorder
    # ------------------------

    def reorder(self, from_index: int, to_index: int) -> None:
        if from_index == to_index:
            return

        move_item(self.blocks, from_index, to_index)
        self._changed()

    def move(self, block_id: str, over_id: str) -> None:
        """Move `block_id` to the slot currently held by `over_id`."""
        self.reorder(self.index_of(block_id), self.index_of(over_id))

    # ------------------------
    # Delete
    # ------------------------

    def delete(self, block_id: str) -> None:
        self._remove([block_id])

    def delete_selected(self) -> None:
        if self.selected_ids:
            self._remove(list(self.selected_ids))

    def _remove(self, block_ids: List[str]) -> None:
        doomed = set(block_ids)
        kept: List[Dict[str, Any]] = []

        for block in self.blocks:
            if block["id"] in doomed:
                continue

            if block.get("type") == BLOCK_GROUP:
                children = [c for c in block.get("children") or [] if c["id"] not in doomed]
                if not children:
                    doomed.add(block["id"])
                    continue
                block["children"] = renumber(children)
                block["points"] = group_points(children)

            kept.append(block)

        self.blocks = kept
        self.selected_ids -= doomed
        for block_id in doomed:
            self.errors.pop(block_id, None)

        self._changed()

    # ------------------------
    # Group / ungroup
    # ------------------------

    def group_selected(self) -> Dict[str, Any]:
        selected = [block for block in self.blocks if block["id"] in self.selected_ids]

        if len(selected) < 2:
            raise GroupingError("Select at least two blocks to group them.")

        if any(block.get("type") == BLOCK_GROUP for block in selected):
            raise GroupingError("Groups cannot contain other groups.")

        position = self.index_of(selected[0]["id"])
        group = make_group(str(uuid.uuid4()), selected)

        remaining = [block for block in self.blocks if block["id"] not in self.selected_ids]
        remaining.insert(position, group)

        self.blocks = remaining
        self.selected_ids = {group["id"]}
        self._changed()

        logger.debug("Grouped %d blocks into %s", len(selected), group["id"])
        return group

    def ungroup(self, group_id: str) -> List[Dict[str, Any]]:
        position = self.index_of(group_id)
        group = self.blocks[position]

        if group.get("type") != BLOCK_GROUP:
            raise GroupingError("Only block groups can be ungrouped.")

        children = list(group.get("children") or [])
        self.blocks[position:position + 1] = children
        self.selected_ids.discard(group_id)
        self._changed()

        return children

    # ------------------------
    # Selection
    # ------------------------

    def select(self, block_id: str, toggle: bool = False) -> Set[str]:
        if toggle:
            self.selected_ids ^= {block_id}
        else:
            self.selected_ids = {block_id}
        return self.selected_ids

    def clear_selection(self) -> None:
        self.selected_ids = set()

    # ------------------------
    # Property edits
    # ------------------------

    def update_block(self, block_id: str, **changes: Any) -> Dict[str, Any]:
        blocked = IMMUTABLE_FIELDS.intersection(changes)
        if blocked:
            raise InvariantViolation(f"Cannot edit structural fields: {sorted(blocked)}")

        parent, block = self.locate(block_id)
        block.update(changes)

        if is_informative(block.get("type")):
            block["points"] = 0
        elif block.get("type") == BLOCK_GROUP:
            block["points"] = group_points(block["children"])

        if parent is not None:
            parent["points"] = group_points(parent["children"])

        self.errors.pop(block_id, None)
        self._changed()
        return block

    def validate(self) -> Dict[str, List[str]]:
        errors: Dict[str, List[str]] = {}

        for block in self.blocks:
            for candidate in [block, *(block.get("children") or [])]:
                problems = collect_block_errors(candidate)
                if problems:
                    errors[candidate["id"]] = problems

        self.errors = errors
        return errors

    # ------------------------
    # Drop targets
    # ------------------------

    def apply_drop(self, target: DropTarget) -> None:
        if target.kind == REORDER:
            if target.active_id and target.over_id and target.active_id != target.over_id:
                self.move(target.active_id, target.over_id)
        elif target.kind == INSERT_AT_INDEX:
            self.insert(target.block_type, index=target.index)
        elif target.kind == REMOVE:
            self.delete(target.active_id)
        else:
            raise ValueError(f"Unknown drop target kind: {target.kind!r}")

    def _changed(self) -> None:
        renumber(self.blocks)
        for block in self.blocks:
            if block.get("type") == BLOCK_GROUP:
                renumber(block["children"])

        if self.on_change is not None:
            self.on_change(self.blocks)
