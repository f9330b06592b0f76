import pytest
from exam_builder.blocks.registry import BLOCK_GROUP, new_block
from exam_builder.domain.invariants.block import assert_blocks
from exam_builder.domain.invariants.exceptions import GroupingError, InvariantViolation
from exam_builder.editor.controller import (
    INSERT_AT_INDEX,
    REMOVE,
    REORDER,
    BlockListController,
    DropTarget,
)


def _orders(blocks):
    return [block["order"] for block in blocks]


@pytest.fixture
def changes():
    return []


@pytest.fixture
def controller(changes):
    ctl = BlockListController(on_change=lambda blocks: changes.append([b["id"] for b in blocks]))
    ctl.insert("multiple_choice", points=10)
    ctl.insert("essay", points=5)
    ctl.insert("text", content="Read this.")
    changes.clear()
    return ctl


def test_insert_appends_selects_and_notifies(controller, changes):
    block = controller.insert("title", title="Part one")

    assert controller.blocks[-1] is block
    assert controller.selected_ids == {block["id"]}
    assert _orders(controller.blocks) == [0, 1, 2, 3]
    assert len(changes) == 1


def test_insert_at_index(controller):
    block = controller.insert("image", index=1)

    assert controller.blocks[1] is block
    assert _orders(controller.blocks) == [0, 1, 2, 3]


def test_reorder_keeps_orders_contiguous(controller):
    ids = [b["id"] for b in controller.blocks]

    controller.reorder(0, 2)

    assert [b["id"] for b in controller.blocks] == [ids[1], ids[2], ids[0]]
    assert _orders(controller.blocks) == [0, 1, 2]


def test_reorder_to_same_index_is_a_no_op(controller, changes):
    controller.reorder(1, 1)
    assert changes == []


def test_delete_removes_block_and_selection(controller):
    victim = controller.blocks[1]["id"]
    controller.select(victim)

    controller.delete(victim)

    assert controller.find(victim) is None
    assert controller.selected_ids == set()
    assert _orders(controller.blocks) == [0, 1]


def test_group_selected_wraps_blocks_at_first_position(controller):
    mc, essay, text = controller.blocks
    controller.select(mc["id"])
    controller.select(essay["id"], toggle=True)

    group = controller.group_selected()

    assert controller.blocks == [group, text]
    assert group["type"] == BLOCK_GROUP
    assert group["points"] == 15
    assert _orders(group["children"]) == [0, 1]
    assert controller.selected_ids == {group["id"]}
    assert controller.total_points() == 15
    assert_blocks(controller.blocks)


def test_grouping_needs_two_blocks(controller):
    before = [b["id"] for b in controller.blocks]
    controller.select(controller.blocks[0]["id"])

    with pytest.raises(GroupingError):
        controller.group_selected()

    assert [b["id"] for b in controller.blocks] == before


def test_groups_cannot_be_nested(controller):
    mc, essay, text = controller.blocks
    controller.select(mc["id"])
    controller.select(essay["id"], toggle=True)
    group = controller.group_selected()

    controller.select(group["id"])
    controller.select(text["id"], toggle=True)

    with pytest.raises(GroupingError):
        controller.group_selected()


def test_ungroup_splices_children_back(controller):
    mc, essay, text = controller.blocks
    controller.select(mc["id"])
    controller.select(essay["id"], toggle=True)
    group = controller.group_selected()

    children = controller.ungroup(group["id"])

    assert [b["id"] for b in children] == [mc["id"], essay["id"]]
    assert [b["id"] for b in controller.blocks] == [mc["id"], essay["id"], text["id"]]
    assert _orders(controller.blocks) == [0, 1, 2]


def test_deleting_a_grouped_child_updates_group_points(controller):
    mc, essay, _ = controller.blocks
    controller.select(mc["id"])
    controller.select(essay["id"], toggle=True)
    group = controller.group_selected()

    controller.delete(essay["id"])

    assert group["points"] == 10
    assert _orders(group["children"]) == [0]

    controller.delete(mc["id"])
    assert controller.find(group["id"]) is None


def test_toggle_select_flips_membership(controller):
    block_id = controller.blocks[0]["id"]

    controller.select(block_id, toggle=True)
    assert block_id in controller.selected_ids

    controller.select(block_id, toggle=True)
    assert block_id not in controller.selected_ids


def test_delete_selected(controller):
    first, second, third = controller.blocks
    controller.select(first["id"])
    controller.select(third["id"], toggle=True)

    controller.delete_selected()

    assert controller.blocks == [second]
    assert second["order"] == 0


def test_update_block_recomputes_parent_points(controller):
    mc, essay, _ = controller.blocks
    controller.select(mc["id"])
    controller.select(essay["id"], toggle=True)
    group = controller.group_selected()

    controller.update_block(essay["id"], points=8)

    assert group["points"] == 18
    assert controller.total_points() == 18


def test_update_block_keeps_informative_points_at_zero(controller):
    text = controller.blocks[2]
    controller.update_block(text["id"], points=4, content="Changed")

    assert text["points"] == 0
    assert text["content"] == "Changed"


def test_update_block_rejects_structural_fields(controller):
    with pytest.raises(InvariantViolation):
        controller.update_block(controller.blocks[0]["id"], type="essay")


def test_validate_collects_errors_and_edit_clears_them(controller):
    mc = controller.blocks[0]

    errors = controller.validate()

    assert "Question text is required" in errors[mc["id"]]
    assert controller.errors == errors

    controller.update_block(mc["id"], question="Now with text")
    assert mc["id"] not in controller.errors


def test_apply_drop_targets(controller):
    first, second, third = controller.blocks

    controller.apply_drop(DropTarget(kind=REORDER, active_id=third["id"], over_id=first["id"]))
    assert [b["id"] for b in controller.blocks] == [third["id"], first["id"], second["id"]]

    controller.apply_drop(DropTarget(kind=INSERT_AT_INDEX, index=0, block_type="title"))
    assert controller.blocks[0]["type"] == "title"

    controller.apply_drop(DropTarget(kind=REMOVE, active_id=first["id"]))
    assert controller.find(first["id"]) is None
    assert _orders(controller.blocks) == [0, 1, 2]

    with pytest.raises(ValueError):
        controller.apply_drop(DropTarget(kind="teleport"))


def test_orders_stay_contiguous_after_mixed_mutations(controller):
    mc, essay, text = controller.blocks
    controller.insert("title", index=0)
    controller.select(essay["id"])
    controller.select(text["id"], toggle=True)
    group = controller.group_selected()
    controller.reorder(0, 2)
    controller.insert("video", index=1)
    controller.delete(mc["id"])
    controller.ungroup(group["id"])

    assert _orders(controller.blocks) == list(range(len(controller.blocks)))
    assert_blocks(controller.blocks)


def test_initial_blocks_are_renumbered():
    blocks = [new_block("essay", order=5), new_block("text", order=9)]
    controller = BlockListController(blocks)

    assert _orders(controller.blocks) == [0, 1]
