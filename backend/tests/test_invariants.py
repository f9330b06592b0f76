import pytest
from exam_builder.blocks.grouping import make_group
from exam_builder.blocks.registry import new_block
from exam_builder.domain.invariants.block import assert_blocks, collect_block_errors
from exam_builder.domain.invariants.exam import assert_question_rows
from exam_builder.domain.invariants.exceptions import InvariantViolation
from exam_builder.domain.lifecycle.exam import assert_exam_transition
from exam_builder.domain.lifecycle.save_status import ERROR, SAVED, SAVING, assert_save_transition


def test_block_orders_must_be_contiguous():
    blocks = [new_block("essay", order=0), new_block("essay", order=2)]

    with pytest.raises(InvariantViolation):
        assert_blocks(blocks)


def test_informative_blocks_cannot_score():
    block = new_block("image")
    block["points"] = 3

    with pytest.raises(InvariantViolation):
        assert_blocks([block])


def test_group_points_must_match_children():
    group = make_group("g1", [new_block("essay", points=2), new_block("essay", points=3)])
    assert_blocks([group])

    group["points"] = 99
    with pytest.raises(InvariantViolation):
        assert_blocks([group])


def test_groups_cannot_nest():
    inner = make_group("inner", [new_block("essay"), new_block("essay")])
    outer = make_group("outer", [inner, new_block("essay")])

    with pytest.raises(InvariantViolation):
        assert_blocks([outer])


def test_unknown_block_type_is_rejected():
    with pytest.raises(InvariantViolation):
        assert_blocks([{"id": "x", "type": "hologram", "order": 0}])


def test_question_rows_contract():
    rows = [
        {"type": "ESSAY", "question": "Q", "options": None, "points": 1, "order": 1},
        {"type": "MULTIPLE_CHOICE", "question": "Q", "options": ["a"], "points": 2, "order": 0},
    ]
    assert_question_rows(rows)

    with pytest.raises(InvariantViolation):
        assert_question_rows([{"type": "POLL", "question": "Q", "order": 0}])

    with pytest.raises(InvariantViolation):
        assert_question_rows([{"type": "ESSAY", "points": -1, "order": 0}])

    with pytest.raises(InvariantViolation):
        assert_question_rows([{"type": "ESSAY", "options": "text", "order": 0}])

    with pytest.raises(InvariantViolation):
        assert_question_rows([{"type": "ESSAY", "order": 3}])

    with pytest.raises(InvariantViolation):
        assert_question_rows([
            {"type": "ESSAY", "order": 0},
            {"type": "ESSAY", "order": "1"},
        ])


def test_collect_block_errors_never_raises():
    assert collect_block_errors(new_block("text", content="Hello")) == []
    assert collect_block_errors(new_block("image")) == ["Media URL is required"]
    assert collect_block_errors({"type": "hologram"}) == []

    essay = new_block("essay", prompt="Why?", minWords=300, maxWords=100)
    assert collect_block_errors(essay) == ["Minimum words cannot exceed maximum words"]


def test_exam_lifecycle():
    assert_exam_transition(from_status="draft", to_status="published")
    assert_exam_transition(from_status="published", to_status="draft")

    with pytest.raises(ValueError):
        assert_exam_transition(from_status="draft", to_status="draft")


def test_save_status_lifecycle():
    assert_save_transition(from_status=SAVED, to_status=SAVING)
    assert_save_transition(from_status=SAVING, to_status=ERROR)
    assert_save_transition(from_status=ERROR, to_status=SAVING)

    with pytest.raises(ValueError):
        assert_save_transition(from_status=SAVED, to_status=ERROR)
