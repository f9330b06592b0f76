from exam_builder.blocks.conversion import blocks_to_rows
from exam_builder.blocks.registry import BLOCK_GROUP, new_block
from exam_builder.blocks.grouping import make_group
from exam_builder.editor.session import EditorSession


def test_open_decodes_rows_without_saving(timers):
    saved = []
    rows = blocks_to_rows([new_block("multiple_choice", points=10), new_block("essay", points=5)])

    session = EditorSession.open("exam-1", rows, lambda exam_id, r: saved.append(r), timer_factory=timers)

    assert [b["type"] for b in session.blocks] == ["multiple_choice", "essay"]
    assert session.total_points == 15
    assert session.save_status == "saved"
    assert timers.created == []
    assert saved == []


def test_edits_flow_through_to_persist(timers):
    saved = []
    group = make_group("g1", [new_block("essay", points=2), new_block("essay", points=3)])
    session = EditorSession.open("exam-1", blocks_to_rows([group]), lambda exam_id, r: saved.append(r), timer_factory=timers)

    assert session.blocks[0]["type"] == BLOCK_GROUP
    assert session.blocks[0]["points"] == 5

    session.controller.insert("text", content="Read this.")
    assert session.save_now() is True

    [rows] = saved
    assert len(rows) == 3
    assert rows[0]["options"]["groupId"] == "g1"
    assert rows[2]["options"] == {"originalBlockType": "text", "content": "Read this."}


def test_close_stops_autosave(timers):
    saved = []
    session = EditorSession.open("exam-1", [], lambda exam_id, r: saved.append(r), timer_factory=timers)

    session.close()
    session.controller.insert("title", title="Late edit")

    assert timers.created == []
    assert session.save_now() is False


def test_garbage_rows_still_open_and_save(timers):
    saved = []
    rows = [
        {"type": "ESSAY", "question": "Steps", "order": 0,
         "options": {"originalBlockType": "multiple_choice", "multipleChoiceItems": ["a", "b"]}},
        {"type": "ESSAY", "question": "q", "order": 1, "points": "abc",
         "options": {"originalBlockType": ["text"]}},
    ]
    session = EditorSession.open("exam-1", rows, lambda exam_id, r: saved.append(r), timer_factory=timers)

    assert [b["type"] for b in session.blocks] == ["multiple_choice", "text"]

    session.controller.insert("text", content="Read this.")
    session.save_now()

    assert session.save_status == "saved"
    assert len(saved[0]) == 3
