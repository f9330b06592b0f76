import pytest
from exam_builder.blocks.registry import new_block
from exam_builder.domain.lifecycle.save_status import ERROR, SAVED, SAVING
from exam_builder.editor.autosave import AutosaveSynchronizer


class RecordingPersist:
    def __init__(self, fail=False):
        self.calls = []
        self.fail = fail

    def __call__(self, exam_id, rows):
        self.calls.append((exam_id, rows))
        if self.fail:
            raise RuntimeError("database unavailable")


@pytest.fixture
def persist():
    return RecordingPersist()


@pytest.fixture
def statuses():
    return []


@pytest.fixture
def sync(persist, timers, statuses):
    return AutosaveSynchronizer(
        "exam-1",
        persist,
        delay=0.5,
        timer_factory=timers,
        on_status=statuses.append,
    )


def _blocks():
    return [new_block("essay", prompt="Discuss.", points=5)]


def test_first_notification_is_the_initial_render(sync, persist, timers):
    sync.notify(_blocks())

    assert timers.created == []
    assert not sync.has_pending
    assert persist.calls == []


def test_change_is_saved_after_quiet_period(sync, persist, timers, statuses):
    sync.notify([])
    sync.notify(_blocks())

    [timer] = timers.created
    assert timer.interval == 0.5
    assert timer.started and timer.daemon
    assert persist.calls == []

    timer.fire()

    [(exam_id, rows)] = persist.calls
    assert exam_id == "exam-1"
    assert rows[0]["type"] == "ESSAY"
    assert rows[0]["points"] == 5
    assert statuses == [SAVING, SAVED]
    assert sync.status == SAVED


def test_rapid_changes_are_debounced_into_one_save(sync, persist, timers):
    sync.notify([])
    sync.notify(_blocks())
    sync.notify(_blocks() + _blocks())

    first, second = timers.created
    assert first.cancelled

    first.fire()
    second.fire()

    [(_, rows)] = persist.calls
    assert len(rows) == 2


def test_snapshot_is_taken_at_notify_time(sync, persist, timers):
    blocks = _blocks()
    sync.notify([])
    sync.notify(blocks)

    blocks[0]["prompt"] = "Edited after notify"
    timers.created[0].fire()

    assert persist.calls[0][1][0]["question"] == "Discuss."


def test_failed_save_reports_error_and_next_change_retries(timers, statuses):
    persist = RecordingPersist(fail=True)
    sync = AutosaveSynchronizer("exam-1", persist, timer_factory=timers, on_status=statuses.append)
    sync.notify([])
    sync.notify(_blocks())

    timers.created[-1].fire()

    assert sync.status == ERROR
    assert isinstance(sync.last_error, RuntimeError)

    persist.fail = False
    sync.notify(_blocks())
    timers.created[-1].fire()

    assert sync.status == SAVED
    assert sync.last_error is None
    assert statuses == [SAVING, ERROR, SAVING, SAVED]
    assert len(persist.calls) == 2


def test_flush_saves_immediately(sync, persist, timers):
    sync.notify([])
    sync.notify(_blocks())

    assert sync.flush() is True
    assert timers.created[0].cancelled
    assert len(persist.calls) == 1
    assert sync.flush() is False


def test_nothing_is_saved_without_an_exam(persist, timers):
    sync = AutosaveSynchronizer(None, persist, timer_factory=timers)
    sync.notify([])
    sync.notify(_blocks())

    assert timers.created == []
    assert sync.flush() is False


def test_close_cancels_pending_save(sync, persist, timers):
    sync.notify([])
    sync.notify(_blocks())

    sync.close()
    timers.created[0].fire()
    sync.notify(_blocks())

    assert persist.calls == []
    assert len(timers.created) == 1


def test_conversion_failure_reports_error_and_next_change_saves(sync, persist, timers, statuses):
    broken = [new_block("multiple_choice", multipleChoiceItems=["a", "b"])]
    sync.notify([])
    sync.notify(broken)

    timers.created[-1].fire()

    assert sync.status == ERROR
    assert isinstance(sync.last_error, AttributeError)
    assert persist.calls == []

    sync.notify(_blocks())
    timers.created[-1].fire()

    assert sync.status == SAVED
    assert statuses == [SAVING, ERROR, SAVING, SAVED]
    assert len(persist.calls) == 1
