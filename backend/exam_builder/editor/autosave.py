"""
Debounced autosave for the block list.

Every change restarts a quiet-period timer; only when it runs out is the
latest snapshot converted to question rows and handed to `persist`. Nothing is
written for the first render of a freshly loaded exam.
"""
import copy
import logging
import threading
from typing import Any, Callable, Dict, List, Optional

from exam_builder.blocks.conversion import blocks_to_rows
from exam_builder.config import BaseConfig
from exam_builder.domain.lifecycle.save_status import (
    ERROR,
    SAVED,
    SAVING,
    assert_save_transition,
)

logger = logging.getLogger(__name__)

Persist = Callable[[str, List[Dict[str, Any]]], Any]


class AutosaveSynchronizer:
    def __init__(
        self,
        exam_id: Optional[str],
        persist: Persist,
        *,
        delay: Optional[float] = None,
        timer_factory: Callable[..., Any] = threading.Timer,
        on_status: Optional[Callable[[str], None]] = None,
        difficulty: str = BaseConfig.DEFAULT_QUESTION_DIFFICULTY,
    ):
        self.exam_id = exam_id
        self.persist = persist
        self.delay = BaseConfig.AUTOSAVE_DEBOUNCE_SECONDS if delay is None else delay
        self.timer_factory = timer_factory
        self.on_status = on_status
        self.difficulty = difficulty

        self.status = SAVED
        self.last_error: Optional[Exception] = None

        self._lock = threading.RLock()
        self._save_lock = threading.Lock()
        self._timer = None
        self._pending: Optional[List[Dict[str, Any]]] = None
        self._initial_render = True
        self._closed = False

    @property
    def has_pending(self) -> bool:
        return self._pending is not None

    def notify(self, blocks: List[Dict[str, Any]]) -> None:
        """Record a block-list change and (re)arm the debounce timer."""
        with self._lock:
            if self._closed or not self.exam_id:
                return

            if self._initial_render:
                self._initial_render = False
                return

            self._pending = copy.deepcopy(blocks)
            self._cancel_timer()

            self._timer = self.timer_factory(self.delay, self._fire)
            self._timer.daemon = True
            self._timer.start()

    def flush(self) -> bool:
        """Save right away if a change is waiting. Returns whether a save ran."""
        with self._lock:
            self._cancel_timer()
            if self._pending is None:
                return False
        self._fire()
        return True

    def cancel(self) -> None:
        with self._lock:
            self._cancel_timer()
            self._pending = None

    def close(self) -> None:
        """Stop for good; nothing is written after the editing session ends."""
        with self._lock:
            self._closed = True
            self.cancel()

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _fire(self) -> None:
        # One save in flight at a time; a later fire picks up the newer snapshot
        with self._save_lock:
            self._save()

    def _save(self) -> None:
        with self._lock:
            blocks, self._pending = self._pending, None
            if blocks is None or self._closed:
                return
            self._set_status(SAVING)

        # A block that cannot be converted fails the save like a persist error
        try:
            rows = blocks_to_rows(blocks, difficulty=self.difficulty)
            self.persist(self.exam_id, rows)
        except Exception as exc:
            logger.exception("Autosave of exam %s failed", self.exam_id)
            with self._lock:
                self.last_error = exc
                self._set_status(ERROR)
            return

        logger.debug("Autosaved %d rows for exam %s", len(rows), self.exam_id)
        with self._lock:
            self.last_error = None
            self._set_status(SAVED)

    def _set_status(self, status: str) -> None:
        assert_save_transition(from_status=self.status, to_status=status)
        self.status = status

        if self.on_status is not None:
            self.on_status(status)
