from typing import Any, Dict, Iterable, List, Mapping, Optional

from exam_builder.blocks.conversion import rows_to_blocks
from exam_builder.editor.autosave import AutosaveSynchronizer, Persist
from exam_builder.editor.controller import BlockListController


class EditorSession:
    """
    One author editing one exam: the canvas controller with autosave attached.

    Mutations go through `controller`; each one notifies `autosave`, which
    ignores the initial render and debounces the rest.
    """

    def __init__(self, controller: BlockListController, autosave: AutosaveSynchronizer):
        self.controller = controller
        self.autosave = autosave
        controller.on_change = autosave.notify

    @classmethod
    def open(
        cls,
        exam_id: Optional[str],
        rows: Iterable[Mapping[str, Any]],
        persist: Persist,
        **autosave_options: Any,
    ) -> "EditorSession":
        controller = BlockListController(rows_to_blocks(rows))
        autosave = AutosaveSynchronizer(exam_id, persist, **autosave_options)
        session = cls(controller, autosave)

        # First render of the loaded exam; swallowed by the synchronizer
        autosave.notify(controller.blocks)
        return session

    @property
    def blocks(self) -> List[Dict[str, Any]]:
        return self.controller.blocks

    @property
    def save_status(self) -> str:
        return self.autosave.status

    @property
    def total_points(self) -> int:
        return self.controller.total_points()

    def save_now(self) -> bool:
        return self.autosave.flush()

    def close(self) -> None:
        self.autosave.close()
