"""ViewModel holding one essay under edit, with linear undo/redo."""

from __future__ import annotations

from enum import Enum
from typing import Any

from loguru import logger
from pydantic import ValidationError

from core.errors import ContentError
from core.models import SLOTS_PER_LAYOUT, Essay, Spread, SpreadPhoto
from core.services import spread_service
from core.services.interfaces import ContentQueries, EssayRepository

MAX_HISTORY = 50


class EditState(Enum):
    EMPTY = "empty"
    CLEAN = "clean"
    DIRTY = "dirty"
    SAVING = "saving"


class EssayEditVM:
    """Essay editing view-model.

    Every applied mutation snapshots the essay onto `history` (capped at
    `max_history`, oldest dropped) and clears `future`. Operations called
    with no essay loaded, or with indexes that point nowhere, do nothing and
    record no history.
    """

    def __init__(
        self,
        repo: EssayRepository | None = None,
        index: ContentQueries | None = None,
        max_history: int = MAX_HISTORY,
    ) -> None:
        """Create an EssayEditVM.

        Args:
            repo: Writer with `save_essay`, `create_essay` and `rename_essay`.
            index: Content index used to open essays and refreshed after writes.
            max_history: Undo depth.
        """
        self._repo = repo
        self._index = index
        self._max_history = max_history
        self.current: Essay | None = None
        self.dirty = False
        self.saving = False
        self.last_error: str | None = None
        self.history: list[Essay] = []
        self.future: list[Essay] = []

    @property
    def state(self) -> EditState:
        if self.current is None:
            return EditState.EMPTY
        if self.saving:
            return EditState.SAVING
        return EditState.DIRTY if self.dirty else EditState.CLEAN

    # --- loading ---

    def set_current(self, essay: Essay | None) -> None:
        """Start editing `essay` (a private copy) with empty history."""
        self.current = essay.model_copy(deep=True) if essay is not None else None
        self.dirty = False
        self.last_error = None
        self.history = []
        self.future = []

    def open_essay(self, essay_id: str) -> bool:
        """Load `essay_id` from the index; False (and nothing loaded) if missing."""
        essay = self._index.get_essay(essay_id) if self._index else None
        if essay is None:
            logger.warning("Essay {} not found", essay_id)
        self.set_current(essay)
        return essay is not None

    # --- history ---

    def _push_history(self, snapshot: Essay) -> None:
        self.history.append(snapshot)
        if len(self.history) > self._max_history:
            del self.history[0]
        self.future = []

    def _apply(self, change) -> bool:
        """Run `change(essay) -> bool` on a working copy and keep it if it applied.

        A change that returns False or raises leaves `current` untouched.
        """
        if self.current is None:
            return False
        working = self.current.model_copy(deep=True)
        if not change(working):
            return False
        self._push_history(self.current)
        self.current = working
        self.dirty = True
        return True

    def undo(self) -> bool:
        if not self.history or self.current is None:
            return False
        self.future.append(self.current)
        self.current = self.history.pop()
        self.dirty = True
        return True

    def redo(self) -> bool:
        if not self.future or self.current is None:
            return False
        self.history.append(self.current)
        self.current = self.future.pop()
        self.dirty = True
        return True

    @property
    def can_undo(self) -> bool:
        return bool(self.history)

    @property
    def can_redo(self) -> bool:
        return bool(self.future)

    # --- metadata ---

    def update_meta(self, **fields: Any) -> bool:
        """Overwrite essay fields such as `title`, `tags` or `cover`.

        Values are validated like file content (a `cover` dict becomes an
        `EssayCover`); an invalid value raises `ValidationError` and changes
        nothing.
        """
        known = {k: v for k, v in fields.items() if k in Essay.model_fields and k != "id"}
        if not known:
            return False

        def change(essay: Essay) -> bool:
            for name, value in known.items():
                setattr(essay, name, value)
            return True

        return self._apply(change)

    # --- spreads ---

    def add_spread(self, layout: str = "single") -> bool:
        if layout not in SLOTS_PER_LAYOUT:
            return False

        def change(essay: Essay) -> bool:
            essay.spreads.append(Spread(layout=layout, photos=[]))
            return True

        return self._apply(change)

    def remove_spread(self, index: int) -> bool:
        def change(essay: Essay) -> bool:
            if not 0 <= index < len(essay.spreads):
                return False
            del essay.spreads[index]
            return True

        return self._apply(change)

    def update_spread(self, index: int, **fields: Any) -> bool:
        """Overwrite spread fields, e.g. `caption`.

        A `layout` value goes through `change_layout`, so shrinking a spread
        demotes its overflow photos instead of overfilling the slots.
        """
        known = {k: v for k, v in fields.items() if k in Spread.model_fields}
        layout = known.pop("layout", None)

        def change(essay: Essay) -> bool:
            if not 0 <= index < len(essay.spreads):
                return False
            relaid = False
            if layout is not None and layout != essay.spreads[index].layout:
                if not spread_service.change_layout(essay.spreads, index, layout):
                    return False
                relaid = True
            spread = essay.spreads[index]
            for name, value in known.items():
                setattr(spread, name, value)
            return relaid or bool(known)

        return self._apply(change)

    def change_layout(self, index: int, layout: str) -> bool:
        return self._apply(
            lambda essay: spread_service.change_layout(essay.spreads, index, layout)
        )

    def reorder_spreads(self, from_index: int, to_index: int) -> bool:
        return self._apply(
            lambda essay: spread_service.reorder(essay.spreads, from_index, to_index)
        )

    # --- photo slots ---

    def set_photo(self, spread_index: int, slot: int, photo: SpreadPhoto) -> bool:
        return self._apply(
            lambda essay: spread_service.set_photo(essay.spreads, spread_index, slot, photo)
        )

    def remove_photo(self, spread_index: int, slot: int) -> bool:
        return self._apply(
            lambda essay: spread_service.remove_photo(essay.spreads, spread_index, slot)
        )

    def move_photo(self, from_spread: int, from_slot: int, to_spread: int, to_slot: int) -> bool:
        return self._apply(
            lambda essay: spread_service.move_photo(
                essay.spreads, from_spread, from_slot, to_spread, to_slot
            )
        )

    # --- persistence ---

    def save(self) -> bool:
        """Write the current essay and reload the index.

        The essay only becomes clean once both the write and the reload
        succeeded; otherwise it stays dirty and the error propagates.
        """
        if self.current is None or self._repo is None:
            return False
        self.saving = True
        try:
            self._repo.save_essay(self.current)
            if self._index is not None:
                self._index.reload()
        except (ContentError, ValidationError, OSError) as ex:
            self.last_error = str(ex)
            logger.error("Save of essay {} failed: {}", self.current.id, ex)
            raise
        finally:
            self.saving = False

        self.dirty = False
        self.last_error = None
        return True

    def create_essay(self, essay: Essay, custom_id: str | None = None) -> str:
        """Write a new essay file and return its id."""
        if self._repo is None:
            raise ContentError("No essay repository configured")
        essay_id = self._repo.create_essay(essay, custom_id)
        if self._index is not None:
            self._index.reload()
        return essay_id

    def rename_essay(self, new_id: str) -> str:
        """Rename the file behind the current essay; unsaved edits stay pending."""
        if self.current is None:
            raise ContentError("No essay loaded")
        if self._repo is None:
            raise ContentError("No essay repository configured")
        self._repo.rename_essay(self.current.id, new_id)
        self.current.id = new_id
        if self._index is not None:
            self._index.reload()
        return new_id
