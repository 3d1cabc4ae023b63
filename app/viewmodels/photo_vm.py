"""ViewModel for the photo browser: filters, results and multi-select."""

from __future__ import annotations

from dataclasses import fields, replace
from typing import Any

from loguru import logger

from core.models import Photo
from core.services.interfaces import PhotoFilters, PhotoUsage
from infrastructure.content_index import ContentIndex
from infrastructure.content_writer import ContentWriter
from infrastructure.delete_service import PhotoDeleteService


class PhotoBrowserVM:
    """Expose filtered photos and selection state for a picker UI."""

    def __init__(
        self,
        index: ContentIndex,
        writer: ContentWriter | None = None,
        deleter: PhotoDeleteService | None = None,
    ) -> None:
        self._index = index
        self._writer = writer
        self._deleter = deleter
        self.filters = PhotoFilters()
        self.photos: list[Photo] = []
        self.usage: PhotoUsage = {}
        self.selected: set[str] = set()

    def refresh(self) -> None:
        """Re-query photos and usage with the current filters."""
        self.photos = self._index.get_photos(self.filters)
        self.usage = self._index.get_usage()

    def set_filter(self, name: str, value: Any) -> None:
        if name not in {f.name for f in fields(PhotoFilters)}:
            raise KeyError(f"Unknown photo filter: {name}")
        self.filters = replace(self.filters, **{name: value})
        self.refresh()

    def clear_filters(self) -> None:
        self.filters = PhotoFilters()
        self.refresh()

    def usage_count(self, src: str) -> int:
        """Number of essays showing `src`."""
        return len(self.usage.get(src, []))

    # --- selection ---

    def toggle_select(self, src: str) -> None:
        if src in self.selected:
            self.selected.discard(src)
        else:
            self.selected.add(src)

    def select_all(self) -> None:
        self.selected = {p.src for p in self.photos}

    def clear_selection(self) -> None:
        self.selected = set()

    # --- actions ---

    def hide_photo(self, roll_id: str, sequence: str, hidden: bool) -> None:
        if self._writer is None:
            raise RuntimeError("No content writer configured")
        self._writer.update_shot_hidden(roll_id, sequence, hidden)
        self._index.reload()
        self.refresh()

    def delete_photo(self, roll_id: str, sequence: str, src: str) -> None:
        if self._deleter is None:
            raise RuntimeError("No delete service configured")
        self._deleter.delete_photo(roll_id, sequence, src)
        self.selected.discard(src)
        logger.info("Photo {} removed from browser", src)
        self._index.reload()
        self.refresh()
