"""Core service interfaces and shared data structures.

This module defines the filter and result dataclasses passed between the
content index, the delete service and the view models, plus the protocols
the view models depend on.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from core.models import Essay, EssaySummary, Photo

PhotoUsage = dict[str, list[str]]


@dataclass
class PhotoFilters:
    """Filter set for photo queries. All given filters must match.

    Attributes:
        roll: Roll id, manual or derived form.
        film: Film id.
        camera: Camera name, compared case-insensitively.
        unused: Keep only photos no essay references.
        search: Case-insensitive substring of alt text, a label or location.
        include_hidden: Also return shots flagged hidden.
    """

    roll: str | None = None
    film: str | None = None
    camera: str | None = None
    unused: bool = False
    search: str | None = None
    include_hidden: bool = False


@dataclass
class PhotoDeleteResult:
    """Outcome of deleting a photo from the bucket and its roll file.

    Attributes:
        roll_id: Roll the shot was removed from.
        sequence: Sequence label of the removed shot.
        src: Public URL of the deleted image.
        object_key: Bucket key that was deleted.
        roll_path: Roll file that was rewritten.
    """

    roll_id: str
    sequence: str
    src: str
    object_key: str
    roll_path: Path


class ContentQueries(Protocol):
    """Read side used by the view models."""

    def reload(self) -> None: ...

    def get_photos(self, filters: PhotoFilters | None = None) -> list[Photo]: ...

    def get_essays(self) -> list[EssaySummary]: ...

    def get_essay(self, essay_id: str) -> Essay | None: ...

    def get_usage(self) -> PhotoUsage: ...


class EssayRepository(Protocol):
    """Write side used by the essay edit model."""

    def save_essay(self, essay: Essay) -> Path: ...

    def create_essay(self, essay: Essay, custom_id: str | None = None) -> str: ...

    def rename_essay(self, old_id: str, new_id: str) -> None: ...
