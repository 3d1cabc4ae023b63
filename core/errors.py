"""Error types shared by the content index, writer and services."""

from __future__ import annotations

from pathlib import Path


class ContentError(Exception):
    """Base class for content management failures."""


class NotFoundError(ContentError):
    """A requested essay, roll or shot does not exist."""


class InvalidIdError(ContentError):
    """An id is empty or would resolve outside its content directory."""


class ConflictError(ContentError):
    """The target of a create or rename already exists."""


class StorageError(ContentError):
    """The object-storage bucket rejected or could not perform a request."""


class ContentParseError(ContentError):
    """A content file is not valid YAML or does not match its schema."""

    def __init__(self, path: str | Path, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Malformed content file {self.path}: {reason}")
