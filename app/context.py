"""Process-wide services, built once at startup and passed to handlers."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
import threading

from loguru import logger

from app.viewmodels.essay_vm import MAX_HISTORY, EssayEditVM
from app.viewmodels.photo_vm import PhotoBrowserVM
from infrastructure.content_index import ContentIndex
from infrastructure.content_writer import ContentWriter
from infrastructure.delete_service import PhotoDeleteService
from infrastructure.object_storage import BucketStorage
from infrastructure.settings import JsonSettings

DEFAULT_CONTENT_DIR = "src/content"


@dataclass
class AppContext:
    """Everything a request handler needs, without module-level singletons."""

    settings: JsonSettings
    index: ContentIndex
    writer: ContentWriter
    deleter: PhotoDeleteService
    # held for every write and reload; read-modify-write sequences never interleave
    lock: threading.Lock = field(default_factory=threading.Lock)

    @property
    def content_dir(self) -> Path:
        return self.index.content_dir

    def essay_editor(self) -> EssayEditVM:
        """Fresh essay editor bound to this context, undo depth from `editor.max_history`."""
        depth = int(self.settings.get("editor.max_history", MAX_HISTORY))
        return EssayEditVM(repo=self.writer, index=self.index, max_history=depth)

    def photo_browser(self) -> PhotoBrowserVM:
        return PhotoBrowserVM(self.index, writer=self.writer, deleter=self.deleter)


def build_context(settings: JsonSettings, storage: BucketStorage | None = None) -> AppContext:
    """Wire the index, writer and delete service for `settings` and load the index.

    `storage` defaults to a bucket client built from the `storage.*` settings.
    """
    content_dir = settings.get_path("content.dir", DEFAULT_CONTENT_DIR)
    logger.info("Using content directory {}", content_dir)
    index = ContentIndex(content_dir)
    writer = ContentWriter(content_dir)
    if storage is None:
        storage = BucketStorage.from_settings(settings)
    deleter = PhotoDeleteService(writer, storage)
    index.reload()
    return AppContext(settings=settings, index=index, writer=writer, deleter=deleter)
