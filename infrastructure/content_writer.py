"""Persistence of essays and shot mutations back to YAML content files.

Files are written with curated key order and blank lines between spreads or
shots. Saving an essay copies the previous file to `<id>.yaml.bak` first.
The backup-then-write sequence is not transactional: a crash in between can
leave a partially written file next to an intact backup.
"""

from __future__ import annotations

from pathlib import Path
import shutil
from typing import Any

from loguru import logger
import yaml

from core.errors import ConflictError, ContentParseError, InvalidIdError, NotFoundError
from core.models import Essay, Roll, Shot
from infrastructure.content_index import parse_content_file
from infrastructure.utils import (
    CONTENT_SUFFIX,
    ESSAYS_SUBDIR,
    ROLLS_SUBDIR,
    backup_path,
    default_essay_id,
    derived_roll_id,
    is_inside,
    iter_roll_files,
)
from infrastructure.yaml_format import read_yaml, write_yaml


def build_essay_document(essay: Essay) -> dict[str, Any]:
    """Return the on-disk mapping for `essay` in curated key order."""
    doc: dict[str, Any] = {
        "title": essay.title,
        "description": essay.description,
        "pubDate": essay.pub_date,
    }
    if essay.updated_date:
        doc["updatedDate"] = essay.updated_date
    doc["author"] = essay.author
    if essay.rolls:
        doc["rolls"] = list(essay.rolls)
    if essay.film_stocks:
        doc["filmStocks"] = list(essay.film_stocks)
    if essay.tags is not None:
        doc["tags"] = list(essay.tags)
    if essay.cover:
        doc["cover"] = {"src": essay.cover.src, "alt": essay.cover.alt}

    spreads = []
    for spread in essay.spreads:
        photos = []
        for photo in spread.photos:
            item: dict[str, Any] = {"src": photo.src, "alt": photo.alt}
            if photo.fit and photo.fit != "cover":
                item["fit"] = photo.fit
            photos.append(item)
        entry: dict[str, Any] = {"layout": spread.layout, "photos": photos}
        if spread.caption:
            entry["caption"] = spread.caption
        spreads.append(entry)
    doc["spreads"] = spreads
    return doc


def _checked_essay_document(essay: Essay) -> dict[str, Any]:
    """Build the essay document and validate it the way a reload will.

    Raises pydantic's ValidationError before anything is written.
    """
    doc = build_essay_document(essay)
    Essay.model_validate({**doc, "id": essay.id})
    return doc


def _shot_document(shot: Shot) -> dict[str, Any]:
    doc: dict[str, Any] = {"sequence": shot.sequence}
    if shot.date:
        doc["date"] = shot.date
    if shot.offset_time:
        doc["offsetTime"] = shot.offset_time
    if shot.hidden is not None:
        doc["hidden"] = shot.hidden
    if shot.portfolio:
        doc["portfolio"] = shot.portfolio

    image = shot.image
    img: dict[str, Any] = {"src": image.src, "alt": image.alt}
    if image.positionx:
        img["positionx"] = image.positionx
    if image.positiony:
        img["positiony"] = image.positiony
    if image.labels:
        img["labels"] = list(image.labels)
    if image.location:
        img["location"] = image.location
    doc["image"] = img
    return doc


def build_roll_document(roll: Roll) -> dict[str, Any]:
    """Return the on-disk mapping for `roll` in curated key order."""
    doc: dict[str, Any] = {}
    if roll.manual_id:
        doc["manualId"] = roll.manual_id
    doc["film"] = roll.film
    if roll.camera:
        doc["camera"] = roll.camera
    doc["format"] = roll.format
    if roll.description:
        doc["description"] = roll.description
    if roll.cover:
        doc["cover"] = roll.cover
    doc["shots"] = [_shot_document(shot) for shot in roll.shots]
    return doc


class ContentWriter:
    """Write essays and roll shot changes under a content directory."""

    def __init__(self, content_dir: str | Path) -> None:
        self._root = Path(content_dir)

    @property
    def essays_dir(self) -> Path:
        return self._root / ESSAYS_SUBDIR

    @property
    def rolls_dir(self) -> Path:
        return self._root / ROLLS_SUBDIR

    def essay_path(self, essay_id: str) -> Path:
        """Return the file path for `essay_id`, rejecting ids that escape the essays dir."""
        if not essay_id or not essay_id.strip():
            raise InvalidIdError("Essay id cannot be empty")
        # the index only reads files directly inside the essays dir
        if "/" in essay_id or "\\" in essay_id:
            raise InvalidIdError(f"Invalid essay id {essay_id!r}: path separators are not allowed")
        path = self.essays_dir / f"{essay_id}{CONTENT_SUFFIX}"
        if not is_inside(self.essays_dir, path):
            raise InvalidIdError(f"Invalid essay id {essay_id!r}: path traversal detected")
        return path

    # --- essays ---

    def save_essay(self, essay: Essay) -> Path:
        """Write `essay` to its file, backing up any previous version."""
        path = self.essay_path(essay.id)
        doc = _checked_essay_document(essay)
        if path.exists():
            backup = backup_path(path)
            shutil.copyfile(path, backup)
            logger.info("Backed up {} to {}", path.name, backup.name)

        path.parent.mkdir(parents=True, exist_ok=True)
        write_yaml(path, doc, ["spreads"])
        logger.info("Saved essay {} ({} spreads)", essay.id, len(essay.spreads))
        return path

    def create_essay(self, essay: Essay, custom_id: str | None = None) -> str:
        """Write a new essay file and return its id. Never overwrites."""
        essay_id = custom_id or default_essay_id(essay.title, essay.pub_date)
        path = self.essay_path(essay_id)
        if path.exists():
            raise ConflictError(f"Essay file already exists: {path.name}")

        doc = _checked_essay_document(essay.model_copy(update={"id": essay_id}))
        path.parent.mkdir(parents=True, exist_ok=True)
        write_yaml(path, doc, ["spreads"])
        logger.info("Created essay {}", essay_id)
        return essay_id

    def rename_essay(self, old_id: str, new_id: str) -> None:
        """Move an essay file to a new id, backing up the old file first."""
        if old_id == new_id:
            return
        if not new_id or not new_id.strip():
            raise InvalidIdError("New essay id cannot be empty")

        old_path = self.essay_path(old_id)
        new_path = self.essay_path(new_id)
        if not old_path.exists():
            raise NotFoundError(f"Essay not found: {old_path.name}")
        if new_path.exists():
            raise ConflictError(f"Essay already exists: {new_path.name}")

        shutil.copyfile(old_path, backup_path(old_path))
        old_path.rename(new_path)
        logger.info("Renamed essay {} -> {}", old_id, new_id)

    # --- rolls ---

    def find_roll_path(self, roll_id: str) -> Path | None:
        """Locate a roll file by manual or derived id, scanning every roll file."""
        for year, path in iter_roll_files(self.rolls_dir):
            if derived_roll_id(year, path) == roll_id:
                return path
            try:
                data = read_yaml(path)
            except yaml.YAMLError as ex:
                raise ContentParseError(path, str(ex)) from ex
            if isinstance(data, dict) and data.get("manualId") == roll_id:
                return path
        return None

    def _load_roll(self, roll_id: str) -> tuple[Path, Roll]:
        path = self.find_roll_path(roll_id)
        if path is None:
            raise NotFoundError(f"Roll not found: {roll_id}")
        return path, parse_content_file(path, Roll, id=roll_id)

    def get_shot(self, roll_id: str, sequence: str) -> Shot:
        """Return one shot as currently stored in its roll file."""
        _, roll = self._load_roll(roll_id)
        shot = roll.find_shot(sequence)
        if shot is None:
            raise NotFoundError(f"Shot {sequence} not found in roll {roll_id}")
        return shot

    def update_shot_hidden(self, roll_id: str, sequence: str, hidden: bool) -> Path:
        """Set a shot's hidden flag and rewrite its roll file."""
        path, roll = self._load_roll(roll_id)
        shot = roll.find_shot(sequence)
        if shot is None:
            raise NotFoundError(f"Shot {sequence} not found in roll {roll_id}")

        shot.hidden = hidden
        write_yaml(path, build_roll_document(roll), ["shots"])
        logger.info("Shot {}/{} hidden={}", roll_id, sequence, hidden)
        return path

    def remove_shot(self, roll_id: str, sequence: str) -> Path:
        """Remove a shot by sequence and rewrite its roll file."""
        path, roll = self._load_roll(roll_id)
        shot = roll.find_shot(sequence)
        if shot is None:
            raise NotFoundError(f"Shot {sequence} not found in roll {roll_id}")

        roll.shots.remove(shot)
        write_yaml(path, build_roll_document(roll), ["shots"])
        logger.info("Removed shot {} from roll {}", sequence, roll_id)
        return path
