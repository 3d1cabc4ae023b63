"""Read-only, queryable views over the on-disk content collections.

The index is rebuilt wholesale by `reload()`: films, rolls and essays are
re-read from YAML, then the deduplicated photo list and the photo usage map
are derived from them. Nothing is patched incrementally.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from loguru import logger
from pydantic import BaseModel, ValidationError
import yaml

from core.errors import ContentParseError
from core.models import Essay, EssaySummary, Film, Photo, Roll
from core.services.interfaces import PhotoFilters, PhotoUsage
from core.services.sort_service import SortService
from infrastructure.utils import (
    ESSAYS_SUBDIR,
    FILMS_SUBDIR,
    ROLLS_SUBDIR,
    derived_roll_id,
    iter_content_files,
    iter_roll_files,
)
from infrastructure.yaml_format import read_yaml


def parse_content_file(path: Path, model: type[BaseModel], **extra: Any) -> Any:
    """Read `path` and validate it as `model`, merging `extra` fields.

    Raises ContentParseError on YAML syntax errors or schema violations.
    """
    try:
        data = read_yaml(path)
    except yaml.YAMLError as ex:
        raise ContentParseError(path, str(ex)) from ex
    if not isinstance(data, dict):
        raise ContentParseError(path, "expected a mapping at the top level")
    try:
        return model.model_validate({**data, **extra})
    except ValidationError as ex:
        raise ContentParseError(path, str(ex)) from ex


class ContentIndex:
    """In-memory tables of films, rolls and essays with derived photo views."""

    def __init__(self, content_dir: str | Path, sorter: SortService | None = None) -> None:
        self._root = Path(content_dir)
        self._sorter = sorter or SortService()
        self._films: dict[str, Film] = {}
        self._rolls: dict[str, Roll] = {}
        self._roll_aliases: dict[str, str] = {}
        self._essays: dict[str, Essay] = {}
        self._photos: list[Photo] = []
        self._usage: PhotoUsage = {}

    @property
    def content_dir(self) -> Path:
        return self._root

    def reload(self) -> None:
        """Rebuild every table from disk.

        New tables are built aside and swapped in only after every file
        parsed; on a ContentParseError the previous contents stay served.
        """
        films = self._read_films()
        rolls, aliases = self._read_rolls()
        essays = self._read_essays()
        photos = self._sorter.sort_by_date(_project_photos(rolls))
        usage = _usage_of(essays)

        self._films = films
        self._rolls = rolls
        self._roll_aliases = aliases
        self._essays = essays
        self._photos = photos
        self._usage = usage
        logger.info(
            "Content index loaded from {}: {} films, {} rolls, {} photos, {} essays",
            self._root,
            len(films),
            len(rolls),
            len(photos),
            len(essays),
        )

    load = reload

    def _read_films(self) -> dict[str, Film]:
        return {
            path.stem: parse_content_file(path, Film, id=path.stem)
            for path in iter_content_files(self._root / FILMS_SUBDIR)
        }

    def _read_rolls(self) -> tuple[dict[str, Roll], dict[str, str]]:
        rolls: dict[str, Roll] = {}
        aliases: dict[str, str] = {}
        for year, path in iter_roll_files(self._root / ROLLS_SUBDIR):
            derived = derived_roll_id(year, path)
            roll: Roll = parse_content_file(path, Roll)
            roll.id = roll.manual_id or derived
            if roll.id in rolls:
                logger.warning("Duplicate roll id {} in {}; later file wins", roll.id, path)
            rolls[roll.id] = roll
            aliases[derived] = roll.id
        return rolls, aliases

    def _read_essays(self) -> dict[str, Essay]:
        return {
            path.stem: parse_content_file(path, Essay, id=path.stem)
            for path in iter_content_files(self._root / ESSAYS_SUBDIR)
        }

    # --- queries ---

    def get_films(self) -> list[Film]:
        return list(self._films.values())

    def get_film(self, film_id: str) -> Film | None:
        return self._films.get(film_id)

    def get_rolls(self) -> list[Roll]:
        return list(self._rolls.values())

    def resolve_roll_id(self, roll_id: str) -> str | None:
        """Map a manual or derived roll id to the roll's external id."""
        if roll_id in self._rolls:
            return roll_id
        return self._roll_aliases.get(roll_id)

    def get_roll(self, roll_id: str) -> Roll | None:
        resolved = self.resolve_roll_id(roll_id)
        return self._rolls.get(resolved) if resolved else None

    def get_photos(self, filters: PhotoFilters | None = None) -> list[Photo]:
        """Return the date-sorted photo list narrowed by `filters`."""
        f = filters or PhotoFilters()
        photos = self._photos

        if not f.include_hidden:
            photos = [p for p in photos if not p.hidden]
        if f.roll:
            roll_id = self.resolve_roll_id(f.roll) or f.roll
            photos = [p for p in photos if p.roll_id == roll_id]
        if f.film:
            photos = [p for p in photos if p.film_id == f.film]
        if f.camera:
            camera = f.camera.lower()
            photos = [p for p in photos if p.camera and p.camera.lower() == camera]
        if f.unused:
            photos = [p for p in photos if not self._usage.get(p.src)]
        if f.search:
            query = f.search.lower()
            photos = [p for p in photos if _matches_search(p, query)]

        return list(photos)

    def get_essays(self) -> list[EssaySummary]:
        return [essay.summary() for essay in self._essays.values()]

    def get_essay(self, essay_id: str) -> Essay | None:
        return self._essays.get(essay_id)

    def get_usage(self) -> PhotoUsage:
        return self._usage

    def get_cameras(self) -> list[str]:
        """Sorted camera names seen across all rolls."""
        return sorted({roll.camera for roll in self._rolls.values() if roll.camera})


def _matches_search(photo: Photo, query: str) -> bool:
    if query in photo.alt.lower():
        return True
    if photo.labels and any(query in label.lower() for label in photo.labels):
        return True
    return bool(photo.location and query in photo.location.lower())


def _project_photos(rolls: dict[str, Roll]) -> list[Photo]:
    """Flatten roll shots into photos, keeping the first occurrence of each URL."""
    photos: list[Photo] = []
    seen: set[str] = set()
    for roll_id, roll in rolls.items():
        for shot in roll.shots:
            src = shot.image.src
            if src in seen:
                continue
            seen.add(src)
            photos.append(
                Photo(
                    src=src,
                    alt=shot.image.alt,
                    roll_id=roll_id,
                    roll_name=roll_id.split("/")[-1],
                    film_id=roll.film,
                    camera=roll.camera,
                    date=shot.date,
                    sequence=shot.sequence,
                    labels=shot.image.labels,
                    location=shot.image.location,
                    hidden=bool(shot.hidden),
                )
            )
    return photos


def _usage_of(essays: dict[str, Essay]) -> PhotoUsage:
    """Map each photo src to the ids of essays showing it, placeholders skipped."""
    usage: PhotoUsage = {}
    for essay_id, essay in essays.items():
        for spread in essay.spreads:
            for photo in spread.photos:
                if not photo.src:
                    continue
                essay_ids = usage.setdefault(photo.src, [])
                if essay_id not in essay_ids:
                    essay_ids.append(essay_id)
    return usage
