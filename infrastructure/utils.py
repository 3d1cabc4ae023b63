"""Content-tree layout helpers, id slugs and path containment checks.

Centralizes where each collection lives on disk so the index and the writer
walk the tree the same way.
"""

from __future__ import annotations

from collections.abc import Iterator
from datetime import date
from pathlib import Path
import re

FILMS_SUBDIR = "films"
ROLLS_SUBDIR = "rolls"
ESSAYS_SUBDIR = "photoessays"
CONTENT_SUFFIX = ".yaml"
BACKUP_SUFFIX = ".bak"

_SLUG_INVALID = re.compile(r"[^a-z0-9]+")


def slugify(text: str) -> str:
    """Lowercase `text` and collapse anything but [a-z0-9] into single dashes."""
    return _SLUG_INVALID.sub("-", text.lower().strip()).strip("-")


def default_essay_id(title: str | None, pub_date: str | None) -> str:
    """Return `<pub_date or today>-<slug of title>` for a new essay."""
    date_part = pub_date or date.today().isoformat()
    return f"{date_part}-{slugify(title or 'draft-essay')}"


def derived_roll_id(year: str, roll_file: Path) -> str:
    """Path-form roll id, e.g. `2021/TPE-01`."""
    return f"{year}/{roll_file.stem}"


def iter_content_files(directory: Path) -> Iterator[Path]:
    """Yield `*.yaml` files of `directory` in name order.

    A missing directory yields nothing; an unreadable one raises OSError.
    """
    if not directory.exists():
        return
    for entry in sorted(directory.iterdir()):
        if entry.is_file() and entry.name.endswith(CONTENT_SUFFIX):
            yield entry


def iter_roll_files(rolls_dir: Path) -> Iterator[tuple[str, Path]]:
    """Yield `(year, roll_file)` for every roll under its year directory."""
    if not rolls_dir.exists():
        return
    for year_dir in sorted(rolls_dir.iterdir()):
        if not year_dir.is_dir():
            continue
        for roll_file in iter_content_files(year_dir):
            yield year_dir.name, roll_file


def is_inside(directory: Path, candidate: Path) -> bool:
    """True if `candidate` resolves to a path strictly below `directory`."""
    root = directory.resolve()
    return root in candidate.resolve().parents


def backup_path(path: Path) -> Path:
    """Sibling backup location, e.g. `essay.yaml.bak`."""
    return path.with_name(path.name + BACKUP_SUFFIX)
