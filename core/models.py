"""Core domain models for films, rolls, photos and essays.

Content files use camelCase keys; the models expose snake_case attributes
and accept either spelling. Unknown keys are rejected so a malformed file
fails at load time instead of leaking stray fields. Attribute assignment is
validated too, so an edited model cannot drift from what a load would accept.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

FilmColor = Literal[
    "color-negative",
    "color-positive",
    "black-and-white-negative",
    "special-negative",
]
RollFormat = Literal["half-frame", "35mm", "645", "6x6", "6x7", "6x8", "6x9", "4x5"]
Portfolio = Literal["landscape", "street", "panorama", "portrait"]
SpreadLayout = Literal["single", "duo", "duo-h", "duo-l", "duo-r", "trio", "trio-l", "trio-r"]
PhotoFit = Literal["cover", "contain"]

SLOTS_PER_LAYOUT: dict[str, int] = {
    "single": 1,
    "duo": 2,
    "duo-h": 2,  # legacy alias of duo
    "duo-l": 2,
    "duo-r": 2,
    "trio": 3,
    "trio-l": 3,
    "trio-r": 3,
}


def slot_count(layout: str) -> int:
    """Number of photo slots a layout holds (1 for unknown layouts)."""
    return SLOTS_PER_LAYOUT.get(layout, 1)


class ContentModel(BaseModel):
    """Base for every model read from or written to content files."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        coerce_numbers_to_str=True,
        validate_assignment=True,
    )

    def to_json(self) -> dict:
        """Return the camelCase JSON shape with unset optionals omitted."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class Film(ContentModel):
    """Film stock reference data."""

    id: str = ""
    name: str
    brand: str
    color: FilmColor
    iso: str
    description: str | None = None


class ShotImage(ContentModel):
    src: str
    alt: str = ""
    positionx: str | None = None
    positiony: str | None = None
    labels: list[str] | None = None
    location: str | None = None


class Shot(ContentModel):
    """A single frame of a roll, addressed by its sequence label."""

    sequence: str
    date: str | None = None
    offset_time: str | None = None
    hidden: bool | None = None
    portfolio: Portfolio | None = None
    image: ShotImage


class Roll(ContentModel):
    """One physical roll of film grouped under a year directory."""

    id: str = ""
    manual_id: str | None = None
    film: str
    camera: str | None = None
    format: RollFormat
    description: str | None = None
    cover: str | None = None
    shots: list[Shot] = Field(default_factory=list)

    @field_validator("format", mode="before")
    @classmethod
    def _format_as_text(cls, value: object) -> object:
        # `format: 645` parses as an int
        return str(value) if isinstance(value, int) else value

    def find_shot(self, sequence: str) -> Shot | None:
        for shot in self.shots:
            if shot.sequence == sequence:
                return shot
        return None


class Photo(ContentModel):
    """Flattened, read-only projection of a shot with its roll context."""

    src: str
    alt: str = ""
    roll_id: str
    roll_name: str
    film_id: str
    camera: str | None = None
    date: str | None = None
    sequence: str
    labels: list[str] | None = None
    location: str | None = None
    hidden: bool = False


class SpreadPhoto(ContentModel):
    src: str = ""
    alt: str = ""
    fit: PhotoFit | None = None


class Spread(ContentModel):
    """One layout page of an essay holding up to three photos."""

    layout: SpreadLayout = "single"
    photos: list[SpreadPhoto] = Field(default_factory=list)
    caption: str | None = None

    @model_validator(mode="after")
    def _check_slots(self) -> Spread:
        if len(self.photos) > slot_count(self.layout):
            raise ValueError(
                f"layout {self.layout!r} holds {slot_count(self.layout)} photos, "
                f"got {len(self.photos)}"
            )
        return self


class EssayCover(ContentModel):
    src: str
    alt: str = ""


class Essay(ContentModel):
    """A curated photo story made of ordered spreads."""

    id: str = ""
    title: str
    description: str = ""
    pub_date: str
    updated_date: str | None = None
    author: str = ""
    rolls: list[str] | None = None
    film_stocks: list[str] | None = None
    tags: list[str] | None = None
    cover: EssayCover | None = None
    spreads: list[Spread] = Field(default_factory=list)

    def summary(self) -> EssaySummary:
        """Lightweight listing projection without spread bodies."""
        return EssaySummary(
            id=self.id,
            title=self.title,
            description=self.description,
            pub_date=self.pub_date,
            tags=self.tags,
            rolls=self.rolls,
            film_stocks=self.film_stocks,
            cover=self.cover,
            spread_count=len(self.spreads),
        )


class EssaySummary(ContentModel):
    id: str
    title: str
    description: str = ""
    pub_date: str
    tags: list[str] | None = None
    rolls: list[str] | None = None
    film_stocks: list[str] | None = None
    cover: EssayCover | None = None
    spread_count: int = 0
