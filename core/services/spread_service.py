"""Spread editing rules decoupled from any view model.

Every function mutates the given spreads in place and returns True when it
changed something. Out-of-range indexes leave the spreads untouched and
return False, so callers can skip recording history for no-ops.
"""

from __future__ import annotations

from core.models import SLOTS_PER_LAYOUT, Spread, SpreadPhoto, slot_count


def _valid_index(items: list, index: int) -> bool:
    return 0 <= index < len(items)


def _pad_to(photos: list[SpreadPhoto], slot: int) -> None:
    """Extend `photos` with empty placeholders until `slot` exists."""
    while len(photos) <= slot:
        photos.append(SpreadPhoto(src="", alt=""))


def change_layout(spreads: list[Spread], index: int, layout: str) -> bool:
    """Switch a spread's layout without ever dropping a photo.

    Placeholders are discarded. Photos beyond the new slot count each become
    a new `single` spread inserted right after the resized one, in their
    original order. Unknown layouts are rejected like out-of-range indexes.
    """
    if layout not in SLOTS_PER_LAYOUT or not _valid_index(spreads, index):
        return False
    spread = spreads[index]
    filled = [p for p in spread.photos if p.src]
    keep = slot_count(layout)

    spreads[index] = Spread(layout=layout, photos=filled[:keep], caption=spread.caption)
    overflow = [Spread(layout="single", photos=[p]) for p in filled[keep:]]
    spreads[index + 1 : index + 1] = overflow
    return True


def set_photo(spreads: list[Spread], spread_index: int, slot: int, photo: SpreadPhoto) -> bool:
    """Place `photo` in a slot, overwriting whatever was there."""
    if not _valid_index(spreads, spread_index):
        return False
    spread = spreads[spread_index]
    if not 0 <= slot < slot_count(spread.layout):
        return False
    _pad_to(spread.photos, slot)
    spread.photos[slot] = SpreadPhoto(src=photo.src, alt=photo.alt)
    return True


def remove_photo(spreads: list[Spread], spread_index: int, slot: int) -> bool:
    """Drop a slot, shifting later photos left."""
    if not _valid_index(spreads, spread_index):
        return False
    photos = spreads[spread_index].photos
    if not _valid_index(photos, slot):
        return False
    del photos[slot]
    return True


def move_photo(
    spreads: list[Spread], from_spread: int, from_slot: int, to_spread: int, to_slot: int
) -> bool:
    """Drag a placed photo onto another slot.

    An occupied destination swaps the two photos. An empty destination takes
    the photo and the source slot is removed, shortening that list.
    """
    if (from_spread, from_slot) == (to_spread, to_slot):
        return False
    if not (_valid_index(spreads, from_spread) and _valid_index(spreads, to_spread)):
        return False
    source = spreads[from_spread].photos
    target = spreads[to_spread]
    if not _valid_index(source, from_slot) or not source[from_slot].src:
        return False
    if not 0 <= to_slot < slot_count(target.layout):
        return False

    photo = source[from_slot]
    occupant = target.photos[to_slot] if to_slot < len(target.photos) else None
    if occupant is not None and occupant.src:
        source[from_slot] = occupant
    else:
        del source[from_slot]

    _pad_to(target.photos, to_slot)
    target.photos[to_slot] = photo
    return True


def reorder(spreads: list[Spread], from_index: int, to_index: int) -> bool:
    """Move one spread to a new position."""
    if not (_valid_index(spreads, from_index) and _valid_index(spreads, to_index)):
        return False
    if from_index == to_index:
        return False
    moved = spreads.pop(from_index)
    spreads.insert(to_index, moved)
    return True
