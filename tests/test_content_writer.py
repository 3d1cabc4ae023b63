from __future__ import annotations

from pathlib import Path

from pydantic import ValidationError
import pytest

from conftest import CDN
from core.errors import ConflictError, InvalidIdError, NotFoundError
from core.models import Essay, EssayCover, Spread, SpreadPhoto
from infrastructure.content_index import ContentIndex
from infrastructure.content_writer import ContentWriter


def _essay(**overrides) -> Essay:
    fields = dict(
        id="2024-07-01-harbour",
        title="Harbour",
        description="Boats at dusk",
        pub_date="2024-07-01",
        author="paskal",
        spreads=[
            Spread(
                layout="duo-l",
                photos=[
                    SpreadPhoto(src=f"{CDN}/x.webp", alt="X", fit="contain"),
                    SpreadPhoto(src=f"{CDN}/y.webp", alt="Y"),
                ],
                caption="Low tide",
            ),
            Spread(layout="single", photos=[SpreadPhoto(src=f"{CDN}/z.webp", alt="Z")]),
        ],
    )
    fields.update(overrides)
    return Essay(**fields)


def _snapshot(directory: Path) -> dict[str, bytes]:
    return {
        str(p.relative_to(directory)): p.read_bytes()
        for p in sorted(directory.rglob("*"))
        if p.is_file()
    }


def test_save_then_reload_round_trips(content_dir: Path, writer: ContentWriter) -> None:
    essay = _essay(
        updated_date="2024-07-02",
        rolls=["2021/TPE-01"],
        film_stocks=["portra-400"],
        tags=["sea"],
        cover=EssayCover(src=f"{CDN}/x.webp", alt="X"),
    )
    writer.save_essay(essay)
    idx = ContentIndex(content_dir)
    idx.reload()
    assert idx.get_essay(essay.id) == essay


def test_round_trip_keeps_optional_fields_absent(content_dir: Path, writer: ContentWriter) -> None:
    essay = _essay()
    path = writer.save_essay(essay)
    text = path.read_text(encoding="utf-8")
    assert "tags" not in text
    assert "updatedDate" not in text

    idx = ContentIndex(content_dir)
    idx.reload()
    loaded = idx.get_essay(essay.id)
    assert loaded == essay
    assert loaded.tags is None


def test_empty_tags_survive_round_trip(content_dir: Path, writer: ContentWriter) -> None:
    essay = _essay(tags=[])
    writer.save_essay(essay)
    idx = ContentIndex(content_dir)
    idx.reload()
    assert idx.get_essay(essay.id).tags == []


def test_saved_file_layout(writer: ContentWriter) -> None:
    path = writer.save_essay(_essay(tags=["sea"]))
    assert path.read_text(encoding="utf-8") == (
        "title: Harbour\n"
        "description: Boats at dusk\n"
        "pubDate: 2024-07-01\n"
        "author: paskal\n"
        "tags:\n"
        "  - sea\n"
        "spreads:\n"
        "  - layout: duo-l\n"
        "    photos:\n"
        f"      - src: {CDN}/x.webp\n"
        "        alt: X\n"
        "        fit: contain\n"
        f"      - src: {CDN}/y.webp\n"
        "        alt: Y\n"
        "    caption: Low tide\n"
        "\n"
        "  - layout: single\n"
        "    photos:\n"
        f"      - src: {CDN}/z.webp\n"
        "        alt: Z\n"
    )


def test_default_fit_is_not_written(writer: ContentWriter) -> None:
    essay = _essay(spreads=[Spread(photos=[SpreadPhoto(src="s", alt="a", fit="cover")])])
    text = writer.save_essay(essay).read_text(encoding="utf-8")
    assert "fit" not in text


def test_save_backs_up_previous_version(content_dir: Path, writer: ContentWriter) -> None:
    essays = content_dir / "photoessays"
    original = (essays / "2024-05-01-kyoto.yaml").read_bytes()
    essay = _essay(id="2024-05-01-kyoto", title="Kyoto again")
    writer.save_essay(essay)
    assert (essays / "2024-05-01-kyoto.yaml.bak").read_bytes() == original
    assert "Kyoto again" in (essays / "2024-05-01-kyoto.yaml").read_text(encoding="utf-8")


def test_new_file_gets_no_backup(content_dir: Path, writer: ContentWriter) -> None:
    writer.save_essay(_essay())
    assert not (content_dir / "photoessays" / "2024-07-01-harbour.yaml.bak").exists()


@pytest.mark.parametrize(
    "bad_id", ["../escaped", "../../rolls/2021/TPE-01", "", "sub/x", "a\\b"]
)
def test_save_rejects_ids_outside_essays_dir(
    content_dir: Path, writer: ContentWriter, bad_id: str
) -> None:
    before = _snapshot(content_dir)
    with pytest.raises(InvalidIdError):
        writer.save_essay(_essay(id=bad_id))
    assert _snapshot(content_dir) == before


def test_create_rejects_nested_custom_id(content_dir: Path, writer: ContentWriter) -> None:
    with pytest.raises(InvalidIdError):
        writer.create_essay(_essay(), "sub/x")
    assert not (content_dir / "photoessays" / "sub").exists()


def test_overfilled_spread_is_never_written(content_dir: Path, writer: ContentWriter) -> None:
    path = content_dir / "photoessays" / "2024-05-01-kyoto.yaml"
    before = _snapshot(content_dir)
    photos = [SpreadPhoto(src=s, alt=s) for s in "abc"]
    overfilled = Spread.model_construct(layout="single", photos=photos, caption=None)
    essay = _essay(id="2024-05-01-kyoto", spreads=[overfilled])
    with pytest.raises(ValidationError):
        writer.save_essay(essay)
    with pytest.raises(ValidationError):
        writer.create_essay(essay, "overfilled")
    assert _snapshot(content_dir) == before
    assert path.exists()


def test_create_derives_id_from_date_and_title(writer: ContentWriter) -> None:
    essay_id = writer.create_essay(_essay(id="", title="  Night Markets & Neon! "))
    assert essay_id == "2024-07-01-night-markets-neon"
    assert writer.essay_path(essay_id).exists()


def test_create_without_title_uses_draft_slug(writer: ContentWriter) -> None:
    assert writer.create_essay(_essay(id="", title="")) == "2024-07-01-draft-essay"


def test_create_with_custom_id_and_conflict(writer: ContentWriter) -> None:
    assert writer.create_essay(_essay(), "my-essay") == "my-essay"
    with pytest.raises(ConflictError):
        writer.create_essay(_essay(), "my-essay")
    with pytest.raises(ConflictError):
        writer.create_essay(_essay(), "2024-05-01-kyoto")


def test_rename_to_same_id_touches_nothing(content_dir: Path, writer: ContentWriter) -> None:
    essays = content_dir / "photoessays"
    before = _snapshot(essays)
    writer.rename_essay("2024-03-01-old-title", "2024-03-01-old-title")
    assert _snapshot(essays) == before
    assert not list(essays.glob("*.bak"))


def test_rename_moves_file_and_keeps_backup(content_dir: Path, writer: ContentWriter) -> None:
    essays = content_dir / "photoessays"
    original = (essays / "2024-03-01-old-title.yaml").read_bytes()
    writer.rename_essay("2024-03-01-old-title", "2024-03-01-new-title")
    assert not (essays / "2024-03-01-old-title.yaml").exists()
    assert (essays / "2024-03-01-new-title.yaml").read_bytes() == original
    assert (essays / "2024-03-01-old-title.yaml.bak").read_bytes() == original


def test_rename_failures_leave_files_alone(content_dir: Path, writer: ContentWriter) -> None:
    essays = content_dir / "photoessays"
    before = _snapshot(essays)
    with pytest.raises(InvalidIdError):
        writer.rename_essay("2024-03-01-old-title", "   ")
    with pytest.raises(InvalidIdError):
        writer.rename_essay("2024-03-01-old-title", "../outside")
    with pytest.raises(NotFoundError):
        writer.rename_essay("does-not-exist", "whatever")
    with pytest.raises(ConflictError):
        writer.rename_essay("2024-03-01-old-title", "2024-05-01-kyoto")
    assert _snapshot(essays) == before


def test_update_shot_hidden_by_manual_id(content_dir: Path, writer: ContentWriter) -> None:
    path = writer.update_shot_hidden("kyoto-roll", "2", True)
    assert path == content_dir / "rolls" / "2021" / "TPE-02.yaml"
    text = path.read_text(encoding="utf-8")
    assert text.startswith(
        "manualId: kyoto-roll\nfilm: hp5\ncamera: Nikon FM2\nformat: 35mm\nshots:\n"
    )
    assert "\n\n  - sequence: '2'\n    hidden: true\n" in text

    idx = ContentIndex(content_dir)
    idx.reload()
    assert idx.get_roll("kyoto-roll").find_shot("2").hidden is True


def test_update_shot_hidden_by_derived_id(content_dir: Path, writer: ContentWriter) -> None:
    writer.update_shot_hidden("2022/LIS-01", "01", False)
    idx = ContentIndex(content_dir)
    idx.reload()
    assert idx.get_roll("2022/LIS-01").find_shot("01").hidden is False


def test_remove_shot(content_dir: Path, writer: ContentWriter) -> None:
    writer.remove_shot("2021/TPE-01", "02")
    idx = ContentIndex(content_dir)
    idx.reload()
    assert [s.sequence for s in idx.get_roll("2021/TPE-01").shots] == ["01"]


def test_remove_missing_sequence_leaves_file_byte_identical(
    content_dir: Path, writer: ContentWriter
) -> None:
    path = content_dir / "rolls" / "2021" / "TPE-01.yaml"
    before = path.read_bytes()
    with pytest.raises(NotFoundError):
        writer.remove_shot("2021/TPE-01", "99")
    assert path.read_bytes() == before


def test_unknown_roll_is_not_found(writer: ContentWriter) -> None:
    with pytest.raises(NotFoundError):
        writer.update_shot_hidden("1999/NOPE", "01", True)
    with pytest.raises(NotFoundError):
        writer.get_shot("1999/NOPE", "01")
