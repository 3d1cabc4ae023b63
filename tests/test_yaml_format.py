from __future__ import annotations

from pathlib import Path

from infrastructure.yaml_format import add_blank_lines_between_items, format_yaml, read_yaml


def test_blank_line_between_top_level_items_only() -> None:
    text = format_yaml(
        {
            "title": "T",
            "spreads": [
                {"layout": "duo", "photos": [{"src": "a", "alt": ""}, {"src": "b", "alt": ""}]},
                {"layout": "single", "photos": [{"src": "c", "alt": ""}]},
            ],
        },
        ["spreads"],
    )
    assert text == (
        "title: T\n"
        "spreads:\n"
        "  - layout: duo\n"
        "    photos:\n"
        "      - src: a\n"
        "        alt: ''\n"
        "      - src: b\n"
        "        alt: ''\n"
        "\n"
        "  - layout: single\n"
        "    photos:\n"
        "      - src: c\n"
        "        alt: ''\n"
    )


def test_unlisted_arrays_are_not_spaced() -> None:
    text = format_yaml({"tags": ["a", "b"], "shots": [{"x": 1}, {"x": 2}]}, ["shots"])
    assert "tags:\n  - a\n  - b\nshots:\n  - x: 1\n\n  - x: 2\n" == text


def test_spacing_stops_at_next_top_level_key() -> None:
    text = "shots:\n  - a: 1\n  - a: 2\nother:\n  - b: 1\n  - b: 2\n"
    assert add_blank_lines_between_items(text, ["shots"]) == (
        "shots:\n  - a: 1\n\n  - a: 2\nother:\n  - b: 1\n  - b: 2\n"
    )


def test_dates_are_written_plain_and_read_back_as_text(tmp_path: Path) -> None:
    text = format_yaml({"pubDate": "2024-03-01", "updatedDate": "2024-03-02T10:00:00"})
    assert text == "pubDate: 2024-03-01\nupdatedDate: 2024-03-02T10:00:00\n"

    path = tmp_path / "e.yaml"
    path.write_text(text, encoding="utf-8")
    assert read_yaml(path) == {"pubDate": "2024-03-01", "updatedDate": "2024-03-02T10:00:00"}


def test_only_true_and_false_are_booleans(tmp_path: Path) -> None:
    path = tmp_path / "b.yaml"
    path.write_text("a: yes\nb: off\nc: true\nd: False\n", encoding="utf-8")
    assert read_yaml(path) == {"a": "yes", "b": "off", "c": True, "d": False}
    assert format_yaml({"alt": "no", "hidden": False}) == "alt: no\nhidden: false\n"


def test_long_lines_are_not_folded_and_unicode_kept() -> None:
    alt = "Ein sehr langer Alternativtext über den Nachtmarkt " * 5
    text = format_yaml({"alt": alt.strip()})
    assert text.count("\n") == 1
    assert "über" in text


def test_numeric_looking_strings_are_quoted() -> None:
    assert format_yaml({"sequence": "01", "iso": "400"}) == "sequence: '01'\niso: '400'\n"
