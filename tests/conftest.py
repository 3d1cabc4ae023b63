from __future__ import annotations

import json
from pathlib import Path

import pytest

from infrastructure.content_index import ContentIndex
from infrastructure.content_writer import ContentWriter
from infrastructure.object_storage import BucketStorage
from infrastructure.settings import JsonSettings

CDN = "https://cdn.example.com"

FILMS = {
    "portra-400": """\
name: Portra 400
brand: Kodak
color: color-negative
iso: 400
""",
    "hp5": """\
name: HP5 Plus
brand: Ilford
color: black-and-white-negative
iso: "400"
description: Classic push-friendly stock
""",
}

ROLLS = {
    "2021/TPE-01": f"""\
film: portra-400
camera: Leica M6
format: 35mm
shots:
  - sequence: "01"
    date: 2021-05-03T10:00:00
    image:
      src: {CDN}/images/TPE-01/a.webp
      alt: Night market stall

  - sequence: "02"
    date: 2021-05-04
    image:
      src: {CDN}/images/TPE-01/b.webp
      alt: Scooters at a crossing
""",
    "2021/TPE-02": f"""\
manualId: kyoto-roll
film: hp5
camera: Nikon FM2
format: 35mm
shots:
  - sequence: 1
    date: 2021-06-01
    portfolio: street
    image:
      src: {CDN}/images/KYO/c.webp
      alt: Stone path
      labels:
        - temple
        - Garden
      location: Kyoto, Japan

  - sequence: 2
    image:
      src: {CDN}/images/KYO/d.webp
      alt: no

  - sequence: 3
    date: 2023-01-01
    image:
      src: {CDN}/images/TPE-01/a.webp
      alt: Duplicate of the market stall
""",
    "2022/LIS-01": f"""\
film: hp5
format: half-frame
shots:
  - sequence: "01"
    date: 2022-01-01
    hidden: true
    image:
      src: {CDN}/images/LIS/e.webp
      alt: Tram in the rain
""",
}

ESSAYS = {
    "2024-03-01-old-title": f"""\
title: Old Title
description: Evenings in Taipei
pubDate: 2024-03-01
author: paskal
rolls:
  - 2021/TPE-01
tags:
  - taipei
spreads:
  - layout: duo
    photos:
      - src: {CDN}/images/TPE-01/a.webp
        alt: Night market stall
      - src: {CDN}/images/KYO/c.webp
        alt: Stone path
    caption: Two cities

  - layout: single
    photos:
      - src: {CDN}/images/TPE-01/a.webp
        alt: Night market stall
""",
    "2024-05-01-kyoto": f"""\
title: Kyoto
description: Temples
pubDate: 2024-05-01
author: paskal
spreads:
  - layout: single
    photos:
      - src: {CDN}/images/KYO/c.webp
        alt: Stone path
        fit: contain
""",
}


def write_tree(root: Path) -> Path:
    for film_id, text in FILMS.items():
        path = root / "films" / f"{film_id}.yaml"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    for roll_id, text in ROLLS.items():
        path = root / "rolls" / f"{roll_id}.yaml"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    for essay_id, text in ESSAYS.items():
        path = root / "photoessays" / f"{essay_id}.yaml"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    return root


class FakeBucketClient:
    """Records delete_object calls; raises `error` when set."""

    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.deleted: list[tuple[str, str]] = []

    def delete_object(self, Bucket: str, Key: str) -> dict:  # noqa: N803 - boto3 signature
        if self.error is not None:
            raise self.error
        self.deleted.append((Bucket, Key))
        return {}


@pytest.fixture
def content_dir(tmp_path: Path) -> Path:
    return write_tree(tmp_path / "content")


@pytest.fixture
def index(content_dir: Path) -> ContentIndex:
    idx = ContentIndex(content_dir)
    idx.reload()
    return idx


@pytest.fixture
def writer(content_dir: Path) -> ContentWriter:
    return ContentWriter(content_dir)


@pytest.fixture
def bucket_client() -> FakeBucketClient:
    return FakeBucketClient()


@pytest.fixture
def storage(bucket_client: FakeBucketClient) -> BucketStorage:
    return BucketStorage(bucket_client, "images-cdn", CDN + "/")


@pytest.fixture
def settings_factory(tmp_path: Path, content_dir: Path):
    """Write a settings.json pointing at the test content tree, merged with `extra`."""

    def make(extra: dict | None = None) -> JsonSettings:
        data = {
            "content": {"dir": str(content_dir)},
            "server": {"host": "127.0.0.1", "port": 4444},
            "storage": {"bucket": "images-cdn", "public_url": ""},
        }
        data.update(extra or {})
        path = tmp_path / "settings.json"
        path.write_text(json.dumps(data), encoding="utf-8")
        return JsonSettings(path)

    return make


@pytest.fixture
def settings(settings_factory) -> JsonSettings:
    return settings_factory()
