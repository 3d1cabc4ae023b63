from __future__ import annotations

import argparse
from datetime import date
from pathlib import Path
import sys

from loguru import logger
import uvicorn

from app.api.routes import create_app
from app.context import build_context
from core.errors import ContentError
from core.models import Essay
from core.services.interfaces import PhotoFilters
from infrastructure.logging import init_logging
from infrastructure.settings import JsonSettings

BASE_DIR = Path(__file__).parent


def _load_settings(args: argparse.Namespace) -> JsonSettings:
    settings = JsonSettings(args.settings)
    init_logging(settings.get_path("logging.dir"), settings.get("logging.level", "INFO"))
    return settings


def cmd_serve(args: argparse.Namespace) -> int:
    settings = _load_settings(args)
    ctx = build_context(settings)
    host = args.host or settings.get("server.host", "127.0.0.1")
    port = args.port or int(settings.get("server.port", 4444))
    logger.info("Serving content API for {} at http://{}:{}", ctx.content_dir, host, port)
    uvicorn.run(create_app(ctx), host=host, port=port, log_config=None)
    return 0


def cmd_check(args: argparse.Namespace) -> int:
    """Load every content file and report counts; fails on the first malformed file."""
    settings = _load_settings(args)
    try:
        ctx = build_context(settings)
    except ContentError as ex:
        logger.error("{}", ex)
        return 1
    index = ctx.index
    unused = index.get_photos(PhotoFilters(unused=True, include_hidden=True))
    print(f"films:  {len(index.get_films())}")
    print(f"rolls:  {len(index.get_rolls())}")
    photos = index.get_photos(PhotoFilters(include_hidden=True))
    print(f"photos: {len(photos)} ({len(unused)} unused)")
    print(f"essays: {len(index.get_essays())}")
    return 0


def cmd_new_essay(args: argparse.Namespace) -> int:
    settings = _load_settings(args)
    ctx = build_context(settings)
    essay = Essay(
        title=args.title,
        description=args.description,
        pub_date=args.date,
        author=args.author or settings.get("editor.default_author", ""),
        tags=[],
    )
    try:
        essay_id = ctx.writer.create_essay(essay, args.id)
    except ContentError as ex:
        logger.error("{}", ex)
        return 1
    print(essay_id)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Local content manager for the photo portfolio.")
    parser.add_argument(
        "--settings", default=str(BASE_DIR / "settings.json"), help="Path to settings.json"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the JSON API")
    serve.add_argument("--host")
    serve.add_argument("--port", type=int)
    serve.set_defaults(func=cmd_serve)

    check = sub.add_parser("check", help="Validate all content files and print counts")
    check.set_defaults(func=cmd_check)

    new = sub.add_parser("new-essay", help="Create an empty essay file")
    new.add_argument("title")
    new.add_argument("--description", default="")
    new.add_argument(
        "--date", default=date.today().isoformat(), help="Publish date, YYYY-MM-DD (default: today)"
    )
    new.add_argument("--author", default=None)
    new.add_argument("--id", default=None, help="Explicit essay id")
    new.set_defaults(func=cmd_new_essay)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
