"""JSON API over the content index, writer and delete service.

Handlers are plain functions run in the server threadpool. Writes and reloads
take the context lock, so a read-modify-write of a content file never
interleaves with another. Reads take no lock: a reload swaps the index tables
in whole. Every write is followed by a full index reload.
"""

from __future__ import annotations

from datetime import date
from typing import Any

from fastapi import APIRouter, Body, Depends, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.schemas import DeletePhotoIn, HidePhotoIn, RenameIn
from app.context import AppContext
from core.errors import (
    ConflictError,
    ContentError,
    InvalidIdError,
    NotFoundError,
    StorageError,
)
from core.models import Essay
from core.services.interfaces import PhotoFilters

router = APIRouter(prefix="/api")

_ERROR_STATUS: list[tuple[type[ContentError], int]] = [
    (NotFoundError, 404),
    (InvalidIdError, 400),
    (ConflictError, 409),
    (StorageError, 502),
]


def get_context(request: Request) -> AppContext:
    return request.app.state.context


def _error(status: int, message: str) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status)


# --- read endpoints ---


@router.get("/photos")
def list_photos(
    roll: str | None = None,
    film: str | None = None,
    camera: str | None = None,
    unused: bool = False,
    search: str | None = None,
    include_hidden: bool = Query(False, alias="includeHidden"),
    ctx: AppContext = Depends(get_context),
):
    filters = PhotoFilters(
        roll=roll or None,
        film=film or None,
        camera=camera or None,
        unused=unused,
        search=search or None,
        include_hidden=include_hidden,
    )
    return [p.to_json() for p in ctx.index.get_photos(filters)]


@router.get("/rolls")
def list_rolls(ctx: AppContext = Depends(get_context)):
    return [r.to_json() for r in ctx.index.get_rolls()]


@router.get("/rolls/{roll_id:path}")
def get_roll(roll_id: str, ctx: AppContext = Depends(get_context)):
    roll = ctx.index.get_roll(roll_id)
    if roll is None:
        raise NotFoundError(f"Roll not found: {roll_id}")
    return roll.to_json()


@router.get("/films")
def list_films(ctx: AppContext = Depends(get_context)):
    return [f.to_json() for f in ctx.index.get_films()]


@router.get("/films/{film_id}")
def get_film(film_id: str, ctx: AppContext = Depends(get_context)):
    film = ctx.index.get_film(film_id)
    if film is None:
        raise NotFoundError(f"Film not found: {film_id}")
    return film.to_json()


@router.get("/cameras")
def list_cameras(ctx: AppContext = Depends(get_context)):
    return ctx.index.get_cameras()


@router.get("/usage")
def photo_usage(ctx: AppContext = Depends(get_context)):
    return ctx.index.get_usage()


@router.get("/essays")
def list_essays(ctx: AppContext = Depends(get_context)):
    return [e.to_json() for e in ctx.index.get_essays()]


@router.get("/essays/{essay_id}")
def get_essay(essay_id: str, ctx: AppContext = Depends(get_context)):
    essay = ctx.index.get_essay(essay_id)
    if essay is None:
        raise NotFoundError("Essay not found")
    return essay.to_json()


# --- write endpoints ---


@router.post("/essays", status_code=201)
def create_essay(
    payload: dict[str, Any] = Body(...), ctx: AppContext = Depends(get_context)
):
    body = dict(payload)
    custom_id = body.pop("id", None) or None
    if not body.get("pubDate"):
        body["pubDate"] = date.today().isoformat()
    body.setdefault("title", "")
    essay = Essay.model_validate(body)
    with ctx.lock:
        essay_id = ctx.writer.create_essay(essay, custom_id)
        ctx.index.reload()
    return {"id": essay_id}


@router.put("/essays/{essay_id}")
def save_essay(
    essay_id: str, payload: dict[str, Any] = Body(...), ctx: AppContext = Depends(get_context)
):
    essay = Essay.model_validate({**payload, "id": essay_id})
    with ctx.lock:
        ctx.writer.save_essay(essay)
        ctx.index.reload()
    return {"id": essay_id, "saved": True}


@router.post("/essays/{essay_id}/rename")
def rename_essay(essay_id: str, payload: RenameIn, ctx: AppContext = Depends(get_context)):
    with ctx.lock:
        ctx.writer.rename_essay(essay_id, payload.new_id)
        ctx.index.reload()
    return {"id": payload.new_id}


@router.post("/photos/hide")
def hide_photo(payload: HidePhotoIn, ctx: AppContext = Depends(get_context)):
    with ctx.lock:
        ctx.writer.update_shot_hidden(payload.roll_id, payload.sequence, payload.hidden)
        ctx.index.reload()
    return {"ok": True}


@router.delete("/photos")
def delete_photo(payload: DeletePhotoIn, ctx: AppContext = Depends(get_context)):
    with ctx.lock:
        result = ctx.deleter.delete_photo(payload.roll_id, payload.sequence, payload.src)
        ctx.index.reload()
    return {"ok": True, "key": result.object_key}


@router.post("/reload")
def reload_index(ctx: AppContext = Depends(get_context)):
    with ctx.lock:
        ctx.index.reload()
    return {"reloaded": True}


# --- error mapping ---


async def _content_error(request: Request, exc: ContentError) -> JSONResponse:
    status = next((code for cls, code in _ERROR_STATUS if isinstance(exc, cls)), 500)
    if status >= 500:
        logger.error("{} {} failed: {}", request.method, request.url.path, exc)
    return _error(status, str(exc))


async def _validation_error(request: Request, exc: Exception) -> JSONResponse:
    return _error(400, f"Invalid request: {exc}")


async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return _error(exc.status_code, str(exc.detail))


async def _os_error(request: Request, exc: OSError) -> JSONResponse:
    logger.error("{} {} I/O failure: {}", request.method, request.url.path, exc)
    return _error(500, str(exc))


def create_app(context: AppContext) -> FastAPI:
    """Build the API application around an already-loaded `context`."""
    app = FastAPI(title="Shots CMS API")
    app.state.context = context
    app.add_middleware(
        CORSMiddleware,
        allow_origins=context.settings.get("server.cors_origins", ["*"]),
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(router)
    app.add_exception_handler(ContentError, _content_error)
    app.add_exception_handler(ValidationError, _validation_error)
    app.add_exception_handler(RequestValidationError, _validation_error)
    app.add_exception_handler(StarletteHTTPException, _http_error)
    app.add_exception_handler(OSError, _os_error)
    return app
