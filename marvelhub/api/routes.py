# marvelhub/api/routes.py
import logging
from datetime import datetime, timezone

from aiohttp import web
from pydantic import ValidationError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from marvelhub.api.auth import admin_required, login_required
from marvelhub.api.schemas import ErrorOut, RouletteIn, RouletteOut, SpinReceiptOut, dump
from marvelhub.services.marvel import MarvelApiError
from marvelhub.services.roulettes import RouletteService, RouletteValidationError
from marvelhub.services.spin import SpinError

logger = logging.getLogger(__name__)

routes = web.RouteTableDef()


def error_response(message: str, status: int) -> web.Response:
    return web.json_response(dump(ErrorOut(error=message)), status=status)


def _path_id(request: web.Request) -> int | None:
    try:
        return int(request.match_info["id"])
    except ValueError:
        return None


async def _roulette_body(request: web.Request) -> RouletteIn:
    try:
        body = await request.json()
    except ValueError:
        raise RouletteValidationError("Invalid JSON")
    try:
        return RouletteIn.model_validate(body)
    except ValidationError as exc:
        first = exc.errors()[0]
        field = ".".join(str(p) for p in first["loc"])
        raise RouletteValidationError(f"{field}: {first['msg']}")


@routes.get("/health")
async def health(request: web.Request):
    try:
        await request["session"].execute(text("SELECT 1"))
        db_status = "connected"
    except SQLAlchemyError:
        db_status = "disconnected"
    return web.json_response({
        "status": "success",
        "dbStatus": db_status,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    })


@routes.get("/api/roulettes")
async def list_roulettes(request: web.Request):
    roulettes = await RouletteService.list_roulettes(request["session"])
    return web.json_response({
        "success": True,
        "data": [dump(RouletteOut.model_validate(r)) for r in roulettes],
    })


@routes.post("/api/roulettes")
@admin_required
async def create_roulette(request: web.Request):
    try:
        data = await _roulette_body(request)
        roulette = await RouletteService.create_roulette(request["session"], data.to_service())
    except RouletteValidationError as exc:
        return error_response(exc.message, exc.status)
    return web.json_response({"success": True, "data": dump(RouletteOut.model_validate(roulette))}, status=201)


@routes.get("/api/roulettes/{id}")
async def get_roulette(request: web.Request):
    roulette_id = _path_id(request)
    roulette = None
    if roulette_id is not None:
        roulette = await RouletteService.get_roulette(request["session"], roulette_id)
    if roulette is None:
        return error_response("Roulette not found", 404)
    return web.json_response({"success": True, "data": dump(RouletteOut.model_validate(roulette))})


@routes.put("/api/roulettes/{id}")
@admin_required
async def update_roulette(request: web.Request):
    roulette_id = _path_id(request)
    if roulette_id is None:
        return error_response("Roulette not found", 404)
    try:
        data = await _roulette_body(request)
        roulette = await RouletteService.update_roulette(request["session"], roulette_id, data.to_service())
    except RouletteValidationError as exc:
        return error_response(exc.message, exc.status)
    if roulette is None:
        return error_response("Roulette not found", 404)
    return web.json_response({"success": True, "data": dump(RouletteOut.model_validate(roulette))})


@routes.delete("/api/roulettes/{id}")
@admin_required
async def delete_roulette(request: web.Request):
    roulette_id = _path_id(request)
    if roulette_id is None or not await RouletteService.delete_roulette(request["session"], roulette_id):
        return error_response("Roulette not found", 404)
    return web.json_response({"success": True, "data": {}})


@routes.post("/api/roulettes/{id}/spin")
@login_required
async def spin(request: web.Request):
    roulette_id = _path_id(request)
    if roulette_id is None:
        return error_response("Roulette or user does not exist", 404)

    limiter = request.app["spin_limiter"]
    try:
        async with limiter.for_user(request["user_id"]):
            receipt = await request.app["spin_service"].spin(roulette_id, request["user_id"])
    except SpinError as exc:
        if exc.status >= 500:
            logger.error("Spin error: %s", exc)
        return error_response(exc.message, exc.status)

    return web.json_response(dump(SpinReceiptOut.from_receipt(receipt)))


@routes.get("/api/marvel/characters/{id}")
async def marvel_character(request: web.Request):
    character_id = _path_id(request)
    client = request.app.get("marvel_client")
    if client is None:
        return error_response("Marvel API is not configured", 503)
    if character_id is None:
        return error_response("Character not found", 404)

    try:
        character = await client.get_character(character_id)
    except MarvelApiError as exc:
        logger.error("Marvel lookup for %s failed: %s", character_id, exc)
        return error_response("Marvel API is unavailable", 502)
    if character is None:
        return error_response("Character not found", 404)
    return web.json_response({"success": True, "data": character})
