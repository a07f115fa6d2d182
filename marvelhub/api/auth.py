import functools
import hashlib
import hmac
import time

from aiohttp import web

from marvelhub.config import settings
from marvelhub.models.users import User


class TokenError(Exception):
    def __init__(self, message: str, status: int):
        super().__init__(message)
        self.message = message
        self.status = status


def _signature(payload: str, secret: str) -> str:
    return hmac.new(secret.encode("utf-8"), payload.encode("utf-8"), hashlib.sha256).hexdigest()


def issue_token(user_id: int, secret: str | None = None, ttl: int | None = None) -> str:
    secret = secret or settings.auth_secret
    expires = int(time.time()) + (ttl if ttl is not None else settings.token_ttl_seconds)
    payload = f"{int(user_id)}.{expires}"
    return f"{payload}.{_signature(payload, secret)}"


def verify_token(token: str, secret: str | None = None) -> int:
    """Return the user id carried by `token` or raise TokenError."""
    secret = secret or settings.auth_secret
    try:
        user_id, expires, signature = token.split(".")
        payload = f"{int(user_id)}.{int(expires)}"
    except ValueError:
        raise TokenError("Authentication failed: Invalid token", 403)

    if not hmac.compare_digest(signature.encode("utf-8"), _signature(payload, secret).encode("utf-8")):
        raise TokenError("Authentication failed: Invalid token", 403)
    if int(expires) < time.time():
        raise TokenError("Authentication failed: Expired token", 401)
    return int(user_id)


def _error(message: str, status: int) -> web.Response:
    return web.json_response({"success": False, "error": message}, status=status)


def login_required(handler):
    """Resolve the bearer token into request["user_id"]."""

    @functools.wraps(handler)
    async def wrapper(request: web.Request):
        auth = request.headers.get("Authorization", "")
        if not auth.startswith("Bearer "):
            return _error("Missing or invalid token", 401)
        try:
            request["user_id"] = verify_token(auth.split(" ", 1)[1].strip(), request.app["auth_secret"])
        except TokenError as exc:
            return _error(exc.message, exc.status)
        return await handler(request)

    return wrapper


def admin_required(handler):
    @login_required
    @functools.wraps(handler)
    async def wrapper(request: web.Request):
        user = await request["session"].get(User, request["user_id"])
        if user is None or not user.is_admin:
            return _error("Admin access required", 403)
        return await handler(request)

    return wrapper
