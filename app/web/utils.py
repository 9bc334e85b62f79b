from __future__ import annotations

from typing import Any, Optional

from aiohttp import web
from loguru import logger

from app.web.keys import RATE_LIMITER_KEY


def client_address(request: web.Request) -> str:
    return request.remote or "unknown"


def json_error(status: int, message: str, **extra: Any) -> web.Response:
    body = {"error": message}
    body.update({key: value for key, value in extra.items() if value})
    return web.json_response(body, status=status)


def check_rate_limit(request: web.Request, action: str) -> Optional[web.Response]:
    result = request.app[RATE_LIMITER_KEY].allow(client_address(request), action)
    if result.allowed:
        return None
    logger.bind(client=client_address(request), action=action).info("Rate limit hit")
    return json_error(
        429,
        "You're doing that too often. Please slow down.",
        retry_after=round(result.retry_after, 2),
    )


def log_handler_exception(request: web.Request, error: Exception) -> None:
    logger.bind(method=request.method, path=request.path, client=client_address(request)).exception(
        "Handler error: {error}", error=str(error)
    )


@web.middleware
async def error_middleware(request: web.Request, handler) -> web.StreamResponse:
    try:
        return await handler(request)
    except web.HTTPException:
        raise
    except Exception as exc:
        log_handler_exception(request, exc)
        return json_error(500, "Internal server error")
