from typing import Optional

import aiohttp
from aiohttp import web

from app.core.config import Settings
from app.services.rate_limit import RateLimiter
from app.services.session import SessionState
from app.web.handlers import routes
from app.web.keys import HTTP_SESSION_KEY, RATE_LIMITER_KEY, SESSION_KEY, SETTINGS_KEY
from app.web.utils import error_middleware


async def http_session_ctx(app: web.Application):
    timeout = aiohttp.ClientTimeout(total=app[SETTINGS_KEY].sms_timeout)
    async with aiohttp.ClientSession(timeout=timeout) as session:
        app[HTTP_SESSION_KEY] = session
        yield


def create_app(settings: Settings, session_state: Optional[SessionState] = None) -> web.Application:
    app = web.Application(middlewares=[error_middleware])
    app[SETTINGS_KEY] = settings
    app[SESSION_KEY] = session_state or SessionState()
    app[RATE_LIMITER_KEY] = RateLimiter(settings.rate_limit_calls, settings.rate_limit_period)
    app.cleanup_ctx.append(http_session_ctx)
    app.add_routes(routes)
    return app


__all__ = ["create_app"]
