import aiohttp
from aiohttp import web

from app.core.config import Settings
from app.services.rate_limit import RateLimiter
from app.services.session import SessionState

SETTINGS_KEY = web.AppKey("settings", Settings)
SESSION_KEY = web.AppKey("session_state", SessionState)
RATE_LIMITER_KEY = web.AppKey("rate_limiter", RateLimiter)
HTTP_SESSION_KEY = web.AppKey("http_session", aiohttp.ClientSession)
