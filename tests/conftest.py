from __future__ import annotations

import asyncio
from typing import Callable, List, Optional, Set, Tuple

import pytest
import pytest_asyncio
from aiohttp import web

from app.core.config import Settings
from app.services.errors import GatewayError


class FakeGateway:
    def __init__(self, failing: Optional[Set[str]] = None, on_send: Optional[Callable[[str], None]] = None) -> None:
        self.failing = failing or set()
        self.on_send = on_send
        self.calls: List[Tuple[str, str]] = []

    async def send(self, contact: str, message: str) -> None:
        self.calls.append((contact, message))
        if self.on_send is not None:
            self.on_send(contact)
        if contact in self.failing:
            raise GatewayError(f"Gateway responded with 500: cannot reach {contact}")


@pytest.fixture
def fake_gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def make_gateway() -> Callable[..., FakeGateway]:
    return FakeGateway


@pytest.fixture
def make_settings(tmp_path) -> Callable[..., Settings]:
    def factory(**overrides) -> Settings:
        values = dict(
            host="127.0.0.1",
            port=3000,
            log_level="DEBUG",
            log_path=str(tmp_path / "secret_santa.log"),
            audit_log_path=str(tmp_path / "activity.log"),
            sms_api_key=None,
            sms_device_id=None,
            sms_api_url="http://127.0.0.1:9/api/v1",
            sms_timeout=5.0,
            sms_language="en",
            phone_prefix="+48",
            rate_limit_calls=1000,
            rate_limit_period=10.0,
        )
        values.update(overrides)
        return Settings(**values)

    return factory


class RecordingSmsGateway:
    """In-process stand-in for the SMS gateway HTTP API."""

    api_key = "secret-key"
    device_id = "device-1"

    def __init__(self) -> None:
        self.received: List[dict] = []
        self.failing: Set[str] = set()
        self.slow: Set[str] = set()
        self.garbled: Set[str] = set()
        self.base_url = ""

    def build_app(self) -> web.Application:
        app = web.Application()
        app.router.add_post("/api/v1/gateway/devices/{device_id}/send-sms", self.send_sms)
        return app

    async def send_sms(self, request: web.Request) -> web.Response:
        payload = await request.json()
        self.received.append(
            {
                "device_id": request.match_info["device_id"],
                "api_key": request.headers.get("x-api-key"),
                **payload,
            }
        )
        if request.headers.get("x-api-key") != self.api_key:
            return web.json_response({"error": "Unauthorized"}, status=401)
        recipients = set(payload.get("recipients", []))
        if recipients & self.slow:
            await asyncio.sleep(2)
        if recipients & self.garbled:
            return web.Response(body=b"Bad gateway \xff\xfe", status=502, content_type="text/plain", charset="utf-8")
        if recipients & self.failing:
            return web.json_response({"error": "Recipient unreachable"}, status=502)
        return web.json_response({"data": {"success": True}}, status=201)


@pytest_asyncio.fixture
async def sms_gateway(aiohttp_server) -> RecordingSmsGateway:
    gateway = RecordingSmsGateway()
    server = await aiohttp_server(gateway.build_app())
    gateway.base_url = str(server.make_url("/api/v1"))
    return gateway
