from __future__ import annotations

import asyncio
from dataclasses import dataclass

import aiohttp
from loguru import logger

from app.services.errors import GatewayError

DEFAULT_API_URL = "https://api.textbee.dev/api/v1"


@dataclass(frozen=True)
class GatewayCredentials:
    api_key: str
    device_id: str
    base_url: str = DEFAULT_API_URL

    @property
    def is_complete(self) -> bool:
        return bool(self.api_key and self.device_id and self.base_url)

    @property
    def send_url(self) -> str:
        return f"{self.base_url.rstrip('/')}/gateway/devices/{self.device_id}/send-sms"


class SmsGateway:
    def __init__(self, credentials: GatewayCredentials, http_session: aiohttp.ClientSession) -> None:
        self.credentials = credentials
        self._http = http_session

    async def send(self, contact: str, message: str) -> None:
        payload = {"recipients": [contact], "message": message}
        headers = {"x-api-key": self.credentials.api_key}
        try:
            async with self._http.post(self.credentials.send_url, json=payload, headers=headers) as response:
                if response.status >= 400:
                    body = (await response.read()).decode("utf-8", errors="replace")
                    raise GatewayError(f"Gateway responded with {response.status}: {body.strip()[:200]}")
                logger.bind(contact=contact, status=response.status).debug("Gateway accepted message")
        except asyncio.TimeoutError as exc:
            raise GatewayError("Gateway request timed out") from exc
        except aiohttp.ClientError as exc:
            raise GatewayError(f"Gateway request failed: {exc}") from exc
        except (UnicodeError, LookupError) as exc:
            raise GatewayError(f"Gateway response could not be read: {exc}") from exc
