from __future__ import annotations

import asyncio

import uvloop
from aiohttp import web
from loguru import logger

from app.core.config import Settings, load_settings
from app.core.logging import setup_logging
from app.web import create_app


def log_startup(settings: Settings) -> None:
    logger.info("server starting...")

    states: dict[bool, str] = {
        True: "Enabled",
        False: "Disabled",
    }

    logger.info("Address  - http://{host}:{port}", host=settings.host, port=settings.port)
    logger.info("SMS      - {mode}", mode=states[settings.gateway_credentials() is not None])
    logger.info("Language - {language}", language=settings.sms_language)
    logger.info("Audit    - {path}", path=settings.audit_log_path)


async def main() -> None:
    settings = load_settings()
    setup_logging(settings.log_level, settings.log_path, settings.audit_log_path)
    log_startup(settings)

    runner = web.AppRunner(create_app(settings), access_log=None)
    await runner.setup()
    site = web.TCPSite(runner, settings.host, settings.port)
    await site.start()
    logger.info("server started")

    try:
        await asyncio.Event().wait()
    finally:
        logger.info("server stopping...")
        await runner.cleanup()
        logger.info("server stopped")


if __name__ == "__main__":
    try:
        uvloop.run(main())
    except KeyboardInterrupt:
        pass
