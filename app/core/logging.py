import sys
from loguru import logger

from app.services.audit import is_audit_record

LOG_FORMAT = "{time} | {level} | {module}:{function}:{line} | {message}"


def setup_logging(level: str, log_path: str, audit_path: str) -> None:
    logger.remove()
    logger.add(
        sys.stderr,
        level=level,
        format=LOG_FORMAT,
    )
    logger.add(
        log_path,
        level="DEBUG",
        format=LOG_FORMAT,
        rotation="100 KB",
        compression="zip",
    )
    # Activity records only, never rotated.
    logger.add(
        audit_path,
        level="INFO",
        format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {message}",
        filter=is_audit_record,
    )
