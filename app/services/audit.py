from __future__ import annotations

import json
from typing import Any

from loguru import logger

EVENT_GENERATED = "assignments_generated"
EVENT_RESET = "assignments_reset"
EVENT_DISPATCHED = "sms_dispatched"


def record(event: str, **fields: Any) -> None:
    """Append one activity line to the audit sink (also echoed on the console)."""
    details = json.dumps(fields, ensure_ascii=False, default=str, sort_keys=True)
    logger.bind(audit=True, event=event).info("{event} {details}", event=event, details=details)


def is_audit_record(entry: dict) -> bool:
    return bool(entry["extra"].get("audit"))
