import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from app.services.gateway import DEFAULT_API_URL, GatewayCredentials

load_dotenv()


@dataclass(frozen=True)
class Settings:
    host: str
    port: int
    log_level: str
    log_path: str
    audit_log_path: str
    sms_api_key: Optional[str]
    sms_device_id: Optional[str]
    sms_api_url: str
    sms_timeout: float
    sms_language: str
    phone_prefix: str
    rate_limit_calls: int
    rate_limit_period: float

    def gateway_credentials(self) -> Optional[GatewayCredentials]:
        if not self.sms_api_key or not self.sms_device_id:
            return None
        return GatewayCredentials(
            api_key=self.sms_api_key,
            device_id=self.sms_device_id,
            base_url=self.sms_api_url,
        )


def _read_number(name: str, default: str, cast):
    raw = os.getenv(name, default)
    try:
        return cast(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {raw!r}.") from exc


def load_settings() -> Settings:
    port = _read_number("PORT", "3000", int)
    sms_timeout = _read_number("SMS_TIMEOUT", "10", float)

    return Settings(
        host=os.getenv("HOST", "0.0.0.0"),
        port=port,
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        log_path=os.getenv("LOG_PATH", "logs/secret_santa.log"),
        audit_log_path=os.getenv("AUDIT_LOG_PATH", "logs/activity.log"),
        sms_api_key=os.getenv("SMS_API_KEY") or None,
        sms_device_id=os.getenv("SMS_DEVICE_ID") or None,
        sms_api_url=os.getenv("SMS_API_URL", DEFAULT_API_URL),
        sms_timeout=sms_timeout,
        sms_language=os.getenv("SMS_LANGUAGE", "en").lower(),
        phone_prefix=os.getenv("PHONE_PREFIX", "+48"),
        rate_limit_calls=_read_number("RATE_LIMIT_CALLS", "5", int),
        rate_limit_period=_read_number("RATE_LIMIT_PERIOD", "10", float),
    )
