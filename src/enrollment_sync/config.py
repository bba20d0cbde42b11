"""Environment-driven configuration."""

import os
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

from pydantic import BaseModel, Field, ValidationError

DEFAULT_PROVIDER = "liqpay"
DEFAULT_LOOKBACK_DAYS = 30


class ConfigurationError(ValueError):
    """Raised when an environment variable holds an unusable value."""


class SharingSettings(BaseModel):
    """Defaults for sharing passes started from the CLI or the API."""
    document_id: Optional[str] = Field(None, description="Document shared with paying students")
    expected_description: Optional[str] = Field(None, description="Product description of the course")
    provider: str = Field(default=DEFAULT_PROVIDER, description="Payment gateway name")
    lookback_days: int = Field(default=DEFAULT_LOOKBACK_DAYS, ge=1, description="Payment window length")


def get_settings() -> SharingSettings:
    """
    Read sharing settings from environment variables.
    Unset variables keep their defaults.

    Raises:
        ConfigurationError: If a variable cannot be parsed.
    """
    try:
        return SharingSettings(
            document_id=os.getenv("SHARING_DOCUMENT_ID") or None,
            expected_description=os.getenv("SHARING_EXPECTED_DESCRIPTION") or None,
            provider=os.getenv("SHARING_PAYMENT_PROVIDER") or DEFAULT_PROVIDER,
            lookback_days=os.getenv("SHARING_LOOKBACK_DAYS") or DEFAULT_LOOKBACK_DAYS,
        )
    except ValidationError as e:
        fields = ", ".join(str(error["loc"][0]) for error in e.errors())
        raise ConfigurationError(f"Invalid sharing settings: {fields}") from e


def as_utc(value: datetime) -> datetime:
    """Convert to naive UTC. Naive values are assumed to be UTC already."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def utc_timestamp(value: datetime) -> float:
    """POSIX timestamp of ``value``, reading naive values as UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.timestamp()


def default_window(
    lookback_days: int = DEFAULT_LOOKBACK_DAYS,
    now: Optional[datetime] = None,
) -> Tuple[datetime, datetime]:
    """Return the naive UTC payment window ending at ``now``."""
    end_time = as_utc(now) if now else datetime.utcnow()
    return end_time - timedelta(days=lookback_days), end_time
