"""LiqPay payment source using the LiqPay API v3 ``reports`` action."""

import base64
import hashlib
import json
import logging
import os
from datetime import datetime
from typing import Any, Dict, List, Optional

import httpx

from ..config import utc_timestamp
from ..sharing.models import PaymentRecord
from .base import PaymentSourceBase, PaymentSourceError

logger = logging.getLogger(__name__)

LIQPAY_API_URL = "https://www.liqpay.ua/api/request"
LIQPAY_API_VERSION = 3


def encode_data(params: Dict[str, Any]) -> str:
    """Encode request parameters the way LiqPay expects them in ``data``."""
    return base64.b64encode(json.dumps(params).encode("utf-8")).decode("ascii")


def sign_data(data: str, private_key: str) -> str:
    """Compute the LiqPay signature for an encoded ``data`` payload."""
    digest = hashlib.sha1(f"{private_key}{data}{private_key}".encode("utf-8")).digest()
    return base64.b64encode(digest).decode("ascii")


def _to_millis(value: datetime) -> int:
    return int(utc_timestamp(value) * 1000)


class LiqPayPaymentSource(PaymentSourceBase):
    """Fetches payments from LiqPay for a reporting window."""

    provider = "liqpay"

    def __init__(
        self,
        start_time: datetime,
        end_time: datetime,
        public_key: Optional[str] = None,
        private_key: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        api_url: str = LIQPAY_API_URL,
    ):
        """Initialize the LiqPay source.

        Args:
            start_time: Start of the reporting window.
            end_time: End of the reporting window.
            public_key: LiqPay public key. Falls back to LIQPAY_PUBLIC_KEY env var.
            private_key: LiqPay private key. Falls back to LIQPAY_PRIVATE_KEY env var.
            client: Optional HTTP client; one is created and owned otherwise.
            api_url: LiqPay API endpoint.

        Raises:
            ValueError: If either key is missing.
        """
        super().__init__(start_time, end_time)
        self._public_key = public_key or os.getenv("LIQPAY_PUBLIC_KEY")
        self._private_key = private_key or os.getenv("LIQPAY_PRIVATE_KEY")
        if not self._public_key or not self._private_key:
            raise ValueError(
                "LIQPAY_PUBLIC_KEY and LIQPAY_PRIVATE_KEY must be provided "
                "either as arguments or environment variables"
            )
        self._api_url = api_url
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=30.0)

    def _build_form(self) -> Dict[str, str]:
        data = encode_data({
            "action": "reports",
            "version": LIQPAY_API_VERSION,
            "public_key": self._public_key,
            "date_from": _to_millis(self.start_time),
            "date_to": _to_millis(self.end_time),
        })
        return {"data": data, "signature": sign_data(data, self._private_key)}

    async def fetch_payments(self) -> List[PaymentRecord]:
        """Fetch the LiqPay payment report for the window.

        Returns:
            List of PaymentRecord objects.

        Raises:
            PaymentSourceError: On transport errors, HTTP errors or a
                non-success API result.
        """
        logger.info(
            f"Fetching LiqPay payments from {self.start_time.isoformat()} "
            f"to {self.end_time.isoformat()}"
        )

        try:
            response = await self._client.post(self._api_url, data=self._build_form())
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"LiqPay API returned HTTP {e.response.status_code}")
            raise PaymentSourceError(
                f"LiqPay API returned HTTP {e.response.status_code}",
                provider=self.provider,
                code=str(e.response.status_code),
            ) from e
        except httpx.HTTPError as e:
            logger.error("Failed to connect to LiqPay API")
            raise PaymentSourceError(
                "Failed to connect to LiqPay API", provider=self.provider
            ) from e
        except ValueError as e:
            raise PaymentSourceError(
                "LiqPay API returned a malformed response", provider=self.provider
            ) from e

        if not isinstance(payload, dict) or payload.get("result") != "success":
            details = payload if isinstance(payload, dict) else {}
            code = details.get("err_code")
            logger.error(f"LiqPay report request failed: {code}")
            raise PaymentSourceError(
                details.get("err_description") or "LiqPay report request failed",
                provider=self.provider,
                code=code,
            )

        records = [PaymentRecord.from_raw(item) for item in payload.get("data") or []]
        logger.info(f"Fetched {len(records)} payments from LiqPay")
        return records

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
