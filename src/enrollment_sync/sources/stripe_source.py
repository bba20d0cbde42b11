"""Stripe payment source built on PaymentIntents."""

import asyncio
import logging
import os
from datetime import datetime
from typing import Any, List, Optional

import stripe

from ..config import utc_timestamp
from ..sharing.models import PaymentRecord
from ..sharing.reconciler import SUCCESS_STATUS
from .base import PaymentSourceBase, PaymentSourceError

logger = logging.getLogger(__name__)


class StripePaymentSource(PaymentSourceBase):
    """Fetches PaymentIntents created within the reporting window.

    The checkout stores the order identifier in ``metadata["order_id"]``.
    """

    provider = "stripe"

    def __init__(
        self,
        start_time: datetime,
        end_time: datetime,
        api_key: Optional[str] = None,
    ):
        """Initialize the Stripe source.

        Args:
            start_time: Start of the reporting window.
            end_time: End of the reporting window.
            api_key: Stripe API key. Falls back to STRIPE_API_KEY env var.

        Raises:
            ValueError: If no API key is provided or found.
        """
        super().__init__(start_time, end_time)
        self._api_key = api_key or os.getenv("STRIPE_API_KEY")
        if not self._api_key:
            raise ValueError(
                "STRIPE_API_KEY must be provided either as argument or environment variable"
            )

    @staticmethod
    def _map_stripe_status(status: Optional[str]) -> Optional[str]:
        """Map a PaymentIntent status onto the gateway-neutral success marker."""
        if status == "succeeded":
            return SUCCESS_STATUS
        return status

    def _convert_to_payment_record(self, payment_intent: Any) -> PaymentRecord:
        metadata = payment_intent.metadata or {}
        order_id = metadata.get("order_id")
        description = payment_intent.description
        return PaymentRecord(
            description=description if isinstance(description, str) else None,
            status=self._map_stripe_status(payment_intent.status),
            order_id=order_id if isinstance(order_id, str) else None,
            raw_data={"id": payment_intent.id},
        )

    def _list_payment_intents(self) -> List[PaymentRecord]:
        payment_intents = stripe.PaymentIntent.list(
            api_key=self._api_key,
            created={
                "gte": int(utc_timestamp(self.start_time)),
                "lte": int(utc_timestamp(self.end_time)),
            },
            limit=100,
        )
        return [
            self._convert_to_payment_record(pi)
            for pi in payment_intents.auto_paging_iter()
        ]

    async def fetch_payments(self) -> List[PaymentRecord]:
        """Fetch PaymentIntents from Stripe, following pagination.

        Returns:
            List of PaymentRecord objects.

        Raises:
            PaymentSourceError: If the Stripe API call fails.
        """
        logger.info(
            f"Fetching Stripe payments from {self.start_time.isoformat()} "
            f"to {self.end_time.isoformat()}"
        )
        try:
            records = await asyncio.to_thread(self._list_payment_intents)
        except stripe.AuthenticationError as e:
            logger.error("Stripe authentication failed")
            raise PaymentSourceError(
                "Invalid Stripe API key", provider=self.provider, code=e.code
            ) from e
        except stripe.APIConnectionError as e:
            logger.error("Failed to connect to Stripe API")
            raise PaymentSourceError(
                "Failed to connect to Stripe API", provider=self.provider
            ) from e
        except stripe.StripeError as e:
            logger.error(f"Stripe API error: {type(e).__name__}")
            raise PaymentSourceError(
                f"Stripe API error: {e}", provider=self.provider, code=e.code
            ) from e

        logger.info(f"Fetched {len(records)} payments from Stripe")
        return records
