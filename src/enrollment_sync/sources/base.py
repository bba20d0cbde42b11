"""Payment source contract."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from ..sharing.models import PaymentRecord


class PaymentSourceError(Exception):
    """Raised when a payment gateway cannot deliver payment records."""

    def __init__(self, message: str, provider: str, code: Optional[str] = None):
        super().__init__(message)
        self.provider = provider
        self.code = code


class PaymentSourceBase(ABC):
    """
    Minimal payment source interface. Implementations are bound to a
    reporting window at construction and must return every payment in it;
    product and status filtering is left to the caller.
    """

    provider: str = "unknown"

    def __init__(self, start_time: datetime, end_time: datetime):
        if start_time > end_time:
            raise ValueError("start_time must not be after end_time")
        self.start_time = start_time
        self.end_time = end_time

    @abstractmethod
    async def fetch_payments(self) -> List[PaymentRecord]:
        """Fetch all payment records in the reporting window.

        Returns:
            List of PaymentRecord objects in gateway order.

        Raises:
            PaymentSourceError: If the gateway call fails.
        """
        raise NotImplementedError

    async def aclose(self) -> None:
        """Release network resources held by the source."""
        return None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()
