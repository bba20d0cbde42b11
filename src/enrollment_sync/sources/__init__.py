"""Payment sources feeding the sharing reconciliation."""

from datetime import datetime

from .base import PaymentSourceBase, PaymentSourceError
from .liqpay import LiqPayPaymentSource
from .stripe_source import StripePaymentSource

PAYMENT_SOURCES = {
    "liqpay": LiqPayPaymentSource,
    "stripe": StripePaymentSource,
}


def get_payment_source(
    provider: str,
    start_time: datetime,
    end_time: datetime,
    **kwargs,
) -> PaymentSourceBase:
    """Factory function to get the payment source for a gateway.

    Args:
        provider: Payment gateway name.
        start_time: Start of the reporting window.
        end_time: End of the reporting window.
        **kwargs: Gateway-specific options such as API keys.

    Returns:
        PaymentSourceBase implementation for the gateway.

    Raises:
        ValueError: If the gateway is not supported.
    """
    source_class = PAYMENT_SOURCES.get(provider.lower())
    if not source_class:
        raise ValueError(f"Unsupported payment provider: {provider}")
    return source_class(start_time=start_time, end_time=end_time, **kwargs)


__all__ = [
    "PaymentSourceBase",
    "PaymentSourceError",
    "LiqPayPaymentSource",
    "StripePaymentSource",
    "PAYMENT_SOURCES",
    "get_payment_source",
]
