"""Reconciliation logic for matching paid orders against document grantees."""

from typing import Iterable, List, Optional, Set

from .models import PaymentRecord


# Order IDs are built as "<email> /// <free text>" by the checkout page.
ORDER_ID_SEPARATOR = " /// "
SUCCESS_STATUS = "success"
COMMENTER_ROLE = "commenter"


def parse_order_id(order_id: Optional[str]) -> Optional[str]:
    """Extract the identity token embedded in an order ID.

    Args:
        order_id: Order identifier as reported by the payment gateway.

    Returns:
        The stripped text before the first separator, or None if the
        separator is absent or nothing precedes it.
    """
    if not isinstance(order_id, str):
        return None
    head, separator, _ = order_id.partition(ORDER_ID_SEPARATOR)
    if not separator:
        return None
    token = head.strip()
    return token or None


class Reconciler:
    """Decides which paying customers still need access to a document."""

    def __init__(self, expected_description: str):
        """Initialize the reconciler.

        Args:
            expected_description: Exact product description a payment must
                carry to count as a purchase of the shared material.
        """
        self.expected_description = expected_description

    def extract_identity_token(self, record: PaymentRecord) -> Optional[str]:
        """Return the payer's token if the record is a completed purchase.

        Args:
            record: Payment record from the gateway.

        Returns:
            Identity token, or None when the record does not qualify.
        """
        if record.status != SUCCESS_STATUS:
            return None
        if record.description != self.expected_description:
            return None
        return parse_order_id(record.order_id)

    def collect_paid_tokens(self, records: Iterable[PaymentRecord]) -> List[str]:
        """Collect the distinct tokens of all qualifying payments.

        Args:
            records: Payment records in gateway order.

        Returns:
            Deduplicated tokens in order of their first qualifying payment.
        """
        tokens: List[str] = []
        seen: Set[str] = set()
        for record in records:
            token = self.extract_identity_token(record)
            if token is None or token in seen:
                continue
            seen.add(token)
            tokens.append(token)
        return tokens

    @staticmethod
    def pending_grants(paid_tokens: Iterable[str], grantees: Iterable[str]) -> List[str]:
        """Compute paid tokens that do not hold access yet.

        Args:
            paid_tokens: Tokens of qualifying payments, in grant order.
            grantees: Tokens currently holding access to the document.

        Returns:
            Paid tokens absent from grantees, preserving paid-token order.
        """
        granted = set(grantees)
        pending: List[str] = []
        for token in paid_tokens:
            if token in granted:
                continue
            granted.add(token)
            pending.append(token)
        return pending
