"""Shared test fixtures and fake collaborators."""

import os
import pytest
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Set

# Set up test environment variables before importing modules
os.environ.setdefault("API_KEY", "test_api_key_12345")
os.environ.setdefault("STRIPE_API_KEY", "sk_test_dummy_key_for_testing")
os.environ.setdefault("LIQPAY_PUBLIC_KEY", "sandbox_public_key")
os.environ.setdefault("LIQPAY_PRIVATE_KEY", "sandbox_private_key")

from enrollment_sync.permissions import PermissionStoreBase
from enrollment_sync.sharing import PaymentRecord
from enrollment_sync.sources import PaymentSourceBase

DOCUMENT_ID = "FAKE_ID"
EXPECTED_DESCRIPTION = "Unit testing in JavaScript: masterclass"


def paid(email: str, description: str = EXPECTED_DESCRIPTION, status: str = "success",
         comment: str = "some unused text") -> PaymentRecord:
    """Build a payment record the way the checkout page formats order IDs."""
    return PaymentRecord(description=description, status=status, order_id=f"{email} /// {comment}")


class FakePaymentSource(PaymentSourceBase):
    """Payment source returning canned records or raising a canned error."""

    provider = "fake"

    def __init__(self, records: Optional[List[PaymentRecord]] = None,
                 error: Optional[Exception] = None, calls: Optional[List[str]] = None):
        now = datetime.utcnow()
        super().__init__(now - timedelta(days=30), now)
        self.records = records or []
        self.error = error
        self.calls = calls if calls is not None else []
        self.closed = False

    async def fetch_payments(self) -> List[PaymentRecord]:
        self.calls.append("fetch_payments")
        if self.error is not None:
            raise self.error
        return list(self.records)

    async def aclose(self) -> None:
        self.closed = True


class FakePermissionStore(PermissionStoreBase):
    """In-memory permission store recording every call."""

    def __init__(self, grantees: Optional[Set[str]] = None,
                 auth_error: Optional[Exception] = None,
                 list_error: Optional[Exception] = None,
                 grant_errors: Optional[Dict[str, Exception]] = None,
                 calls: Optional[List[str]] = None):
        self.grantees = set(grantees or set())
        self.auth_error = auth_error
        self.list_error = list_error
        self.grant_errors = grant_errors or {}
        self.calls = calls if calls is not None else []
        self.grant_calls: List[tuple] = []
        self.closed = False

    async def authenticate(self):
        self.calls.append("authenticate")
        if self.auth_error is not None:
            raise self.auth_error
        return "fake-credential"

    async def list_grantees(self, document_id: str) -> Set[str]:
        self.calls.append("list_grantees")
        if self.list_error is not None:
            raise self.list_error
        return set(self.grantees)

    async def grant(self, document_id: str, identity_token: str, role: str) -> None:
        self.calls.append(f"grant:{identity_token}")
        self.grant_calls.append((document_id, identity_token, role))
        if identity_token in self.grant_errors:
            raise self.grant_errors[identity_token]
        self.grantees.add(identity_token)

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def calls() -> List[str]:
    """Shared call log so tests can assert ordering across collaborators."""
    return []


@pytest.fixture
def permission_store(calls):
    return FakePermissionStore(calls=calls)


@pytest.fixture
def payment_source(calls):
    return FakePaymentSource(calls=calls)


@pytest.fixture
def kyiv_local_time(monkeypatch):
    """Run the test with the process local time zone set to UTC+2/+3."""
    import time

    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset is not available on this platform")
    monkeypatch.setenv("TZ", "Europe/Kyiv")
    time.tzset()
    yield
    monkeypatch.undo()
    time.tzset()
