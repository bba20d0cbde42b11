"""Tests for the grant orchestrator."""

import logging

import pytest

from enrollment_sync.permissions import AuthError, GrantError, ListError
from enrollment_sync.sharing import (
    COMMENTER_ROLE,
    GrantOrchestrator,
    share_document_with_students,
)
from enrollment_sync.sources import PaymentSourceError

from conftest import (
    DOCUMENT_ID,
    EXPECTED_DESCRIPTION,
    FakePaymentSource,
    FakePermissionStore,
    paid,
)

NEW_EMAILS = ["email1@email.email", "email2@email.email"]
ENROLLED_EMAILS = ["email3@email.email", "email4@email.email"]
PAID_EMAILS = NEW_EMAILS + ENROLLED_EMAILS


async def share(payment_source, permission_store, notices=None):
    notify = notices.append if notices is not None else None
    await share_document_with_students(
        DOCUMENT_ID,
        payment_source=payment_source,
        permission_store=permission_store,
        expected_description=EXPECTED_DESCRIPTION,
        notify=notify,
    )


class TestScenarios:
    """End-to-end scenarios for a single sharing pass."""

    async def test_new_payer_is_granted(self, calls):
        source = FakePaymentSource([paid("a@x.com", comment="ref123")], calls=calls)
        store = FakePermissionStore(calls=calls)
        notices = []

        await share(source, store, notices)

        assert store.grant_calls == [(DOCUMENT_ID, "a@x.com", COMMENTER_ROLE)]
        assert notices == ["a@x.com"]

    async def test_existing_grantee_is_skipped(self, calls):
        source = FakePaymentSource([paid("a@x.com", comment="ref123")], calls=calls)
        store = FakePermissionStore(grantees={"a@x.com"}, calls=calls)
        notices = []

        await share(source, store, notices)

        assert store.grant_calls == []
        assert notices == []

    async def test_wrong_description_grants_nothing(self, calls):
        source = FakePaymentSource([paid("a@x.com", description="wrong")], calls=calls)
        store = FakePermissionStore(calls=calls)

        await share(source, store)

        assert store.grant_calls == []

    async def test_second_grant_failure(self, calls):
        failure = GrantError("quota exceeded", status_code=403)
        source = FakePaymentSource([paid("a@x.com"), paid("b@x.com")], calls=calls)
        store = FakePermissionStore(grant_errors={"b@x.com": failure}, calls=calls)
        notices = []

        with pytest.raises(GrantError) as exc_info:
            await share(source, store, notices)

        assert exc_info.value is failure
        assert notices == ["a@x.com"]

    async def test_mixed_payers(self, calls):
        source = FakePaymentSource([paid(email) for email in PAID_EMAILS], calls=calls)
        store = FakePermissionStore(grantees=set(ENROLLED_EMAILS), calls=calls)
        notices = []

        await share(source, store, notices)

        assert [c[1] for c in store.grant_calls] == NEW_EMAILS
        assert all(c[2] == "commenter" for c in store.grant_calls)
        assert notices == NEW_EMAILS

    async def test_nobody_paid(self, calls):
        source = FakePaymentSource([], calls=calls)
        store = FakePermissionStore(calls=calls)
        notices = []

        await share(source, store, notices)

        assert store.grant_calls == []
        assert notices == []
        assert calls == ["authenticate", "fetch_payments", "list_grantees"]


class TestCallOrdering:
    """Collaborators are called strictly in sequence."""

    async def test_stage_order(self, calls):
        source = FakePaymentSource([paid("a@x.com"), paid("b@x.com")], calls=calls)
        store = FakePermissionStore(calls=calls)

        await share(source, store)

        assert calls == [
            "authenticate",
            "fetch_payments",
            "list_grantees",
            "grant:a@x.com",
            "grant:b@x.com",
        ]

    async def test_notice_follows_its_grant(self, calls):
        source = FakePaymentSource([paid("c@x.com"), paid("d@x.com")], calls=calls)
        store = FakePermissionStore(calls=calls)
        await share_document_with_students(
            DOCUMENT_ID,
            payment_source=source,
            permission_store=store,
            expected_description=EXPECTED_DESCRIPTION,
            notify=lambda token: calls.append(f"notice:{token}"),
        )

        assert calls[3:] == [
            "grant:c@x.com",
            "notice:c@x.com",
            "grant:d@x.com",
            "notice:d@x.com",
        ]


class TestFailurePropagation:
    """Collaborator failures surface unchanged and stop the pass."""

    async def test_auth_failure_stops_everything(self, calls):
        failure = AuthError("could not authorize")
        source = FakePaymentSource([paid("a@x.com")], calls=calls)
        store = FakePermissionStore(auth_error=failure, calls=calls)

        with pytest.raises(AuthError) as exc_info:
            await share(source, store)

        assert exc_info.value is failure
        assert calls == ["authenticate"]

    async def test_payment_source_failure_skips_listing(self, calls):
        failure = PaymentSourceError("gateway down", provider="liqpay")
        source = FakePaymentSource(error=failure, calls=calls)
        store = FakePermissionStore(calls=calls)

        with pytest.raises(PaymentSourceError) as exc_info:
            await share(source, store)

        assert exc_info.value is failure
        assert "list_grantees" not in calls
        assert store.grant_calls == []

    async def test_list_failure_skips_grants(self, calls):
        failure = ListError("cannot get permissions list")
        source = FakePaymentSource([paid("a@x.com")], calls=calls)
        store = FakePermissionStore(list_error=failure, calls=calls)

        with pytest.raises(ListError) as exc_info:
            await share(source, store)

        assert exc_info.value is failure
        assert store.grant_calls == []

    async def test_foreign_exceptions_are_not_wrapped(self, calls):
        failure = RuntimeError("Unknown error")
        source = FakePaymentSource([paid("a@x.com")], calls=calls)
        store = FakePermissionStore(grant_errors={"a@x.com": failure}, calls=calls)
        notices = []

        with pytest.raises(RuntimeError) as exc_info:
            await share(source, store, notices)

        assert exc_info.value is failure
        assert notices == []

    async def test_grant_failure_skips_remaining_tokens(self, calls):
        source = FakePaymentSource(
            [paid("a@x.com"), paid("b@x.com"), paid("c@x.com")], calls=calls
        )
        store = FakePermissionStore(
            grant_errors={"b@x.com": GrantError("Unknown error")}, calls=calls
        )
        notices = []

        with pytest.raises(GrantError):
            await share(source, store, notices)

        assert [c[1] for c in store.grant_calls] == ["a@x.com", "b@x.com"]
        assert notices == ["a@x.com"]


class TestSuccessNotices:
    """Default success notices go through logging."""

    async def test_logs_marker_and_token(self, calls, caplog):
        caplog.set_level(logging.INFO, logger="enrollment_sync")
        source = FakePaymentSource([paid(email) for email in PAID_EMAILS], calls=calls)
        store = FakePermissionStore(grantees=set(ENROLLED_EMAILS), calls=calls)

        await GrantOrchestrator(source, store, EXPECTED_DESCRIPTION).share_document(DOCUMENT_ID)

        for email in NEW_EMAILS:
            assert f"[+] {email}" in caplog.text
        for email in ENROLLED_EMAILS:
            assert f"[+] {email}" not in caplog.text

    async def test_no_notice_when_grant_fails(self, calls, caplog):
        caplog.set_level(logging.INFO, logger="enrollment_sync")
        source = FakePaymentSource([paid(email) for email in NEW_EMAILS], calls=calls)
        store = FakePermissionStore(
            grant_errors={email: GrantError("Unknown error") for email in NEW_EMAILS},
            calls=calls,
        )

        with pytest.raises(GrantError):
            await GrantOrchestrator(source, store, EXPECTED_DESCRIPTION).share_document(DOCUMENT_ID)

        for email in NEW_EMAILS:
            assert f"[+] {email}" not in caplog.text
