"""Grant orchestration for a single sharing pass."""

import logging
from typing import Callable, Optional

from ..permissions.base import PermissionStoreBase
from ..sources.base import PaymentSourceBase
from .reconciler import COMMENTER_ROLE, Reconciler

logger = logging.getLogger(__name__)

SUCCESS_MARKER = "[+]"

GrantNotifier = Callable[[str], None]


def log_grant(identity_token: str) -> None:
    """Default success notice for a granted token."""
    logger.info(f"{SUCCESS_MARKER} {identity_token}")


class GrantOrchestrator:
    """Shares a document with every paying customer who lacks access.

    Collaborator failures propagate unchanged. A failed grant stops the pass;
    notices already emitted for earlier grants stand.
    """

    def __init__(
        self,
        payment_source: PaymentSourceBase,
        permission_store: PermissionStoreBase,
        expected_description: str,
        notify: Optional[GrantNotifier] = None,
    ):
        self.payment_source = payment_source
        self.permission_store = permission_store
        self.reconciler = Reconciler(expected_description)
        self.notify = notify or log_grant

    async def share_document(self, document_id: str) -> None:
        """Run one reconciliation pass for ``document_id``."""
        await self.permission_store.authenticate()

        payments = await self.payment_source.fetch_payments()
        paid_tokens = self.reconciler.collect_paid_tokens(payments)
        logger.debug(f"{len(paid_tokens)} paid tokens in {len(payments)} payments")

        grantees = await self.permission_store.list_grantees(document_id)
        pending = self.reconciler.pending_grants(paid_tokens, grantees)

        if not pending:
            logger.info(f"No new grants for document {document_id}")
            return

        logger.info(f"Granting {COMMENTER_ROLE} access on {document_id} to {len(pending)} users")
        for token in pending:
            await self.permission_store.grant(document_id, token, COMMENTER_ROLE)
            self.notify(token)


async def share_document_with_students(
    document_id: str,
    *,
    payment_source: PaymentSourceBase,
    permission_store: PermissionStoreBase,
    expected_description: str,
    notify: Optional[GrantNotifier] = None,
) -> None:
    """Grant commenter access on a document to every new paying student.

    Args:
        document_id: Document to share.
        payment_source: Source of payment records for the window.
        permission_store: Store holding the document's permissions.
        expected_description: Product description a payment must carry.
        notify: Called with each token right after its grant succeeds.
            Defaults to logging ``"[+] <token>"``.
    """
    orchestrator = GrantOrchestrator(
        payment_source=payment_source,
        permission_store=permission_store,
        expected_description=expected_description,
        notify=notify,
    )
    await orchestrator.share_document(document_id)
