"""Service layer for sharing passes."""

import uuid
import logging
from datetime import datetime
from typing import Callable, Optional

from ..permissions import GoogleDrivePermissionStore, PermissionStoreBase
from ..sources import PaymentSourceBase, get_payment_source
from .models import GrantRecord, SharingReport, SharingRequest, SharingStatus
from .orchestrator import GrantOrchestrator, log_grant
from .reconciler import COMMENTER_ROLE
from .report import ReportGenerator

logger = logging.getLogger(__name__)

PaymentSourceFactory = Callable[[SharingRequest], PaymentSourceBase]
PermissionStoreFactory = Callable[[], PermissionStoreBase]


def default_payment_source(request: SharingRequest) -> PaymentSourceBase:
    return get_payment_source(request.provider, request.start_time, request.end_time)


class SharingService:
    """Runs sharing passes and records their outcome."""

    def __init__(
        self,
        payment_source_factory: Optional[PaymentSourceFactory] = None,
        permission_store_factory: Optional[PermissionStoreFactory] = None,
    ):
        """Initialize the sharing service.

        Args:
            payment_source_factory: Builds a payment source for a request.
                Defaults to the gateway named in the request.
            permission_store_factory: Builds a permission store. Defaults to
                Google Drive with the configured service account.
        """
        self._payment_source_factory = payment_source_factory or default_payment_source
        self._permission_store_factory = permission_store_factory or GoogleDrivePermissionStore

    async def run_sharing(self, request: SharingRequest) -> SharingReport:
        """Execute a sharing pass.

        Collaborators are created fresh for every pass and closed afterwards.

        Args:
            request: Sharing request parameters.

        Returns:
            SharingReport with the granted tokens or the failure.
        """
        report = SharingReport(
            id=str(uuid.uuid4()),
            status=SharingStatus.IN_PROGRESS,
            document_id=request.document_id,
            provider=request.provider,
            start_time=request.start_time,
            end_time=request.end_time,
            created_at=datetime.utcnow(),
        )

        def record_grant(identity_token: str) -> None:
            log_grant(identity_token)
            report.granted.append(GrantRecord(identity_token=identity_token, role=COMMENTER_ROLE))

        logger.info(
            f"Starting sharing pass {report.id} for document {request.document_id} "
            f"using {request.provider} payments from {request.start_time} to {request.end_time}"
        )

        try:
            async with self._payment_source_factory(request) as payment_source, \
                    self._permission_store_factory() as permission_store:
                orchestrator = GrantOrchestrator(
                    payment_source=payment_source,
                    permission_store=permission_store,
                    expected_description=request.expected_description,
                    notify=record_grant,
                )
                await orchestrator.share_document(request.document_id)

            report.status = SharingStatus.COMPLETED
            logger.info(f"Sharing pass {report.id} completed: {report.total_granted} granted")

        except Exception as e:
            logger.error(f"Sharing pass {report.id} failed: {type(e).__name__}: {e}")
            report.status = SharingStatus.FAILED
            report.error_type = type(e).__name__
            report.error_message = str(e)

        report.completed_at = datetime.utcnow()
        return report

    def generate_report(self, report: SharingReport, format: str = "json") -> str:
        """Render a sharing report.

        Args:
            report: SharingReport to format.
            format: Output format ('json', 'csv' or 'text').

        Returns:
            Formatted report string.
        """
        generator = ReportGenerator(report)

        if format == "json":
            return generator.to_json()
        elif format == "csv":
            return generator.to_csv()
        elif format == "text":
            return generator.to_summary_text()
        else:
            raise ValueError(f"Unsupported report format: {format}")
