"""Document sharing reconciliation.

Grants access to a shared course document to every customer whose payment
for the course succeeded and who does not have access yet.

Features:
- Extract payer emails from gateway order IDs
- Filter successful payments for the expected product
- Diff paid customers against the document's current grantees
- Grant commenter access one customer at a time, stopping on the first failure
"""

from .models import (
    SharingStatus,
    PaymentRecord,
    GrantRecord,
    SharingRequest,
    SharingReport,
)
from .reconciler import (
    ORDER_ID_SEPARATOR,
    SUCCESS_STATUS,
    COMMENTER_ROLE,
    parse_order_id,
    Reconciler,
)
from .orchestrator import (
    SUCCESS_MARKER,
    GrantOrchestrator,
    log_grant,
    share_document_with_students,
)
from .service import SharingService
from .report import ReportGenerator

__all__ = [
    # Models
    "SharingStatus",
    "PaymentRecord",
    "GrantRecord",
    "SharingRequest",
    "SharingReport",
    # Core
    "ORDER_ID_SEPARATOR",
    "SUCCESS_STATUS",
    "COMMENTER_ROLE",
    "parse_order_id",
    "Reconciler",
    "SUCCESS_MARKER",
    "GrantOrchestrator",
    "log_grant",
    "share_document_with_students",
    # Service
    "SharingService",
    "ReportGenerator",
]
