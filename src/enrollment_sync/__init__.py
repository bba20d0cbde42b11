# enrollment_sync package
__version__ = "0.1.0"

from .sharing import (
    PaymentRecord,
    SharingRequest,
    SharingReport,
    SharingStatus,
    Reconciler,
    GrantOrchestrator,
    SharingService,
    ReportGenerator,
    parse_order_id,
    share_document_with_students,
)
from .sources import (
    PaymentSourceBase,
    PaymentSourceError,
    get_payment_source,
)
from .permissions import (
    PermissionStoreBase,
    AuthError,
    ListError,
    GrantError,
)
