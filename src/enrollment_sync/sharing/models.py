"""Models for document sharing reconciliation."""

import enum
from datetime import datetime
from typing import Optional, Dict, Any, List, Mapping
from pydantic import BaseModel, ConfigDict, Field


class SharingStatus(str, enum.Enum):
    """Status of a sharing pass."""
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"


class PaymentRecord(BaseModel):
    """A payment as reported by the payment gateway.

    Fields are optional because gateways return loosely typed payloads;
    a record with missing fields is simply never considered paid.
    """
    model_config = ConfigDict(frozen=True)

    description: Optional[str] = Field(None, description="Product description")
    status: Optional[str] = Field(None, description="Gateway payment status")
    order_id: Optional[str] = Field(None, description="Order identifier with embedded email")
    raw_data: Optional[Dict[str, Any]] = Field(default=None, description="Raw gateway payload")

    @classmethod
    def from_raw(cls, raw: Any) -> "PaymentRecord":
        """Build a record from an arbitrary gateway payload without raising.

        Args:
            raw: Gateway payload, normally a dict.

        Returns:
            PaymentRecord where non-string fields are replaced by None.
        """
        if not isinstance(raw, Mapping):
            return cls()

        def _text(key: str) -> Optional[str]:
            value = raw.get(key)
            return value if isinstance(value, str) else None

        return cls(
            description=_text("description"),
            status=_text("status"),
            order_id=_text("order_id"),
            raw_data=dict(raw),
        )


class GrantRecord(BaseModel):
    """A permission granted during a sharing pass."""
    identity_token: str = Field(..., description="Email address that received access")
    role: str = Field(..., description="Granted role")
    granted_at: datetime = Field(default_factory=datetime.utcnow)


class SharingRequest(BaseModel):
    """Parameters of a single sharing pass."""
    document_id: str = Field(..., min_length=1, description="Document to share")
    expected_description: str = Field(..., min_length=1, description="Product description that qualifies a payment")
    start_time: datetime = Field(..., description="Start of the payment window")
    end_time: datetime = Field(..., description="End of the payment window")
    provider: str = Field(default="liqpay", description="Payment gateway name")


class SharingReport(BaseModel):
    """Outcome of a sharing pass."""
    id: str = Field(..., description="Report ID")
    status: SharingStatus = Field(default=SharingStatus.PENDING)
    document_id: str = Field(..., description="Shared document")
    provider: str = Field(default="liqpay", description="Payment gateway name")
    start_time: datetime = Field(..., description="Start of the payment window")
    end_time: datetime = Field(..., description="End of the payment window")
    created_at: datetime = Field(default_factory=datetime.utcnow)
    completed_at: Optional[datetime] = Field(None, description="Time when the pass finished")

    granted: List[GrantRecord] = Field(default_factory=list)

    # Error information
    error_type: Optional[str] = Field(None, description="Exception class of the failing collaborator")
    error_message: Optional[str] = Field(None, description="Error message if the pass failed")

    @property
    def total_granted(self) -> int:
        return len(self.granted)

    def to_summary_dict(self) -> Dict[str, Any]:
        """Return a summary of the report without the granted entries."""
        return {
            "id": self.id,
            "status": self.status.value,
            "document_id": self.document_id,
            "provider": self.provider,
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat(),
            "created_at": self.created_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "total_granted": self.total_granted,
            "error_type": self.error_type,
            "error_message": self.error_message,
        }

    def to_full_dict(self) -> Dict[str, Any]:
        """Return the complete report including every grant."""
        result = self.to_summary_dict()
        result["granted"] = [g.model_dump(mode="json") for g in self.granted]
        return result
