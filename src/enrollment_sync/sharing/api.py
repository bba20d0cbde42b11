"""API endpoints for sharing passes."""

import logging
from datetime import datetime
from typing import Optional, List

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, Field

from ..auth import SHARING_RATE_LIMIT, limiter, verify_api_key
from ..config import ConfigurationError, as_utc, default_window, get_settings
from .models import SharingRequest
from .service import SharingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sharing", tags=["sharing"])


class SharingRunBody(BaseModel):
    """Request body for a sharing pass. Omitted fields use configured defaults."""
    document_id: Optional[str] = Field(None, description="Document to share")
    expected_description: Optional[str] = Field(None, description="Expected payment description")
    start_time: Optional[datetime] = Field(None, description="Start of the payment window")
    end_time: Optional[datetime] = Field(None, description="End of the payment window")
    provider: Optional[str] = Field(None, description="Payment gateway name")


class SharingSummaryResponse(BaseModel):
    """Summary response for a sharing pass."""
    id: str
    status: str
    document_id: str
    provider: str
    start_time: datetime
    end_time: datetime
    created_at: datetime
    completed_at: Optional[datetime] = None
    total_granted: int = 0
    granted: List[str] = Field(default_factory=list)
    error_type: Optional[str] = None
    error_message: Optional[str] = None


def get_sharing_service() -> SharingService:
    return SharingService()


@router.post("/runs", response_model=SharingSummaryResponse)
@limiter.limit(SHARING_RATE_LIMIT)
async def create_sharing_run(
    request: Request,
    body: SharingRunBody,
    service: SharingService = Depends(get_sharing_service),
    api_key: str = Depends(verify_api_key),
):
    """
    Run a sharing pass.

    Grants commenter access on the document to every customer with a
    successful payment for the course who does not have access yet.
    A failing gateway or Drive call is reported with status ``failed``.
    """
    try:
        settings = get_settings()
    except ConfigurationError as e:
        logger.error(str(e))
        raise HTTPException(status_code=500, detail="Server configuration error")

    default_start, default_end = default_window(settings.lookback_days)
    start_time = as_utc(body.start_time) if body.start_time else default_start
    end_time = as_utc(body.end_time) if body.end_time else default_end

    if start_time >= end_time:
        raise HTTPException(status_code=400, detail="start_time must be before end_time")

    document_id = body.document_id or settings.document_id
    expected_description = body.expected_description or settings.expected_description
    if not document_id or not expected_description:
        raise HTTPException(
            status_code=400,
            detail="document_id and expected_description are required",
        )

    sharing_request = SharingRequest(
        document_id=document_id,
        expected_description=expected_description,
        start_time=start_time,
        end_time=end_time,
        provider=body.provider or settings.provider,
    )

    logger.info(
        f"Starting sharing run for document {document_id} "
        f"from {start_time} to {end_time}"
    )

    report = await service.run_sharing(sharing_request)

    return SharingSummaryResponse(
        id=report.id,
        status=report.status.value,
        document_id=report.document_id,
        provider=report.provider,
        start_time=report.start_time,
        end_time=report.end_time,
        created_at=report.created_at,
        completed_at=report.completed_at,
        total_granted=report.total_granted,
        granted=[g.identity_token for g in report.granted],
        error_type=report.error_type,
        error_message=report.error_message,
    )


@router.get("/health")
async def sharing_health():
    """Health check endpoint for the sharing service."""
    return {"status": "healthy", "service": "sharing"}
