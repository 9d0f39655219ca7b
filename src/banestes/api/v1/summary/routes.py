"""Roster summary routes."""

from fastapi import APIRouter, Depends

from banestes.api.dependencies import get_directory
from banestes.api.v1.clients.routes import feed_unavailable
from banestes.core.exceptions import FeedError
from banestes.domain.services.client_directory import ClientDirectory

from .schemas import SummaryResponse

router = APIRouter(prefix="/summary", tags=["Summary"])


@router.get("", response_model=SummaryResponse)
def get_summary(directory: ClientDirectory = Depends(get_directory)):
    """Total clients and checking/savings account counts.

    Account counts are null when the accounts feed is unavailable.
    """
    try:
        summary = directory.summary()
    except FeedError as e:
        raise feed_unavailable(e)

    return SummaryResponse(**summary.model_dump())
