"""History API routes for Mini App."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status

from mathbot.schemas.history import HistoryRecord
from mathbot.services.history import HistoryStore
from webapp.backend.dependencies import get_history
from webapp.backend.schemas import HistoryItemResponse, HistoryListResponse

router = APIRouter(prefix="/api/history", tags=["history"])
logger = logging.getLogger(__name__)


@router.get("", response_model=HistoryListResponse)
async def list_history(history: HistoryStore = Depends(get_history)):
    """Get all history records of the authenticated user, newest first."""
    records = history.list()
    return HistoryListResponse(
        items=[HistoryItemResponse.from_record(r) for r in records],
        total=len(records),
    )


@router.get("/{record_id}", response_model=HistoryRecord)
async def get_history_record(record_id: str, history: HistoryStore = Depends(get_history)):
    """Get one record, image included."""
    record = history.get(record_id)
    if record is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="History record not found",
        )
    return record


@router.delete("/{record_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_history_record(record_id: str, history: HistoryStore = Depends(get_history)):
    """Delete one record. Unknown ids are not an error."""
    await history.remove(record_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
async def clear_history(history: HistoryStore = Depends(get_history)):
    await history.clear()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
