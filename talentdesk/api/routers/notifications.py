"""Pending user notifications."""

from typing import List

from fastapi import APIRouter, Depends

from talentdesk.api.deps import get_notifier
from talentdesk.services.notifications import NotificationCenter

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=List[dict])
async def drain_notifications(notifier: NotificationCenter = Depends(get_notifier)):
    """Return pending notifications and clear them."""
    return [n.to_dict() for n in notifier.drain()]
