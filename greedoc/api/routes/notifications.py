"""In-app notification inbox."""
from fastapi import APIRouter, Depends, HTTPException

from greedoc.api.deps import get_current_user
from greedoc.services import notification_service

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("/")
async def list_notifications(user=Depends(get_current_user)):
    items = notification_service.list_for_user(user["id"])
    unread = sum(1 for n in items if not n.get("isRead"))
    return {"status": "success", "data": {"notifications": items, "unreadCount": unread}}


@router.put("/{notification_id}/read")
async def mark_notification_read(notification_id: str, user=Depends(get_current_user)):
    notification = notification_service.get_notification(notification_id)
    if notification is None:
        raise HTTPException(status_code=404, detail="Notification not found")
    if notification.get("userId") != user["id"]:
        raise HTTPException(status_code=403, detail="Not authorized")

    notification = notification_service.mark_read(notification_id)
    return {"status": "success", "data": {"notification": notification}}
