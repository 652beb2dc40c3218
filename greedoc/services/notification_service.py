"""In-app notifications stored in the ``notifications`` collection."""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from google.cloud.firestore import FieldFilter

from greedoc.core.firebase import get_db
from greedoc.services.time_utils import as_utc, utcnow

NOTIFICATIONS = "notifications"

LIST_LIMIT = 50


def create_notification(
    user_id: str,
    title: str,
    body: str,
    kind: str,
    data: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    doc = {
        "userId": user_id,
        "title": title,
        "body": body,
        "kind": kind,
        "data": data or {},
        "isRead": False,
        "readAt": None,
        "createdAt": utcnow(),
    }
    _, ref = get_db().collection(NOTIFICATIONS).add(doc)
    return {"id": ref.id, **doc}


def list_for_user(user_id: str, limit: int = LIST_LIMIT) -> List[Dict[str, Any]]:
    query = get_db().collection(NOTIFICATIONS).where(filter=FieldFilter("userId", "==", user_id))
    items = [{"id": d.id, **(d.to_dict() or {})} for d in query.stream()]
    items.sort(key=lambda n: as_utc(n.get("createdAt")) or utcnow(), reverse=True)
    return items[:limit]


def get_notification(notification_id: str) -> Optional[Dict[str, Any]]:
    doc = get_db().collection(NOTIFICATIONS).document(notification_id).get()
    if not doc.exists:
        return None
    return {"id": doc.id, **(doc.to_dict() or {})}


def mark_read(notification_id: str) -> Dict[str, Any]:
    ref = get_db().collection(NOTIFICATIONS).document(notification_id)
    ref.update({"isRead": True, "readAt": utcnow()})
    return get_notification(notification_id)
