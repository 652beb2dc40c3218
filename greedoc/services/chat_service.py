"""
Chat messages (``chats`` collection) between a patient and a doctor.

Messages carry a ``chatRoomId`` derived from the two participant ids; rooms
are not stored separately but computed from the caller's messages.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from google.cloud.firestore import FieldFilter

from greedoc.core.firebase import get_db
from greedoc.models.chat import chat_room_id
from greedoc.services import notification_service, push, user_service
from greedoc.services.time_utils import as_utc, utcnow

logger = logging.getLogger(__name__)

CHATS = "chats"

PREVIEW_CHARS = 100


def _created(item: Dict[str, Any]):
    return as_utc(item.get("createdAt")) or utcnow()


def _query(field: str, value: Any):
    return get_db().collection(CHATS).where(filter=FieldFilter(field, "==", value))


def _items(query) -> List[Dict[str, Any]]:
    return [{"id": d.id, **(d.to_dict() or {})} for d in query.stream()]


def send_message(sender: Dict[str, Any], receiver: Dict[str, Any], payload: Dict[str, Any]) -> Dict[str, Any]:
    """
    Store a chat message, then notify the receiver.

    The receiver gets an in-app notification document plus an FCM push to
    their registered device. Push failures are logged by ``push`` and do
    not affect the stored message.
    """
    now = utcnow()
    message = {
        "senderId": sender["id"],
        "receiverId": receiver["id"],
        "message": payload["message"],
        "messageType": payload.get("messageType", "text"),
        "attachments": payload.get("attachments") or [],
        "isRead": False,
        "readAt": None,
        "chatRoomId": chat_room_id(sender["id"], receiver["id"]),
        "createdAt": now,
        "updatedAt": now,
    }
    _, ref = get_db().collection(CHATS).add(message)
    message = {"id": ref.id, **message}

    title = f"New message from {user_service.full_name(sender) or 'Greedoc'}"
    preview = message["message"][:PREVIEW_CHARS]
    data = {
        "type": "message",
        "messageId": ref.id,
        "chatRoomId": message["chatRoomId"],
        "senderId": sender["id"],
    }
    notification_service.create_notification(receiver["id"], title, preview, "message", data)
    push.send_to_token(receiver.get("fcmToken"), title, preview, data)

    logger.debug("Message %s stored in %s", ref.id, message["chatRoomId"])
    return message


def _other_user_summary(user_id: str) -> Dict[str, Any]:
    user = user_service.get_user(user_id) or {}
    return {
        "id": user_id,
        "fullName": user_service.full_name(user) or "Unknown user",
        "avatar": user.get("avatar"),
        "role": user.get("role"),
        "isOnline": bool(user.get("isOnline")),
    }


def list_rooms(user_id: str) -> List[Dict[str, Any]]:
    """One entry per chat room the user takes part in, most recent first."""
    messages = {m["id"]: m for m in _items(_query("senderId", user_id))}
    messages.update({m["id"]: m for m in _items(_query("receiverId", user_id))})

    rooms: Dict[str, Dict[str, Any]] = {}
    for m in sorted(messages.values(), key=_created):
        room = rooms.setdefault(m["chatRoomId"], {
            "chatRoomId": m["chatRoomId"],
            "lastMessage": None,
            "unreadCount": 0,
            "otherUserId": m["receiverId"] if m["senderId"] == user_id else m["senderId"],
        })
        room["lastMessage"] = m
        if m["receiverId"] == user_id and not m.get("isRead"):
            room["unreadCount"] += 1

    result = []
    for room in rooms.values():
        room["otherUser"] = _other_user_summary(room.pop("otherUserId"))
        result.append(room)
    result.sort(key=lambda r: _created(r["lastMessage"]), reverse=True)
    return result


def room_messages(room_id: str, limit: int = 50) -> List[Dict[str, Any]]:
    """The latest ``limit`` messages of a room, oldest first."""
    items = sorted(_items(_query("chatRoomId", room_id)), key=_created)
    return items[-limit:] if limit else items


def is_participant(messages: List[Dict[str, Any]], user_id: str) -> bool:
    return any(user_id in (m.get("senderId"), m.get("receiverId")) for m in messages)


def get_message(message_id: str) -> Optional[Dict[str, Any]]:
    doc = get_db().collection(CHATS).document(message_id).get()
    if not doc.exists:
        return None
    return {"id": doc.id, **(doc.to_dict() or {})}


def mark_read(message_id: str) -> Dict[str, Any]:
    now = utcnow()
    get_db().collection(CHATS).document(message_id).update(
        {"isRead": True, "readAt": now, "updatedAt": now}
    )
    return get_message(message_id)


def unread_for(user_id: str) -> List[Dict[str, Any]]:
    query = _query("receiverId", user_id).where(filter=FieldFilter("isRead", "==", False))
    return sorted(_items(query), key=_created)
