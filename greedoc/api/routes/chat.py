"""Doctor/patient chat routes.

Messages live in the ``chats`` collection; clients subscribe to their room
with Firestore listeners, so these endpoints only write and page history.
"""
from fastapi import APIRouter, Body, Depends, HTTPException, Query

from greedoc.api.deps import get_current_user
from greedoc.models.chat import ChatMessageCreate
from greedoc.models.user import FcmTokenUpdate
from greedoc.services import chat_service, user_service

router = APIRouter(prefix="/chat", tags=["chat"])


@router.post("/send", status_code=201)
async def send_message(
    payload: ChatMessageCreate = Body(...),
    user=Depends(get_current_user),
):
    if payload.receiver_id == user["id"]:
        raise HTTPException(status_code=400, detail="Cannot send a message to yourself")

    receiver = user_service.get_user(payload.receiver_id)
    if receiver is None:
        raise HTTPException(status_code=404, detail="Receiver not found")

    message = chat_service.send_message(user, receiver, payload.to_document())
    return {
        "status": "success",
        "message": "Message sent successfully",
        "data": {"message": message},
    }


@router.get("/rooms")
async def list_chat_rooms(user=Depends(get_current_user)):
    rooms = chat_service.list_rooms(user["id"])
    return {"status": "success", "data": {"chatRooms": rooms}}


@router.get("/messages/{chat_room_id}")
async def get_room_messages(
    chat_room_id: str,
    limit: int = Query(50, ge=1, le=500),
    user=Depends(get_current_user),
):
    messages = chat_service.room_messages(chat_room_id, limit)
    if messages and not chat_service.is_participant(messages, user["id"]):
        raise HTTPException(status_code=403, detail="Not authorized to view this chat")

    return {"status": "success", "data": {"messages": messages}}


@router.put("/messages/{message_id}/read")
async def mark_message_read(message_id: str, user=Depends(get_current_user)):
    message = chat_service.get_message(message_id)
    if message is None:
        raise HTTPException(status_code=404, detail="Message not found")
    if message.get("receiverId") != user["id"]:
        raise HTTPException(status_code=403, detail="Not authorized to mark this message as read")

    message = chat_service.mark_read(message_id)
    return {"status": "success", "data": {"message": message}}


@router.get("/unread")
async def get_unread_messages(user=Depends(get_current_user)):
    messages = chat_service.unread_for(user["id"])
    return {"status": "success", "data": {"unreadCount": len(messages), "messages": messages}}


@router.post("/fcm-token")
async def save_fcm_token(
    payload: FcmTokenUpdate = Body(...),
    user=Depends(get_current_user),
):
    user_service.update_user(user["id"], {"fcmToken": payload.fcm_token})
    return {"status": "success", "message": "FCM token saved successfully"}
