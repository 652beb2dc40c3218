"""
Tests for chat messaging, rooms and read state.
"""

from greedoc.models.chat import chat_room_id


def _send(client, sender, receiver, auth, text="Hello doctor"):
    r = client.post(
        "/api/chat/send",
        json={"receiverId": receiver["id"], "message": text},
        headers=auth(sender),
    )
    assert r.status_code == 201, r.text
    return r.json()["data"]["message"]


def test_room_id_is_order_independent():
    assert chat_room_id("b", "a") == chat_room_id("a", "b") == "chat_a_b"


class TestSend:
    def test_stores_message_notification_and_push(self, client, doctor, patient, auth, db, pushes):
        db.collection("users").document(doctor["id"]).update({"fcmToken": "device-1"})

        message = _send(client, patient, doctor, auth)

        assert message["chatRoomId"] == chat_room_id(patient["id"], doctor["id"])
        assert message["isRead"] is False

        notes = list(db.docs("notifications").values())
        assert len(notes) == 1
        assert notes[0]["userId"] == doctor["id"]
        assert notes[0]["kind"] == "message"

        assert pushes[0]["token"] == "device-1"
        assert pushes[0]["title"] == "New message from Sara Malik"

    def test_no_push_without_token(self, client, doctor, patient, auth, pushes):
        _send(client, patient, doctor, auth)
        assert pushes == []

    def test_unknown_receiver(self, client, patient, auth):
        r = client.post("/api/chat/send", json={"receiverId": "ghost", "message": "hi"}, headers=auth(patient))
        assert r.status_code == 404

    def test_empty_message(self, client, doctor, patient, auth):
        r = client.post("/api/chat/send", json={"receiverId": doctor["id"], "message": ""}, headers=auth(patient))
        assert r.status_code == 400


class TestRooms:
    def test_rooms_with_unread_counts(self, client, doctor, patient, make_user, auth):
        other = make_user("patient", firstName="Omar", doctorId=doctor["id"])
        _send(client, patient, doctor, auth, "first")
        _send(client, patient, doctor, auth, "second")
        _send(client, doctor, patient, auth, "reply")
        _send(client, other, doctor, auth, "hello from Omar")

        rooms = client.get("/api/chat/rooms", headers=auth(doctor)).json()["data"]["chatRooms"]

        by_room = {r["chatRoomId"]: r for r in rooms}
        sara = by_room[chat_room_id(doctor["id"], patient["id"])]
        assert sara["unreadCount"] == 2
        assert sara["lastMessage"]["message"] == "reply"
        assert sara["otherUser"]["fullName"] == "Sara Malik"
        assert by_room[chat_room_id(doctor["id"], other["id"])]["unreadCount"] == 1

    def test_messages_chronological_and_private(self, client, doctor, patient, make_user, auth):
        _send(client, patient, doctor, auth, "one")
        _send(client, doctor, patient, auth, "two")
        room = chat_room_id(doctor["id"], patient["id"])

        r = client.get(f"/api/chat/messages/{room}", headers=auth(patient))
        assert [m["message"] for m in r.json()["data"]["messages"]] == ["one", "two"]

        outsider = make_user("patient", doctorId=doctor["id"])
        assert client.get(f"/api/chat/messages/{room}", headers=auth(outsider)).status_code == 403


class TestReadState:
    def test_only_receiver_marks_read(self, client, doctor, patient, auth):
        message = _send(client, patient, doctor, auth)
        url = f"/api/chat/messages/{message['id']}/read"

        assert client.put(url, headers=auth(patient)).status_code == 403
        r = client.put(url, headers=auth(doctor))
        assert r.status_code == 200
        assert r.json()["data"]["message"]["isRead"] is True

        unread = client.get("/api/chat/unread", headers=auth(doctor)).json()["data"]
        assert unread["unreadCount"] == 0

    def test_unread_count(self, client, doctor, patient, auth):
        _send(client, patient, doctor, auth)
        _send(client, patient, doctor, auth)
        assert client.get("/api/chat/unread", headers=auth(doctor)).json()["data"]["unreadCount"] == 2

    def test_fcm_token_saved(self, client, patient, auth, db):
        r = client.post("/api/chat/fcm-token", json={"fcmToken": "tok-123"}, headers=auth(patient))
        assert r.status_code == 200
        assert db.docs("users")[patient["id"]]["fcmToken"] == "tok-123"
