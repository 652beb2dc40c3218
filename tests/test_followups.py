"""
Tests for follow-up routes and their derived date flags.
"""

from datetime import timedelta

from greedoc.services import followup_service
from greedoc.services.time_utils import utcnow


def _day(offset: int) -> str:
    return (utcnow().date() + timedelta(days=offset)).isoformat()


def _create(client, doctor, patient, auth, **extra):
    payload = {
        "patientId": patient["id"],
        "followUpDate": _day(3),
        "followUpTime": "10:30",
        "purpose": "Blood pressure review",
        **extra,
    }
    r = client.post("/api/followups/", json=payload, headers=auth(doctor))
    assert r.status_code == 201, r.text
    return r.json()["data"]["followUp"]


class TestCreate:
    def test_defaults(self, client, doctor, patient, auth, db):
        followup = _create(client, doctor, patient, auth)

        assert followup["status"] == "scheduled"
        assert followup["priority"] == "medium"
        assert followup["isUpcoming"] is True
        assert followup["isToday"] is False
        assert followup["isOverdue"] is False
        assert db.docs("followUps")[followup["id"]]["followUpDate"] == _day(3)

    def test_validation(self, client, doctor, patient, auth):
        headers = auth(doctor)
        base = {"patientId": patient["id"], "followUpDate": _day(1), "followUpTime": "10:30", "purpose": "Review"}

        assert client.post("/api/followups/", json={**base, "followUpTime": "25:00"}, headers=headers).status_code == 400
        assert client.post("/api/followups/", json={**base, "purpose": "ab"}, headers=headers).status_code == 400
        assert client.post("/api/followups/", json={**base, "priority": "asap"}, headers=headers).status_code == 400

    def test_patient_cannot_create(self, client, patient, auth):
        payload = {"patientId": patient["id"], "followUpDate": _day(1), "followUpTime": "10:30", "purpose": "Review"}
        r = client.post("/api/followups/", json=payload, headers=auth(patient))
        assert r.status_code == 403


class TestQueries:
    def test_sorted_soonest_first(self, client, doctor, patient, auth):
        late = _create(client, doctor, patient, auth, followUpDate=_day(5))
        early = _create(client, doctor, patient, auth, followUpDate=_day(1))

        r = client.get("/api/followups/", headers=auth(patient))
        assert [f["id"] for f in r.json()["data"]["followUps"]] == [early["id"], late["id"]]

    def test_upcoming_window(self, client, doctor, patient, auth):
        soon = _create(client, doctor, patient, auth, followUpDate=_day(2))
        _create(client, doctor, patient, auth, followUpDate=_day(20))

        r = client.get(f"/api/followups/upcoming/{doctor['id']}", params={"days": 7}, headers=auth(doctor))
        assert [f["id"] for f in r.json()["data"]["followUps"]] == [soon["id"]]

    def test_upcoming_other_doctor_forbidden(self, client, doctor, other_doctor, auth):
        r = client.get(f"/api/followups/upcoming/{doctor['id']}", headers=auth(other_doctor))
        assert r.status_code == 403

    def test_overdue_flag(self):
        item = followup_service.with_derived(
            {"status": "scheduled", "followUpDate": _day(-1), "followUpTime": "09:00"}
        )
        assert item["isOverdue"] is True
        assert item["isUpcoming"] is False

    def test_completed_is_never_overdue(self):
        item = followup_service.with_derived(
            {"status": "completed", "followUpDate": _day(-1), "followUpTime": "09:00"}
        )
        assert item["isOverdue"] is False


class TestChanges:
    def test_patient_can_update_status(self, client, doctor, patient, auth):
        followup = _create(client, doctor, patient, auth)
        r = client.put(
            f"/api/followups/{followup['id']}/status",
            json={"status": "cancelled", "notes": "Travelling"},
            headers=auth(patient),
        )
        assert r.status_code == 200
        assert r.json()["data"]["followUp"]["status"] == "cancelled"

    def test_stranger_cannot_update_status(self, client, doctor, patient, make_user, auth):
        followup = _create(client, doctor, patient, auth)
        stranger = make_user("patient", doctorId=doctor["id"])
        r = client.put(f"/api/followups/{followup['id']}/status", json={"status": "completed"}, headers=auth(stranger))
        assert r.status_code == 403

    def test_reschedule_persists_and_rearms_reminder(self, client, doctor, patient, auth, db):
        followup = _create(client, doctor, patient, auth)
        db.collection("followUps").document(followup["id"]).update({"reminderSent": True})

        r = client.put(
            f"/api/followups/{followup['id']}",
            json={"followUpDate": _day(4), "status": "rescheduled"},
            headers=auth(doctor),
        )

        assert r.status_code == 200
        stored = db.docs("followUps")[followup["id"]]
        assert stored["followUpDate"] == _day(4)
        assert stored["status"] == "rescheduled"
        assert stored["reminderSent"] is False

    def test_nulls_do_not_clear_fields(self, client, doctor, patient, auth, db):
        followup = _create(client, doctor, patient, auth)
        url = f"/api/followups/{followup['id']}"
        nulls = {"status": None, "followUpDate": None, "purpose": None}

        assert client.put(url, json=nulls, headers=auth(doctor)).status_code == 400

        r = client.put(url, json={**nulls, "notes": "Bring previous reports"}, headers=auth(doctor))
        assert r.status_code == 200
        stored = db.docs("followUps")[followup["id"]]
        assert stored["status"] == "scheduled"
        assert stored["followUpDate"] == _day(3)
        assert stored["purpose"] == "Blood pressure review"
        assert stored["notes"] == "Bring previous reports"

    def test_delete_by_other_doctor_forbidden(self, client, doctor, other_doctor, patient, auth):
        followup = _create(client, doctor, patient, auth)
        assert client.delete(f"/api/followups/{followup['id']}", headers=auth(other_doctor)).status_code == 403
        assert client.delete(f"/api/followups/{followup['id']}", headers=auth(doctor)).status_code == 200
        assert client.get(f"/api/followups/{followup['id']}", headers=auth(doctor)).status_code == 404
