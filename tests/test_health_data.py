"""
Tests for the consolidated health data document.
"""


def _post(client, patient, auth, **reading):
    payload = {"type": "heart_rate", "value": 72, "unit": "bpm", **reading}
    return client.post("/api/health-data/", json=payload, headers=auth(patient))


class TestRecord:
    def test_first_reading_creates_document(self, client, patient, auth, db):
        r = _post(client, patient, auth)

        assert r.status_code == 201
        stored = db.docs("patientHealthData")[patient["id"]]
        assert stored["patientId"] == patient["id"]
        assert stored["healthMetrics"]["heart_rate"]["value"] == 72
        assert stored["healthMetrics"]["heart_rate"]["timestamp"] is not None
        assert stored["createdAt"] is not None

    def test_latest_value_per_metric_kept(self, client, patient, auth, db):
        _post(client, patient, auth, value=70)
        _post(client, patient, auth, type="steps", value=8000, unit="steps")
        _post(client, patient, auth, value=88, notes="after a walk")

        metrics = db.docs("patientHealthData")[patient["id"]]["healthMetrics"]
        assert set(metrics) == {"heart_rate", "steps"}
        assert metrics["heart_rate"]["value"] == 88
        assert metrics["heart_rate"]["notes"] == "after a walk"
        assert metrics["steps"]["value"] == 8000

    def test_out_of_range_rejected(self, client, patient, auth):
        r = _post(client, patient, auth, value=250)
        assert r.status_code == 400
        assert "between 40 and 200" in r.json()["errors"][0]["message"]

    def test_unknown_metric(self, client, patient, auth):
        assert _post(client, patient, auth, type="glucose").status_code == 400

    def test_doctor_cannot_record(self, client, doctor, auth):
        r = client.post("/api/health-data/", json={"type": "weight", "value": 70, "unit": "kg"}, headers=auth(doctor))
        assert r.status_code == 403

    def test_bulk_update(self, client, patient, auth, db):
        _post(client, patient, auth)
        r = client.put(
            "/api/health-data/bulk",
            json={"healthMetrics": {
                "weight": {"value": 64.5, "unit": "kg"},
                "sleep": {"value": 7.5, "unit": "hours"},
            }},
            headers=auth(patient),
        )

        assert r.status_code == 200
        metrics = db.docs("patientHealthData")[patient["id"]]["healthMetrics"]
        assert set(metrics) == {"heart_rate", "weight", "sleep"}


class TestRead:
    def test_get_own_empty(self, client, patient, auth):
        r = client.get("/api/health-data/", headers=auth(patient))
        assert r.status_code == 200
        assert r.json()["data"]["healthData"] == []

    def test_get_own(self, client, patient, auth):
        _post(client, patient, auth)
        data = client.get("/api/health-data/", headers=auth(patient)).json()["data"]
        assert len(data["healthData"]) == 1
        assert data["pagination"]["total"] == 1

    def test_metric_catalog(self, client, patient, auth):
        types = client.get("/api/health-data/metrics/types", headers=auth(patient)).json()["data"]["metricTypes"]
        assert set(types) == {"steps", "heart_rate", "sleep", "blood_pressure", "weight", "temperature"}
        assert types["temperature"]["unit"] == "°C"

    def test_doctor_reads_own_patient(self, client, doctor, other_doctor, patient, auth):
        _post(client, patient, auth)
        url = f"/api/health-data/patient/{patient['id']}"
        assert client.get(url, headers=auth(doctor)).json()["data"]["healthData"][0]["id"] == patient["id"]
        assert client.get(url, headers=auth(other_doctor)).status_code == 403

    def test_by_id_must_be_own(self, client, patient, make_user, auth, doctor):
        other = make_user("patient", doctorId=doctor["id"])
        _post(client, other, auth)
        assert client.get(f"/api/health-data/{other['id']}", headers=auth(patient)).status_code == 403


class TestUpdateDelete:
    def test_put_requires_existing(self, client, patient, auth):
        r = client.put(
            f"/api/health-data/{patient['id']}",
            json={"type": "weight", "value": 60, "unit": "kg"},
            headers=auth(patient),
        )
        assert r.status_code == 404

    def test_put_and_delete(self, client, patient, auth, db):
        _post(client, patient, auth)
        r = client.put(
            f"/api/health-data/{patient['id']}",
            json={"type": "temperature", "value": 37.2, "unit": "°C"},
            headers=auth(patient),
        )
        assert r.status_code == 200
        assert "temperature" in r.json()["data"]["healthData"]["healthMetrics"]

        assert client.delete(f"/api/health-data/{patient['id']}", headers=auth(patient)).status_code == 200
        assert patient["id"] not in db.docs("patientHealthData")
        assert client.delete(f"/api/health-data/{patient['id']}", headers=auth(patient)).status_code == 404
