"""
Tests for the doctor-facing patient routes.

Tests:
- Patient creation with generated credentials
- Ownership checks between doctors
- Medical info merge
- Assigned doctor lookup
"""

NEW_PATIENT = {
    "firstName": "Usman",
    "lastName": "Tariq",
    "email": "usman.tariq@greedoc-mail.com",
    "phoneNumber": "03331234567",
    "dateOfBirth": "1990-01-20",
    "gender": "male",
    "cnic": "61101-7654321-9",
}


class TestCreatePatient:
    def test_generates_password_and_links_doctor(self, client, doctor, auth, db):
        r = client.post("/api/patients/", json=NEW_PATIENT, headers=auth(doctor))

        assert r.status_code == 201
        data = r.json()["data"]
        creds = data["loginCredentials"]
        assert creds["email"] == NEW_PATIENT["email"]
        assert creds["cnic"] == "61101-7654321-9"
        assert creds["loginUrl"].endswith("/patient/login")

        password = creds["password"]
        assert len(password) == 12
        assert any(c.isupper() for c in password)
        assert any(c.islower() for c in password)
        assert any(c.isdigit() for c in password)

        stored = db.docs("users")[data["patient"]["id"]]
        assert stored["role"] == "patient"
        assert stored["doctorId"] == doctor["id"]

        login = client.post("/api/auth/login", json={"cnic": "61101-7654321-9", "password": password})
        assert login.status_code == 200

    def test_uses_given_password(self, client, doctor, auth):
        r = client.post("/api/patients/", json={**NEW_PATIENT, "password": "chosen1"}, headers=auth(doctor))
        assert r.json()["data"]["loginCredentials"]["password"] == "chosen1"

    def test_duplicate_email(self, client, doctor, patient, auth):
        r = client.post("/api/patients/", json={**NEW_PATIENT, "email": patient["email"]}, headers=auth(doctor))
        assert r.status_code == 400

    def test_duplicate_cnic(self, client, doctor, patient, auth):
        r = client.post("/api/patients/", json={**NEW_PATIENT, "cnic": patient["cnic"]}, headers=auth(doctor))
        assert r.status_code == 400
        assert "CNIC" in r.json()["message"]

    def test_invalid_cnic(self, client, doctor, auth):
        r = client.post("/api/patients/", json={**NEW_PATIENT, "cnic": "1234"}, headers=auth(doctor))
        assert r.status_code == 400
        assert r.json()["errors"][0]["field"] == "cnic"

    def test_patient_cannot_create(self, client, patient, auth):
        r = client.post("/api/patients/", json=NEW_PATIENT, headers=auth(patient))
        assert r.status_code == 403


class TestListAndGet:
    def test_lists_only_own_patients(self, client, doctor, other_doctor, patient, make_user, auth):
        make_user("patient", doctorId=other_doctor["id"])

        r = client.get("/api/patients/", headers=auth(doctor))

        assert r.status_code == 200
        ids = [p["id"] for p in r.json()["data"]["patients"]]
        assert ids == [patient["id"]]
        assert r.json()["data"]["pagination"]["total"] == 1

    def test_search(self, client, doctor, patient, make_user, auth):
        make_user("patient", firstName="Zainab", doctorId=doctor["id"])

        r = client.get("/api/patients/", params={"search": "zain"}, headers=auth(doctor))
        names = [p["firstName"] for p in r.json()["data"]["patients"]]
        assert names == ["Zainab"]

    def test_get_other_doctors_patient_forbidden(self, client, other_doctor, patient, auth):
        r = client.get(f"/api/patients/{patient['id']}", headers=auth(other_doctor))
        assert r.status_code == 403

    def test_get_non_patient(self, client, doctor, other_doctor, auth):
        r = client.get(f"/api/patients/{other_doctor['id']}", headers=auth(doctor))
        assert r.status_code == 400

    def test_get_missing(self, client, doctor, auth):
        r = client.get("/api/patients/nope", headers=auth(doctor))
        assert r.status_code == 404

    def test_admin_can_view_any_patient(self, client, admin, patient, auth):
        r = client.get(f"/api/patients/{patient['id']}", headers=auth(admin))
        assert r.status_code == 200
        assert r.json()["data"]["patient"]["age"] is not None


class TestUpdate:
    def test_update_patient(self, client, doctor, patient, auth, db):
        r = client.put(f"/api/patients/{patient['id']}", json={"isActive": False}, headers=auth(doctor))
        assert r.status_code == 200
        assert db.docs("users")[patient["id"]]["isActive"] is False

    def test_empty_update(self, client, doctor, patient, auth):
        r = client.put(f"/api/patients/{patient['id']}", json={}, headers=auth(doctor))
        assert r.status_code == 400

    def test_nulls_do_not_clear_fields(self, client, doctor, patient, auth, db):
        url = f"/api/patients/{patient['id']}"
        assert client.put(url, json={"firstName": None, "isActive": None}, headers=auth(doctor)).status_code == 400

        r = client.put(url, json={"firstName": None, "lastName": "Malik-Raza"}, headers=auth(doctor))
        assert r.status_code == 200
        stored = db.docs("users")[patient["id"]]
        assert stored["firstName"] == "Sara"
        assert stored["lastName"] == "Malik-Raza"
        assert stored["isActive"] is True

    def test_medical_info_merges(self, client, doctor, patient, auth):
        headers = auth(doctor)
        url = f"/api/patients/{patient['id']}/medical-info"

        client.put(url, json={"allergies": ["penicillin"], "bloodType": "O+"}, headers=headers)
        client.put(url, json={"conditions": ["asthma"]}, headers=headers)

        info = client.get(url, headers=headers).json()["data"]["medicalInfo"]
        assert info == {"allergies": ["penicillin"], "bloodType": "O+", "conditions": ["asthma"]}

    def test_medical_info_lists_enforced(self, client, doctor, patient, auth):
        r = client.put(
            f"/api/patients/{patient['id']}/medical-info",
            json={"allergies": "penicillin"},
            headers=auth(doctor),
        )
        assert r.status_code == 400


class TestAssignedDoctor:
    def test_patient_sees_own_doctor(self, client, doctor, patient, auth):
        r = client.get(f"/api/patients/{patient['id']}/doctor", headers=auth(patient))
        assert r.status_code == 200
        assert r.json()["data"]["doctor"]["id"] == doctor["id"]
        assert "password" not in r.json()["data"]["doctor"]

    def test_patient_cannot_see_other_patient(self, client, patient, make_user, doctor, auth):
        other = make_user("patient", doctorId=doctor["id"])
        r = client.get(f"/api/patients/{other['id']}/doctor", headers=auth(patient))
        assert r.status_code == 403

    def test_unassigned_patient(self, client, make_user, auth):
        lonely = make_user("patient", doctorId=None)
        r = client.get(f"/api/patients/{lonely['id']}/doctor", headers=auth(lonely))
        assert r.status_code == 200
        assert r.json()["data"]["doctor"] is None
