"""
Tests for user administration and the user directory.
"""


class TestAdminListing:
    def test_admin_lists_users(self, client, admin, doctor, patient, auth):
        r = client.get("/api/users/", headers=auth(admin))

        assert r.status_code == 200
        data = r.json()["data"]
        assert data["pagination"]["total"] == 3
        assert all("password" not in u for u in data["users"])

    def test_filter_by_role_and_search(self, client, admin, doctor, other_doctor, patient, auth):
        r = client.get("/api/users/", params={"role": "doctor", "search": "bilal"}, headers=auth(admin))
        assert [u["id"] for u in r.json()["data"]["users"]] == [other_doctor["id"]]

    def test_doctor_cannot_list(self, client, doctor, auth):
        r = client.get("/api/users/", headers=auth(doctor))
        assert r.status_code == 403
        assert r.json()["message"] == "Insufficient permissions"


class TestDirectorySearch:
    def test_excludes_self_and_inactive(self, client, doctor, patient, make_user, auth):
        make_user("patient", firstName="Hidden", doctorId=doctor["id"], isActive=False)

        r = client.get("/api/users/search", headers=auth(patient))

        ids = [u["id"] for u in r.json()["data"]["users"]]
        assert doctor["id"] in ids
        assert patient["id"] not in ids
        assert len(ids) == 1


class TestViewing:
    def test_patient_sees_own_doctor(self, client, doctor, patient, auth):
        r = client.get(f"/api/users/{doctor['id']}", headers=auth(patient))
        assert r.status_code == 200
        assert r.json()["data"]["user"]["fullName"] == "Ayesha Khan"

    def test_doctor_sees_own_patient(self, client, doctor, patient, auth):
        r = client.get(f"/api/users/{patient['id']}", headers=auth(doctor))
        assert r.json()["data"]["user"]["age"] is not None

    def test_unrelated_users_forbidden(self, client, other_doctor, patient, auth):
        assert client.get(f"/api/users/{other_doctor['id']}", headers=auth(patient)).status_code == 403
        assert client.get(f"/api/users/{patient['id']}", headers=auth(other_doctor)).status_code == 403

    def test_unknown_user(self, client, admin, auth):
        assert client.get("/api/users/missing", headers=auth(admin)).status_code == 404

    def test_doctor_patients(self, client, doctor, other_doctor, patient, auth):
        r = client.get(f"/api/users/{doctor['id']}/patients", headers=auth(doctor))
        assert r.json()["data"]["count"] == 1
        assert client.get(f"/api/users/{doctor['id']}/patients", headers=auth(other_doctor)).status_code == 403


class TestChanges:
    def test_update_self(self, client, doctor, auth, db):
        r = client.put(f"/api/users/{doctor['id']}", json={"specialization": "Neurology"}, headers=auth(doctor))
        assert r.status_code == 200
        assert db.docs("users")[doctor["id"]]["specialization"] == "Neurology"

    def test_update_other_forbidden(self, client, doctor, other_doctor, auth):
        r = client.put(f"/api/users/{doctor['id']}", json={"firstName": "X"}, headers=auth(other_doctor))
        assert r.status_code == 403

    def test_empty_update(self, client, doctor, auth):
        assert client.put(f"/api/users/{doctor['id']}", json={}, headers=auth(doctor)).status_code == 400

    def test_admin_cannot_delete_self(self, client, admin, auth):
        r = client.delete(f"/api/users/{admin['id']}", headers=auth(admin))
        assert r.status_code == 400
        assert r.json()["message"] == "Cannot delete your own account"

    def test_admin_deletes_user(self, client, admin, other_doctor, auth, db):
        assert client.delete(f"/api/users/{other_doctor['id']}", headers=auth(admin)).status_code == 200
        assert other_doctor["id"] not in db.docs("users")

    def test_deactivate_blocks_token_then_activate(self, client, admin, patient, auth):
        r = client.put(f"/api/users/{patient['id']}/deactivate", headers=auth(admin))
        assert r.json()["data"]["user"]["isActive"] is False

        me = client.get("/api/auth/me", headers=auth(patient))
        assert me.status_code == 401
        assert me.json()["message"] == "Account is deactivated"

        client.put(f"/api/users/{patient['id']}/activate", headers=auth(admin))
        assert client.get("/api/auth/me", headers=auth(patient)).status_code == 200

    def test_update_nulls_ignored(self, client, admin, doctor, auth, db):
        r = client.put(f"/api/users/{doctor['id']}", json={"firstName": None, "specialization": None}, headers=auth(admin))
        assert r.status_code == 400
        stored = db.docs("users")[doctor["id"]]
        assert stored["firstName"] == "Ayesha"
        assert stored["specialization"] == "Cardiology"
