from db.models import AppRole


def test_profile_defaults_and_update(client):
    me = {"X-User-Id": "patient-1"}

    assert client.get("/api/profile/me", headers=me).json()["role"] == "patient"

    res = client.put(
        "/api/profile/me",
        json={"fullName": "Ada Obi", "phone": "+2348012345678", "notificationPreferences": {"medicine_reminders": False}},
        headers=me,
    )

    assert res.status_code == 200
    assert res.json()["fullName"] == "Ada Obi"
    assert client.get("/api/profile/me", headers=me).json()["notificationPreferences"] == {"medicine_reminders": False}


def test_invalid_phone_is_rejected(client):
    res = client.put("/api/profile/me", json={"phone": "call me"}, headers={"X-User-Id": "patient-1"})
    assert res.status_code == 400


def test_admin_assigns_roles(client, grant_role):
    admin = grant_role("admin-1", AppRole.admin)

    assert client.put("/api/profile/pharm-1/role", json={"role": "pharmacist"}).status_code == 403
    res = client.put("/api/profile/pharm-1/role", json={"role": "pharmacist"}, headers=admin)

    assert res.json()["role"] == "pharmacist"
    assert client.get("/api/profile/me", headers={"X-User-Id": "pharm-1"}).json()["role"] == "pharmacist"
