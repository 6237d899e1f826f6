import pytest
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from api.report import render_report
from config import settings
from db.database import get_session
from db.models import AppRole, CounterfeitReport, RiskLevel
from main import app


REPORT = {
    "drug_name": "Coartem",
    "location_address": "12 Market Road",
    "location_city": "Lagos",
    "description": "Blister foil print is blurry and the tablets crumble",
    "severity": "high",
    "batch_number": "lot-9",
}


@pytest.fixture(autouse=True)
def dev_mode(monkeypatch, tmp_path):
    monkeypatch.setattr(settings, "DEV_MODE", True)
    monkeypatch.setattr(settings, "REPORT_PHOTOS_DIR", tmp_path)


def submit(client, headers=None, files=None, **overrides):
    res = client.post("/api/report/", data={**REPORT, **overrides}, headers=headers or {}, files=files)
    assert res.status_code == 201, res.text
    return res.json()


def test_report_is_stored_pending(client):
    report = submit(client, headers={"X-User-Id": "patient-1"})

    assert report["status"] == "pending"
    assert report["isVerified"] is False
    assert report["batchNumber"] == "LOT-9"
    assert report["isAnonymous"] is False


def test_anonymous_report_keeps_reporter_name_only(client):
    report = submit(client, headers={"X-User-Id": "patient-1"}, is_anonymous="true", reporter_name="A. Nonymous")

    assert report["isAnonymous"] is True
    assert report["reporterName"] == "A. Nonymous"


def test_photo_is_saved(client, tmp_path):
    report = submit(client, files={"photo": ("box.png", b"\x89PNG fake", "image/png")})

    assert len(report["photoUrls"]) == 1
    assert list(tmp_path.iterdir())[0].suffix == ".png"


def test_list_filters_by_severity(client):
    submit(client, severity="low")
    submit(client, severity="critical")

    res = client.get("/api/report/", params={"severity": "critical"})

    assert [r["severity"] for r in res.json()] == ["critical"]


def test_short_description_is_rejected(client):
    res = client.post("/api/report/", data={**REPORT, "description": "bad"})
    assert res.status_code == 400


def test_verification_awards_points(client, grant_role):
    reporter = {"X-User-Id": "patient-1"}
    first = submit(client, headers=reporter)
    second = submit(client, headers=reporter, severity="critical")
    pharmacist = grant_role("pharm-1", AppRole.pharmacist)

    assert client.post(f"/api/report/{first['id']}/verify", headers=reporter).status_code == 403

    res = client.post(f"/api/report/{first['id']}/verify", headers=pharmacist)
    assert res.status_code == 200
    assert res.json()["rewardPoints"] == 75
    assert res.json()["status"] == "verified"
    client.post(f"/api/report/{second['id']}/verify", headers=pharmacist)

    rewards = client.get("/api/report/rewards/me", headers=reporter).json()
    assert rewards["totalPoints"] == 175
    assert rewards["level"] == 2
    assert rewards["verifiedReportsCount"] == 2
    assert rewards["badges"] == ["first_report"]

    inbox = client.get("/api/notifications/", headers=reporter).json()
    assert len(inbox) == 2
    assert inbox[0]["type"] == "report_verified"
    read = client.post(f"/api/notifications/{inbox[0]['id']}/read", headers=reporter)
    assert read.json()["read"] is True
    assert len(client.get("/api/notifications/", params={"unread_only": True}, headers=reporter).json()) == 1


def test_double_verification_is_rejected(client, grant_role):
    report = submit(client)
    admin = grant_role("admin-1", AppRole.admin)

    client.post(f"/api/report/{report['id']}/verify", headers=admin)
    res = client.post(f"/api/report/{report['id']}/verify", headers=admin)

    assert res.status_code == 400


def test_verifying_missing_report_is_404(client, grant_role):
    admin = grant_role("admin-1", AppRole.admin)
    assert client.post("/api/report/999/verify", headers=admin).status_code == 404


def test_rewards_default_for_new_user(client):
    rewards = client.get("/api/report/rewards/me", headers={"X-User-Id": "new-user"}).json()
    assert rewards["totalPoints"] == 0
    assert rewards["level"] == 1


def test_report_mail_escapes_reporter_text():
    report = CounterfeitReport(
        id=7,
        drug_name="<script>alert(1)</script>",
        location_address="12 Market Road",
        description='Label says "<b>genuine</b>" & looks off',
        severity=RiskLevel.high,
    )

    body = render_report(report)

    assert "<script>" not in body
    assert "&lt;script&gt;alert(1)&lt;/script&gt;" in body
    assert "&lt;b&gt;genuine&lt;/b&gt;" in body
    assert "&amp; looks off" in body


class FailingSession(Session):
    def commit(self):
        raise SQLAlchemyError("disk full")


def test_photo_is_removed_when_report_cannot_be_saved(client, engine, tmp_path):
    def failing_session():
        with FailingSession(engine) as session:
            yield session

    app.dependency_overrides[get_session] = failing_session

    res = client.post(
        "/api/report/",
        data=REPORT,
        files={"photo": ("box.png", b"\x89PNG fake", "image/png")},
    )

    assert res.status_code == 500
    assert "Error saving report" in res.json()["error"]
    assert list(tmp_path.iterdir()) == []
