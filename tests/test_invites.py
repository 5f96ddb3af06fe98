import uuid
from datetime import datetime, timedelta

import pytest

from shiftly.domain.invites import service as invite_service
from shiftly.domain.invites.service import cleanup_expired_invites
from shiftly.exceptions import EmailDeliveryError
from shiftly.models import ROLE_EMPLOYEE, ROLE_MANAGER, ROLE_OWNER, Employee, SetupToken
from shiftly.routes import mailer

from .conftest import auth_headers, make_token


@pytest.fixture
def outbox(monkeypatch):
    sent = []

    async def fake_send(to, link):
        sent.append((to, link))
        return {"id": "email_1"}

    monkeypatch.setattr(invite_service, "send_invite_email", fake_send)
    return sent


def invite(client, actor, **overrides):
    body = {"email": "New.Hire@Example.com", "store_id": actor.store_id or 1, "role_id": ROLE_EMPLOYEE}
    body.update(overrides)
    return client.post("/invites", json=body, headers=auth_headers(actor))


def test_manager_invites_to_own_store(client, db, staff, outbox):
    resp = invite(client, staff["manager"])

    assert resp.status_code == 201
    data = resp.json()
    assert data["email"] == "new.hire@example.com"
    assert data["email_sent"] is True
    assert data["link"] == f"https://app.shiftly.test/setup-account?token={data['token']}"
    assert outbox == [("new.hire@example.com", data["link"])]

    token = db.query(SetupToken).one()
    assert token.is_used is False
    assert timedelta(hours=23) < token.expires_at - datetime.utcnow() <= timedelta(hours=24)


def test_email_failure_keeps_the_token(client, db, staff, monkeypatch):
    async def failing_send(to, link):
        raise EmailDeliveryError("Email service not configured", status_code=500)

    monkeypatch.setattr(invite_service, "send_invite_email", failing_send)
    resp = invite(client, staff["manager"])

    assert resp.status_code == 201
    assert resp.json()["email_sent"] is False
    assert resp.json()["email_error"] == "Email service not configured"
    assert db.query(SetupToken).count() == 1


def test_owner_role_cannot_be_invited(client, staff, outbox):
    resp = invite(client, staff["owner"], store_id=staff["alice"].store_id, role_id=ROLE_OWNER)
    assert resp.status_code == 400


def test_manager_cannot_invite_to_other_store(client, staff, outbox):
    resp = invite(client, staff["manager"], store_id=staff["carol"].store_id)
    assert resp.status_code == 403


def test_employee_cannot_invite(client, staff, outbox):
    assert invite(client, staff["alice"]).status_code == 403


def test_existing_email_conflicts(client, staff, outbox):
    resp = invite(client, staff["manager"], email=staff["bob"].email.upper())
    assert resp.status_code == 409


def test_taken_employee_id_conflicts(client, staff, outbox):
    resp = invite(client, staff["manager"], employee_id=staff["bob"].employee_id)
    assert resp.status_code == 409


def test_get_invite_details(client, staff, outbox):
    token = invite(client, staff["manager"], role_id=ROLE_MANAGER).json()["token"]

    resp = client.get(f"/invites/{token}")

    assert resp.status_code == 200
    assert resp.json()["store_name"] == "Downtown"
    assert resp.json()["role_name"] == "Manager"


def test_unknown_and_expired_invites(client, db, staff):
    assert client.get("/invites/does-not-exist").status_code == 404

    expired = str(uuid.uuid4())
    db.add(
        SetupToken(
            token=expired,
            email="late@example.com",
            role_id=ROLE_EMPLOYEE,
            store_id=staff["alice"].store_id,
            expires_at=datetime.utcnow() - timedelta(minutes=1),
        )
    )
    db.commit()
    assert client.get(f"/invites/{expired}").status_code == 410


SETUP_PROFILE = {
    "first_name": "Nina",
    "last_name": "Park",
    "date_of_birth": "1998-04-02",
    "gender": "Female",
    "address_line_1": "12 Queen St",
    "city": "Toronto",
    "province": "ON",
    "country": "Canada",
    "phone": "416-555-0100",
}


def test_setup_account_creates_employee_from_token(client, db, staff, outbox):
    token = invite(client, staff["manager"], employee_id=4242).json()["token"]
    headers = {"Authorization": f"Bearer {make_token('auth-user-1', 'new.hire@example.com')}"}

    resp = client.post("/setup-account", json={"token": token, **SETUP_PROFILE}, headers=headers)

    assert resp.status_code == 201
    data = resp.json()
    assert data["employee_id"] == 4242
    assert data["store_id"] == staff["manager"].store_id
    assert data["role_name"] == "Employee"
    assert data["email"] == "new.hire@example.com"

    employee = db.query(Employee).filter(Employee.id == "auth-user-1").one()
    assert employee.first_name == "Nina"
    assert db.query(SetupToken).one().is_used is True

    again = client.post("/setup-account", json={"token": token, **SETUP_PROFILE}, headers=headers)
    assert again.status_code == 410


def test_setup_account_requires_profile_fields(client, staff, outbox):
    token = invite(client, staff["manager"]).json()["token"]
    headers = {"Authorization": f"Bearer {make_token('auth-user-2', 'new.hire@example.com')}"}

    resp = client.post(
        "/setup-account", json={"token": token, "first_name": "Nina"}, headers=headers
    )

    assert resp.status_code == 400
    detail = resp.json()["detail"]
    assert detail["message"] == "Please fill in all required fields."
    assert "phone" in detail["missing"]
    assert "first_name" not in detail["missing"]


def test_setup_account_rejects_other_email(client, staff, outbox):
    token = invite(client, staff["manager"]).json()["token"]
    headers = {"Authorization": f"Bearer {make_token('auth-user-3', 'someone@else.com')}"}

    resp = client.post("/setup-account", json={"token": token, **SETUP_PROFILE}, headers=headers)

    assert resp.status_code == 403


def test_cleanup_expired_invites(db, staff):
    now = datetime.utcnow()
    for token, expires_at, used in [
        ("old", now - timedelta(hours=1), False),
        ("old-used", now - timedelta(hours=1), True),
        ("fresh", now + timedelta(hours=1), False),
    ]:
        db.add(
            SetupToken(
                token=token,
                email=f"{token}@example.com",
                role_id=ROLE_EMPLOYEE,
                store_id=staff["alice"].store_id,
                expires_at=expires_at,
                is_used=used,
            )
        )
    db.commit()

    assert cleanup_expired_invites(db, now) == 1
    assert {t.token for t in db.query(SetupToken).all()} == {"old-used", "fresh"}


class TestSendInviteRoute:
    def test_missing_fields(self, client, staff):
        resp = client.post("/send-invite", json={"email": "a@b.com"}, headers=auth_headers(staff["manager"]))
        assert resp.status_code == 400
        assert resp.json() == {"error": "Missing email or link"}

    def test_sent(self, client, staff, monkeypatch):
        sent = []

        async def fake_send(to, link):
            sent.append(to)

        monkeypatch.setattr(mailer, "send_invite_email", fake_send)
        resp = client.post(
            "/send-invite",
            json={"email": "a@b.com", "link": "https://x.test/s?token=1"},
            headers=auth_headers(staff["manager"]),
        )
        assert resp.status_code == 200
        assert resp.json() == {"status": "sent"}
        assert sent == ["a@b.com"]

    def test_provider_error(self, client, staff, monkeypatch):
        async def failing_send(to, link):
            raise EmailDeliveryError("Invalid API key", status_code=401, details="invalid_api_key")

        monkeypatch.setattr(mailer, "send_invite_email", failing_send)
        resp = client.post(
            "/send-invite",
            json={"email": "a@b.com", "link": "https://x.test"},
            headers=auth_headers(staff["manager"]),
        )
        assert resp.status_code == 500
        assert resp.json() == {
            "error": "Invalid API key",
            "statusCode": 401,
            "details": "invalid_api_key",
        }

    def test_requires_authentication(self, client, staff):
        resp = client.post("/send-invite", json={"email": "a@b.com", "link": "x"})
        assert resp.status_code in (401, 403)
