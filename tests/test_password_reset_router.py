from datetime import timedelta

from app.models.app_user import AppUser, UserStatus
from app.models.password_reset_otp import PasswordResetOTP
from app.utils.exceptions import EmailDispatchError
from app.utils.otp import utcnow


def _start(client):
    response = client.post("/api/v1/password-reset")
    assert response.status_code == 201
    return response.json()["data"]["flowId"]


def test_full_reset_scenario(client, db, sender, make_user):
    make_user("a@x.com", status=UserStatus.APPROVED, password="OldPass1!")
    flow_id = _start(client)

    response = client.post(f"/api/v1/password-reset/{flow_id}/email", json={"email": "a@x.com"})
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["data"]["step"] == "otp"
    assert body["data"]["notice"]["title"] == "OTP Sent"

    otp = sender.last_otp
    assert len(otp) == 6 and 100000 <= int(otp) <= 999999
    row = db.query(PasswordResetOTP).one()
    assert row.expires_at - row.created_at == timedelta(minutes=10)

    response = client.post(f"/api/v1/password-reset/{flow_id}/otp", json={"otp": otp})
    assert response.status_code == 200
    assert response.json()["data"]["step"] == "password"
    db.expire_all()
    assert db.query(PasswordResetOTP).one().used is True

    response = client.post(
        f"/api/v1/password-reset/{flow_id}/password",
        json={"newPassword": "NewPass1!", "confirmPassword": "NewPass1!"},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["data"]["step"] == "email"
    assert body["data"]["email"] is None
    assert "admin approval" in body["message"]

    db.expire_all()
    user = db.get(AppUser, "a@x.com")
    assert user.password == "NewPass1!"
    assert user.status == UserStatus.PENDING


def test_unknown_email_aborts_at_first_step(client, db, sender):
    flow_id = _start(client)

    response = client.post(f"/api/v1/password-reset/{flow_id}/email", json={"email": "missing@x.com"})

    assert response.status_code == 404
    body = response.json()
    assert body["success"] is False
    assert body["error"]["code"] == "NOT_FOUND"
    assert body["data"]["notice"]["title"] == "User Not Found"
    assert body["data"]["step"] == "email"
    assert db.query(PasswordResetOTP).count() == 0
    assert sender.sent == []


def test_missing_email_field_is_a_local_validation_failure(client):
    flow_id = _start(client)

    response = client.post(f"/api/v1/password-reset/{flow_id}/email", json={})

    assert response.status_code == 400
    assert response.json()["data"]["notice"]["title"] == "Missing Email"


def test_expired_code_is_rejected(client, db, sender, make_user):
    make_user("a@x.com")
    flow_id = _start(client)
    client.post(f"/api/v1/password-reset/{flow_id}/email", json={"email": "a@x.com"})
    row = db.query(PasswordResetOTP).one()
    row.expires_at = utcnow() - timedelta(seconds=1)
    db.commit()

    response = client.post(f"/api/v1/password-reset/{flow_id}/otp", json={"otp": sender.last_otp})

    assert response.status_code == 400
    body = response.json()
    assert body["error"]["code"] == "OTP_INVALID"
    assert body["data"]["step"] == "otp"


def test_email_dispatch_failure(client, sender, make_user):
    make_user("a@x.com")
    sender.error = EmailDispatchError("network unreachable")
    flow_id = _start(client)

    response = client.post(f"/api/v1/password-reset/{flow_id}/email", json={"email": "a@x.com"})

    assert response.status_code == 502
    assert response.json()["error"]["code"] == "EMAIL_DELIVERY_FAILED"
    assert response.json()["data"]["step"] == "email"


def test_out_of_order_submission(client):
    flow_id = _start(client)

    response = client.post(f"/api/v1/password-reset/{flow_id}/otp", json={"otp": "123456"})

    assert response.status_code == 409
    assert response.json()["error"]["code"] == "FLOW_STEP_MISMATCH"


def test_unknown_flow(client):
    response = client.get("/api/v1/password-reset/does-not-exist")

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "FLOW_NOT_FOUND"


def test_get_flow(client, make_user):
    make_user("a@x.com")
    flow_id = _start(client)
    client.post(f"/api/v1/password-reset/{flow_id}/email", json={"email": "a@x.com"})

    response = client.get(f"/api/v1/password-reset/{flow_id}")

    assert response.status_code == 200
    assert response.json()["data"] == {
        "flowId": flow_id, "step": "otp", "email": "a@x.com", "notice": None,
    }


def test_cleanup_requires_admin_key(client):
    response = client.post("/api/v1/password-reset/otps/cleanup")

    assert response.status_code == 403
    assert response.json()["error"]["code"] == "FORBIDDEN"


def test_cleanup_endpoint(client, db, admin_headers):
    now = utcnow()
    db.add_all([
        PasswordResetOTP(email="a@x.com", otp="111111", created_at=now - timedelta(minutes=20),
                         expires_at=now - timedelta(minutes=10), used=False),
        PasswordResetOTP(email="a@x.com", otp="222222", created_at=now,
                         expires_at=now + timedelta(minutes=10), used=False),
    ])
    db.commit()

    response = client.post("/api/v1/password-reset/otps/cleanup", headers=admin_headers)

    assert response.status_code == 200
    assert response.json()["data"] == {"deleted": 1}
    assert [r.otp for r in db.query(PasswordResetOTP).all()] == ["222222"]
