# tests/test_admin_auth.py
from datetime import datetime, timedelta, timezone

from jose import jwt
from sqlmodel import Session

from conftest import ADMIN_PASSWORD
from jewelry_api.core.config import get_settings
from jewelry_api.core.security import TOKEN_TYPE, verify_password
from jewelry_api.models.admin import Admin
from jewelry_api.services import auth_service

BASE = "/api/admin/auth"


def _login(client, email, password):
    return client.post(f"{BASE}/login", json={"email": email, "password": password})


# -------- Login --------


def test_login_returns_token_and_profile(client, engine, admin):
    resp = _login(client, "admin@example.com", ADMIN_PASSWORD)

    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["token"]
    assert data["expires_in"] == 24 * 60 * 60
    assert data["admin"]["email"] == "admin@example.com"
    assert data["admin"]["role"] == "admin"
    assert "password_hash" not in data["admin"]

    with Session(engine) as s:
        assert s.get(Admin, admin.id).last_login is not None


def test_login_email_is_case_insensitive(client, admin):
    resp = _login(client, "ADMIN@Example.com", ADMIN_PASSWORD)

    assert resp.status_code == 200


def test_login_token_works_on_profile(client, admin):
    token = _login(client, "admin@example.com", ADMIN_PASSWORD).json()["data"]["token"]

    resp = client.get(f"{BASE}/profile", headers={"Authorization": f"Bearer {token}"})

    assert resp.status_code == 200
    assert resp.json()["data"]["id"] == str(admin.id)


def test_unknown_email_and_wrong_password_look_the_same(client, admin, monkeypatch):
    dummy_calls = []
    real_dummy = auth_service.dummy_verify

    def spy():
        dummy_calls.append(True)
        real_dummy()

    monkeypatch.setattr(auth_service, "dummy_verify", spy)

    wrong_password = _login(client, "admin@example.com", "Wrong123!")
    unknown_email = _login(client, "nobody@example.com", ADMIN_PASSWORD)

    assert wrong_password.status_code == unknown_email.status_code == 401
    assert wrong_password.json() == unknown_email.json() == {
        "success": False,
        "error": "Invalid email or password",
        "code": "INVALID_CREDENTIALS",
    }
    # only the unknown-email path needs the dummy verification
    assert dummy_calls == [True]


def test_login_requires_valid_email(client):
    resp = _login(client, "not-an-email", "whatever")

    assert resp.status_code == 400
    assert resp.json()["code"] == "VALIDATION_ERROR"


# -------- Token verification --------


def test_profile_without_token(client):
    resp = client.get(f"{BASE}/profile")

    assert resp.status_code == 401
    assert resp.json()["code"] == "UNAUTHORIZED"


def test_expired_token_rejected(client, admin):
    settings = get_settings()
    past = datetime.now(timezone.utc) - timedelta(hours=2)
    token = jwt.encode(
        {
            "sub": str(admin.id),
            "type": TOKEN_TYPE,
            "iss": settings.JWT_ISSUER,
            "iat": past - timedelta(hours=1),
            "exp": past,
        },
        settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
    )

    resp = client.get(f"{BASE}/profile", headers={"Authorization": f"Bearer {token}"})

    assert resp.status_code == 401
    assert resp.json()["code"] == "EXPIRED_TOKEN"


def test_tampered_token_rejected(client, admin_headers):
    header, payload, _ = admin_headers["Authorization"].split()[1].split(".")
    tampered = f"{header}.{payload}.{'A' * 43}"

    resp = client.get(f"{BASE}/profile", headers={"Authorization": f"Bearer {tampered}"})

    assert resp.status_code == 401
    assert resp.json()["code"] == "INVALID_TOKEN"


def test_token_signed_with_other_secret_rejected(client, admin):
    settings = get_settings()
    token = jwt.encode(
        {
            "sub": str(admin.id),
            "type": TOKEN_TYPE,
            "iss": settings.JWT_ISSUER,
            "exp": datetime.now(timezone.utc) + timedelta(hours=1),
        },
        "another-secret-that-is-also-long-enough-123",
        algorithm="HS256",
    )

    resp = client.get(f"{BASE}/profile", headers={"Authorization": f"Bearer {token}"})

    assert resp.status_code == 401
    assert resp.json()["code"] == "INVALID_TOKEN"


def test_token_of_deleted_admin_rejected(client, engine, admin, admin_headers):
    with Session(engine) as s:
        s.delete(s.get(Admin, admin.id))
        s.commit()

    resp = client.get(f"{BASE}/profile", headers=admin_headers)

    assert resp.status_code == 401
    assert resp.json()["error"] == "Admin account not found"


# -------- Passwords --------


def test_weak_new_password_lists_unmet_rules(client, admin_headers):
    resp = client.put(
        f"{BASE}/password",
        headers=admin_headers,
        json={"current_password": ADMIN_PASSWORD, "new_password": "abcdefgh"},
    )

    assert resp.status_code == 400
    body = resp.json()
    assert body["code"] == "VALIDATION_ERROR"
    assert "Password must contain at least one number" in body["details"]
    assert "Password must contain at least one uppercase letter" in body["details"]
    assert "Password must be at least 8 characters long" not in body["details"]


def test_change_password_checks_current_password(client, admin_headers):
    resp = client.put(
        f"{BASE}/password",
        headers=admin_headers,
        json={"current_password": "Nope123!", "new_password": "Abcdef1!"},
    )

    assert resp.status_code == 401
    assert resp.json()["code"] == "INVALID_CREDENTIALS"


def test_change_password_success(client, engine, admin, admin_headers):
    resp = client.put(
        f"{BASE}/password",
        headers=admin_headers,
        json={"current_password": ADMIN_PASSWORD, "new_password": "Abcdef1!"},
    )

    assert resp.status_code == 200
    assert resp.json()["success"] is True
    with Session(engine) as s:
        assert verify_password("Abcdef1!", s.get(Admin, admin.id).password_hash)
    assert _login(client, "admin@example.com", "Abcdef1!").status_code == 200
    assert _login(client, "admin@example.com", ADMIN_PASSWORD).status_code == 401


def test_validate_password_endpoint(client):
    weak = client.post(f"{BASE}/validate-password", json={"password": "short"}).json()["data"]
    strong = client.post(f"{BASE}/validate-password", json={"password": "Abcdef1!"}).json()["data"]

    assert weak["is_valid"] is False
    assert "Password must be at least 8 characters long" in weak["errors"]
    assert strong == {"is_valid": True, "errors": []}


def test_logout_is_acknowledged(client, admin_headers):
    resp = client.post(f"{BASE}/logout", headers=admin_headers)

    assert resp.status_code == 200
    # stateless tokens: still valid afterwards
    assert client.get(f"{BASE}/profile", headers=admin_headers).status_code == 200


# -------- Admin management --------


NEW_ADMIN = {
    "email": "staff@example.com",
    "password": "Staff123!",
    "name": "Staff Member",
}


def test_regular_admin_cannot_create_admins(client, admin_headers):
    resp = client.post(f"{BASE}/create-admin", headers=admin_headers, json=NEW_ADMIN)

    assert resp.status_code == 403
    assert resp.json()["code"] == "FORBIDDEN"


def test_super_admin_creates_admin_with_default_role(client, super_admin_headers):
    resp = client.post(f"{BASE}/create-admin", headers=super_admin_headers, json=NEW_ADMIN)

    assert resp.status_code == 201
    data = resp.json()["data"]
    assert data["role"] == "admin"
    assert data["email"] == "staff@example.com"
    assert _login(client, "staff@example.com", "Staff123!").status_code == 200


def test_duplicate_admin_email_conflicts(client, super_admin_headers, admin):
    payload = {**NEW_ADMIN, "email": "admin@example.com"}

    resp = client.post(f"{BASE}/create-admin", headers=super_admin_headers, json=payload)

    assert resp.status_code == 409
    assert resp.json()["code"] == "DUPLICATE_RESOURCE"


def test_create_admin_enforces_password_policy(client, super_admin_headers):
    payload = {**NEW_ADMIN, "password": "password"}

    resp = client.post(f"{BASE}/create-admin", headers=super_admin_headers, json=payload)

    assert resp.status_code == 400
    assert "Password must contain at least one number" in resp.json()["details"]


def test_super_admin_updates_admin(client, super_admin_headers, admin):
    resp = client.put(
        f"{BASE}/admin/{admin.id}",
        headers=super_admin_headers,
        json={"name": "Renamed Admin", "role": "super_admin"},
    )

    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["name"] == "Renamed Admin"
    assert data["role"] == "super_admin"


def test_update_admin_email_conflict(client, super_admin_headers, admin, super_admin):
    resp = client.put(
        f"{BASE}/admin/{admin.id}",
        headers=super_admin_headers,
        json={"email": "owner@example.com"},
    )

    assert resp.status_code == 409


def test_update_unknown_admin(client, super_admin_headers):
    resp = client.put(
        f"{BASE}/admin/00000000-0000-0000-0000-000000000000",
        headers=super_admin_headers,
        json={"name": "Ghost Admin"},
    )

    assert resp.status_code == 404


def test_last_super_admin_cannot_demote_themselves(client, engine, super_admin, super_admin_headers):
    resp = client.put(
        f"{BASE}/admin/{super_admin.id}",
        headers=super_admin_headers,
        json={"role": "admin"},
    )

    assert resp.status_code == 409
    assert resp.json()["code"] == "CONFLICT"
    with Session(engine) as s:
        assert s.get(Admin, super_admin.id).role == "super_admin"


def test_super_admin_can_step_down_when_another_remains(
    client, make_admin, super_admin, super_admin_headers
):
    make_admin(email="partner@example.com", role="super_admin", name="Partner")

    resp = client.put(
        f"{BASE}/admin/{super_admin.id}",
        headers=super_admin_headers,
        json={"role": "admin"},
    )

    assert resp.status_code == 200
    assert resp.json()["data"]["role"] == "admin"
