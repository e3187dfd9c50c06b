"""
Tests for TOTP two-factor authentication.
"""

from datetime import timedelta

import pyotp

from rest_api.models import utcnow
from shared.security import totp


def _enroll(client, headers) -> tuple[str, list[str]]:
    setup = client.post("/api/auth/2fa/setup", headers=headers)
    assert setup.status_code == 200
    secret = setup.json()["data"]["secret"]
    verify = client.post(
        "/api/auth/2fa/verify",
        json={"token": pyotp.TOTP(secret).now()},
        headers=headers,
    )
    assert verify.status_code == 200
    return secret, verify.json()["data"]["backupCodes"]


class TestSecretStorage:
    def test_secret_round_trips_through_encryption(self):
        secret = totp.generate_secret()
        stored = totp.encrypt_secret(secret)
        assert stored != secret
        assert totp.decrypt_secret(stored) == secret

    def test_backup_code_hash_ignores_dashes_and_case(self):
        assert totp.hash_backup_code("abcd-1234") == totp.hash_backup_code("ABCD1234")

    def test_rejects_malformed_tokens(self):
        secret = totp.generate_secret()
        assert totp.verify_token(secret, "12ab56") is False
        assert totp.verify_token(secret, None) is False


class TestTwoFactorEnrollment:
    def test_status_disabled_by_default(self, client, client_headers):
        response = client.get("/api/auth/2fa/status", headers=client_headers)
        assert response.json()["data"] == {"enabled": False, "backupCodesRemaining": 0}

    def test_setup_returns_qr_code(self, client, client_headers):
        response = client.post("/api/auth/2fa/setup", headers=client_headers)
        data = response.json()["data"]
        assert data["otpauthUrl"].startswith("otpauth://totp/")
        assert data["qrCode"].startswith("data:image/png;base64,")

    def test_verify_enables_and_returns_backup_codes(self, client, client_headers):
        _, codes = _enroll(client, client_headers)
        assert len(codes) == 10
        status = client.get("/api/auth/2fa/status", headers=client_headers).json()["data"]
        assert status == {"enabled": True, "backupCodesRemaining": 10}

    def test_verify_rejects_wrong_token(self, client, client_headers):
        client.post("/api/auth/2fa/setup", headers=client_headers)
        response = client.post(
            "/api/auth/2fa/verify", json={"token": "12ab56"}, headers=client_headers
        )
        assert response.status_code == 400

    def test_setup_twice_when_enabled_fails(self, client, client_headers):
        _enroll(client, client_headers)
        response = client.post("/api/auth/2fa/setup", headers=client_headers)
        assert response.status_code == 400

    def test_disable_with_backup_code(self, client, client_headers):
        _, codes = _enroll(client, client_headers)
        response = client.post(
            "/api/auth/2fa/disable", json={"backupCode": codes[0]}, headers=client_headers
        )
        assert response.status_code == 200
        status = client.get("/api/auth/2fa/status", headers=client_headers).json()["data"]
        assert status["enabled"] is False

    def test_disable_requires_a_code(self, client, client_headers):
        _enroll(client, client_headers)
        response = client.post("/api/auth/2fa/disable", json={}, headers=client_headers)
        assert response.status_code == 400


class TestTwoFactorLogin:
    def test_login_requires_second_step(self, client, client_user, client_headers):
        secret, _ = _enroll(client, client_headers)

        response = client.post(
            "/api/auth/client/login",
            json={"email": "ana@correo.com", "password": "secreto123"},
        )
        assert response.status_code == 200
        data = response.json()["data"]
        assert data == {"requires2FA": True, "tempUserId": client_user.id}
        assert "authToken" not in response.cookies

        response = client.post(
            "/api/auth/2fa/validate",
            json={"tempUserId": client_user.id, "token": pyotp.TOTP(secret).now()},
        )
        assert response.status_code == 200
        assert "authToken" in response.cookies

    def test_backup_code_is_single_use(self, client, client_user, client_headers):
        _, codes = _enroll(client, client_headers)
        login = {"email": "ana@correo.com", "password": "secreto123"}

        client.post("/api/auth/client/login", json=login)
        first = client.post(
            "/api/auth/2fa/validate",
            json={"tempUserId": client_user.id, "backupCode": codes[0]},
        )
        assert first.status_code == 200

        client.cookies.clear()
        client.post("/api/auth/client/login", json=login)
        second = client.post(
            "/api/auth/2fa/validate",
            json={"tempUserId": client_user.id, "backupCode": codes[0]},
        )
        assert second.status_code == 400

    def test_validate_without_password_step(self, client, client_user, client_headers):
        secret, _ = _enroll(client, client_headers)
        response = client.post(
            "/api/auth/2fa/validate",
            json={"tempUserId": client_user.id, "token": pyotp.TOTP(secret).now()},
        )
        assert response.status_code == 400

    def test_validate_after_login_window_expires(self, client, db_session, client_user, client_headers):
        secret, _ = _enroll(client, client_headers)
        client.post(
            "/api/auth/client/login",
            json={"email": "ana@correo.com", "password": "secreto123"},
        )
        db_session.refresh(client_user)
        assert client_user.two_factor_pending_until is not None

        client_user.two_factor_pending_until = utcnow() - timedelta(seconds=1)
        db_session.commit()

        response = client.post(
            "/api/auth/2fa/validate",
            json={"tempUserId": client_user.id, "token": pyotp.TOTP(secret).now()},
        )
        assert response.status_code == 400
        assert response.json()["message"] == "Sesión inválida."
        assert "authToken" not in response.cookies

    def test_account_deactivated_between_steps(self, client, db_session, client_user, client_headers):
        secret, _ = _enroll(client, client_headers)
        client.post(
            "/api/auth/client/login",
            json={"email": "ana@correo.com", "password": "secreto123"},
        )
        client_user.is_active = False
        db_session.commit()

        response = client.post(
            "/api/auth/2fa/validate",
            json={"tempUserId": client_user.id, "token": pyotp.TOTP(secret).now()},
        )
        assert response.status_code == 403
        assert response.json()["message"] == "La cuenta está inactiva. Contacta a soporte"
        assert "authToken" not in response.cookies

        db_session.refresh(client_user)
        assert client_user.two_factor_pending_until is None
