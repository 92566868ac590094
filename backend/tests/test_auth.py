from __future__ import annotations

import re

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from app.auth.schemas import GoogleUser
from app.auth.security import decode_access_token
from app.core.config import Settings
from app.models import PasswordResetToken, User


def signup_payload(**overrides) -> dict:
    body = {
        "name": "Asha",
        "email": "asha@example.com",
        "password": "password123",
        "confirmPassword": "password123",
        "role": "candidate",
    }
    body.update(overrides)
    return body


def test_signup_returns_user_and_token(client: TestClient, settings: Settings) -> None:
    response = client.post("/api/auth/signup", json=signup_payload(email="  Asha@Example.com "))

    assert response.status_code == 201
    body = response.json()
    assert body["user"]["email"] == "asha@example.com"
    assert body["user"]["role"] == "candidate"
    assert body["user"]["companyName"] is None
    claims = decode_access_token(body["token"], settings)
    assert claims is not None
    assert claims.sub == body["user"]["id"]


def test_signup_keeps_company_name_for_employers_only(client: TestClient) -> None:
    candidate = client.post("/api/auth/signup", json=signup_payload(companyName="Ignored Inc"))
    employer = client.post(
        "/api/auth/signup",
        json=signup_payload(email="hr@example.com", role="employer", companyName="Orbit Labs"),
    )

    assert candidate.json()["user"]["companyName"] is None
    assert employer.json()["user"]["companyName"] == "Orbit Labs"


def test_signup_password_mismatch(client: TestClient) -> None:
    response = client.post("/api/auth/signup", json=signup_payload(confirmPassword="different"))

    assert response.status_code == 400
    assert response.json()["error"]["message"] == "Passwords do not match"


def test_duplicate_email_conflicts_across_roles(client: TestClient) -> None:
    first = client.post("/api/auth/signup", json=signup_payload())
    second = client.post("/api/auth/signup", json=signup_payload(role="employer", email="ASHA@example.com"))

    assert first.status_code == 201
    assert second.status_code == 409
    assert second.json()["error"]["message"] == "User already exists with this email"


def test_signup_rejects_admin_role(client: TestClient) -> None:
    response = client.post("/api/auth/signup", json=signup_payload(role="admin"))

    assert response.status_code == 400
    assert response.json()["error"]["type"] == "ValidationError"


def test_login_issues_token_for_same_identity(client: TestClient, settings: Settings, candidate: User) -> None:
    response = client.post(
        "/api/auth/login",
        json={"email": candidate.email, "password": "password123", "role": "candidate"},
    )

    assert response.status_code == 200
    claims = decode_access_token(response.json()["token"], settings)
    assert claims is not None
    assert claims.sub == candidate.id
    assert claims.role.value == "candidate"


def test_admin_can_log_in(client: TestClient, settings: Settings, make_user) -> None:
    admin = make_user("admin", email="ops@example.com")

    response = client.post(
        "/api/auth/login",
        json={"email": "ops@example.com", "password": "password123", "role": "admin"},
    )

    assert response.status_code == 200
    claims = decode_access_token(response.json()["token"], settings)
    assert claims is not None
    assert claims.sub == admin.id
    assert claims.role.value == "admin"


def test_login_with_unknown_role_is_invalid(client: TestClient, candidate: User) -> None:
    response = client.post(
        "/api/auth/login",
        json={"email": candidate.email, "password": "password123", "role": "superuser"},
    )

    assert response.status_code == 400
    assert response.json()["error"]["details"]["fields"] == ["role"]


def test_login_wrong_password(client: TestClient, candidate: User) -> None:
    response = client.post(
        "/api/auth/login",
        json={"email": candidate.email, "password": "wrong-password", "role": "candidate"},
    )

    assert response.status_code == 401
    assert response.json()["error"]["message"] == "Invalid credentials"


def test_login_with_other_role_is_not_found(client: TestClient, candidate: User) -> None:
    response = client.post(
        "/api/auth/login",
        json={"email": candidate.email, "password": "password123", "role": "employer"},
    )

    assert response.status_code == 404


def test_login_google_account_with_password_is_refused(client: TestClient, db: Session, candidate: User) -> None:
    candidate.provider = "google"
    candidate.google_id = "google-sub-1"
    db.commit()

    response = client.post(
        "/api/auth/login",
        json={"email": candidate.email, "password": "password123", "role": "candidate"},
    )

    assert response.status_code == 400


def test_google_login_creates_then_signs_in(client: TestClient, google_verifier) -> None:
    google_verifier.identities["token-1"] = GoogleUser(sub="g-1", email="Meera@Example.com", name="Meera")

    first = client.post("/api/auth/google-login", json={"role": "candidate", "idToken": "token-1"})
    second = client.post("/api/auth/google-login", json={"role": "candidate", "idToken": "token-1"})

    assert first.status_code == 201
    assert second.status_code == 200
    assert first.json()["user"]["id"] == second.json()["user"]["id"]
    assert first.json()["user"]["email"] == "meera@example.com"


def test_google_login_links_existing_credentials_account(
    client: TestClient, db: Session, google_verifier, candidate: User
) -> None:
    google_verifier.identities["token-2"] = GoogleUser(sub="g-2", email=candidate.email, name="Asha")

    response = client.post("/api/auth/google-login", json={"role": "candidate", "idToken": "token-2"})

    assert response.status_code == 200
    db.expire_all()
    linked = db.query(User).filter(User.id == candidate.id).one()
    assert linked.google_id == "g-2"
    assert linked.provider == "google"


def test_google_login_role_mismatch(client: TestClient, db: Session, google_verifier, candidate: User) -> None:
    google_verifier.identities["token-3"] = GoogleUser(sub="g-3", email=candidate.email)

    response = client.post("/api/auth/google-login", json={"role": "employer", "idToken": "token-3"})

    assert response.status_code == 400
    db.expire_all()
    assert db.query(User).filter(User.id == candidate.id).one().google_id is None


def test_google_login_invalid_token(client: TestClient) -> None:
    response = client.post("/api/auth/google-login", json={"role": "candidate", "idToken": "forged"})

    assert response.status_code == 401
    assert response.json()["error"]["message"] == "Invalid Google token"


def test_forgot_password_requires_email(client: TestClient) -> None:
    response = client.post("/api/auth/forgot-password", json={})

    assert response.status_code == 400
    assert response.json()["error"]["message"] == "Email is required"


def test_forgot_password_unknown_email_answers_the_same(client: TestClient, mailer) -> None:
    response = client.post("/api/auth/forgot-password", json={"email": "nobody@example.com"})

    assert response.status_code == 200
    assert response.json()["message"] == "If an account exists for this email, an OTP has been sent."
    assert mailer.sent == []


def test_password_reset_flow(client: TestClient, db: Session, mailer, candidate: User) -> None:
    response = client.post("/api/auth/forgot-password", json={"email": candidate.email})
    assert response.status_code == 200
    assert len(mailer.sent) == 1
    otp = re.search(r"\b(\d{6})\b", mailer.sent[0]["text"]).group(1)

    wrong = "000000" if otp != "000000" else "111111"
    bad = client.post(
        "/api/auth/reset-password",
        json={"email": candidate.email, "otp": wrong, "newPassword": "new-password-1", "confirmPassword": "new-password-1"},
    )
    assert bad.status_code == 400
    assert bad.json()["error"]["message"] == "Invalid OTP."

    good = client.post(
        "/api/auth/reset-password",
        json={"email": candidate.email, "otp": otp, "newPassword": "new-password-1", "confirmPassword": "new-password-1"},
    )
    assert good.status_code == 200
    assert good.json()["message"] == "Password has been reset successfully."

    login = client.post(
        "/api/auth/login",
        json={"email": candidate.email, "password": "new-password-1", "role": "candidate"},
    )
    assert login.status_code == 200

    reused = client.post(
        "/api/auth/reset-password",
        json={"email": candidate.email, "otp": otp, "newPassword": "new-password-2", "confirmPassword": "new-password-2"},
    )
    assert reused.status_code == 400
    assert reused.json()["error"]["message"] == "Invalid or expired OTP."


def test_forgot_password_survives_mail_failure(client: TestClient, db: Session, mailer, candidate: User) -> None:
    mailer.error = OSError("connection refused")

    response = client.post("/api/auth/forgot-password", json={"email": candidate.email})

    assert response.status_code == 200
    assert db.query(PasswordResetToken).filter(PasswordResetToken.user_id == candidate.id).count() == 1


def test_reset_password_validation_order(client: TestClient, candidate: User) -> None:
    def reset(**body):
        return client.post("/api/auth/reset-password", json=body).json()["error"]["message"]

    assert reset(email=candidate.email) == "Email, OTP, and both password fields are required."
    assert reset(email=candidate.email, otp="123456", newPassword="abcdefgh", confirmPassword="abcdefgx") == (
        "Passwords do not match."
    )
    assert reset(email=candidate.email, otp="123456", newPassword="short", confirmPassword="short") == (
        "Password must be at least 8 characters long."
    )
    assert reset(email="ghost@example.com", otp="123456", newPassword="abcdefgh", confirmPassword="abcdefgh") == (
        "Invalid OTP or email."
    )
    assert reset(email=candidate.email, otp="123456", newPassword="abcdefgh", confirmPassword="abcdefgh") == (
        "Invalid or expired OTP."
    )
