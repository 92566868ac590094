from __future__ import annotations

from datetime import timedelta

from fastapi import FastAPI
from fastapi.testclient import TestClient
from jose import jwt

from app.core.config import Settings
from app.core.timeutils import utcnow
from app import main as main_module
from app.main import create_app


def test_health(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "service": "HireOrbit", "version": "1.0.0"}


def test_correlation_id_is_echoed(client: TestClient) -> None:
    response = client.get("/health", headers={"X-Correlation-ID": "abc-123"})

    assert response.headers["X-Correlation-ID"] == "abc-123"
    assert "X-Process-Time" in response.headers


def test_missing_token_uses_error_envelope(client: TestClient) -> None:
    response = client.get("/api/profile")

    assert response.status_code == 401
    assert response.json() == {"error": {"message": "Unauthorized", "details": {}, "type": "AuthenticationError"}}


def test_tampered_token_is_unauthorized(client: TestClient, auth_headers, candidate) -> None:
    token = auth_headers(candidate)["Authorization"].split(" ", 1)[1]
    header, payload, signature = token.split(".")
    forged = ".".join([header, payload[:-2] + ("AA" if payload[-2:] != "AA" else "BB"), signature])

    response = client.get("/api/profile", headers={"Authorization": f"Bearer {forged}"})

    assert response.status_code == 401


def test_malformed_body_reports_fields(client: TestClient) -> None:
    response = client.post("/api/auth/login", json={"email": "asha@example.com"})

    assert response.status_code == 400
    error = response.json()["error"]
    assert error["message"] == "Validation failed"
    assert set(error["details"]["fields"]) == {"password", "role"}


def _app_with_failing_route(settings: Settings) -> FastAPI:
    application = create_app(settings)

    @application.get("/api/broken")
    def broken() -> dict:
        raise RuntimeError("database exploded")

    return application


def test_unhandled_error_is_generic_500(settings: Settings) -> None:
    with TestClient(_app_with_failing_route(settings)) as client:
        response = client.get("/api/broken")

    assert response.status_code == 500
    assert response.json() == {
        "error": {"message": "Internal server error", "details": {}, "type": "InternalServerError"}
    }


def test_unhandled_error_details_only_in_development(settings: Settings) -> None:
    development = settings.model_copy(update={"ENVIRONMENT": "development"})

    with TestClient(_app_with_failing_route(development)) as client:
        response = client.get("/api/broken")

    assert response.status_code == 500
    assert response.json()["error"]["details"] == {"error": "database exploded"}


def test_expired_token_is_unauthorized_on_protected_routes(client: TestClient, settings: Settings, candidate) -> None:
    payload = {
        "sub": candidate.id,
        "email": candidate.email,
        "role": "candidate",
        "provider": "credentials",
        "exp": utcnow() - timedelta(minutes=5),
    }
    token = jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)
    headers = {"Authorization": f"Bearer {token}"}

    for path in ("/api/profile", "/api/saved-jobs", "/api/applications/candidate", "/api/dashboard/candidate"):
        response = client.get(path, headers=headers)
        assert response.status_code == 401
        assert response.json() == {"error": {"message": "Unauthorized", "details": {}, "type": "AuthenticationError"}}


def test_importing_main_builds_no_app() -> None:
    assert not hasattr(main_module, "app")
    assert callable(main_module.create_app)
