from __future__ import annotations

from datetime import timedelta

from jose import jwt

from app.auth.schemas import TokenPayload
from app.auth.security import (
    create_access_token,
    decode_access_token,
    get_password_hash,
    verify_password,
)
from app.core.config import Settings
from app.core.timeutils import parse_iso, to_iso, utcnow
from app.models.user import AuthProvider, UserRole


def _claims() -> TokenPayload:
    return TokenPayload(
        sub="user-1",
        email="asha@example.com",
        role=UserRole.CANDIDATE,
        provider=AuthProvider.CREDENTIALS,
    )


def test_password_hash_round_trip() -> None:
    hashed = get_password_hash("password123")

    assert hashed != "password123"
    assert verify_password("password123", hashed)
    assert not verify_password("password124", hashed)


def test_token_carries_claims(settings: Settings) -> None:
    token = create_access_token(_claims(), settings)

    claims = decode_access_token(token, settings)

    assert claims is not None
    assert claims.sub == "user-1"
    assert claims.role == UserRole.CANDIDATE
    assert claims.provider == AuthProvider.CREDENTIALS


def test_expired_token_is_rejected(settings: Settings) -> None:
    payload = _claims().model_dump(mode="json")
    payload["exp"] = utcnow() - timedelta(minutes=1)
    token = jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)

    assert decode_access_token(token, settings) is None


def test_token_signed_with_other_secret_is_rejected(settings: Settings) -> None:
    other = settings.model_copy(update={"JWT_SECRET": "another-secret-that-is-32-characters-long"})
    token = create_access_token(_claims(), other)

    assert decode_access_token(token, settings) is None


def test_token_with_unknown_role_is_rejected(settings: Settings) -> None:
    payload = _claims().model_dump(mode="json")
    payload["role"] = "superuser"
    token = jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)

    assert decode_access_token(token, settings) is None


def test_garbage_token_is_rejected(settings: Settings) -> None:
    assert decode_access_token("not-a-jwt", settings) is None


def test_iso_helpers_use_utc_with_z_suffix() -> None:
    parsed = parse_iso("2030-01-02T03:04:05Z")

    assert to_iso(parsed) == "2030-01-02T03:04:05.000Z"
    assert to_iso(None) == "1970-01-01T00:00:00.000Z"
    assert to_iso(None, default=None) is None
