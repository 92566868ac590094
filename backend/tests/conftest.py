from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Dict, Iterator, List, Optional

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from app.auth.schemas import GoogleUser
from app.auth.security import get_password_hash
from app.auth.service import issue_token
from app.core.config import Settings
from app.core.dependencies import get_google_verifier, get_mailer
from app.main import create_app
from app.models import Application, Job, User
from app.models.user import AuthProvider

TEST_PASSWORD = "password123"


class FakeMailer:
    """Records outgoing mail instead of talking to an SMTP server"""

    def __init__(self) -> None:
        self.is_configured = True
        self.sent: List[dict] = []
        self.error: Optional[Exception] = None

    def send(self, to, subject, html, text=None, sender=None, reply_to=None) -> None:
        if self.error is not None:
            raise self.error
        self.sent.append(
            {"to": to, "subject": subject, "html": html, "text": text, "sender": sender, "reply_to": reply_to}
        )


class FakeGoogleVerifier:
    """Maps raw ID token strings to identities; unknown tokens are rejected"""

    def __init__(self) -> None:
        self.identities: Dict[str, GoogleUser] = {}

    def verify(self, token: str) -> Optional[GoogleUser]:
        return self.identities.get(token)


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        ENVIRONMENT="test",
        DATABASE_URL=f"sqlite:///{tmp_path / 'hireorbit.sqlite3'}",
        JWT_SECRET="test-secret-that-is-at-least-32-characters",
        UPLOAD_DIR=str(tmp_path / "uploads"),
        CONTACT_RECEIVER_EMAIL="support@example.com",
        SMTP_FROM="no-reply@example.com",
        GOOGLE_CLIENT_ID="test-client-id",
    )


@pytest.fixture
def mailer() -> FakeMailer:
    return FakeMailer()


@pytest.fixture
def google_verifier() -> FakeGoogleVerifier:
    return FakeGoogleVerifier()


@pytest.fixture
def app(settings: Settings, mailer: FakeMailer, google_verifier: FakeGoogleVerifier) -> FastAPI:
    application = create_app(settings)
    application.dependency_overrides[get_mailer] = lambda: mailer
    application.dependency_overrides[get_google_verifier] = lambda: google_verifier
    return application


@pytest.fixture
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def db(app: FastAPI, client: TestClient) -> Iterator[Session]:
    """Session on the same database as the app; tables exist once the client has started"""
    session = app.state.session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_user(db: Session) -> Callable[..., User]:
    counter = {"n": 0}

    def factory(
        role: str = "candidate",
        email: Optional[str] = None,
        name: Optional[str] = None,
        company_name: Optional[str] = None,
        password: str = TEST_PASSWORD,
    ) -> User:
        counter["n"] += 1
        user = User(
            name=name or f"{role.title()} {counter['n']}",
            email=email or f"{role}{counter['n']}@example.com",
            password_hash=get_password_hash(password),
            provider=AuthProvider.CREDENTIALS.value,
            role=role,
            company_name=company_name,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return factory


@pytest.fixture
def make_job(db: Session) -> Callable[..., Job]:
    counter = {"n": 0}

    def factory(employer: User, **fields) -> Job:
        counter["n"] += 1
        values = {
            "title": f"Backend Engineer {counter['n']}",
            "slug": f"backend-engineer-{counter['n']}",
            "description": "Build and run Python services.",
            "location": "Bengaluru",
            "employment_type": "Full-time",
            "status": "open",
            "published_at": datetime(2024, 1, counter["n"] % 28 + 1, tzinfo=timezone.utc),
        }
        values.update(fields)
        job = Job(employer_id=employer.id, **values)
        db.add(job)
        db.commit()
        db.refresh(job)
        return job

    return factory


@pytest.fixture
def make_application(db: Session) -> Callable[..., Application]:
    def factory(job: Job, candidate: User, **fields) -> Application:
        values = {"status": "applied", "step": "Application received"}
        values.update(fields)
        application = Application(job_id=job.id, candidate_id=candidate.id, **values)
        db.add(application)
        db.commit()
        db.refresh(application)
        return application

    return factory


@pytest.fixture
def auth_headers(settings: Settings) -> Callable[[User], Dict[str, str]]:
    def build(user: User) -> Dict[str, str]:
        token = issue_token(user, AuthProvider(user.provider), settings)
        return {"Authorization": f"Bearer {token}"}

    return build


@pytest.fixture
def candidate(make_user) -> User:
    return make_user("candidate", name="Asha Candidate")


@pytest.fixture
def employer(make_user) -> User:
    return make_user("employer", name="Ravi Employer", company_name="Orbit Labs")
