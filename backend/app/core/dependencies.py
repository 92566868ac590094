"""
Request-scoped accessors for the collaborators built by the application factory
"""
from fastapi import Request

from app.core.config import Settings
from app.core.mailer import Mailer
from app.core.storage import ResumeStorage


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_mailer(request: Request) -> Mailer:
    return request.app.state.mailer


def get_storage(request: Request) -> ResumeStorage:
    return request.app.state.storage


def get_google_verifier(request: Request):
    return request.app.state.google_verifier
