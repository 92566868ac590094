"""
Initialize database tables and optionally an admin account

Usage:
    ADMIN_EMAIL=ops@example.com ADMIN_PASSWORD=... python scripts/init_db.py
"""
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy.orm import Session
from app.core.config import get_settings
from app.core.database import build_engine, build_session_factory, init_db
from app.core.logging_config import configure_logging
from app.models.user import AuthProvider, User, UserRole
from app.auth.security import get_password_hash
from app.auth.service import normalize_email
import structlog

logger = structlog.get_logger()


def create_admin_user(db: Session, email: str, password: str, name: str = "Administrator"):
    """Create the admin account unless the email is already taken"""
    email = normalize_email(email)

    existing = db.query(User).filter(User.email == email).first()
    if existing:
        logger.info("admin_user_exists", email=email, role=existing.role)
        return existing

    admin_user = User(
        name=name,
        email=email,
        password_hash=get_password_hash(password),
        provider=AuthProvider.CREDENTIALS.value,
        role=UserRole.ADMIN.value,
    )
    db.add(admin_user)
    db.commit()

    logger.info("admin_user_created", email=email)
    return admin_user


def main():
    """Main initialization function"""
    settings = get_settings()
    configure_logging(settings)
    logger.info("initializing_database")

    engine = build_engine(settings)
    init_db(engine)

    if not (settings.ADMIN_EMAIL and settings.ADMIN_PASSWORD):
        logger.info("admin_user_skipped", reason="ADMIN_EMAIL and ADMIN_PASSWORD not set")
        return

    db: Session = build_session_factory(engine)()
    try:
        create_admin_user(db, settings.ADMIN_EMAIL, settings.ADMIN_PASSWORD, settings.ADMIN_NAME)
        logger.info("database_initialization_complete")
    except Exception as e:
        logger.error("database_initialization_failed", error=str(e))
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    main()
