"""Create the first admin account from configuration."""

from sqlalchemy.orm import Session

from member_api.auth.password import hash_password
from member_api.config import Settings
from member_api.core import get_logger
from member_api.db import Member, get_session_factory
from member_api.db.repositories import create_member, email_exists

logger = get_logger(__name__)


def ensure_bootstrap_admin(settings: Settings, db: Session | None = None) -> Member | None:
    """
    Create the configured admin unless the email is already registered.

    Does nothing when ``BOOTSTRAP_ADMIN_ENABLED`` is false.

    Returns:
        The created admin, or None if nothing was created.
    """
    if not settings.bootstrap_admin_enabled:
        return None

    email = settings.bootstrap_admin_email.strip().lower()
    if not email or not settings.bootstrap_admin_password:
        raise ValueError("BOOTSTRAP_ADMIN_EMAIL and BOOTSTRAP_ADMIN_PASSWORD are required")

    owns_session = db is None
    if db is None:
        db = get_session_factory()()
    try:
        if email_exists(db, email):
            logger.info("Bootstrap admin already exists", data={"email": email})
            return None

        admin = create_member(
            db,
            name=settings.bootstrap_admin_name,
            email=email,
            password_hash=hash_password(settings.bootstrap_admin_password),
            role="admin",
        )
        logger.info("Bootstrap admin created", data={"member_id": admin.id})
        return admin
    finally:
        if owns_session:
            db.close()
