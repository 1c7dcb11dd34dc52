import logging

from sqlmodel import Session

from app.core.config import settings
from app.db.engine_sync import create_sync_db_and_tables, sync_engine
from app.services.user_service import UserService

logger = logging.getLogger(__name__)


def bootstrap_system() -> None:
    """
    Idempotent Bootstrapping:
    1. Creates the database tables (SQLModel).
    2. When no admin exists and ADMIN_EMAIL / ADMIN_PASSWORD are set,
       creates the first admin. Otherwise waits for POST /api/setup.
    """
    try:
        logger.info("🛠️ [Bootstrap] Initializing database schema...")
        create_sync_db_and_tables()

        with Session(sync_engine) as session:
            service = UserService(session)
            if service.admin_exists():
                logger.info("✅ [Bootstrap] Admin found. Skipping admin creation.")
                return

            if settings.admin_email and settings.admin_password:
                service.create_first_admin(
                    settings.admin_email, settings.admin_password, settings.admin_name
                )
                logger.info(f"🚀 [Bootstrap] Created first admin: {settings.admin_email}")
            else:
                logger.warning(
                    "⚠️ [Bootstrap] No admin and ADMIN_EMAIL/ADMIN_PASSWORD not set. Waiting for /api/setup."
                )

    except Exception as e:
        logger.critical(f"❌ [Bootstrap] Fatal error during initialization: {e}")
        raise e
