"""
Database initialization script.

    python -m walletpalz.db.init_db
"""
import logging
from walletpalz.core.config import settings
from walletpalz.core.logging import configure_logging
from walletpalz.db.session import init_db

logger = logging.getLogger(__name__)

if __name__ == "__main__":
    configure_logging()
    logger.info(f"Initializing database at {settings.DATABASE_URL}")
    init_db()
    logger.info("Database initialized successfully")
