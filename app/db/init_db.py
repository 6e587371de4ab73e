"""Initialize database tables and tear down the connection pool"""
import logging
from app.db.base import Base
from app.db.session import engine
from app.models import OtpVerification, User, Wallet  # noqa: F401  (register tables)

logger = logging.getLogger(__name__)


def init_db() -> None:
    """Create all database tables"""
    try:
        Base.metadata.create_all(bind=engine)
        logger.info("Database tables created successfully")
    except Exception as e:
        logger.error(f"Error creating database tables: {str(e)}")
        raise


def close_db() -> None:
    """Dispose of the pooled connections at process shutdown"""
    engine.dispose()
    logger.info("Database connection pool disposed")
