"""
Create the ChefOS database schema.
Run once on deployment or development setup.
"""
from db.models import Base
from db.session import engine
from logging_config import get_logger, setup_logging

logger = get_logger(__name__)


def init_db() -> None:
    """Create all tables defined in models."""
    logger.info("Initializing database schema...")
    Base.metadata.create_all(bind=engine)
    logger.info("Database schema initialized")


if __name__ == "__main__":
    setup_logging()
    init_db()
