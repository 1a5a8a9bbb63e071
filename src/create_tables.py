# create_tables.py
import logging

from database import engine, Base
# Import all models so they register with Base
from modules.documents.models import User, Document, Signature, SystemFlag  # noqa: F401

logger = logging.getLogger(__name__)


def create_tables():
    """Create every table in the database"""
    logger.info("Tables to create: %s", list(Base.metadata.tables.keys()))
    Base.metadata.create_all(bind=engine)


if __name__ == "__main__":
    create_tables()
