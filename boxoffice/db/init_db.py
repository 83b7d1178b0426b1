import psycopg2
from psycopg2.extensions import ISOLATION_LEVEL_AUTOCOMMIT
from sqlalchemy.orm import Session

from boxoffice.core.config import settings
from boxoffice.models.room import Room
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

DEFAULT_ROOMS = [
    {"id": "HALL-1", "name": "Hall 1 (IMAX)", "capacity": 120},
    {"id": "HALL-2", "name": "Hall 2", "capacity": 80},
    {"id": "HALL-3", "name": "Hall 3 (VIP)", "capacity": 40},
]

def create_database():
    """Create database if it doesn't exist."""
    if not settings.DATABASE_URL.startswith("postgresql"):
        logger.info("Non-PostgreSQL database configured, skipping database creation.")
        return
    try:
        # Connect to default 'postgres' database to check/create target DB
        con = psycopg2.connect(
            user=settings.POSTGRES_USER,
            password=settings.POSTGRES_PASSWORD,
            host=settings.POSTGRES_SERVER,
            port=settings.POSTGRES_PORT,
            dbname="postgres"
        )
        con.set_isolation_level(ISOLATION_LEVEL_AUTOCOMMIT)
        cur = con.cursor()

        cur.execute("SELECT 1 FROM pg_catalog.pg_database WHERE datname = %s", (settings.POSTGRES_DB,))
        exists = cur.fetchone()

        if not exists:
            logger.info(f"Database {settings.POSTGRES_DB} does not exist. Creating...")
            cur.execute(f'CREATE DATABASE "{settings.POSTGRES_DB}"')
            logger.info(f"Database {settings.POSTGRES_DB} created successfully.")
        else:
            logger.info(f"Database {settings.POSTGRES_DB} already exists.")

        cur.close()
        con.close()
    except psycopg2.Error as e:
        # Connection params may point straight at an existing target DB
        logger.error(f"Error creating database: {e}")


def seed_rooms(db: Session) -> int:
    """Insert the default rooms when the rooms table is empty. Returns rows added."""
    if db.query(Room).count() > 0:
        return 0
    for data in DEFAULT_ROOMS:
        db.add(Room(**data))
    db.commit()
    logger.info(f"Seeded {len(DEFAULT_ROOMS)} default rooms.")
    return len(DEFAULT_ROOMS)

if __name__ == "__main__":
    create_database()
