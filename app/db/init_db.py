import psycopg2
from psycopg2 import sql
from psycopg2.extensions import ISOLATION_LEVEL_AUTOCOMMIT
from sqlalchemy.engine import make_url
from app.core.config import settings
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

def create_database():
    """Create the PostgreSQL database if it doesn't exist. No-op for other backends."""
    url = make_url(settings.DATABASE_URL)
    if not url.drivername.startswith("postgresql"):
        logger.info("Database backend %s needs no bootstrap.", url.drivername)
        return

    target_db = url.database or settings.POSTGRES_DB
    try:
        # Connect to default 'postgres' database to check/create target DB
        con = psycopg2.connect(
            user=url.username or settings.POSTGRES_USER,
            password=url.password or settings.POSTGRES_PASSWORD,
            host=url.host or settings.POSTGRES_SERVER,
            port=url.port or settings.POSTGRES_PORT,
            dbname="postgres"
        )
        con.set_isolation_level(ISOLATION_LEVEL_AUTOCOMMIT)
        cur = con.cursor()

        cur.execute("SELECT 1 FROM pg_catalog.pg_database WHERE datname = %s", (target_db,))
        exists = cur.fetchone()

        if not exists:
            logger.info("Database %s does not exist. Creating...", target_db)
            cur.execute(sql.SQL("CREATE DATABASE {}").format(sql.Identifier(target_db)))
            logger.info("Database %s created successfully.", target_db)
        else:
            logger.info("Database %s already exists.", target_db)

        cur.close()
        con.close()
    except psycopg2.Error as e:
        logger.error("Error creating database: %s", e)
        # Proceeding anyway, maybe it exists or connection params are for the target DB directly

if __name__ == "__main__":
    create_database()
