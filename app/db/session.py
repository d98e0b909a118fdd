from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, declarative_base
from app.core.config import settings


def configure_sqlite(engine):
    """
    Let SQLAlchemy own SQLite transactions (pysqlite's own handling breaks
    SAVEPOINT) and take the write lock up front, so check-then-insert units
    serialize instead of deadlocking.
    """

    @event.listens_for(engine, "connect")
    def _disable_pysqlite_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    return engine


def build_engine(url: str):
    if url.startswith("sqlite"):
        # FastAPI runs sync endpoints in a threadpool
        return configure_sqlite(create_engine(url, connect_args={"check_same_thread": False, "timeout": 30}))
    # For PostgreSQL, we might need to adjust pool_size and max_overflow in production
    return create_engine(url, pool_pre_ping=True)


engine = build_engine(settings.DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
