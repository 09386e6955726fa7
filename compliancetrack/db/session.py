# compliancetrack/db/session.py
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker

from compliancetrack.core.config import DATABASE_URL

_is_sqlite = DATABASE_URL.startswith("sqlite")

engine = create_engine(
    DATABASE_URL,
    connect_args={"check_same_thread": False} if _is_sqlite else {},
    pool_pre_ping=True,  # safer reconnects
    future=True,
)


if _is_sqlite:

    # Enforce foreign keys in SQLite (cascades on obligation delete rely on it)
    @event.listens_for(engine, "connect")
    def enable_sqlite_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON;")
        cursor.close()


# Session factory
SessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
    future=True,
)
