import os
import sqlite3
from pathlib import Path
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine

database_url = os.getenv("INKWELL_DB_URL") or "sqlite:///.data/inkwell.db"

# Ensure the .data directory exists for the default SQLite database
if database_url.startswith("sqlite:///.data/"):
    Path(".data").mkdir(exist_ok=True)


@event.listens_for(Engine, "connect")
def enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    """SQLite ignores foreign keys (and so ON DELETE CASCADE) unless asked per connection"""
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


# Configure engine with connection pooling
engine = create_engine(
    database_url,
    echo=False,
    pool_size=10,
    max_overflow=20,
    pool_pre_ping=True,
    pool_recycle=3600,
)

# Create all tables on import
from inkwell.core.db.tables.base import Base
from inkwell.core.db.tables.user import User
from inkwell.core.db.tables.sessionkey import SessionKey
from inkwell.core.db.tables.post import Post
from inkwell.core.db.tables.comment import Comment
from inkwell.core.db.tables.moderation_log import ModerationLog

Base.metadata.create_all(engine)
