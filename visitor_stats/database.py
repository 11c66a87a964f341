# SQLAlchemy database setup.
#
# - Local development: SQLite file (visitor_stats.db) when DATABASE_URL is unset.
# - Production: whatever DATABASE_URL points at (PostgreSQL is the tested target).
#
# The counters rely on INSERT ... ON CONFLICT, so only the sqlite and
# postgresql dialects are supported.

import os
import logging
from pathlib import Path
from dotenv import load_dotenv
from sqlalchemy import create_engine, inspect
from sqlalchemy.orm import sessionmaker, declarative_base, Session

logger = logging.getLogger(__name__)

backend_dir = Path(__file__).parent.parent
env_path = backend_dir / ".env"
load_dotenv(dotenv_path=env_path)

env_database_url = os.getenv("DATABASE_URL", "").strip()

IS_POSTGRES = bool(env_database_url) and not env_database_url.startswith("sqlite")

if env_database_url:
    DATABASE_URL = env_database_url
    print(f"[INFO] Using configured database ({'PostgreSQL' if IS_POSTGRES else 'SQLite'})")
else:
    DATABASE_URL = "sqlite:///./visitor_stats.db"
    print("[INFO] Using local SQLite database (visitor_stats.db)")

connect_args = {"check_same_thread": False, "timeout": 30} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(
    DATABASE_URL,
    connect_args=connect_args,
)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def bootstrap_database(bind=None):
    """
    Creates missing tables and the singleton global_stats row.

    Safe to run on every startup: existing tables and rows are left alone.
    """
    # Models must be imported so they register on Base.metadata
    from . import models  # noqa: F401
    from .services.stats_store import ensure_global_stats

    bind = bind or engine
    expected_tables = list(Base.metadata.tables.keys())
    logger.info(f"Expected tables: {', '.join(expected_tables)}")

    Base.metadata.create_all(bind=bind)

    with Session(bind=bind) as db:
        ensure_global_stats(db)
        db.commit()

    existing_tables = inspect(bind).get_table_names()
    missing_tables = [t for t in expected_tables if t not in existing_tables]
    if missing_tables:
        logger.warning(f"Missing tables after bootstrap: {', '.join(missing_tables)}")
    else:
        logger.info("All tables created/verified")


def get_db():
  """
  FastAPI dependency that yields a database session per request.
  """
  db = SessionLocal()
  try:
      yield db
  finally:
      db.close()
