from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from featureboard.core.config import settings

Base = declarative_base()

DATABASE_URL = settings.database_url

if DATABASE_URL.startswith("sqlite"):
    # In-memory SQLite must share one connection across threads
    engine_kwargs = {"connect_args": {"check_same_thread": False}}
    if DATABASE_URL in ("sqlite://", "sqlite:///:memory:"):
        engine_kwargs["poolclass"] = StaticPool
    engine = create_engine(DATABASE_URL, **engine_kwargs)
else:
    engine = create_engine(DATABASE_URL, pool_pre_ping=True)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db():
    # Registers every model on Base.metadata before creating tables
    from featureboard.models import comment, email_log, email_template, idea, user, verification, vote  # noqa: F401

    Base.metadata.create_all(bind=engine)
