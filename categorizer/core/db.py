"""DB connection and helpers for the Firefly AI Categorizer job store."""

from sqlalchemy import JSON, Column, String, Text, create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

Base = declarative_base()


class JobRecord(Base):
    """A classification job and its payload."""

    __tablename__ = "jobs"
    id = Column(String, primary_key=True)
    status = Column(String, nullable=False)
    created_at = Column(String, nullable=False)
    updated_at = Column(String, nullable=False)
    data = Column(JSON, nullable=False)
    error = Column(Text, nullable=True)


def get_engine(url: str) -> Engine:
    """Create a SQLAlchemy engine for the job store, sharing one connection for in-memory SQLite."""
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(url, **kwargs)
    return create_engine(url)


def init_db(url: str) -> sessionmaker:
    """Create the jobs table if needed and return a session factory bound to it."""
    engine = get_engine(url)
    Base.metadata.create_all(engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)
