"""
Database schema and connection management.

Uses SQLite with SQLAlchemy for job storage. The job table is what the
filters in specs.py are executed against.
"""

import enum
from datetime import datetime
from pathlib import Path
from typing import Iterable
from sqlalchemy import create_engine, Column, String, DateTime, Enum
from sqlalchemy.orm import declarative_base, sessionmaker

from .tags import encode_tags

Base = declarative_base()


class JobStatus(enum.Enum):
    """Lifecycle states of a submitted job."""

    INIT = "INIT"
    RUNNING = "RUNNING"
    SUCCEEDED = "SUCCEEDED"
    KILLED = "KILLED"
    FAILED = "FAILED"
    INVALID = "INVALID"

    def is_active(self) -> bool:
        return self in (JobStatus.INIT, JobStatus.RUNNING)


class Job(Base):
    """Submitted job model."""

    __tablename__ = "jobs"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    user = Column(String, nullable=False)
    status = Column(Enum(JobStatus), nullable=False, default=JobStatus.INIT)
    status_msg = Column(String, nullable=True)
    # Unset until the job is scheduled
    cluster_name = Column(String, nullable=True)
    cluster_id = Column(String, nullable=True)
    command_name = Column(String, nullable=True)
    command_id = Column(String, nullable=True)
    tags = Column(String, nullable=False, default="")  # sorted, "|" delimited
    created = Column(DateTime, nullable=False, default=datetime.now)
    updated = Column(DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)

    def set_tags(self, tags: Iterable[str]) -> None:
        """Store the encoded form of ``tags`` so it can be LIKE-matched."""
        self.tags = encode_tags(tags)


def init_database(db_path: Path) -> None:
    """
    Initialize database and create tables.

    Args:
        db_path: Path to SQLite database file
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)
    engine = create_engine(f"sqlite:///{db_path}")
    Base.metadata.create_all(engine)


def get_session(db_path: Path):
    """
    Get database session.

    Args:
        db_path: Path to SQLite database file

    Returns:
        SQLAlchemy session
    """
    engine = create_engine(f"sqlite:///{db_path}")
    Session = sessionmaker(bind=engine)
    return Session()
