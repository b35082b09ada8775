"""
Pytest configuration and shared fixtures.
"""

import pytest
from datetime import datetime, timedelta

from jobspecs.database import Job, JobStatus, init_database, get_session
from jobspecs.logger import get_logger, reset_logger


@pytest.fixture(autouse=True)
def quiet_logger(tmp_path):
    """Route the global logger to a temp dir for every test."""
    reset_logger()
    logger = get_logger(log_dir=tmp_path / "logs", enable_console=False)
    yield logger
    reset_logger()


@pytest.fixture
def db_path(tmp_path):
    """Create an empty job database and return its path."""
    path = tmp_path / "jobs.db"
    init_database(path)
    return path


@pytest.fixture
def db_session(db_path):
    """Session on the temporary job database."""
    session = get_session(db_path)
    yield session
    session.close()


@pytest.fixture
def now() -> datetime:
    return datetime(2016, 3, 1, 12, 0, 0)


@pytest.fixture
def make_job(now):
    """Factory for Job rows with sensible defaults."""

    def _make(job_id, tags=(), updated=None, **fields):
        defaults = {
            "name": "jobName",
            "user": "tgianos",
            "status": JobStatus.RUNNING,
            "cluster_name": "hprod2",
            "cluster_id": "prod",
            "command_name": "pig",
            "command_id": "pig14",
            "created": now - timedelta(hours=1),
            "updated": updated or now,
        }
        defaults.update(fields)
        job = Job(id=job_id, **defaults)
        job.set_tags(tags)
        return job

    return _make


@pytest.fixture
def populated_session(db_session, make_job, now):
    """Session holding a small, varied set of jobs."""
    stale = now - timedelta(hours=2)
    db_session.add_all([
        make_job("job-1", tags={"pig", "prod"}, name="nightly etl"),
        make_job("job-2", tags={"hive"}, user="bob", status=JobStatus.INIT, updated=stale),
        make_job("job-3", tags={"pig"}, status=JobStatus.SUCCEEDED, updated=stale),
        make_job("job-4", tags={"", "pig"}, status=JobStatus.FAILED,
                 cluster_name=None, cluster_id=None, command_name=None, command_id=None),
        make_job("job-5", tags=set(), user="bob", status=JobStatus.RUNNING, updated=stale),
    ])
    db_session.commit()
    return db_session
