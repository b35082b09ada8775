"""
Reaper for zombie jobs.

A zombie is a job still marked RUNNING or INIT whose last update is older
than the configured threshold, usually because the process running it died
without recording a final status. The reaper marks such jobs FAILED.
"""

from datetime import datetime, timedelta
from pathlib import Path
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .config import get_settings
from .database import Job, JobStatus, get_session
from .logger import get_logger
from .query import search_jobs, to_clause
from .specs import find_zombies, zombie_cutoff

ZOMBIE_STATUS_MSG = "Job presumed dead: no update within {threshold}"


def find_zombie_jobs(
    session: Session,
    max_age: timedelta,
    now: Optional[datetime] = None,
) -> List[Job]:
    """
    Return jobs that look abandoned.

    Args:
        session: Open SQLAlchemy session
        max_age: How long an active job may go without an update
        now: Reference time (default: datetime.now())
    """
    if now is None:
        now = datetime.now()
    spec = find_zombies(now, zombie_cutoff(now, max_age))
    return search_jobs(session, spec)


def reap_zombie_jobs(db_path: Path, max_age: Optional[timedelta] = None) -> List[str]:
    """
    Mark every zombie job FAILED.

    Candidates are selected first, then failed with a single UPDATE that
    re-applies the zombie filter, so a job that reported in after the
    selection keeps its status.

    Args:
        db_path: Path to SQLite database file
        max_age: Liveness threshold (default: JOBSPECS_ZOMBIE_THRESHOLD_MS)

    Returns:
        Ids of the jobs that were reaped
    """
    logger = get_logger()
    if max_age is None:
        max_age = get_settings().zombie_threshold
    now = datetime.now()
    spec = find_zombies(now, zombie_cutoff(now, max_age))

    session = get_session(db_path)
    try:
        candidates = []
        for job in find_zombie_jobs(session, max_age, now=now):
            logger.debug(
                "Zombie candidate",
                job_id=job.id,
                status=job.status.value,
                updated=job.updated.isoformat(),
            )
            candidates.append(job.id)

        reaped: List[str] = []
        if candidates:
            (
                session.query(Job)
                .filter(Job.id.in_(candidates), to_clause(spec))
                .update(
                    {
                        Job.status: JobStatus.FAILED,
                        Job.status_msg: ZOMBIE_STATUS_MSG.format(threshold=max_age),
                    },
                    synchronize_session=False,
                )
            )
            # Candidates were all active, so FAILED here means this update set it
            reaped = sorted(
                job_id
                for (job_id,) in session.query(Job.id).filter(
                    Job.id.in_(candidates), Job.status == JobStatus.FAILED
                )
            )
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Zombie reaping failed: {e}", db_path=str(db_path))
        raise
    finally:
        session.close()

    skipped = sorted(set(candidates) - set(reaped))
    if skipped:
        logger.info("Jobs reported in before reaping, left alone", job_ids=skipped)

    logger.record_zombie_scan(len(reaped))
    logger.info(
        f"Reaping complete: {len(reaped)} zombie jobs failed",
        threshold_seconds=max_age.total_seconds(),
        job_ids=reaped,
    )
    return reaped
