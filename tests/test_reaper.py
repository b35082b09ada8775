"""Tests for zombie job reaping."""

from datetime import datetime, timedelta

import pytest
from sqlalchemy.exc import OperationalError

from jobspecs import reaper
from jobspecs.database import Job, JobStatus, get_session
from jobspecs.reaper import find_zombie_jobs, reap_zombie_jobs


@pytest.fixture
def live_and_dead(db_path, make_job):
    """One fresh running job, two stale active jobs, one stale finished job."""
    current = datetime.now()
    stale = current - timedelta(minutes=10)
    session = get_session(db_path)
    session.add_all([
        make_job("fresh", status=JobStatus.RUNNING, updated=current),
        make_job("dead-running", status=JobStatus.RUNNING, updated=stale),
        make_job("dead-init", status=JobStatus.INIT, updated=stale),
        make_job("done", status=JobStatus.SUCCEEDED, updated=stale),
    ])
    session.commit()
    session.close()
    return db_path


class TestFindZombieJobs:
    """Test zombie lookup with an explicit reference time."""

    def test_finds_only_stale_active_jobs(self, populated_session, now):
        zombies = find_zombie_jobs(populated_session, timedelta(hours=1), now=now)
        assert sorted(job.id for job in zombies) == ["job-2", "job-5"]

    def test_large_threshold_finds_nothing(self, populated_session, now):
        assert find_zombie_jobs(populated_session, timedelta(days=1), now=now) == []


class TestReapZombieJobs:
    """Test marking zombies failed."""

    def test_reaps_stale_active_jobs(self, live_and_dead):
        reaped = reap_zombie_jobs(live_and_dead, max_age=timedelta(minutes=5))

        assert sorted(reaped) == ["dead-init", "dead-running"]

        session = get_session(live_and_dead)
        statuses = {job.id: job.status for job in session.query(Job).all()}
        assert statuses == {
            "fresh": JobStatus.RUNNING,
            "dead-running": JobStatus.FAILED,
            "dead-init": JobStatus.FAILED,
            "done": JobStatus.SUCCEEDED,
        }
        assert session.get(Job, "dead-init").status_msg.startswith("Job presumed dead")
        session.close()

    def test_second_pass_reaps_nothing(self, live_and_dead):
        reap_zombie_jobs(live_and_dead, max_age=timedelta(minutes=5))
        assert reap_zombie_jobs(live_and_dead, max_age=timedelta(minutes=5)) == []

    def test_job_updated_after_selection_is_spared(self, live_and_dead, monkeypatch):
        """A job that reports in between lookup and update keeps its status."""
        original = reaper.find_zombie_jobs

        def lookup_then_heartbeat(session, max_age, now=None):
            zombies = original(session, max_age, now=now)
            other = get_session(live_and_dead)
            other.get(Job, "dead-init").updated = datetime.now()
            other.commit()
            other.close()
            return zombies

        monkeypatch.setattr(reaper, "find_zombie_jobs", lookup_then_heartbeat)

        reaped = reap_zombie_jobs(live_and_dead, max_age=timedelta(minutes=5))

        assert reaped == ["dead-running"]
        session = get_session(live_and_dead)
        assert session.get(Job, "dead-init").status is JobStatus.INIT
        assert session.get(Job, "dead-running").status is JobStatus.FAILED
        session.close()

    def test_default_threshold_from_environment(self, live_and_dead, monkeypatch):
        monkeypatch.setenv("JOBSPECS_ZOMBIE_THRESHOLD_MS", str(60 * 60 * 1000))
        assert reap_zombie_jobs(live_and_dead) == []

    def test_empty_database(self, db_path):
        assert reap_zombie_jobs(db_path, max_age=timedelta(minutes=5)) == []

    def test_records_metrics(self, live_and_dead, quiet_logger):
        reap_zombie_jobs(live_and_dead, max_age=timedelta(minutes=5))

        metrics = quiet_logger.get_metrics()
        assert metrics["zombie_scans"] == 1
        assert metrics["zombies_reaped"] == 2
        assert metrics["searches"] == 1

    def test_missing_table_propagates(self, tmp_path):
        """Database errors are logged and re-raised, not masked."""
        with pytest.raises(OperationalError):
            reap_zombie_jobs(tmp_path / "missing.db", max_age=timedelta(minutes=5))

        log_files = list((tmp_path / "logs").glob("*.log"))
        assert "Zombie reaping failed" in log_files[0].read_text()
