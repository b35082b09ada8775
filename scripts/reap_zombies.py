#!/usr/bin/env python3
"""
Mark zombie jobs FAILED. Meant to be run periodically (cron or similar).

Usage:
    python scripts/reap_zombies.py --db data/jobs.db --threshold-ms 54000
"""

import argparse
import sys
from datetime import timedelta
from pathlib import Path

from jobspecs.config import get_settings, load_env
from jobspecs.logger import get_logger
from jobspecs.reaper import reap_zombie_jobs


def main():
    load_env()
    settings = get_settings()

    parser = argparse.ArgumentParser(description="Fail jobs that stopped updating while still active")
    parser.add_argument("--db", type=Path, default=settings.db_path,
                        help="Path to SQLite database file")
    parser.add_argument("--threshold-ms", type=int,
                        help="Liveness threshold in milliseconds (default: JOBSPECS_ZOMBIE_THRESHOLD_MS)")
    args = parser.parse_args()

    if not args.db.exists():
        print(f"Database file not found: {args.db}")
        sys.exit(1)

    logger = get_logger(level=settings.log_level)
    max_age = timedelta(milliseconds=args.threshold_ms) if args.threshold_ms is not None else None
    reaped = reap_zombie_jobs(args.db, max_age=max_age)
    print(f"Reaped {len(reaped)} zombie jobs")
    logger.log_metrics_summary()


if __name__ == "__main__":
    main()
