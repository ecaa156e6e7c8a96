"""APScheduler-based interval scheduling for the GitHub sync."""

from __future__ import annotations

import logging
import time

from apscheduler.events import EVENT_JOB_ERROR
from apscheduler.schedulers.blocking import BlockingScheduler

from github_provider.config import ProviderConfig
from github_provider.db import Database
from github_provider.provider import GitHubProvider

logger = logging.getLogger("github_provider.scheduler")

BACKOFF_BASE_S = 30
JOB_ID = "github"


def run_sync(config: ProviderConfig, db: Database, sleep=time.sleep) -> bool:
    """Run one tracked sync, retrying with exponential backoff. Returns success."""
    max_retries = config.scheduler.max_retries
    for attempt in range(max_retries + 1):
        provider = GitHubProvider(config, db)
        try:
            provider.sync_with_tracking()
            return True
        except Exception as exc:
            if attempt < max_retries:
                delay = BACKOFF_BASE_S * (2 ** attempt)
                logger.warning(
                    "Sync failed (attempt %d/%d), retrying in %ds: %s",
                    attempt + 1, max_retries, delay, exc,
                )
                sleep(delay)
            else:
                logger.error("Sync failed after %d retries: %s", max_retries, exc)
    return False


def _on_job_error(event) -> None:
    logger.error("Job %s raised an exception: %s", event.job_id, event.exception)


def build_scheduler(config: ProviderConfig, db: Database) -> BlockingScheduler:
    scheduler = BlockingScheduler()
    scheduler.add_listener(_on_job_error, EVENT_JOB_ERROR)
    sched = config.scheduler
    scheduler.add_job(
        run_sync,
        "interval",
        minutes=sched.sync_interval_min,
        args=[config, db],
        id=JOB_ID,
        max_instances=1,
        misfire_grace_time=sched.misfire_grace_time,
    )
    return scheduler


def start_scheduler(config: ProviderConfig, db: Database) -> None:
    """Block running the sync every GITHUB_SYNC_INTERVAL_MIN minutes."""
    scheduler = build_scheduler(config, db)
    logger.info(
        "Starting scheduler with jobs: %s", [j.id for j in scheduler.get_jobs()]
    )
    scheduler.start()
