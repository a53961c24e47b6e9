"""
Periodic report regeneration.

Scheduled mode re-captures the histories of every tracked address at a fixed
interval and writes a fresh report. Each run replaces the transaction cache
wholesale through the same all-or-nothing load a `--refresh` run uses; a run
that fails leaves the previous cache and report in place.
"""

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger
from apscheduler.events import EVENT_JOB_ERROR, EVENT_JOB_MISSED
import pytz

from mintprofit.config import Config
from mintprofit.utils import format_duration

# Configure module logger
logger = logging.getLogger(__name__)

REPORT_JOB_ID = "profit_report_refresh"


@dataclass
class RunOutcome:
    """
    Result of one report run.

    Attributes:
        started_at: UTC start time
        duration_seconds: Wall-clock duration of the run
        succeeded: Whether a report was written
        error: Error message of a failed run
    """
    started_at: datetime
    duration_seconds: float
    succeeded: bool
    error: Optional[str] = None


class ReportScheduler:
    """
    Runs a report job every `interval_hours` on an APScheduler background thread.

    Runs never overlap: a run that is due while the previous one is still
    loading histories is skipped.
    """

    def __init__(self, report_job: Callable[[], object]):
        self.report_job = report_job
        self.interval_hours: Optional[int] = None
        self.last_outcome: Optional[RunOutcome] = None
        self._scheduler: Optional[BackgroundScheduler] = None
        self._run_lock = threading.Lock()

    @property
    def is_running(self) -> bool:
        return self._scheduler is not None

    def start(self, interval_hours: Optional[int] = None) -> bool:
        """
        Schedule the report job.

        Args:
            interval_hours: Hours between runs. If None, uses Config.SCAN_INTERVAL_HOURS

        Returns:
            True if the job was scheduled, False if already running or the interval is invalid
        """
        if self.is_running:
            logger.warning("Report scheduler is already running")
            return False

        interval_hours = Config.SCAN_INTERVAL_HOURS if interval_hours is None else interval_hours
        if interval_hours < 1:
            logger.error(f"Invalid report interval: {interval_hours}h, must be at least 1h")
            return False

        scheduler = BackgroundScheduler(timezone=pytz.timezone(Config.REPORT_TIMEZONE))
        scheduler.add_listener(self._on_job_event, EVENT_JOB_ERROR | EVENT_JOB_MISSED)
        scheduler.add_job(
            func=self.run_once,
            trigger=IntervalTrigger(hours=interval_hours),
            id=REPORT_JOB_ID,
            name="Profit report refresh",
            max_instances=1,
            coalesce=True
        )
        scheduler.start()

        self._scheduler = scheduler
        self.interval_hours = interval_hours
        logger.info(f"Report refresh scheduled every {interval_hours}h ({Config.REPORT_TIMEZONE})")
        return True

    def stop(self, wait: bool = True) -> bool:
        """
        Shut the background scheduler down.

        Args:
            wait: Wait for a run in progress to finish

        Returns:
            True if the scheduler was running
        """
        if not self.is_running:
            logger.warning("Report scheduler is not running")
            return False

        self._scheduler.shutdown(wait=wait)
        self._scheduler = None
        logger.info("Report scheduler stopped")
        return True

    def run_once(self) -> bool:
        """
        Run the report job now unless a run is already in progress.

        A failure is logged and recorded in `last_outcome`; it does not stop
        later runs.

        Returns:
            True if a report was produced
        """
        if not self._run_lock.acquire(blocking=False):
            logger.warning("Report run skipped: previous run still loading")
            return False

        started_at = datetime.now(timezone.utc)
        error: Optional[str] = None
        try:
            logger.info("Report run started")
            self.report_job()
        except Exception as e:
            error = str(e)
            logger.error(f"Report run failed, previous report kept: {e}", exc_info=True)
        finally:
            duration = (datetime.now(timezone.utc) - started_at).total_seconds()
            self.last_outcome = RunOutcome(started_at, duration, error is None, error)
            self._run_lock.release()

        if error is None:
            logger.info(f"Report run completed in {format_duration(duration)}")
        return error is None

    def _on_job_event(self, event) -> None:
        if event.code == EVENT_JOB_MISSED:
            logger.warning(f"Report run {event.job_id} missed its scheduled time")
        else:
            logger.error(f"Report run {event.job_id} raised: {event.exception}")

    def next_run_time(self) -> Optional[datetime]:
        if not self.is_running:
            return None
        job = self._scheduler.get_job(REPORT_JOB_ID)
        return job.next_run_time if job else None

    def get_status(self) -> dict:
        """Scheduler state and the outcome of the last run."""
        next_run = self.next_run_time()
        outcome = self.last_outcome
        return {
            "is_running": self.is_running,
            "interval_hours": self.interval_hours if self.is_running else None,
            "next_run_time": next_run.isoformat() if next_run else None,
            "last_run_succeeded": outcome.succeeded if outcome else None,
            "last_run_error": outcome.error if outcome else None,
        }
