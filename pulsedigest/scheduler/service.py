from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime
from pathlib import Path
from threading import Lock
from time import perf_counter
from typing import Any, Callable, Dict, Tuple
from uuid import uuid4

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from loguru import logger

from pulsedigest.config import AppConfig, SchedulerJobConfig
from pulsedigest.digest.service import DigestService

GENERATION_JOB_ID = "generate"


@dataclass(slots=True)
class JobMetrics:
    """Holds execution statistics for a scheduler job."""

    job_id: str
    job_name: str
    total_runs: int = 0
    success_count: int = 0
    failure_count: int = 0
    skipped_count: int = 0
    dry_run_count: int = 0
    last_status: str | None = None
    last_error: str | None = None
    last_start_time: datetime | None = None
    last_end_time: datetime | None = None
    last_duration_seconds: float | None = None
    next_run_time: datetime | None = None


class SchedulerMetricsRegistry:
    """Thread-safe metrics collector for scheduler jobs."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._metrics: dict[str, JobMetrics] = {}

    def ensure_job(self, job_id: str, job_name: str) -> JobMetrics:
        with self._lock:
            return self._ensure(job_id, job_name)

    def _ensure(self, job_id: str, job_name: str) -> JobMetrics:
        metrics = self._metrics.get(job_id)
        if metrics is None:
            metrics = JobMetrics(job_id=job_id, job_name=job_name)
            self._metrics[job_id] = metrics
        else:
            metrics.job_name = job_name
        return metrics

    def record_start(self, job_id: str, job_name: str, start_time: datetime) -> None:
        with self._lock:
            metrics = self._ensure(job_id, job_name)
            metrics.last_start_time = start_time
            metrics.last_status = "running"
            metrics.last_error = None

    def record_finish(
        self,
        job_id: str,
        job_name: str,
        *,
        status: str,
        start_time: datetime,
        end_time: datetime,
        duration_seconds: float,
        error: str | None = None,
    ) -> None:
        """Record a completed run; ``status`` is one of success, failure, skipped, dry_run."""

        with self._lock:
            metrics = self._ensure(job_id, job_name)
            metrics.total_runs += 1
            if status == "success":
                metrics.success_count += 1
            elif status == "failure":
                metrics.failure_count += 1
            elif status == "skipped":
                metrics.skipped_count += 1
            elif status == "dry_run":
                metrics.dry_run_count += 1
            metrics.last_status = status
            metrics.last_error = error
            metrics.last_start_time = start_time
            metrics.last_end_time = end_time
            metrics.last_duration_seconds = duration_seconds

    def set_next_run(self, job_id: str, job_name: str, next_run: datetime | None) -> None:
        with self._lock:
            self._ensure(job_id, job_name).next_run_time = next_run

    def snapshot(self) -> dict[str, dict[str, Any]]:
        with self._lock:
            return {job_id: asdict(metrics) for job_id, metrics in self._metrics.items()}

    def export_prometheus(self) -> str:
        with self._lock:
            metrics_values = list(self._metrics.values())

        series: list[tuple[str, str, str, Callable[[JobMetrics], float | None]]] = [
            ("scheduler_job_runs_total", "counter", "Total number of scheduler job executions.", lambda m: m.total_runs),
            ("scheduler_job_success_total", "counter", "Number of successful job executions.", lambda m: m.success_count),
            ("scheduler_job_failure_total", "counter", "Number of failed job executions.", lambda m: m.failure_count),
            (
                "scheduler_job_skipped_total",
                "counter",
                "Number of runs skipped because a generation was already in flight.",
                lambda m: m.skipped_count,
            ),
            ("scheduler_job_dry_run_total", "counter", "Number of dry-run job simulations.", lambda m: m.dry_run_count),
            (
                "scheduler_job_last_duration_seconds",
                "gauge",
                "Duration of the last job execution in seconds.",
                lambda m: m.last_duration_seconds,
            ),
            (
                "scheduler_job_last_end_timestamp_seconds",
                "gauge",
                "End timestamp of the last job execution (epoch seconds).",
                lambda m: m.last_end_time.timestamp() if m.last_end_time else None,
            ),
            (
                "scheduler_job_next_run_timestamp_seconds",
                "gauge",
                "Timestamp of the next scheduled run (epoch seconds).",
                lambda m: m.next_run_time.timestamp() if m.next_run_time else None,
            ),
        ]

        lines: list[str] = []
        for name, kind, help_text, getter in series:
            lines.append(f"# HELP {name} {help_text}")
            lines.append(f"# TYPE {name} {kind}")
            for metrics in metrics_values:
                value = getter(metrics)
                if value is None:
                    continue
                labels = f'job_id="{metrics.job_id}",job_name="{metrics.job_name}"'
                lines.append(f"{name}{{{labels}}} {value}")
        return "\n".join(lines) + "\n"


class SchedulerService:
    """Runs periodic digest generation on a cron schedule.

    The cron trigger computes the next fire time after every run regardless of
    its outcome, so a failed attempt never stops later ones.
    """

    def __init__(
        self,
        config: AppConfig,
        digest_service: DigestService | None = None,
        dry_run: bool = False,
        log_dir: Path | None = Path("logs"),
    ):
        self.config = config
        self.digest_service = digest_service
        self.dry_run = dry_run
        timezone = config.scheduler.timezone if config.scheduler and config.scheduler.timezone else "UTC"
        self.scheduler = BackgroundScheduler(timezone=timezone)
        self._timezone = timezone
        self._jobs: Dict[str, Tuple[Callable[[SchedulerJobConfig], None], SchedulerJobConfig]] = {}
        self._job_runners: dict[str, Callable[[], None]] = {}
        self.metrics = SchedulerMetricsRegistry()
        self._file_sink_id: int | None = None
        if log_dir is not None:
            self._setup_logging_sink(log_dir)

    def _setup_logging_sink(self, log_dir: Path) -> None:
        """Persist scheduler logs to a rotating JSON file sink."""

        try:
            log_dir.mkdir(parents=True, exist_ok=True)
            self._file_sink_id = logger.add(
                log_dir / "scheduler.log",
                rotation="5 MB",
                retention=5,
                enqueue=True,
                serialize=True,
                level="INFO",
            )
        except OSError as exc:  # pragma: no cover - filesystem issues are environment-specific
            logger.warning("Failed to initialise scheduler file log sink: {}", exc)
            self._file_sink_id = None

    def setup_jobs(self) -> None:
        """Registers jobs based on the application configuration."""
        if not self.config.scheduler or not self.config.scheduler.enabled:
            logger.warning("Scheduler is disabled in the configuration. No jobs will be scheduled.")
            return

        self.scheduler.remove_all_jobs()
        self._jobs.clear()
        self._job_runners.clear()

        logger.info("Setting up scheduled jobs...")
        logger.info("Scheduler timezone: {}", self._timezone)
        if self.config.scheduler.generation_job:
            self._register_job(
                job_id=GENERATION_JOB_ID,
                job_config=self.config.scheduler.generation_job,
                func=self._run_generation,
            )

        if self.dry_run:
            logger.info("[Dry Run] Jobs have been validated and registered. Scheduler will not be started.")
            for job in self.scheduler.get_jobs():
                logger.info("[Dry Run] Job '{}' with trigger: {}", job.id, job.trigger)
                now = datetime.now(self.scheduler.timezone)
                self.metrics.record_finish(
                    job.id, job.name or job.id, status="dry_run", start_time=now, end_time=now, duration_seconds=0.0
                )

    def _register_job(self, job_id: str, job_config: SchedulerJobConfig, func: Callable[[SchedulerJobConfig], None]) -> None:
        if not job_config.enabled:
            logger.info("Job '{}' is disabled, skipping.", job_id)
            return

        if job_config.cron is None:
            raise ValueError(f"Job '{job_id}' has no cron schedule")
        logger.info("Registering job '{}' with cron schedule: '{}'", job_id, job_config.cron)
        trigger = CronTrigger.from_crontab(job_config.cron, timezone=self._timezone)
        runner = self._build_job_runner(job_id, job_config, func)
        self.scheduler.add_job(
            runner,
            trigger,
            id=job_id,
            name=job_config.name,
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        self._jobs[job_id] = (func, job_config)
        self._job_runners[job_id] = runner
        self.metrics.ensure_job(job_id, job_config.name)
        self.metrics.set_next_run(job_id, job_config.name, self._next_run_time(job_id))

    def _run_generation(self, job_config: SchedulerJobConfig) -> None:
        """Trigger remote generation and reload the digest."""
        if self.digest_service is None:
            raise RuntimeError("No digest service attached to the scheduler")
        logger.info("Running scheduled digest generation for job '{}'", job_config.name)
        if self.digest_service.generate() is None:
            raise _JobSkipped("generation already in progress or no digest reloaded")

    def start(self) -> None:
        """Starts the scheduler if not in dry run mode."""
        if self.dry_run:
            logger.info("[Dry Run] Scheduler start is skipped.")
            return
        if not self.scheduler.get_jobs():
            logger.warning("No jobs are scheduled. The scheduler will not start.")
            return
        if self.scheduler.running:
            logger.info("Scheduler is already running.")
            return

        logger.info("Starting scheduler...")
        self.scheduler.start()

    def shutdown(self) -> None:
        """Shuts down the scheduler and detaches the file log sink."""
        if self.scheduler.running:
            logger.info("Shutting down scheduler...")
            self.scheduler.shutdown()
            logger.info("Scheduler has been shut down.")
        else:
            logger.info("Scheduler is not running.")

        if self._file_sink_id is not None:
            logger.remove(self._file_sink_id)
            self._file_sink_id = None

    def list_jobs(self) -> list[dict[str, Any]]:
        """Return current scheduled jobs in serialisable form."""
        jobs = []
        for job in self.scheduler.get_jobs():
            next_run = self._job_next_run(job)
            jobs.append(
                {
                    "id": job.id,
                    "name": job.name,
                    "trigger": str(job.trigger),
                    "next_run_time": next_run.isoformat() if next_run else None,
                }
            )
        return jobs

    def trigger_job(self, job_id: str) -> bool:
        """Queue a registered job to run immediately."""
        job_entry = self._jobs.get(job_id)
        if job_entry is None or self.scheduler.get_job(job_id) is None:
            return False

        _, job_config = job_entry
        if self.dry_run:
            logger.info("[Dry Run] Manual trigger for job '{}' skipped.", job_id)
            now = datetime.now(self.scheduler.timezone)
            self.metrics.record_finish(
                job_id, job_config.name, status="dry_run", start_time=now, end_time=now, duration_seconds=0.0
            )
            return True

        logger.info("Manually triggering job '{}'", job_id)
        self.scheduler.add_job(
            self._job_runners[job_id],
            trigger="date",
            run_date=datetime.now(self.scheduler.timezone),
            id=f"{job_id}-manual-{uuid4().hex}",
        )
        if self.scheduler.running:
            self.scheduler.wakeup()
        return True

    def get_metrics_snapshot(self) -> dict[str, dict[str, Any]]:
        return self.metrics.snapshot()

    def export_metrics(self) -> str:
        """Return Prometheus-formatted metrics."""
        return self.metrics.export_prometheus()

    def _build_job_runner(
        self,
        job_id: str,
        job_config: SchedulerJobConfig,
        func: Callable[[SchedulerJobConfig], None],
    ) -> Callable[[], None]:
        def _runner() -> None:
            self._execute_job(job_id, job_config, func)

        return _runner

    def _execute_job(
        self,
        job_id: str,
        job_config: SchedulerJobConfig,
        func: Callable[[SchedulerJobConfig], None],
    ) -> None:
        bound_logger = logger.bind(job_id=job_id, job_name=job_config.name, run_id=uuid4().hex)
        start_time = datetime.now(self.scheduler.timezone)
        self.metrics.record_start(job_id, job_config.name, start_time)
        bound_logger.info("Job execution started", dry_run=self.dry_run, timezone=str(self._timezone))

        if self.dry_run:
            bound_logger.info("Dry-run mode active; skipping execution")
            self.metrics.record_finish(
                job_id, job_config.name, status="dry_run", start_time=start_time, end_time=start_time, duration_seconds=0.0
            )
            return

        timer_start = perf_counter()
        status, error = "success", None
        try:
            func(job_config)
        except _JobSkipped as exc:
            status = "skipped"
            bound_logger.info("Job execution skipped: {}", exc)
        except Exception as exc:
            status, error = "failure", str(exc)
            raise
        finally:
            duration = perf_counter() - timer_start
            self.metrics.record_finish(
                job_id,
                job_config.name,
                status=status,
                start_time=start_time,
                end_time=datetime.now(self.scheduler.timezone),
                duration_seconds=duration,
                error=error,
            )
            self.metrics.set_next_run(job_id, job_config.name, self._next_run_time(job_id))
            if status == "failure":
                bound_logger.error("Job execution failed", duration_seconds=duration, error=error)
            elif status == "success":
                bound_logger.info("Job execution finished", status=status, duration_seconds=duration)

    def _next_run_time(self, job_id: str) -> datetime | None:
        job = self.scheduler.get_job(job_id)
        if job is None:
            return None
        return self._job_next_run(job)

    @staticmethod
    def _job_next_run(job: Any) -> datetime | None:
        try:
            return job.next_run_time
        except AttributeError:
            return None


class _JobSkipped(Exception):
    """Signals a run that did no work without being a failure."""


__all__ = ["GENERATION_JOB_ID", "JobMetrics", "SchedulerMetricsRegistry", "SchedulerService"]
