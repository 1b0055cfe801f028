"""Wall-clock scheduler driving the batch creator, dispatcher and housekeeping."""

import threading
from collections.abc import Callable
from datetime import datetime
from typing import Any

from django.db import close_old_connections
from django.utils import timezone

import structlog

from email_queue.config import QueueConfig, get_queue_config
from email_queue.constants import (
    CLEANUP_HOUR,
    CLEANUP_MINUTE,
    DAILY_STATS_HOUR,
    DAILY_STATS_MINUTE,
)
from email_queue.enums import WorkerStatus
from email_queue.exceptions import EligibilityReadError, QueueAccessError
from email_queue.schemas import DispatchResult
from email_queue.services.batch_creator import BatchCreator
from email_queue.services.dispatcher import Dispatcher
from email_queue.services.maintenance_service import MaintenanceService
from email_queue.services.worker_registry import WorkerRegistry
from email_queue.timeutils import seconds_until_daily, seconds_until_next_hour

logger = structlog.get_logger(__name__)


class EmailScheduler:
    """Owns one timer thread per trigger.

    Triggers:
    - top of every hour (queue timezone): create the hour's jobs
    - every ``dispatch_interval`` seconds: run a dispatcher pass
    - 00:05 local: roll up yesterday's statistics
    - 02:00 local: retention cleanup
    - every ``heartbeat_interval`` seconds: worker heartbeat

    A dispatcher tick that arrives while a pass is still running is skipped,
    not queued. ``stop()`` lets in-flight work finish.
    """

    def __init__(
        self,
        dispatcher: Dispatcher,
        batch_creator: BatchCreator | None = None,
        maintenance: MaintenanceService | None = None,
        config: QueueConfig | None = None,
        clock: Callable[[], datetime] = timezone.now,
    ) -> None:
        self.config = config or get_queue_config()
        self.dispatcher = dispatcher
        self.registry: WorkerRegistry = dispatcher.registry
        self.batch_creator = batch_creator or BatchCreator(config=self.config, clock=clock)
        self.maintenance = maintenance or MaintenanceService(config=self.config, clock=clock)
        self.clock = clock
        self._stop_event = threading.Event()
        self._dispatch_lock = threading.Lock()
        self._threads: list[threading.Thread] = []

    @property
    def is_running(self) -> bool:
        return any(thread.is_alive() for thread in self._threads)

    @property
    def is_dispatching(self) -> bool:
        return self._dispatch_lock.locked()

    def start(self) -> None:
        """Start all timer threads; a no-op when already running."""
        if self.is_running:
            logger.debug("scheduler_already_running")
            return

        self._stop_event.clear()
        self.registry.heartbeat(WorkerStatus.ACTIVE)

        tz = self.config.tzinfo
        triggers: list[tuple[str, Callable[[], float], Callable[[], Any]]] = [
            (
                "hourly-batch",
                lambda: seconds_until_next_hour(self.clock(), tz),
                self.run_hourly_tick,
            ),
            ("dispatch", lambda: self.config.dispatch_interval, self.run_dispatch_tick),
            (
                "daily-stats",
                lambda: seconds_until_daily(
                    self.clock(), tz, DAILY_STATS_HOUR, DAILY_STATS_MINUTE
                ),
                self.run_daily_stats_tick,
            ),
            (
                "cleanup",
                lambda: seconds_until_daily(self.clock(), tz, CLEANUP_HOUR, CLEANUP_MINUTE),
                self.run_cleanup_tick,
            ),
            (
                "heartbeat",
                lambda: self.config.heartbeat_interval,
                self.run_heartbeat_tick,
            ),
        ]
        self._threads = [
            threading.Thread(
                target=self._run_loop,
                args=(name, next_delay, tick),
                name=f"EmailScheduler-{name}",
                daemon=True,
            )
            for name, next_delay, tick in triggers
        ]
        for thread in self._threads:
            thread.start()

        logger.info(
            "scheduler_started",
            worker_id=self.registry.worker_id,
            timezone=self.config.timezone,
            dispatch_interval=self.config.dispatch_interval,
            dev_mode=self.config.dev_mode,
        )

    def stop(self, timeout: float | None = None) -> None:
        """Cancel future ticks, wait for running ones and mark the worker stopped."""
        self._stop_event.set()
        for thread in self._threads:
            thread.join(timeout=timeout)
        self._threads = []
        self.registry.mark_stopped()
        logger.info("scheduler_stopped", worker_id=self.registry.worker_id)

    def wait(self, timeout: float | None = None) -> bool:
        """Block until ``stop()`` is called or ``timeout`` elapses."""
        return self._stop_event.wait(timeout=timeout)

    def __enter__(self) -> "EmailScheduler":
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()

    def _run_loop(
        self, name: str, next_delay: Callable[[], float], tick: Callable[[], Any]
    ) -> None:
        while not self._stop_event.wait(timeout=next_delay()):
            close_old_connections()
            try:
                tick()
            except Exception:
                logger.exception("scheduler_tick_failed", trigger=name)
            finally:
                close_old_connections()

    def run_hourly_tick(self) -> int:
        try:
            return self.batch_creator.create_hourly_jobs()
        except EligibilityReadError:
            return 0

    def run_dispatch_tick(self) -> DispatchResult | None:
        """Run a dispatcher pass unless one is already in progress."""
        if not self._dispatch_lock.acquire(blocking=False):
            logger.info("dispatch_tick_skipped", reason="previous pass still running")
            return None
        try:
            return self.dispatcher.process_queue()
        except QueueAccessError as e:
            logger.error("dispatch_pass_failed", error=str(e))
            self.registry.heartbeat(WorkerStatus.ERROR, errors=1)
            return None
        finally:
            self._dispatch_lock.release()

    def run_daily_stats_tick(self) -> None:
        self.maintenance.rollup_daily_stats()

    def run_cleanup_tick(self) -> None:
        self.maintenance.cleanup()

    def run_heartbeat_tick(self) -> None:
        status = WorkerStatus.ACTIVE if self.is_dispatching else WorkerStatus.IDLE
        self.registry.heartbeat(status)
