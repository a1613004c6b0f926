"""
Change-gated report publishing.

The dispatcher queues a snapshot of the tracked subjects whenever they change.
Background worker threads format each snapshot into a report and hand it to a
transport, so the detection loop never formats or waits on the network. The
queue is bounded; when it is full the oldest pending report is dropped in
favour of the newest one.
"""

from __future__ import annotations

import logging
import queue
import threading
import time
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

from models.config import PublishConfig
from models.subject import TrackedSubject, TrackingResult
from .report import get_formatter
from .transport import Transport


@dataclass
class DispatchStats:
    """Counters for reports handled by the dispatcher."""
    submitted: int = 0
    delivered: int = 0
    failed: int = 0
    dropped: int = 0


class PublishDispatcher:
    """
    Publishes a report whenever the tracked subject set changes.

    - changed with subjects: queue the subjects; a worker formats and sends the report
    - changed without subjects: log a notice, nothing is sent
    - unchanged: nothing

    Delivery failures are logged and counted, never retried and never raised
    to the caller.

    Example:
        dispatcher = PublishDispatcher(transport, topic="presence-monitor/subjects")
        dispatcher.start()
        dispatcher.dispatch(tracker.update(detections))
    """

    def __init__(
        self,
        transport: Transport,
        topic: str,
        report_format: str = "detailed",
        max_pending: int = 8,
        workers: int = 1,
    ):
        if max_pending < 1:
            raise ValueError("max_pending must be at least 1")
        if workers < 1:
            raise ValueError("workers must be at least 1")

        self.transport = transport
        self.topic = topic
        self.report_format = report_format
        self._formatter = get_formatter(report_format)
        self._worker_count = workers

        self._queue: "queue.Queue[Tuple[TrackedSubject, ...]]" = queue.Queue(maxsize=max_pending)
        self._stop_event = threading.Event()
        self._threads: List[threading.Thread] = []

        # Guards stats, pending count and last report
        self._cond = threading.Condition()
        self._pending = 0
        self._stats = DispatchStats()
        self._last_report: Optional[str] = None
        self._last_report_time: Optional[float] = None

    @classmethod
    def from_config(cls, transport: Transport, config: PublishConfig) -> "PublishDispatcher":
        return cls(
            transport,
            topic=config.topic,
            report_format=config.report_format,
            max_pending=config.max_pending,
            workers=config.workers,
        )

    @property
    def is_running(self) -> bool:
        return any(t.is_alive() for t in self._threads)

    def start(self) -> None:
        """Start the worker threads."""
        if self.is_running:
            return
        self._stop_event.clear()
        self._threads = [
            threading.Thread(target=self._worker, name=f"publish-worker-{i}", daemon=True)
            for i in range(self._worker_count)
        ]
        for t in self._threads:
            t.start()
        logging.info(f"Publish dispatcher started: topic={self.topic}, workers={self._worker_count}")

    def stop(self, timeout: float = 5.0) -> None:
        """Stop the workers. Reports still queued are counted as dropped."""
        self._stop_event.set()
        for t in self._threads:
            t.join(timeout=timeout)
        self._threads = []

        abandoned = 0
        while True:
            try:
                self._queue.get_nowait()
            except queue.Empty:
                break
            with self._cond:
                self._stats.dropped += 1
            self._finish_one()
            abandoned += 1
        if abandoned:
            logging.warning(f"Publish dispatcher stopped with {abandoned} undelivered report(s)")
        logging.info("Publish dispatcher stopped")

    def dispatch(self, result: TrackingResult) -> bool:
        """
        Act on one tracking result.

        Returns:
            True when a report was queued for the result's subjects.
        """
        if not result.changed:
            return False
        if result.is_empty:
            logging.info("No subjects detected")
            return False

        self.submit(result.subjects)
        return True

    def submit(self, subjects: Sequence[TrackedSubject]) -> None:
        """
        Queue a snapshot of subjects without blocking; drops the oldest one if full.

        Formatting happens on the worker that publishes the report.
        """
        snapshot = tuple(subjects)
        with self._cond:
            self._pending += 1
            self._stats.submitted += 1

        while True:
            try:
                self._queue.put_nowait(snapshot)
                return
            except queue.Full:
                try:
                    self._queue.get_nowait()
                except queue.Empty:
                    continue
                with self._cond:
                    self._stats.dropped += 1
                logging.warning("Publish queue full, dropped oldest pending report")
                self._finish_one()

    def _worker(self) -> None:
        while not self._stop_event.is_set():
            try:
                subjects = self._queue.get(timeout=0.1)
            except queue.Empty:
                continue

            try:
                payload = self._formatter(subjects)
                with self._cond:
                    self._last_report = payload
                    self._last_report_time = time.time()
                delivered = self.transport.publish(self.topic, payload)
            except Exception as e:
                logging.error(f"Report formatting or publish raised: {e}")
                delivered = False

            with self._cond:
                if delivered:
                    self._stats.delivered += 1
                else:
                    self._stats.failed += 1
            if not delivered:
                logging.warning(f"Report delivery to {self.topic} failed, dropping it")
            self._finish_one()

    def _finish_one(self) -> None:
        with self._cond:
            self._pending -= 1
            if self._pending == 0:
                self._cond.notify_all()

    def wait_idle(self, timeout: Optional[float] = None) -> bool:
        """Block until every submitted report was delivered, failed or dropped."""
        with self._cond:
            return self._cond.wait_for(lambda: self._pending == 0, timeout=timeout)

    @property
    def last_report(self) -> Optional[str]:
        with self._cond:
            return self._last_report

    @property
    def last_report_time(self) -> Optional[float]:
        with self._cond:
            return self._last_report_time

    def stats(self) -> Dict[str, Any]:
        with self._cond:
            d = asdict(self._stats)
            d["pending"] = self._pending
        return d
