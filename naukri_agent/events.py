"""Run state and the live progress stream.

:class:`RunState` is created fresh for every run and handed to each
component; nothing here is module-global. Progress consumers subscribe to
the :class:`EventBus` and get every :class:`LogEntry` as it is emitted.
"""
from __future__ import annotations

import queue
import threading
from typing import Any, Callable

from naukri_agent.log import get_logger, level_for
from naukri_agent.models import JobResult, LogEntry, RunSummary, Severity

log = get_logger("naukri_agent.run")

ProgressSink = Callable[[LogEntry], None]


class EventBus:
    def __init__(self) -> None:
        self._subscribers: list[ProgressSink] = []
        self._lock = threading.Lock()

    def subscribe(self, sink: ProgressSink) -> Callable[[], None]:
        """Register ``sink``; returns a callable that unsubscribes it."""
        with self._lock:
            self._subscribers.append(sink)

        def _unsubscribe() -> None:
            with self._lock:
                if sink in self._subscribers:
                    self._subscribers.remove(sink)

        return _unsubscribe

    def publish(self, entry: LogEntry) -> None:
        with self._lock:
            subscribers = list(self._subscribers)
        for sink in subscribers:
            try:
                sink(entry)
            except Exception as exc:
                # a broken UI consumer must not take the run down
                log.debug("Progress sink %r failed: %s", sink, exc)


class QueueSink:
    """Bounded buffer for consumers polling from another thread.

    When full, the oldest entry is dropped so the run never blocks on a
    slow reader.
    """

    def __init__(self, maxsize: int = 1000) -> None:
        self._queue: "queue.Queue[LogEntry]" = queue.Queue(maxsize=maxsize)
        self.dropped = 0

    def __call__(self, entry: LogEntry) -> None:
        while True:
            try:
                self._queue.put_nowait(entry)
                return
            except queue.Full:
                try:
                    self._queue.get_nowait()
                    self.dropped += 1
                except queue.Empty:
                    pass

    def drain(self) -> list[LogEntry]:
        out: list[LogEntry] = []
        while True:
            try:
                out.append(self._queue.get_nowait())
            except queue.Empty:
                return out


class RunState:
    def __init__(self, bus: EventBus | None = None) -> None:
        self.bus = bus or EventBus()
        self.session: Any = None
        self.logs: list[LogEntry] = []
        self.results: list[JobResult] = []
        self.applied = 0
        self.skipped = 0
        self.skip_reasons: dict[str, int] = {}
        self._stop = threading.Event()

    # ── log stream ──────────────────────────────────────────────────────

    def emit(self, message: str, severity: Severity = Severity.INFO) -> LogEntry:
        entry = LogEntry(message=message, severity=severity)
        self.logs.append(entry)
        log.log(level_for(severity.value), message)
        self.bus.publish(entry)
        return entry

    def info(self, message: str) -> LogEntry:
        return self.emit(message, Severity.INFO)

    def success(self, message: str) -> LogEntry:
        return self.emit(message, Severity.SUCCESS)

    def warning(self, message: str) -> LogEntry:
        return self.emit(message, Severity.WARNING)

    def error(self, message: str) -> LogEntry:
        return self.emit(message, Severity.ERROR)

    # ── cancellation ────────────────────────────────────────────────────

    def request_stop(self) -> None:
        self._stop.set()

    @property
    def stop_requested(self) -> bool:
        return self._stop.is_set()

    # ── outcomes ────────────────────────────────────────────────────────

    def record_applied(self, result: JobResult) -> None:
        self.results.append(result)
        self.applied += 1

    def record_skipped(self, result: JobResult, reason: str) -> None:
        self.results.append(result)
        self.skipped += 1
        self.skip_reasons[reason] = self.skip_reasons.get(reason, 0) + 1

    def summary(self, success: bool, error: str | None = None) -> RunSummary:
        return RunSummary(
            success=success,
            jobs_applied=self.applied,
            jobs_skipped=self.skipped,
            skip_reasons=dict(self.skip_reasons),
            results=list(self.results),
            logs=list(self.logs),
            error=error,
        )
