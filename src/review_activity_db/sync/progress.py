"""Progress reporting for comment ingestion.

Two observable streams:
- :class:`ProgressUpdate` snapshots from a :class:`ProgressTracker`
  (counts, percent, current PR)
- :class:`WorkerMessage` discrete events (progress, warning, success,
  error) for hosts that relay status to a user

Both are informational; nothing in the sync engine depends on a
callback being registered or succeeding.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from review_activity_db.logging import get_logger

logger = get_logger(__name__)


class ProgressState(StrEnum):
    """Lifecycle of one ingestion run."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class ProgressUpdate:
    """Snapshot handed to progress callbacks."""

    total: int
    completed: int
    failed: int
    state: ProgressState
    current_item: str | None = None
    error: str | None = None
    elapsed_seconds: float = 0.0

    @property
    def processed(self) -> int:
        return self.completed + self.failed

    @property
    def remaining(self) -> int:
        return max(0, self.total - self.processed)

    @property
    def progress_percent(self) -> float:
        """Share of PRs handled so far, 0-100 (an empty run counts as done)."""
        return 100.0 if self.total == 0 else self.processed * 100 / self.total


ProgressCallback = Callable[[ProgressUpdate], None]


class ProgressTracker:
    """Counts PRs through a comment ingestion run and publishes snapshots.

    Every state change produces a fresh :class:`ProgressUpdate` for the
    registered callbacks. A callback that raises is logged and skipped.
    """

    def __init__(self, total: int = 0, name: str = "operation") -> None:
        self._name = name
        self._snapshot = ProgressUpdate(
            total=total, completed=0, failed=0, state=ProgressState.PENDING
        )
        self._started: float | None = None
        self._callbacks: list[ProgressCallback] = []

    @property
    def total(self) -> int:
        return self._snapshot.total

    @property
    def completed(self) -> int:
        return self._snapshot.completed

    @property
    def failed(self) -> int:
        return self._snapshot.failed

    @property
    def state(self) -> ProgressState:
        return self._snapshot.state

    @property
    def elapsed_seconds(self) -> float:
        return 0.0 if self._started is None else time.monotonic() - self._started

    def on_progress(self, callback: ProgressCallback) -> None:
        self._callbacks.append(callback)

    def get_update(self) -> ProgressUpdate:
        return replace(self._snapshot, elapsed_seconds=self.elapsed_seconds)

    def _publish(self, **changes: Any) -> None:
        self._snapshot = replace(self._snapshot, **changes)
        update = self.get_update()
        for callback in self._callbacks:
            try:
                callback(update)
            except Exception as e:
                logger.warning("Progress callback for {} raised: {}", self._name, e)

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------
    def start(self) -> None:
        self._started = time.monotonic()
        logger.info("{}: {} PRs queued", self._name, self.total)
        self._publish(state=ProgressState.IN_PROGRESS)

    def set_current(self, item: str) -> None:
        self._publish(current_item=item)

    def increment(self, count: int = 1) -> None:
        self._publish(completed=self.completed + count, current_item=None)

    def increment_failed(self, count: int = 1, error: str | None = None) -> None:
        if error:
            logger.warning("{}: PR skipped ({})", self._name, error)
        self._publish(failed=self.failed + count, current_item=None)

    def complete(self) -> None:
        logger.info(
            "{}: done, {} ok / {} skipped after {:.1f}s",
            self._name,
            self.completed,
            self.failed,
            self.elapsed_seconds,
        )
        self._publish(state=ProgressState.COMPLETED, current_item=None)

    def fail(self, error: str) -> None:
        logger.error("{}: aborted ({})", self._name, error)
        self._publish(state=ProgressState.FAILED, error=error, current_item=None)


# -----------------------------------------------------------------------------
# Worker messages
# -----------------------------------------------------------------------------
class WorkerEventType(StrEnum):
    """Kind of message emitted by background comment ingestion."""

    PROGRESS = "progress"
    WARNING = "warning"
    SUCCESS = "success"
    ERROR = "error"


@dataclass
class WorkerMessage:
    """Discrete status event from a comment ingestion run."""

    type: WorkerEventType
    username: str
    message: str
    data: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def to_dict(self) -> dict[str, object]:
        return {
            "type": self.type.value,
            "username": self.username,
            "message": self.message,
            "data": self.data,
            "timestamp": self.timestamp.isoformat(),
        }


MessageCallback = Callable[[WorkerMessage], None]


class MessageEmitter:
    """Sends worker messages to the log and an optional callback."""

    _LEVELS = {
        WorkerEventType.PROGRESS: "DEBUG",
        WorkerEventType.WARNING: "WARNING",
        WorkerEventType.SUCCESS: "INFO",
        WorkerEventType.ERROR: "ERROR",
    }

    def __init__(self, username: str, callback: MessageCallback | None = None) -> None:
        self._username = username
        self._callback = callback
        self._log = logger.bind(user=username)

    def emit(self, event: WorkerEventType, message: str, **data: Any) -> WorkerMessage:
        msg = WorkerMessage(type=event, username=self._username, message=message, data=data)
        self._log.log(self._LEVELS[event], message)
        if self._callback is not None:
            try:
                self._callback(msg)
            except Exception as e:
                self._log.warning("Worker message callback error: {}", e)
        return msg
