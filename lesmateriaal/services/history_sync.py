"""Debounced URL/history synchronisation for one explorer view.

Every filter change rewrites the current history entry right away
(replace_state) so a reload or shared link always reflects the view, and
(re)arms a single push job on a shared APScheduler BackgroundScheduler.
When the job fires, the URL is pushed as a new history entry, unless it
equals the last pushed one. Back/forward (`navigated`) cancels the pending
push and re-reads the URL.

    idle --filter_changed--> pending-push --timer--> idle (push if changed)
                                  |
                                  +--navigated / close--> idle (no push)
"""
import enum
import logging
import threading
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional, Protocol

from apscheduler.events import EVENT_JOB_ERROR, JobExecutionEvent
from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.background import BackgroundScheduler

from lesmateriaal.core.config import settings
from lesmateriaal.services.faceted_search import FilterState
from lesmateriaal.services.filter_url import build_url, parse_url

logger = logging.getLogger(__name__)


class BrowserHistory(Protocol):
    """The part of the browser History API the sync needs."""

    @property
    def location(self) -> str: ...

    def replace_state(self, url: str) -> None: ...

    def push_state(self, url: str) -> None: ...


class InMemoryHistory:
    """History stack with browser semantics (push drops forward entries)."""

    def __init__(self, url: str = "/"):
        self._entries: list[str] = [url]
        self._index = 0

    @property
    def location(self) -> str:
        return self._entries[self._index]

    @property
    def entries(self) -> list[str]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def replace_state(self, url: str) -> None:
        self._entries[self._index] = url

    def push_state(self, url: str) -> None:
        del self._entries[self._index + 1:]
        self._entries.append(url)
        self._index += 1

    def back(self) -> str:
        if self._index > 0:
            self._index -= 1
        return self.location

    def forward(self) -> str:
        if self._index < len(self._entries) - 1:
            self._index += 1
        return self.location


class SyncState(str, enum.Enum):
    IDLE = "idle"
    PENDING_PUSH = "pending-push"


# ── Shared scheduler ─────────────────────────────────────────────────

_scheduler: Optional[BackgroundScheduler] = None
_scheduler_lock = threading.Lock()


def _on_job_error(event: JobExecutionEvent) -> None:
    logger.error("[HistorySync] Push job %s failed: %s", event.job_id, event.exception)


def get_history_scheduler() -> BackgroundScheduler:
    """Process-wide scheduler for push jobs, started on first use."""
    global _scheduler
    with _scheduler_lock:
        if _scheduler is None or not _scheduler.running:
            _scheduler = BackgroundScheduler(timezone="UTC")
            _scheduler.add_listener(_on_job_error, EVENT_JOB_ERROR)
            _scheduler.start()
            logger.debug("[HistorySync] Scheduler started")
        return _scheduler


def shutdown_history_scheduler() -> None:
    """Stop the shared scheduler. Called from the FastAPI lifespan."""
    global _scheduler
    with _scheduler_lock:
        if _scheduler and _scheduler.running:
            _scheduler.shutdown(wait=False)
            logger.info("[HistorySync] Scheduler stopped")
        _scheduler = None


# ── Per-view sync ────────────────────────────────────────────────────


class HistorySync:
    """URL/history state machine of one explorer view.

    Use as a context manager (or call close()) so the pending push job is
    removed on every exit path.
    """

    def __init__(
        self,
        history: BrowserHistory,
        scheduler: Optional[BackgroundScheduler] = None,
        delay_seconds: Optional[float] = None,
    ):
        self._history = history
        self._scheduler = scheduler
        self._delay = settings.history_push_delay_seconds if delay_seconds is None else delay_seconds
        self._job_id = f"history-push-{uuid.uuid4().hex}"
        # The push callback runs on a scheduler worker thread
        self._lock = threading.RLock()
        self._state = SyncState.IDLE
        self._pending: Optional[FilterState] = None
        self._last_pushed_url: Optional[str] = None
        self._closed = False

    @property
    def job_id(self) -> str:
        return self._job_id

    @property
    def state(self) -> SyncState:
        return self._state

    @property
    def last_pushed_url(self) -> Optional[str]:
        return self._last_pushed_url

    @property
    def closed(self) -> bool:
        return self._closed

    def _get_scheduler(self) -> BackgroundScheduler:
        if self._scheduler is None:
            self._scheduler = get_history_scheduler()
        return self._scheduler

    def mount(self) -> FilterState:
        """Read the initial filter state from the current URL."""
        with self._lock:
            self._last_pushed_url = self._history.location
            return parse_url(self._history.location)

    def filter_changed(self, filters: FilterState) -> None:
        with self._lock:
            if self._closed:
                return
            self._history.replace_state(build_url(self._history.location, filters))
            self._pending = filters
            self._state = SyncState.PENDING_PUSH
            self._get_scheduler().add_job(
                self._on_timer,
                trigger="date",
                run_date=datetime.now(timezone.utc) + timedelta(seconds=self._delay),
                id=self._job_id,
                name="History push",
                replace_existing=True,
                misfire_grace_time=None,
            )

    def _on_timer(self) -> None:
        self._push(from_timer=True)

    def flush(self) -> bool:
        """Run the pending push now. True when a history entry was added."""
        return self._push(from_timer=False)

    def _push(self, from_timer: bool) -> bool:
        with self._lock:
            if self._state is not SyncState.PENDING_PUSH or self._pending is None:
                return False
            url = build_url(self._history.location, self._pending)
            self._pending = None
            self._state = SyncState.IDLE
            if not from_timer:
                self._cancel_job()
            if url == self._last_pushed_url:
                return False
            self._history.push_state(url)
            self._last_pushed_url = url
            logger.debug("[HistorySync] Pushed %s", url)
            return True

    def navigated(self) -> FilterState:
        """Back/forward: drop the pending push, re-read the URL."""
        with self._lock:
            self._cancel_job()
            self._pending = None
            self._state = SyncState.IDLE
            self._last_pushed_url = self._history.location
            return parse_url(self._history.location)

    def close(self) -> None:
        with self._lock:
            self._cancel_job()
            self._pending = None
            self._state = SyncState.IDLE
            self._closed = True

    def _cancel_job(self) -> None:
        if self._scheduler is None:
            return
        try:
            self._scheduler.remove_job(self._job_id)
        except JobLookupError:
            pass

    def __enter__(self) -> "HistorySync":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
