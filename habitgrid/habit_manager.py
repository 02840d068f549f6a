# habit_manager.py
import logging
import threading
from datetime import date, datetime
from typing import Any, Callable, Dict, Iterable, Optional, Tuple

from .models import (
    DEFAULT_ICON, MENTAL_STATE_KINDS, DayEntry, Habit, HabitNotFoundError, SchemaError,
    TrackerData, from_document, parse_date_key, to_document, validate_score,
)

logger = logging.getLogger(__name__)


class HabitManager:
    """
    Holds the tracker state for one session and applies user actions to it.

    Every mutation updates the in-memory snapshot first, then saves to the
    local store. When a remote backend is attached, a single background
    worker pushes the newest snapshot; its failures are only logged.
    """

    def __init__(self, store, remote=None, clock: Callable[[], date] = date.today):
        self.store = store
        self.remote = remote
        self.clock = clock
        self._sync_cond = threading.Condition()
        self._sync_pending = False
        self._sync_thread: Optional[threading.Thread] = None
        self.data: TrackerData = self.load_data()

    @classmethod
    def from_settings(cls, settings, clock: Callable[[], date] = date.today) -> "HabitManager":
        """Local storage always; the remote backend only when configured and reachable."""
        from .local_storage import LocalStorage
        from .remote_storage import RemoteStorage

        remote = None
        if settings.remote_url:
            remote = RemoteStorage(settings.remote_url, timeout=settings.request_timeout)
        return cls(LocalStorage(settings.local_db_url), remote=remote, clock=clock)

    # ---------- loading / saving ----------
    def load_data(self) -> TrackerData:
        data = self.store.load()
        if data is None:
            data = TrackerData.default()
        if self.remote is None:
            return data

        if not self.remote.is_available():
            self.remote = None
            return data

        remote_data = self.remote.load()
        if remote_data is None:
            return data
        if not remote_data.habits and not remote_data.entries:
            # fresh server: seed it with what we have locally
            self._push_remote(data)
            return data
        self.store.save(remote_data)
        return remote_data

    def save_data(self) -> None:
        self.store.save(self.data)
        if self.remote is not None:
            self._schedule_push()

    def _schedule_push(self) -> None:
        """Mark the remote copy stale and make sure one sync worker is running."""
        with self._sync_cond:
            self._sync_pending = True
            if self._sync_thread is None:
                self._sync_thread = threading.Thread(target=self._sync_worker, daemon=True)
                self._sync_thread.start()

    def _sync_worker(self) -> None:
        # one worker at a time; each push sends the newest snapshot
        while True:
            with self._sync_cond:
                if not self._sync_pending:
                    self._sync_thread = None
                    self._sync_cond.notify_all()
                    return
                self._sync_pending = False
                data = self.data
            self._push_remote(data)

    def _push_remote(self, data: TrackerData) -> None:
        try:
            if not self.remote.save(data):
                logger.warning("Remote save failed; local data stays authoritative")
        except Exception:
            logger.exception("Unexpected error while saving to backend")

    def wait_for_sync(self, timeout: Optional[float] = None) -> bool:
        """Block until the sync worker is idle. Returns False on timeout."""
        with self._sync_cond:
            return self._sync_cond.wait_for(lambda: self._sync_thread is None, timeout)

    @property
    def uses_remote(self) -> bool:
        return self.remote is not None

    # ---------- habits ----------
    @property
    def habits(self) -> Tuple[Habit, ...]:
        return self.data.habits

    def add_habit(self, name: str, icon: str = "") -> Tuple[bool, str]:
        """
        Create a new habit with the next free id.

        Returns:
            (success: bool, message: str)
        """
        name = (name or "").strip()
        if not name:
            return False, "Please enter a habit name"
        habit = Habit(self.data.next_habit_id(), name, (icon or "").strip() or DEFAULT_ICON)
        self.data = self.data.with_habits(self.data.habits + (habit,))
        self.save_data()
        logger.info("Added habit %s (%s)", habit.id, habit.name)
        return True, f"Habit '{name}' created successfully!"

    def delete_habit(self, habit_id: int) -> Tuple[bool, str]:
        """Remove a habit; its past completions stay in the log as orphans."""
        habit = self.data.find_habit(habit_id)
        if habit is None:
            return False, f"Habit {habit_id} not found."
        self.data = self.data.with_habits(h for h in self.data.habits if h.id != habit_id)
        self.save_data()
        logger.info("Deleted habit %s (%s)", habit.id, habit.name)
        return True, f"Habit '{habit.name}' deleted successfully."

    def replace_habits(self, habits: Iterable[Habit]) -> None:
        habits = tuple(habits)
        ids = [h.id for h in habits]
        if len(ids) != len(set(ids)):
            raise ValueError("Habit ids must be unique")
        self.data = self.data.with_habits(habits)
        self.save_data()

    # ---------- entries ----------
    def is_future(self, key: str) -> bool:
        return parse_date_key(key) > self.clock()

    def entry(self, key: str) -> Optional[DayEntry]:
        return self.data.entry(key)

    def is_habit_completed(self, key: str, habit_id: int) -> bool:
        entry = self.data.entry(key)
        return entry is not None and habit_id in entry.completed

    def toggle_habit(self, habit_id: int, key: str) -> bool:
        """
        Flip a habit's completion on a day.

        Returns False (and changes nothing) when the day is in the future.
        Raises HabitNotFoundError for an unknown habit id.
        """
        if self.is_future(key):
            return False
        if self.data.find_habit(habit_id) is None:
            raise HabitNotFoundError(f"Habit {habit_id} not found")
        entry = self.data.entry(key) or DayEntry()
        self.data = self.data.with_entry(key, entry.toggled(habit_id))
        self.save_data()
        return True

    def set_mental_state(self, key: str, kind: str, value: Optional[int]) -> bool:
        """Set mood or motivation (1-10, None clears). Future days are ignored."""
        if kind not in MENTAL_STATE_KINDS:
            raise ValueError(f"Unknown mental state type: {kind!r}")
        value = validate_score(value)
        if self.is_future(key):
            return False
        entry = (self.data.entry(key) or DayEntry()).with_score(kind, value)
        self.data = self.data.with_entry(key, entry)
        self.save_data()
        return True

    def clear_data(self) -> None:
        self.data = self.data.without_entries()
        self.save_data()
        logger.info("Cleared all entries")

    # ---------- import / export ----------
    def export_document(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        now = now or datetime.now()
        return to_document(self.data, export_date=now.isoformat())

    def import_document(self, doc: Any) -> Tuple[bool, str]:
        try:
            data = from_document(doc)
        except SchemaError as e:
            return False, f"Error importing data: {e}"
        self.data = data
        self.save_data()
        return True, "Data imported successfully!"
