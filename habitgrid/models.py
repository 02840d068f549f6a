# models.py
import re
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Tuple

SCHEMA_VERSION = 1
SCORE_MIN = 1
SCORE_MAX = 10
MENTAL_STATE_KINDS = ("mood", "motivation")
DEFAULT_ICON = "✓"

_DATE_KEY_RE = re.compile(r"(\d{4})-(\d{2})-(\d{2})", re.ASCII)
_DOCUMENT_KEYS = {"version", "habits", "entries", "exportDate"}
_HABIT_KEYS = {"id", "name", "icon"}
_ENTRY_KEYS = {"completed", "mood", "motivation"}


class SchemaError(ValueError):
    """Raised when a persisted or imported document has an unknown shape."""


class HabitNotFoundError(LookupError):
    """Raised when an operation references a habit id that does not exist."""


# -------------------------
# Date keys
# -------------------------
def date_key(value) -> str:
    """Canonical 'YYYY-MM-DD' key built from the calendar components only."""
    if isinstance(value, datetime):
        value = value.date()
    return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"


def month_key(year: int, month: int) -> str:
    return f"{year:04d}-{month:02d}"


def parse_date_key(key: str) -> date:
    if not isinstance(key, str):
        raise ValueError(f"Date key must be a string, got {type(key).__name__}")
    match = _DATE_KEY_RE.fullmatch(key)
    if not match:
        raise ValueError(f"Invalid date key: {key!r}")
    year, month, day = (int(part) for part in match.groups())
    try:
        return date(year, month, day)
    except ValueError as e:
        raise ValueError(f"Invalid date key: {key!r} ({e})") from None


def parse_month_key(key: str) -> Tuple[int, int]:
    """Parse 'YYYY-MM' into (year, month)."""
    match = re.fullmatch(r"(\d{4})-(\d{2})", key or "", re.ASCII)
    if not match:
        raise ValueError(f"Invalid month key: {key!r}")
    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12:
        raise ValueError(f"Invalid month key: {key!r}")
    return year, month


def validate_score(value) -> Optional[int]:
    """Mood and motivation are either absent or an integer in [1, 10]."""
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"Score must be an integer between {SCORE_MIN} and {SCORE_MAX}, got {value!r}")
    if not SCORE_MIN <= value <= SCORE_MAX:
        raise ValueError(f"Score must be between {SCORE_MIN} and {SCORE_MAX}, got {value}")
    return value


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


# -------------------------
# Records
# -------------------------
@dataclass(frozen=True)
class Habit:
    id: int
    name: str
    icon: str = DEFAULT_ICON

    @property
    def label(self) -> str:
        return f"{self.icon} {self.name}"

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "icon": self.icon}


@dataclass(frozen=True)
class DayEntry:
    completed: FrozenSet[int] = frozenset()
    mood: Optional[int] = None
    motivation: Optional[int] = None

    def toggled(self, habit_id: int) -> "DayEntry":
        if habit_id in self.completed:
            return replace(self, completed=self.completed - {habit_id})
        return replace(self, completed=self.completed | {habit_id})

    def with_score(self, kind: str, value: Optional[int]) -> "DayEntry":
        if kind not in MENTAL_STATE_KINDS:
            raise ValueError(f"Unknown mental state type: {kind!r}")
        return replace(self, **{kind: validate_score(value)})

    def to_dict(self) -> Dict[str, Any]:
        return {
            "completed": sorted(self.completed),
            "mood": self.mood,
            "motivation": self.motivation,
        }


@dataclass(frozen=True)
class TrackerData:
    """Snapshot of the habit store and the entry log."""

    habits: Tuple[Habit, ...] = ()
    entries: Mapping[str, DayEntry] = field(default_factory=dict)

    @classmethod
    def default(cls) -> "TrackerData":
        return cls(habits=DEFAULT_HABITS, entries={})

    def habit_ids(self) -> FrozenSet[int]:
        return frozenset(h.id for h in self.habits)

    def find_habit(self, habit_id: int) -> Optional[Habit]:
        for habit in self.habits:
            if habit.id == habit_id:
                return habit
        return None

    def entry(self, key: str) -> Optional[DayEntry]:
        return self.entries.get(key)

    def next_habit_id(self) -> int:
        return max((h.id for h in self.habits), default=0) + 1

    def with_habits(self, habits: Iterable[Habit]) -> "TrackerData":
        return replace(self, habits=tuple(habits))

    def with_entry(self, key: str, entry: DayEntry) -> "TrackerData":
        entries = dict(self.entries)
        entries[key] = entry
        return replace(self, entries=entries)

    def without_entries(self) -> "TrackerData":
        return replace(self, entries={})


DEFAULT_HABITS: Tuple[Habit, ...] = (
    Habit(1, "Wake up at 05:00", "⏰"),
    Habit(2, "Gym", "💪"),
    Habit(3, "Reading / Learning", "📖"),
    Habit(4, "Day Planning", "🗓️"),
    Habit(5, "Budget Tracking", "💰"),
    Habit(6, "Project Work", "🎯"),
    Habit(7, "No Alcohol", "🍾"),
    Habit(8, "Social Media Detox", "🌿"),
    Habit(9, "Goal Journaling", "📔"),
    Habit(10, "Cold Shower", "🚿"),
)


# -------------------------
# Document schema
# -------------------------
def to_document(data: TrackerData, export_date: Optional[str] = None) -> Dict[str, Any]:
    doc: Dict[str, Any] = {
        "version": SCHEMA_VERSION,
        "habits": [h.to_dict() for h in data.habits],
        "entries": {key: data.entries[key].to_dict() for key in sorted(data.entries)},
    }
    if export_date:
        doc["exportDate"] = export_date
    return doc


def from_document(doc: Any) -> TrackerData:
    """
    Validate a persisted/imported document and build a TrackerData.
    Legacy documents (no 'version') are migrated first.
    Raises SchemaError for anything else.
    """
    if not isinstance(doc, dict):
        raise SchemaError("Document must be a JSON object")
    if "version" not in doc:
        doc = migrate_legacy(doc)

    version = doc.get("version")
    if not _is_int(version) or version < 1:
        raise SchemaError(f"Invalid document version: {version!r}")
    if version > SCHEMA_VERSION:
        raise SchemaError(f"Unsupported document version {version} (max {SCHEMA_VERSION})")

    unknown = set(doc) - _DOCUMENT_KEYS
    if unknown:
        raise SchemaError(f"Unknown document fields: {', '.join(sorted(unknown))}")
    if "exportDate" in doc and not isinstance(doc["exportDate"], str):
        raise SchemaError("exportDate must be a string")

    return TrackerData(
        habits=parse_habits(doc.get("habits", [])),
        entries=_parse_entries(doc.get("entries", {})),
    )


def parse_habits(raw_habits: Any) -> Tuple[Habit, ...]:
    if not isinstance(raw_habits, list):
        raise SchemaError("'habits' must be a list")
    habits: List[Habit] = []
    seen = set()
    for raw in raw_habits:
        if not isinstance(raw, dict):
            raise SchemaError("Each habit must be an object")
        unknown = set(raw) - _HABIT_KEYS
        if unknown:
            raise SchemaError(f"Unknown habit fields: {', '.join(sorted(unknown))}")
        habit_id = raw.get("id")
        name = raw.get("name")
        icon = raw.get("icon", DEFAULT_ICON)
        if not _is_int(habit_id) or habit_id < 1:
            raise SchemaError(f"Invalid habit id: {habit_id!r}")
        if habit_id in seen:
            raise SchemaError(f"Duplicate habit id: {habit_id}")
        if not isinstance(name, str) or not name.strip():
            raise SchemaError(f"Habit {habit_id} has no name")
        if not isinstance(icon, str):
            raise SchemaError(f"Habit {habit_id} has an invalid icon")
        seen.add(habit_id)
        habits.append(Habit(habit_id, name.strip(), icon.strip() or DEFAULT_ICON))
    return tuple(habits)


def _parse_entries(raw_entries: Any) -> Dict[str, DayEntry]:
    if not isinstance(raw_entries, dict):
        raise SchemaError("'entries' must be an object")
    entries: Dict[str, DayEntry] = {}
    for key, raw in raw_entries.items():
        try:
            parse_date_key(key)
        except ValueError as e:
            raise SchemaError(str(e)) from None
        if not isinstance(raw, dict):
            raise SchemaError(f"Entry {key} must be an object")
        unknown = set(raw) - _ENTRY_KEYS
        if unknown:
            raise SchemaError(f"Unknown fields in entry {key}: {', '.join(sorted(unknown))}")
        completed = raw.get("completed", [])
        if not isinstance(completed, list) or not all(_is_int(i) for i in completed):
            raise SchemaError(f"Entry {key}: 'completed' must be a list of habit ids")
        try:
            mood = validate_score(raw.get("mood"))
            motivation = validate_score(raw.get("motivation"))
        except ValueError as e:
            raise SchemaError(f"Entry {key}: {e}") from None
        entries[key] = DayEntry(frozenset(completed), mood, motivation)
    return entries


def _legacy_score(value):
    if value is None or value == "":
        return None
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return value


def migrate_legacy(doc: Dict[str, Any]) -> Dict[str, Any]:
    """
    Convert the unversioned {habits: [{id, name, emoji}], data: {key: {habits, mood, motivation}}}
    shape into a version 1 document.
    """
    if "habits" not in doc and "data" not in doc:
        raise SchemaError("Unrecognised document shape")

    raw_habits = doc.get("habits") or []
    if not isinstance(raw_habits, list):
        raise SchemaError("'habits' must be a list")
    habits = []
    for raw in raw_habits:
        if not isinstance(raw, dict):
            raise SchemaError("Each habit must be an object")
        habits.append({
            "id": raw.get("id"),
            "name": raw.get("name"),
            "icon": raw.get("icon") or raw.get("emoji") or DEFAULT_ICON,
        })

    raw_data = doc.get("data") or {}
    if not isinstance(raw_data, dict):
        raise SchemaError("'data' must be an object")
    entries = {}
    for key, raw in raw_data.items():
        if not isinstance(raw, dict):
            raise SchemaError(f"Entry {key} must be an object")
        completed = raw.get("habits") or []
        if not isinstance(completed, list):
            raise SchemaError(f"Entry {key}: 'habits' must be a list")
        entries[key] = {
            "completed": list(dict.fromkeys(completed)),
            "mood": _legacy_score(raw.get("mood")),
            "motivation": _legacy_score(raw.get("motivation")),
        }

    migrated: Dict[str, Any] = {"version": SCHEMA_VERSION, "habits": habits, "entries": entries}
    if isinstance(doc.get("exportDate"), str):
        migrated["exportDate"] = doc["exportDate"]
    return migrated
