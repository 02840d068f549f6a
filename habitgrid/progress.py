"""
Aggregation engine: completion percentages, streaks, milestones and yearly
progress computed from a TrackerData snapshot.

Every function here is pure. Time-sensitive functions take the reference
date as a parameter instead of reading the clock.
"""
import calendar
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, List, Mapping, NamedTuple, Optional, Sequence, Tuple

from .models import DayEntry, Habit, date_key, parse_date_key

MILESTONES: Tuple[int, ...] = (3, 7, 14, 21, 30, 45, 60, 90, 120)

MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)


class Streaks(NamedTuple):
    current: int
    longest: int


@dataclass(frozen=True)
class MonthProgress:
    year: int
    month: int
    completed: int
    possible: int
    percent: float

    @property
    def name(self) -> str:
        return MONTH_NAMES[self.month - 1]

    @property
    def label(self) -> str:
        return self.name[:3]

    def to_dict(self):
        return {
            "year": self.year,
            "month": self.month,
            "name": self.name,
            "completedCount": self.completed,
            "possibleCount": self.possible,
            "percent": self.percent,
        }


# -------------------------
# Day level
# -------------------------
def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def completed_count(habits: Sequence[Habit], entry: Optional[DayEntry]) -> int:
    """Completions that reference a current habit; orphaned ids are ignored."""
    if entry is None:
        return 0
    return len(entry.completed & {h.id for h in habits})


def day_completion_percent(habits: Sequence[Habit], entry: Optional[DayEntry]) -> float:
    if not habits:
        return 0.0
    return 100.0 * completed_count(habits, entry) / len(habits)


def is_day_complete(habits: Sequence[Habit], entry: Optional[DayEntry]) -> bool:
    if not habits or entry is None:
        return False
    return all(h.id in entry.completed for h in habits)


# -------------------------
# Month level
# -------------------------
def month_dates(year: int, month: int) -> List[date]:
    return [date(year, month, day) for day in range(1, days_in_month(year, month) + 1)]


def month_totals(habits: Sequence[Habit], entries: Mapping[str, DayEntry],
                 year: int, month: int) -> Tuple[int, int]:
    """Return (completed, possible) habit-days for the month."""
    completed = sum(completed_count(habits, entries.get(date_key(d))) for d in month_dates(year, month))
    return completed, len(habits) * days_in_month(year, month)


def month_completion_percent(habits: Sequence[Habit], entries: Mapping[str, DayEntry],
                             year: int, month: int) -> float:
    completed, possible = month_totals(habits, entries, year, month)
    if possible == 0:
        return 0.0
    return 100.0 * completed / possible


def daily_percents(habits: Sequence[Habit], entries: Mapping[str, DayEntry],
                   year: int, month: int) -> List[float]:
    return [day_completion_percent(habits, entries.get(date_key(d))) for d in month_dates(year, month)]


def habit_month_counts(habits: Sequence[Habit], entries: Mapping[str, DayEntry],
                       year: int, month: int) -> List[Tuple[Habit, int, int, float]]:
    """Per-habit analysis rows: (habit, completed days, goal days, percent)."""
    dates = month_dates(year, month)
    goal = len(dates)
    rows = []
    for habit in habits:
        done = 0
        for d in dates:
            entry = entries.get(date_key(d))
            if entry is not None and habit.id in entry.completed:
                done += 1
        rows.append((habit, done, goal, 100.0 * done / goal))
    return rows


# -------------------------
# Streaks
# -------------------------
def calculate_streaks(habits: Sequence[Habit], entries: Mapping[str, DayEntry],
                      reference_date: date) -> Streaks:
    """
    current: consecutive complete days walking back from reference_date.
    longest: best run over the logged days up to reference_date; a missing
    day between two logged days breaks the run.
    """
    current = 0
    cursor = reference_date
    while is_day_complete(habits, entries.get(date_key(cursor))):
        current += 1
        cursor -= timedelta(days=1)

    logged = sorted(d for d in (parse_date_key(k) for k in entries) if d <= reference_date)
    longest = 0
    run = 0
    previous: Optional[date] = None
    for day in logged:
        if previous is not None and day != previous + timedelta(days=1):
            run = 0
        if is_day_complete(habits, entries[date_key(day)]):
            run += 1
            longest = max(longest, run)
        else:
            run = 0
        previous = day

    return Streaks(current=current, longest=longest)


def next_milestone(current_streak: int) -> Optional[int]:
    for milestone in MILESTONES:
        if milestone > current_streak:
            return milestone
    return None


def milestone_message(current_streak: int) -> str:
    target = next_milestone(current_streak)
    if target is None:
        return f"{current_streak}-day streak. Every milestone reached!"
    remaining = target - current_streak
    unit = "day" if remaining == 1 else "days"
    if current_streak == 0:
        return f"Complete every habit today to start a streak. {target} days is your first milestone."
    return f"{remaining} more {unit} to reach a {target}-day streak."


# -------------------------
# Year level
# -------------------------
def year_months(year: int, start_month: int = 1) -> List[Tuple[int, int]]:
    """
    Twelve (year, month) pairs ending in the given year.

    start_month=1 is the calendar year. With start_month=11 the sequence runs
    November of the previous year through October.
    """
    if not 1 <= start_month <= 12:
        raise ValueError(f"start_month must be between 1 and 12, got {start_month}")
    months = []
    for i in range(12):
        month = (start_month - 1 + i) % 12 + 1
        month_year = year - 1 if start_month != 1 and month >= start_month else year
        months.append((month_year, month))
    return months


def yearly_progress(habits: Sequence[Habit], entries: Mapping[str, DayEntry],
                    year: int, start_month: int = 1) -> List[MonthProgress]:
    progress = []
    for month_year, month in year_months(year, start_month):
        completed, possible = month_totals(habits, entries, month_year, month)
        percent = 100.0 * completed / possible if possible else 0.0
        progress.append(MonthProgress(month_year, month, completed, possible, percent))
    return progress


def best_month(progress: Iterable[MonthProgress]) -> Optional[MonthProgress]:
    """Highest percent; ties go to the earliest month in iteration order."""
    best = None
    for item in progress:
        if best is None or item.percent > best.percent:
            best = item
    return best
