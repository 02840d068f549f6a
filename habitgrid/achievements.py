# achievements.py
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from .models import DayEntry, Habit
from .progress import calculate_streaks, month_completion_percent


class CriteriaType(Enum):
    STREAK = "streak"
    MONTHLY_COMPLETION = "monthly_completion"
    HABIT_COUNT = "habit_count"


@dataclass(frozen=True)
class Criteria:
    type: CriteriaType
    threshold: float


@dataclass(frozen=True)
class Achievement:
    id: str
    name: str
    description: str
    icon: str
    criteria: Criteria


@dataclass(frozen=True)
class AchievementStatus:
    achievement: Achievement
    metric: float
    progress: float
    unlocked: bool

    def to_dict(self) -> Dict[str, Any]:
        a = self.achievement
        return {
            "id": a.id,
            "name": a.name,
            "description": a.description,
            "icon": a.icon,
            "criteria": {"type": a.criteria.type.value, "threshold": a.criteria.threshold},
            "metric": self.metric,
            "progress": self.progress,
            "unlocked": self.unlocked,
        }


ACHIEVEMENTS: Tuple[Achievement, ...] = (
    Achievement("streak_3", "Getting Started", "Complete every habit 3 days in a row", "🌱",
                Criteria(CriteriaType.STREAK, 3)),
    Achievement("streak_7", "Week Warrior", "Complete every habit 7 days in a row", "🔥",
                Criteria(CriteriaType.STREAK, 7)),
    Achievement("streak_30", "Monthly Master", "Complete every habit 30 days in a row", "🏆",
                Criteria(CriteriaType.STREAK, 30)),
    Achievement("monthly_80", "High Achiever", "Reach 80% completion in a month", "⭐",
                Criteria(CriteriaType.MONTHLY_COMPLETION, 80)),
    Achievement("habits_5", "Habit Builder", "Track at least 5 habits", "🧱",
                Criteria(CriteriaType.HABIT_COUNT, 5)),
)


def achievement_progress(metric: float, threshold: float) -> float:
    if threshold <= 0:
        return 100.0
    return min(100.0, 100.0 * metric / threshold)


def evaluate_achievements(habits: Sequence[Habit], entries: Mapping[str, DayEntry],
                          reference_date: date, year: Optional[int] = None,
                          month: Optional[int] = None,
                          catalog: Sequence[Achievement] = ACHIEVEMENTS) -> List[AchievementStatus]:
    """
    Score every achievement in the catalog.

    Args:
        habits: current habit list
        entries: entry log keyed by date key
        reference_date: the day streaks are measured up to (normally today)
        year, month: active month for monthly_completion (defaults to reference_date's month)

    Returns:
        list of AchievementStatus in catalog order
    """
    year = year or reference_date.year
    month = month or reference_date.month
    metrics = {
        CriteriaType.STREAK: float(calculate_streaks(habits, entries, reference_date).longest),
        CriteriaType.MONTHLY_COMPLETION: month_completion_percent(habits, entries, year, month),
        CriteriaType.HABIT_COUNT: float(len(habits)),
    }

    statuses = []
    for achievement in catalog:
        metric = metrics[achievement.criteria.type]
        progress = achievement_progress(metric, achievement.criteria.threshold)
        statuses.append(AchievementStatus(achievement, metric, progress, progress >= 100.0))
    return statuses


def unlocked_achievements(habits: Sequence[Habit], entries: Mapping[str, DayEntry],
                          reference_date: date, year: Optional[int] = None,
                          month: Optional[int] = None) -> List[Achievement]:
    return [s.achievement for s in evaluate_achievements(habits, entries, reference_date, year, month)
            if s.unlocked]
