from datetime import date, timedelta

import pytest

from habitgrid.achievements import (
    ACHIEVEMENTS, CriteriaType, achievement_progress, evaluate_achievements, unlocked_achievements,
)
from habitgrid.models import DayEntry, Habit, date_key

TODAY = date(2026, 10, 19)


def habits_of(n):
    return tuple(Habit(i, f"Habit {i}") for i in range(1, n + 1))


def run_ending_today(habits, length):
    ids = frozenset(h.id for h in habits)
    return {date_key(TODAY - timedelta(days=i)): DayEntry(ids) for i in range(length)}


def status_by_id(statuses):
    return {s.achievement.id: s for s in statuses}


def test_catalog_is_static_and_unique():
    ids = [a.id for a in ACHIEVEMENTS]
    assert len(ACHIEVEMENTS) == 5
    assert len(set(ids)) == 5
    assert {a.criteria.type for a in ACHIEVEMENTS} == set(CriteriaType)


@pytest.mark.parametrize("longest, unlocked", [(0, False), (2, False), (3, True), (4, True)])
def test_streak_3_unlocks_at_three(longest, unlocked):
    habits = habits_of(1)
    status = status_by_id(evaluate_achievements(habits, run_ending_today(habits, longest), TODAY))["streak_3"]
    assert status.metric == longest
    assert status.unlocked is unlocked
    assert (status.progress >= 100) is unlocked


def test_progress_is_capped():
    habits = habits_of(1)
    status = status_by_id(evaluate_achievements(habits, run_ending_today(habits, 10), TODAY))
    assert status["streak_3"].progress == 100.0
    assert status["streak_7"].progress == 100.0
    assert status["streak_30"].progress == pytest.approx(100.0 * 10 / 30)


def test_habit_count():
    status = status_by_id(evaluate_achievements(habits_of(4), {}, TODAY))["habits_5"]
    assert status.progress == pytest.approx(80.0)
    assert not status.unlocked
    assert status_by_id(evaluate_achievements(habits_of(5), {}, TODAY))["habits_5"].unlocked


def test_monthly_completion_uses_active_month():
    habits = habits_of(1)
    entries = {date_key(date(2026, 9, d)): DayEntry(frozenset({1})) for d in range(1, 25)}
    # 24 of 30 days in September = 80%
    september = status_by_id(evaluate_achievements(habits, entries, TODAY, 2026, 9))["monthly_80"]
    assert september.metric == pytest.approx(80.0)
    assert september.unlocked
    # defaults to the reference date's month (October, empty)
    october = status_by_id(evaluate_achievements(habits, entries, TODAY))["monthly_80"]
    assert october.metric == 0.0
    assert not october.unlocked


def test_empty_tracker_unlocks_nothing():
    assert unlocked_achievements((), {}, TODAY) == []
    statuses = evaluate_achievements((), {}, TODAY)
    assert all(s.progress == 0.0 for s in statuses)


def test_to_dict():
    data = evaluate_achievements(habits_of(5), {}, TODAY)[-1].to_dict()
    assert data["id"] == "habits_5"
    assert data["criteria"] == {"type": "habit_count", "threshold": 5}
    assert data["unlocked"] is True


def test_zero_threshold_counts_as_done():
    assert achievement_progress(0, 0) == 100.0
