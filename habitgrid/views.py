"""
Pure view functions. Each takes an explicit AppState (what data, which
month is on screen, what day it is) and returns plain data that the
dashboard or the JSON API can render.
"""
from dataclasses import dataclass, replace
from datetime import date
from typing import Any, Dict, List

from .achievements import evaluate_achievements
from .models import TrackerData, date_key, month_key
from .progress import (
    MONTH_NAMES, best_month, calculate_streaks, completed_count, daily_percents,
    day_completion_percent, days_in_month, habit_month_counts, milestone_message,
    month_dates, month_totals, next_milestone, yearly_progress,
)

WEEKDAY_NAMES = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


@dataclass(frozen=True)
class AppState:
    data: TrackerData
    view_date: date
    today: date

    @property
    def year(self) -> int:
        return self.view_date.year

    @property
    def month(self) -> int:
        return self.view_date.month


# ---------- navigation ----------
def set_month(state: AppState, year: int, month: int) -> AppState:
    return replace(state, view_date=date(year, month, 1))


def shift_month(state: AppState, delta: int) -> AppState:
    index = state.year * 12 + (state.month - 1) + delta
    return set_month(state, index // 12, index % 12 + 1)


def shift_year(state: AppState, delta: int) -> AppState:
    return set_month(state, state.year + delta, state.month)


def go_to_today(state: AppState) -> AppState:
    return replace(state, view_date=state.today)


# ---------- monthly ----------
def week_blocks(year: int, month: int) -> List[Dict[str, Any]]:
    """Split the month into 7-day blocks labelled Week 1..5."""
    total = days_in_month(year, month)
    blocks = []
    for start in range(1, total + 1, 7):
        blocks.append({"label": f"Week {len(blocks) + 1}", "span": min(7, total - start + 1)})
    return blocks


def _day_flags(day: date, today: date) -> Dict[str, bool]:
    return {"isToday": day == today, "isPast": day < today, "isFuture": day > today}


def monthly_view(state: AppState) -> Dict[str, Any]:
    data, today = state.data, state.today
    habits = data.habits
    dates = month_dates(state.year, state.month)

    days = []
    for d in dates:
        days.append({"day": d.day, "weekday": WEEKDAY_NAMES[d.weekday()], "key": date_key(d),
                     **_day_flags(d, today)})

    rows = []
    for habit in habits:
        cells = []
        for d in dates:
            entry = data.entry(date_key(d))
            cells.append({"key": date_key(d), "checked": entry is not None and habit.id in entry.completed,
                          **_day_flags(d, today)})
        rows.append({"habit": habit.to_dict(), "cells": cells})

    completed, possible = month_totals(habits, data.entries, state.year, state.month)
    is_current_month = (state.year, state.month) == (today.year, today.month)
    today_entry = data.entry(date_key(today))
    summary = {
        "totalHabits": len(habits),
        "completed": completed,
        "possible": possible,
        "monthPercent": 100.0 * completed / possible if possible else 0.0,
        "todayCompleted": completed_count(habits, today_entry) if is_current_month else 0,
        "todayPercent": day_completion_percent(habits, today_entry) if is_current_month else 0.0,
    }

    mood, motivation = [], []
    for d in dates:
        entry = data.entry(date_key(d))
        mood.append(entry.mood if entry else None)
        motivation.append(entry.motivation if entry else None)

    analysis = [
        {"habit": habit.to_dict(), "goal": goal, "actual": done, "progress": percent}
        for habit, done, goal, percent in habit_month_counts(habits, data.entries, state.year, state.month)
    ]

    return {
        "title": f"{MONTH_NAMES[state.month - 1]} {state.year}",
        "monthKey": month_key(state.year, state.month),
        "weekBlocks": week_blocks(state.year, state.month),
        "days": days,
        "rows": rows,
        "summary": summary,
        "dailyPercents": daily_percents(habits, data.entries, state.year, state.month),
        "mentalState": {"mood": mood, "motivation": motivation},
        "analysis": analysis,
    }


# ---------- yearly ----------
def yearly_view(state: AppState, start_month: int = 1) -> Dict[str, Any]:
    months = yearly_progress(state.data.habits, state.data.entries, state.year, start_month)
    best = best_month(months)
    return {
        "year": state.year,
        "startMonth": start_month,
        "totalHabits": len(state.data.habits),
        "months": [m.to_dict() for m in months],
        "bestMonth": best.to_dict() if best else None,
    }


# ---------- streaks / achievements ----------
def progress_view(state: AppState) -> Dict[str, Any]:
    """Streak panel and achievement list; streaks are measured up to today."""
    habits, entries = state.data.habits, state.data.entries
    streaks = calculate_streaks(habits, entries, state.today)
    target = next_milestone(streaks.current)
    achievements = evaluate_achievements(habits, entries, state.today, state.year, state.month)
    return {
        "currentStreak": streaks.current,
        "longestStreak": streaks.longest,
        "nextMilestone": target,
        "daysToMilestone": target - streaks.current if target is not None else None,
        "message": milestone_message(streaks.current),
        "achievements": [a.to_dict() for a in achievements],
        "unlockedCount": sum(1 for a in achievements if a.unlocked),
    }


# ---------- settings ----------
def settings_view(state: AppState) -> Dict[str, Any]:
    return {
        "habits": [h.to_dict() for h in state.data.habits],
        "loggedDays": len(state.data.entries),
    }
