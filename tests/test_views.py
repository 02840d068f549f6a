import unittest
from datetime import date

from habitgrid.models import DayEntry, Habit, TrackerData
from habitgrid.views import (
    AppState, go_to_today, monthly_view, progress_view, settings_view, shift_month, shift_year,
    week_blocks, yearly_view,
)

TODAY = date(2026, 10, 19)


def make_state(entries=None, view_date=TODAY):
    data = TrackerData(habits=(Habit(1, "Gym", "💪"), Habit(2, "Read", "📖")), entries=entries or {})
    return AppState(data, view_date, TODAY)


class TestNavigation(unittest.TestCase):

    def test_shift_month_crosses_year(self):
        state = make_state(view_date=date(2026, 12, 15))
        self.assertEqual(shift_month(state, 1).view_date, date(2027, 1, 1))
        self.assertEqual(shift_month(state, -12).view_date, date(2025, 12, 1))
        back = shift_month(make_state(view_date=date(2026, 1, 31)), -1)
        self.assertEqual((back.year, back.month), (2025, 12))

    def test_shift_year_and_today(self):
        state = shift_year(make_state(), -1)
        self.assertEqual((state.year, state.month), (2025, 10))
        self.assertEqual(go_to_today(state).view_date, TODAY)
        # state is immutable; the original keeps its date
        self.assertEqual(make_state().view_date, TODAY)

    def test_week_blocks(self):
        self.assertEqual([b["span"] for b in week_blocks(2026, 10)], [7, 7, 7, 7, 3])
        self.assertEqual([b["span"] for b in week_blocks(2026, 2)], [7, 7, 7, 7])
        self.assertEqual(week_blocks(2026, 10)[-1]["label"], "Week 5")


class TestMonthlyView(unittest.TestCase):

    def setUp(self):
        self.entries = {
            "2026-10-19": DayEntry(frozenset({1}), mood=8),
            "2026-10-01": DayEntry(frozenset({1, 2, 99})),
        }

    def test_grid_and_summary(self):
        view = monthly_view(make_state(self.entries))
        self.assertEqual(view["title"], "October 2026")
        self.assertEqual(len(view["days"]), 31)
        self.assertTrue(view["days"][18]["isToday"])
        self.assertTrue(view["days"][19]["isFuture"])
        self.assertTrue(view["rows"][1]["cells"][0]["checked"])
        self.assertFalse(view["rows"][1]["cells"][18]["checked"])

        summary = view["summary"]
        # the orphaned id 99 is not counted
        self.assertEqual(summary["completed"], 3)
        self.assertEqual(summary["possible"], 62)
        self.assertEqual(summary["todayCompleted"], 1)
        self.assertEqual(summary["todayPercent"], 50.0)

        self.assertEqual(view["mentalState"]["mood"][18], 8)
        self.assertIsNone(view["mentalState"]["motivation"][18])
        self.assertEqual(view["analysis"][0]["actual"], 2)
        self.assertEqual(view["analysis"][0]["goal"], 31)

    def test_today_numbers_only_for_current_month(self):
        view = monthly_view(make_state(self.entries, view_date=date(2026, 9, 1)))
        self.assertEqual(view["summary"]["todayCompleted"], 0)
        self.assertEqual(view["summary"]["todayPercent"], 0.0)

    def test_no_habits(self):
        state = AppState(TrackerData(), TODAY, TODAY)
        view = monthly_view(state)
        self.assertEqual(view["rows"], [])
        self.assertEqual(view["summary"]["monthPercent"], 0.0)
        self.assertEqual(set(view["dailyPercents"]), {0.0})


class TestOtherViews(unittest.TestCase):

    def test_yearly(self):
        state = make_state({"2026-03-01": DayEntry(frozenset({1, 2}))})
        view = yearly_view(state)
        self.assertEqual(len(view["months"]), 12)
        self.assertEqual(view["bestMonth"]["name"], "March")

        fiscal = yearly_view(state, start_month=11)
        self.assertEqual((fiscal["months"][0]["year"], fiscal["months"][0]["month"]), (2025, 11))

    def test_progress(self):
        both = frozenset({1, 2})
        state = make_state({"2026-10-18": DayEntry(both), "2026-10-19": DayEntry(both)})
        view = progress_view(state)
        self.assertEqual(view["currentStreak"], 2)
        self.assertEqual(view["nextMilestone"], 3)
        self.assertEqual(view["daysToMilestone"], 1)
        self.assertEqual(view["message"], "1 more day to reach a 3-day streak.")
        self.assertEqual(view["unlockedCount"], 0)

    def test_settings(self):
        view = settings_view(make_state({"2026-10-01": DayEntry()}))
        self.assertEqual(view["loggedDays"], 1)
        self.assertEqual(view["habits"][0], {"id": 1, "name": "Gym", "icon": "💪"})


if __name__ == "__main__":
    unittest.main()
