# dashboard.py
import json
from datetime import date

import streamlit as st

from habitgrid.config import load_settings, setup_logging
from habitgrid.habit_manager import HabitManager
from habitgrid.models import MENTAL_STATE_KINDS, SCORE_MAX, SCORE_MIN, date_key
from habitgrid.views import (
    AppState, go_to_today, monthly_view, progress_view, settings_view, shift_month,
    shift_year, yearly_view,
)

st.set_page_config(page_title="Habit Tracker", layout="wide", page_icon="✅")

settings = load_settings()


@st.cache_resource
def get_manager() -> HabitManager:
    setup_logging(settings)
    return HabitManager.from_settings(settings)


manager = get_manager()
if "view_date" not in st.session_state:
    st.session_state.view_date = date.today()


def current_state() -> AppState:
    return AppState(manager.data, st.session_state.view_date, date.today())


def navigate(move, *args):
    st.session_state.view_date = move(current_state(), *args).view_date


def on_toggle(habit_id: int, key: str):
    manager.toggle_habit(habit_id, key)


# ---- sidebar
view_name = st.sidebar.radio("View", ["Monthly", "Yearly", "Settings"])
st.sidebar.caption("Storage: " + ("server + local" if manager.uses_remote else "local only"))


# ---- monthly
def render_monthly():
    view = monthly_view(current_state())
    c1, c2, c3, c4 = st.columns([1, 1, 1, 4])
    c1.button("◀", on_click=navigate, args=(shift_month, -1), key="prev-month")
    c2.button("Today", on_click=navigate, args=(go_to_today,), key="go-today")
    c3.button("▶", on_click=navigate, args=(shift_month, 1), key="next-month")
    c4.subheader(view["title"])

    summary = view["summary"]
    m1, m2, m3 = st.columns(3)
    m1.metric("Habits", summary["totalHabits"])
    m2.metric("Completed this month", summary["completed"])
    m3.metric("Today's progress", f"{summary['todayPercent']:.0f}%")
    st.progress(int(summary["todayPercent"]))

    st.markdown(" · ".join(f"**{b['label']}** ({b['span']}d)" for b in view["weekBlocks"]))
    widths = [4] + [1] * len(view["days"])
    header = st.columns(widths)
    header[0].markdown("**Habit**")
    for col, day in zip(header[1:], view["days"]):
        col.caption(f"{day['weekday'][:2]}\n{day['day']}")
    for row in view["rows"]:
        cols = st.columns(widths)
        cols[0].write(f"{row['habit']['icon']} {row['habit']['name']}")
        for col, cell in zip(cols[1:], row["cells"]):
            col.checkbox(
                "done", value=cell["checked"], disabled=cell["isFuture"],
                key=f"cell-{row['habit']['id']}-{cell['key']}",
                on_change=on_toggle, args=(row["habit"]["id"], cell["key"]),
                label_visibility="collapsed",
            )

    st.subheader("Daily completion %")
    st.line_chart({"Daily Completion %": view["dailyPercents"]})

    st.subheader("Mental state")
    # keep outside the form so a new day reloads its scores
    day = st.date_input("Day", value=date.today(), max_value=date.today(), key="mental-day")
    day_key = date_key(day)
    entry = manager.entry(day_key)
    with st.form("mental-state"):
        choices = [None] + list(range(SCORE_MIN, SCORE_MAX + 1))
        scores = {}
        for kind in MENTAL_STATE_KINDS:
            current = getattr(entry, kind) if entry else None
            chosen = st.selectbox(kind.title(), choices, index=choices.index(current),
                                  format_func=lambda v: "-" if v is None else str(v),
                                  key=f"{kind}-{day_key}")
            scores[kind] = (current, chosen)
        if st.form_submit_button("Save"):
            for kind, (current, chosen) in scores.items():
                if chosen != current:
                    manager.set_mental_state(day_key, kind, chosen)
            st.success("Saved")
    st.line_chart({"Mood (1-10)": view["mentalState"]["mood"],
                   "Motivation (1-10)": view["mentalState"]["motivation"]})

    st.subheader("Analysis")
    st.dataframe([
        {"Habit": f"{r['habit']['icon']} {r['habit']['name']}", "Goal": r["goal"],
         "Actual": r["actual"], "Progress": f"{r['progress']:.0f}%"}
        for r in view["analysis"]
    ])

    render_progress()


def render_progress():
    view = progress_view(current_state())
    st.subheader("Streaks")
    s1, s2, s3 = st.columns(3)
    s1.metric("Current streak", view["currentStreak"])
    s2.metric("Longest streak", view["longestStreak"])
    s3.metric("Next milestone", view["nextMilestone"] or "-")
    st.info(view["message"])

    st.subheader(f"Achievements ({view['unlockedCount']}/{len(view['achievements'])})")
    for a in view["achievements"]:
        mark = "✅" if a["unlocked"] else "🔒"
        st.write(f"{mark} {a['icon']} **{a['name']}** - {a['description']}")
        st.progress(int(a["progress"]))


# ---- yearly
def render_yearly():
    view = yearly_view(current_state(), settings.year_start_month)
    c1, c2, c3 = st.columns([1, 1, 6])
    c1.button("◀", on_click=navigate, args=(shift_year, -1), key="prev-year")
    c2.button("▶", on_click=navigate, args=(shift_year, 1), key="next-year")
    c3.subheader(str(view["year"]))

    st.line_chart({"Monthly Progress %": [m["percent"] for m in view["months"]]})
    cols = st.columns(4)
    for i, m in enumerate(view["months"]):
        with cols[i % 4]:
            st.markdown(f"#### {m['name']} {m['year']}")
            st.write(f"Number of Habits: {view['totalHabits']}")
            st.write(f"Completed: {m['completedCount']}")
            st.write(f"Progress: {m['percent']:.2f}%")
    if view["bestMonth"] and view["bestMonth"]["percent"] > 0:
        best = view["bestMonth"]
        st.success(f"Best month: {best['name']} {best['year']} ({best['percent']:.2f}%)")


# ---- settings
def render_settings():
    view = settings_view(current_state())
    st.subheader("Habits")
    for habit in view["habits"]:
        c1, c2 = st.columns([5, 1])
        c1.write(f"{habit['icon']} {habit['name']}")
        if c2.button("Delete", key=f"delete-{habit['id']}"):
            manager.delete_habit(habit["id"])
            st.rerun()

    with st.expander("➕ Add Habit"):
        name = st.text_input("Habit name")
        icon = st.text_input("Icon", value="")
        if st.button("Add", disabled=not name):
            ok, msg = manager.add_habit(name, icon)
            (st.success if ok else st.error)(msg)
            st.rerun()

    st.subheader("Data")
    st.caption(f"{view['loggedDays']} logged days")
    export = manager.export_document()
    st.download_button("Export data", json.dumps(export, indent=2, ensure_ascii=False),
                       file_name=f"habit-tracker-export-{date.today().isoformat()}.json",
                       mime="application/json")

    uploaded = st.file_uploader("Import data", type="json")
    if uploaded is not None and st.button("Import"):
        try:
            ok, msg = manager.import_document(json.loads(uploaded.getvalue()))
        except json.JSONDecodeError as e:
            ok, msg = False, f"Error importing data: {e}"
        (st.success if ok else st.error)(msg)

    confirm = st.checkbox("I understand this cannot be undone")
    if st.button("Clear all data", disabled=not confirm):
        manager.clear_data()
        st.success("All data cleared!")


if view_name == "Monthly":
    render_monthly()
elif view_name == "Yearly":
    render_yearly()
else:
    render_settings()
