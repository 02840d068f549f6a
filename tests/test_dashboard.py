from datetime import date, timedelta
from pathlib import Path

import pytest

testing = pytest.importorskip("streamlit.testing.v1")
import streamlit as st  # noqa: E402

from habitgrid.local_storage import LocalStorage  # noqa: E402
from habitgrid.models import DayEntry, Habit, TrackerData, date_key  # noqa: E402

DASHBOARD = str(Path(__file__).resolve().parents[1] / "habitgrid" / "dashboard.py")


@pytest.fixture
def db_url(tmp_path, monkeypatch):
    url = f"sqlite:///{tmp_path / 'local.db'}"
    monkeypatch.setenv("HABITGRID_LOCAL_DB", url)
    monkeypatch.delenv("HABITGRID_REMOTE_URL", raising=False)
    # the manager is a cached resource; start every test from the tmp database
    st.cache_resource.clear()
    yield url
    st.cache_resource.clear()


@pytest.fixture
def app(db_url):
    return testing.AppTest.from_file(DASHBOARD, default_timeout=60)


def test_dashboard_renders_every_view(app):
    app.run()
    assert not app.exception
    assert any("Streaks" in s.value for s in app.subheader)

    app.sidebar.radio[0].set_value("Yearly").run()
    assert not app.exception

    app.sidebar.radio[0].set_value("Settings").run()
    assert not app.exception
    assert any("logged days" in c.value for c in app.caption)


def test_mood_for_past_day_is_saved(app, db_url):
    past = date.today() - timedelta(days=3)
    key = date_key(past)
    LocalStorage(db_url).save(TrackerData(
        habits=(Habit(1, "Gym", "💪"),),
        entries={key: DayEntry(mood=2, motivation=2)},
    ))

    app.run()
    app.date_input(key="mental-day").set_value(past).run()
    assert not app.exception
    assert app.selectbox(key=f"mood-{key}").value == 2

    app.selectbox(key=f"mood-{key}").set_value(3)
    next(b for b in app.button if b.label == "Save").click().run()
    assert not app.exception
    assert any(s.value == "Saved" for s in app.success)

    assert LocalStorage(db_url).load().entry(key) == DayEntry(mood=3, motivation=2)
