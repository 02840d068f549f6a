# stats_bp.py
from flask import Blueprint, current_app, jsonify, request

from .data_file import DataFile
from .models import parse_date_key, parse_month_key
from .views import AppState, monthly_view, progress_view, set_month, yearly_view

stats_bp = Blueprint("stats", __name__, url_prefix="/api/stats")


def _load_state():
    """
    Build the AppState for a request. Local helper to avoid importing from
    web_app (no circular imports).

    Query params: date=YYYY-MM-DD (defaults to today), month=YYYY-MM
    (defaults to the month of `date`).
    """
    raw_date = request.args.get("date")
    today = parse_date_key(raw_date) if raw_date else current_app.config["CLOCK"]()
    state = AppState(DataFile(current_app.config["DATA_FILE"]).load(), today, today)
    raw_month = request.args.get("month")
    if raw_month:
        state = set_month(state, *parse_month_key(raw_month))
    return state


@stats_bp.errorhandler(ValueError)
def handle_bad_param(e):
    return jsonify({"error": str(e)}), 400


@stats_bp.route("/summary", methods=["GET"])
def summary():
    state = _load_state()
    view = monthly_view(state)
    return jsonify({
        "month": view["monthKey"],
        "title": view["title"],
        "summary": view["summary"],
        "dailyPercents": view["dailyPercents"],
        "analysis": view["analysis"],
        **progress_view(state),
    })


@stats_bp.route("/streaks", methods=["GET"])
def streaks():
    view = progress_view(_load_state())
    return jsonify({k: view[k] for k in
                    ("currentStreak", "longestStreak", "nextMilestone", "daysToMilestone", "message")})


@stats_bp.route("/achievements", methods=["GET"])
def achievements():
    view = progress_view(_load_state())
    return jsonify({"achievements": view["achievements"], "unlockedCount": view["unlockedCount"]})


@stats_bp.route("/yearly/<int:year>", methods=["GET"])
def yearly(year):
    start_month = request.args.get("start_month", type=int) or current_app.config["YEAR_START_MONTH"]
    state = _load_state()
    return jsonify(yearly_view(set_month(state, year, 1), start_month))
