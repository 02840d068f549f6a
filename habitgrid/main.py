# main.py
import argparse
import logging
import subprocess
import sys
from pathlib import Path

from .config import load_settings, setup_logging

logger = logging.getLogger(__name__)

DASHBOARD_SCRIPT = Path(__file__).with_name("dashboard.py")


def serve(settings):
    from .web_app import create_app

    app = create_app(settings)
    logger.info("Habit tracker server running on http://%s:%s", settings.host, settings.port)
    logger.info("Data file: %s", Path(settings.data_file).resolve())
    app.run(host=settings.host, port=settings.port, debug=settings.debug)


def run_dashboard(extra_args=()):
    """Launch the Streamlit dashboard in a child process."""
    cmd = [sys.executable, "-m", "streamlit", "run", str(DASHBOARD_SCRIPT), *extra_args]
    logger.info("Starting dashboard: %s", " ".join(cmd))
    return subprocess.call(cmd)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="habitgrid", description="Monthly habit tracker")
    parser.add_argument("--env-file", help="path to a .env file with HABITGRID_* settings")
    sub = parser.add_subparsers(dest="command")

    serve_parser = sub.add_parser("serve", help="run the JSON data server")
    serve_parser.add_argument("--host")
    serve_parser.add_argument("--port", type=int)
    serve_parser.add_argument("--data-file")

    sub.add_parser("dashboard", help="open the Streamlit dashboard")
    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args, extra = parser.parse_known_args(argv)

    settings = load_settings(args.env_file)
    setup_logging(settings)

    if args.command == "dashboard":
        return run_dashboard(extra)
    if extra:
        parser.error(f"unrecognized arguments: {' '.join(extra)}")

    if args.command in (None, "serve"):
        if getattr(args, "host", None):
            settings.host = args.host
        if getattr(args, "port", None):
            settings.port = args.port
        if getattr(args, "data_file", None):
            settings.data_file = Path(args.data_file)
        serve(settings)
    return 0


if __name__ == "__main__":
    sys.exit(main())
