# config.py
import logging
import os
from dataclasses import dataclass
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


@dataclass
class Settings:
    data_file: Path = Path("data.json")
    local_db_url: str = "sqlite:///habitgrid_local.db"
    remote_url: Optional[str] = None
    request_timeout: float = 5.0
    host: str = "127.0.0.1"
    port: int = 3000
    debug: bool = False
    log_level: str = "INFO"
    log_file: Optional[Path] = None
    year_start_month: int = 1


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def load_settings(env_file: Optional[str] = None) -> Settings:
    """Read settings from the environment (and a .env file if present)."""
    load_dotenv(env_file)

    log_level = os.getenv("HABITGRID_LOG_LEVEL", "INFO").upper()
    if log_level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
        raise ValueError(f"Invalid HABITGRID_LOG_LEVEL: {log_level}")

    year_start_month = int(os.getenv("HABITGRID_YEAR_START_MONTH", "1"))
    if not 1 <= year_start_month <= 12:
        raise ValueError("HABITGRID_YEAR_START_MONTH must be between 1 and 12")

    port = int(os.getenv("HABITGRID_PORT", "3000"))
    timeout = float(os.getenv("HABITGRID_REQUEST_TIMEOUT", "5"))
    if timeout <= 0:
        raise ValueError("HABITGRID_REQUEST_TIMEOUT must be positive")

    log_file = os.getenv("HABITGRID_LOG_FILE")
    return Settings(
        data_file=Path(os.getenv("HABITGRID_DATA_FILE", "data.json")),
        local_db_url=os.getenv("HABITGRID_LOCAL_DB", "sqlite:///habitgrid_local.db"),
        remote_url=os.getenv("HABITGRID_REMOTE_URL") or None,
        request_timeout=timeout,
        host=os.getenv("HABITGRID_HOST", "127.0.0.1"),
        port=port,
        debug=_env_bool("HABITGRID_DEBUG"),
        log_level=log_level,
        log_file=Path(log_file) if log_file else None,
        year_start_month=year_start_month,
    )


def setup_logging(settings: Settings, max_bytes: int = 10_000_000, backup_count: int = 5):
    root = logging.getLogger()
    root.setLevel(settings.log_level)
    formatter = logging.Formatter(LOG_FORMAT)

    if not any(isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
               for h in root.handlers):
        console = logging.StreamHandler()
        console.setFormatter(formatter)
        root.addHandler(console)

    if settings.log_file:
        settings.log_file.parent.mkdir(exist_ok=True, parents=True)
        handler = RotatingFileHandler(settings.log_file, maxBytes=max_bytes,
                                      backupCount=backup_count, encoding="utf-8")
        handler.setFormatter(formatter)
        root.addHandler(handler)
    return root
