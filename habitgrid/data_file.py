# data_file.py
import json
import logging
import os
from pathlib import Path
from typing import Union

from .models import SchemaError, TrackerData, from_document, to_document

logger = logging.getLogger(__name__)


class DataFile:
    """The server's single JSON file. No locking; last writer wins."""

    def __init__(self, path: Union[str, Path] = "data.json"):
        self.path = Path(path)

    def load(self) -> TrackerData:
        """Missing or unreadable file means no prior data."""
        if not self.path.exists():
            return TrackerData()
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                return from_document(json.load(f))
        except (json.JSONDecodeError, SchemaError, UnicodeDecodeError) as e:
            logger.warning("Ignoring malformed data file %s: %s", self.path, e)
            return TrackerData()

    def save(self, data: TrackerData) -> bool:
        if self.path.parent and not self.path.parent.exists():
            self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(to_document(data), f, indent=2, ensure_ascii=False)
        os.replace(tmp_path, self.path)
        return True
