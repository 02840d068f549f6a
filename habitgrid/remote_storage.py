# remote_storage.py
import logging
from typing import Optional

import requests

from .models import SchemaError, TrackerData, from_document, to_document

logger = logging.getLogger(__name__)

DATA_ENDPOINT = "/api/data"


class RemoteStorage:
    """
    Server-backed storage: the whole document is fetched with GET and
    replaced with POST on a single endpoint. No auth, last writer wins.
    """

    def __init__(self, base_url: str, timeout: float = 5.0, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    @property
    def url(self) -> str:
        return f"{self.base_url}{DATA_ENDPOINT}"

    def is_available(self) -> bool:
        """Probe the data endpoint once; used to pick the backend at startup."""
        try:
            response = self.session.get(self.url, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.info("Backend not available, using local storage (%s)", e)
            return False
        return response.ok

    def load(self) -> Optional[TrackerData]:
        try:
            response = self.session.get(self.url, timeout=self.timeout)
            response.raise_for_status()
            return from_document(response.json())
        except requests.exceptions.RequestException as e:
            logger.error("Error loading from backend: %s", e)
        except (ValueError, SchemaError) as e:
            # requests raises a ValueError subclass for invalid JSON bodies
            logger.warning("Backend returned malformed data: %s", e)
        return None

    def save(self, data: TrackerData) -> bool:
        try:
            response = self.session.post(self.url, json=to_document(data), timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.error("Error saving to backend: %s", e)
            return False
        if not response.ok:
            logger.error("Backend rejected save: %s %s", response.status_code, response.text[:200])
            return False
        return True
