"""
Base API client for read-only anime catalogs
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Generic, TypeVar

import requests

from .rate_limit import RequestSequencer

logger = logging.getLogger(__name__)

# Generic type for catalog items (AnimeRecord, ...)
T = TypeVar("T")


class BaseCatalogClient(ABC, Generic[T]):
    """Base client for catalog JSON APIs, sequenced through a RequestSequencer"""

    def __init__(
        self,
        url: str,
        sequencer: RequestSequencer | None = None,
        timeout: float = 10,
    ):
        self.url = url.rstrip("/")
        self.timeout = timeout
        self.sequencer = sequencer or RequestSequencer()
        self.session = requests.Session()
        self.session.headers.update({"Accept": "application/json"})

    def _get(self, endpoint: str, params: dict | None = None) -> Any:
        """Perform a GET request to the API, waiting for the sequencer first"""
        self.sequencer.acquire()
        url = f"{self.url}/{endpoint.lstrip('/')}"
        response = self.session.get(url, params=params, timeout=self.timeout)
        response.raise_for_status()
        return response.json()

    def test_connection(self) -> bool:
        """Test the connection to the catalog"""
        try:
            self._get(self.health_endpoint)
            return True
        except requests.exceptions.RequestException as e:
            logger.error(f"Connection test failed: {e}")
            return False
        except ValueError as e:
            logger.error(f"Connection test returned invalid JSON: {e}")
            return False

    @property
    def health_endpoint(self) -> str:
        return ""

    @abstractmethod
    def fetch(self, item_id: int) -> T | None:
        """Fetch one item by id - must be implemented by subclasses"""
        pass

    @abstractmethod
    def search(self, query: str, limit: int = 10) -> list[T]:
        """Search items by title - must be implemented by subclasses"""
        pass
