# services/http.py
import time
from typing import Any, Dict, Optional

import requests
import structlog

DEFAULT_TIMEOUT = 10
DEFAULT_MAX_RETRIES = 3
DEFAULT_UA = "CarPriceMatch/1.0"

logger = structlog.get_logger(__name__)


class SourceError(RuntimeError):
    """Remote data source failed (HTTP status, network or bad JSON)."""
    pass


class Http:
    """
    Thin requests wrapper: User-Agent header, timeout, retries with linear backoff.
    Used only to fetch the dataset / label documents when they live behind a URL.
    """
    def __init__(self, user_agent: str = DEFAULT_UA, timeout: int = DEFAULT_TIMEOUT,
                 max_retries: int = DEFAULT_MAX_RETRIES, backoff: float = 0.6):
        self.user_agent = user_agent or DEFAULT_UA
        self.timeout = timeout
        self.max_retries = max_retries
        self.backoff = backoff

    def get_json(self, url: str, params: Optional[Dict[str, Any]] = None,
                 headers: Optional[Dict[str, str]] = None, timeout: Optional[int] = None) -> Any:
        ua_headers = {"User-Agent": self.user_agent, "Accept": "application/json"}
        if headers:
            ua_headers.update(headers)

        use_timeout = timeout if timeout is not None else self.timeout
        attempts = max(self.max_retries or 1, 1)

        for attempt in range(1, attempts + 1):
            try:
                r = requests.get(url, params=params, headers=ua_headers, timeout=use_timeout)
                if r.status_code >= 400:
                    raise SourceError(f"{url} -> HTTP {r.status_code}: {r.text[:200]}")
                return r.json()
            except (requests.RequestException, ValueError, SourceError) as e:
                logger.warning("http.get_failed", url=url, attempt=attempt, error=str(e))
                if attempt < attempts:
                    time.sleep(self.backoff * attempt)
                elif isinstance(e, SourceError):
                    raise
                else:
                    raise SourceError(f"Failed {url}: {e}") from e


def is_url(source: str) -> bool:
    s = str(source).lower()
    return s.startswith("http://") or s.startswith("https://")
