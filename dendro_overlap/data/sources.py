"""
Read an input artifact from a local path or an http(s) URL.

- Local paths are read as UTF-8 text
- Remote sources are fetched with httpx and retried with exponential backoff
  on transport errors and 5xx responses
- 4xx responses are not retried
- Every failure surfaces as LoadError naming the source
"""

import logging
import time
from pathlib import Path
from typing import Optional

import httpx

from dendro_overlap.errors import LoadError

# Max retries and base delay for exponential backoff
_MAX_RETRIES = 3
_BASE_DELAY = 0.5  # seconds; doubles each attempt: 0.5, 1

log = logging.getLogger(__name__)


def is_remote(location: str) -> bool:
    return location.startswith(("http://", "https://"))


def read_artifact(location: str, timeout: float = 30.0, client: Optional[httpx.Client] = None) -> str:
    """Return the artifact body as text or raise LoadError."""
    if is_remote(location):
        return _fetch_remote(location, timeout, client)

    path = Path(location).expanduser()
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise LoadError(f"Could not read {path}: {exc}", source=location) from exc


def _fetch_remote(url: str, timeout: float, client: Optional[httpx.Client]) -> str:
    owns_client = client is None
    http = client or httpx.Client(timeout=timeout)
    last_exc: Optional[Exception] = None
    try:
        for attempt in range(1, _MAX_RETRIES + 1):
            try:
                response = http.get(url)
            except httpx.TransportError as exc:
                last_exc = exc
            else:
                if response.status_code < 400:
                    return response.text
                if response.status_code < 500:
                    raise LoadError(
                        f"Could not load {url} (HTTP {response.status_code})", source=url
                    )
                last_exc = httpx.HTTPStatusError(
                    f"HTTP {response.status_code}", request=response.request, response=response
                )

            if attempt < _MAX_RETRIES:
                delay = _BASE_DELAY * (2 ** (attempt - 1))
                log.warning(
                    "Attempt %d/%d failed for %s (%s), retrying in %.1fs",
                    attempt, _MAX_RETRIES, url, last_exc, delay,
                )
                time.sleep(delay)
    finally:
        if owns_client:
            http.close()

    log.error("All %d attempts failed for %s: %s", _MAX_RETRIES, url, last_exc)
    raise LoadError(f"Could not load {url}: {last_exc}", source=url) from last_exc
