"""
Snapshot Loader

Reads a saved page from disk or fetches it over HTTP(S).

GUARANTEES:
===========
1. Failures surface as SnapshotUnavailable, never as a silent empty page
2. Redirects are followed; HTTP status >= 400 is a failure
"""

from __future__ import annotations
from pathlib import Path
import logging

import httpx

from ..contracts.base import SnapshotUnavailable


_logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "Reconstitute/0.1"


def is_remote(location: str) -> bool:
    return location.startswith(('http://', 'https://'))


def fetch_snapshot(
    url: str,
    timeout: float = 30.0,
    user_agent: str = DEFAULT_USER_AGENT
) -> str:
    """Fetch a snapshot over HTTP(S) and return its decoded text."""
    try:
        with httpx.Client(timeout=timeout) as client:
            response = client.get(
                url,
                headers={'User-Agent': user_agent},
                follow_redirects=True
            )
    except httpx.TimeoutException as e:
        raise SnapshotUnavailable(f"timed out fetching {url}") from e
    except httpx.HTTPError as e:
        raise SnapshotUnavailable(f"network error fetching {url}: {e}") from e

    if response.status_code >= 400:
        raise SnapshotUnavailable(f"HTTP {response.status_code} fetching {url}")

    _logger.debug("fetched %s (%d bytes)", url, len(response.content))
    return response.text


def read_snapshot(path: Path) -> str:
    try:
        return Path(path).read_text(encoding='utf-8', errors='replace')
    except OSError as e:
        raise SnapshotUnavailable(f"cannot read {path}: {e}") from e


def load_snapshot(location: str, timeout: float = 30.0) -> str:
    """Load a snapshot from a URL or a local path."""
    if is_remote(location):
        return fetch_snapshot(location, timeout=timeout)
    return read_snapshot(Path(location))
