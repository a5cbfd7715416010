"""Data source gateway — loads the JSON envelopes behind the flowchart.

A location is either an http(s) URL, fetched through a ``requests.Session``,
or a local file path (the bundled data under ``DATA_DIR``). Every call
returns a ``DataSourceResult``; network errors, non-2xx responses,
unreadable files and invalid JSON are captured in ``.error``.

No retries: a failed fetch is terminal for that load cycle.
"""

from __future__ import annotations

import json
import logging
import time
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

import requests

logger = logging.getLogger(__name__)

_DEFAULT_TIMEOUT = 10  # seconds


class DataSourceResult:
    """Typed result returned by DataSourceGateway.fetch().

    Always check .ok before accessing .data.
    """

    __slots__ = ("ok", "status_code", "data", "error", "duration_ms", "source")

    def __init__(
        self,
        *,
        ok: bool,
        source: str,
        data: Any = None,
        error: str | None = None,
        status_code: int | None = None,
        duration_ms: int = 0,
    ) -> None:
        self.ok = ok
        self.source = source
        self.data = data
        self.error = error
        self.status_code = status_code
        self.duration_ms = duration_ms

    def to_log_dict(self) -> dict:
        """Structured representation for logging (payload excluded)."""
        return {
            "ok": self.ok,
            "source": self.source,
            "status_code": self.status_code,
            "error": self.error,
            "duration_ms": self.duration_ms,
        }


def is_remote(location: str) -> bool:
    return urlparse(location).scheme in ("http", "https")


class DataSourceGateway:
    """Fetches JSON envelopes from URLs or local files.

    Usage:
        gw = DataSourceGateway(timeout=5)
        result = gw.fetch("https://example.com/data/projects.json")
        if result.ok:
            payload = result.data
    """

    def __init__(
        self,
        session: requests.Session | None = None,
        timeout: int = _DEFAULT_TIMEOUT,
    ) -> None:
        self.session = session or requests.Session()
        self.timeout = timeout

    def fetch(self, location: str) -> DataSourceResult:
        t0 = time.perf_counter()
        if is_remote(location):
            result = self._fetch_http(location)
        else:
            result = self._read_file(location)
        result.duration_ms = int((time.perf_counter() - t0) * 1000)

        if result.ok:
            logger.debug("Data source loaded source=%s duration_ms=%s",
                         location, result.duration_ms, extra={"source": location})
        else:
            logger.warning("Data source failed source=%s error=%s",
                           location, result.error, extra={"source": location})
        return result

    def _fetch_http(self, url: str) -> DataSourceResult:
        try:
            resp = self.session.get(
                url,
                headers={"Accept": "application/json"},
                timeout=self.timeout,
            )
        except requests.Timeout:
            return DataSourceResult(ok=False, source=url, error=f"Timed out after {self.timeout}s")
        except requests.RequestException as exc:
            return DataSourceResult(ok=False, source=url, error=f"Request failed: {exc}")

        if not resp.ok:
            return DataSourceResult(
                ok=False,
                source=url,
                status_code=resp.status_code,
                error=f"HTTP {resp.status_code}",
            )
        try:
            payload = resp.json()
        except ValueError as exc:
            return DataSourceResult(
                ok=False,
                source=url,
                status_code=resp.status_code,
                error=f"Invalid JSON: {exc}",
            )
        return DataSourceResult(ok=True, source=url, status_code=resp.status_code, data=payload)

    def _read_file(self, location: str) -> DataSourceResult:
        path = Path(location[len("file://"):] if location.startswith("file://") else location)
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except OSError as exc:
            return DataSourceResult(ok=False, source=location, error=f"Cannot read file: {exc}")
        except ValueError as exc:
            return DataSourceResult(ok=False, source=location, error=f"Invalid JSON: {exc}")
        return DataSourceResult(ok=True, source=location, data=payload)
