"""File-based introspection cache with TTL expiry.

Cache layout:
    ~/.cache/dota-graphql-mcp/{host}-{hash}/
        _meta.json           <- { "fetched_at": <epoch>, "endpoint": <url> }
        introspection.json   <- { "__schema": { ... } }
"""

from __future__ import annotations

import hashlib
import json
import logging
import os
import re
import shutil
import time
from pathlib import Path
from urllib.parse import urlparse

log = logging.getLogger("dota-graphql-mcp")

_DEFAULT_CACHE_DIR = Path.home() / ".cache" / "dota-graphql-mcp"
_DEFAULT_TTL_HOURS = 24
_INTROSPECTION_FILE = "introspection.json"
_META_FILE = "_meta.json"


def _cache_dir() -> Path:
    return Path(os.environ.get("CACHE_DIR", str(_DEFAULT_CACHE_DIR)))


def _ttl_seconds() -> float:
    hours = float(os.environ.get("CACHE_TTL_HOURS", str(_DEFAULT_TTL_HOURS)))
    return hours * 3600


def _endpoint_dir(endpoint: str) -> Path:
    """One directory per endpoint: readable host prefix plus a short URL hash."""
    host = re.sub(r"[^a-zA-Z0-9_.-]", "_", urlparse(endpoint).netloc) or "local"
    digest = hashlib.sha256(endpoint.encode("utf-8")).hexdigest()[:12]
    return _cache_dir() / f"{host}-{digest}"


def is_cached(endpoint: str) -> bool:
    """Return True if an introspection result for *endpoint* is cached and not expired."""
    base = _endpoint_dir(endpoint)
    meta = base / _META_FILE
    if not meta.exists() or not (base / _INTROSPECTION_FILE).exists():
        return False
    try:
        data = json.loads(meta.read_text())
        fetched_at = data.get("fetched_at", 0)
        return (time.time() - fetched_at) < _ttl_seconds()
    except (json.JSONDecodeError, OSError):
        return False


def save_introspection(endpoint: str, payload: dict) -> None:
    """Persist a raw introspection payload and stamp the fetch time."""
    base = _endpoint_dir(endpoint)
    base.mkdir(parents=True, exist_ok=True)
    (base / _INTROSPECTION_FILE).write_text(json.dumps(payload), encoding="utf-8")
    (base / _META_FILE).write_text(json.dumps({"fetched_at": time.time(), "endpoint": endpoint}))


def load_introspection(endpoint: str) -> dict | None:
    """Load the cached introspection payload for *endpoint*, ignoring expiry.

    Returns None when nothing is cached or the file cannot be decoded.
    """
    path = _endpoint_dir(endpoint) / _INTROSPECTION_FILE
    if not path.exists():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError):
        log.warning("Failed to load introspection cache for %s", endpoint, exc_info=True)
        return None
    return data if isinstance(data, dict) else None


def clear(endpoint: str) -> None:
    """Drop everything cached for *endpoint*."""
    shutil.rmtree(_endpoint_dir(endpoint), ignore_errors=True)
