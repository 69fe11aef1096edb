"""
Process-lifetime memo table for barrel export maps.

Keys are resolved entry file paths. Each key is built at most once: the
first caller runs the build, concurrent callers for the same key wait on a
per-key future and receive the identical object. A short global lock only
guards the key table, so builds for different keys never block each other.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future
from typing import Callable, Dict, Optional

from barrel.models import UNUSABLE, CachedExportMap

logger = logging.getLogger(__name__)


class ExportMapCache:
    """Single-flight cache from entry path to export map (or UNUSABLE)."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: Dict[str, Future[CachedExportMap]] = {}

    def get_or_build(
        self,
        key: str,
        build: Callable[[], CachedExportMap],
    ) -> CachedExportMap:
        """Return the cached outcome for ``key``, running ``build`` on first use.

        ``build`` is expected to convert its own failures into ``UNUSABLE``;
        if it raises anyway the error is logged and ``UNUSABLE`` is cached,
        so the outcome for a key is permanent either way.
        """
        with self._lock:
            future = self._entries.get(key)
            owner = future is None
            if owner:
                future = Future()
                self._entries[key] = future

        if not owner:
            return future.result()

        try:
            result = build()
        except Exception:
            logger.error("Export map build for %s raised; caching as unusable", key, exc_info=True)
            result = UNUSABLE
        except BaseException as exc:
            # Interpreter shutdown or interrupt: release waiters, forget the key
            with self._lock:
                self._entries.pop(key, None)
            future.set_exception(exc)
            raise

        future.set_result(result)
        return result

    def peek(self, key: str) -> Optional[CachedExportMap]:
        """Return the completed outcome for ``key`` without building, else None."""
        with self._lock:
            future = self._entries.get(key)
        if future is None or not future.done():
            return None
        return future.result()

    def invalidate(self, key: str) -> bool:
        """Drop a completed entry so the next request rebuilds it.

        Hook for watch-mode hosts reacting to entry file changes. In-flight
        builds are left alone. Returns True if an entry was removed.
        """
        with self._lock:
            future = self._entries.get(key)
            if future is None or not future.done():
                return False
            del self._entries[key]
        logger.debug("Invalidated export map cache entry %s", key)
        return True

    def clear(self) -> None:
        with self._lock:
            self._entries = {
                key: future for key, future in self._entries.items() if not future.done()
            }

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


# Shared by every builder call that does not pass its own cache
DEFAULT_CACHE = ExportMapCache()
