"""View cache — path-keyed, in-process cache for public catalog payloads.

Entries expire after ``VIEW_CACHE_TTL_SECONDS``; mutations drop them early via
``invalidate_path``. ``layout=True`` drops every key at or beneath the path,
so invalidating ``/courses/<id>`` with it also clears that course's lesson
views.
"""

import logging
import threading
import time
from typing import Any, Callable, Optional

from learnhub.config import settings

logger = logging.getLogger(__name__)


class ViewCache:
    def __init__(self, ttl_seconds: Optional[int] = None, clock: Callable[[], float] = time.monotonic):
        self._ttl = settings.VIEW_CACHE_TTL_SECONDS if ttl_seconds is None else ttl_seconds
        self._clock = clock
        self._entries: dict[str, tuple[float, Any]] = {}
        # Bumped by every invalidation; a build that straddles one is not stored.
        self._generation = 0
        self._lock = threading.Lock()

    @property
    def generation(self) -> int:
        with self._lock:
            return self._generation

    def get(self, path: str) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(path)
            if entry is None:
                return None
            expires_at, value = entry
            if self._clock() >= expires_at:
                del self._entries[path]
                return None
            return value

    def set(self, path: str, value: Any, generation: Optional[int] = None) -> bool:
        """Store ``value``. With ``generation``, skip the store if an
        invalidation happened since that generation was read."""
        with self._lock:
            if generation is not None and generation != self._generation:
                return False
            self._entries[path] = (self._clock() + self._ttl, value)
            return True

    def get_or_build(self, path: str, build: Callable[[], Any]) -> Any:
        cached = self.get(path)
        if cached is not None:
            return cached
        generation = self.generation
        value = build()
        if not self.set(path, value, generation=generation):
            logger.debug("Discarded view for %s built across an invalidation", path)
        return value

    def invalidate_path(self, path: str, layout: bool = False) -> int:
        """Drop cached views for ``path``; returns how many entries went away."""
        path = path.rstrip("/") or "/"
        prefix = path + "/"
        with self._lock:
            self._generation += 1
            if layout:
                doomed = [k for k in self._entries if k == path or k.startswith(prefix)]
            else:
                doomed = [path] if path in self._entries else []
            for key in doomed:
                del self._entries[key]
        if doomed:
            logger.debug("Invalidated %d cached view(s) under %s", len(doomed), path)
        return len(doomed)

    def clear(self) -> None:
        with self._lock:
            self._generation += 1
            self._entries.clear()

    def __contains__(self, path: str) -> bool:
        return self.get(path) is not None


view_cache = ViewCache()


# ── Path helpers ─────────────────────────────────────────────────────────────

def course_path(course_id: str) -> str:
    return f"/courses/{course_id}"


def lesson_path(course_id: str, lesson_id: str) -> str:
    return f"/courses/{course_id}/lessons/{lesson_id}"


def admin_edit_path(course_id: str) -> str:
    return f"/admin/courses/{course_id}/edit"


def invalidate_course_views(course_id: str) -> None:
    """Drop every cached view that renders this course's curriculum."""
    view_cache.invalidate_path(course_path(course_id), layout=True)
    view_cache.invalidate_path(admin_edit_path(course_id))


def invalidate_catalog() -> None:
    """Drop every cached course view (category/tag renames show on all of them)."""
    view_cache.invalidate_path("/courses", layout=True)
    view_cache.invalidate_path("/admin/courses", layout=True)
