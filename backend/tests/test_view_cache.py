"""Tests for the path-keyed view cache."""

from learnhub.services.view_cache import (
    ViewCache,
    admin_edit_path,
    course_path,
    invalidate_course_views,
    lesson_path,
    view_cache,
)


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


class TestViewCache:
    """Test cache storage, expiry and path invalidation."""

    def test_get_or_build_builds_once(self):
        cache = ViewCache(ttl_seconds=60)
        calls = []

        def build():
            calls.append(1)
            return {"v": len(calls)}

        assert cache.get_or_build("/courses/1", build) == {"v": 1}
        assert cache.get_or_build("/courses/1", build) == {"v": 1}
        assert len(calls) == 1

    def test_entries_expire_after_ttl(self):
        clock = FakeClock()
        cache = ViewCache(ttl_seconds=10, clock=clock)
        cache.set("/courses/1", "payload")
        clock.now = 9.9
        assert cache.get("/courses/1") == "payload"
        clock.now = 10.0
        assert cache.get("/courses/1") is None

    def test_exact_invalidation_leaves_children(self):
        cache = ViewCache(ttl_seconds=60)
        cache.set("/courses/1", "detail")
        cache.set("/courses/1/lessons/9", "lesson")
        assert cache.invalidate_path("/courses/1") == 1
        assert "/courses/1/lessons/9" in cache

    def test_layout_invalidation_drops_subtree_only(self):
        cache = ViewCache(ttl_seconds=60)
        cache.set("/courses/1", "detail")
        cache.set("/courses/1/lessons/9", "lesson")
        cache.set("/courses/10", "other course")
        assert cache.invalidate_path("/courses/1", layout=True) == 2
        assert "/courses/10" in cache

    def test_build_racing_an_invalidation_is_not_stored(self):
        """A payload read before a mutation must not outlive its invalidation."""
        cache = ViewCache(ttl_seconds=60)

        def build():
            cache.invalidate_path("/courses/1", layout=True)
            return "stale"

        assert cache.get_or_build("/courses/1", build) == "stale"
        assert "/courses/1" not in cache
        assert cache.get_or_build("/courses/1", lambda: "fresh") == "fresh"
        assert cache.get("/courses/1") == "fresh"

    def test_set_with_old_generation_is_skipped(self):
        cache = ViewCache(ttl_seconds=60)
        generation = cache.generation
        cache.invalidate_path("/admin/courses/1/edit")
        assert cache.set("/courses/1", "stale", generation=generation) is False
        assert "/courses/1" not in cache


class TestCourseInvalidation:
    """Test the course-level invalidation helpers."""

    def test_invalidates_detail_lessons_and_admin_edit(self):
        view_cache.set(course_path("c1"), "detail")
        view_cache.set(lesson_path("c1", "l1"), "lesson")
        view_cache.set(admin_edit_path("c1"), "edit")
        view_cache.set(course_path("c2"), "untouched")

        invalidate_course_views("c1")

        assert course_path("c1") not in view_cache
        assert lesson_path("c1", "l1") not in view_cache
        assert admin_edit_path("c1") not in view_cache
        assert course_path("c2") in view_cache
