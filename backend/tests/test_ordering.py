"""Tests for curriculum ordering: append positions and adjacent swaps."""

import pytest

from conftest import make_course, make_lesson, make_section, orders
from learnhub.errors import NotFoundError
from learnhub.models import Lesson, Section
from learnhub.services import curriculum, ordering


class TestAppend:
    """Test position assignment for new items."""

    def test_sections_are_numbered_from_one(self, db):
        course = make_course(db)
        for title in ("A", "B", "C"):
            make_section(db, course, title)
        assert orders(db, Section, course_id=course.id) == {"A": 1, "B": 2, "C": 3}

    def test_lesson_orders_are_per_section(self, db, course_with_lessons):
        _, section_a, section_b, _ = course_with_lessons
        assert orders(db, Lesson, section_id=section_a.id) == {"a1": 1, "a2": 2, "a3": 3}
        assert orders(db, Lesson, section_id=section_b.id) == {"b1": 1}

    def test_append_after_gap_uses_max_plus_one(self, db):
        """Orders [1, 3] after deleting #2: the next item gets 4, not count+1 = 3."""
        course = make_course(db)
        section = make_section(db, course)
        make_lesson(db, section, "one")
        two = make_lesson(db, section, "two")
        make_lesson(db, section, "three")
        curriculum.delete_lesson(db, two.id)

        make_lesson(db, section, "four")
        assert orders(db, Lesson, section_id=section.id) == {"one": 1, "three": 3, "four": 4}

    def test_next_order_for_unknown_scope(self, db):
        with pytest.raises(NotFoundError):
            ordering.next_order(db, Section, "no-such-course")


class TestSwap:
    """Test adjacent swaps."""

    def test_swap_up_exchanges_with_previous(self, db, course_with_lessons):
        """Lessons at [1,2,3]: moving #2 up swaps owners of 1 and 2, 3 untouched."""
        _, section_a, _, lessons = course_with_lessons
        result = ordering.swap_order(db, Lesson, lessons["a2"].id, "up")

        assert result.success
        assert orders(db, Lesson, section_id=section_a.id) == {"a1": 2, "a2": 1, "a3": 3}

    def test_swap_down_exchanges_with_next(self, db, course_with_lessons):
        _, section_a, _, lessons = course_with_lessons
        ordering.swap_order(db, Lesson, lessons["a1"].id, "down")
        assert orders(db, Lesson, section_id=section_a.id) == {"a1": 2, "a2": 1, "a3": 3}

    def test_first_item_up_is_boundary_noop(self, db, course_with_lessons):
        _, section_a, _, lessons = course_with_lessons
        result = ordering.swap_order(db, Lesson, lessons["a1"].id, "up")

        assert result.success is False
        assert "top" in result.message
        assert orders(db, Lesson, section_id=section_a.id) == {"a1": 1, "a2": 2, "a3": 3}

    def test_last_item_down_is_boundary_noop(self, db, course_with_lessons):
        _, section_a, _, lessons = course_with_lessons
        result = ordering.swap_order(db, Lesson, lessons["a3"].id, "down")

        assert result.success is False
        assert "bottom" in result.message

    def test_single_item_scope_cannot_move(self, db, course_with_lessons):
        _, _, _, lessons = course_with_lessons
        assert not ordering.swap_order(db, Lesson, lessons["b1"].id, "up").success
        assert not ordering.swap_order(db, Lesson, lessons["b1"].id, "down").success

    def test_up_then_down_round_trips(self, db, course_with_lessons):
        _, section_a, _, lessons = course_with_lessons
        before = orders(db, Lesson, section_id=section_a.id)

        ordering.swap_order(db, Lesson, lessons["a3"].id, "up")
        ordering.swap_order(db, Lesson, lessons["a3"].id, "down")

        assert orders(db, Lesson, section_id=section_a.id) == before

    def test_swap_skips_gaps_to_immediate_neighbor(self, db):
        """With orders [1, 3, 4], moving the item at 4 up swaps with 3, not 1."""
        course = make_course(db)
        section = make_section(db, course)
        make_lesson(db, section, "one")
        two = make_lesson(db, section, "two")
        make_lesson(db, section, "three")
        four = make_lesson(db, section, "four")
        curriculum.delete_lesson(db, two.id)

        ordering.swap_order(db, Lesson, four.id, "up")
        assert orders(db, Lesson, section_id=section.id) == {"one": 1, "three": 4, "four": 3}

    def test_swap_never_crosses_scope(self, db, course_with_lessons):
        """b1 is first in section B even though section A has lessons before it."""
        _, _, section_b, lessons = course_with_lessons
        result = ordering.swap_order(db, Lesson, lessons["b1"].id, "up")
        assert not result.success
        assert orders(db, Lesson, section_id=section_b.id) == {"b1": 1}

    def test_sections_swap_within_course(self, db, course_with_lessons):
        course, section_a, section_b, _ = course_with_lessons
        result = ordering.swap_order(db, Section, section_b.id, "up")

        assert result.success
        assert orders(db, Section, course_id=course.id) == {"A": 2, "B": 1}
        # Lessons travel with their section.
        assert orders(db, Lesson, section_id=section_a.id) == {"a1": 1, "a2": 2, "a3": 3}

    def test_unknown_item_raises_not_found(self, db):
        with pytest.raises(NotFoundError):
            ordering.swap_order(db, Lesson, "missing", "up")

    def test_invalid_direction_rejected(self, db, course_with_lessons):
        _, _, _, lessons = course_with_lessons
        with pytest.raises(ValueError):
            ordering.swap_order(db, Lesson, lessons["a1"].id, "sideways")

    def test_sentinel_never_left_behind(self, db, course_with_lessons):
        _, section_a, _, lessons = course_with_lessons
        ordering.swap_order(db, Lesson, lessons["a2"].id, "down")
        assert ordering.SENTINEL_ORDER not in orders(db, Lesson, section_id=section_a.id).values()


class TestOrderInvariant:
    """Test that orders stay unique within a scope."""

    def test_no_duplicate_orders_after_mixed_operations(self, db):
        course = make_course(db)
        section = make_section(db, course)
        ids = [make_lesson(db, section, f"l{i}").id for i in range(5)]

        curriculum.delete_lesson(db, ids[1])
        ordering.swap_order(db, Lesson, ids[4], "up")
        make_lesson(db, section, "l5")
        ordering.swap_order(db, Lesson, ids[0], "down")
        curriculum.delete_lesson(db, ids[3])
        make_lesson(db, section, "l6")
        ordering.swap_order(db, Lesson, ids[2], "up")

        values = list(orders(db, Lesson, section_id=section.id).values())
        assert len(values) == len(set(values)) == 5
        assert all(v >= 1 for v in values)
