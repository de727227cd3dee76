"""Progress service — per-user lesson completion and course aggregates."""

import logging
import math
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import case, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from learnhub.errors import NotFoundError, ValidationError
from learnhub.models.course import Course
from learnhub.models.lesson import Lesson
from learnhub.models.progress import Progress
from learnhub.models.section import Section
from learnhub.models.tag import CourseTag
from learnhub.schemas.progress import (
    CourseProgressResponse,
    EnrolledCourse,
    MyCoursesResponse,
    ProgressStats,
)
from learnhub.services.catalog import course_to_response, get_course

logger = logging.getLogger(__name__)


def calculate_progress(total_lessons: int, completed_lessons: int) -> ProgressStats:
    """Completion stats; the percentage rounds half up and is 0 for an empty course."""
    percentage = math.floor(completed_lessons * 100 / total_lessons + 0.5) if total_lessons > 0 else 0
    return ProgressStats(
        completed=completed_lessons,
        total=total_lessons,
        percentage=percentage,
        remaining=max(0, total_lessons - completed_lessons),
    )


def _lesson_in_course(db: Session, lesson_id: str, course_id: str) -> Lesson:
    """Load a lesson and make sure it belongs to ``course_id`` through its section."""
    lesson = (
        db.query(Lesson)
        .options(selectinload(Lesson.section))
        .filter(Lesson.id == lesson_id)
        .first()
    )
    if not lesson:
        raise NotFoundError(f"Lesson {lesson_id} not found", "Lesson not found.")
    if lesson.section.course_id != course_id:
        raise ValidationError(
            f"Lesson {lesson_id} does not belong to course {course_id}",
            "Invalid request.",
        )
    return lesson


def _get_progress(db: Session, user_id: str, lesson_id: str) -> Optional[Progress]:
    return (
        db.query(Progress)
        .filter(Progress.user_id == user_id, Progress.lesson_id == lesson_id)
        .with_for_update()
        .first()
    )


def mark_complete(db: Session, user_id: str, lesson_id: str, course_id: str) -> Progress:
    """Upsert a completed row for (user, lesson).

    Repeating the call changes nothing: an already-completed row keeps its
    original completed_at.
    """
    _lesson_in_course(db, lesson_id, course_id)

    for attempt in (1, 2):
        row = _get_progress(db, user_id, lesson_id)
        if row is not None and row.completed:
            db.rollback()
            return row
        if row is None:
            row = Progress(user_id=user_id, lesson_id=lesson_id)
            db.add(row)
        row.completed = True
        row.completed_at = datetime.now(timezone.utc)
        try:
            db.commit()
        except IntegrityError:
            # A concurrent request inserted the row first; update it instead.
            db.rollback()
            if attempt == 2:
                raise
            continue
        db.refresh(row)
        logger.info("User %s completed lesson %s", user_id, lesson_id)
        return row
    raise AssertionError("unreachable")


def mark_incomplete(db: Session, user_id: str, lesson_id: str, course_id: str) -> Optional[Progress]:
    """Clear the completed flag and timestamp; the row itself is kept."""
    _lesson_in_course(db, lesson_id, course_id)

    row = _get_progress(db, user_id, lesson_id)
    if row is None:
        db.rollback()
        return None
    row.completed = False
    row.completed_at = None
    db.commit()
    db.refresh(row)
    return row


def is_completed(db: Session, user_id: str, lesson_id: str) -> bool:
    completed = (
        db.query(Progress.completed)
        .filter(Progress.user_id == user_id, Progress.lesson_id == lesson_id)
        .scalar()
    )
    return bool(completed)


def course_progress(db: Session, user_id: str, course_id: str) -> CourseProgressResponse:
    get_course(db, course_id)

    lesson_ids = [
        lid for (lid,) in db.query(Lesson.id)
        .join(Section, Lesson.section_id == Section.id)
        .filter(Section.course_id == course_id)
        .all()
    ]
    completed_ids: list[str] = []
    if lesson_ids:
        completed_ids = [
            lid for (lid,) in db.query(Progress.lesson_id)
            .filter(
                Progress.user_id == user_id,
                Progress.completed.is_(True),
                Progress.lesson_id.in_(lesson_ids),
            )
            .all()
        ]
    return CourseProgressResponse(
        course_id=course_id,
        completed_lesson_ids=sorted(completed_ids),
        stats=calculate_progress(len(lesson_ids), len(completed_ids)),
    )


def my_courses(db: Session, user_id: str) -> MyCoursesResponse:
    """Courses the user has touched, with completion stats, most recent first."""
    activity = (
        db.query(
            Section.course_id,
            func.sum(case((Progress.completed.is_(True), 1), else_=0)),
            func.max(Progress.updated_at),
        )
        .join(Lesson, Progress.lesson_id == Lesson.id)
        .join(Section, Lesson.section_id == Section.id)
        .filter(Progress.user_id == user_id)
        .group_by(Section.course_id)
        .all()
    )
    if not activity:
        return MyCoursesResponse(courses=[], total=0)

    course_ids = [row[0] for row in activity]
    totals = dict(
        db.query(Section.course_id, func.count(Lesson.id))
        .join(Lesson, Lesson.section_id == Section.id)
        .filter(Section.course_id.in_(course_ids))
        .group_by(Section.course_id)
        .all()
    )
    courses = {
        c.id: c for c in db.query(Course)
        .options(
            selectinload(Course.category),
            selectinload(Course.course_tags).selectinload(CourseTag.tag),
        )
        .filter(Course.id.in_(course_ids))
        .all()
    }

    enrolled = []
    for course_id, completed, last_at in sorted(activity, key=lambda r: r[2], reverse=True):
        enrolled.append(EnrolledCourse(
            course=course_to_response(courses[course_id]),
            stats=calculate_progress(totals.get(course_id, 0), int(completed or 0)),
            last_accessed_at=last_at.isoformat() if last_at else None,
        ))
    return MyCoursesResponse(courses=enrolled, total=len(enrolled))
