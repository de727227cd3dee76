"""Lesson access gate and the lesson player payload.

The first lesson of a course (by section order, then lesson order) is a free
preview; every other lesson needs a signed-in user. There is no per-course
enrollment or purchase check.
"""

from typing import Optional
from urllib.parse import urlencode

from sqlalchemy.orm import Session, selectinload

from learnhub.config import settings
from learnhub.errors import NotFoundError
from learnhub.models.lesson import Lesson
from learnhub.models.section import Section
from learnhub.schemas.curriculum import LessonResponse, SectionResponse
from learnhub.schemas.progress import LessonView
from learnhub.services.view_cache import lesson_path, view_cache
from learnhub.validators import embed_url


def is_lesson_playable(is_authenticated: bool, is_first_lesson: bool) -> bool:
    return is_authenticated or is_first_lesson


def first_lesson_id(db: Session, course_id: str) -> Optional[str]:
    """Id of the lesson that opens the course, skipping empty sections."""
    row = (
        db.query(Lesson.id)
        .join(Section, Lesson.section_id == Section.id)
        .filter(Section.course_id == course_id)
        .order_by(Section.order.asc(), Lesson.order.asc())
        .first()
    )
    return row[0] if row else None


def login_redirect_url(next_path: str) -> str:
    return f"{settings.LOGIN_PATH}?{urlencode({'next': next_path})}"


def load_lesson_view(db: Session, course_id: str, lesson_id: str) -> LessonView:
    lesson = (
        db.query(Lesson)
        .options(selectinload(Lesson.section).selectinload(Section.course))
        .filter(Lesson.id == lesson_id)
        .first()
    )
    # A lesson id paired with another course's id is treated as absent.
    if not lesson or lesson.section.course_id != course_id:
        raise NotFoundError(f"Lesson {lesson_id} not found in course {course_id}", "Lesson not found.")

    section = lesson.section
    siblings = sorted(section.lessons, key=lambda l: l.order)
    index = next(i for i, l in enumerate(siblings) if l.id == lesson.id)
    previous_lesson = siblings[index - 1] if index > 0 else None
    next_lesson = siblings[index + 1] if index < len(siblings) - 1 else None

    return LessonView(
        course_id=course_id,
        course_title=section.course.title,
        lesson=LessonResponse.model_validate(lesson),
        section=SectionResponse.model_validate(section),
        embed_url=embed_url(lesson.youtube_video_id),
        previous_lesson=LessonResponse.model_validate(previous_lesson) if previous_lesson else None,
        next_lesson=LessonResponse.model_validate(next_lesson) if next_lesson else None,
        total_lessons=sum(len(s.lessons) for s in section.course.sections),
        is_first_lesson=first_lesson_id(db, course_id) == lesson.id,
    )


def cached_lesson_view(db: Session, course_id: str, lesson_id: str) -> LessonView:
    """Public (user-independent) part of the lesson page."""
    return view_cache.get_or_build(
        lesson_path(course_id, lesson_id),
        lambda: load_lesson_view(db, course_id, lesson_id),
    )
