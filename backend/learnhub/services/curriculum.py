"""Curriculum service — admin CRUD and reordering for sections and lessons.

Positions come from ``learnhub.services.ordering``; every successful mutation
drops the cached views of the owning course.
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from learnhub.errors import NotFoundError, ValidationError
from learnhub.models.lesson import Lesson
from learnhub.models.section import Section
from learnhub.schemas.curriculum import LessonCreate, MoveDirection, MoveResult, SectionCreate
from learnhub.services import ordering
from learnhub.services.catalog import get_course
from learnhub.services.view_cache import invalidate_course_views
from learnhub.validators import clean_text, is_valid_video_id

logger = logging.getLogger(__name__)


def get_section(db: Session, section_id: str) -> Section:
    section = db.query(Section).filter(Section.id == section_id).first()
    if not section:
        raise NotFoundError(f"Section {section_id} not found", "Section not found.")
    return section


def get_lesson(db: Session, lesson_id: str) -> Lesson:
    lesson = db.query(Lesson).filter(Lesson.id == lesson_id).first()
    if not lesson:
        raise NotFoundError(f"Lesson {lesson_id} not found", "Lesson not found.")
    return lesson


def _require_title(title: Optional[str]) -> str:
    title = clean_text(title)
    if not title:
        raise ValidationError("Missing title", "Title is required.")
    return title


def _validate_lesson(req: LessonCreate) -> tuple[str, str]:
    title = clean_text(req.title)
    video_id = clean_text(req.youtube_video_id)
    if not title or not video_id:
        raise ValidationError("Missing lesson title or video id", "Title and YouTube video ID are required.")
    if not is_valid_video_id(video_id):
        raise ValidationError(
            f"Invalid YouTube video id {video_id!r}",
            "Invalid YouTube video ID (must be 11 characters: letters, digits, '-' or '_').",
        )
    return title, video_id


# ── Sections ───────────────────────────────────────────────────────────────

def create_section(db: Session, course_id: str, req: SectionCreate) -> Section:
    title = _require_title(req.title)
    get_course(db, course_id)

    section = Section(course_id=course_id, title=title, description=req.description)
    ordering.append_item(db, section)

    logger.info("Created section %s in course %s at order %d", section.id, course_id, section.order)
    invalidate_course_views(course_id)
    return section


def update_section(db: Session, section_id: str, req: SectionCreate) -> Section:
    title = _require_title(req.title)
    section = get_section(db, section_id)
    section.title = title
    section.description = req.description
    db.commit()
    db.refresh(section)

    invalidate_course_views(section.course_id)
    return section


def delete_section(db: Session, section_id: str) -> None:
    """Delete a section and its lessons. Sibling orders are left as they are."""
    section = get_section(db, section_id)
    course_id = section.course_id
    db.delete(section)
    db.commit()

    logger.info("Deleted section %s from course %s", section_id, course_id)
    invalidate_course_views(course_id)


def move_section(db: Session, section_id: str, direction: MoveDirection) -> MoveResult:
    result = ordering.swap_order(db, Section, section_id, direction)
    if result.success:
        invalidate_course_views(result.item.course_id)
    return MoveResult(success=result.success, message=result.message)


# ── Lessons ────────────────────────────────────────────────────────────────

def create_lesson(db: Session, section_id: str, req: LessonCreate) -> Lesson:
    title, video_id = _validate_lesson(req)
    section = get_section(db, section_id)
    course_id = section.course_id

    lesson = Lesson(
        section_id=section_id,
        title=title,
        description=req.description,
        youtube_video_id=video_id,
    )
    ordering.append_item(db, lesson)

    logger.info("Created lesson %s in section %s at order %d", lesson.id, section_id, lesson.order)
    invalidate_course_views(course_id)
    return lesson


def update_lesson(db: Session, lesson_id: str, req: LessonCreate) -> Lesson:
    title, video_id = _validate_lesson(req)
    lesson = get_lesson(db, lesson_id)
    lesson.title = title
    lesson.description = req.description
    lesson.youtube_video_id = video_id
    db.commit()
    db.refresh(lesson)

    invalidate_course_views(lesson.section.course_id)
    return lesson


def delete_lesson(db: Session, lesson_id: str) -> None:
    lesson = get_lesson(db, lesson_id)
    course_id = lesson.section.course_id
    db.delete(lesson)
    db.commit()

    logger.info("Deleted lesson %s from course %s", lesson_id, course_id)
    invalidate_course_views(course_id)


def move_lesson(db: Session, lesson_id: str, direction: MoveDirection) -> MoveResult:
    result = ordering.swap_order(db, Lesson, lesson_id, direction)
    if result.success:
        invalidate_course_views(result.item.section.course_id)
    return MoveResult(success=result.success, message=result.message)
