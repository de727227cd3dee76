"""Catalog service — courses, categories and tags, plus the curriculum tree.

Services raise ``learnhub.errors`` exceptions; routers let them propagate to
the app-level handlers.
"""

import logging
from typing import Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from learnhub.errors import ConflictError, NotFoundError, ValidationError
from learnhub.models.category import Category
from learnhub.models.course import Course
from learnhub.models.lesson import Lesson
from learnhub.models.section import Section
from learnhub.models.tag import CourseTag, Tag
from learnhub.schemas.course import AdminStats, CourseCreate, CourseDetail, CourseResponse
from learnhub.schemas.curriculum import LessonResponse, SectionWithLessons
from learnhub.schemas.taxonomy import CategoryCreate, CategoryResponse, TagCreate, TagResponse
from learnhub.services.view_cache import (
    admin_edit_path,
    course_path,
    invalidate_catalog,
    invalidate_course_views,
    view_cache,
)
from learnhub.validators import clean_text

logger = logging.getLogger(__name__)


# ── Response builders ───────────────────────────────────────────────────────

def course_to_response(course: Course) -> CourseResponse:
    return CourseResponse(
        id=course.id,
        title=course.title,
        description=course.description,
        thumbnail_url=course.thumbnail_url,
        category=CategoryResponse.model_validate(course.category) if course.category else None,
        tags=[TagResponse.model_validate(t) for t in course.tags],
        created_at=course.created_at.isoformat(),
    )


def _course_detail(course: Course) -> CourseDetail:
    sections = []
    for section in sorted(course.sections, key=lambda s: s.order):
        lessons = [LessonResponse.model_validate(l) for l in sorted(section.lessons, key=lambda l: l.order)]
        sections.append(SectionWithLessons(
            id=section.id,
            course_id=section.course_id,
            title=section.title,
            description=section.description,
            order=section.order,
            lessons=lessons,
        ))
    base = course_to_response(course)
    return CourseDetail(
        **base.model_dump(),
        sections=sections,
        total_lessons=sum(len(s.lessons) for s in sections),
    )


def get_course(db: Session, course_id: str) -> Course:
    course = db.query(Course).filter(Course.id == course_id).first()
    if not course:
        raise NotFoundError(f"Course {course_id} not found", "Course not found.")
    return course


def load_course_detail(db: Session, course_id: str) -> CourseDetail:
    """Fetch a course with its sorted sections and lessons in one pass."""
    course = (
        db.query(Course)
        .options(
            selectinload(Course.category),
            selectinload(Course.course_tags).selectinload(CourseTag.tag),
            selectinload(Course.sections).selectinload(Section.lessons),
        )
        .filter(Course.id == course_id)
        .first()
    )
    if not course:
        raise NotFoundError(f"Course {course_id} not found", "Course not found.")
    return _course_detail(course)


def cached_course_detail(db: Session, course_id: str) -> CourseDetail:
    return view_cache.get_or_build(course_path(course_id), lambda: load_course_detail(db, course_id))


def cached_admin_course_detail(db: Session, course_id: str) -> CourseDetail:
    return view_cache.get_or_build(admin_edit_path(course_id), lambda: load_course_detail(db, course_id))


# ── Courses ────────────────────────────────────────────────────────────────

def list_courses(db: Session, category_id: Optional[str] = None, tag_id: Optional[str] = None) -> list[Course]:
    query = db.query(Course).options(
        selectinload(Course.category),
        selectinload(Course.course_tags).selectinload(CourseTag.tag),
    )
    if category_id:
        query = query.filter(Course.category_id == category_id)
    if tag_id:
        query = query.filter(Course.course_tags.any(CourseTag.tag_id == tag_id))
    return query.order_by(Course.created_at.desc()).all()


def _validate_course_fields(db: Session, req: CourseCreate) -> tuple[str, str, list[str]]:
    title = clean_text(req.title)
    description = clean_text(req.description)
    if not title or not description:
        raise ValidationError("Missing course title or description", "Title and description are required.")

    if req.category_id and not db.query(Category.id).filter(Category.id == req.category_id).first():
        raise ValidationError(f"Unknown category {req.category_id}", "The selected category does not exist.")

    tag_ids = list(dict.fromkeys(req.tag_ids))
    if tag_ids:
        found = {t for (t,) in db.query(Tag.id).filter(Tag.id.in_(tag_ids)).all()}
        missing = [t for t in tag_ids if t not in found]
        if missing:
            raise ValidationError(f"Unknown tags {missing}", "One or more selected tags do not exist.")
    return title, description, tag_ids


def _set_tags(course: Course, tag_ids: list[str]) -> None:
    wanted = set(tag_ids)
    course.course_tags = [ct for ct in course.course_tags if ct.tag_id in wanted]
    have = {ct.tag_id for ct in course.course_tags}
    for tag_id in tag_ids:
        if tag_id not in have:
            course.course_tags.append(CourseTag(tag_id=tag_id))


def create_course(db: Session, req: CourseCreate) -> Course:
    title, description, tag_ids = _validate_course_fields(db, req)
    course = Course(
        title=title,
        description=description,
        thumbnail_url=req.thumbnail_url or None,
        category_id=req.category_id or None,
    )
    _set_tags(course, tag_ids)
    db.add(course)
    db.commit()
    db.refresh(course)

    logger.info("Created course %s (%s)", course.id, course.title)
    return course


def update_course(db: Session, course_id: str, req: CourseCreate) -> Course:
    course = get_course(db, course_id)
    title, description, tag_ids = _validate_course_fields(db, req)

    course.title = title
    course.description = description
    course.thumbnail_url = req.thumbnail_url or None
    course.category_id = req.category_id or None
    _set_tags(course, tag_ids)
    db.commit()
    db.refresh(course)

    invalidate_course_views(course_id)
    return course


def delete_course(db: Session, course_id: str) -> None:
    """Delete a course; sections, lessons and progress go with it."""
    course = get_course(db, course_id)
    db.delete(course)
    db.commit()

    logger.info("Deleted course %s", course_id)
    invalidate_course_views(course_id)


def admin_stats(db: Session) -> AdminStats:
    return AdminStats(
        courses=db.query(func.count(Course.id)).scalar() or 0,
        sections=db.query(func.count(Section.id)).scalar() or 0,
        lessons=db.query(func.count(Lesson.id)).scalar() or 0,
        categories=db.query(func.count(Category.id)).scalar() or 0,
        tags=db.query(func.count(Tag.id)).scalar() or 0,
    )


# ── Categories ─────────────────────────────────────────────────────────────

def list_categories(db: Session) -> list[Category]:
    return db.query(Category).order_by(Category.name).all()


def _require_unique_name(db: Session, model, name: str, exclude_id: Optional[str] = None) -> None:
    query = db.query(model.id).filter(model.name == name)
    if exclude_id:
        query = query.filter(model.id != exclude_id)
    if query.first():
        kind = model.__name__.lower()
        raise ConflictError(f"Duplicate {kind} name {name!r}", f"A {kind} named '{name}' already exists.")


def _commit_named(db: Session, model, name: str) -> None:
    # The unique index still catches a concurrent insert of the same name.
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        kind = model.__name__.lower()
        raise ConflictError(f"Duplicate {kind} name {name!r}", f"A {kind} named '{name}' already exists.")


def create_category(db: Session, req: CategoryCreate) -> Category:
    name = clean_text(req.name)
    if not name:
        raise ValidationError("Missing category name", "Category name is required.")
    _require_unique_name(db, Category, name)

    category = Category(name=name, description=req.description)
    db.add(category)
    _commit_named(db, Category, name)
    db.refresh(category)
    return category


def update_category(db: Session, category_id: str, req: CategoryCreate) -> Category:
    name = clean_text(req.name)
    if not name:
        raise ValidationError("Missing category name", "Category name is required.")
    category = db.query(Category).filter(Category.id == category_id).first()
    if not category:
        raise NotFoundError(f"Category {category_id} not found", "Category not found.")
    _require_unique_name(db, Category, name, exclude_id=category_id)

    category.name = name
    category.description = req.description
    _commit_named(db, Category, name)
    db.refresh(category)
    invalidate_catalog()
    return category


def delete_category(db: Session, category_id: str) -> None:
    category = db.query(Category).filter(Category.id == category_id).first()
    if not category:
        raise NotFoundError(f"Category {category_id} not found", "Category not found.")

    in_use = db.query(func.count(Course.id)).filter(Course.category_id == category_id).scalar() or 0
    if in_use > 0:
        raise ConflictError(
            f"Category {category_id} is referenced by {in_use} course(s)",
            f"This category cannot be deleted because {in_use} course(s) still use it.",
        )

    db.delete(category)
    db.commit()


# ── Tags ───────────────────────────────────────────────────────────────────

def list_tags(db: Session) -> list[Tag]:
    return db.query(Tag).order_by(Tag.name).all()


def create_tag(db: Session, req: TagCreate) -> Tag:
    name = clean_text(req.name)
    if not name:
        raise ValidationError("Missing tag name", "Tag name is required.")
    _require_unique_name(db, Tag, name)

    tag = Tag(name=name)
    db.add(tag)
    _commit_named(db, Tag, name)
    db.refresh(tag)
    return tag


def update_tag(db: Session, tag_id: str, req: TagCreate) -> Tag:
    name = clean_text(req.name)
    if not name:
        raise ValidationError("Missing tag name", "Tag name is required.")
    tag = db.query(Tag).filter(Tag.id == tag_id).first()
    if not tag:
        raise NotFoundError(f"Tag {tag_id} not found", "Tag not found.")
    _require_unique_name(db, Tag, name, exclude_id=tag_id)

    tag.name = name
    _commit_named(db, Tag, name)
    db.refresh(tag)
    invalidate_catalog()
    return tag


def delete_tag(db: Session, tag_id: str) -> None:
    """Delete a tag after detaching it from every course."""
    tag = db.query(Tag).filter(Tag.id == tag_id).first()
    if not tag:
        raise NotFoundError(f"Tag {tag_id} not found", "Tag not found.")

    db.query(CourseTag).filter(CourseTag.tag_id == tag_id).delete(synchronize_session=False)
    db.delete(tag)
    db.commit()
    invalidate_catalog()
