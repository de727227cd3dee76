"""Courses router — public catalog, curriculum and the lesson player."""

from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from learnhub.database import get_db
from learnhub.middleware.auth import get_optional_user
from learnhub.models.user import User
from learnhub.schemas.course import CourseDetail, CourseListResponse
from learnhub.schemas.progress import LessonView
from learnhub.schemas.taxonomy import CategoryResponse, TagResponse
from learnhub.services import access, catalog, progress_service

router = APIRouter(prefix="/api", tags=["courses"])


@router.get("/courses", response_model=CourseListResponse)
def list_courses(
    category_id: Optional[str] = None,
    tag_id: Optional[str] = None,
    db: Session = Depends(get_db),
):
    """List courses, newest first, optionally filtered by category or tag."""
    courses = catalog.list_courses(db, category_id=category_id, tag_id=tag_id)
    return CourseListResponse(
        courses=[catalog.course_to_response(c) for c in courses],
        total=len(courses),
    )


@router.get("/courses/{course_id}", response_model=CourseDetail)
def get_course(course_id: str, db: Session = Depends(get_db)):
    """Course detail with its ordered sections and lessons."""
    return catalog.cached_course_detail(db, course_id)


@router.get(
    "/courses/{course_id}/lessons/{lesson_id}",
    response_model=LessonView,
    responses={307: {"description": "Sign-in required for this lesson"}},
)
def get_lesson(
    course_id: str,
    lesson_id: str,
    request: Request,
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_optional_user),
):
    """Lesson player payload.

    Anonymous visitors may only open the course's first lesson; anything else
    redirects them to the login page.
    """
    view = access.cached_lesson_view(db, course_id, lesson_id)
    if not access.is_lesson_playable(current_user is not None, view.is_first_lesson):
        return RedirectResponse(access.login_redirect_url(request.url.path), status_code=307)

    if current_user is not None:
        view = view.model_copy(update={
            "is_completed": progress_service.is_completed(db, current_user.id, lesson_id),
        })
    return view


@router.get("/categories", response_model=list[CategoryResponse])
def list_categories(db: Session = Depends(get_db)):
    return [CategoryResponse.model_validate(c) for c in catalog.list_categories(db)]


@router.get("/tags", response_model=list[TagResponse])
def list_tags(db: Session = Depends(get_db)):
    return [TagResponse.model_validate(t) for t in catalog.list_tags(db)]
