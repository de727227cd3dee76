"""Progress router — lesson completion for the signed-in user."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from learnhub.database import get_db
from learnhub.middleware.auth import get_current_user
from learnhub.models.progress import Progress
from learnhub.models.user import User
from learnhub.schemas.progress import (
    CourseProgressResponse,
    MyCoursesResponse,
    ProgressEntry,
    ProgressUpdateRequest,
)
from learnhub.services import progress_service

router = APIRouter(prefix="/api", tags=["progress"])


def _progress_to_entry(lesson_id: str, row: Progress | None) -> ProgressEntry:
    if row is None:
        return ProgressEntry(lesson_id=lesson_id, completed=False)
    return ProgressEntry(
        lesson_id=row.lesson_id,
        completed=row.completed,
        completed_at=row.completed_at.isoformat() if row.completed_at else None,
    )


@router.post("/lessons/{lesson_id}/complete", response_model=ProgressEntry)
def mark_complete(
    lesson_id: str,
    req: ProgressUpdateRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Mark a lesson as completed. Safe to repeat."""
    row = progress_service.mark_complete(db, current_user.id, lesson_id, req.course_id)
    return _progress_to_entry(lesson_id, row)


@router.post("/lessons/{lesson_id}/incomplete", response_model=ProgressEntry)
def mark_incomplete(
    lesson_id: str,
    req: ProgressUpdateRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    row = progress_service.mark_incomplete(db, current_user.id, lesson_id, req.course_id)
    return _progress_to_entry(lesson_id, row)


@router.get("/courses/{course_id}/progress", response_model=CourseProgressResponse)
def course_progress(
    course_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return progress_service.course_progress(db, current_user.id, course_id)


@router.get("/my-courses", response_model=MyCoursesResponse)
def my_courses(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Courses the current user has progress in, with completion stats."""
    return progress_service.my_courses(db, current_user.id)
