"""Curriculum router — admin CRUD and up/down moves for sections and lessons."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from learnhub.database import get_db
from learnhub.middleware.auth import require_admin
from learnhub.models.user import User
from learnhub.schemas.curriculum import (
    LessonCreate,
    LessonResponse,
    MoveDirection,
    MoveResult,
    SectionCreate,
    SectionResponse,
)
from learnhub.services import curriculum

router = APIRouter(prefix="/api/admin", tags=["curriculum"])


# ── Sections ───────────────────────────────────────────────────────────────

@router.post("/courses/{course_id}/sections", response_model=SectionResponse, status_code=201)
def create_section(
    course_id: str,
    req: SectionCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    """Append a section to the end of the course."""
    return SectionResponse.model_validate(curriculum.create_section(db, course_id, req))


@router.put("/sections/{section_id}", response_model=SectionResponse)
def update_section(
    section_id: str,
    req: SectionCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    return SectionResponse.model_validate(curriculum.update_section(db, section_id, req))


@router.delete("/sections/{section_id}", status_code=204)
def delete_section(
    section_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    curriculum.delete_section(db, section_id)


@router.post("/sections/{section_id}/move/{direction}", response_model=MoveResult)
def move_section(
    section_id: str,
    direction: MoveDirection,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    """Swap a section with its neighbor. At the edge: 200 with success=false."""
    return curriculum.move_section(db, section_id, direction)


# ── Lessons ────────────────────────────────────────────────────────────────

@router.post("/sections/{section_id}/lessons", response_model=LessonResponse, status_code=201)
def create_lesson(
    section_id: str,
    req: LessonCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    """Append a lesson to the end of the section."""
    return LessonResponse.model_validate(curriculum.create_lesson(db, section_id, req))


@router.put("/lessons/{lesson_id}", response_model=LessonResponse)
def update_lesson(
    lesson_id: str,
    req: LessonCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    return LessonResponse.model_validate(curriculum.update_lesson(db, lesson_id, req))


@router.delete("/lessons/{lesson_id}", status_code=204)
def delete_lesson(
    lesson_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    curriculum.delete_lesson(db, lesson_id)


@router.post("/lessons/{lesson_id}/move/{direction}", response_model=MoveResult)
def move_lesson(
    lesson_id: str,
    direction: MoveDirection,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    return curriculum.move_lesson(db, lesson_id, direction)
