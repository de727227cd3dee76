"""Admin router — course, category and tag management plus dashboard stats."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from learnhub.database import get_db
from learnhub.middleware.auth import require_admin
from learnhub.models.user import User
from learnhub.schemas.course import AdminStats, CourseCreate, CourseDetail, CourseListResponse, CourseResponse
from learnhub.schemas.taxonomy import CategoryCreate, CategoryResponse, TagCreate, TagResponse
from learnhub.services import catalog

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.get("/stats", response_model=AdminStats)
def dashboard_stats(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    return catalog.admin_stats(db)


# ── Courses ────────────────────────────────────────────────────────────────

@router.get("/courses", response_model=CourseListResponse)
def list_courses(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    courses = catalog.list_courses(db)
    return CourseListResponse(
        courses=[catalog.course_to_response(c) for c in courses],
        total=len(courses),
    )


@router.post("/courses", response_model=CourseResponse, status_code=201)
def create_course(
    req: CourseCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    course = catalog.create_course(db, req)
    return catalog.course_to_response(course)


@router.get("/courses/{course_id}/edit", response_model=CourseDetail)
def edit_course_view(
    course_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    """Course with its full curriculum, as shown on the edit screen."""
    return catalog.cached_admin_course_detail(db, course_id)


@router.put("/courses/{course_id}", response_model=CourseResponse)
def update_course(
    course_id: str,
    req: CourseCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    """Update a course. The tag list replaces the current tags."""
    course = catalog.update_course(db, course_id, req)
    return catalog.course_to_response(course)


@router.delete("/courses/{course_id}", status_code=204)
def delete_course(
    course_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    catalog.delete_course(db, course_id)


# ── Categories ─────────────────────────────────────────────────────────────

@router.post("/categories", response_model=CategoryResponse, status_code=201)
def create_category(
    req: CategoryCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    return CategoryResponse.model_validate(catalog.create_category(db, req))


@router.put("/categories/{category_id}", response_model=CategoryResponse)
def update_category(
    category_id: str,
    req: CategoryCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    return CategoryResponse.model_validate(catalog.update_category(db, category_id, req))


@router.delete("/categories/{category_id}", status_code=204)
def delete_category(
    category_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    """Delete a category. Refused with 409 while courses still use it."""
    catalog.delete_category(db, category_id)


# ── Tags ───────────────────────────────────────────────────────────────────

@router.post("/tags", response_model=TagResponse, status_code=201)
def create_tag(
    req: TagCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    return TagResponse.model_validate(catalog.create_tag(db, req))


@router.put("/tags/{tag_id}", response_model=TagResponse)
def update_tag(
    tag_id: str,
    req: TagCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    return TagResponse.model_validate(catalog.update_tag(db, tag_id, req))


@router.delete("/tags/{tag_id}", status_code=204)
def delete_tag(
    tag_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    catalog.delete_tag(db, tag_id)
