"""Course request/response schemas."""

from typing import Optional

from pydantic import BaseModel

from learnhub.schemas.curriculum import SectionWithLessons
from learnhub.schemas.taxonomy import CategoryResponse, TagResponse


class CourseCreate(BaseModel):
    title: str
    description: str
    thumbnail_url: Optional[str] = None
    category_id: Optional[str] = None
    tag_ids: list[str] = []


class CourseResponse(BaseModel):
    id: str
    title: str
    description: Optional[str]
    thumbnail_url: Optional[str] = None
    category: Optional[CategoryResponse] = None
    tags: list[TagResponse] = []
    created_at: str


class CourseListResponse(BaseModel):
    courses: list[CourseResponse]
    total: int


class CourseDetail(CourseResponse):
    sections: list[SectionWithLessons] = []
    total_lessons: int = 0


class AdminStats(BaseModel):
    courses: int
    sections: int
    lessons: int
    categories: int
    tags: int
