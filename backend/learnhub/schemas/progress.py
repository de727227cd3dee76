"""Progress and lesson-view schemas."""

from typing import Optional

from pydantic import BaseModel

from learnhub.schemas.course import CourseResponse
from learnhub.schemas.curriculum import LessonResponse, SectionResponse


class ProgressStats(BaseModel):
    completed: int
    total: int
    percentage: int
    remaining: int


class ProgressUpdateRequest(BaseModel):
    course_id: str


class ProgressEntry(BaseModel):
    lesson_id: str
    completed: bool
    completed_at: Optional[str] = None


class CourseProgressResponse(BaseModel):
    course_id: str
    completed_lesson_ids: list[str]
    stats: ProgressStats


class EnrolledCourse(BaseModel):
    course: CourseResponse
    stats: ProgressStats
    last_accessed_at: Optional[str] = None


class MyCoursesResponse(BaseModel):
    courses: list[EnrolledCourse]
    total: int


class LessonView(BaseModel):
    course_id: str
    course_title: str
    lesson: LessonResponse
    section: SectionResponse
    embed_url: Optional[str] = None
    previous_lesson: Optional[LessonResponse] = None
    next_lesson: Optional[LessonResponse] = None
    total_lessons: int = 0
    is_first_lesson: bool = False
    is_completed: bool = False
