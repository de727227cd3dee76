"""Section / lesson request and response schemas.

The nested shapes here (``CourseDetail`` -> ``SectionWithLessons`` ->
``LessonResponse``) are built once from ORM rows in the catalog service and
handed to every view as-is.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel


class MoveDirection(str, Enum):
    UP = "up"
    DOWN = "down"


class SectionCreate(BaseModel):
    title: str
    description: Optional[str] = None


class LessonCreate(BaseModel):
    title: str
    youtube_video_id: str
    description: Optional[str] = None


class LessonResponse(BaseModel):
    id: str
    section_id: str
    title: str
    description: Optional[str] = None
    youtube_video_id: str
    order: int

    class Config:
        from_attributes = True


class SectionResponse(BaseModel):
    id: str
    course_id: str
    title: str
    description: Optional[str] = None
    order: int

    class Config:
        from_attributes = True


class SectionWithLessons(SectionResponse):
    lessons: list[LessonResponse] = []


class MoveResult(BaseModel):
    success: bool
    message: Optional[str] = None
