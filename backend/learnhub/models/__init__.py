"""SQLAlchemy ORM models."""

from learnhub.models.user import User
from learnhub.models.category import Category
from learnhub.models.tag import Tag, CourseTag
from learnhub.models.course import Course
from learnhub.models.section import Section
from learnhub.models.lesson import Lesson
from learnhub.models.progress import Progress

__all__ = [
    "User",
    "Category",
    "Tag",
    "CourseTag",
    "Course",
    "Section",
    "Lesson",
    "Progress",
]
