"""Shared fixtures: an in-memory database, an app client and seeded users."""

import os
import sys

# Add parent dir to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

# Must be set before learnhub.config is imported.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ["RATE_LIMIT_ENABLED"] = "false"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from learnhub.database import Base, get_db
from learnhub.main import app
from learnhub.middleware.auth import create_access_token, hash_password
from learnhub.models import Category, Course, Lesson, Section, User
from learnhub.schemas.curriculum import LessonCreate, SectionCreate
from learnhub.services import curriculum
from learnhub.services.view_cache import view_cache

VIDEO_ID = "dQw4w9WgXcQ"


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory):
    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    test_client = TestClient(app)
    yield test_client
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def _clear_view_cache():
    view_cache.clear()
    yield
    view_cache.clear()


def _make_user(db, email: str, role: str) -> User:
    user = User(
        email=email,
        password_hash=hash_password("secret-pw"),
        role=role,
        display_name=email.split("@")[0],
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def admin_user(db):
    return _make_user(db, "admin@example.com", "admin")


@pytest.fixture
def student(db):
    return _make_user(db, "student@example.com", "student")


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token({'sub': user.id})}"}


@pytest.fixture
def admin_headers(admin_user):
    return auth_headers(admin_user)


@pytest.fixture
def student_headers(student):
    return auth_headers(student)


# ── Content factories ───────────────────────────────────────────────────────

def make_course(db, title: str = "Python Basics", category: Category | None = None) -> Course:
    course = Course(title=title, description=f"About {title}", category_id=category.id if category else None)
    db.add(course)
    db.commit()
    db.refresh(course)
    return course


def make_section(db, course: Course, title: str = "Section") -> Section:
    return curriculum.create_section(db, course.id, SectionCreate(title=title))


def make_lesson(db, section: Section, title: str = "Lesson", video_id: str = VIDEO_ID) -> Lesson:
    return curriculum.create_lesson(db, section.id, LessonCreate(title=title, youtube_video_id=video_id))


def orders(db, model, **scope) -> dict[str, int]:
    """{title: order} for every row in a scope, read fresh from the database."""
    db.expire_all()
    rows = db.query(model).filter_by(**scope).all()
    return {row.title: row.order for row in rows}


@pytest.fixture
def course_with_lessons(db):
    """A course with two sections: A (lessons a1..a3) and B (lesson b1)."""
    course = make_course(db)
    section_a = make_section(db, course, "A")
    section_b = make_section(db, course, "B")
    lessons = {
        "a1": make_lesson(db, section_a, "a1"),
        "a2": make_lesson(db, section_a, "a2"),
        "a3": make_lesson(db, section_a, "a3"),
        "b1": make_lesson(db, section_b, "b1"),
    }
    return course, section_a, section_b, lessons
