# tests/conftest.py - Shared fixtures: isolated SQLite database, API client, seeded project
import os

# Settings are read at import time
os.environ.setdefault("JWT_SECRET", "test-secret-key-that-is-long-enough-0123456789")
os.environ.setdefault("ENV", "test")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from dataclasses import dataclass, field
from typing import Dict
from uuid import UUID

import pytest
from fastapi.testclient import TestClient

from club_selection.core.db import DatabaseManager, get_db
from club_selection.core.security import resolve_student_token
from club_selection.main import app
from club_selection.schemas.admin import ProjectIn, TagIn, TimeSectionIn, CourseIn, OccurrenceIn
from club_selection.services.admin_service import AdminService


@pytest.fixture
def database(tmp_path):
    """A fresh file-backed SQLite database per test"""
    manager = DatabaseManager(f"sqlite:///{tmp_path / 'test.db'}")
    manager.create_all()
    yield manager
    manager.close()


@pytest.fixture
def db(database):
    session = database.SessionLocal()
    yield session
    session.close()


@pytest.fixture
def client(database):
    def override_get_db():
        yield from database.get_session()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@dataclass
class Seed:
    project_id: UUID
    other_project_id: UUID
    tags: Dict[str, UUID] = field(default_factory=dict)
    courses: Dict[str, UUID] = field(default_factory=dict)
    tokens: Dict[str, str] = field(default_factory=dict)


@pytest.fixture
def seed(database) -> Seed:
    """
    Project "Autumn Clubs" with:
      tag Sports (min 1, max 2): Football (capacity 1), Tennis, Swimming
      tag Arts (min 0): Painting (unlimited)
    Students alice and bob are assigned; carol is only in "Spring Clubs".
    """
    with database.transaction() as session:
        service = AdminService(session)

        project = service.create_project(ProjectIn(name="Autumn Clubs", timezone="UTC"))
        other = service.create_project(ProjectIn(name="Spring Clubs"))

        sports = service.create_tag(project.id, TagIn(name="Sports", min_required=1, max_allowed=2))
        arts = service.create_tag(project.id, TagIn(name="Arts"))

        period = service.create_section(
            project.id, TimeSectionIn(label="Period 1", start_time="08:00", end_time="08:45")
        )

        def course(name, capacity, tag):
            return service.create_course(project.id, CourseIn(
                name=name,
                capacity=capacity,
                tag_ids=[tag.id],
                occurrences=[OccurrenceIn(day_of_week=0, section_id=period.id)],
            ))

        courses = {
            "Football": course("Football", 1, sports),
            "Tennis": course("Tennis", 10, sports),
            "Swimming": course("Swimming", 10, sports),
            "Painting": course("Painting", None, arts),
        }

        service.import_students(project.id, ["alice@example.com", "bob@example.com"])
        service.import_students(other.id, ["carol@example.com"])

        return Seed(
            project_id=project.id,
            other_project_id=other.id,
            tags={"Sports": sports.id, "Arts": arts.id},
            courses={name: c.id for name, c in courses.items()},
            tokens={
                name: resolve_student_token(f"{name}@example.com")
                for name in ("alice", "bob", "carol")
            },
        )


@pytest.fixture
def admin_headers(database, client):
    with database.transaction() as session:
        AdminService(session).upsert_admin("admin", "admin-password", name="Admin")

    response = client.post("/api/auth/login", json={"username": "admin", "password": "admin-password"})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['accessToken']}"}
