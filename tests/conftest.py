"""
Pytest configuration and fixtures for testing.

This file provides reusable test fixtures for:
- Database setup/teardown
- FastAPI test client
- HR and non-HR bearer tokens
- Jobs and applications in a known pipeline state
- Mock email delivery and Celery tasks
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.database import Base, get_db
from app.core.security import create_access_token
from app.models.application import Application
from app.models.job import Job, JobStatus
from app.services.email_service import email_service
from app.services.stages import ApplicationStatus, Stage, status_for_stage
from main import app


# Use in-memory SQLite for testing (fast, isolated)
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session():
    """
    Create a fresh database session for each test.
    Tables are dropped after the test completes.
    """
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db_session):
    """
    FastAPI test client with overridden database dependency.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


def make_token(role: str = "hr", user_id: str = "hr-user-1", email: str = "recruiter@example.com") -> str:
    return create_access_token({"sub": user_id, "email": email, "role": role})


@pytest.fixture
def hr_headers():
    """Authorization header for an HR user"""
    return {"Authorization": f"Bearer {make_token()}"}


@pytest.fixture
def other_hr_headers():
    """Authorization header for a second HR user (different interviewer)"""
    return {"Authorization": f"Bearer {make_token(user_id='hr-user-2', email='manager@example.com')}"}


@pytest.fixture
def candidate_headers():
    """Authorization header for an authenticated user without the HR role"""
    return {"Authorization": f"Bearer {make_token(role='candidate', user_id='cand-1')}"}


class Outbox:
    """Records emails instead of calling SES."""

    def __init__(self):
        self.sent = []
        self.fail_for = set()
        self.raise_for = set()

    def send_email(self, to_email, subject, html_body, text_body=None):
        if to_email in self.raise_for:
            raise RuntimeError("SES unavailable")
        if to_email in self.fail_for:
            return False
        self.sent.append({"to": to_email, "subject": subject, "html": html_body})
        return True

    def to(self, email):
        return [message for message in self.sent if message["to"] == email]


@pytest.fixture(autouse=True)
def outbox(monkeypatch):
    """
    Mock email delivery for every test.
    Add addresses to ``fail_for``/``raise_for`` to simulate delivery failures.
    """
    box = Outbox()
    monkeypatch.setattr(email_service, "send_email", box.send_email)
    return box


@pytest.fixture(autouse=True)
def mock_celery(monkeypatch):
    """
    Capture Celery task calls instead of sending them to Redis.
    Each queued call is recorded as its positional args tuple.
    """
    from app.tasks import scoring_tasks

    queued = []

    def mock_delay(*args, **kwargs):
        queued.append(args)

    monkeypatch.setattr(scoring_tasks.reanalyze_application_task, "delay", mock_delay)
    return queued


@pytest.fixture
def sample_job_data():
    """Sample job data for testing"""
    return {
        "title": "Senior Python Developer",
        "description": """
        We are looking for a Senior Python Developer with 5+ years of experience.

        Requirements:
        - Expert knowledge of Python and FastAPI
        - Strong experience with PostgreSQL
        - Experience with Docker and containerization
        """,
        "location": "San Francisco, CA (Remote)",
        "skills": ["Python", "FastAPI", "PostgreSQL"],
        "experience_min": 5,
        "experience_max": 10,
        "status": "active",
    }


@pytest.fixture
def job(db_session):
    """An active job with the default pipeline configuration"""
    job = Job(
        title="Backend Engineer",
        description="Build and operate the hiring platform APIs.",
        location="Remote",
        skills=["Python", "SQL"],
        experience_min=3,
        experience_max=8,
        status=JobStatus.ACTIVE,
    )
    db_session.add(job)
    db_session.commit()
    db_session.refresh(job)
    return job


@pytest.fixture
def make_application(db_session, job):
    """
    Factory for applications on ``job``.

    Usage: make_application(name="Ada", stage=Stage.MCQ_TEST, resume_match_score=80)
    """
    counter = {"n": 0}

    def _make(name=None, email=None, stage=Stage.RESUME_SCREENING, status=None, **fields):
        counter["n"] += 1
        n = counter["n"]
        fields.setdefault("resume_text", "Python developer with six years of FastAPI and PostgreSQL experience.")
        application = Application(
            job_id=job.id,
            name=name or f"Candidate {n}",
            email=email or f"candidate{n}@example.com",
            current_stage=stage,
            status=status or (ApplicationStatus.PENDING if stage == Stage.RESUME_SCREENING else status_for_stage(stage)),
            stage_history=[],
            **fields,
        )
        db_session.add(application)
        db_session.commit()
        db_session.refresh(application)
        return application

    return _make


@pytest.fixture
def application(make_application):
    """A fresh application at resume_screening"""
    return make_application(name="Ada Lovelace", email="ada@example.com")
