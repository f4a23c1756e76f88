"""
Tests for the Celery re-analysis task (run synchronously, no broker).
"""

import uuid

import pytest

from app.crud import application as application_crud
from app.services import reanalysis
from app.services.ai_matching import ResumeMatchAnalysis, ResumeMatchError
from app.services.stages import Stage
from app.tasks import scoring_tasks


class _SharedSession:
    """Hands the test session to the task without letting it close it."""

    def __init__(self, session):
        self._session = session

    def __getattr__(self, name):
        return getattr(self._session, name)

    def close(self):
        pass


@pytest.fixture
def task_session(db_session, monkeypatch):
    monkeypatch.setattr(scoring_tasks, "SessionLocal", lambda: _SharedSession(db_session))
    return db_session


def test_task_updates_match_score(task_session, make_application, monkeypatch):
    async def fake_match(**kwargs):
        return ResumeMatchAnalysis(match_score=64.25)

    monkeypatch.setattr(reanalysis, "match_resume_to_job", fake_match)
    application = make_application()

    result = scoring_tasks.reanalyze_application_task(str(application.id))

    assert result["status"] == "success"
    task_session.expire_all()
    assert application_crud.get_by_id(task_session, application.id).resume_match_score == 64.2


def test_task_reports_ai_failure(task_session, make_application, monkeypatch):
    async def failing_match(**kwargs):
        raise ResumeMatchError("OpenAI unavailable")

    monkeypatch.setattr(reanalysis, "match_resume_to_job", failing_match)
    application = make_application(resume_match_score=50)

    result = scoring_tasks.reanalyze_application_task(str(application.id))

    assert result == {"status": "failed", "error": "OpenAI unavailable"}
    task_session.expire_all()
    assert application_crud.get_by_id(task_session, application.id).resume_match_score == 50


def test_task_unknown_application(task_session):
    result = scoring_tasks.reanalyze_application_task(str(uuid.uuid4()))
    assert result["status"] == "error"


def _match_returning(score):
    async def fake_match(**kwargs):
        return ResumeMatchAnalysis(match_score=score, recommendation="Good Match")

    return fake_match


def test_screening_a_new_submission_auto_advances(task_session, make_application, monkeypatch):
    monkeypatch.setattr(reanalysis, "match_resume_to_job", _match_returning(75))
    application = make_application()

    result = scoring_tasks.reanalyze_application_task(str(application.id), True)

    assert result["status"] == "success"
    assert result["advanced"] is True
    task_session.expire_all()
    stored = application_crud.get_by_id(task_session, application.id)
    assert stored.current_stage == Stage.MCQ_TEST
    assert stored.resume_match_score == 75
    assert stored.ai_match_data["recommendation"] == "Good Match"
    assert stored.stage_history[-1]["auto_advanced"] is True
    assert stored.stage_history[-1]["actor"] == "ai-screening"


def test_screening_below_threshold_stays(task_session, make_application, monkeypatch):
    monkeypatch.setattr(reanalysis, "match_resume_to_job", _match_returning(59))
    application = make_application()

    result = scoring_tasks.reanalyze_application_task(str(application.id), True)

    assert result["advanced"] is False
    task_session.expire_all()
    assert application_crud.get_by_id(task_session, application.id).current_stage == Stage.RESUME_SCREENING


def test_plain_reanalysis_never_advances(task_session, make_application, monkeypatch):
    monkeypatch.setattr(reanalysis, "match_resume_to_job", _match_returning(95))
    application = make_application()

    result = scoring_tasks.reanalyze_application_task(str(application.id))

    assert result["advanced"] is False
    task_session.expire_all()
    assert application_crud.get_by_id(task_session, application.id).current_stage == Stage.RESUME_SCREENING
