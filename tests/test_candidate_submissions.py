"""
Test suite for candidate submissions through test and interview links.

Tests cover:
- HR setting up the MCQ test for a job
- Grading, one-shot submission and auto-advance for the MCQ test
- Transcript scoring, one-shot submission and auto-advance for the async interview
"""

from datetime import datetime, timezone

import pytest
from sqlalchemy.orm.attributes import set_committed_value

from app.core.exceptions import AlreadySubmitted
from app.crud import application as application_crud
from app.services import candidate_submissions
from app.services.ai_matching import TranscriptEvaluation, TranscriptEvaluationError
from app.services.stages import Stage


QUESTIONS = [
    {"question": "Which keyword defines a generator?", "options": ["return", "yield", "async", "lambda"], "correct_index": 1},
    {"question": "Default isolation level in PostgreSQL?", "options": ["Read committed", "Serializable"], "correct_index": 0},
    {"question": "HTTP status for a created resource?", "options": ["200", "201", "204"], "correct_index": 1},
]

TEST_TOKEN = "a" * 64
INTERVIEW_TOKEN = "b" * 64


@pytest.fixture
def job_with_test(db_session, job):
    job.mcq_questions = QUESTIONS
    db_session.commit()
    return job


@pytest.fixture
def mcq_candidate(make_application, job_with_test):
    """An application at mcq_test holding a test link"""
    return make_application(name="Ada Lovelace", stage=Stage.MCQ_TEST, test_token=TEST_TOKEN)


@pytest.fixture
def interviewee(make_application):
    """An application at async_interview holding an interview link"""
    return make_application(name="Ada Lovelace", stage=Stage.ASYNC_INTERVIEW, interview_token=INTERVIEW_TOKEN)


@pytest.fixture
def mock_evaluation(monkeypatch):
    calls = []

    def _set(score=None, error=None):
        async def fake_evaluate(**kwargs):
            calls.append(kwargs)
            if error:
                raise error
            return TranscriptEvaluation(score=score, strengths=["Clear structure"], feedback="Solid answer")

        monkeypatch.setattr(candidate_submissions, "evaluate_interview_transcript", fake_evaluate)
        return calls

    return _set


class TestMCQSetup:
    """HR endpoints for a job's MCQ questions"""

    def test_put_and_get(self, client, hr_headers, job):
        response = client.put(f"/api/v1/jobs/{job.id}/test", json={"questions": QUESTIONS}, headers=hr_headers)

        assert response.status_code == 200
        assert len(response.json()["questions"]) == 3

        fetched = client.get(f"/api/v1/jobs/{job.id}/test", headers=hr_headers).json()
        assert fetched["questions"][1]["correct_index"] == 0

    def test_no_test_set_up(self, client, hr_headers, job):
        assert client.get(f"/api/v1/jobs/{job.id}/test", headers=hr_headers).status_code == 404

    def test_answer_must_be_an_option(self, client, hr_headers, job):
        payload = {"questions": [{"question": "Q?", "options": ["a", "b"], "correct_index": 2}]}
        response = client.put(f"/api/v1/jobs/{job.id}/test", json=payload, headers=hr_headers)
        assert response.status_code == 422

    def test_requires_hr(self, client, candidate_headers, job):
        response = client.put(f"/api/v1/jobs/{job.id}/test", json={"questions": QUESTIONS}, headers=candidate_headers)
        assert response.status_code == 401


class TestMCQSubmission:
    """POST /candidate/test/{token}"""

    def test_link_shows_questions_without_answers(self, client, mcq_candidate):
        data = client.get(f"/api/v1/candidate/test/{TEST_TOKEN}").json()

        assert [q["question"] for q in data["questions"]] == [q["question"] for q in QUESTIONS]
        assert all("correct_index" not in q for q in data["questions"])

    def test_all_correct_auto_advances(self, client, mcq_candidate):
        response = client.post(f"/api/v1/candidate/test/{TEST_TOKEN}", json={"answers": [1, 0, 1]})

        assert response.status_code == 200
        data = response.json()
        assert data["score"] == 100
        assert data["correct_answers"] == 3
        assert data["passed"] is True
        assert data["advanced"] is True
        assert data["new_stage"] == "async_interview"

    def test_below_threshold_stays(self, client, db_session, mcq_candidate):
        response = client.post(f"/api/v1/candidate/test/{TEST_TOKEN}", json={"answers": [1, 1, 0]})

        data = response.json()
        assert data["score"] == 33.3
        assert data["passed"] is False
        assert data["advanced"] is False

        db_session.expire_all()
        stored = application_crud.get_by_id(db_session, mcq_candidate.id)
        assert stored.current_stage == Stage.MCQ_TEST
        assert stored.mcq_score == 33.3
        assert stored.test_completed_at is not None

    def test_second_submission_refused(self, client, db_session, mcq_candidate):
        client.post(f"/api/v1/candidate/test/{TEST_TOKEN}", json={"answers": [1, 1, 0]})
        second = client.post(f"/api/v1/candidate/test/{TEST_TOKEN}", json={"answers": [1, 0, 1]})

        assert second.status_code == 409
        assert second.json()["detail"] == "Test has already been submitted"

        db_session.expire_all()
        assert application_crud.get_by_id(db_session, mcq_candidate.id).mcq_score == 33.3

    def test_completed_link_hides_questions(self, client, mcq_candidate):
        client.post(f"/api/v1/candidate/test/{TEST_TOKEN}", json={"answers": [1, 1, 0]})
        data = client.get(f"/api/v1/candidate/test/{TEST_TOKEN}").json()

        assert data["completed"] is True
        assert data["questions"] is None

    def test_wrong_answer_count_can_be_retried(self, client, mcq_candidate):
        first = client.post(f"/api/v1/candidate/test/{TEST_TOKEN}", json={"answers": [1]})
        second = client.post(f"/api/v1/candidate/test/{TEST_TOKEN}", json={"answers": [1, 0, 1]})

        assert first.status_code == 400
        assert "Expected 3 answers" in first.json()["detail"]
        assert second.status_code == 200

    def test_job_without_questions(self, client, make_application):
        make_application(stage=Stage.MCQ_TEST, test_token=TEST_TOKEN)
        response = client.post(f"/api/v1/candidate/test/{TEST_TOKEN}", json={"answers": [0]})
        assert response.status_code == 404

    def test_rejected_application(self, client, make_application, job_with_test):
        make_application(stage=Stage.REJECTED, test_token=TEST_TOKEN)
        response = client.post(f"/api/v1/candidate/test/{TEST_TOKEN}", json={"answers": [1, 0, 1]})
        assert response.status_code == 404

    def test_interview_token_cannot_submit_test(self, client, job_with_test, make_application):
        make_application(stage=Stage.MCQ_TEST, interview_token=INTERVIEW_TOKEN)
        response = client.post(f"/api/v1/candidate/test/{INTERVIEW_TOKEN}", json={"answers": [1, 0, 1]})
        assert response.status_code == 404

    def test_concurrent_submission_loses(self, db_session, mcq_candidate):
        """Another request completed the test after this one loaded the row"""
        application_crud.claim_completion(db_session, mcq_candidate.id, "test", datetime.now(timezone.utc))
        set_committed_value(mcq_candidate, "test_completed_at", None)

        with pytest.raises(AlreadySubmitted):
            candidate_submissions.submit_mcq_test(db_session, mcq_candidate, [1, 0, 1])

        db_session.expire_all()
        assert application_crud.get_by_id(db_session, mcq_candidate.id).mcq_score is None


class TestInterviewSubmission:
    """POST /candidate/interview/{token}"""

    def test_scored_and_auto_advanced(self, client, db_session, interviewee, mock_evaluation):
        calls = mock_evaluation(score=72)

        response = client.post(
            f"/api/v1/candidate/interview/{INTERVIEW_TOKEN}",
            json={"transcript": "I led the migration of our billing service.", "question": "Tell me about a project"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["scored"] is True
        assert data["score"] == 72
        assert data["advanced"] is True
        assert data["new_stage"] == "live_interview"
        assert calls[0]["job_title"] == "Backend Engineer"

        db_session.expire_all()
        stored = application_crud.get_by_id(db_session, interviewee.id)
        assert stored.interview_score == 72
        assert stored.interview_transcript.startswith("I led the migration")
        assert stored.interview_evaluation["feedback"] == "Solid answer"
        assert stored.interview_completed_at is not None

    def test_below_threshold_stays(self, client, interviewee, mock_evaluation):
        mock_evaluation(score=49.5)
        data = client.post(f"/api/v1/candidate/interview/{INTERVIEW_TOKEN}", json={"transcript": "Short answer"}).json()

        assert data["advanced"] is False
        assert data["new_stage"] is None

    def test_second_submission_refused(self, client, interviewee, mock_evaluation):
        calls = mock_evaluation(score=40)
        client.post(f"/api/v1/candidate/interview/{INTERVIEW_TOKEN}", json={"transcript": "First take"})
        second = client.post(f"/api/v1/candidate/interview/{INTERVIEW_TOKEN}", json={"transcript": "Second take"})

        assert second.status_code == 409
        assert len(calls) == 1

    def test_ai_failure_keeps_transcript_unscored(self, client, db_session, interviewee, mock_evaluation):
        mock_evaluation(error=TranscriptEvaluationError("OpenAI unavailable"))

        response = client.post(f"/api/v1/candidate/interview/{INTERVIEW_TOKEN}", json={"transcript": "My answer"})

        assert response.status_code == 200
        assert response.json()["scored"] is False

        db_session.expire_all()
        stored = application_crud.get_by_id(db_session, interviewee.id)
        assert stored.interview_transcript == "My answer"
        assert stored.interview_score is None
        assert stored.interview_completed_at is not None
        assert stored.current_stage == Stage.ASYNC_INTERVIEW

    def test_empty_transcript(self, client, interviewee):
        response = client.post(f"/api/v1/candidate/interview/{INTERVIEW_TOKEN}", json={"transcript": ""})
        assert response.status_code == 422
