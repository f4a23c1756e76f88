"""
Tests for bulk actions.

Tests cover:
- Request-level validation happens before any write
- Per-item failures are isolated and reported
- Write and notification outcomes are tracked separately
"""

import pytest
from sqlalchemy.exc import IntegrityError

from app.core.exceptions import ValidationError
from app.crud import application as application_crud
from app.services.bulk_operations import apply_bulk_action
from app.services.stages import ApplicationStatus, Stage


@pytest.fixture
def five_applications(make_application):
    return [make_application() for _ in range(5)]


class TestRequestValidation:
    """Invalid top-level parameters abort the whole request"""

    def test_invalid_status_touches_nothing(self, db_session, five_applications):
        ids = [a.id for a in five_applications]

        with pytest.raises(ValidationError):
            apply_bulk_action(db_session, "update_status", ids, {"status": "bogus"})

        db_session.expire_all()
        for application_id in ids:
            application = application_crud.get_by_id(db_session, application_id)
            assert application.status == ApplicationStatus.PENDING

    def test_missing_status(self, db_session, five_applications):
        with pytest.raises(ValidationError):
            apply_bulk_action(db_session, "update_status", [five_applications[0].id], {})

    def test_unknown_action(self, db_session, five_applications):
        with pytest.raises(ValidationError):
            apply_bulk_action(db_session, "archive", [five_applications[0].id], {})

    def test_invalid_target_stage(self, db_session, five_applications):
        with pytest.raises(ValidationError):
            apply_bulk_action(db_session, "advance_stage", [five_applications[0].id], {"target_stage": "onsite"})

    def test_send_email_requires_subject_and_message(self, db_session, five_applications):
        with pytest.raises(ValidationError):
            apply_bulk_action(db_session, "send_email", [five_applications[0].id], {"subject": "Hi"})

    def test_empty_id_list(self, db_session):
        with pytest.raises(ValidationError):
            apply_bulk_action(db_session, "reject", [], {})


class TestAdvanceStage:
    """advance_stage with per-item failure isolation"""

    def test_one_failing_write_does_not_stop_the_batch(self, db_session, five_applications, monkeypatch):
        ids = [a.id for a in five_applications]
        failing_id = ids[2]
        real_save = application_crud.save

        def flaky_save(db, application):
            if application.id == failing_id:
                raise IntegrityError("UPDATE applications", {}, Exception("check constraint failed"))
            return real_save(db, application)

        monkeypatch.setattr(application_crud, "save", flaky_save)

        summary = apply_bulk_action(db_session, "advance_stage", ids, {})
        response = summary.to_response()

        assert response["success"] is True
        assert response["success_count"] == 4
        assert response["error_count"] == 1
        assert response["advanced_count"] == 4

        failed = [r for r in summary.results if not r.success]
        assert len(failed) == 1
        assert failed[0].id == failing_id
        assert failed[0].error
        assert failed[0].write_succeeded is False

        db_session.expire_all()
        for application_id in ids:
            stage = application_crud.get_by_id(db_session, application_id).current_stage
            if application_id == failing_id:
                assert stage == Stage.RESUME_SCREENING
            else:
                assert stage == Stage.MCQ_TEST

    def test_check_constraint_failure_is_isolated(self, db_session, five_applications):
        """The database itself refuses one row; the rest of the batch still commits"""
        ids = [a.id for a in five_applications]
        broken = five_applications[0]
        # Pending out-of-range value: flushed with this row's commit and refused by ck_applications_overall_score_range
        broken.overall_score = 150

        summary = apply_bulk_action(db_session, "advance_stage", ids, {})

        assert summary.error_count == 1
        assert summary.success_count == 4
        assert summary.results[0].success is False
        assert summary.results[0].write_succeeded is False
        assert summary.results[0].error == "Database error: IntegrityError"

        db_session.expire_all()
        stored = application_crud.get_by_id(db_session, broken.id)
        assert stored.current_stage == Stage.RESUME_SCREENING
        assert stored.overall_score is None
        for application_id in ids[1:]:
            assert application_crud.get_by_id(db_session, application_id).current_stage == Stage.MCQ_TEST

    def test_unknown_id_is_a_per_item_error(self, db_session, five_applications):
        import uuid

        missing = uuid.uuid4()
        summary = apply_bulk_action(db_session, "advance_stage", [five_applications[0].id, missing], {})

        assert summary.success_count == 1
        assert summary.results[1].error == "Application not found"

    def test_application_at_final_stage(self, db_session, make_application):
        at_offer = make_application(stage=Stage.OFFER)
        summary = apply_bulk_action(db_session, "advance_stage", [at_offer.id], {})

        assert summary.error_count == 1
        assert summary.results[0].error == "Already at final stage"

    def test_explicit_target_stage(self, db_session, five_applications):
        ids = [a.id for a in five_applications[:2]]
        summary = apply_bulk_action(db_session, "advance_stage", ids, {"target_stage": "live_interview"})

        assert summary.success_count == 2
        assert all(r.new_stage == Stage.LIVE_INTERVIEW for r in summary.results)


class TestReject:
    """Bulk reject with optional rejection emails"""

    def test_reject_and_email(self, db_session, five_applications, outbox):
        ids = [a.id for a in five_applications[:3]]
        summary = apply_bulk_action(
            db_session,
            "reject",
            ids,
            {"send_rejection_email": True, "rejection_reason": "We hired internally."},
        )

        response = summary.to_response()
        assert response["rejected_count"] == 3
        assert all(r.notify_succeeded for r in summary.results)
        assert len(outbox.sent) == 3
        assert "We hired internally." in outbox.sent[0]["html"]

    def test_email_failure_does_not_undo_rejection(self, db_session, five_applications, outbox):
        target = five_applications[0]
        outbox.fail_for.add(target.email)

        summary = apply_bulk_action(db_session, "reject", [target.id], {"send_rejection_email": True})
        result = summary.results[0]

        assert result.success is True
        assert result.write_succeeded is True
        assert result.notify_succeeded is False
        assert result.error

        db_session.expire_all()
        assert application_crud.get_by_id(db_session, target.id).current_stage == Stage.REJECTED

    def test_rejecting_twice_sends_one_email(self, db_session, five_applications, outbox):
        target = five_applications[0]
        params = {"send_rejection_email": True}

        apply_bulk_action(db_session, "reject", [target.id], params)
        summary = apply_bulk_action(db_session, "reject", [target.id], params)

        assert summary.success_count == 1
        assert len(outbox.to(target.email)) == 1

    def test_hired_candidate_cannot_be_rejected(self, db_session, make_application):
        hired = make_application(stage=Stage.HIRED)
        summary = apply_bulk_action(db_session, "reject", [hired.id], {})

        assert summary.error_count == 1
        assert summary.results[0].write_succeeded is False


class TestUpdateStatus:
    def test_shortlist(self, db_session, five_applications):
        ids = [a.id for a in five_applications]
        response = apply_bulk_action(db_session, "update_status", ids, {"status": "shortlisted"}).to_response()

        assert response["updated_count"] == 5
        assert all(r["status"] == "shortlisted" for r in response["results"])


class TestSendEmail:
    """Custom emails: success is the delivery"""

    def test_custom_email_rendered_per_candidate(self, db_session, make_application, outbox):
        applications = [make_application(name="Grace Hopper"), make_application(name="Alan Turing")]
        summary = apply_bulk_action(
            db_session,
            "send_email",
            [a.id for a in applications],
            {"subject": "Update on {job_title}", "message": "<p>Hi {name}</p>"},
        )

        assert summary.to_response()["sent_count"] == 2
        assert outbox.sent[0]["subject"] == "Update on Backend Engineer"
        assert "Hi Grace Hopper" in outbox.sent[0]["html"]
        assert "Hi Alan Turing" in outbox.sent[1]["html"]

    def test_delivery_failure(self, db_session, make_application, outbox):
        applications = [make_application(), make_application()]
        outbox.raise_for.add(applications[1].email)

        summary = apply_bulk_action(
            db_session, "send_email", [a.id for a in applications], {"subject": "Hi", "message": "Hello"}
        )

        assert summary.success_count == 1
        assert summary.results[1].notify_succeeded is False
        assert "SES unavailable" in summary.results[1].error


class TestInvites:
    """Bulk invitations: success needs the token and the delivery"""

    def test_send_test_invites(self, db_session, five_applications, outbox):
        ids = [a.id for a in five_applications[:2]]
        response = apply_bulk_action(db_session, "send_test_invite", ids, {}).to_response()

        assert response["sent_count"] == 2
        assert len(outbox.sent) == 2

    def test_already_invited_is_a_per_item_error(self, db_session, five_applications):
        ids = [a.id for a in five_applications[:2]]
        apply_bulk_action(db_session, "send_interview_invite", [ids[0]], {})

        summary = apply_bulk_action(db_session, "send_interview_invite", ids, {})

        assert summary.success_count == 1
        assert summary.results[0].error == "Interview invitation already sent"

    def test_delivery_failure_keeps_token(self, db_session, five_applications, outbox):
        target = five_applications[0]
        outbox.fail_for.add(target.email)

        summary = apply_bulk_action(db_session, "send_test_invite", [target.id], {})
        result = summary.results[0]

        assert result.success is False
        assert result.write_succeeded is True
        assert result.notify_succeeded is False

        db_session.expire_all()
        assert application_crud.get_by_id(db_session, target.id).test_token is not None
