"""
Tests for the application service.

Tests:
- Submission happy path, answer flattening and snapshots
- Required fields and required question answers
- Closed, missing and duplicate jobs
- Concurrent duplicate caught by the unique constraint
- Status updates, logs and notifications
- Listing, lookup and deletion
"""

from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy import func, select

from api.schemas.jobs import JobFields
from api.services import applications as application_service
from api.services import jobs as job_service
from conftest import ADMIN_EMAIL, dispatched_tasks, make_job_fields, make_payload, questions
from core.exceptions import (
    DuplicateApplication,
    JobClosed,
    NotFound,
    Unauthenticated,
    ValidationError,
)
from core.security import Principal
from database.engine import AsyncSessionLocal
from database.models.applications import (
    Application,
    ApplicationAnswer,
    ApplicationLog,
    ApplicationStatus,
)
from database.models.users import User


async def create_job(qs=None, **overrides):
    return await job_service.create_job(ADMIN_EMAIL, make_job_fields(**overrides), qs)


async def count_rows(model) -> int:
    async with AsyncSessionLocal() as session:
        return (await session.execute(select(func.count()).select_from(model))).scalar()


class TestSubmitApplication:
    """Test application submission."""

    async def test_submit_creates_pending_application(self, db, user_principal):
        job = await create_job()

        application = await application_service.submit_application(user_principal, job.id, make_payload())

        assert application.status == ApplicationStatus.PENDING
        assert application.job_id == job.id
        assert application.applicant_email == "jane@example.com"
        assert application.applicant_name == "Jane Doe"
        assert application.job.title == "Backend Engineer"

    async def test_submit_creates_user_on_first_action(self, db, user_principal, dispatched):
        job = await create_job()

        await application_service.submit_application(user_principal, job.id, make_payload())

        async with AsyncSessionLocal() as session:
            user = (await session.execute(select(User))).scalar_one()
        assert user.email == "jane@example.com"
        assert user.image == "https://img.example.com/jane.png"
        assert dispatched_tasks(dispatched)[0] == "send_welcome_email"

    async def test_email_is_matched_case_insensitively(self, db):
        first_job = await create_job(title="One")
        second_job = await create_job(title="Two")

        await application_service.submit_application(Principal(email="Jane@Example.com"), first_job.id, make_payload())
        await application_service.submit_application(Principal(email="jane@example.com"), second_job.id, make_payload())

        assert await count_rows(User) == 1

    async def test_anonymous_rejected(self, db):
        job = await create_job()

        with pytest.raises(Unauthenticated):
            await application_service.submit_application(None, job.id, make_payload())

    async def test_missing_job(self, db, user_principal):
        with pytest.raises(NotFound):
            await application_service.submit_application(user_principal, 404, make_payload())

    async def test_closed_job(self, db, user_principal):
        job = await create_job(is_active=False)

        with pytest.raises(JobClosed) as exc_info:
            await application_service.submit_application(user_principal, job.id, make_payload())

        assert exc_info.value.status_code == 403
        assert await count_rows(Application) == 0

    async def test_second_application_is_duplicate(self, db, user_principal):
        job = await create_job()
        await application_service.submit_application(user_principal, job.id, make_payload())

        with pytest.raises(DuplicateApplication) as exc_info:
            await application_service.submit_application(user_principal, job.id, make_payload(why_interested="Again"))

        assert exc_info.value.message == "You have already applied for this position"
        assert await count_rows(Application) == 1

    async def test_duplicate_takes_precedence_over_validation(self, db, user_principal):
        job = await create_job()
        await application_service.submit_application(user_principal, job.id, make_payload())

        with pytest.raises(DuplicateApplication):
            await application_service.submit_application(user_principal, job.id, make_payload(phone_number=""))

    async def test_concurrent_duplicate_caught_by_constraint(self, db, user_principal):
        job = await create_job()
        await application_service.submit_application(user_principal, job.id, make_payload())

        # The pre-check misses the existing row, as it would under a race
        finder = AsyncMock(side_effect=[None, "existing"])

        with patch.object(application_service, "find_existing_application", finder):
            with pytest.raises(DuplicateApplication):
                await application_service.submit_application(user_principal, job.id, make_payload())

        assert finder.await_count == 2
        assert await count_rows(Application) == 1

    async def test_missing_required_fields_all_reported(self, db, user_principal):
        job = await create_job()

        with pytest.raises(ValidationError) as exc_info:
            await application_service.submit_application(
                user_principal,
                job.id,
                make_payload(phone_number="  ", why_interested=None, resume_url=""),
            )

        assert set(exc_info.value.fields) == {"phoneNumber", "whyInterested", "resumeUrl"}
        assert await count_rows(Application) == 0

    async def test_resume_optional_when_job_allows(self, db, user_principal):
        job = await create_job(resume_required=False)

        application = await application_service.submit_application(
            user_principal, job.id, make_payload(resume_url=None)
        )

        assert application.resume_url is None

    async def test_user_survives_failed_submission(self, db, user_principal):
        job = await create_job()

        with pytest.raises(ValidationError):
            await application_service.submit_application(user_principal, job.id, make_payload(phone_number=""))

        assert await count_rows(User) == 1
        assert await count_rows(Application) == 0

    async def test_required_question_must_be_answered(self, db, user_principal):
        job = await create_job(questions(("Years of Go?", "text", True), ("Blog?", "text", False)))
        required_id = job.questions[0].id

        with pytest.raises(ValidationError) as exc_info:
            await application_service.submit_application(
                user_principal, job.id, make_payload({required_id: "   "})
            )

        assert exc_info.value.fields == [f"customAnswers.{required_id}"]

    async def test_unknown_question_rejected(self, db, user_principal):
        job = await create_job(questions(("Q", "text", False)))

        with pytest.raises(ValidationError):
            await application_service.submit_application(user_principal, job.id, make_payload({9999: "hi"}))

    async def test_answers_flattened_and_snapshotted(self, db, user_principal):
        job = await create_job(
            questions(
                ("Languages", "checkbox", True, ["Python", "Go", "Rust"]),
                ("Anything else?", "textarea", False),
                ("Blog?", "text", False),
            )
        )
        langs, extra, blog = (q.id for q in job.questions)

        application = await application_service.submit_application(
            user_principal,
            job.id,
            make_payload({langs: ["Python", "Go"], extra: "  Thanks  ", blog: ""}),
        )

        answers = {a.question_id: a for a in application.answers}
        assert set(answers) == {langs, extra}
        assert answers[langs].answer == "Python, Go"
        assert answers[langs].question_text == "Languages"
        assert answers[extra].answer == "Thanks"

    async def test_answers_survive_question_replacement(self, db, user_principal):
        job = await create_job(questions(("Original question", "text", True)))
        application = await application_service.submit_application(
            user_principal, job.id, make_payload({job.questions[0].id: "My answer"})
        )

        await job_service.update_job(job.id, JobFields(), questions(("Replacement", "text", False)), partial=True)

        reloaded = await application_service.get_application(application.id)
        assert len(reloaded.answers) == 1
        assert reloaded.answers[0].question_id is None
        assert reloaded.answers[0].question_text == "Original question"
        assert reloaded.answers[0].answer == "My answer"

    async def test_submission_notifies_applicant_and_admins(self, db, user_principal, dispatched):
        job = await create_job()

        application = await application_service.submit_application(user_principal, job.id, make_payload())

        assert dispatched_tasks(dispatched) == [
            "send_welcome_email",
            "send_application_confirmation",
            "send_admin_new_application",
        ]
        confirmation = dispatched.call_args_list[1].kwargs
        assert confirmation["to"] == "jane@example.com"
        assert confirmation["application_id"] == application.id
        admin_notice = dispatched.call_args_list[2].kwargs
        assert admin_notice["to"] == ["admin@formhire.test", "boss@formhire.test"]

    async def test_enqueue_failure_does_not_fail_submission(self, db, user_principal, dispatched):
        job = await create_job()
        dispatched.return_value = False

        application = await application_service.submit_application(user_principal, job.id, make_payload())

        assert application.id is not None
        assert await count_rows(Application) == 1


class TestUpdateStatus:
    """Test status changes."""

    async def _apply(self, principal):
        job = await create_job()
        return await application_service.submit_application(principal, job.id, make_payload())

    async def test_status_and_message_set(self, db, user_principal, dispatched):
        application = await self._apply(user_principal)
        dispatched.reset_mock()

        updated = await application_service.update_status(application.id, "reviewed", "Looks promising")

        assert updated.status == ApplicationStatus.REVIEWED
        assert updated.status_message == "Looks promising"
        assert updated.status_updated_at is not None
        assert [(log.action, log.notes) for log in updated.logs] == [("REVIEWED", "Looks promising")]
        assert dispatched_tasks(dispatched) == ["send_status_update"]
        assert dispatched.call_args.kwargs["status"] == "REVIEWED"
        assert dispatched.call_args.kwargs["message"] == "Looks promising"

    async def test_no_log_without_note(self, db, user_principal):
        application = await self._apply(user_principal)

        await application_service.update_status(application.id, "INTERVIEW_SCHEDULED", "   ")

        assert await count_rows(ApplicationLog) == 0

    async def test_unchanged_status_sends_no_email(self, db, user_principal, dispatched):
        application = await self._apply(user_principal)
        dispatched.reset_mock()

        await application_service.update_status(application.id, "PENDING", "Still looking")

        assert dispatched.call_count == 0

    async def test_invalid_status(self, db, user_principal):
        application = await self._apply(user_principal)

        with pytest.raises(ValidationError) as exc_info:
            await application_service.update_status(application.id, "INTERVIEW")

        assert exc_info.value.fields == ["status"]
        stored = await application_service.get_application(application.id)
        assert stored.status == ApplicationStatus.PENDING

    async def test_missing_application(self, db):
        with pytest.raises(NotFound):
            await application_service.update_status(777, "ACCEPTED")


class TestQueries:
    """Test listing, has-applied checks and deletion."""

    async def test_has_applied(self, db, user_principal):
        job = await create_job()

        assert await application_service.check_has_applied(user_principal, job.id) == (False, None)

        await application_service.submit_application(user_principal, job.id, make_payload())
        has_applied, application = await application_service.check_has_applied(user_principal, job.id)

        assert has_applied is True
        assert application.job_id == job.id

    async def test_has_applied_anonymous(self, db):
        assert await application_service.check_has_applied(None, 1) == (False, None)

    async def test_user_sees_only_own_applications(self, db, user_principal):
        job = await create_job()
        await application_service.submit_application(user_principal, job.id, make_payload())
        await application_service.submit_application(Principal(email="other@example.com"), job.id, make_payload())

        mine = await application_service.list_applications_for_user(user_principal)

        assert [a.applicant_email for a in mine] == ["jane@example.com"]

    async def test_admin_filters(self, db, user_principal):
        first = await create_job(title="One")
        second = await create_job(title="Two")
        a1 = await application_service.submit_application(user_principal, first.id, make_payload())
        await application_service.submit_application(user_principal, second.id, make_payload())
        await application_service.update_status(a1.id, "ACCEPTED")

        by_job = await application_service.list_applications_for_admin(job_id=second.id)
        by_status = await application_service.list_applications_for_admin(status="accepted")

        assert [a.job_id for a in by_job] == [second.id]
        assert [a.id for a in by_status] == [a1.id]

    async def test_delete_application_removes_answers_and_logs(self, db, user_principal):
        job = await create_job(questions(("Q", "text", True)))
        application = await application_service.submit_application(
            user_principal, job.id, make_payload({job.questions[0].id: "A"})
        )
        await application_service.update_status(application.id, "REJECTED", "Not a fit")

        await application_service.delete_application(application.id)

        assert await count_rows(Application) == 0
        assert await count_rows(ApplicationAnswer) == 0
        assert await count_rows(ApplicationLog) == 0
        with pytest.raises(NotFound):
            await application_service.delete_application(application.id)

    async def test_can_reapply_after_deletion(self, db, user_principal):
        job = await create_job()
        application = await application_service.submit_application(user_principal, job.id, make_payload())
        await application_service.delete_application(application.id)

        again = await application_service.submit_application(user_principal, job.id, make_payload())

        assert again.id != application.id
