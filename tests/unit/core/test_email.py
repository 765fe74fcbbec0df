"""
Tests for email delivery.

Tests:
- Template content and HTML escaping
- SMTP sending with smtplib mocked
- Worker task retry behaviour
- Fire-and-forget dispatch never raises
"""

import smtplib
from unittest.mock import MagicMock, Mock, patch

import pytest

from api.services.notifications import _dispatch
from core.integrations.email import EmailService, EmailTemplates
from workers.tasks import notifications as tasks


class TestEmailTemplates:
    """Test template builders."""

    def test_welcome(self):
        template = EmailTemplates.welcome_email("Jane", site_url="https://formhire.example")

        assert template["subject"] == "Welcome to FormHire!"
        assert "Hello Jane!" in template["html"]
        assert "https://formhire.example/jobs" in template["text"]

    def test_confirmation(self):
        template = EmailTemplates.application_confirmation("Jane", "Backend Engineer", "Acme", 42)

        assert template["subject"] == "Application Confirmed - Backend Engineer at Acme"
        assert "Application ID: 42" in template["text"]

    def test_admin_notice_with_resume(self):
        template = EmailTemplates.admin_new_application(
            "Backend Engineer", "Jane", "jane@example.com", 42, resume_url="https://cdn.example.com/r.pdf"
        )

        assert template["subject"] == "New Application - Backend Engineer"
        assert "Download Resume" in template["html"]

    def test_admin_notice_without_resume(self):
        template = EmailTemplates.admin_new_application("Backend Engineer", "Jane", "jane@example.com", 42)

        assert "Download Resume" not in template["html"]

    def test_status_update(self):
        template = EmailTemplates.application_status_update(
            "Jane", "Backend Engineer", "Acme", "INTERVIEW_SCHEDULED", "See you Monday"
        )

        assert template["subject"] == "Application Update - Backend Engineer"
        assert "Interview Scheduled" in template["html"]
        assert "Message: See you Monday" in template["text"]

    def test_status_update_without_message(self):
        template = EmailTemplates.application_status_update("Jane", "Backend Engineer", "Acme", "REVIEWED")

        assert "Message from the hiring team" not in template["html"]
        assert "Message:" not in template["text"]

    def test_user_values_are_escaped(self):
        template = EmailTemplates.application_confirmation(
            "<script>alert(1)</script>", "Dev & Ops", "Acme", 1
        )

        assert "<script>" not in template["html"]
        assert "&lt;script&gt;" in template["html"]
        assert "Dev &amp; Ops" in template["html"]


class TestEmailService:
    """Test SMTP delivery."""

    @pytest.fixture
    def service(self):
        return EmailService(
            smtp_host="smtp.test",
            smtp_port=2525,
            smtp_user="mailer",
            smtp_password="pw",
            from_email="noreply@formhire.test",
            from_name="FormHire",
        )

    def test_send(self, service):
        with patch("core.integrations.email.smtplib.SMTP") as smtp_cls:
            server = smtp_cls.return_value.__enter__.return_value

            assert service.send_email(["a@x.com", "b@x.com"], "Hi", "<p>Hi</p>", "Hi") is True

        smtp_cls.assert_called_once_with("smtp.test", 2525, timeout=30)
        server.starttls.assert_called_once()
        server.login.assert_called_once_with("mailer", "pw")
        message = server.send_message.call_args.args[0]
        assert message["Subject"] == "Hi"
        assert message["To"] == "a@x.com, b@x.com"
        assert message["From"] == "FormHire <noreply@formhire.test>"

    def test_smtp_failure_returns_false(self, service):
        with patch("core.integrations.email.smtplib.SMTP", side_effect=smtplib.SMTPConnectError(421, "down")):
            assert service.send_email("a@x.com", "Hi", "<p>Hi</p>") is False

    def test_no_recipients(self, service):
        with patch("core.integrations.email.smtplib.SMTP") as smtp_cls:
            assert service.send_email([], "Hi", "<p>Hi</p>") is False

        smtp_cls.assert_not_called()

    def test_send_template(self, service):
        template = EmailTemplates.welcome_email("Jane")
        with patch.object(service, "send_email", return_value=True) as send:
            assert service.send_template("jane@example.com", template) is True

        send.assert_called_once_with(
            "jane@example.com", template["subject"], template["html"], text_body=template["text"]
        )


class TestDeliverTask:
    """Test the worker-side retry policy."""

    def _task(self, retries: int) -> Mock:
        task = Mock()
        task.request.retries = retries
        task.request.id = "task-1"
        task.retry.return_value = RuntimeError("retry scheduled")
        return task

    def test_sent(self):
        service = Mock()
        service.send_template.return_value = True
        with patch.object(tasks, "get_email_service", return_value=service):
            result = tasks._deliver(self._task(0), "jane@example.com", EmailTemplates.welcome_email("Jane"))

        assert result == {"status": "sent", "subject": "Welcome to FormHire!"}

    def test_failure_retries(self):
        service = Mock()
        service.send_template.return_value = False
        task = self._task(0)
        with patch.object(tasks, "get_email_service", return_value=service):
            with pytest.raises(RuntimeError, match="retry scheduled"):
                tasks._deliver(task, "jane@example.com", EmailTemplates.welcome_email("Jane"))

        task.retry.assert_called_once_with(countdown=tasks.RETRY_COUNTDOWN, max_retries=tasks.MAX_RETRIES)

    def test_gives_up_after_max_retries(self):
        service = Mock()
        service.send_template.return_value = False
        task = self._task(tasks.MAX_RETRIES)
        with patch.object(tasks, "get_email_service", return_value=service):
            result = tasks._deliver(task, "jane@example.com", EmailTemplates.welcome_email("Jane"))

        assert result["status"] == "failed"
        task.retry.assert_not_called()


class TestDispatch:
    """Test fire-and-forget enqueueing."""

    def test_enqueues(self):
        task = MagicMock()

        assert _dispatch(task, to="jane@example.com") is True
        task.delay.assert_called_once_with(to="jane@example.com")

    def test_broker_failure_is_swallowed(self, caplog):
        task = MagicMock()
        task.name = "workers.tasks.notifications.send_welcome_email"
        task.delay.side_effect = ConnectionError("broker unreachable")

        assert _dispatch(task, to="jane@example.com") is False
        assert "Failed to enqueue" in caplog.text
