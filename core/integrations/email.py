"""SMTP email delivery and the FormHire notification templates."""

import html
import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import List, Optional

from core.config import settings

logger = logging.getLogger(__name__)


class EmailService:
    """Email service for sending emails via SMTP."""

    def __init__(
        self,
        smtp_host: Optional[str] = None,
        smtp_port: Optional[int] = None,
        smtp_user: Optional[str] = None,
        smtp_password: Optional[str] = None,
        from_email: Optional[str] = None,
        from_name: Optional[str] = None,
    ):
        """
        Initialize email service. Unset arguments fall back to settings.

        Args:
            smtp_host: SMTP server host
            smtp_port: SMTP server port
            smtp_user: SMTP username
            smtp_password: SMTP password
            from_email: Default sender email
            from_name: Default sender name
        """
        self.smtp_host = smtp_host or settings.smtp_host
        self.smtp_port = smtp_port or settings.smtp_port
        self.smtp_user = smtp_user or settings.smtp_user
        self.smtp_password = smtp_password or settings.smtp_password
        self.from_email = from_email or settings.smtp_from_email or self.smtp_user
        self.from_name = from_name or settings.smtp_from_name

    def build_message(
        self,
        to_email: str | List[str],
        subject: str,
        html_body: str,
        text_body: Optional[str] = None,
        reply_to: Optional[str] = None,
    ) -> MIMEMultipart:
        """Build a multipart/alternative message with text and HTML parts."""
        recipients = to_email if isinstance(to_email, list) else [to_email]

        msg = MIMEMultipart('alternative')
        msg['From'] = f"{self.from_name} <{self.from_email}>"
        msg['To'] = ", ".join(recipients)
        msg['Subject'] = subject
        if reply_to:
            msg['Reply-To'] = reply_to

        if text_body:
            msg.attach(MIMEText(text_body, 'plain', 'utf-8'))
        msg.attach(MIMEText(html_body, 'html', 'utf-8'))
        return msg

    def send_email(
        self,
        to_email: str | List[str],
        subject: str,
        html_body: str,
        text_body: Optional[str] = None,
        reply_to: Optional[str] = None,
    ) -> bool:
        """
        Send an email.

        Args:
            to_email: Recipient email address(es)
            subject: Email subject
            html_body: HTML body
            text_body: Plain-text alternative
            reply_to: Reply-to email address

        Returns:
            True if email sent successfully. Failures are logged, not raised.
        """
        recipients = to_email if isinstance(to_email, list) else [to_email]
        if not recipients:
            logger.info(f"No recipients for email '{subject}', skipping")
            return False

        try:
            msg = self.build_message(recipients, subject, html_body, text_body, reply_to)

            with smtplib.SMTP(self.smtp_host, self.smtp_port, timeout=30) as server:
                server.starttls()
                if self.smtp_user and self.smtp_password:
                    server.login(self.smtp_user, self.smtp_password)
                server.send_message(msg, from_addr=self.from_email, to_addrs=recipients)

            logger.info(f"Email '{subject}' sent to {len(recipients)} recipient(s)")
            return True

        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Failed to send email '{subject}': {e}")
            return False

    def send_template(self, to_email: str | List[str], template: dict) -> bool:
        """Send a dict produced by one of the EmailTemplates builders."""
        return self.send_email(
            to_email,
            template['subject'],
            template['html'],
            text_body=template.get('text'),
        )


def _e(value) -> str:
    return html.escape(str(value)) if value is not None else ''


def _wrap(title: str, header: str, content: str, header_color: str = "#6366f1") -> str:
    return f"""<!DOCTYPE html>
<html>
  <head>
    <meta charset="utf-8">
    <title>{title}</title>
    <style>
      body {{ font-family: Arial, sans-serif; line-height: 1.6; color: #333; }}
      .container {{ max-width: 600px; margin: 0 auto; padding: 20px; }}
      .header {{ background: {header_color}; color: white; padding: 20px; text-align: center; border-radius: 8px 8px 0 0; }}
      .content {{ background: #f9fafb; padding: 30px; border-radius: 0 0 8px 8px; }}
      .info-box {{ background: white; padding: 15px; border-radius: 6px; margin: 15px 0; border-left: 4px solid #6366f1; }}
      .button {{ display: inline-block; background: #6366f1; color: white; padding: 12px 24px; text-decoration: none; border-radius: 6px; margin: 20px 0; }}
    </style>
  </head>
  <body>
    <div class="container">
      <div class="header"><h1>{header}</h1></div>
      <div class="content">
{content}
        <p>Best regards,<br>The FormHire Team</p>
      </div>
    </div>
  </body>
</html>"""


class EmailTemplates:
    """
    FormHire notification templates.

    Each builder returns ``{'subject', 'html', 'text'}``. User-supplied
    values are HTML-escaped in the HTML part.
    """

    @staticmethod
    def welcome_email(user_name: str, site_url: Optional[str] = None) -> dict:
        site_url = site_url or settings.site_url
        content = f"""
        <h2>Hello {_e(user_name)}!</h2>
        <p>Welcome to FormHire! We're excited to have you join our community of job seekers and employers.</p>
        <ul>
          <li>Browse job openings from top companies</li>
          <li>Apply in a few clicks</li>
          <li>Track every application in one place</li>
        </ul>
        <p style="text-align: center;"><a href="{_e(site_url)}/jobs" class="button">Start Job Hunting</a></p>"""
        return {
            'subject': 'Welcome to FormHire!',
            'html': _wrap("Welcome to FormHire", "Welcome to FormHire!", content),
            'text': (
                f"Hello {user_name}!\n\n"
                "Welcome to FormHire! We're excited to have you join our community.\n\n"
                f"Start your job search at: {site_url}/jobs\n\n"
                "Best regards,\nThe FormHire Team\n"
            ),
        }

    @staticmethod
    def application_confirmation(
        applicant_name: str,
        job_title: str,
        company_name: str,
        application_id: int | str,
        site_url: Optional[str] = None,
    ) -> dict:
        site_url = site_url or settings.site_url
        content = f"""
        <h2>Hello {_e(applicant_name)},</h2>
        <p>Thank you for applying for the <strong>{_e(job_title)}</strong> position at <strong>{_e(company_name)}</strong>.</p>
        <div class="info-box">
          <p><strong>Application ID:</strong> {_e(application_id)}</p>
          <p><strong>Status:</strong> Under review</p>
        </div>
        <p>We will review your application and get back to you soon.</p>
        <p style="text-align: center;"><a href="{_e(site_url)}/profile" class="button">Track Your Application</a></p>"""
        return {
            'subject': f"Application Confirmed - {job_title} at {company_name}",
            'html': _wrap("Application Confirmation", "Application Received", content, "#059669"),
            'text': (
                f"Hello {applicant_name},\n\n"
                f"Thank you for applying for {job_title} at {company_name}.\n"
                f"Application ID: {application_id}\n\n"
                "We will review your application and get back to you soon.\n\n"
                "Best regards,\nThe FormHire Team\n"
            ),
        }

    @staticmethod
    def admin_new_application(
        job_title: str,
        applicant_name: str,
        applicant_email: str,
        application_id: int | str,
        resume_url: Optional[str] = None,
        site_url: Optional[str] = None,
    ) -> dict:
        site_url = site_url or settings.site_url
        resume_line = (
            f'<p><strong>Resume:</strong> <a href="{_e(resume_url)}">Download Resume</a></p>'
            if resume_url else ''
        )
        content = f"""
        <h2>New application for: {_e(job_title)}</h2>
        <div class="info-box">
          <p><strong>Name:</strong> {_e(applicant_name)}</p>
          <p><strong>Email:</strong> {_e(applicant_email)}</p>
          <p><strong>Application ID:</strong> {_e(application_id)}</p>
        </div>
        {resume_line}
        <p style="text-align: center;"><a href="{_e(site_url)}/admin/applications" class="button">Review Application</a></p>"""
        return {
            'subject': f"New Application - {job_title}",
            'html': _wrap("New Job Application", "New Job Application Received", content, "#059669"),
            'text': (
                "New Job Application Received\n"
                f"Job: {job_title}\n"
                f"Applicant: {applicant_name}\n"
                f"Email: {applicant_email}\n"
                f"Application ID: {application_id}\n"
                "Please review this application in the admin panel.\n"
            ),
        }

    @staticmethod
    def application_status_update(
        applicant_name: str,
        job_title: str,
        company_name: str,
        status: str,
        message: Optional[str] = None,
        site_url: Optional[str] = None,
    ) -> dict:
        site_url = site_url or settings.site_url
        status_label = status.replace('_', ' ').title()
        message_block = (
            f'<h3>Message from the hiring team:</h3><div class="info-box"><p>{_e(message)}</p></div>'
            if message else ''
        )
        content = f"""
        <h2>Hello {_e(applicant_name)},</h2>
        <p>We have an update regarding your application for the <strong>{_e(job_title)}</strong> position at <strong>{_e(company_name)}</strong>.</p>
        <p>Your application status has been updated to: <strong>{_e(status_label)}</strong></p>
        {message_block}
        <p style="text-align: center;"><a href="{_e(site_url)}/profile" class="button">View All Applications</a></p>"""
        text = (
            f"Hello {applicant_name},\n\n"
            f"Your application for {job_title} at {company_name} has been updated.\n"
            f"Status: {status_label}\n"
        )
        if message:
            text += f"Message: {message}\n"
        text += "\nBest regards,\nThe FormHire Team\n"
        return {
            'subject': f"Application Update - {job_title}",
            'html': _wrap("Application Status Update", "Application Status Update", content),
            'text': text,
        }


# Global email service instance
_email_service: Optional[EmailService] = None


def get_email_service() -> EmailService:
    """Get or create global email service instance."""
    global _email_service
    if _email_service is None:
        _email_service = EmailService()
    return _email_service
