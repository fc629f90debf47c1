"""
Email service - handles sending emails.
Supports: Mock (development), Resend HTTP API and SMTP.
"""
import asyncio
import html
import logging
import smtplib
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from typing import Optional
from abc import ABC, abstractmethod

import httpx

from seap.config import settings

logger = logging.getLogger(__name__)


class EmailService(ABC):
    """Base email service interface."""

    is_configured: bool = True

    @abstractmethod
    async def send_email(
        self,
        to: str,
        subject: str,
        body: str,
        html_body: Optional[str] = None
    ) -> bool:
        """Send an email. Returns False on delivery failure, never raises for it."""
        pass

    async def send_campaign_decision_email(
        self,
        to: str,
        campaign_title: str,
        status: str,
        comment: Optional[str] = None,
        simulation_link: Optional[str] = None
    ) -> bool:
        """Tell a campaign owner that an admin approved or rejected their campaign."""
        status_label = status.capitalize() if status else "Updated"
        title = html.escape(campaign_title)
        subject = f"Campaign {campaign_title}: {status_label}"

        body_lines = [
            "Hello,",
            "",
            f"Your campaign \"{campaign_title}\" has been {status_label}.",
        ]
        parts = [
            '<div style="font-family: Arial, sans-serif; font-size: 14px; color: #111">',
            f"<p>Hello,</p><p>Your campaign <strong>{title}</strong> has been <strong>{status_label}</strong>.</p>",
        ]

        if comment:
            body_lines += ["", f"Admin comment: {comment}"]
            parts.append(f"<p><strong>Admin comment:</strong><br/>{html.escape(comment)}</p>")

        if status == "approved" and simulation_link:
            link = html.escape(simulation_link)
            body_lines += ["", "You can access the simulation using the link below:", simulation_link]
            parts.append(
                "<p>You can access the simulation using the link below:</p>"
                f'<p><a href="{link}" style="color:#2563eb">{link}</a></p>'
            )

        body_lines += ["", "Thank you for using SEAP."]
        parts.append("<p>Thank you for using SEAP.</p></div>")

        return await self.send_email(to, subject, "\n".join(body_lines), "".join(parts))

    async def send_campaign_share_email(self, to: str, campaign_title: str, simulation_link: str) -> bool:
        """Send an approved simulation link to a training participant."""
        subject = "Security awareness exercise"
        body = f"""
Hello,

You have been invited to a security awareness exercise ({campaign_title}).

{simulation_link}

Best regards,
SEAP Team
        """
        html_body = f"""
        <html>
        <body>
            <p>Hello,</p>
            <p>You have been invited to a security awareness exercise
               (<strong>{html.escape(campaign_title)}</strong>).</p>
            <p><a href="{html.escape(simulation_link)}">{html.escape(simulation_link)}</a></p>
        </body>
        </html>
        """
        return await self.send_email(to, subject, body, html_body)


class MockEmailService(EmailService):
    """
    Mock email service for development.
    Logs emails instead of sending them.
    """

    def __init__(self, configured: Optional[bool] = None):
        self.sent_emails: list = []
        self.is_configured = settings.DEV_MODE if configured is None else configured

    async def send_email(
        self,
        to: str,
        subject: str,
        body: str,
        html_body: Optional[str] = None
    ) -> bool:
        self.sent_emails.append({"to": to, "subject": subject, "body": body, "html": html_body})
        logger.info(f"[mock email] to={to} subject={subject!r}")
        return True

    def get_last_email(self) -> Optional[dict]:
        """Get the last sent email (for testing)."""
        return self.sent_emails[-1] if self.sent_emails else None


class ResendEmailService(EmailService):
    """Email delivery through the Resend HTTP API."""

    def __init__(self, api_key: str, from_email: str, api_url: str = settings.RESEND_API_URL):
        self.api_key = api_key
        self.from_email = from_email
        self.api_url = api_url

    async def send_email(
        self,
        to: str,
        subject: str,
        body: str,
        html_body: Optional[str] = None
    ) -> bool:
        payload = {
            "from": self.from_email,
            "to": [to],
            "subject": subject,
            "html": html_body or f"<pre>{html.escape(body)}</pre>",
            "text": body,
        }
        headers = {"Authorization": f"Bearer {self.api_key}", "Content-Type": "application/json"}

        try:
            async with httpx.AsyncClient(timeout=10.0) as client:
                response = await client.post(self.api_url, json=payload, headers=headers)
        except httpx.HTTPError as e:
            logger.error(f"Resend request failed for {to}: {e}")
            return False

        if response.status_code >= 400:
            logger.error(f"Resend API error for {to}: {response.status_code} - {response.text}")
            return False

        logger.info(f"Email sent to {to}: {subject}")
        return True


class SMTPEmailService(EmailService):
    """
    SMTP email service.
    Configure with SMTP_HOST, SMTP_PORT, SMTP_USER, SMTP_PASSWORD, EMAIL_FROM.
    """

    def __init__(self):
        self.host = settings.SMTP_HOST
        self.port = settings.SMTP_PORT
        self.user = settings.SMTP_USER
        self.password = settings.SMTP_PASSWORD
        self.from_email = settings.EMAIL_FROM

    def _send_sync(self, to: str, subject: str, body: str, html_body: Optional[str]) -> None:
        msg = MIMEMultipart('alternative')
        msg['Subject'] = subject
        msg['From'] = self.from_email
        msg['To'] = to

        msg.attach(MIMEText(body, 'plain'))
        if html_body:
            msg.attach(MIMEText(html_body, 'html'))

        with smtplib.SMTP(self.host, self.port, timeout=10) as server:
            server.starttls()
            if self.user and self.password:
                server.login(self.user, self.password)
            server.sendmail(self.from_email, to, msg.as_string())

    async def send_email(
        self,
        to: str,
        subject: str,
        body: str,
        html_body: Optional[str] = None
    ) -> bool:
        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(None, self._send_sync, to, subject, body, html_body)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Failed to send email to {to}: {e}")
            return False

        logger.info(f"Email sent to {to}: {subject}")
        return True


# =============================================================================
# EMAIL SERVICE SINGLETON
# =============================================================================

_email_service: Optional[EmailService] = None


def get_email_service() -> EmailService:
    """Get the email service instance."""
    global _email_service

    if _email_service is None:
        if settings.RESEND_API_KEY:
            logger.info("Using Resend Email Service")
            _email_service = ResendEmailService(settings.RESEND_API_KEY, settings.RESEND_FROM_EMAIL)
        elif settings.SMTP_HOST:
            logger.info("Using SMTP Email Service")
            _email_service = SMTPEmailService()
        else:
            logger.warning("No email provider configured; using Mock Email Service")
            _email_service = MockEmailService()

    return _email_service


def set_email_service(service: Optional[EmailService]) -> None:
    """Set custom email service (for testing)."""
    global _email_service
    _email_service = service
