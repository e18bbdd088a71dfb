"""Transactional emails (Resend) with a delivery log row for every attempt."""

from __future__ import annotations

import html
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime

import httpx

from acadvizen.core.result import OperationResult, service_operation
from acadvizen.exceptions import DependencyFailure, ValidationError
from acadvizen.store.gateway import EntityStore
from acadvizen.store.records import EmailLog, EmailStatus


_BRAND_NAME = "AcadVizen Digital Hub"
_PRIMARY_COLOR = "#2563eb"
_RESEND_SEND_EMAILS_URL = "https://api.resend.com/emails"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EmailTemplate:
    subject: str
    title: str
    body: str  # str.format() placeholders, filled with escaped variables


_PARAGRAPH = '<p style="margin:0 0 12px 0; font-size:14px; line-height:1.6; color:#475569;">{}</p>'
_SIGNATURE = _PARAGRAPH.format("Best regards,<br />AcadVizen Team")


def _paragraphs(*lines: str) -> str:
    return "\n".join(_PARAGRAPH.format(line) for line in lines) + "\n" + _SIGNATURE


TEMPLATES: dict[str, EmailTemplate] = {
    "welcome": EmailTemplate(
        subject="Welcome to AcadVizen Digital Hub - Your Account is Ready!",
        title="Welcome to AcadVizen Digital Hub!",
        body=_paragraphs(
            "Dear {name},",
            "Your registration has been confirmed. Here are your login credentials:",
            "Student ID: <strong>{student_id}</strong><br />Email: {email}<br />"
            "Temporary Password: <strong>{password}</strong>",
            'Please login at: <a href="{login_url}">{login_url}</a>',
            "Important: Please change your password after your first login.",
        ),
    ),
    "payment_confirmation": EmailTemplate(
        subject="Payment Confirmation - AcadVizen Digital Hub",
        title="Payment Confirmation",
        body=_paragraphs(
            "Dear {name},",
            "Your payment has been successfully processed.",
            "Amount: &#8377;{amount}<br />Transaction ID: {transaction_id}<br />{course_line}",
            "Thank you for your payment!",
        ),
    ),
    "certificate": EmailTemplate(
        subject="Congratulations! Your Certificate for {course_name} is Ready",
        title="Congratulations on Your Achievement!",
        body=_paragraphs(
            "Dear {name},",
            "You have successfully completed the course: {course_name}",
            "Your certificate is ready!",
            'Certificate Number: {certificate_number}<br />Download URL: <a href="{certificate_url}">'
            "{certificate_url}</a>",
            "Keep up the great work!",
        ),
    ),
    "registration_pending": EmailTemplate(
        subject="Registration Received - AcadVizen Digital Hub",
        title="Registration Received",
        body=_paragraphs(
            "Dear {name},",
            "Thank you for registering with AcadVizen Digital Hub!",
            "Your registration is currently pending review by our team.",
            "You will receive another email once your registration is confirmed.",
        ),
    ),
    "password_reset": EmailTemplate(
        subject="Password Reset - AcadVizen Digital Hub",
        title="Password Reset Request",
        body=_paragraphs(
            "You requested a password reset for your AcadVizen account.",
            'Click the link below to reset your password:<br /><a href="{reset_link}">{reset_link}</a>',
            "If you didn't request this, please ignore this email.",
        ),
    ),
}


def _render_email_layout(*, title: str, body_html: str) -> str:
    year = datetime.now(UTC).year
    safe_title = html.escape(title)

    return f"""\
<!doctype html>
<html lang="en">
  <head>
    <meta charset="utf-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1" />
    <title>{safe_title}</title>
  </head>
  <body style="margin:0; padding:0; background-color:#f6f8fb; font-family:Roboto, -apple-system, 'Segoe UI', Arial, sans-serif;">
    <table role="presentation" width="100%" cellspacing="0" cellpadding="0" style="border-collapse:collapse; width:100%; background-color:#f6f8fb;">
      <tr>
        <td align="center" style="padding:24px 16px;">
          <table role="presentation" width="100%" cellspacing="0" cellpadding="0" style="border-collapse:collapse; max-width:560px; background-color:#ffffff; border:1px solid #e5e7eb; border-radius:16px;">
            <tr>
              <td style="padding:24px 24px 0 24px;">
                <div style="font-size:14px; font-weight:700; color:{_PRIMARY_COLOR};">{_BRAND_NAME}</div>
                <h1 style="margin:12px 0 0 0; font-size:22px; line-height:1.3; color:#0f172a;">{safe_title}</h1>
              </td>
            </tr>
            <tr>
              <td style="padding:20px 24px 24px 24px;">
                {body_html}
              </td>
            </tr>
            <tr>
              <td style="padding:16px 24px; background-color:#f8fafc; border-top:1px solid #e5e7eb;">
                <div style="font-size:12px; color:#94a3b8;">&copy; {year} {_BRAND_NAME}</div>
              </td>
            </tr>
          </table>
        </td>
      </tr>
    </table>
  </body>
</html>
"""


def render_email(template: str, variables: Mapping[str, str]) -> tuple[str, str]:
    """Return (subject, html) for a named template.

    Raises
    ------
        ValidationError: unknown template or a variable the template needs is missing
    """
    entry = TEMPLATES.get(template)
    if entry is None:
        msg = f"Unknown email template: {template}"
        raise ValidationError(msg)

    safe = {key: html.escape(str(value)) for key, value in variables.items()}
    try:
        subject = entry.subject.format(**{key: str(value) for key, value in variables.items()})
        body = entry.body.format(**safe)
    except KeyError as e:
        msg = f"Missing variable {e} for email template {template}"
        raise ValidationError(msg) from e
    return subject, _render_email_layout(title=entry.title, body_html=body)


class EmailService:
    """Send templated mail through Resend when configured; log every attempt to `email_logs`.

    Without an API key and sender address nothing is sent and the attempt is
    logged as `pending`.
    """

    def __init__(
        self,
        store: EntityStore,
        *,
        api_key: str = "",
        from_email: str = "",
        from_name: str = "",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.store = store
        self.api_key = api_key
        self.from_email = from_email
        self.from_name = from_name
        self._transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.api_key and self.from_email)

    @service_operation("Send email")
    async def send(self, to: str, template: str, variables: Mapping[str, str]) -> EmailStatus:
        """Render and deliver one email; the returned status is what got logged."""
        subject, html_content = render_email(template, variables)

        if not self.configured:
            logger.info(f"Email delivery not configured, queued {template} email to {to}")
            await self._log(to, subject, template, EmailStatus.PENDING)
            return EmailStatus.PENDING

        try:
            await self._deliver(to, subject, html_content)
        except (httpx.HTTPError, ValueError) as e:
            await self._log(to, subject, template, EmailStatus.FAILED, error_message=str(e))
            msg = "Failed to send email"
            raise DependencyFailure(msg) from e

        await self._log(to, subject, template, EmailStatus.SENT)
        return EmailStatus.SENT

    async def _deliver(self, to: str, subject: str, html_content: str) -> None:
        from_email = f"{self.from_name} <{self.from_email}>" if self.from_name else self.from_email
        headers = {"Authorization": f"Bearer {self.api_key}", "Content-Type": "application/json"}
        payload = {"from": from_email, "to": [to], "subject": subject, "html": html_content}

        try:
            async with httpx.AsyncClient(timeout=10.0, transport=self._transport) as client:
                response = await client.post(_RESEND_SEND_EMAILS_URL, headers=headers, json=payload)
                response.raise_for_status()
                data = response.json()
        except (httpx.HTTPError, ValueError):
            logger.exception("Failed to send email via Resend API")
            raise

        email_id = data.get("id") if isinstance(data, dict) else None
        logger.info("Sent email via Resend API", extra={"resend_email_id": email_id, "email_to": to})

    async def _log(
        self,
        to: str,
        subject: str,
        template: str,
        status: EmailStatus,
        error_message: str | None = None,
    ) -> None:
        result = await self.store.create(
            EmailLog,
            {
                "to_email": to,
                "subject": subject,
                "template": template,
                "status": status,
                "error_message": error_message,
                "sent_at": datetime.now(UTC) if status == EmailStatus.SENT else None,
            },
        )
        if not result.success:
            logger.error(f"Failed to log email to {to}: {result.error}")

    async def send_welcome(
        self, *, name: str, email: str, student_id: str, password: str, login_url: str
    ) -> OperationResult[EmailStatus]:
        variables = {"name": name, "email": email, "student_id": student_id, "password": password}
        return await self.send(email, "welcome", {**variables, "login_url": login_url})

    async def send_payment_confirmation(
        self, *, name: str, email: str, amount: float, transaction_id: str, course_name: str | None = None
    ) -> OperationResult[EmailStatus]:
        variables = {
            "name": name,
            "amount": f"{amount:g}",
            "transaction_id": transaction_id,
            "course_line": f"Course: {course_name}" if course_name else "",
        }
        return await self.send(email, "payment_confirmation", variables)

    async def send_certificate(
        self, *, name: str, email: str, course_name: str, certificate_number: str, certificate_url: str
    ) -> OperationResult[EmailStatus]:
        variables = {
            "name": name,
            "course_name": course_name,
            "certificate_number": certificate_number,
            "certificate_url": certificate_url,
        }
        return await self.send(email, "certificate", variables)

    async def send_registration_pending(self, *, name: str, email: str) -> OperationResult[EmailStatus]:
        return await self.send(email, "registration_pending", {"name": name})

    async def send_password_reset(self, *, email: str, reset_link: str) -> OperationResult[EmailStatus]:
        return await self.send(email, "password_reset", {"reset_link": reset_link})
