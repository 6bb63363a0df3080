"""Admin notifications for user feedback, sent through Resend or written to the log."""
from __future__ import annotations

import html
import logging
from dataclasses import dataclass

import httpx

from ..schemas import ContentRequestModel, IssueReportModel

logger = logging.getLogger(__name__)

RESEND_API_URL = "https://api.resend.com/emails"


@dataclass(slots=True)
class EmailMessage:
    """Outbound notification content."""

    to: str
    subject: str
    html: str
    text: str


class EmailService:
    """Deliver feedback notifications to the site administrator."""

    def __init__(
        self,
        *,
        api_key: str | None,
        admin_email: str,
        sender: str,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self._admin_email = admin_email
        self._sender = sender
        self._timeout = timeout
        self._transport = transport

    @property
    def enabled(self) -> bool:
        """Whether a provider key is configured."""

        return bool(self._api_key)

    def send(self, message: EmailMessage) -> bool:
        """Send ``message``; returns False when delivery failed."""

        if not self._api_key:
            logger.info(
                "Email notification (no provider configured)\nTo: %s\nSubject: %s\n%s",
                message.to,
                message.subject,
                message.text,
            )
            return True

        try:
            with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
                response = client.post(
                    RESEND_API_URL,
                    headers={"Authorization": f"Bearer {self._api_key}"},
                    json={
                        "from": self._sender,
                        "to": [message.to],
                        "subject": message.subject,
                        "html": message.html,
                        "text": message.text,
                    },
                )
                response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.error("Failed to send email %r to %s: %s", message.subject, message.to, exc)
            return False

        logger.info("Email sent to %s: %s (id=%s)", message.to, message.subject, response.json().get("id"))
        return True

    def notify_content_request(self, request: ContentRequestModel) -> bool:
        fields = [
            ("Type", request.content_type),
            ("Title", request.title),
            ("Year", request.year),
            ("Genre", request.genre),
            ("Description", request.description),
            ("Reason", request.reason),
            ("User Email", request.email),
            ("Request Count", str(request.request_count)),
            ("Submitted", request.updated_at.isoformat(timespec="seconds")),
        ]
        return self.send(
            EmailMessage(
                to=self._admin_email,
                subject=f"New Content Request: {request.title} ({request.content_type})",
                html=_render_html("New Content Request", fields),
                text=_render_text("New Content Request", fields),
            )
        )

    def notify_issue_report(self, report: IssueReportModel) -> bool:
        fields = [
            ("Issue Type", report.issue_type),
            ("Title", report.title),
            ("Description", report.description),
            ("Page URL", report.url),
            ("User Email", report.email),
            ("Status", report.status),
            ("Submitted", report.created_at.isoformat(timespec="seconds")),
        ]
        return self.send(
            EmailMessage(
                to=self._admin_email,
                subject=f"Issue Report: {report.issue_type} - {report.title}",
                html=_render_html("New Issue Report", fields),
                text=_render_text("New Issue Report", fields),
            )
        )


def _render_html(heading: str, fields: list[tuple[str, str | None]]) -> str:
    rows = "".join(
        f"<p><strong>{html.escape(label)}:</strong> {html.escape(value)}</p>"
        for label, value in fields
        if value
    )
    return (
        '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">'
        f"<h2>{html.escape(heading)}</h2>{rows}</div>"
    )


def _render_text(heading: str, fields: list[tuple[str, str | None]]) -> str:
    lines = [heading, ""]
    lines.extend(f"{label}: {value}" for label, value in fields if value)
    return "\n".join(lines)
