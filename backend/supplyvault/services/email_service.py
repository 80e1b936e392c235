import html
import logging
from functools import lru_cache
from typing import Optional, Protocol

import httpx

from supplyvault.core.config import settings
from supplyvault.schemas.notifications import REVOCATION_NOTICE_DAYS, EmailResult, ExpiryAlertEmail

logger = logging.getLogger(__name__)


class NotificationSender(Protocol):
    async def send_expiry_alert_email(self, notice: ExpiryAlertEmail) -> EmailResult:
        ...


def build_subject(days_until_expiry: int) -> str:
    if days_until_expiry == REVOCATION_NOTICE_DAYS:
        return "[SupplyVault] Certification verification revoked"
    if days_until_expiry <= 0:
        return "[SupplyVault] Certification expired today"
    return f"[SupplyVault] Certification expiring in {days_until_expiry} days"


def _urgency_color(days_until_expiry: int) -> str:
    if days_until_expiry <= 7:
        return "#DC2626"
    if days_until_expiry <= 30:
        return "#F59E0B"
    return "#3B82F6"


def render_expiry_alert_html(notice: ExpiryAlertEmail) -> str:
    days = notice.days_until_expiry
    if days == REVOCATION_NOTICE_DAYS:
        title = "Certification Could Not Be Re-verified"
        intro = (
            "This certification failed its periodic re-verification and has been "
            "flagged for manual review."
        )
    elif days <= 0:
        title = "Certification Expired"
        intro = "This is an automated alert from SupplyVault regarding an expired certification."
    else:
        title = f"Certification Expiring in {days} Days"
        intro = "This is an automated alert from SupplyVault regarding an expiring certification."

    formatted_date = notice.expiry_date.strftime("%B %d, %Y")
    esc = html.escape
    return (
        "<html><body style=\"font-family:Arial,sans-serif;background:#f6f9fc\">"
        "<div style=\"max-width:600px;margin:0 auto;background:#ffffff;padding:24px\">"
        "<h1 style=\"color:#111827\">SupplyVault</h1>"
        f"<h2 style=\"color:{_urgency_color(days)}\">{esc(title)}</h2>"
        f"<p>{esc(intro)}</p>"
        "<table style=\"width:100%;border-collapse:collapse\">"
        f"<tr><td><strong>Supplier:</strong></td><td>{esc(notice.supplier_name)}</td></tr>"
        f"<tr><td><strong>Certification:</strong></td><td>{esc(notice.certification_name)}</td></tr>"
        f"<tr><td><strong>Type:</strong></td><td>{esc(notice.certification_type)}</td></tr>"
        f"<tr><td><strong>Expiry Date:</strong></td><td>{esc(formatted_date)}</td></tr>"
        "</table>"
        f"<p><a href=\"{esc(notice.certification_url, quote=True)}\">View Certification</a></p>"
        "</div></body></html>"
    )


class EmailService:
    """
    Sends notification emails through the Resend HTTP API.
    Always returns an EmailResult; delivery problems never raise.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        api_url: Optional[str] = None,
        sender: Optional[str] = None,
        timeout: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.api_key = api_key if api_key is not None else settings.RESEND_API_KEY
        self.api_url = api_url or settings.RESEND_API_URL
        self.sender = sender or settings.EMAIL_FROM
        self.timeout = timeout or settings.EMAIL_TIMEOUT_SECONDS
        self.transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    async def send_expiry_alert_email(self, notice: ExpiryAlertEmail) -> EmailResult:
        if not self.configured:
            logger.error("RESEND_API_KEY is not configured")
            return EmailResult(success=False, error="Email service not configured")

        payload = {
            "from": self.sender,
            "to": [notice.to],
            "subject": build_subject(notice.days_until_expiry),
            "html": render_expiry_alert_html(notice)
        }
        headers = {"Authorization": f"Bearer {self.api_key}"}

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(self.api_url, json=payload, headers=headers)
        except httpx.HTTPError as exc:
            logger.warning("email send failed", extra={"to": notice.to, "error": str(exc)})
            return EmailResult(success=False, error=str(exc) or exc.__class__.__name__)

        if response.status_code >= 400:
            try:
                body = response.json()
            except ValueError:
                body = None
            message = body.get("message") if isinstance(body, dict) else None
            error = message or f"Email provider returned HTTP {response.status_code}"
            logger.warning("email rejected", extra={"to": notice.to, "status_code": response.status_code})
            return EmailResult(success=False, error=error)

        return EmailResult(success=True)


@lru_cache(maxsize=1)
def get_email_service() -> EmailService:
    return EmailService()
