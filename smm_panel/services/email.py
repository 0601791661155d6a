from __future__ import annotations

import logging
import smtplib
from email.message import EmailMessage
from typing import Optional

import httpx

from smm_panel.core.config import get_settings

logger = logging.getLogger(__name__)


def _strip_quotes(value: str) -> str:
    # Hosted env vars are often pasted with surrounding quotes.
    v = (value or "").strip()
    if len(v) >= 2 and ((v[0] == v[-1] == '"') or (v[0] == v[-1] == "'")):
        v = v[1:-1].strip()
    return v


def build_reset_link(token: str) -> str:
    settings = get_settings()
    return f"{settings.frontend_base_url.rstrip('/')}/login?reset=1&token={token}"


def _reset_email_html(site_name: str, reset_link: str) -> str:
    return f"""
    <div style="font-family: Arial, sans-serif; line-height: 1.6; color: #111827;">
      <h2 style="margin: 0 0 8px;">Reset your {site_name} password</h2>
      <p style="margin: 0 0 14px;">
        Someone asked to reset the password on your account. The link below is valid for one hour.
        If it wasn't you, ignore this email.
      </p>
      <p style="margin: 0 0 16px;">
        <a href="{reset_link}" style="display:inline-block;background:#4f46e5;color:#fff;padding:10px 14px;border-radius:8px;text-decoration:none;font-weight:700;">
          Reset Password
        </a>
      </p>
      <p style="margin: 0; font-size: 13px;"><a href="{reset_link}">{reset_link}</a></p>
    </div>
    """.strip()


def send_password_reset_email(to_email: str, reset_token: str, site_name: str = "SMM Panel") -> None:
    settings = get_settings()
    reset_link = build_reset_link(reset_token)
    subject = f"Reset your {site_name} password"
    html = _reset_email_html(site_name, reset_link)
    to_email = (to_email or "").strip()

    provider = (settings.email_provider or "console").lower()
    if provider == "console":
        logger.info("[email][console] to=%s subject=%s link=%s", to_email, subject, reset_link)
        return

    if provider == "resend":
        _send_via_resend(
            api_key=settings.resend_api_key,
            email_from=_strip_quotes(settings.email_from),
            to_email=to_email,
            subject=subject,
            html=html,
        )
        return

    if provider == "smtp":
        _send_via_smtp(
            host=settings.smtp_host,
            port=settings.smtp_port,
            username=settings.smtp_username,
            password=settings.smtp_password,
            use_tls=settings.smtp_use_tls,
            email_from=_strip_quotes(settings.email_from),
            to_email=to_email,
            subject=subject,
            html=html,
        )
        return

    raise ValueError(f"Unsupported EMAIL_PROVIDER: {settings.email_provider}")


def _send_via_resend(*, api_key: Optional[str], email_from: str, to_email: str, subject: str, html: str) -> None:
    if not api_key:
        raise ValueError("RESEND_API_KEY is required when EMAIL_PROVIDER=resend")

    payload = {"from": email_from, "to": [to_email], "subject": subject, "html": html}
    headers = {"Authorization": f"Bearer {api_key}", "Content-Type": "application/json"}
    with httpx.Client(timeout=15) as client:
        res = client.post("https://api.resend.com/emails", json=payload, headers=headers)
        if res.status_code >= 400:
            raise RuntimeError(f"Resend error: {res.status_code} {res.text}")


def _send_via_smtp(
    *,
    host: Optional[str],
    port: int,
    username: Optional[str],
    password: Optional[str],
    use_tls: bool,
    email_from: str,
    to_email: str,
    subject: str,
    html: str,
) -> None:
    if not host:
        raise ValueError("SMTP_HOST is required when EMAIL_PROVIDER=smtp")

    msg = EmailMessage()
    msg["From"] = email_from
    msg["To"] = to_email
    msg["Subject"] = subject
    msg.set_content("Use an HTML-capable email client to view this message.")
    msg.add_alternative(html, subtype="html")

    with smtplib.SMTP(host, port, timeout=15) as server:
        server.ehlo()
        if use_tls:
            server.starttls()
            server.ehlo()
        if username and password:
            server.login(username, password)
        server.send_message(msg)
