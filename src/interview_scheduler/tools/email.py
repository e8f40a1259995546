"""Email sending tool: supports console (default), SMTP and SendGrid."""

from __future__ import annotations

import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

import sendgrid
from rich.console import Console
from rich.panel import Panel
from sendgrid.helpers.mail import Mail

from interview_scheduler.config import Config
from interview_scheduler.schemas import OutgoingEmail

console = Console()
log = logging.getLogger(__name__)


def send_email(config: Config, email: OutgoingEmail) -> bool:
    """Send an email using the configured backend. Returns True on success."""
    backend = config.email_backend.lower()

    if backend == "sendgrid":
        return _send_sendgrid(config, email)
    elif backend in ("smtp", "gmail"):
        return _send_smtp(config, email)
    elif backend == "console":
        return _send_console(config, email)
    log.error("Unknown email backend: %s", backend)
    return False


def _send_console(config: Config, email: OutgoingEmail) -> bool:
    """Print email to the console (development mode)."""
    console.print(Panel(
        f"[bold]From:[/bold] {config.email_from}\n"
        f"[bold]To:[/bold] {email.to}\n"
        f"[bold]Subject:[/bold] {email.subject}\n"
        f"[bold]Type:[/bold] {email.email_type}\n\n"
        f"{email.text}",
        title="Email (Console Mode)",
        border_style="cyan",
    ))
    return True


def _send_smtp(config: Config, email: OutgoingEmail) -> bool:
    host = config.smtp_host
    username = config.smtp_username
    if config.email_backend.lower() == "gmail":
        host = host or "smtp.gmail.com"
        username = username or config.email_from

    if not host:
        log.error("SMTP host not configured")
        return False
    if not config.smtp_password:
        log.error("SMTP password not configured (for Gmail, use an App Password)")
        return False

    msg = MIMEMultipart("alternative")
    msg["From"] = config.email_from
    msg["To"] = email.to
    msg["Subject"] = email.subject
    msg.attach(MIMEText(email.text, "plain", "utf-8"))
    if email.html:
        msg.attach(MIMEText(email.html, "html", "utf-8"))

    try:
        with smtplib.SMTP(host, config.smtp_port, timeout=config.http_timeout) as server:
            server.ehlo()
            server.starttls()
            server.ehlo()
            server.login(username or config.email_from, config.smtp_password)
            server.sendmail(config.email_from, [email.to], msg.as_string())
        return True
    except smtplib.SMTPAuthenticationError:
        log.error("SMTP authentication failed. For Gmail, use an App Password.")
        return False
    except (smtplib.SMTPException, OSError) as e:
        log.error("SMTP error: %s", e)
        return False


def _send_sendgrid(config: Config, email: OutgoingEmail) -> bool:
    """Send via SendGrid API."""
    sg = sendgrid.SendGridAPIClient(api_key=config.sendgrid_api_key)
    message = Mail(
        from_email=config.email_from,
        to_emails=email.to,
        subject=email.subject,
        plain_text_content=email.text,
        html_content=email.html or None,
    )
    try:
        response = sg.send(message)
    except Exception as e:
        log.error("SendGrid error: %s", e)
        return False
    if response.status_code in (200, 201, 202):
        return True
    log.error("SendGrid error: %s", response.status_code)
    return False
