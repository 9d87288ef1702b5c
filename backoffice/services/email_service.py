"""Account notification emails over SMTP."""
import logging
import os
import re
import smtplib
from dataclasses import dataclass
from datetime import datetime
from email.message import EmailMessage
from typing import Any, Dict, Optional, Tuple

from jinja2 import Environment, FileSystemLoader, TemplateNotFound

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATE_DIR = os.path.join(
    os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "templates", "email"
)

# Each template ships as <name>.txt and <name>.html
TEMPLATE_FORMATS = ("txt", "html")


class TemplateNotFoundError(Exception):
    """An email template is missing one of its formats."""


@dataclass
class EmailResult:
    success: bool
    error: Optional[str] = None


class EmailService:
    """
    Sends verification, reset and password-change notices.

    Sending never raises: failures are logged and returned as an
    EmailResult. An empty SMTP host disables delivery entirely.
    """

    EMAIL_REGEX = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")

    def __init__(
        self,
        smtp_host: str,
        smtp_port: int,
        smtp_user: str = "",
        smtp_password: str = "",
        from_email: str = "noreply@backoffice.local",
        from_name: str = "Back-Office Maritime",
        use_tls: bool = True,
        frontend_url: str = "http://localhost:4200",
        template_dir: str = DEFAULT_TEMPLATE_DIR,
    ):
        self._smtp_host = smtp_host
        self._smtp_port = smtp_port
        self._credentials = (smtp_user, smtp_password) if smtp_user else None
        self._sender = f"{from_name} <{from_email}>"
        self._use_tls = use_tls
        self._frontend_url = frontend_url.rstrip("/")
        self._templates = Environment(loader=FileSystemLoader(template_dir), autoescape=True)

    @property
    def enabled(self) -> bool:
        return bool(self._smtp_host)

    def _link(self, path: str, token: str) -> str:
        return f"{self._frontend_url}/{path}?token={token}"

    def _build_message(
        self, to_email: str, subject: str, body_text: str, body_html: Optional[str]
    ) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self._sender
        message["To"] = to_email
        message["Subject"] = subject
        message.set_content(body_text)
        if body_html:
            message.add_alternative(body_html, subtype="html")
        return message

    def send_email(
        self,
        to_email: str,
        subject: str,
        body_text: str,
        body_html: Optional[str] = None,
    ) -> EmailResult:
        """
        Deliver one message.

        Returns:
            EmailResult; ``error`` explains a refused recipient, a disabled
            service or the SMTP failure.
        """
        if not to_email or not self.EMAIL_REGEX.match(to_email):
            return EmailResult(success=False, error="Invalid recipient email address")

        if not self.enabled:
            logger.info(f"SMTP disabled, not sending '{subject}' to {to_email}")
            return EmailResult(success=False, error="Email sending is disabled")

        message = self._build_message(to_email, subject, body_text, body_html)
        try:
            with smtplib.SMTP(self._smtp_host, self._smtp_port) as server:
                if self._use_tls:
                    server.starttls()
                if self._credentials:
                    server.login(*self._credentials)
                server.send_message(message)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Failed to send '{subject}' to {to_email}: {e}")
            return EmailResult(success=False, error=str(e))

        logger.info(f"Email '{subject}' sent to {to_email}")
        return EmailResult(success=True)

    def render_template(
        self, template_name: str, context: Dict[str, Any]
    ) -> Tuple[str, str]:
        """
        Render the text and HTML variants of a template.

        Raises:
            TemplateNotFoundError: Either variant is missing.
        """
        context = {"year": datetime.now().year, **context}
        rendered = []
        for extension in TEMPLATE_FORMATS:
            filename = f"{template_name}.{extension}"
            try:
                rendered.append(self._templates.get_template(filename).render(**context))
            except TemplateNotFound:
                raise TemplateNotFoundError(f"Template '{filename}' not found")
        text_body, html_body = rendered
        return text_body, html_body

    def send_template(
        self, to: str, template: str, subject: str, context: Dict[str, Any]
    ) -> EmailResult:
        try:
            text_body, html_body = self.render_template(template, context)
        except TemplateNotFoundError as e:
            logger.error(f"Template error: {e}")
            return EmailResult(success=False, error=str(e))

        return self.send_email(
            to_email=to, subject=subject, body_text=text_body, body_html=html_body
        )

    def send_verification_email(self, to_email: str, name: str, token: str) -> EmailResult:
        return self.send_template(
            to_email,
            "email_verification",
            "Vérification de votre adresse email",
            {"name": name, "verify_url": self._link("verify-email", token)},
        )

    def send_password_reset_email(
        self, to_email: str, name: str, token: str
    ) -> EmailResult:
        return self.send_template(
            to_email,
            "password_reset",
            "Réinitialisation de votre mot de passe",
            {"name": name, "reset_url": self._link("reset-password", token)},
        )

    def send_password_changed_email(self, to_email: str, name: str) -> EmailResult:
        return self.send_template(
            to_email,
            "password_changed",
            "Votre mot de passe a été modifié",
            {"name": name},
        )
