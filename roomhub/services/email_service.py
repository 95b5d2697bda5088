"""Service for sending one-time codes by email."""

import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from html import escape
from typing import Optional, Tuple

from ..domain.models import CodePurpose

logger = logging.getLogger(__name__)


class EmailService:
    """Service for sending emails via SMTP."""

    def __init__(
        self,
        smtp_host: str = "",
        smtp_port: int = 587,
        smtp_username: str = "",
        smtp_password: str = "",
        from_email: str = "",
        from_name: str = "RoomHub",
        code_ttl_minutes: int = 30,
        timeout: float = 10.0,
        app_url: str = "",
    ):
        self.smtp_host = smtp_host
        self.smtp_port = smtp_port
        self.smtp_username = smtp_username
        self.smtp_password = smtp_password
        self.from_email = from_email
        self.from_name = from_name
        self.code_ttl_minutes = code_ttl_minutes
        self.timeout = timeout
        self.app_url = app_url.rstrip("/")
        self.enabled = bool(self.smtp_host and self.smtp_username and self.from_email)

    def send_code(
        self,
        to_email: str,
        recipient_name: str,
        code: str,
        purpose: CodePurpose,
        resend: bool = False,
    ) -> bool:
        """
        Send a one-time code.

        Args:
            to_email: Recipient email
            recipient_name: Name used in the greeting
            code: Plaintext code
            purpose: Whether the code verifies the email or resets the password
            resend: Use the "new code" wording for verification emails

        Returns:
            True if sent successfully, False otherwise
        """
        if not self.enabled:
            logger.warning("SMTP is not configured; %s email to %s was not sent", purpose.value, to_email)
            return False

        if purpose is CodePurpose.PASSWORD_RESET:
            subject, heading, intro = self._password_reset_copy()
        elif resend:
            subject, heading, intro = self._resend_copy()
        else:
            subject, heading, intro = self._verification_copy()

        html_body = self._render_html(recipient_name, heading, intro, code)
        text_body = self._render_text(recipient_name, heading, intro, code)
        return self._send_email(to_email, subject, html_body, text_body)

    @staticmethod
    def _verification_copy() -> Tuple[str, str, str]:
        return (
            "Confirm your RoomHub account",
            "Welcome to RoomHub!",
            "Thanks for signing up. Enter this code in the app to verify your email address:",
        )

    @staticmethod
    def _resend_copy() -> Tuple[str, str, str]:
        return (
            "Your new verification code - RoomHub",
            "Here is your new code",
            "You asked for a new verification code. Any previous code no longer works:",
        )

    @staticmethod
    def _password_reset_copy() -> Tuple[str, str, str]:
        return (
            "Reset your password - RoomHub",
            "Password reset",
            "We received a request to reset your password. Enter this code to choose a new one:",
        )

    def _render_html(self, name: str, heading: str, intro: str, code: str) -> str:
        return f"""
        <html>
            <body style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
                <div style="background-color: #0f172a; padding: 30px; border-radius: 10px; text-align: center;">
                    <h1 style="color: #93c5fd; margin: 0;">RoomHub</h1>
                    <p style="color: #cbd5e1; margin-top: 10px;">Rooms and roommates</p>
                </div>

                <div style="padding: 30px 0;">
                    <h2 style="color: #1e293b; margin-bottom: 20px;">{heading}</h2>

                    <p style="color: #475569; line-height: 1.6;">Hi {escape(name)},</p>
                    <p style="color: #475569; line-height: 1.6; margin-bottom: 20px;">{intro}</p>

                    <div style="text-align: center; margin: 30px 0;">
                        <span style="background-color: #3b82f6; color: white; padding: 15px 30px;
                                     border-radius: 5px; display: inline-block; font-size: 28px;
                                     letter-spacing: 6px; font-weight: bold;">
                            {code}
                        </span>
                    </div>

                    <p style="color: #64748b; font-size: 14px; margin-top: 30px;">
                        This code expires in {self.code_ttl_minutes} minutes.
                    </p>
                    {self._render_link_html()}

                    <p style="color: #64748b; font-size: 14px; margin-top: 20px;">
                        If you did not request this, you can ignore this email.
                    </p>
                </div>
            </body>
        </html>
        """

    def _render_text(self, name: str, heading: str, intro: str, code: str) -> str:
        return f"""
        RoomHub - {heading}

        Hi {name},

        {intro}

        {code}

        This code expires in {self.code_ttl_minutes} minutes.
        {self._render_link_text()}

        If you did not request this, you can ignore this email.
        """

    def _render_link_html(self) -> str:
        if not self.app_url:
            return ""
        url = escape(self.app_url)
        return f'<p style="color: #64748b; font-size: 14px;">Open RoomHub: <a href="{url}">{url}</a></p>'

    def _render_link_text(self) -> str:
        return f"Open RoomHub: {self.app_url}" if self.app_url else ""

    def _send_email(self, to_email: str, subject: str, html_body: str, text_body: str) -> bool:
        """
        Send an email via SMTP.

        Returns:
            True if sent successfully, False otherwise
        """
        try:
            msg = MIMEMultipart("alternative")
            msg["Subject"] = subject
            msg["From"] = f"{self.from_name} <{self.from_email}>"
            msg["To"] = to_email

            msg.attach(MIMEText(text_body, "plain", "utf-8"))
            msg.attach(MIMEText(html_body, "html", "utf-8"))

            with smtplib.SMTP(self.smtp_host, self.smtp_port, timeout=self.timeout) as server:
                server.starttls()
                server.login(self.smtp_username, self.smtp_password)
                server.send_message(msg)

            return True

        except (smtplib.SMTPException, OSError):
            logger.exception("Failed to send email to %s", to_email)
            return False

    def verify_connection(self) -> Optional[bool]:
        """Check SMTP credentials; None when SMTP is not configured."""
        if not self.enabled:
            return None
        try:
            with smtplib.SMTP(self.smtp_host, self.smtp_port, timeout=self.timeout) as server:
                server.starttls()
                server.login(self.smtp_username, self.smtp_password)
            return True
        except (smtplib.SMTPException, OSError):
            logger.exception("SMTP connection check failed")
            return False
