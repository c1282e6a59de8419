"""Service for sending emails."""

import logging
import os
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional

logger = logging.getLogger(__name__)


class EmailService:
    """Service for sending verification codes via SMTP over SSL."""

    def __init__(
        self,
        smtp_host: Optional[str] = None,
        smtp_port: Optional[int] = None,
        smtp_username: Optional[str] = None,
        smtp_password: Optional[str] = None,
        from_email: Optional[str] = None,
        from_name: str = "Soporte",
        code_ttl_minutes: int = 15,
        timeout: float = 30.0,
        dev_mode: bool = False,
    ):
        self.smtp_host = smtp_host or os.getenv("SMTP_HOST", "smtp.gmail.com")
        self.smtp_port = smtp_port or int(os.getenv("SMTP_PORT", "465"))
        self.smtp_username = smtp_username or os.getenv("EMAIL_USER", "")
        self.smtp_password = smtp_password or os.getenv("EMAIL_PASSWORD", "")
        self.from_email = from_email or self.smtp_username
        self.from_name = from_name
        self.code_ttl_minutes = code_ttl_minutes
        self.timeout = timeout
        self.enabled = bool(self.smtp_host and self.smtp_username and self.from_email)
        # Log codes instead of failing when no transport is configured.
        self.dev_mode = dev_mode

    def send_verification_email(self, email: str, code: str, fullname: str) -> bool:
        """
        Send the account verification code.

        Args:
            email: Recipient email
            code: 6-digit verification code
            fullname: Recipient name used in the greeting

        Returns:
            True if sent successfully, False otherwise
        """
        if not self.enabled:
            if self.dev_mode:
                logger.warning("SMTP disabled; verification code for %s is %s", email, code)
                return True
            logger.error("No SMTP account configured; cannot email %s", email)
            return False

        subject = "Código de verificación para tu cuenta"
        html_body = f"""
        <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;
                    border: 1px solid #e9e9e9; border-radius: 5px;">
            <h2 style="color: #333; text-align: center;">Verificación de cuenta</h2>
            <p>Hola {fullname},</p>
            <p>Gracias por registrarte. Para completar tu registro, por favor utiliza el siguiente
               código de verificación:</p>
            <div style="background-color: #f5f5f5; padding: 15px; text-align: center; font-size: 24px;
                        font-weight: bold; letter-spacing: 5px; margin: 20px 0;">
                {code}
            </div>
            <p>Este código expirará en {self.code_ttl_minutes} minutos.</p>
            <p>Si no has solicitado este código, por favor ignora este correo.</p>
            <p>Saludos,<br>El equipo de soporte</p>
        </div>
        """

        text_body = f"""
        Hola {fullname},

        Tu código de verificación es: {code}

        Este código expirará en {self.code_ttl_minutes} minutos.

        Si no has solicitado este código, por favor ignora este correo.
        """

        return self._send_email(email, subject, html_body, text_body)

    def _send_email(self, to_email: str, subject: str, html_body: str, text_body: str) -> bool:
        try:
            msg = MIMEMultipart("alternative")
            msg["Subject"] = subject
            msg["From"] = f"{self.from_name} <{self.from_email}>"
            msg["To"] = to_email

            msg.attach(MIMEText(text_body, "plain", "utf-8"))
            msg.attach(MIMEText(html_body, "html", "utf-8"))

            with smtplib.SMTP_SSL(self.smtp_host, self.smtp_port, timeout=self.timeout) as server:
                server.login(self.smtp_username, self.smtp_password)
                server.send_message(msg)

            logger.info("Verification email sent to %s", to_email)
            return True

        except (smtplib.SMTPException, OSError):
            logger.exception("Failed to send email to %s", to_email)
            return False
