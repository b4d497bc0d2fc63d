"""
Outbound email over SMTP.

Every send is best-effort: failures are logged and swallowed so the calling workflow
never sees them. An empty SMTP host disables delivery entirely.
"""
import logging
import smtplib
from email.message import EmailMessage
from email.utils import formataddr
from html import escape
from typing import Optional

from ..core.settings import Settings
from ..enums import BusinessStatus

logger = logging.getLogger(__name__)

FOOTER = (
    "<p style='color: #666; font-size: 12px;'>"
    "This is an automated message from Linkoja. Please do not reply to this email.</p>"
)


def _wrap(body: str) -> str:
    return (
        "<html><body style='font-family: Arial, sans-serif;'>"
        f"<div style='max-width: 600px; margin: 0 auto; padding: 20px;'>{body}<br/>{FOOTER}</div>"
        "</body></html>"
    )


class EmailService:
    def __init__(self, settings: Settings):
        self.settings = settings

    def send_email(self, to_email: str, subject: str, html_body: str) -> bool:
        """Send one HTML email. Returns False instead of raising on any failure."""
        if not self.settings.email_enabled:
            logger.info(f"Email delivery disabled; skipping '{subject}' to {to_email}")
            return False

        message = EmailMessage()
        message["Subject"] = subject
        message["From"] = formataddr((self.settings.smtp_from_name, self.settings.smtp_from_email))
        message["To"] = to_email
        message.set_content("This message requires an HTML-capable email client.")
        message.add_alternative(html_body, subtype="html")

        try:
            with smtplib.SMTP(self.settings.smtp_host, self.settings.smtp_port, timeout=10) as client:
                if self.settings.smtp_use_tls:
                    client.starttls()
                if self.settings.smtp_username:
                    client.login(self.settings.smtp_username, self.settings.smtp_password)
                client.send_message(message)
            logger.info(f"Sent '{subject}' to {to_email}")
            return True
        except Exception as e:
            logger.error(f"Failed to send email to {to_email}: {e}")
            return False

    def send_welcome_email(self, to_email: str, user_name: str) -> bool:
        body = (
            f"<h2 style='color: #333;'>Welcome to Linkoja, {escape(user_name)}!</h2>"
            "<p>Your account is ready. Discover local businesses, follow the ones you love "
            "and share your experiences with the community.</p>"
        )
        return self.send_email(to_email, "Welcome to Linkoja!", _wrap(body))

    def send_password_reset_email(self, to_email: str, reset_token: str) -> bool:
        hours = self.settings.password_reset_token_expire_hours
        body = (
            "<h2 style='color: #333;'>Password Reset Request</h2>"
            "<p>You have requested to reset your password for your Linkoja account.</p>"
            "<p>Your password reset token is:</p>"
            "<div style='background-color: #f4f4f4; padding: 15px; border-radius: 5px; "
            f"font-size: 18px; font-weight: bold; text-align: center;'>{escape(reset_token)}</div>"
            f"<p>This token will expire in {hours} hour{'s' if hours != 1 else ''}.</p>"
            "<p>If you didn't request this password reset, please ignore this email.</p>"
        )
        return self.send_email(to_email, "Password Reset Request - Linkoja", _wrap(body))

    def send_otp_email(self, to_email: str, otp_code: str) -> bool:
        body = (
            "<h2 style='color: #333;'>Phone Number Verification</h2>"
            "<p>Your verification code for Linkoja is:</p>"
            "<div style='background-color: #4CAF50; color: white; padding: 15px; border-radius: 5px; "
            f"font-size: 24px; font-weight: bold; text-align: center; letter-spacing: 5px;'>{otp_code}</div>"
            f"<p>This code will expire in {self.settings.otp_expiry_minutes} minutes.</p>"
            "<p>If you didn't request this code, please ignore this email.</p>"
        )
        return self.send_email(to_email, "Your Verification Code - Linkoja", _wrap(body))

    def send_business_decision_email(
        self, to_email: str, business_name: str, status: BusinessStatus, reason: Optional[str] = None
    ) -> bool:
        name = escape(business_name)
        if status == BusinessStatus.VERIFIED:
            subject = f"Congratulations! Your Business '{business_name}' Has Been Approved - Linkoja"
            body = (
                "<h2 style='color: #4CAF50;'>Business Approved!</h2>"
                f"<p>Great news! Your business <strong>{name}</strong> has been verified and approved.</p>"
                "<p>Your business is now live on Linkoja and customers can find and connect with you.</p>"
            )
        else:
            subject = f"Business Registration Update - {business_name}"
            body = (
                "<h2 style='color: #f44336;'>Business Registration Update</h2>"
                f"<p>We've reviewed your business registration for <strong>{name}</strong>.</p>"
                "<p>Unfortunately, we were unable to approve your business at this time.</p>"
            )
            if reason:
                body += f"<h3>Reason:</h3><p>{escape(reason)}</p>"
        return self.send_email(to_email, subject, _wrap(body))
