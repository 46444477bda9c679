"""
Email Service

Outgoing mail for the journal: submission receipts, editor alerts and the
account emails (verification, password reset, email change). Every email in
the application goes through `send_html_email`.

Without SMTP credentials the service runs in dev mode and only logs what it
would have sent. In production missing credentials count as a failed send.
"""

import asyncio
import html
import re
import smtplib
import logging
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from typing import Optional

from config.settings import settings

logger = logging.getLogger(__name__)


_email_service_instance: Optional['EmailService'] = None


def get_email_service() -> 'EmailService':
    """Get the shared EmailService instance"""
    global _email_service_instance
    if _email_service_instance is None:
        _email_service_instance = EmailService()
    return _email_service_instance


def html_to_text(markup: str) -> str:
    """Plain-text alternative for an HTML email body."""
    text = re.sub(r'<(style|script)[^>]*>.*?</\1>', '', markup, flags=re.DOTALL | re.IGNORECASE)
    text = re.sub(r'<br\s*/?>|</div>|</tr>', '\n', text, flags=re.IGNORECASE)
    text = re.sub(r'</(p|h[1-6])>', '\n\n', text, flags=re.IGNORECASE)
    # Keep link targets; the confirmation links are the point of most emails
    text = re.sub(r'<a\s[^>]*href="([^"]+)"[^>]*>(.*?)</a>', r'\2 (\1)', text, flags=re.DOTALL | re.IGNORECASE)
    text = html.unescape(re.sub(r'<[^>]+>', '', text))
    text = re.sub(r'[ \t]+\n', '\n', text)
    text = re.sub(r'\n\s*\n\s*\n', '\n\n', text)
    return text.strip()


class EmailService:
    """SMTP sender for the journal's HTML emails"""

    def __init__(self):
        self.smtp_server = settings.SMTP_SERVER
        self.smtp_port = settings.SMTP_PORT
        self.smtp_username = settings.SMTP_USERNAME
        self.smtp_password = settings.SMTP_PASSWORD
        self.from_email = settings.FROM_EMAIL or 'noreply@journal.local'
        self.from_name = settings.JOURNAL_NAME

    @property
    def configured(self) -> bool:
        return bool(self.smtp_username and self.smtp_password)

    async def send_html_email(
        self,
        to_email: str,
        subject: str,
        html_content: str,
        text_content: Optional[str] = None,
        from_name: Optional[str] = None,
    ) -> bool:
        """
        Send an HTML email with a plain-text alternative.

        Args:
            to_email: Recipient address
            subject: Subject line
            html_content: Rendered HTML body
            text_content: Plain-text body; derived from the HTML when omitted
            from_name: Display name for From; defaults to the journal name

        Returns:
            bool: True when the message was handed to the SMTP server (or
            logged in dev mode), False otherwise
        """
        from_header = f"{from_name or self.from_name} <{self.from_email}>"

        if not self.configured:
            if settings.IS_PRODUCTION:
                logger.error(f"SMTP credentials missing in production, cannot email {to_email}")
                return False
            logger.info(f"DEV MODE: would email {to_email} from {from_header}: {subject!r} ({len(html_content)} chars)")
            return True

        msg = MIMEMultipart('alternative')
        msg['Subject'] = subject
        msg['From'] = from_header
        msg['To'] = to_email
        msg.attach(MIMEText(text_content or html_to_text(html_content), 'plain'))
        msg.attach(MIMEText(html_content, 'html'))

        try:
            # smtplib blocks; keep it off the event loop
            await asyncio.to_thread(self._deliver, to_email, msg.as_string())
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Failed to email {to_email}: {e}")
            if isinstance(e, smtplib.SMTPAuthenticationError):
                logger.error("SMTP authentication failed - check SMTP_USERNAME and SMTP_PASSWORD")
            return False

        logger.info(f"Email {subject!r} sent to {to_email}")
        return True

    def _deliver(self, to_email: str, message: str) -> None:
        with smtplib.SMTP(self.smtp_server, self.smtp_port) as server:
            server.starttls()
            server.login(self.smtp_username, self.smtp_password)
            server.sendmail(self.from_email, [to_email], message)
