"""
Email Template Service

Generates HTML email content for the journal's outgoing mail:
- Submission received (to the author) and new submission (to the editors)
- Account emails: signup confirmation, password recovery, email change

This is a pure template generator - it receives data, no DB access.
Every user-supplied value is HTML-escaped before it is placed in a template.
"""

from dataclasses import dataclass
from html import escape
from typing import Optional
from urllib.parse import quote

from config.settings import settings


AUTH_EMAIL_TYPES = ("signup", "recovery", "email_change")

PRIMARY_COLOR = "#1e3a5f"
TAGLINE = "Advancing knowledge in plastic and reconstructive surgery"


@dataclass
class SubmissionEmailData:
    """Submission fields shown in notification emails"""
    submission_id: int
    title: str
    authors: str
    submitter_email: str
    category: Optional[str] = None
    submitter_name: Optional[str] = None


@dataclass
class RenderedEmail:
    subject: str
    html: str


def build_confirmation_url(
    site_url: str,
    token_hash: str,
    action_type: str,
    redirect_to: Optional[str] = None,
) -> str:
    """<site_url>/auth/confirm?token_hash=..&type=..&redirect_to=<encoded>"""
    return (
        f"{site_url}/auth/confirm?token_hash={quote(token_hash, safe='')}"
        f"&type={quote(action_type, safe='')}"
        f"&redirect_to={quote(redirect_to or site_url, safe='')}"
    )


class EmailTemplateService:
    """Generates HTML email content for submissions and account actions"""

    def __init__(self, journal_name: Optional[str] = None):
        self.journal_name = journal_name or settings.JOURNAL_NAME

    # ==================== Submission notifications ====================

    def submission_received(self, data: SubmissionEmailData) -> RenderedEmail:
        """Confirmation sent to the submitting author."""
        body = f"""
              <p>Dear {escape(data.submitter_name or 'Author')},</p>
              <p>Thank you for submitting your manuscript to our journal. We have successfully received your submission.</p>
              {self._submission_details(data, show_submitter=False)}
              <p>Your manuscript will undergo an initial review by our editorial team. You will be notified of any updates regarding the status of your submission.</p>
              <p>You can track the status of your submission by logging into your account dashboard.</p>
              <p>Best regards,<br>The Editorial Team</p>"""
        return RenderedEmail(
            subject="Manuscript Submission Received",
            html=self._wrap("Submission Received", body, "This is an automated message. Please do not reply directly to this email."),
        )

    def new_submission_alert(self, data: SubmissionEmailData) -> RenderedEmail:
        """Alert sent to the editorial inbox."""
        short_title = data.title[:50] + ("..." if len(data.title) > 50 else "")
        body = f"""
              <p>A new manuscript has been submitted for review.</p>
              {self._submission_details(data, show_submitter=True)}
              <p>Please log in to the admin dashboard to review this submission and assign reviewers.</p>
              <p>Best regards,<br>Automated Notification System</p>"""
        return RenderedEmail(
            subject=f"New Manuscript Submission: {short_title}",
            html=self._wrap("New Submission", body, "This is an automated notification from the journal management system."),
        )

    def _submission_details(self, data: SubmissionEmailData, show_submitter: bool) -> str:
        rows = [
            f"<p><strong>Title:</strong> {escape(data.title)}</p>",
            f"<p><strong>Authors:</strong> {escape(data.authors)}</p>",
        ]
        if data.category:
            rows.append(f"<p><strong>Category:</strong> {escape(data.category)}</p>")
        if show_submitter:
            rows.append(f"<p><strong>Submitted by:</strong> {escape(data.submitter_email)}</p>")
        rows.append(f"<p><strong>Submission ID:</strong> {data.submission_id}</p>")
        return (
            '<div style="background: #e2e8f0; padding: 15px; border-radius: 5px; margin: 15px 0;">'
            + "".join(rows)
            + "</div>"
        )

    # ==================== Account emails ====================

    def auth_email(self, action_type: str, user_name: Optional[str], confirmation_url: str) -> RenderedEmail:
        """Render by action type; unknown types fall back to signup."""
        if action_type not in AUTH_EMAIL_TYPES:
            action_type = "signup"

        name_suffix = f", {escape(user_name)}" if user_name else ""
        url = escape(confirmation_url, quote=True)

        if action_type == "recovery":
            subject = f"Reset Your Password - {self.journal_name}"
            greeting = f"Hello{name_suffix},"
            message = ("We received a request to reset your password. Click the button below to create "
                       "a new password for your account.")
            button = "Reset Password"
            info = ("<strong>Didn't request this?</strong> If you didn't request a password reset, "
                    "you can safely ignore this email. Your password will remain unchanged.")
            expiry = "This link will expire in 1 hour for security."
        elif action_type == "email_change":
            subject = f"Confirm Email Change - {self.journal_name}"
            greeting = f"Hello{name_suffix},"
            message = ("You've requested to change your email address. Please confirm this change by "
                       "clicking the button below.")
            button = "Confirm Email Change"
            info = ("<strong>Security notice:</strong> If you didn't request this change, please secure "
                    "your account immediately by resetting your password.")
            expiry = None
        else:
            subject = f"Verify Your Email - {self.journal_name}"
            greeting = f"Welcome{name_suffix}!"
            message = ("Thank you for joining our academic community. To complete your registration and "
                       "access the latest research in plastic and reconstructive surgery, please verify "
                       "your email address.")
            button = "Verify Email Address"
            info = ("<strong>Why verify?</strong> Email verification helps us protect your account and "
                    "ensures you receive important updates about new publications and submissions.")
            expiry = "This link will expire in 24 hours."

        body = f"""
              <p style="font-size: 18px;">{greeting}</p>
              <p>{message}</p>
              <p style="text-align: center; margin: 30px 0;">
                <a href="{url}" style="background: {PRIMARY_COLOR}; color: #ffffff; padding: 12px 28px; border-radius: 6px; text-decoration: none;">{button}</a>
              </p>
              <div style="background: #f1f5f9; padding: 15px; border-radius: 5px;"><p>{info}</p></div>
              <p style="font-size: 14px; color: #64748b;">If the button above doesn't work, copy and paste this link into your browser:</p>
              <p style="font-size: 12px; word-break: break-all;">{url}</p>"""
        footer = f"{escape(self.journal_name)}<br>{TAGLINE}"
        if expiry:
            footer += f"<br>{expiry}"
        return RenderedEmail(subject=subject, html=self._wrap(escape(self.journal_name), body, footer))

    # ==================== Layout ====================

    def _wrap(self, heading: str, body: str, footer: str) -> str:
        return f"""<!DOCTYPE html>
<html>
<head><meta charset="utf-8"><meta name="viewport" content="width=device-width, initial-scale=1.0"></head>
<body style="font-family: Georgia, 'Times New Roman', serif; line-height: 1.6; color: #333; background: #f8fafc;">
  <div style="max-width: 600px; margin: 0 auto; background: #ffffff;">
    <div style="background: {PRIMARY_COLOR}; color: #ffffff; padding: 30px; text-align: center;">
      <h1 style="margin: 0;">{heading}</h1>
    </div>
    <div style="padding: 30px;">{body}
    </div>
    <div style="padding: 20px; text-align: center; font-size: 12px; color: #666;">
      <p>{footer}</p>
    </div>
  </div>
</body>
</html>"""
