"""
Notification Function Tests

The submission notification and auth email functions, and the email
templates behind them.
"""

from config.settings import settings
from services.email_service import get_email_service, html_to_text
from services.email_template_service import EmailTemplateService, build_confirmation_url


# ═══════════════════════════════════════════════════════════════════════════
# Submission notification
# ═══════════════════════════════════════════════════════════════════════════


class TestSubmissionNotification:

    async def test_owner_can_resend(self, user, outbox, create_submission):
        submission = await create_submission(user)
        outbox.messages.clear()

        resp = await user.post(
            "/api/functions/send-submission-notification",
            json={"submissionId": submission["id"]},
        )
        assert resp.status_code == 200, resp.text
        assert resp.json() == {"success": True, "message": "Notification sent"}
        assert [m["to"] for m in outbox.messages] == [user.email, "editors@journal.test"]

    async def test_non_owner_forbidden(self, user, make_client, outbox, create_submission):
        submission = await create_submission(user)
        outbox.messages.clear()
        other = await make_client()

        resp = await other.post(
            "/api/functions/send-submission-notification",
            json={"submissionId": submission["id"]},
        )
        assert resp.status_code == 403
        assert resp.json()["detail"] == "You do not own this submission"
        assert outbox.messages == []

    async def test_anonymous_rejected(self, anon):
        resp = await anon.post("/api/functions/send-submission-notification", json={"submissionId": 1})
        assert resp.status_code == 401

    async def test_unknown_submission(self, user):
        resp = await user.post("/api/functions/send-submission-notification", json={"submissionId": 9999})
        assert resp.status_code == 404

    async def test_custom_editor_address_ignored_for_authors(self, user, outbox, create_submission):
        submission = await create_submission(user)
        outbox.messages.clear()

        await user.post(
            "/api/functions/send-submission-notification",
            json={"submissionId": submission["id"], "adminEmail": "attacker@evil.example.com"},
        )
        assert outbox.to("attacker@evil.example.com") == []
        assert len(outbox.to("editors@journal.test")) == 1

    async def test_custom_editor_address_for_admins(self, admin, outbox, create_submission):
        submission = await create_submission(admin)
        outbox.messages.clear()

        await admin.post(
            "/api/functions/send-submission-notification",
            json={"submissionId": submission["id"], "adminEmail": "desk@journal.test"},
        )
        assert len(outbox.to("desk@journal.test")) == 1
        assert outbox.to("editors@journal.test") == []

    async def test_admin_can_resend_for_any_author(self, user, admin, outbox, create_submission):
        submission = await create_submission(user)
        outbox.messages.clear()

        resp = await admin.post(
            "/api/functions/send-submission-notification",
            json={"submissionId": submission["id"], "adminEmail": "desk@journal.test"},
        )
        assert resp.status_code == 200, resp.text
        assert resp.json()["success"] is True
        # The confirmation still goes to the author, the alert to the chosen desk
        assert len(outbox.to(user.email)) == 1
        assert len(outbox.to("desk@journal.test")) == 1
        assert outbox.to(admin.email) == []

    async def test_delivery_failure_is_reported(self, user, create_submission, monkeypatch):
        submission = await create_submission(user)

        async def failing_send(*args, **kwargs):
            return False

        monkeypatch.setattr(get_email_service(), "send_html_email", failing_send)
        resp = await user.post(
            "/api/functions/send-submission-notification",
            json={"submissionId": submission["id"]},
        )
        assert resp.status_code == 200
        assert resp.json() == {"success": False, "message": "Notification could not be delivered"}


# ═══════════════════════════════════════════════════════════════════════════
# Auth email hook
# ═══════════════════════════════════════════════════════════════════════════


def auth_email_payload(action: str, full_name=None, redirect_to=None) -> dict:
    return {
        "user": {
            "email": "reader@test.example.com",
            "user_metadata": {"full_name": full_name} if full_name else None,
        },
        "email_data": {
            "token_hash": "abc123",
            "email_action_type": action,
            "site_url": "https://journal.example.com/",
            "redirect_to": redirect_to,
        },
    }


class TestAuthEmail:

    async def test_signup_email(self, anon, outbox):
        resp = await anon.post("/api/functions/auth-email", json=auth_email_payload("signup", "Noa"))
        assert resp.status_code == 200, resp.text
        assert resp.json() == {"success": True, "message": "Email sent"}

        message = outbox.to("reader@test.example.com")[0]
        assert message["subject"] == f"Verify Your Email - {settings.JOURNAL_NAME}"
        assert "Noa" in message["html"]
        assert (
            "https://journal.example.com/auth/confirm?token_hash=abc123&amp;type=signup"
            "&amp;redirect_to=https%3A%2F%2Fjournal.example.com"
        ) in message["html"]

    async def test_recovery_and_email_change_subjects(self, anon, outbox):
        await anon.post("/api/functions/auth-email", json=auth_email_payload("recovery"))
        await anon.post("/api/functions/auth-email", json=auth_email_payload("email_change"))
        subjects = [m["subject"] for m in outbox.to("reader@test.example.com")]
        assert subjects == [
            f"Reset Your Password - {settings.JOURNAL_NAME}",
            f"Confirm Email Change - {settings.JOURNAL_NAME}",
        ]

    async def test_unknown_action_uses_signup_template(self, anon, outbox):
        await anon.post("/api/functions/auth-email", json=auth_email_payload("magiclink"))
        assert outbox.to("reader@test.example.com")[0]["subject"].startswith("Verify Your Email")

    async def test_hook_secret_enforced_when_configured(self, anon, outbox, monkeypatch):
        monkeypatch.setattr(settings, "AUTH_EMAIL_HOOK_SECRET", "s3cret")

        resp = await anon.post("/api/functions/auth-email", json=auth_email_payload("signup"))
        assert resp.status_code == 401

        resp = await anon.post(
            "/api/functions/auth-email",
            json=auth_email_payload("signup"),
            headers={"X-Hook-Secret": "wrong"},
        )
        assert resp.status_code == 401
        assert outbox.messages == []

        resp = await anon.post(
            "/api/functions/auth-email",
            json=auth_email_payload("signup"),
            headers={"X-Hook-Secret": "s3cret"},
        )
        assert resp.status_code == 200

    async def test_malformed_payload(self, anon):
        resp = await anon.post("/api/functions/auth-email", json={"user": {"email": "x@test.example.com"}})
        assert resp.status_code == 422


# ═══════════════════════════════════════════════════════════════════════════
# Templates
# ═══════════════════════════════════════════════════════════════════════════


class TestTemplates:

    def test_confirmation_url_encodes_values(self):
        url = build_confirmation_url("https://j.example.com", "a b/c", "signup", "https://j.example.com/after?x=1")
        assert url == (
            "https://j.example.com/auth/confirm?token_hash=a%20b%2Fc&type=signup"
            "&redirect_to=https%3A%2F%2Fj.example.com%2Fafter%3Fx%3D1"
        )

    def test_redirect_defaults_to_site(self):
        url = build_confirmation_url("https://j.example.com", "t", "recovery")
        assert url.endswith("&redirect_to=https%3A%2F%2Fj.example.com")

    def test_user_values_are_escaped(self):
        rendered = EmailTemplateService().auth_email("signup", "<script>x</script>", "https://j.example.com/?a=1&b=2")
        assert "<script>" not in rendered.html
        assert "&lt;script&gt;" in rendered.html
        assert "a=1&amp;b=2" in rendered.html

    def test_plain_text_alternative_keeps_links(self):
        text = html_to_text(
            '<style>p {color: red}</style><p>Dear <b>Noa</b>,</p>'
            '<a href="https://j.example.com/x?a=1&amp;b=2">Verify</a>'
        )
        assert "color" not in text
        assert "Dear Noa," in text
        assert "Verify (https://j.example.com/x?a=1&b=2)" in text
