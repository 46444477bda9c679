"""
Submission API Tests

Manuscript submission, notification emails, private file storage and
signed links, admin status changes and conversion into an article.
"""


# ═══════════════════════════════════════════════════════════════════════════
# Creating and reading submissions
# ═══════════════════════════════════════════════════════════════════════════


class TestSubmissionCrud:

    async def test_create_submission(self, user, create_submission):
        submission = await create_submission(user, "Fat Grafting Outcomes", keywords="fat, graft")
        assert submission["status"] == "pending"
        assert submission["user_id"] == user.user_id
        assert submission["keywords"] == "fat, graft"

    async def test_missing_required_fields(self, user):
        resp = await user.post("/api/submissions", json={"title": "No abstract", "authors": "A"})
        assert resp.status_code == 422

    async def test_anonymous_cannot_submit(self, anon):
        resp = await anon.post(
            "/api/submissions",
            json={"title": "T", "abstract": "A", "authors": "B"},
        )
        assert resp.status_code == 401

    async def test_authors_see_only_their_own(self, user, make_client, admin, create_submission):
        other = await make_client()
        await create_submission(user, "Mine")
        await create_submission(other, "Theirs")

        resp = await user.get("/api/submissions")
        assert [s["title"] for s in resp.json()["submissions"]] == ["Mine"]

        resp = await admin.get("/api/submissions")
        assert resp.json()["total"] == 2

    async def test_stranger_gets_404(self, user, make_client, create_submission):
        submission = await create_submission(user)
        other = await make_client()
        resp = await other.get(f"/api/submissions/{submission['id']}")
        assert resp.status_code == 404

    async def test_author_updates_submission(self, user, create_submission):
        submission = await create_submission(user)
        resp = await user.put(f"/api/submissions/{submission['id']}", json={"cover_letter": "Dear editors"})
        assert resp.status_code == 200
        assert resp.json()["cover_letter"] == "Dear editors"
        assert resp.json()["title"] == submission["title"]


# ═══════════════════════════════════════════════════════════════════════════
# Notification emails
# ═══════════════════════════════════════════════════════════════════════════


class TestSubmissionEmails:

    async def test_creation_emails_author_and_editors(self, user, outbox, create_submission):
        await create_submission(user, "Lymphedema Surgery <Review>")

        confirmation = outbox.to(user.email)
        confirmation = [m for m in confirmation if m["subject"] == "Manuscript Submission Received"]
        assert len(confirmation) == 1
        assert "Dear Dana Reader" in confirmation[0]["html"]
        assert "Lymphedema Surgery &lt;Review&gt;" in confirmation[0]["html"]

        alerts = outbox.to("editors@journal.test")
        assert len(alerts) == 1
        assert alerts[0]["subject"] == "New Manuscript Submission: Lymphedema Surgery <Review>"
        assert user.email in alerts[0]["html"]

    async def test_long_titles_are_shortened_in_alert(self, user, outbox, create_submission):
        await create_submission(user, "T" * 60)
        alert = outbox.to("editors@journal.test")[0]
        assert alert["subject"] == f"New Manuscript Submission: {'T' * 50}..."


# ═══════════════════════════════════════════════════════════════════════════
# Files and signed links
# ═══════════════════════════════════════════════════════════════════════════


class TestSubmissionFiles:

    async def test_upload_manuscript(self, user, s3_client):
        resp = await user.post(
            "/api/submissions/files",
            files={"file": ("Paper.PDF", b"%PDF-1.4 fake", "application/pdf")},
        )
        assert resp.status_code == 201, resp.text
        data = resp.json()
        assert data["file_type"] == "manuscript"
        assert data["path"].startswith(f"{user.user_id}/manuscript_")
        assert data["path"].endswith(".pdf")
        assert ("manuscripts", data["path"]) in s3_client.objects

    async def test_upload_supplementary(self, user, s3_client):
        resp = await user.post(
            "/api/submissions/files",
            files={"file": ("data.xlsx", b"cells", "application/octet-stream")},
            data={"file_type": "supplementary"},
        )
        assert resp.status_code == 201, resp.text
        assert resp.json()["path"].startswith(f"{user.user_id}/supplementary_")

    async def test_empty_file_rejected(self, user, s3_client):
        resp = await user.post(
            "/api/submissions/files",
            files={"file": ("empty.pdf", b"", "application/pdf")},
        )
        assert resp.status_code == 400

    async def test_signed_url_access(self, user, make_client, admin, reviewer, s3_client, create_submission):
        submission = await create_submission(user, manuscript_url=f"{user.user_id}/manuscript_1.pdf")
        path = f"/api/submissions/{submission['id']}/files/manuscript/url"

        resp = await user.get(path)
        assert resp.status_code == 200, resp.text
        assert resp.json() == {
            "url": f"https://signed.test/manuscripts/{user.user_id}/manuscript_1.pdf?expires=3600",
            "expires_in": 3600,
        }

        stranger = await make_client()
        assert (await stranger.get(path)).status_code == 403

        # Reviewers gain access once assigned
        assert (await reviewer.get(path)).status_code == 403
        resp = await admin.post(
            "/api/reviews/assign",
            json={"target": "submission", "target_id": submission["id"], "reviewer_id": reviewer.user_id},
        )
        assert resp.status_code == 201, resp.text
        assert (await reviewer.get(path)).status_code == 200

        assert (await admin.get(path)).status_code == 200

    async def test_signed_url_without_file(self, user, s3_client, create_submission):
        submission = await create_submission(user)
        resp = await user.get(f"/api/submissions/{submission['id']}/files/supplementary/url")
        assert resp.status_code == 404
        assert resp.json()["detail"] == "No file uploaded"


# ═══════════════════════════════════════════════════════════════════════════
# Admin workflow
# ═══════════════════════════════════════════════════════════════════════════


class TestSubmissionAdmin:

    async def test_status_change_any_order(self, user, admin, create_submission):
        submission = await create_submission(user)
        path = f"/api/admin/submissions/{submission['id']}/status"

        resp = await admin.put(path, json={"status": "accepted", "admin_notes": "Strong paper"})
        assert resp.status_code == 200
        assert resp.json()["status"] == "accepted"
        assert resp.json()["admin_notes"] == "Strong paper"

        resp = await admin.put(path, json={"status": "pending"})
        assert resp.json()["status"] == "pending"
        assert resp.json()["admin_notes"] == "Strong paper"

    async def test_invalid_status_rejected(self, user, admin, create_submission):
        submission = await create_submission(user)
        resp = await admin.put(f"/api/admin/submissions/{submission['id']}/status", json={"status": "lost"})
        assert resp.status_code == 422

    async def test_author_cannot_change_status(self, user, create_submission):
        submission = await create_submission(user)
        resp = await user.put(f"/api/admin/submissions/{submission['id']}/status", json={"status": "accepted"})
        assert resp.status_code == 403

    async def test_convert_to_draft(self, user, admin, anon, create_submission):
        submission = await create_submission(user, "Convert Me", category="Burns")
        resp = await admin.post(
            f"/api/admin/submissions/{submission['id']}/convert",
            json={"volume": "4", "issue": "2"},
        )
        assert resp.status_code == 201, resp.text
        data = resp.json()
        assert data["message"] == "The submission has been converted to a draft article."
        article = data["article"]
        assert article["title"] == "Convert Me"
        assert article["authors"] == submission["authors"]
        assert article["category"] == "Burns"
        assert article["volume"] == "4"
        assert article["published_at"] is None

        resp = await anon.get("/api/articles")
        assert resp.json() == []

    async def test_convert_and_publish(self, user, admin, anon, create_submission):
        submission = await create_submission(user)
        resp = await admin.post(
            f"/api/admin/submissions/{submission['id']}/convert",
            json={"title": "Edited Title", "publish_immediately": True},
        )
        data = resp.json()
        assert data["message"] == "The submission has been converted and published."
        assert data["article"]["title"] == "Edited Title"
        assert data["article"]["published_at"] is not None

        resp = await anon.get("/api/articles")
        assert [a["title"] for a in resp.json()] == ["Edited Title"]

    async def test_convert_unknown_submission(self, admin):
        resp = await admin.post("/api/admin/submissions/9999/convert", json={})
        assert resp.status_code == 404
