"""
Reader Engagement API Tests

Likes, comments, saved articles and reading history.
"""

from models import AppRole


# ═══════════════════════════════════════════════════════════════════════════
# Likes
# ═══════════════════════════════════════════════════════════════════════════


class TestLikes:

    async def test_toggle_twice_restores_count(self, user, create_article):
        article = await create_article()
        path = f"/api/articles/{article['id']}/likes"

        resp = await user.post(f"{path}/toggle")
        assert resp.json() == {"article_id": article["id"], "count": 1, "is_liked": True}

        resp = await user.post(f"{path}/toggle")
        assert resp.json() == {"article_id": article["id"], "count": 0, "is_liked": False}

    async def test_counts_across_users(self, user, make_client, anon, create_article):
        article = await create_article()
        other = await make_client()
        await user.post(f"/api/articles/{article['id']}/likes/toggle")
        await other.post(f"/api/articles/{article['id']}/likes/toggle")

        resp = await anon.get(f"/api/articles/{article['id']}/likes")
        assert resp.json() == {"article_id": article["id"], "count": 2, "is_liked": False}

    async def test_anonymous_cannot_like(self, anon, create_article):
        article = await create_article()
        resp = await anon.post(f"/api/articles/{article['id']}/likes/toggle")
        assert resp.status_code == 401

    async def test_like_unknown_article(self, user):
        resp = await user.post("/api/articles/9999/likes/toggle")
        assert resp.status_code == 404

    async def test_drafts_cannot_be_liked(self, user, anon, create_article):
        draft = await create_article("Secret Draft Title", publish=False)
        path = f"/api/articles/{draft['id']}/likes"

        assert (await user.post(f"{path}/toggle")).status_code == 404
        assert (await user.get(path)).status_code == 404
        assert (await anon.get(path)).status_code == 404

    async def test_like_count_for_unknown_article(self, anon):
        resp = await anon.get("/api/articles/9999/likes")
        assert resp.status_code == 404

    async def test_admin_sees_draft_likes(self, admin, create_article):
        draft = await create_article(publish=False)
        resp = await admin.get(f"/api/articles/{draft['id']}/likes")
        assert resp.status_code == 200
        assert resp.json()["count"] == 0


# ═══════════════════════════════════════════════════════════════════════════
# Comments
# ═══════════════════════════════════════════════════════════════════════════


class TestComments:

    async def test_add_comment_returns_list(self, user, create_article):
        article = await create_article()
        resp = await user.post(f"/api/articles/{article['id']}/comments", json={"content": "  Great read  "})
        assert resp.status_code == 201, resp.text
        data = resp.json()
        assert data["total"] == 1
        assert data["comments"][0]["content"] == "Great read"
        assert data["comments"][0]["user_name"] == "Dana Reader"

    async def test_comments_newest_first(self, user, create_article):
        article = await create_article()
        await user.post(f"/api/articles/{article['id']}/comments", json={"content": "first"})
        resp = await user.post(f"/api/articles/{article['id']}/comments", json={"content": "second"})
        assert [c["content"] for c in resp.json()["comments"]] == ["second", "first"]

    async def test_anonymous_comment_rejected_without_write(self, anon, create_article):
        article = await create_article()
        resp = await anon.post(f"/api/articles/{article['id']}/comments", json={"content": "hello"})
        assert resp.status_code == 401
        assert resp.json()["detail"] == "Please sign in to comment"

        resp = await anon.get(f"/api/articles/{article['id']}/comments")
        assert resp.json() == {"comments": [], "total": 0}

    async def test_blank_comment_rejected(self, user, create_article):
        article = await create_article()
        resp = await user.post(f"/api/articles/{article['id']}/comments", json={"content": "   "})
        assert resp.status_code == 422

    async def test_author_without_name_is_anonymous(self, make_client, create_article):
        article = await create_article()
        nameless = await make_client()
        resp = await nameless.post(f"/api/articles/{article['id']}/comments", json={"content": "hi"})
        assert resp.json()["comments"][0]["user_name"] == "Anonymous"

    async def test_only_author_or_admin_deletes(self, user, make_client, admin, create_article):
        article = await create_article()
        resp = await user.post(f"/api/articles/{article['id']}/comments", json={"content": "mine"})
        comment_id = resp.json()["comments"][0]["id"]

        other = await make_client()
        resp = await other.delete(f"/api/articles/comments/{comment_id}")
        assert resp.status_code == 403

        resp = await admin.delete(f"/api/articles/comments/{comment_id}")
        assert resp.status_code == 200
        assert resp.json()["total"] == 0

    async def test_author_deletes_own_comment(self, user, create_article):
        article = await create_article()
        resp = await user.post(f"/api/articles/{article['id']}/comments", json={"content": "oops"})
        comment_id = resp.json()["comments"][0]["id"]

        resp = await user.delete(f"/api/articles/comments/{comment_id}")
        assert resp.status_code == 200
        assert resp.json() == {"comments": [], "total": 0}

    async def test_drafts_are_closed_to_comments(self, user, anon, create_article):
        draft = await create_article("Secret Draft Title", publish=False)
        path = f"/api/articles/{draft['id']}/comments"

        resp = await user.post(path, json={"content": "early look"})
        assert resp.status_code == 404
        assert (await anon.get(path)).status_code == 404
        assert (await user.get(path)).status_code == 404

    async def test_comments_hidden_after_unpublish(self, user, anon, admin, create_article):
        article = await create_article()
        path = f"/api/articles/{article['id']}/comments"
        await user.post(path, json={"content": "before"})

        await admin.post(f"/api/admin/articles/{article['id']}/unpublish")
        assert (await anon.get(path)).status_code == 404
        assert (await admin.get(path)).json()["total"] == 1


# ═══════════════════════════════════════════════════════════════════════════
# Saved articles
# ═══════════════════════════════════════════════════════════════════════════


class TestSavedArticles:

    async def test_save_and_unsave(self, user, create_article):
        article = await create_article("Keep This", authors="K. Keeper")

        resp = await user.post(f"/api/library/saved/{article['id']}")
        assert resp.status_code == 201, resp.text
        data = resp.json()
        assert data["message"] == "Article added to your saved list."
        assert data["saved"][0]["article_title"] == "Keep This"
        assert data["saved"][0]["article_authors"] == "K. Keeper"

        resp = await user.get(f"/api/library/saved/{article['id']}")
        assert resp.json()["is_saved"] is True

        resp = await user.delete(f"/api/library/saved/{article['id']}")
        assert resp.json() == {"saved": [], "message": "Article removed from your saved list."}

    async def test_duplicate_save_conflicts(self, user, create_article):
        article = await create_article()
        await user.post(f"/api/library/saved/{article['id']}")
        resp = await user.post(f"/api/library/saved/{article['id']}")
        assert resp.status_code == 409
        assert resp.json()["detail"] == "This article is already in your saved list."

        resp = await user.get("/api/library/saved")
        assert len(resp.json()) == 1

    async def test_saved_lists_are_private(self, user, make_client, create_article):
        article = await create_article()
        await user.post(f"/api/library/saved/{article['id']}")
        other = await make_client()
        resp = await other.get("/api/library/saved")
        assert resp.json() == []

    async def test_drafts_cannot_be_saved(self, user, create_article):
        draft = await create_article("Secret Draft Title", publish=False)
        resp = await user.post(f"/api/library/saved/{draft['id']}")
        assert resp.status_code == 404

        resp = await user.get("/api/library/saved")
        assert resp.json() == []

    async def test_save_unknown_article(self, user):
        resp = await user.post("/api/library/saved/9999")
        assert resp.status_code == 404


# ═══════════════════════════════════════════════════════════════════════════
# Reading history
# ═══════════════════════════════════════════════════════════════════════════


class TestReadingHistory:

    async def test_reading_an_article_records_history(self, user, create_article):
        article = await create_article("Read Me")
        await user.get(f"/api/articles/{article['id']}")
        await user.get(f"/api/articles/{article['id']}")

        resp = await user.get("/api/library/history")
        history = resp.json()
        assert len(history) == 1
        assert history[0]["article_title"] == "Read Me"

    async def test_anonymous_reader_can_open_article(self, anon, create_article):
        article = await create_article()
        resp = await anon.get(f"/api/articles/{article['id']}")
        assert resp.status_code == 200

    async def test_explicit_record_with_duration(self, user, create_article):
        first = await create_article("First")
        second = await create_article("Second")

        await user.post("/api/library/history", json={"article_id": first["id"]})
        resp = await user.post(
            "/api/library/history",
            json={"article_id": second["id"], "read_duration_seconds": 120},
        )
        assert resp.status_code == 200, resp.text
        assert resp.json()["read_duration_seconds"] == 120

        resp = await user.get("/api/library/history")
        assert [h["article_title"] for h in resp.json()] == ["Second", "First"]

    async def test_cannot_record_unpublished(self, user, create_article):
        draft = await create_article(publish=False)
        resp = await user.post("/api/library/history", json={"article_id": draft["id"]})
        assert resp.status_code == 404

    async def test_admin_can_record_draft_read(self, make_client, create_article):
        editor = await make_client(role=AppRole.ADMIN)
        draft = await create_article(publish=False)
        resp = await editor.post("/api/library/history", json={"article_id": draft["id"]})
        assert resp.status_code == 200
