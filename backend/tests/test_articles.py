"""
Article API Tests

Publication, public listing and filters, featured articles, the archive
index, and admin article management.
"""


# ═══════════════════════════════════════════════════════════════════════════
# Publication
# ═══════════════════════════════════════════════════════════════════════════


class TestPublication:

    async def test_draft_is_not_public(self, anon, create_article):
        draft = await create_article("Draft Only", publish=False)
        assert draft["published_at"] is None

        resp = await anon.get("/api/articles")
        assert resp.json() == []

        resp = await anon.get(f"/api/articles/{draft['id']}")
        assert resp.status_code == 404

    async def test_admin_can_read_draft(self, admin, create_article):
        draft = await create_article("Admin Preview", publish=False)
        resp = await admin.get(f"/api/articles/{draft['id']}")
        assert resp.status_code == 200
        assert resp.json()["title"] == "Admin Preview"

    async def test_publish_sets_published_at(self, anon, create_article):
        article = await create_article("Now Public")
        assert article["published_at"] is not None

        resp = await anon.get("/api/articles")
        assert [a["id"] for a in resp.json()] == [article["id"]]

    async def test_unpublish_clears_published_at(self, anon, admin, create_article):
        article = await create_article("Briefly Public")

        resp = await admin.post(f"/api/admin/articles/{article['id']}/unpublish")
        assert resp.status_code == 200
        updated = next(a for a in resp.json() if a["id"] == article["id"])
        assert updated["published_at"] is None

        resp = await anon.get("/api/articles")
        assert resp.json() == []

    async def test_future_publication_is_hidden(self, anon, create_article):
        await create_article("Scheduled", publish=False, published_at="2999-01-01T00:00:00Z")
        resp = await anon.get("/api/articles")
        assert resp.json() == []

    async def test_admin_list_includes_drafts(self, admin, create_article):
        await create_article("Published One")
        await create_article("Draft One", publish=False)
        resp = await admin.get("/api/admin/articles")
        assert {a["title"] for a in resp.json()} == {"Published One", "Draft One"}


# ═══════════════════════════════════════════════════════════════════════════
# Listing and filters
# ═══════════════════════════════════════════════════════════════════════════


class TestListing:

    async def test_filter_by_category(self, anon, create_article):
        await create_article("Burns Paper", category="Burns")
        await create_article("Hand Paper", category="Hand Surgery")

        resp = await anon.get("/api/articles", params={"category": "Burns"})
        assert [a["title"] for a in resp.json()] == ["Burns Paper"]

    async def test_search(self, anon, create_article):
        await create_article("Microsurgery Advances", authors="L. Chen")
        await create_article("Scar Management")

        resp = await anon.get("/api/articles", params={"q": "chen"})
        assert [a["title"] for a in resp.json()] == ["Microsurgery Advances"]

    async def test_sort_by_title(self, anon, create_article):
        await create_article("Beta")
        await create_article("Alpha")
        resp = await anon.get("/api/articles", params={"sort": "title"})
        assert [a["title"] for a in resp.json()] == ["Alpha", "Beta"]

    async def test_unknown_sort_rejected(self, anon):
        resp = await anon.get("/api/articles", params={"sort": "random"})
        assert resp.status_code == 422

    async def test_categories_are_trimmed_and_distinct(self, anon, create_article):
        await create_article("One", category="Burns ")
        await create_article("Two", category="Burns")
        await create_article("Three", category="Aesthetics")
        await create_article("Hidden", category="Secret", publish=False)

        resp = await anon.get("/api/articles/categories")
        assert resp.json() == ["Aesthetics", "Burns"]


# ═══════════════════════════════════════════════════════════════════════════
# Featured and archive
# ═══════════════════════════════════════════════════════════════════════════


class TestFeaturedAndArchive:

    async def test_featured(self, anon, create_article):
        main = await create_article("Cover Story", is_main_featured=True)
        side = await create_article("Side Story", is_featured=True)
        await create_article("Plain Story")

        resp = await anon.get("/api/articles/featured")
        data = resp.json()
        assert data["main"]["id"] == main["id"]
        assert [a["id"] for a in data["featured"]] == [side["id"]]

    async def test_featured_empty(self, anon):
        resp = await anon.get("/api/articles/featured")
        assert resp.json() == {"main": None, "featured": []}

    async def test_archive_groups_by_volume_and_issue(self, anon, create_article):
        await create_article("V1 I1 a", volume="1", issue="1")
        await create_article("V1 I1 b", volume="1", issue="1")
        await create_article("V1 I2", volume="1", issue="2")
        await create_article("V2 I1", volume="2", issue="1")
        await create_article("Unfiled")
        await create_article("Unpublished", volume="3", issue="1", publish=False)

        resp = await anon.get("/api/articles/archive")
        archive = resp.json()

        assert [v["volume"] for v in archive] == ["2", "1"]
        volume_one = archive[1]
        assert [(i["issue"], i["article_count"]) for i in volume_one["issues"]] == [("2", 1), ("1", 2)]


# ═══════════════════════════════════════════════════════════════════════════
# Admin management
# ═══════════════════════════════════════════════════════════════════════════


class TestAdminArticles:

    async def test_update_article(self, admin, create_article):
        article = await create_article("Old Title")
        resp = await admin.put(f"/api/admin/articles/{article['id']}", json={"title": "New Title"})
        assert resp.status_code == 200
        assert resp.json()["title"] == "New Title"
        assert resp.json()["published_at"] == article["published_at"]

    async def test_delete_article_removes_engagement(self, admin, user, create_article):
        article = await create_article("Short Lived")
        await user.post(f"/api/articles/{article['id']}/comments", json={"content": "Nice"})
        await user.post(f"/api/articles/{article['id']}/likes/toggle")

        resp = await admin.delete(f"/api/admin/articles/{article['id']}")
        assert resp.status_code == 204

        resp = await admin.get(f"/api/articles/{article['id']}")
        assert resp.status_code == 404
        resp = await admin.get(f"/api/articles/{article['id']}/comments")
        assert resp.json()["total"] == 0

    async def test_non_admin_cannot_create(self, user):
        resp = await user.post("/api/admin/articles", json={"title": "Sneaky"})
        assert resp.status_code == 403

    async def test_image_upload(self, admin, s3_client):
        resp = await admin.post(
            "/api/admin/articles/images",
            files={"file": ("cover.PNG", b"\x89PNG fake", "image/png")},
        )
        assert resp.status_code == 201, resp.text
        data = resp.json()
        assert data["path"].endswith(".png")
        assert data["url"].endswith(data["path"])
        assert ("article-images", data["path"]) in s3_client.objects

    async def test_image_upload_rejects_non_images(self, admin, s3_client):
        resp = await admin.post(
            "/api/admin/articles/images",
            files={"file": ("notes.txt", b"hello", "text/plain")},
        )
        assert resp.status_code == 400
        assert s3_client.objects == {}
