"""
Reviewer Application API Tests
"""

import pytest


@pytest.fixture
def application_payload():
    return {
        "full_name": "Dr. Maya Stone",
        "email": "maya.stone@hospital.example.com",
        "institution": "City Hospital",
        "department": "Plastic Surgery",
        "academic_title": "Associate Professor",
        "orcid_id": "0000-0002-1825-0097",
        "publications_count": 14,
        "expertise_areas": ["Microsurgery", "Breast Reconstruction"],
        "motivation": "Giving back to the field.",
        "agreed_to_guidelines": True,
        "agreed_to_confidentiality": True,
    }


# ═══════════════════════════════════════════════════════════════════════════
# Applying
# ═══════════════════════════════════════════════════════════════════════════


class TestApply:

    async def test_signed_in_application_is_linked(self, user, application_payload):
        resp = await user.post("/api/reviewer-applications", json=application_payload)
        assert resp.status_code == 201, resp.text
        data = resp.json()
        assert data["status"] == "pending"
        assert data["user_id"] == user.user_id
        assert data["expertise_areas"] == ["Microsurgery", "Breast Reconstruction"]

        resp = await user.get("/api/reviewer-applications/mine")
        assert [a["id"] for a in resp.json()] == [data["id"]]

    async def test_anonymous_application(self, anon, application_payload):
        resp = await anon.post("/api/reviewer-applications", json=application_payload)
        assert resp.status_code == 201, resp.text
        assert resp.json()["user_id"] is None

    async def test_agreements_required(self, anon, application_payload):
        application_payload["agreed_to_confidentiality"] = False
        resp = await anon.post("/api/reviewer-applications", json=application_payload)
        assert resp.status_code == 422

    async def test_expertise_required(self, anon, application_payload):
        application_payload["expertise_areas"] = []
        resp = await anon.post("/api/reviewer-applications", json=application_payload)
        assert resp.status_code == 422

    async def test_invalid_email(self, anon, application_payload):
        application_payload["email"] = "not-an-email"
        resp = await anon.post("/api/reviewer-applications", json=application_payload)
        assert resp.status_code == 422


# ═══════════════════════════════════════════════════════════════════════════
# Admin review
# ═══════════════════════════════════════════════════════════════════════════


class TestAdminReview:

    async def _apply(self, client, payload) -> int:
        resp = await client.post("/api/reviewer-applications", json=payload)
        return resp.json()["id"]

    async def test_approve_stamps_reviewer_and_time(self, user, admin, application_payload):
        application_id = await self._apply(user, application_payload)
        resp = await admin.put(
            f"/api/reviewer-applications/{application_id}/status",
            json={"status": "approved", "admin_notes": "Welcome aboard"},
        )
        assert resp.status_code == 200, resp.text
        data = resp.json()
        assert data["message"] == "Application approved"
        assert data["application"]["status"] == "approved"
        assert data["application"]["reviewed_by"] == admin.user_id
        assert data["application"]["reviewed_at"] is not None
        assert data["application"]["admin_notes"] == "Welcome aboard"

    async def test_status_messages(self, user, admin, application_payload):
        application_id = await self._apply(user, application_payload)
        path = f"/api/reviewer-applications/{application_id}/status"

        resp = await admin.put(path, json={"status": "rejected"})
        assert resp.json()["message"] == "Application rejected"

        resp = await admin.put(path, json={"status": "under_review"})
        assert resp.json()["message"] == "Application updated"

        # Any order is allowed, including back to pending
        resp = await admin.put(path, json={"status": "pending"})
        assert resp.json()["application"]["status"] == "pending"

    async def test_only_four_statuses(self, user, admin, application_payload):
        application_id = await self._apply(user, application_payload)
        resp = await admin.put(
            f"/api/reviewer-applications/{application_id}/status",
            json={"status": "withdrawn"},
        )
        assert resp.status_code == 422

    async def test_filter_by_status(self, user, anon, admin, application_payload):
        first = await self._apply(user, application_payload)
        await self._apply(anon, application_payload)
        await admin.put(f"/api/reviewer-applications/{first}/status", json={"status": "approved"})

        resp = await admin.get("/api/reviewer-applications", params={"status": "approved"})
        assert [a["id"] for a in resp.json()] == [first]

        resp = await admin.get("/api/reviewer-applications")
        assert len(resp.json()) == 2

    async def test_non_admin_cannot_list(self, user):
        resp = await user.get("/api/reviewer-applications")
        assert resp.status_code == 403

    async def test_delete(self, anon, admin, application_payload):
        application_id = await self._apply(anon, application_payload)
        resp = await admin.delete(f"/api/reviewer-applications/{application_id}")
        assert resp.status_code == 204

        resp = await admin.delete(f"/api/reviewer-applications/{application_id}")
        assert resp.status_code == 404
