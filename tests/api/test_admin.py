"""Tests for the admin endpoints."""

import pytest


@pytest.fixture
def admin_headers(signed_in):
    _, headers = signed_in(email="admin@u.edu", admin_code="705")
    return headers


@pytest.fixture
def member_id(signed_in):
    account_id, _ = signed_in()
    return account_id


class TestUserListing:
    def test_list(self, client, admin_headers, member_id):
        response = client.get("/api/admin/users", headers=admin_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 2
        assert {a["email"] for a in data["accounts"]} == {"admin@u.edu", "a@u.edu"}

    def test_search(self, client, admin_headers, member_id):
        response = client.get("/api/admin/users", params={"email": "a@u"}, headers=admin_headers)
        assert [a["id"] for a in response.json()["accounts"]] == [member_id]

    def test_user_activity(self, client, admin_headers, member_id):
        response = client.get(f"/api/admin/users/{member_id}/activity", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["account_id"] == member_id
        assert response.json()["activities"]

    def test_unknown_user_activity(self, client, admin_headers):
        response = client.get("/api/admin/users/missing/activity", headers=admin_headers)
        assert response.status_code == 404


class TestModerationEndpoints:
    def test_block_then_signin_refused(self, client, admin_headers, member_id):
        response = client.post(
            f"/api/admin/users/{member_id}/block",
            json={"reason": "policy violation"},
            headers=admin_headers,
        )
        assert response.status_code == 200
        assert response.json()["blocked"] is True

        signin = client.post("/api/auth/signin", json={"email": "a@u.edu", "password": "Abcdef1!"})
        assert signin.status_code == 403
        assert signin.json()["error"] == "ACCOUNT_BLOCKED"
        assert "policy violation" in signin.json()["message"]

    def test_block_without_body(self, client, admin_headers, member_id):
        response = client.post(f"/api/admin/users/{member_id}/block", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["block"]["reason"] is None

    def test_block_twice_conflicts(self, client, admin_headers, member_id):
        client.post(f"/api/admin/users/{member_id}/block", headers=admin_headers)
        response = client.post(f"/api/admin/users/{member_id}/block", headers=admin_headers)
        assert response.status_code == 409
        assert response.json()["error"] == "ALREADY_IN_STATE"

    def test_unblock(self, client, admin_headers, member_id):
        client.post(f"/api/admin/users/{member_id}/block", headers=admin_headers)
        response = client.post(f"/api/admin/users/{member_id}/unblock", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["blocked"] is False

    def test_suspend_and_unsuspend(self, client, admin_headers, member_id):
        response = client.post(
            f"/api/admin/users/{member_id}/suspend",
            json={"reason": "under review"},
            headers=admin_headers,
        )
        assert response.json()["suspended"] is True

        signin = client.post("/api/auth/signin", json={"email": "a@u.edu", "password": "Abcdef1!"})
        assert signin.json()["error"] == "ACCOUNT_SUSPENDED"

        response = client.post(f"/api/admin/users/{member_id}/unsuspend", headers=admin_headers)
        assert response.json()["suspended"] is False

    def test_admin_cannot_be_blocked(self, client, signed_in, admin_headers):
        other_admin, _ = signed_in(email="admin2@u.edu", admin_code="705")
        response = client.post(f"/api/admin/users/{other_admin}/block", headers=admin_headers)
        assert response.status_code == 403
        assert response.json()["error"] == "PROTECTED_ACCOUNT"

    def test_delete(self, client, admin_headers, member_id, store):
        response = client.delete(f"/api/admin/users/{member_id}", headers=admin_headers)
        assert response.status_code == 200
        assert store.find_by_id(member_id) is None

    def test_reset_onboarding(self, client, signed_in, admin_headers):
        member_id, headers = signed_in()
        client.put("/api/users/me", json={"first_name": "Ada"}, headers=headers)

        response = client.post(
            f"/api/admin/users/{member_id}/reset-onboarding", headers=admin_headers
        )

        assert response.status_code == 200
        assert response.json()["first_name"] is None
        assert response.json()["onboarding_complete"] is False


class TestReviewerEndpoints:
    @pytest.fixture
    def reviewer_id(self, client, notifier):
        response = client.post(
            "/api/auth/signup",
            json={"name": "Rev", "email": "r@u.edu", "password": "Abcdef1!", "role": "reviewer"},
        )
        return response.json()["user"]["id"]

    def test_approve(self, client, admin_headers, reviewer_id):
        response = client.post(f"/api/admin/reviewers/{reviewer_id}/approve", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["reviewer_approval"]["status"] == "approved"

    def test_reject(self, client, admin_headers, reviewer_id):
        response = client.post(
            f"/api/admin/reviewers/{reviewer_id}/reject",
            json={"reason": "incomplete"},
            headers=admin_headers,
        )
        assert response.status_code == 200
        approval = response.json()["reviewer_approval"]
        assert approval["status"] == "rejected"
        assert approval["rejection_reason"] == "incomplete"

    def test_approve_non_reviewer(self, client, admin_headers, member_id):
        response = client.post(f"/api/admin/reviewers/{member_id}/approve", headers=admin_headers)
        assert response.status_code == 400
        assert response.json()["error"] == "WRONG_ROLE"
