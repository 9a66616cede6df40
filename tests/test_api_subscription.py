"""
Tests for the subscription endpoints.
"""

from conftest import auth_headers, register


class TestSubscriptionEndpoints:

    async def test_new_organization_is_on_free_plan(self, client):
        admin = await register(client, "admin@example.com")
        response = await client.get("/api/subscription", headers=auth_headers(admin["token"]))
        assert response.status_code == 200
        body = response.json()
        assert body["plan_type"] == "free"
        assert body["status"] == "active"
        assert body["monthly_price"] == 0.0
        assert body["is_expired"] is False

    async def test_plan_change_resets_limits(self, client):
        admin = await register(client, "admin@example.com")
        headers = auth_headers(admin["token"])

        response = await client.put("/api/subscription/plan", json={"plan_type": "pro"}, headers=headers)
        assert response.status_code == 200
        body = response.json()
        assert body["plan_type"] == "pro"
        assert body["monthly_price"] == 15.0
        assert body["monthly_invoice_limit"] == 100
        assert body["monthly_client_limit"] == -1
        assert body["monthly_user_limit"] == 5

        usage = (await client.get("/api/subscription/usage", headers=headers)).json()
        assert usage["plan_type"] == "pro"
        assert usage["usage"]["users"]["can_create"] is True

    async def test_unknown_plan_rejected(self, client):
        admin = await register(client, "admin@example.com")
        response = await client.put(
            "/api/subscription/plan", json={"plan_type": "enterprise"}, headers=auth_headers(admin["token"])
        )
        assert response.status_code == 422

    async def test_org_user_cannot_change_plan(self, client):
        admin = await register(client, "admin@example.com")
        member = await register(client, "member@example.com")
        headers = auth_headers(admin["token"])
        await client.put("/api/subscription/plan", json={"plan_type": "pro"}, headers=headers)
        await client.post(
            f"/api/organizations/{admin['organization_id']}/members",
            json={"email": "member@example.com"},
            headers=headers,
        )

        response = await client.put(
            "/api/subscription/plan",
            json={"plan_type": "business"},
            headers=auth_headers(member["token"], admin["organization_id"]),
        )
        assert response.status_code == 403

    async def test_plans_listed(self, client):
        admin = await register(client, "admin@example.com")
        response = await client.get("/api/subscription/plans", headers=auth_headers(admin["token"]))
        assert response.status_code == 200
        assert [plan["plan_type"] for plan in response.json()["plans"]] == ["free", "pro", "business"]
