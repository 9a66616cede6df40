"""
Tests for the client endpoints.
"""

from conftest import auth_headers, register


async def post_client(client, token, name="Acme", organization_id=None):
    return await client.post(
        "/api/clients/",
        json={"name": name, "email": f"{name.lower()}@example.com", "country": "US"},
        headers=auth_headers(token, organization_id),
    )


class TestClientCrud:

    async def test_create_read_update_delete(self, client):
        admin = await register(client, "admin@example.com")
        headers = auth_headers(admin["token"])

        created = await post_client(client, admin["token"])
        assert created.status_code == 201
        body = created.json()
        assert body["organization_id"] == admin["organization_id"]
        assert body["user_id"] == admin["user_id"]

        fetched = await client.get(f"/api/clients/{body['id']}", headers=headers)
        assert fetched.status_code == 200
        assert fetched.json()["country"] == "US"

        updated = await client.patch(
            f"/api/clients/{body['id']}", json={"city": "Berlin"}, headers=headers
        )
        assert updated.status_code == 200
        assert updated.json()["city"] == "Berlin"
        assert updated.json()["name"] == "Acme"

        deleted = await client.delete(f"/api/clients/{body['id']}", headers=headers)
        assert deleted.status_code == 204

        missing = await client.get(f"/api/clients/{body['id']}", headers=headers)
        assert missing.status_code == 404

    async def test_list_is_paginated(self, client):
        admin = await register(client, "admin@example.com")
        await post_client(client, admin["token"], "Acme")
        await post_client(client, admin["token"], "Globex")

        response = await client.get(
            "/api/clients/", params={"page": 1, "limit": 1}, headers=auth_headers(admin["token"])
        )
        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 2
        assert len(body["items"]) == 1
        assert body["pages"] == 2
        assert body["has_next"] is True

    async def test_client_with_invoices_cannot_be_deleted(self, client):
        admin = await register(client, "admin@example.com")
        headers = auth_headers(admin["token"])
        client_id = (await post_client(client, admin["token"])).json()["id"]
        await client.post(
            "/api/invoices/",
            json={"client_id": client_id, "items": [{"description": "Work", "unit_price": 10}]},
            headers=headers,
        )

        response = await client.delete(f"/api/clients/{client_id}", headers=headers)
        assert response.status_code == 409


class TestClientLimit:

    async def test_free_plan_allows_two_clients(self, client):
        admin = await register(client, "admin@example.com")
        assert (await post_client(client, admin["token"], "One")).status_code == 201
        assert (await post_client(client, admin["token"], "Two")).status_code == 201

        third = await post_client(client, admin["token"], "Three")
        assert third.status_code == 403
        assert third.json()["detail"] == "Clients limit reached for your subscription plan"

    async def test_pro_plan_is_unlimited(self, client):
        admin = await register(client, "admin@example.com")
        await client.put(
            "/api/subscription/plan", json={"plan_type": "pro"}, headers=auth_headers(admin["token"])
        )
        for i in range(4):
            assert (await post_client(client, admin["token"], f"Client{i}")).status_code == 201


class TestClientIsolation:

    async def test_client_of_other_organization_is_invisible(self, client):
        jane = await register(client, "jane@example.com")
        john = await register(client, "john@example.com")
        client_id = (await post_client(client, jane["token"])).json()["id"]

        response = await client.get(f"/api/clients/{client_id}", headers=auth_headers(john["token"]))
        assert response.status_code == 404

        listing = await client.get("/api/clients/", headers=auth_headers(john["token"]))
        assert listing.json()["total"] == 0

    async def test_hinting_a_foreign_organization_is_denied(self, client):
        jane = await register(client, "jane@example.com")
        john = await register(client, "john@example.com")

        response = await client.get(
            "/api/clients/", headers=auth_headers(john["token"], jane["organization_id"])
        )
        assert response.status_code == 403

        response = await client.get(
            "/api/clients/",
            params={"organization_id": jane["organization_id"]},
            headers=auth_headers(john["token"]),
        )
        assert response.status_code == 403
