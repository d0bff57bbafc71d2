"""
Tests for driver registration, password setup and login.
"""
from app.core.security import verify_token

DRIVER = {"email": "Driver@Example.com", "name": "Sam Driver", "phone": "+61411111111"}


async def register(client, **overrides):
    return await client.post("/api/v1/drivers", json={**DRIVER, **overrides})


class TestRegistration:
    async def test_register(self, client) -> None:
        response = await register(client)

        assert response.status_code == 201
        body = response.json()
        assert body["email"] == "driver@example.com"
        assert body["needsPassword"] is True
        assert "passwordHash" not in body

    async def test_duplicate(self, client) -> None:
        await register(client)
        response = await register(client, email="driver@example.com")

        assert response.status_code == 400
        assert "already exists" in response.json()["error"]

    async def test_invalid_email(self, client) -> None:
        response = await register(client, email="not-an-email")
        assert response.status_code == 400

    async def test_list(self, client) -> None:
        await register(client)
        await register(client, email="alex@example.com", name="Alex Driver")

        names = [d["name"] for d in (await client.get("/api/v1/drivers")).json()]
        assert names == ["Alex Driver", "Sam Driver"]


class TestPasswordAndLogin:
    async def test_check_unknown_driver(self, client) -> None:
        response = await client.post("/api/v1/drivers/check", json={"email": "ghost@example.com"})
        assert response.status_code == 200
        assert response.json() == {"needsPassword": False}

    async def test_set_password_then_login(self, client) -> None:
        await register(client)

        response = await client.post("/api/v1/drivers/check", json={"email": "driver@example.com"})
        assert response.json() == {"needsPassword": True}

        response = await client.post(
            "/api/v1/drivers/set-password",
            json={"email": "driver@example.com", "newPassword": "Secret123"},
        )
        assert response.status_code == 200
        assert response.json()["success"] is True

        response = await client.post(
            "/api/v1/drivers/login", json={"email": "DRIVER@example.com", "password": "Secret123"}
        )
        assert response.status_code == 200
        body = response.json()
        assert body["driver"]["needsPassword"] is False
        assert body["driver"]["lastLoginAt"] is not None
        assert body["tokenType"] == "bearer"

        claims = verify_token(body["accessToken"])
        assert claims["email"] == "driver@example.com"
        assert claims["role"] == "driver"

    async def test_short_password(self, client) -> None:
        await register(client)
        response = await client.post(
            "/api/v1/drivers/set-password",
            json={"email": "driver@example.com", "newPassword": "short"},
        )
        assert response.status_code == 400

    async def test_set_password_unknown_driver(self, client) -> None:
        response = await client.post(
            "/api/v1/drivers/set-password",
            json={"email": "ghost@example.com", "newPassword": "Secret123"},
        )
        assert response.status_code == 404

    async def test_wrong_password(self, client) -> None:
        await register(client)
        await client.post(
            "/api/v1/drivers/set-password",
            json={"email": "driver@example.com", "newPassword": "Secret123"},
        )

        response = await client.post(
            "/api/v1/drivers/login", json={"email": "driver@example.com", "password": "Wrong1234"}
        )
        assert response.status_code == 401
        assert response.json() == {"error": "Invalid email or password"}

    async def test_login_before_password_set(self, client) -> None:
        await register(client)
        response = await client.post(
            "/api/v1/drivers/login", json={"email": "driver@example.com", "password": "anything"}
        )
        assert response.status_code == 401
