"""
Integration tests for the HTTP API.
Each test drives the application through an httpx ASGI client with cookie sessions.
"""

import pytest
from httpx import ASGITransport, AsyncClient
from fastapi import status

from homeverse.main import create_app
from homeverse.models.user import UserRole
from tests.conftest import UserFactory, PropertyFactory, make_image_bytes, assert_error, TEST_PASSWORD


async def register(client: AsyncClient, **overrides):
    return await client.post("/api/register", json=UserFactory.create_user_data(**overrides))


async def create_listing(client: AsyncClient, images=None, **overrides):
    files = [
        ("images", (f"photo{i}.png", content, "image/png"))
        for i, content in enumerate(images or [])
    ]
    return await client.post(
        "/api/properties",
        data=PropertyFactory.create_form_data(**overrides),
        files=files or None
    )


class TestAuthEndpoints:
    """Test registration, login and logout."""

    @pytest.mark.asyncio
    async def test_register_sets_session_cookie(self, client, settings):
        response = await register(client, username="newuser", email="NewUser@Example.com")

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["username"] == "newuser"
        assert data["email"] == "newuser@example.com"
        assert data["role"] == "buyer"
        assert "password" not in data and "hashed_password" not in data

        set_cookie = response.headers["set-cookie"]
        assert settings.session_cookie_name in set_cookie
        assert "httponly" in set_cookie.lower()

        me = await client.get("/api/user")
        assert me.status_code == 200
        assert me.json()["id"] == data["id"]

    @pytest.mark.asyncio
    async def test_register_as_seller(self, client):
        response = await register(client, role="seller")

        assert response.status_code == 201
        assert response.json()["role"] == "seller"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("role", ["admin", "agent"])
    async def test_register_privileged_role_rejected(self, client, role):
        assert_error(await register(client, role=role), 400, "VALIDATION_ERROR")

    @pytest.mark.asyncio
    async def test_register_validation(self, client):
        error = assert_error(await register(client, password="123"), 400, "VALIDATION_ERROR")

        assert any("password" in detail["field"] for detail in error["details"])
        assert_error(await register(client, email="not-an-email"), 400, "VALIDATION_ERROR")

    @pytest.mark.asyncio
    async def test_register_duplicate(self, client):
        await register(client, username="twice")
        client.cookies.clear()

        assert_error(await register(client, username="twice"), 409, "CONFLICT")

    @pytest.mark.asyncio
    async def test_login_and_logout(self, client):
        await register(client, username="loginuser", email="loginuser@example.com")
        client.cookies.clear()

        assert_error(await client.get("/api/user"), 401, "UNAUTHORIZED")

        response = await client.post("/api/login", json={"username": "loginuser", "password": TEST_PASSWORD})
        assert response.status_code == 200
        assert response.json()["username"] == "loginuser"
        assert (await client.get("/api/user")).status_code == 200

        by_email = await client.post(
            "/api/login", json={"username": "loginuser@example.com", "password": TEST_PASSWORD}
        )
        assert by_email.status_code == 200

        assert (await client.post("/api/logout")).status_code == status.HTTP_204_NO_CONTENT
        assert_error(await client.get("/api/user"), 401, "UNAUTHORIZED")

    @pytest.mark.asyncio
    async def test_login_invalid_credentials(self, client):
        await register(client, username="realuser")
        client.cookies.clear()

        response = await client.post("/api/login", json={"username": "realuser", "password": "wrongpassword"})

        error = assert_error(response, 401, "UNAUTHORIZED")
        assert error["message"] == "Invalid username or password"

    @pytest.mark.asyncio
    async def test_forged_cookie_rejected(self, client, settings):
        client.cookies.set(settings.session_cookie_name, "forged-token")

        assert_error(await client.get("/api/user"), 401, "UNAUTHORIZED")

    @pytest.mark.asyncio
    async def test_update_profile(self, client, login_as):
        await login_as(UserRole.BUYER)

        response = await client.put("/api/user", json={"first_name": "Updated", "phone": "555-0199"})

        assert response.status_code == 200
        assert response.json()["first_name"] == "Updated"
        assert response.json()["phone"] == "555-0199"


class TestPropertyEndpoints:
    """Test listing CRUD, filters and uploads."""

    @pytest.mark.asyncio
    async def test_create_property_with_images(self, client, login_as):
        seller = await login_as(UserRole.SELLER)
        png = make_image_bytes("PNG")

        response = await create_listing(client, images=[png, make_image_bytes("PNG", size=(8, 8))])

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["user_id"] == seller["id"]
        assert data["features"] == ["garage"]
        assert data["status"] == "for_sale"
        assert len(data["images"]) == 2

        served = await client.get(data["images"][0])
        assert served.status_code == 200
        assert served.content == png

    @pytest.mark.asyncio
    async def test_create_property_features_json(self, client, login_as):
        await login_as(UserRole.AGENT)

        response = await client.post(
            "/api/properties",
            data={**PropertyFactory.create_form_data(), "features": '["pool", " sauna "]'}
        )

        assert response.status_code == 201
        assert response.json()["features"] == ["pool", "sauna"]

    @pytest.mark.asyncio
    async def test_create_property_required_fields_only(self, client, login_as):
        await login_as(UserRole.SELLER)
        form = PropertyFactory.create_form_data()
        del form["features"]
        del form["status"]

        response = await client.post("/api/properties", data=form)

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["features"] == []
        assert data["status"] == "for_sale"
        assert data["year_built"] is None
        assert data["images"] == []

    @pytest.mark.asyncio
    async def test_create_property_requires_login(self, client):
        assert_error(await create_listing(client), 401, "UNAUTHORIZED")

    @pytest.mark.asyncio
    async def test_buyer_cannot_create_property(self, client, login_as):
        await login_as(UserRole.BUYER)

        assert_error(await create_listing(client), 403, "FORBIDDEN")

    @pytest.mark.asyncio
    async def test_create_property_validation(self, client, login_as):
        await login_as(UserRole.SELLER)

        assert_error(await create_listing(client, price=-100), 400, "VALIDATION_ERROR")
        assert_error(await create_listing(client, property_type="castle"), 400, "VALIDATION_ERROR")

    @pytest.mark.asyncio
    async def test_create_property_bad_image(self, client, login_as):
        await login_as(UserRole.SELLER)

        response = await client.post(
            "/api/properties",
            data=PropertyFactory.create_form_data(),
            files=[("images", ("doc.txt", b"plain text", "text/plain"))]
        )

        assert_error(response, 400, "BAD_REQUEST")
        assert (await client.get("/api/properties")).json() == []

    @pytest.mark.asyncio
    async def test_get_property(self, client, login_as):
        await login_as(UserRole.SELLER)
        created = (await create_listing(client, title="Lake House")).json()
        client.cookies.clear()

        response = await client.get(f"/api/properties/{created['id']}")

        assert response.status_code == 200
        assert response.json()["title"] == "Lake House"

    @pytest.mark.asyncio
    async def test_get_missing_property(self, client):
        error = assert_error(await client.get("/api/properties/999"), 404, "NOT_FOUND")

        assert "999" in error["message"]

    @pytest.mark.asyncio
    async def test_list_filters(self, client, login_as):
        await login_as(UserRole.SELLER)
        for price, city in ((100000, "Austin"), (250000, "Denver"), (400000, "Austin")):
            await create_listing(client, price=price, city=city)

        in_range = await client.get("/api/properties", params={"price_min": 200000, "price_max": 300000})
        in_austin = await client.get("/api/properties", params={"location": "austin"})
        everything = await client.get("/api/properties")

        assert [p["price"] for p in in_range.json()] == [250000]
        assert [p["price"] for p in in_austin.json()] == [100000, 400000]
        assert len(everything.json()) == 3

    @pytest.mark.asyncio
    async def test_list_invalid_filter(self, client):
        assert_error(await client.get("/api/properties", params={"bedrooms": "many"}), 400, "VALIDATION_ERROR")
        assert_error(await client.get("/api/properties", params={"property_type": "castle"}), 400, "VALIDATION_ERROR")

    @pytest.mark.asyncio
    async def test_featured(self, client, login_as):
        await login_as(UserRole.SELLER)
        ids = [(await create_listing(client, title=f"Home {i}")).json()["id"] for i in range(3)]

        response = await client.get("/api/properties/featured", params={"limit": 2})

        assert response.status_code == 200
        assert [p["id"] for p in response.json()] == [ids[2], ids[1]]

    @pytest.mark.asyncio
    async def test_owner_update_appends_images(self, client, login_as):
        await login_as(UserRole.SELLER)
        created = (await create_listing(client, images=[make_image_bytes()])).json()

        response = await client.put(
            f"/api/properties/{created['id']}",
            data={"title": "Renamed", "price": "300000"},
            files=[("images", ("more.jpg", make_image_bytes("JPEG"), "image/jpeg"))]
        )

        assert response.status_code == 200
        data = response.json()
        assert data["title"] == "Renamed"
        assert data["price"] == 300000
        assert data["description"] == created["description"]
        assert data["images"][0] == created["images"][0]
        assert len(data["images"]) == 2

    @pytest.mark.asyncio
    async def test_update_leaves_omitted_and_empty_fields(self, client, login_as):
        await login_as(UserRole.SELLER)
        created = (await create_listing(client, year_built=1998)).json()

        response = await client.put(
            f"/api/properties/{created['id']}",
            data={"title": "Renamed", "year_built": "", "features": ""}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["title"] == "Renamed"
        assert data["year_built"] == 1998
        assert data["features"] == created["features"]

    @pytest.mark.asyncio
    async def test_non_owner_cannot_update_or_delete(self, client, login_as):
        await login_as(UserRole.SELLER)
        created = (await create_listing(client, title="Mine")).json()
        await login_as(UserRole.SELLER)

        update = await client.put(f"/api/properties/{created['id']}", data={"title": "Stolen"})
        delete = await client.delete(f"/api/properties/{created['id']}")

        assert_error(update, 403, "FORBIDDEN")
        assert_error(delete, 403, "FORBIDDEN")
        assert (await client.get(f"/api/properties/{created['id']}")).json()["title"] == "Mine"

    @pytest.mark.asyncio
    async def test_admin_can_update(self, client, login_as):
        await login_as(UserRole.SELLER)
        created = (await create_listing(client)).json()
        await login_as(UserRole.ADMIN)

        response = await client.put(f"/api/properties/{created['id']}", data={"status": "sold"})

        assert response.status_code == 200
        assert response.json()["status"] == "sold"

    @pytest.mark.asyncio
    async def test_delete_property(self, client, login_as):
        await login_as(UserRole.SELLER)
        created = (await create_listing(client, images=[make_image_bytes()])).json()

        response = await client.delete(f"/api/properties/{created['id']}")

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert_error(await client.get(f"/api/properties/{created['id']}"), 404, "NOT_FOUND")
        assert (await client.get(created["images"][0])).status_code == 404

    @pytest.mark.asyncio
    async def test_user_properties(self, client, login_as):
        await login_as(UserRole.SELLER)
        await create_listing(client, title="Other seller")
        await login_as(UserRole.SELLER)
        await create_listing(client, title="My listing")

        response = await client.get("/api/user/properties")

        assert [p["title"] for p in response.json()] == ["My listing"]


class TestFavoriteEndpoints:

    @pytest.mark.asyncio
    async def test_favorite_lifecycle(self, client, login_as):
        await login_as(UserRole.SELLER)
        property_id = (await create_listing(client)).json()["id"]
        await login_as(UserRole.BUYER)

        added = await client.post("/api/favorites", json={"property_id": property_id})
        duplicate = await client.post("/api/favorites", json={"property_id": property_id})
        listed = await client.get("/api/favorites")

        assert added.status_code == 201
        assert added.json()["property_id"] == property_id
        assert_error(duplicate, 409, "CONFLICT")
        assert [f["id"] for f in listed.json()] == [added.json()["id"]]

        assert (await client.delete(f"/api/favorites/{added.json()['id']}")).status_code == 204
        assert (await client.get("/api/favorites")).json() == []

    @pytest.mark.asyncio
    async def test_favorite_missing_property(self, client, login_as):
        await login_as(UserRole.BUYER)

        assert_error(await client.post("/api/favorites", json={"property_id": 999}), 404, "NOT_FOUND")

    @pytest.mark.asyncio
    async def test_cannot_remove_others_favorite(self, client, login_as):
        await login_as(UserRole.SELLER)
        property_id = (await create_listing(client)).json()["id"]
        await login_as(UserRole.BUYER)
        favorite_id = (await client.post("/api/favorites", json={"property_id": property_id})).json()["id"]
        await login_as(UserRole.BUYER)

        assert_error(await client.delete(f"/api/favorites/{favorite_id}"), 403, "FORBIDDEN")

    @pytest.mark.asyncio
    async def test_favorites_require_login(self, client):
        assert_error(await client.get("/api/favorites"), 401, "UNAUTHORIZED")


class TestInquiryEndpoints:

    @pytest.mark.asyncio
    async def test_anonymous_inquiry(self, client, login_as):
        await login_as(UserRole.AGENT)
        property_id = (await create_listing(client)).json()["id"]
        client.cookies.clear()

        response = await client.post("/api/inquiries", json={
            "name": "Visitor",
            "email": "visitor@example.com",
            "message": "Is this still available?",
            "property_id": property_id,
        })

        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "pending"
        assert data["user_id"] is None
        assert data["property_id"] == property_id

    @pytest.mark.asyncio
    async def test_inquiry_validation(self, client):
        response = await client.post("/api/inquiries", json={"name": "X", "email": "bad", "message": "Hi"})

        assert_error(response, 400, "VALIDATION_ERROR")

    @pytest.mark.asyncio
    async def test_inquiry_unknown_property(self, client):
        response = await client.post("/api/inquiries", json={
            "name": "Visitor", "email": "visitor@example.com", "message": "Hi", "property_id": 999,
        })

        assert_error(response, 404, "NOT_FOUND")

    @pytest.mark.asyncio
    async def test_staff_manage_inquiries(self, client, login_as):
        await login_as(UserRole.AGENT)
        property_id = (await create_listing(client)).json()["id"]
        buyer = await login_as(UserRole.BUYER)
        inquiry = (await client.post("/api/inquiries", json={
            "name": "Buyer", "email": "buyer@example.com", "message": "Viewing?", "property_id": property_id,
        })).json()

        assert inquiry["user_id"] == buyer["id"]
        assert_error(await client.get("/api/inquiries"), 403, "FORBIDDEN")

        await login_as(UserRole.AGENT)
        listed = await client.get("/api/inquiries", params={"property_id": property_id})
        updated = await client.put(f"/api/inquiries/{inquiry['id']}", json={"status": "responded"})
        invalid = await client.put(f"/api/inquiries/{inquiry['id']}", json={"status": "archived"})

        assert [i["id"] for i in listed.json()] == [inquiry["id"]]
        assert updated.json()["status"] == "responded"
        assert_error(invalid, 400, "VALIDATION_ERROR")

        assert (await client.delete(f"/api/inquiries/{inquiry['id']}")).status_code == 204
        assert_error(await client.delete(f"/api/inquiries/{inquiry['id']}"), 404, "NOT_FOUND")

    @pytest.mark.asyncio
    async def test_admin_lists_inquiries_by_user(self, client, login_as):
        buyer = await login_as(UserRole.BUYER)
        await client.post("/api/inquiries", json={"name": "B", "email": "b@example.com", "message": "Hello"})
        await login_as(UserRole.ADMIN)

        response = await client.get("/api/inquiries", params={"user_id": buyer["id"]})

        assert response.status_code == 200
        assert [i["user_id"] for i in response.json()] == [buyer["id"]]


class TestUserAdministration:

    @pytest.mark.asyncio
    async def test_admin_lists_and_deletes_users(self, client, login_as):
        seller = await login_as(UserRole.SELLER)
        property_id = (await create_listing(client)).json()["id"]
        admin = await login_as(UserRole.ADMIN)

        users = await client.get("/api/users")
        assert {u["id"] for u in users.json()} == {seller["id"], admin["id"]}

        assert (await client.delete(f"/api/users/{seller['id']}")).status_code == 204
        assert_error(await client.get(f"/api/properties/{property_id}"), 404, "NOT_FOUND")
        assert_error(await client.delete(f"/api/users/{seller['id']}"), 404, "NOT_FOUND")
        assert_error(await client.delete(f"/api/users/{admin['id']}"), 403, "FORBIDDEN")

    @pytest.mark.asyncio
    async def test_non_admin_cannot_list_users(self, client, login_as):
        await login_as(UserRole.AGENT)

        assert_error(await client.get("/api/users"), 403, "FORBIDDEN")


class TestSystemEndpoints:

    @pytest.mark.asyncio
    async def test_root(self, client, settings):
        response = await client.get("/")

        assert response.status_code == 200
        assert response.json()["api_prefix"] == settings.api_prefix

    @pytest.mark.asyncio
    async def test_health(self, client, backend):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.json()["storage"] == backend

    @pytest.mark.asyncio
    async def test_unknown_route(self, client):
        response = await client.get("/api/nowhere")

        assert_error(response, 404, "NOT_FOUND")
        assert response.headers["X-Request-ID"] == response.json()["error"]["request_id"]

    @pytest.mark.asyncio
    async def test_request_too_large(self, settings):
        app = create_app(settings.model_copy(update={"max_request_size": 100}))
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as small_client:
            response = await small_client.post("/api/inquiries", content=b"x" * 500)
        if app.state.database is not None:
            await app.state.database.dispose()

        assert_error(response, 413, "REQUEST_TOO_LARGE")
