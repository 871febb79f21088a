"""
Unit tests for the service layer.
Services run on top of each storage backend.
"""

import pytest
from io import BytesIO
from pathlib import Path
from fastapi import UploadFile
from starlette.datastructures import Headers

from homeverse.database import utc_now
from homeverse.models.user import UserRole
from homeverse.models.inquiry import InquiryStatus
from homeverse.repositories.interface import PropertyFilters
from homeverse.schemas.user import RegisterRequest, UserUpdate
from homeverse.schemas.property import PropertyCreate, PropertyUpdate
from homeverse.schemas.inquiry import InquiryCreate, InquiryUpdate
from homeverse.services.auth import AuthService
from homeverse.services.property import PropertyService
from homeverse.services.inquiry import InquiryService
from homeverse.services.favorite import FavoriteService
from homeverse.services.user import UserService
from homeverse.utils.exceptions import (
    DuplicateResourceError,
    InvalidCredentialsError,
    InsufficientPermissionsError,
    PropertyNotFoundError,
    PropertyOwnershipError,
    NotFoundError,
    ForbiddenError,
    FileUploadError,
    ResourceLimitExceededError,
)
from tests.conftest import UserFactory, PropertyFactory, make_image_bytes, TEST_PASSWORD


def make_upload(content: bytes, filename: str = "photo.png", content_type: str = "image/png") -> UploadFile:
    return UploadFile(file=BytesIO(content), filename=filename, headers=Headers({"content-type": content_type}))


@pytest.fixture
def auth_service(storage, settings) -> AuthService:
    return AuthService(storage, settings)


@pytest.fixture
def property_service(storage, settings) -> PropertyService:
    return PropertyService(storage, settings)


class TestAuthService:
    """Test registration, login and sessions."""

    @pytest.mark.asyncio
    async def test_register_hashes_password(self, auth_service):
        user = await auth_service.register(RegisterRequest(**UserFactory.create_user_data(username="newbie")))

        assert user.id is not None
        assert user.role == UserRole.BUYER
        assert user.hashed_password != TEST_PASSWORD
        assert user.verify_password(TEST_PASSWORD)

    @pytest.mark.asyncio
    async def test_register_duplicate_username(self, auth_service):
        await auth_service.register(RegisterRequest(**UserFactory.create_user_data(username="dupe")))

        with pytest.raises(DuplicateResourceError):
            await auth_service.register(RegisterRequest(**UserFactory.create_user_data(username="dupe")))

    @pytest.mark.asyncio
    async def test_register_duplicate_email(self, auth_service):
        await auth_service.register(RegisterRequest(**UserFactory.create_user_data(email="same@example.com")))

        with pytest.raises(DuplicateResourceError):
            await auth_service.register(RegisterRequest(**UserFactory.create_user_data(email="SAME@example.com")))

    @pytest.mark.asyncio
    async def test_login_by_username_or_email(self, auth_service):
        await auth_service.register(RegisterRequest(**UserFactory.create_user_data(
            username="carol", email="carol@example.com"
        )))

        user, token = await auth_service.login("carol", TEST_PASSWORD)
        by_email, _ = await auth_service.login("carol@example.com", TEST_PASSWORD)

        assert token
        assert by_email.id == user.id
        assert (await auth_service.get_user_for_session(token)).id == user.id

    @pytest.mark.asyncio
    async def test_login_wrong_password(self, auth_service):
        await auth_service.register(RegisterRequest(**UserFactory.create_user_data(username="dave")))

        with pytest.raises(InvalidCredentialsError):
            await auth_service.login("dave", "wrongpassword")
        with pytest.raises(InvalidCredentialsError):
            await auth_service.login("nobody", TEST_PASSWORD)

    @pytest.mark.asyncio
    async def test_logout_ends_session(self, auth_service):
        user = await auth_service.register(RegisterRequest(**UserFactory.create_user_data()))
        token = await auth_service.start_session(user)

        await auth_service.logout(token)

        assert await auth_service.get_user_for_session(token) is None

    @pytest.mark.asyncio
    async def test_expired_session_rejected(self, storage, auth_service):
        user = await UserFactory.create_user(storage)
        await storage.create_session(user.id, "stale", utc_now())

        assert await auth_service.get_user_for_session("stale") is None
        assert await storage.get_session("stale") is None

    @pytest.mark.asyncio
    async def test_login_purges_expired_sessions(self, storage, auth_service):
        user = await UserFactory.create_user(storage, username="erin")
        await storage.create_session(user.id, "stale", utc_now())

        await auth_service.login("erin", TEST_PASSWORD)

        assert await storage.get_session("stale") is None

    @pytest.mark.asyncio
    async def test_update_profile(self, auth_service):
        user = await auth_service.register(RegisterRequest(**UserFactory.create_user_data()))

        updated = await auth_service.update_profile(
            user, UserUpdate(first_name="Fran", password="newpassword")
        )

        assert updated.first_name == "Fran"
        assert updated.verify_password("newpassword")

    @pytest.mark.asyncio
    async def test_update_profile_email_taken(self, auth_service):
        await auth_service.register(RegisterRequest(**UserFactory.create_user_data(email="taken@example.com")))
        user = await auth_service.register(RegisterRequest(**UserFactory.create_user_data()))

        with pytest.raises(DuplicateResourceError):
            await auth_service.update_profile(user, UserUpdate(email="taken@example.com"))


class TestPropertyService:
    """Test listing permissions and image handling."""

    @pytest.mark.asyncio
    async def test_create_property_with_images(self, storage, property_service, settings):
        seller = await UserFactory.create_user(storage, role=UserRole.SELLER.value)
        property_data = PropertyCreate(**PropertyFactory.create_property_data())

        property_obj = await property_service.create_property(
            property_data, seller, [make_upload(make_image_bytes("PNG"))]
        )

        assert property_obj.user_id == seller.id
        assert len(property_obj.images) == 1
        stored = Path(settings.upload_dir) / property_obj.images[0].rsplit("/", 1)[-1]
        assert stored.exists()

    @pytest.mark.asyncio
    async def test_buyer_cannot_create(self, storage, property_service):
        buyer = await UserFactory.create_user(storage)

        with pytest.raises(InsufficientPermissionsError):
            await property_service.create_property(
                PropertyCreate(**PropertyFactory.create_property_data()), buyer
            )

    @pytest.mark.asyncio
    async def test_invalid_image_rejected(self, storage, property_service, settings):
        seller = await UserFactory.create_user(storage, role=UserRole.SELLER.value)

        with pytest.raises(FileUploadError):
            await property_service.create_property(
                PropertyCreate(**PropertyFactory.create_property_data()),
                seller,
                [make_upload(b"not really an image")]
            )

        assert await storage.get_all_properties() == []
        assert list(Path(settings.upload_dir).iterdir()) == []

    @pytest.mark.asyncio
    async def test_image_limit(self, storage, property_service, settings):
        seller = await UserFactory.create_user(storage, role=UserRole.SELLER.value)
        images = [make_upload(make_image_bytes()) for _ in range(settings.max_images_per_property + 1)]

        with pytest.raises(ResourceLimitExceededError):
            await property_service.create_property(
                PropertyCreate(**PropertyFactory.create_property_data()), seller, images
            )

    @pytest.mark.asyncio
    async def test_update_appends_images(self, storage, property_service):
        seller = await UserFactory.create_user(storage, role=UserRole.SELLER.value)
        property_obj = await property_service.create_property(
            PropertyCreate(**PropertyFactory.create_property_data()),
            seller,
            [make_upload(make_image_bytes())]
        )
        first_image = property_obj.images[0]

        updated = await property_service.update_property(
            property_obj.id,
            PropertyUpdate(price=199000),
            seller,
            [make_upload(make_image_bytes("JPEG"), "extra.jpg", "image/jpeg")]
        )

        assert updated.price == 199000
        assert updated.images[0] == first_image
        assert len(updated.images) == 2
        assert updated.images[1].endswith(".jpg")

    @pytest.mark.asyncio
    async def test_non_owner_cannot_update(self, storage, property_service):
        owner = await UserFactory.create_user(storage, role=UserRole.SELLER.value)
        agent = await UserFactory.create_user(storage, role=UserRole.AGENT.value)
        property_obj = await PropertyFactory.create_property(storage, owner, title="Original")

        with pytest.raises(PropertyOwnershipError):
            await property_service.update_property(property_obj.id, PropertyUpdate(title="Hijacked"), agent)

        assert (await storage.get_property(property_obj.id)).title == "Original"

    @pytest.mark.asyncio
    async def test_admin_can_update(self, storage, property_service):
        owner = await UserFactory.create_user(storage, role=UserRole.SELLER.value)
        admin = await UserFactory.create_user(storage, role=UserRole.ADMIN.value)
        property_obj = await PropertyFactory.create_property(storage, owner)

        updated = await property_service.update_property(
            property_obj.id, PropertyUpdate(status="sold"), admin
        )

        assert updated.status.value == "sold"
        assert updated.user_id == owner.id

    @pytest.mark.asyncio
    async def test_delete_removes_files(self, storage, property_service, settings):
        seller = await UserFactory.create_user(storage, role=UserRole.SELLER.value)
        property_obj = await property_service.create_property(
            PropertyCreate(**PropertyFactory.create_property_data()),
            seller,
            [make_upload(make_image_bytes())]
        )

        await property_service.delete_property(property_obj.id, seller)

        assert await storage.get_property(property_obj.id) is None
        assert list(Path(settings.upload_dir).iterdir()) == []

    @pytest.mark.asyncio
    async def test_get_missing_property(self, property_service):
        with pytest.raises(PropertyNotFoundError):
            await property_service.get_property(999)

    @pytest.mark.asyncio
    async def test_list_and_featured(self, storage, property_service, settings):
        seller = await UserFactory.create_user(storage, role=UserRole.SELLER.value)
        for i in range(settings.featured_default_limit + 2):
            await PropertyFactory.create_property(storage, seller, city="Austin" if i % 2 else "Boston")

        featured = await property_service.get_featured_properties()
        in_boston = await property_service.list_properties(PropertyFilters(location="boston"))

        assert len(featured) == settings.featured_default_limit
        assert len(in_boston) == 4
        assert all(p.city == "Boston" for p in in_boston)


class TestInquiryAndFavoriteServices:

    @pytest.mark.asyncio
    async def test_create_inquiry_links_user(self, storage):
        owner = await UserFactory.create_user(storage, role=UserRole.AGENT.value)
        buyer = await UserFactory.create_user(storage)
        property_obj = await PropertyFactory.create_property(storage, owner)
        service = InquiryService(storage)

        inquiry = await service.create_inquiry(
            InquiryCreate(name="Buyer", email="buyer@example.com", message="Hello", property_id=property_obj.id),
            buyer
        )

        assert inquiry.user_id == buyer.id
        assert inquiry.status == InquiryStatus.PENDING

    @pytest.mark.asyncio
    async def test_inquiry_for_missing_property(self, storage):
        with pytest.raises(PropertyNotFoundError):
            await InquiryService(storage).create_inquiry(
                InquiryCreate(name="A", email="a@example.com", message="Hi", property_id=999)
            )

    @pytest.mark.asyncio
    async def test_list_inquiries_rules(self, storage):
        agent = await UserFactory.create_user(storage, role=UserRole.AGENT.value)
        admin = await UserFactory.create_user(storage, role=UserRole.ADMIN.value)
        buyer = await UserFactory.create_user(storage)
        property_obj = await PropertyFactory.create_property(storage, agent)
        service = InquiryService(storage)
        from_buyer = await service.create_inquiry(
            InquiryCreate(name="B", email="b@example.com", message="Hi", property_id=property_obj.id), buyer
        )
        from_agent = await service.create_inquiry(
            InquiryCreate(name="A", email="a@example.com", message="Note"), agent
        )

        by_property = await service.list_inquiries(agent, property_id=property_obj.id)
        agent_asks_for_buyer = await service.list_inquiries(agent, user_id=buyer.id)
        admin_asks_for_buyer = await service.list_inquiries(admin, user_id=buyer.id)

        assert [i.id for i in by_property] == [from_buyer.id]
        assert [i.id for i in agent_asks_for_buyer] == [from_agent.id]
        assert [i.id for i in admin_asks_for_buyer] == [from_buyer.id]

    @pytest.mark.asyncio
    async def test_update_and_delete_inquiry(self, storage):
        agent = await UserFactory.create_user(storage, role=UserRole.AGENT.value)
        service = InquiryService(storage)
        inquiry = await service.create_inquiry(InquiryCreate(name="A", email="a@example.com", message="Hi"))

        updated = await service.update_inquiry(inquiry.id, InquiryUpdate(status="responded"), agent)
        await service.delete_inquiry(inquiry.id, agent)

        assert updated.status == InquiryStatus.RESPONDED
        with pytest.raises(NotFoundError):
            await service.get_inquiry(inquiry.id)

    @pytest.mark.asyncio
    async def test_favorites(self, storage):
        owner = await UserFactory.create_user(storage, role=UserRole.SELLER.value)
        buyer = await UserFactory.create_user(storage)
        other = await UserFactory.create_user(storage)
        property_obj = await PropertyFactory.create_property(storage, owner)
        service = FavoriteService(storage)

        favorite = await service.add_favorite(property_obj.id, buyer)

        with pytest.raises(DuplicateResourceError):
            await service.add_favorite(property_obj.id, buyer)
        with pytest.raises(PropertyNotFoundError):
            await service.add_favorite(999, buyer)
        with pytest.raises(ForbiddenError):
            await service.remove_favorite(favorite.id, other)

        await service.remove_favorite(favorite.id, buyer)

        assert await service.list_favorites(buyer) == []
        with pytest.raises(NotFoundError):
            await service.remove_favorite(favorite.id, buyer)


class TestUserService:

    @pytest.mark.asyncio
    async def test_delete_user_removes_listing_files(self, storage, property_service, settings):
        admin = await UserFactory.create_user(storage, role=UserRole.ADMIN.value)
        seller = await UserFactory.create_user(storage, role=UserRole.SELLER.value)
        property_obj = await property_service.create_property(
            PropertyCreate(**PropertyFactory.create_property_data()),
            seller,
            [make_upload(make_image_bytes())]
        )
        service = UserService(storage, property_service)

        await service.delete_user(seller.id, admin)

        assert await storage.get_user(seller.id) is None
        assert await storage.get_property(property_obj.id) is None
        assert list(Path(settings.upload_dir).iterdir()) == []

    @pytest.mark.asyncio
    async def test_admin_cannot_delete_self(self, storage, property_service):
        admin = await UserFactory.create_user(storage, role=UserRole.ADMIN.value)

        with pytest.raises(ForbiddenError):
            await UserService(storage, property_service).delete_user(admin.id, admin)

    @pytest.mark.asyncio
    async def test_delete_missing_user(self, storage, property_service):
        admin = await UserFactory.create_user(storage, role=UserRole.ADMIN.value)

        with pytest.raises(NotFoundError):
            await UserService(storage, property_service).delete_user(999, admin)
