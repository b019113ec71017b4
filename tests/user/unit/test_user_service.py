"""
Unit Tests: UserService

Tests for services/user.py covering registration, soft deactivation and
permanent deletion with its cascade to listings and cart lines.

Run with:
    pytest tests/user/unit/test_user_service.py -v
"""

import pytest

from enums.user_status import UserStatus
from exceptions import UserAlreadyExistsException, UserNotFoundException, ProductNotFoundException
from models.user import UserDTO
from repositories.cart_line import CartLineRepository
from services.cart import CartService
from services.catalog import CatalogService
from services.user import UserService


class TestRegister:

    @pytest.mark.asyncio
    async def test_registered_user_is_active(self, test_session, buyer):
        stored = await UserService.get_user(buyer.id, test_session)

        assert stored.username == "buyer"
        assert stored.email == "buyer@example.com"
        assert stored.status == UserStatus.ACTIVE

    @pytest.mark.asyncio
    async def test_duplicate_username_rejected(self, test_session, buyer):
        with pytest.raises(UserAlreadyExistsException):
            await UserService.register(
                UserDTO(username="buyer", email="someone.else@example.com", password_hash="x"), test_session
            )

    @pytest.mark.asyncio
    async def test_duplicate_email_rejected(self, test_session, buyer):
        with pytest.raises(UserAlreadyExistsException):
            await UserService.register(
                UserDTO(username="buyer2", email="buyer@example.com", password_hash="x"), test_session
            )

    @pytest.mark.asyncio
    async def test_unknown_user_not_found(self, test_session):
        with pytest.raises(UserNotFoundException):
            await UserService.get_user(123, test_session)


class TestDeactivateAndDelete:

    @pytest.mark.asyncio
    async def test_deactivate_keeps_account(self, test_session, buyer):
        await UserService.deactivate(buyer.id, test_session)

        stored = await UserService.get_user(buyer.id, test_session)
        assert stored.status == UserStatus.INACTIVE

    @pytest.mark.asyncio
    async def test_deactivate_unknown_user(self, test_session):
        with pytest.raises(UserNotFoundException):
            await UserService.deactivate(123, test_session)

    @pytest.mark.asyncio
    async def test_delete_buyer_removes_cart_lines(self, test_session, buyer, product):
        line = await CartService.add_to_cart(buyer.id, product.id, 1, test_session)

        await UserService.delete_account(buyer.id, test_session)

        assert await CartLineRepository.get_by_id(line.id, test_session) is None
        with pytest.raises(UserNotFoundException):
            await UserService.get_user(buyer.id, test_session)

    @pytest.mark.asyncio
    async def test_delete_seller_removes_listings_and_foreign_cart_lines(self, test_session, seller, buyer, product):
        line = await CartService.add_to_cart(buyer.id, product.id, 1, test_session)

        await UserService.delete_account(seller.id, test_session)

        with pytest.raises(ProductNotFoundException):
            await CatalogService.get_product(product.id, test_session)
        assert await CartLineRepository.get_by_id(line.id, test_session) is None
        # The buyer is untouched
        assert (await UserService.get_user(buyer.id, test_session)).status == UserStatus.ACTIVE

    @pytest.mark.asyncio
    async def test_delete_twice_not_found(self, test_session, buyer):
        await UserService.delete_account(buyer.id, test_session)

        with pytest.raises(UserNotFoundException):
            await UserService.delete_account(buyer.id, test_session)
