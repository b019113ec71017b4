"""
Unit Tests: CartSummaryService

Tests for services/cart_summary.py covering:
- get_summary() - zero summary, agreement with the cart listing
- get_dashboard_stats() - listed products and cart totals per user

Run with:
    pytest tests/cart/unit/test_cart_summary_service.py -v
"""

from decimal import Decimal

import pytest

from services.cart import CartService
from services.cart_summary import CartSummaryService
from services.catalog import CatalogService


class TestGetSummary:

    @pytest.mark.asyncio
    async def test_empty_cart_summary_is_zero(self, test_session, buyer):
        summary = await CartSummaryService.get_summary(buyer.id, test_session)

        assert summary.item_count == 0
        assert summary.total_quantity == 0
        assert summary.subtotal == Decimal("0.00")

    @pytest.mark.asyncio
    async def test_unknown_user_summary_is_zero(self, test_session):
        summary = await CartSummaryService.get_summary(4242, test_session)

        assert summary.item_count == 0
        assert summary.subtotal == Decimal("0")

    @pytest.mark.asyncio
    async def test_summary_aggregates_lines(self, test_session, buyer, product, second_product):
        await CartService.add_to_cart(buyer.id, product.id, 3, test_session)
        await CartService.add_to_cart(buyer.id, second_product.id, 2, test_session)

        summary = await CartSummaryService.get_summary(buyer.id, test_session)

        assert summary.item_count == 2
        assert summary.total_quantity == 5
        assert summary.subtotal == Decimal("75.00")

    @pytest.mark.asyncio
    async def test_summary_matches_listing(self, test_session, seller, buyer, product, second_product,
                                           product_factory):
        """Summary and listing share one visibility rule, so they always agree."""
        lamp = await product_factory(seller.id, title="Desk lamp", price="12.99")
        await CartService.add_to_cart(buyer.id, product.id, 1, test_session)
        await CartService.add_to_cart(buyer.id, second_product.id, 4, test_session)
        await CartService.add_to_cart(buyer.id, lamp.id, 3, test_session)
        await CatalogService.delist_product(second_product.id, seller.id, test_session)

        lines = await CartService.list_cart(buyer.id, test_session)
        summary = await CartSummaryService.get_summary(buyer.id, test_session)

        assert summary.item_count == len(lines) == 2
        assert summary.total_quantity == sum(line.quantity for line in lines) == 4
        assert summary.subtotal == sum(line.total for line in lines) == Decimal("58.97")

    @pytest.mark.asyncio
    async def test_summary_excludes_sold_products(self, test_session, buyer, product):
        await CartService.add_to_cart(buyer.id, product.id, 2, test_session)
        await CatalogService.mark_sold(product.id, test_session)

        summary = await CartSummaryService.get_summary(buyer.id, test_session)

        assert summary.item_count == 0
        assert summary.total_quantity == 0
        assert summary.subtotal == Decimal("0.00")


class TestDashboardStats:

    @pytest.mark.asyncio
    async def test_stats_for_seller_and_buyer(self, test_session, seller, buyer, product, second_product):
        await CartService.add_to_cart(buyer.id, product.id, 2, test_session)

        seller_stats = await CartSummaryService.get_dashboard_stats(seller.id, test_session)
        buyer_stats = await CartSummaryService.get_dashboard_stats(buyer.id, test_session)

        assert seller_stats.products_listed == 2
        assert seller_stats.cart_items == 0
        assert seller_stats.cart_total == Decimal("0.00")
        assert buyer_stats.products_listed == 0
        assert buyer_stats.cart_items == 1
        assert buyer_stats.cart_total == Decimal("40.00")

    @pytest.mark.asyncio
    async def test_delisted_products_not_counted(self, test_session, seller, product, second_product):
        await CatalogService.delist_product(product.id, seller.id, test_session)

        stats = await CartSummaryService.get_dashboard_stats(seller.id, test_session)

        assert stats.products_listed == 1
