from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from models.cart_line import CartSummaryDTO, DashboardStatsDTO
from repositories.cart_line import CartLineRepository
from repositories.product import ProductRepository
from utils.transaction_manager import TransactionManager


class CartSummaryService:
    """
    Read-side projection of a cart. Nothing is stored: every call aggregates the
    current lines with the same visibility filter the cart listing uses.
    """

    @staticmethod
    async def get_summary(user_id: int, session: AsyncSession | Session) -> CartSummaryDTO:
        """
        Returns:
            CartSummaryDTO with item_count, total_quantity and subtotal, all zero
            for an empty or unknown cart
        """
        async with TransactionManager.atomic(session, "get_summary"):
            return await CartLineRepository.summarize_visible_for_user(user_id, session)

    @staticmethod
    async def get_dashboard_stats(user_id: int, session: AsyncSession | Session) -> DashboardStatsDTO:
        async with TransactionManager.atomic(session, "get_dashboard_stats"):
            products_listed = await ProductRepository.count_active_by_seller(user_id, session)
            summary = await CartLineRepository.summarize_visible_for_user(user_id, session)
        return DashboardStatsDTO(
            products_listed=products_listed,
            cart_items=summary.item_count,
            cart_total=summary.subtotal,
        )
