from decimal import Decimal

from sqlalchemy import select, update, delete, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from db import session_execute, session_flush
from enums.product_status import ProductStatus
from models.cart_line import CartLine, CartLineDTO, CartLineView, CartSummaryDTO
from models.product import Product


def visible_cart_line_filter():
    """
    The one predicate deciding which cart lines a buyer can see.

    Lines whose product was delisted or sold stay in the table until they are
    removed or cascaded away, but every read path (cart listing, summary,
    single-line view) must hide them. Both paths join cart_lines to products and
    apply this filter so listing and summary can never disagree.
    """
    return Product.status == ProductStatus.ACTIVE


class CartLineRepository:
    # Bulk UPDATE/DELETE statements below bypass the identity map
    # (synchronize_session=False), so entity reads refresh it with populate_existing.

    @staticmethod
    async def get_by_id(line_id: int, session: AsyncSession | Session) -> CartLineDTO | None:
        stmt = select(CartLine).where(CartLine.id == line_id).execution_options(populate_existing=True)
        line = await session_execute(stmt, session)
        line = line.scalar()
        if line is None:
            return None
        return CartLineDTO.model_validate(line, from_attributes=True)

    @staticmethod
    async def get_by_user_and_product(user_id: int, product_id: int,
                                      session: AsyncSession | Session) -> CartLineDTO | None:
        stmt = (select(CartLine)
                .where(CartLine.user_id == user_id, CartLine.product_id == product_id)
                .execution_options(populate_existing=True))
        line = await session_execute(stmt, session)
        line = line.scalar()
        if line is None:
            return None
        return CartLineDTO.model_validate(line, from_attributes=True)

    @staticmethod
    async def create(line_dto: CartLineDTO, session: AsyncSession | Session) -> int:
        """
        Insert a new line. Raises IntegrityError (on flush) if a concurrent
        transaction already created the (user, product) line.
        """
        line = CartLine(
            user_id=line_dto.user_id,
            product_id=line_dto.product_id,
            quantity=line_dto.quantity,
            unit_price=line_dto.unit_price,
            total=line_dto.total,
        )
        session.add(line)
        await session_flush(session)
        return line.id

    @staticmethod
    async def merge_quantity(user_id: int, product_id: int, quantity: int,
                             session: AsyncSession | Session) -> int:
        """
        Add quantity to an existing (user, product) line in a single UPDATE.

        The new total is computed by the database from the stored unit price, so
        two concurrent merges serialize on the row and neither increment is lost.

        Returns:
            Number of rows updated (0 when no line exists yet)
        """
        new_quantity = CartLine.quantity + quantity
        stmt = (update(CartLine)
                .where(CartLine.user_id == user_id, CartLine.product_id == product_id)
                .values(quantity=new_quantity, total=new_quantity * CartLine.unit_price)
                .execution_options(synchronize_session=False))
        result = await session_execute(stmt, session)
        return result.rowcount

    @staticmethod
    async def set_quantity(line_id: int, quantity: int, total: Decimal, session: AsyncSession | Session) -> int:
        stmt = (update(CartLine)
                .where(CartLine.id == line_id)
                .values(quantity=quantity, total=total)
                .execution_options(synchronize_session=False))
        result = await session_execute(stmt, session)
        return result.rowcount

    @staticmethod
    async def delete(line_id: int, session: AsyncSession | Session) -> int:
        stmt = delete(CartLine).where(CartLine.id == line_id).execution_options(synchronize_session=False)
        result = await session_execute(stmt, session)
        return result.rowcount

    @staticmethod
    async def delete_all_for_user(user_id: int, session: AsyncSession | Session) -> int:
        stmt = delete(CartLine).where(CartLine.user_id == user_id).execution_options(synchronize_session=False)
        result = await session_execute(stmt, session)
        return result.rowcount

    @staticmethod
    def _view_select():
        return (select(CartLine.id,
                       CartLine.user_id,
                       CartLine.product_id,
                       CartLine.quantity,
                       CartLine.unit_price,
                       CartLine.total,
                       CartLine.created_at,
                       CartLine.updated_at,
                       Product.title.label("product_title"),
                       Product.image_url.label("product_image"),
                       Product.category.label("product_category"),
                       Product.condition.label("product_condition"),
                       Product.brand.label("product_brand"))
                .join(Product, CartLine.product_id == Product.id)
                .where(visible_cart_line_filter()))

    @staticmethod
    async def get_visible_by_user(user_id: int, session: AsyncSession | Session) -> list[CartLineView]:
        stmt = (CartLineRepository._view_select()
                .where(CartLine.user_id == user_id)
                .order_by(CartLine.created_at.desc(), CartLine.id.desc()))
        result = await session_execute(stmt, session)
        return [CartLineView.model_validate(row, from_attributes=True) for row in result.all()]

    @staticmethod
    async def get_visible_view(line_id: int, session: AsyncSession | Session) -> CartLineView | None:
        stmt = CartLineRepository._view_select().where(CartLine.id == line_id)
        result = await session_execute(stmt, session)
        row = result.first()
        if row is None:
            return None
        return CartLineView.model_validate(row, from_attributes=True)

    @staticmethod
    async def summarize_visible_for_user(user_id: int, session: AsyncSession | Session) -> CartSummaryDTO:
        stmt = (select(func.count(CartLine.id),
                       func.coalesce(func.sum(CartLine.quantity), 0),
                       func.coalesce(func.sum(CartLine.total), 0))
                .select_from(CartLine)
                .join(Product, CartLine.product_id == Product.id)
                .where(CartLine.user_id == user_id, visible_cart_line_filter()))
        result = await session_execute(stmt, session)
        item_count, total_quantity, subtotal = result.one()
        return CartSummaryDTO(
            item_count=item_count or 0,
            total_quantity=total_quantity or 0,
            subtotal=Decimal(str(subtotal or 0)).quantize(Decimal("0.01")),
        )

