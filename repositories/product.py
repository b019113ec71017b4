from sqlalchemy import select, update, delete, func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from db import session_execute, session_flush
from enums.product_status import ProductStatus
from models.product import Product, ProductDTO, ProductFilterDTO

# Columns a seller may change through a regular update; status and ownership
# only move through the dedicated catalog operations.
UPDATABLE_FIELDS = frozenset({
    'title', 'description', 'category', 'price', 'quantity', 'condition', 'brand', 'model',
    'dimensions', 'weight', 'material', 'year_of_manufacture', 'original_packaging',
    'manual_included', 'working_condition_description', 'image_url',
})


class ProductRepository:

    @staticmethod
    async def get_by_id(product_id: int, session: Session | AsyncSession) -> ProductDTO | None:
        stmt = select(Product).where(Product.id == product_id).execution_options(populate_existing=True)
        product = await session_execute(stmt, session)
        product = product.scalar()
        if product is None:
            return None
        return ProductDTO.model_validate(product, from_attributes=True)

    @staticmethod
    async def create(product_dto: ProductDTO, session: Session | AsyncSession) -> int:
        product = Product(**product_dto.model_dump(exclude_none=True, exclude={'id', 'created_at', 'updated_at'}))
        session.add(product)
        await session_flush(session)
        return product.id

    @staticmethod
    async def exists_duplicate(product_dto: ProductDTO, session: Session | AsyncSession) -> bool:
        stmt = (select(Product.id)
                .where(Product.seller_id == product_dto.seller_id,
                       Product.title == product_dto.title,
                       Product.price == product_dto.price)
                .limit(1))
        result = await session_execute(stmt, session)
        return result.scalar() is not None

    @staticmethod
    async def get_active(filters: ProductFilterDTO, limit: int, session: Session | AsyncSession) -> list[ProductDTO]:
        """
        Active listings matching the filters, newest first.

        Args:
            filters: Optional category/condition/price/search/seller filters
            limit: Maximum number of rows when filters.limit is unset
            session: Database session

        Returns:
            List of ProductDTO
        """
        stmt = select(Product).where(Product.status == ProductStatus.ACTIVE)

        if filters.category is not None:
            stmt = stmt.where(Product.category == filters.category)
        if filters.condition is not None:
            stmt = stmt.where(Product.condition == filters.condition)
        if filters.min_price is not None:
            stmt = stmt.where(Product.price >= filters.min_price)
        if filters.max_price is not None:
            stmt = stmt.where(Product.price <= filters.max_price)
        if filters.search and filters.search.strip():
            term = f"%{filters.search.strip()}%"
            stmt = stmt.where(or_(Product.title.ilike(term), Product.description.ilike(term)))
        if filters.seller_id is not None:
            stmt = stmt.where(Product.seller_id == filters.seller_id)

        stmt = (stmt.order_by(Product.created_at.desc(), Product.id.desc())
                .offset(filters.offset)
                .limit(filters.limit or limit)
                .execution_options(populate_existing=True))
        products = await session_execute(stmt, session)
        return [ProductDTO.model_validate(product, from_attributes=True) for product in products.scalars().all()]

    @staticmethod
    async def update_fields(product_id: int, changes: dict, session: Session | AsyncSession) -> int:
        stmt = (update(Product)
                .where(Product.id == product_id)
                .values(**changes)
                .execution_options(synchronize_session=False))
        result = await session_execute(stmt, session)
        return result.rowcount

    @staticmethod
    async def set_status(product_id: int, status: ProductStatus, session: Session | AsyncSession,
                         expected_status: ProductStatus | None = None) -> int:
        stmt = update(Product).where(Product.id == product_id)
        if expected_status is not None:
            stmt = stmt.where(Product.status == expected_status)
        stmt = stmt.values(status=status).execution_options(synchronize_session=False)
        result = await session_execute(stmt, session)
        return result.rowcount

    @staticmethod
    async def delete(product_id: int, session: Session | AsyncSession) -> int:
        stmt = delete(Product).where(Product.id == product_id).execution_options(synchronize_session=False)
        result = await session_execute(stmt, session)
        return result.rowcount

    @staticmethod
    async def count_active_by_seller(seller_id: int, session: Session | AsyncSession) -> int:
        stmt = (select(func.count(Product.id))
                .where(Product.seller_id == seller_id, Product.status == ProductStatus.ACTIVE))
        result = await session_execute(stmt, session)
        return result.scalar_one()
