import logging

from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

import config
from enums.product_status import ProductStatus
from enums.user_status import UserStatus
from exceptions.product import (
    ProductNotFoundException,
    ProductOwnershipException,
    InvalidProductDataException,
    DuplicateProductException
)
from exceptions.user import UserNotFoundException
from models.product import ProductDTO, ProductFilterDTO
from repositories.product import ProductRepository, UPDATABLE_FIELDS
from repositories.user import UserRepository
from utils.transaction_manager import TransactionManager


class CatalogService:
    """
    Product listings: creation, lookup, filtered listing, updates, delisting.

    The cart core only reads price, status and seller through find_product(),
    is_active() and owner_of(); it never writes product rows.
    """

    @staticmethod
    def is_active(product: ProductDTO) -> bool:
        return product.status == ProductStatus.ACTIVE

    @staticmethod
    def owner_of(product: ProductDTO) -> int:
        return product.seller_id

    @staticmethod
    async def find_product(product_id: int, session: AsyncSession | Session) -> ProductDTO:
        product = await ProductRepository.get_by_id(product_id, session)
        if product is None:
            raise ProductNotFoundException(product_id)
        return product

    @staticmethod
    async def get_product(product_id: int, session: AsyncSession | Session) -> ProductDTO:
        async with TransactionManager.atomic(session, "get_product"):
            return await CatalogService.find_product(product_id, session)

    @staticmethod
    async def create_product(product_dto: ProductDTO, session: AsyncSession | Session) -> ProductDTO:
        """
        Create a new active listing.

        Raises:
            UserNotFoundException: seller does not exist
            InvalidProductDataException: required fields missing or seller inactive
            DuplicateProductException: seller already lists the same title at the same price
        """
        for field in ('title', 'category', 'price', 'condition', 'seller_id'):
            if getattr(product_dto, field) is None:
                raise InvalidProductDataException(f"{field} is required")

        async with TransactionManager.atomic(session, "create_product"):
            seller = await UserRepository.get_by_id(product_dto.seller_id, session)
            if seller is None:
                raise UserNotFoundException(product_dto.seller_id)
            if seller.status != UserStatus.ACTIVE:
                raise InvalidProductDataException(f"seller {seller.id} is inactive")

            if await ProductRepository.exists_duplicate(product_dto, session):
                raise DuplicateProductException(product_dto.seller_id, product_dto.title)

            new_product = product_dto.model_copy(update={'id': None, 'status': ProductStatus.ACTIVE})
            product_id = await ProductRepository.create(new_product, session)
            product = await ProductRepository.get_by_id(product_id, session)

        logging.info(f"✅ Product {product_id} listed by seller {product.seller_id} at {product.price}")
        return product

    @staticmethod
    async def list_products(filters: ProductFilterDTO | None, session: AsyncSession | Session) -> list[ProductDTO]:
        filters = filters or ProductFilterDTO()
        async with TransactionManager.atomic(session, "list_products"):
            return await ProductRepository.get_active(filters, config.PRODUCT_LIST_LIMIT, session)

    @staticmethod
    async def list_seller_products(seller_id: int, filters: ProductFilterDTO | None,
                                   session: AsyncSession | Session) -> list[ProductDTO]:
        filters = (filters or ProductFilterDTO()).model_copy(update={'seller_id': seller_id})
        return await CatalogService.list_products(filters, session)

    @staticmethod
    async def search_products(term: str, filters: ProductFilterDTO | None,
                              session: AsyncSession | Session) -> list[ProductDTO]:
        if not term or not term.strip():
            raise InvalidProductDataException("search term is required")
        filters = (filters or ProductFilterDTO()).model_copy(update={'search': term})
        return await CatalogService.list_products(filters, session)

    @staticmethod
    async def update_product(product_id: int, seller_id: int, changes: dict,
                             session: AsyncSession | Session) -> ProductDTO:
        """
        Apply a seller's field changes to a listing.

        Existing cart lines keep their captured unit price: a price change here
        only affects quantities added afterwards as new lines.

        Raises:
            ProductNotFoundException, ProductOwnershipException, InvalidProductDataException
        """
        changes = {k: v for k, v in changes.items() if v is not None}
        forbidden = set(changes) - UPDATABLE_FIELDS
        if forbidden:
            raise InvalidProductDataException(f"fields not updatable: {', '.join(sorted(forbidden))}", product_id)
        if not changes:
            raise InvalidProductDataException("no fields to update", product_id)

        async with TransactionManager.atomic(session, "update_product"):
            product = await CatalogService._get_owned_product(product_id, seller_id, session)
            try:
                validated = ProductDTO.model_validate({**product.model_dump(), **changes})
            except ValidationError as e:
                raise InvalidProductDataException(str(e.errors()[0]['msg']), product_id) from e

            await ProductRepository.update_fields(
                product_id, {field: getattr(validated, field) for field in changes}, session
            )
            updated = await ProductRepository.get_by_id(product_id, session)

        logging.info(f"Product {product_id} updated by seller {seller_id}: {', '.join(sorted(changes))}")
        return updated

    @staticmethod
    async def delist_product(product_id: int, seller_id: int, session: AsyncSession | Session) -> None:
        """
        Soft delete: the row stays, status becomes inactive.

        Cart lines pointing at the product are not touched; they disappear from
        cart listings and summaries because those only show active products.
        """
        async with TransactionManager.atomic(session, "delist_product"):
            await CatalogService._get_owned_product(product_id, seller_id, session)
            await CatalogService._transition(product_id, ProductStatus.INACTIVE, session)
        logging.info(f"Product {product_id} delisted by seller {seller_id}")

    @staticmethod
    async def mark_sold(product_id: int, session: AsyncSession | Session) -> None:
        async with TransactionManager.atomic(session, "mark_sold"):
            await CatalogService._transition(product_id, ProductStatus.SOLD, session)
        logging.info(f"Product {product_id} marked as sold")

    @staticmethod
    async def delete_product(product_id: int, seller_id: int, session: AsyncSession | Session) -> None:
        """Permanently remove a listing. The database cascades the removal to cart lines."""
        async with TransactionManager.atomic(session, "delete_product"):
            await CatalogService._get_owned_product(product_id, seller_id, session)
            await ProductRepository.delete(product_id, session)
        logging.info(f"Product {product_id} permanently deleted by seller {seller_id}")

    @staticmethod
    async def _get_owned_product(product_id: int, seller_id: int, session: AsyncSession | Session) -> ProductDTO:
        product = await CatalogService.find_product(product_id, session)
        if CatalogService.owner_of(product) != seller_id:
            raise ProductOwnershipException(product_id, seller_id)
        return product

    @staticmethod
    async def _transition(product_id: int, target: ProductStatus, session: AsyncSession | Session) -> None:
        # Only active listings can be delisted or sold
        updated = await ProductRepository.set_status(product_id, target, session, expected_status=ProductStatus.ACTIVE)
        if updated == 0:
            product = await CatalogService.find_product(product_id, session)
            raise InvalidProductDataException(
                f"cannot move from {product.status.value} to {target.value}", product_id
            )
