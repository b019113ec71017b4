import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from enums.rejection_reason import RejectionReason
from enums.user_status import UserStatus
from exceptions.cart import (
    CartLineNotFoundException,
    CartLineForbiddenException,
    CartRejectedException,
    CartConflictException
)
from exceptions.user import UserNotFoundException
from models.cart_line import CartLineDTO, CartLineView, line_total
from repositories.cart_line import CartLineRepository
from repositories.user import UserRepository
from services.catalog import CatalogService
from utils.transaction_manager import TransactionManager


class CartService:
    """
    Cart ledger: one line per (user, product), merged on repeated adds.

    Every public operation takes the session explicitly and runs as a single
    transaction, so a failure never leaves a partial write behind.
    """

    @staticmethod
    async def add_to_cart(user_id: int, product_id: int, quantity: int,
                          session: AsyncSession | Session) -> CartLineDTO:
        """
        Add quantity of a product to the user's cart.

        A first add creates the line with the product's current price as unit
        price. Any later add for the same product merges into that line: the
        quantity grows and the total is recomputed from the unit price captured
        at the first add, so a price change in between does not reprice the
        line. Whether merging should reprice at the current price instead is an
        open product decision; until it is made the first price is kept.

        Product status and seller are re-read on every call.

        Raises:
            CartRejectedException: quantity < 1, inactive buyer, product not
                active, or the buyer is the product's seller
            UserNotFoundException, ProductNotFoundException
            CartConflictException: concurrent inserts kept colliding
            StorageUnavailableException: storage could not be reached
        """
        if quantity < 1:
            raise CartRejectedException(RejectionReason.INVALID_QUANTITY, user_id, product_id, quantity)

        try:
            return await CartService._add_or_merge(user_id, product_id, quantity, session)
        except IntegrityError as e:
            raise CartConflictException(user_id, product_id, TransactionManager.MAX_RETRIES + 1) from e

    @staticmethod
    @TransactionManager.with_retry(retry_on=(IntegrityError,))
    async def _add_or_merge(user_id: int, product_id: int, quantity: int,
                            session: AsyncSession | Session) -> CartLineDTO:
        # A racing insert for the same (user, product) raises IntegrityError on
        # flush; the transaction is rolled back and the retry takes the merge path.
        async with TransactionManager.atomic(session, "add_to_cart"):
            user = await UserRepository.get_by_id(user_id, session)
            if user is None:
                raise UserNotFoundException(user_id)
            if user.status != UserStatus.ACTIVE:
                raise CartRejectedException(RejectionReason.USER_INACTIVE, user_id, product_id)

            product = await CatalogService.find_product(product_id, session)
            if not CatalogService.is_active(product):
                raise CartRejectedException(RejectionReason.PRODUCT_UNAVAILABLE, user_id, product_id)
            if CatalogService.owner_of(product) == user_id:
                raise CartRejectedException(RejectionReason.SELF_PURCHASE, user_id, product_id)

            merged = await CartLineRepository.merge_quantity(user_id, product_id, quantity, session)
            if merged:
                line = await CartLineRepository.get_by_user_and_product(user_id, product_id, session)
                logging.info(f"Cart line {line.id}: user {user_id} product {product_id} +{quantity} -> {line.quantity}")
            else:
                new_line = CartLineDTO(
                    user_id=user_id,
                    product_id=product_id,
                    quantity=quantity,
                    unit_price=product.price,
                )
                line_id = await CartLineRepository.create(new_line, session)
                line = await CartLineRepository.get_by_id(line_id, session)
                logging.info(f"Cart line {line_id} created: user {user_id} product {product_id} x{quantity} @ {line.unit_price}")
        return line

    @staticmethod
    async def update_quantity(line_id: int, user_id: int, new_quantity: int,
                              session: AsyncSession | Session) -> CartLineDTO:
        """
        Set a line's quantity and recompute its total from the stored unit price.

        The returned line is re-read after the write; CartLineDTO refuses any row
        where total != quantity x unit_price, which rolls the update back.
        """
        if new_quantity < 1:
            raise CartRejectedException(RejectionReason.INVALID_QUANTITY, user_id, quantity=new_quantity)

        async with TransactionManager.atomic(session, "update_quantity"):
            line = await CartService._get_owned_line(line_id, user_id, session)
            await CartLineRepository.set_quantity(
                line_id, new_quantity, line_total(new_quantity, line.unit_price), session
            )
            updated = await CartLineRepository.get_by_id(line_id, session)
        logging.info(f"Cart line {line_id}: quantity {line.quantity} -> {updated.quantity}")
        return updated

    @staticmethod
    async def remove_line(line_id: int, user_id: int, session: AsyncSession | Session) -> None:
        """Delete one line. Removing a line that is already gone raises CartLineNotFoundException."""
        async with TransactionManager.atomic(session, "remove_line"):
            await CartService._get_owned_line(line_id, user_id, session)
            if await CartLineRepository.delete(line_id, session) == 0:
                raise CartLineNotFoundException(line_id)
        logging.info(f"Cart line {line_id} removed by user {user_id}")

    @staticmethod
    async def clear_cart(user_id: int, session: AsyncSession | Session) -> int:
        """Delete every line of the user. An already empty cart is not an error."""
        async with TransactionManager.atomic(session, "clear_cart"):
            removed = await CartLineRepository.delete_all_for_user(user_id, session)
        logging.info(f"Cart of user {user_id} cleared ({removed} lines)")
        return removed

    @staticmethod
    async def list_cart(user_id: int, session: AsyncSession | Session) -> list[CartLineView]:
        """Lines of the user whose product is still active, newest first."""
        async with TransactionManager.atomic(session, "list_cart"):
            return await CartLineRepository.get_visible_by_user(user_id, session)

    @staticmethod
    async def get_line(line_id: int, user_id: int, session: AsyncSession | Session) -> CartLineView:
        async with TransactionManager.atomic(session, "get_line"):
            await CartService._get_owned_line(line_id, user_id, session)
            view = await CartLineRepository.get_visible_view(line_id, session)
            if view is None:
                # Product no longer active: the line is hidden like in the listing
                raise CartLineNotFoundException(line_id)
            return view

    @staticmethod
    async def _get_owned_line(line_id: int, user_id: int, session: AsyncSession | Session) -> CartLineDTO:
        line = await CartLineRepository.get_by_id(line_id, session)
        if line is None:
            raise CartLineNotFoundException(line_id)
        if line.user_id != user_id:
            raise CartLineForbiddenException(line_id, user_id)
        return line
