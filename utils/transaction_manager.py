import logging
import asyncio
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional
from functools import wraps
from datetime import datetime

from sqlalchemy.exc import OperationalError, InterfaceError, IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

import config
from db import session_commit, session_rollback
from exceptions.storage import StorageUnavailableException

logger = logging.getLogger(__name__)


class TransactionManager:
    """
    Utility class for running one unit of work as one transaction on an
    explicitly passed session, with rollback on every failure path and retry
    for constraint races.
    """

    # Transaction timeout in seconds
    TRANSACTION_TIMEOUT = config.TRANSACTION_TIMEOUT

    # Retry configuration
    MAX_RETRIES = config.CART_CONFLICT_MAX_RETRIES
    RETRY_DELAY_BASE = config.CART_CONFLICT_RETRY_DELAY

    @staticmethod
    @asynccontextmanager
    async def atomic(session: AsyncSession | Session, operation: str,
                     timeout: Optional[int] = None) -> AsyncGenerator[AsyncSession | Session, None]:
        """
        Commit everything done inside the block, or nothing.

        Connection-level failures (OperationalError, InterfaceError) surface as
        StorageUnavailableException. Any other exception is re-raised unchanged
        after the rollback.

        Usage:
            async with TransactionManager.atomic(session, "clear_cart"):
                await CartLineRepository.delete_all_for_user(user_id, session)
        """
        timeout = timeout or TransactionManager.TRANSACTION_TIMEOUT
        transaction_start = datetime.now()

        try:
            yield session

            duration = (datetime.now() - transaction_start).total_seconds()
            if duration > timeout:
                logger.warning(f"Transaction {operation} exceeded timeout: {duration:.2f}s > {timeout}s")

            await session_commit(session)
            logger.debug(f"Transaction {operation} committed in {duration:.3f}s")
        except (OperationalError, InterfaceError) as e:
            await TransactionManager._safe_rollback(session, operation, e)
            raise StorageUnavailableException(operation, str(e.orig or e)) from e
        except Exception as e:
            await TransactionManager._safe_rollback(session, operation, e)
            raise

    @staticmethod
    async def _safe_rollback(session: AsyncSession | Session, operation: str, error: Exception) -> None:
        try:
            await session_rollback(session)
            logger.info(f"Transaction {operation} rolled back due to error: {str(error)}")
        except (OperationalError, InterfaceError) as rollback_error:
            logger.critical(f"Failed to rollback transaction {operation}: {str(rollback_error)}")

    @staticmethod
    def with_retry(max_retries: Optional[int] = None, delay_base: Optional[float] = None,
                   retry_on: tuple[type[Exception], ...] = (IntegrityError,)):
        """
        Decorator for automatic retry of a transactional operation with exponential backoff.

        The decorated function must run its own transaction so every attempt
        starts from a clean, rolled-back session. After the last attempt the
        original exception is re-raised.

        Args:
            max_retries: Maximum number of retry attempts
            delay_base: Base delay for exponential backoff
            retry_on: Exception types worth another attempt
        """
        max_retries = max_retries or TransactionManager.MAX_RETRIES
        delay_base = TransactionManager.RETRY_DELAY_BASE if delay_base is None else delay_base

        def decorator(func):
            @wraps(func)
            async def wrapper(*args, **kwargs):
                for attempt in range(max_retries + 1):
                    try:
                        return await func(*args, **kwargs)
                    except retry_on as e:
                        if attempt == max_retries:
                            logger.error(f"Function {func.__name__} failed after {max_retries} retries: {str(e)}")
                            raise

                        # Exponential backoff with jitter
                        delay = delay_base * (2 ** attempt) + (delay_base * 0.1 * attempt)
                        logger.warning(f"Attempt {attempt + 1} failed for {func.__name__}, retrying in {delay:.2f}s: {str(e)}")
                        await asyncio.sleep(delay)

            return wrapper
        return decorator
