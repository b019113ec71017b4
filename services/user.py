import logging

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from enums.user_status import UserStatus
from exceptions.user import UserNotFoundException, UserAlreadyExistsException
from models.user import UserDTO
from repositories.user import UserRepository
from utils.transaction_manager import TransactionManager


class UserService:

    @staticmethod
    async def register(user_dto: UserDTO, session: AsyncSession | Session) -> UserDTO:
        async with TransactionManager.atomic(session, "register_user"):
            if await UserRepository.exists_by_username_or_email(user_dto.username, user_dto.email, session):
                raise UserAlreadyExistsException(user_dto.username)
            new_user = user_dto.model_copy(update={'id': None, 'status': UserStatus.ACTIVE})
            user_id = await UserRepository.create(new_user, session)
            user = await UserRepository.get_by_id(user_id, session)
        logging.info(f"✅ User {user_id} registered")
        return user

    @staticmethod
    async def get_user(user_id: int, session: AsyncSession | Session) -> UserDTO:
        async with TransactionManager.atomic(session, "get_user"):
            user = await UserRepository.get_by_id(user_id, session)
            if user is None:
                raise UserNotFoundException(user_id)
            return user

    @staticmethod
    async def deactivate(user_id: int, session: AsyncSession | Session) -> None:
        """Soft delete: the account and its listings stay, the user can no longer shop or sell."""
        async with TransactionManager.atomic(session, "deactivate_user"):
            if await UserRepository.set_status(user_id, UserStatus.INACTIVE, session) == 0:
                raise UserNotFoundException(user_id)
        logging.info(f"User {user_id} deactivated")

    @staticmethod
    async def delete_account(user_id: int, session: AsyncSession | Session) -> None:
        """
        Permanently remove a user.

        The database cascades the removal to the user's cart lines and listings,
        and from those listings to every other buyer's cart lines.
        """
        async with TransactionManager.atomic(session, "delete_account"):
            if await UserRepository.delete(user_id, session) == 0:
                raise UserNotFoundException(user_id)
        logging.info(f"User {user_id} permanently deleted")
