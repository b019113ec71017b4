from sqlalchemy import select, update, delete, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from db import session_execute, session_flush
from enums.user_status import UserStatus
from models.user import UserDTO, User


class UserRepository:
    @staticmethod
    async def get_by_id(user_id: int, session: AsyncSession | Session) -> UserDTO | None:
        stmt = select(User).where(User.id == user_id).execution_options(populate_existing=True)
        user = await session_execute(stmt, session)
        user = user.scalar()
        if user is not None:
            return UserDTO.model_validate(user, from_attributes=True)
        else:
            return user

    @staticmethod
    async def exists_by_username_or_email(username: str, email: str, session: AsyncSession | Session) -> bool:
        stmt = select(User.id).where(or_(User.username == username, User.email == email)).limit(1)
        result = await session_execute(stmt, session)
        return result.scalar() is not None

    @staticmethod
    async def create(user_dto: UserDTO, session: Session | AsyncSession) -> int:
        user = User(**user_dto.model_dump(exclude_none=True))
        session.add(user)
        await session_flush(session)
        return user.id

    @staticmethod
    async def set_status(user_id: int, status: UserStatus, session: Session | AsyncSession) -> int:
        stmt = (update(User)
                .where(User.id == user_id)
                .values(status=status)
                .execution_options(synchronize_session=False))
        result = await session_execute(stmt, session)
        return result.rowcount

    @staticmethod
    async def delete(user_id: int, session: Session | AsyncSession) -> int:
        # Core DELETE so the database performs the cascade to products and cart lines
        stmt = delete(User).where(User.id == user_id).execution_options(synchronize_session=False)
        result = await session_execute(stmt, session)
        return result.rowcount
