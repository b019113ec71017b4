from datetime import datetime

from pydantic import BaseModel
from sqlalchemy import Column, Integer, DateTime, String, func
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import relationship

from enums.user_status import UserStatus
from models.base import Base


class User(Base):
    __tablename__ = 'users'

    id = Column(Integer, primary_key=True)
    username = Column(String(50), nullable=False, unique=True)
    email = Column(String(100), nullable=False, unique=True)
    # Hashing happens outside this service; the value is stored as given
    password_hash = Column(String(255), nullable=False)
    profile_picture = Column(String(255), nullable=True)
    status = Column(SQLEnum(UserStatus, values_callable=lambda e: [m.value for m in e]),
                    nullable=False, default=UserStatus.ACTIVE, index=True)
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    # Deleting a user removes their listings and cart lines in the database
    products = relationship("Product", back_populates="seller", cascade="all, delete-orphan", passive_deletes=True)
    cart_lines = relationship("CartLine", back_populates="user", cascade="all, delete-orphan", passive_deletes=True)


class UserDTO(BaseModel):
    id: int | None = None
    username: str | None = None
    email: str | None = None
    password_hash: str | None = None
    profile_picture: str | None = None
    status: UserStatus | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
