from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field, field_validator
from sqlalchemy import Column, Integer, String, Text, Numeric, Boolean, DateTime, ForeignKey, CheckConstraint, func
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import relationship

from enums.product_category import ProductCategory
from enums.product_condition import ProductCondition
from enums.product_status import ProductStatus
from models.base import Base


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


# A listing by a single seller. Rows are never removed on delisting (status flips to
# inactive) so that anything referencing the product keeps a valid target.
class Product(Base):
    __tablename__ = 'products'

    id = Column(Integer, primary_key=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    category = Column(SQLEnum(ProductCategory, values_callable=_enum_values), nullable=False, index=True)
    price = Column(Numeric(10, 2), nullable=False, index=True)
    quantity = Column(Integer, nullable=False, default=1)
    condition = Column(SQLEnum(ProductCondition, values_callable=_enum_values), nullable=False, index=True)

    # Optional descriptive attributes
    brand = Column(String(100), nullable=True)
    model = Column(String(100), nullable=True)
    dimensions = Column(String(100), nullable=True)
    weight = Column(String(50), nullable=True)
    material = Column(String(100), nullable=True)
    year_of_manufacture = Column(Integer, nullable=True)
    original_packaging = Column(Boolean, nullable=False, default=False)
    manual_included = Column(Boolean, nullable=False, default=False)
    working_condition_description = Column(Text, nullable=True)

    seller_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    seller = relationship("User", back_populates="products")
    image_url = Column(String(255), nullable=True)
    status = Column(SQLEnum(ProductStatus, values_callable=_enum_values),
                    nullable=False, default=ProductStatus.ACTIVE, index=True)
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    cart_lines = relationship("CartLine", back_populates="product", cascade="all, delete-orphan",
                              passive_deletes=True)

    __table_args__ = (
        CheckConstraint('price > 0', name='check_product_price_positive'),
        CheckConstraint('quantity >= 1', name='check_product_quantity_positive'),
    )


class ProductDTO(BaseModel):
    id: int | None = None
    title: str | None = None
    description: str | None = None
    category: ProductCategory | None = None
    price: Decimal | None = Field(default=None, gt=0, decimal_places=2)
    quantity: int = Field(default=1, ge=1)
    condition: ProductCondition | None = None
    brand: str | None = None
    model: str | None = None
    dimensions: str | None = None
    weight: str | None = None
    material: str | None = None
    year_of_manufacture: int | None = None
    original_packaging: bool = False
    manual_included: bool = False
    working_condition_description: str | None = None
    seller_id: int | None = None
    image_url: str | None = None
    status: ProductStatus | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_validator('price', mode='before')
    @classmethod
    def normalize_price(cls, v):
        """
        Accept int/float/str input but keep money as Decimal.

        Floats are converted through str() so 19.99 stays 19.99 instead of
        picking up binary representation noise.
        """
        if v is None or isinstance(v, Decimal):
            return v
        if isinstance(v, (int, float, str)):
            return Decimal(str(v))
        raise ValueError(f"Price must be a number, got {type(v)}")


class ProductFilterDTO(BaseModel):
    """Optional catalog listing filters. Unset fields are ignored."""
    category: ProductCategory | None = None
    condition: ProductCondition | None = None
    min_price: Decimal | None = None
    max_price: Decimal | None = None
    search: str | None = None
    seller_id: int | None = None
    limit: int | None = Field(default=None, ge=1)
    offset: int = Field(default=0, ge=0)
