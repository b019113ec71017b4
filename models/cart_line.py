# A cart line is the single (user, product) record of a shopping cart. The unit price is
# captured when the line is first created and is never re-read from the live product:
# later price changes on the listing do not reprice quantities already in the cart.
#
# Only the quantity-driven total is recomputed, and it is stored rather than computed
# on read so every mutation leaves total == quantity * unit_price on disk.
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field, model_validator
from sqlalchemy import Column, Integer, Numeric, DateTime, ForeignKey, CheckConstraint, UniqueConstraint, func
from sqlalchemy.orm import relationship

from enums.product_category import ProductCategory
from enums.product_condition import ProductCondition
from models.base import Base

MONEY_QUANTUM = Decimal("0.01")


def line_total(quantity: int, unit_price: Decimal) -> Decimal:
    return (Decimal(quantity) * unit_price).quantize(MONEY_QUANTUM)


class CartLine(Base):
    __tablename__ = "cart_lines"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    user = relationship("User", back_populates="cart_lines")
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)
    product = relationship("Product", back_populates="cart_lines")
    quantity = Column(Integer, nullable=False, default=1)
    unit_price = Column(Numeric(10, 2), nullable=False)
    total = Column(Numeric(10, 2), nullable=False)
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint('user_id', 'product_id', name='uq_cart_line_user_product'),
        CheckConstraint('quantity >= 1', name='check_cart_line_quantity_positive'),
        CheckConstraint('unit_price > 0', name='check_cart_line_unit_price_positive'),
    )


class CartLineDTO(BaseModel):
    id: int | None = None
    user_id: int | None = None
    product_id: int | None = None
    quantity: int = Field(ge=1)
    unit_price: Decimal
    total: Decimal | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @model_validator(mode='after')
    def check_total(self):
        """Fill in the total for new lines and refuse rows whose stored total drifted."""
        expected = line_total(self.quantity, self.unit_price)
        if self.total is None:
            self.total = expected
        elif self.total != expected:
            raise ValueError(
                f"Cart line {self.id} total {self.total} != quantity {self.quantity} x unit price {self.unit_price}"
            )
        return self


class CartLineView(CartLineDTO):
    """Cart line joined with the live product fields shown in the cart listing."""
    product_title: str
    product_image: str | None = None
    product_category: ProductCategory
    product_condition: ProductCondition
    product_brand: str | None = None


class CartSummaryDTO(BaseModel):
    item_count: int = 0
    total_quantity: int = 0
    subtotal: Decimal = Decimal("0.00")


class DashboardStatsDTO(BaseModel):
    products_listed: int = 0
    cart_items: int = 0
    cart_total: Decimal = Decimal("0.00")
