# marketplace/domain/snapshot.py
from datetime import datetime
from decimal import Decimal
from typing import Tuple

from pydantic import BaseModel, ConfigDict, Field


class CartLine(BaseModel):
    """Pozycja koszyka z cena zamrozona w chwili startu checkoutu."""

    model_config = ConfigDict(frozen=True)

    product_id: int
    quantity: int = Field(..., gt=0)
    product_name: str
    product_image: str | None = None
    vendor_id: int | None = None
    base_price: Decimal
    unit_price: Decimal
    flash_sale_id: int | None = None

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


class CartSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_id: int
    taken_at: datetime
    lines: Tuple[CartLine, ...]

    @property
    def total(self) -> Decimal:
        return sum((line.line_total for line in self.lines), Decimal("0.00"))
