# marketplace/domain/schemas.py
from pydantic import BaseModel, Field, ConfigDict, model_validator
from typing import List
from decimal import Decimal
from datetime import datetime, timezone

from marketplace.domain.enums import OrderStatus, PaymentMethod, DiscountType, CheckoutState

# lokalny ghanski 0XXXXXXXXX albo E.164
PHONE_PATTERN = r"^(0[235]\d{8}|\+\d{8,15})$"


class UserCreate(BaseModel):
    """Schema dla tworzenia użytkownika."""

    id: int = Field(..., gt=0, description="ID użytkownika (musi być > 0)")
    name: str = Field(..., min_length=1, max_length=100, description="Imię użytkownika")
    phone: str | None = Field(None, pattern=PHONE_PATTERN, description="Telefon 0XXXXXXXXX lub E.164")


class UserContactUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=100)
    phone: str = Field(..., pattern=PHONE_PATTERN, description="Telefon 0XXXXXXXXX lub E.164")


class UserRead(BaseModel):
    """Schema dla użytkownika (response)."""

    id: int
    name: str
    phone: str | None = None

    model_config = ConfigDict(from_attributes=True)


class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    price: Decimal = Field(..., ge=0, decimal_places=2)
    stock: int = Field(0, ge=0)
    vendor_id: int | None = None
    image_url: str | None = None


class ProductOut(BaseModel):
    id: int
    name: str
    price: Decimal
    stock: int
    vendor_id: int | None = None
    image_url: str | None = None

    model_config = ConfigDict(from_attributes=True)


class FlashSaleCreate(BaseModel):
    """
    Schema dla tworzenia flash sale.
    Bledne wartosci odrzucamy tutaj, a nie przycinamy przy liczeniu ceny.
    """

    product_id: int = Field(..., gt=0)
    discount_type: DiscountType
    discount_value: Decimal = Field(..., gt=0, description="Procent (0-100) albo kwota do odjecia")
    start_date: datetime
    end_date: datetime
    stock_cap: int | None = Field(None, ge=0)
    is_active: bool = True

    @model_validator(mode="after")
    def check_discount_and_window(self):
        if self.discount_type == DiscountType.PERCENTAGE and not (0 < self.discount_value < 100):
            raise ValueError("Procent rabatu musi byc w przedziale (0, 100)")
        start, end = (d if d.tzinfo else d.replace(tzinfo=timezone.utc) for d in (self.start_date, self.end_date))
        if end <= start:
            raise ValueError("end_date musi byc po start_date")
        return self


class FlashSaleOut(BaseModel):
    id: int
    product_id: int
    discount_type: DiscountType
    discount_value: Decimal
    start_date: datetime
    end_date: datetime
    is_active: bool
    stock_cap: int | None = None
    sales_count: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CartItemIn(BaseModel):
    """Schema dla dodawania produktu do koszyka."""

    product_id: int = Field(..., gt=0, description="ID produktu (musi być > 0)")
    quantity: int = Field(..., gt=0, description="Ilość produktu (musi być > 0)")


class CartItemOut(BaseModel):
    product_id: int
    quantity: int

    model_config = ConfigDict(from_attributes=True)


class CartOut(BaseModel):
    user_id: int
    items: List[CartItemOut]


class AddressIn(BaseModel):
    street: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    region: str = Field(..., min_length=1)
    country: str = "Ghana"
    postal_code: str = ""


class PaymentResultIn(BaseModel):
    """Wynik z bramki platnosci - traktowany jako juz rozliczony."""

    method: PaymentMethod
    transaction_id: str | None = None
    status: OrderStatus


class CheckoutIn(BaseModel):
    user_id: int = Field(..., gt=0)
    shipping_address: AddressIn
    payment_result: PaymentResultIn
    # brak pozycji = bierzemy zapisany koszyk uzytkownika
    cart_items: List[CartItemIn] | None = None


class CheckoutOut(BaseModel):
    order_id: int
    final_status: OrderStatus
    state: CheckoutState
    total_amount: Decimal
    reconciliation_failures: List[int] = []
    cart_cleared: bool = False
    notified: bool = False


class OrderItemOut(BaseModel):
    product_id: int
    quantity: int
    price_at_purchase: Decimal
    product_name: str
    product_image: str | None = None
    flash_sale_id: int | None = None

    model_config = ConfigDict(from_attributes=True)


class OrderOut(BaseModel):
    """Schema dla zamówienia (response)."""

    id: int
    user_id: int
    status: OrderStatus
    total_amount: Decimal
    order_date: datetime
    shipping_address: dict
    payment_method: PaymentMethod
    transaction_id: str | None = None
    needs_reconciliation: bool
    items: List[OrderItemOut]

    model_config = ConfigDict(from_attributes=True)
