# marketplace/domain/enums.py
from enum import Enum


class OrderStatus(str, Enum):
    PENDING = "Pending"
    PROCESSING = "Processing"
    SHIPPED = "Shipped"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"
    PAYMENT_FAILED = "Payment Failed"


# zamowienie zapisujemy (audyt), ale bez ruszania stanow i koszyka
NON_FULFILLING_STATUSES = frozenset({OrderStatus.PAYMENT_FAILED, OrderStatus.CANCELLED})


class PaymentMethod(str, Enum):
    MTN_MOMO = "MTN MoMo"
    VODAFONE_CASH = "Vodafone Cash"
    TELECEL_CASH = "Telecel Cash"
    CASH_ON_DELIVERY = "Cash on Delivery"
    PAYSTACK = "Paystack"


class DiscountType(str, Enum):
    PERCENTAGE = "percentage"
    FIXED_AMOUNT = "fixed_amount"


class CheckoutState(str, Enum):
    INITIATED = "Initiated"
    PRICES_RESOLVED = "PricesResolved"
    ORDER_RECORDED = "OrderRecorded"
    INVENTORY_RECONCILED = "InventoryReconciled"
    CART_CLEARED = "CartCleared"
    COMPLETED = "Completed"
    FAILED = "Failed"
