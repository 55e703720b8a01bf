# marketplace/domain/errors.py
from marketplace.domain.enums import CheckoutState


class CheckoutError(Exception):
    """
    Blad przerywajacy checkout.
    stage - stan w ktorym proba checkoutu sie wywrocila
    order_id - ustawione tylko gdy naglowek zamowienia juz istnieje w bazie
    """

    def __init__(self, stage: CheckoutState, message: str, order_id: int | None = None):
        super().__init__(message)
        self.stage = stage
        self.message = message
        self.order_id = order_id

    def to_dict(self) -> dict:
        return {
            "stage": self.stage.value,
            "message": self.message,
            "order_id": self.order_id,
        }


class CartSnapshotError(CheckoutError):
    def __init__(self, message: str):
        super().__init__(CheckoutState.INITIATED, message)


class UserNotFoundError(CheckoutError):
    def __init__(self, user_id: int):
        super().__init__(CheckoutState.INITIATED, f"Uzytkownik {user_id} nie istnieje")
        self.user_id = user_id


class CheckoutInProgressError(CheckoutError):
    def __init__(self, user_id: int):
        super().__init__(CheckoutState.INITIATED, f"Checkout dla uzytkownika {user_id} juz trwa")
        self.user_id = user_id


class MissingContactError(CheckoutError):
    def __init__(self, user_id: int):
        super().__init__(CheckoutState.INITIATED, f"Uzytkownik {user_id} nie ma numeru telefonu")
        self.user_id = user_id


class CheckoutStorageError(CheckoutError):
    """Blad bazy poza zapisem zamowienia - stage to stan w chwili bledu."""

    def __init__(self, stage: CheckoutState, message: str):
        super().__init__(stage, message)


class PricingError(CheckoutError):
    """Niepoprawna konfiguracja flash sale - zawsze przed jakimkolwiek zapisem."""

    def __init__(self, message: str, sale_id: int | None = None):
        super().__init__(CheckoutState.INITIATED, message)
        self.sale_id = sale_id


class OrderWriteError(CheckoutError):
    def __init__(self, message: str, order_id: int | None = None):
        super().__init__(CheckoutState.PRICES_RESOLVED, message, order_id=order_id)


class OrderItemsWriteError(OrderWriteError):
    """Naglowek zapisany, pozycje nie - zamowienie oflagowane do recznej rekoncyliacji."""

    def __init__(self, message: str, order_id: int):
        super().__init__(message, order_id=order_id)


class InventoryError(Exception):
    pass


class ProductNotFoundError(InventoryError, LookupError):
    def __init__(self, product_id: int):
        super().__init__(f"Produkt {product_id} nie istnieje")
        self.product_id = product_id


class FlashSaleNotFoundError(InventoryError, LookupError):
    def __init__(self, sale_id: int):
        super().__init__(f"Flash sale {sale_id} nie istnieje")
        self.sale_id = sale_id


class SaleCapExceededError(InventoryError):
    def __init__(self, sale_id: int, quantity: int):
        super().__init__(f"Flash sale {sale_id}: przekroczony stock_cap przy +{quantity}")
        self.sale_id = sale_id
        self.quantity = quantity
