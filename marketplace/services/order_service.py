# marketplace/services/order_service.py
from sqlalchemy.orm import Session

from marketplace.data.models.order import OrderModel
from marketplace.repos.order_repo import OrderRepo


class OrderService:
    """
    Odczyt zamowien. Zapis zamowienia robi CheckoutOrchestrator.
    """

    def __init__(self, db: Session):
        self.repo = OrderRepo(db)

    def get_order(self, order_id: int, user_id: int) -> OrderModel:
        """
        Use Case: Pobranie zamówienia (Query).
        """
        order = self.repo.get_order(order_id)

        if not order:
            raise ValueError("Zamówienie nie istnieje")

        if order.user_id != user_id:
            raise PermissionError("Brak dostępu do zamówienia")

        return order
