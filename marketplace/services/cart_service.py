# marketplace/services/cart_service.py
from typing import Dict, Any
from sqlalchemy.orm import Session

from marketplace.data.models.cart_item import CartItemModel
from marketplace.repos.cart_repo import CartRepo
from marketplace.repos.product_repo import ProductRepo
from marketplace.repos.user_repo import UserRepo
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


class CartService:
    """
    Koszyk jest wlasnoscia osobnego podsystemu - tutaj tylko tyle,
    zeby checkout mial co czytac i czyscic.
    """

    def __init__(self, db: Session):
        self.repo = CartRepo(db)
        self.products = ProductRepo(db)
        self.users = UserRepo(db)

    def get_cart(self, user_id: int) -> Dict[str, Any]:
        items = self.repo.get_cart_items(user_id)
        return {
            "user_id": user_id,
            "items": [
                {"product_id": i.product_id, "quantity": i.quantity}
                for i in items
            ],
        }

    def add_product(self, user_id: int, product_id: int, quantity: int) -> Dict[str, Any]:
        if quantity <= 0:
            raise ValueError("Ilosc musi być wieksza niz 0")

        if not self.users.get_user(user_id):
            raise ValueError("Uzytkownik nie istnieje")

        if not self.products.get_product(product_id):
            raise ValueError("Produkt nie istnieje")

        existing_item = self.repo.get_cart_item(user_id, product_id)
        if existing_item:
            logger.info(
                f"Produkt {product_id} już jest w koszyku, zwiekszam ilosc "
                f"z {existing_item.quantity} do {existing_item.quantity + quantity}"
            )
            existing_item.quantity += quantity
            self.repo.add_cart_item(existing_item)
        else:
            logger.info(f"Dodaje nowy produkt {product_id} do koszyka uzytkownika {user_id}")
            self.repo.add_cart_item(
                CartItemModel(user_id=user_id, product_id=product_id, quantity=quantity)
            )

        return self.get_cart(user_id)

    def clear_cart(self, user_id: int) -> Dict[str, Any]:
        removed = self.repo.clear_cart(user_id)
        logger.info(f"Koszyk uzytkownika {user_id} wyczyszczony ({removed} pozycji)")
        return self.get_cart(user_id)
