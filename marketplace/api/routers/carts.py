#marketplace/api/routers/carts.py
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from marketplace.data.database import get_db
from marketplace.domain.schemas import CartItemIn, CartOut
from marketplace.services.cart_service import CartService

router = APIRouter(prefix="/carts", tags=["carts"])


@router.get("/{user_id}", response_model=CartOut)
def get_cart(user_id: int, db: Session = Depends(get_db)):
    return CartService(db).get_cart(user_id)


@router.post("/{user_id}/items", response_model=CartOut)
def add_item(user_id: int, payload: CartItemIn, db: Session = Depends(get_db)):
    svc = CartService(db)
    try:
        return svc.add_product(user_id, payload.product_id, payload.quantity)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.delete("/{user_id}", response_model=CartOut)
def clear_cart(user_id: int, db: Session = Depends(get_db)):
    return CartService(db).clear_cart(user_id)
