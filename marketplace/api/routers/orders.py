# marketplace/api/routers/orders.py
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from marketplace.data.database import get_db
from marketplace.domain.errors import (
    CheckoutError,
    CartSnapshotError,
    CheckoutInProgressError,
    CheckoutStorageError,
    MissingContactError,
    PricingError,
    UserNotFoundError,
)
from marketplace.domain.schemas import CheckoutIn, CheckoutOut, OrderOut
from marketplace.services.checkout import CheckoutOrchestrator
from marketplace.services.lock_service import LockService
from marketplace.services.notification_service import NotificationService
from marketplace.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["orders"])


def get_orchestrator(db: Session = Depends(get_db)) -> CheckoutOrchestrator:
    return CheckoutOrchestrator(
        db=db,
        notifier=NotificationService(),
        lock_service=LockService(),
    )


def _status_code(error: CheckoutError) -> int:
    if isinstance(error, UserNotFoundError):
        return 404
    if isinstance(error, CheckoutInProgressError):
        return 409
    if isinstance(error, (CartSnapshotError, PricingError, MissingContactError)):
        return 400
    if isinstance(error, CheckoutStorageError):
        return 503
    return 500


@router.post("/checkout", response_model=CheckoutOut, status_code=201)
def checkout(
    payload: CheckoutIn,
    orchestrator: CheckoutOrchestrator = Depends(get_orchestrator),
):
    """
    Zamienia koszyk + wynik platnosci w zamowienie.
    Potwierdzenie po zapisie zamowienia - bledy stanow/powiadomien
    nie cofaja sukcesu (widoczne w logach i w reconciliation_failures).
    """
    try:
        return orchestrator.checkout(payload)
    except CheckoutError as e:
        raise HTTPException(status_code=_status_code(e), detail=e.to_dict())


@router.get("/{order_id}", response_model=OrderOut)
def get_order(
    order_id: int,
    user_id: int = Query(...),
    db: Session = Depends(get_db),
):
    """
    Pobiera szczegóły zamówienia.
    """
    svc = OrderService(db)
    try:
        return svc.get_order(order_id, user_id)
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
