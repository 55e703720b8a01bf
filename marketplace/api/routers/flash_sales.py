# marketplace/api/routers/flash_sales.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from marketplace.data.database import get_db
from marketplace.domain.schemas import FlashSaleCreate, FlashSaleOut
from marketplace.services.flash_sale_service import FlashSaleService

router = APIRouter(prefix="/flash-sales", tags=["flash-sales"])


@router.post("/", response_model=FlashSaleOut, status_code=201)
def create_flash_sale(payload: FlashSaleCreate, db: Session = Depends(get_db)):
    """
    Tworzy flash sale. Procent poza (0, 100) albo end_date <= start_date
    odrzuca juz schema (422).
    """
    try:
        return FlashSaleService(db).create_sale(payload)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/active", response_model=List[FlashSaleOut])
def get_active_flash_sales(
    product_ids: List[int] = Query(...),
    db: Session = Depends(get_db),
):
    return FlashSaleService(db).get_active_sales(product_ids)
