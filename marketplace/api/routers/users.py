# marketplace/api/routers/users.py
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from marketplace.data.database import get_db
from marketplace.services.user_service import UserService
from marketplace.domain.schemas import UserCreate, UserRead, UserContactUpdate

router = APIRouter(prefix="/users", tags=["users"])


@router.post("/", response_model=UserRead)
def create_user(payload: UserCreate, db: Session = Depends(get_db)):
    """Idempotentne - istniejacy uzytkownik zwracany bez zmian."""
    return UserService(db).create_user(payload)


@router.get("/{user_id}", response_model=UserRead)
def get_user(user_id: int, db: Session = Depends(get_db)):
    try:
        return UserService(db).get_user(user_id)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.put("/{user_id}/contact", response_model=UserRead)
def update_contact(user_id: int, payload: UserContactUpdate, db: Session = Depends(get_db)):
    try:
        return UserService(db).update_contact(user_id, payload)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
