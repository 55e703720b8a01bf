# marketplace/services/user_service.py
from sqlalchemy.orm import Session
from marketplace.data.models.user import UserModel
from marketplace.repos.user_repo import UserRepo
from marketplace.domain.schemas import UserCreate, UserRead, UserContactUpdate
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


class UserService:
    """
    Uzytkownik jest tu tylko adresatem powiadomienia po zamowieniu
    (imie + telefon), logowanie i sesje sa poza tym serwisem.
    """

    def __init__(self, db: Session):
        self.repo = UserRepo(db)

    def create_user(self, payload: UserCreate) -> UserRead:
        existing = self.repo.get_user(payload.id)
        if existing:
            return UserRead.model_validate(existing)

        user = UserModel(id=payload.id, name=payload.name, phone=payload.phone)
        created = self.repo.create_user(user)
        return UserRead.model_validate(created)

    def get_user(self, user_id: int) -> UserRead:
        user = self.repo.get_user(user_id)
        if not user:
            raise ValueError("User not found")
        return UserRead.model_validate(user)

    def update_contact(self, user_id: int, payload: UserContactUpdate) -> UserRead:
        #telefon musi byc przed checkoutem, inaczej SMS z potwierdzeniem nie wyjdzie
        user = self.repo.get_user(user_id)
        if not user:
            raise ValueError("User not found")

        if payload.name is not None:
            user.name = payload.name
        user.phone = payload.phone
        saved = self.repo.save(user)

        logger.info(f"User {user_id} contact updated")
        return UserRead.model_validate(saved)
