# marketplace/repos/user_repo.py
from sqlalchemy.orm import Session
from marketplace.data.models.user import UserModel
from marketplace.utils.retry import db_retry

class UserRepo:
    def __init__(self, db: Session):
        self.db = db

    @db_retry()
    def get_user(self, user_id: int) -> UserModel | None:
        return self.db.get(UserModel, user_id)

    def create_user(self, user: UserModel) -> UserModel:
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        return user

    def save(self, user: UserModel) -> UserModel:
        self.db.commit()
        self.db.refresh(user)
        return user
