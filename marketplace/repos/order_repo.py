# marketplace/repos/order_repo.py
from typing import List

from sqlalchemy import select, update
from sqlalchemy.orm import Session, selectinload

from marketplace.data.models.order import OrderModel
from marketplace.data.models.order_item import OrderItemModel
from marketplace.domain.enums import NON_FULFILLING_STATUSES
from marketplace.utils.retry import db_retry


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    def create_order(self, order: OrderModel) -> OrderModel:
        self.db.add(order)
        self.db.commit()
        self.db.refresh(order)
        return order

    def add_order_items(self, items: List[OrderItemModel]) -> List[OrderItemModel]:
        self.db.add_all(items)
        self.db.commit()
        return items

    @db_retry()
    def get_order(self, order_id: int) -> OrderModel | None:
        return self.db.execute(
            select(OrderModel)
            .options(selectinload(OrderModel.items))
            .where(OrderModel.id == order_id)
        ).scalar_one_or_none()

    def flag_for_reconciliation(self, order_id: int, note: str) -> int:
        result = self.db.execute(
            update(OrderModel)
            .where(OrderModel.id == order_id)
            .values(needs_reconciliation=True, reconciliation_note=note)
        )
        self.db.commit()
        return result.rowcount

    @db_retry()
    def get_orders_needing_reconciliation(self, max_attempts: int) -> List[OrderModel]:
        statuses = [s.value for s in NON_FULFILLING_STATUSES]
        return list(
            self.db.execute(
                select(OrderModel)
                .options(selectinload(OrderModel.items))
                .where(
                    OrderModel.needs_reconciliation.is_(True),
                    OrderModel.status.not_in(statuses),
                    OrderModel.reconciliation_attempts < max_attempts,
                )
                .order_by(OrderModel.id)
            ).scalars().all()
        )

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
