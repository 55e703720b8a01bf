# marketplace/services/notification_service.py
from decimal import Decimal

from pydantic import BaseModel

from marketplace.celery_worker import celery_app
from marketplace.services.sms_client import SmsClient, to_e164
from marketplace.utils.settings import ADMIN_PHONE_NUMBER
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


class OrderNotification(BaseModel):
    order_id: int
    customer_name: str
    customer_phone: str | None = None
    total_amount: Decimal


class NotificationService:
    """
    Serwis do wysyłania powiadomień po zapisaniu zamówienia.
    Używa Celery do asynchronicznego przetwarzania - fire and forget,
    błąd kolejkowania jest tylko logowany.
    """

    @staticmethod
    def send_order_confirmation(notification: OrderNotification) -> bool:
        try:
            send_order_confirmation_task.delay(notification.model_dump(mode="json"))
        except Exception as e:
            logger.error(f"Failed to enqueue confirmation for order {notification.order_id}: {e}")
            return False
        return True


def customer_message(n: OrderNotification) -> str:
    return (
        f"Hi {n.customer_name}, your order #{n.order_id} for "
        f"GH₵{Decimal(str(n.total_amount)):.2f} has been placed successfully!"
    )


def admin_message(n: OrderNotification) -> str:
    return (
        f"New order: #{n.order_id}\n"
        f"Amount: GH₵{Decimal(str(n.total_amount)):.2f}\n"
        f"By: {n.customer_name} ({n.customer_phone or 'no phone'})"
    )


def deliver_order_confirmation(n: OrderNotification, sms: SmsClient, admin_phone: str | None) -> dict:
    """
    Klient i admin niezaleznie - blad jednego SMS nie blokuje drugiego.
    """
    result = {"order_id": n.order_id, "customer": "skipped", "admin": "skipped"}

    if n.customer_phone:
        try:
            sms.send(to_e164(n.customer_phone), customer_message(n))
            result["customer"] = "sent"
        except Exception as e:
            result["customer"] = "failed"
            logger.error(f"Order {n.order_id}: customer SMS to {n.customer_phone} failed: {e}")
    else:
        logger.warning(f"Order {n.order_id}: customer has no phone, skipping SMS")

    if admin_phone:
        try:
            sms.send(to_e164(admin_phone), admin_message(n))
            result["admin"] = "sent"
        except Exception as e:
            result["admin"] = "failed"
            logger.error(f"Order {n.order_id}: admin SMS failed: {e}")
    else:
        logger.warning("ADMIN_PHONE_NUMBER not set, skipping admin notification")

    return result


@celery_app.task(name="marketplace.services.notification_service.send_order_confirmation_task")
def send_order_confirmation_task(payload: dict):
    notification = OrderNotification(**payload)
    logger.info(f"[NOTIFICATION] Order {notification.order_id} confirmation for {notification.customer_name}")
    return deliver_order_confirmation(notification, SmsClient(), ADMIN_PHONE_NUMBER)
