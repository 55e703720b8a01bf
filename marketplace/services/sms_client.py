# marketplace/services/sms_client.py
import requests
from requests import RequestException

from marketplace.utils.retry import http_retry
from marketplace.utils.settings import (
    TWILIO_ACCOUNT_SID,
    TWILIO_AUTH_TOKEN,
    TWILIO_PHONE_NUMBER,
    TWILIO_API_URL,
    SMS_COUNTRY_CODE,
)
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


def to_e164(phone: str, country_code: str = SMS_COUNTRY_CODE) -> str:
    #0241234567 -> +233241234567
    phone = phone.strip().replace(" ", "")
    if phone.startswith("+"):
        return phone
    if phone.startswith("0"):
        return f"+{country_code}{phone[1:]}"
    return f"+{phone}"


class SmsClient:
    """Wysylka SMS przez Twilio REST API. Bez credentiali - tylko log."""

    def __init__(
        self,
        account_sid: str | None = None,
        auth_token: str | None = None,
        from_number: str | None = None,
        base_url: str | None = None,
        timeout: int = 5,
    ):
        self.account_sid = account_sid or TWILIO_ACCOUNT_SID
        self.auth_token = auth_token or TWILIO_AUTH_TOKEN
        self.from_number = from_number or TWILIO_PHONE_NUMBER
        self.base_url = (base_url or TWILIO_API_URL).rstrip("/")
        self.timeout = timeout

    @property
    def enabled(self) -> bool:
        return bool(self.account_sid and self.auth_token and self.from_number)

    @http_retry()
    def _post(self, to: str, body: str) -> dict:
        url = f"{self.base_url}/Accounts/{self.account_sid}/Messages.json"
        logger.info(f"SmsClient POST {url} to={to}")

        resp = requests.post(
            url,
            data={"From": self.from_number, "To": to, "Body": body},
            auth=(self.account_sid, self.auth_token),
            timeout=self.timeout,
        )
        resp.raise_for_status()
        return resp.json()

    def send(self, to: str, body: str) -> str | None:
        """Zwraca SID wiadomosci albo None gdy wysylka wylaczona."""
        if not self.enabled:
            logger.warning(f"SMS disabled (missing Twilio credentials), message to {to}: {body}")
            return None

        try:
            data = self._post(to, body)
        except RequestException as e:
            raise RuntimeError(f"Failed to send SMS to {to}: {e}") from e

        logger.info(f"SMS sent to {to}, sid={data.get('sid')}")
        return data.get("sid")
