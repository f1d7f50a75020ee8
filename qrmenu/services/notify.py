"""
Outbound staff notification.

The pipeline only needs "send this text to that number, tell me if it
worked". ``LinkNotifier`` reproduces the click-to-chat hand-off (the client
opens the returned wa.me link); ``WhatsAppCloudNotifier`` sends directly
through the WhatsApp Cloud API.
"""
import re
from dataclasses import dataclass
from typing import Protocol
from urllib.parse import quote

import httpx

from qrmenu.config import settings
from qrmenu.errors import NotificationError
from qrmenu.schemas.menu import BusinessOut
from qrmenu.util.logger import MenuLogger

logger = MenuLogger(__name__)

_URL_PATTERNS = [
    re.compile(r"wa\.me/(\d+)"),
    re.compile(r"api\.whatsapp\.com/send\?phone=(\d+)"),
    re.compile(r"whatsapp\.com/send\?phone=(\d+)"),
    re.compile(r"(\d{10,15})"),
]


@dataclass(frozen=True)
class NotifyReceipt:
    number: str
    url: str | None = None
    message_id: str | None = None


class Notifier(Protocol):
    def send_text(self, number: str, text: str) -> NotifyReceipt: ...


def staff_number(business: BusinessOut) -> str:
    """
    WhatsApp number for the restaurant: taken from its WhatsApp link when one
    is configured, else from its phone. A bare 10-digit mobile gets the
    default country code.
    """
    number = ""
    if business.whatsapp_url:
        for pattern in _URL_PATTERNS:
            m = pattern.search(business.whatsapp_url)
            if m:
                number = m.group(1)
                break

    if not number and business.phone:
        digits = re.sub(r"\D", "", business.phone)
        if len(digits) >= 10:
            number = digits

    if not number:
        raise NotificationError(
            "We couldn't find the restaurant's WhatsApp number. Please contact them directly."
        )

    if len(number) == 10 and number.startswith("3"):
        number = settings.DEFAULT_COUNTRY_CODE + number
    return number


class LinkNotifier:
    def send_text(self, number: str, text: str) -> NotifyReceipt:
        url = f"https://wa.me/{number}?text={quote(text, safe='')}"
        logger.info(f"click-to-chat link ready for {number}")
        return NotifyReceipt(number=number, url=url)


class WhatsAppCloudNotifier:
    def __init__(self, api_url: str, token: str, phone_number_id: str,
                 timeout: float = 10.0, client: httpx.Client | None = None):
        self.endpoint = f"{api_url.rstrip('/')}/{phone_number_id}/messages"
        self.token = token
        self.timeout = timeout
        self.client = client

    def send_text(self, number: str, text: str) -> NotifyReceipt:
        payload = {
            "messaging_product": "whatsapp",
            "to": number,
            "type": "text",
            "text": {"preview_url": False, "body": text},
        }
        headers = {"Authorization": f"Bearer {self.token}"}
        try:
            if self.client is not None:
                r = self.client.post(self.endpoint, json=payload, headers=headers, timeout=self.timeout)
            else:
                with httpx.Client(timeout=self.timeout) as c:
                    r = c.post(self.endpoint, json=payload, headers=headers)
            r.raise_for_status()
        except httpx.TimeoutException as e:
            logger.error(f"whatsapp send to {number} timed out after {self.timeout}s")
            raise NotificationError("The restaurant didn't answer in time.") from e
        except httpx.HTTPError as e:
            logger.error(f"whatsapp send to {number} failed: {e}")
            raise NotificationError("We couldn't reach the restaurant's WhatsApp.") from e

        body = r.json() if r.content else {}
        message_id = (body.get("messages") or [{}])[0].get("id")
        logger.info(f"whatsapp message {message_id} sent to {number}")
        return NotifyReceipt(number=number, message_id=message_id)


def build_notifier() -> Notifier:
    if settings.NOTIFY_BACKEND == "whatsapp_cloud":
        if not settings.WHATSAPP_TOKEN or not settings.WHATSAPP_PHONE_NUMBER_ID:
            raise RuntimeError("NOTIFY_BACKEND=whatsapp_cloud needs WHATSAPP_TOKEN and WHATSAPP_PHONE_NUMBER_ID")
        return WhatsAppCloudNotifier(
            settings.WHATSAPP_API_URL,
            settings.WHATSAPP_TOKEN,
            settings.WHATSAPP_PHONE_NUMBER_ID,
            timeout=settings.NOTIFY_TIMEOUT_S,
        )
    return LinkNotifier()
