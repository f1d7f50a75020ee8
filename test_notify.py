# test_notify.py
import httpx
import pytest

from qrmenu.errors import NotificationError
from qrmenu.schemas.menu import BusinessOut
from qrmenu.services.notify import LinkNotifier, WhatsAppCloudNotifier, staff_number


def _biz(**kw):
    return BusinessOut(id="b1", name="Pizza Place", slug="pizza-place", **kw)


@pytest.mark.parametrize("kw,expected", [
    ({"whatsapp_url": "https://wa.me/573001234567"}, "573001234567"),
    ({"whatsapp_url": "https://api.whatsapp.com/send?phone=5215512345678"}, "5215512345678"),
    ({"whatsapp_url": "https://wa.me/3001234567"}, "573001234567"),
    ({"phone": "+57 300 123 4567"}, "573001234567"),
    ({"phone": "(300) 123-4567"}, "573001234567"),
    ({"whatsapp_url": "https://example.com/chat", "phone": "3109876543"}, "573109876543"),
])
def test_staff_number(kw, expected):
    assert staff_number(_biz(**kw)) == expected


def test_staff_number_missing():
    with pytest.raises(NotificationError):
        staff_number(_biz(phone="12345"))


def test_link_notifier_encodes_text():
    receipt = LinkNotifier().send_text("573001234567", "Hola & *total*\nline")
    assert receipt.url.startswith("https://wa.me/573001234567?text=")
    assert "%26" in receipt.url and "%0A" in receipt.url


def _cloud(handler):
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return WhatsAppCloudNotifier("https://graph.test/v19.0/", "tok", "12345", timeout=1.0, client=client)


def test_cloud_send():
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["Authorization"]
        return httpx.Response(200, json={"messages": [{"id": "wamid.1"}]})

    receipt = _cloud(handler).send_text("573001234567", "hi")
    assert receipt.message_id == "wamid.1"
    assert seen["url"] == "https://graph.test/v19.0/12345/messages"
    assert seen["auth"] == "Bearer tok"


def test_cloud_http_error():
    with pytest.raises(NotificationError):
        _cloud(lambda request: httpx.Response(500, json={"error": "boom"})).send_text("57300", "hi")


def test_cloud_timeout():
    def handler(request):
        raise httpx.ReadTimeout("slow", request=request)

    with pytest.raises(NotificationError) as e:
        _cloud(handler).send_text("57300", "hi")
    assert "in time" in e.value.message
