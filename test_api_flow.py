# test_api_flow.py
from datetime import date, timedelta
from decimal import Decimal

from conftest import FailingNotifier, SpyNotifier
from qrmenu.deps import require_notifier
from qrmenu.main import app


def jprint(step, r):
    """Helper to print response and assert on failure."""
    assert 200 <= r.status_code < 300, f"{step} -> {r.status_code}: {r.text}"
    return r.json() if r.headers.get("content-type", "").startswith("application/json") else r.text


def test_healthz(client):
    assert jprint("GET /healthz", client.get("/healthz")) == {"ok": True}
    assert client.get("/healthz").headers.get("X-Request-ID")


def test_order_flow(client, seed, notifier):
    # ===== 1. Browse =====
    menu = jprint("GET /menu/pizza-place", client.get("/menu/pizza-place"))
    default_method = menu["payment_methods"]["default"]
    page = jprint("GET products", client.get("/menu/pizza-place/products"))
    assert page["total_items"] == 5
    by_name = {p["name"]: p for p in page["items"]}

    # ===== 2. Cart =====
    jprint("GET /cart", client.get("/cart"))
    jprint("POST /cart/lines (Diavola)", client.post("/cart/lines", json={
        "product_id": by_name["Diavola"]["id"], "quantity": 2, "special_instructions": "well done",
    }))
    cart = jprint("POST /cart/lines (Espresso)", client.post("/cart/lines", json={
        "product_id": by_name["Espresso"]["id"],
    }))
    assert Decimal(cart["total_price"]) == Decimal("28.00")

    # ===== 3. Review =====
    r = client.post("/checkout/pizza-place/review", json={"customer_name": "", "customer_phone": "300"})
    assert r.status_code == 422
    assert r.json()["field"] == "customer_name"

    review = jprint("POST /checkout/pizza-place/review", client.post("/checkout/pizza-place/review", json={
        "customer_name": "Ana", "customer_phone": "3005556666",
    }))
    assert review["state"] == "awaiting_confirmation"
    assert review["payment_method"] == default_method
    attempt_id = review["attempt_id"]

    # ===== 4. Confirm =====
    outcome = jprint("POST confirm", client.post(f"/checkout/attempts/{attempt_id}/confirm"))
    assert outcome["state"] == "succeeded"
    assert outcome["notify_url"].startswith("https://wa.me/")
    assert len(notifier.calls) == 1

    order = jprint("GET order", client.get(f"/checkout/orders/{outcome['record_id']}"))
    assert Decimal(order["total_amount"]) == Decimal("28.00")
    assert order["payment_method"] == default_method
    assert len(order["items"]) == 2

    cart = jprint("GET /cart (after)", client.get("/cart"))
    assert cart["lines"] == []

    # the attempt is gone once it succeeded
    r = client.post(f"/checkout/attempts/{attempt_id}/confirm")
    assert r.status_code == 404
    assert r.json()["kind"] == "attempt_not_found"


def test_order_flow_notify_failure_and_retry(client, seed):
    jprint("GET /cart", client.get("/cart"))
    jprint("POST /cart/lines", client.post("/cart/lines", json={"product_id": seed.products["Calzone"].id}))
    review = jprint("POST review", client.post("/checkout/pizza-place/review", json={
        "customer_name": "Ana", "customer_phone": "3005556666", "payment_method": "nequi",
    }))
    attempt_id = review["attempt_id"]

    app.dependency_overrides[require_notifier] = FailingNotifier
    r = client.post(f"/checkout/attempts/{attempt_id}/confirm")
    assert r.status_code == 502
    failed = r.json()
    assert failed["state"] == "failed"
    assert failed["failure"] == "notification"
    jprint("GET order (saved)", client.get(f"/checkout/orders/{failed['record_id']}"))

    # confirm again without going through retry is not allowed
    r = client.post(f"/checkout/attempts/{attempt_id}/confirm")
    assert r.status_code == 409

    spy = SpyNotifier()
    app.dependency_overrides[require_notifier] = lambda: spy
    jprint("POST retry", client.post(f"/checkout/attempts/{attempt_id}/retry"))
    ok = jprint("POST confirm (retry)", client.post(f"/checkout/attempts/{attempt_id}/confirm"))
    assert ok["record_id"] == failed["record_id"]
    assert len(spy.calls) == 1


def test_other_session_cannot_touch_attempt(client, seed):
    jprint("GET /cart", client.get("/cart"))
    jprint("POST /cart/lines", client.post("/cart/lines", json={"product_id": seed.products["Calzone"].id}))
    review = jprint("POST review", client.post("/checkout/pizza-place/review", json={
        "customer_name": "Ana", "customer_phone": "3005556666",
    }))
    client.cookies.clear()
    r = client.post(f"/checkout/attempts/{review['attempt_id']}/confirm",
                    headers={"X-Cart-Session": "session_1_someone00"})
    assert r.status_code == 404


def test_checkout_keeps_other_restaurant_lines(client, seed, burger_barn, notifier):
    jprint("GET /cart", client.get("/cart"))
    jprint("POST /cart/lines (Burger)", client.post("/cart/lines", json={"product_id": burger_barn.burger.id}))
    jprint("POST /cart/lines (Margherita)", client.post("/cart/lines", json={
        "product_id": seed.products["Margherita"].id,
    }))

    review = jprint("POST review", client.post("/checkout/pizza-place/review", json={
        "customer_name": "Ana", "customer_phone": "3005556666",
    }))
    assert Decimal(review["total_amount"]) == Decimal("10.00")
    outcome = jprint("POST confirm", client.post(f"/checkout/attempts/{review['attempt_id']}/confirm"))

    order = jprint("GET order", client.get(f"/checkout/orders/{outcome['record_id']}"))
    assert order["business_id"] == seed.business.id
    assert Decimal(order["total_amount"]) == Decimal("10.00")
    assert [i["product_name"] for i in order["items"]] == ["Margherita"]
    assert "Burger" not in notifier.calls[0][1]

    cart = jprint("GET /cart (after)", client.get("/cart"))
    assert [l["product"]["name"] for l in cart["lines"]] == ["Burger"]


def test_checkout_unknown_business(client):
    r = client.post("/checkout/burger-barn/review", json={"customer_name": "Ana", "customer_phone": "300"})
    assert r.status_code == 404
    assert r.json()["kind"] == "not_available"


def test_reservation_flow(client, notifier):
    slots = jprint("GET /reservations/time-slots", client.get("/reservations/time-slots"))
    assert "19:30" in slots

    r = client.post("/reservations/pizza-place/review", json={
        "customer_name": "Luis", "customer_phone": "300", "party_size": 0,
        "reservation_date": (date.today() + timedelta(days=1)).isoformat(), "reservation_time": "19:30",
    })
    assert r.status_code == 422
    assert r.json()["field"] == "party_size"

    review = jprint("POST /reservations/pizza-place/review", client.post("/reservations/pizza-place/review", json={
        "customer_name": "Luis", "customer_phone": "3007778888", "party_size": 3,
        "reservation_date": (date.today() + timedelta(days=1)).isoformat(), "reservation_time": "19:30",
    }))
    outcome = jprint("POST confirm", client.post(f"/reservations/attempts/{review['attempt_id']}/confirm"))
    assert outcome["state"] == "succeeded"
    assert outcome["record_id"]
    assert len(notifier.calls) == 1


def test_reservation_cancel(client):
    review = jprint("POST review", client.post("/reservations/pizza-place/review", json={
        "customer_name": "Luis", "customer_phone": "3007778888", "party_size": 2,
        "reservation_date": date.today().isoformat(), "reservation_time": "12:00",
    }))
    out = jprint("POST cancel", client.post(f"/reservations/attempts/{review['attempt_id']}/cancel"))
    assert out["state"] == "editing"
    r = client.post(f"/reservations/attempts/{review['attempt_id']}/confirm")
    assert r.status_code == 404


def test_other_session_cannot_touch_reservation(client):
    review = jprint("POST review", client.post("/reservations/pizza-place/review", json={
        "customer_name": "Luis", "customer_phone": "3007778888", "party_size": 2,
        "reservation_date": date.today().isoformat(), "reservation_time": "12:00",
    }))
    owner_cookies = dict(client.cookies)
    client.cookies.clear()
    stranger = {"X-Cart-Session": "session_1_someone00"}
    for action in ("confirm", "retry", "cancel"):
        r = client.post(f"/reservations/attempts/{review['attempt_id']}/{action}", headers=stranger)
        assert r.status_code == 404, action
        assert r.json()["kind"] == "attempt_not_found"

    # the creating session still owns it
    client.cookies.update(owner_cookies)
    outcome = jprint("POST confirm", client.post(f"/reservations/attempts/{review['attempt_id']}/confirm"))
    assert outcome["state"] == "succeeded"
