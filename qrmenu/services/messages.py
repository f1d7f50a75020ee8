"""Text templates sent to restaurant staff."""
from datetime import date
from decimal import Decimal, ROUND_HALF_UP

from qrmenu.config import settings
from qrmenu.schemas.orders import OrderDraft, ReservationDraft
from qrmenu.services.payments import display_name


def money(x) -> str:
    if x is None:
        x = 0
    value = Decimal(str(x)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return f"{settings.CURRENCY_SYMBOL}{value:,.2f}"


def _long_date(d: date) -> str:
    return d.strftime("%A, %B %d, %Y")


def order_message(order: OrderDraft) -> str:
    lines = [
        "*NEW ORDER*",
        f"Order: {order.id[:8]}",
        "",
        f"*Customer:* {order.customer_name}",
        f"*Phone:* {order.customer_phone}",
    ]
    if order.customer_email:
        lines.append(f"*Email:* {order.customer_email}")
    lines += ["", "*Items:*"]
    for it in order.items:
        lines.append(f"- {it.quantity}x {it.product_name} - {money(it.line_total)}")
        if it.special_instructions:
            lines.append(f"  _Instructions: {it.special_instructions}_")
    lines += [
        "",
        f"*Total: {money(order.total_amount)}*",
        f"*Payment method:* {display_name(order.payment_method)}",
    ]
    if order.notes:
        lines += ["", "*Special instructions:*", order.notes]
    return "\n".join(lines)


def reservation_message(r: ReservationDraft) -> str:
    lines = [
        "*NEW RESERVATION*",
        "",
        f"*Customer:* {r.customer_name}",
        f"*Phone:* {r.customer_phone}",
    ]
    if r.customer_email:
        lines.append(f"*Email:* {r.customer_email}")
    lines += [
        "",
        "*Reservation details:*",
        f"*Party size:* {r.party_size}",
        f"*Date:* {_long_date(r.reservation_date)}",
        f"*Time:* {r.reservation_time}",
        f"*Preferred payment method:* {display_name(r.payment_method)}",
    ]
    if r.special_requests:
        lines += ["", "*Special requests:*", r.special_requests]
    lines += ["", "_Please confirm availability for this reservation._"]
    return "\n".join(lines)
