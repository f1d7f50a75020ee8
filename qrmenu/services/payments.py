"""
Which payment methods a business can offer at checkout.

A method is offered only when it is configured for the business, switched on
and its configuration is complete. Each configuration ``type`` maps to
exactly one ``PaymentCode``; everything downstream (checkout, reservations,
staff messages) works with the code only.
"""
from dataclasses import dataclass, field
from typing import Callable, Sequence

from qrmenu.errors import StoreError, TransientLoadError
from qrmenu.models.core import PaymentCode
from qrmenu.schemas.menu import BusinessOut
from qrmenu.schemas.payments import (
    PaymentMethodConfig, PaymentMethodOut, PaymentMethodsOut, UnavailableMethodOut,
)
from qrmenu.services.repository import MenuRepository
from qrmenu.util.logger import MenuLogger

logger = MenuLogger(__name__)

TYPE_TO_CODE: dict[str, PaymentCode] = {
    "cash_on_delivery": PaymentCode.CASH_ON_DELIVERY,
    "qr_code": PaymentCode.QR,
    "nequi": PaymentCode.NEQUI,
    "daviplata": PaymentCode.DAVIPLATA,
    "bancolombia": PaymentCode.BANCOLOMBIA,
    "stripe": PaymentCode.CARD,
    "mercado_pago": PaymentCode.MERCADO_PAGO,
    "paypal": PaymentCode.PAYPAL,
}

DISPLAY_NAMES: dict[PaymentCode, str] = {
    PaymentCode.CASH_ON_DELIVERY: "Cash on delivery",
    PaymentCode.QR: "QR code",
    PaymentCode.NEQUI: "Nequi",
    PaymentCode.DAVIPLATA: "Daviplata",
    PaymentCode.BANCOLOMBIA: "Bancolombia transfer",
    PaymentCode.CARD: "Credit/debit card",
    PaymentCode.MERCADO_PAGO: "Mercado Pago",
    PaymentCode.PAYPAL: "PayPal",
}

# methods that send the customer to the provider's own page
REDIRECT_CODES = {PaymentCode.CARD, PaymentCode.MERCADO_PAGO, PaymentCode.PAYPAL}


@dataclass(frozen=True)
class Validation:
    is_valid: bool
    message: str | None = None


def code_for_type(method_type: str) -> PaymentCode | None:
    return TYPE_TO_CODE.get((method_type or "").strip().lower())


def display_name(code: PaymentCode) -> str:
    return DISPLAY_NAMES[code]


# ---------- per-type completeness ----------

def _requires(*keys: str) -> Callable[[PaymentMethodConfig, BusinessOut | None], str | None]:
    def _check(method, business):
        conf = method.configuration or {}
        missing = [k for k in keys if not conf.get(k)]
        if missing:
            return f"Incomplete configuration, missing {', '.join(missing)}"
        return None
    return _check


def _requires_qr(method, business):
    if not (method.webhook_url or "").strip():
        return "Incomplete configuration, missing QR code"
    return None


def _requires_nequi(method, business):
    conf = method.configuration or {}
    if conf.get("api_key") or conf.get("number") or (business and business.nequi_number):
        return None
    return "Incomplete configuration, missing Nequi number or API key"


_CHECKS = {
    PaymentCode.CASH_ON_DELIVERY: lambda method, business: None,
    PaymentCode.QR: _requires_qr,
    PaymentCode.DAVIPLATA: _requires_qr,
    PaymentCode.NEQUI: _requires_nequi,
    PaymentCode.BANCOLOMBIA: _requires("account_number", "merchant_code"),
    PaymentCode.CARD: _requires("publishable_key"),
    PaymentCode.MERCADO_PAGO: _requires("public_key", "private_key"),
    PaymentCode.PAYPAL: _requires("email"),
}


def validate_method(method: PaymentMethodConfig, business: BusinessOut | None = None) -> Validation:
    if not method.is_active:
        return Validation(False, "Payment method is disabled")
    code = code_for_type(method.type)
    if code is None:
        return Validation(False, f"Unsupported payment method type '{method.type}'")
    problem = _CHECKS[code](method, business)
    if problem:
        return Validation(False, problem)
    return Validation(True)


# ---------- descriptors ----------

def _descriptor(method: PaymentMethodConfig, code: PaymentCode, business: BusinessOut | None) -> PaymentMethodOut:
    conf = method.configuration or {}
    transfer_number = None
    qr_image_url = None
    if code == PaymentCode.NEQUI:
        transfer_number = conf.get("number") or (business.nequi_number if business else None)
        qr_image_url = business.nequi_qr_url if business else None
    elif code == PaymentCode.BANCOLOMBIA:
        transfer_number = conf.get("account_number")
    elif code in (PaymentCode.QR, PaymentCode.DAVIPLATA):
        qr_image_url = method.webhook_url
    return PaymentMethodOut(
        id=method.id,
        code=code,
        name=method.name,
        display_name=display_name(code),
        transfer_number=transfer_number,
        qr_image_url=qr_image_url,
        redirect=code in REDIRECT_CODES,
    )


@dataclass(frozen=True)
class AvailableMethods:
    methods: list[PaymentMethodOut]
    unavailable: list[UnavailableMethodOut] = field(default_factory=list)
    loaded: bool = True

    @property
    def configured(self) -> bool:
        return bool(self.methods)

    @property
    def codes(self) -> list[PaymentCode]:
        return [m.code for m in self.methods]

    def get(self, code: PaymentCode) -> PaymentMethodOut | None:
        for m in self.methods:
            if m.code == code:
                return m
        return None


NOT_LOADED = AvailableMethods(methods=[], loaded=False)


class PaymentMethodValidator:
    def get_available_methods(self, business: BusinessOut | None,
                              configs: Sequence[PaymentMethodConfig]) -> AvailableMethods:
        available: list[PaymentMethodOut] = []
        unavailable: list[UnavailableMethodOut] = []
        seen: set[PaymentCode] = set()

        for method in configs:
            if business and method.business_id != business.id:
                continue
            check = validate_method(method, business)
            code = code_for_type(method.type)
            if code is None:
                logger.warning(f"payment method {method.id} has unsupported type '{method.type}'")
            if not check.is_valid:
                unavailable.append(UnavailableMethodOut(
                    id=method.id, name=method.name, type=method.type, reason=check.message,
                ))
                continue
            if code in seen:
                # one entry per code keeps the customer's choice unambiguous
                unavailable.append(UnavailableMethodOut(
                    id=method.id, name=method.name, type=method.type, reason="Duplicate of an earlier method",
                ))
                continue
            seen.add(code)
            available.append(_descriptor(method, code, business))

        return AvailableMethods(methods=available, unavailable=unavailable)

    def get_unavailable_methods(self, business: BusinessOut | None,
                                configs: Sequence[PaymentMethodConfig]) -> list[UnavailableMethodOut]:
        return self.get_available_methods(business, configs).unavailable


def default_selection(available: AvailableMethods, current: PaymentCode | None = None) -> PaymentCode | None:
    """Keep the customer's choice while it is still offered, otherwise the first offered method."""
    if current is not None and current in available.codes:
        return current
    return available.codes[0] if available.codes else None


def methods_out(available: AvailableMethods, current: PaymentCode | None = None) -> PaymentMethodsOut:
    return PaymentMethodsOut(
        loaded=available.loaded,
        configured=available.configured,
        methods=available.methods,
        unavailable=available.unavailable,
        default=default_selection(available, current),
    )


def load_available_methods(repo: MenuRepository, business: BusinessOut) -> AvailableMethods:
    try:
        configs = repo.list_payment_methods(business.id)
    except StoreError as e:
        raise TransientLoadError("We couldn't load the payment options. Please try again.") from e
    return PaymentMethodValidator().get_available_methods(business, configs)
