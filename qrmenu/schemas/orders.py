from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List, Literal
from decimal import Decimal
from datetime import date
from qrmenu.models.core import PaymentCode

AttemptStateLiteral = Literal["editing", "awaiting_confirmation", "submitting", "succeeded", "failed"]
FailureLiteral = Literal["persistence", "notification"]

# ---------- checkout ----------

class CheckoutIn(BaseModel):
    customer_name: str = ""
    customer_phone: str = ""
    customer_email: Optional[str] = None
    special_instructions: Optional[str] = None
    payment_method: Optional[PaymentCode] = None

class OrderItemDraft(BaseModel):
    product_id: str
    product_name: str
    quantity: int
    unit_price: Decimal
    line_total: Decimal
    special_instructions: Optional[str] = None

class OrderDraft(BaseModel):
    """Everything needed to write one order and its lines in a single transaction."""
    id: str
    business_id: str
    session_id: Optional[str] = None
    customer_name: str
    customer_phone: str
    customer_email: Optional[str] = None
    notes: Optional[str] = None
    payment_method: PaymentCode
    items: List[OrderItemDraft]
    total_amount: Decimal

class OrderItemOut(OrderItemDraft):
    model_config = ConfigDict(from_attributes=True)
    id: str
    order_id: str

class OrderOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: str
    business_id: str
    session_id: Optional[str] = None
    customer_name: str
    customer_phone: str
    customer_email: Optional[str] = None
    notes: Optional[str] = None
    payment_method: str
    total_amount: Decimal
    status: str
    items: List[OrderItemOut] = []

# ---------- reservations ----------

class ReservationIn(BaseModel):
    customer_name: str = ""
    customer_phone: str = ""
    customer_email: Optional[str] = None
    party_size: Optional[int] = None
    reservation_date: Optional[date] = None
    reservation_time: Optional[str] = None
    special_requests: Optional[str] = None
    payment_method: Optional[PaymentCode] = None

class ReservationDraft(BaseModel):
    id: str
    business_id: str
    customer_name: str
    customer_phone: str
    customer_email: Optional[str] = None
    party_size: int = Field(gt=0)
    reservation_date: date
    reservation_time: str
    special_requests: Optional[str] = None
    payment_method: PaymentCode

class ReservationOut(ReservationDraft):
    model_config = ConfigDict(from_attributes=True)
    payment_method: str
    status: str

# ---------- attempts ----------

class SummaryLine(BaseModel):
    label: str
    value: str

class AttemptOut(BaseModel):
    attempt_id: str
    state: AttemptStateLiteral
    summary: List[SummaryLine] = []
    total_amount: Optional[Decimal] = None
    payment_method: Optional[PaymentCode] = None

class OutcomeOut(BaseModel):
    attempt_id: str
    state: AttemptStateLiteral
    message: str
    record_id: Optional[str] = None
    failure: Optional[FailureLiteral] = None
    notify_url: Optional[str] = None  # click-to-chat link when staff are notified via wa.me
