from pydantic import BaseModel, ConfigDict
from typing import Optional, List, Any
from datetime import datetime
from qrmenu.models.core import PaymentCode

class PaymentMethodConfig(BaseModel):
    """Row of the business' payment_method table as stored."""
    model_config = ConfigDict(from_attributes=True)
    id: str
    business_id: str
    name: str
    type: str
    is_active: bool = True
    configuration: Optional[dict[str, Any]] = None
    webhook_url: Optional[str] = None
    created_at: Optional[datetime] = None

class PaymentMethodOut(BaseModel):
    """What the checkout form offers: one canonical code per configured method."""
    id: str
    code: PaymentCode
    name: str
    display_name: str
    transfer_number: Optional[str] = None
    qr_image_url: Optional[str] = None
    redirect: bool = False  # hands off to a third-party page, nothing is captured here

class UnavailableMethodOut(BaseModel):
    id: str
    name: str
    type: str
    reason: str

class PaymentMethodsOut(BaseModel):
    loaded: bool = True
    configured: bool
    methods: List[PaymentMethodOut]
    unavailable: List[UnavailableMethodOut] = []
    default: Optional[PaymentCode] = None
