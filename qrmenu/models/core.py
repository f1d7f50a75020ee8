from sqlalchemy import (
    String, ForeignKey, Boolean, Numeric, Enum, Text, Date, Integer, JSON, CheckConstraint
)
from sqlalchemy.orm import Mapped, mapped_column, validates
from enum import Enum as PyEnum
from datetime import date
from decimal import Decimal
from qrmenu.db import Base
from qrmenu.models.common import IdMixin, TSMMixin
from qrmenu.util.slug import make_slug

# ── Enums ───────────────────────────────────────────────────────────────────
class OrderStatus(PyEnum):
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"

class ReservationStatus(PyEnum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"

# Canonical payment codes; every supported payment_method.type maps to exactly one
class PaymentCode(PyEnum):
    CASH_ON_DELIVERY = "cash_on_delivery"
    QR = "qr"
    NEQUI = "nequi"
    DAVIPLATA = "daviplata"
    BANCOLOMBIA = "bancolombia"
    CARD = "card"
    MERCADO_PAGO = "mercado_pago"
    PAYPAL = "paypal"

# ── Tenant ──────────────────────────────────────────────────────────────────
class Business(Base, IdMixin, TSMMixin):
    __tablename__ = "business"
    name: Mapped[str] = mapped_column(String(160))
    slug: Mapped[str] = mapped_column(String(180), unique=True, index=True)
    description: Mapped[str | None] = mapped_column(Text)
    phone: Mapped[str | None] = mapped_column(String(20))
    email: Mapped[str | None] = mapped_column(String(160))
    address: Mapped[str | None] = mapped_column(Text)
    logo_url: Mapped[str | None] = mapped_column(String(400))
    whatsapp_url: Mapped[str | None] = mapped_column(String(300))  # wa.me link or api.whatsapp.com/send?phone=
    facebook_url: Mapped[str | None] = mapped_column(String(300))
    instagram_url: Mapped[str | None] = mapped_column(String(300))
    tiktok_url: Mapped[str | None] = mapped_column(String(300))
    website_url: Mapped[str | None] = mapped_column(String(300))
    nequi_number: Mapped[str | None] = mapped_column(String(20))  # transfer number shown at checkout
    nequi_qr_url: Mapped[str | None] = mapped_column(String(400))

    @validates("name")
    def _derive_slug(self, key, value):
        self.slug = make_slug(value)
        return value

class Owner(Base, IdMixin, TSMMixin):
    __tablename__ = "owner"
    business_id: Mapped[str | None] = mapped_column(String(36), ForeignKey("business.id"))
    name: Mapped[str] = mapped_column(String(160))
    email: Mapped[str] = mapped_column(String(160), unique=True)
    pass_hash: Mapped[str] = mapped_column(String(200))
    active: Mapped[bool] = mapped_column(Boolean, default=True)

class PaymentMethod(Base, IdMixin, TSMMixin):
    __tablename__ = "payment_method"
    business_id: Mapped[str] = mapped_column(String(36), ForeignKey("business.id"), index=True)
    name: Mapped[str] = mapped_column(String(120))
    type: Mapped[str] = mapped_column(String(40))  # stripe | paypal | nequi | qr_code | ...
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    configuration: Mapped[dict | None] = mapped_column(JSON)
    webhook_url: Mapped[str | None] = mapped_column(String(400))  # QR image for qr_code / daviplata

# ── Catalog ─────────────────────────────────────────────────────────────────
class Category(Base, IdMixin, TSMMixin):
    __tablename__ = "category"
    business_id: Mapped[str] = mapped_column(String(36), ForeignKey("business.id"), index=True)
    name: Mapped[str] = mapped_column(String(120))
    sort_order: Mapped[int] = mapped_column(Integer, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

class Product(Base, IdMixin, TSMMixin):
    __tablename__ = "product"
    __table_args__ = (CheckConstraint("price >= 0", name="ck_product_price_non_negative"),)
    business_id: Mapped[str] = mapped_column(String(36), ForeignKey("business.id"), index=True)
    category_id: Mapped[str | None] = mapped_column(String(36), ForeignKey("category.id"))
    name: Mapped[str] = mapped_column(String(160))
    description: Mapped[str | None] = mapped_column(Text)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2))
    image_url: Mapped[str | None] = mapped_column(String(400))
    is_vegetarian: Mapped[bool] = mapped_column(Boolean, default=False)
    is_vegan: Mapped[bool] = mapped_column(Boolean, default=False)
    is_gluten_free: Mapped[bool] = mapped_column(Boolean, default=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

# ── Anonymous cart ──────────────────────────────────────────────────────────
class CartLine(Base, IdMixin, TSMMixin):
    __tablename__ = "cart_line"
    __table_args__ = (CheckConstraint("quantity >= 1", name="ck_cart_line_quantity_positive"),)
    session_id: Mapped[str] = mapped_column(String(64), index=True)
    product_id: Mapped[str] = mapped_column(String(36), ForeignKey("product.id"))
    quantity: Mapped[int] = mapped_column(Integer, default=1)
    special_instructions: Mapped[str | None] = mapped_column(Text)

# ── Orders / reservations ───────────────────────────────────────────────────
class CustomerOrder(Base, IdMixin, TSMMixin):
    __tablename__ = "customer_order"
    business_id: Mapped[str] = mapped_column(String(36), ForeignKey("business.id"), index=True)
    session_id: Mapped[str | None] = mapped_column(String(64))
    customer_name: Mapped[str] = mapped_column(String(160))
    customer_phone: Mapped[str] = mapped_column(String(30))
    customer_email: Mapped[str | None] = mapped_column(String(160))
    notes: Mapped[str | None] = mapped_column(Text)
    payment_method: Mapped[str] = mapped_column(String(40))
    total_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    status: Mapped[OrderStatus] = mapped_column(Enum(OrderStatus), default=OrderStatus.CONFIRMED)

class CustomerOrderItem(Base, IdMixin, TSMMixin):
    __tablename__ = "customer_order_item"
    order_id: Mapped[str] = mapped_column(String(36), ForeignKey("customer_order.id"), index=True)
    product_id: Mapped[str] = mapped_column(String(36), ForeignKey("product.id"))
    product_name: Mapped[str] = mapped_column(String(160))  # snapshot, product may be renamed later
    quantity: Mapped[int] = mapped_column(Integer)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(10, 2))
    line_total: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    special_instructions: Mapped[str | None] = mapped_column(Text)

class Reservation(Base, IdMixin, TSMMixin):
    __tablename__ = "reservation"
    business_id: Mapped[str] = mapped_column(String(36), ForeignKey("business.id"), index=True)
    customer_name: Mapped[str] = mapped_column(String(160))
    customer_phone: Mapped[str] = mapped_column(String(30))
    customer_email: Mapped[str | None] = mapped_column(String(160))
    party_size: Mapped[int] = mapped_column(Integer)
    reservation_date: Mapped[date] = mapped_column(Date)
    reservation_time: Mapped[str] = mapped_column(String(5))  # HH:MM on the half-hour grid
    special_requests: Mapped[str | None] = mapped_column(Text)
    payment_method: Mapped[str] = mapped_column(String(40))
    status: Mapped[ReservationStatus] = mapped_column(Enum(ReservationStatus), default=ReservationStatus.PENDING)
