"""
Persistence seam for the public ordering pipeline.

Services only talk to the store through ``MenuRepository``; the SQLAlchemy
implementation below is what the routers wire in, tests can hand in any object
with the same methods. Every SQLAlchemy failure leaves this module as
``StoreError`` so callers decide whether it is a load or a write failure.
"""
from functools import wraps
from typing import Protocol

from sqlalchemy import select, delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from qrmenu.errors import StoreError
from qrmenu.models.core import (
    Business, Owner, PaymentMethod, Category, Product, CartLine,
    CustomerOrder, CustomerOrderItem, Reservation, OrderStatus, ReservationStatus,
)
from qrmenu.schemas.cart import CartLineOut, CartProduct
from qrmenu.schemas.menu import BusinessOut, CategoryOut, ProductOut
from qrmenu.schemas.orders import OrderDraft, OrderOut, OrderItemOut, ReservationDraft, ReservationOut
from qrmenu.schemas.payments import PaymentMethodConfig
from qrmenu.util.logger import MenuLogger

logger = MenuLogger(__name__)


class MenuRepository(Protocol):
    # tenant
    def find_business_by_slug(self, slug: str) -> BusinessOut | None: ...
    def get_business(self, business_id: str) -> BusinessOut | None: ...
    def first_business(self) -> BusinessOut | None: ...
    def owner_business_id(self, owner_id: str) -> str | None: ...
    # catalog
    def list_active_categories(self, business_id: str) -> list[CategoryOut]: ...
    def list_products(self, business_id: str) -> list[ProductOut]: ...
    def get_product(self, product_id: str) -> ProductOut | None: ...
    def list_payment_methods(self, business_id: str) -> list[PaymentMethodConfig]: ...
    # cart
    def list_cart_lines(self, session_id: str, limit: int) -> list[CartLineOut]: ...
    def get_cart_line(self, line_id: str) -> CartLineOut | None: ...
    def find_cart_line(self, session_id: str, product_id: str, instructions: str | None) -> CartLineOut | None: ...
    def insert_cart_line(self, session_id: str, product_id: str, quantity: int, instructions: str | None) -> CartLineOut: ...
    def update_cart_line_quantity(self, line_id: str, quantity: int) -> CartLineOut: ...
    def delete_cart_line(self, line_id: str) -> None: ...
    def delete_cart_lines(self, session_id: str, line_ids: list[str]) -> int: ...
    def clear_cart(self, session_id: str) -> int: ...
    # orders / reservations
    def insert_order_with_items(self, draft: OrderDraft) -> OrderOut: ...
    def get_order(self, order_id: str) -> OrderOut | None: ...
    def insert_reservation(self, draft: ReservationDraft) -> ReservationOut: ...
    def get_reservation(self, reservation_id: str) -> ReservationOut | None: ...


def _store_call(fn):
    @wraps(fn)
    def _wrapped(self, *args, **kwargs):
        try:
            return fn(self, *args, **kwargs)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"store call {fn.__name__} failed: {e.__class__.__name__}", exc_info=True)
            raise StoreError(str(e)) from e
    return _wrapped


def _cart_line_out(line: CartLine, product: Product) -> CartLineOut:
    return CartLineOut(
        id=line.id,
        session_id=line.session_id,
        product_id=line.product_id,
        quantity=line.quantity,
        special_instructions=line.special_instructions,
        product=CartProduct.model_validate(product),
    )


def _order_out(o: CustomerOrder, items: list[CustomerOrderItem]) -> OrderOut:
    return OrderOut(
        id=o.id,
        business_id=o.business_id,
        session_id=o.session_id,
        customer_name=o.customer_name,
        customer_phone=o.customer_phone,
        customer_email=o.customer_email,
        notes=o.notes,
        payment_method=o.payment_method,
        total_amount=o.total_amount,
        status=o.status.value,
        items=[OrderItemOut.model_validate(i) for i in items],
    )


def _reservation_out(r: Reservation) -> ReservationOut:
    return ReservationOut(
        id=r.id,
        business_id=r.business_id,
        customer_name=r.customer_name,
        customer_phone=r.customer_phone,
        customer_email=r.customer_email,
        party_size=r.party_size,
        reservation_date=r.reservation_date,
        reservation_time=r.reservation_time,
        special_requests=r.special_requests,
        payment_method=r.payment_method,
        status=r.status.value,
    )


class SqlMenuRepository:
    def __init__(self, db: Session):
        self.db = db

    # ---------- tenant ----------

    @_store_call
    def find_business_by_slug(self, slug: str) -> BusinessOut | None:
        b = self.db.execute(select(Business).where(Business.slug == slug)).scalar_one_or_none()
        return BusinessOut.model_validate(b) if b else None

    @_store_call
    def get_business(self, business_id: str) -> BusinessOut | None:
        b = self.db.get(Business, business_id)
        return BusinessOut.model_validate(b) if b else None

    @_store_call
    def first_business(self) -> BusinessOut | None:
        b = self.db.execute(select(Business).order_by(Business.created_at).limit(1)).scalar_one_or_none()
        return BusinessOut.model_validate(b) if b else None

    @_store_call
    def owner_business_id(self, owner_id: str) -> str | None:
        o = self.db.get(Owner, owner_id)
        if not o or not o.active:
            return None
        return o.business_id

    # ---------- catalog ----------

    @_store_call
    def list_active_categories(self, business_id: str) -> list[CategoryOut]:
        rows = self.db.execute(
            select(Category)
            .where(Category.business_id == business_id, Category.is_active.is_(True))
            .order_by(Category.sort_order)
        ).scalars().all()
        return [CategoryOut.model_validate(r) for r in rows]

    @_store_call
    def list_products(self, business_id: str) -> list[ProductOut]:
        rows = self.db.execute(
            select(Product, Category.name)
            .outerjoin(Category, Category.id == Product.category_id)
            .where(Product.business_id == business_id, Product.is_active.is_(True))
            .order_by(Product.name)
        ).all()
        out = []
        for p, category_name in rows:
            item = ProductOut.model_validate(p)
            item.category_name = category_name
            out.append(item)
        return out

    @_store_call
    def get_product(self, product_id: str) -> ProductOut | None:
        p = self.db.get(Product, product_id)
        return ProductOut.model_validate(p) if p else None

    @_store_call
    def list_payment_methods(self, business_id: str) -> list[PaymentMethodConfig]:
        rows = self.db.execute(
            select(PaymentMethod)
            .where(PaymentMethod.business_id == business_id)
            .order_by(PaymentMethod.created_at)
        ).scalars().all()
        return [PaymentMethodConfig.model_validate(r) for r in rows]

    # ---------- cart ----------

    @_store_call
    def list_cart_lines(self, session_id: str, limit: int) -> list[CartLineOut]:
        rows = self.db.execute(
            select(CartLine, Product)
            .join(Product, Product.id == CartLine.product_id)
            .where(CartLine.session_id == session_id)
            .order_by(CartLine.created_at)
            .limit(limit)
        ).all()
        return [_cart_line_out(line, product) for line, product in rows]

    @_store_call
    def get_cart_line(self, line_id: str) -> CartLineOut | None:
        row = self.db.execute(
            select(CartLine, Product)
            .join(Product, Product.id == CartLine.product_id)
            .where(CartLine.id == line_id)
        ).first()
        return _cart_line_out(*row) if row else None

    @_store_call
    def find_cart_line(self, session_id: str, product_id: str, instructions: str | None) -> CartLineOut | None:
        q = (
            select(CartLine, Product)
            .join(Product, Product.id == CartLine.product_id)
            .where(CartLine.session_id == session_id, CartLine.product_id == product_id)
        )
        if instructions is None:
            q = q.where(CartLine.special_instructions.is_(None))
        else:
            q = q.where(CartLine.special_instructions == instructions)
        row = self.db.execute(q).first()
        return _cart_line_out(*row) if row else None

    @_store_call
    def insert_cart_line(self, session_id: str, product_id: str, quantity: int, instructions: str | None) -> CartLineOut:
        line = CartLine(
            session_id=session_id,
            product_id=product_id,
            quantity=quantity,
            special_instructions=instructions,
        )
        self.db.add(line)
        self.db.commit()
        return _cart_line_out(line, self.db.get(Product, product_id))

    @_store_call
    def update_cart_line_quantity(self, line_id: str, quantity: int) -> CartLineOut:
        line = self.db.get(CartLine, line_id)
        line.quantity = quantity
        self.db.commit()
        return _cart_line_out(line, self.db.get(Product, line.product_id))

    @_store_call
    def delete_cart_line(self, line_id: str) -> None:
        self.db.execute(delete(CartLine).where(CartLine.id == line_id))
        self.db.commit()

    @_store_call
    def delete_cart_lines(self, session_id: str, line_ids: list[str]) -> int:
        res = self.db.execute(
            delete(CartLine).where(CartLine.session_id == session_id, CartLine.id.in_(line_ids))
        )
        self.db.commit()
        return res.rowcount or 0

    @_store_call
    def clear_cart(self, session_id: str) -> int:
        res = self.db.execute(delete(CartLine).where(CartLine.session_id == session_id))
        self.db.commit()
        return res.rowcount or 0

    # ---------- orders ----------

    @_store_call
    def insert_order_with_items(self, draft: OrderDraft) -> OrderOut:
        """
        Write the order header and all of its lines in one transaction.
        The id is chosen by the caller; writing the same id twice returns the
        existing order instead of creating a duplicate.
        """
        existing = self.db.get(CustomerOrder, draft.id)
        if existing:
            logger.info(f"order {draft.id} already recorded, reusing it")
            return self.get_order(draft.id)

        o = CustomerOrder(
            id=draft.id,
            business_id=draft.business_id,
            session_id=draft.session_id,
            customer_name=draft.customer_name,
            customer_phone=draft.customer_phone,
            customer_email=draft.customer_email,
            notes=draft.notes,
            payment_method=draft.payment_method.value,
            total_amount=draft.total_amount,
            status=OrderStatus.CONFIRMED,
        )
        self.db.add(o)
        self.db.flush()
        items = []
        for it in draft.items:
            row = CustomerOrderItem(order_id=o.id, **it.model_dump())
            self.db.add(row)
            items.append(row)
        self.db.commit()
        return _order_out(o, items)

    @_store_call
    def get_order(self, order_id: str) -> OrderOut | None:
        o = self.db.get(CustomerOrder, order_id)
        if not o:
            return None
        items = self.db.execute(
            select(CustomerOrderItem).where(CustomerOrderItem.order_id == order_id)
        ).scalars().all()
        return _order_out(o, list(items))

    # ---------- reservations ----------

    @_store_call
    def insert_reservation(self, draft: ReservationDraft) -> ReservationOut:
        existing = self.db.get(Reservation, draft.id)
        if existing:
            logger.info(f"reservation {draft.id} already recorded, reusing it")
            return _reservation_out(existing)
        data = draft.model_dump()
        data["payment_method"] = draft.payment_method.value
        r = Reservation(**data, status=ReservationStatus.PENDING)
        self.db.add(r)
        self.db.commit()
        return _reservation_out(r)

    @_store_call
    def get_reservation(self, reservation_id: str) -> ReservationOut | None:
        r = self.db.get(Reservation, reservation_id)
        return _reservation_out(r) if r else None
