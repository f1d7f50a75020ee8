from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from qrmenu.config import settings
from qrmenu.errors import (
    CartLineNotFound, ConfirmationRequired, StoreError, TransientLoadError, ValidationError,
)
from qrmenu.schemas.cart import CartLineOut, CartOut
from qrmenu.services.repository import MenuRepository
from qrmenu.session import SessionContext
from qrmenu.util.logger import MenuLogger

logger = MenuLogger(__name__)


@dataclass(frozen=True)
class CartTotals:
    total_items: int
    total_price: Decimal


def cart_totals(lines: list[CartLineOut]) -> CartTotals:
    return CartTotals(
        total_items=sum(l.quantity for l in lines),
        total_price=sum((l.product.price * l.quantity for l in lines), Decimal("0")),
    )


def _clean(text: str | None) -> str | None:
    text = (text or "").strip()
    return text or None


class SessionCartStore:
    """
    Cart lines of one anonymous session. Every read and write is scoped to
    ``session.session_id``; a line id from another session behaves as missing.
    """

    def __init__(self, repo: MenuRepository, session: SessionContext, fetch_limit: int | None = None):
        self.repo = repo
        self.session = session
        self.fetch_limit = fetch_limit or settings.CART_FETCH_LIMIT

    def get_or_create_session_id(self) -> str:
        return self.session.session_id

    # ---------- reads ----------

    def list(self) -> list[CartLineOut]:
        try:
            return self.repo.list_cart_lines(self.session.session_id, self.fetch_limit)
        except StoreError as e:
            raise TransientLoadError("We couldn't load your cart. Please try again.") from e

    def totals(self) -> CartTotals:
        return cart_totals(self.list())

    def snapshot(self) -> CartOut:
        lines = self.list()
        t = cart_totals(lines)
        return CartOut(
            session_id=self.session.session_id,
            durable=self.session.durable,
            lines=lines,
            total_items=t.total_items,
            total_price=t.total_price,
        )

    def _own_line(self, line_id: str) -> CartLineOut:
        try:
            line = self.repo.get_cart_line(line_id)
        except StoreError as e:
            raise TransientLoadError("We couldn't update your cart. Please try again.") from e
        if not line or line.session_id != self.session.session_id:
            raise CartLineNotFound(line_id)
        return line

    # ---------- writes ----------

    def add(self, product_id: str, quantity: int = 1, instructions: str | None = None) -> CartLineOut:
        if quantity < 1:
            raise ValidationError("Quantity must be at least 1.", field="quantity")
        instructions = _clean(instructions)
        try:
            product = self.repo.get_product(product_id)
            if not product or not product.is_active:
                raise ValidationError("This product is not available.", field="product_id")

            existing = self.repo.find_cart_line(self.session.session_id, product_id, instructions)
            if existing:
                line = self.repo.update_cart_line_quantity(existing.id, existing.quantity + quantity)
            else:
                line = self.repo.insert_cart_line(self.session.session_id, product_id, quantity, instructions)
        except StoreError as e:
            raise TransientLoadError("We couldn't add this item to your cart. Please try again.") from e

        logger.info(f"cart {self.session.session_id}: +{quantity} {product.name}")
        return line

    def set_quantity(self, line_id: str, quantity: int, confirmed: bool = False) -> CartLineOut | None:
        """
        Quantity at or below zero goes through the same confirmation as
        ``remove``; the line is only deleted once the customer confirms.
        """
        if quantity <= 0:
            self.remove(line_id, confirmed=confirmed)
            return None

        self._own_line(line_id)
        try:
            return self.repo.update_cart_line_quantity(line_id, quantity)
        except StoreError as e:
            raise TransientLoadError("We couldn't update your cart. Please try again.") from e

    def remove(self, line_id: str, confirmed: bool = False) -> None:
        line = self._own_line(line_id)
        if not confirmed:
            raise ConfirmationRequired(line.id, line.product.name, line.quantity)
        try:
            self.repo.delete_cart_line(line_id)
        except StoreError as e:
            raise TransientLoadError("We couldn't update your cart. Please try again.") from e
        logger.info(f"cart {self.session.session_id}: removed {line.product.name}")

    def discard(self, line_ids: list[str]) -> int:
        """Drop the given lines of this session; other lines stay in the cart."""
        if not line_ids:
            return 0
        try:
            n = self.repo.delete_cart_lines(self.session.session_id, line_ids)
        except StoreError as e:
            raise TransientLoadError("We couldn't update your cart. Please try again.") from e
        logger.info(f"cart {self.session.session_id}: removed {n} ordered lines")
        return n

    def clear(self) -> int:
        try:
            n = self.repo.clear_cart(self.session.session_id)
        except StoreError as e:
            raise TransientLoadError("We couldn't empty your cart. Please try again.") from e
        logger.info(f"cart {self.session.session_id}: cleared {n} lines")
        return n
