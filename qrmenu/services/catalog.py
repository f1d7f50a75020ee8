"""
Public catalog: active categories and products of one business, the pure
category filter, and the browsing state that drives the paginated grid.
"""
from dataclasses import dataclass
from typing import Sequence

from qrmenu.config import settings
from qrmenu.errors import MenuNotAvailable, StoreError, TransientLoadError
from qrmenu.schemas.menu import CategoryOut, ProductOut
from qrmenu.services.pagination import Page, paginate
from qrmenu.services.repository import MenuRepository
from qrmenu.util.logger import MenuLogger

logger = MenuLogger(__name__)

ALL = "all"


# ---------- curated order ----------

def curated_index(category_name: str | None, order: Sequence[str] | None = None) -> int | None:
    """
    Position of ``category_name`` in the curated list, or None when it is not
    part of it. Names match loosely: either one containing the other,
    ignoring case, so "Platos Principales del día" still lands in slot 0.
    """
    if not category_name:
        return None
    order = settings.CATEGORY_ORDER if order is None else order
    name = category_name.lower()
    for i, curated in enumerate(order):
        c = curated.lower()
        if c in name or name in c:
            return i
    return None


def _curated_key(name: str | None, order: Sequence[str] | None):
    idx = curated_index(name, order)
    # known categories first in curated order, the rest after them
    return (0, idx) if idx is not None else (1, 0)


def sort_categories(categories: Sequence[CategoryOut], order: Sequence[str] | None = None) -> list[CategoryOut]:
    return sorted(
        categories,
        key=lambda c: (_curated_key(c.name, order), c.sort_order or 0, c.name),
    )


def sort_products_by_category(products: Sequence[ProductOut], order: Sequence[str] | None = None) -> list[ProductOut]:
    return sorted(
        products,
        key=lambda p: (_curated_key(p.category_name, order), p.category_name or "", p.name),
    )


def filter_products(products: Sequence[ProductOut], category_id: str = ALL,
                    order: Sequence[str] | None = None) -> list[ProductOut]:
    """
    "all" keeps every product sorted by name; a category id keeps exact matches
    sorted the same way the category selector is.
    """
    if category_id == ALL:
        return sorted(products, key=lambda p: p.name)
    return sort_products_by_category([p for p in products if p.category_id == category_id], order)


# ---------- loading ----------

@dataclass(frozen=True)
class Menu:
    categories: list[CategoryOut]
    products: list[ProductOut]


class CatalogLoader:
    def __init__(self, repo: MenuRepository):
        self.repo = repo

    def load_categories(self, business_id: str) -> list[CategoryOut]:
        try:
            rows = self.repo.list_active_categories(business_id)
        except StoreError as e:
            raise TransientLoadError("We couldn't load the menu categories. Please try again.") from e
        return sort_categories([c for c in rows if c.is_active])

    def load_products(self, business_id: str) -> list[ProductOut]:
        try:
            rows = self.repo.list_products(business_id)
        except StoreError as e:
            raise TransientLoadError("We couldn't load the menu. Please try again.") from e
        return [p for p in rows if p.business_id == business_id and p.is_active]

    def load_menu(self, business_id: str) -> Menu:
        """The browsing screen is ready only once both lists are in."""
        categories = self.load_categories(business_id)
        products = self.load_products(business_id)
        if not products:
            logger.warning(f"business {business_id} has no active products")
            raise MenuNotAvailable(business_id)
        logger.info(f"menu {business_id}: {len(categories)} categories, {len(products)} products")
        return Menu(categories=categories, products=products)


# ---------- browsing state ----------

class MenuBrowser:
    """
    Selected category and current page over one loaded product list.
    Changing the category always goes back to page 1.
    """

    def __init__(self, products: Sequence[ProductOut], page_size: int | None = None):
        self.products = list(products)
        self.page_size = page_size or settings.MENU_PAGE_SIZE
        self.category_id = ALL
        self.current_page = 1

    @property
    def filtered(self) -> list[ProductOut]:
        return filter_products(self.products, self.category_id)

    def select_category(self, category_id: str) -> Page[ProductOut]:
        self.category_id = category_id or ALL
        self.current_page = 1
        return self.view()

    def go_to_page(self, page: int) -> Page[ProductOut]:
        self.current_page = page
        return self.view()

    def next_page(self) -> Page[ProductOut]:
        return self.go_to_page(self.view().page + 1)

    def previous_page(self) -> Page[ProductOut]:
        return self.go_to_page(self.view().page - 1)

    def view(self) -> Page[ProductOut]:
        page = paginate(self.filtered, self.page_size, self.current_page)
        self.current_page = page.page
        return page
