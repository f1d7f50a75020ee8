from fastapi import APIRouter, Depends, HTTPException

from qrmenu.deps import optional_owner, require_repo
from qrmenu.schemas.menu import BusinessOut, MenuOut, PageOut
from qrmenu.schemas.payments import PaymentMethodsOut
from qrmenu.services.catalog import ALL, CatalogLoader, MenuBrowser
from qrmenu.services.payments import load_available_methods, methods_out
from qrmenu.services.repository import SqlMenuRepository
from qrmenu.services.tenant import TenantResolver

router = APIRouter(prefix="/menu", tags=["menu"])


# ---------- helpers ----------

def _menu(repo: SqlMenuRepository, business: BusinessOut) -> MenuOut:
    menu = CatalogLoader(repo).load_menu(business.id)
    return MenuOut(
        business=business,
        categories=menu.categories,
        product_count=len(menu.products),
        payment_methods=methods_out(load_available_methods(repo, business)),
    )


def _products_page(repo: SqlMenuRepository, business: BusinessOut, category: str, page: int) -> PageOut:
    products = CatalogLoader(repo).load_products(business.id)
    browser = MenuBrowser(products)
    browser.select_category(category)
    p = browser.go_to_page(page)
    return PageOut(
        items=p.items, page=p.page, page_size=p.page_size, total_pages=p.total_pages,
        total_items=p.total_items, has_next=p.has_next, has_prev=p.has_prev,
        start_item=p.start_item, end_item=p.end_item, visible_pages=p.visible_pages,
    )


# ---------- owner / single-tenant default ----------

@router.get("", response_model=MenuOut)
def default_menu(
    repo: SqlMenuRepository = Depends(require_repo),
    owner_id: str | None = Depends(optional_owner),
):
    """
    Menu without a slug in the URL: the signed-in owner's business, or the
    first business when nobody is signed in.
    """
    business = TenantResolver(repo).resolve(None, owner_id)
    return _menu(repo, business)


# ---------- public, by slug ----------

@router.get("/{slug}", response_model=MenuOut)
def public_menu(slug: str, repo: SqlMenuRepository = Depends(require_repo)):
    business = TenantResolver(repo).resolve(slug)
    return _menu(repo, business)


@router.get("/{slug}/products", response_model=PageOut)
def public_products(
    slug: str,
    category: str = ALL,
    page: int = 1,
    repo: SqlMenuRepository = Depends(require_repo),
):
    """
    One page of the product grid. Clients reset ``page`` to 1 whenever they
    change ``category``; pages past the end are clamped to the last one.
    """
    if page < 1:
        raise HTTPException(400, "page must be >= 1")
    business = TenantResolver(repo).resolve(slug)
    return _products_page(repo, business, category, page)


@router.get("/{slug}/payment-methods", response_model=PaymentMethodsOut)
def public_payment_methods(slug: str, repo: SqlMenuRepository = Depends(require_repo)):
    business = TenantResolver(repo).resolve(slug)
    return methods_out(load_available_methods(repo, business))
