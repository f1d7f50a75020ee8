from pydantic import BaseModel, ConfigDict
from typing import Optional, List
from decimal import Decimal
from qrmenu.schemas.payments import PaymentMethodsOut

class BusinessOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: str
    name: str
    slug: str
    description: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    logo_url: Optional[str] = None
    whatsapp_url: Optional[str] = None
    facebook_url: Optional[str] = None
    instagram_url: Optional[str] = None
    tiktok_url: Optional[str] = None
    website_url: Optional[str] = None
    nequi_number: Optional[str] = None
    nequi_qr_url: Optional[str] = None

class CategoryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: str
    business_id: str
    name: str
    sort_order: int = 0
    is_active: bool = True

class ProductOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: str
    business_id: str
    category_id: Optional[str] = None
    category_name: Optional[str] = None  # filled in by the catalog loader for grouping
    name: str
    description: Optional[str] = None
    price: Decimal
    image_url: Optional[str] = None
    is_vegetarian: bool = False
    is_vegan: bool = False
    is_gluten_free: bool = False
    is_active: bool = True

class PageOut(BaseModel):
    items: List[ProductOut]
    page: int
    page_size: int
    total_pages: int
    total_items: int
    has_next: bool
    has_prev: bool
    start_item: int
    end_item: int
    visible_pages: List[int]

class MenuOut(BaseModel):
    business: BusinessOut
    categories: List[CategoryOut]
    product_count: int
    payment_methods: PaymentMethodsOut
