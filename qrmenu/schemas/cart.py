from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
from decimal import Decimal

class CartLineIn(BaseModel):
    product_id: str
    quantity: int = 1
    special_instructions: Optional[str] = None

class CartQuantityIn(BaseModel):
    quantity: int
    confirm: bool = False  # required when quantity drops to 0

class CartProduct(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: str
    business_id: str  # the catalog the line came from
    name: str
    price: Decimal
    image_url: Optional[str] = None

class CartLineOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: str
    session_id: str
    product_id: str
    quantity: int = Field(ge=1)
    special_instructions: Optional[str] = None
    product: CartProduct

    @property
    def line_total(self) -> Decimal:
        return self.product.price * self.quantity

class CartOut(BaseModel):
    session_id: str
    durable: bool
    lines: List[CartLineOut]
    total_items: int
    total_price: Decimal
