# Importing the module registers tables with Base for create_all()
from .core import (  # noqa: F401
    # Enums
    OrderStatus, ReservationStatus, PaymentCode,

    # Tenant
    Business, Owner, PaymentMethod,

    # Catalog
    Category, Product,

    # Anonymous cart
    CartLine,

    # Orders / reservations
    CustomerOrder, CustomerOrderItem, Reservation,
)

__all__ = [
    "OrderStatus", "ReservationStatus", "PaymentCode",
    "Business", "Owner", "PaymentMethod",
    "Category", "Product",
    "CartLine",
    "CustomerOrder", "CustomerOrderItem", "Reservation",
]
