"""
rakhimart/schemas/cart.py - Pydantic models for the cart engine.

| Model            | Purpose |
|------------------|---------|
| `LineItem`       | One product in the cart; name, price and thumbnail frozen at add time |
| `CartState`      | Persisted cart record: `{"items": [...]}` |
| `PricingConfig`  | Delivery fee and free-delivery threshold (point-in-time copy of site settings) |
| `CartTotals`     | Derived subtotal / delivery charge / total |
| `CustomerDetails`| Checkout form fields |
| `OrderSummary`   | Ephemeral order: items + totals + customer |
"""
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class LineItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    product_id: str = Field(..., min_length=1, description="Catalog product id, unique within a cart")
    name: str = Field(..., description="Product name at the time of adding to cart")
    unit_price: Decimal = Field(..., ge=0, description="Price per unit at the time of adding to cart")
    quantity: int = Field(..., ge=1, description="Quantity of the product in the cart")
    thumbnail: str = Field(..., description="First product image, or the placeholder")
    stock_ceiling: int = Field(0, ge=0, description="Stock last reported by the catalog for this product")

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


class CartState(BaseModel):
    items: List[LineItem] = Field(default_factory=list, description="Line items in display order")


class PricingConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    delivery_fee: Decimal = Field(..., ge=0)
    free_delivery_threshold: Decimal = Field(..., ge=0)


class CartTotals(BaseModel):
    model_config = ConfigDict(frozen=True)

    subtotal: Decimal
    delivery_charge: Decimal
    total: Decimal
    item_count: int = 0
    amount_to_free_delivery: Decimal = Decimal("0")

    @property
    def free_delivery(self) -> bool:
        return self.delivery_charge == 0


class CustomerDetails(BaseModel):
    name: str = Field("", description="Full name (required at checkout)")
    phone: str = Field("", description="Phone number (required at checkout)")
    email: Optional[str] = Field(None, description="Email (optional)")
    address: str = Field("", description="Delivery address (required at checkout)")


class OrderSummary(BaseModel):
    line_items: List[LineItem]
    subtotal: Decimal
    delivery_charge: Decimal
    total: Decimal
    customer: CustomerDetails
