"""API models for cart checkout."""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class CartItem(BaseModel):
    """One line of the customer's cart."""

    model_config = ConfigDict(populate_by_name=True)

    product_id: str = Field(..., alias="productId")
    name: str = Field(..., min_length=1)
    price: Decimal = Field(..., gt=0, description="Unit price in major units")
    quantity: int = Field(..., ge=1)
    image: str | None = None


class CheckoutRequest(BaseModel):
    """Cart submitted for payment.

    An empty ``items`` list is accepted by validation and rejected by the
    route with ERR_PAYMENT_001 so the client gets the standard error body.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {
                    "items": [
                        {
                            "productId": "jollof-rice",
                            "name": "Jollof Rice",
                            "price": "18.50",
                            "quantity": 2,
                        }
                    ],
                    "customerEmail": "ada@example.com",
                    "customerName": "Ada",
                }
            ]
        },
    )

    items: list[CartItem] = Field(default_factory=list)
    customer_email: str = Field(..., alias="customerEmail", min_length=3)
    customer_name: str = Field(default="Guest User", alias="customerName")


class CheckoutResponse(BaseModel):
    """Where to send the customer to pay."""

    url: str
    order_id: str


class OrderLine(BaseModel):
    product_id: str | None = None
    name: str
    unit_amount: int = Field(..., description="Unit price in minor units")
    quantity: int
    image: str | None = None


class OrderSummary(BaseModel):
    """A stored order as returned by the order listing."""

    order_id: str
    status: str
    customer_email: str | None = None
    customer_name: str | None = None
    items: list[OrderLine] = Field(default_factory=list)
    total_amount_cents: int | None = None
    currency: str | None = None
    created_at: str | None = None
    updated_at: str | None = None


class OrderListResponse(BaseModel):
    count: int
    orders: list[OrderSummary]
