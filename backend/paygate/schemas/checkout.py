from typing import Any

from pydantic import BaseModel, Field, model_validator


class PriceData(BaseModel):
    currency: str = Field(..., min_length=3, max_length=3)
    unit_amount: int = Field(..., ge=0)
    product_name: str = Field(..., min_length=1, description="Product display name")


class LineItem(BaseModel):
    price: str | None = None
    price_data: PriceData | None = None
    quantity: int = Field(default=1, ge=1)

    @model_validator(mode="after")
    def _one_price_source(self):
        if (self.price is None) == (self.price_data is None):
            raise ValueError("Exactly one of price or price_data is required")
        return self

    def to_params(self) -> dict[str, Any]:
        if self.price:
            return {"price": self.price, "quantity": self.quantity}
        return {
            "price_data": {
                "currency": self.price_data.currency.lower(),
                "unit_amount": self.price_data.unit_amount,
                "product_data": {"name": self.price_data.product_name},
            },
            "quantity": self.quantity,
        }


class CreateSessionRequest(BaseModel):
    line_items: list[LineItem] = Field(default_factory=list)
    success_url: str | None = None
    cancel_url: str | None = None
    mode: str = "payment"
    customer_email: str | None = None
    ui_mode: str | None = None


class UpdateSessionRequest(BaseModel):
    new_price: str | None = None
    shipping_address: dict[str, Any] | None = None
    transfer_data: dict[str, Any] | None = None


class SessionCreated(BaseModel):
    id: str
    url: str | None = None


class SessionSummary(BaseModel):
    id: str
    status: str | None = None
    amount: int | None = None


class SessionUpdated(BaseModel):
    id: str
    updated: bool = True
