from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class EventEnvelope(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str = Field(..., min_length=1, description="Provider event ID")
    type: str = Field(..., min_length=1, description="Event type tag")
    # Only id and type gate acceptance; the rest is read best-effort
    created: Any = None
    livemode: Any = None
    data: Any = None

    @property
    def created_at(self) -> int | None:
        if isinstance(self.created, int) and not isinstance(self.created, bool):
            return self.created
        return None


class CustomerDetails(BaseModel):
    model_config = ConfigDict(extra="ignore")

    email: str | None = None
    name: str | None = None


class CheckoutSessionObject(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    amount_total: int | None = None
    currency: str | None = None
    customer_email: str | None = None
    customer_details: CustomerDetails | None = None
    payment_status: str | None = None

    @property
    def email(self) -> str | None:
        if self.customer_email:
            return self.customer_email
        if self.customer_details:
            return self.customer_details.email
        return None


class PaymentIntentObject(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    amount: int
    currency: str | None = None
    status: str | None = None


class ChargeObject(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    amount: int
    paid: bool = False
    currency: str | None = None
