"""Data models for checkout flows."""

from decimal import Decimal
from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class FlowMode(str, Enum):
    """Pricing mode a flow presents its cart in."""

    CHECKOUT = "checkout"
    SUBSCRIPTION = "subscription"
    TRIAL = "trial"


class ResponseKind(str, Enum):
    """What the backend returns for a flow's endpoint."""

    REDIRECT = "redirect"
    CLIENT_SECRET = "client_secret"
    RECORDS = "records"
    STATUS = "status"


class Item(BaseModel):
    """Represents a purchasable or subscribable catalog item."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Item ID, unique within its catalog")
    name: str = Field(description="Item name")
    description: str = Field(default="", description="Item description")
    image: str = Field(default="", description="Item image URL")
    price: Decimal = Field(ge=0, description="Unit price")
    quantity: int = Field(default=1, ge=1, description="Quantity")


class Cart(BaseModel):
    """Represents the cart of a single flow instance."""

    items: list[Item] = Field(default_factory=list, description="Cart items in display order")
    mode: FlowMode = Field(default=FlowMode.CHECKOUT, description="Flow mode")
    total_override: Optional[Decimal] = Field(
        None, description="Fixed plan price shown instead of the item sum"
    )

    @model_validator(mode="after")
    def check_unique_ids(self) -> "Cart":
        seen = set()
        for item in self.items:
            if item.id in seen:
                raise ValueError(f"Duplicate item id in cart: {item.id}")
            seen.add(item.id)
        return self

    def total(self) -> Decimal:
        """Return the override total if set, else the sum of price x quantity."""
        if self.total_override is not None:
            return self.total_override
        return sum((item.price * item.quantity for item in self.items), Decimal("0"))


class CustomerInfo(BaseModel):
    """Customer identity as typed, never validated or normalized."""

    model_config = ConfigDict(frozen=True)

    name: str = ""
    email: str = ""


class FlowDescriptor(BaseModel):
    """Static per-route configuration of a flow."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Short flow name")
    route: str = Field(description="Route path the flow is served on")
    title: str = Field(description="Page heading")
    endpoint_path: str = Field(description="Backend endpoint path")
    mode: FlowMode
    requires_order_id: bool = False
    order_id: Optional[str] = None
    display_total: Optional[Decimal] = Field(
        None, description="Fixed total to show; None means derive from the cart"
    )
    catalog: Literal["products", "subscriptions"] = "products"
    response_kind: ResponseKind = ResponseKind.REDIRECT

    @model_validator(mode="after")
    def check_order_id(self) -> "FlowDescriptor":
        if self.requires_order_id and not self.order_id:
            raise ValueError(f"Flow {self.name} requires an order id")
        return self


class SubmissionItem(BaseModel):
    """Item reference sent to the backend. Prices stay server-side."""

    name: str
    id: str


class SubmissionRequest(BaseModel):
    """Body of the payment-session request."""

    model_config = ConfigDict(populate_by_name=True)

    items: list[SubmissionItem]
    customer_name: str = Field(alias="customerName")
    customer_email: str = Field(alias="customerEmail")
    invoice_needed: bool = Field(default=True, alias="invoiceNeeded")
    order_id: Optional[str] = Field(None, alias="orderId")

    def to_wire(self) -> dict:
        """Serialize with camelCase keys, leaving out an absent order id."""
        return self.model_dump(by_alias=True, exclude_none=True)


class RedirectTarget(BaseModel):
    """Destination returned by the backend, checked before navigating."""

    model_config = ConfigDict(frozen=True)

    uri: str
    host: str


class SubmissionError(BaseModel):
    """Why a submission did not produce a destination."""

    kind: Literal["transport", "http_status", "invalid_redirect", "in_flight"]
    message: str
    status_code: Optional[int] = None


class SubmissionResult(BaseModel):
    """Outcome of a submission: a redirect, a client secret, or an error."""

    redirect: Optional[RedirectTarget] = None
    client_secret: Optional[str] = None
    error: Optional[SubmissionError] = None

    @model_validator(mode="after")
    def check_exactly_one(self) -> "SubmissionResult":
        branches = [b for b in (self.redirect, self.client_secret, self.error) if b is not None]
        if len(branches) != 1:
            raise ValueError("SubmissionResult holds exactly one of redirect, client_secret, error")
        return self

    @property
    def ok(self) -> bool:
        return self.error is None


class SubscriptionRecord(BaseModel):
    """A subscription line as listed by the backend."""

    model_config = ConfigDict(populate_by_name=True)

    app_product_id: Optional[str] = Field(None, alias="appProductId")
    subscription_id: str = Field(alias="subscriptionId")
    subscribed_on: Optional[str] = Field(None, alias="subscribedOn")
    next_payment_date: Optional[str] = Field(None, alias="nextPaymentDate")
    price: Optional[Decimal] = None
    trial_ends_on: Optional[str] = Field(None, alias="trialEndsOn")


class InvoiceRecord(BaseModel):
    """An invoice as listed by the backend."""

    number: Optional[str] = None
    amount: Decimal = Field(default=Decimal("0"))
    url: Optional[str] = Field(None, description="Invoice PDF URL")
