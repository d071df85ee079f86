"""Pydantic request/response schemas for the marketplace API.

These are external contracts (anti-corruption layer), separate from
internal Protean commands. JSON field names are camelCase; Python code
uses snake_case through the alias generator.
"""

import json
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class OrderItemRequest(CamelModel):
    product_id: str
    quantity: int = Field(ge=1)
    variant_id: str | None = None


class OrderDataRequest(CamelModel):
    destination_address_id: str
    buyer_id: str | None = None
    delivery_type: str = "STANDARD"
    vehicle_type: str | None = None
    payment_method: str = "cash_on_delivery"
    delivery_notes: str | None = None


class CreateOrderRequest(CamelModel):
    order_data: OrderDataRequest
    items: list[OrderItemRequest]

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "orderData": {
                        "destinationAddressId": "addr-001",
                        "deliveryType": "STANDARD",
                        "paymentMethod": "orange_money",
                    },
                    "items": [{"productId": "prod-001", "quantity": 2}],
                }
            ]
        }
    )


class UpdateStatusRequest(CamelModel):
    status: str
    reason: str | None = None


class UpdatePaymentRequest(CamelModel):
    status: str
    transaction_id: str | None = None


class OrderItemResponse(CamelModel):
    product_id: str
    variant_id: str | None = None
    product_name: str | None = None
    quantity: int
    unit_price: int
    line_total: int


class StoreOrderResponse(CamelModel):
    id: str
    order_id: str
    store_id: str
    buyer_id: str
    status: str
    payment_status: str
    payment_method: str
    items: list[OrderItemResponse] = []
    subtotal: int
    delivery_fee: int
    total: int
    commission: int | None = None
    delivery_rule_id: str | None = None
    delivery_type: str | None = None
    vehicle_type: str | None = None
    distance_km: float | None = None
    weight_grams: int | None = None
    estimated_delivery_days: int | None = None
    delivery_notes: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class PaymentResponse(CamelModel):
    id: str
    order_id: str
    amount: int
    currency: str
    method: str
    status: str
    transaction_id: str | None = None
    failure_reason: str | None = None
    paid_at: datetime | None = None


class TimelineEntryResponse(CamelModel):
    event_type: str
    description: str
    occurred_at: datetime
    store_order_id: str | None = None
    shipment_id: str | None = None


class OrderResponse(CamelModel):
    id: str
    buyer_id: str
    destination_address_id: str
    status: str
    payment_status: str
    payment_method: str
    delivery_type: str | None = None
    items_total: int
    total_delivery_fee: int
    platform_fee: int
    grand_total: int
    estimated_delivery_days: int | None = None
    store_order_ids: list[str] = []
    cancellation_reason: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    store_orders: list[StoreOrderResponse] | None = None
    payment: PaymentResponse | None = None
    timeline: list[TimelineEntryResponse] | None = None

    @field_validator("store_order_ids", mode="before")
    @classmethod
    def _parse_store_order_ids(cls, value):
        if isinstance(value, str):
            return json.loads(value) if value else []
        return value or []

    @classmethod
    def of(cls, order, store_orders=None, payment=None, timeline=None) -> "OrderResponse":
        response = cls.model_validate(order)
        if store_orders is not None:
            response.store_orders = [StoreOrderResponse.model_validate(so) for so in store_orders]
        if payment is not None:
            response.payment = PaymentResponse.model_validate(payment)
        if timeline is not None:
            response.timeline = [TimelineEntryResponse.model_validate(entry) for entry in timeline]
        return response


# ---------------------------------------------------------------------------
# Delivery
# ---------------------------------------------------------------------------
class EstimateRequest(CamelModel):
    destination_address_id: str
    items: list[OrderItemRequest] | None = None  # falls back to the cart
    delivery_type: str | None = None
    vehicle_type: str | None = None


class OptionsRequest(CamelModel):
    destination_address_id: str


class FeeBreakdownResponse(CamelModel):
    base_fee: int
    weight_surcharge: float
    distance_surcharge: float
    raw_total: float
    final_fee: int


class QuoteResponse(CamelModel):
    store_id: str
    rule_id: str
    delivery_type: str
    vehicle_type: str | None = None
    distance_km: float
    weight_grams: int
    fee: int
    breakdown: FeeBreakdownResponse
    estimated_delivery_days: int
    currency: str


class EstimateResponse(CamelModel):
    quotes: list[QuoteResponse]
    total_fee: int
    currency: str


class OptionResponse(CamelModel):
    rule_id: str
    delivery_type: str
    vehicle_type: str | None = None
    weight_max: int
    distance_max: float
    base_fee: int
    min_fee: int | None = None
    max_fee: int | None = None
    currency: str
    delivery_type_label: str
    vehicle_type_label: str
    estimated_delivery_days: int


class RuleRequest(CamelModel):
    delivery_type: str
    vehicle_type: str | None = None
    weight_max: int = Field(ge=0)
    distance_max: float = Field(ge=0)
    base_fee: int = Field(ge=0)
    weight_surcharge_rate: float | None = Field(default=None, ge=0)
    distance_surcharge_rate: float | None = Field(default=None, ge=0)
    weight_threshold: int | None = Field(default=None, ge=0)
    distance_threshold: float | None = Field(default=None, ge=0)
    min_fee: int | None = Field(default=None, ge=0)
    max_fee: int | None = Field(default=None, ge=0)
    is_active: bool = True


class RuleUpdateRequest(CamelModel):
    delivery_type: str | None = None
    vehicle_type: str | None = None
    vehicle_agnostic: bool = False
    weight_max: int | None = Field(default=None, ge=0)
    distance_max: float | None = Field(default=None, ge=0)
    base_fee: int | None = Field(default=None, ge=0)
    weight_surcharge_rate: float | None = Field(default=None, ge=0)
    distance_surcharge_rate: float | None = Field(default=None, ge=0)
    weight_threshold: int | None = Field(default=None, ge=0)
    distance_threshold: float | None = Field(default=None, ge=0)
    min_fee: int | None = Field(default=None, ge=0)
    max_fee: int | None = Field(default=None, ge=0)
    is_active: bool | None = None


class RuleResponse(CamelModel):
    id: str
    delivery_type: str
    vehicle_type: str | None = None
    weight_max: int
    distance_max: float
    base_fee: int
    weight_surcharge_rate: float
    distance_surcharge_rate: float
    weight_threshold: int
    distance_threshold: float
    min_fee: int
    max_fee: int | None = None
    is_active: bool


# ---------------------------------------------------------------------------
# Logistics
# ---------------------------------------------------------------------------
class ShipmentDataRequest(CamelModel):
    store_order_id: str
    driver_id: str | None = None
    priority_level: str = "normal"
    delivery_notes: str | None = None
    is_managed_by_store: bool = True


class CreateShipmentRequest(CamelModel):
    order_id: str | None = None
    shipment_data: ShipmentDataRequest


class AssignDriverRequest(CamelModel):
    shipment_id: str
    driver_id: str


class ShipmentUpdateDataRequest(CamelModel):
    shipment_id: str
    status: str | None = None
    driver_id: str | None = None
    priority_level: str | None = None
    delivery_notes: str | None = None
    failure_reason: str | None = None


class UpdateShipmentRequest(CamelModel):
    shipment_data: ShipmentUpdateDataRequest


class TrackingDataRequest(CamelModel):
    shipment_id: str
    latitude: float
    longitude: float


class TrackingRequest(CamelModel):
    tracking_data: TrackingDataRequest


class ShipmentResponse(CamelModel):
    id: str
    store_order_id: str
    order_id: str
    store_id: str
    buyer_id: str
    driver_id: str | None = None
    status: str
    priority_level: str
    is_managed_by_store: bool
    delivery_notes: str | None = None
    failure_reason: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    delivered_at: datetime | None = None


class TrackingResponse(CamelModel):
    id: str
    shipment_id: str
    latitude: float
    longitude: float
    recorded_by: str | None = None
    recorded_at: datetime


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------
class CartItemRequest(CamelModel):
    product_id: str
    variant_id: str | None = None
    quantity: int = Field(ge=1, default=1)


class CartQuantityRequest(CamelModel):
    product_id: str
    variant_id: str | None = None
    quantity: int = Field(ge=0)


class CartItemResponse(CamelModel):
    product_id: str
    variant_id: str | None = None
    quantity: int


class CartResponse(CamelModel):
    buyer_id: str
    items: list[CartItemResponse] = []
    updated_at: datetime | None = None


# ---------------------------------------------------------------------------
# Notifications, payments, reporting
# ---------------------------------------------------------------------------
class NotificationResponse(CamelModel):
    id: str
    notification_type: str
    title: str
    message: str
    order_id: str | None = None
    shipment_id: str | None = None
    is_read: bool
    created_at: datetime | None = None
    read_at: datetime | None = None


class PaymentCallbackRequest(CamelModel):
    order_id: str
    gateway_status: str  # succeeded, failed
    transaction_id: str | None = None
    failure_reason: str | None = None


class OverviewResponse(CamelModel):
    counts: dict[str, int]
    total: int
    revenue: int
    commission: int
    currency: str
    store_ids: list[str] = []


class PageResponse(CamelModel):
    items: list
    total: int
    page: int
    per_page: int
    pages: int

    @classmethod
    def of(cls, page, schema) -> "PageResponse":
        return cls(
            items=[schema.model_validate(item).model_dump(mode="json", by_alias=True) for item in page.items],
            total=page.total,
            page=page.page,
            per_page=page.per_page,
            pages=page.pages,
        )


# ---------------------------------------------------------------------------
# Query strings (camelCase or snake_case keys)
# ---------------------------------------------------------------------------
class PageQuery(CamelModel):
    page: int = Field(default=1, ge=1)
    per_page: int = Field(default=20, ge=1)


class OrderSearchQuery(PageQuery):
    status: str | None = None
    payment_status: str | None = None
    date_start: datetime | None = None
    date_end: datetime | None = None
    min_amount: int | None = None
    max_amount: int | None = None


class StoreOrderSearchQuery(OrderSearchQuery):
    payment_method: str | None = None
    shipment_status: str | None = None


class ShipmentSearchQuery(PageQuery):
    status: str | None = None
    driver_id: str | None = None
    priority_level: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    store_id: str | None = None


class NotificationQuery(PageQuery):
    unread_only: bool = False
