"""Per-store delivery quotes, estimates and options.

A quote prices the delivery of one store's share of a cart: store origin
address to buyer destination, total parcel weight, resolved fee rule.
Quoting is all-or-nothing; any store that cannot be priced fails the whole
request and nothing partial is returned.
"""

from dataclasses import dataclass

import structlog

from marketplace.catalogue.address import Address
from marketplace.catalogue.store import Store
from marketplace.config import CURRENCY
from marketplace.delivery.fee_rule import DELIVERY_TYPE_LABELS, VEHICLE_TYPE_LABELS, DeliveryType, vehicle_type_label
from marketplace.delivery.geo import FeeBreakdown, compute_distance, fee_breakdown, validate_coordinates
from marketplace.delivery.resolver import active_rules, find_rule
from marketplace.delivery.schedule import estimated_delivery_days
from marketplace.errors import EmptyOrder, ValidationFailed
from marketplace.identity.access import Caller, Capability, ensure, require
from marketplace.ordering.cart import cart_for
from marketplace.ordering.lines import Line, group_by_store, resolve_lines
from marketplace.shared.lookup import load

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class DeliveryQuote:
    store_id: str
    rule_id: str
    delivery_type: str
    vehicle_type: str | None
    distance_km: float
    weight_grams: int
    fee: int
    breakdown: FeeBreakdown
    estimated_delivery_days: int
    currency: str = CURRENCY

    def as_dict(self) -> dict:
        return {
            "store_id": self.store_id,
            "rule_id": self.rule_id,
            "delivery_type": self.delivery_type,
            "vehicle_type": self.vehicle_type,
            "distance_km": round(self.distance_km, 2),
            "weight_grams": self.weight_grams,
            "fee": self.fee,
            "breakdown": self.breakdown.as_dict(),
            "estimated_delivery_days": self.estimated_delivery_days,
            "currency": self.currency,
        }


def check_delivery_type(delivery_type: str | None) -> str:
    delivery_type = delivery_type or DeliveryType.STANDARD.value
    if delivery_type not in DELIVERY_TYPE_LABELS:
        raise ValidationFailed(f"Unknown delivery type '{delivery_type}'", {"field": "delivery_type"})
    return delivery_type


def check_vehicle_type(vehicle_type: str | None) -> str | None:
    if vehicle_type and vehicle_type not in VEHICLE_TYPE_LABELS:
        raise ValidationFailed(f"Unknown vehicle type '{vehicle_type}'", {"field": "vehicle_type"})
    return vehicle_type or None


def destination_for(caller: Caller, address_id, buyer_id=None) -> Address:
    """Load a delivery destination the caller may ship to, with usable coordinates."""
    address = load(Address, address_id, "Address")
    owner = buyer_id or caller.user_id
    ensure(
        address.is_owned_by(owner) or caller.is_staff,
        "Destination address does not belong to the buyer",
    )
    validate_coordinates(address.coordinates, "destination")
    return address


def quote_store(
    store: Store,
    destination: Address,
    weight_grams: int,
    delivery_type: str,
    vehicle_type: str | None = None,
    rules=None,
) -> DeliveryQuote:
    origin = load(Address, store.address_id, "Store address")
    distance = compute_distance(origin.coordinates, destination.coordinates)
    rule = find_rule(delivery_type, vehicle_type, weight_grams, distance, rules)
    breakdown = fee_breakdown(rule, distance, weight_grams)
    return DeliveryQuote(
        store_id=str(store.id),
        rule_id=str(rule.id),
        delivery_type=delivery_type,
        vehicle_type=vehicle_type or rule.vehicle_type,
        distance_km=distance,
        weight_grams=int(weight_grams),
        fee=breakdown.final_fee,
        breakdown=breakdown,
        estimated_delivery_days=estimated_delivery_days(
            destination.region, distance, delivery_type, vehicle_type or rule.vehicle_type
        ),
    )


def quote_groups(
    groups: dict[str, list[Line]],
    destination: Address,
    delivery_type: str,
    vehicle_type: str | None = None,
) -> dict[str, DeliveryQuote]:
    """Quote every store group; raises on the first store that cannot be priced."""
    rules = active_rules()
    quotes = {}
    for store_id, lines in groups.items():
        store = load(Store, store_id, "Store")
        weight = sum(line.weight_grams for line in lines)
        quotes[store_id] = quote_store(store, destination, weight, delivery_type, vehicle_type, rules)
    return quotes


def estimate_delivery(
    caller: Caller,
    destination_address_id,
    items: list[dict] | None = None,
    delivery_type: str | None = None,
    vehicle_type: str | None = None,
) -> list[DeliveryQuote]:
    """Quote delivery for ``items`` (or the caller's cart) to the destination."""
    require(caller, Capability.ESTIMATE_DELIVERY)
    delivery_type = check_delivery_type(delivery_type)
    vehicle_type = check_vehicle_type(vehicle_type)
    destination = destination_for(caller, destination_address_id)

    if items is None:
        cart = cart_for(caller.user_id)
        items = cart.as_items() if cart else []
        if not items:
            raise EmptyOrder("Cart is empty")

    groups = group_by_store(resolve_lines(items))
    quotes = quote_groups(groups, destination, delivery_type, vehicle_type)
    logger.info(
        "Delivery estimated",
        caller_id=caller.user_id,
        stores=len(quotes),
        total_fee=sum(q.fee for q in quotes.values()),
    )
    return list(quotes.values())


def delivery_options(caller: Caller, destination_address_id) -> list[dict]:
    """Describe every active rule, with delivery days for the destination's region."""
    require(caller, Capability.ESTIMATE_DELIVERY)
    destination = destination_for(caller, destination_address_id)

    options = []
    for rule in sorted(active_rules(), key=lambda r: (r.delivery_type, r.vehicle_type or "", r.weight_max)):
        options.append(
            {
                "rule_id": str(rule.id),
                "delivery_type": rule.delivery_type,
                "vehicle_type": rule.vehicle_type,
                "weight_max": rule.weight_max,
                "distance_max": rule.distance_max,
                "base_fee": rule.base_fee,
                "min_fee": rule.min_fee,
                "max_fee": rule.max_fee,
                "currency": CURRENCY,
                "delivery_type_label": DELIVERY_TYPE_LABELS[rule.delivery_type],
                "vehicle_type_label": vehicle_type_label(rule.vehicle_type),
                "estimated_delivery_days": estimated_delivery_days(
                    destination.region, rule.distance_max, rule.delivery_type, rule.vehicle_type
                ),
            }
        )
    return options
