"""Delivery rule resolution.

``resolve_rule`` is pure and works over any iterable of rules; ``find_rule``
feeds it the active rules from the repository.

Selection order:
    1. active rules for the exact delivery type that accommodate the parcel
    2. rules for the requested vehicle, else vehicle-agnostic rules
       (only agnostic rules when no vehicle is requested)
    3. tightest fit: smallest (weight_max, distance_max), then base fee, then id

No match raises ``NoApplicableRule``; delivery is never priced by a default.
"""

from collections.abc import Iterable

import structlog
from protean.utils.globals import current_domain

from marketplace.delivery.fee_rule import DeliveryFeeRule
from marketplace.errors import NoApplicableRule
from marketplace.shared.lookup import every

logger = structlog.get_logger(__name__)


def _tightness(rule) -> tuple:
    return (rule.weight_max, rule.distance_max, rule.base_fee, str(rule.id))


def resolve_rule(
    rules: Iterable,
    delivery_type: str,
    vehicle_type: str | None,
    weight_grams: float,
    distance_km: float,
):
    candidates = [
        rule
        for rule in rules
        if rule.is_active and rule.delivery_type == delivery_type and rule.fits(weight_grams, distance_km)
    ]

    exact = [r for r in candidates if vehicle_type and r.vehicle_type == vehicle_type]
    agnostic = [r for r in candidates if r.vehicle_type is None]
    eligible = exact or agnostic

    if not eligible:
        raise NoApplicableRule(
            "No delivery rule accommodates this shipment",
            {
                "delivery_type": delivery_type,
                "vehicle_type": vehicle_type,
                "weight_grams": weight_grams,
                "distance_km": round(distance_km, 3),
            },
        )

    return min(eligible, key=_tightness)


def active_rules() -> list[DeliveryFeeRule]:
    return every(current_domain.repository_for(DeliveryFeeRule)._dao.query.filter(is_active=True))


def find_rule(
    delivery_type: str,
    vehicle_type: str | None,
    weight_grams: float,
    distance_km: float,
    rules: Iterable | None = None,
) -> DeliveryFeeRule:
    rule = resolve_rule(
        active_rules() if rules is None else rules,
        delivery_type,
        vehicle_type,
        weight_grams,
        distance_km,
    )
    logger.debug("Delivery rule resolved", rule_id=str(rule.id), rule=rule.describe())
    return rule
