"""Distance and fee arithmetic for delivery pricing.

Pure functions; no repository access. Fees are whole GNF amounts, computed
with ``Decimal`` so half-unit surcharges round up deterministically.
"""

import math
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from marketplace.config import service_area
from marketplace.errors import InvalidCoordinates

EARTH_RADIUS_KM = 6371.0

DEFAULT_WEIGHT_THRESHOLD_GRAMS = 1000
DEFAULT_DISTANCE_THRESHOLD_KM = 10


@dataclass(frozen=True)
class Coordinates:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class FeeBreakdown:
    base_fee: int
    weight_surcharge: Decimal
    distance_surcharge: Decimal
    raw_total: Decimal
    final_fee: int

    def as_dict(self) -> dict:
        return {
            "base_fee": self.base_fee,
            "weight_surcharge": float(self.weight_surcharge),
            "distance_surcharge": float(self.distance_surcharge),
            "raw_total": float(self.raw_total),
            "final_fee": self.final_fee,
        }


def validate_coordinates(coords: Coordinates | None, label: str = "coordinates") -> Coordinates:
    """Return ``coords`` if usable for pricing, else raise ``InvalidCoordinates``.

    (0, 0) is the "not geocoded" sentinel and is rejected rather than
    priced as a zero-distance delivery.
    """
    if coords is None or coords.latitude is None or coords.longitude is None:
        raise InvalidCoordinates(f"Missing {label}", {"field": label})

    lat, lng = float(coords.latitude), float(coords.longitude)
    if lat == 0 and lng == 0:
        raise InvalidCoordinates(f"Unknown {label} (0, 0)", {"field": label, "latitude": lat, "longitude": lng})
    if not (-90 <= lat <= 90 and -180 <= lng <= 180):
        raise InvalidCoordinates(f"{label} out of range", {"field": label, "latitude": lat, "longitude": lng})

    area = service_area()
    if area is not None and not area.contains(lat, lng):
        raise InvalidCoordinates(
            f"{label} outside the delivery service area",
            {"field": label, "latitude": lat, "longitude": lng},
        )
    return coords


def compute_distance(origin: Coordinates, destination: Coordinates) -> float:
    """Great-circle distance in kilometres (haversine)."""
    validate_coordinates(origin, "origin")
    validate_coordinates(destination, "destination")

    lat1, lng1 = math.radians(origin.latitude), math.radians(origin.longitude)
    lat2, lng2 = math.radians(destination.latitude), math.radians(destination.longitude)
    d_lat = lat2 - lat1
    d_lng = lng2 - lng1

    a = math.sin(d_lat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(d_lng / 2) ** 2
    # Float error can push ``a`` a hair outside [0, 1] for antipodal points
    a = min(1.0, max(0.0, a))
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(a))


def round_half_up(value: Decimal) -> int:
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def fee_breakdown(rule, distance_km: float, weight_grams: float) -> FeeBreakdown:
    """Price a delivery with ``rule``.

    ``rule`` is anything exposing the fee-rule pricing attributes (usually a
    ``DeliveryFeeRule``).
    """
    weight_threshold = _dec(rule.weight_threshold, DEFAULT_WEIGHT_THRESHOLD_GRAMS)
    distance_threshold = _dec(rule.distance_threshold, DEFAULT_DISTANCE_THRESHOLD_KM)

    excess_weight = max(Decimal(0), _dec(weight_grams) - weight_threshold)
    excess_distance = max(Decimal(0), _dec(distance_km) - distance_threshold)

    weight_surcharge = _dec(rule.weight_surcharge_rate) * excess_weight
    distance_surcharge = _dec(rule.distance_surcharge_rate) * excess_distance
    raw_total = _dec(rule.base_fee) + weight_surcharge + distance_surcharge

    fee = round_half_up(raw_total)
    min_fee = rule.min_fee or 0
    fee = max(fee, min_fee)
    if rule.max_fee is not None:
        fee = min(fee, rule.max_fee)

    return FeeBreakdown(
        base_fee=int(rule.base_fee),
        weight_surcharge=weight_surcharge,
        distance_surcharge=distance_surcharge,
        raw_total=raw_total,
        final_fee=fee,
    )


def compute_fee(rule, distance_km: float, weight_grams: float) -> int:
    return fee_breakdown(rule, distance_km, weight_grams).final_fee


def _dec(value, default=0) -> Decimal:
    if value is None:
        value = default
    return Decimal(str(value))
