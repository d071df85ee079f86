"""DeliveryFeeRule aggregate — one configured pricing band.

A rule matches a (delivery type, vehicle type) pair for parcels up to
``weight_max`` grams travelling up to ``distance_max`` kilometres, and
prices them with ``marketplace.delivery.geo.compute_fee``.
"""

from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, Integer, String

from marketplace.delivery.geo import DEFAULT_DISTANCE_THRESHOLD_KM, DEFAULT_WEIGHT_THRESHOLD_GRAMS
from marketplace.domain import marketplace


class DeliveryType(Enum):
    STANDARD = "STANDARD"
    EXPRESS = "EXPRESS"


class VehicleType(Enum):
    MOTO = "MOTO"
    CAR = "CAR"
    TRUCK = "TRUCK"


DELIVERY_TYPE_LABELS = {
    DeliveryType.STANDARD.value: "Livraison Standard",
    DeliveryType.EXPRESS.value: "Livraison Express",
}

VEHICLE_TYPE_LABELS = {
    VehicleType.MOTO.value: "Moto",
    VehicleType.CAR.value: "Voiture",
    VehicleType.TRUCK.value: "Camion",
}


def vehicle_type_label(vehicle_type: str | None) -> str:
    return VEHICLE_TYPE_LABELS.get(vehicle_type or "", "Standard")


@marketplace.aggregate
class DeliveryFeeRule:
    delivery_type = String(required=True, choices=DeliveryType)
    vehicle_type = String(choices=VehicleType)  # None matches any vehicle
    weight_max = Integer(required=True, min_value=0)
    distance_max = Float(required=True, min_value=0.0)
    base_fee = Integer(required=True, min_value=0)
    weight_surcharge_rate = Float(default=0.0, min_value=0.0)
    distance_surcharge_rate = Float(default=0.0, min_value=0.0)
    weight_threshold = Integer(default=DEFAULT_WEIGHT_THRESHOLD_GRAMS, min_value=0)
    distance_threshold = Float(default=float(DEFAULT_DISTANCE_THRESHOLD_KM), min_value=0.0)
    min_fee = Integer(default=0, min_value=0)
    max_fee = Integer(min_value=0)
    is_active = Boolean(default=True)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def fee_bounds_must_be_ordered(self):
        if self.max_fee is not None and (self.min_fee or 0) > self.max_fee:
            raise ValidationError({"max_fee": ["Maximum fee cannot be lower than the minimum fee"]})

    @classmethod
    def create(cls, **attributes):
        now = datetime.now(UTC)
        return cls(created_at=now, updated_at=now, **attributes)

    def revise(self, **changes) -> None:
        """Apply several field changes at once; bounds are checked on the final state."""
        with atomic_change(self):
            for field, value in changes.items():
                setattr(self, field, value)
        self.updated_at = datetime.now(UTC)

    def fits(self, weight_grams: float, distance_km: float) -> bool:
        return weight_grams <= self.weight_max and distance_km <= self.distance_max

    def describe(self) -> str:
        vehicle = self.vehicle_type or "ANY"
        return f"{self.delivery_type}/{vehicle} <= {self.weight_max}g, {self.distance_max}km"
