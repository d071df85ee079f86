"""Estimated delivery days per destination region."""

import unicodedata
from dataclasses import dataclass
from decimal import Decimal

from marketplace.delivery.fee_rule import DeliveryType, VehicleType
from marketplace.delivery.geo import round_half_up


@dataclass(frozen=True)
class RegionSchedule:
    express_threshold_km: float
    standard_threshold_km: float
    express_short_days: int
    express_long_days: int
    standard_short_days: int
    standard_long_days: int
    region_modifier: int


REGION_SCHEDULES = {
    "CONAKRY": RegionSchedule(15, 20, 1, 2, 2, 3, 0),
    "BOKE": RegionSchedule(20, 30, 2, 4, 3, 5, 1),
    "KINDIA": RegionSchedule(20, 25, 2, 3, 2, 4, 0),
    "LABE": RegionSchedule(25, 35, 2, 4, 3, 6, 1),
    "MAMOU": RegionSchedule(20, 30, 2, 4, 3, 5, 1),
    "FARANAH": RegionSchedule(25, 40, 2, 5, 4, 6, 2),
    "KANKAN": RegionSchedule(25, 40, 2, 5, 4, 6, 2),
    "NZEREKORE": RegionSchedule(30, 50, 3, 6, 4, 7, 2),
    "DEFAULT": RegionSchedule(20, 30, 2, 4, 3, 5, 0),
}

VEHICLE_DAY_ADJUSTMENT = {
    VehicleType.MOTO.value: Decimal("-0.5"),
    VehicleType.CAR.value: Decimal("0"),
    VehicleType.TRUCK.value: Decimal("0.5"),
}


def normalize_region(region: str | None) -> str:
    """``"Labé"`` -> ``"LABE"``, ``"N'Zérékoré"`` -> ``"NZEREKORE"``."""
    if not region:
        return "DEFAULT"
    ascii_name = unicodedata.normalize("NFKD", region).encode("ascii", "ignore").decode()
    key = "".join(ch for ch in ascii_name.upper() if ch.isalpha())
    return key if key in REGION_SCHEDULES else "DEFAULT"


def estimated_delivery_days(
    region: str | None,
    distance_km: float,
    delivery_type: str,
    vehicle_type: str | None = None,
    preparation_days: int = 0,
) -> int:
    schedule = REGION_SCHEDULES[normalize_region(region)]
    if delivery_type == DeliveryType.EXPRESS.value:
        short = distance_km <= schedule.express_threshold_km
        base = schedule.express_short_days if short else schedule.express_long_days
    else:
        short = distance_km <= schedule.standard_threshold_km
        base = schedule.standard_short_days if short else schedule.standard_long_days

    total = (
        Decimal(base)
        + schedule.region_modifier
        + VEHICLE_DAY_ADJUSTMENT.get(vehicle_type or "", Decimal("0"))
        + preparation_days
    )
    return max(1, round_half_up(total))
