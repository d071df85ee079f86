"""Runtime settings read from the process environment.

Protean infrastructure (databases, brokers, event store) is configured in
``domain.toml``; the values here are business knobs that operators tune per
deployment. They are read on every call so tests can override them with
``monkeypatch.setenv``.
"""

import os
from dataclasses import dataclass
from decimal import Decimal

CURRENCY = "GNF"


@dataclass(frozen=True)
class ServiceArea:
    """Bounding box delivery coordinates must fall into."""

    lat_min: float
    lat_max: float
    lng_min: float
    lng_max: float

    def contains(self, latitude: float, longitude: float) -> bool:
        return self.lat_min <= latitude <= self.lat_max and self.lng_min <= longitude <= self.lng_max


def service_area() -> ServiceArea | None:
    """Return the configured service area, or None when unrestricted.

    Format: ``DELIVERY_SERVICE_AREA="lat_min,lat_max,lng_min,lng_max"``.
    """
    raw = os.environ.get("DELIVERY_SERVICE_AREA", "").strip()
    if not raw:
        return None
    parts = [float(p) for p in raw.split(",")]
    if len(parts) != 4:
        raise ValueError(f"DELIVERY_SERVICE_AREA needs 4 comma-separated numbers, got {raw!r}")
    return ServiceArea(*parts)


def platform_fee_rate() -> Decimal:
    return Decimal(os.environ.get("PLATFORM_FEE_RATE", "0.05"))


def store_commission_rate() -> Decimal:
    return Decimal(os.environ.get("STORE_COMMISSION_RATE", "0.10"))


def is_production() -> bool:
    return os.environ.get("PROTEAN_ENV", "") == "production"
