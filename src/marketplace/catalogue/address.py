"""Address aggregate.

Coordinates are geocoded upstream. They default to (0, 0), which pricing
treats as unknown and rejects with ``InvalidCoordinates``.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.fields import DateTime, Float, Identifier, String

from marketplace.delivery.geo import Coordinates
from marketplace.domain import marketplace


class AddressKind(Enum):
    URBAN = "urban"
    RURAL = "rural"


@marketplace.aggregate
class Address:
    user_id = Identifier(required=True)
    kind = String(choices=AddressKind, default=AddressKind.URBAN.value)
    # Urban
    commune = String(max_length=100)
    street = String(max_length=255)
    # Rural
    sub_prefecture = String(max_length=100)
    prefecture = String(max_length=100)
    # Both
    district = String(max_length=100)
    landmark = String(max_length=255)
    region = String(max_length=100)
    postal_code = String(max_length=20)
    formatted_address = String(max_length=500)
    latitude = Float(default=0.0)
    longitude = Float(default=0.0)
    created_at = DateTime(default=lambda: datetime.now(UTC))

    @classmethod
    def create(cls, **attributes):
        address = cls(**attributes)
        if not address.formatted_address:
            address.formatted_address = address.compose_formatted()
        return address

    def compose_formatted(self) -> str:
        if self.kind == AddressKind.RURAL.value:
            parts = [self.landmark, self.district, self.sub_prefecture, self.prefecture, self.region]
        else:
            parts = [self.street, self.landmark, self.district, self.commune, self.region]
        return ", ".join(p for p in parts if p)

    @property
    def coordinates(self) -> Coordinates:
        return Coordinates(latitude=self.latitude, longitude=self.longitude)

    def is_owned_by(self, user_id) -> bool:
        return str(self.user_id) == str(user_id)
