"""Tracking pings — append-only position records for a shipment.

Each ping is its own aggregate so concurrent pings for the same shipment
never contend on a shared row. Pings are never updated or deleted.
"""

from datetime import UTC, datetime

import structlog
from protean import handle
from protean.fields import DateTime, Float, Identifier, String
from protean.utils.globals import current_domain

from marketplace.delivery.geo import Coordinates, validate_coordinates
from marketplace.domain import marketplace
from marketplace.errors import ValidationFailed
from marketplace.identity.access import Caller, Role
from marketplace.logistics.permissions import authorize_tracking
from marketplace.logistics.shipment import Shipment
from marketplace.shared.lookup import load

logger = structlog.get_logger(__name__)


@marketplace.aggregate
class TrackingPing:
    shipment_id = Identifier(required=True)
    latitude = Float(required=True)
    longitude = Float(required=True)
    recorded_by = Identifier()
    recorded_at = DateTime(required=True)


@marketplace.command(part_of="TrackingPing")
class AddTracking:
    shipment_id = Identifier(required=True)
    latitude = Float(required=True)
    longitude = Float(required=True)
    caller_id = Identifier(required=True)
    caller_role = String(required=True, choices=Role)


@marketplace.command_handler(part_of=TrackingPing)
class AddTrackingHandler:
    @handle(AddTracking)
    def add_tracking(self, command):
        caller = Caller.from_command(command)
        shipment = load(Shipment, command.shipment_id, "Shipment")
        authorize_tracking(caller, shipment)

        if not shipment.is_active:
            raise ValidationFailed(
                f"Tracking is closed for a {shipment.status} shipment",
                {"shipment_id": str(shipment.id), "status": shipment.status},
            )
        validate_coordinates(Coordinates(command.latitude, command.longitude), "tracking position")

        ping = TrackingPing(
            shipment_id=str(shipment.id),
            latitude=command.latitude,
            longitude=command.longitude,
            recorded_by=caller.user_id,
            recorded_at=datetime.now(UTC),
        )
        current_domain.repository_for(TrackingPing).add(ping)
        logger.debug("Tracking recorded", shipment_id=str(shipment.id), ping_id=str(ping.id))
        return str(ping.id)
