"""Delivery fee rule administration — commands, handlers and listing."""

import structlog
from protean import handle
from protean.fields import Boolean, Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from marketplace.delivery.fee_rule import DeliveryFeeRule, DeliveryType, VehicleType
from marketplace.domain import marketplace
from marketplace.identity.access import Caller, Capability, Role, require
from marketplace.shared.lookup import every, load

logger = structlog.get_logger(__name__)

_RULE_FIELDS = (
    "delivery_type",
    "vehicle_type",
    "weight_max",
    "distance_max",
    "base_fee",
    "weight_surcharge_rate",
    "distance_surcharge_rate",
    "weight_threshold",
    "distance_threshold",
    "min_fee",
    "max_fee",
    "is_active",
)


@marketplace.command(part_of="DeliveryFeeRule")
class CreateDeliveryFeeRule:
    delivery_type = String(required=True, choices=DeliveryType)
    vehicle_type = String(choices=VehicleType)
    weight_max = Integer(required=True, min_value=0)
    distance_max = Float(required=True, min_value=0.0)
    base_fee = Integer(required=True, min_value=0)
    weight_surcharge_rate = Float(min_value=0.0)
    distance_surcharge_rate = Float(min_value=0.0)
    weight_threshold = Integer(min_value=0)
    distance_threshold = Float(min_value=0.0)
    min_fee = Integer(min_value=0)
    max_fee = Integer(min_value=0)
    is_active = Boolean(default=True)
    caller_id = Identifier(required=True)
    caller_role = String(required=True, choices=Role)


@marketplace.command(part_of="DeliveryFeeRule")
class UpdateDeliveryFeeRule:
    """Partial update; omitted fields keep their value.

    ``vehicle_agnostic`` clears the vehicle type so the rule matches any vehicle.
    """

    rule_id = Identifier(required=True)
    delivery_type = String(choices=DeliveryType)
    vehicle_type = String(choices=VehicleType)
    vehicle_agnostic = Boolean(default=False)
    weight_max = Integer(min_value=0)
    distance_max = Float(min_value=0.0)
    base_fee = Integer(min_value=0)
    weight_surcharge_rate = Float(min_value=0.0)
    distance_surcharge_rate = Float(min_value=0.0)
    weight_threshold = Integer(min_value=0)
    distance_threshold = Float(min_value=0.0)
    min_fee = Integer(min_value=0)
    max_fee = Integer(min_value=0)
    is_active = Boolean()
    caller_id = Identifier(required=True)
    caller_role = String(required=True, choices=Role)


def _provided(command) -> dict:
    values = {name: getattr(command, name) for name in _RULE_FIELDS}
    return {name: value for name, value in values.items() if value is not None}


@marketplace.command_handler(part_of=DeliveryFeeRule)
class DeliveryFeeRuleHandler:
    @handle(CreateDeliveryFeeRule)
    def create_rule(self, command):
        require(Caller.from_command(command), Capability.MANAGE_DELIVERY_RULES)
        rule = DeliveryFeeRule.create(**_provided(command))
        current_domain.repository_for(DeliveryFeeRule).add(rule)
        logger.info("Delivery fee rule created", rule_id=str(rule.id), rule=rule.describe())
        return str(rule.id)

    @handle(UpdateDeliveryFeeRule)
    def update_rule(self, command):
        require(Caller.from_command(command), Capability.MANAGE_DELIVERY_RULES)
        rule = load(DeliveryFeeRule, command.rule_id, "Delivery fee rule")

        changes = _provided(command)
        if command.vehicle_agnostic:
            changes["vehicle_type"] = None
        rule.revise(**changes)

        current_domain.repository_for(DeliveryFeeRule).add(rule)
        logger.info("Delivery fee rule updated", rule_id=str(rule.id), changed=sorted(changes))
        return str(rule.id)


def list_rules(caller: Caller, include_inactive: bool = False) -> list[DeliveryFeeRule]:
    require(caller, Capability.MANAGE_DELIVERY_RULES)
    queryset = current_domain.repository_for(DeliveryFeeRule)._dao.query
    if not include_inactive:
        queryset = queryset.filter(is_active=True)
    rules = every(queryset)
    return sorted(rules, key=lambda r: (r.delivery_type, r.weight_max, r.distance_max, r.base_fee))
