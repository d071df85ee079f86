"""Caller identity and the authorization matrix.

The caller is resolved upstream and passed explicitly into every operation.
Role checks go through ``require`` against a single capability table;
ownership checks (buyer owns order, user owns store) are done by the
operations themselves with ``ensure``.
"""

from dataclasses import dataclass
from enum import Enum

from marketplace.errors import NotAuthorized


class Role(Enum):
    BUYER = "buyer"
    STORE = "store"
    DRIVER = "driver"
    ADMIN = "admin"
    MANAGER = "manager"


class Capability(Enum):
    PLACE_ORDER = "place_order"
    VIEW_ORDERS = "view_orders"
    VIEW_ANY_ORDER = "view_any_order"
    CANCEL_ANY_ORDER = "cancel_any_order"
    UPDATE_ORDER_STATUS = "update_order_status"
    UPDATE_PAYMENT_STATUS = "update_payment_status"
    ESTIMATE_DELIVERY = "estimate_delivery"
    MANAGE_DELIVERY_RULES = "manage_delivery_rules"
    MANAGE_STORE_ORDERS = "manage_store_orders"
    MANAGE_SHIPMENTS = "manage_shipments"
    MANAGE_ANY_SHIPMENT = "manage_any_shipment"
    RECORD_TRACKING = "record_tracking"
    SEARCH_SHIPMENTS = "search_shipments"
    SEARCH_STORE_ORDERS = "search_store_orders"
    VIEW_PLATFORM_OVERVIEW = "view_platform_overview"


_STAFF = frozenset({Role.ADMIN, Role.MANAGER})
_EVERYONE = frozenset(Role)

_GRANTS: dict[Capability, frozenset[Role]] = {
    Capability.PLACE_ORDER: frozenset({Role.BUYER}) | _STAFF,
    Capability.VIEW_ORDERS: _EVERYONE,
    Capability.VIEW_ANY_ORDER: _STAFF,
    Capability.CANCEL_ANY_ORDER: _STAFF,
    Capability.UPDATE_ORDER_STATUS: _STAFF,
    Capability.UPDATE_PAYMENT_STATUS: frozenset({Role.ADMIN}),
    Capability.ESTIMATE_DELIVERY: _EVERYONE,
    Capability.MANAGE_DELIVERY_RULES: _STAFF,
    Capability.MANAGE_STORE_ORDERS: frozenset({Role.STORE}) | _STAFF,
    Capability.MANAGE_SHIPMENTS: frozenset({Role.STORE, Role.ADMIN}),
    Capability.MANAGE_ANY_SHIPMENT: frozenset({Role.ADMIN}),
    Capability.RECORD_TRACKING: frozenset({Role.STORE}) | _STAFF,
    Capability.SEARCH_SHIPMENTS: frozenset({Role.STORE, Role.DRIVER}) | _STAFF,
    Capability.SEARCH_STORE_ORDERS: frozenset({Role.STORE}),
    Capability.VIEW_PLATFORM_OVERVIEW: _STAFF,
}


@dataclass(frozen=True)
class Caller:
    user_id: str
    role: Role

    @classmethod
    def of(cls, user_id: str, role: str | Role) -> "Caller":
        return cls(user_id=str(user_id), role=role if isinstance(role, Role) else Role(role))

    @classmethod
    def from_command(cls, command) -> "Caller":
        """Build the caller carried on a command (``caller_id`` / ``caller_role``)."""
        return cls.of(command.caller_id, command.caller_role)

    @property
    def is_staff(self) -> bool:
        return self.role in _STAFF

    def can(self, capability: Capability) -> bool:
        return self.role in _GRANTS[capability]


def require(caller: Caller, capability: Capability) -> None:
    if not caller.can(capability):
        raise NotAuthorized(
            f"Role '{caller.role.value}' may not {capability.value.replace('_', ' ')}",
            {"role": caller.role.value, "capability": capability.value},
        )


def ensure(condition: bool, message: str) -> None:
    """Raise ``NotAuthorized`` unless an ownership condition holds."""
    if not condition:
        raise NotAuthorized(message)
