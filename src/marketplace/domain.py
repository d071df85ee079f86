"""Marketplace domain — multi-vendor order fulfillment.

Splits buyer checkouts into per-store sub-orders, prices delivery from
configured fee rules, and drives orders, shipments and payments through
their state machines. Uses CQRS aggregates; every command handler runs in
its own unit of work, so multi-aggregate operations commit or roll back
together.
"""

from protean.domain import Domain

marketplace = Domain(name="marketplace")
