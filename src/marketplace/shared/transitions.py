"""Transition-table helper shared by every status field."""

from enum import Enum

from marketplace.errors import IllegalStateTransition


def assert_transition(table: dict[Enum, set[Enum]], entity: str, current: str, target: Enum) -> None:
    """Fail with ``IllegalStateTransition`` unless ``current -> target`` is in ``table``."""
    current_status = type(target)(current)
    if target not in table.get(current_status, set()):
        raise IllegalStateTransition(entity, current_status.value, target.value)
