"""Repository lookups that surface missing aggregates as ``NotFound``."""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from marketplace.errors import NotFound


def load(aggregate_cls, identifier, label: str | None = None):
    label = label or aggregate_cls.__name__
    if not identifier:
        raise NotFound(f"{label} not specified", {"entity": label})
    try:
        return current_domain.repository_for(aggregate_cls).get(identifier)
    except ObjectNotFoundError:
        raise NotFound(f"{label} {identifier} not found", {"entity": label, "id": str(identifier)}) from None


def every(queryset) -> list:
    """Evaluate ``queryset`` without the aggregate's default page limit.

    Cloning a queryset restores the default limit, so ``limit(None)`` must be
    the last step before ``all()``.
    """
    return queryset.limit(None).all().items


def find_all(aggregate_cls, **filters) -> list:
    queryset = current_domain.repository_for(aggregate_cls)._dao.query
    if filters:
        queryset = queryset.filter(**filters)
    return every(queryset)
