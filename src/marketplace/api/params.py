"""Query-string parsing that accepts both ``perPage`` and ``per_page``.

FastAPI binds a query parameter to a single name, so search endpoints read
the raw query string into a ``CamelModel``, which validates by alias or by
field name.
"""

from fastapi import Request
from pydantic import ValidationError as SchemaValidationError

from marketplace.errors import ValidationFailed


def query_of(model):
    """Dependency that validates the request's query string as ``model``."""

    def _parse(request: Request):
        try:
            return model.model_validate(dict(request.query_params))
        except SchemaValidationError as exc:
            errors = [{"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]} for err in exc.errors()]
            raise ValidationFailed("Invalid query parameters", {"errors": errors}) from None

    return _parse
