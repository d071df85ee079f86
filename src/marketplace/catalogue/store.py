from datetime import UTC, datetime

from protean.fields import DateTime, Identifier, String

from marketplace.domain import marketplace
from marketplace.shared.lookup import find_all


@marketplace.aggregate
class Store:
    owner_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    address_id = Identifier()  # origin of every delivery from this store
    created_at = DateTime(default=lambda: datetime.now(UTC))

    def is_owned_by(self, user_id) -> bool:
        return str(self.owner_id) == str(user_id)


def stores_owned_by(user_id) -> list[Store]:
    return find_all(Store, owner_id=str(user_id))
