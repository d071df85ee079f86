import pytest
from marketplace.errors import NotAuthorized
from marketplace.identity.access import Caller, Capability, Role, ensure, require


class TestCaller:
    def test_of_accepts_role_strings(self):
        caller = Caller.of("u-1", "admin")
        assert caller.role == Role.ADMIN
        assert caller.is_staff

    def test_unknown_role_is_rejected(self):
        with pytest.raises(ValueError):
            Caller.of("u-1", "superuser")

    @pytest.mark.parametrize("role", ["buyer", "store", "driver"])
    def test_non_staff_roles(self, role):
        assert not Caller.of("u-1", role).is_staff


@pytest.mark.parametrize(
    "capability,allowed",
    [
        (Capability.PLACE_ORDER, {"buyer", "admin", "manager"}),
        (Capability.UPDATE_ORDER_STATUS, {"admin", "manager"}),
        (Capability.UPDATE_PAYMENT_STATUS, {"admin"}),
        (Capability.MANAGE_DELIVERY_RULES, {"admin", "manager"}),
        (Capability.MANAGE_SHIPMENTS, {"store", "admin"}),
        (Capability.RECORD_TRACKING, {"store", "admin", "manager"}),
        (Capability.SEARCH_SHIPMENTS, {"store", "driver", "admin", "manager"}),
        (Capability.SEARCH_STORE_ORDERS, {"store"}),
        (Capability.ESTIMATE_DELIVERY, {"buyer", "store", "driver", "admin", "manager"}),
    ],
)
def test_capability_grants(capability, allowed):
    granted = {role.value for role in Role if Caller.of("u-1", role).can(capability)}
    assert granted == allowed


def test_require_raises_authorization_error():
    with pytest.raises(NotAuthorized) as exc:
        require(Caller.of("u-1", "driver"), Capability.PLACE_ORDER)
    assert exc.value.code == "AUTHORIZATION_ERROR"
    assert exc.value.http_status == 403
    assert exc.value.details == {"role": "driver", "capability": "place_order"}


def test_ensure():
    ensure(True, "never raised")
    with pytest.raises(NotAuthorized, match="not yours"):
        ensure(False, "not yours")
