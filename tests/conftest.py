import os
from pathlib import Path
from types import SimpleNamespace

import pytest


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_sessionstart(session):
    """Pytest hook to run before collecting tests.

    Fetch and activate the domain by pushing the associated domain_context. The activated domain can then be referred to elsewhere as `current_domain`
    """
    os.environ["PROTEAN_ENV"] = session.config.option.env
    os.environ.pop("DELIVERY_SERVICE_AREA", None)

    from marketplace.domain import marketplace

    marketplace.init()
    marketplace.domain_context().push()


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = Path(item.fspath)

        if "/domain/" in str(test_path):
            item.add_marker(pytest.mark.domain)
        elif "/application/" in str(test_path) or "/bdd/" in str(test_path):
            item.add_marker(pytest.mark.application)
        elif "/integration/" in str(test_path):
            item.add_marker(pytest.mark.integration)
            # Integration tests are often slower
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


@pytest.fixture(scope="session", autouse=True)
def setup_db(request):
    from marketplace.domain import marketplace
    from marketplace.utils.db import drop_db, setup_db

    setup_db(marketplace)

    yield

    drop_db(marketplace)


@pytest.fixture(scope="session")
def marketplace_bed():
    from marketplace.domain import marketplace
    from protean.integrations.pytest import DomainFixture

    bed = DomainFixture(marketplace)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(marketplace_bed):
    with marketplace_bed.domain_context():
        yield


@pytest.fixture(autouse=True)
def run_around_tests(_ctx):
    """Fixture to automatically cleanup infrastructure after every test"""
    yield

    from marketplace.payments.gateway import reset_gateway
    from protean import current_domain

    # Clear all databases
    for _, provider in current_domain.providers.items():
        provider._data_reset()

    # Drain event stores
    current_domain.event_store.store._data_reset()

    reset_gateway()


# ---------------------------------------------------------------------------
# Callers
# ---------------------------------------------------------------------------
@pytest.fixture
def buyer():
    from marketplace.identity.access import Caller

    return Caller.of("buyer-1", "buyer")


@pytest.fixture
def other_buyer():
    from marketplace.identity.access import Caller

    return Caller.of("buyer-2", "buyer")


@pytest.fixture
def store_owner():
    from marketplace.identity.access import Caller

    return Caller.of("owner-1", "store")


@pytest.fixture
def other_store_owner():
    from marketplace.identity.access import Caller

    return Caller.of("owner-2", "store")


@pytest.fixture
def admin():
    from marketplace.identity.access import Caller

    return Caller.of("admin-1", "admin")


@pytest.fixture
def manager():
    from marketplace.identity.access import Caller

    return Caller.of("manager-1", "manager")


@pytest.fixture
def driver_caller():
    from marketplace.identity.access import Caller

    return Caller.of("driver-user-1", "driver")


# ---------------------------------------------------------------------------
# Marketplace world: two stores in Conakry, a buyer address, fee rules,
# products and drivers.
# ---------------------------------------------------------------------------
# Kaloum, Ratoma and Matam are a few kilometres apart
KALOUM = (9.5092, -13.7122)
RATOMA = (9.6412, -13.6297)
MATAM = (9.5370, -13.6785)


@pytest.fixture
def world():
    from marketplace.catalogue.address import Address
    from marketplace.catalogue.product import Product, ProductVariant
    from marketplace.catalogue.store import Store
    from marketplace.delivery.fee_rule import DeliveryFeeRule
    from marketplace.logistics.driver import Driver
    from protean import current_domain

    def save(aggregate):
        current_domain.repository_for(type(aggregate)).add(aggregate)
        return aggregate

    kaloum = save(Address.create(user_id="owner-1", commune="Kaloum", region="Conakry", latitude=KALOUM[0], longitude=KALOUM[1]))
    ratoma = save(Address.create(user_id="owner-2", commune="Ratoma", region="Conakry", latitude=RATOMA[0], longitude=RATOMA[1]))
    home = save(Address.create(user_id="buyer-1", commune="Matam", region="Conakry", latitude=MATAM[0], longitude=MATAM[1]))
    unknown = save(Address.create(user_id="buyer-1", commune="Dixinn", region="Conakry"))  # (0, 0)

    store_a = save(Store(owner_id="owner-1", name="Boutique Kaloum", address_id=str(kaloum.id)))
    store_b = save(Store(owner_id="owner-2", name="Marché Ratoma", address_id=str(ratoma.id)))

    standard = save(
        DeliveryFeeRule.create(
            delivery_type="STANDARD",
            weight_max=30000,
            distance_max=100.0,
            base_fee=10000,
            weight_surcharge_rate=2.0,
            distance_surcharge_rate=500.0,
            min_fee=5000,
            max_fee=60000,
        )
    )
    standard_light = save(
        DeliveryFeeRule.create(
            delivery_type="STANDARD",
            weight_max=5000,
            distance_max=50.0,
            base_fee=8000,
            weight_surcharge_rate=2.0,
            distance_surcharge_rate=500.0,
            min_fee=5000,
        )
    )
    express_moto = save(
        DeliveryFeeRule.create(
            delivery_type="EXPRESS",
            vehicle_type="MOTO",
            weight_max=5000,
            distance_max=30.0,
            base_fee=15000,
            distance_surcharge_rate=800.0,
        )
    )

    shirt = save(Product(store_id=str(store_a.id), name="Chemise bazin", price=50000, weight=500, available_stock=10))
    rice = save(Product(store_id=str(store_b.id), name="Riz 5kg", price=20000, weight=5000, available_stock=5))
    sandals = Product(store_id=str(store_a.id), name="Sandales", price=15000, weight=400, available_stock=0)
    sandals.add_variants(ProductVariant(name="Taille", value="42", price_adjustment=2000, available_stock=3))
    save(sandals)

    driver_a1 = save(Driver(user_id="driver-user-1", store_id=str(store_a.id), name="Mamadou", vehicle_type="MOTO"))
    driver_a2 = save(Driver(user_id="driver-user-2", store_id=str(store_a.id), name="Fatoumata", vehicle_type="CAR"))
    driver_b1 = save(Driver(user_id="driver-user-3", store_id=str(store_b.id), name="Ibrahima", vehicle_type="MOTO"))

    return SimpleNamespace(
        kaloum=kaloum,
        ratoma=ratoma,
        home=home,
        unknown_address=unknown,
        store_a=store_a,
        store_b=store_b,
        standard_rule=standard,
        standard_light_rule=standard_light,
        express_moto_rule=express_moto,
        shirt=shirt,
        rice=rice,
        sandals=sandals,
        sandals_42=sandals.variants[0],
        driver_a1=driver_a1,
        driver_a2=driver_a2,
        driver_b1=driver_b1,
    )


@pytest.fixture
def place_order(world, buyer):
    """Place an order through the command pipeline and return its id."""
    import json

    from marketplace.ordering.creation import CreateOrder
    from protean import current_domain

    def _place(items=None, caller=None, **overrides):
        caller = caller or buyer
        items = items if items is not None else [{"product_id": str(world.shirt.id), "quantity": 2}]
        fields = {
            "caller_id": caller.user_id,
            "caller_role": caller.role.value,
            "destination_address_id": str(world.home.id),
            "items": json.dumps(items),
            "payment_method": "orange_money",
        }
        fields.update(overrides)
        return current_domain.process(CreateOrder(**fields), asynchronous=False)

    return _place
