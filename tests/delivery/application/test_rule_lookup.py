"""Rule resolution over a repository holding more rules than one default page."""

from marketplace.delivery.fee_rule import DeliveryFeeRule
from marketplace.delivery.resolver import active_rules, find_rule
from marketplace.delivery.rules import list_rules
from protean import current_domain

BULK = 120


def _add(**fields):
    values = {"delivery_type": "STANDARD", "distance_max": 50.0, "base_fee": 9000}
    values.update(fields)
    rule = DeliveryFeeRule.create(**values)
    current_domain.repository_for(DeliveryFeeRule).add(rule)
    return rule


def test_fitting_rule_after_many_small_bands_is_found():
    for grams in range(BULK):
        _add(weight_max=100 + grams)
    fitting = _add(weight_max=5000)

    assert find_rule("STANDARD", None, 500, 5.0).id == fitting.id


def test_tightest_band_wins_even_when_stored_last():
    for grams in range(BULK):
        _add(weight_max=20000 + grams)
    tightest = _add(weight_max=1000)

    assert find_rule("STANDARD", None, 500, 5.0).id == tightest.id


def test_every_active_rule_is_read(admin):
    for grams in range(BULK):
        _add(weight_max=1000 + grams)

    assert len(active_rules()) == BULK
    assert len(list_rules(admin)) == BULK
