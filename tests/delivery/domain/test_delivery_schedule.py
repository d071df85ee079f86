import pytest
from marketplace.delivery.schedule import estimated_delivery_days, normalize_region


@pytest.mark.parametrize(
    "raw,expected",
    [("Conakry", "CONAKRY"), ("Labé", "LABE"), ("N'Zérékoré", "NZEREKORE"), (None, "DEFAULT"), ("Paris", "DEFAULT")],
)
def test_normalize_region(raw, expected):
    assert normalize_region(raw) == expected


def test_standard_short_and_long_distances():
    assert estimated_delivery_days("Conakry", 5.0, "STANDARD") == 2
    assert estimated_delivery_days("Conakry", 25.0, "STANDARD") == 3


def test_express_is_faster():
    assert estimated_delivery_days("Conakry", 5.0, "EXPRESS") == 1
    assert estimated_delivery_days("Conakry", 5.0, "EXPRESS") < estimated_delivery_days("Conakry", 5.0, "STANDARD")


def test_region_modifier_applies():
    assert estimated_delivery_days("Nzérékoré", 10.0, "STANDARD") == 6


def test_vehicle_adjustment_rounds_half_up():
    # 2 - 0.5 = 1.5 → 2 ; 2 + 0.5 = 2.5 → 3
    assert estimated_delivery_days("Conakry", 5.0, "STANDARD", "MOTO") == 2
    assert estimated_delivery_days("Conakry", 5.0, "STANDARD", "TRUCK") == 3


def test_never_below_one_day():
    assert estimated_delivery_days("Conakry", 1.0, "EXPRESS", "MOTO") == 1


def test_preparation_days_added():
    assert estimated_delivery_days("Conakry", 5.0, "STANDARD", preparation_days=2) == 4
