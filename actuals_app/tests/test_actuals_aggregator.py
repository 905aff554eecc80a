from decimal import Decimal
from types import SimpleNamespace

from actuals_app.db.enums import CategoryGroup
from actuals_app.services.actuals_aggregator import compute_totals, compute_variance, compute_group_breakdown


def _cost(total_cost, group=CategoryGroup.other):
    return SimpleNamespace(total_cost=Decimal(str(total_cost)), group=group)


def _paid(total_paid, group=CategoryGroup.mep):
    return SimpleNamespace(total_paid=Decimal(str(total_paid)), group=group)


def test_empty_collections_total_zero():
    totals = compute_totals([], [], [])

    assert totals.total_labor_cost == 0
    assert totals.total_material_cost == 0
    assert totals.total_subcontractor_cost == 0
    assert totals.total_actual_cost == 0


def test_subcontractor_total_uses_paid_not_contract():
    sub = SimpleNamespace(total_paid=Decimal("250"), contract_amount=Decimal("9000"))
    totals = compute_totals([_cost(100)], [_cost(40)], [sub])

    assert totals.total_subcontractor_cost == Decimal("250")
    assert totals.total_actual_cost == Decimal("390")


def test_totals_independent_of_order():
    amounts = ["0.1", "0.2", "0.3", "1234.56", "0.07"]
    forward = compute_totals([_cost(a) for a in amounts], [], [])
    backward = compute_totals([_cost(a) for a in reversed(amounts)], [], [])

    assert forward == backward
    assert forward.total_labor_cost == Decimal("1235.23")


def test_float_amounts_do_not_leak_binary_error():
    entries = [SimpleNamespace(total_cost=0.1), SimpleNamespace(total_cost=0.2)]
    totals = compute_totals(entries, [], [])

    assert totals.total_labor_cost == Decimal("0.3")


def test_variance_over_budget():
    result = compute_variance(Decimal("1200"), Decimal("1000"))

    assert result.variance == Decimal("200")
    assert result.variance_percentage == Decimal("20")


def test_variance_under_budget_is_negative():
    result = compute_variance(Decimal("750"), Decimal("1000"))

    assert result.variance == Decimal("-250")
    assert result.variance_percentage == Decimal("-25")


def test_variance_percentage_zero_when_no_estimate():
    for actual in (Decimal("0"), Decimal("100"), Decimal("99999.99")):
        result = compute_variance(actual, Decimal("0"))
        assert result.variance == actual
        assert result.variance_percentage == 0


def test_variance_percentage_zero_when_estimate_negative():
    result = compute_variance(Decimal("100"), Decimal("-50"))

    assert result.variance == Decimal("150")
    assert result.variance_percentage == 0


def test_group_breakdown_covers_every_group():
    breakdown = compute_group_breakdown(
        [_cost(100, CategoryGroup.mep), _cost(50, CategoryGroup.interior)],
        [_cost(30, CategoryGroup.mep)],
        [_paid(20, CategoryGroup.exterior)],
    )

    assert set(breakdown) == set(CategoryGroup)
    assert breakdown[CategoryGroup.mep] == Decimal("130")
    assert breakdown[CategoryGroup.interior] == Decimal("50")
    assert breakdown[CategoryGroup.exterior] == Decimal("20")
    assert breakdown[CategoryGroup.admin] == 0
