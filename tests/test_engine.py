from typing import get_args

import pytest

from profit_sharing.engine import (
    FORMULAS,
    UnknownFormulaTypeError,
    calculate,
    calculate_batch,
    list_formula_types,
)
from profit_sharing.models import (
    FORMULA_TYPES,
    FormulaType,
    GroupConfig,
    ProfitSharingInput,
    ProfitSharingRules,
    TierConfig,
)

# One fully-populated configuration per formula type. Each carries the
# whole superset of fields: formulas must ignore what they do not use.
SUPERSET = dict(
    fixed_amount=1500,
    percent_rate=12,
    tiers=(
        TierConfig(min_profit=0, max_profit=30000, percent_rate=4),
        TierConfig(min_profit=30000, max_profit=90000, percent_rate=9),
        TierConfig(min_profit=90000, percent_rate=15),
    ),
    minimum_profit=5000,
    maximum_share=20000,
    groups=(
        GroupConfig(group_name="Operadores", percent_rate=5),
        GroupConfig(group_name="Supervisores", percent_rate=3),
        GroupConfig(group_name="Gerentes", percent_rate=2),
    ),
    base_amount=800,
    increment_percent=1.5,
    increment_threshold=40000,
)

RULES_BY_TYPE = {
    ft: ProfitSharingRules(formula_type=ft, **SUPERSET) for ft in FORMULA_TYPES
}

PROFITS = [-50000.0, -1.0, 0.0, 0.01, 4999.0, 5000.0, 30000.0, 80000.0, 250000.0]


def make_input(
    net_profit: float, rules: ProfitSharingRules, project_id: str = "p-1"
) -> ProfitSharingInput:
    return ProfitSharingInput(
        project_id=project_id,
        project_name=f"Project {project_id}",
        total_income=max(net_profit, 0.0),
        total_cost=max(-net_profit, 0.0),
        net_profit=net_profit,
        rules=rules,
    )


def test_registry_covers_every_formula_type() -> None:
    assert set(FORMULAS) == set(FORMULA_TYPES)
    assert len(FORMULAS) == 7


def test_formula_types_follow_literal_alias() -> None:
    assert FORMULA_TYPES == get_args(FormulaType)
    assert FORMULA_TYPES[0] == "FIXED_ONLY"
    assert FORMULA_TYPES[-1] == "DYNAMIC"


@pytest.mark.parametrize("formula_type", FORMULA_TYPES)
def test_calculate_dispatches_on_formula_type(formula_type: str) -> None:
    result = calculate(make_input(80000, RULES_BY_TYPE[formula_type]))

    assert result.formula_type == formula_type
    assert result.project_id == "p-1"
    assert result.project_name == "Project p-1"
    assert result.net_profit == 80000
    assert result.calculation_details


def test_calculate_trusts_given_net_profit() -> None:
    """net_profit is never recomputed from income and cost."""
    inp = ProfitSharingInput(
        project_id="p-1",
        project_name="Project",
        total_income=1.0,
        total_cost=1.0,
        net_profit=50000.0,
        rules=ProfitSharingRules(formula_type="PERCENT_SIMPLE", percent_rate=10),
    )
    assert calculate(inp).total_share == pytest.approx(5000)


def test_unknown_formula_type_raises() -> None:
    inp = make_input(50000, ProfitSharingRules(formula_type="BOGUS"))

    with pytest.raises(UnknownFormulaTypeError) as excinfo:
        calculate(inp)

    assert excinfo.value.formula_type == "BOGUS"
    assert isinstance(excinfo.value, ValueError)
    assert "BOGUS" in str(excinfo.value)


def test_batch_preserves_input_order() -> None:
    inputs = [
        make_input(10000, RULES_BY_TYPE["PERCENT_SIMPLE"], "a"),
        make_input(20000, RULES_BY_TYPE["GROUPED"], "b"),
        make_input(-5, RULES_BY_TYPE["DYNAMIC"], "c"),
    ]
    results = calculate_batch(inputs)

    assert [r.project_id for r in results] == ["a", "b", "c"]
    assert results[0].total_share == pytest.approx(1200)
    assert results[1].total_share == pytest.approx(2000)
    assert results[2].total_share == 0


def test_batch_fails_as_a_whole_on_unknown_formula_type() -> None:
    inputs = [
        make_input(10000, RULES_BY_TYPE["PERCENT_SIMPLE"], "a"),
        make_input(10000, ProfitSharingRules(formula_type="BOGUS"), "b"),
        make_input(10000, RULES_BY_TYPE["FIXED_ONLY"], "c"),
    ]
    with pytest.raises(UnknownFormulaTypeError):
        calculate_batch(inputs)


def test_batch_of_nothing() -> None:
    assert calculate_batch([]) == []


def test_list_formula_types_catalog() -> None:
    catalog = list_formula_types()

    assert [f.type for f in catalog] == list(FORMULA_TYPES)
    for f in catalog:
        assert f.label
        assert f.description


# ---------------------------------------------------------------------------
# Properties over all formulas
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("formula_type", FORMULA_TYPES)
@pytest.mark.parametrize("net_profit", PROFITS)
def test_breakdown_adds_up_to_total_share(formula_type: str, net_profit: float) -> None:
    result = calculate(make_input(net_profit, RULES_BY_TYPE[formula_type]))
    assert sum(b.amount for b in result.breakdown) == pytest.approx(result.total_share)


@pytest.mark.parametrize("formula_type", FORMULA_TYPES)
@pytest.mark.parametrize("net_profit", [-250000.0, -1.0, 0.0])
def test_no_share_without_profit(formula_type: str, net_profit: float) -> None:
    result = calculate(make_input(net_profit, RULES_BY_TYPE[formula_type]))
    assert result.total_share == 0


def test_tiered_is_monotonic() -> None:
    rules = RULES_BY_TYPE["TIERED"]
    shares = [
        calculate(make_input(p, rules)).total_share
        for p in range(0, 200001, 2500)
    ]
    assert all(b >= a for a, b in zip(shares, shares[1:]))


@pytest.mark.parametrize("net_profit", [0.0, 1.0, 12345.67, 50000.0, 1e7])
@pytest.mark.parametrize("rate", [0.0, 2.5, 10.0, 100.0])
def test_single_open_tier_matches_percent_simple(net_profit: float, rate: float) -> None:
    tiered = ProfitSharingRules(
        formula_type="TIERED",
        tiers=(TierConfig(min_profit=0, max_profit=None, percent_rate=rate),),
    )
    simple = ProfitSharingRules(formula_type="PERCENT_SIMPLE", percent_rate=rate)

    assert calculate(make_input(net_profit, tiered)).total_share == pytest.approx(
        calculate(make_input(net_profit, simple)).total_share
    )


@pytest.mark.parametrize("net_profit", PROFITS)
def test_special_formula_minimum_and_cap(net_profit: float) -> None:
    rules = RULES_BY_TYPE["SPECIAL_FORMULA"]
    result = calculate(make_input(net_profit, rules))

    if net_profit < rules.minimum_profit:
        assert result.total_share == 0
    else:
        assert result.total_share <= rules.maximum_share


@pytest.mark.parametrize("net_profit", [0.01, 5000.0, 80000.0, 250000.0])
def test_grouped_total_is_sum_of_rates(net_profit: float) -> None:
    rules = RULES_BY_TYPE["GROUPED"]
    expected = net_profit * sum(g.percent_rate for g in rules.groups) / 100
    assert calculate(make_input(net_profit, rules)).total_share == pytest.approx(
        expected
    )


@pytest.mark.parametrize("net_profit", [0.01, 1000.0, 39999.99])
def test_dynamic_pays_base_below_threshold(net_profit: float) -> None:
    rules = RULES_BY_TYPE["DYNAMIC"]
    assert calculate(make_input(net_profit, rules)).total_share == rules.base_amount


def test_dynamic_pays_more_than_base_from_threshold() -> None:
    rules = RULES_BY_TYPE["DYNAMIC"]
    assert calculate(make_input(40000, rules)).total_share > rules.base_amount
