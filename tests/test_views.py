import math

import pytest

from profit_sharing.engine import calculate_batch
from profit_sharing.models import (
    FORMULA_TYPES,
    ProfitSharingInput,
    ProfitSharingRules,
    TierConfig,
)
from profit_sharing.views import (
    BREAKDOWN_COLUMNS,
    SUMMARY_COLUMNS,
    breakdown_to_dataframe,
    formula_types_to_dataframe,
    results_to_dataframe,
)


def _input(project_id: str, net_profit: float, rules: ProfitSharingRules):
    return ProfitSharingInput(
        project_id=project_id,
        project_name=project_id.upper(),
        total_income=max(net_profit, 0.0),
        total_cost=max(-net_profit, 0.0),
        net_profit=net_profit,
        rules=rules,
    )


@pytest.fixture(scope="module")
def results():
    return calculate_batch(
        [
            _input(
                "fp",
                12345.678,
                ProfitSharingRules(
                    formula_type="FIXED_PLUS_PERCENT",
                    fixed_amount=1000,
                    percent_rate=5,
                ),
            ),
            _input(
                "tr",
                80000,
                ProfitSharingRules(
                    formula_type="TIERED",
                    tiers=(
                        TierConfig(min_profit=0, max_profit=50000, percent_rate=5),
                        TierConfig(min_profit=50000, percent_rate=10),
                    ),
                ),
            ),
            _input(
                "loss",
                -500,
                ProfitSharingRules(formula_type="PERCENT_SIMPLE", percent_rate=10),
            ),
        ]
    )


def test_results_to_dataframe(results) -> None:
    df = results_to_dataframe(results)

    assert list(df.columns) == SUMMARY_COLUMNS
    assert df["project_id"].tolist() == ["fp", "tr", "loss"]

    fp = df.iloc[0]
    assert fp["net_profit"] == pytest.approx(12345.68)
    assert fp["total_share"] == pytest.approx(1617.28)
    assert fp["share_pct"] == pytest.approx(13.1)

    tr = df.iloc[1]
    assert tr["total_share"] == pytest.approx(5500)
    assert tr["share_pct"] == pytest.approx(6.9)

    # No percentage of a loss
    assert math.isnan(df.iloc[2]["share_pct"])
    assert df.iloc[2]["total_share"] == 0


def test_results_to_dataframe_decimals(results) -> None:
    df = results_to_dataframe(results, decimals=0)
    assert df.iloc[0]["total_share"] == pytest.approx(1617)


def test_results_to_dataframe_empty() -> None:
    df = results_to_dataframe([])
    assert df.empty
    assert list(df.columns) == SUMMARY_COLUMNS


def test_breakdown_to_dataframe(results) -> None:
    df = breakdown_to_dataframe(results)

    assert list(df.columns) == BREAKDOWN_COLUMNS
    # fp: fixed + percent, tr: two tiers, loss: one zero line
    assert df["project_id"].tolist() == ["fp", "fp", "tr", "tr", "loss"]
    assert df["position"].tolist() == [1, 2, 1, 2, 1]

    assert df.iloc[0]["description"] == "Monto fijo"
    assert math.isnan(df.iloc[0]["percent_of_profit"])
    assert df.iloc[1]["description"] == "5% de utilidad"
    assert df.iloc[1]["amount"] == pytest.approx(617.28)

    assert df.iloc[2]["description"] == "5% de $0 - $50000"
    assert df.iloc[3]["description"] == "10% de $50000 - ∞"
    assert df.iloc[3]["percent_of_profit"] == pytest.approx(3.75)

    # Rounded line items still add up to the rounded total per project
    totals = df.groupby("project_id", sort=False)["amount"].sum()
    summary = results_to_dataframe(results).set_index("project_id")
    for project_id, amount in totals.items():
        assert amount == pytest.approx(summary.loc[project_id, "total_share"], abs=0.01)


def test_breakdown_to_dataframe_empty() -> None:
    df = breakdown_to_dataframe([])
    assert df.empty
    assert list(df.columns) == BREAKDOWN_COLUMNS


def test_formula_types_to_dataframe() -> None:
    df = formula_types_to_dataframe()

    assert list(df.columns) == ["type", "label", "description"]
    assert df["type"].tolist() == list(FORMULA_TYPES)
    assert df["label"].str.len().min() > 0
