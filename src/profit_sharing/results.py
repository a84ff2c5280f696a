# Profit Sharing - Profit-sharing calculation engine for multi-company operations
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Period-level profit sharing from imported actuals.

This module turns the actual results of an accounting period into engine
inputs and runs the engine on every eligible project.

Expected actuals schema
-----------------------
A pandas DataFrame with at least:

    - ``project_id``   (str, empty/NaN for administrative costs)
    - ``concept_type`` (str, 'INCOME' for revenue lines)
    - ``amount``       (numeric)

and, when filtering by period, ``year`` and ``month`` (int).

Pipeline
--------
1) filter_results_by_period(): keep the actuals of one period.
2) aggregate_project_profits(): income, cost and net profit per project.
3) build_inputs(): one ProfitSharingInput per eligible project.
4) engine.calculate_batch(): one ProfitSharingResult per input.

calculate_for_period() chains the four steps.
"""

import logging
from collections.abc import Iterable
from typing import Optional

import pandas as pd

from .engine import calculate_batch
from .models import ProfitSharingInput, ProfitSharingResult, ProjectConfig

logger = logging.getLogger(__name__)

INCOME_CONCEPT_TYPE = "INCOME"

PROFIT_COLUMNS = ["project_id", "total_income", "total_cost", "net_profit"]


def _normalize_project_id(value: object) -> str:
    """
    Return a project id as a stripped string ('' when missing).

    Integer ids in a column holding NaN are upcast to float by pandas:
    whole floats are written back without their '.0' so that 1.0 matches
    the configured project id '1'.
    """
    if pd.isna(value):
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def filter_results_by_period(
    results: pd.DataFrame, year: int, month: int
) -> pd.DataFrame:
    """
    Keep only the actuals of the given accounting period.

    Parameters
    ----------
    results:
        Actuals DataFrame with 'year' and 'month' columns.
    year, month:
        Period to keep.

    Returns
    -------
    pandas.DataFrame
        Filtered copy of the actuals.
    """
    missing = {"year", "month"} - set(results.columns)
    if missing:
        raise ValueError(
            f"Results DataFrame is missing period column(s): {sorted(missing)}"
        )

    mask = (results["year"] == year) & (results["month"] == month)
    return results.loc[mask].copy()


def aggregate_project_profits(results: pd.DataFrame) -> pd.DataFrame:
    """Sum actuals into income, cost and net profit per project.

    Rules:
      - rows without a project id are administrative costs and are skipped,
      - 'INCOME' concept types add to income, every other type adds to cost,
      - amounts that cannot be parsed as numbers count as 0.

    Args:
        results: Actuals with 'project_id', 'concept_type' and 'amount'.

    Returns:
        A DataFrame with columns project_id, total_income, total_cost,
        net_profit, one row per project, sorted by project_id.
    """
    required = {"project_id", "concept_type", "amount"}
    missing = required - set(results.columns)
    if missing:
        raise ValueError(
            f"Results DataFrame is missing required column(s): {sorted(missing)}"
        )

    df = results[["project_id", "concept_type", "amount"]].copy()

    # 1) Skip administrative costs (no project).
    df["project_id"] = df["project_id"].map(_normalize_project_id)
    df = df[df["project_id"] != ""].copy()

    if df.empty:
        return pd.DataFrame(columns=PROFIT_COLUMNS)

    # 2) Split amounts between income and cost.
    amount = pd.to_numeric(df["amount"], errors="coerce").fillna(0.0)
    is_income = df["concept_type"].astype(str).str.upper() == INCOME_CONCEPT_TYPE
    df["total_income"] = amount.where(is_income, 0.0)
    df["total_cost"] = amount.where(~is_income, 0.0)

    # 3) One row per project.
    out = (
        df.groupby("project_id", sort=True)[["total_income", "total_cost"]]
        .sum()
        .reset_index()
    )
    out["net_profit"] = out["total_income"] - out["total_cost"]
    return out[PROFIT_COLUMNS]


def is_eligible(project: ProjectConfig) -> bool:
    """Whether a project takes part in profit-sharing calculations."""
    return (
        project.applies_profit_sharing
        and project.is_active
        and project.rules is not None
    )


def build_inputs(
    projects: Iterable[ProjectConfig],
    profits: pd.DataFrame,
) -> list[ProfitSharingInput]:
    """
    Build engine inputs for every eligible project.

    A project is eligible when it applies profit sharing, is active and has
    rules configured. Eligible projects without actuals in ``profits`` get
    zero income and cost (hence no share).

    Parameters
    ----------
    projects:
        Projects in the order results should be reported.
    profits:
        Output of aggregate_project_profits().

    Returns
    -------
    list[ProfitSharingInput]
        One input per eligible project, in ``projects`` order.
    """
    by_project: dict[str, tuple[float, float]] = {}
    for row in profits.itertuples(index=False):
        by_project[str(row.project_id)] = (
            float(row.total_income),
            float(row.total_cost),
        )

    inputs: list[ProfitSharingInput] = []
    for project in projects:
        if not is_eligible(project):
            logger.info(
                "Skipping project %s (%s): not eligible for profit sharing",
                project.project_id,
                project.name,
            )
            continue

        if project.project_id not in by_project:
            logger.warning(
                "Project %s (%s) has no actuals for the period, using zero profit",
                project.project_id,
                project.name,
            )
        total_income, total_cost = by_project.get(project.project_id, (0.0, 0.0))
        inputs.append(
            ProfitSharingInput(
                project_id=project.project_id,
                project_name=project.name,
                total_income=total_income,
                total_cost=total_cost,
                net_profit=total_income - total_cost,
                rules=project.rules,  # type: ignore[arg-type]
            )
        )

    return inputs


def calculate_for_period(
    projects: Iterable[ProjectConfig],
    results: pd.DataFrame,
    year: Optional[int] = None,
    month: Optional[int] = None,
    handles_profit_sharing: bool = True,
) -> list[ProfitSharingResult]:
    """Compute profit sharing for all eligible projects from actuals.

    When both ``year`` and ``month`` are given, actuals are first restricted
    to that period; otherwise ``results`` is assumed to hold a single period.

    A company that does not handle profit sharing gets no results at all,
    whatever its projects are configured with.

    Raises:
        UnknownFormulaTypeError: if any eligible project has an unknown
            formula type (the whole period fails).
    """
    if not handles_profit_sharing:
        logger.info("Company does not handle profit sharing, nothing to compute")
        return []

    if year is not None and month is not None:
        results = filter_results_by_period(results, year, month)

    profits = aggregate_project_profits(results)
    inputs = build_inputs(projects, profits)

    if year is not None and month is not None:
        logger.info(
            "Computing profit sharing for %d project(s), period %04d-%02d",
            len(inputs),
            year,
            month,
        )

    return calculate_batch(inputs)
