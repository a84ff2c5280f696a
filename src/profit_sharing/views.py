# Profit Sharing - Profit-sharing calculation engine for multi-company operations
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
View utilities for profit-sharing results.

The engine returns unrounded ProfitSharingResult objects. This module turns
them into pandas DataFrames ready for display or export, and is the only
place where amounts are rounded.

The main views are:

- summary:   one row per project (results_to_dataframe),
- breakdown: one row per line item (breakdown_to_dataframe),
- catalog:   the available formula types (formula_types_to_dataframe).
"""

from collections.abc import Sequence

import pandas as pd

from .engine import list_formula_types
from .models import ProfitSharingResult

SUMMARY_COLUMNS = [
    "project_id",
    "project_name",
    "formula_type",
    "net_profit",
    "total_share",
    "share_pct",
    "calculation_details",
]

BREAKDOWN_COLUMNS = [
    "project_id",
    "project_name",
    "position",
    "description",
    "amount",
    "percent_of_profit",
]


def results_to_dataframe(
    results: Sequence[ProfitSharingResult], decimals: int = 2
) -> pd.DataFrame:
    """
    Convert results into a summary DataFrame, one row per project.

    Columns:
        - project_id, project_name, formula_type
        - net_profit, total_share: rounded to ``decimals``
        - share_pct: total_share as a percentage of net_profit, or NaN when
          there is no profit
        - calculation_details

    Rows keep the order of ``results``.
    """
    if not results:
        return pd.DataFrame(columns=SUMMARY_COLUMNS)

    rows: list[dict[str, object]] = []
    for r in results:
        if r.net_profit > 0:
            share_pct = round(r.total_share / r.net_profit * 100, 1)
        else:
            share_pct = float("nan")

        rows.append(
            {
                "project_id": r.project_id,
                "project_name": r.project_name,
                "formula_type": r.formula_type,
                "net_profit": round(r.net_profit, decimals),
                "total_share": round(r.total_share, decimals),
                "share_pct": share_pct,
                "calculation_details": r.calculation_details,
            }
        )

    return pd.DataFrame(rows, columns=SUMMARY_COLUMNS)


def breakdown_to_dataframe(
    results: Sequence[ProfitSharingResult], decimals: int = 2
) -> pd.DataFrame:
    """
    Convert the breakdowns of all results into a long-format DataFrame.

    Each line item becomes one row. ``position`` starts at 1 within each
    project and follows the computation order. ``percent_of_profit`` is NaN
    when the line item does not define it.
    """
    rows: list[dict[str, object]] = []
    for r in results:
        for position, item in enumerate(r.breakdown, start=1):
            if item.percent_of_profit is None:
                percent = float("nan")
            else:
                percent = round(item.percent_of_profit, 2)

            rows.append(
                {
                    "project_id": r.project_id,
                    "project_name": r.project_name,
                    "position": position,
                    "description": item.description,
                    "amount": round(item.amount, decimals),
                    "percent_of_profit": percent,
                }
            )

    if not rows:
        return pd.DataFrame(columns=BREAKDOWN_COLUMNS)
    return pd.DataFrame(rows, columns=BREAKDOWN_COLUMNS)


def formula_types_to_dataframe() -> pd.DataFrame:
    """Return the formula type catalog as a DataFrame (type, label, description)."""
    return pd.DataFrame(
        [
            {"type": f.type, "label": f.label, "description": f.description}
            for f in list_formula_types()
        ],
        columns=["type", "label", "description"],
    )
