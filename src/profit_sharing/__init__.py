# Profit Sharing - Profit-sharing calculation engine for multi-company operations
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Profit Sharing
--------------

A rules-driven calculation engine computing how much of a project's net
profit is owed as a management/service fee, for multi-company financial
management. Every result comes with explainable line items for audit
display.

Main capabilities:
- seven profit-sharing formulas (fixed amount, simple percentage, fixed plus
  percentage, marginal tiers, special formula with minimum and cap,
  independent groups, dynamic base plus increments),
- a formula registry with single and batch calculation entry points,
- period-level calculation from imported actuals (income vs. cost),
- TOML configuration of projects and rules, with boundary validation,
- pandas views and a command-line interface.

The package separates computation (formulas, engine), configuration (TOML)
and presentation (views, CLI).


Version: 0.1.0

Usage:
    python -m profit_sharing.cli --help
"""

from .engine import (
    UnknownFormulaTypeError,
    calculate,
    calculate_batch,
    list_formula_types,
)
from .models import (
    FORMULA_TYPES,
    GroupConfig,
    ProfitSharingBreakdown,
    ProfitSharingInput,
    ProfitSharingResult,
    ProfitSharingRules,
    TierConfig,
)

__all__ = [
    "FORMULA_TYPES",
    "GroupConfig",
    "ProfitSharingBreakdown",
    "ProfitSharingInput",
    "ProfitSharingResult",
    "ProfitSharingRules",
    "TierConfig",
    "UnknownFormulaTypeError",
    "calculate",
    "calculate_batch",
    "list_formula_types",
]

__version__ = "0.1.0"
