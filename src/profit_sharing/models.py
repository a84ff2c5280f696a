# Profit Sharing - Profit-sharing calculation engine for multi-company operations
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Data model for the profit-sharing engine.

This module defines the value objects exchanged between the engine and its
collaborators:

- ProfitSharingRules:
    Per-project configuration, edited by an administrator and persisted
    outside the engine. It is a single record with optional fields: each
    formula reads only the fields it needs and ignores the rest.

- ProfitSharingInput:
    One calculation request (project identifiers, income, cost, net profit
    and the rules to apply).

- ProfitSharingResult / ProfitSharingBreakdown:
    The computed share and its ordered line items. The line items always
    add up to ``total_share``.

- FormulaInfo:
    Entry of the static catalog of formula types, used to populate
    configuration forms.

- ProjectConfig:
    A project as known to the period-level orchestration (results.py):
    identifiers, eligibility flags and optional rules.

All dataclasses are frozen: inputs are never mutated during a calculation.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Literal, Optional, get_args

FormulaType = Literal[
    "FIXED_ONLY",
    "PERCENT_SIMPLE",
    "FIXED_PLUS_PERCENT",
    "TIERED",
    "SPECIAL_FORMULA",
    "GROUPED",
    "DYNAMIC",
]

# Catalog order, also used when rendering formula lists.
FORMULA_TYPES: tuple[str, ...] = get_args(FormulaType)


@dataclass(frozen=True)
class TierConfig:
    """
    A profit range ``[min_profit, max_profit)`` with its own rate.

    Attributes:
        min_profit: Lower bound of the bracket.
        max_profit: Upper bound of the bracket, or None for an open bracket.
        percent_rate: Rate applied to the profit falling in the bracket (%).
    """

    min_profit: float
    max_profit: Optional[float] = None
    percent_rate: float = 0.0


@dataclass(frozen=True)
class GroupConfig:
    """A named stakeholder cut with its own rate over the whole net profit."""

    group_name: str
    percent_rate: float = 0.0
    members: tuple[str, ...] = ()


@dataclass(frozen=True)
class ProfitSharingRules:
    """
    Profit-sharing configuration of one project.

    ``formula_type`` selects the formula. It is kept as a plain string so
    that a misconfigured value reaches the engine registry, which rejects it.

    Optional fields by formula:
        FIXED_ONLY          fixed_amount
        PERCENT_SIMPLE      percent_rate
        FIXED_PLUS_PERCENT  fixed_amount, percent_rate
        TIERED              tiers
        SPECIAL_FORMULA     percent_rate, minimum_profit, maximum_share
        GROUPED             groups
        DYNAMIC             base_amount, increment_percent, increment_threshold
    """

    formula_type: str
    fixed_amount: Optional[float] = None
    percent_rate: Optional[float] = None
    tiers: Sequence[TierConfig] = ()
    minimum_profit: Optional[float] = None
    maximum_share: Optional[float] = None
    groups: Sequence[GroupConfig] = ()
    base_amount: Optional[float] = None
    increment_percent: Optional[float] = None
    increment_threshold: Optional[float] = None


@dataclass(frozen=True)
class ProfitSharingInput:
    """
    One profit-sharing calculation request.

    ``net_profit`` is expected to equal ``total_income - total_cost`` but
    is taken as given: formulas never recompute it.
    """

    project_id: str
    project_name: str
    total_income: float
    total_cost: float
    net_profit: float
    rules: ProfitSharingRules


@dataclass(frozen=True)
class ProfitSharingBreakdown:
    """One explainable line item of a computed share."""

    description: str
    amount: float
    percent_of_profit: Optional[float] = None


@dataclass(frozen=True)
class ProfitSharingResult:
    """
    Outcome of a profit-sharing calculation.

    Attributes:
        project_id, project_name, formula_type, net_profit:
            Echoed from the input.
        total_share: Amount owed for the period.
        breakdown: Line items in computation order; their amounts add up
            to ``total_share``.
        calculation_details: Human-readable summary for audit display.
    """

    project_id: str
    project_name: str
    formula_type: str
    net_profit: float
    total_share: float
    breakdown: list[ProfitSharingBreakdown] = field(default_factory=list)
    calculation_details: str = ""


@dataclass(frozen=True)
class FormulaInfo:
    """Catalog entry describing a formula type."""

    type: FormulaType
    label: str
    description: str


@dataclass(frozen=True)
class ProjectConfig:
    """
    A project as seen by the period-level orchestration.

    Only active projects flagged with ``applies_profit_sharing`` and having
    rules configured take part in a period calculation.
    """

    project_id: str
    name: str
    rules: Optional[ProfitSharingRules] = None
    applies_profit_sharing: bool = True
    is_active: bool = True
