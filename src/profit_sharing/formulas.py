# Profit Sharing - Profit-sharing calculation engine for multi-company operations
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Profit-sharing formulas.

Each formula is a pure function taking a ProfitSharingInput and returning a
ProfitSharingResult. Formulas share the following conventions:

- A non-positive net profit never produces a share: the result has
  ``total_share == 0`` and an empty or explanatory breakdown. This also
  holds for the formulas paying a fixed amount.
- Fields of the rules that a formula does not use are ignored. Missing (or
  zero) numeric fields fall back to a default: 0 for amounts and rates,
  no cap for ``maximum_share`` and DEFAULT_INCREMENT_THRESHOLD for
  ``increment_threshold``.
- The breakdown amounts add up to ``total_share``.
- No intermediate value is rounded. Rounding is a display concern
  (see views.py).

Descriptions and calculation details are written in Spanish, the language
of the configuration screens.
"""

import math
from collections.abc import Sequence

from .models import (
    ProfitSharingBreakdown,
    ProfitSharingInput,
    ProfitSharingResult,
    TierConfig,
)

DEFAULT_INCREMENT_THRESHOLD = 100000.0


def _money(value: float) -> str:
    """Format an amount for calculation details (e.g. '$1500.00')."""
    return f"${value:.2f}"


def _rate(value: float) -> str:
    """Format a rate without trailing zeros (10.0 -> '10', 2.5 -> '2.5')."""
    return f"{value:g}"


def _result(
    inp: ProfitSharingInput,
    formula_type: str,
    total_share: float,
    breakdown: list[ProfitSharingBreakdown],
    details: str,
) -> ProfitSharingResult:
    return ProfitSharingResult(
        project_id=inp.project_id,
        project_name=inp.project_name,
        formula_type=formula_type,
        net_profit=inp.net_profit,
        total_share=total_share,
        breakdown=breakdown,
        calculation_details=details,
    )


def fixed_only(inp: ProfitSharingInput) -> ProfitSharingResult:
    """Constant ``fixed_amount`` whenever there is profit."""
    net_profit = inp.net_profit
    fixed_amount = inp.rules.fixed_amount or 0.0

    total_share = fixed_amount if net_profit > 0 else 0.0
    percent_of_profit = total_share / net_profit * 100 if net_profit > 0 else 0.0

    details = f"Monto fijo: {_money(fixed_amount)}"
    if net_profit <= 0:
        details += " (No aplica sin utilidad)"

    return _result(
        inp,
        "FIXED_ONLY",
        total_share,
        [
            ProfitSharingBreakdown(
                description="Monto fijo",
                amount=total_share,
                percent_of_profit=percent_of_profit,
            )
        ],
        details,
    )


def percent_simple(inp: ProfitSharingInput) -> ProfitSharingResult:
    """``percent_rate`` percent of the net profit."""
    net_profit = inp.net_profit
    percent_rate = inp.rules.percent_rate or 0.0

    total_share = net_profit * percent_rate / 100 if net_profit > 0 else 0.0

    return _result(
        inp,
        "PERCENT_SIMPLE",
        total_share,
        [
            ProfitSharingBreakdown(
                description=f"{_rate(percent_rate)}% de utilidad",
                amount=total_share,
                percent_of_profit=percent_rate,
            )
        ],
        f"{_rate(percent_rate)}% de {_money(net_profit)} = {_money(total_share)}",
    )


def fixed_plus_percent(inp: ProfitSharingInput) -> ProfitSharingResult:
    """Fixed part plus a percentage of the net profit, both gated on profit."""
    net_profit = inp.net_profit
    fixed_amount = inp.rules.fixed_amount or 0.0
    percent_rate = inp.rules.percent_rate or 0.0

    fixed_part = fixed_amount if net_profit > 0 else 0.0
    percent_part = net_profit * percent_rate / 100 if net_profit > 0 else 0.0
    total_share = fixed_part + percent_part
    total_percent = total_share / net_profit * 100 if net_profit > 0 else 0.0

    breakdown = [
        ProfitSharingBreakdown(description="Monto fijo", amount=fixed_part),
        ProfitSharingBreakdown(
            description=f"{_rate(percent_rate)}% de utilidad",
            amount=percent_part,
            percent_of_profit=percent_rate,
        ),
    ]
    details = (
        f"Fijo: {_money(fixed_amount)} + {_rate(percent_rate)}% de "
        f"{_money(net_profit)} = {_money(total_share)} "
        f"({total_percent:.1f}% total)"
    )
    return _result(inp, "FIXED_PLUS_PERCENT", total_share, breakdown, details)


def _sorted_tiers(tiers: Sequence[TierConfig]) -> list[TierConfig]:
    # Caller order is not trusted; ties keep their configured order.
    return sorted(tiers, key=lambda t: t.min_profit)


def tiered(inp: ProfitSharingInput) -> ProfitSharingResult:
    """
    Progressive (marginal) brackets.

    Each bracket ``[min_profit, max_profit)`` is paid at its own rate on the
    part of the net profit that falls inside it, like income-tax brackets.
    Brackets not reached by the net profit are skipped. Gaps between
    brackets pay nothing and overlapping brackets pay twice on the overlap:
    the schedule is applied as configured.
    """
    net_profit = inp.net_profit
    tiers = inp.rules.tiers or ()

    if net_profit <= 0 or not tiers:
        return _result(
            inp, "TIERED", 0.0, [], "Sin utilidad o sin tramos configurados"
        )

    breakdown: list[ProfitSharingBreakdown] = []
    details: list[str] = []
    total_share = 0.0

    for tier in _sorted_tiers(tiers):
        if net_profit < tier.min_profit:
            continue

        ceiling = math.inf if tier.max_profit is None else tier.max_profit
        lower_bound = max(0.0, tier.min_profit)
        upper_bound = min(net_profit, ceiling)
        applicable = max(0.0, upper_bound - lower_bound)
        if applicable <= 0:
            continue

        tier_share = applicable * tier.percent_rate / 100
        total_share += tier_share

        ceiling_label = "∞" if math.isinf(ceiling) else f"${ceiling:.0f}"
        breakdown.append(
            ProfitSharingBreakdown(
                description=(
                    f"{_rate(tier.percent_rate)}% de ${lower_bound:.0f} - "
                    f"{ceiling_label}"
                ),
                amount=tier_share,
                percent_of_profit=tier_share / net_profit * 100,
            )
        )
        details.append(f"{_money(applicable)} × {_rate(tier.percent_rate)}%")

    return _result(
        inp,
        "TIERED",
        total_share,
        breakdown,
        f"Escalonado: {' + '.join(details) or 'ningún tramo alcanzado'} = "
        f"{_money(total_share)}",
    )


def special_formula(inp: ProfitSharingInput) -> ProfitSharingResult:
    """Percentage of profit, paid above a minimum profit and capped."""
    net_profit = inp.net_profit
    percent_rate = inp.rules.percent_rate or 0.0
    minimum_profit = inp.rules.minimum_profit or 0.0
    maximum_share = inp.rules.maximum_share or math.inf

    if net_profit < minimum_profit:
        return _result(
            inp,
            "SPECIAL_FORMULA",
            0.0,
            [
                ProfitSharingBreakdown(
                    description=(
                        f"Utilidad menor al mínimo ({_money(minimum_profit)})"
                    ),
                    amount=0.0,
                )
            ],
            f"Utilidad {_money(net_profit)} < mínimo {_money(minimum_profit)}, "
            "no aplica reparto",
        )

    if net_profit <= 0:
        return _result(inp, "SPECIAL_FORMULA", 0.0, [], "Sin utilidad")

    total_share = net_profit * percent_rate / 100
    capped = total_share > maximum_share
    if capped:
        total_share = maximum_share

    description = f"{_rate(percent_rate)}% de utilidad"
    details = f"{_rate(percent_rate)}% de {_money(net_profit)} = {_money(total_share)}"
    if capped:
        description += " (con tope)"
        details += f" (tope: {_money(maximum_share)})"

    return _result(
        inp,
        "SPECIAL_FORMULA",
        total_share,
        [
            ProfitSharingBreakdown(
                description=description,
                amount=total_share,
                percent_of_profit=total_share / net_profit * 100,
            )
        ],
        details,
    )


def grouped(inp: ProfitSharingInput) -> ProfitSharingResult:
    """
    Independent stakeholder cuts.

    Every group takes its rate over the same net profit. Groups are not a
    partition: their rates need not add up to 100.
    """
    net_profit = inp.net_profit
    groups = inp.rules.groups or ()

    if net_profit <= 0 or not groups:
        return _result(
            inp, "GROUPED", 0.0, [], "Sin utilidad o sin grupos configurados"
        )

    breakdown: list[ProfitSharingBreakdown] = []
    details: list[str] = []
    total_share = 0.0

    for group in groups:
        group_share = net_profit * group.percent_rate / 100
        total_share += group_share
        breakdown.append(
            ProfitSharingBreakdown(
                description=f"{group.group_name}: {_rate(group.percent_rate)}%",
                amount=group_share,
                percent_of_profit=group.percent_rate,
            )
        )
        details.append(f"{group.group_name}: {_money(group_share)}")

    return _result(
        inp,
        "GROUPED",
        total_share,
        breakdown,
        f"Grupos: {', '.join(details)}. Total: {_money(total_share)}",
    )


def dynamic(inp: ProfitSharingInput) -> ProfitSharingResult:
    """
    Base amount plus increments unlocked at each threshold multiple.

    ``increments = floor(net_profit / increment_threshold)`` and every
    increment adds ``increment_percent`` percent of the whole net profit.
    The base amount is only paid when there is profit.
    """
    net_profit = inp.net_profit
    base_amount = inp.rules.base_amount or 0.0
    increment_percent = inp.rules.increment_percent or 0.0
    increment_threshold = inp.rules.increment_threshold or 0.0
    if increment_threshold <= 0:
        increment_threshold = DEFAULT_INCREMENT_THRESHOLD

    if net_profit <= 0:
        return _result(inp, "DYNAMIC", 0.0, [], "Sin utilidad")

    increments = math.floor(net_profit / increment_threshold)
    increment_amount = increments * (increment_percent / 100) * net_profit
    total_share = base_amount + increment_amount

    breakdown = [ProfitSharingBreakdown(description="Monto base", amount=base_amount)]
    if increments > 0:
        breakdown.append(
            ProfitSharingBreakdown(
                description=f"{increments} incrementos de {_rate(increment_percent)}%",
                amount=increment_amount,
                percent_of_profit=increment_amount / net_profit * 100,
            )
        )

    return _result(
        inp,
        "DYNAMIC",
        total_share,
        breakdown,
        f"Base: {_money(base_amount)} + {increments} × {_rate(increment_percent)}% "
        f"= {_money(total_share)}",
    )
