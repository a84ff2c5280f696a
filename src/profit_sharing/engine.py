# Profit Sharing - Profit-sharing calculation engine for multi-company operations
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Profit-sharing calculation engine.

The engine is the single entry point used by the rest of the application to
compute profit-sharing amounts. It has three responsibilities:

1. Formula registry
   ----------------
   ``FORMULAS`` maps each formula type identifier (see models.FORMULA_TYPES)
   to the pure function implementing it (see formulas.py). The function is
   selected from ``input.rules.formula_type``.

2. Calculation
   -----------
   ``calculate(input)`` computes one result. An unregistered formula type
   raises UnknownFormulaTypeError: a misconfigured project is a data
   integrity problem and must surface instead of silently paying nothing.

   ``calculate_batch(inputs)`` computes one result per input, preserving
   input order. Calculations are independent of each other; the first
   failure aborts the whole batch so that a distribution is never
   understated by a dropped project.

3. Catalog
   -------
   ``list_formula_types()`` returns the static catalog (type, label,
   description) used to populate configuration forms.

Notes
-----
The engine performs no I/O and keeps no state between calls. Loading rules
(config.py), aggregating actuals into net profits (results.py) and rendering
results (views.py) all happen outside of it.
"""

import logging
from collections.abc import Callable, Iterable

from . import formulas
from .models import FormulaInfo, ProfitSharingInput, ProfitSharingResult

logger = logging.getLogger(__name__)

Formula = Callable[[ProfitSharingInput], ProfitSharingResult]

FORMULAS: dict[str, Formula] = {
    "FIXED_ONLY": formulas.fixed_only,
    "PERCENT_SIMPLE": formulas.percent_simple,
    "FIXED_PLUS_PERCENT": formulas.fixed_plus_percent,
    "TIERED": formulas.tiered,
    "SPECIAL_FORMULA": formulas.special_formula,
    "GROUPED": formulas.grouped,
    "DYNAMIC": formulas.dynamic,
}

FORMULA_CATALOG: tuple[FormulaInfo, ...] = (
    FormulaInfo(
        type="FIXED_ONLY",
        label="Monto Fijo",
        description="Monto fijo independiente de la utilidad",
    ),
    FormulaInfo(
        type="PERCENT_SIMPLE",
        label="Porcentaje Simple",
        description="Porcentaje simple de la utilidad neta",
    ),
    FormulaInfo(
        type="FIXED_PLUS_PERCENT",
        label="Fijo + Porcentaje",
        description="Monto fijo más porcentaje de utilidad",
    ),
    FormulaInfo(
        type="TIERED",
        label="Escalonado",
        description="Porcentajes escalonados según rangos de utilidad",
    ),
    FormulaInfo(
        type="SPECIAL_FORMULA",
        label="Fórmula Especial",
        description="Con mínimo de utilidad y tope máximo",
    ),
    FormulaInfo(
        type="GROUPED",
        label="Por Grupos",
        description="Distribución por grupos o categorías",
    ),
    FormulaInfo(
        type="DYNAMIC",
        label="Dinámico",
        description="Base más incrementos por umbrales",
    ),
)


class UnknownFormulaTypeError(ValueError):
    """Raised when rules reference a formula type with no registered formula."""

    def __init__(self, formula_type: object):
        super().__init__(f"Unknown formula type: {formula_type!r}")
        self.formula_type = formula_type


def get_formula(formula_type: str) -> Formula:
    """
    Return the formula registered for ``formula_type``.

    Raises:
        UnknownFormulaTypeError: if no formula is registered for this type.
    """
    try:
        return FORMULAS[formula_type]
    except (KeyError, TypeError) as exc:
        raise UnknownFormulaTypeError(formula_type) from exc


def calculate(inp: ProfitSharingInput) -> ProfitSharingResult:
    """Compute the profit share of a single project.

    Args:
        inp: Calculation request. ``inp.rules.formula_type`` selects the
            formula.

    Returns:
        The ProfitSharingResult computed by the selected formula.

    Raises:
        UnknownFormulaTypeError: if the formula type is not registered.
    """
    formula_type = inp.rules.formula_type
    try:
        formula = get_formula(formula_type)
    except UnknownFormulaTypeError:
        logger.error(
            "Project %s (%s) has unknown formula type %r",
            inp.project_id,
            inp.project_name,
            formula_type,
        )
        raise

    result = formula(inp)
    logger.debug(
        "Project %s: %s on net profit %.2f -> share %.2f",
        inp.project_id,
        formula_type,
        inp.net_profit,
        result.total_share,
    )
    return result


def calculate_batch(inputs: Iterable[ProfitSharingInput]) -> list[ProfitSharingResult]:
    """Compute one result per input, in input order.

    The first failing input aborts the batch: its exception propagates and
    no partial list is returned.
    """
    results = [calculate(inp) for inp in inputs]
    logger.debug("Computed profit sharing for %d project(s)", len(results))
    return results


def list_formula_types() -> list[FormulaInfo]:
    """Return the catalog of available formula types, in display order."""
    return list(FORMULA_CATALOG)
