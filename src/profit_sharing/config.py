# Profit Sharing - Profit-sharing calculation engine for multi-company operations
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Configuration helpers for the profit-sharing engine.

This module is responsible for:
- parsing profit-sharing rules from TOML tables or plain dictionaries,
- validating rules at the configuration boundary (the engine itself never
  validates and applies documented defaults instead),
- loading a TOML configuration file describing projects, their period
  figures and their rules,
- converting rules to and from the flat storage row used by the
  persistence layer.

Expected TOML layout
--------------------
[calculation]
    strict = true            # validate every project's rules on load
    handles_profit_sharing = true

[display]
    currency = "MXN"
    decimals = 2

[projects.<project_id>]
    name = "Torre Prisma"
    total_income = 200000
    total_cost = 150000
    net_profit = 50000       # optional, defaults to income - cost
    applies_profit_sharing = true
    is_active = true

[projects.<project_id>.rules]
    formula_type = "TIERED"
    tiers = [
        { min_profit = 0, max_profit = 50000, percent_rate = 5 },
        { min_profit = 50000, percent_rate = 10 },
    ]
"""

import logging
import tomllib  # Python 3.11+
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from .models import (
    FORMULA_TYPES,
    GroupConfig,
    ProfitSharingInput,
    ProfitSharingRules,
    ProjectConfig,
    TierConfig,
)
from .results import is_eligible

logger = logging.getLogger(__name__)


class RuleValidationError(ValueError):
    """Raised when profit-sharing rules fail configuration validation."""

    def __init__(self, errors: list[str]):
        message = "Invalid profit-sharing rules:\n  - " + "\n  - ".join(errors)
        super().__init__(message)
        self.errors = errors


@dataclass(frozen=True)
class ProjectFigures:
    """A configured project together with its figures for the period."""

    project: ProjectConfig
    total_income: float
    total_cost: float
    net_profit: float


@dataclass(frozen=True)
class ProfitSharingConfig:
    """
    Parsed profit-sharing configuration file.

    Attributes:
        projects: Configured projects, in file order.
        strict: Whether rules were validated on load.
        currency: Currency code used for display.
        decimals: Number of decimals used for display.
        handles_profit_sharing: Company-level switch. When false, no
            project is calculated.
        source: Path of the configuration file.
    """

    projects: list[ProjectFigures]
    strict: bool
    currency: str
    decimals: int
    handles_profit_sharing: bool = True
    source: Optional[Path] = None


def _load_toml(path: Path) -> dict[str, Any]:
    """
    Load a TOML file and return its content as a dictionary.

    Raises:
        FileNotFoundError: if the file does not exist.
        ValueError: if the TOML content cannot be parsed or is not a table.
    """
    if not path.is_file():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except Exception as exc:  # noqa: BLE001
        raise ValueError(f"Failed to parse TOML config file: {path}") from exc

    if not isinstance(data, dict):
        raise ValueError(f"Invalid TOML root type in {path}, expected a table.")

    return data


def _optional_float(value: Any, field_name: str) -> Optional[float]:
    """Convert a raw config value to float, keeping None/'' as unset."""
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ValueError(f"Invalid value for '{field_name}': expected a number.")
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(
            f"Invalid value for '{field_name}': expected a number, got {value!r}."
        ) from exc


def _bool(value: Any, field_name: str, default: bool) -> bool:
    """Read a TOML boolean, rejecting strings such as 'false'."""
    if value is None:
        return default
    if not isinstance(value, bool):
        raise ValueError(
            f"Invalid value for '{field_name}': expected true or false, "
            f"got {value!r}."
        )
    return value


def check_decimals(value: Any, field_name: str = "decimals") -> int:
    """
    Return a display precision, which must be a non-negative integer.

    Raises:
        ValueError: for negative, fractional or non-numeric values.
    """
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(
            f"Invalid value for '{field_name}': expected a non-negative integer, "
            f"got {value!r}."
        )
    return value


def _parse_tier(raw: Any, index: int) -> TierConfig:
    if not isinstance(raw, Mapping):
        raise ValueError(f"Invalid tier #{index + 1}: expected a table.")

    min_profit = _optional_float(raw.get("min_profit"), "tiers.min_profit")
    percent_rate = _optional_float(raw.get("percent_rate"), "tiers.percent_rate")
    return TierConfig(
        min_profit=min_profit or 0.0,
        max_profit=_optional_float(raw.get("max_profit"), "tiers.max_profit"),
        percent_rate=percent_rate or 0.0,
    )


def _parse_group(raw: Any, index: int) -> GroupConfig:
    if not isinstance(raw, Mapping):
        raise ValueError(f"Invalid group #{index + 1}: expected a table.")

    members = raw.get("members") or []
    if isinstance(members, str):
        members = [members]

    percent_rate = _optional_float(raw.get("percent_rate"), "groups.percent_rate")
    return GroupConfig(
        group_name=str(raw.get("group_name") or f"Grupo {index + 1}"),
        percent_rate=percent_rate or 0.0,
        members=tuple(str(m) for m in members),
    )


def parse_rules(raw: Mapping[str, Any]) -> ProfitSharingRules:
    """
    Build ProfitSharingRules from a TOML table or a plain dictionary.

    Keys are the snake_case field names of ProfitSharingRules. Missing keys
    are left unset; the formulas apply their defaults. The formula type is
    upper-cased but not checked here (see validate_rules()).

    Raises:
        ValueError: if a numeric field cannot be converted, or if 'tiers' /
            'groups' are not lists of tables.
    """
    formula_type = str(raw.get("formula_type") or "").strip().upper()

    tiers_raw = raw.get("tiers") or []
    groups_raw = raw.get("groups") or []
    if not isinstance(tiers_raw, list):
        raise ValueError("Invalid value for 'tiers': expected a list of tables.")
    if not isinstance(groups_raw, list):
        raise ValueError("Invalid value for 'groups': expected a list of tables.")

    return ProfitSharingRules(
        formula_type=formula_type,
        fixed_amount=_optional_float(raw.get("fixed_amount"), "fixed_amount"),
        percent_rate=_optional_float(raw.get("percent_rate"), "percent_rate"),
        tiers=tuple(_parse_tier(t, i) for i, t in enumerate(tiers_raw)),
        minimum_profit=_optional_float(raw.get("minimum_profit"), "minimum_profit"),
        maximum_share=_optional_float(raw.get("maximum_share"), "maximum_share"),
        groups=tuple(_parse_group(g, i) for i, g in enumerate(groups_raw)),
        base_amount=_optional_float(raw.get("base_amount"), "base_amount"),
        increment_percent=_optional_float(
            raw.get("increment_percent"), "increment_percent"
        ),
        increment_threshold=_optional_float(
            raw.get("increment_threshold"), "increment_threshold"
        ),
    )


def _check_rate(errors: list[str], name: str, value: Optional[float]) -> None:
    if value is not None and not 0 <= value <= 100:
        errors.append(f"{name} must be between 0 and 100 (got {value:g}).")


def _check_non_negative(errors: list[str], name: str, value: Optional[float]) -> None:
    if value is not None and value < 0:
        errors.append(f"{name} must be >= 0 (got {value:g}).")


def validate_rules(rules: ProfitSharingRules) -> list[str]:
    """
    Validate rules as the configuration form does.

    Checks:
      - the formula type is one of FORMULA_TYPES,
      - every rate (percent_rate, tier and group rates, increment_percent)
        lies in [0, 100],
      - minimum_profit, maximum_share, base_amount, increment_threshold and
        tier min_profit values are non-negative.

    The engine does not call this function: it accepts any configuration.

    Returns:
        A list of human-readable problems (empty when the rules are valid).
    """
    errors: list[str] = []

    if rules.formula_type not in FORMULA_TYPES:
        errors.append(
            f"Unknown formula_type {rules.formula_type!r}. "
            f"Expected one of: {', '.join(FORMULA_TYPES)}."
        )

    _check_rate(errors, "percent_rate", rules.percent_rate)
    _check_rate(errors, "increment_percent", rules.increment_percent)
    _check_non_negative(errors, "minimum_profit", rules.minimum_profit)
    _check_non_negative(errors, "maximum_share", rules.maximum_share)
    _check_non_negative(errors, "base_amount", rules.base_amount)
    _check_non_negative(errors, "increment_threshold", rules.increment_threshold)

    for i, tier in enumerate(rules.tiers, start=1):
        _check_non_negative(errors, f"tiers[{i}].min_profit", tier.min_profit)
        _check_rate(errors, f"tiers[{i}].percent_rate", tier.percent_rate)

    for i, group in enumerate(rules.groups, start=1):
        _check_rate(errors, f"groups[{i}].percent_rate", group.percent_rate)

    return errors


def _parse_project(
    project_id: str, raw: Mapping[str, Any], strict: bool
) -> tuple[ProjectFigures, list[str]]:
    rules_raw = raw.get("rules")
    if rules_raw is not None and not isinstance(rules_raw, Mapping):
        raise ValueError(f"Invalid [projects.{project_id}.rules]: expected a table.")

    try:
        rules = parse_rules(rules_raw) if rules_raw is not None else None
        total_income = _optional_float(raw.get("total_income"), "total_income") or 0.0
        total_cost = _optional_float(raw.get("total_cost"), "total_cost") or 0.0
        net_profit = _optional_float(raw.get("net_profit"), "net_profit")
        applies_profit_sharing = _bool(
            raw.get("applies_profit_sharing"), "applies_profit_sharing", True
        )
        is_active = _bool(raw.get("is_active"), "is_active", True)
    except ValueError as exc:
        raise ValueError(f"Project {project_id!r}: {exc}") from exc

    if net_profit is None:
        net_profit = total_income - total_cost

    errors: list[str] = []
    if strict and rules is not None:
        errors = [f"{project_id}: {e}" for e in validate_rules(rules)]

    project = ProjectConfig(
        project_id=project_id,
        name=str(raw.get("name") or project_id),
        rules=rules,
        applies_profit_sharing=applies_profit_sharing,
        is_active=is_active,
    )
    figures = ProjectFigures(
        project=project,
        total_income=total_income,
        total_cost=total_cost,
        net_profit=net_profit,
    )
    return figures, errors


def load_config(
    config_path: Optional[str] = None, strict: Optional[bool] = None
) -> ProfitSharingConfig:
    """
    Load a profit-sharing configuration file.

    Parameters
    ----------
    config_path:
        Path to the TOML file. Defaults to 'profit_sharing.toml' in the
        current directory.
    strict:
        Overrides [calculation].strict when not None. In strict mode every
        project's rules are validated and all problems are reported at once.

    Returns
    -------
    ProfitSharingConfig
        Parsed configuration.

    Raises
    ------
    FileNotFoundError
        If the file does not exist.
    ValueError
        If the file cannot be parsed or contains invalid values.
    RuleValidationError
        In strict mode, if any project's rules are invalid.
    """
    if config_path is None:
        config_file = Path("profit_sharing.toml").resolve()
    else:
        config_file = Path(config_path).resolve()

    raw = _load_toml(config_file)

    calculation_section = raw.get("calculation") or {}
    if not isinstance(calculation_section, Mapping):
        calculation_section = {}

    display_section = raw.get("display") or {}
    if not isinstance(display_section, Mapping):
        display_section = {}

    if strict is None:
        strict = _bool(calculation_section.get("strict"), "calculation.strict", True)
    handles_profit_sharing = _bool(
        calculation_section.get("handles_profit_sharing"),
        "calculation.handles_profit_sharing",
        True,
    )

    currency = str(display_section.get("currency") or "MXN")
    decimals = check_decimals(display_section.get("decimals", 2), "display.decimals")

    projects_section = raw.get("projects") or {}
    if not isinstance(projects_section, Mapping):
        raise ValueError("Invalid [projects] section: expected a table of projects.")

    projects: list[ProjectFigures] = []
    errors: list[str] = []
    for project_id, project_raw in projects_section.items():
        if not isinstance(project_raw, Mapping):
            raise ValueError(f"Invalid [projects.{project_id}]: expected a table.")
        figures, project_errors = _parse_project(str(project_id), project_raw, strict)
        projects.append(figures)
        errors.extend(project_errors)

    if errors:
        raise RuleValidationError(errors)

    logger.debug("Loaded %d project(s) from %s", len(projects), config_file)

    return ProfitSharingConfig(
        projects=projects,
        strict=strict,
        currency=currency,
        decimals=decimals,
        handles_profit_sharing=handles_profit_sharing,
        source=config_file,
    )


def build_config_inputs(
    config: ProfitSharingConfig,
    project_ids: Optional[Iterable[str]] = None,
) -> list[ProfitSharingInput]:
    """
    Build engine inputs from a loaded configuration.

    Only projects that apply profit sharing, are active and have rules are
    included. When ``project_ids`` is given, only those projects are kept.
    Nothing is returned when the company does not handle profit sharing.

    Raises:
        ValueError: if a requested project id is not configured.
    """
    if not config.handles_profit_sharing:
        logger.info("Company does not handle profit sharing, nothing to compute")
        return []

    wanted: Optional[set[str]] = None
    if project_ids is not None:
        wanted = set(project_ids)
        known = {f.project.project_id for f in config.projects}
        unknown = sorted(wanted - known)
        if unknown:
            raise ValueError(f"Unknown project id(s): {', '.join(unknown)}")

    inputs: list[ProfitSharingInput] = []
    for figures in config.projects:
        project = figures.project
        if wanted is not None and project.project_id not in wanted:
            continue
        if not is_eligible(project):
            logger.info(
                "Skipping project %s (%s): not eligible for profit sharing",
                project.project_id,
                project.name,
            )
            continue

        inputs.append(
            ProfitSharingInput(
                project_id=project.project_id,
                project_name=project.name,
                total_income=figures.total_income,
                total_cost=figures.total_cost,
                net_profit=figures.net_profit,
                rules=project.rules,
            )
        )
    return inputs


# ---------------------------------------------------------------------------
# Flat storage row
# ---------------------------------------------------------------------------

RECORD_FIELDS: tuple[str, ...] = (
    "formula_type",
    "fixed_amount",
    "percent1",
    "percent2",
    "threshold1",
    "dynamic_increment",
)


def rules_from_record(record: Mapping[str, Any]) -> ProfitSharingRules:
    """
    Convert a flat storage row into ProfitSharingRules.

    The storage row has a fixed set of generic columns (see RECORD_FIELDS),
    interpreted per formula type:

    - every formula: fixed_amount -> fixed_amount, percent1 -> percent_rate,
    - TIERED with threshold1: two tiers split at threshold1, paid at
      percent1 below and percent2 above,
    - SPECIAL_FORMULA: dynamic_increment -> maximum_share,
    - DYNAMIC: fixed_amount -> base_amount, percent1 -> increment_percent,
      threshold1 -> increment_threshold.

    GROUPED groups and SPECIAL_FORMULA minimum_profit have no column and
    come back unset.
    """
    formula_type = str(record.get("formula_type") or "").strip().upper()
    fixed_amount = _optional_float(record.get("fixed_amount"), "fixed_amount")
    percent1 = _optional_float(record.get("percent1"), "percent1")
    percent2 = _optional_float(record.get("percent2"), "percent2")
    threshold1 = _optional_float(record.get("threshold1"), "threshold1")
    dynamic_increment = _optional_float(
        record.get("dynamic_increment"), "dynamic_increment"
    )

    tiers: tuple[TierConfig, ...] = ()
    if formula_type == "TIERED" and threshold1:
        tiers = (
            TierConfig(
                min_profit=0.0, max_profit=threshold1, percent_rate=percent1 or 0.0
            ),
            TierConfig(
                min_profit=threshold1, max_profit=None, percent_rate=percent2 or 0.0
            ),
        )

    maximum_share = dynamic_increment if formula_type == "SPECIAL_FORMULA" else None

    base_amount = increment_percent = increment_threshold = None
    if formula_type == "DYNAMIC":
        base_amount = fixed_amount
        increment_percent = percent1
        increment_threshold = threshold1

    return ProfitSharingRules(
        formula_type=formula_type,
        fixed_amount=fixed_amount,
        percent_rate=percent1,
        tiers=tiers,
        maximum_share=maximum_share,
        base_amount=base_amount,
        increment_percent=increment_percent,
        increment_threshold=increment_threshold,
    )


def rules_to_record(rules: ProfitSharingRules) -> dict[str, Any]:
    """
    Convert ProfitSharingRules into a flat storage row.

    This is the inverse of rules_from_record() for what the row can hold:
    only the first two tiers (sorted by min_profit) are kept, groups and
    minimum_profit are dropped.
    """
    tiers = sorted(rules.tiers, key=lambda t: t.min_profit)
    is_dynamic = rules.formula_type == "DYNAMIC"

    percent1 = rules.increment_percent if is_dynamic else rules.percent_rate
    if percent1 is None and tiers:
        percent1 = tiers[0].percent_rate

    if is_dynamic:
        threshold1 = rules.increment_threshold
    elif tiers:
        threshold1 = tiers[0].max_profit
    else:
        threshold1 = None

    return {
        "formula_type": rules.formula_type,
        "fixed_amount": rules.base_amount if is_dynamic else rules.fixed_amount,
        "percent1": percent1,
        "percent2": tiers[1].percent_rate if len(tiers) > 1 else None,
        "threshold1": threshold1,
        "dynamic_increment": (
            rules.maximum_share if rules.formula_type == "SPECIAL_FORMULA" else None
        ),
    }
