"""Eligibility classifier deciding which deduction a dependent qualifies for.

The dependent, spouse, spouse special and specific relative special deductions
are mutually exclusive. Classification follows a fixed precedence:

1. spouse with total net income up to the spouse limit;
2. spouse above that limit, up to the spouse special limit;
3. a non-spouse aged 19 to 69 above the dependent limit, up to the specific
   relative limit;
4. a non-spouse aged 16 or over, within the dependent limit;
5. otherwise not eligible.

The disability deduction is decided independently by the aggregator.
"""

from __future__ import annotations

from jptax.backend.app.models import (
    DeductionType,
    DependentDeductionKind,
    OtherDependent,
    Spouse,
)
from jptax.backend.config.schema import DeductionTables, EligibilityThresholds
from jptax.backend.config.tables import load_deduction_tables

from .income import total_net_income


def _thresholds(tables: DeductionTables | None) -> EligibilityThresholds:
    return (tables or load_deduction_tables()).eligibility


def is_eligible_for_spouse_deduction(
    dependent: Spouse | OtherDependent,
    net_income: int,
    tables: DeductionTables | None = None,
) -> bool:
    if dependent.relationship != "spouse":
        return False
    return net_income <= _thresholds(tables).spouse_income_limit


def is_eligible_for_spouse_special_deduction(
    dependent: Spouse | OtherDependent,
    net_income: int,
    tables: DeductionTables | None = None,
) -> bool:
    if dependent.relationship != "spouse":
        return False
    thresholds = _thresholds(tables)
    return (
        thresholds.spouse_income_limit
        < net_income
        <= thresholds.spouse_special_income_limit
    )


def is_eligible_for_specific_relative_deduction(
    dependent: Spouse | OtherDependent,
    net_income: int,
    tables: DeductionTables | None = None,
) -> bool:
    """Return ``True`` for 19 to 69 year olds just above the dependent limit."""

    if dependent.relationship == "spouse":
        return False
    thresholds = _thresholds(tables)
    if dependent.age_category not in thresholds.specific_relative_age_categories:
        return False
    return (
        thresholds.dependent_income_limit
        < net_income
        <= thresholds.specific_relative_income_limit
    )


def is_eligible_for_dependent_deduction(
    dependent: Spouse | OtherDependent,
    net_income: int,
    tables: DeductionTables | None = None,
) -> bool:
    """Return ``True`` for non-spouse dependents aged 16 or over within the limit."""

    if dependent.relationship == "spouse":
        return False
    if dependent.age_category == "under16":
        return False
    return net_income <= _thresholds(tables).dependent_income_limit


def is_special_dependent(dependent: Spouse | OtherDependent) -> bool:
    return dependent.relationship != "spouse" and dependent.age_category == "19to22"


def is_elderly_dependent(dependent: Spouse | OtherDependent) -> bool:
    return dependent.relationship != "spouse" and dependent.age_category == "70plus"


def is_elderly_cohabiting_parent(dependent: Spouse | OtherDependent) -> bool:
    return (
        is_elderly_dependent(dependent)
        and dependent.relationship == "parent"
        and dependent.is_cohabiting
    )


def dependent_deduction_kind(dependent: Spouse | OtherDependent) -> DependentDeductionKind:
    """Return the amount sub-type used for the flat dependent deduction."""

    if is_special_dependent(dependent):
        return "special"
    if is_elderly_cohabiting_parent(dependent):
        return "elderly_cohabiting"
    if is_elderly_dependent(dependent):
        return "elderly"
    return "general"


def classify_dependent(
    dependent: Spouse | OtherDependent,
    *,
    net_income: int | None = None,
    tables: DeductionTables | None = None,
) -> DeductionType:
    """Return the deduction type for ``dependent``, ignoring disability."""

    tables = tables or load_deduction_tables()
    if net_income is None:
        net_income = total_net_income(dependent.income, tables)

    if is_eligible_for_spouse_deduction(dependent, net_income, tables):
        return "spouse"
    if is_eligible_for_spouse_special_deduction(dependent, net_income, tables):
        return "spouse_special"
    if is_eligible_for_specific_relative_deduction(dependent, net_income, tables):
        return "specific_relative_special"
    if is_eligible_for_dependent_deduction(dependent, net_income, tables):
        if is_special_dependent(dependent):
            return "special_dependent"
        if is_elderly_dependent(dependent):
            return "elderly_dependent"
        return "general_dependent"
    return "not_eligible"


__all__ = [
    "classify_dependent",
    "dependent_deduction_kind",
    "is_elderly_cohabiting_parent",
    "is_elderly_dependent",
    "is_eligible_for_dependent_deduction",
    "is_eligible_for_specific_relative_deduction",
    "is_eligible_for_spouse_deduction",
    "is_eligible_for_spouse_special_deduction",
    "is_special_dependent",
]
