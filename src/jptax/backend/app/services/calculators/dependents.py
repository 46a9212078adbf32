"""Aggregate dependent-related deductions for a taxpayer."""

from __future__ import annotations

from collections.abc import Iterable

from jptax.backend.app.models import (
    DeductionBreakdown,
    DeductionResults,
    DeductionType,
    OtherDependent,
    RegimeDeductions,
    Spouse,
    TaxRegime,
)
from jptax.backend.config.schema import REGIMES, DeductionTables
from jptax.backend.config.tables import load_deduction_tables

from .amounts import (
    get_dependent_deduction,
    get_disability_deduction,
    get_specific_relative_deduction,
    get_spouse_deduction,
    get_spouse_special_deduction,
    taxpayer_income_tier,
)
from .eligibility import classify_dependent, dependent_deduction_kind
from .income import total_net_income
from .utils import format_yen

_FIELD_BY_TYPE: dict[str, str] = {
    "spouse": "spouse_deduction",
    "spouse_special": "spouse_special_deduction",
    "specific_relative_special": "specific_relative_deduction",
    "general_dependent": "dependent_deduction",
    "special_dependent": "dependent_deduction",
    "elderly_dependent": "dependent_deduction",
}

_DEPENDENT_NOTES: dict[str, str] = {
    "special": "Age 19-22 (special dependent)",
    "elderly": "Age 70+ elderly dependent",
    "elderly_cohabiting": "Age 70+ cohabiting parent",
    "general": "General dependent",
}


def _amount_for(
    deduction_type: DeductionType,
    dependent: Spouse | OtherDependent,
    net_income: int,
    taxpayer_net_income: int,
    regime: TaxRegime,
    tables: DeductionTables,
) -> int:
    if deduction_type == "spouse":
        return get_spouse_deduction(dependent.is_elderly, taxpayer_net_income, regime, tables)
    if deduction_type == "spouse_special":
        return get_spouse_special_deduction(net_income, taxpayer_net_income, regime, tables)
    if deduction_type == "specific_relative_special":
        return get_specific_relative_deduction(net_income, regime, tables)
    return get_dependent_deduction(dependent_deduction_kind(dependent), regime, tables)


def _describe(
    deduction_type: DeductionType,
    dependent: Spouse | OtherDependent,
    tables: DeductionTables,
) -> str:
    thresholds = tables.eligibility
    if deduction_type == "spouse":
        return "Elderly spouse" if dependent.is_elderly else "Spouse deduction"
    if deduction_type == "spouse_special":
        return (
            "Spouse special deduction (income "
            f"{format_yen(thresholds.spouse_income_limit + 1)}-"
            f"{format_yen(thresholds.spouse_special_income_limit)} yen)"
        )
    if deduction_type == "specific_relative_special":
        return (
            "Age 19-69 with income "
            f"{format_yen(thresholds.dependent_income_limit + 1)}-"
            f"{format_yen(thresholds.specific_relative_income_limit)} yen"
        )
    return _DEPENDENT_NOTES[dependent_deduction_kind(dependent)]


def _phase_out_note(
    taxpayer_net_income: int, tables: DeductionTables
) -> str | None:
    tiers = tables.taxpayer_income_tiers
    tier = taxpayer_income_tier(taxpayer_net_income, tables)
    if tier is None:
        return (
            "Phased out: taxpayer income exceeds "
            f"{format_yen(tiers[-1].upto or 0)} yen"
        )
    if tier.id != tiers[0].id:
        return "Reduced by taxpayer income phase-out"
    return None


def _not_eligible_note(dependent: Spouse | OtherDependent) -> str:
    if dependent.relationship != "spouse" and dependent.age_category == "under16":
        return "Under 16 (no dependent deduction)"
    return "Income exceeds threshold for deductions"


def calculate_dependent_breakdown(
    dependent: Spouse | OtherDependent,
    taxpayer_net_income: int,
    tables: DeductionTables,
) -> DeductionBreakdown:
    """Return the deduction outcome for a single ``dependent``."""

    net_income = total_net_income(dependent.income, tables)
    deduction_type = classify_dependent(dependent, net_income=net_income, tables=tables)

    notes: list[str] = []
    per_regime: dict[str, dict[str, int]] = {regime: {} for regime in REGIMES}

    if dependent.disability != "none":
        for regime in REGIMES:
            per_regime[regime]["disability_deduction"] = get_disability_deduction(
                dependent.disability, dependent.is_cohabiting, regime, tables
            )
        notes.append(f"Disability deduction ({dependent.disability})")

    field_name = _FIELD_BY_TYPE.get(deduction_type)
    if field_name is not None:
        for regime in REGIMES:
            per_regime[regime][field_name] = _amount_for(
                deduction_type,
                dependent,
                net_income,
                taxpayer_net_income,
                regime,
                tables,
            )
        notes.append(_describe(deduction_type, dependent, tables))
        if deduction_type in {"spouse", "spouse_special"}:
            phase_out = _phase_out_note(taxpayer_net_income, tables)
            if phase_out:
                notes.append(phase_out)
    elif dependent.disability != "none":
        deduction_type = "disability"
    else:
        notes.append(_not_eligible_note(dependent))

    return DeductionBreakdown(
        dependent=dependent,
        total_net_income=net_income,
        deduction_type=deduction_type,
        national_tax=RegimeDeductions(**per_regime["national"]),
        residence_tax=RegimeDeductions(**per_regime["residence"]),
        notes=tuple(notes),
    )


def calculate_dependent_deductions(
    dependents: Iterable[Spouse | OtherDependent],
    taxpayer_net_income: int,
    *,
    tables: DeductionTables | None = None,
) -> DeductionResults:
    """Determine deductions for every dependent, preserving input order."""

    if taxpayer_net_income < 0:
        raise ValueError("taxpayer_net_income cannot be negative")

    tables = tables or load_deduction_tables()
    breakdown = tuple(
        calculate_dependent_breakdown(dependent, taxpayer_net_income, tables)
        for dependent in dependents
    )
    return DeductionResults(breakdown=breakdown)


def count_qualified_dependents(
    results: DeductionResults, tables: DeductionTables | None = None
) -> int:
    """Count dependents within the dependent income limit.

    The count feeds the residence tax non-taxable threshold, so spouses and
    children under 16 are included alongside deductible dependents.
    """

    limit = (tables or load_deduction_tables()).eligibility.dependent_income_limit
    return sum(1 for entry in results.breakdown if entry.total_net_income <= limit)


def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}{'s' if count > 1 else ''}"


def summarise_deductions(results: DeductionResults) -> str:
    """Return a short human-readable summary of the deductions applied."""

    national = results.national_tax
    parts: list[str] = []

    if national.spouse_deduction > 0:
        parts.append("Spouse deduction")
    if national.spouse_special_deduction > 0:
        parts.append("Spouse special deduction")
    if national.dependent_deduction > 0:
        count = sum(
            1 for entry in results.breakdown if entry.national_tax.dependent_deduction > 0
        )
        parts.append(_plural(count, "dependent"))
    if national.specific_relative_deduction > 0:
        count = sum(
            1
            for entry in results.breakdown
            if entry.national_tax.specific_relative_deduction > 0
        )
        parts.append(_plural(count, "specific relative"))
    if national.disability_deduction > 0:
        count = sum(
            1 for entry in results.breakdown if entry.national_tax.disability_deduction > 0
        )
        parts.append(_plural(count, "disability deduction"))

    return ", ".join(parts) if parts else "No dependent deductions"


__all__ = [
    "calculate_dependent_breakdown",
    "calculate_dependent_deductions",
    "count_qualified_dependents",
    "summarise_deductions",
]
