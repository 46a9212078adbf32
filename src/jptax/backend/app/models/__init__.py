"""Typed records shared across the deduction services.

Dependent records are frozen Pydantic models so malformed input never reaches
the engine; derived results are lightweight frozen dataclasses whose totals are
computed on read.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .api import (
    DeductionPreviewRequest,
    DeductionPreviewResponse,
    DeductionRequest,
    DeductionResponse,
    NetIncomeRequest,
    NetIncomeResponse,
    format_validation_error,
)
from .dependents import (
    AGE_CATEGORIES,
    DEDUCTION_TYPE_LABELS,
    DISABILITY_LEVELS,
    Dependent,
    DependentAgeCategory,
    DependentDeductionKind,
    DeductionType,
    DisabilityLevel,
    OtherDependent,
    PersonIncome,
    Relationship,
    Spouse,
    SpouseAgeCategory,
    TaxRegime,
    parse_dependent,
)

__all__ = [
    "AGE_CATEGORIES",
    "DEDUCTION_TYPE_LABELS",
    "DISABILITY_LEVELS",
    "DeductionBreakdown",
    "DeductionPreviewRequest",
    "DeductionPreviewResponse",
    "DeductionRequest",
    "DeductionResponse",
    "DeductionResults",
    "DeductionType",
    "Dependent",
    "DependentAgeCategory",
    "DependentDeductionKind",
    "DisabilityLevel",
    "NetIncomeRequest",
    "NetIncomeResponse",
    "OtherDependent",
    "PersonIncome",
    "RegimeDeductions",
    "Relationship",
    "Spouse",
    "SpouseAgeCategory",
    "TaxRegime",
    "format_validation_error",
    "parse_dependent",
]


@dataclass(frozen=True, slots=True)
class RegimeDeductions:
    """Deduction sub-totals for one tax regime."""

    dependent_deduction: int = 0
    spouse_deduction: int = 0
    spouse_special_deduction: int = 0
    specific_relative_deduction: int = 0
    disability_deduction: int = 0

    @property
    def total(self) -> int:
        return (
            self.dependent_deduction
            + self.spouse_deduction
            + self.spouse_special_deduction
            + self.specific_relative_deduction
            + self.disability_deduction
        )

    def merge(self, other: RegimeDeductions) -> RegimeDeductions:
        return RegimeDeductions(
            dependent_deduction=self.dependent_deduction + other.dependent_deduction,
            spouse_deduction=self.spouse_deduction + other.spouse_deduction,
            spouse_special_deduction=(
                self.spouse_special_deduction + other.spouse_special_deduction
            ),
            specific_relative_deduction=(
                self.specific_relative_deduction + other.specific_relative_deduction
            ),
            disability_deduction=self.disability_deduction + other.disability_deduction,
        )

    def as_dict(self) -> dict[str, int]:
        return {
            "dependent_deduction": self.dependent_deduction,
            "spouse_deduction": self.spouse_deduction,
            "spouse_special_deduction": self.spouse_special_deduction,
            "specific_relative_deduction": self.specific_relative_deduction,
            "disability_deduction": self.disability_deduction,
            "total": self.total,
        }


@dataclass(frozen=True, slots=True)
class DeductionBreakdown:
    """Outcome of the deduction determination for a single dependent."""

    dependent: Spouse | OtherDependent
    total_net_income: int
    deduction_type: DeductionType
    national_tax: RegimeDeductions = field(default_factory=RegimeDeductions)
    residence_tax: RegimeDeductions = field(default_factory=RegimeDeductions)
    notes: tuple[str, ...] = ()

    @property
    def national_tax_amount(self) -> int:
        return self.national_tax.total

    @property
    def residence_tax_amount(self) -> int:
        return self.residence_tax.total

    def as_dict(self) -> dict[str, Any]:
        return {
            "dependent_id": self.dependent.id,
            "name": self.dependent.name,
            "relationship": self.dependent.relationship,
            "total_net_income": self.total_net_income,
            "deduction_type": self.deduction_type,
            "label": DEDUCTION_TYPE_LABELS[self.deduction_type],
            "national_tax_amount": self.national_tax_amount,
            "residence_tax_amount": self.residence_tax_amount,
            "notes": list(self.notes),
        }


@dataclass(frozen=True, slots=True)
class DeductionResults:
    """Aggregated deductions across all dependents of one taxpayer."""

    breakdown: tuple[DeductionBreakdown, ...] = ()

    @property
    def national_tax(self) -> RegimeDeductions:
        totals = RegimeDeductions()
        for entry in self.breakdown:
            totals = totals.merge(entry.national_tax)
        return totals

    @property
    def residence_tax(self) -> RegimeDeductions:
        totals = RegimeDeductions()
        for entry in self.breakdown:
            totals = totals.merge(entry.residence_tax)
        return totals
