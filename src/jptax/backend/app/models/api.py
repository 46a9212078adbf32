"""Pydantic models describing the public API surface."""

from __future__ import annotations

from typing import Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from .dependents import (
    DeductionType,
    Dependent,
    DependentDeductionKind,
    DisabilityLevel,
    PersonIncome,
    Relationship,
    TaxRegime,
)

__all__ = [
    "BreakdownEntry",
    "DeductionPreviewRequest",
    "DeductionPreviewResponse",
    "DeductionRequest",
    "DeductionResponse",
    "NetIncomeRequest",
    "NetIncomeResponse",
    "PREVIEW_TABLES",
    "RegimeTotals",
    "ResponseMeta",
    "format_validation_error",
]

MAX_DEPENDENTS = 50

PREVIEW_TABLES: tuple[str, ...] = (
    "dependent",
    "spouse",
    "spouse_special",
    "specific_relative_special",
    "disability",
)


class NetIncomeRequest(PersonIncome):
    """Income components submitted for a net income preview."""


class DeductionRequest(BaseModel):
    """Taxpayer income and the dependents to evaluate."""

    model_config = ConfigDict(extra="forbid")

    taxpayer_net_income: int = Field(..., ge=0)
    dependents: list[Dependent] = Field(default_factory=list, max_length=MAX_DEPENDENTS)

    @model_validator(mode="after")
    def _ensure_unique_ids(self) -> "DeductionRequest":
        seen: set[str] = set()
        for dependent in self.dependents:
            if dependent.id in seen:
                raise ValueError(f"Duplicate dependent id '{dependent.id}'")
            seen.add(dependent.id)
        return self


class DeductionPreviewRequest(BaseModel):
    """Direct lookup against one amount table."""

    model_config = ConfigDict(extra="forbid")

    table: str
    regime: TaxRegime | None = None
    kind: DependentDeductionKind | None = None
    is_elderly: bool = False
    income: int | None = Field(default=None, ge=0)
    taxpayer_net_income: int | None = Field(default=None, ge=0)
    level: DisabilityLevel | None = None
    is_cohabiting: bool = False

    @field_validator("table", mode="before")
    @classmethod
    def _normalise_table(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @model_validator(mode="after")
    def _require_table_inputs(self) -> "DeductionPreviewRequest":
        required: dict[str, tuple[str, ...]] = {
            "dependent": ("kind",),
            "spouse": ("taxpayer_net_income",),
            "spouse_special": ("income", "taxpayer_net_income"),
            "specific_relative_special": ("income",),
            "disability": ("level",),
        }
        missing = [
            name for name in required.get(self.table, ()) if getattr(self, name) is None
        ]
        if missing:
            raise ValueError(
                f"Table '{self.table}' requires: {', '.join(missing)}"
            )
        return self


class RegimeTotals(BaseModel):
    """Serialised deduction sub-totals for one regime."""

    model_config = ConfigDict(extra="forbid")

    dependent_deduction: int
    spouse_deduction: int
    spouse_special_deduction: int
    specific_relative_deduction: int
    disability_deduction: int
    total: int


class BreakdownEntry(BaseModel):
    """Serialised per-dependent deduction outcome."""

    model_config = ConfigDict(extra="forbid")

    dependent_id: str
    name: str | None = None
    relationship: Relationship
    total_net_income: int
    deduction_type: DeductionType
    label: str
    national_tax_amount: int
    residence_tax_amount: int
    notes: list[str] = Field(default_factory=list)


class ResponseMeta(BaseModel):
    """Metadata accompanying calculation responses."""

    model_config = ConfigDict(extra="forbid")

    tax_year: int | None = None
    taxpayer_net_income: int | None = None


class DeductionResponse(BaseModel):
    """Aggregated deductions returned by the API."""

    model_config = ConfigDict(extra="forbid")

    national_tax: RegimeTotals
    residence_tax: RegimeTotals
    breakdown: list[BreakdownEntry]
    qualified_dependents: int
    summary: str
    meta: ResponseMeta


class NetIncomeResponse(BaseModel):
    """Net income figures derived from gross components."""

    model_config = ConfigDict(extra="forbid")

    gross_employment_income: int
    net_employment_income: int
    other_net_income: int
    total_net_income: int
    within_dependent_income_limit: bool


class DeductionPreviewResponse(BaseModel):
    """Amounts returned by a single table lookup."""

    model_config = ConfigDict(extra="forbid")

    table: str
    national: int | None = None
    residence: int | None = None


def format_validation_error(error: ValidationError) -> str:
    """Return a concise human-readable description of validation issues."""

    messages: list[str] = []
    for issue in error.errors():
        location = ".".join(str(part) for part in issue.get("loc", ()))
        message = issue.get("msg", "Invalid value")
        if "greater than or equal to 0" in message.lower():
            message = "value cannot be negative"
        if location:
            messages.append(f"{location}: {message}")
        else:
            messages.append(message)

    details = "; ".join(messages) if messages else str(error)
    return f"Invalid deduction payload: {details}"
