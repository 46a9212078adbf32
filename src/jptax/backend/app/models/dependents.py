"""Dependent records consumed by the deduction engine."""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

__all__ = [
    "AGE_CATEGORIES",
    "DEDUCTION_TYPE_LABELS",
    "DISABILITY_LEVELS",
    "Dependent",
    "DependentAgeCategory",
    "DependentDeductionKind",
    "DeductionType",
    "DisabilityLevel",
    "OtherDependent",
    "PersonIncome",
    "Relationship",
    "Spouse",
    "SpouseAgeCategory",
    "TaxRegime",
    "parse_dependent",
]

Relationship = Literal["spouse", "child", "parent", "other"]
SpouseAgeCategory = Literal["under70", "70plus"]
DependentAgeCategory = Literal["under16", "16to18", "19to22", "23to69", "70plus"]
DisabilityLevel = Literal["none", "regular", "special"]
TaxRegime = Literal["national", "residence"]
DependentDeductionKind = Literal["general", "special", "elderly", "elderly_cohabiting"]
DeductionType = Literal[
    "spouse",
    "spouse_special",
    "general_dependent",
    "special_dependent",
    "elderly_dependent",
    "specific_relative_special",
    "disability",
    "not_eligible",
]

AGE_CATEGORIES: tuple[str, ...] = ("under16", "16to18", "19to22", "23to69", "70plus")
DISABILITY_LEVELS: tuple[str, ...] = ("none", "regular", "special")

DEDUCTION_TYPE_LABELS: dict[DeductionType, str] = {
    "spouse": "Spouse deduction",
    "spouse_special": "Spouse special deduction",
    "general_dependent": "General dependent deduction",
    "special_dependent": "Special dependent deduction",
    "elderly_dependent": "Elderly dependent deduction",
    "specific_relative_special": "Specific relative special deduction",
    "disability": "Disability deduction only",
    "not_eligible": "Not eligible",
}


class PersonIncome(BaseModel):
    """Income components of a single dependent, in whole yen."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    gross_employment_income: int = Field(default=0, ge=0)
    other_net_income: int = Field(default=0, ge=0)


class _DependentBase(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str = Field(..., min_length=1)
    name: str | None = None
    income: PersonIncome = Field(default_factory=PersonIncome)
    disability: DisabilityLevel = "none"
    is_cohabiting: bool = False


class Spouse(_DependentBase):
    """The taxpayer's spouse; only two age categories apply."""

    relationship: Literal["spouse"] = "spouse"
    age_category: SpouseAgeCategory = "under70"

    @property
    def is_elderly(self) -> bool:
        return self.age_category == "70plus"


class OtherDependent(_DependentBase):
    """A child, parent or other relative supported by the taxpayer."""

    relationship: Literal["child", "parent", "other"]
    age_category: DependentAgeCategory

    @property
    def is_elderly(self) -> bool:
        return self.age_category == "70plus"


Dependent = Annotated[Union[Spouse, OtherDependent], Field(discriminator="relationship")]

_DEPENDENT_ADAPTER: TypeAdapter[Spouse | OtherDependent] = TypeAdapter(Dependent)


def parse_dependent(data: object) -> Spouse | OtherDependent:
    """Validate a raw mapping into the matching dependent record."""

    return _DEPENDENT_ADAPTER.validate_python(data)
