"""Pydantic models describing the deduction table configuration schema."""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Sequence

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    computed_field,
    field_validator,
    model_validator,
)
from typing_extensions import Self

REGIMES: tuple[str, ...] = ("national", "residence")


class ConfigurationError(ValueError):
    """Raised when configuration values violate schema expectations."""


class ImmutableModel(BaseModel):
    """Base class that freezes instances and rejects unknown fields."""

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)


def _require_regime(regime: str) -> str:
    value = str(regime)
    if value not in REGIMES:
        raise ValueError(f"Unknown tax regime '{regime}'")
    return value


class RegimeAmounts(ImmutableModel):
    """Pair of yen amounts for national income tax and residence tax."""

    national: int
    residence: int

    @model_validator(mode="after")
    def _validate_amounts(self) -> RegimeAmounts:
        if self.national < 0 or self.residence < 0:
            raise ConfigurationError("Deduction amounts must be non-negative")
        return self

    def for_regime(self, regime: str) -> int:
        return getattr(self, _require_regime(regime))


class IncomeBracket(ImmutableModel):
    """Income range with an exclusive lower and inclusive upper bound."""

    above: int | None = None
    upto: int | None = None

    @model_validator(mode="after")
    def _validate_bounds(self) -> Self:
        if self.above is not None and self.above < 0:
            raise ConfigurationError("Bracket lower bounds must be non-negative")
        if self.upto is not None and self.upto < 0:
            raise ConfigurationError("Bracket upper bounds must be non-negative")
        if self.above is not None and self.upto is not None and self.upto <= self.above:
            raise ConfigurationError(
                f"Bracket upper bound {self.upto} must exceed lower bound {self.above}"
            )
        return self

    def contains(self, value: int) -> bool:
        if self.above is not None and value <= self.above:
            return False
        if self.upto is not None and value > self.upto:
            return False
        return True


class AmountBracket(IncomeBracket):
    """Income bracket mapped to a single deduction amount."""

    amount: int

    @model_validator(mode="after")
    def _validate_amount(self) -> AmountBracket:
        if self.amount < 0:
            raise ConfigurationError("Deduction amounts must be non-negative")
        return self


class TaxpayerIncomeTier(IncomeBracket):
    """Taxpayer income tier used by the spouse deduction phase-out."""

    id: str


class SpouseSpecialBracket(IncomeBracket):
    """Spouse income bracket with one amount per taxpayer income tier."""

    amounts: Mapping[str, int]

    @field_validator("amounts", mode="before")
    @classmethod
    def _coerce_amounts(cls, value: Any) -> Mapping[str, int]:
        if isinstance(value, Mapping):
            return {str(key): int(val) for key, val in value.items()}
        raise ConfigurationError("Spouse special brackets require an 'amounts' mapping")

    @model_validator(mode="after")
    def _validate_amounts(self) -> SpouseSpecialBracket:
        if not self.amounts:
            raise ConfigurationError("Spouse special brackets require at least one amount")
        if any(amount < 0 for amount in self.amounts.values()):
            raise ConfigurationError("Deduction amounts must be non-negative")
        return self


class EmploymentIncomeBand(ImmutableModel):
    """One band of the employment income deduction formula.

    The net amount is ``floor(base * rate_percent / 100) + offset`` where
    ``base`` is the gross income, floored to ``rounding_unit`` when set.
    """

    upto: int | None = None
    rate_percent: int
    offset: int = 0
    rounding_unit: int | None = None

    @model_validator(mode="after")
    def _validate_band(self) -> EmploymentIncomeBand:
        if not 0 <= self.rate_percent <= 100:
            raise ConfigurationError("'rate_percent' must be between 0 and 100")
        if self.rounding_unit is not None and self.rounding_unit <= 0:
            raise ConfigurationError("'rounding_unit' must be a positive integer")
        return self


class EmploymentIncomeDeductionConfig(ImmutableModel):
    """Bands converting gross employment income into net employment income."""

    bands: Sequence[EmploymentIncomeBand]

    @model_validator(mode="after")
    def _validate_bands(self) -> EmploymentIncomeDeductionConfig:
        if not self.bands:
            raise ConfigurationError("Employment income deduction requires bands")
        last_upper: int | None = None
        for band in self.bands[:-1]:
            if band.upto is None:
                raise ConfigurationError("Only the final employment band may be open-ended")
            if last_upper is not None and band.upto <= last_upper:
                raise ConfigurationError("Employment income bands must be in ascending order")
            last_upper = band.upto
        if self.bands[-1].upto is not None:
            raise ConfigurationError("Final employment income band must be open-ended")
        return self


class EligibilityThresholds(ImmutableModel):
    """Total net income limits deciding which deduction applies."""

    dependent_income_limit: int
    spouse_income_limit: int
    spouse_special_income_limit: int
    specific_relative_income_limit: int
    specific_relative_age_categories: Sequence[str] = Field(default_factory=tuple)

    @field_validator("specific_relative_age_categories", mode="before")
    @classmethod
    def _coerce_categories(cls, value: Any) -> Sequence[str]:
        if value is None:
            return ()
        if isinstance(value, Iterable) and not isinstance(value, str):
            return tuple(str(entry) for entry in value)
        raise ConfigurationError("'specific_relative_age_categories' must be a list")

    @model_validator(mode="after")
    def _validate_limits(self) -> EligibilityThresholds:
        if self.spouse_special_income_limit <= self.spouse_income_limit:
            raise ConfigurationError(
                "Spouse special income limit must exceed the spouse income limit"
            )
        if self.specific_relative_income_limit <= self.dependent_income_limit:
            raise ConfigurationError(
                "Specific relative income limit must exceed the dependent income limit"
            )
        return self


class DependentAmountConfig(ImmutableModel):
    """Flat dependent deduction amounts by sub-type."""

    general: RegimeAmounts
    special: RegimeAmounts
    elderly: RegimeAmounts
    elderly_cohabiting: RegimeAmounts

    def for_kind(self, kind: str) -> RegimeAmounts:
        if kind not in ("general", "special", "elderly", "elderly_cohabiting"):
            raise ValueError(f"Unknown dependent deduction kind '{kind}'")
        return getattr(self, kind)


class SpouseDeductionConfig(ImmutableModel):
    """Spouse deduction amounts keyed by taxpayer income tier."""

    standard: Mapping[str, RegimeAmounts]
    elderly: Mapping[str, RegimeAmounts]


class SpouseSpecialConfig(ImmutableModel):
    """Spouse special deduction brackets, tabulated per regime."""

    national: Sequence[SpouseSpecialBracket]
    residence: Sequence[SpouseSpecialBracket]

    def for_regime(self, regime: str) -> Sequence[SpouseSpecialBracket]:
        return getattr(self, _require_regime(regime))


class SpecificRelativeConfig(ImmutableModel):
    """Specific relative special deduction brackets, tabulated per regime."""

    national: Sequence[AmountBracket]
    residence: Sequence[AmountBracket]

    def for_regime(self, regime: str) -> Sequence[AmountBracket]:
        return getattr(self, _require_regime(regime))


class DisabilityAmountConfig(ImmutableModel):
    """Disability deduction amounts."""

    regular: RegimeAmounts
    special: RegimeAmounts
    special_cohabiting: RegimeAmounts


class DeductionTables(ImmutableModel):
    """Structured representation of the statutory deduction tables."""

    meta: Mapping[str, Any] = Field(default_factory=dict)
    eligibility: EligibilityThresholds
    employment_income_deduction: EmploymentIncomeDeductionConfig
    taxpayer_income_tiers: Sequence[TaxpayerIncomeTier]
    dependent: DependentAmountConfig
    spouse: SpouseDeductionConfig
    spouse_special: SpouseSpecialConfig
    specific_relative_special: SpecificRelativeConfig
    disability: DisabilityAmountConfig

    @model_validator(mode="before")
    @classmethod
    def _prepare(cls, data: Any) -> Mapping[str, Any]:
        if not isinstance(data, Mapping):
            raise ConfigurationError("Configuration file must define a mapping at the top level")

        prepared = dict(data)
        meta = prepared.get("meta")
        if meta is None:
            prepared["meta"] = {}
        elif not isinstance(meta, Mapping):
            raise ConfigurationError("'meta' section must be a mapping if provided")
        return prepared

    @model_validator(mode="after")
    def _validate_tables(self) -> DeductionTables:
        self._validate_bracket_sequence("taxpayer_income_tiers", self.taxpayer_income_tiers)

        tier_ids = [tier.id for tier in self.taxpayer_income_tiers]
        if len(set(tier_ids)) != len(tier_ids):
            raise ConfigurationError("Taxpayer income tier identifiers must be unique")

        for label, amounts in (
            ("spouse.standard", self.spouse.standard),
            ("spouse.elderly", self.spouse.elderly),
        ):
            if set(amounts) != set(tier_ids):
                raise ConfigurationError(
                    f"'{label}' must define amounts for tiers {sorted(tier_ids)}"
                )

        for regime in REGIMES:
            brackets = self.spouse_special.for_regime(regime)
            self._validate_bracket_sequence(f"spouse_special.{regime}", brackets)
            for bracket in brackets:
                if set(bracket.amounts) != set(tier_ids):
                    raise ConfigurationError(
                        f"'spouse_special.{regime}' brackets must define amounts for "
                        f"tiers {sorted(tier_ids)}"
                    )
            self._validate_bracket_sequence(
                f"specific_relative_special.{regime}",
                self.specific_relative_special.for_regime(regime),
            )

        return self

    @staticmethod
    def _validate_bracket_sequence(label: str, brackets: Sequence[IncomeBracket]) -> None:
        if not brackets:
            raise ConfigurationError(f"'{label}' must define at least one bracket")
        previous: IncomeBracket | None = None
        for bracket in brackets:
            if previous is not None:
                if previous.upto is None:
                    raise ConfigurationError(
                        f"'{label}' has brackets after an open-ended bracket"
                    )
                if bracket.above != previous.upto:
                    raise ConfigurationError(
                        f"'{label}' brackets must be contiguous: expected lower bound "
                        f"{previous.upto}, found {bracket.above}"
                    )
            previous = bracket

    @computed_field
    @property
    def tax_year(self) -> int | None:
        value = self.meta.get("tax_year")
        return int(value) if value is not None else None


__all__ = [
    "AmountBracket",
    "ConfigurationError",
    "DeductionTables",
    "DependentAmountConfig",
    "DisabilityAmountConfig",
    "EligibilityThresholds",
    "EmploymentIncomeBand",
    "EmploymentIncomeDeductionConfig",
    "ImmutableModel",
    "IncomeBracket",
    "REGIMES",
    "RegimeAmounts",
    "SpecificRelativeConfig",
    "SpouseDeductionConfig",
    "SpouseSpecialBracket",
    "SpouseSpecialConfig",
    "TaxpayerIncomeTier",
    "ValidationError",
]
