"""Amount lookups against the statutory deduction tables.

Each function resolves a single yen amount for one regime (``"national"`` for
income tax or ``"residence"`` for residence tax) and can be called without the
aggregator, for example to preview an amount before a record is saved. Values
outside every bracket resolve to zero.
"""

from __future__ import annotations

from jptax.backend.app.models import DependentDeductionKind, DisabilityLevel, TaxRegime
from jptax.backend.config.schema import DeductionTables, TaxpayerIncomeTier
from jptax.backend.config.tables import load_deduction_tables

from .utils import bracket_amount, find_bracket


def taxpayer_income_tier(
    taxpayer_net_income: int, tables: DeductionTables | None = None
) -> TaxpayerIncomeTier | None:
    """Return the phase-out tier for the taxpayer, or ``None`` above the last tier."""

    tables = tables or load_deduction_tables()
    return find_bracket(taxpayer_net_income, tables.taxpayer_income_tiers)


def get_dependent_deduction(
    kind: DependentDeductionKind,
    regime: TaxRegime,
    tables: DeductionTables | None = None,
) -> int:
    tables = tables or load_deduction_tables()
    return tables.dependent.for_kind(kind).for_regime(regime)


def get_spouse_deduction(
    is_elderly: bool,
    taxpayer_net_income: int,
    regime: TaxRegime,
    tables: DeductionTables | None = None,
) -> int:
    """Return the spouse deduction after the taxpayer income phase-out."""

    tables = tables or load_deduction_tables()
    tier = taxpayer_income_tier(taxpayer_net_income, tables)
    if tier is None:
        return 0

    amounts = tables.spouse.elderly if is_elderly else tables.spouse.standard
    return amounts[tier.id].for_regime(regime)


def get_spouse_special_deduction(
    spouse_income: int,
    taxpayer_net_income: int,
    regime: TaxRegime,
    tables: DeductionTables | None = None,
) -> int:
    """Return the spouse special deduction for the spouse and taxpayer incomes."""

    tables = tables or load_deduction_tables()
    tier = taxpayer_income_tier(taxpayer_net_income, tables)
    if tier is None:
        return 0

    bracket = find_bracket(spouse_income, tables.spouse_special.for_regime(regime))
    if bracket is None:
        return 0
    return bracket.amounts[tier.id]


def get_specific_relative_deduction(
    income: int, regime: TaxRegime, tables: DeductionTables | None = None
) -> int:
    tables = tables or load_deduction_tables()
    return bracket_amount(income, tables.specific_relative_special.for_regime(regime))


def get_disability_deduction(
    level: DisabilityLevel,
    is_cohabiting: bool,
    regime: TaxRegime,
    tables: DeductionTables | None = None,
) -> int:
    """Return the disability deduction; cohabiting special disability uses its own rate."""

    if level == "none":
        return 0
    tables = tables or load_deduction_tables()
    disability = tables.disability
    if level == "regular":
        amounts = disability.regular
    elif level == "special":
        amounts = disability.special_cohabiting if is_cohabiting else disability.special
    else:
        raise ValueError(f"Unknown disability level '{level}'")
    return amounts.for_regime(regime)


__all__ = [
    "get_dependent_deduction",
    "get_disability_deduction",
    "get_specific_relative_deduction",
    "get_spouse_deduction",
    "get_spouse_special_deduction",
    "taxpayer_income_tier",
]
