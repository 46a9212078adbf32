"""Domain-specific calculation helpers."""

from .amounts import (
    get_dependent_deduction,
    get_disability_deduction,
    get_specific_relative_deduction,
    get_spouse_deduction,
    get_spouse_special_deduction,
    taxpayer_income_tier,
)
from .dependents import (
    calculate_dependent_breakdown,
    calculate_dependent_deductions,
    count_qualified_dependents,
    summarise_deductions,
)
from .eligibility import (
    classify_dependent,
    dependent_deduction_kind,
    is_elderly_cohabiting_parent,
    is_elderly_dependent,
    is_eligible_for_dependent_deduction,
    is_eligible_for_specific_relative_deduction,
    is_eligible_for_spouse_deduction,
    is_eligible_for_spouse_special_deduction,
    is_special_dependent,
)
from .income import net_employment_income, total_net_income
from .utils import bracket_amount, find_bracket, format_yen

__all__ = [
    "bracket_amount",
    "calculate_dependent_breakdown",
    "calculate_dependent_deductions",
    "classify_dependent",
    "count_qualified_dependents",
    "dependent_deduction_kind",
    "find_bracket",
    "format_yen",
    "get_dependent_deduction",
    "get_disability_deduction",
    "get_specific_relative_deduction",
    "get_spouse_deduction",
    "get_spouse_special_deduction",
    "is_elderly_cohabiting_parent",
    "is_elderly_dependent",
    "is_eligible_for_dependent_deduction",
    "is_eligible_for_specific_relative_deduction",
    "is_eligible_for_spouse_deduction",
    "is_eligible_for_spouse_special_deduction",
    "is_special_dependent",
    "net_employment_income",
    "summarise_deductions",
    "taxpayer_income_tier",
    "total_net_income",
]
