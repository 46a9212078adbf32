"""Unit tests for the dependent deduction aggregator."""

from __future__ import annotations

from typing import get_args

import pytest
from pydantic import ValidationError

from jptax.backend.app.models import (
    DEDUCTION_TYPE_LABELS,
    DeductionType,
    OtherDependent,
    PersonIncome,
    Spouse,
)
from jptax.backend.app.models.api import BreakdownEntry
from jptax.backend.app.services.calculators import (
    calculate_dependent_deductions,
    count_qualified_dependents,
    summarise_deductions,
)

MAIN_FIELDS = (
    "dependent_deduction",
    "spouse_deduction",
    "spouse_special_deduction",
    "specific_relative_deduction",
)


def spouse(net_income: int = 0, **overrides) -> Spouse:
    fields = {"id": "spouse", "income": PersonIncome(other_net_income=net_income)}
    fields.update(overrides)
    return Spouse(**fields)


def relative(
    identifier: str,
    age_category: str,
    net_income: int = 0,
    relationship: str = "child",
    **overrides,
) -> OtherDependent:
    fields = {
        "id": identifier,
        "relationship": relationship,
        "age_category": age_category,
        "income": PersonIncome(other_net_income=net_income),
    }
    fields.update(overrides)
    return OtherDependent(**fields)


def test_empty_household_has_no_deductions() -> None:
    results = calculate_dependent_deductions([], 5_000_000)

    assert results.breakdown == ()
    assert results.national_tax.total == 0
    assert results.residence_tax.total == 0
    assert summarise_deductions(results) == "No dependent deductions"


def test_taxpayer_income_is_required() -> None:
    with pytest.raises(TypeError):
        calculate_dependent_deductions([spouse()])  # type: ignore[call-arg]


def test_negative_taxpayer_income_is_rejected() -> None:
    with pytest.raises(ValueError):
        calculate_dependent_deductions([spouse()], -1)


def test_child_at_dependent_threshold_receives_general_deduction() -> None:
    child = OtherDependent(
        id="child",
        relationship="child",
        age_category="16to18",
        income=PersonIncome(gross_employment_income=1_230_000),
    )

    results = calculate_dependent_deductions([child], 5_000_000)
    entry = results.breakdown[0]

    assert entry.total_net_income == 580_000
    assert entry.deduction_type == "general_dependent"
    assert results.national_tax.dependent_deduction == 380_000
    assert results.residence_tax.dependent_deduction == 330_000
    assert entry.notes == ("General dependent",)


def test_child_one_yen_over_threshold_is_not_eligible() -> None:
    child = OtherDependent(
        id="child",
        relationship="child",
        age_category="16to18",
        income=PersonIncome(gross_employment_income=1_230_001),
    )

    results = calculate_dependent_deductions([child], 5_000_000)
    entry = results.breakdown[0]

    assert entry.deduction_type == "not_eligible"
    assert entry.national_tax_amount == 0
    assert entry.notes == ("Income exceeds threshold for deductions",)


def test_spouse_special_upper_edge() -> None:
    at_limit = calculate_dependent_deductions([spouse(1_330_000)], 9_000_000)
    over_limit = calculate_dependent_deductions([spouse(1_330_001)], 9_000_000)

    assert at_limit.breakdown[0].deduction_type == "spouse_special"
    assert at_limit.national_tax.spouse_special_deduction == 30_000
    assert over_limit.breakdown[0].deduction_type == "not_eligible"
    assert over_limit.national_tax.total == 0


def test_specific_relative_upper_edge() -> None:
    at_limit = calculate_dependent_deductions([relative("c", "19to22", 1_230_000)], 5_000_000)
    over_limit = calculate_dependent_deductions([relative("c", "19to22", 1_230_001)], 5_000_000)

    assert at_limit.breakdown[0].deduction_type == "specific_relative_special"
    assert at_limit.national_tax.specific_relative_deduction == 30_000
    assert over_limit.breakdown[0].deduction_type == "not_eligible"
    assert over_limit.national_tax.specific_relative_deduction == 0


def test_spouse_deduction_in_middle_taxpayer_tier() -> None:
    results = calculate_dependent_deductions([spouse()], 9_200_000)
    entry = results.breakdown[0]

    assert entry.deduction_type == "spouse"
    assert results.national_tax.spouse_deduction == 260_000
    assert results.residence_tax.spouse_deduction == 220_000
    assert "Reduced by taxpayer income phase-out" in entry.notes


def test_under_16_child_with_disability_records_disability_only() -> None:
    child = relative("c", "under16", disability="regular")

    results = calculate_dependent_deductions([child], 5_000_000)
    entry = results.breakdown[0]

    assert entry.deduction_type == "disability"
    assert results.national_tax.dependent_deduction == 0
    assert results.residence_tax.dependent_deduction == 0
    assert results.national_tax.disability_deduction == 270_000
    assert results.residence_tax.disability_deduction == 260_000
    assert entry.notes == ("Disability deduction (regular)",)


def test_under_16_child_without_disability_is_not_eligible() -> None:
    results = calculate_dependent_deductions([relative("c", "under16")], 5_000_000)
    entry = results.breakdown[0]

    assert entry.deduction_type == "not_eligible"
    assert entry.notes == ("Under 16 (no dependent deduction)",)


def test_spouse_with_zero_income_gets_spouse_not_dependent_deduction() -> None:
    results = calculate_dependent_deductions([spouse()], 5_000_000)

    assert results.national_tax.dependent_deduction == 0
    assert results.national_tax.spouse_deduction == 380_000
    assert results.breakdown[0].notes == ("Spouse deduction",)


def test_elderly_spouse_note_and_amount() -> None:
    results = calculate_dependent_deductions([spouse(age_category="70plus")], 5_000_000)

    assert results.national_tax.spouse_deduction == 480_000
    assert results.residence_tax.spouse_deduction == 380_000
    assert results.breakdown[0].notes == ("Elderly spouse",)


@pytest.mark.parametrize("spouse_income", [0, 580_000, 580_001, 900_000, 1_330_000])
def test_spouse_deductions_phase_out_above_ten_million(spouse_income: int) -> None:
    results = calculate_dependent_deductions([spouse(spouse_income)], 10_000_001)
    entry = results.breakdown[0]

    assert entry.national_tax.spouse_deduction == 0
    assert entry.national_tax.spouse_special_deduction == 0
    assert entry.residence_tax.spouse_deduction == 0
    assert entry.residence_tax.spouse_special_deduction == 0
    assert entry.deduction_type in {"spouse", "spouse_special"}
    assert "Phased out: taxpayer income exceeds 10,000,000 yen" in entry.notes


def test_cohabiting_elderly_parent_uses_higher_amount() -> None:
    parent = relative("p", "70plus", relationship="parent", is_cohabiting=True)

    results = calculate_dependent_deductions([parent], 5_000_000)
    entry = results.breakdown[0]

    assert entry.deduction_type == "elderly_dependent"
    assert results.national_tax.dependent_deduction == 580_000
    assert results.residence_tax.dependent_deduction == 450_000
    assert entry.notes == ("Age 70+ cohabiting parent",)


def test_special_cohabiting_disability_adds_to_main_deduction() -> None:
    parent = relative(
        "p", "70plus", relationship="parent", is_cohabiting=True, disability="special"
    )

    entry = calculate_dependent_deductions([parent], 5_000_000).breakdown[0]

    assert entry.national_tax.dependent_deduction == 580_000
    assert entry.national_tax.disability_deduction == 750_000
    assert entry.national_tax_amount == 1_330_000
    assert entry.residence_tax_amount == 450_000 + 530_000


@pytest.mark.parametrize(
    "dependent",
    [
        relative("a", "19to22", 300_000, disability="regular"),
        relative("b", "19to22", 900_000, disability="regular"),
        relative("c", "19to22", 2_000_000, disability="regular"),
        spouse(700_000, disability="regular"),
    ],
    ids=["special-dependent", "specific-relative", "not-eligible", "spouse-special"],
)
def test_disability_amount_is_independent_of_main_deduction(dependent) -> None:
    entry = calculate_dependent_deductions([dependent], 5_000_000).breakdown[0]

    assert entry.national_tax.disability_deduction == 270_000
    assert entry.residence_tax.disability_deduction == 260_000


def _household():
    return [
        spouse(700_000),
        relative("student", "19to22", 0),
        relative("worker", "23to69", 1_000_000),
        relative("toddler", "under16", 0, disability="special", is_cohabiting=True),
        relative("grandparent", "70plus", 0, relationship="parent", is_cohabiting=True),
        relative("earner", "23to69", 3_000_000),
    ]


def test_main_deductions_are_mutually_exclusive() -> None:
    results = calculate_dependent_deductions(_household(), 5_000_000)

    for entry in results.breakdown:
        for regime in (entry.national_tax, entry.residence_tax):
            non_zero = [name for name in MAIN_FIELDS if getattr(regime, name) > 0]
            assert len(non_zero) <= 1


def test_totals_equal_sum_of_sub_totals() -> None:
    results = calculate_dependent_deductions(_household(), 5_000_000)

    for totals in (results.national_tax, results.residence_tax):
        assert totals.total == sum(getattr(totals, name) for name in MAIN_FIELDS) + (
            totals.disability_deduction
        )
    assert results.national_tax.total == sum(
        entry.national_tax_amount for entry in results.breakdown
    )


def test_household_breakdown_preserves_order_and_totals() -> None:
    results = calculate_dependent_deductions(_household(), 5_000_000)

    assert [entry.dependent.id for entry in results.breakdown] == [
        "spouse",
        "student",
        "worker",
        "toddler",
        "grandparent",
        "earner",
    ]
    assert [entry.deduction_type for entry in results.breakdown] == [
        "spouse_special",
        "special_dependent",
        "specific_relative_special",
        "disability",
        "elderly_dependent",
        "not_eligible",
    ]
    national = results.national_tax
    assert national.spouse_special_deduction == 380_000
    assert national.dependent_deduction == 630_000 + 580_000
    assert national.specific_relative_deduction == 410_000
    assert national.disability_deduction == 750_000
    assert national.total == 380_000 + 630_000 + 580_000 + 410_000 + 750_000


def test_reordering_dependents_does_not_change_totals() -> None:
    household = _household()
    forward = calculate_dependent_deductions(household, 5_000_000)
    backward = calculate_dependent_deductions(list(reversed(household)), 5_000_000)

    assert forward.national_tax == backward.national_tax
    assert forward.residence_tax == backward.residence_tax


def test_calculation_is_idempotent() -> None:
    household = _household()

    assert calculate_dependent_deductions(household, 5_000_000) == calculate_dependent_deductions(
        household, 5_000_000
    )


def test_qualified_dependents_count_includes_spouse_and_children_under_16() -> None:
    household = [
        spouse(0),
        relative("toddler", "under16", 0),
        relative("student", "19to22", 580_000),
        relative("worker", "23to69", 580_001),
    ]

    results = calculate_dependent_deductions(household, 5_000_000)

    assert count_qualified_dependents(results) == 3


def test_summary_lists_each_deduction_kind() -> None:
    results = calculate_dependent_deductions(_household(), 5_000_000)

    assert summarise_deductions(results) == (
        "Spouse special deduction, 2 dependents, 1 specific relative, 1 disability deduction"
    )


def test_summary_for_spouse_and_single_dependent() -> None:
    results = calculate_dependent_deductions(
        [spouse(), relative("c", "16to18")], 5_000_000
    )

    assert summarise_deductions(results) == "Spouse deduction, 1 dependent"


def test_every_deduction_type_has_a_label() -> None:
    assert set(DEDUCTION_TYPE_LABELS) == set(get_args(DeductionType))


def test_breakdowns_only_report_known_deduction_types() -> None:
    results = calculate_dependent_deductions(
        [spouse(700_000), relative("kid", "under16")], 5_000_000
    )
    known = set(get_args(DeductionType))

    assert {entry.deduction_type for entry in results.breakdown} <= known
    for entry in results.breakdown:
        BreakdownEntry.model_validate(entry.as_dict())


def test_breakdown_entry_rejects_unknown_deduction_type() -> None:
    with pytest.raises(ValidationError):
        BreakdownEntry(
            dependent_id="x",
            relationship="child",
            total_net_income=0,
            deduction_type="basic",
            label="Basic",
            national_tax_amount=0,
            residence_tax_amount=0,
        )
