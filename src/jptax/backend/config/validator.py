"""Utilities for validating deduction tables and surfacing issues."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Mapping, Sequence

from .schema import (
    REGIMES,
    AmountBracket,
    ConfigurationError,
    DeductionTables,
    IncomeBracket,
    RegimeAmounts,
)
from .tables import read_deduction_tables, resolve_tables_path


def _format_scope(scope: str, message: str) -> str:
    return f"{scope}: {message}"


def _validate_residence_not_above_national(
    scope: str, amounts: Mapping[str, RegimeAmounts]
) -> list[str]:
    errors: list[str] = []
    for key, pair in amounts.items():
        if pair.residence > pair.national:
            errors.append(
                _format_scope(
                    f"{scope}.{key}",
                    (
                        f"residence amount {pair.residence} exceeds national "
                        f"amount {pair.national}"
                    ),
                )
            )
    return errors


def _validate_non_increasing(scope: str, values: Sequence[int]) -> list[str]:
    for previous, current in zip(values, values[1:]):
        if current > previous:
            return [
                _format_scope(
                    scope,
                    f"amounts must not increase as income rises ({previous} -> {current})",
                )
            ]
    return []


def _validate_edges(
    scope: str, brackets: Sequence[IncomeBracket], lower: int, upper: int
) -> list[str]:
    errors: list[str] = []
    if not brackets:
        return errors

    if brackets[0].above != lower:
        errors.append(
            _format_scope(
                scope,
                f"first bracket should start above {lower}, found {brackets[0].above}",
            )
        )
    if brackets[-1].upto != upper:
        errors.append(
            _format_scope(
                scope,
                f"last bracket should end at {upper}, found {brackets[-1].upto}",
            )
        )
    return errors


def _validate_spouse(tables: DeductionTables) -> list[str]:
    errors: list[str] = []
    tier_ids = [tier.id for tier in tables.taxpayer_income_tiers]

    for label, amounts in (
        ("spouse.standard", tables.spouse.standard),
        ("spouse.elderly", tables.spouse.elderly),
    ):
        errors.extend(_validate_residence_not_above_national(label, amounts))
        for regime in REGIMES:
            ordered = [amounts[tier].for_regime(regime) for tier in tier_ids if tier in amounts]
            errors.extend(_validate_non_increasing(f"{label}.{regime}", ordered))

    for tier in tier_ids:
        standard = tables.spouse.standard.get(tier)
        elderly = tables.spouse.elderly.get(tier)
        if standard is None or elderly is None:
            continue
        for regime in REGIMES:
            if elderly.for_regime(regime) < standard.for_regime(regime):
                errors.append(
                    _format_scope(
                        f"spouse.elderly.{tier}",
                        f"{regime} amount is lower than the standard spouse amount",
                    )
                )

    return errors


def _validate_spouse_special(tables: DeductionTables) -> list[str]:
    errors: list[str] = []
    thresholds = tables.eligibility
    tier_ids = [tier.id for tier in tables.taxpayer_income_tiers]

    for regime in REGIMES:
        scope = f"spouse_special.{regime}"
        brackets = tables.spouse_special.for_regime(regime)
        errors.extend(
            _validate_edges(
                scope,
                brackets,
                thresholds.spouse_income_limit,
                thresholds.spouse_special_income_limit,
            )
        )
        for tier in tier_ids:
            column = [bracket.amounts.get(tier, 0) for bracket in brackets]
            errors.extend(_validate_non_increasing(f"{scope}.{tier}", column))
        for bracket in brackets:
            row = [bracket.amounts.get(tier, 0) for tier in tier_ids]
            errors.extend(
                _validate_non_increasing(f"{scope} (upto {bracket.upto})", row)
            )

    return errors


def _validate_specific_relative(tables: DeductionTables) -> list[str]:
    errors: list[str] = []
    thresholds = tables.eligibility

    for regime in REGIMES:
        scope = f"specific_relative_special.{regime}"
        brackets: Sequence[AmountBracket] = tables.specific_relative_special.for_regime(regime)
        errors.extend(
            _validate_edges(
                scope,
                brackets,
                thresholds.dependent_income_limit,
                thresholds.specific_relative_income_limit,
            )
        )
        errors.extend(
            _validate_non_increasing(scope, [bracket.amount for bracket in brackets])
        )

    return errors


def _validate_taxpayer_tiers(tables: DeductionTables) -> list[str]:
    tiers = tables.taxpayer_income_tiers
    errors: list[str] = []
    if tiers and tiers[0].above is not None:
        errors.append(
            _format_scope("taxpayer_income_tiers", "first tier must start at zero")
        )
    if tiers and tiers[-1].upto is None:
        errors.append(
            _format_scope(
                "taxpayer_income_tiers",
                "last tier must be bounded so the phase-out reaches zero",
            )
        )
    return errors


def _validate_employment_bands(tables: DeductionTables) -> list[str]:
    errors: list[str] = []
    bands = tables.employment_income_deduction.bands
    if bands and bands[0].rate_percent != 0:
        errors.append(
            _format_scope(
                "employment_income_deduction",
                "first band should exempt low incomes with a zero rate",
            )
        )
    for band in bands:
        if band.rate_percent == 0 and band.offset != 0:
            errors.append(
                _format_scope(
                    "employment_income_deduction",
                    "zero-rate bands must not carry an offset",
                )
            )
    return errors


def validate_deduction_tables(tables: DeductionTables) -> list[str]:
    """Return a list of validation issues for the provided tables."""

    errors: list[str] = []

    dependent = tables.dependent
    errors.extend(
        _validate_residence_not_above_national(
            "dependent",
            {
                "general": dependent.general,
                "special": dependent.special,
                "elderly": dependent.elderly,
                "elderly_cohabiting": dependent.elderly_cohabiting,
            },
        )
    )
    disability = tables.disability
    errors.extend(
        _validate_residence_not_above_national(
            "disability",
            {
                "regular": disability.regular,
                "special": disability.special,
                "special_cohabiting": disability.special_cohabiting,
            },
        )
    )

    errors.extend(_validate_taxpayer_tiers(tables))
    errors.extend(_validate_employment_bands(tables))
    errors.extend(_validate_spouse(tables))
    errors.extend(_validate_spouse_special(tables))
    errors.extend(_validate_specific_relative(tables))

    return errors


def _build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description=(
            "Validate deduction table files and report issues helpful to contributors."
        )
    )
    parser.add_argument(
        "paths",
        nargs="*",
        type=Path,
        help="Table files to validate (defaults to the bundled tables)",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for running validations from the command line."""

    parser = _build_argument_parser()
    args = parser.parse_args(argv)
    paths: list[Path] = args.paths or [resolve_tables_path()]

    exit_code = 0

    for path in paths:
        try:
            tables = read_deduction_tables(path)
        except (FileNotFoundError, ConfigurationError) as error:
            print(f"[{path.name}] failed to load tables: {error}")
            exit_code = 1
            continue

        issues = validate_deduction_tables(tables)
        if issues:
            exit_code = 1
            print(f"[{path.name}] {len(issues)} issue(s) detected:")
            for issue in issues:
                print(f"  - {issue}")
        else:
            print(f"[{path.name}] OK")

    return exit_code


if __name__ == "__main__":  # pragma: no cover - CLI invocation
    raise SystemExit(main())
