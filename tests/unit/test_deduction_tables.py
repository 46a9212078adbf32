"""Unit coverage for loading and validating the deduction table YAML."""

from __future__ import annotations

from pathlib import Path
from shutil import copy2

import pytest
import yaml
from pydantic import ValidationError

from jptax.backend.config import tables as table_config
from jptax.backend.config.schema import ConfigurationError, DeductionTables


@pytest.fixture()
def raw_tables() -> dict:
    """Return a fresh copy of the bundled YAML as plain data."""

    return yaml.safe_load(table_config.TABLES_FILE.read_text(encoding="utf-8"))


@pytest.fixture()
def isolated_tables_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Copy the bundled tables to ``tmp_path`` and point the loader at it."""

    target = tmp_path / "deductions.yaml"
    copy2(table_config.TABLES_FILE, target)
    monkeypatch.setenv(table_config.TABLES_FILE_ENV, str(target))
    return target


def test_bundled_tables_load(tables: DeductionTables) -> None:
    assert tables.tax_year == 2025
    assert tables.eligibility.dependent_income_limit == 580_000
    assert len(tables.spouse_special.national) == 9
    assert len(tables.spouse_special.residence) == 8
    assert len(tables.specific_relative_special.national) == 9
    assert [tier.id for tier in tables.taxpayer_income_tiers] == [
        "up_to_9m",
        "up_to_9_5m",
        "up_to_10m",
    ]


def test_load_is_cached() -> None:
    assert table_config.load_deduction_tables() is table_config.load_deduction_tables()


def test_tables_are_immutable(tables: DeductionTables) -> None:
    with pytest.raises(ValidationError):
        tables.eligibility.dependent_income_limit = 0  # type: ignore[misc]


def test_environment_override_is_honoured(
    isolated_tables_file: Path, raw_tables: dict
) -> None:
    raw_tables["dependent"]["general"]["national"] = 123_000
    isolated_tables_file.write_text(yaml.safe_dump(raw_tables), encoding="utf-8")

    loaded = table_config.load_deduction_tables()

    assert table_config.resolve_tables_path() == isolated_tables_file
    assert loaded.dependent.general.national == 123_000


def test_missing_override_file_raises(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv(table_config.TABLES_FILE_ENV, str(tmp_path / "absent.yaml"))

    with pytest.raises(FileNotFoundError):
        table_config.load_deduction_tables()


def test_top_level_must_be_mapping(isolated_tables_file: Path) -> None:
    isolated_tables_file.write_text("- not\n- a mapping\n", encoding="utf-8")

    with pytest.raises(ConfigurationError):
        table_config.load_deduction_tables()


def test_negative_amount_is_rejected(raw_tables: dict) -> None:
    raw_tables["disability"]["regular"]["national"] = -1

    with pytest.raises(ConfigurationError):
        table_config.parse_deduction_tables(raw_tables)


def test_non_contiguous_brackets_are_rejected(raw_tables: dict) -> None:
    raw_tables["specific_relative_special"]["national"][1]["above"] = 860_000

    with pytest.raises(ConfigurationError, match="contiguous"):
        table_config.parse_deduction_tables(raw_tables)


def test_inverted_bracket_is_rejected(raw_tables: dict) -> None:
    raw_tables["specific_relative_special"]["national"][0]["upto"] = 500_000

    with pytest.raises(ConfigurationError):
        table_config.parse_deduction_tables(raw_tables)


def test_spouse_amounts_must_cover_every_tier(raw_tables: dict) -> None:
    del raw_tables["spouse"]["standard"]["up_to_10m"]

    with pytest.raises(ConfigurationError, match="spouse.standard"):
        table_config.parse_deduction_tables(raw_tables)


def test_spouse_special_brackets_must_cover_every_tier(raw_tables: dict) -> None:
    raw_tables["spouse_special"]["residence"][0]["amounts"].pop("up_to_9_5m")

    with pytest.raises(ConfigurationError, match="spouse_special.residence"):
        table_config.parse_deduction_tables(raw_tables)


def test_unknown_sections_are_rejected(raw_tables: dict) -> None:
    raw_tables["basic_deduction"] = {"national": 580_000}

    with pytest.raises(ConfigurationError):
        table_config.parse_deduction_tables(raw_tables)


def test_employment_bands_must_end_open(raw_tables: dict) -> None:
    raw_tables["employment_income_deduction"]["bands"][-1]["upto"] = 20_000_000

    with pytest.raises(ConfigurationError, match="open-ended"):
        table_config.parse_deduction_tables(raw_tables)


def test_spouse_special_limit_must_exceed_spouse_limit(raw_tables: dict) -> None:
    raw_tables["eligibility"]["spouse_special_income_limit"] = 580_000

    with pytest.raises(ConfigurationError):
        table_config.parse_deduction_tables(raw_tables)
