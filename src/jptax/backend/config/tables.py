"""Loader for the YAML-backed deduction tables."""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from .schema import ConfigurationError, DeductionTables

CONFIG_DIRECTORY = Path(__file__).resolve().parent / "data"
TABLES_FILE = CONFIG_DIRECTORY / "deductions.yaml"
TABLES_FILE_ENV = "JPTAX_TABLES_FILE"

_LOGGER = logging.getLogger(__name__)


def _load_yaml(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, dict):
        raise ConfigurationError("Configuration file must define a mapping at the top level")
    return data


def resolve_tables_path() -> Path:
    """Return the table file path, honouring the ``JPTAX_TABLES_FILE`` override."""

    override = os.getenv(TABLES_FILE_ENV, "").strip()
    if override:
        return Path(override).expanduser()
    return TABLES_FILE


def parse_deduction_tables(raw: dict[str, Any], *, source: str = "tables") -> DeductionTables:
    """Validate ``raw`` table data, wrapping schema failures."""

    try:
        return DeductionTables.model_validate(raw)
    except ValidationError as error:
        raise ConfigurationError(f"Configuration validation failed for {source}: {error}") from error


def read_deduction_tables(path: Path) -> DeductionTables:
    """Read and validate the deduction tables stored at ``path``."""

    if not path.exists():
        raise FileNotFoundError(f"Deduction table file missing: {path}")

    return parse_deduction_tables(_load_yaml(path), source=path.name)


@lru_cache(maxsize=4)
def _load_cached(path: Path) -> DeductionTables:
    tables = read_deduction_tables(path)
    _LOGGER.info("Loaded deduction tables for %s from %s", tables.tax_year, path)
    return tables


def load_deduction_tables() -> DeductionTables:
    """Load and cache the statutory deduction tables."""

    return _load_cached(resolve_tables_path())


def clear_table_cache() -> None:
    """Drop cached tables so the next load re-reads the YAML file."""

    _load_cached.cache_clear()


__all__ = [
    "CONFIG_DIRECTORY",
    "TABLES_FILE",
    "TABLES_FILE_ENV",
    "clear_table_cache",
    "load_deduction_tables",
    "parse_deduction_tables",
    "read_deduction_tables",
    "resolve_tables_path",
]
