"""Orchestrate request validation and dependent deduction calculations.

The calculation service coordinates the request models and the YAML-backed
deduction tables so that each calculator module can focus on its own
arithmetic. Profiling hooks and payload validation live here to give the rest
of the application simple entry points.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from contextlib import contextmanager
from time import perf_counter
from typing import Any

from pydantic import BaseModel, ValidationError

from jptax.backend.app.models import (
    DeductionPreviewRequest,
    DeductionPreviewResponse,
    DeductionRequest,
    DeductionResponse,
    NetIncomeRequest,
    NetIncomeResponse,
    format_validation_error,
)
from jptax.backend.app.models.api import PREVIEW_TABLES
from jptax.backend.config.schema import REGIMES, DeductionTables
from jptax.backend.config.tables import load_deduction_tables

from .calculators import (
    calculate_dependent_deductions,
    count_qualified_dependents,
    get_dependent_deduction,
    get_disability_deduction,
    get_specific_relative_deduction,
    get_spouse_deduction,
    get_spouse_special_deduction,
    net_employment_income,
    summarise_deductions,
)

_LOGGER = logging.getLogger(__name__)


class UnknownTableError(LookupError):
    """Raised when a preview targets an amount table that does not exist."""


def _profiling_enabled() -> bool:
    """Return ``True`` when calculation profiling should be captured."""

    flag = os.getenv("JPTAX_PROFILE_CALCULATIONS", "")
    return flag.strip().lower() in {"1", "true", "yes", "on"}


@contextmanager
def _profile_section(name: str, store: dict[str, float] | None):
    """Capture the duration of a named section when profiling is enabled."""

    if store is None:
        yield
        return

    start = perf_counter()
    try:
        yield
    finally:
        store[name] = perf_counter() - start


def _validate(model: type[BaseModel], payload: Mapping[str, Any] | BaseModel) -> Any:
    if isinstance(payload, model):
        return payload
    if isinstance(payload, BaseModel):
        payload = payload.model_dump(mode="python")
    if not isinstance(payload, Mapping):
        raise ValueError("Payload must be a mapping")
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise ValueError(format_validation_error(exc)) from exc


def calculate_deductions(
    payload: Mapping[str, Any] | DeductionRequest,
    *,
    tables: DeductionTables | None = None,
) -> dict[str, Any]:
    """Compute dependent deductions for the provided payload."""

    if isinstance(payload, Mapping) and "taxpayer_net_income" not in payload:
        raise ValueError("Payload must include the taxpayer's total net income")

    timings: dict[str, float] | None = {} if _profiling_enabled() else None
    overall_start = perf_counter() if timings is not None else None

    with _profile_section("validate_payload", timings):
        request_model: DeductionRequest = _validate(DeductionRequest, payload)

    tables = tables or load_deduction_tables()

    with _profile_section("dependents", timings):
        results = calculate_dependent_deductions(
            request_model.dependents,
            request_model.taxpayer_net_income,
            tables=tables,
        )

    with _profile_section("summary", timings):
        qualified = count_qualified_dependents(results, tables)
        summary = summarise_deductions(results)

    if timings is not None and overall_start is not None:
        timings["total"] = perf_counter() - overall_start
        _LOGGER.debug(
            "calculate_deductions timings (ms): %s",
            {name: round(duration * 1000, 3) for name, duration in timings.items()},
        )

    _LOGGER.debug(
        "Evaluated %d dependent(s): national total %d, residence total %d",
        len(results.breakdown),
        results.national_tax.total,
        results.residence_tax.total,
    )

    response_model = DeductionResponse.model_validate(
        {
            "national_tax": results.national_tax.as_dict(),
            "residence_tax": results.residence_tax.as_dict(),
            "breakdown": [entry.as_dict() for entry in results.breakdown],
            "qualified_dependents": qualified,
            "summary": summary,
            "meta": {
                "tax_year": tables.tax_year,
                "taxpayer_net_income": request_model.taxpayer_net_income,
            },
        }
    )

    return response_model.model_dump(mode="json", exclude_none=True)


def calculate_net_income(
    payload: Mapping[str, Any] | NetIncomeRequest,
    *,
    tables: DeductionTables | None = None,
) -> dict[str, Any]:
    """Convert gross employment income and other income into net figures."""

    request_model: NetIncomeRequest = _validate(NetIncomeRequest, payload)
    tables = tables or load_deduction_tables()

    net_employment = net_employment_income(request_model.gross_employment_income, tables)
    total = net_employment + request_model.other_net_income

    response_model = NetIncomeResponse(
        gross_employment_income=request_model.gross_employment_income,
        net_employment_income=net_employment,
        other_net_income=request_model.other_net_income,
        total_net_income=total,
        within_dependent_income_limit=total <= tables.eligibility.dependent_income_limit,
    )
    return response_model.model_dump(mode="json")


def _preview_amount(
    request_model: DeductionPreviewRequest, regime: str, tables: DeductionTables
) -> int:
    table = request_model.table
    if table == "dependent":
        return get_dependent_deduction(request_model.kind or "general", regime, tables)
    if table == "spouse":
        return get_spouse_deduction(
            request_model.is_elderly,
            request_model.taxpayer_net_income or 0,
            regime,
            tables,
        )
    if table == "spouse_special":
        return get_spouse_special_deduction(
            request_model.income or 0,
            request_model.taxpayer_net_income or 0,
            regime,
            tables,
        )
    if table == "specific_relative_special":
        return get_specific_relative_deduction(request_model.income or 0, regime, tables)
    return get_disability_deduction(
        request_model.level or "none", request_model.is_cohabiting, regime, tables
    )


def preview_deduction_amount(
    payload: Mapping[str, Any] | DeductionPreviewRequest,
    *,
    tables: DeductionTables | None = None,
) -> dict[str, Any]:
    """Look up a single amount table without running the aggregator."""

    if isinstance(payload, Mapping):
        table = payload.get("table")
        if isinstance(table, str) and table.strip().lower() not in PREVIEW_TABLES:
            raise UnknownTableError(f"Unknown deduction table '{table}'")

    request_model: DeductionPreviewRequest = _validate(DeductionPreviewRequest, payload)
    if request_model.table not in PREVIEW_TABLES:
        raise UnknownTableError(f"Unknown deduction table '{request_model.table}'")

    tables = tables or load_deduction_tables()
    regimes = (request_model.regime,) if request_model.regime else REGIMES

    amounts = {regime: _preview_amount(request_model, regime, tables) for regime in regimes}
    response_model = DeductionPreviewResponse(table=request_model.table, **amounts)
    return response_model.model_dump(mode="json", exclude_none=True)


__all__ = [
    "UnknownTableError",
    "calculate_deductions",
    "calculate_net_income",
    "preview_deduction_amount",
]
