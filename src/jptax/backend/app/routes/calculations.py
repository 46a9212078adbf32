"""REST endpoints for dependent deduction calculations."""

from __future__ import annotations

from typing import Any

from flask import Blueprint, request

from jptax.backend.app.http import ProblemResponse
from jptax.backend.services import (
    UnknownTableError,
    build_calculation_response,
    calculate_deductions,
    calculate_net_income,
    parse_calculation_payload,
    preview_deduction_amount,
)

blueprint = Blueprint("calculations", __name__, url_prefix="/api/v1")


@blueprint.post("/deductions")
def create_deduction_calculation() -> tuple[Any, int]:
    """Determine deductions for the submitted taxpayer and dependents."""

    payload = parse_calculation_payload(request)
    result = calculate_deductions(payload)

    return build_calculation_response(result)


@blueprint.post("/net-income")
def create_net_income_calculation() -> tuple[Any, int]:
    """Convert gross employment income into total net income."""

    payload = parse_calculation_payload(request)
    result = calculate_net_income(payload)

    return build_calculation_response(result)


@blueprint.post("/deductions/preview")
def preview_deduction() -> tuple[Any, int]:
    """Return the amount a single table yields before a record is saved."""

    payload = parse_calculation_payload(request)
    try:
        result = preview_deduction_amount(payload)
    except UnknownTableError as exc:
        return ProblemResponse.from_exception("not_found", 404, exc).to_response()

    return build_calculation_response(result)
