"""Service-layer helpers for the jptax backend."""

from jptax.backend.app.services.calculation_service import (
    UnknownTableError,
    calculate_deductions,
    calculate_net_income,
    preview_deduction_amount,
)

from .request_parser import parse_calculation_payload
from .response_builder import build_calculation_response

__all__ = [
    "UnknownTableError",
    "build_calculation_response",
    "calculate_deductions",
    "calculate_net_income",
    "parse_calculation_payload",
    "preview_deduction_amount",
]
