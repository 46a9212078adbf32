"""Expose configuration metadata consumed by the browser calculator.

These endpoints bridge the YAML-backed deduction tables and the front-end so
that forms can show thresholds and preview amounts without duplicating the
statutory tables.
"""

from __future__ import annotations

from typing import Any

from flask import Blueprint, jsonify

from jptax.backend.app.http import ProblemResponse
from jptax.backend.app.models import AGE_CATEGORIES, DEDUCTION_TYPE_LABELS, DISABILITY_LEVELS
from jptax.backend.config.schema import REGIMES
from jptax.backend.config.tables import load_deduction_tables
from jptax.backend.version import get_project_version

blueprint = Blueprint("config", __name__, url_prefix="/api/v1/config")


def get_configuration_metadata() -> dict[str, Any]:
    """Expose runtime metadata derived from the deduction tables."""

    tables = load_deduction_tables()
    return {
        "version": get_project_version(),
        "tax_year": tables.tax_year,
    }


@blueprint.get("/meta")
def get_application_metadata() -> tuple[Any, int]:
    """Expose lightweight application metadata such as the version identifier."""

    payload = get_configuration_metadata()
    return jsonify(payload), 200


@blueprint.get("/deduction-tables")
def get_deduction_tables() -> tuple[Any, int]:
    """Return the statutory tables, thresholds and the enumerations they use."""

    try:
        tables = load_deduction_tables()
    except FileNotFoundError as exc:
        return ProblemResponse.from_exception("not_found", 404, exc).to_response()

    payload = {
        "tax_year": tables.tax_year,
        "regimes": list(REGIMES),
        "age_categories": list(AGE_CATEGORIES),
        "disability_levels": list(DISABILITY_LEVELS),
        "deduction_types": [
            {"id": key, "label": label} for key, label in DEDUCTION_TYPE_LABELS.items()
        ],
        "tables": tables.model_dump(mode="json", exclude={"meta"}),
    }
    return jsonify(payload), 200
