"""Helpers for normalising incoming calculation requests.

The browser calculator stores dependents with camelCase keys
(``ageCategory``, ``isCohabiting``); the parser accepts either spelling and
hands snake_case mappings to the service layer.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from flask import Request
from werkzeug.exceptions import BadRequest

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])([A-Z])")


def _snake_case(key: str) -> str:
    return _CAMEL_BOUNDARY.sub(r"_\1", key).lower()


def normalise_keys(value: Any) -> Any:
    """Recursively convert mapping keys in ``value`` to snake_case."""

    if isinstance(value, Mapping):
        return {
            _snake_case(key) if isinstance(key, str) else key: normalise_keys(item)
            for key, item in value.items()
        }
    if isinstance(value, list):
        return [normalise_keys(item) for item in value]
    return value


def parse_calculation_payload(req: Request) -> dict[str, Any]:
    """Extract and validate a JSON payload from ``req``."""

    data = req.get_json(silent=True)
    if data is None:
        raise BadRequest("Request body must be valid JSON")
    if not isinstance(data, Mapping):
        raise BadRequest("Request JSON must be an object")

    return normalise_keys(data)
