"""HTTP helpers shared by the Flask blueprints."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from flask import jsonify


@dataclass(frozen=True)
class ProblemResponse:
    """Error payload returned by every endpoint: ``{"error": code, "message": ...}``."""

    error: str
    status: int
    message: str | None = None
    extra: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_exception(cls, error: str, status: int, exc: BaseException) -> ProblemResponse:
        """Build a problem whose message is taken from ``exc``."""

        message = exc.args[0] if exc.args else str(exc)
        return cls(error=error, status=status, message=str(message))

    def as_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": self.error, **self.extra}
        if self.message:
            payload["message"] = self.message
        return payload

    def to_response(self) -> tuple[Any, int]:
        return jsonify(self.as_dict()), self.status


def problem_response(
    error: str,
    *,
    status: int,
    message: str | None = None,
    **extra: Any,
) -> ProblemResponse:
    """Shorthand for constructing a :class:`ProblemResponse`."""

    return ProblemResponse(error=error, status=status, message=message, extra=extra)


__all__ = ["ProblemResponse", "problem_response"]
