"""Utility helpers for calculator modules."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TypeVar

from jptax.backend.config.schema import AmountBracket, IncomeBracket

BracketT = TypeVar("BracketT", bound=IncomeBracket)


def find_bracket(value: int, brackets: Sequence[BracketT]) -> BracketT | None:
    """Return the first bracket whose ``(above, upto]`` range contains ``value``."""

    for bracket in brackets:
        if bracket.contains(value):
            return bracket
    return None


def bracket_amount(value: int, brackets: Sequence[AmountBracket]) -> int:
    """Return the amount of the bracket containing ``value``, or zero."""

    bracket = find_bracket(value, brackets)
    return bracket.amount if bracket is not None else 0


def format_yen(amount: int) -> str:
    """Return ``amount`` with thousands separators, as used in notes."""

    return f"{amount:,}"


__all__ = ["bracket_amount", "find_bracket", "format_yen"]
