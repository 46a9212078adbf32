"""Net income calculator.

Employment income is converted to net employment income with the statutory
employment income deduction (給与所得控除). The bands are read from the
deduction tables and evaluated with integer arithmetic so every step floors to
whole yen exactly as the published table does.
"""

from __future__ import annotations

from jptax.backend.app.models import PersonIncome
from jptax.backend.config.schema import DeductionTables, EmploymentIncomeBand
from jptax.backend.config.tables import load_deduction_tables


def _select_band(gross: int, tables: DeductionTables) -> EmploymentIncomeBand:
    bands = tables.employment_income_deduction.bands
    for band in bands:
        if band.upto is None or gross <= band.upto:
            return band
    return bands[-1]


def net_employment_income(gross: int, tables: DeductionTables | None = None) -> int:
    """Return net employment income for ``gross`` employment income in yen."""

    if gross <= 0:
        return 0

    tables = tables or load_deduction_tables()
    band = _select_band(gross, tables)

    base = gross
    if band.rounding_unit:
        base = gross // band.rounding_unit * band.rounding_unit

    net = base * band.rate_percent // 100 + band.offset
    return net if net > 0 else 0


def total_net_income(income: PersonIncome, tables: DeductionTables | None = None) -> int:
    """Return the total net income (合計所得金額) of a person."""

    return net_employment_income(income.gross_employment_income, tables) + income.other_net_income


__all__ = ["net_employment_income", "total_net_income"]
