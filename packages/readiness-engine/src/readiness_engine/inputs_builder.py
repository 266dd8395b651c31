"""
Inputs Builder
==============

Canonical logic for preparing ``ValuationInputs`` from a raw dictionary
(an API payload, a stored local snapshot, a CLI prompt).

This module is the **single source of truth** for:
- The 3 completed + 3 forecast year layout
- Treating blank / unparseable / non-finite figures as "not provided"
- Normalising categorical answers (business type, growth, concentration)

Both ``readiness_service`` and direct engine callers (CLI, notebooks, tests)
should use ``build_valuation_inputs()`` so unset and zero never get confused.
"""

from __future__ import annotations

import datetime
import logging
import math
from dataclasses import asdict
from typing import Any, Dict, List, Optional

from .valuation import (
    BUSINESS_TYPES,
    CUSTOMER_CONCENTRATIONS,
    GROWTH_TRENDS,
    FinancialYear,
    ValuationInputs,
    default_financial_years,
    parse_number,
    round_half_up,
)

logger = logging.getLogger(__name__)


def _current_year(current_year: Optional[int]) -> int:
    return current_year if current_year is not None else datetime.date.today().year


def default_valuation_inputs(current_year: Optional[int] = None) -> ValuationInputs:
    """Empty inputs: nothing selected, six empty year records."""
    historical, forecast = default_financial_years(_current_year(current_year))
    return ValuationInputs(historical_financials=historical, forecast_financials=forecast)


def coerce_money(value: Any) -> Optional[float]:
    """A finite number, or ``None`` for anything that is not one."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        return parse_number(value)
    if isinstance(value, (int, float)):
        value = float(value)
        if math.isnan(value) or math.isinf(value):
            return None
        return value
    return None


def coerce_percentage(value: Any) -> Optional[int]:
    number = coerce_money(value)
    if number is None or number < 0 or number > 100:
        return None
    return round_half_up(number)


def coerce_choice(value: Any, allowed) -> Optional[str]:
    if not isinstance(value, str):
        return None
    normalised = value.strip().lower()
    return normalised if normalised in allowed else None


def _build_years(raw: Any, defaults: List[FinancialYear], label: str) -> List[FinancialYear]:
    records = list(raw) if isinstance(raw, (list, tuple)) else []
    if len(records) > len(defaults):
        logger.debug(f"Ignoring {len(records) - len(defaults)} extra {label} year record(s)")

    years = []
    for i, default in enumerate(defaults):
        record = records[i] if i < len(records) and isinstance(records[i], dict) else {}
        year = record.get("year")
        years.append(
            FinancialYear(
                year=int(year) if isinstance(year, int) and not isinstance(year, bool) else default.year,
                turnover=coerce_money(record.get("turnover")),
                ebitda=coerce_money(record.get("ebitda")),
            )
        )
    return years


def build_valuation_inputs(data: Dict[str, Any], current_year: Optional[int] = None) -> ValuationInputs:
    """
    Normalise a raw dictionary into ``ValuationInputs``.

    Parameters
    ----------
    data : dict
        Keys (all optional): ``business_type``, ``historical_financials``,
        ``forecast_financials`` (lists of ``{year, turnover, ebitda}``),
        ``total_debt``, ``growth_trend``, ``customer_concentration``,
        ``recurring_revenue_percentage``. Money may be numeric or formatted
        text such as ``"£1,200,000"``.
    current_year : int, optional
        Anchors default years (``current_year-3 .. current_year+2``).

    Returns
    -------
    ValuationInputs
        Exactly 3 historical and 3 forecast records; every unusable value is
        ``None`` rather than zero.
    """
    if data is None:
        data = {}

    historical_defaults, forecast_defaults = default_financial_years(_current_year(current_year))

    return ValuationInputs(
        business_type=coerce_choice(data.get("business_type"), BUSINESS_TYPES),
        historical_financials=_build_years(data.get("historical_financials"), historical_defaults, "historical"),
        forecast_financials=_build_years(data.get("forecast_financials"), forecast_defaults, "forecast"),
        total_debt=coerce_money(data.get("total_debt")),
        growth_trend=coerce_choice(data.get("growth_trend"), GROWTH_TRENDS),
        customer_concentration=coerce_choice(data.get("customer_concentration"), CUSTOMER_CONCENTRATIONS),
        recurring_revenue_percentage=coerce_percentage(data.get("recurring_revenue_percentage")),
    )


def valuation_inputs_to_dict(inputs: ValuationInputs) -> Dict[str, Any]:
    """Inverse of ``build_valuation_inputs`` for storage and API payloads."""
    return asdict(inputs)
