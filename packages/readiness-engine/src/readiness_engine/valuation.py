"""
Valuation Engine
================

Pure, indicative business valuation from sparse financial inputs:

- No I/O
- No framework coupling
- Never raises for well-typed business input; missing data produces a
  non-calculable result carrying caveats that explain what is missing.

API surface area (stable):
- ``FinancialYear`` / ``ValuationInputs`` (what the user told us)
- ``ValuationResult`` / ``ValuationAdjustment`` (what we derived)
- ``calculate_valuation(inputs)``
- ``format_currency`` / ``format_number`` / ``parse_number`` display helpers

Method: Enterprise Value = base value x multiple, where the base value is
normalised EBITDA (preferred) or latest annual turnover (fallback for
businesses under £3M turnover), and the multiple range depends on business
type, adjusted for customer concentration, recurring revenue, growth trend and
company size.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple


BUSINESS_TYPES: Tuple[str, ...] = ("service", "product", "tech-saas")
GROWTH_TRENDS: Tuple[str, ...] = ("declining", "flat", "growing")
CUSTOMER_CONCENTRATIONS: Tuple[str, ...] = ("high", "medium", "low")

METHOD_EBITDA = "ebitda-multiple"
METHOD_REVENUE = "revenue-multiple"
METHOD_INSUFFICIENT = "insufficient-data"

IMPACT_PREMIUM = "premium"
IMPACT_DISCOUNT = "discount"
IMPACT_NEUTRAL = "neutral"

# Revenue multiples are only a credible fallback for small businesses.
MAX_TURNOVER_FOR_REVENUE_MULTIPLE: float = 3_000_000.0

SMALL_COMPANY_EBITDA: float = 500_000.0
SMALL_COMPANY_RANGE_SHARE: float = 0.6
KEY_PERSON_RISK_EBITDA: float = 200_000.0
ADVISORY_RECOMMENDED_EBITDA: float = 5_000_000.0

NON_POSITIVE_EBITDA_CAVEAT = (
    "Normalised EBITDA/Profit is not positive; provide turnover of up to £3M or positive EBITDA."
)

HISTORICAL_YEARS: int = 3
FORECAST_YEARS: int = 3

BUSINESS_TYPE_LABELS = {
    "service": "Service Business",
    "product": "Product Business",
    "tech-saas": "Tech/SaaS",
}

GROWTH_TREND_LABELS = {
    "declining": "Declining",
    "flat": "Flat",
    "growing": "Growing",
}

CUSTOMER_CONCENTRATION_LABELS = {
    "high": "High (>40% from one customer)",
    "medium": "Medium (20-40% from one customer)",
    "low": "Low/Diversified (<20%)",
}


@dataclass(frozen=True)
class MultipleRange:
    ebitda_min: float
    ebitda_max: float
    revenue_min: float
    revenue_max: float


# UK SME market multiples by business type.
MULTIPLE_RANGES = {
    "service": MultipleRange(ebitda_min=2.0, ebitda_max=4.0, revenue_min=0.5, revenue_max=1.0),
    "product": MultipleRange(ebitda_min=3.0, ebitda_max=6.0, revenue_min=0.8, revenue_max=1.5),
    "tech-saas": MultipleRange(ebitda_min=4.0, ebitda_max=10.0, revenue_min=1.0, revenue_max=2.0),
}


@dataclass(frozen=True)
class FinancialYear:
    year: int
    turnover: Optional[float] = None
    ebitda: Optional[float] = None  # EBITDA, or profit as a proxy for small businesses


@dataclass(frozen=True)
class ValuationInputs:
    business_type: Optional[str] = None
    historical_financials: List[FinancialYear] = field(default_factory=list)
    forecast_financials: List[FinancialYear] = field(default_factory=list)
    total_debt: Optional[float] = None
    growth_trend: Optional[str] = None
    customer_concentration: Optional[str] = None
    recurring_revenue_percentage: Optional[int] = None

    def all_financials(self) -> List[FinancialYear]:
        return list(self.historical_financials) + list(self.forecast_financials)


@dataclass(frozen=True)
class ValuationAdjustment:
    factor: str
    impact: str  # premium / discount / neutral
    percentage_change: float
    explanation: str


@dataclass(frozen=True)
class ValuationResult:
    is_calculable: bool
    method: str
    enterprise_value_min: Optional[float]
    enterprise_value_max: Optional[float]
    equity_value_min: Optional[float]
    equity_value_max: Optional[float]
    multiple_min: Optional[float]
    multiple_max: Optional[float]
    base_value: Optional[float]
    base_value_label: str
    adjustments: List[ValuationAdjustment]
    confidence: str  # low / medium / high
    caveats: List[str]


def default_financial_years(current_year: int) -> Tuple[List[FinancialYear], List[FinancialYear]]:
    """Empty 3 completed years + 3 forecast years around ``current_year``."""
    historical = [FinancialYear(year=current_year - HISTORICAL_YEARS + i) for i in range(HISTORICAL_YEARS)]
    forecast = [FinancialYear(year=current_year + i) for i in range(FORECAST_YEARS)]
    return historical, forecast


# --------------------------------------------------------------------------- #
# Input hygiene: anything that is not a finite number counts as "not provided"
# --------------------------------------------------------------------------- #


def _number(value: object) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if not isinstance(value, (int, float)):
        return None
    value = float(value)
    if math.isnan(value) or math.isinf(value):
        return None
    return value


def round_half_up(value: float) -> int:
    """Nearest integer, halves rounded up (68.5 -> 69, -2.5 -> -2)."""
    return int(math.floor(value + 0.5))


def _choice(value: object, allowed: Iterable[str]) -> Optional[str]:
    return value if isinstance(value, str) and value in allowed else None


def _is_positive(value: object) -> bool:
    number = _number(value)
    return number is not None and number > 0


def _has_usable_figures(year: FinancialYear) -> bool:
    return _is_positive(year.turnover) or _is_positive(year.ebitda)


def _usable_historical_count(inputs: ValuationInputs) -> int:
    return sum(1 for year in inputs.historical_financials if _has_usable_figures(year))


def _has_all_optionals(inputs: ValuationInputs) -> bool:
    return (
        _choice(inputs.growth_trend, GROWTH_TRENDS) is not None
        and _choice(inputs.customer_concentration, CUSTOMER_CONCENTRATIONS) is not None
        and _number(inputs.recurring_revenue_percentage) is not None
    )


# --------------------------------------------------------------------------- #
# Base values
# --------------------------------------------------------------------------- #


def has_minimum_data(inputs: ValuationInputs) -> bool:
    """A business type plus at least one positive turnover or EBITDA figure."""
    if _choice(inputs.business_type, BUSINESS_TYPES) is None:
        return False
    return any(_has_usable_figures(year) for year in inputs.all_financials())


def _has_non_positive_ebitda(inputs: ValuationInputs) -> bool:
    normalised = get_normalised_ebitda(inputs.all_financials())
    return normalised is not None and normalised <= 0


def get_normalised_ebitda(financials: Iterable[FinancialYear]) -> Optional[float]:
    """Simple mean of every provided EBITDA figure (historical and forecast)."""
    values = [v for v in (_number(f.ebitda) for f in financials) if v is not None]
    if not values:
        return None
    return sum(values) / len(values)


def get_latest_turnover(financials: Iterable[FinancialYear]) -> Optional[float]:
    """Turnover of the most recent calendar year that has a positive figure."""
    for year in sorted(financials, key=lambda f: f.year, reverse=True):
        turnover = _number(year.turnover)
        if turnover is not None and turnover > 0:
            return turnover
    return None


def get_base_multiples(business_type: str) -> MultipleRange:
    return MULTIPLE_RANGES.get(business_type, MULTIPLE_RANGES["service"])


# --------------------------------------------------------------------------- #
# Adjustments
# --------------------------------------------------------------------------- #


def _customer_concentration_adjustment(concentration: str) -> ValuationAdjustment:
    if concentration == "high":
        return ValuationAdjustment(
            factor="Customer concentration",
            impact=IMPACT_DISCOUNT,
            percentage_change=-25,
            explanation="High customer concentration (>40% from one customer) increases revenue risk",
        )
    if concentration == "medium":
        return ValuationAdjustment(
            factor="Customer concentration",
            impact=IMPACT_DISCOUNT,
            percentage_change=-12,
            explanation="Moderate customer concentration (20-40%) presents some risk",
        )
    return ValuationAdjustment(
        factor="Customer concentration",
        impact=IMPACT_NEUTRAL,
        percentage_change=0,
        explanation="Well-diversified customer base",
    )


def _recurring_revenue_adjustment(percentage: float) -> ValuationAdjustment:
    shown = f"{percentage:g}"
    if percentage >= 70:
        return ValuationAdjustment(
            factor="Recurring revenue",
            impact=IMPACT_PREMIUM,
            percentage_change=15,
            explanation=f"High recurring revenue ({shown}%) provides predictable income",
        )
    if percentage >= 50:
        return ValuationAdjustment(
            factor="Recurring revenue",
            impact=IMPACT_PREMIUM,
            percentage_change=7,
            explanation=f"Good recurring revenue ({shown}%) supports valuation",
        )
    return ValuationAdjustment(
        factor="Recurring revenue",
        impact=IMPACT_NEUTRAL,
        percentage_change=0,
        explanation="Recurring revenue below 50%",
    )


def _growth_trend_adjustment(trend: str) -> ValuationAdjustment:
    if trend == "growing":
        return ValuationAdjustment(
            factor="Growth trend",
            impact=IMPACT_PREMIUM,
            percentage_change=12,
            explanation="Growing revenue trajectory attracts premium valuations",
        )
    if trend == "declining":
        return ValuationAdjustment(
            factor="Growth trend",
            impact=IMPACT_DISCOUNT,
            percentage_change=-18,
            explanation="Declining revenue increases buyer risk perception",
        )
    return ValuationAdjustment(
        factor="Growth trend",
        impact=IMPACT_NEUTRAL,
        percentage_change=0,
        explanation="Stable revenue",
    )


def _size_adjustment(ebitda: Optional[float]) -> Optional[ValuationAdjustment]:
    # Expressed through range compression rather than a percentage.
    if ebitda is None or ebitda >= SMALL_COMPANY_EBITDA:
        return None
    return ValuationAdjustment(
        factor="Company size",
        impact=IMPACT_DISCOUNT,
        percentage_change=0,
        explanation="Smaller businesses typically command lower multiples due to higher risk",
    )


def _round_multiple(value: float) -> float:
    # Half-up to one decimal place.
    return round_half_up(value * 10) / 10


def apply_adjustments(
    base_min: float,
    base_max: float,
    inputs: ValuationInputs,
    ebitda: Optional[float],
) -> Tuple[float, float, List[ValuationAdjustment]]:
    """
    Adjust a base multiple range.

    Percentage adjustments are summed into one factor applied to both ends of
    the range. When ``ebitda`` is given and below £500k the range is then
    compressed to its lower 60%. Pass ``ebitda=None`` for the revenue method.

    Returns ``(adjusted_min, adjusted_max, adjustments)`` with the multiples
    rounded to one decimal place.
    """
    candidates: List[ValuationAdjustment] = []

    concentration = _choice(inputs.customer_concentration, CUSTOMER_CONCENTRATIONS)
    if concentration is not None:
        candidates.append(_customer_concentration_adjustment(concentration))

    recurring = _number(inputs.recurring_revenue_percentage)
    if recurring is not None:
        candidates.append(_recurring_revenue_adjustment(recurring))

    trend = _choice(inputs.growth_trend, GROWTH_TRENDS)
    if trend is not None:
        candidates.append(_growth_trend_adjustment(trend))

    adjustments = [adj for adj in candidates if adj.percentage_change != 0]
    total_percent = sum(adj.percentage_change for adj in adjustments)
    factor = 1 + total_percent / 100

    adjusted_min = base_min * factor
    adjusted_max = base_max * factor

    size = _size_adjustment(ebitda)
    if size is not None:
        adjusted_max = adjusted_min + (adjusted_max - adjusted_min) * SMALL_COMPANY_RANGE_SHARE
        adjustments.append(size)

    return _round_multiple(adjusted_min), _round_multiple(adjusted_max), adjustments


# --------------------------------------------------------------------------- #
# Confidence and caveats
# --------------------------------------------------------------------------- #


def determine_confidence(inputs: ValuationInputs) -> str:
    historical_count = _usable_historical_count(inputs)
    all_optionals = _has_all_optionals(inputs)
    if historical_count >= 3 and all_optionals:
        return "high"
    if historical_count >= 2 or all_optionals:
        return "medium"
    return "low"


def generate_caveats(inputs: ValuationInputs, method: str, base_value: float) -> List[str]:
    caveats = ["This is an indicative estimate only, not a professional valuation."]

    if method == METHOD_REVENUE:
        caveats.append("Valuation based on turnover multiple (EBITDA data would improve accuracy).")

    if _usable_historical_count(inputs) < 2:
        caveats.append("Limited historical data available. More years of data would improve accuracy.")

    if method == METHOD_EBITDA and base_value < KEY_PERSON_RISK_EBITDA:
        caveats.append(
            "Small business valuations may be significantly affected by owner involvement and key person risk."
        )

    if method == METHOD_EBITDA and base_value > ADVISORY_RECOMMENDED_EBITDA:
        caveats.append("For businesses of this size, professional valuation advisory is strongly recommended.")

    if _number(inputs.total_debt) is None:
        caveats.append("No debt information provided. Equity value assumes zero debt.")

    if not _has_all_optionals(inputs):
        caveats.append("Providing additional business characteristics would improve valuation accuracy.")

    return caveats


# --------------------------------------------------------------------------- #
# Results
# --------------------------------------------------------------------------- #


def _non_calculable(caveats: List[str]) -> ValuationResult:
    return ValuationResult(
        is_calculable=False,
        method=METHOD_INSUFFICIENT,
        enterprise_value_min=None,
        enterprise_value_max=None,
        equity_value_min=None,
        equity_value_max=None,
        multiple_min=None,
        multiple_max=None,
        base_value=None,
        base_value_label="",
        adjustments=[],
        confidence="low",
        caveats=caveats,
    )


def _insufficient_data_result(inputs: ValuationInputs) -> ValuationResult:
    caveats = []
    if _choice(inputs.business_type, BUSINESS_TYPES) is None:
        caveats.append("Please select a business type to calculate valuation.")
    if not any(_has_usable_figures(year) for year in inputs.all_financials()):
        caveats.append("Please provide at least one year of financial data (turnover or EBITDA/profit).")
    elif _has_non_positive_ebitda(inputs):
        caveats.append(NON_POSITIVE_EBITDA_CAVEAT)
    return _non_calculable(caveats)


def _multiple_based_result(
    inputs: ValuationInputs,
    method: str,
    base_value: float,
    base_min: float,
    base_max: float,
) -> ValuationResult:
    size_basis = base_value if method == METHOD_EBITDA else None
    multiple_min, multiple_max, adjustments = apply_adjustments(base_min, base_max, inputs, size_basis)

    ev_min = base_value * multiple_min
    ev_max = base_value * multiple_max

    debt = _number(inputs.total_debt) or 0.0

    return ValuationResult(
        is_calculable=True,
        method=method,
        enterprise_value_min=ev_min,
        enterprise_value_max=ev_max,
        equity_value_min=max(0.0, ev_min - debt),
        equity_value_max=max(0.0, ev_max - debt),
        multiple_min=multiple_min,
        multiple_max=multiple_max,
        base_value=base_value,
        base_value_label="Normalised EBITDA/Profit" if method == METHOD_EBITDA else "Annual Turnover",
        adjustments=adjustments,
        confidence=determine_confidence(inputs),
        caveats=generate_caveats(inputs, method, base_value),
    )


def calculate_valuation(inputs: ValuationInputs) -> ValuationResult:
    """
    Indicative Enterprise / Equity value range for ``inputs``.

    Method priority:
    1. EBITDA multiple, when the mean of all provided EBITDA figures is positive.
    2. Revenue multiple on the latest positive turnover, up to £3M turnover.
    3. Otherwise a non-calculable result explaining what is missing.
    """
    if not has_minimum_data(inputs):
        return _insufficient_data_result(inputs)

    multiples = get_base_multiples(inputs.business_type)
    financials = inputs.all_financials()

    normalised_ebitda = get_normalised_ebitda(financials)
    if normalised_ebitda is not None and normalised_ebitda > 0:
        return _multiple_based_result(
            inputs, METHOD_EBITDA, normalised_ebitda, multiples.ebitda_min, multiples.ebitda_max
        )

    latest_turnover = get_latest_turnover(financials)
    if latest_turnover is not None and latest_turnover <= MAX_TURNOVER_FOR_REVENUE_MULTIPLE:
        return _multiple_based_result(
            inputs, METHOD_REVENUE, latest_turnover, multiples.revenue_min, multiples.revenue_max
        )

    if latest_turnover is not None:
        caveats = ["EBITDA/Profit data is required for businesses with turnover above £3M."]
        if normalised_ebitda is None:
            caveats.append("Please provide at least one year of EBITDA or profit data.")
        else:
            caveats.append(NON_POSITIVE_EBITDA_CAVEAT)
        return _non_calculable(caveats)

    return _insufficient_data_result(inputs)


# --------------------------------------------------------------------------- #
# Display helpers
# --------------------------------------------------------------------------- #


def format_currency(value: Optional[float]) -> str:
    """Compact GBP display: ``£2.4M``, ``£450K``, ``£950``; ``—`` when missing."""
    number = _number(value)
    if number is None:
        return "—"
    if number >= 1_000_000:
        return f"£{number / 1_000_000:.1f}M"
    if number >= 1_000:
        return f"£{number / 1_000:.0f}K"
    if number < 0:
        return f"-£{abs(number):,.0f}"
    return f"£{number:,.0f}"


def format_number(value: Optional[float]) -> str:
    number = _number(value)
    if number is None:
        return ""
    if number.is_integer():
        return f"{int(number):,}"
    return f"{number:,}"


_NUMBER_NOISE = re.compile(r"[£,\s]")


def parse_number(text: Optional[str]) -> Optional[float]:
    """Parse user-typed money (``"£1,200,000"``); ``None`` if blank or unparseable."""
    if text is None:
        return None
    cleaned = _NUMBER_NOISE.sub("", str(text))
    if not cleaned:
        return None
    try:
        value = float(cleaned)
    except ValueError:
        return None
    return _number(value)
