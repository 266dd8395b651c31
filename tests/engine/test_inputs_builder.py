"""
Tests for the inputs_builder module.

Covers: default year layout, unset vs zero, text money parsing, choice
normalisation, padding / truncation of year records.
"""

import pytest

from readiness_engine import (
    ValuationInputs,
    build_valuation_inputs,
    decode,
    default_valuation_inputs,
    encode,
    load_default_questionnaire,
    valuation_inputs_to_dict,
)
from readiness_engine.inputs_builder import coerce_choice, coerce_money, coerce_percentage

# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------


def test_default_inputs_layout():
    inputs = default_valuation_inputs(2025)

    assert isinstance(inputs, ValuationInputs)
    assert inputs.business_type is None
    assert [f.year for f in inputs.historical_financials] == [2022, 2023, 2024]
    assert [f.year for f in inputs.forecast_financials] == [2025, 2026, 2027]
    assert all(f.turnover is None and f.ebitda is None for f in inputs.all_financials())


def test_empty_dict_matches_defaults():
    assert build_valuation_inputs({}, current_year=2025) == default_valuation_inputs(2025)
    assert build_valuation_inputs(None, current_year=2025) == default_valuation_inputs(2025)


# ---------------------------------------------------------------------------
# Input mapping from raw data
# ---------------------------------------------------------------------------


def test_input_mapping_from_raw_data():
    data = {
        "business_type": " Tech-SaaS ",
        "historical_financials": [
            {"year": 2022, "turnover": "£1,000,000", "ebitda": 150000},
            {"turnover": 1200000.0, "ebitda": 0},
            {"turnover": None, "ebitda": ""},
        ],
        "total_debt": "250,000",
        "growth_trend": "growing",
        "customer_concentration": "LOW",
        "recurring_revenue_percentage": 72.6,
    }

    inputs = build_valuation_inputs(data, current_year=2025)

    assert inputs.business_type == "tech-saas"
    first, second, third = inputs.historical_financials
    assert (first.year, first.turnover, first.ebitda) == (2022, 1_000_000, 150_000)
    assert second.year == 2023
    assert second.ebitda == 0
    assert third.turnover is None and third.ebitda is None
    assert inputs.total_debt == 250_000
    assert inputs.customer_concentration == "low"
    assert inputs.recurring_revenue_percentage == 73


def test_extra_year_records_are_ignored():
    data = {"forecast_financials": [{"turnover": i * 1000} for i in range(1, 6)]}
    inputs = build_valuation_inputs(data, current_year=2025)
    assert [f.turnover for f in inputs.forecast_financials] == [1000, 2000, 3000]


def test_non_list_year_records_fall_back_to_defaults():
    inputs = build_valuation_inputs({"historical_financials": "lots"}, current_year=2025)
    assert inputs.historical_financials == default_valuation_inputs(2025).historical_financials


def test_round_trip_through_dict():
    inputs = build_valuation_inputs({"business_type": "product", "total_debt": 10}, current_year=2025)
    assert build_valuation_inputs(valuation_inputs_to_dict(inputs), current_year=2025) == inputs


# ---------------------------------------------------------------------------
# Coercion helpers
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "raw, expected",
    [
        (None, None),
        (True, None),
        (float("nan"), None),
        (float("inf"), None),
        ("", None),
        ("n/a", None),
        ("-12,500", -12_500),
        (0, 0),
        (42, 42),
    ],
)
def test_coerce_money(raw, expected):
    assert coerce_money(raw) == expected


def test_coerce_percentage_range():
    assert coerce_percentage(0) == 0
    assert coerce_percentage(100) == 100
    assert coerce_percentage(-1) is None
    assert coerce_percentage(101) is None


@pytest.mark.parametrize("raw, expected", [(68.5, 69), (2.5, 3), ("40.5", 41), (72.4, 72)])
def test_coerce_percentage_rounds_halves_up(raw, expected):
    assert coerce_percentage(raw) == expected


def test_coerce_percentage_agrees_with_the_answer_code():
    spec = load_default_questionnaire()
    built = build_valuation_inputs({"business_type": "service", "recurring_revenue_percentage": 68.5}, current_year=2025)
    raw = ValuationInputs(
        business_type="service",
        historical_financials=built.historical_financials,
        forecast_financials=built.forecast_financials,
        recurring_revenue_percentage=68.5,
    )

    snapshot = decode(encode(spec.default_responses(), "", "", raw, spec), spec, current_year=2025)

    assert built.recurring_revenue_percentage == 69
    assert snapshot.valuation.recurring_revenue_percentage == built.recurring_revenue_percentage


def test_coerce_choice_rejects_unknown():
    assert coerce_choice("retail", ("service", "product")) is None
    assert coerce_choice(3, ("service",)) is None
