"""
Tests for the impact analysis: valuation discount mitigations, documentation
gaps, completion probability and the estimated value gain.
"""

import pytest

from readiness_engine import (
    IMPACT_STATISTICS,
    FinancialYear,
    ValuationInputs,
    calculate_valuation,
    compute_domain_averages,
    compute_impact,
    detect_threshold_violations,
    get_benchmark_comparison,
    load_default_questionnaire,
)
from readiness_engine.impact import completion_impact, documentation_opportunities, valuation_mitigations
from readiness_engine.scoring import DomainAverage

SPEC = load_default_questionnaire()


def _all(value):
    return {qid: value for qid in SPEC.question_ids()}


def _inputs(**kwargs):
    return ValuationInputs(
        business_type="service",
        historical_financials=[FinancialYear(year=2024, turnover=6_000_000, ebitda=1_000_000)],
        **kwargs,
    )


def _impact(responses, inputs=None, below_minimum_count=0):
    result = calculate_valuation(inputs) if inputs is not None else None
    return compute_impact(
        compute_domain_averages(SPEC, responses),
        detect_threshold_violations(SPEC, responses),
        result,
        inputs,
        below_minimum_count=below_minimum_count,
    )


# ---------------------------------------------------------------------------
# Valuation discounts
# ---------------------------------------------------------------------------


def test_high_concentration_and_declining_growth():
    inputs = _inputs(customer_concentration="high", growth_trend="declining")
    impact = _impact(_all(3), inputs)

    assert [o.id for o in impact.opportunities] == ["customer-concentration", "growth-narrative"]
    valuation = impact.valuation_impact
    assert valuation.current_discount_percent == 43
    assert valuation.mitigated_discount_percent == 22
    assert valuation.improvement_percent == 21

    result = calculate_valuation(inputs)
    midpoint = (result.enterprise_value_min + result.enterprise_value_max) / 2
    assert valuation.estimated_value_gain == pytest.approx(midpoint * 0.21, abs=1)
    assert isinstance(valuation.estimated_value_gain, int)


def test_medium_concentration():
    mitigations = valuation_mitigations(_inputs(customer_concentration="medium", growth_trend="growing"))

    assert [(m.id, m.current_value, m.mitigated_value) for m in mitigations] == [
        ("customer-concentration-medium", -12, -5)
    ]


def test_data_room_item_when_nothing_else_applies():
    impact = _impact(_all(3), _inputs(customer_concentration="low", growth_trend="flat"))

    [opportunity] = impact.opportunities
    assert opportunity.id == "data-room-quality"
    assert opportunity.category == "documentation"
    assert (impact.valuation_impact.current_discount_percent, impact.valuation_impact.mitigated_discount_percent) == (8, 0)
    assert impact.valuation_impact.improvement_percent == 8
    assert impact.has_mitigatable_issues


def test_no_valuation_inputs():
    impact = _impact(_all(3))

    assert impact.opportunities == []
    assert impact.valuation_impact.improvement_percent == 0
    assert impact.valuation_impact.estimated_value_gain is None
    assert not impact.has_mitigatable_issues


def test_value_gain_needs_a_calculable_valuation():
    inputs = ValuationInputs(customer_concentration="high")
    impact = _impact(_all(3), inputs)

    assert impact.valuation_impact.improvement_percent == 13
    assert impact.valuation_impact.estimated_value_gain is None


# ---------------------------------------------------------------------------
# Documentation gaps
# ---------------------------------------------------------------------------


def test_documentation_gap_below_defined_level():
    domains = [
        DomainAverage("financial", "Financial", 0.0),
        DomainAverage("legal", "Legal & Corporate", 1.5),
        DomainAverage("commercial", "Commercial", 2.0),
        DomainAverage("esg", "Governance & Risk", 1.9),
    ]

    opportunities = documentation_opportunities(domains)

    assert [o.id for o in opportunities] == ["legal-documentation", "esg-documentation"]
    legal = opportunities[0]
    assert legal.current_state == "Legal & Corporate at Level 1.5 - gaps in DD readiness"
    assert (legal.current_value, legal.mitigated_value, legal.unit) == (1.5, 2, "level")
    assert legal.evidence_source == "Intralinks M&A Leaks Report"


def test_unknown_domains_get_no_documentation_item():
    assert documentation_opportunities([DomainAverage("culture", "Culture", 0.5)]) == []


# ---------------------------------------------------------------------------
# Completion probability
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "blockers, below_min, current, mitigated",
    [
        (0, 0, 28, 68),
        (1, 1, 16, 63),
        (2, 3, 5, 56),
        (6, 6, 5, 45),
    ],
)
def test_completion_probability(blockers, below_min, current, mitigated):
    impact = completion_impact(blockers, below_min)

    assert (impact.current_probability, impact.mitigated_probability) == (current, mitigated)
    assert impact.risk_factor_count == blockers + below_min


def test_blockers_alone_are_mitigatable():
    responses = _all(2)
    for q in SPEC.find_dimension("financial").questions:
        responses[q.id] = 0

    impact = _impact(responses)

    assert impact.opportunities == []
    assert impact.has_mitigatable_issues
    assert impact.completion_impact.current_probability == 20
    assert impact.completion_impact.mitigated_probability == 65


def test_below_minimum_count_from_benchmark():
    responses = _all(2)
    for q in SPEC.find_dimension("legal").questions:
        responses[q.id] = 1
    comparison = get_benchmark_comparison(SPEC, responses, "tech", "fiveM")

    impact = _impact(responses, below_minimum_count=comparison.below_minimum_count)

    assert impact.completion_impact.risk_factor_count == 1
    assert impact.completion_impact.current_probability == 24
    assert [o.id for o in impact.opportunities] == ["legal-documentation"]


def test_timeline_and_statistics():
    impact = _impact(_all(3))

    assert impact.timeline_impact.dd_time_savings == "6-8 weeks"
    assert "90-day window" in impact.timeline_impact.explanation
    assert len(IMPACT_STATISTICS) == 6
    assert all(s.source_url.startswith("https://") for s in IMPACT_STATISTICS)
