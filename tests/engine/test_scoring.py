"""
Tests for domain averages, overall score, levels, recommendations,
threshold violations, benchmark comparison and timeline guidance.
"""

import pytest

from readiness_engine import (
    RuleCondition,
    compute_domain_averages,
    compute_overall_score,
    compute_recommendations,
    detect_threshold_violations,
    generate_timeline_guidance,
    get_benchmark_comparison,
    level_for_score,
    load_default_questionnaire,
    load_questionnaire,
)
from readiness_engine.scoring import answered_count

SPEC = load_default_questionnaire()


def _all(value):
    return {qid: value for qid in SPEC.question_ids()}


def _domain(domain_id, value, base=None):
    responses = dict(base or _all(3))
    for q in SPEC.find_dimension(domain_id).questions:
        responses[q.id] = value
    return responses


# ---------------------------------------------------------------------------
# Scores and levels
# ---------------------------------------------------------------------------


def test_domain_averages():
    responses = {"fin1": 4, "fin2": 2}
    averages = {d.id: d.average for d in compute_domain_averages(SPEC, responses)}
    assert averages["financial"] == 3.0
    assert averages["legal"] == 0.0


def test_overall_score_is_weighted():
    responses = _domain("financial", 4, _all(2))
    # (4 * 1.5 + 2 * 5.0) / 6.5
    assert compute_overall_score(SPEC, responses) == pytest.approx(16 / 6.5)


def test_unweighted_dimensions_count_once():
    spec = load_questionnaire(
        {
            "title": "t",
            "scale": {"min": 0, "max": 4},
            "dimensions": [
                {"id": "a", "questions": [{"id": "a1"}]},
                {"id": "b", "questions": [{"id": "b1"}]},
            ],
        }
    )
    assert compute_overall_score(spec, {"a1": 4, "b1": 2}) == 3.0


def test_level_for_score():
    assert level_for_score(SPEC, 0.0).name == "Incomplete"
    assert level_for_score(SPEC, 2.9).name == "Established"
    assert level_for_score(SPEC, 4.0).name == "Transaction-ready"
    assert level_for_score(SPEC, 9.0) is None


def test_answered_count_ignores_unknown_ids():
    assert answered_count(SPEC, {"fin1": 0, "fin2": 3, "nope": 4}) == 2


# ---------------------------------------------------------------------------
# Recommendations
# ---------------------------------------------------------------------------


def test_recommendations_follow_rule_order():
    responses = _domain("financial", 0, _domain("legal", 1))
    messages = compute_recommendations(SPEC, responses)

    assert messages[0].startswith("Financial: Urgent")
    assert any(m.startswith("Legal: Complete statutory books") for m in messages)
    assert any(m.startswith("Operational: Demonstrate scalability") for m in messages)


def test_generic_recommendations_when_no_rule_matches():
    rules = [RuleCondition("domain_avg_lt", "unknown", "never")]
    messages = compute_recommendations(SPEC, _domain("people", 0, _all(4)), rules=rules)

    assert len(messages) == len(SPEC.dimensions)
    assert "People: focus on improving foundational practices." in messages
    assert "Financial: Continue optimising and innovating." in messages


def test_rule_condition_between_is_half_open():
    rule = RuleCondition("domain_avg_between", "financial", "m", range=(1, 2))
    assert rule.matches(1)
    assert not rule.matches(2)


# ---------------------------------------------------------------------------
# Threshold violations
# ---------------------------------------------------------------------------


def test_blockers_sort_before_critical():
    responses = _domain("esg", 0, _domain("people", 1))
    violations = detect_threshold_violations(SPEC, responses)

    assert [(v.domain_id, v.severity) for v in violations] == [("esg", "blocker"), ("people", "critical")]
    assert violations[1].type == "people-critical"
    assert violations[1].required_level == 2


def test_no_violations_when_ready():
    assert detect_threshold_violations(SPEC, _all(3)) == []


# ---------------------------------------------------------------------------
# Benchmarks and timeline
# ---------------------------------------------------------------------------


def test_benchmark_comparison():
    comparison = get_benchmark_comparison(SPEC, _domain("legal", 1, _all(2)), "tech", "fiveM")

    assert comparison.sector_name == "Technology & SaaS"
    assert comparison.critical_domains == ["legal", "commercial"]
    legal = next(g for g in comparison.gaps if g.domain == "legal")
    assert legal.below_minimum and legal.below_average
    assert comparison.below_minimum_count == 1


def test_benchmark_comparison_unknown_ids():
    assert get_benchmark_comparison(SPEC, _all(2), "aerospace", "fiveM") is None
    assert get_benchmark_comparison(SPEC, _all(2), "tech", "hundredM") is None


@pytest.mark.parametrize(
    "value, months",
    [(0, "18-24 months"), (1, "9-15 months"), (2, "3-9 months"), (4, "Ready now")],
)
def test_timeline_without_benchmark(value, months):
    assert generate_timeline_guidance(SPEC, _all(value)).estimated_months == months


@pytest.mark.parametrize(
    "value, months",
    [(0, "18-24 months"), (2, "9-18 months"), (3, "Ready now")],
)
def test_timeline_against_benchmark(value, months):
    # tech / thirtyM minimums average 17 / 6
    guidance = generate_timeline_guidance(SPEC, _all(value), "tech", "thirtyM")
    assert guidance.estimated_months == months
