"""
Tests for the AssessmentService and ValuationService orchestration layers.
"""

from unittest.mock import MagicMock

import pytest

from readiness_engine import InvalidCode, load_default_questionnaire
from readiness_service.connectors import BaseSpecSource
from readiness_service.services.assessment import AssessmentService
from readiness_service.services.valuation import ValuationService


@pytest.fixture
def source():
    mock_source = MagicMock(spec=BaseSpecSource)
    mock_source.load_spec.return_value = load_default_questionnaire()
    return mock_source


def test_assessment_service_initialization(source):
    service = AssessmentService(source)
    assert service.source == source
    assert service.spec.title == "SME Exit Readiness Assessment"
    source.load_spec.assert_called()


def test_export_and_restore(source):
    service = AssessmentService(source)
    exported = service.export_code(
        {"fin1": 3, "ops4": 2},
        "professional-services",
        "",
        {"business_type": "product", "total_debt": 75000},
        current_year=2025,
    )

    snapshot = service.restore_code(exported["code"], current_year=2025)
    assert snapshot.responses["fin1"] == 3
    assert snapshot.responses["ops4"] == 2
    assert snapshot.sector == "professional-services"
    assert snapshot.lifecycle == ""
    assert snapshot.valuation.business_type == "product"
    assert snapshot.valuation.total_debt == 75000
    assert snapshot.valuation.historical_financials[0].year == 2022


def test_restore_invalid_code_raises(source):
    with pytest.raises(InvalidCode):
        AssessmentService(source).restore_code("ZZZZZZ")


def test_build_report_flow(source):
    service = AssessmentService(source)
    responses = {qid: 4 for qid in service.spec.question_ids()}

    report = service.build_report(responses, "manufacturing", "thirtyM")

    assert report["overall_score"] == pytest.approx(4.0)
    assert report["level"]["name"] == "Transaction-ready"
    assert report["threshold_violations"] == []
    assert report["timeline"]["estimated_months"] == "Ready now"
    assert all(not gap["below_minimum"] for gap in report["benchmark"]["gaps"])
    assert report["valuation"] is None
    assert report["impact"]["opportunities"] == []
    assert report["impact"]["has_mitigatable_issues"] is False
    assert report["impact"]["completion_impact"] == {
        "current_probability": 28,
        "mitigated_probability": 68,
        "risk_factor_count": 0,
    }


def test_valuation_service_returns_plain_dict():
    result = ValuationService().calculate_valuation(
        {"business_type": "service", "historical_financials": [{"ebitda": 300000}]}, current_year=2025
    )

    assert isinstance(result, dict)
    assert result["method"] == "ebitda-multiple"
    assert (result["multiple_min"], result["multiple_max"]) == (2.0, 3.2)
    assert result["adjustments"][0]["factor"] == "Company size"


def test_valuation_service_accepts_none():
    result = ValuationService().calculate_valuation(None)
    assert result["is_calculable"] is False
