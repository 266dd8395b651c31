"""
Assessment Service
==================

Orchestrates a questionnaire source and the engine: export / restore answer
codes and build the assessment report (scores, recommendations, benchmark
comparison, valuation and impact analysis).

Stateless: nothing submitted here is stored.
"""

import logging
from typing import Any, Dict, Optional

from readiness_engine import (
    AssessmentSnapshot,
    CodecContext,
    QuestionnaireSpec,
    build_valuation_inputs,
    calculate_valuation,
    compute_domain_averages,
    compute_impact,
    compute_overall_score,
    compute_recommendations,
    decode,
    detect_threshold_violations,
    encode_with_report,
    generate_timeline_guidance,
    get_benchmark_comparison,
    level_for_score,
)
from readiness_engine.scoring import answered_count
from readiness_service.connectors.base import BaseSpecSource
from readiness_service.utils.json import to_jsonable

logger = logging.getLogger(__name__)


class AssessmentService:
    def __init__(self, source: BaseSpecSource):
        self.source = source

    @property
    def spec(self) -> QuestionnaireSpec:
        return self.source.load_spec()

    def codec_context(self) -> CodecContext:
        return CodecContext.from_spec(self.spec)

    def get_questionnaire(self) -> Dict[str, Any]:
        return to_jsonable(self.spec)

    def export_code(
        self,
        responses: Dict[str, int],
        sector: str = "",
        lifecycle: str = "",
        valuation: Optional[Dict[str, Any]] = None,
        current_year: Optional[int] = None,
    ) -> Dict[str, Any]:
        inputs = build_valuation_inputs(valuation or {}, current_year=current_year)
        encoded = encode_with_report(responses, sector, lifecycle, inputs, self.codec_context())
        if encoded.adjustments:
            logger.info(f"Export code lost precision on {len(encoded.adjustments)} field(s)")
        return {"code": encoded.code, "adjustments": to_jsonable(encoded.adjustments)}

    def restore_code(self, code: str, current_year: Optional[int] = None) -> AssessmentSnapshot:
        """Decode ``code``; raises ``readiness_engine.CodecError`` when it is not valid."""
        return decode(code, self.codec_context(), current_year=current_year)

    def build_report(
        self,
        responses: Dict[str, int],
        sector: str = "",
        lifecycle: str = "",
        valuation: Optional[Dict[str, Any]] = None,
        current_year: Optional[int] = None,
    ) -> Dict[str, Any]:
        """
        Orchestrates the report.

        1. Domain averages, weighted overall score and its level.
        2. Rule recommendations and threshold violations.
        3. Benchmark comparison and timeline (sector / lifecycle aware).
        4. Valuation, when valuation inputs were supplied.
        5. Impact analysis of professional preparation.
        """
        spec = self.spec

        domains = compute_domain_averages(spec, responses)
        overall = compute_overall_score(spec, responses)
        level = level_for_score(spec, overall)
        violations = detect_threshold_violations(spec, responses)
        benchmark = get_benchmark_comparison(spec, responses, sector, lifecycle) if sector and lifecycle else None

        inputs = None
        valuation_result = None
        if valuation is not None:
            inputs = build_valuation_inputs(valuation, current_year=current_year)
            valuation_result = calculate_valuation(inputs)

        impact = compute_impact(
            domains,
            violations,
            valuation_result,
            inputs,
            below_minimum_count=benchmark.below_minimum_count if benchmark else 0,
        )

        return {
            "title": spec.title,
            "answered": answered_count(spec, responses),
            "total": len(spec.question_ids()),
            "domain_averages": to_jsonable(domains),
            "overall_score": overall,
            "level": to_jsonable(level),
            "recommendations": compute_recommendations(spec, responses),
            "threshold_violations": to_jsonable(violations),
            "timeline": to_jsonable(generate_timeline_guidance(spec, responses, sector, lifecycle)),
            "benchmark": to_jsonable(benchmark),
            "valuation": to_jsonable(valuation_result),
            "impact": to_jsonable(impact),
        }
