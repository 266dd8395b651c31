"""
Readiness Engine
================

Pure exit-readiness core with zero external dependencies.

Public API:
- ``QuestionnaireSpec`` / ``load_questionnaire`` / ``load_default_questionnaire``
- ``encode`` / ``encode_with_report`` / ``decode``: shareable answer codes
- ``ValuationInputs`` / ``ValuationResult`` / ``calculate_valuation``
- ``build_valuation_inputs(data)``: canonical input preparation
- ``compute_domain_averages`` / ``compute_overall_score`` / ``level_for_score``
- ``compute_recommendations`` / ``detect_threshold_violations`` /
  ``get_benchmark_comparison`` / ``generate_timeline_guidance``
- ``compute_impact``: impact analysis of professional exit preparation
"""

from readiness_engine.codec import (
    AssessmentSnapshot,
    CodecContext,
    CodecError,
    EncodedCode,
    FieldAdjustment,
    InvalidCode,
    MalformedInput,
    decode,
    encode,
    encode_with_report,
)
from readiness_engine.impact import IMPACT_STATISTICS, ImpactSummary, compute_impact
from readiness_engine.inputs_builder import (
    build_valuation_inputs,
    default_valuation_inputs,
    valuation_inputs_to_dict,
)
from readiness_engine.questionnaire import (
    DOMAINS,
    QuestionnaireError,
    QuestionnaireSpec,
    load_default_questionnaire,
    load_questionnaire,
)
from readiness_engine.recommendations import (
    DEFAULT_RULES,
    RuleCondition,
    compute_recommendations,
    detect_threshold_violations,
    generate_timeline_guidance,
    get_benchmark_comparison,
)
from readiness_engine.scoring import (
    compute_domain_averages,
    compute_overall_score,
    level_for_score,
)
from readiness_engine.valuation import (
    FinancialYear,
    ValuationAdjustment,
    ValuationInputs,
    ValuationResult,
    calculate_valuation,
    format_currency,
    parse_number,
)

__all__ = [
    "DEFAULT_RULES",
    "DOMAINS",
    "IMPACT_STATISTICS",
    "AssessmentSnapshot",
    "CodecContext",
    "CodecError",
    "EncodedCode",
    "FieldAdjustment",
    "FinancialYear",
    "ImpactSummary",
    "InvalidCode",
    "MalformedInput",
    "QuestionnaireError",
    "QuestionnaireSpec",
    "RuleCondition",
    "ValuationAdjustment",
    "ValuationInputs",
    "ValuationResult",
    "build_valuation_inputs",
    "calculate_valuation",
    "compute_impact",
    "compute_domain_averages",
    "compute_overall_score",
    "compute_recommendations",
    "decode",
    "default_valuation_inputs",
    "detect_threshold_violations",
    "encode",
    "encode_with_report",
    "format_currency",
    "generate_timeline_guidance",
    "get_benchmark_comparison",
    "level_for_score",
    "load_default_questionnaire",
    "load_questionnaire",
    "parse_number",
    "valuation_inputs_to_dict",
]
