"""
Convenience re-exports of data models.

Models are defined next to the logic that uses them and re-exported here for
consumers who prefer ``from readiness_engine.models import ValuationInputs``.
"""

from readiness_engine.codec import AssessmentSnapshot, CodecContext, EncodedCode, FieldAdjustment
from readiness_engine.impact import (
    CompletionImpact,
    ImpactStatistic,
    ImpactSummary,
    MitigationOpportunity,
    TimelineImpact,
    ValuationImpact,
)
from readiness_engine.questionnaire import (
    Dimension,
    Level,
    LifecyclePhase,
    Question,
    QuestionnaireSpec,
    Scale,
    SectorBenchmark,
)
from readiness_engine.recommendations import BenchmarkComparison, ThresholdViolation, TimelineGuidance
from readiness_engine.valuation import FinancialYear, ValuationAdjustment, ValuationInputs, ValuationResult

__all__ = [
    "AssessmentSnapshot",
    "BenchmarkComparison",
    "CodecContext",
    "CompletionImpact",
    "Dimension",
    "EncodedCode",
    "FieldAdjustment",
    "FinancialYear",
    "ImpactStatistic",
    "ImpactSummary",
    "Level",
    "LifecyclePhase",
    "MitigationOpportunity",
    "Question",
    "QuestionnaireSpec",
    "Scale",
    "SectorBenchmark",
    "ThresholdViolation",
    "TimelineGuidance",
    "TimelineImpact",
    "ValuationAdjustment",
    "ValuationImpact",
    "ValuationInputs",
    "ValuationResult",
]
