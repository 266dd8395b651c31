"""
Recommendations, threshold violations, benchmark comparison and timeline
guidance, all derived from domain averages.

Rules are declared as data (``DEFAULT_RULES``) so they are easy to find and
edit; callers may pass their own rule list.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from .questionnaire import DOMAINS, QuestionnaireSpec
from .scoring import compute_domain_averages, domain_average_map

RULE_LT = "domain_avg_lt"
RULE_BETWEEN = "domain_avg_between"
RULE_GTE = "domain_avg_gte"

LEVEL_ZERO_CEILING = 0.9

SEVERITY_BLOCKER = "blocker"
SEVERITY_CRITICAL = "critical"


@dataclass(frozen=True)
class RuleCondition:
    type: str
    domain_id: str
    message: str
    threshold: Optional[float] = None
    range: Optional[Tuple[float, float]] = None

    def matches(self, value: float) -> bool:
        if self.type == RULE_LT and self.threshold is not None:
            return value < self.threshold
        if self.type == RULE_BETWEEN and self.range is not None:
            low, high = self.range
            return low <= value < high
        if self.type == RULE_GTE and self.threshold is not None:
            return value >= self.threshold
        return False


DEFAULT_RULES: Tuple[RuleCondition, ...] = (
    # Level 0-1: critical foundational gaps
    RuleCondition(RULE_LT, "financial", "Financial: Urgent - establish basic bookkeeping, file accounts, and produce management reports.", threshold=1),
    RuleCondition(RULE_LT, "legal", "Legal: Urgent - update statutory registers, file returns, and document key contracts.", threshold=1),
    RuleCondition(RULE_LT, "commercial", "Commercial: Urgent - implement customer tracking and understand revenue sources.", threshold=1),
    RuleCondition(RULE_LT, "operational", "Operational: Urgent - document core processes and implement basic IT backups.", threshold=1),
    RuleCondition(RULE_LT, "people", "People: Urgent - ensure employment contracts are in place and identify key person dependencies.", threshold=1),
    RuleCondition(RULE_LT, "esg", "Governance & Risk: Urgent - achieve basic H&S and GDPR compliance; document policies.", threshold=1),
    # Level 1-2: build towards transaction readiness
    RuleCondition(RULE_BETWEEN, "financial", "Financial: Obtain audited accounts, normalise EBITDA, and improve management reporting quality.", range=(1, 2)),
    RuleCondition(RULE_BETWEEN, "legal", "Legal: Complete statutory books, catalog material contracts, and verify IP ownership.", range=(1, 2)),
    RuleCondition(RULE_BETWEEN, "commercial", "Commercial: Reduce customer concentration, build recurring revenue, and track retention metrics.", range=(1, 2)),
    RuleCondition(RULE_BETWEEN, "operational", "Operational: Create SOPs, reduce founder dependency, and implement disaster recovery.", range=(1, 2)),
    RuleCondition(RULE_BETWEEN, "people", "People: Build management depth, implement HR policies, and create retention plans.", range=(1, 2)),
    # Level 2-3: optimise for competitive positioning
    RuleCondition(RULE_BETWEEN, "financial", "Financial: Prepare vendor DD pack, obtain tax clearances, and refine financial model.", range=(2, 3)),
    RuleCondition(RULE_BETWEEN, "legal", "Legal: Conduct legal audit, prepare DD pack, and resolve outstanding litigation.", range=(2, 3)),
    RuleCondition(RULE_BETWEEN, "commercial", "Commercial: Evidence market position, improve LTV/CAC metrics, and strengthen customer relationships.", range=(2, 3)),
    # Level 3+: transaction-ready optimisation
    RuleCondition(RULE_GTE, "financial", "Financial: Maintain audit-ready position and ensure locked-box readiness for competitive process.", threshold=3),
    RuleCondition(RULE_GTE, "operational", "Operational: Demonstrate scalability and prepare operational DD materials to support premium valuation.", threshold=3),
)


@dataclass(frozen=True)
class ThresholdViolation:
    type: str  # level-zero / financial-critical / legal-critical / people-critical
    domain_id: str
    domain_name: str
    current_level: float
    required_level: float
    severity: str  # blocker / critical
    message: str


@dataclass(frozen=True)
class BenchmarkGap:
    domain: str
    domain_name: str
    user_score: float
    min_score: float
    avg_score: float
    below_minimum: bool
    below_average: bool


@dataclass(frozen=True)
class BenchmarkComparison:
    sector: str
    sector_name: str
    lifecycle: str
    lifecycle_name: str
    user_scores: Dict[str, float]
    minimum_scores: Dict[str, float]
    average_scores: Dict[str, float]
    gaps: List[BenchmarkGap]
    critical_domains: List[str]

    @property
    def below_minimum_count(self) -> int:
        return sum(1 for gap in self.gaps if gap.below_minimum)


@dataclass(frozen=True)
class TimelineGuidance:
    overall_level: float
    estimated_months: str
    priority: str
    recommendations: List[str]


def compute_recommendations(
    spec: QuestionnaireSpec,
    responses: Mapping[str, float],
    rules: Sequence[RuleCondition] = DEFAULT_RULES,
) -> List[str]:
    """
    Messages of every matching rule, in rule order.

    When no rule matches (e.g. a questionnaire with different domain ids) each
    domain gets a generic message based on where it sits on the scale.
    """
    averages = domain_average_map(spec, responses)
    out = [rule.message for rule in rules if rule.domain_id in averages and rule.matches(averages[rule.domain_id])]
    if out:
        return out

    midpoint = (spec.scale.min + spec.scale.max) / 2
    for domain in compute_domain_averages(spec, responses):
        if domain.average < midpoint:
            out.append(f"{domain.name}: focus on improving foundational practices.")
        elif domain.average < spec.scale.max - 0.5:
            out.append(f"{domain.name}: Standardise and measure to progress to the next level.")
        else:
            out.append(f"{domain.name}: Continue optimising and innovating.")
    return out


_CRITICAL_TYPES = {
    "financial": "financial-critical",
    "legal": "legal-critical",
    "people": "people-critical",
}


def detect_threshold_violations(spec: QuestionnaireSpec, responses: Mapping[str, float]) -> List[ThresholdViolation]:
    """Level-zero blockers first, then critical-domain shortfalls."""
    averages = domain_average_map(spec, responses)
    violations = []

    for dim in spec.dimensions:
        avg = averages.get(dim.id, 0.0)

        if avg < LEVEL_ZERO_CEILING:
            violations.append(
                ThresholdViolation(
                    type="level-zero",
                    domain_id=dim.id,
                    domain_name=dim.name,
                    current_level=avg,
                    required_level=1,
                    severity=SEVERITY_BLOCKER,
                    message=(
                        f"{dim.name} is at Level 0 (Incomplete). This is a potential deal-breaker "
                        "that must be addressed before engaging buyers."
                    ),
                )
            )

        if dim.critical and dim.min_acceptable and avg < dim.min_acceptable:
            violations.append(
                ThresholdViolation(
                    type=_CRITICAL_TYPES.get(dim.id, "level-zero"),
                    domain_id=dim.id,
                    domain_name=dim.name,
                    current_level=avg,
                    required_level=dim.min_acceptable,
                    severity=SEVERITY_CRITICAL,
                    message=(
                        f"{dim.name} is below the critical threshold (Level {dim.min_acceptable:g}). This may "
                        "prevent transaction completion or significantly impact valuation."
                    ),
                )
            )

    # Stable sort keeps spec order within each severity.
    return sorted(violations, key=lambda v: 0 if v.severity == SEVERITY_BLOCKER else 1)


def get_benchmark_comparison(
    spec: QuestionnaireSpec,
    responses: Mapping[str, float],
    sector_id: str,
    lifecycle_id: str,
) -> Optional[BenchmarkComparison]:
    """User domain scores against a sector's minimum / average for one lifecycle phase."""
    sector = next((s for s in spec.available_sectors() if s.id == sector_id), None)
    if sector is None:
        return None
    phase = sector.lifecycle_phases.get(lifecycle_id)
    if phase is None:
        return None

    averages = domain_average_map(spec, responses)
    user_scores = {domain: averages.get(domain, 0.0) for domain in DOMAINS}

    gaps = []
    for domain in DOMAINS:
        dimension = spec.find_dimension(domain)
        min_score = phase.minimum.get(domain, 0.0)
        avg_score = phase.average.get(domain, 0.0)
        gaps.append(
            BenchmarkGap(
                domain=domain,
                domain_name=dimension.name if dimension else domain,
                user_score=user_scores[domain],
                min_score=min_score,
                avg_score=avg_score,
                below_minimum=user_scores[domain] < min_score,
                below_average=user_scores[domain] < avg_score,
            )
        )

    lifecycle_info = next((p for p in spec.available_lifecycle_phases() if p.id == lifecycle_id), None)

    return BenchmarkComparison(
        sector=sector.id,
        sector_name=sector.name,
        lifecycle=lifecycle_id,
        lifecycle_name=lifecycle_info.name if lifecycle_info else lifecycle_id,
        user_scores=user_scores,
        minimum_scores={domain: phase.minimum.get(domain, 0.0) for domain in DOMAINS},
        average_scores={domain: phase.average.get(domain, 0.0) for domain in DOMAINS},
        gaps=gaps,
        critical_domains=list(sector.critical_domains),
    )


def _benchmark_timeline(overall: float, comparison: BenchmarkComparison) -> TimelineGuidance:
    minimum_avg = sum(comparison.minimum_scores.values()) / len(DOMAINS)
    gap = minimum_avg - overall

    if gap > 1.5:
        return TimelineGuidance(
            overall_level=overall,
            estimated_months="18-24 months",
            priority="Significant preparation required",
            recommendations=[
                "Focus on minimum levels shown on the radar plot across all domains before engaging buyers",
                "Address any Level 0 domains immediately - these are always deal-breakers",
                "Prioritise Financial and Legal & Corporate as foundational requirements",
            ],
        )
    if gap > 0.5:
        return TimelineGuidance(
            overall_level=overall,
            estimated_months="9-18 months",
            priority="Foundation in place but gaps remain",
            recommendations=[
                "Suitable for trade buyer conversations with appropriate expectations",
                "Focus on documenting processes and building management depth",
                "Ensure all critical domains (Financial, Legal, People) meet level minimums",
            ],
        )
    if gap > 0:
        return TimelineGuidance(
            overall_level=overall,
            estimated_months="3-9 months",
            priority="Transaction-ready for most buyer types",
            recommendations=[
                "Focus on elevating any domains below Level 3",
                "Begin preparing due diligence materials for key domains",
                "Consider engaging advisors for transaction process optimisation",
            ],
        )
    return TimelineGuidance(
        overall_level=overall,
        estimated_months="Ready now",
        priority="Fully optimised for competitive process",
        recommendations=[
            "Ready for PE auction or premium trade sale",
            "Vendor DD investment likely to yield significant ROI",
            "Focus on maintaining current position and addressing any remaining Level 3 gaps",
        ],
    )


def _overall_timeline(overall: float) -> TimelineGuidance:
    if overall < 1.0:
        return TimelineGuidance(
            overall_level=overall,
            estimated_months="18-24 months",
            priority="Significant preparation required",
            recommendations=[
                "Focus on achieving Level 2 baseline across all domains before engaging buyers",
                "Address any Level 0 domains immediately - these are deal-breakers",
                "Prioritise Financial and Legal & Corporate as foundational requirements",
            ],
        )
    if overall < 2.0:
        return TimelineGuidance(
            overall_level=overall,
            estimated_months="9-15 months",
            priority="Foundation in place but gaps remain",
            recommendations=[
                "Suitable for trade buyer conversations with appropriate expectations",
                "Focus on documenting processes and building management depth",
                "Ensure all critical domains (Financial, Legal, People) meet Level 2 minimum",
            ],
        )
    if overall < 3.0:
        return TimelineGuidance(
            overall_level=overall,
            estimated_months="3-9 months",
            priority="Transaction-ready for most buyer types",
            recommendations=[
                "Focus on elevating any domains that are much below the others",
                "Begin preparing due diligence materials for key domains",
                "Consider engaging advisors for transaction process optimisation",
            ],
        )
    return TimelineGuidance(
        overall_level=overall,
        estimated_months="Ready now",
        priority="Fully optimised for competitive process",
        recommendations=[
            "Ready for competitive PE auction or premium trade sale",
            "Ensure that all domains are evenly strong to maximise valuation",
            "Focus on maintaining current position and addressing any remaining Level 3 gaps",
        ],
    )


def generate_timeline_guidance(
    spec: QuestionnaireSpec,
    responses: Mapping[str, float],
    sector_id: Optional[str] = None,
    lifecycle_id: Optional[str] = None,
) -> TimelineGuidance:
    """
    Estimated time to transaction readiness.

    Uses the gap to the sector's minimum benchmark when both a sector and a
    lifecycle phase are known, otherwise the unweighted mean of domain
    averages.
    """
    domains = compute_domain_averages(spec, responses)
    overall = sum(d.average for d in domains) / (len(domains) or 1)

    if sector_id and lifecycle_id:
        comparison = get_benchmark_comparison(spec, responses, sector_id, lifecycle_id)
        if comparison is not None:
            return _benchmark_timeline(overall, comparison)

    return _overall_timeline(overall)
