"""
Impact analysis: what professional exit preparation could recover.

Works on outputs the rest of the engine already produces (domain averages,
threshold violations, benchmark gaps, valuation) and turns them into
mitigation opportunities plus valuation, completion and timeline estimates.
Figures are indicative and drawn from published M&A research.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from .recommendations import SEVERITY_BLOCKER, ThresholdViolation
from .scoring import DomainAverage
from .valuation import ValuationInputs, ValuationResult, round_half_up

CATEGORY_VALUATION = "valuation"
CATEGORY_DOCUMENTATION = "documentation"

DOCUMENTED_LEVEL = 2

# Completion probability, in percent.
UNPREPARED_BASE_PROBABILITY = 28
UNPREPARED_BLOCKER_PENALTY = 8
UNPREPARED_BELOW_MIN_PENALTY = 4
UNPREPARED_FLOOR = 5
PREPARED_BASE_PROBABILITY = 68
PREPARED_BLOCKER_PENALTY = 3
PREPARED_BELOW_MIN_PENALTY = 2
PREPARED_FLOOR = 45
PREPARED_CEILING = 85

DD_TIME_SAVINGS = "6-8 weeks"
DD_TIME_EXPLANATION = (
    "Professional data room preparation typically reduces DD duration by 6-8 weeks, "
    "keeping deals within the critical 90-day window."
)


@dataclass(frozen=True)
class MitigationOpportunity:
    id: str
    category: str  # valuation / documentation
    title: str
    current_state: str
    mitigated_state: str
    current_value: float
    mitigated_value: float
    unit: str  # % / level
    approach: str
    evidence_source: str
    evidence_url: str


@dataclass(frozen=True)
class ValuationImpact:
    current_discount_percent: float
    mitigated_discount_percent: float
    improvement_percent: float
    estimated_value_gain: Optional[int]


@dataclass(frozen=True)
class CompletionImpact:
    current_probability: int
    mitigated_probability: int
    risk_factor_count: int


@dataclass(frozen=True)
class TimelineImpact:
    dd_time_savings: str
    explanation: str


@dataclass(frozen=True)
class ImpactSummary:
    has_mitigatable_issues: bool
    valuation_impact: ValuationImpact
    completion_impact: CompletionImpact
    timeline_impact: TimelineImpact
    opportunities: List[MitigationOpportunity] = field(default_factory=list)


@dataclass(frozen=True)
class ImpactStatistic:
    value: str
    label: str
    source: str
    source_url: str


IMPACT_STATISTICS: Tuple[ImpactStatistic, ...] = (
    ImpactStatistic("70-80%", "of SME sales fail to complete", "Baton Market Research", "https://www.batonmarket.com/resources"),
    ImpactStatistic(
        "60%+",
        "of deal failures cite poor due diligence preparation",
        "Bain M&A Report 2020",
        "https://www.bain.com/insights/topics/mergers-and-acquisitions/",
    ),
    ImpactStatistic(
        "10-20%", "higher valuations for well-documented businesses", "IDEALS Virtual Data Room Research", "https://www.idealsvdr.com/"
    ),
    ImpactStatistic("2-3×", "faster deal completion with prepared data rooms", "Drooms M&A Survey", "https://drooms.com/"),
    ImpactStatistic(
        "<50%",
        "completion probability when DD exceeds 90 days",
        "Business-Sale.com/Investment Bank",
        "https://www.business-sale.com/insights",
    ),
    ImpactStatistic(
        "83%", "of buyers cite poor data rooms as deal friction", "Intralinks M&A Leaks Report", "https://www.intralinks.com/"
    ),
)


# --------------------------------------------------------------------------- #
# Valuation discounts
# --------------------------------------------------------------------------- #


HIGH_CONCENTRATION = MitigationOpportunity(
    id="customer-concentration",
    category=CATEGORY_VALUATION,
    title="Customer Concentration Mitigation",
    current_state="-25% valuation discount (high concentration)",
    mitigated_state="-12% with documented diversification strategy",
    current_value=-25,
    mitigated_value=-12,
    unit="%",
    approach=(
        "Document customer diversification strategy, support securing multi-year contracts, institutionalise "
        "relationships across multiple contacts per customer, create customer dependency reduction roadmap."
    ),
    evidence_source="L40 M&A Advisory Research",
    evidence_url="https://www.l40.com/insights/customer-concentration-risk",
)

MEDIUM_CONCENTRATION = MitigationOpportunity(
    id="customer-concentration-medium",
    category=CATEGORY_VALUATION,
    title="Customer Concentration Improvement",
    current_state="-12% valuation discount (medium concentration)",
    mitigated_state="-5% with documented mitigation",
    current_value=-12,
    mitigated_value=-5,
    unit="%",
    approach=(
        "Document customer acquisition pipeline, demonstrate diversification trend, secure contract extensions "
        "with key accounts."
    ),
    evidence_source="Morgan & Westfield M&A Research",
    evidence_url="https://www.morganandwestfield.com/",
)

DECLINING_GROWTH = MitigationOpportunity(
    id="growth-narrative",
    category=CATEGORY_VALUATION,
    title="Growth Narrative & Pipeline Documentation",
    current_state="-18% valuation discount (declining trend)",
    mitigated_state="-10% with contextualised growth story",
    current_value=-18,
    mitigated_value=-10,
    unit="%",
    approach=(
        "Build compelling growth narrative, document sales pipeline and conversion rates, market opportunity "
        "analysis, identify and document growth levers, contextualise historical decline with turnaround evidence."
    ),
    evidence_source="Drooms M&A Deal Intelligence",
    evidence_url="https://drooms.com/",
)

# Implicit uncertainty discount, used when no specific discount applies.
DATA_ROOM_QUALITY = MitigationOpportunity(
    id="data-room-quality",
    category=CATEGORY_DOCUMENTATION,
    title="Transaction-Ready Data Room",
    current_state="Potential 5-10% implicit uncertainty discount",
    mitigated_state="Professional presentation eliminates uncertainty",
    current_value=-8,
    mitigated_value=0,
    unit="%",
    approach=(
        "Professional data room structure and indexing, document housekeeping and version control, gap "
        "identification with remediation guidance, buyer-ready presentation format."
    ),
    evidence_source="IDEALS Virtual Data Room Research",
    evidence_url="https://www.idealsvdr.com/",
)


def valuation_mitigations(inputs: Optional[ValuationInputs]) -> List[MitigationOpportunity]:
    """Discount items triggered by the valuation inputs; empty without inputs."""
    if inputs is None:
        return []

    out = []
    if inputs.customer_concentration == "high":
        out.append(HIGH_CONCENTRATION)
    elif inputs.customer_concentration == "medium":
        out.append(MEDIUM_CONCENTRATION)
    if inputs.growth_trend == "declining":
        out.append(DECLINING_GROWTH)
    if not out:
        out.append(DATA_ROOM_QUALITY)
    return out


def _valuation_impact(
    mitigations: Sequence[MitigationOpportunity], result: Optional[ValuationResult]
) -> ValuationImpact:
    current = sum(-m.current_value for m in mitigations)
    mitigated = sum(-m.mitigated_value for m in mitigations)
    improvement = current - mitigated

    gain = None
    if result is not None and result.is_calculable and result.enterprise_value_min is not None:
        midpoint = (result.enterprise_value_min + (result.enterprise_value_max or 0.0)) / 2
        gain = round_half_up(midpoint * improvement / 100)

    return ValuationImpact(
        current_discount_percent=current,
        mitigated_discount_percent=mitigated,
        improvement_percent=improvement,
        estimated_value_gain=gain,
    )


# --------------------------------------------------------------------------- #
# Documentation gaps
# --------------------------------------------------------------------------- #


# (title, approach, evidence source, evidence url). Financial is not covered.
DOCUMENTATION_OPPORTUNITIES: Dict[str, Tuple[str, str, str, str]] = {
    "legal": (
        "Legal & Corporate Data Room Preparation",
        "Organise corporate documents, catalogue contracts with key terms summaries, identify gaps in corporate "
        "records, prepare document index for legal DD, flag change-of-control provisions.",
        "Intralinks M&A Leaks Report",
        "https://www.intralinks.com/",
    ),
    "commercial": (
        "Commercial Documentation & Customer Analysis",
        "Structure customer data presentation, document revenue quality metrics, prepare customer concentration "
        "analysis, organise pipeline documentation, create commercial narrative.",
        "Merrill DataSite Research",
        "https://www.merrillcorp.com/",
    ),
    "operational": (
        "Operational Process Documentation",
        "Document key processes and SOPs, identify founder dependencies, prepare operational DD materials, create "
        "scalability narrative, document IT systems and infrastructure.",
        "Bain M&A Report",
        "https://www.bain.com/insights/topics/mergers-and-acquisitions/",
    ),
    "people": (
        "People & Organisation DD Materials",
        "Organise employment documentation, prepare organisation charts, document management team capabilities, "
        "identify retention risks, create people narrative for buyers.",
        "Harvard Business Review M&A Research",
        "https://hbr.org/",
    ),
    "esg": (
        "ESG & Risk Documentation",
        "Compile compliance documentation, organise H&S records, document data protection compliance, prepare "
        "risk register, create ESG narrative.",
        "Diligent Institute 2025 Report",
        "https://www.diligent.com/",
    ),
}


def documentation_opportunities(domain_averages: Sequence[DomainAverage]) -> List[MitigationOpportunity]:
    """One item per covered domain still below the Defined level, in domain order."""
    out = []
    for domain in domain_averages:
        entry = DOCUMENTATION_OPPORTUNITIES.get(domain.id)
        if entry is None or domain.average >= DOCUMENTED_LEVEL:
            continue
        title, approach, source, url = entry
        out.append(
            MitigationOpportunity(
                id=f"{domain.id}-documentation",
                category=CATEGORY_DOCUMENTATION,
                title=title,
                current_state=f"{domain.name} at Level {domain.average:.1f} - gaps in DD readiness",
                mitigated_state="Transaction-ready documentation prepared",
                current_value=domain.average,
                mitigated_value=DOCUMENTED_LEVEL,
                unit="level",
                approach=approach,
                evidence_source=source,
                evidence_url=url,
            )
        )
    return out


# --------------------------------------------------------------------------- #
# Completion probability
# --------------------------------------------------------------------------- #


def completion_impact(blocker_count: int, below_minimum_count: int) -> CompletionImpact:
    current = max(
        UNPREPARED_FLOOR,
        UNPREPARED_BASE_PROBABILITY
        - UNPREPARED_BLOCKER_PENALTY * blocker_count
        - UNPREPARED_BELOW_MIN_PENALTY * below_minimum_count,
    )
    mitigated = min(
        PREPARED_CEILING,
        max(
            PREPARED_FLOOR,
            PREPARED_BASE_PROBABILITY
            - PREPARED_BLOCKER_PENALTY * blocker_count
            - PREPARED_BELOW_MIN_PENALTY * below_minimum_count,
        ),
    )
    return CompletionImpact(
        current_probability=current,
        mitigated_probability=mitigated,
        risk_factor_count=blocker_count + below_minimum_count,
    )


def compute_impact(
    domain_averages: Sequence[DomainAverage],
    threshold_violations: Sequence[ThresholdViolation],
    valuation_result: Optional[ValuationResult] = None,
    valuation_inputs: Optional[ValuationInputs] = None,
    below_minimum_count: int = 0,
) -> ImpactSummary:
    """
    Full impact analysis.

    Valuation mitigations come first, then documentation gaps. The value gain
    is only estimated for a calculable valuation.
    """
    mitigations = valuation_mitigations(valuation_inputs)
    opportunities = mitigations + documentation_opportunities(domain_averages)
    blockers = sum(1 for v in threshold_violations if v.severity == SEVERITY_BLOCKER)

    return ImpactSummary(
        has_mitigatable_issues=bool(opportunities) or blockers > 0,
        valuation_impact=_valuation_impact(mitigations, valuation_result),
        completion_impact=completion_impact(blockers, below_minimum_count),
        timeline_impact=TimelineImpact(dd_time_savings=DD_TIME_SAVINGS, explanation=DD_TIME_EXPLANATION),
        opportunities=opportunities,
    )
