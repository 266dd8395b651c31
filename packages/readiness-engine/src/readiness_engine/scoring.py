"""
Domain scoring: per-dimension averages, weighted overall score, maturity level.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional

from .questionnaire import Level, QuestionnaireSpec


@dataclass(frozen=True)
class DomainAverage:
    id: str
    name: str
    average: float


def _is_score(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def compute_domain_averages(spec: QuestionnaireSpec, responses: Mapping[str, float]) -> List[DomainAverage]:
    """Mean answer per dimension, in spec order; 0 for a dimension with no answers."""
    averages = []
    for dimension in spec.dimensions:
        values = [responses[q.id] for q in dimension.questions if _is_score(responses.get(q.id))]
        avg = sum(values) / len(values) if values else 0.0
        averages.append(DomainAverage(id=dimension.id, name=dimension.name, average=avg))
    return averages


def domain_average_map(spec: QuestionnaireSpec, responses: Mapping[str, float]) -> Dict[str, float]:
    return {d.id: d.average for d in compute_domain_averages(spec, responses)}


def compute_overall_score(spec: QuestionnaireSpec, responses: Mapping[str, float]) -> float:
    """Weighted mean of domain averages; dimensions without a weight count once."""
    total = 0.0
    weights = 0.0
    for dimension, domain in zip(spec.dimensions, compute_domain_averages(spec, responses)):
        weight = dimension.weight if dimension.weight is not None else 1.0
        total += domain.average * weight
        weights += weight
    return total / weights if weights else 0.0


def level_for_score(spec: QuestionnaireSpec, score: float) -> Optional[Level]:
    for level in spec.levels:
        if level.min <= score < level.max:
            return level
    return None


def answered_count(spec: QuestionnaireSpec, responses: Mapping[str, float]) -> int:
    return sum(1 for qid in spec.question_ids() if _is_score(responses.get(qid)))
