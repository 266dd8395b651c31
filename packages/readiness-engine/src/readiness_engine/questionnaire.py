"""
Questionnaire Model
===================

Read-only description of the assessment: dimensions and their questions, the
integer answer scale, maturity levels and (optionally) sector / lifecycle
benchmark tables.

The JSON document format uses camelCase keys (``minAcceptable``,
``criticalDomains``, ``lifecyclePhases`` ...). ``load_questionnaire()`` turns
such a document into frozen dataclasses; nothing here checks the document for
internal consistency (e.g. contiguous level ranges), that is the author's job.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from importlib import resources
from typing import Any, Dict, Iterator, List, Optional, Tuple


DOMAINS: Tuple[str, ...] = ("financial", "legal", "commercial", "operational", "people", "esg")

DEFAULT_QUESTIONNAIRE_RESOURCE = "default_questionnaire.json"


class QuestionnaireError(ValueError):
    pass


@dataclass(frozen=True)
class Scale:
    min: int
    max: int
    labels: List[str]


@dataclass(frozen=True)
class Question:
    id: str
    text: str
    plain_summary: Optional[str] = None
    explanations: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class Dimension:
    id: str
    name: str
    questions: List[Question]
    weight: Optional[float] = None
    critical: bool = False
    min_acceptable: Optional[float] = None


@dataclass(frozen=True)
class Level:
    name: str
    min: float
    max: float
    color: str
    description: Optional[str] = None


@dataclass(frozen=True)
class LifecyclePhaseBenchmark:
    name: str
    description: str
    minimum: Dict[str, float]
    average: Dict[str, float]


@dataclass(frozen=True)
class SectorBenchmark:
    id: str
    name: str
    description: str
    critical_domains: List[str]
    lifecycle_phases: Dict[str, LifecyclePhaseBenchmark]


@dataclass(frozen=True)
class LifecyclePhase:
    id: str
    name: str
    description: str
    valuation_range: str


@dataclass(frozen=True)
class Benchmarks:
    sectors: List[SectorBenchmark]
    lifecycle_phases: List[LifecyclePhase]


@dataclass(frozen=True)
class GlossaryTerm:
    term: str
    definition: str


@dataclass(frozen=True)
class QuestionnaireSpec:
    title: str
    scale: Scale
    levels: List[Level]
    dimensions: List[Dimension]
    description: Optional[str] = None
    benchmarks: Optional[Benchmarks] = None
    glossary: List[GlossaryTerm] = field(default_factory=list)

    def iter_questions(self) -> Iterator[Question]:
        for dimension in self.dimensions:
            yield from dimension.questions

    def question_ids(self) -> List[str]:
        """Question ids in dimension order, then question order."""
        return [q.id for q in self.iter_questions()]

    def default_responses(self) -> Dict[str, int]:
        return {qid: 0 for qid in self.question_ids()}

    def available_sectors(self) -> List[SectorBenchmark]:
        if self.benchmarks is None:
            return []
        return list(self.benchmarks.sectors)

    def available_lifecycle_phases(self) -> List[LifecyclePhase]:
        if self.benchmarks is None:
            return []
        return list(self.benchmarks.lifecycle_phases)

    def find_dimension(self, dimension_id: str) -> Optional[Dimension]:
        for dimension in self.dimensions:
            if dimension.id == dimension_id:
                return dimension
        return None

    def label_for(self, value: int) -> str:
        idx = value - self.scale.min
        if 0 <= idx < len(self.scale.labels):
            return self.scale.labels[idx]
        return str(value)


def _require(doc: Dict[str, Any], key: str, where: str) -> Any:
    if key not in doc:
        raise QuestionnaireError(f"{where}: missing required key '{key}'")
    return doc[key]


def _parse_scores(doc: Dict[str, Any]) -> Dict[str, float]:
    return {str(k): float(v) for k, v in doc.items()}


def _parse_benchmarks(doc: Dict[str, Any]) -> Benchmarks:
    sectors = []
    for s in doc.get("sectors", []):
        phases = {}
        for phase_id, p in _require(s, "lifecyclePhases", f"sector {s.get('id')}").items():
            phases[phase_id] = LifecyclePhaseBenchmark(
                name=p.get("name", phase_id),
                description=p.get("description", ""),
                minimum=_parse_scores(_require(p, "minimum", f"phase {phase_id}")),
                average=_parse_scores(_require(p, "average", f"phase {phase_id}")),
            )
        sectors.append(
            SectorBenchmark(
                id=_require(s, "id", "sector"),
                name=s.get("name", s["id"]),
                description=s.get("description", ""),
                critical_domains=list(s.get("criticalDomains", [])),
                lifecycle_phases=phases,
            )
        )

    lifecycle_phases = [
        LifecyclePhase(
            id=_require(p, "id", "lifecycle phase"),
            name=p.get("name", p["id"]),
            description=p.get("description", ""),
            valuation_range=p.get("valuationRange", ""),
        )
        for p in doc.get("lifecyclePhases", [])
    ]
    return Benchmarks(sectors=sectors, lifecycle_phases=lifecycle_phases)


def load_questionnaire(document: Dict[str, Any]) -> QuestionnaireSpec:
    """
    Build a ``QuestionnaireSpec`` from its JSON document form.

    Raises ``QuestionnaireError`` when a required key is missing or a question
    id is repeated (answers are keyed by question id, so ids must be unique).
    """
    scale_doc = _require(document, "scale", "questionnaire")
    scale = Scale(
        min=int(_require(scale_doc, "min", "scale")),
        max=int(_require(scale_doc, "max", "scale")),
        labels=list(scale_doc.get("labels", [])),
    )

    levels = [
        Level(
            name=_require(lv, "name", "level"),
            min=float(_require(lv, "min", "level")),
            max=float(_require(lv, "max", "level")),
            color=lv.get("color", ""),
            description=lv.get("description"),
        )
        for lv in document.get("levels", [])
    ]

    dimensions = []
    seen = set()
    for d in _require(document, "dimensions", "questionnaire"):
        dim_id = _require(d, "id", "dimension")
        questions = []
        for q in _require(d, "questions", f"dimension {dim_id}"):
            qid = _require(q, "id", f"dimension {dim_id} question")
            if qid in seen:
                raise QuestionnaireError(f"duplicate question id '{qid}'")
            seen.add(qid)
            questions.append(
                Question(
                    id=qid,
                    text=q.get("text", ""),
                    plain_summary=q.get("plainSummary"),
                    explanations=list(q.get("explanations", [])),
                )
            )
        min_acceptable = d.get("minAcceptable")
        dimensions.append(
            Dimension(
                id=dim_id,
                name=d.get("name", dim_id),
                questions=questions,
                weight=float(d["weight"]) if d.get("weight") is not None else None,
                critical=bool(d.get("critical", False)),
                min_acceptable=float(min_acceptable) if min_acceptable is not None else None,
            )
        )

    benchmarks = _parse_benchmarks(document["benchmarks"]) if document.get("benchmarks") else None

    glossary = [GlossaryTerm(term=g["term"], definition=g.get("definition", "")) for g in document.get("glossary", [])]

    return QuestionnaireSpec(
        title=document.get("title", "default"),
        description=document.get("description"),
        scale=scale,
        levels=levels,
        dimensions=dimensions,
        benchmarks=benchmarks,
        glossary=glossary,
    )


def load_default_questionnaire() -> QuestionnaireSpec:
    """Load the exit-readiness questionnaire bundled with the package."""
    text = resources.files("readiness_engine.data").joinpath(DEFAULT_QUESTIONNAIRE_RESOURCE).read_text(encoding="utf-8")
    return load_questionnaire(json.loads(text))
