"""
Answer Code Codec
=================

Packs a full assessment snapshot (question answers, sector / lifecycle choice
and valuation inputs) into one short, shareable base-36 code and back.

Layout
------
Every field becomes a digit in a mixed-radix integer, built with
``acc = acc * base + digit`` in this order::

    answers (one per question, base scale_max + 1)
    sector            0 = none, else 1 + index      base len(sectors) + 1
    lifecycle         0 = none, else 1 + index      base len(phases) + 1
    version           always 1                      base 2
    business type     0 unset / service / product / tech-saas      base 4
    6 x (turnover, EBITDA)   3 historical then 3 forecast years
    total debt
    growth trend      0 unset / declining / flat / growing         base 4
    concentration     0 unset / high / medium / low                base 4
    recurring %       0 unset, else 1 + percentage                 base 102

Money is stored in whole thousands. Turnover and debt use digits 0..100000
(0 = unset, so a real zero is indistinguishable from unset). EBITDA is offset
by 100000 so that zero and negative figures stay distinct from unset (digit 0).

The packed integer is then obfuscated as ``acc * CODE_MUL + CODE_OFFSET``,
written in base 36 and followed by one checksum character
(``obfuscated % 36``). Neither step is tamper-proof; they only catch typos and
foreign strings.

Codes depend on the exact question order and sector / phase lists they were
made with, so both directions take an explicit ``CodecContext``.
"""

from __future__ import annotations

import datetime
import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from .inputs_builder import default_valuation_inputs
from .questionnaire import QuestionnaireSpec
from .valuation import (
    FORECAST_YEARS,
    HISTORICAL_YEARS,
    FinancialYear,
    ValuationInputs,
    default_financial_years,
    round_half_up,
)

logger = logging.getLogger(__name__)


# Large primes; changing either invalidates every issued code.
CODE_MUL: int = 15485863
CODE_OFFSET: int = 32452843

CHECKSUM_BASE: int = 36
BASE36_ALPHABET: str = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"

FORMAT_VERSION: int = 1
VERSION_BASE: int = 2

MONEY_UNIT: int = 1_000
MONEY_MAX_UNITS: int = 100_000  # £100M
MONEY_BASE: int = MONEY_MAX_UNITS + 1
EBITDA_OFFSET: int = 100_000
EBITDA_MIN_UNITS: int = -(EBITDA_OFFSET - 1)  # digit 0 stays reserved for unset
EBITDA_BASE: int = EBITDA_OFFSET + MONEY_MAX_UNITS + 1

RECURRING_BASE: int = 102

# Index in each tuple is the stored digit; index 0 means unset.
BUSINESS_TYPE_CODES: Tuple[Optional[str], ...] = (None, "service", "product", "tech-saas")
GROWTH_TREND_CODES: Tuple[Optional[str], ...] = (None, "declining", "flat", "growing")
CONCENTRATION_CODES: Tuple[Optional[str], ...] = (None, "high", "medium", "low")

ADJUSTMENT_CLAMPED = "clamped"
ADJUSTMENT_ROUNDED = "rounded"
ADJUSTMENT_DROPPED = "dropped"


class CodecError(ValueError):
    pass


class InvalidCode(CodecError):
    """Checksum or divisibility check failed, or the code does not fit the questionnaire."""


class MalformedInput(InvalidCode):
    """Empty input or characters outside 0-9 / A-Z."""


@dataclass(frozen=True)
class CodecContext:
    """The ordered lists a code is only meaningful against."""

    question_ids: Tuple[str, ...]
    sector_ids: Tuple[str, ...] = ()
    lifecycle_ids: Tuple[str, ...] = ()
    scale_max: int = 4

    @classmethod
    def from_spec(cls, spec: QuestionnaireSpec) -> "CodecContext":
        return cls(
            question_ids=tuple(spec.question_ids()),
            sector_ids=tuple(s.id for s in spec.available_sectors()),
            lifecycle_ids=tuple(p.id for p in spec.available_lifecycle_phases()),
            scale_max=spec.scale.max,
        )

    @property
    def answer_base(self) -> int:
        return self.scale_max + 1

    @property
    def sector_base(self) -> int:
        return len(self.sector_ids) + 1

    @property
    def lifecycle_base(self) -> int:
        return len(self.lifecycle_ids) + 1


@dataclass(frozen=True)
class AssessmentSnapshot:
    responses: Dict[str, int]
    sector: str = ""
    lifecycle: str = ""
    valuation: ValuationInputs = field(default_factory=ValuationInputs)


@dataclass(frozen=True)
class FieldAdjustment:
    """A lossy change made while encoding one field."""

    field: str
    original: Any
    stored: Any
    reason: str  # clamped / rounded / dropped


@dataclass(frozen=True)
class EncodedCode:
    code: str
    adjustments: List[FieldAdjustment]

    @property
    def clamped(self) -> bool:
        return any(a.reason == ADJUSTMENT_CLAMPED for a in self.adjustments)


ContextLike = Union[CodecContext, QuestionnaireSpec]


def _as_context(context: ContextLike) -> CodecContext:
    if isinstance(context, QuestionnaireSpec):
        return CodecContext.from_spec(context)
    return context


# --------------------------------------------------------------------------- #
# Layout
# --------------------------------------------------------------------------- #


def _money_fields() -> List[Tuple[str, int]]:
    fields: List[Tuple[str, int]] = []
    for group, count in (("historical", HISTORICAL_YEARS), ("forecast", FORECAST_YEARS)):
        for i in range(count):
            fields.append((f"{group}[{i}].turnover", MONEY_BASE))
            fields.append((f"{group}[{i}].ebitda", EBITDA_BASE))
    fields.append(("total_debt", MONEY_BASE))
    return fields


def _selection_layout(ctx: CodecContext) -> List[Tuple[str, int]]:
    layout = [(qid, ctx.answer_base) for qid in ctx.question_ids]
    layout.append(("sector", ctx.sector_base))
    layout.append(("lifecycle", ctx.lifecycle_base))
    return layout


def _full_layout(ctx: CodecContext) -> List[Tuple[str, int]]:
    layout = _selection_layout(ctx)
    layout.append(("version", VERSION_BASE))
    layout.append(("business_type", len(BUSINESS_TYPE_CODES)))
    layout.extend(_money_fields())
    layout.append(("growth_trend", len(GROWTH_TREND_CODES)))
    layout.append(("customer_concentration", len(CONCENTRATION_CODES)))
    layout.append(("recurring_revenue_percentage", RECURRING_BASE))
    return layout


def _pack(layout: Sequence[Tuple[str, int]], digits: Dict[str, int]) -> int:
    acc = 0
    for name, base in layout:
        acc = acc * base + digits[name]
    return acc


def _unpack(layout: Sequence[Tuple[str, int]], packed: int) -> Optional[Dict[str, int]]:
    """Peel digits least-significant first; ``None`` if anything is left over."""
    digits: Dict[str, int] = {}
    for name, base in reversed(layout):
        packed, digits[name] = divmod(packed, base)
    if packed != 0:
        return None
    return digits


# --------------------------------------------------------------------------- #
# Field transforms
# --------------------------------------------------------------------------- #


def _finite(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if math.isnan(value) or math.isinf(value):
        return None
    return float(value)


def _to_units(value: float) -> int:
    return round_half_up(value / MONEY_UNIT)


class _Encoder:
    def __init__(self) -> None:
        self.adjustments: List[FieldAdjustment] = []

    def note(self, name: str, original: Any, stored: Any, reason: str) -> None:
        self.adjustments.append(FieldAdjustment(field=name, original=original, stored=stored, reason=reason))

    def money(self, name: str, value: Any) -> int:
        number = _finite(value)
        if number is None:
            return 0
        units = _to_units(number)
        clamped = min(max(units, 0), MONEY_MAX_UNITS)
        stored = float(clamped * MONEY_UNIT) if clamped else None
        if clamped != units:
            self.note(name, value, stored, ADJUSTMENT_CLAMPED if clamped else ADJUSTMENT_DROPPED)
        elif clamped == 0:
            self.note(name, value, None, ADJUSTMENT_DROPPED)
        elif stored != number:
            self.note(name, value, stored, ADJUSTMENT_ROUNDED)
        return clamped

    def ebitda(self, name: str, value: Any) -> int:
        number = _finite(value)
        if number is None:
            return 0
        units = _to_units(number)
        clamped = min(max(units, EBITDA_MIN_UNITS), MONEY_MAX_UNITS)
        stored = float(clamped * MONEY_UNIT)
        if clamped != units:
            self.note(name, value, stored, ADJUSTMENT_CLAMPED)
        elif stored != number:
            self.note(name, value, stored, ADJUSTMENT_ROUNDED)
        return clamped + EBITDA_OFFSET

    def answer(self, qid: str, value: Any, scale_max: int) -> int:
        if isinstance(value, float) and value.is_integer():
            value = int(value)
        if value is None or isinstance(value, bool) or not isinstance(value, int):
            if value is not None:
                self.note(qid, value, 0, ADJUSTMENT_DROPPED)
            return 0
        clamped = min(max(value, 0), scale_max)
        if clamped != value:
            self.note(qid, value, clamped, ADJUSTMENT_CLAMPED)
        return clamped

    def recurring(self, value: Any) -> int:
        number = _finite(value)
        if number is None:
            return 0
        pct = min(max(round_half_up(number), 0), 100)
        if pct != number:
            reason = ADJUSTMENT_CLAMPED if not 0 <= number <= 100 else ADJUSTMENT_ROUNDED
            self.note("recurring_revenue_percentage", value, pct, reason)
        return pct + 1


def _choice_digit(value: Any, codes: Sequence[Optional[str]]) -> int:
    if value is None:
        return 0
    try:
        return codes.index(value)
    except ValueError:
        return 0


def _selection_digit(selected: Optional[str], ids: Sequence[str], label: str) -> int:
    if not selected:
        return 0
    try:
        return ids.index(selected) + 1
    except ValueError:
        logger.debug(f"{label} '{selected}' is not in the current list; encoding as none")
        return 0


def _padded_years(years: Sequence[FinancialYear], count: int) -> List[Optional[FinancialYear]]:
    padded: List[Optional[FinancialYear]] = list(years[:count])
    padded.extend([None] * (count - len(padded)))
    return padded


# --------------------------------------------------------------------------- #
# Encode
# --------------------------------------------------------------------------- #


def encode_with_report(
    responses: Dict[str, int],
    sector: Optional[str],
    lifecycle: Optional[str],
    valuation: Optional[ValuationInputs],
    context: ContextLike,
) -> EncodedCode:
    """
    Encode a snapshot and report every lossy change made on the way.

    Unanswered questions encode as 0. Unknown sector / lifecycle ids encode as
    "none". Money outside £0-£100M (EBITDA: above -£100M) is clamped and
    sub-£1,000 precision is rounded away; each such change is listed in
    ``EncodedCode.adjustments``.
    """
    ctx = _as_context(context)
    valuation = valuation or ValuationInputs()
    enc = _Encoder()

    digits: Dict[str, int] = {}
    for qid in ctx.question_ids:
        digits[qid] = enc.answer(qid, responses.get(qid), ctx.scale_max)
    digits["sector"] = _selection_digit(sector, ctx.sector_ids, "Sector")
    digits["lifecycle"] = _selection_digit(lifecycle, ctx.lifecycle_ids, "Lifecycle phase")
    digits["version"] = FORMAT_VERSION
    digits["business_type"] = _choice_digit(valuation.business_type, BUSINESS_TYPE_CODES)

    for group, years, count in (
        ("historical", valuation.historical_financials, HISTORICAL_YEARS),
        ("forecast", valuation.forecast_financials, FORECAST_YEARS),
    ):
        for i, year in enumerate(_padded_years(years, count)):
            prefix = f"{group}[{i}]"
            digits[f"{prefix}.turnover"] = enc.money(f"{prefix}.turnover", year.turnover if year else None)
            digits[f"{prefix}.ebitda"] = enc.ebitda(f"{prefix}.ebitda", year.ebitda if year else None)

    digits["total_debt"] = enc.money("total_debt", valuation.total_debt)
    digits["growth_trend"] = _choice_digit(valuation.growth_trend, GROWTH_TREND_CODES)
    digits["customer_concentration"] = _choice_digit(valuation.customer_concentration, CONCENTRATION_CODES)
    digits["recurring_revenue_percentage"] = enc.recurring(valuation.recurring_revenue_percentage)

    packed = _pack(_full_layout(ctx), digits)
    obfuscated = packed * CODE_MUL + CODE_OFFSET
    code = to_base36(obfuscated) + BASE36_ALPHABET[obfuscated % CHECKSUM_BASE]

    if enc.adjustments:
        logger.debug(f"Encoded with {len(enc.adjustments)} lossy adjustment(s)")
    return EncodedCode(code=code, adjustments=enc.adjustments)


def encode(
    responses: Dict[str, int],
    sector: Optional[str],
    lifecycle: Optional[str],
    valuation: Optional[ValuationInputs],
    context: ContextLike,
) -> str:
    """Encode a snapshot into an uppercase base-36 code with trailing checksum."""
    return encode_with_report(responses, sector, lifecycle, valuation, context).code


# --------------------------------------------------------------------------- #
# Decode
# --------------------------------------------------------------------------- #


def _money_value(digit: int) -> Optional[float]:
    return float(digit * MONEY_UNIT) if digit else None


def _ebitda_value(digit: int) -> Optional[float]:
    return float((digit - EBITDA_OFFSET) * MONEY_UNIT) if digit else None


def _selection_id(digit: int, ids: Sequence[str]) -> str:
    return ids[digit - 1] if 0 < digit <= len(ids) else ""


def _valuation_from_digits(digits: Dict[str, int], current_year: int) -> ValuationInputs:
    historical_defaults, forecast_defaults = default_financial_years(current_year)

    def years(group: str, defaults: List[FinancialYear]) -> List[FinancialYear]:
        return [
            FinancialYear(
                year=default.year,
                turnover=_money_value(digits[f"{group}[{i}].turnover"]),
                ebitda=_ebitda_value(digits[f"{group}[{i}].ebitda"]),
            )
            for i, default in enumerate(defaults)
        ]

    recurring = digits["recurring_revenue_percentage"]
    return ValuationInputs(
        business_type=BUSINESS_TYPE_CODES[digits["business_type"]],
        historical_financials=years("historical", historical_defaults),
        forecast_financials=years("forecast", forecast_defaults),
        total_debt=_money_value(digits["total_debt"]),
        growth_trend=GROWTH_TREND_CODES[digits["growth_trend"]],
        customer_concentration=CONCENTRATION_CODES[digits["customer_concentration"]],
        recurring_revenue_percentage=recurring - 1 if recurring else None,
    )


def decode(code: str, context: ContextLike, current_year: Optional[int] = None) -> AssessmentSnapshot:
    """
    Decode a code produced by ``encode`` against the same context.

    Raises ``MalformedInput`` for empty / non base-36 input and ``InvalidCode``
    for a checksum or divisibility failure. Decoding is all-or-nothing.

    Codes made before valuation data was added (answers + sector + lifecycle
    only) decode with default valuation inputs.
    """
    if not isinstance(code, str):
        raise MalformedInput("Code must be text")
    text = code.strip().upper()
    if len(text) < 2:
        raise MalformedInput("Code is too short")
    if any(ch not in BASE36_ALPHABET for ch in text):
        raise MalformedInput("Code contains characters outside 0-9 and A-Z")

    ctx = _as_context(context)
    year = current_year if current_year is not None else datetime.date.today().year

    obfuscated = from_base36(text[:-1])
    if obfuscated % CHECKSUM_BASE != BASE36_ALPHABET.index(text[-1]):
        raise InvalidCode("Checksum mismatch")

    remainder = obfuscated - CODE_OFFSET
    if remainder < 0 or remainder % CODE_MUL != 0:
        raise InvalidCode("Code failed the integrity check")
    packed = remainder // CODE_MUL

    digits = _unpack(_full_layout(ctx), packed)
    if digits is not None and digits["version"] == FORMAT_VERSION:
        valuation = _valuation_from_digits(digits, year)
    else:
        digits = _unpack(_selection_layout(ctx), packed)
        if digits is None:
            raise InvalidCode("Code does not match the current questionnaire")
        logger.debug("Decoded a code without valuation data")
        valuation = default_valuation_inputs(year)

    return AssessmentSnapshot(
        responses={qid: digits[qid] for qid in ctx.question_ids},
        sector=_selection_id(digits["sector"], ctx.sector_ids),
        lifecycle=_selection_id(digits["lifecycle"], ctx.lifecycle_ids),
        valuation=valuation,
    )


# --------------------------------------------------------------------------- #
# Base 36
# --------------------------------------------------------------------------- #


def to_base36(n: int) -> str:
    if n < 0:
        raise ValueError("to_base36 expects a non-negative integer")
    if n == 0:
        return "0"
    chars = []
    while n:
        n, d = divmod(n, 36)
        chars.append(BASE36_ALPHABET[d])
    return "".join(reversed(chars))


def from_base36(text: str) -> int:
    value = 0
    for ch in text.upper():
        value = value * 36 + BASE36_ALPHABET.index(ch)
    return value
