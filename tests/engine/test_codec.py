"""
Tests for the answer code codec.

Covers: round trips, checksum / integrity rejection, clamping and rounding
reports, unset vs zero EBITDA, codes without valuation data, malformed input.
"""

import pytest

from readiness_engine import (
    CodecContext,
    FinancialYear,
    InvalidCode,
    MalformedInput,
    ValuationInputs,
    decode,
    default_valuation_inputs,
    encode,
    encode_with_report,
    load_default_questionnaire,
)
from readiness_engine.codec import (
    BASE36_ALPHABET,
    CODE_MUL,
    CODE_OFFSET,
    _pack,
    _selection_layout,
    from_base36,
    to_base36,
)

YEAR = 2025
SPEC = load_default_questionnaire()
CTX = CodecContext.from_spec(SPEC)


def _responses(**answers):
    responses = SPEC.default_responses()
    responses.update(answers)
    return responses


def _valuation(**overrides):
    base = dict(
        business_type="tech-saas",
        historical_financials=[
            FinancialYear(year=YEAR - 3, turnover=1_800_000, ebitda=300_000),
            FinancialYear(year=YEAR - 2, turnover=2_000_000, ebitda=-50_000),
            FinancialYear(year=YEAR - 1, turnover=2_400_000, ebitda=0),
        ],
        forecast_financials=[
            FinancialYear(year=YEAR, turnover=2_800_000, ebitda=450_000),
            FinancialYear(year=YEAR + 1),
            FinancialYear(year=YEAR + 2, turnover=100_000_000, ebitda=100_000_000),
        ],
        total_debt=250_000,
        growth_trend="growing",
        customer_concentration="low",
        recurring_revenue_percentage=80,
    )
    base.update(overrides)
    return ValuationInputs(**base)


# ---------------------------------------------------------------------------
# Round trip
# ---------------------------------------------------------------------------


def test_round_trip_full_snapshot():
    responses = _responses(fin1=4, fin2=3, leg3=1, esg4=2, ppl1=4)
    valuation = _valuation()

    code = encode(responses, "manufacturing", "thirtyM", valuation, SPEC)
    snapshot = decode(code, SPEC, current_year=YEAR)

    assert snapshot.responses == responses
    assert snapshot.sector == "manufacturing"
    assert snapshot.lifecycle == "thirtyM"
    assert snapshot.valuation == valuation


def test_round_trip_without_selection_or_valuation():
    responses = _responses(com2=1)
    code = encode(responses, "", "", None, CTX)
    snapshot = decode(code, CTX, current_year=YEAR)

    assert snapshot.responses == responses
    assert snapshot.sector == ""
    assert snapshot.lifecycle == ""
    assert snapshot.valuation == default_valuation_inputs(YEAR)


def test_code_is_uppercase_base36():
    code = encode(_responses(fin1=2), "tech", "fiveM", _valuation(), SPEC)
    assert code == code.upper()
    assert all(ch in BASE36_ALPHABET for ch in code)


def test_decode_accepts_lowercase_and_whitespace():
    responses = _responses(ops2=3)
    code = encode(responses, "tech", "preRevenue", None, SPEC)
    snapshot = decode(f"  {code.lower()}\n", SPEC, current_year=YEAR)
    assert snapshot.responses == responses
    assert snapshot.sector == "tech"


def test_decoded_years_follow_current_year():
    code = encode(_responses(), "", "", None, SPEC)
    snapshot = decode(code, SPEC, current_year=2030)
    assert [f.year for f in snapshot.valuation.historical_financials] == [2027, 2028, 2029]
    assert [f.year for f in snapshot.valuation.forecast_financials] == [2030, 2031, 2032]


def test_unanswered_questions_encode_as_zero():
    code = encode({"fin1": 3}, "", "", None, SPEC)
    snapshot = decode(code, SPEC, current_year=YEAR)
    assert snapshot.responses["fin1"] == 3
    assert snapshot.responses["esg4"] == 0
    assert set(snapshot.responses) == set(SPEC.question_ids())


def test_unknown_sector_encodes_as_none():
    code = encode(_responses(), "aerospace", "fiveM", None, SPEC)
    snapshot = decode(code, SPEC, current_year=YEAR)
    assert snapshot.sector == ""
    assert snapshot.lifecycle == "fiveM"


# ---------------------------------------------------------------------------
# Rejection
# ---------------------------------------------------------------------------


def test_every_single_character_substitution_is_rejected():
    code = encode(_responses(fin1=4, leg2=2), "tech", "fiveM", _valuation(), SPEC)

    for position, original in enumerate(code):
        for replacement in BASE36_ALPHABET:
            if replacement == original:
                continue
            tampered = code[:position] + replacement + code[position + 1:]
            with pytest.raises(InvalidCode):
                decode(tampered, SPEC, current_year=YEAR)


def test_checksum_mismatch():
    code = encode(_responses(), "", "", None, SPEC)
    wrong = BASE36_ALPHABET[(BASE36_ALPHABET.index(code[-1]) + 1) % 36]
    with pytest.raises(InvalidCode):
        decode(code[:-1] + wrong, SPEC)


@pytest.mark.parametrize("bad", ["", "A", "ABC-123", "hello world", "ÄBC"])
def test_malformed_input(bad):
    with pytest.raises(MalformedInput):
        decode(bad, SPEC)


def test_malformed_input_is_invalid_code():
    with pytest.raises(InvalidCode):
        decode("!!", SPEC)
    with pytest.raises(MalformedInput):
        decode(None, SPEC)


def test_value_not_from_this_questionnaire_is_rejected():
    # Passes the checksum and divisibility checks but is far too large to unpack.
    obfuscated = (10 ** 200) * CODE_MUL + CODE_OFFSET
    code = to_base36(obfuscated) + BASE36_ALPHABET[obfuscated % 36]
    with pytest.raises(InvalidCode):
        decode(code, SPEC)


# ---------------------------------------------------------------------------
# Codes made before valuation data existed
# ---------------------------------------------------------------------------


def test_code_without_valuation_section_decodes_with_defaults():
    responses = _responses(fin1=1, ppl4=4)
    digits = dict(responses, sector=2, lifecycle=1)
    packed = _pack(_selection_layout(CTX), digits)
    obfuscated = packed * CODE_MUL + CODE_OFFSET
    code = to_base36(obfuscated) + BASE36_ALPHABET[obfuscated % 36]

    snapshot = decode(code, CTX, current_year=YEAR)

    assert snapshot.responses == responses
    assert snapshot.sector == "manufacturing"
    assert snapshot.lifecycle == "preRevenue"
    assert snapshot.valuation == default_valuation_inputs(YEAR)


# ---------------------------------------------------------------------------
# Lossy fields
# ---------------------------------------------------------------------------


def test_turnover_clamp_is_idempotent():
    years = [FinancialYear(year=YEAR - 3, turnover=150_000_000), FinancialYear(year=YEAR - 2), FinancialYear(year=YEAR - 1)]
    encoded = encode_with_report(_responses(), "", "", _valuation(historical_financials=years), SPEC)

    assert encoded.clamped
    adjustment = next(a for a in encoded.adjustments if a.field == "historical[0].turnover")
    assert adjustment.reason == "clamped"
    assert adjustment.stored == 100_000_000

    snapshot = decode(encoded.code, SPEC, current_year=YEAR)
    assert snapshot.valuation.historical_financials[0].turnover == 100_000_000

    again = encode_with_report(_responses(), "", "", snapshot.valuation, SPEC)
    assert again.code == encoded.code
    assert not again.clamped


def test_unset_and_zero_ebitda_stay_distinct():
    zero = _valuation(historical_financials=[FinancialYear(year=YEAR - 3, ebitda=0), FinancialYear(year=YEAR - 2), FinancialYear(year=YEAR - 1)])
    unset = _valuation(historical_financials=[FinancialYear(year=YEAR - 3, ebitda=None), FinancialYear(year=YEAR - 2), FinancialYear(year=YEAR - 1)])

    zero_code = encode(_responses(), "", "", zero, SPEC)
    unset_code = encode(_responses(), "", "", unset, SPEC)
    assert zero_code != unset_code

    assert decode(zero_code, SPEC, current_year=YEAR).valuation.historical_financials[0].ebitda == 0
    assert decode(unset_code, SPEC, current_year=YEAR).valuation.historical_financials[0].ebitda is None


def test_money_rounds_to_nearest_thousand():
    years = [FinancialYear(year=YEAR - 3, turnover=1_234_567, ebitda=-1_500), FinancialYear(year=YEAR - 2), FinancialYear(year=YEAR - 1)]
    encoded = encode_with_report(_responses(), "", "", _valuation(historical_financials=years, total_debt=None), SPEC)

    reasons = {a.field: a.reason for a in encoded.adjustments}
    assert reasons["historical[0].turnover"] == "rounded"
    assert reasons["historical[0].ebitda"] == "rounded"
    assert not encoded.clamped

    first = decode(encoded.code, SPEC, current_year=YEAR).valuation.historical_financials[0]
    assert first.turnover == 1_235_000
    # Half-up: -1.5 -> -1
    assert first.ebitda == -1_000


def test_negative_debt_is_dropped():
    encoded = encode_with_report(_responses(), "", "", _valuation(total_debt=-5_000), SPEC)
    assert [a.reason for a in encoded.adjustments if a.field == "total_debt"] == ["dropped"]
    assert decode(encoded.code, SPEC, current_year=YEAR).valuation.total_debt is None


def test_out_of_scale_answer_is_clamped():
    encoded = encode_with_report({"fin1": 9}, "", "", None, SPEC)
    assert encoded.adjustments[0].field == "fin1"
    assert encoded.adjustments[0].stored == 4
    assert decode(encoded.code, SPEC).responses["fin1"] == 4


def test_exact_values_report_nothing():
    assert encode_with_report(_responses(fin1=2), "tech", "fiveM", _valuation(), SPEC).adjustments == []


# ---------------------------------------------------------------------------
# Base 36 helpers
# ---------------------------------------------------------------------------


def test_base36_helpers():
    assert to_base36(0) == "0"
    assert to_base36(35) == "Z"
    assert to_base36(36) == "10"
    assert from_base36("zz") == 36 * 35 + 35
    with pytest.raises(ValueError):
        to_base36(-1)
