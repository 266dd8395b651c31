"""
Command line front end: keeps an assessment on this device and swaps it in
and out of answer codes.

    readiness answer fin1 3
    readiness select --sector tech --lifecycle fiveM
    readiness value --inputs valuation.json
    readiness export
    readiness restore 1A2B3C4D
    readiness report
    readiness serve --port 8000
"""

import argparse
import json
import logging
import sys
from dataclasses import replace
from typing import List, Optional

import uvicorn

from readiness_engine import (
    CodecError,
    build_valuation_inputs,
    calculate_valuation,
    format_currency,
    valuation_inputs_to_dict,
)
from readiness_service.config import get_settings
from readiness_service.connectors import SpecSourceFactory
from readiness_service.services.assessment import AssessmentService
from readiness_service.storage import LocalStateStore

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="readiness", description="SME exit readiness self-assessment.")
    parser.add_argument("--state", type=str, default=None, help="State file (defaults to READINESS_STATE_PATH)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log at READINESS_LOG_LEVEL instead of WARNING")
    sub = parser.add_subparsers(dest="command", required=True)

    answer = sub.add_parser("answer", help="Record the answer to one question")
    answer.add_argument("question_id", type=str)
    answer.add_argument("value", type=int)

    select = sub.add_parser("select", help="Choose the sector and lifecycle phase to benchmark against")
    select.add_argument("--sector", type=str, default=None, help="Sector id; pass '' to clear")
    select.add_argument("--lifecycle", type=str, default=None, help="Lifecycle phase id; pass '' to clear")

    sub.add_parser("export", help="Print an answer code for the stored assessment")

    restore = sub.add_parser("restore", help="Replace the stored assessment with the contents of a code")
    restore.add_argument("code", type=str)

    value = sub.add_parser("value", help="Indicative valuation of the stored inputs")
    value.add_argument("--inputs", type=str, default=None, help="JSON file of valuation inputs to store first")

    sub.add_parser("report", help="Domain scores, level and recommendations")

    serve = sub.add_parser("serve", help="Run the HTTP API with uvicorn")
    serve.add_argument("--host", type=str, default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)
    return parser


def _cmd_answer(args, service: AssessmentService, store: LocalStateStore) -> int:
    spec = service.spec
    if args.question_id not in spec.question_ids():
        print(f"Unknown question: {args.question_id}")
        return 1
    if not spec.scale.min <= args.value <= spec.scale.max:
        print(f"Answer must be between {spec.scale.min} and {spec.scale.max}")
        return 1

    snapshot = store.load_snapshot(spec)
    responses = dict(snapshot.responses, **{args.question_id: args.value})
    store.save_snapshot(spec.title, replace(snapshot, responses=responses))
    print(f"{args.question_id} = {args.value} ({spec.label_for(args.value)})")
    return 0


def _cmd_select(args, service: AssessmentService, store: LocalStateStore) -> int:
    spec = service.spec
    snapshot = store.load_snapshot(spec)
    sector = snapshot.sector if args.sector is None else args.sector
    lifecycle = snapshot.lifecycle if args.lifecycle is None else args.lifecycle

    if sector and sector not in {s.id for s in spec.available_sectors()}:
        print(f"Unknown sector: {sector}")
        return 1
    if lifecycle and lifecycle not in {p.id for p in spec.available_lifecycle_phases()}:
        print(f"Unknown lifecycle phase: {lifecycle}")
        return 1

    store.save_snapshot(spec.title, replace(snapshot, sector=sector, lifecycle=lifecycle))
    print(f"Sector: {sector or 'none'}  Lifecycle: {lifecycle or 'none'}")
    return 0


def _cmd_export(args, service: AssessmentService, store: LocalStateStore) -> int:
    snapshot = store.load_snapshot(service.spec)
    result = service.export_code(
        snapshot.responses, snapshot.sector, snapshot.lifecycle, valuation_inputs_to_dict(snapshot.valuation)
    )
    print(result["code"])
    for adj in result["adjustments"]:
        print(f"  note: {adj['field']} {adj['reason']} ({adj['original']} -> {adj['stored']})", file=sys.stderr)
    return 0


def _cmd_restore(args, service: AssessmentService, store: LocalStateStore) -> int:
    try:
        snapshot = service.restore_code(args.code)
    except CodecError as e:
        logger.info(f"Rejected code: {e}")
        print("Invalid code")
        return 1

    store.save_snapshot(service.spec.title, snapshot)
    print("Responses restored")
    return 0


def _cmd_value(args, service: AssessmentService, store: LocalStateStore) -> int:
    spec = service.spec
    snapshot = store.load_snapshot(spec)

    if args.inputs:
        with open(args.inputs, encoding="utf-8") as fh:
            raw = json.load(fh)
        snapshot = replace(snapshot, valuation=build_valuation_inputs(raw))
        store.save_snapshot(spec.title, snapshot)

    result = calculate_valuation(snapshot.valuation)
    if not result.is_calculable:
        print("Valuation not available")
    else:
        print(f"Method: {result.method} ({result.base_value_label} {format_currency(result.base_value)})")
        print(f"Multiple: {result.multiple_min:.1f}x - {result.multiple_max:.1f}x")
        print(
            f"Enterprise value: {format_currency(result.enterprise_value_min)} - "
            f"{format_currency(result.enterprise_value_max)}"
        )
        print(f"Equity value: {format_currency(result.equity_value_min)} - {format_currency(result.equity_value_max)}")
        print(f"Confidence: {result.confidence}")
        for adj in result.adjustments:
            print(f"  {adj.factor}: {adj.impact} {adj.percentage_change:+g}%")
    for caveat in result.caveats:
        print(f"* {caveat}")
    return 0


def _cmd_report(args, service: AssessmentService, store: LocalStateStore) -> int:
    snapshot = store.load_snapshot(service.spec)
    report = service.build_report(
        snapshot.responses,
        snapshot.sector,
        snapshot.lifecycle,
        valuation=valuation_inputs_to_dict(snapshot.valuation),
    )

    print(f"{report['title']}  ({report['answered']}/{report['total']} answered)")
    for domain in report["domain_averages"]:
        print(f"  {domain['name']}: {domain['average']:.2f}")
    level = report["level"]["name"] if report["level"] else "n/a"
    print(f"Overall: {report['overall_score']:.2f} ({level})")

    for violation in report["threshold_violations"]:
        print(f"! {violation['message']}")
    print(f"Estimated time to readiness: {report['timeline']['estimated_months']}")
    for message in report["recommendations"]:
        print(f"- {message}")

    impact = report["impact"]
    completion = impact["completion_impact"]
    print(
        f"Deal completion probability: {completion['current_probability']}% now, "
        f"{completion['mitigated_probability']}% with preparation"
    )
    gain = impact["valuation_impact"]["estimated_value_gain"]
    if gain:
        print(f"Estimated value recoverable: {format_currency(gain)}")
    for opportunity in impact["opportunities"]:
        print(f"+ {opportunity['title']}: {opportunity['current_state']}")
    return 0


def _serve(args) -> int:
    uvicorn.run("readiness_service.app:app", host=args.host, port=args.port)
    return 0


_COMMANDS = {
    "answer": _cmd_answer,
    "select": _cmd_select,
    "export": _cmd_export,
    "restore": _cmd_restore,
    "value": _cmd_value,
    "report": _cmd_report,
}


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    settings = get_settings()
    logging.basicConfig(level=settings.log_level if args.verbose else logging.WARNING)

    if args.command == "serve":
        return _serve(args)

    try:
        service = AssessmentService(SpecSourceFactory.get_source(settings.spec_source))
        store = LocalStateStore(args.state or settings.state_path)
        return _COMMANDS[args.command](args, service, store)
    except ValueError as e:
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
