"""
API Router — all endpoint definitions for the readiness service.
"""

import logging

from fastapi import APIRouter, HTTPException

from readiness_engine import CodecError
from readiness_service.api.schemas import DecodeRequest, EncodeRequest, EncodeResponse, ReportRequest, ValuationInputsModel
from readiness_service.config import get_settings
from readiness_service.connectors import SpecSourceFactory
from readiness_service.services.assessment import AssessmentService
from readiness_service.services.valuation import ValuationService
from readiness_service.utils.json import sanitize_for_json, to_jsonable

logger = logging.getLogger(__name__)
router = APIRouter()


def _assessment_service() -> AssessmentService:
    source = SpecSourceFactory.get_source(get_settings().spec_source)
    return AssessmentService(source)


@router.get(
    "/questionnaire",
    tags=["questionnaire"],
    summary="Get Questionnaire",
    description="Returns the active questionnaire: scale, dimensions, questions, levels, benchmarks and glossary.",
)
def get_questionnaire():
    try:
        return sanitize_for_json(_assessment_service().get_questionnaire())
    except ValueError as e:
        logger.warning(f"Bad Request loading questionnaire: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Internal Error loading questionnaire: {e}")
        raise HTTPException(status_code=500, detail="Internal Server Error")


@router.post(
    "/codes/encode",
    tags=["codes"],
    summary="Export Answer Code",
    description="Packs answers, selections and valuation inputs into a short checksummed code.",
    response_model=EncodeResponse,
)
def encode_code(request: EncodeRequest):
    try:
        service = _assessment_service()
        return service.export_code(request.responses, request.sector, request.lifecycle, request.valuation_dict())
    except ValueError as e:
        logger.warning(f"Bad Request encoding code: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Internal Error encoding code: {e}")
        raise HTTPException(status_code=500, detail="Internal Server Error")


@router.post(
    "/codes/decode",
    tags=["codes"],
    summary="Restore Answer Code",
    description="Unpacks a code back into answers, selections and valuation inputs. Decoding is all-or-nothing.",
)
def decode_code(request: DecodeRequest):
    try:
        snapshot = _assessment_service().restore_code(request.code)
        return to_jsonable(snapshot)
    except CodecError:
        # Mapped to 400 "Invalid code" by the application handler.
        raise
    except ValueError as e:
        logger.warning(f"Bad Request decoding code: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Internal Error decoding code: {e}")
        raise HTTPException(status_code=500, detail="Internal Server Error")


@router.post(
    "/valuation/calculate",
    tags=["valuation"],
    summary="Calculate Valuation",
    description="Indicative enterprise and equity value range from EBITDA or revenue multiples.",
)
def calculate_valuation(request: ValuationInputsModel):
    try:
        return sanitize_for_json(ValuationService().calculate_valuation(request.model_dump()))
    except ValueError as e:
        logger.warning(f"Bad Request valuing: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Internal Error valuing: {e}")
        raise HTTPException(status_code=500, detail="Internal Server Error")


@router.post(
    "/assessment/report",
    tags=["assessment"],
    summary="Assessment Report",
    description="Scores, level, recommendations, threshold violations, benchmark gaps, timeline, valuation and impact analysis.",
)
def assessment_report(request: ReportRequest):
    try:
        service = _assessment_service()
        report = service.build_report(request.responses, request.sector, request.lifecycle, request.valuation_dict())
        return sanitize_for_json(report)
    except ValueError as e:
        logger.warning(f"Bad Request building report: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Internal Error building report: {e}")
        raise HTTPException(status_code=500, detail="Internal Server Error")
