"""
Application factory and FastAPI app configuration.

Routes only deal with HTTP; answer codes that fail to decode surface as
``CodecError`` and are turned into a uniform 400 here.
"""

import logging
import time

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from readiness_engine import CodecError
from readiness_service.api.router import router as api_router
from readiness_service.config import get_settings

logging.basicConfig(level=get_settings().log_level)
logger = logging.getLogger("readiness_service")

OPENAPI_TAGS = [
    {"name": "questionnaire", "description": "The active exit readiness questionnaire."},
    {"name": "codes", "description": "Shareable answer codes: export and restore."},
    {"name": "valuation", "description": "Indicative multiple-based business valuation."},
    {"name": "assessment", "description": "Scores, benchmarks, recommendations and impact analysis."},
]


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    application = FastAPI(
        title="Exit Readiness API",
        version="0.1.0",
        description="REST API for the SME exit readiness assessment, answer codes and indicative valuation",
        openapi_tags=OPENAPI_TAGS,
    )

    application.include_router(api_router)

    @application.exception_handler(CodecError)
    async def invalid_code_handler(request: Request, exc: CodecError):
        # Which check failed stays in the log; clients only learn the code is bad.
        logger.warning(f"Rejected answer code on {request.url.path}: {exc}")
        return JSONResponse(status_code=400, content={"detail": "Invalid code"})

    @application.middleware("http")
    async def log_requests(request: Request, call_next):
        logger.info(f"Incoming request: {request.method} {request.url.path}")
        start_time = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(f"Request failed: {request.method} {request.url.path} Error: {str(e)}")
            return JSONResponse(status_code=500, content={"detail": "Internal Server Error"})
        elapsed_ms = (time.perf_counter() - start_time) * 1000
        response.headers["X-Process-Time-Ms"] = f"{elapsed_ms:.1f}"
        logger.info(
            f"Request completed: {request.method} {request.url.path} "
            f"Status: {response.status_code} Time: {elapsed_ms:.1f}ms"
        )
        return response

    @application.get("/")
    def read_root():
        return {"message": "Exit Readiness API is running", "questionnaire_source": get_settings().spec_source}

    return application


# Module-level app instance for uvicorn
app = create_app()
