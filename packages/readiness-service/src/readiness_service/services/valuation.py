"""
Valuation Service
=================

Thin orchestration layer: prepare inputs via the shared
``build_valuation_inputs`` builder, run the engine, and return results.

All input-preparation and computation logic lives in **readiness_engine** so
there is exactly one source of truth.
"""

import logging
from typing import Any, Dict, Optional

from readiness_engine import build_valuation_inputs, calculate_valuation
from readiness_service.utils.json import to_jsonable

logger = logging.getLogger(__name__)


class ValuationService:
    def calculate_valuation(self, data: Optional[Dict[str, Any]], current_year: Optional[int] = None) -> Dict[str, Any]:
        """
        1. Normalise the raw inputs (unset stays unset).
        2. Run the engine.
        3. Return results as a dict (API-friendly).
        """
        inputs = build_valuation_inputs(data or {}, current_year=current_year)
        result = calculate_valuation(inputs)
        logger.info(
            f"Valuation method={result.method} calculable={result.is_calculable} confidence={result.confidence}"
        )
        return to_jsonable(result)
