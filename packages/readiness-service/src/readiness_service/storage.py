"""
Local device storage for an in-progress assessment.

State lives in one JSON object on disk, keyed the way the browser app keys
its local storage, so nothing ever leaves the machine.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

from readiness_engine import build_valuation_inputs, valuation_inputs_to_dict
from readiness_engine.models import AssessmentSnapshot, QuestionnaireSpec

logger = logging.getLogger(__name__)

KEY_PREFIX = "exit-readiness:"
SECTOR_KEY = KEY_PREFIX + "selectedSector"
LIFECYCLE_KEY = KEY_PREFIX + "selectedLifecycle"
VALUATION_KEY = KEY_PREFIX + "valuationInputs"


def responses_key(spec_title: str) -> str:
    return KEY_PREFIX + spec_title


class LocalStateStore:
    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def _read(self) -> Dict[str, Any]:
        if not self.path.is_file():
            return {}
        try:
            with self.path.open(encoding="utf-8") as fh:
                state = json.load(fh)
        except json.JSONDecodeError as e:
            logger.warning(f"Ignoring unreadable state file {self.path}: {e}")
            return {}
        return state if isinstance(state, dict) else {}

    def _write(self, state: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w", encoding="utf-8") as fh:
            json.dump(state, fh, indent=2)

    def save_snapshot(self, spec_title: str, snapshot: AssessmentSnapshot) -> None:
        """Overwrite responses, both selections and valuation inputs."""
        state = self._read()
        state[responses_key(spec_title)] = dict(snapshot.responses)

        for key, value in ((SECTOR_KEY, snapshot.sector), (LIFECYCLE_KEY, snapshot.lifecycle)):
            if value:
                state[key] = value
            else:
                state.pop(key, None)

        state[VALUATION_KEY] = valuation_inputs_to_dict(snapshot.valuation)
        self._write(state)
        logger.debug(f"Saved assessment state to {self.path}")

    def load_snapshot(self, spec: QuestionnaireSpec, current_year: Optional[int] = None) -> AssessmentSnapshot:
        """Stored state for ``spec``; answers for unknown question ids are dropped."""
        state = self._read()
        stored = state.get(responses_key(spec.title))
        stored = stored if isinstance(stored, dict) else {}

        responses = spec.default_responses()
        for qid in responses:
            value = stored.get(qid)
            if isinstance(value, int) and not isinstance(value, bool):
                responses[qid] = value

        valuation = state.get(VALUATION_KEY)
        return AssessmentSnapshot(
            responses=responses,
            sector=state.get(SECTOR_KEY) or "",
            lifecycle=state.get(LIFECYCLE_KEY) or "",
            valuation=build_valuation_inputs(valuation if isinstance(valuation, dict) else {}, current_year=current_year),
        )

    def clear(self) -> None:
        if self.path.exists():
            self.path.unlink()
