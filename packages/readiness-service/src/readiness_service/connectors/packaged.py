import logging
from typing import Optional

from readiness_engine import QuestionnaireSpec, load_default_questionnaire

from .base import BaseSpecSource, SpecSourceFactory

logger = logging.getLogger(__name__)


class PackagedSpecSource(BaseSpecSource):
    """The questionnaire bundled with ``readiness_engine``."""

    def __init__(self) -> None:
        self._spec: Optional[QuestionnaireSpec] = None

    def load_spec(self) -> QuestionnaireSpec:
        if self._spec is None:
            self._spec = load_default_questionnaire()
            logger.info(f"Loaded packaged questionnaire '{self._spec.title}'")
        return self._spec


SpecSourceFactory.register("packaged", PackagedSpecSource)
