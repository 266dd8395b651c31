import json
import logging
from pathlib import Path
from typing import Optional

from readiness_engine import QuestionnaireSpec, load_questionnaire

from readiness_service.config import get_settings

from .base import BaseSpecSource, SpecSourceFactory

logger = logging.getLogger(__name__)


class FileSpecSource(BaseSpecSource):
    """A questionnaire JSON document on disk (``READINESS_SPEC_PATH``)."""

    def __init__(self, path: Optional[str] = None) -> None:
        self.path = path or get_settings().spec_path

    def load_spec(self) -> QuestionnaireSpec:
        if not self.path:
            raise ValueError("READINESS_SPEC_PATH is not set for the 'file' questionnaire source.")
        file_path = Path(self.path)
        if not file_path.is_file():
            raise ValueError(f"Questionnaire file not found: {file_path}")

        with file_path.open(encoding="utf-8") as fh:
            try:
                document = json.load(fh)
            except json.JSONDecodeError as e:
                raise ValueError(f"Questionnaire file is not valid JSON: {e}") from e

        spec = load_questionnaire(document)
        logger.info(f"Loaded questionnaire '{spec.title}' from {file_path}")
        return spec


SpecSourceFactory.register("file", FileSpecSource)
