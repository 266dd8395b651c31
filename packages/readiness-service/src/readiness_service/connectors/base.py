from abc import ABC, abstractmethod
from typing import Dict, Type

from readiness_engine import QuestionnaireSpec


class BaseSpecSource(ABC):
    """Abstract base class for questionnaire sources."""

    @abstractmethod
    def load_spec(self) -> QuestionnaireSpec:
        """Load and parse the questionnaire document."""
        pass


class SpecSourceFactory:
    """Simple factory to manage questionnaire sources (Singleton Pattern)."""

    _source_classes: Dict[str, Type[BaseSpecSource]] = {}
    _instances: Dict[str, BaseSpecSource] = {}

    @classmethod
    def register(cls, name: str, source_cls: Type[BaseSpecSource]) -> None:
        cls._source_classes[name] = source_cls

    @classmethod
    def get_source(cls, name: str) -> BaseSpecSource:
        # Check cache first
        if name in cls._instances:
            return cls._instances[name]

        source_cls = cls._source_classes.get(name)
        if not source_cls:
            raise ValueError(f"Questionnaire source '{name}' not found.")

        instance = source_cls()
        cls._instances[name] = instance
        return instance

    @classmethod
    def clear_cache(cls) -> None:
        cls._instances.clear()
