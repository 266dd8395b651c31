from readiness_service.connectors.base import BaseSpecSource, SpecSourceFactory
from readiness_service.connectors.file import FileSpecSource
from readiness_service.connectors.packaged import PackagedSpecSource

__all__ = ["BaseSpecSource", "SpecSourceFactory", "FileSpecSource", "PackagedSpecSource"]
