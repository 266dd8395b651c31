"""Orchestration between questionnaire sources and the engine."""
