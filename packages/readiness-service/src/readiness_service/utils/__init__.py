from readiness_service.utils.json import sanitize_for_json, to_jsonable

__all__ = ["sanitize_for_json", "to_jsonable"]
