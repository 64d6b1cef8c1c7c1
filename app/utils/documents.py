"""
Helpers for turning MongoDB documents into JSON-friendly dicts
"""
from typing import Any, Dict, Iterable, List, Optional
from bson import ObjectId


HIDDEN_FIELDS = {"password", "aadhaar_number"}


def _convert(value: Any) -> Any:
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, dict):
        return {key: _convert(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_convert(item) for item in value]
    return value


def serialize_document(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Rename ``_id`` to ``id``, stringify ObjectIds and drop hidden fields"""
    if doc is None:
        return None

    result = {}
    for key, value in doc.items():
        if key in HIDDEN_FIELDS:
            continue
        if key == "_id":
            result["id"] = _convert(value)
        else:
            result[key] = _convert(value)
    return result


def serialize_documents(docs: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [serialize_document(doc) for doc in docs]
