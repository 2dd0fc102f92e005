from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from bson import ObjectId
from pymongo import MongoClient

from config import Settings


def connect(settings: Settings):
    if not settings.DATABASE_URL:
        return None
    client = MongoClient(settings.DATABASE_URL)
    return client[settings.DATABASE_NAME]


def to_object_id(value: Any) -> Optional[ObjectId]:
    if isinstance(value, ObjectId):
        return value
    if not isinstance(value, str) or not ObjectId.is_valid(value):
        return None
    return ObjectId(value)


def to_wire_key(key: str) -> str:
    """``product_id`` -> ``productId``; keys without underscores pass through."""
    head, *rest = key.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def serialize_doc(doc: Dict[str, Any]) -> Dict[str, Any]:
    """Stored document -> response body: string ids, camelCase keys."""
    if not doc:
        return doc
    doc = dict(doc)
    out = {}
    _id = doc.pop("_id", None)
    if _id is not None:
        out["id"] = str(_id)
    for k, v in doc.items():
        if isinstance(v, ObjectId):
            v = str(v)
        elif isinstance(v, list):
            v = [serialize_doc(i) if isinstance(i, dict) else i for i in v]
        elif isinstance(v, dict):
            v = serialize_doc(v)
        out[to_wire_key(k)] = v
    return out


def create_document(db, collection_name: str, data: Dict[str, Any]) -> str:
    doc = dict(data)
    doc.setdefault("created_at", datetime.now(timezone.utc))
    result = db[collection_name].insert_one(doc)
    return str(result.inserted_id)


def get_documents(db, collection_name: str, filter_dict: Optional[Dict[str, Any]] = None, sort: Optional[str] = None, limit: Optional[int] = None) -> List[Dict[str, Any]]:
    cursor = db[collection_name].find(filter_dict or {})
    if sort:
        cursor = cursor.sort(sort, -1)
    if limit:
        cursor = cursor.limit(limit)
    return list(cursor)
