"""
MongoDB connection lifecycle and document helpers.

The application opens one client at startup (see the lifespan in main.py)
and hands the database to route handlers through the `get_db` dependency.
"""

import os
from datetime import datetime, timezone
from typing import Optional, List

from bson import ObjectId
from bson.errors import InvalidId
from pydantic import BaseModel
from pymongo import ASCENDING, MongoClient
from pymongo.database import Database

from logger import get_logger

_logger = get_logger(__name__)

DATABASE_URL = os.getenv("DATABASE_URL", "mongodb://localhost:27017")
DATABASE_NAME = os.getenv("DATABASE_NAME", "medbridge")

_client: Optional[MongoClient] = None
_db: Optional[Database] = None


def init_db(url: str = DATABASE_URL, name: str = DATABASE_NAME, client=None) -> Database:
    global _client, _db
    _client = client if client is not None else MongoClient(url)
    _db = _client[name]
    _logger.info(f"Connected to database '{name}'")
    return _db


def close_db() -> None:
    global _client, _db
    if _client is not None:
        _client.close()
        _logger.info("Database connection closed")
    _client = None
    _db = None


def get_db() -> Database:
    if _db is None:
        raise RuntimeError("Database is not initialized; call init_db() first")
    return _db


def ensure_indexes(db: Database) -> None:
    # Registration relies on this index to reject concurrent duplicate emails
    db["user"].create_index([("email", ASCENDING)], unique=True)
    db["product"].create_index([("category", ASCENDING)])


def parse_object_id(value: str) -> Optional[ObjectId]:
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None


def create_document(db: Database, collection_name: str, data) -> str:
    """Insert a schema instance (or plain dict) and return the new id as a string."""
    if isinstance(data, BaseModel):
        doc = data.model_dump(by_alias=True, exclude_none=True)
    else:
        doc = dict(data)
    now = datetime.now(timezone.utc)
    doc["createdAt"] = now
    doc["updatedAt"] = now
    result = db[collection_name].insert_one(doc)
    return str(result.inserted_id)


def get_documents(db: Database, collection_name: str, filter_dict: Optional[dict] = None, limit: Optional[int] = None) -> List[dict]:
    cursor = db[collection_name].find(filter_dict or {})
    if limit:
        cursor = cursor.limit(limit)
    return list(cursor)


def find_by_id(db: Database, collection_name: str, doc_id: str) -> Optional[dict]:
    oid = parse_object_id(doc_id)
    if oid is None:
        return None
    return db[collection_name].find_one({"_id": oid})


def serialize_doc(doc: dict) -> dict:
    d = {k: _jsonable(v) for k, v in doc.items()}
    if "_id" in d:
        d["id"] = d.pop("_id")
    return d


def _jsonable(value):
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_jsonable(v) for v in value]
    return value
