"""
Document store access for the Personal Finance API.

Each financial collection holds documents tagged with the owning user's id.
Ids and default timestamps are assigned here, at insert time.
"""
import logging
from datetime import datetime, timezone
from functools import lru_cache
from typing import Any, Dict, Iterable, List, Optional

from bson import ObjectId
from pymongo import ASCENDING, MongoClient
from pymongo.database import Database

from config import get_settings

logger = logging.getLogger(__name__)

COLL_USER = "users"
COLL_INCOME = "incomes"
COLL_EXPENSE = "expenses"
COLL_SAVINGS = "savings"
COLL_INVESTMENT = "investments"
COLL_GOAL = "goals"


@lru_cache()
def get_client() -> MongoClient:
    settings = get_settings()
    return MongoClient(settings.database_url)


def get_db() -> Database:
    """FastAPI dependency returning the configured database handle."""
    return get_client()[get_settings().database_name]


def ensure_indexes(db: Database) -> None:
    db[COLL_USER].create_index([("email", ASCENDING)], unique=True)
    for name in (COLL_INCOME, COLL_EXPENSE, COLL_SAVINGS, COLL_INVESTMENT, COLL_GOAL):
        db[name].create_index([("userId", ASCENDING)])
    logger.info("Indexes ensured on %s", db.name)


def serialize(doc: Dict[str, Any]) -> Dict[str, Any]:
    out = dict(doc)
    if isinstance(out.get("_id"), ObjectId):
        out["_id"] = str(out["_id"])
    return out


def create_document(
    db: Database,
    collection_name: str,
    data: Dict[str, Any],
    default_now: Iterable[str] = (),
) -> Dict[str, Any]:
    """Insert one document and return it with its store-assigned ``_id``.

    Fields named in ``default_now`` that are missing or None are stamped with
    the insert time.
    """
    payload = dict(data)
    now = datetime.now(timezone.utc)
    for field in default_now:
        if payload.get(field) is None:
            payload[field] = now
    result = db[collection_name].insert_one(payload)
    payload["_id"] = result.inserted_id
    logger.debug("Inserted %s into %s", result.inserted_id, collection_name)
    return serialize(payload)


def find_document(db: Database, collection_name: str, filter_dict: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    doc = db[collection_name].find_one(filter_dict)
    return serialize(doc) if doc is not None else None


def get_documents(db: Database, collection_name: str, filter_dict: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
    return [serialize(d) for d in db[collection_name].find(filter_dict or {})]
