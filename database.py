"""
MongoDB connection and document helpers

The client is opened when the app starts and closed when it stops; routes get
the database handle through ``get_db``.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from bson import ObjectId
from bson.errors import InvalidId
from fastapi import Request
from pymongo import ASCENDING, MongoClient
from pymongo.database import Database

from config import DEFAULT_DB_NAME
from exceptions import InternalError

logger = logging.getLogger(__name__)

USER = "user"
MEDICINE = "medicine"
FEEDBACK = "feedback"


def connect(db_uri: str) -> Tuple[MongoClient, Database]:
    client = MongoClient(db_uri)
    db = client.get_default_database(default=DEFAULT_DB_NAME)
    ensure_indexes(db)
    logger.info("Connected to MongoDB database %s", db.name)
    return client, db


def ensure_indexes(db: Database) -> None:
    db[USER].create_index([("email", ASCENDING)], unique=True)
    db[MEDICINE].create_index([("medicinename", ASCENDING)])
    db[MEDICINE].create_index([("address", ASCENDING)])
    db[FEEDBACK].create_index([("ratedUserId", ASCENDING)])


def get_db(request: Request) -> Database:
    db = getattr(request.app.state, "db", None)
    if db is None:
        raise InternalError("Database not configured")
    return db


def sanitize(doc: Optional[Dict]) -> Optional[Dict]:
    if not doc:
        return doc
    d = {**doc}
    if "_id" in d:
        d["id"] = str(d.pop("_id"))
    return d


def to_obj_id(id_str: Any) -> Optional[ObjectId]:
    try:
        return ObjectId(str(id_str))
    except (InvalidId, TypeError):
        return None


def create_document(db: Database, collection: str, data: Dict) -> str:
    res = db[collection].insert_one(dict(data))
    return str(res.inserted_id)


def get_documents(db: Database, collection: str, query: Optional[Dict] = None, projection: Optional[Dict] = None) -> List[Dict]:
    return [sanitize(d) for d in db[collection].find(query or {}, projection)]
