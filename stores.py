"""
Credential, listing and feedback stores

Each function takes the database handle and works on one collection. Medicine
names are not unique: lookup and delete by name act on the first matching
document in the store's natural order.
"""

import logging
import re
from datetime import date, datetime, time, timezone
from typing import Any, Dict, List, Optional

from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from auth import hash_password
from database import FEEDBACK, MEDICINE, USER, create_document, get_documents, sanitize, to_obj_id
from exceptions import DuplicateEmail, ValidationError
from schemas import Feedback as FeedbackSchema, Medicine as MedicineSchema, User as UserSchema

logger = logging.getLogger(__name__)

LISTING_FIELDS = ("medicinename", "exp_date", "address", "phone", "photo", "description")

# ---------------------- Users ----------------------


def create_user(db: Database, name: str, email: str, password: str, address: str, phone: str) -> str:
    user_doc = UserSchema(
        name=name,
        email=email,
        password=hash_password(password),
        address=address,
        phone=phone,
    ).model_dump()
    try:
        uid = create_document(db, USER, user_doc)
    except DuplicateKeyError:
        raise DuplicateEmail()
    logger.info("Registered user %s", uid)
    return uid


def find_user_by_email(db: Database, email: str) -> Optional[dict]:
    return db[USER].find_one({"email": email})


def find_user_by_id(db: Database, user_id: str) -> Optional[dict]:
    oid = to_obj_id(user_id)
    if oid is None:
        return None
    return db[USER].find_one({"_id": oid})


# ---------------------- Listings ----------------------


def _as_datetime(value: Any) -> Any:
    # BSON has no date-only type and keeps datetimes as naive UTC
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            return value.astimezone(timezone.utc).replace(tzinfo=None)
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    return value


def create_listing(db: Database, fields: Dict[str, Any]) -> str:
    if any(not fields.get(f) for f in LISTING_FIELDS):
        raise ValidationError("All fields are required")
    doc = MedicineSchema(
        **{f: fields[f] for f in LISTING_FIELDS if f != "exp_date"},
        exp_date=_as_datetime(fields["exp_date"]),
    ).model_dump()
    lid = create_document(db, MEDICINE, doc)
    logger.info("Listed medicine %r at %r", doc["medicinename"], doc["address"])
    return lid


def list_listings(db: Database) -> List[Dict]:
    return get_documents(db, MEDICINE)


def find_listings_by_address(db: Database, address: str) -> List[Dict]:
    return get_documents(db, MEDICINE, {"address": address})


def find_listing_by_name(db: Database, name: str) -> Optional[Dict]:
    return sanitize(db[MEDICINE].find_one({"medicinename": name}))


def delete_listing_by_name(db: Database, name: str) -> bool:
    res = db[MEDICINE].delete_one({"medicinename": name})
    if res.deleted_count:
        logger.info("Deleted medicine %r", name)
    return res.deleted_count > 0


def search_listing_names(db: Database, query: str) -> List[str]:
    """Names of listings containing ``query`` anywhere, ignoring case.

    The query is matched literally, so characters like ``(`` or ``.`` have no
    pattern meaning. Results come back in store order with no limit.
    """
    q = {"medicinename": {"$regex": re.escape(query), "$options": "i"}}
    return [d["medicinename"] for d in db[MEDICINE].find(q, {"medicinename": 1}) if d.get("medicinename")]


# ---------------------- Feedback ----------------------


def submit_feedback(db: Database, user_id: Any, rated_user_id: Any, rating: Any) -> str:
    doc = FeedbackSchema(userId=user_id, ratedUserId=rated_user_id, rating=rating).model_dump()
    return create_document(db, FEEDBACK, doc)


def find_feedback_for_user(db: Database, rated_user_id: str) -> List[Dict]:
    return get_documents(db, FEEDBACK, {"ratedUserId": rated_user_id})
