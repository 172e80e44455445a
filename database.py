import logging
from datetime import datetime, timezone
from functools import lru_cache
from typing import Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import DESCENDING, MongoClient, ReturnDocument
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import PyMongoError

from config import settings
from errors import ConcurrentModification, NotFound, PersistenceError

logger = logging.getLogger(__name__)

USERS = "users"
TECHNICIANS = "technicians"
SERVICE_REQUESTS = "service_requests"


@lru_cache
def get_client() -> MongoClient:
    # MongoClient connects lazily, so this does no I/O until the first query
    return MongoClient(settings.mongodb_url)


def get_db() -> Database:
    return get_client()[settings.database_name]


def _now():
    return datetime.now(timezone.utc)


def _object_id(record_id: str) -> ObjectId:
    try:
        return ObjectId(record_id)
    except (InvalidId, TypeError):
        raise NotFound(f"No record with id {record_id!r}")


def _to_record(doc: dict) -> dict:
    record = dict(doc)
    record["id"] = str(record.pop("_id"))
    return record


class MongoStore:
    """CRUD access to one collection.

    Records go in and come out as plain dicts with a string ``id``; the
    ``ObjectId`` never leaves this class.  Driver failures are re-raised
    as ``PersistenceError`` so callers can retry the whole operation.
    """

    def __init__(self, collection: Collection):
        self.collection = collection

    def get(self, record_id: str) -> dict:
        oid = _object_id(record_id)
        try:
            doc = self.collection.find_one({"_id": oid})
        except PyMongoError as e:
            logger.warning("Read from %s failed: %s", self.collection.name, e)
            raise PersistenceError(str(e))
        if doc is None:
            raise NotFound(f"No record with id {record_id!r}")
        return _to_record(doc)

    def create(self, record: dict) -> dict:
        data = {k: v for k, v in record.items() if k not in ("id", "_id")}
        now = _now()
        data["created_at"] = now
        data["updated_at"] = now
        try:
            inserted_id = self.collection.insert_one(data).inserted_id
        except PyMongoError as e:
            logger.warning("Insert into %s failed: %s", self.collection.name, e)
            raise PersistenceError(str(e))
        data["_id"] = inserted_id
        return _to_record(data)

    def update(self, record_id: str, patch: dict, expected: Optional[dict] = None) -> dict:
        """Apply ``patch`` atomically.

        ``expected`` is matched together with the id, so the write only
        happens if those fields still hold the given values.
        """
        oid = _object_id(record_id)
        changes = {k: v for k, v in patch.items() if k not in ("id", "_id", "created_at")}
        changes["updated_at"] = _now()
        query = {"_id": oid, **(expected or {})}
        try:
            doc = self.collection.find_one_and_update(
                query,
                {"$set": changes},
                return_document=ReturnDocument.AFTER,
            )
            if doc is None and expected:
                exists = self.collection.count_documents({"_id": oid}, limit=1)
            else:
                exists = doc is not None
        except PyMongoError as e:
            logger.warning("Update of %s in %s failed: %s", record_id, self.collection.name, e)
            raise PersistenceError(str(e))
        if doc is None:
            if exists:
                raise ConcurrentModification(f"Record {record_id} was modified concurrently")
            raise NotFound(f"No record with id {record_id!r}")
        return _to_record(doc)

    def query(self, filter: Optional[dict] = None) -> list:
        try:
            docs = self.collection.find(filter or {}).sort("created_at", DESCENDING)
            return [_to_record(doc) for doc in docs]
        except PyMongoError as e:
            logger.warning("Query on %s failed: %s", self.collection.name, e)
            raise PersistenceError(str(e))

    def find_one(self, filter: dict) -> Optional[dict]:
        try:
            doc = self.collection.find_one(filter)
        except PyMongoError as e:
            raise PersistenceError(str(e))
        return _to_record(doc) if doc else None

    def count(self, filter: Optional[dict] = None) -> int:
        try:
            return self.collection.count_documents(filter or {})
        except PyMongoError as e:
            raise PersistenceError(str(e))

    def delete(self, record_id: str) -> None:
        oid = _object_id(record_id)
        try:
            result = self.collection.delete_one({"_id": oid})
        except PyMongoError as e:
            logger.warning("Delete of %s in %s failed: %s", record_id, self.collection.name, e)
            raise PersistenceError(str(e))
        if result.deleted_count == 0:
            raise NotFound(f"No record with id {record_id!r}")


def users(db: Database) -> MongoStore:
    return MongoStore(db[USERS])


def technicians(db: Database) -> MongoStore:
    return MongoStore(db[TECHNICIANS])


def service_requests(db: Database) -> MongoStore:
    return MongoStore(db[SERVICE_REQUESTS])
