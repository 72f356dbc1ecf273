"""
MongoDB-backed data store.

Products and orders live in the ``products`` and ``orders`` collections.
Callers address rows by ``id``; it is mapped to ``_id`` here so the rest of
the app never sees ObjectIds.
"""
import datetime as _dt
from typing import Any, Dict, Iterable, List, Optional

from bson import ObjectId
from pymongo import ASCENDING, DESCENDING, MongoClient, ReturnDocument
from pymongo.database import Database
from pymongo.errors import PyMongoError

from errors import UpstreamError


def connect(database_url: Optional[str], database_name: str) -> Optional[Database]:
    if not database_url:
        return None
    client = MongoClient(database_url)
    return client[database_name]


def serialize_doc(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if not doc:
        return doc
    doc = dict(doc)
    _id = doc.pop("_id", None)
    if _id is not None:
        doc["id"] = str(_id)
    for k, v in list(doc.items()):
        if isinstance(v, (_dt.datetime, _dt.date)):
            doc[k] = v.isoformat()
    return doc


def _coerce_id(value: Any) -> Any:
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    return value


def _mongo_filter(filters: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    query: Dict[str, Any] = {}
    for key, value in (filters or {}).items():
        if key == "id":
            query["_id"] = _coerce_id(value)
        else:
            query[key] = value
    return query


def _projection(fields: Optional[Iterable[str]]) -> Optional[Dict[str, int]]:
    if not fields:
        return None
    return {("_id" if f == "id" else f): 1 for f in fields}


class DataStore:
    def __init__(self, db: Database):
        self.db = db

    def select(
        self,
        collection: str,
        filters: Optional[Dict[str, Any]] = None,
        fields: Optional[Iterable[str]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> List[Dict[str, Any]]:
        try:
            cursor = self.db[collection].find(_mongo_filter(filters), _projection(fields))
            if order_by:
                key = "_id" if order_by == "id" else order_by
                cursor = cursor.sort(key, DESCENDING if descending else ASCENDING)
            return [serialize_doc(doc) for doc in cursor]
        except PyMongoError as e:
            raise UpstreamError(str(e))

    def select_one(
        self,
        collection: str,
        filters: Dict[str, Any],
        fields: Optional[Iterable[str]] = None,
    ) -> Optional[Dict[str, Any]]:
        try:
            doc = self.db[collection].find_one(_mongo_filter(filters), _projection(fields))
        except PyMongoError as e:
            raise UpstreamError(str(e))
        return serialize_doc(doc)

    def insert(self, collection: str, record: Dict[str, Any]) -> Dict[str, Any]:
        now = _dt.datetime.now(_dt.timezone.utc)
        data = dict(record)
        data.pop("id", None)
        data.setdefault("created_at", now)
        data["updated_at"] = now
        try:
            result = self.db[collection].insert_one(data)
        except PyMongoError as e:
            raise UpstreamError(str(e))
        data["_id"] = result.inserted_id
        return serialize_doc(data)

    def update(self, collection: str, filters: Dict[str, Any], values: Dict[str, Any]) -> int:
        data = dict(values)
        data["updated_at"] = _dt.datetime.now(_dt.timezone.utc)
        try:
            res = self.db[collection].update_many(_mongo_filter(filters), {"$set": data})
        except PyMongoError as e:
            raise UpstreamError(str(e))
        return res.matched_count

    def update_one(
        self, collection: str, filters: Dict[str, Any], values: Dict[str, Any]
    ) -> Optional[Dict[str, Any]]:
        """Update the first matching row and return it as it is after the write."""
        data = dict(values)
        data["updated_at"] = _dt.datetime.now(_dt.timezone.utc)
        try:
            doc = self.db[collection].find_one_and_update(
                _mongo_filter(filters), {"$set": data}, return_document=ReturnDocument.AFTER
            )
        except PyMongoError as e:
            raise UpstreamError(str(e))
        return serialize_doc(doc)

    def delete(self, collection: str, filters: Dict[str, Any]) -> int:
        try:
            res = self.db[collection].delete_many(_mongo_filter(filters))
        except PyMongoError as e:
            raise UpstreamError(str(e))
        return res.deleted_count
