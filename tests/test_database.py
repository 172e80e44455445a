import pytest
from bson import ObjectId
from pymongo.errors import PyMongoError

from database import MongoStore, service_requests
from errors import ConcurrentModification, NotFound, PersistenceError


@pytest.fixture
def store(db):
    return service_requests(db)


def test_create_and_get(store):
    record = store.create({"status": "pending", "client_id": "c1"})
    assert isinstance(record["id"], str)
    assert record["created_at"] is not None
    fetched = store.get(record["id"])
    assert fetched["client_id"] == "c1"
    assert "_id" not in fetched


def test_get_unknown_and_malformed_ids(store):
    with pytest.raises(NotFound):
        store.get(str(ObjectId()))
    with pytest.raises(NotFound):
        store.get("not-an-object-id")


def test_update_compare_and_set(store):
    record = store.create({"status": "pending"})
    updated = store.update(record["id"], {"status": "accepted"}, expected={"status": "pending"})
    assert updated["status"] == "accepted"

    with pytest.raises(ConcurrentModification):
        store.update(record["id"], {"status": "cancelled"}, expected={"status": "pending"})
    assert store.get(record["id"])["status"] == "accepted"


def test_update_unknown_id(store):
    with pytest.raises(NotFound):
        store.update(str(ObjectId()), {"status": "accepted"}, expected={"status": "pending"})


def test_query_and_delete(store):
    a = store.create({"client_id": "c1"})
    store.create({"client_id": "c2"})
    assert [r["id"] for r in store.query({"client_id": "c1"})] == [a["id"]]
    assert len(store.query()) == 2

    store.delete(a["id"])
    assert len(store.query()) == 1
    with pytest.raises(NotFound):
        store.delete(a["id"])


class BrokenCollection:
    name = "broken"

    def find_one(self, *args, **kwargs):
        raise PyMongoError("connection refused")

    insert_one = find_one


def test_driver_errors_become_persistence_errors():
    store = MongoStore(BrokenCollection())
    with pytest.raises(PersistenceError):
        store.get(str(ObjectId()))
    with pytest.raises(PersistenceError):
        store.create({"status": "pending"})
