import json

import pytest
from google.api_core import exceptions as gexc
from google.auth import exceptions as auth_exc

from conftest import FakeFirestore, make_product
from rakhimart.core.diagnostics import RecordingDiagnostics
from rakhimart.core.errors import CartOutcome, PersistenceUnavailable
from rakhimart.repositories.cart_persistence import FirestoreCartPersistence, JsonFileCartPersistence
from rakhimart.services.cart_store import CartStore


def test_json_file_round_trip_across_store_instances(tmp_path):
    store = CartStore(JsonFileCartPersistence(str(tmp_path), "guest"))
    store.add_item(make_product("p1", price=299), 2)
    store.add_item(make_product("p2", price="149.99"))

    # a new process only has the file
    restored = CartStore(JsonFileCartPersistence(str(tmp_path), "guest"))
    assert [(i.product_id, i.name, i.unit_price, i.quantity) for i in restored.snapshot()] == \
           [(i.product_id, i.name, i.unit_price, i.quantity) for i in store.snapshot()]


def test_json_file_missing_is_absent(tmp_path):
    assert JsonFileCartPersistence(str(tmp_path / "nothing-here")).load() is None


def test_json_file_written_as_items_record(tmp_path):
    persistence = JsonFileCartPersistence(str(tmp_path))
    CartStore(persistence).add_item(make_product("p1"))
    data = json.loads((tmp_path / "cart.json").read_text(encoding="utf-8"))
    assert data["items"][0]["product_id"] == "p1"
    assert data["items"][0]["unit_price"] == "100.0"


def test_corrupt_json_file_loads_empty_cart(tmp_path):
    (tmp_path / "cart.json").write_text("{not json", encoding="utf-8")
    diagnostics = RecordingDiagnostics()
    store = CartStore(JsonFileCartPersistence(str(tmp_path)), diagnostics)
    assert store.is_empty()
    assert diagnostics.names() == ["cart.record_malformed"]


def test_unwritable_directory_raises_persistence_unavailable(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("x")
    with pytest.raises(PersistenceUnavailable):
        JsonFileCartPersistence(str(blocker / "sub")).save({"items": []})


def test_firestore_cart_document_per_uid():
    db = FakeFirestore()
    CartStore(FirestoreCartPersistence(db, "u1")).add_item(make_product("p1"), 2)
    CartStore(FirestoreCartPersistence(db, "u2")).add_item(make_product("p9"))

    assert db.collections["carts"]["u1"]["items"][0]["quantity"] == 2
    assert CartStore(FirestoreCartPersistence(db, "u2")).get("p9").quantity == 1


@pytest.mark.parametrize(
    "error",
    [
        gexc.ServiceUnavailable("firestore down"),
        gexc.RetryError("Deadline of 60s exceeded", cause=None),
        auth_exc.RefreshError("token refresh failed"),
    ],
)
def test_firestore_errors_become_persistence_unavailable(error):
    class Unavailable:
        def get(self):
            raise error

        def set(self, record):
            raise error

    class DB:
        def collection(self, name):
            return self

        def document(self, uid):
            return Unavailable()

    persistence = FirestoreCartPersistence(DB(), "u1")
    with pytest.raises(PersistenceUnavailable):
        persistence.load()
    with pytest.raises(PersistenceUnavailable):
        persistence.save({"items": []})


def test_firestore_deadline_on_save_keeps_the_mutation():
    class DeadlineDoc:
        def get(self):
            return FakeFirestore().collection("carts").document("u1").get()

        def set(self, record):
            raise gexc.RetryError("Deadline of 60s exceeded", cause=None)

    class DB:
        def collection(self, name):
            return self

        def document(self, uid):
            return DeadlineDoc()

    diagnostics = RecordingDiagnostics()
    store = CartStore(FirestoreCartPersistence(DB(), "u1"), diagnostics)
    assert store.add_item(make_product("p1")) is CartOutcome.APPLIED
    assert store.get("p1").quantity == 1
    assert diagnostics.names() == ["cart.save_failed"]


def test_failed_replace_leaves_no_temp_file(tmp_path, monkeypatch):
    def refuse(src, dst):
        raise PermissionError("read-only")

    monkeypatch.setattr("rakhimart.repositories.cart_persistence.os.replace", refuse)
    with pytest.raises(PersistenceUnavailable):
        JsonFileCartPersistence(str(tmp_path)).save({"items": []})
    assert list(tmp_path.iterdir()) == []
