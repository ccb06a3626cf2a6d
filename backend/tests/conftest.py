import copy
import uuid

import pytest
from apscheduler.jobstores.base import JobLookupError
from fastapi.testclient import TestClient

from rakhimart.config import get_db
from rakhimart.core.security import get_principal
from rakhimart.main import app
from rakhimart.routers.products import get_media_host
from rakhimart.schemas.principal import Principal
from rakhimart.schemas.product import ProductOut


# ---------- in-memory Firestore ----------
class FakeSnapshot:
    def __init__(self, doc_id, data):
        self.id = doc_id
        self._data = data

    @property
    def exists(self):
        return self._data is not None

    def to_dict(self):
        return copy.deepcopy(self._data)


class FakeDocRef:
    def __init__(self, store, doc_id):
        self._store = store
        self.id = doc_id

    def get(self):
        return FakeSnapshot(self.id, self._store.get(self.id))

    def set(self, data, merge=False):
        if merge and self.id in self._store:
            self._store[self.id].update(copy.deepcopy(data))
        else:
            self._store[self.id] = copy.deepcopy(data)

    def update(self, data):
        if self.id not in self._store:
            raise KeyError(self.id)
        self._store[self.id].update(copy.deepcopy(data))

    def delete(self):
        self._store.pop(self.id, None)


class FakeCollection:
    def __init__(self, store):
        self._store = store

    def document(self, doc_id=None):
        return FakeDocRef(self._store, doc_id or uuid.uuid4().hex[:20])

    def stream(self):
        return [FakeSnapshot(k, v) for k, v in list(self._store.items())]


class FakeFirestore:
    def __init__(self):
        self.collections = {}

    def collection(self, name):
        return FakeCollection(self.collections.setdefault(name, {}))


class FakeMediaHost:
    def __init__(self):
        self.uploaded = []

    def upload_all(self, product_id, images):
        urls = []
        for img in images:
            self.uploaded.append((product_id, img.filename))
            urls.append(f"https://media.test/{product_id}/{img.filename}")
        return urls


# ---------- scheduler double (APScheduler add_job / job.remove surface) ----------
class FakeJob:
    def __init__(self, scheduler, job_id, func, args):
        self._scheduler = scheduler
        self.id = job_id
        self.func = func
        self.args = args

    def remove(self):
        if self.id not in self._scheduler.jobs:
            raise JobLookupError(self.id)
        del self._scheduler.jobs[self.id]


class FakeScheduler:
    def __init__(self):
        self.jobs = {}

    def add_job(self, func, trigger, run_date=None, args=None, id=None):
        assert trigger == "date"
        job = FakeJob(self, id, func, args or [])
        self.jobs[id] = job
        return job

    def run_pending(self):
        for job in list(self.jobs.values()):
            self.jobs.pop(job.id, None)
            job.func(*job.args)


# ---------- fixtures ----------
@pytest.fixture
def fake_db():
    return FakeFirestore()


@pytest.fixture
def scheduler():
    return FakeScheduler()


@pytest.fixture
def principal():
    return {"current": Principal(uid="user-1", role="user")}


@pytest.fixture
def media():
    return FakeMediaHost()


@pytest.fixture
def client(fake_db, principal, media):
    app.dependency_overrides[get_db] = lambda: fake_db
    app.dependency_overrides[get_principal] = lambda: principal["current"]
    app.dependency_overrides[get_media_host] = lambda: media
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def as_admin(principal):
    principal["current"] = Principal(uid="admin-1", role="admin")
    return principal["current"]


def make_product(product_id="p1", price=100, stock=10, is_out_of_stock=False, images=None, name=None):
    return ProductOut(
        id=product_id,
        name=name or f"Rakhi {product_id}",
        price=price,
        stock=stock,
        is_out_of_stock=is_out_of_stock,
        images=images if images is not None else [f"https://img.test/{product_id}.jpg"],
    )
