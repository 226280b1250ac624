"""Test fixtures — in-memory Mongo/Redis stand-ins and FastAPI test client."""

import asyncio
import io
from collections import defaultdict
from types import SimpleNamespace

import pytest
import pytest_asyncio
from bson import ObjectId
from httpx import ASGITransport, AsyncClient
from PIL import Image
from redis.exceptions import ConnectionError as RedisConnectionError

from files_manager.api.deps import get_services
from files_manager.cache import CredentialStore
from files_manager.main import create_app
from files_manager.services import build_services
from files_manager.services.file_storage import FileStorageService

_MISSING = object()


def _matches(doc: dict, query: dict) -> bool:
    return all(doc.get(key, _MISSING) == value for key, value in query.items())


class FakeCursor:
    def __init__(self, docs: list[dict]):
        self._docs = docs

    async def to_list(self, length=None):
        return list(self._docs if length is None else self._docs[:length])


class FakeCollection:
    """The subset of AsyncCollection the services use, equality filters only."""

    def __init__(self):
        self.docs: list[dict] = []

    async def insert_one(self, document: dict):
        document.setdefault("_id", ObjectId())
        self.docs.append(dict(document))
        return SimpleNamespace(inserted_id=document["_id"])

    async def find_one(self, query: dict):
        for doc in self.docs:
            if _matches(doc, query):
                return dict(doc)
        return None

    async def find_one_and_update(self, query: dict, update: dict, return_document=None):
        for doc in self.docs:
            if _matches(doc, query):
                doc.update(update.get("$set", {}))
                return dict(doc)
        return None

    async def aggregate(self, pipeline: list[dict]):
        docs = list(self.docs)
        for stage in pipeline:
            if "$match" in stage:
                docs = [d for d in docs if _matches(d, stage["$match"])]
            elif "$skip" in stage:
                docs = docs[stage["$skip"]:]
            elif "$limit" in stage:
                docs = docs[:stage["$limit"]]
        return FakeCursor([dict(d) for d in docs])

    async def count_documents(self, query: dict):
        return sum(1 for d in self.docs if _matches(d, query))


class FakeMetadataStore:
    def __init__(self):
        self.files = FakeCollection()
        self.users = FakeCollection()
        self.alive = True

    async def connect(self):
        pass

    async def close(self):
        pass

    async def is_alive(self):
        return self.alive

    async def nb_users(self):
        return await self.users.count_documents({})

    async def nb_files(self):
        return await self.files.count_documents({})


class FakeRedis:
    """String keys and lists; blocking pops return immediately."""

    def __init__(self):
        self.values: dict[str, str] = {}
        self.lists: dict[str, list[str]] = defaultdict(list)
        self.alive = True

    async def ping(self):
        if not self.alive:
            raise RedisConnectionError("Connection refused")
        return True

    async def get(self, key):
        return self.values.get(key)

    async def set(self, key, value):
        self.values[key] = value

    async def lpush(self, key, *values):
        for value in values:
            self.lists[key].insert(0, value)
        return len(self.lists[key])

    async def llen(self, key):
        return len(self.lists[key])

    async def lrange(self, key, start, end):
        items = self.lists[key]
        return items[start:] if end == -1 else items[start:end + 1]

    async def lrem(self, key, count, value):
        items = self.lists[key]
        removed = 0
        while value in items and (count == 0 or removed < count):
            items.remove(value)
            removed += 1
        return removed

    async def lmove(self, source, destination, src="LEFT", dest="RIGHT"):
        items = self.lists[source]
        if not items:
            return None
        value = items.pop(0) if src == "LEFT" else items.pop()
        if dest == "LEFT":
            self.lists[destination].insert(0, value)
        else:
            self.lists[destination].append(value)
        return value

    async def blmove(self, first_list, second_list, timeout, src="LEFT", dest="RIGHT"):
        if not self.lists[first_list]:
            # Yield like a real blocking pop would, so consumer loops can be cancelled.
            await asyncio.sleep(0.01)
            return None
        return await self.lmove(first_list, second_list, src, dest)

    async def aclose(self):
        pass


def make_png(width: int = 1, height: int = 1) -> bytes:
    out = io.BytesIO()
    Image.new("RGB", (width, height), (200, 30, 30)).save(out, format="PNG")
    return out.getvalue()


@pytest.fixture
def png_factory():
    return make_png


@pytest.fixture
def metadata_store():
    return FakeMetadataStore()


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def credential_store(fake_redis):
    return CredentialStore(client=fake_redis)


@pytest.fixture
def storage(tmp_path):
    return FileStorageService(tmp_path / "files_manager")


@pytest.fixture
def services(metadata_store, credential_store, storage):
    return build_services(metadata_store, credential_store, storage)


@pytest.fixture
def user_id():
    return ObjectId()


@pytest.fixture
def auth_headers(fake_redis, user_id):
    """X-Token header for `user_id`, as the external login flow would set it."""
    fake_redis.values["auth_token-owner"] = str(user_id)
    return {"X-Token": "token-owner"}


@pytest.fixture
def other_headers(fake_redis):
    fake_redis.values["auth_token-other"] = str(ObjectId())
    return {"X-Token": "token-other"}


@pytest_asyncio.fixture
async def client(services):
    """Provide an async test client with the service container overridden."""
    app = create_app()
    app.dependency_overrides[get_services] = lambda: services

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
