"""Shared fixtures and fake collaborators for the hidden gems tests."""
import asyncio
import time
from typing import Any, Dict, List, Optional, Tuple

import jwt
import pytest

from app.enrichment import EnrichmentCoordinator, SubmissionPipeline
from app.errors import UploadFailed
from app.models.gems import GeocodeResult, ImageUpload
from app.models.lookup import Found, NotFound
from app.services.auth import AuthSession
from app.services.gem_store import GemStore
from app.services.notifier import Notifier

TEST_SECRET = "hidden-gems-test-secret-0123456789abcdef"


def make_token(email: str = "priya.sharma@example.com", expires_in: int = 3600, sub: str = "user-1") -> str:
    claims = {"sub": sub, "email": email, "exp": int(time.time()) + expires_in}
    return jwt.encode(claims, TEST_SECRET, algorithm="HS256")


async def settle(rounds: int = 5) -> None:
    """Let scheduled tasks run up to their next suspension point."""
    for _ in range(rounds):
        await asyncio.sleep(0)


class FakeGemsApi:
    """In-memory stand-in for the list/create API."""

    def __init__(self, gems=None, list_error=None, created=None, create_error=None):
        self.gems = gems or []
        self.list_error = list_error
        self.created = created
        self.create_error = create_error
        self.list_calls = 0
        self.create_calls: List[Tuple[Dict[str, Any], Optional[str]]] = []

    async def list_gems(self):
        self.list_calls += 1
        if self.list_error:
            raise self.list_error
        return self.gems

    async def create_gem(self, payload, token=None):
        self.create_calls.append((payload, token))
        if self.create_error:
            raise self.create_error
        if self.created is not None:
            return self.created
        return {"id": "new-1", **payload}


class StaticPhotoResolver:
    """Replies immediately from a name -> url table."""

    def __init__(self, urls=None):
        self.urls = urls or {}
        self.calls = []

    async def resolve(self, name, lat=None, lng=None):
        self.calls.append((name, lat, lng))
        url = self.urls.get(name)
        if url:
            return Found(value=url)
        return NotFound(reason="no photo")


class ScriptedPhotoResolver:
    """Holds every reply until the test releases it, in any order."""

    def __init__(self):
        self.calls = []
        self._replies: List[asyncio.Future] = []

    async def resolve(self, name, lat=None, lng=None):
        self.calls.append((name, lat, lng))
        reply = asyncio.get_running_loop().create_future()
        self._replies.append(reply)
        return await reply

    def reply(self, index: int, url: Optional[str]) -> None:
        self._replies[index].set_result(Found(value=url) if url else NotFound(reason="no photo"))


class FakeGeocoder:
    def __init__(self, result: Optional[GeocodeResult] = None):
        self.result = result
        self.calls = []

    async def resolve(self, address):
        self.calls.append(address)
        if self.result is None:
            return NotFound(reason="ZERO_RESULTS")
        return Found(value=self.result)


class FakeStorage:
    def __init__(self, url: str = "https://storage.example/uploads/1.jpg", fail: bool = False):
        self.url = url
        self.fail = fail
        self.uploads: List[ImageUpload] = []

    async def upload(self, upload):
        self.uploads.append(upload)
        if self.fail:
            raise UploadFailed("bucket refused the upload")
        return self.url


@pytest.fixture
def store():
    return GemStore()


@pytest.fixture
def notifications():
    return Notifier()


@pytest.fixture
def session():
    return AuthSession(make_token())


@pytest.fixture
def image():
    return ImageUpload(filename="sunset.PNG", content_type="image/png", content=b"\x89PNG fake")


@pytest.fixture
def build_pipeline(store, notifications):
    """Factory wiring a SubmissionPipeline to fakes."""

    def build(api=None, storage=None, geocoder=None, photos=None):
        api = api or FakeGemsApi()
        photos = photos or StaticPhotoResolver()
        coordinator = EnrichmentCoordinator(
            store=store, api=api, photos=photos, notifications=notifications
        )
        pipeline = SubmissionPipeline(
            store=store,
            api=api,
            storage=storage or FakeStorage(),
            geocoder=geocoder or FakeGeocoder(),
            coordinator=coordinator,
            notifications=notifications,
        )
        return pipeline, coordinator

    return build
