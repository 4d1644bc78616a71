"""Shared test fixtures."""

import copy
import itertools
import json
import re
from typing import Any, Dict, List, Optional

import httpx
import pytest
from fastapi.testclient import TestClient

from app.core.config import settings
from app.core.exceptions import StoreError
from app.db.mongo import get_store
from app.db.store import split_path, strip_none
from app.main import app
from app.services.country_service import CountryService, get_country_service
from app.services.geocoding_service import GeocodingService, get_geocoding_service
from app.services.identity_service import GoogleIdentityProvider, get_google_provider
from app.services.otp_service import OtpService, get_otp_service
from app.services.telegram_service import TelegramService, get_telegram_service
from app.services.user_service import UserService

ADMIN_EMAIL = "operator@example.com"


class InMemoryStore:
    """
    DocumentStore double with the same path semantics as MongoDocumentStore.

    ``writes`` records every mutating call; ``fail`` makes every call raise.
    """

    def __init__(self):
        self.collections: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self.writes: List[tuple] = []
        self.fail = False
        self._keys = itertools.count(1)

    def _check(self, path: str) -> None:
        if self.fail:
            raise StoreError(f"Failed to access {path}")

    @staticmethod
    def _descend(doc: Dict[str, Any], fields: List[str]) -> Dict[str, Any]:
        for field in fields:
            doc = doc.setdefault(field, {})
        return doc

    async def get(self, path: str) -> Optional[Dict[str, Any]]:
        self._check(path)
        collection, doc_id, fields = split_path(path)
        doc = self.collections.get(collection, {}).get(doc_id)
        for field in fields:
            if not isinstance(doc, dict) or field not in doc:
                return None
            doc = doc[field]
        return copy.deepcopy(doc)

    async def set(self, path: str, data: Dict[str, Any]) -> None:
        self._check(path)
        self.writes.append(("set", path, copy.deepcopy(data)))
        collection, doc_id, fields = split_path(path)
        data = strip_none(copy.deepcopy(data))
        docs = self.collections.setdefault(collection, {})
        if not fields:
            docs[doc_id] = data
            return
        parent = self._descend(docs.setdefault(doc_id, {}), fields[:-1])
        parent[fields[-1]] = data

    async def update(self, path: str, fields: Dict[str, Any]) -> None:
        self._check(path)
        self.writes.append(("update", path, copy.deepcopy(fields)))
        collection, doc_id, prefix = split_path(path)
        docs = self.collections.setdefault(collection, {})
        target = self._descend(docs.setdefault(doc_id, {}), prefix)
        for key, value in fields.items():
            if value is None:
                target.pop(key, None)
            else:
                target[key] = copy.deepcopy(value)

    def new_key(self, collection: str) -> str:
        return f"{collection[:1]}{next(self._keys):06d}"

    async def last(self, collection: str, limit: int, order_by: str) -> List[Dict[str, Any]]:
        self._check(collection)
        docs = list(self.collections.get(collection, {}).values())
        docs.sort(key=lambda d: d.get(order_by, 0), reverse=True)
        return copy.deepcopy(docs[:limit])

    async def children(self, collection: str) -> Dict[str, Dict[str, Any]]:
        self._check(collection)
        return copy.deepcopy(self.collections.get(collection, {}))


class FakeTelegramApi:
    """
    Bot API stand-in. ``mode`` is "ok", "chat_not_found", "network" or "forbidden".
    ``on_request`` runs while the call is in flight.
    """

    def __init__(self):
        self.mode = "ok"
        self.sent: List[Dict[str, Any]] = []
        self.on_request = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        if self.on_request:
            self.on_request()
        if self.mode == "network":
            raise httpx.ConnectError("connection refused", request=request)
        payload = json.loads(request.content)
        if self.mode == "chat_not_found":
            return httpx.Response(400, json={"ok": False, "description": "Bad Request: chat not found"})
        if self.mode == "forbidden":
            return httpx.Response(403, json={"ok": False, "description": "Forbidden: bot was blocked by the user"})
        self.sent.append(payload)
        return httpx.Response(200, json={"ok": True, "result": {"message_id": len(self.sent)}})

    def last_code(self) -> str:
        match = re.search(r"<code>(\d{6})</code>", self.sent[-1]["text"])
        return match.group(1)


class FakeNominatim:
    """Reverse geocoder stand-in; ``fail`` simulates an outage, ``on_request`` runs mid-call."""

    def __init__(self):
        self.fail = False
        self.address: Dict[str, Any] = {
            "city": "Tashkent",
            "state": "Tashkent",
            "country": "Uzbekistan",
            "country_code": "uz",
        }
        self.requests: List[httpx.Request] = []
        self.on_request = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.on_request:
            self.on_request()
        if self.fail:
            return httpx.Response(503, text="Service Unavailable")
        return httpx.Response(200, json={"place_id": 1, "address": self.address})


COUNTRIES_PAYLOAD = [
    {"name": {"common": "Uzbekistan"}, "cca2": "UZ", "flags": {"svg": "uz.svg"}},
    {"name": {"common": "Kazakhstan"}, "cca2": "KZ", "flags": {"svg": "kz.svg"}},
    {"name": {"common": "Russia"}, "cca2": "RU", "flags": {"svg": "ru.svg"}},
]

GOOGLE_TOKENS = {
    "alice-token": {
        "sub": "google-alice",
        "aud": "test-client",
        "name": "Alice",
        "email": "alice@example.com",
        "picture": "https://example.com/alice.png",
    },
    "operator-token": {
        "sub": "google-operator",
        "aud": "test-client",
        "name": "Operator",
        "email": ADMIN_EMAIL,
    },
}


def google_handler(request: httpx.Request) -> httpx.Response:
    claims = GOOGLE_TOKENS.get(request.url.params.get("id_token"))
    if claims is None:
        return httpx.Response(400, json={"error": "invalid_token"})
    return httpx.Response(200, json=claims)


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def telegram_api():
    return FakeTelegramApi()


@pytest.fixture
def telegram(telegram_api):
    return TelegramService(
        bot_token="test-token",
        operator_chat_id="-1001",
        transport=httpx.MockTransport(telegram_api.handler),
    )


@pytest.fixture
def nominatim():
    return FakeNominatim()


@pytest.fixture
def geocoder(nominatim):
    return GeocodingService(transport=httpx.MockTransport(nominatim.handler))


@pytest.fixture
def countries():
    return CountryService(
        transport=httpx.MockTransport(lambda request: httpx.Response(200, json=COUNTRIES_PAYLOAD))
    )


@pytest.fixture
def google():
    return GoogleIdentityProvider(client_id="test-client", transport=httpx.MockTransport(google_handler))


@pytest.fixture
def otp(telegram, store):
    return OtpService(telegram, UserService(store))


@pytest.fixture
def client(store, telegram, geocoder, countries, google, otp, monkeypatch):
    """TestClient with every external dependency replaced."""
    monkeypatch.setattr(settings, "ADMIN_EMAILS", [ADMIN_EMAIL])

    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_telegram_service] = lambda: telegram
    app.dependency_overrides[get_geocoding_service] = lambda: geocoder
    app.dependency_overrides[get_country_service] = lambda: countries
    app.dependency_overrides[get_google_provider] = lambda: google
    app.dependency_overrides[get_otp_service] = lambda: otp

    yield TestClient(app)

    app.dependency_overrides.clear()
