"""
Shared fixtures: in-memory MongoDB, fake Gemini client, captured emails
and an HTTP client bound to the app.
"""

import os

os.environ["ENV"] = "testing"
os.environ["REDIS_URL"] = "memory://"
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "mongodb://localhost:27017")
os.environ.setdefault("GEMINI_API_KEY", "test-gemini-key")
os.environ.pop("RESEND_API_KEY", None)

import json
from contextlib import asynccontextmanager
from datetime import timedelta
from types import SimpleNamespace
from typing import Any, Dict, List, Optional

import httpx
import pytest
from mongomock_motor import AsyncMongoMockClient

from database import Database
from app.dependencies import get_email_service, get_gemini_service
from app.models.mongodb import OnboardingStatus, Plan, SessionDocument, UserDocument, utcnow
from app.services.auth import create_access_token, hash_password, session_claims
from app.services.gemini import GeminiService


MENU_REPLY = json.dumps([
    {"name": "Pad Thai", "description": "Rice noodles, tamarind", "price": "$14", "category": "Mains"},
    {"name": "Green Curry", "description": "Coconut, thai basil", "price": 13, "category": "Mains"},
    {"name": "Mango Sticky Rice", "category": "Dessert"},
])

RECOMMENDATION_REPLY = json.dumps({
    "recommendations": [
        {"dishName": "Pad Thai", "score": 0.91, "reason": "Tangy and nutty"},
        {"dishName": "Green Curry", "score": 78, "explanation": "Spicy coconut sauce"},
        {"dishName": "Mango Sticky Rice", "score": 64.6, "reason": "Sweet finish"},
    ]
})


class FakeModels:
    """Stands in for ``client.aio.models``; replies are served in order."""

    def __init__(self):
        self.replies: List[Any] = []
        self.calls: List[Dict[str, Any]] = []

    async def generate_content(self, model, contents, config=None):
        self.calls.append({"model": model, "contents": contents, "config": config})
        if not self.replies:
            raise AssertionError("Unexpected model call")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return SimpleNamespace(text=reply)


class FakeGenaiClient:
    def __init__(self):
        self.models = FakeModels()
        self.aio = SimpleNamespace(models=self.models)


class FakeMailer:
    """Records outgoing emails instead of calling Resend."""

    def __init__(self):
        self.verifications: List[Dict[str, str]] = []
        self.resets: List[Dict[str, str]] = []
        self.marketing: List[str] = []
        self.fail_for: set = set()

    async def send_verification_email(self, to_email: str, name: str, token: str) -> bool:
        self.verifications.append({"email": to_email, "token": token})
        return True

    async def send_password_reset_email(self, to_email: str, name: str, token: str) -> bool:
        self.resets.append({"email": to_email, "token": token})
        return True

    async def send_marketing_email(self, to_email: str, name: str) -> bool:
        if to_email in self.fail_for:
            raise RuntimeError("smtp down")
        self.marketing.append(to_email)
        return True


@pytest.fixture
async def db(monkeypatch):
    """Fresh in-memory database with every document model registered."""
    client = AsyncMongoMockClient()
    await Database.init_models(client["taste_palette_test"])

    @asynccontextmanager
    async def no_transaction():
        # mongomock has no multi-document transactions
        yield None

    monkeypatch.setattr(Database, "transaction", no_transaction)
    monkeypatch.setattr(Database, "_initialized", True)
    yield client["taste_palette_test"]


@pytest.fixture
def genai_client() -> FakeGenaiClient:
    return FakeGenaiClient()


@pytest.fixture
def gemini(genai_client) -> GeminiService:
    return GeminiService(api_key="test-gemini-key", client=genai_client)


@pytest.fixture
def mailer() -> FakeMailer:
    return FakeMailer()


@pytest.fixture
async def client(db, gemini, mailer):
    from main import app

    app.dependency_overrides[get_gemini_service] = lambda: gemini
    app.dependency_overrides[get_email_service] = lambda: mailer
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    async def _make_user(
        email: str = "ann@example.com",
        password: str = "pw123456",
        name: str = "Ann",
        verified: bool = True,
        plan: Plan = Plan.FREE,
        free_scan_count: int = 0,
        onboarding_status: OnboardingStatus = OnboardingStatus.NOT_STARTED,
        **fields
    ) -> UserDocument:
        user = UserDocument(
            email=email,
            password_hash=hash_password(password),
            name=name,
            email_verified_at=utcnow() if verified else None,
            plan=plan,
            free_scan_count=free_scan_count,
            onboarding_status=onboarding_status,
            **fields
        )
        await user.insert()
        return user

    return _make_user


async def auth_headers_for(user: UserDocument, expires_in: Optional[timedelta] = None) -> Dict[str, str]:
    """Create a stored session for ``user`` and return its bearer header."""
    session = SessionDocument(
        user_id=user.id,
        expires_at=utcnow() + (expires_in or timedelta(days=1))
    )
    await session.insert()
    token = create_access_token(session_claims(user, str(session.id)))
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers(db):
    return auth_headers_for
