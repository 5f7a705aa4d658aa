# tests/conftest.py - Shared fixtures: in-memory store, fixed clock, fake Gmail
import base64
import json
import os

os.environ.setdefault("ENV", "test")
os.environ.setdefault("DATABASE_URL", "sqlite://")

from datetime import date
from decimal import Decimal

import httpx
import pytest
from fastapi import Depends
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from student_invoice.api.deps.services import get_clock, get_gmail_service
from student_invoice.core.db import DatabaseManager, get_db
from student_invoice.main import app
from student_invoice.schemas.template import BillingTemplateCreate
from student_invoice.services.gmail_service import GmailService

# Monday 15th September 2025, inside the 1st half autumn term 2025
TODAY = date(2025, 9, 15)


class FakeGoogle:
    """Records requests and answers like the OAuth and Gmail endpoints"""

    def __init__(self):
        self.requests = []
        self.draft_status = 200
        self.fail_subjects = set()
        # Raw 200 bodies sent instead of the normal JSON reply
        self.token_text = None
        self.draft_text = None
        self.drafts_created = 0

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path.endswith("/token"):
            if self.token_text is not None:
                return httpx.Response(200, text=self.token_text)
            return httpx.Response(200, json={
                "access_token": "access-123",
                "refresh_token": "refresh-456",
                "expires_in": 3600,
            })
        if request.url.path.endswith("/users/me/drafts"):
            if self.draft_status != 200:
                return httpx.Response(self.draft_status, text="boom")
            if self.draft_text is not None:
                return httpx.Response(200, text=self.draft_text)
            raw = base64.urlsafe_b64decode(json.loads(request.content)["message"]["raw"]).decode()
            if any(subject in raw for subject in self.fail_subjects):
                return httpx.Response(500, text="draft rejected")
            self.drafts_created += 1
            n = self.drafts_created
            return httpx.Response(200, json={"id": f"draft-{n}", "message": {"id": f"msg-{n}", "threadId": f"thr-{n}"}})
        return httpx.Response(404)


@pytest.fixture
def db_manager():
    manager = DatabaseManager("sqlite://")
    manager.create_tables()
    yield manager
    manager.close()


@pytest.fixture
def db(db_manager):
    session = db_manager.SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def fake_google():
    return FakeGoogle()


@pytest.fixture
def http_client(fake_google):
    client = httpx.Client(transport=httpx.MockTransport(fake_google))
    yield client
    client.close()


@pytest.fixture
def client(db_manager, http_client):
    def override_get_db():
        yield from db_manager.get_session()

    def override_gmail_service(db: Session = Depends(get_db)):
        return GmailService(db, http_client=http_client)

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: (lambda: TODAY)
    app.dependency_overrides[get_gmail_service] = override_gmail_service
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def john_doe():
    return BillingTemplateCreate(
        recipient="John Doe",
        cost=Decimal("25"),
        instrument="piano",
        day="Monday",
        students="Emma Doe",
    )


@pytest.fixture
def template_payload():
    return {
        "recipient": "John Doe",
        "cost": "25.00",
        "instrument": "piano",
        "day": "Monday",
        "students": "Emma Doe",
    }
