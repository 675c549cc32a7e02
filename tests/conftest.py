"""
Shared fixtures: in-memory SQLite store, API client and token helpers
"""
import os
import sys
import tempfile
import time
import uuid
from decimal import Decimal

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("PAYMENT_PROOF_SECRET", "test-payment-secret")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="songqueue-uploads-"))

# Add parent directory to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from songqueue.config import settings
from songqueue.database import Base, get_db, init_db
from songqueue.models import Profile
from songqueue.utils import create_access_token


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    from songqueue.main import app

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_profile(db_session):
    """Create and commit a profile; reviewers get a handle derived from the name"""

    def _make(name: str = None, is_reviewer: bool = False, **fields) -> Profile:
        name = name or f"user{uuid.uuid4().hex[:6]}"
        values = {
            "id": str(uuid.uuid4()),
            "email": f"{name}@example.com",
            "username": name,
        }
        if is_reviewer:
            values.update(
                artist_name=name.capitalize(),
                tiktok_handle=f"@{name}",
                reviewer_name=f"@{name}",
                reviewer_url=name,
            )
        values.update(fields)
        profile = Profile(is_reviewer=is_reviewer, **values)
        db_session.add(profile)
        db_session.commit()
        db_session.refresh(profile)
        return profile

    return _make


@pytest.fixture
def auth_headers():
    def _headers(profile: Profile) -> dict:
        token = create_access_token({"sub": profile.id})
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def payment_proof():
    """Sign a proof the way the payment provider does"""

    def _proof(submission_id: str, reviewer_id: str, amount="5.00", currency: str = "usd",
               reference: str = None, issued_at: float = None, secret: str = None) -> str:
        claims = {
            "sub": submission_id,
            "reviewer_id": reviewer_id,
            "currency": currency,
            "amount": str(Decimal(str(amount))),
            "jti": reference or f"pay_{uuid.uuid4().hex[:12]}",
            "iat": int(issued_at if issued_at is not None else time.time()),
        }
        return jwt.encode(claims, secret or settings.PAYMENT_PROOF_SECRET, algorithm=settings.PAYMENT_PROOF_ALGORITHM)

    return _proof


def submission_payload(title: str = "Night Drive", **overrides) -> dict:
    payload = {
        "artist_name": "Luna Vale",
        "tiktok_name": "@lunavale",
        "song_title": title,
        "song_link": "https://open.spotify.com/track/abc123",
        "song_story": "Written on a late train home.",
        "genre": "Synthpop",
        "agreed_to_terms": True,
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def song():
    return submission_payload
