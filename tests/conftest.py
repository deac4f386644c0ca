import os
import tempfile
from itertools import count

import pytest

# Settings are read at import time
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-for-the-suite")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="qarz-uploads-"))

from beanie import PydanticObjectId  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from main import app  # noqa: E402
from qarz_portal.core.auth_dependencies import get_current_user  # noqa: E402
from qarz_portal.services.audit_service import audit_service  # noqa: E402


@pytest.fixture
def applicant_user():
    return {"id": str(PydanticObjectId()), "email": "ayesha@example.com", "name": "Ayesha Khan", "isAdmin": False}


@pytest.fixture
def other_user():
    return {"id": str(PydanticObjectId()), "email": "bilal@example.com", "name": "Bilal Ahmed", "isAdmin": False}


@pytest.fixture
def admin_user():
    return {"id": str(PydanticObjectId()), "email": "admin@saylani.com", "name": "Saylani Admin", "isAdmin": True}


@pytest.fixture(autouse=True)
def silence_audit(monkeypatch):
    recorded = []

    async def fake_record(**kwargs):
        recorded.append(kwargs)

    monkeypatch.setattr(audit_service, "record", fake_record)
    return recorded


@pytest.fixture
def client():
    # Not used as a context manager, so the lifespan hook never connects to MongoDB
    app.dependency_overrides = {}
    yield TestClient(app)
    app.dependency_overrides = {}


@pytest.fixture
def login_as(client):
    def _login(user):
        app.dependency_overrides[get_current_user] = lambda: user
    return _login


@pytest.fixture
def token_sequence():
    counter = count(1)
    return lambda *args, **kwargs: f"SWF00000000{next(counter):03d}"
