from datetime import timedelta

import pytest
from fastapi import HTTPException

from qarz_portal.core.auth_dependencies import get_admin_user, get_current_user
from qarz_portal.core.security import (
    create_access_token,
    decode_token,
    hash_password,
    verify_password,
)
from qarz_portal.services.auth_service import auth_service


def test_password_hash_roundtrip():
    hashed = hash_password("qarz-hasana")

    assert hashed != "qarz-hasana"
    assert verify_password("qarz-hasana", hashed)
    assert not verify_password("wrong-password", hashed)


def test_short_password_rejected():
    with pytest.raises(ValueError):
        hash_password("12345")


def test_expired_token_is_invalid():
    token = create_access_token({"sub": "ayesha@example.com"}, expires_delta=timedelta(minutes=-1))
    assert decode_token(token) is None
    assert decode_token("not-a-jwt") is None


@pytest.mark.asyncio
async def test_current_user_from_token(monkeypatch, applicant_user):
    async def fake_lookup(email):
        return applicant_user if email == applicant_user["email"] else None

    monkeypatch.setattr(auth_service, "get_user_by_email", fake_lookup)

    token = create_access_token({"sub": applicant_user["email"]})
    assert await get_current_user(token) == applicant_user

    unknown = create_access_token({"sub": "nobody@example.com"})
    with pytest.raises(HTTPException) as exc:
        await get_current_user(unknown)
    assert exc.value.status_code == 401


@pytest.mark.asyncio
async def test_admin_guard(applicant_user, admin_user):
    assert await get_admin_user(admin_user) == admin_user

    with pytest.raises(HTTPException) as exc:
        await get_admin_user(applicant_user)
    assert exc.value.status_code == 403


def test_profile_route_with_bearer_token(client, monkeypatch, applicant_user):
    async def fake_lookup(email):
        return applicant_user

    monkeypatch.setattr(auth_service, "get_user_by_email", fake_lookup)
    token = create_access_token({"sub": applicant_user["email"]})

    response = client.get("/auth/profile", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 200
    assert response.json()["email"] == applicant_user["email"]


def test_register_route(client, monkeypatch, silence_audit):
    async def fake_register(user_data):
        return {"id": "507f1f77bcf86cd799439011", "email": user_data.email, "name": user_data.name,
                "cnic": user_data.cnic, "message": "User registered successfully"}

    monkeypatch.setattr(auth_service, "register_user", fake_register)

    response = client.post("/auth/register", json={
        "cnic": "42101-1234567-1",
        "email": "ayesha@example.com",
        "name": "Ayesha Khan",
        "password": "secret1",
        "phoneNumber": "0300-1234567",
        "address": {"city": "Karachi", "country": "Pakistan"},
    })

    assert response.status_code == 201
    assert response.json()["cnic"] == "42101-1234567-1"
    assert silence_audit[0]["action"] == "register"


def test_register_route_short_password(client):
    response = client.post("/auth/register", json={
        "cnic": "42101-1234567-1",
        "email": "ayesha@example.com",
        "name": "Ayesha Khan",
        "password": "123",
    })

    assert response.status_code == 422
    assert response.json()["error"]["code"] == "validation_error"


def test_login_route_failure(client, monkeypatch, silence_audit):
    async def fake_login(email, password):
        raise HTTPException(status_code=401, detail="Invalid email or password")

    monkeypatch.setattr(auth_service, "login_user", fake_login)

    response = client.post("/auth/login", data={"username": "ayesha@example.com", "password": "wrong1"})

    assert response.status_code == 401
    assert response.json()["error"]["message"] == "Invalid email or password"
    assert silence_audit[0]["status"] == "failed"
