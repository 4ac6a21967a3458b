import base64
import json
import time
from datetime import datetime, timedelta, timezone

import httpx
import pytest
import respx
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa
from cryptography.x509.oid import NameOID
from factories import make_user
from fastapi import HTTPException

from interpreter_booking import auth
from interpreter_booking.models import UserRole

PROJECT = "test-project"
KID = "key-1"


def _b64(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode()


@pytest.fixture(scope="module")
def signing_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="module")
def certs(signing_key):
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "securetoken")])
    now = datetime.now(timezone.utc)
    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(signing_key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - timedelta(days=1))
        .not_valid_after(now + timedelta(days=1))
        .sign(signing_key, hashes.SHA256())
    )
    return {KID: cert.public_bytes(serialization.Encoding.PEM).decode()}


@pytest.fixture(autouse=True)
def reset_key_cache(monkeypatch):
    monkeypatch.setattr(auth, "_cached_keys", None)
    monkeypatch.setattr(auth.config, "FIREBASE_PROJECT_ID", PROJECT)


def make_token(signing_key, kid=KID, **claims):
    now = int(time.time())
    payload = {
        "aud": PROJECT,
        "iss": f"https://securetoken.google.com/{PROJECT}",
        "sub": "firebase-uid-1",
        "email": "ana@example.com",
        "iat": now,
        "exp": now + 3600,
        "auth_time": now,
    }
    payload.update(claims)
    header = _b64(json.dumps({"alg": "RS256", "kid": kid}).encode())
    body = _b64(json.dumps(payload).encode())
    signature = signing_key.sign(f"{header}.{body}".encode(), padding.PKCS1v15(), hashes.SHA256())
    return f"{header}.{body}.{_b64(signature)}"


@respx.mock
@pytest.mark.asyncio
async def test_valid_token_is_verified(signing_key, certs):
    route = respx.get(auth.GOOGLE_CERTS_URL).mock(return_value=httpx.Response(200, json=certs))

    claims = await auth.verify_firebase_token(make_token(signing_key))
    await auth.verify_firebase_token(make_token(signing_key))

    assert claims["sub"] == "firebase-uid-1"
    # Second verification uses the cached certificates
    assert route.call_count == 1


@respx.mock
@pytest.mark.asyncio
async def test_wrong_audience_is_rejected(signing_key, certs):
    respx.get(auth.GOOGLE_CERTS_URL).mock(return_value=httpx.Response(200, json=certs))

    with pytest.raises(HTTPException) as exc:
        await auth.verify_firebase_token(make_token(signing_key, aud="someone-else"))
    assert exc.value.status_code == 401


@respx.mock
@pytest.mark.asyncio
async def test_expired_token_is_flagged(signing_key, certs):
    respx.get(auth.GOOGLE_CERTS_URL).mock(return_value=httpx.Response(200, json=certs))

    with pytest.raises(HTTPException) as exc:
        await auth.verify_firebase_token(make_token(signing_key, exp=int(time.time()) - 120))
    assert exc.value.status_code == 401
    assert exc.value.headers == {"X-Token-Expired": "true"}


@respx.mock
@pytest.mark.asyncio
async def test_tampered_signature_is_rejected(signing_key, certs):
    respx.get(auth.GOOGLE_CERTS_URL).mock(return_value=httpx.Response(200, json=certs))
    header, _, signature = make_token(signing_key).split(".")
    forged = _b64(json.dumps({"aud": PROJECT, "sub": "admin"}).encode())

    with pytest.raises(HTTPException) as exc:
        await auth.verify_firebase_token(f"{header}.{forged}.{signature}")
    assert exc.value.detail == "Invalid token signature"


@respx.mock
@pytest.mark.asyncio
async def test_unknown_key_refetches_once(signing_key, certs):
    route = respx.get(auth.GOOGLE_CERTS_URL).mock(return_value=httpx.Response(200, json=certs))

    with pytest.raises(HTTPException) as exc:
        await auth.verify_firebase_token(make_token(signing_key, kid="rotated"))
    assert exc.value.status_code == 401
    assert route.call_count == 2


@respx.mock
@pytest.mark.asyncio
async def test_certificate_fetch_failure_is_401(signing_key):
    respx.get(auth.GOOGLE_CERTS_URL).mock(return_value=httpx.Response(503))

    with pytest.raises(HTTPException) as exc:
        await auth.verify_firebase_token(make_token(signing_key))
    assert exc.value.status_code == 401


def test_bearer_token_resolves_provisioned_user(api, db, signing_key, certs, monkeypatch):
    monkeypatch.setattr(auth, "_cached_keys", certs)
    user = make_user(db, UserRole.ADMIN, email="ana@example.com")
    user.firebase_uid = "firebase-uid-1"
    db.commit()

    response = api.get("/users/me", headers={"Authorization": f"Bearer {make_token(signing_key)}"})

    assert response.status_code == 200
    assert response.json()["email"] == "ana@example.com"


def test_unregistered_user_is_403(api, signing_key, certs, monkeypatch):
    monkeypatch.setattr(auth, "_cached_keys", certs)

    response = api.get("/users/me", headers={"Authorization": f"Bearer {make_token(signing_key)}"})

    assert response.status_code == 403
    assert response.json()["detail"] == "User is not registered"


def test_suspended_user_is_403(api, db, signing_key, certs, monkeypatch):
    monkeypatch.setattr(auth, "_cached_keys", certs)
    user = make_user(db, UserRole.CLIENT, email="ana@example.com")
    user.firebase_uid = "firebase-uid-1"
    user.status = "SUSPENDED"
    db.commit()

    response = api.get("/users/me", headers={"Authorization": f"Bearer {make_token(signing_key)}"})

    assert response.status_code == 403


def test_malformed_token_is_401(api):
    response = api.get("/users/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401
