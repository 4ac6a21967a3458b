"""
Firebase ID token verification and current-user resolution.

Tokens are RS256 JWTs signed with keys Google publishes as x509 certificates.
A verified token only proves identity; access requires a provisioned User row.
"""

import base64
import json
import logging
import time
from typing import Optional

import httpx
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding
from cryptography.x509 import load_pem_x509_certificate
from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from . import config
from .database import get_db
from .models import User

logger = logging.getLogger(__name__)

GOOGLE_CERTS_URL = (
    "https://www.googleapis.com/robot/v1/metadata/x509/securetoken@system.gserviceaccount.com"
)
CLOCK_SKEW_SECONDS = 60
NOT_AUTHENTICATED = (
    "Not authenticated. Please provide a valid Bearer token in the Authorization header."
)

# auto_error=False so a missing header is reported as 401 rather than FastAPI's default
security = HTTPBearer(auto_error=False)

# kid -> PEM certificate, refreshed when an unknown kid shows up
_cached_keys: Optional[dict] = None


def _unauthorized(detail: str, **kwargs) -> HTTPException:
    return HTTPException(status_code=401, detail=detail, **kwargs)


def _b64_decode(segment: str) -> bytes:
    return base64.urlsafe_b64decode(segment + "=" * (-len(segment) % 4))


def _decode_json_segment(segment: str, name: str) -> dict:
    try:
        return json.loads(_b64_decode(segment))
    except (ValueError, TypeError) as e:
        logger.error(f"❌ Could not decode token {name}: {e}")
        raise _unauthorized(f"Invalid token {name}") from e


async def get_google_public_keys(refresh: bool = False) -> Optional[dict]:
    """Google's signing certificates, served from the module cache when possible"""
    global _cached_keys
    if _cached_keys and not refresh:
        return _cached_keys

    try:
        async with httpx.AsyncClient() as client:
            response = await client.get(GOOGLE_CERTS_URL)
    except httpx.HTTPError as e:
        logger.error(f"❌ Google certificate fetch failed: {e}")
        return None

    if response.status_code != 200:
        logger.error(f"❌ Google certificate fetch returned HTTP {response.status_code}")
        return None

    _cached_keys = response.json()
    logger.info(f"🔑 Loaded {len(_cached_keys)} Google signing certificates")
    return _cached_keys


async def _signing_certificate(kid: str) -> str:
    keys = await get_google_public_keys()
    if not keys or kid not in keys:
        # Google rotates keys; one refresh before giving up
        logger.warning(f"⚠️ Unknown key id {kid}, refreshing certificates")
        keys = await get_google_public_keys(refresh=True)
    if not keys or kid not in keys:
        logger.error(f"❌ No certificate for key id {kid}")
        raise _unauthorized("Unable to verify token signature")
    return keys[kid]


def _verify_signature(pem: str, signing_input: str, signature_b64: str) -> None:
    try:
        signature = _b64_decode(signature_b64)
    except (ValueError, TypeError) as e:
        raise _unauthorized("Invalid token signature format") from e

    public_key = load_pem_x509_certificate(pem.encode()).public_key()
    try:
        public_key.verify(
            signature, signing_input.encode(), padding.PKCS1v15(), hashes.SHA256()
        )
    except (InvalidSignature, ValueError) as e:
        logger.error("❌ Token signature did not verify")
        raise _unauthorized("Invalid token signature") from e


def _check_claims(claims: dict, project_id: str) -> None:
    now = time.time()

    if claims.get("aud") != project_id:
        raise _unauthorized("Invalid token audience")
    if claims.get("iss") != f"https://securetoken.google.com/{project_id}":
        raise _unauthorized("Invalid token issuer")

    expired_for = now - claims.get("exp", 0)
    if expired_for > 0:
        if expired_for > CLOCK_SKEW_SECONDS:
            logger.info(f"ℹ️ Expired token ({int(expired_for)}s) for {claims.get('email')}")
        raise _unauthorized(
            "Token has expired. Please refresh your session.",
            headers={"X-Token-Expired": "true"},
        )

    if claims.get("iat", 0) > now + CLOCK_SKEW_SECONDS:
        logger.warning("⚠️ Token issued in the future")
        raise _unauthorized("Invalid token")
    if "auth_time" not in claims:
        raise _unauthorized("Invalid token claims")


async def verify_firebase_token(token: str) -> dict:
    """Verify signature and claims of a Firebase ID token and return its claims"""
    project_id = config.FIREBASE_PROJECT_ID
    if not project_id:
        logger.error("❌ FIREBASE_PROJECT_ID not configured")
        raise HTTPException(status_code=500, detail="Firebase not configured")

    segments = token.split(".")
    if len(segments) != 3:
        raise _unauthorized("Invalid token format")
    header_b64, payload_b64, signature_b64 = segments

    header = _decode_json_segment(header_b64, "header")
    if header.get("alg") != "RS256":
        logger.error(f"❌ Unexpected token algorithm {header.get('alg')}")
        raise _unauthorized("Invalid token algorithm")
    kid = header.get("kid")
    if not kid:
        raise _unauthorized("Token missing key ID")

    pem = await _signing_certificate(kid)
    _verify_signature(pem, f"{header_b64}.{payload_b64}", signature_b64)

    claims = _decode_json_segment(payload_b64, "payload")
    _check_claims(claims, project_id)
    return claims


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """Resolve the provisioned user behind a Firebase bearer token"""
    if not credentials:
        raise _unauthorized(NOT_AUTHENTICATED)

    token = credentials.credentials
    if token.count(".") != 2:
        logger.warning(f"⚠️ Malformed bearer token ({len(token)} chars)")
        raise _unauthorized("Invalid token format. Expected a valid JWT token.")

    claims = await verify_firebase_token(token)
    firebase_uid = claims.get("sub") or claims.get("user_id")
    if not firebase_uid:
        raise _unauthorized("Invalid token claims")

    user = db.query(User).filter(User.firebase_uid == firebase_uid).first()

    # Accounts are provisioned by an admin; a valid token alone grants nothing
    if not user:
        logger.warning(f"⚠️ No provisioned user for Firebase UID {firebase_uid}")
        raise HTTPException(status_code=403, detail="User is not registered")
    if user.status != "ACTIVE":
        logger.warning(f"⚠️ Suspended user {user.email} attempted access")
        raise HTTPException(status_code=403, detail="User account is suspended")

    return user
