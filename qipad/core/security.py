"""Token and password primitives - HS256 JWT and PBKDF2 password hashes.

Invariants:
    - Tokens are header.payload.signature, each part base64url without padding
    - decode_access_token returns None for any malformed, forged or expired token
    - Password hashes are "salthex$hashhex" (PBKDF2-HMAC-SHA256, 100k iterations)

Design Decisions:
    - Secret passed in by the caller so this module stays free of settings IO
"""

import base64
import hashlib
import hmac
import json
import os
import time

_ITERATIONS = 100_000


def _b64_url_encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("utf-8")


def _b64_url_decode(data: str) -> bytes:
    padding = "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode(data + padding)


def _sign(message: bytes, secret: str) -> bytes:
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).digest()


def create_access_token(
    claims: dict, secret: str, expires_in_seconds: int, now: float | None = None,
) -> str:
    """Sign claims into a JWT with an ``exp`` claim ``expires_in_seconds`` ahead."""
    issued = int(now if now is not None else time.time())
    payload = {**claims, "iat": issued, "exp": issued + expires_in_seconds}
    header = {"alg": "HS256", "typ": "JWT"}
    header_b64 = _b64_url_encode(json.dumps(header, separators=(",", ":")).encode("utf-8"))
    payload_b64 = _b64_url_encode(json.dumps(payload, separators=(",", ":")).encode("utf-8"))
    signing_input = f"{header_b64}.{payload_b64}".encode("utf-8")
    return f"{header_b64}.{payload_b64}.{_b64_url_encode(_sign(signing_input, secret))}"


def decode_access_token(
    token: str, secret: str, now: float | None = None,
) -> dict | None:
    """Verify signature and expiry; return the claims or None."""
    parts = token.split(".")
    if len(parts) != 3:
        return None
    header_b64, payload_b64, signature_b64 = parts
    signing_input = f"{header_b64}.{payload_b64}".encode("utf-8")
    try:
        actual_sig = _b64_url_decode(signature_b64)
        if not hmac.compare_digest(_sign(signing_input, secret), actual_sig):
            return None
        payload = json.loads(_b64_url_decode(payload_b64).decode("utf-8"))
    except (ValueError, UnicodeDecodeError):
        return None
    if not isinstance(payload, dict) or "exp" not in payload:
        return None
    current = now if now is not None else time.time()
    if int(payload["exp"]) < int(current):
        return None
    return payload


def hash_password(password: str) -> str:
    salt = os.urandom(16)
    dk = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, _ITERATIONS)
    return f"{salt.hex()}${dk.hex()}"


def verify_password(plain_password: str, hashed_password: str | None) -> bool:
    if not hashed_password or "$" not in hashed_password:
        return False
    salt_hex, hash_hex = hashed_password.split("$", 1)
    try:
        salt = bytes.fromhex(salt_hex)
        stored = bytes.fromhex(hash_hex)
    except ValueError:
        return False
    dk = hashlib.pbkdf2_hmac("sha256", plain_password.encode("utf-8"), salt, _ITERATIONS)
    return hmac.compare_digest(dk, stored)
