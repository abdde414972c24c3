"""Session tokens, password hashing and login throttling."""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
import secrets
import time
from dataclasses import dataclass
from urllib.parse import urlsplit

PASSWORD_SCHEME = "pbkdf2_sha256"
PASSWORD_ITERATIONS = 200_000


def _b64url_encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).decode("utf-8").rstrip("=")


def _b64url_decode(data: str) -> bytes:
    padding = "=" * ((4 - (len(data) % 4)) % 4)
    return base64.urlsafe_b64decode((data + padding).encode("utf-8"))


@dataclass(frozen=True)
class SessionClaims:
    user_id: str
    email: str


class AttemptLimiter:
    """Process-local failed-login counter keyed by email + client address.

    ``max_attempts`` failures inside the window block the key for
    ``block_seconds``. A non-positive ``max_attempts`` never blocks.
    """

    def __init__(self):
        self._failures: dict[str, list[float]] = {}
        self._blocked_until: dict[str, float] = {}

    def is_blocked(self, key: str, now: float) -> bool:
        until = self._blocked_until.get(key)
        if until is None:
            return False
        if until > now:
            return True
        del self._blocked_until[key]
        return False

    def add_failure(
        self,
        *,
        key: str,
        now: float,
        window_seconds: int,
        max_attempts: int,
        block_seconds: int,
    ) -> bool:
        """Record a failure; returns True once the key is blocked."""
        if max_attempts <= 0:
            return False
        if self.is_blocked(key, now):
            return True

        cutoff = now - max(1, window_seconds)
        recent = [at for at in self._failures.get(key, ()) if at >= cutoff]
        recent.append(now)
        if len(recent) < max_attempts:
            self._failures[key] = recent
            return False

        self._failures.pop(key, None)
        self._blocked_until[key] = now + max(1, block_seconds)
        return True

    def clear(self, key: str):
        self._failures.pop(key, None)
        self._blocked_until.pop(key, None)


def _pbkdf2(password: str, salt: bytes, iterations: int) -> bytes:
    return hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)


def hash_password(password: str, iterations: int = PASSWORD_ITERATIONS) -> str:
    """PBKDF2-SHA256 hash as ``scheme$iterations$salt$digest`` (base64url parts)."""
    if not password:
        raise ValueError("Password is required")
    salt = secrets.token_bytes(16)
    digest = _pbkdf2(password, salt, iterations)
    return "$".join((PASSWORD_SCHEME, str(iterations), _b64url_encode(salt), _b64url_encode(digest)))


def verify_password(password: str, stored_hash: str) -> bool:
    if not password or not stored_hash:
        return False
    parts = stored_hash.split("$")
    if len(parts) != 4 or parts[0] != PASSWORD_SCHEME:
        return False
    try:
        iterations = int(parts[1])
        salt = _b64url_decode(parts[2])
        expected = _b64url_decode(parts[3])
    except ValueError:
        return False
    return hmac.compare_digest(_pbkdf2(password, salt, iterations), expected)


def _sign(secret: str, body: str) -> str:
    return hmac.new(secret.encode("utf-8"), body.encode("utf-8"), hashlib.sha256).hexdigest()


def issue_session_token(secret: str, claims: SessionClaims, ttl_seconds: int) -> str:
    if not secret:
        raise RuntimeError("auth_secret is required to issue sessions")

    now = int(time.time())
    payload = {
        "sub": claims.user_id,
        "email": claims.email,
        "iat": now,
        "exp": now + max(60, ttl_seconds),
    }
    body = _b64url_encode(json.dumps(payload, separators=(",", ":"), sort_keys=True).encode("utf-8"))
    return f"{body}.{_sign(secret, body)}"


def decode_session_token(secret: str, token: str) -> SessionClaims | None:
    """Return the claims of a valid, unexpired token, else None."""
    if not secret or not token:
        return None

    try:
        body, provided_sig = token.split(".", 1)
    except ValueError:
        return None

    if not hmac.compare_digest(provided_sig, _sign(secret, body)):
        return None

    try:
        payload = json.loads(_b64url_decode(body))
    except ValueError:
        return None

    if not isinstance(payload, dict):
        return None

    exp = payload.get("exp")
    sub = payload.get("sub")
    if not isinstance(exp, int) or exp <= int(time.time()):
        return None
    if not isinstance(sub, str) or not sub.strip():
        return None
    return SessionClaims(user_id=sub.strip(), email=str(payload.get("email") or ""))


def sanitize_next_path(raw_next: str, home_path: str) -> str:
    """Only allow same-origin absolute paths as post-login targets."""
    next_path = (raw_next or "").strip()
    if not next_path:
        return home_path
    if "\\" in next_path:
        return home_path
    parsed = urlsplit(next_path)
    if parsed.scheme or parsed.netloc:
        return home_path
    if not next_path.startswith("/") or next_path.startswith("//"):
        return home_path
    return next_path


def new_csrf_token() -> str:
    return secrets.token_urlsafe(32)


def csrf_matches(cookie_token: str, provided_token: str) -> bool:
    cookie = (cookie_token or "").strip()
    provided = (provided_token or "").strip()
    return bool(cookie and provided and hmac.compare_digest(cookie, provided))
