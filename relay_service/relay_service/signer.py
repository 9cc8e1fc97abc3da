"""HMAC-SHA256 signing of canonical payloads.

The signed message is ``"<timestamp>.<body_hash>"``. Binding the timestamp
into the signature means a captured request cannot be replayed under a fresh
timestamp; the receiver recomputes the hash and signature and rejects stale
timestamps.
"""

import base64
import hashlib
import hmac
from datetime import datetime, timedelta, timezone
from typing import Optional

from pydantic import SecretStr

from .schemas import SignedEnvelope

DEFAULT_MAX_SKEW = timedelta(minutes=5)


def _b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def _key_bytes(signing_key: SecretStr | str) -> bytes:
    if isinstance(signing_key, SecretStr):
        signing_key = signing_key.get_secret_value()
    return signing_key.encode("utf-8")


def format_timestamp(moment: datetime) -> str:
    """Render a moment as UTC ISO-8601 with milliseconds, e.g. 2025-04-30T12:00:00.000Z."""
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def body_hash(body: bytes) -> str:
    """Base64 SHA-256 digest of the body."""
    return _b64(hashlib.sha256(body).digest())


def compute_signature(signing_key: SecretStr | str, timestamp: str, digest: str) -> str:
    """Base64 HMAC-SHA256 of ``timestamp + "." + digest`` under the signing key."""
    message = f"{timestamp}.{digest}".encode("utf-8")
    return _b64(hmac.new(_key_bytes(signing_key), message, hashlib.sha256).digest())


def sign(body: bytes, signing_key: SecretStr | str, now: Optional[datetime] = None) -> SignedEnvelope:
    """Sign a serialized payload.

    Args:
        body: Canonical payload bytes.
        signing_key: Shared secret.
        now: Signing instant; defaults to the current time.

    Returns:
        SignedEnvelope: Timestamp, digest, signature and the unchanged body.
    """
    timestamp = format_timestamp(now or datetime.now(timezone.utc))
    digest = body_hash(body)
    return SignedEnvelope(
        timestamp=timestamp,
        body_hash=digest,
        signature=compute_signature(signing_key, timestamp, digest),
        body=body,
    )


def verify(
    body: bytes,
    timestamp: str,
    digest: str,
    signature: str,
    signing_key: SecretStr | str,
    max_skew: timedelta = DEFAULT_MAX_SKEW,
    now: Optional[datetime] = None,
) -> bool:
    """Check a signed request the way the receiving side does.

    Returns:
        bool: True only if the digest matches the body, the signature matches
        the timestamp and digest, and the timestamp is within ``max_skew`` of now.
    """
    try:
        signed_at = datetime.fromisoformat(timestamp.replace("Z", "+00:00"))
    except ValueError:
        return False
    if signed_at.tzinfo is None:
        return False

    current = now or datetime.now(timezone.utc)
    if abs(current - signed_at) > max_skew:
        return False

    if not hmac.compare_digest(body_hash(body).encode("utf-8"), digest.encode("utf-8")):
        return False
    return hmac.compare_digest(
        compute_signature(signing_key, timestamp, digest).encode("utf-8"), signature.encode("utf-8")
    )
