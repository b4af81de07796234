"""Stripe-style webhook signature verification.

The sender signs ``b"<timestamp>." + raw_body`` with HMAC-SHA256 and sends
``Stripe-Signature: t=<timestamp>,v1=<hex>[,v1=<hex>...]``. Several ``v1``
entries may be present while a secret is being rotated; any one of them
matching is enough.
"""

import hashlib
import hmac
import json
import logging
import time
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from paygate.core.config import Settings, VerificationMode
from paygate.schemas.events import EventEnvelope

logger = logging.getLogger(__name__)

SIGNATURE_SCHEME = "v1"
DEFAULT_TOLERANCE = 300


class WebhookVerificationError(Exception):
    reason = "verification_failed"


class MalformedHeader(WebhookVerificationError):
    reason = "malformed_header"


class SignatureMismatch(WebhookVerificationError):
    reason = "signature_mismatch"


class TimestampStale(WebhookVerificationError):
    reason = "timestamp_stale"


class MalformedPayload(WebhookVerificationError):
    reason = "malformed_payload"


@dataclass(frozen=True)
class SignatureHeader:
    timestamp: int
    signatures: tuple[str, ...]


@dataclass(frozen=True)
class VerifiedEvent:
    id: str
    type: str
    raw_payload: bytes
    created: int | None = None
    livemode: bool = False
    authenticated: bool = True

    def data_object(self) -> dict[str, Any]:
        """Return ``data.object`` from the payload, or an empty dict."""
        data = json.loads(self.raw_payload).get("data")
        obj = data.get("object") if isinstance(data, dict) else None
        return obj if isinstance(obj, dict) else {}


def parse_signature_header(header: str | None) -> SignatureHeader:
    if not header:
        raise MalformedHeader("Missing Stripe-Signature header")

    timestamps: list[str] = []
    signatures: list[str] = []
    for item in header.split(","):
        key, sep, value = item.strip().partition("=")
        if not sep:
            continue
        if key == "t":
            timestamps.append(value)
        elif key == SIGNATURE_SCHEME and value:
            signatures.append(value)

    if len(timestamps) != 1:
        raise MalformedHeader("Stripe-Signature header must carry exactly one t=")
    raw_ts = timestamps[0]
    if not (raw_ts.isascii() and raw_ts.isdigit()):
        raise MalformedHeader("Stripe-Signature timestamp is not numeric")
    try:
        timestamp = int(raw_ts)
    except ValueError:
        raise MalformedHeader("Stripe-Signature timestamp is out of range")
    if not signatures:
        raise MalformedHeader("Stripe-Signature header has no v1 signature")

    return SignatureHeader(timestamp=timestamp, signatures=tuple(signatures))


def _key(secret: bytes | str) -> bytes:
    return secret.encode("utf-8") if isinstance(secret, str) else secret


def compute_signature(payload: bytes, timestamp: int, secret: bytes | str) -> str:
    signed_payload = f"{timestamp}.".encode("utf-8") + payload
    return hmac.new(_key(secret), signed_payload, hashlib.sha256).hexdigest()


def build_signature_header(
    payload: bytes,
    secret: bytes | str,
    timestamp: int | None = None,
    extra_secrets: Iterable[bytes | str] = (),
) -> str:
    """Build a ``Stripe-Signature`` value, one ``v1`` entry per secret."""
    if timestamp is None:
        timestamp = int(time.time())
    parts = [f"t={timestamp}"]
    for s in (secret, *extra_secrets):
        parts.append(f"{SIGNATURE_SCHEME}={compute_signature(payload, timestamp, s)}")
    return ",".join(parts)


def _secrets(secret: bytes | str | Sequence[bytes | str]) -> list[bytes]:
    if isinstance(secret, (bytes, str)):
        return [_key(secret)]
    return [_key(s) for s in secret]


def _decode(payload: bytes, authenticated: bool) -> VerifiedEvent:
    try:
        envelope = EventEnvelope.model_validate_json(payload)
    except ValidationError:
        raise MalformedPayload("Invalid JSON payload")
    return VerifiedEvent(
        id=envelope.id,
        type=envelope.type,
        raw_payload=payload,
        created=envelope.created_at,
        livemode=envelope.livemode is True,
        authenticated=authenticated,
    )


def verify(
    payload: bytes,
    signature_header: str | None,
    secret: bytes | str | Sequence[bytes | str],
    tolerance_seconds: int = DEFAULT_TOLERANCE,
    now: float | None = None,
) -> VerifiedEvent:
    """Authenticate a webhook body and decode its envelope.

    Raises a ``WebhookVerificationError`` subclass on failure. A
    ``tolerance_seconds`` of 0 disables the timestamp check.
    """
    header = parse_signature_header(signature_header)
    keys = _secrets(secret)
    if not keys:
        raise SignatureMismatch("No webhook secret to verify against")

    matched = False
    for key in keys:
        expected = compute_signature(payload, header.timestamp, key).encode("ascii")
        for candidate in header.signatures:
            # compare every entry, no early exit
            matched |= hmac.compare_digest(expected, candidate.encode("utf-8"))
    if not matched:
        raise SignatureMismatch("No signatures found matching the expected signature")

    if tolerance_seconds:
        if now is None:
            now = time.time()
        skew = abs(now - header.timestamp)
        if skew > tolerance_seconds:
            raise TimestampStale(
                f"Timestamp outside tolerance: {int(skew)}s > {tolerance_seconds}s"
            )

    return _decode(payload, authenticated=True)


def parse_unverified(payload: bytes) -> VerifiedEvent:
    return _decode(payload, authenticated=False)


class WebhookVerifier:
    """Process-wide verifier bound to the configured mode and secrets."""

    def __init__(
        self,
        mode: VerificationMode,
        secrets: Sequence[str] = (),
        tolerance_seconds: int = DEFAULT_TOLERANCE,
    ):
        if mode is VerificationMode.ENFORCED and not secrets:
            raise ValueError("Enforced webhook verification needs a secret")
        self.mode = mode
        self._secrets = tuple(secrets)
        self.tolerance_seconds = tolerance_seconds

    @classmethod
    def from_settings(cls, settings: Settings) -> "WebhookVerifier":
        return cls(
            mode=settings.webhook_verification_mode,
            secrets=settings.webhook_secrets,
            tolerance_seconds=settings.webhook_tolerance_seconds,
        )

    def verify(
        self, payload: bytes, signature_header: str | None, now: float | None = None
    ) -> VerifiedEvent:
        if self.mode is VerificationMode.BYPASSED:
            logger.warning("Webhook signature verification BYPASSED for this request")
            return parse_unverified(payload)
        return verify(
            payload,
            signature_header,
            self._secrets,
            tolerance_seconds=self.tolerance_seconds,
            now=now,
        )
