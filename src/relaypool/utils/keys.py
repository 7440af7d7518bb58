"""Identity and signing for Nostr events.

Secret keys are 32-byte secp256k1 scalars handled as 64-char lowercase hex;
public keys are the 32-byte x-only form (BIP-340). Curve operations are
delegated to ``nostr_sdk.Keys``; the event id is computed here from the
canonical NIP-01 serialization so that the id of a draft never depends on
how the signing backend orders or escapes fields.

Example:
    >>> secret = secret_key_from_input(os.environ["NOSTR_NSEC"])
    >>> event = sign_event(EventDraft(kind=1, content="hello"), secret)
    >>> verify_event(event)
    True
"""

from __future__ import annotations

import hashlib
import json
import time
from collections.abc import Iterable, Sequence

from nostr_sdk import Event as SdkEvent
from nostr_sdk import Keys

from relaypool.core.exceptions import InvalidKeyError
from relaypool.core.logger import Logger
from relaypool.models import Event, EventDraft
from relaypool.models._validation import is_hex

from .nip19 import resolve


logger = Logger("utils.keys")


def _parse_keys(secret_hex: str | bytes) -> Keys:
    if isinstance(secret_hex, bytes | bytearray):
        if len(secret_hex) != 32:
            raise InvalidKeyError("secret key must be 32 bytes")
        secret_hex = bytes(secret_hex).hex()
    if not isinstance(secret_hex, str) or not is_hex(secret_hex.lower(), 64):
        raise InvalidKeyError("secret key must be 64 hex characters")
    try:
        return Keys.parse(secret_hex.lower())
    except Exception as e:
        # nostr_sdk rejects zero and out-of-range scalars
        raise InvalidKeyError(f"invalid secret key: {e}") from e


def secret_key_from_input(value: str) -> str:
    """Normalize a user-supplied secret key (``nsec1...`` or hex) to hex.

    Raises:
        InvalidKeyError: If the value is empty, not decodable, or not a
            valid secp256k1 scalar.
    """
    value = value.strip() if isinstance(value, str) else ""
    if not value:
        raise InvalidKeyError("secret key is empty")
    try:
        secret_hex = resolve(value)
    except ValueError as e:
        raise InvalidKeyError(f"invalid secret key encoding: {e}") from e
    _parse_keys(secret_hex)
    return secret_hex.lower()


def generate_secret_key() -> str:
    """Return a fresh random secret key as hex."""
    return Keys.generate().secret_key().to_hex()


def derive_public_key(secret_hex: str | bytes) -> str:
    """Return the x-only public key for *secret_hex*.

    Raises:
        InvalidKeyError: If *secret_hex* is not a valid secret key.
    """
    return _parse_keys(secret_hex).public_key().to_hex()


def serialize_for_id(
    pubkey: str,
    created_at: int,
    kind: int,
    tags: Iterable[Sequence[str]],
    content: str,
) -> bytes:
    """Canonical NIP-01 serialization: ``[0,pubkey,created_at,kind,tags,content]``."""
    payload = [0, pubkey, created_at, kind, [list(tag) for tag in tags], content]
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def compute_event_id(
    pubkey: str,
    created_at: int,
    kind: int,
    tags: Iterable[Sequence[str]],
    content: str,
) -> str:
    """Return the lowercase hex SHA-256 of the canonical serialization.

    Deterministic: the same fields always hash to the same id, and tag
    order is part of the input.
    """
    return hashlib.sha256(serialize_for_id(pubkey, created_at, kind, tags, content)).hexdigest()


def sign_event(draft: EventDraft, secret_hex: str | bytes) -> Event:
    """Complete *draft* into a signed [Event][relaypool.models.event.Event].

    Fills ``pubkey`` from the secret key, ``created_at`` from the clock when
    the draft leaves it unset, ``id`` from
    [compute_event_id()][relaypool.utils.keys.compute_event_id], and ``sig``
    with a BIP-340 Schnorr signature over the id bytes.

    Raises:
        InvalidKeyError: If *secret_hex* is not a valid secret key.
    """
    keys = _parse_keys(secret_hex)
    pubkey = keys.public_key().to_hex()
    created_at = draft.created_at if draft.created_at is not None else int(time.time())
    event_id = compute_event_id(pubkey, created_at, draft.kind, draft.tags, draft.content)
    sig = keys.sign_schnorr(bytes.fromhex(event_id))

    event = Event(
        id=event_id,
        pubkey=pubkey,
        created_at=created_at,
        kind=draft.kind,
        tags=draft.tags,
        content=draft.content,
        sig=sig,
    )
    logger.debug("event_signed", id=event_id, kind=draft.kind)
    return event


def verify_event(event: Event) -> bool:
    """Return True if *event*'s id matches its fields and its signature is valid.

    Never raises.
    """
    expected = compute_event_id(
        event.pubkey, event.created_at, event.kind, event.tags, event.content
    )
    if expected != event.id:
        return False
    try:
        return bool(SdkEvent.from_json(event.to_json()).verify())
    except Exception as e:
        logger.debug("event_verify_failed", id=event.id, error=str(e))
        return False
