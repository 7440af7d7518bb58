"""
Immutable Nostr event and unsigned event draft.

[Event][relaypool.models.event.Event] is the signed, content-addressed
record that travels over the wire. [EventDraft][relaypool.models.event.EventDraft]
holds the caller-chosen fields before signing; the signing helpers in
[relaypool.utils.keys][relaypool.utils.keys] turn a draft into an event by
filling ``pubkey``, ``id`` and ``sig``.

Both classes validate eagerly in ``__post_init__`` and store ``tags`` as a
tuple of tuples, so a constructed instance cannot be mutated and its tag
order is exactly the order it was given.

See Also:
    [compute_event_id()][relaypool.utils.keys.compute_event_id]: The
        canonical serialization that binds ``id`` to the other fields.
    [EventMessage][relaypool.models.frames.EventMessage]: Inbound frame that
        carries an [Event][relaypool.models.event.Event].
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from ._validation import (
    freeze_tags,
    validate_hex,
    validate_instance,
    validate_kind,
    validate_timestamp,
)


Tags = tuple[tuple[str, ...], ...]

_REQUIRED_FIELDS = ("id", "pubkey", "created_at", "kind", "tags", "content", "sig")


@dataclass(frozen=True, slots=True)
class Event:
    """Immutable signed Nostr event (NIP-01).

    Attributes:
        id: SHA-256 of the canonical serialization, 64 lowercase hex chars.
        pubkey: Author x-only public key, 64 lowercase hex chars.
        created_at: Unix timestamp in seconds.
        kind: Non-negative event kind.
        tags: Ordered tags; each tag is an ordered tuple of strings.
        content: Arbitrary string payload.
        sig: BIP-340 Schnorr signature over ``id``, 128 lowercase hex chars.

    Raises:
        TypeError: If a field has the wrong type.
        ValueError: If a hex field has the wrong length or alphabet, or a
            numeric field is out of range.

    Note:
        Construction checks field shapes only. Use
        [verify_event()][relaypool.utils.keys.verify_event] to check that
        ``id`` and ``sig`` actually match the other fields.

    Examples:
        ```python
        event = Event.from_dict(json.loads(raw))
        event.kind          # 1
        event.to_dict()     # wire representation, tags as lists
        ```
    """

    id: str
    pubkey: str
    created_at: int
    kind: int
    tags: Tags = field(default=())
    content: str = ""
    sig: str = ""

    def __post_init__(self) -> None:
        validate_hex(self.id, 64, "id")
        validate_hex(self.pubkey, 64, "pubkey")
        validate_timestamp(self.created_at, "created_at")
        validate_kind(self.kind)
        object.__setattr__(self, "kind", int(self.kind))
        validate_instance(self.content, str, "content")
        validate_hex(self.sig, 128, "sig")
        object.__setattr__(self, "tags", freeze_tags(self.tags))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Event:
        """Build an event from its wire (JSON object) representation.

        Unknown keys are ignored.

        Raises:
            TypeError: If ``data`` is not a mapping or a field has the wrong type.
            ValueError: If a required field is missing or malformed.
        """
        validate_instance(data, Mapping, "event")
        missing = [name for name in _REQUIRED_FIELDS if name not in data]
        if missing:
            raise ValueError(f"event is missing fields: {', '.join(missing)}")
        return cls(
            id=data["id"],
            pubkey=data["pubkey"],
            created_at=data["created_at"],
            kind=data["kind"],
            tags=data["tags"],
            content=data["content"],
            sig=data["sig"],
        )

    def to_dict(self) -> dict[str, Any]:
        """Return the wire representation with tags as nested lists."""
        return {
            "id": self.id,
            "pubkey": self.pubkey,
            "created_at": self.created_at,
            "kind": self.kind,
            "tags": [list(tag) for tag in self.tags],
            "content": self.content,
            "sig": self.sig,
        }

    def to_json(self) -> str:
        """Return the compact JSON wire representation."""
        return json.dumps(self.to_dict(), separators=(",", ":"), ensure_ascii=False)


@dataclass(frozen=True, slots=True)
class EventDraft:
    """Unsigned event fields chosen by the caller.

    ``pubkey`` is not part of a draft: it is always derived from the
    signing key. When ``created_at`` is ``None`` the signer uses the
    current time.
    """

    kind: int
    content: str = ""
    tags: Tags = field(default=())
    created_at: int | None = None

    def __post_init__(self) -> None:
        validate_kind(self.kind)
        object.__setattr__(self, "kind", int(self.kind))
        validate_instance(self.content, str, "content")
        if self.created_at is not None:
            validate_timestamp(self.created_at, "created_at")
        object.__setattr__(self, "tags", freeze_tags(self.tags))
