"""relaypool utility layer.

Protocol-level helpers that sit between the pure models and the fan-out
coordinators.

Exported utilities:
    - derive_public_key, compute_event_id, sign_event, verify_event:
      identity and signing
    - secret_key_from_input, generate_secret_key: secret key handling
    - bech32_encode, bech32_decode: raw bech32 codec
    - encode_npub, encode_nsec, encode_note, encode_nevent, encode_nprofile,
      encode_tlv, decode_tlv, resolve: NIP-19 identifiers
    - RelayConnection: aiohttp WebSocket to one relay

Example:
    >>> from relaypool.utils import resolve, encode_note
    >>> resolve(encode_note(event_id)) == event_id
    True
"""

from .bech32 import bech32_decode, bech32_encode
from .keys import (
    compute_event_id,
    derive_public_key,
    generate_secret_key,
    secret_key_from_input,
    sign_event,
    verify_event,
)
from .nip19 import (
    TlvEntry,
    decode_nevent,
    decode_tlv,
    encode_nevent,
    encode_note,
    encode_nprofile,
    encode_npub,
    encode_nsec,
    encode_tlv,
    resolve,
)
from .transport import ConnectionFactory, RelayConnection


__all__ = [
    "ConnectionFactory",
    "RelayConnection",
    "TlvEntry",
    "bech32_decode",
    "bech32_encode",
    "compute_event_id",
    "decode_nevent",
    "decode_tlv",
    "derive_public_key",
    "encode_nevent",
    "encode_note",
    "encode_nprofile",
    "encode_npub",
    "encode_nsec",
    "encode_tlv",
    "generate_secret_key",
    "resolve",
    "secret_key_from_input",
    "sign_event",
    "verify_event",
]
