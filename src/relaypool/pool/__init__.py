"""
Fan-out coordinators and their configuration.

- read: Query many relays, merge and deduplicate events
- write: Publish one event to many relays and bucket the verdicts
- PoolConfig, KeysConfig, ClientConfig: Pydantic configuration models

Example:
    from relaypool.pool import read, write
    from relaypool.models import Filter

    events = await read(relays, [Filter(kinds=(1,), limit=20)])
    result = await write(relays, signed_event)
"""

from .config import (
    ClientConfig,
    KeysConfig,
    PoolConfig,
    load_relays_from_env,
    load_secret_key_from_env,
    normalize_relay_url,
)
from .read import new_subscription_id, read
from .write import write


__all__ = [
    "ClientConfig",
    "KeysConfig",
    "PoolConfig",
    "load_relays_from_env",
    "load_secret_key_from_env",
    "new_subscription_id",
    "normalize_relay_url",
    "read",
    "write",
]
