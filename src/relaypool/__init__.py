r"""relaypool -- fan-out reads and writes across many Nostr relays.

One call queries or publishes to a whole relay set concurrently, then merges
the relays' answers: reads return deduplicated events newest first, writes
return which relays accepted and which did not.

Architecture follows a **diamond DAG** dependency structure where imports
flow strictly downward:

```text
               cli             Argument parsing, .env and config loading
              /   \
           pool   nips         Fan-out coordinators, config | event builders
           /  \   /
        core  utils            Logging, exceptions, YAML | keys, NIP-19, transport
           \   /
           models              Pure frozen dataclasses (zero I/O)
```

Attributes:
    models: Events, filters, wire frames and write outcomes. Zero I/O.
    core: Exceptions, structured logging, YAML loading.
    utils: Signing, bech32/NIP-19 identifiers, the relay WebSocket.
    pool: The ``read`` and ``write`` coordinators and their config models.
    nips: Draft builders for notes, reactions, reposts and follow lists.

Note:
    For lightweight usage, import directly from subpackages::

        from relaypool.models import Filter
        from relaypool.pool import read

    Top-level imports (``from relaypool import read``) use lazy loading
    and resolve on first access.
"""

import importlib
from importlib.metadata import version as _get_version


__version__ = _get_version("relaypool")

__all__ = [
    "ClientConfig",
    "Event",
    "EventDraft",
    "Filter",
    "KeysConfig",
    "Logger",
    "PoolConfig",
    "RelayConnection",
    "RelayOutcome",
    "WriteResult",
    "compute_event_id",
    "derive_public_key",
    "read",
    "resolve",
    "sign_event",
    "verify_event",
    "write",
]

_LAZY_IMPORTS: dict[str, tuple[str, str]] = {
    "Logger": ("relaypool.core", "Logger"),
    "Event": ("relaypool.models", "Event"),
    "EventDraft": ("relaypool.models", "EventDraft"),
    "Filter": ("relaypool.models", "Filter"),
    "RelayOutcome": ("relaypool.models", "RelayOutcome"),
    "WriteResult": ("relaypool.models", "WriteResult"),
    "RelayConnection": ("relaypool.utils", "RelayConnection"),
    "compute_event_id": ("relaypool.utils", "compute_event_id"),
    "derive_public_key": ("relaypool.utils", "derive_public_key"),
    "resolve": ("relaypool.utils", "resolve"),
    "sign_event": ("relaypool.utils", "sign_event"),
    "verify_event": ("relaypool.utils", "verify_event"),
    "ClientConfig": ("relaypool.pool", "ClientConfig"),
    "KeysConfig": ("relaypool.pool", "KeysConfig"),
    "PoolConfig": ("relaypool.pool", "PoolConfig"),
    "read": ("relaypool.pool", "read"),
    "write": ("relaypool.pool", "write"),
}


def __getattr__(name: str) -> object:
    if name in _LAZY_IMPORTS:
        module_path, attr_name = _LAZY_IMPORTS[name]
        module = importlib.import_module(module_path)
        value = getattr(module, attr_name)
        globals()[name] = value  # Cache for subsequent access
        return value
    raise AttributeError(f"module 'relaypool' has no attribute {name!r}")


def __dir__() -> list[str]:
    return __all__
