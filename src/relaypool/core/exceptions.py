"""relaypool exception hierarchy.

Typed exceptions for the error categories the toolkit distinguishes.
Programmer and configuration errors (bad keys, bad tokens, bad config)
propagate to the caller; relay-level failures are folded into the fan-out
results by [read()][relaypool.pool.read.read] and
[write()][relaypool.pool.write.write] and never escape them.

Exception hierarchy:

```text
RelayPoolError (base -- never raised directly)
├── ConfigurationError       -- invalid YAML, missing env vars, bad relay URLs
├── InvalidKeyError          -- malformed secret or public key (also ValueError)
├── InvalidEncodingError     -- malformed bech32 token (also ValueError)
└── ConnectivityError        -- relay unreachable, network failures
    └── RelayConnectionError -- a single relay could not be opened or used
```

See Also:
    [RelayConnection][relaypool.utils.transport.RelayConnection]: Raises
        [RelayConnectionError][relaypool.core.exceptions.RelayConnectionError]
        when a socket cannot be opened.
    [resolve()][relaypool.utils.nip19.resolve]: Raises
        [InvalidEncodingError][relaypool.core.exceptions.InvalidEncodingError]
        only on invalid bech32 symbols.
"""

from __future__ import annotations


class RelayPoolError(Exception):
    """Base exception for all relaypool errors.

    Never raised directly -- always use a specific subclass.
    """


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


class ConfigurationError(RelayPoolError):
    """Invalid or missing configuration (YAML, env vars, CLI flags)."""


# ---------------------------------------------------------------------------
# Identity and encoding
# ---------------------------------------------------------------------------


class InvalidKeyError(RelayPoolError, ValueError):
    """Secret or public key material is malformed.

    Raised synchronously by the signing helpers in
    [relaypool.utils.keys][relaypool.utils.keys]. These are configuration
    errors, not transient network conditions, so they are never swallowed.
    """


class InvalidEncodingError(RelayPoolError, ValueError):
    """A bech32 token contains invalid symbols or fails its checksum."""


# ---------------------------------------------------------------------------
# Connectivity
# ---------------------------------------------------------------------------


class ConnectivityError(RelayPoolError):
    """Base for all relay/network connectivity errors."""


class RelayConnectionError(ConnectivityError):
    """A relay WebSocket could not be opened, written to, or was lost.

    Attributes:
        url: The relay URL the failure refers to.
        reason: The failure description without the URL prefix.
    """

    def __init__(self, url: str, message: str) -> None:
        super().__init__(f"{url}: {message}")
        self.url = url
        self.reason = message
