"""Pydantic configuration models for relay pools and signing keys.

The coordinators take explicit arguments and never read the environment;
these models are how the CLI (or an embedding application) assembles those
arguments from YAML files and environment variables.

Environment Variables:
    - ``NOSTR_RELAYS``: Relay URLs separated by commas and/or whitespace.
    - ``NOSTR_NSEC``: Secret key as ``nsec1...`` or 64 hex characters.
    - ``NOSTR_NSEC_FILE``: Path to a file holding the secret key, used
      when ``NOSTR_NSEC`` is unset.

Example YAML Configuration:
    pool:
      relays:
        - wss://relay.damus.io
        - wss://nos.lol
      timeout_ms: 8000
      open_timeout: 5.0
      proxy_url: "socks5://127.0.0.1:9050"
      verify: true
    log_level: DEBUG

Security Note:
    Secret keys should never be stored in configuration files. Use
    environment variables or a file readable only by the current user.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator
from rfc3986 import uri_reference
from rfc3986.exceptions import UnpermittedComponentError, ValidationError
from rfc3986.validators import Validator

from relaypool.core.exceptions import ConfigurationError
from relaypool.core.yaml import load_yaml
from relaypool.utils.keys import derive_public_key, secret_key_from_input


ENV_RELAYS = "NOSTR_RELAYS"
ENV_SECRET_KEY = "NOSTR_NSEC"  # pragma: allowlist secret
ENV_SECRET_KEY_FILE = "NOSTR_NSEC_FILE"  # pragma: allowlist secret

_RELAY_SEPARATORS = re.compile(r"[,\s]+")


def normalize_relay_url(raw: str) -> str:
    """Validate a ``ws://`` or ``wss://`` URL and return its normalized form.

    Normalization lowercases the scheme and host and strips a trailing
    slash from the path.

    Raises:
        ValueError: If the URL is not an absolute WebSocket URL, or has a
            query string or fragment.
    """
    uri = uri_reference(raw.strip()).normalize()
    validator = (
        Validator()
        .require_presence_of("scheme", "host")
        .allow_schemes("ws", "wss")
        .check_validity_of("scheme", "host", "port", "path")
    )
    try:
        validator.validate(uri)
    except UnpermittedComponentError:
        raise ValueError(f"Invalid scheme in {raw!r}: must be ws or wss") from None
    except ValidationError as e:
        raise ValueError(f"Invalid relay URL {raw!r}: {e}") from None

    if uri.query or uri.fragment:
        raise ValueError(f"Relay URL must not contain a query or fragment: {raw!r}")

    path = (uri.path or "").rstrip("/")
    port = f":{uri.port}" if uri.port else ""
    return f"{uri.scheme}://{uri.host}{port}{path}"


def split_relays(value: str) -> list[str]:
    """Split a comma/whitespace separated relay list, dropping empty items."""
    return [item for item in _RELAY_SEPARATORS.split(value.strip()) if item]


def load_relays_from_env(env_var: str = ENV_RELAYS) -> list[str]:
    """Read and normalize the relay list from *env_var*.

    Raises:
        ConfigurationError: If the variable is unset, empty, or holds an
            invalid URL.
    """
    raw = os.getenv(env_var, "")
    relays = split_relays(raw)
    if not relays:
        raise ConfigurationError(
            f"{env_var} is not set. Export e.g. "
            f'{env_var}="wss://relay.damus.io,wss://nos.lol"'
        )
    try:
        return list(dict.fromkeys(normalize_relay_url(url) for url in relays))
    except ValueError as e:
        raise ConfigurationError(str(e)) from e


def load_secret_key_from_env(
    env_var: str = ENV_SECRET_KEY,
    file_env_var: str = ENV_SECRET_KEY_FILE,
) -> str:
    """Return the raw secret key from *env_var*, falling back to the file named by *file_env_var*.

    Raises:
        ConfigurationError: If neither variable yields a value, or the
            file cannot be read.
    """
    value = os.getenv(env_var, "").strip()
    if value:
        return value

    path = os.getenv(file_env_var, "").strip()
    if path:
        try:
            value = Path(path).read_text(encoding="utf-8").strip()
        except OSError as e:
            raise ConfigurationError(f"cannot read {file_env_var}={path}: {e}") from e
        if value:
            return value

    raise ConfigurationError(
        f"{env_var} is not set. Export an nsec1... or hex secret key, "
        f"or point {file_env_var} at a file containing one"
    )


class PoolConfig(BaseModel):
    """Relay set and fan-out tuning.

    Attributes:
        relays: Normalized relay URLs, duplicates removed. A single string
            is split on commas and whitespace.
        timeout_ms: Overall deadline for one read or write.
        open_timeout: Seconds allowed for each WebSocket handshake.
        proxy_url: SOCKS5 proxy for overlay relays. Format: "socks5://host:port"
        verify: Drop events whose id or signature does not verify.
    """

    relays: list[str] = Field(
        default_factory=list,
        description="Relay URLs (ws:// or wss://)",
    )
    timeout_ms: int = Field(
        default=10_000,
        gt=0,
        description="Overall deadline for one read or write, in milliseconds",
    )
    open_timeout: float = Field(
        default=10.0,
        gt=0,
        le=120.0,
        description="WebSocket handshake timeout in seconds",
    )
    proxy_url: str | None = Field(
        default=None,
        description="SOCKS5 proxy URL",
    )
    verify: bool = Field(
        default=False,
        description="Verify event ids and signatures on read",
    )

    @field_validator("relays", mode="before")
    @classmethod
    def _split_relay_string(cls, value: Any) -> Any:
        if isinstance(value, str):
            return split_relays(value)
        return value

    @field_validator("relays")
    @classmethod
    def _normalize_relays(cls, value: list[str]) -> list[str]:
        return list(dict.fromkeys(normalize_relay_url(url) for url in value))


class KeysConfig(BaseModel):
    """Signing key loaded from the environment.

    When ``secret_key`` is not given explicitly it is read from
    ``NOSTR_NSEC`` (or the file named by ``NOSTR_NSEC_FILE``). Either
    ``nsec1...`` or hex input is accepted; the stored value is hex.

    Raises:
        ConfigurationError: If no key is provided and none is found in
            the environment.
        pydantic.ValidationError: If the key is malformed.

    Example:
        >>> os.environ["NOSTR_NSEC"] = "nsec1..."  # pragma: allowlist secret
        >>> config = KeysConfig()
        >>> config.public_key
        '3bf0c63f...'
    """

    secret_key: str = Field(
        repr=False,
        description="Secret key as hex (loaded from NOSTR_NSEC when omitted)",
    )

    @model_validator(mode="before")
    @classmethod
    def _load_secret_from_env(cls, data: Any) -> Any:
        if isinstance(data, dict) and "secret_key" not in data:
            data = {**data, "secret_key": load_secret_key_from_env()}
        return data

    @field_validator("secret_key")
    @classmethod
    def _normalize_secret(cls, value: str) -> str:
        return secret_key_from_input(value)

    @property
    def public_key(self) -> str:
        return derive_public_key(self.secret_key)


class ClientConfig(BaseModel):
    """Top-level configuration file model.

    Keys are deliberately absent: they only come from the environment.
    """

    pool: PoolConfig = Field(default_factory=PoolConfig)
    log_level: str = Field(
        default="INFO",
        pattern=r"^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Root log level",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: Any) -> Any:
        return value.upper() if isinstance(value, str) else value

    @classmethod
    def from_yaml(cls, config_path: str | Path) -> ClientConfig:
        """Load and validate a YAML configuration file.

        Raises:
            FileNotFoundError: If the file does not exist.
            ConfigurationError: If the YAML is invalid.
            pydantic.ValidationError: If a value fails validation.
        """
        return cls.model_validate(load_yaml(config_path))
