"""
Subscription filter (NIP-01 ``REQ`` query descriptor).

A read operation carries one or more filters; relays return the union of
their matches. Only the fields that are set are emitted on the wire, so an
empty ``Filter()`` serializes to ``{}``.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from ._validation import validate_kind, validate_timestamp


def _str_tuple(values: Iterable[str] | None, name: str) -> tuple[str, ...] | None:
    if values is None:
        return None
    if isinstance(values, str):
        raise TypeError(f"{name} must be a sequence of str, not a str")
    result = tuple(values)
    for v in result:
        if not isinstance(v, str):
            raise TypeError(f"{name} values must be str, got {type(v).__name__}")
    return result


@dataclass(frozen=True, slots=True)
class Filter:
    """Immutable query descriptor.

    Attributes:
        ids: Event ids (hex) to match.
        authors: Author pubkeys (hex) to match.
        kinds: Event kinds to match.
        tags: Mapping of single-letter tag name to accepted values; emitted
            as ``"#e"``, ``"#p"``, ... on the wire.
        since: Lower bound on ``created_at`` (inclusive).
        until: Upper bound on ``created_at`` (inclusive).
        limit: Maximum number of stored events a relay should return.
        search: Free-text query (NIP-50; only honoured by some relays).

    Examples:
        ```python
        Filter(kinds=(1,), authors=(pubkey,), limit=20).to_dict()
        # {'authors': ['...'], 'kinds': [1], 'limit': 20}

        Filter(tags={"e": [event_id]}, kinds=(7,)).to_dict()
        # {'kinds': [7], '#e': ['...']}
        ```
    """

    ids: tuple[str, ...] | None = None
    authors: tuple[str, ...] | None = None
    kinds: tuple[int, ...] | None = None
    tags: Mapping[str, tuple[str, ...]] = field(default_factory=dict)
    since: int | None = None
    until: int | None = None
    limit: int | None = None
    search: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "ids", _str_tuple(self.ids, "ids"))
        object.__setattr__(self, "authors", _str_tuple(self.authors, "authors"))

        if self.kinds is not None:
            kinds = tuple(self.kinds)
            for kind in kinds:
                validate_kind(kind, "kinds")
            object.__setattr__(self, "kinds", kinds)

        frozen_tags: dict[str, tuple[str, ...]] = {}
        for name, values in dict(self.tags).items():
            letter = name[1:] if name.startswith("#") else name
            if len(letter) != 1:
                raise ValueError(f"tag filter names must be a single letter, got {name!r}")
            frozen_tags[letter] = _str_tuple(values, f"#{letter}") or ()
        object.__setattr__(self, "tags", MappingProxyType(frozen_tags))

        for name in ("since", "until", "limit"):
            value = getattr(self, name)
            if value is not None:
                validate_timestamp(value, name)

        if self.search is not None and not isinstance(self.search, str):
            raise TypeError(f"search must be a str, got {type(self.search).__name__}")

    def __hash__(self) -> int:
        return hash(
            (
                self.ids,
                self.authors,
                self.kinds,
                tuple(sorted(self.tags.items())),
                self.since,
                self.until,
                self.limit,
                self.search,
            )
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Filter:
        """Parse a JSON filter object; unknown keys are ignored.

        Raises:
            TypeError: If ``data`` is not a mapping or a value has the wrong type.
            ValueError: If a value is out of range.
        """
        if not isinstance(data, Mapping):
            raise TypeError(f"filter must be a JSON object, got {type(data).__name__}")
        tags = {k[1:]: v for k, v in data.items() if k.startswith("#")}
        return cls(
            ids=data.get("ids"),
            authors=data.get("authors"),
            kinds=data.get("kinds"),
            tags=tags,
            since=data.get("since"),
            until=data.get("until"),
            limit=data.get("limit"),
            search=data.get("search"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Return the wire representation containing only the set fields."""
        result: dict[str, Any] = {}
        if self.ids is not None:
            result["ids"] = list(self.ids)
        if self.authors is not None:
            result["authors"] = list(self.authors)
        if self.kinds is not None:
            result["kinds"] = list(self.kinds)
        for letter, values in self.tags.items():
            result[f"#{letter}"] = list(values)
        if self.since is not None:
            result["since"] = self.since
        if self.until is not None:
            result["until"] = self.until
        if self.limit is not None:
            result["limit"] = self.limit
        if self.search is not None:
            result["search"] = self.search
        return result
