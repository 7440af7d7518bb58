"""Event draft builders for NIP-defined event kinds.

Attributes:
    build_text_note: Kind 1 note with NIP-10 reply and NIP-18 quote tags.
    build_reaction: Kind 7 reaction (NIP-25).
    build_repost: Kind 6 repost (NIP-18).
    build_follow_list: Kind 3 follow list (NIP-02).
"""

from relaypool.nips.event_builders import (
    build_follow_list,
    build_reaction,
    build_repost,
    build_text_note,
)


__all__ = [
    "build_follow_list",
    "build_reaction",
    "build_repost",
    "build_text_note",
]
