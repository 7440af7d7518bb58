"""Event draft builders for the event kinds the CLI publishes.

Standalone functions returning unsigned
[EventDraft][relaypool.models.event.EventDraft] values; sign them with
[sign_event()][relaypool.utils.keys.sign_event]. Every id or pubkey
argument may be given in any form [resolve()][relaypool.utils.nip19.resolve]
understands (hex, ``note1``, ``nevent1``, ``npub1``, ``nprofile1``).

See Also:
    [relaypool.__main__][relaypool.__main__]: The ``post``, ``react`` and
        ``repost`` commands that fetch targets and publish these drafts.
"""

from __future__ import annotations

from collections.abc import Iterable

from relaypool.models import Event, EventDraft, EventKind
from relaypool.utils.nip19 import encode_nevent, resolve


# =============================================================================
# Kind 1 (NIP-01, NIP-10, NIP-18)
# =============================================================================


def _reply_tags(reply_to: Event | str) -> list[list[str]]:
    if isinstance(reply_to, str):
        # target not fetched: treat it as the thread root
        target_id = resolve(reply_to)
        return [["e", target_id, "", "root"], ["e", target_id, "", "reply"]]

    root_id = next(
        (tag[1] for tag in reply_to.tags if len(tag) >= 4 and tag[0] == "e" and tag[3] == "root"),
        reply_to.id,
    )
    return [
        ["e", root_id, "", "root"],
        ["e", reply_to.id, "", "reply"],
        ["p", reply_to.pubkey],
    ]


def build_text_note(
    content: str,
    *,
    reply_to: Event | str | None = None,
    quote: str | None = None,
    mentions: Iterable[str] = (),
) -> EventDraft:
    """Build a Kind 1 text note.

    Args:
        content: Note text.
        reply_to: The event being replied to. A fetched
            [Event][relaypool.models.event.Event] keeps its thread root and
            tags its author; a bare id is tagged as both root and reply.
        quote: Event id to quote with a ``q`` tag and a ``nostr:nevent1...``
            reference appended to the content.
        mentions: Pubkeys to tag with ``p``.

    Raises:
        ValueError: If the note would have no content.
    """
    tags: list[list[str]] = []
    if reply_to is not None:
        tags.extend(_reply_tags(reply_to))

    if quote is not None:
        quote_id = resolve(quote)
        tags.append(["q", quote_id])
        reference = f"nostr:{encode_nevent(quote_id)}"
        content = f"{content}\n{reference}" if content else reference

    tags.extend(["p", resolve(pubkey)] for pubkey in mentions)

    if not content:
        raise ValueError("text note content is empty")
    return EventDraft(kind=EventKind.TEXT_NOTE, content=content, tags=tags)


# =============================================================================
# Kind 7 (NIP-25)
# =============================================================================


def build_reaction(target_id: str, target_author: str, emoji: str = "+") -> EventDraft:
    """Build a Kind 7 reaction to an event."""
    return EventDraft(
        kind=EventKind.REACTION,
        content=emoji,
        tags=[["e", resolve(target_id)], ["p", resolve(target_author)]],
    )


# =============================================================================
# Kind 6 (NIP-18)
# =============================================================================


def build_repost(target: Event, relay_hint: str = "") -> EventDraft:
    """Build a Kind 6 repost embedding the target event as JSON."""
    return EventDraft(
        kind=EventKind.REPOST,
        content=target.to_json(),
        tags=[["e", target.id, relay_hint], ["p", target.pubkey]],
    )


# =============================================================================
# Kind 3 (NIP-02)
# =============================================================================


def build_follow_list(pubkeys: Iterable[str], *, current: Event | None = None) -> EventDraft:
    """Build a Kind 3 follow list that follows exactly *pubkeys*.

    When *current* (the author's latest follow list) is given, its non-``p``
    tags and content are carried over, and the relay hint and petname of
    every pubkey that stays followed are preserved.
    """
    previous: dict[str, list[str]] = {}
    other_tags: list[list[str]] = []
    content = ""
    if current is not None:
        content = current.content
        for tag in current.tags:
            if tag and tag[0] == "p" and len(tag) >= 2:
                previous.setdefault(tag[1], list(tag))
            else:
                other_tags.append(list(tag))

    wanted = dict.fromkeys(resolve(p) for p in pubkeys)
    follows = [previous.get(pubkey, ["p", pubkey]) for pubkey in wanted]
    return EventDraft(kind=EventKind.CONTACTS, content=content, tags=[*other_tags, *follows])
