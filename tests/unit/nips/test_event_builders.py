"""Unit tests for nips.event_builders module.

Covers Kind 1 notes (replies, quotes, mentions), Kind 7 reactions, Kind 6
reposts and Kind 3 follow lists.
"""

import json
from collections.abc import Callable

import pytest

from relaypool.models import Event, EventKind
from relaypool.nips.event_builders import (
    build_follow_list,
    build_reaction,
    build_repost,
    build_text_note,
)
from relaypool.utils.nip19 import decode_nevent, encode_note, encode_npub


ALICE = "a1" * 32
BOB = "b0" * 32
ROOT_ID = "0f" * 32


class TestBuildTextNote:
    """Kind 1 notes with reply, quote and mention tags."""

    def test_plain(self) -> None:
        draft = build_text_note("gm")
        assert draft.kind == EventKind.TEXT_NOTE
        assert draft.content == "gm"
        assert draft.tags == ()

    def test_empty_content(self) -> None:
        with pytest.raises(ValueError, match="empty"):
            build_text_note("")

    def test_reply_to_bare_id(self) -> None:
        draft = build_text_note("yes", reply_to=encode_note(ROOT_ID))
        assert draft.tags == (
            ("e", ROOT_ID, "", "root"),
            ("e", ROOT_ID, "", "reply"),
        )

    def test_reply_to_top_level_event(self, event_factory: Callable[..., Event]) -> None:
        parent = event_factory(1)
        draft = build_text_note("yes", reply_to=parent)
        assert draft.tags == (
            ("e", parent.id, "", "root"),
            ("e", parent.id, "", "reply"),
            ("p", parent.pubkey),
        )

    def test_reply_keeps_thread_root(self, event_factory: Callable[..., Event]) -> None:
        parent = event_factory(2, tags=[["e", ROOT_ID, "", "root"], ["p", ALICE]])
        draft = build_text_note("deeper", reply_to=parent)
        assert draft.tags[0] == ("e", ROOT_ID, "", "root")
        assert draft.tags[1] == ("e", parent.id, "", "reply")

    def test_quote(self) -> None:
        draft = build_text_note("look", quote=ROOT_ID)

        assert ("q", ROOT_ID) in draft.tags
        text, reference = draft.content.split("\n")
        assert text == "look"
        assert reference.startswith("nostr:nevent1")
        assert decode_nevent(reference.removeprefix("nostr:"))[0] == ROOT_ID

    def test_quote_only(self) -> None:
        draft = build_text_note("", quote=ROOT_ID)
        assert draft.content.startswith("nostr:nevent1")

    def test_mentions(self) -> None:
        draft = build_text_note("hi", mentions=[encode_npub(ALICE), BOB])
        assert draft.tags == (("p", ALICE), ("p", BOB))


class TestBuildReaction:
    """Kind 7 reactions."""

    def test_default_like(self) -> None:
        draft = build_reaction(ROOT_ID, ALICE)
        assert draft.kind == EventKind.REACTION
        assert draft.content == "+"
        assert draft.tags == (("e", ROOT_ID), ("p", ALICE))

    def test_custom_emoji_and_bech32_input(self) -> None:
        draft = build_reaction(encode_note(ROOT_ID), encode_npub(ALICE), "🤙")
        assert draft.content == "🤙"
        assert draft.tags == (("e", ROOT_ID), ("p", ALICE))


class TestBuildRepost:
    """Kind 6 reposts."""

    def test_embeds_target(self, event_factory: Callable[..., Event]) -> None:
        target = event_factory(3)
        draft = build_repost(target, "wss://nos.lol")

        assert draft.kind == EventKind.REPOST
        assert json.loads(draft.content) == target.to_dict()
        assert draft.tags == (("e", target.id, "wss://nos.lol"), ("p", target.pubkey))

    def test_empty_relay_hint(self, event_factory: Callable[..., Event]) -> None:
        target = event_factory(3)
        assert build_repost(target).tags[0] == ("e", target.id, "")


class TestBuildFollowList:
    """Kind 3 follow lists."""

    def test_fresh(self) -> None:
        draft = build_follow_list([ALICE, encode_npub(BOB), ALICE])
        assert draft.kind == EventKind.CONTACTS
        assert draft.content == ""
        assert draft.tags == (("p", ALICE), ("p", BOB))

    def test_preserves_hints_and_other_tags(self, event_factory: Callable[..., Event]) -> None:
        current = event_factory(
            4,
            kind=3,
            content='{"wss://nos.lol": {"read": true}}',
            tags=[["p", ALICE, "wss://nos.lol", "alice"], ["t", "nostr"], ["p", BOB]],
        )

        draft = build_follow_list([ALICE, "cc" * 32], current=current)

        assert draft.content == current.content
        assert draft.tags == (
            ("t", "nostr"),
            ("p", ALICE, "wss://nos.lol", "alice"),
            ("p", "cc" * 32),
        )

    def test_unfollow_everyone(self, event_factory: Callable[..., Event]) -> None:
        current = event_factory(4, kind=3, tags=[["p", ALICE]])
        assert build_follow_list([], current=current).tags == ()
