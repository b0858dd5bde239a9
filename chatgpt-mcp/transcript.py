# ChatGPT MCP Tool - Transcript ordering and reply boundary
# Copyright (C) 2026  Martin Gehrken (IamLumae)
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Spatial ordering of scraped nodes and the prompt/reply boundary search.

Vertical position is the only reliable proxy for "earlier in the
conversation"; traversal order from the accessibility tree is arbitrary.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional

import settings
from ax_scraper import ScreenTextNode

PARAGRAPH_SEP = "\n\n"


class LocatorState(Enum):
    SCANNING_FOR_PROMPT = "scanning_for_prompt"
    COLLECTING_REPLY = "collecting_reply"
    FALLBACK_TAIL = "fallback_tail"


@dataclass
class ReplySegment:
    """Candidate reply nodes and how they were chosen.

    strategy is one of:
        anchored      nodes after the node containing the sent prompt
        tail          last k nodes, prompt not found
        last_message  nodes after the latest user-turn marker (or all nodes)
        none          nothing qualified
    """
    nodes: list[ScreenTextNode] = field(default_factory=list)
    strategy: str = "none"
    anchor_index: Optional[int] = None

    @property
    def text(self) -> str:
        return PARAGRAPH_SEP.join(n.text for n in self.nodes)

    def __bool__(self) -> bool:
        return bool(self.nodes)


def order_nodes(nodes: Iterable[ScreenTextNode]) -> list[ScreenTextNode]:
    """Top-to-bottom order. Ties keep discovery order (sorted() is stable)."""
    return sorted(nodes, key=lambda n: n.y)


def locate_reply(
    transcript: list[ScreenTextNode],
    sent_prompt: str,
    tail_count: int = settings.TAIL_FALLBACK_COUNT,
) -> ReplySegment:
    """Find the reply to `sent_prompt` in an ordered transcript.

    SCANNING_FOR_PROMPT -> COLLECTING_REPLY on the first node containing the
    prompt; every later node is reply. If the scan runs out, FALLBACK_TAIL
    takes the last `tail_count` nodes, provided the transcript is longer than
    that. Shorter transcripts yield an empty segment.
    """
    state = LocatorState.SCANNING_FOR_PROMPT
    anchor = None
    collected = []

    for i, node in enumerate(transcript):
        if state is LocatorState.SCANNING_FOR_PROMPT:
            if sent_prompt and sent_prompt in node.text:
                anchor = i
                state = LocatorState.COLLECTING_REPLY
        elif state is LocatorState.COLLECTING_REPLY:
            collected.append(node)

    if state is LocatorState.SCANNING_FOR_PROMPT:
        state = LocatorState.FALLBACK_TAIL

    if state is LocatorState.FALLBACK_TAIL:
        if len(transcript) > tail_count:
            return ReplySegment(nodes=list(transcript[-tail_count:]), strategy="tail")
        return ReplySegment(strategy="none")

    return ReplySegment(nodes=collected, strategy="anchored" if collected else "none", anchor_index=anchor)


def _last_index(transcript: list[ScreenTextNode], markers: tuple) -> Optional[int]:
    found = None
    for i, node in enumerate(transcript):
        if node.text.strip() in markers:
            found = i
    return found


def locate_last_message(
    transcript: list[ScreenTextNode],
    user_markers: tuple = settings.USER_TURN_MARKERS,
    assistant_markers: tuple = settings.ASSISTANT_TURN_MARKERS,
) -> ReplySegment:
    """The most recent reply, without the user's question in front of it.

    Anchors on the latest assistant-turn label when it comes after the latest
    user-turn label. Otherwise skips the user label and the question node that
    follows it. With no label at all, every node is returned.
    """
    user = _last_index(transcript, user_markers)
    assistant = _last_index(transcript, assistant_markers)

    if assistant is not None and (user is None or assistant > user):
        anchor, start = assistant, assistant + 1
    elif user is not None:
        anchor, start = user, user + 2
    else:
        anchor, start = None, 0

    nodes = list(transcript[start:])
    return ReplySegment(nodes=nodes, strategy="last_message" if nodes else "none", anchor_index=anchor)
