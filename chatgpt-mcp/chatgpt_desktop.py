# ChatGPT MCP Tool - Desktop app driver
# Copyright (C) 2026  Martin Gehrken (IamLumae)
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Ties the pieces together for the three tool operations.

    ask:              guard -> inject -> wait -> scrape -> order -> locate_reply -> clean
    get_last_message: guard -> scrape -> order -> locate_last_message -> clean
    get_conversations: guard -> list sidebar buttons

One call at a time. The app has a single foreground window and the clipboard
is global; overlapping calls interleave keystrokes. Callers must serialize.
"""

import logging
import subprocess
import time
from typing import Callable, Optional

import app_guard
import ax_scraper
import input_injector
import response_cleaner
import transcript
from errors import WINDOW_NOT_FOUND, ScrapeError, WindowNotFoundError
from osascript import Runner, make_runner
from settings import Settings, clamp_wait

log = logging.getLogger("chatgpt_mcp.desktop")


def speak_text(text: str, voice: Optional[str] = None) -> None:
    """Read text aloud with macOS `say`. Fire and forget."""
    cmd = ["say"]
    if voice:
        cmd += ["-v", voice]
    cmd.append(text)
    try:
        subprocess.Popen(cmd, stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)
    except OSError as e:
        log.warning("could not speak response: %s", e)


class ChatGPTDesktop:
    """Drives the ChatGPT desktop app through AppleScript."""

    def __init__(
        self,
        config: Optional[Settings] = None,
        run: Optional[Runner] = None,
        clipboard=None,
        sleep: Callable[[float], None] = time.sleep,
        speaker: Callable[[str], None] = speak_text,
    ):
        self.config = config or Settings()
        self.run = run or make_runner(self.config.osascript_timeout)
        self.clipboard = clipboard or input_injector.SystemClipboard()
        self.sleep = sleep
        self.speaker = speaker

    def ensure_available(self) -> None:
        app_guard.ensure_available(self.run, self.config.app_name, sleep=self.sleep)

    def _scrape(self, activate_delay: Optional[float] = None) -> list:
        kwargs = {}
        if activate_delay is not None:
            kwargs["activate_delay"] = activate_delay
        return ax_scraper.scrape(
            self.run,
            self.config.app_name,
            min_length=self.config.min_node_length,
            excluded=self.config.excluded_texts,
            **kwargs,
        )

    def ask(
        self,
        prompt: str,
        conversation_id: Optional[str] = None,
        wait_time: Optional[float] = None,
        speak: bool = False,
    ) -> str:
        """Send a prompt and return the cleaned reply ("" if none was found).

        Returns WINDOW_NOT_FOUND as a plain answer when the window is missing.
        Raises UnavailableError or InjectionError.
        """
        self.ensure_available()
        wait = clamp_wait(wait_time, self.config.default_wait)

        try:
            input_injector.inject(
                prompt,
                conversation_id,
                run=self.run,
                clipboard=self.clipboard,
                app_name=self.config.app_name,
            )
        except WindowNotFoundError:
            return WINDOW_NOT_FOUND

        self.sleep(wait)

        try:
            # already frontmost after inject, no need to settle again
            nodes = self._scrape(activate_delay=0)
        except ScrapeError:
            return WINDOW_NOT_FOUND

        ordered = transcript.order_nodes(nodes)
        segment = transcript.locate_reply(ordered, prompt, self.config.tail_count)
        log.debug("reply located via %s (%d nodes of %d)", segment.strategy, len(segment.nodes), len(ordered))

        cleaned = response_cleaner.clean(segment.text)
        if cleaned and not response_cleaner.is_likely_complete(cleaned, self.config.complete_length):
            log.warning("ChatGPT response may be incomplete (waited %ds)", wait)

        if speak and cleaned:
            self.speaker(cleaned)
        return cleaned

    def get_last_message(self) -> str:
        """Cleaned text of the most recent reply ("" if nothing qualified)."""
        self.ensure_available()
        try:
            nodes = self._scrape()
        except ScrapeError:
            return WINDOW_NOT_FOUND
        ordered = transcript.order_nodes(nodes)
        segment = transcript.locate_last_message(
            ordered, self.config.user_turn_markers, self.config.assistant_turn_markers
        )
        return response_cleaner.clean(segment.text)

    def get_conversations(self) -> list[str]:
        self.ensure_available()
        return ax_scraper.list_conversations(self.run, self.config.app_name)
