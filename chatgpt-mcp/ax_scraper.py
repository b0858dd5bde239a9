# ChatGPT MCP Tool - Accessibility scraper
# Copyright (C) 2026  Martin Gehrken (IamLumae)
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Read every static text node of the ChatGPT window with its vertical position.

The accessibility tree gives no ordering guarantee, so nodes come back in
whatever order System Events walks them. transcript.order_nodes() fixes that.
"""

import logging
from dataclasses import dataclass

import settings
from errors import WINDOW_NOT_FOUND, ScrapeError
from osascript import Runner, split_records

log = logging.getLogger("chatgpt_mcp.ax_scraper")


@dataclass(frozen=True)
class ScreenTextNode:
    """One AXStaticText element: its text and the y of its top-left corner."""
    text: str
    y: float


def build_scrape_script(app_name: str, activate_delay: float = settings.READ_ACTIVATE_DELAY) -> str:
    """AppleScript that emits `y<US>text<RS>` for every static text element.

    The per-element `try` skips anything unreadable instead of failing the walk.
    """
    return f'''
tell application "{app_name}"
    activate
    delay {activate_delay}
end tell

tell application "System Events"
    tell process "{app_name}"
        if not (exists window 1) then
            return "{WINDOW_NOT_FOUND}"
        end if

        set fieldSep to (character id 31)
        set recordSep to (character id 30)
        set textRows to {{}}
        set allElements to entire contents of window 1

        repeat with elem in allElements
            try
                if (role of elem) is "AXStaticText" then
                    set elemText to (description of elem)
                    if elemText is missing value or elemText is "" then
                        set elemText to (value of elem)
                    end if
                    if elemText is not missing value and elemText is not "" then
                        set yPos to item 2 of (position of elem)
                        set end of textRows to (yPos as text) & fieldSep & (elemText as text)
                    end if
                end if
            end try
        end repeat

        set AppleScript's text item delimiters to recordSep
        set scrapedText to textRows as text
        set AppleScript's text item delimiters to ""
        return scrapedText
    end tell
end tell
'''


def parse_scrape_output(
    output: str,
    min_length: int = settings.MIN_NODE_LENGTH,
    excluded: tuple = settings.EXCLUDED_TEXTS,
) -> list[ScreenTextNode]:
    """Turn raw script output into nodes, applying the collection filters.

    min_length=0 and excluded=() keep every non-empty text.
    Malformed records are skipped, never fatal.
    """
    nodes = []
    for fields in split_records(output):
        if len(fields) < 2:
            continue
        raw_y, text = fields[0], fields[1]
        try:
            # AppleScript may format reals with a decimal comma depending on locale
            y = float(raw_y.strip().replace(",", "."))
        except ValueError:
            log.debug("skipping node with unreadable position %r", raw_y)
            continue
        if not text or len(text) <= min_length or text in excluded:
            continue
        nodes.append(ScreenTextNode(text=text, y=y))
    return nodes


def scrape(
    run: Runner,
    app_name: str = settings.APP_NAME,
    min_length: int = settings.MIN_NODE_LENGTH,
    excluded: tuple = settings.EXCLUDED_TEXTS,
    activate_delay: float = settings.READ_ACTIVATE_DELAY,
) -> list[ScreenTextNode]:
    """Scrape the foreground window. Raises ScrapeError if there is no window."""
    output = run(build_scrape_script(app_name, activate_delay))
    if output == WINDOW_NOT_FOUND:
        raise ScrapeError(WINDOW_NOT_FOUND)
    nodes = parse_scrape_output(output, min_length=min_length, excluded=excluded)
    log.debug("scraped %d text nodes", len(nodes))
    return nodes


# ---------------------------------------------------------------------------
# Conversation list
# ---------------------------------------------------------------------------

NO_WINDOW = "No ChatGPT window found"
NO_CONVERSATIONS = "No conversations found"
NEW_CHAT = "New chat"


def build_conversations_script(app_name: str, activate_delay: float = settings.LIST_ACTIVATE_DELAY) -> str:
    """AppleScript listing sidebar conversation names, RECORD_SEP joined.

    First tries the buttons in group 1 of group 1; if that yields nothing,
    falls back to the AXDescription of every top-level UI element.
    """
    return f'''
tell application "{app_name}"
    activate
    delay {activate_delay}
end tell

tell application "System Events"
    tell process "{app_name}"
        if not (exists window 1) then
            return "{NO_WINDOW}"
        end if

        set conversationsList to {{}}
        try
            if exists group 1 of group 1 of window 1 then
                set chatButtons to buttons of group 1 of group 1 of window 1
                repeat with chatButton in chatButtons
                    set buttonName to name of chatButton
                    if buttonName is not missing value and buttonName is not "{NEW_CHAT}" then
                        set end of conversationsList to buttonName
                    end if
                end repeat
            end if

            if (count of conversationsList) is 0 then
                set uiElements to UI elements of window 1
                repeat with elem in uiElements
                    try
                        if exists (attribute "AXDescription" of elem) then
                            set elemDesc to value of attribute "AXDescription" of elem
                            if elemDesc is not missing value and elemDesc is not "{NEW_CHAT}" and elemDesc is not "" then
                                set end of conversationsList to elemDesc
                            end if
                        end if
                    end try
                end repeat
            end if

            if (count of conversationsList) is 0 then
                return "{NO_CONVERSATIONS}"
            end if
        on error errMsg
            return "Error: " & errMsg
        end try

        set AppleScript's text item delimiters to (character id 30)
        set listText to conversationsList as text
        set AppleScript's text item delimiters to ""
        return listText
    end tell
end tell
'''


def list_conversations(run: Runner, app_name: str = settings.APP_NAME) -> list[str]:
    """Names of the conversations visible in the sidebar.

    Raises ScrapeError if the window is missing or the script reports an error.
    """
    output = run(build_conversations_script(app_name))
    if output == NO_WINDOW:
        raise ScrapeError(NO_WINDOW)
    if output == NO_CONVERSATIONS:
        log.info("No conversations found in %s", app_name)
        return []
    if output.startswith("Error:"):
        raise ScrapeError(output)
    return [fields[0].strip() for fields in split_records(output) if fields[0].strip()]
