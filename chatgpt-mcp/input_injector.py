# ChatGPT MCP Tool - Input injector
# Copyright (C) 2026  Martin Gehrken (IamLumae)
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Post a prompt into the ChatGPT window with synthetic input.

Sequence: activate -> (select conversation) -> cmd+a, delete -> type or paste -> Return.

Text in scripts that System Events cannot synthesize as keystrokes (Hangul,
CJK, kana) goes through the clipboard and cmd+v instead. That path
OVERWRITES whatever the user had on the clipboard. The clipboard is passed in
explicitly so tests can substitute a fake.
"""

import logging
import re
from typing import Optional

import pyperclip

import settings
from errors import WINDOW_NOT_FOUND, InjectionError, WindowNotFoundError
from osascript import AppleScriptError, Runner, escape_for_applescript

log = logging.getLogger("chatgpt_mcp.input_injector")

# Key codes (US layout, layout independent for these keys)
KEY_A = 0
KEY_V = 9
KEY_RETURN = 36
KEY_DELETE = 51

# Scripts whose characters are not reliably typeable via `keystroke`.
_CLIPBOARD_SCRIPTS = re.compile(
    "["
    "\uac00-\ud7a3"   # Hangul syllables
    "\u1100-\u11ff"   # Hangul jamo
    "\u3131-\u318e"   # Hangul compatibility jamo
    "\u3040-\u30ff"   # Hiragana + Katakana
    "\u3400-\u4dbf"   # CJK extension A
    "\u4e00-\u9fff"   # CJK unified ideographs
    "]"
)


class SystemClipboard:
    """The real OS clipboard, via pyperclip."""

    def copy(self, text: str) -> None:
        pyperclip.copy(text)

    def paste(self) -> str:
        return pyperclip.paste()


def needs_clipboard(prompt: str) -> bool:
    """True if the prompt must be pasted rather than typed."""
    return bool(_CLIPBOARD_SCRIPTS.search(prompt))


def build_prepare_script(app_name: str, conversation_handle: Optional[str] = None) -> str:
    """Activate, optionally switch conversation, and clear the input field."""
    select = ""
    if conversation_handle:
        handle = escape_for_applescript(conversation_handle)
        # best-effort: a missing button must not abort the send
        select = f'''
            try
                click button "{handle}" of group 1 of group 1 of window 1
                delay {settings.SELECT_CONVERSATION_DELAY}
            end try
'''
    return f'''
tell application "{app_name}"
    activate
    delay {settings.ACTIVATE_DELAY}
end tell

tell application "System Events"
    tell process "{app_name}"
        if not (exists window 1) then
            return "{WINDOW_NOT_FOUND}"
        end if
{select}
        key code {KEY_A} using {{command down}}
        delay {settings.SELECT_ALL_DELAY}
        key code {KEY_DELETE}
        delay {settings.DELETE_DELAY}
        return "ok"
    end tell
end tell
'''


def build_entry_script(app_name: str, prompt: str, use_clipboard: bool) -> str:
    """Enter the prompt (paste or keystroke) and submit it with Return."""
    if use_clipboard:
        # clipboard was filled by the caller
        entry = f'''
        delay {settings.CLIPBOARD_DELAY}
        key code {KEY_V} using {{command down}}
        delay {settings.PASTE_DELAY}
'''
    else:
        entry = f'''
        keystroke "{escape_for_applescript(prompt)}"
        delay {settings.TYPE_DELAY}
'''
    return f'''
tell application "System Events"
    tell process "{app_name}"
        if not (exists window 1) then
            return "{WINDOW_NOT_FOUND}"
        end if
{entry}
        key code {KEY_RETURN}
        delay {settings.SUBMIT_DELAY}
        return "ok"
    end tell
end tell
'''


def inject(
    prompt: str,
    conversation_handle: Optional[str] = None,
    *,
    run: Runner,
    clipboard=None,
    app_name: str = settings.APP_NAME,
) -> str:
    """Submit `prompt` to the app. Returns the entry mode used ("clipboard" or "keystroke").

    Raises InjectionError if any automation step fails or the window is gone.
    """
    use_clipboard = needs_clipboard(prompt)
    try:
        if run(build_prepare_script(app_name, conversation_handle)) == WINDOW_NOT_FOUND:
            raise WindowNotFoundError(WINDOW_NOT_FOUND)
        if use_clipboard:
            (clipboard or SystemClipboard()).copy(prompt)
        if run(build_entry_script(app_name, prompt, use_clipboard)) == WINDOW_NOT_FOUND:
            raise WindowNotFoundError(WINDOW_NOT_FOUND)
    except AppleScriptError as e:
        raise InjectionError(f"Failed to send prompt to {app_name}: {e}") from e
    except pyperclip.PyperclipException as e:
        raise InjectionError(f"Failed to place prompt on the clipboard: {e}") from e

    mode = "clipboard" if use_clipboard else "keystroke"
    log.debug("prompt submitted via %s (%d chars)", mode, len(prompt))
    return mode
