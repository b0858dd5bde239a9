# ChatGPT MCP Tool - Error taxonomy
# Copyright (C) 2026  Martin Gehrken (IamLumae)
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Errors raised by the ChatGPT desktop automation layer.

Every error is converted to a uniform {"success": False, "isError": True}
result at the tool boundary in server.py; nothing here terminates the process.
"""


class ChatGPTToolError(RuntimeError):
    """Base class for all tool-level failures."""


class UnavailableError(ChatGPTToolError):
    """The ChatGPT app is not running and could not be launched."""


class ScrapeError(ChatGPTToolError):
    """The ChatGPT window did not exist when reading the accessibility tree."""


class InjectionError(ChatGPTToolError):
    """An automation step failed while submitting a prompt."""


class InvalidArgumentsError(ChatGPTToolError, ValueError):
    """The tool was called with arguments of the wrong shape."""


class WindowNotFoundError(InjectionError):
    """The ChatGPT window vanished while a prompt was being submitted."""


# Result text when the window is missing; returned as a plain answer, not an error.
WINDOW_NOT_FOUND = "ChatGPT window not found"
