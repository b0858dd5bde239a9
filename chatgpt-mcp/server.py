# ChatGPT MCP Server - Model Context Protocol interface for the ChatGPT desktop app
# Copyright (C) 2026  Martin Gehrken (IamLumae)
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
chatgpt-mcp - ChatGPT desktop bridge
Lets any MCP-compatible LLM talk to the ChatGPT macOS app via UI automation.

One tool, three operations: ask, get_conversations, get_last_message.

Usage:
    python server.py
    python server.py --log-dir /path/to/action_log --log-level DEBUG

MCP config (.claude.json or similar):
    {
        "mcpServers": {
            "chatgpt": {
                "command": "python",
                "args": ["path/to/chatgpt-mcp/server.py"]
            }
        }
    }

Requires macOS with the ChatGPT app installed, and Accessibility permission
for the terminal / host process running this server.
"""

import logging
import sys
from typing import Any, Literal, Optional

from fastmcp import FastMCP

from action_log import log_action
from chatgpt_desktop import ChatGPTDesktop
from errors import InvalidArgumentsError
from settings import MAX_WAIT, MIN_WAIT, load_settings

log = logging.getLogger("chatgpt_mcp.server")

# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

SETTINGS = load_settings()

OPERATIONS = ("ask", "get_conversations", "get_last_message")

NO_RESPONSE = "No response received from ChatGPT."
NO_CONVERSATIONS = "No conversations found in ChatGPT."
NO_LAST_MESSAGE = "No last message found."

# ---------------------------------------------------------------------------
# MCP Server
# ---------------------------------------------------------------------------

mcp = FastMCP(
    "ChatGPT MCP Tool",
    instructions=(
        "Interact with the ChatGPT desktop app on macOS. "
        "'ask' sends a prompt and returns only the new reply, "
        "'get_conversations' lists chats in the sidebar, "
        "'get_last_message' returns the latest reply in the open conversation."
    ),
)

_desktop: Optional[ChatGPTDesktop] = None


def get_desktop() -> ChatGPTDesktop:
    """Lazily build the shared desktop driver."""
    global _desktop
    if _desktop is None:
        _desktop = ChatGPTDesktop(SETTINGS)
    return _desktop


# ---------------------------------------------------------------------------
# Argument validation
# ---------------------------------------------------------------------------

def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_args(args) -> dict:
    """Check the shape of a chatgpt tool call. Raises InvalidArgumentsError.

    Unknown keys are ignored; known keys must have the right type when present.
    """
    if not isinstance(args, dict):
        raise InvalidArgumentsError("Invalid arguments for ChatGPT tool")

    operation = args.get("operation")
    if operation not in OPERATIONS:
        raise InvalidArgumentsError(
            f"Unknown operation: {operation!r}. Use one of: {', '.join(OPERATIONS)}"
        )

    prompt = args.get("prompt")
    if prompt is not None and not isinstance(prompt, str):
        raise InvalidArgumentsError("prompt must be a string")
    if operation == "ask" and not prompt:
        raise InvalidArgumentsError("Prompt is required for ask operation")

    conversation_id = args.get("conversation_id")
    if conversation_id is not None and not isinstance(conversation_id, str):
        raise InvalidArgumentsError("conversation_id must be a string")

    wait_time = args.get("wait_time")
    if wait_time is not None and not _is_number(wait_time):
        raise InvalidArgumentsError(f"wait_time must be a number between {MIN_WAIT} and {MAX_WAIT}")

    speak = args.get("speak")
    if speak is not None and not isinstance(speak, bool):
        raise InvalidArgumentsError("speak must be a boolean")

    return args


def is_chatgpt_args(args) -> bool:
    """True if args is a well-formed chatgpt tool call."""
    try:
        validate_args(args)
    except InvalidArgumentsError:
        return False
    return True


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------

def _ok(text: str) -> dict:
    return {"success": True, "isError": False, "text": text}


def _error(message: str) -> dict:
    return {"success": False, "isError": True, "text": f"Error: {message}"}


def format_conversations(conversations: list[str]) -> str:
    if not conversations:
        return NO_CONVERSATIONS
    return f"Found {len(conversations)} conversation(s):\n\n" + "\n".join(conversations)


def dispatch(args, desktop: Optional[ChatGPTDesktop] = None) -> dict:
    """Run one chatgpt tool call. Never raises; failures become isError results."""
    try:
        if not args:
            raise InvalidArgumentsError("No arguments provided")
        validate_args(args)
        desktop = desktop or get_desktop()
        operation = args["operation"]

        if operation == "ask":
            response = desktop.ask(
                args["prompt"],
                conversation_id=args.get("conversation_id"),
                wait_time=args.get("wait_time"),
                speak=bool(args.get("speak")),
            )
            return _ok(response or NO_RESPONSE)

        if operation == "get_conversations":
            return _ok(format_conversations(desktop.get_conversations()))

        last_message = desktop.get_last_message()
        return _ok(last_message or NO_LAST_MESSAGE)
    except Exception as e:
        log.error("chatgpt %s failed: %s", args.get("operation") if isinstance(args, dict) else "?", e)
        return _error(str(e))


# ---------------------------------------------------------------------------
# Tool
# ---------------------------------------------------------------------------

@mcp.tool()
def chatgpt(
    operation: Literal["ask", "get_conversations", "get_last_message"],
    prompt: Optional[str] = None,
    conversation_id: Optional[str] = None,
    # left untyped so validate_args sees the raw values
    wait_time: Optional[Any] = None,
    speak: Optional[Any] = None,
) -> dict:
    """Interact with the ChatGPT desktop app on macOS.

    Operations:
    - ask: send a prompt, wait, and return only ChatGPT's reply to it.
    - get_conversations: list the conversations shown in the sidebar.
    - get_last_message: return the latest ChatGPT reply in the open conversation.

    Returns {success, isError, text}. On failure text holds the error message.

    Args:
        operation: "ask", "get_conversations", or "get_last_message".
        prompt: The prompt to send (required for ask).
        conversation_id: Optional sidebar conversation name to switch to before asking.
        wait_time: Seconds to wait for the reply (1-30, default 12).
        speak: true to read the reply aloud with macOS `say` (ask only).
    """
    args = {"operation": operation}
    for key, value in (
        ("prompt", prompt), ("conversation_id", conversation_id), ("wait_time", wait_time), ("speak", speak),
    ):
        if value is not None:
            args[key] = value
    result = dispatch(args)
    log_action(SETTINGS.log_dir, "chatgpt", args, result["text"], is_error=result["isError"])
    return result


# ---------------------------------------------------------------------------
# Entrypoint
# ---------------------------------------------------------------------------

def main():
    # stdout carries the MCP protocol; all diagnostics go to stderr
    logging.basicConfig(
        stream=sys.stderr,
        level=getattr(logging, SETTINGS.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    print(f"ChatGPT MCP Server running on stdio - action log: {SETTINGS.log_dir or 'off'}", file=sys.stderr)
    mcp.run()


if __name__ == "__main__":
    main()
