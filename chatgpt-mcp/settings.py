# ChatGPT MCP Tool - Configuration
# Copyright (C) 2026  Martin Gehrken (IamLumae)
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Tunable constants and their CLI / environment overrides.

Resolution order for every overridable value: command-line flag, then
environment variable, then the default below.

    python server.py --log-dir ~/.chatgpt-mcp/action_log --tail-count 8
    CHATGPT_MCP_LOG_LEVEL=DEBUG python server.py
"""

import math
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

APP_NAME = "ChatGPT"

# How long to wait after submitting a prompt, in whole seconds.
MIN_WAIT = 1
MAX_WAIT = 30
DEFAULT_WAIT = 12

# Empirical thresholds; no derivation beyond "works on the current app build".
TAIL_FALLBACK_COUNT = 5
MIN_NODE_LENGTH = 3
COMPLETE_LENGTH = 50

# Static text that is part of the window chrome, never conversation content.
EXCLUDED_TEXTS = ("New chat", "Message ChatGPT", "Ask anything")

# Accessibility labels that open a turn in the transcript.
USER_TURN_MARKERS = ("You said:",)
ASSISTANT_TURN_MARKERS = ("ChatGPT said:",)

# Seconds. Mirrors the pacing the app needs between synthetic events.
ACTIVATE_DELAY = 2.0
LAUNCH_SETTLE_DELAY = 2.0
SELECT_CONVERSATION_DELAY = 1.0
SELECT_ALL_DELAY = 0.5
DELETE_DELAY = 1.5
CLIPBOARD_DELAY = 0.5
PASTE_DELAY = 2.0
TYPE_DELAY = 2.0
SUBMIT_DELAY = 1.0
READ_ACTIVATE_DELAY = 1.0
LIST_ACTIVATE_DELAY = 1.5

DEFAULT_LOG_DIR = Path.home() / ".chatgpt-mcp" / "action_log"


@dataclass
class Settings:
    """Runtime configuration for one server process."""
    app_name: str = APP_NAME
    tail_count: int = TAIL_FALLBACK_COUNT
    min_node_length: int = MIN_NODE_LENGTH
    complete_length: int = COMPLETE_LENGTH
    default_wait: int = DEFAULT_WAIT
    excluded_texts: tuple = EXCLUDED_TEXTS
    user_turn_markers: tuple = USER_TURN_MARKERS
    assistant_turn_markers: tuple = ASSISTANT_TURN_MARKERS
    log_dir: Optional[Path] = field(default_factory=lambda: DEFAULT_LOG_DIR)
    log_level: str = "INFO"
    osascript_timeout: Optional[float] = None


def _flag_value(argv: list[str], flag: str) -> Optional[str]:
    """Return the value following `flag` in argv, if present."""
    for i, arg in enumerate(argv):
        if arg == flag and i + 1 < len(argv):
            return argv[i + 1]
        if arg.startswith(flag + "="):
            return arg.split("=", 1)[1]
    return None


def _resolve(argv: list[str], environ, flag: str, env_var: str) -> Optional[str]:
    value = _flag_value(argv, flag)
    if value is None:
        value = environ.get(env_var)
    return value or None


def _as_int(raw: Optional[str], default: int, name: str) -> int:
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def load_settings(argv: Optional[list[str]] = None, environ=None) -> Settings:
    """Build Settings from CLI args and environment variables."""
    argv = sys.argv if argv is None else argv
    environ = os.environ if environ is None else environ

    settings = Settings()

    app = _resolve(argv, environ, "--app", "CHATGPT_MCP_APP")
    if app:
        settings.app_name = app

    log_dir = _resolve(argv, environ, "--log-dir", "CHATGPT_MCP_LOG_DIR")
    if log_dir is not None:
        # "none" turns the action log off entirely
        settings.log_dir = None if log_dir.lower() == "none" else Path(log_dir).expanduser()

    level = _resolve(argv, environ, "--log-level", "CHATGPT_MCP_LOG_LEVEL")
    if level:
        settings.log_level = level.upper()

    settings.tail_count = _as_int(
        _resolve(argv, environ, "--tail-count", "CHATGPT_MCP_TAIL_COUNT"),
        settings.tail_count, "tail count",
    )
    settings.min_node_length = _as_int(
        _resolve(argv, environ, "--min-node-length", "CHATGPT_MCP_MIN_NODE_LENGTH"),
        settings.min_node_length, "min node length",
    )

    timeout = _resolve(argv, environ, "--osascript-timeout", "CHATGPT_MCP_OSASCRIPT_TIMEOUT")
    if timeout is not None:
        try:
            settings.osascript_timeout = float(timeout)
        except ValueError:
            raise ValueError(f"osascript timeout must be a number, got {timeout!r}") from None

    if settings.tail_count < 1:
        raise ValueError("tail count must be at least 1")
    if settings.min_node_length < 0:
        raise ValueError("min node length cannot be negative")
    return settings


def clamp_wait(wait_time: Optional[float], default: int = DEFAULT_WAIT) -> int:
    """Clamp a caller-supplied wait to [MIN_WAIT, MAX_WAIT] whole seconds."""
    if wait_time is None or not math.isfinite(wait_time):
        wait_time = default
    return int(min(max(wait_time, MIN_WAIT), MAX_WAIT))
