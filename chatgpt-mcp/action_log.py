# ChatGPT MCP Tool - Action log
# Copyright (C) 2026  Martin Gehrken (IamLumae)
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Append-only JSONL record of every tool call, one file per day."""

import json
import time
from datetime import datetime
from pathlib import Path
from typing import Optional

RESULT_PREVIEW_CHARS = 200


def log_action(log_dir: Optional[Path], tool_name: str, params: dict, result: str, is_error: bool = False):
    """Log a tool call to <log_dir>/YYYY-MM-DD.jsonl. Never raises."""
    if not log_dir:
        return
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        entry = {
            "ts": time.time(),
            "tool": tool_name,
            "params": params,
            "result": result[:RESULT_PREVIEW_CHARS] if result else "",
            "is_error": is_error,
        }
        log_file = log_dir / f"{datetime.now().strftime('%Y-%m-%d')}.jsonl"
        with open(log_file, "a", encoding="utf-8") as f:
            f.write(json.dumps(entry, ensure_ascii=False) + "\n")
    except Exception:
        pass  # logging must never break tool execution
