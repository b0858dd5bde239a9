# ChatGPT MCP Tool - AppleScript runner
# Copyright (C) 2026  Martin Gehrken (IamLumae)
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Thin adapter over `osascript`, the only automation substrate we talk to.

Every component takes a `run` callable with the signature of run_applescript()
so tests can hand in a fake that records scripts and returns canned output.
"""

import logging
import subprocess
from typing import Callable, Optional

log = logging.getLogger("chatgpt_mcp.osascript")

# Field / record separators used by scripts that return structured rows.
# ASCII US and RS never occur in UI text, unlike ", " which AppleScript uses
# when coercing a list to text.
FIELD_SEP = "\x1f"
RECORD_SEP = "\x1e"

Runner = Callable[[str], str]


class AppleScriptError(RuntimeError):
    """osascript exited non-zero or could not be started."""

    def __init__(self, message: str, returncode: Optional[int] = None, stderr: str = ""):
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr


def run_applescript(script: str, timeout: Optional[float] = None) -> str:
    """Run an AppleScript via stdin and return its stripped stdout.

    Feeding the script on stdin avoids a second layer of shell quoting.
    No timeout by default: a hung app shows up as a long wait, not an abort.
    """
    log.debug("osascript (%d chars)", len(script))
    try:
        result = subprocess.run(
            ["osascript", "-"],
            input=script, capture_output=True, text=True, timeout=timeout,
        )
    except FileNotFoundError:
        raise AppleScriptError("osascript not found. This tool only works on macOS.") from None
    except subprocess.TimeoutExpired:
        raise AppleScriptError(f"AppleScript timed out after {timeout}s") from None
    if result.returncode != 0:
        stderr = result.stderr.strip()
        raise AppleScriptError(
            f"AppleScript error: {stderr or f'exit code {result.returncode}'}",
            returncode=result.returncode,
            stderr=stderr,
        )
    return result.stdout.strip()


def make_runner(timeout: Optional[float] = None) -> Runner:
    """Bind a timeout so callers only pass the script."""
    def _run(script: str) -> str:
        return run_applescript(script, timeout=timeout)
    return _run


def escape_for_applescript(text: str) -> str:
    """Prepare text for embedding inside an AppleScript string literal.

    Only double quotes are escaped. Backslashes and control characters pass
    through verbatim; see DESIGN.md before widening or narrowing this.
    """
    return text.replace('"', '\\"')


def split_records(output: str) -> list[list[str]]:
    """Split RECORD_SEP / FIELD_SEP delimited script output into rows."""
    if not output:
        return []
    return [record.split(FIELD_SEP) for record in output.split(RECORD_SEP) if record]
