# ChatGPT MCP Tool - Session availability guard
# Copyright (C) 2026  Martin Gehrken (IamLumae)
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Make sure the ChatGPT desktop app is running before anything touches it."""

import logging
import time
from typing import Callable

import settings
from errors import UnavailableError
from osascript import AppleScriptError, Runner

log = logging.getLogger("chatgpt_mcp.app_guard")


def _exists_script(app_name: str) -> str:
    return f'''
tell application "System Events"
    return application process "{app_name}" exists
end tell
'''


def _activate_script(app_name: str) -> str:
    return f'tell application "{app_name}" to activate'


def is_running(run: Runner, app_name: str = settings.APP_NAME) -> bool:
    """Ask System Events whether the app's process exists."""
    return run(_exists_script(app_name)).strip().lower() == "true"


def ensure_available(
    run: Runner,
    app_name: str = settings.APP_NAME,
    sleep: Callable[[float], None] = time.sleep,
    settle_delay: float = settings.LAUNCH_SETTLE_DELAY,
) -> None:
    """Verify the app is running, launching it if needed.

    Cheap when the app is already up: one existence query, nothing else.
    Raises UnavailableError if the app cannot be confirmed running.
    """
    try:
        running = is_running(run, app_name)
    except AppleScriptError as e:
        log.error("%s access check failed: %s", app_name, e)
        raise UnavailableError(
            f"Cannot access {app_name} app. Please make sure {app_name} is installed "
            f"and properly configured. Error: {e}"
        ) from e
    if running:
        return

    log.info("%s app is not running, attempting to launch...", app_name)
    try:
        run(_activate_script(app_name))
    except AppleScriptError as e:
        log.error("Error activating %s app: %s", app_name, e)
        raise UnavailableError(
            f"Could not activate {app_name} app. Please start it manually."
        ) from e
    sleep(settle_delay)

    try:
        running = is_running(run, app_name)
    except AppleScriptError as e:
        raise UnavailableError(f"Cannot access {app_name} app after launch. Error: {e}") from e
    if not running:
        raise UnavailableError(
            f"Could not activate {app_name} app. Please start it manually."
        )
