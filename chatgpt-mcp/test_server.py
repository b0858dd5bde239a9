"""Tests for the tool facade: argument validation, dispatch, and the uniform result shape."""

import json
import tempfile
import unittest
from pathlib import Path
from unittest.mock import MagicMock, patch

from fastmcp import Client

import server
from action_log import log_action
from errors import InjectionError, UnavailableError
from server import dispatch, format_conversations, is_chatgpt_args


class TestIsChatGPTArgs(unittest.TestCase):

    def test_accepts_valid_calls(self):
        self.assertTrue(is_chatgpt_args({"operation": "ask", "prompt": "hi"}))
        self.assertTrue(is_chatgpt_args({"operation": "get_conversations"}))
        self.assertTrue(is_chatgpt_args({"operation": "get_last_message"}))
        self.assertTrue(is_chatgpt_args(
            {"operation": "ask", "prompt": "hi", "conversation_id": "Recipes", "wait_time": 5.5}
        ))

    def test_accepts_speak_boolean(self):
        self.assertTrue(is_chatgpt_args({"operation": "ask", "prompt": "hi", "speak": True}))

    def test_rejects_invalid_speak_type(self):
        self.assertFalse(is_chatgpt_args({"operation": "ask", "prompt": "hi", "speak": "yes"}))

    def test_unknown_keys_are_ignored(self):
        self.assertTrue(is_chatgpt_args({"operation": "get_last_message", "verbose": 3}))

    def test_rejects_ask_without_prompt(self):
        self.assertFalse(is_chatgpt_args({"operation": "ask"}))
        self.assertFalse(is_chatgpt_args({"operation": "ask", "prompt": ""}))

    def test_rejects_non_numeric_wait_time(self):
        self.assertFalse(is_chatgpt_args({"operation": "ask", "prompt": "hi", "wait_time": "10"}))
        self.assertFalse(is_chatgpt_args({"operation": "ask", "prompt": "hi", "wait_time": True}))

    def test_rejects_unknown_operation(self):
        self.assertFalse(is_chatgpt_args({"operation": "delete_everything"}))
        self.assertFalse(is_chatgpt_args({}))

    def test_rejects_wrong_field_types(self):
        self.assertFalse(is_chatgpt_args({"operation": "ask", "prompt": 42}))
        self.assertFalse(is_chatgpt_args({"operation": "ask", "prompt": "hi", "conversation_id": 7}))

    def test_rejects_non_dict(self):
        self.assertFalse(is_chatgpt_args(None))
        self.assertFalse(is_chatgpt_args(["ask"]))


class TestDispatch(unittest.TestCase):

    def setUp(self):
        self.desktop = MagicMock()

    def test_ask_returns_reply(self):
        self.desktop.ask.return_value = "Paris."
        result = dispatch({"operation": "ask", "prompt": "Capital?", "wait_time": 3}, self.desktop)
        self.assertEqual(result, {"success": True, "isError": False, "text": "Paris."})
        self.desktop.ask.assert_called_once_with("Capital?", conversation_id=None, wait_time=3, speak=False)

    def test_ask_empty_reply_uses_fallback_text(self):
        self.desktop.ask.return_value = ""
        result = dispatch({"operation": "ask", "prompt": "hi"}, self.desktop)
        self.assertEqual(result["text"], "No response received from ChatGPT.")
        self.assertFalse(result["isError"])

    def test_get_conversations(self):
        self.desktop.get_conversations.return_value = ["Trip planning", "Recipes"]
        result = dispatch({"operation": "get_conversations"}, self.desktop)
        self.assertEqual(result["text"], "Found 2 conversation(s):\n\nTrip planning\nRecipes")

    def test_get_conversations_empty(self):
        self.desktop.get_conversations.return_value = []
        result = dispatch({"operation": "get_conversations"}, self.desktop)
        self.assertEqual(result["text"], "No conversations found in ChatGPT.")

    def test_get_last_message(self):
        self.desktop.get_last_message.return_value = ""
        result = dispatch({"operation": "get_last_message"}, self.desktop)
        self.assertEqual(result["text"], "No last message found.")

    def test_invalid_args_become_error_result(self):
        result = dispatch({"operation": "ask"}, self.desktop)
        self.assertEqual(result["success"], False)
        self.assertTrue(result["isError"])
        self.assertIn("Prompt is required", result["text"])
        self.desktop.ask.assert_not_called()

    def test_no_arguments(self):
        result = dispatch(None, self.desktop)
        self.assertTrue(result["isError"])
        self.assertEqual(result["text"], "Error: No arguments provided")

    def test_automation_errors_become_error_results(self):
        for exc in (UnavailableError("Could not activate ChatGPT app."), InjectionError("keystroke failed")):
            self.desktop.ask.side_effect = exc
            result = dispatch({"operation": "ask", "prompt": "hi"}, self.desktop)
            self.assertEqual(result, {"success": False, "isError": True, "text": f"Error: {exc}"})

    def test_format_conversations(self):
        self.assertEqual(format_conversations(["One"]), "Found 1 conversation(s):\n\nOne")


class TestToolEndpoint(unittest.IsolatedAsyncioTestCase):
    """Calls go through the MCP client, so pydantic sees the raw arguments."""

    def setUp(self):
        self.dispatch = MagicMock(return_value={"success": True, "isError": False, "text": "ok"})
        patchers = [patch("server.dispatch", self.dispatch), patch("server.log_action")]
        for p in patchers:
            p.start()
            self.addCleanup(p.stop)

    async def _call(self, arguments):
        async with Client(server.mcp) as client:
            return await client.call_tool("chatgpt", arguments)

    async def test_bad_types_reach_validation_unchanged(self):
        await self._call({"operation": "ask", "prompt": "hi", "wait_time": "soon"})
        await self._call({"operation": "ask", "prompt": "hi", "speak": "yes"})
        first, second = (c.args[0] for c in self.dispatch.call_args_list)
        self.assertEqual(first["wait_time"], "soon")
        self.assertEqual(second["speak"], "yes")
        self.assertFalse(is_chatgpt_args(first))
        self.assertFalse(is_chatgpt_args(second))

    async def test_omitted_options_are_not_sent(self):
        await self._call({"operation": "get_conversations"})
        self.assertEqual(self.dispatch.call_args.args[0], {"operation": "get_conversations"})

    async def test_schema_lists_operations(self):
        async with Client(server.mcp) as client:
            tools = await client.list_tools()
        schema = next(t for t in tools if t.name == "chatgpt").inputSchema
        self.assertEqual(
            schema["properties"]["operation"]["enum"],
            ["ask", "get_conversations", "get_last_message"],
        )

    async def test_unknown_operation_is_rejected_before_dispatch(self):
        with self.assertRaises(Exception):
            await self._call({"operation": "delete_everything"})
        self.dispatch.assert_not_called()


class TestActionLog(unittest.TestCase):

    def test_appends_jsonl(self):
        with tempfile.TemporaryDirectory() as tmp:
            log_dir = Path(tmp) / "action_log"
            log_action(log_dir, "chatgpt", {"operation": "ask"}, "x" * 500)
            log_action(log_dir, "chatgpt", {"operation": "get_last_message"}, "Error: boom", is_error=True)
            files = list(log_dir.glob("*.jsonl"))
            self.assertEqual(len(files), 1)
            entries = [json.loads(line) for line in files[0].read_text(encoding="utf-8").splitlines()]
        self.assertEqual(len(entries), 2)
        self.assertEqual(len(entries[0]["result"]), 200)
        self.assertTrue(entries[1]["is_error"])

    def test_disabled_and_unwritable_never_raise(self):
        log_action(None, "chatgpt", {}, "ok")
        with tempfile.NamedTemporaryFile() as f:
            # a file where a directory should be
            log_action(Path(f.name) / "sub", "chatgpt", {}, "ok")


if __name__ == "__main__":
    unittest.main()
