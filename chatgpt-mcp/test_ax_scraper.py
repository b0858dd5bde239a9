"""Tests for accessibility scraping and the conversation list."""

import unittest

from ax_scraper import (
    ScreenTextNode,
    build_scrape_script,
    list_conversations,
    parse_scrape_output,
    scrape,
)
from errors import ScrapeError
from osascript import FIELD_SEP as US, RECORD_SEP as RS


def _rows(*pairs):
    return RS.join(f"{y}{US}{text}" for y, text in pairs)


class TestParseScrapeOutput(unittest.TestCase):

    def test_parses_rows_in_discovery_order(self):
        output = _rows((100, "Hello there"), (50, "What is 2+2?"), (150.5, "Four!"))
        self.assertEqual(
            parse_scrape_output(output),
            [
                ScreenTextNode("Hello there", 100.0),
                ScreenTextNode("What is 2+2?", 50.0),
                ScreenTextNode("Four!", 150.5),
            ],
        )

    def test_refined_variant_drops_short_and_placeholder_text(self):
        output = _rows((1, "New chat"), (2, "Message ChatGPT"), (3, "abc"), (4, "abcd"))
        self.assertEqual([n.text for n in parse_scrape_output(output)], ["abcd"])

    def test_minimal_variant_keeps_every_non_empty_text(self):
        output = _rows((1, "New chat"), (2, "4"), (3, ""))
        nodes = parse_scrape_output(output, min_length=0, excluded=())
        self.assertEqual([n.text for n in nodes], ["New chat", "4"])

    def test_multiline_text_survives(self):
        output = _rows((10, "line one\nline two"))
        self.assertEqual(parse_scrape_output(output)[0].text, "line one\nline two")

    def test_decimal_comma_position(self):
        output = f"12,5{US}Some text"
        self.assertEqual(parse_scrape_output(output)[0].y, 12.5)

    def test_malformed_records_are_skipped(self):
        output = RS.join([f"notanumber{US}Some text", "no separator here", f"7{US}Valid text"])
        self.assertEqual(parse_scrape_output(output), [ScreenTextNode("Valid text", 7.0)])

    def test_empty_output(self):
        self.assertEqual(parse_scrape_output(""), [])


class TestScrape(unittest.TestCase):

    def test_window_missing_raises(self):
        with self.assertRaises(ScrapeError):
            scrape(lambda script: "ChatGPT window not found")

    def test_zero_nodes_is_valid(self):
        self.assertEqual(scrape(lambda script: ""), [])

    def test_script_reads_static_text_with_position(self):
        script = build_scrape_script("ChatGPT", activate_delay=0)
        self.assertIn('"AXStaticText"', script)
        self.assertIn("entire contents of window 1", script)
        self.assertIn("item 2 of (position of elem)", script)
        self.assertIn("delay 0", script)

    def test_app_name_is_used(self):
        seen = []

        def run(script):
            seen.append(script)
            return _rows((1, "text node"))

        nodes = scrape(run, "ChatGPT Beta")
        self.assertIn('tell process "ChatGPT Beta"', seen[0])
        self.assertEqual(len(nodes), 1)


class TestListConversations(unittest.TestCase):

    def test_parses_names(self):
        output = RS.join(["Trip planning", "Python, asyncio and you", "Recipes"])
        self.assertEqual(
            list_conversations(lambda s: output),
            ["Trip planning", "Python, asyncio and you", "Recipes"],
        )

    def test_none_found(self):
        self.assertEqual(list_conversations(lambda s: "No conversations found"), [])

    def test_no_window_raises(self):
        with self.assertRaises(ScrapeError):
            list_conversations(lambda s: "No ChatGPT window found")

    def test_script_error_raises(self):
        with self.assertRaises(ScrapeError) as ctx:
            list_conversations(lambda s: "Error: Can't get group 1")
        self.assertIn("Can't get group 1", str(ctx.exception))


if __name__ == "__main__":
    unittest.main()
