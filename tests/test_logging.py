"""
Tests for structured log output.
"""
import json
import logging

from adsdesk.core.logging import JSONFormatter, get_logger, redact


class TestRedact:

    def test_query_tokens_masked(self):
        url = "https://graph.facebook.com/v18.0/act_1?fields=id&access_token=EAAB123&x=1"
        assert redact(url) == "https://graph.facebook.com/v18.0/act_1?fields=id&access_token=***&x=1"

    def test_bot_token_masked(self):
        assert redact("POST https://api.telegram.org/bot123:ABC/sendMessage") == (
            "POST https://api.telegram.org/bot***/sendMessage"
        )

    def test_plain_text_unchanged(self):
        assert redact("Fetched 3 records from act_1/ads") == "Fetched 3 records from act_1/ads"


class TestJSONFormatter:

    def test_extras_and_masking(self):
        record = logging.LogRecord(
            "adsdesk.test", logging.WARNING, __file__, 1,
            "Request to %s failed", ("https://g/x?access_token=secret",), None,
        )
        record.account_id = "act_1"
        record.endpoint = "ignored"
        entry = json.loads(JSONFormatter().format(record))
        assert entry["level"] == "WARNING"
        assert entry["message"] == "Request to https://g/x?access_token=*** failed"
        assert entry["account_id"] == "act_1"
        assert "endpoint" not in entry

    def test_logger_namespace(self):
        assert get_logger("tests").name == "adsdesk.tests"
