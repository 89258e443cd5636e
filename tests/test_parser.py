"""Tests for field extraction from CLI captures and API payloads."""

from __future__ import annotations

import pytest

from ai_limit_checker.exceptions import ApiEnvelopeError, StructuralMarkerError
from ai_limit_checker.session_manager.ansi import strip_ansi
from ai_limit_checker.session_manager.parser import (
    parse_claude_status,
    parse_gemini_row,
    parse_gemini_usage,
    parse_zai_response,
)

from conftest import CLAUDE_USAGE_SCREEN, GEMINI_STATS_SCREEN


# -- Claude --------------------------------------------------------------------


class TestParseClaudeStatus:
    def test_full_usage_screen(self):
        status = parse_claude_status(strip_ansi(CLAUDE_USAGE_SCREEN))

        assert status.session_used == 87
        assert status.session_reset_time == "4pm"
        assert status.session_reset_timezone == "Europe/Berlin"
        assert status.weekly_used == 14
        assert status.weekly_reset_time == "Jan 10, 12pm"
        assert status.has_subscription is True

    def test_single_line_session(self):
        status = parse_claude_status("Current session ... 87% used ... Resets 4pm (Europe/Berlin)")
        assert status.session_used == 87
        assert status.session_reset_time == "4pm"

    def test_missing_session_section_uses_defaults(self):
        status = parse_claude_status("Current week (all models)\n 14% used\n Resets Jan 10, 12pm\n")

        assert status.session_used == 0
        assert status.session_reset_time == "Unknown"
        assert status.session_reset_timezone is None
        assert status.weekly_used == 14

    def test_empty_capture_is_all_defaults(self):
        status = parse_claude_status("")

        assert status.session_used == 0
        assert status.session_reset_time == "Unknown"
        assert status.weekly_used == 0
        assert status.weekly_reset_time == "Unknown"
        assert status.has_subscription is True

    def test_not_entitled_phrase_clears_subscription_flag(self):
        text = "/usage is only available for subscription plans.\n"
        assert parse_claude_status(text).has_subscription is False

    def test_session_values_do_not_leak_from_week_section(self):
        text = (
            "Current session\n Loading usage data...\n\n"
            "Current week (all models)\n 55% used\n Resets Jan 10, 12pm (UTC)\n"
        )
        status = parse_claude_status(text)
        assert status.session_used == 0
        assert status.session_reset_time == "Unknown"
        assert status.weekly_used == 55

    def test_later_complete_render_wins_over_partial_one(self):
        text = (
            "Current session\n Loading usage data...\n"
            "Current session\n ████ 42% used\n Resets 11pm (UTC)\n"
        )
        status = parse_claude_status(text)
        assert status.session_used == 42
        assert status.session_reset_time == "11pm"

    def test_labels_are_case_insensitive(self):
        status = parse_claude_status("CURRENT SESSION\n 9% USED\n resets 7am (UTC)\n")
        assert status.session_used == 9
        assert status.session_reset_time == "7am"

    def test_reset_without_timezone_stops_at_line_end(self):
        status = parse_claude_status("Current session\n 5% used\n Resets 4pm\n\nExtra usage\n")
        assert status.session_reset_time == "4pm"
        assert status.session_reset_timezone is None


# -- Gemini --------------------------------------------------------------------


class TestParseGeminiRow:
    def test_row_with_placeholder_requests(self):
        row = parse_gemini_row("gemini-2.5-flash   -   98.6% (Resets in 2h 39m)")

        assert row is not None
        assert row.model == "gemini-2.5-flash"
        assert row.requests == "-"
        assert row.usage == "98.6"
        assert row.resets == "2h 39m"

    def test_row_with_request_count(self):
        row = parse_gemini_row("│  gemini-2.5-pro   12   41% (Resets in 23h 45m) │")
        assert row is not None
        assert row.requests == "12"
        assert row.usage == "41"

    @pytest.mark.parametrize(
        "line",
        [
            "gemini-2.5-flash   -   98,6% (Resets in 2h 39m)",
            "gemini-2.5-flash   -   %98 (Resets in 2h 39m)",
            "gemini-2.5-flash   -   98.6%",
            "Model Usage   Reqs   Usage left",
        ],
    )
    def test_malformed_lines_yield_nothing(self, line):
        assert parse_gemini_row(line) is None


class TestParseGeminiUsage:
    def test_stats_table(self):
        rows = parse_gemini_usage(strip_ansi(GEMINI_STATS_SCREEN))

        assert [row.model for row in rows] == [
            "gemini-2.5-pro",
            "gemini-2.5-flash",
            "gemini-2.5-flash-lite",
        ]
        assert rows[1].usage == "98.6"
        assert rows[2].resets == "1d 2h 30m"

    def test_bad_rows_are_skipped(self):
        text = (
            "gemini-2.5-flash   -   98,6% (Resets in 2h 39m)\r\n"
            "gemini-2.5-pro   4   10.0% (Resets in 1h)\r\n"
        )
        rows = parse_gemini_usage(text)
        assert len(rows) == 1
        assert rows[0].model == "gemini-2.5-pro"

    def test_marker_present_without_rows_is_empty(self):
        assert parse_gemini_usage("Quota: Resets in 2h\n") == []

    def test_missing_stats_view_raises(self):
        with pytest.raises(StructuralMarkerError, match="Resets in"):
            parse_gemini_usage("Type your message or @path/to/file\n")


# -- Z.ai ----------------------------------------------------------------------


class TestParseZaiResponse:
    def test_success_envelope(self, zai_body):
        limits = parse_zai_response(zai_body)

        assert [limit.type for limit in limits] == ["TIME_LIMIT", "TOKENS_LIMIT"]
        tokens = limits[1]
        assert tokens.percentage == 100
        assert tokens.next_reset_time == 1767225600000
        assert limits[0].usage_details[0].model_code == "search-prime"
        assert limits[0].next_reset_time is None

    def test_error_envelope_raises(self):
        body = {"code": 401, "msg": "token expired", "success": False, "data": None}
        with pytest.raises(ApiEnvelopeError, match="token expired") as exc_info:
            parse_zai_response(body)
        assert exc_info.value.code == 401

    def test_success_flag_with_bad_code_raises(self, zai_body):
        zai_body["code"] = 500
        with pytest.raises(ApiEnvelopeError):
            parse_zai_response(zai_body)

    def test_non_envelope_payload_raises(self):
        with pytest.raises(ApiEnvelopeError):
            parse_zai_response(["not", "an", "envelope"])

    def test_missing_data_is_empty(self):
        assert parse_zai_response({"code": 200, "msg": "ok", "success": True}) == []
