"""Tests for timestamps module."""

import re

import pytest

from medianote.errors import TimestampParseError
from medianote.timestamps import format_timestamp, parse_timestamp, split_link_target


class TestFormatTimestamp:
    def test_zero(self):
        assert format_timestamp(0) == "00:00:00"

    def test_minutes_and_seconds(self):
        assert format_timestamp(61) == "00:01:01"

    def test_hours_not_capped_at_a_day(self):
        assert format_timestamp(25 * 3600 + 5) == "25:00:05"

    def test_fraction_is_truncated(self):
        assert format_timestamp(123.999) == "00:02:03"

    def test_negative_rejected(self):
        with pytest.raises(ValueError):
            format_timestamp(-1)

    @pytest.mark.parametrize("seconds", [0, 1, 59, 60, 3599, 3600, 86399, 359999])
    def test_shape_and_round_trip(self, seconds):
        text = format_timestamp(seconds)
        assert re.fullmatch(r"\d{2}:\d{2}:\d{2}", text)
        assert parse_timestamp(text) == seconds


class TestParseTimestamp:
    def test_hms(self):
        assert parse_timestamp("01:02:03") == 3723

    def test_single_digit_hours(self):
        assert parse_timestamp("1:00:00") == 3600

    def test_bare_seconds(self):
        assert parse_timestamp("90") == 90

    @pytest.mark.parametrize("bad", ["", "abc", "1:2:3", "00:61:00", "12.5", "-5", "00:01"])
    def test_rejects_other_text(self, bad):
        with pytest.raises(TimestampParseError, match="failed to parse timestamp"):
            parse_timestamp(bad)


class TestSplitLinkTarget:
    def test_hms_suffix(self):
        assert split_link_target("/media/a.mkv::00:01:02") == ("/media/a.mkv", 62)

    def test_integer_suffix(self):
        assert split_link_target("/media/a.mkv::62") == ("/media/a.mkv", 62)

    def test_zero_suffix(self):
        assert split_link_target("/media/a.mkv::0") == ("/media/a.mkv", 0)

    def test_absent_suffix(self):
        assert split_link_target("/media/a.mkv") == ("/media/a.mkv", None)

    def test_splits_on_last_separator(self):
        assert split_link_target("c::d.mkv::5") == ("c::d.mkv", 5)

    def test_bad_suffix(self):
        with pytest.raises(TimestampParseError):
            split_link_target("/media/a.mkv::soon")
