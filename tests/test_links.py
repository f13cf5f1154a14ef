"""Tests for Org timestamp links."""

import pytest

from medianote.errors import LinkParseError, TimestampParseError
from medianote.links import (
    annotate_timestamps,
    escape_link,
    iter_links,
    make_timestamp_link,
    next_link,
    parse_media_link,
    previous_link,
    unescape_link,
)

DOC = """* Notes
[[video:/m/a.mkv::00:00:05][00:00:05]] intro

plain [[file:/img/x.jpg]] image
[[audio:/m/b.mp3::90][1:30]] and [[https://example.com][site]]

[[video:/m/a.mkv][whole file]]
"""


class TestEscaping:
    def test_plain_path_unchanged(self):
        assert escape_link("video:/m/a.mkv::00:00:01") == "video:/m/a.mkv::00:00:01"

    def test_brackets_escaped(self):
        assert escape_link("video:/m/[x].mkv") == "video:/m/\\[x\\].mkv"

    def test_backslash_before_bracket_doubled(self):
        assert escape_link("a\\[b") == "a\\\\\\[b"

    def test_trailing_backslash_doubled(self):
        assert escape_link("C:\\dir\\") == "C:\\dir\\\\"

    def test_inner_backslash_kept(self):
        assert escape_link("C:\\dir\\a.mkv") == "C:\\dir\\a.mkv"

    @pytest.mark.parametrize("raw", ["/m/[x].mkv", "a\\[b]", "C:\\dir\\", "x\\\\]y"])
    def test_unescape_inverts(self, raw):
        assert unescape_link(escape_link(raw)) == raw


class TestMakeTimestampLink:
    def test_shape(self):
        assert make_timestamp_link("video", "/m/a.mkv", 62) == "[[video:/m/a.mkv::00:01:02][00:01:02]]"

    def test_escapes_media_ref(self):
        link = make_timestamp_link("audio", "/m/[live].mp3", 0)
        assert link == "[[audio:/m/\\[live\\].mp3::00:00:00][00:00:00]]"


class TestAnnotate:
    def test_paragraph_markers_become_links(self):
        text = "00:00:01 Hello there.\n\n00:01:01 It's fine.\n"
        out = annotate_timestamps(text, "/m/a.mkv")
        assert out == (
            "[[video:/m/a.mkv::00:00:01][00:00:01]] Hello there.\n\n"
            "[[video:/m/a.mkv::00:01:01][00:01:01]] It's fine.\n"
        )

    def test_existing_links_untouched(self):
        text = "[[video:/m/a.mkv::00:00:01][00:00:01]] then 00:00:09 later\n"
        out = annotate_timestamps(text, "/m/a.mkv")
        assert out.count("[[video:") == 2
        assert out.startswith("[[video:/m/a.mkv::00:00:01][00:00:01]] then ")

    def test_collapses_runs_of_blank_lines(self):
        out = annotate_timestamps("00:00:01 a\n\n\n\n\n00:00:02 b\n", "/m/a.mkv", scheme="audio")
        assert "\n\n\n" not in out
        assert out.count("\n\n") == 1

    def test_keeps_two_blank_lines(self):
        out = annotate_timestamps("a\n\n\nb", "/m/a.mkv")
        assert out == "a\n\n\nb"

    def test_out_of_range_clock_left_as_text(self):
        text = "00:75:00 x\n\n00:00:61 y\n\n00:01:59 z\n"
        out = annotate_timestamps(text, "/m/a.mkv")
        assert out.startswith("00:75:00 x\n\n00:00:61 y\n\n")
        assert "[[video:/m/a.mkv::00:01:59][00:01:59]] z" in out

    def test_round_trip_offsets(self):
        seconds = [0, 59, 3600, 90061]
        text = "\n\n".join(f"{s // 3600:02d}:{s % 3600 // 60:02d}:{s % 60:02d} cue" for s in seconds)
        out = annotate_timestamps(text, "/m/[odd] name.mkv")
        found = list(iter_links(out))
        assert [link.offset for link in found] == seconds
        assert {link.path for link in found} == {"/m/[odd] name.mkv"}


class TestParseMediaLink:
    def test_bracket_link(self):
        link = parse_media_link("[[video:/m/a.mkv::00:01:02][00:01:02]]")
        assert (link.scheme, link.path, link.offset, link.label) == ("video", "/m/a.mkv", 62, "00:01:02")

    def test_bare_target(self):
        link = parse_media_link("audio:/m/b.mp3::90")
        assert (link.scheme, link.path, link.offset) == ("audio", "/m/b.mp3", 90)

    def test_no_offset(self):
        assert parse_media_link("video:/m/a.mkv").offset is None

    def test_escaped_path(self):
        link = parse_media_link(make_timestamp_link("video", "/m/[x].mkv", 5))
        assert link.path == "/m/[x].mkv"

    def test_unknown_scheme(self):
        with pytest.raises(LinkParseError):
            parse_media_link("file:/img/x.jpg")

    def test_bad_timestamp(self):
        with pytest.raises(TimestampParseError):
            parse_media_link("video:/m/a.mkv::later")

    def test_target_property(self):
        assert parse_media_link("video:/m/a.mkv::62").target == "video:/m/a.mkv::00:01:02"


class TestIterLinks:
    def test_finds_media_links_only(self):
        found = list(iter_links(DOC))
        assert [(link.scheme, link.offset, link.line) for link in found] == [
            ("video", 5, 2),
            ("audio", 90, 5),
            ("video", None, 7),
        ]

    def test_reverse(self):
        assert [link.line for link in iter_links(DOC, reverse=True)] == [7, 5, 2]

    def test_bad_suffix_skipped(self):
        text = "[[video:/m/a.mkv::soon][x]] ok [[video:/m/b.mkv::5][b]]"
        found = list(iter_links(text))
        assert [(link.path, link.offset) for link in found] == [("/m/b.mkv", 5)]

    def test_bad_suffix_does_not_stop_navigation(self):
        text = "[[video:/m/a.mkv::00:00:01][a]]\n[[audio:/m/b.mp3::1:2][b]]\n[[video:/m/c.mkv::9][c]]\n"
        assert next_link(text, 1).path == "/m/c.mkv"
        assert previous_link(text, 3).path == "/m/a.mkv"

    def test_next_link(self):
        assert next_link(DOC, 2).line == 5
        assert next_link(DOC, 0).line == 2
        assert next_link(DOC, 7) is None

    def test_previous_link(self):
        assert previous_link(DOC, 5).line == 2
        assert previous_link(DOC, 100).line == 7
        assert previous_link(DOC, 2) is None
