"""Tests for runner/output.py module.

Covers:
- relay_stream() line relay, EOF, read errors
- read_fragment() and report_path()
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from unittest.mock import MagicMock, call

import pytest

from overalls.core.errors import DispatchError, ErrorCode
from overalls.runner.models import WorkItem
from overalls.runner.output import read_fragment, relay_stream, report_path


def _reader(data: bytes, *, limit: int = 2**16) -> asyncio.StreamReader:
    reader = asyncio.StreamReader(limit=limit)
    reader.feed_data(data)
    reader.feed_eof()
    return reader


class TestRelayStream:
    """Tests for relay_stream function."""

    @pytest.mark.asyncio
    async def test_relays_each_line(self) -> None:
        log = MagicMock()

        count = await relay_stream(_reader(b"one\ntwo\r\nthree"), log, stream_name="stdout")

        assert count == 3
        assert log.info.call_args_list == [
            call("one", stream="stdout"),
            call("two", stream="stdout"),
            call("three", stream="stdout"),
        ]

    @pytest.mark.asyncio
    async def test_empty_stream(self) -> None:
        log = MagicMock()

        assert await relay_stream(_reader(b""), log, stream_name="stderr") == 0
        log.info.assert_not_called()

    @pytest.mark.asyncio
    async def test_invalid_utf8_is_replaced(self) -> None:
        log = MagicMock()

        await relay_stream(_reader(b"caf\xe9\n"), log, stream_name="stdout")

        assert log.info.call_args == call("caf\ufffd", stream="stdout")

    @pytest.mark.asyncio
    async def test_overlong_line_is_reported_and_draining_continues(self) -> None:
        log = MagicMock()
        data = b"short\n" + b"x" * 100 + b"\nafter\n"

        count = await relay_stream(_reader(data, limit=16), log, stream_name="stdout")

        assert count == 2
        assert [c.args[0] for c in log.info.call_args_list] == ["short", "after"]
        log.warning.assert_called_once()
        assert log.warning.call_args.args == ("stream_read_error",)
        assert log.warning.call_args.kwargs["stream"] == "stdout"

    @pytest.mark.asyncio
    async def test_broken_reader_stops(self) -> None:
        log = MagicMock()
        reader = asyncio.StreamReader()
        reader.feed_data(b"partial\n")
        reader.set_exception(ConnectionResetError("pipe closed"))

        count = await relay_stream(reader, log, stream_name="stderr")

        assert count == 0
        log.warning.assert_called_once()
        assert "pipe closed" in log.warning.call_args.kwargs["error"]


class TestReadFragment:
    """Tests for read_fragment function."""

    def test_report_path(self, tmp_path: Path) -> None:
        item = WorkItem(path=tmp_path, rel_path=".")
        assert report_path(item) == tmp_path / "profile.coverprofile"

    def test_reads_profile_bytes(self, tmp_path: Path) -> None:
        (tmp_path / "profile.coverprofile").write_bytes(b"mode: set\na.go:1.1,2.2 1 1\n")
        item = WorkItem(path=tmp_path, rel_path="pkg")

        fragment = read_fragment(item)

        assert fragment.rel_path == "pkg"
        assert fragment.data == b"mode: set\na.go:1.1,2.2 1 1\n"

    def test_missing_profile(self, tmp_path: Path) -> None:
        item = WorkItem(path=tmp_path, rel_path="pkg")

        with pytest.raises(DispatchError) as exc_info:
            read_fragment(item)

        assert exc_info.value.code == ErrorCode.DISPATCH_REPORT_UNREADABLE
        assert exc_info.value.details["package"] == "./pkg"
        assert exc_info.value.details["path"] == str(tmp_path / "profile.coverprofile")
