"""Unit tests for the incremental SSE parser.

Tests cover:
- Field handling (event, data, id, retry, comments, unknown fields)
- Dispatch rules (blank line, empty data, event type reset)
- Line endings (LF, CRLF) and BOM
- Arbitrary chunk boundaries, including splits inside UTF-8 sequences
- Malformed frames (invalid UTF-8, oversized) without losing later frames
"""

import random

import pytest

from livefeed.client.parser import FrameError, SSEMessage, SSEParser
from livefeed.core.enums import ErrorCode
from livefeed.core.result import Failure, Success


def _messages(outcomes) -> list[SSEMessage]:
    return [o.value for o in outcomes if isinstance(o, Success)]


def _feed_all(parser: SSEParser, chunks: list[bytes]):
    outcomes = []
    for chunk in chunks:
        outcomes.extend(parser.feed(chunk))
    return outcomes


def _split_randomly(data: bytes, rng: random.Random) -> list[bytes]:
    chunks = []
    position = 0
    while position < len(data):
        size = rng.randint(1, 7)
        chunks.append(data[position : position + size])
        position += size
    return chunks


STREAM = (
    "retry: 3000\n\n"
    'event: connected\ndata: {"session_id": "SSE_1"}\n\n'
    ": keep-alive\n\n"
    'event: product.updated\ndata: {"id": 1, "name": "Käse ☕"}\nid: 1-0\n\n'
    "data: line one\ndata: line two\n\n"
    'event: ping\ndata: {"timestamp": 1.5}\n\n'
).encode("utf-8")


@pytest.mark.unit
class TestFieldParsing:
    """Tests for individual SSE fields."""

    def test_event_and_data(self):
        parser = SSEParser()

        outcomes = parser.feed(b"event: product.created\ndata: {\"id\": 7}\n\n")

        assert outcomes == [
            Success(value=SSEMessage(event="product.created", data='{"id": 7}'))
        ]

    def test_default_event_type_is_message(self):
        parser = SSEParser()

        [message] = _messages(parser.feed(b"data: hello\n\n"))

        assert message.event == "message"
        assert message.data == "hello"

    def test_multiple_data_lines_joined_with_newline(self):
        parser = SSEParser()

        [message] = _messages(parser.feed(b"data: a\ndata: b\ndata:\n\n"))

        assert message.data == "a\nb\n"

    def test_only_one_leading_space_is_stripped(self):
        parser = SSEParser()

        [message] = _messages(parser.feed(b"data:  two spaces\n\n"))

        assert message.data == " two spaces"

    def test_value_without_space_after_colon(self):
        parser = SSEParser()

        [message] = _messages(parser.feed(b"event:tight\ndata:x\n\n"))

        assert message.event == "tight"
        assert message.data == "x"

    def test_comments_are_ignored(self):
        parser = SSEParser()

        assert parser.feed(b": heartbeat\n\n") == []

    def test_unknown_fields_are_ignored(self):
        parser = SSEParser()

        [message] = _messages(parser.feed(b"foo: bar\ndata: ok\n\n"))

        assert message.data == "ok"

    def test_field_without_colon_has_empty_value(self):
        parser = SSEParser()

        [message] = _messages(parser.feed(b"data\n\n"))

        assert message.data == ""

    def test_id_sets_last_event_id(self):
        parser = SSEParser()

        [message] = _messages(parser.feed(b"id: 5-0\ndata: x\n\n"))

        assert message.id == "5-0"
        assert parser.last_event_id == "5-0"

    def test_id_survives_following_frames(self):
        parser = SSEParser()

        outcomes = parser.feed(b"id: 5-0\ndata: x\n\ndata: y\n\n")

        assert [m.id for m in _messages(outcomes)] == ["5-0", "5-0"]

    def test_id_with_null_is_ignored(self):
        parser = SSEParser()

        parser.feed(b"id: a\x00b\ndata: x\n\n")

        assert parser.last_event_id is None

    def test_retry_digits_only(self):
        parser = SSEParser()

        parser.feed(b"retry: 2500\n\n")
        assert parser.retry_ms == 2500

        parser.feed(b"retry: 1e3\n\nretry: -5\n\n")
        assert parser.retry_ms == 2500


@pytest.mark.unit
class TestDispatch:
    """Tests for frame dispatch rules."""

    def test_no_dispatch_without_data(self):
        parser = SSEParser()

        assert parser.feed(b"event: lonely\n\n") == []

    def test_event_type_resets_after_dispatch(self):
        parser = SSEParser()

        outcomes = parser.feed(b"event: a\ndata: 1\n\ndata: 2\n\n")

        assert [m.event for m in _messages(outcomes)] == ["a", "message"]

    def test_event_type_resets_after_empty_frame(self):
        parser = SSEParser()

        outcomes = parser.feed(b"event: a\n\ndata: 2\n\n")

        assert [m.event for m in _messages(outcomes)] == ["message"]

    def test_incomplete_frame_is_held(self):
        parser = SSEParser()

        assert parser.feed(b"data: partial\n") == []
        assert _messages(parser.feed(b"\n"))[0].data == "partial"

    def test_crlf_line_endings(self):
        parser = SSEParser()

        [message] = _messages(parser.feed(b"event: x\r\ndata: y\r\n\r\n"))

        assert message.event == "x"
        assert message.data == "y"

    def test_leading_bom_is_skipped(self):
        parser = SSEParser()

        outcomes = _feed_all(parser, [b"\xef", b"\xbb\xbfdata: x\n\n"])

        assert _messages(outcomes)[0].data == "x"

    def test_reset_drops_partial_frame_keeps_id(self):
        parser = SSEParser()
        parser.feed(b"id: 9-0\ndata: x\n\ndata: half")

        parser.reset()

        assert parser.feed(b"\n\n") == []
        assert parser.last_event_id == "9-0"

    def test_lines_seen_counts_completed_lines(self):
        parser = SSEParser()

        parser.feed(b": ping\n\ndata: x")

        assert parser.lines_seen == 2


@pytest.mark.unit
class TestMalformedFrames:
    """Tests for frames that cannot be decoded."""

    def test_invalid_utf8_discards_only_that_frame(self):
        parser = SSEParser()

        outcomes = parser.feed(b"data: \xff\xfe\n\ndata: good\n\n")

        assert isinstance(outcomes[0], Failure)
        assert isinstance(outcomes[0].error, FrameError)
        assert outcomes[0].error.code == ErrorCode.STREAM_FRAME_MALFORMED
        assert outcomes[0].error.reason == "invalid utf-8"
        assert outcomes[1] == Success(value=SSEMessage(event="message", data="good"))

    def test_oversized_frame_is_discarded(self):
        parser = SSEParser(max_frame_bytes=32)

        outcomes = parser.feed(b"data: " + b"x" * 20 + b"\ndata: " + b"y" * 20 + b"\n\n")

        assert len(outcomes) == 1
        assert isinstance(outcomes[0], Failure)
        assert outcomes[0].error.reason == "frame exceeds maximum size"

    def test_oversized_unterminated_line_is_discarded(self):
        parser = SSEParser(max_frame_bytes=16)

        outcomes = _feed_all(
            parser, [b"data: " + b"z" * 40, b"z" * 40, b"\n\n", b"data: ok\n\n"]
        )

        assert isinstance(outcomes[0], Failure)
        assert _messages(outcomes) == [SSEMessage(event="message", data="ok")]


@pytest.mark.unit
class TestChunkBoundaries:
    """Parsing must not depend on how the byte stream is split."""

    def test_byte_by_byte_equals_single_chunk(self):
        whole = SSEParser().feed(STREAM)

        parser = SSEParser()
        split = _feed_all(parser, [STREAM[i : i + 1] for i in range(len(STREAM))])

        assert split == whole

    @pytest.mark.parametrize("seed", range(25))
    def test_random_chunking_equals_single_chunk(self, seed):
        rng = random.Random(seed)
        whole = SSEParser().feed(STREAM)

        split = _feed_all(SSEParser(), _split_randomly(STREAM, rng))

        assert split == whole
        assert [m.event for m in _messages(split)] == [
            "connected",
            "product.updated",
            "message",
            "ping",
        ]

    def test_multibyte_character_split_across_chunks(self):
        encoded = "data: ☕\n\n".encode("utf-8")
        cut = encoded.index(b"\xe2") + 1

        outcomes = _feed_all(SSEParser(), [encoded[:cut], encoded[cut:]])

        assert _messages(outcomes)[0].data == "☕"

    @pytest.mark.parametrize("seed", range(10))
    def test_random_garbage_never_raises(self, seed):
        rng = random.Random(seed)
        garbage = bytes(rng.randrange(256) for _ in range(2048))
        parser = SSEParser(max_frame_bytes=256)

        outcomes = _feed_all(parser, _split_randomly(garbage, rng))
        outcomes.extend(parser.feed(b"\n\ndata: after\n\n"))

        assert _messages(outcomes)[-1].data == "after"
