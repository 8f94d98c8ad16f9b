from __future__ import annotations

from typing import Any

from textwire.actions import Action
from textwire.codec import (
    FrameReader,
    Request,
    decode_request,
    decode_response,
    encode_request,
    encode_response,
    request_parser,
    response_parser,
)
from textwire.exceptions import EncodingError, MalformedRequestError, MalformedResponseError
from textwire.lowlevel.constants import MAX_RESPONSE_SIZE, MAX_TEXT_SIZE

import pytest

from ..tools import send_return


class TestRequestCodec:
    @pytest.mark.parametrize("action", list(Action), ids=str)
    @pytest.mark.parametrize("text", ["", "test", "hello world", "héllo wörld", "x" * MAX_TEXT_SIZE], ids=lambda t: f"len=={len(t)}")
    def test____decode_request____inverse_of_encode_request(self, action: Action, text: str) -> None:
        # Arrange

        # Act
        request = decode_request(encode_request(action, text))

        # Assert
        assert request == Request(action, text)

    def test____encode_request____from_string_action(self) -> None:
        # Arrange

        # Act
        data = encode_request("reverse", "test")

        # Assert
        assert data == b"\x07reverse\x00\x04test"

    def test____encode_request____unknown_action(self) -> None:
        # Arrange

        # Act & Assert
        with pytest.raises(EncodingError, match=r"^Unknown action 'test'$") as exc_info:
            encode_request("test", "test")
        assert exc_info.value.error_info == {"action": "test"}

    def test____encode_request____text_too_long(self) -> None:
        # Arrange

        # Act & Assert
        with pytest.raises(EncodingError, match=r"^Text too long \(1025 bytes, maximum is 1024\)$") as exc_info:
            encode_request(Action.UPPERCASE, "x" * (MAX_TEXT_SIZE + 1))
        assert exc_info.value.error_info == {"size": MAX_TEXT_SIZE + 1, "limit": MAX_TEXT_SIZE}

    def test____encode_request____text_limit_counts_bytes(self) -> None:
        # Arrange
        text = "é" * (MAX_TEXT_SIZE // 2 + 1)

        # Act & Assert
        with pytest.raises(EncodingError):
            encode_request(Action.REVERSE, text)

    def test____encode_request____not_a_string(self) -> None:
        # Arrange

        # Act & Assert
        with pytest.raises(TypeError, match=r"^Expected a str object, got b'test'$"):
            encode_request(Action.REVERSE, b"test")  # type: ignore[arg-type]

    @pytest.mark.parametrize(
        ["data", "message"],
        [
            pytest.param(b"", r"^Missing data to create frame$", id="empty"),
            pytest.param(b"\x07rev", r"^Missing data to create frame$", id="truncated-action"),
            pytest.param(b"\x07reverse\x00", r"^Missing data to create frame$", id="truncated-header"),
            pytest.param(b"\x07reverse\x00\x04tes", r"^Missing data to create frame$", id="truncated-text"),
            pytest.param(b"\x07reverse\x00\x04testX", r"^Extra data caught$", id="trailing-garbage"),
            pytest.param(b"\x04test\x00\x04test", r"^Unknown action b'test'$", id="unknown-action"),
            pytest.param(b"\x04\xff\xfe\xfd\xfc\x00\x00", r"^Unknown action b'.+'$", id="non-ascii-action"),
            pytest.param(b"\x00\x00\x04test", r"^Empty action name$", id="empty-action"),
            pytest.param(
                b"\x07reverse\x04\x01" + b"x" * 1025,
                r"^Declared text length is too big \(1025 bytes, maximum is 1024\)$",
                id="oversized",
            ),
            pytest.param(b"\x07reverse\x00\x02\xc3\x28", r"^Text is not valid utf-8: .+$", id="invalid-utf8"),
        ],
    )
    def test____decode_request____malformed(self, data: bytes, message: str) -> None:
        # Arrange

        # Act & Assert
        with pytest.raises(MalformedRequestError, match=message):
            decode_request(data)


class TestResponseCodec:
    @pytest.mark.parametrize("text", ["", "tset", "DLROW OLLEH", "日本語", "X" * MAX_RESPONSE_SIZE], ids=lambda t: f"len=={len(t)}")
    def test____decode_response____inverse_of_encode_response(self, text: str) -> None:
        # Arrange

        # Act
        output = decode_response(encode_response(text))

        # Assert
        assert output == text

    def test____encode_response____uppercase_of_longest_request_fits(self) -> None:
        # Arrange
        text = "ΐ" * (MAX_TEXT_SIZE // 2)
        assert len(text.upper().encode("utf-8")) == MAX_RESPONSE_SIZE

        # Act
        data = encode_response(text.upper())

        # Assert
        assert data[:2] == MAX_RESPONSE_SIZE.to_bytes(2, "big")

    def test____encode_response____text_too_long(self) -> None:
        # Arrange

        # Act & Assert
        with pytest.raises(EncodingError, match=r"^Text too long \(3073 bytes, maximum is 3072\)$"):
            encode_response("X" * (MAX_RESPONSE_SIZE + 1))

    @pytest.mark.parametrize(
        "data",
        [
            pytest.param(b"", id="empty"),
            pytest.param(b"\x00", id="truncated-header"),
            pytest.param(b"\x00\x04tse", id="truncated-text"),
            pytest.param(b"\x00\x04tsetX", id="trailing-garbage"),
            pytest.param(b"\x0c\x01" + b"X" * 3073, id="oversized"),
            pytest.param(b"\x00\x01\xff", id="invalid-utf8"),
        ],
    )
    def test____decode_response____malformed(self, data: bytes) -> None:
        # Arrange

        # Act & Assert
        with pytest.raises(MalformedResponseError):
            decode_response(data)


class TestParsers:
    def test____request_parser____byte_by_byte(self) -> None:
        # Arrange
        data = encode_request(Action.TITLE_CASE, "hello")
        parser = request_parser()
        next(parser)

        # Act
        for i in range(len(data) - 1):
            parser.send(data[i : i + 1])
        result = send_return(parser, data[-1:])

        # Assert
        assert result == (Request(Action.TITLE_CASE, "hello"), b"")

    def test____request_parser____returns_bytes_past_the_frame(self) -> None:
        # Arrange
        parser = request_parser()
        next(parser)

        # Act
        result = send_return(parser, encode_request(Action.REVERSE, "abc") + b"next")

        # Assert
        assert result == (Request(Action.REVERSE, "abc"), b"next")

    def test____request_parser____oversized_text_rejected_from_header(self) -> None:
        # Arrange
        parser = request_parser()
        next(parser)

        # Act & Assert
        with pytest.raises(MalformedRequestError) as exc_info:
            parser.send(b"\x07reverse\xff\xff")
        assert exc_info.value.error_info == {"size": 65535, "limit": MAX_TEXT_SIZE}

    def test____response_parser____empty_text(self) -> None:
        # Arrange
        parser = response_parser()

        # Act
        next(parser)
        result = send_return(parser, b"\x00\x00")

        # Assert
        assert result == ("", b"")

    def test____response_parser____declared_length_at_limit(self) -> None:
        # Arrange
        text = "X" * MAX_RESPONSE_SIZE
        parser = response_parser()
        next(parser)

        # Act
        result = send_return(parser, encode_response(text))

        # Assert
        assert result == (text, b"")


class TestFrameReader:
    @pytest.fixture
    @staticmethod
    def reader() -> FrameReader[Any]:
        return FrameReader(request_parser)

    def test____feed____partial_frame(self, reader: FrameReader[Any]) -> None:
        # Arrange
        data = encode_request(Action.LOWERCASE, "HELLO")

        # Act
        first = reader.feed(data[:5])
        second = reader.feed(data[5:])

        # Assert
        assert first is None
        assert second == Request(Action.LOWERCASE, "HELLO")

    def test____feed____empty_chunk_without_pending_data(self, reader: FrameReader[Any]) -> None:
        # Arrange

        # Act & Assert
        assert reader.feed(b"") is None

    def test____feed____several_frames_in_one_chunk(self, reader: FrameReader[Any]) -> None:
        # Arrange
        data = encode_request(Action.REVERSE, "abc") + encode_request(Action.UPPERCASE, "def")

        # Act
        first = reader.feed(data)
        second = reader.feed(b"")
        third = reader.feed(b"")

        # Assert
        assert first == Request(Action.REVERSE, "abc")
        assert second == Request(Action.UPPERCASE, "def")
        assert third is None

    def test____feed____starts_over_after_error(self, reader: FrameReader[Any]) -> None:
        # Arrange
        with pytest.raises(MalformedRequestError):
            reader.feed(b"\x00")

        # Act
        request = reader.feed(encode_request(Action.REVERSE, "abc"))

        # Assert
        assert request == Request(Action.REVERSE, "abc")

    def test____clear____drops_pending_data(self, reader: FrameReader[Any]) -> None:
        # Arrange
        data = encode_request(Action.REVERSE, "abc")
        reader.feed(data[:4])

        # Act
        reader.clear()

        # Assert
        assert reader.feed(data) == Request(Action.REVERSE, "abc")

    def test____clear____drops_bytes_kept_for_next_frame(self, reader: FrameReader[Any]) -> None:
        # Arrange
        data = encode_request(Action.REVERSE, "abc")
        reader.feed(data + data[:4])

        # Act
        reader.clear()

        # Assert
        assert reader.feed(b"") is None

    def test____feed____response_reader(self) -> None:
        # Arrange
        reader: FrameReader[str] = FrameReader(response_parser)

        # Act
        response = reader.feed(encode_response("tset"))

        # Assert
        assert response == "tset"
