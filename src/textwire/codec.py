# Copyright 2025, the textwire contributors
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
#
"""Request/response framing module.

Wire format (all integers in network byte order)::

    request  := action_len:u8  action:ascii[action_len]  text_len:u16  text:utf8[text_len]
    response := text_len:u16  text:utf8[text_len]

A request text is at most :data:`.MAX_TEXT_SIZE` bytes long. A response can be up to
:data:`.MAX_RESPONSE_SIZE` bytes long, because case mapping can make a text longer
(``"ŉ".upper() == "ʼN"``).

A declared text length greater than the limit is rejected as soon as the header is read.

Example:
    >>> encode_request("reverse", "test")
    b'\\x07reverse\\x00\\x04test'
    >>> decode_request(b'\\x07reverse\\x00\\x04test')
    Request(action=Action.REVERSE, text='test')
    >>> decode_response(encode_response("tset"))
    'tset'
"""

from __future__ import annotations

__all__ = [
    "FrameReader",
    "Request",
    "decode_request",
    "decode_response",
    "encode_request",
    "encode_response",
    "request_parser",
    "response_parser",
]

import struct
from collections.abc import Callable, Generator
from typing import Final, Generic, NamedTuple, TypeAlias, TypeVar, final

from .actions import Action
from .exceptions import DeserializeError, EncodingError, MalformedRequestError, MalformedResponseError
from .lowlevel.constants import MAX_RESPONSE_SIZE, MAX_TEXT_SIZE

_T = TypeVar("_T")

FrameParser: TypeAlias = Generator[None, bytes, tuple[_T, bytes]]
"""A generator fed with received chunks, which returns the frame and the bytes received past its end."""

_ACTION_LENGTH: Final[struct.Struct] = struct.Struct("!B")
_TEXT_LENGTH: Final[struct.Struct] = struct.Struct("!H")


class Request(NamedTuple):
    """A transformation request: one action, one text."""

    action: Action
    text: str


def encode_request(action: Action | str, text: str) -> bytes:
    """
    Builds a request frame.

    Raises:
        EncodingError: `action` is not a known action, or `text` is too long.
        TypeError: `text` is not a :class:`str` object.
    """
    try:
        action = Action(action)
    except ValueError:
        raise EncodingError(f"Unknown action {action!r}", error_info={"action": action}) from None
    name = action.value.encode("ascii")
    return _ACTION_LENGTH.pack(len(name)) + name + _encode_text(text, MAX_TEXT_SIZE)


def encode_response(text: str) -> bytes:
    """
    Builds a response frame.

    Raises:
        EncodingError: `text` is too long.
        TypeError: `text` is not a :class:`str` object.
    """
    return _encode_text(text, MAX_RESPONSE_SIZE)


def _encode_text(text: str, limit: int) -> bytes:
    if not isinstance(text, str):
        raise TypeError(f"Expected a str object, got {text!r}")
    data = text.encode("utf-8")
    if len(data) > limit:
        raise EncodingError(
            f"Text too long ({len(data)} bytes, maximum is {limit})",
            error_info={"size": len(data), "limit": limit},
        )
    return _TEXT_LENGTH.pack(len(data)) + data


def _read_exactly(buffer: bytearray, size: int) -> Generator[None, bytes, bytes]:
    while len(buffer) < size:
        buffer += yield
    data = bytes(buffer[:size])
    del buffer[:size]
    return data


def _read_text(buffer: bytearray, limit: int, error_cls: type[DeserializeError]) -> Generator[None, bytes, str]:
    (size,) = _TEXT_LENGTH.unpack((yield from _read_exactly(buffer, _TEXT_LENGTH.size)))
    if size > limit:
        raise error_cls(
            f"Declared text length is too big ({size} bytes, maximum is {limit})",
            error_info={"size": size, "limit": limit},
        )
    data = yield from _read_exactly(buffer, size)
    try:
        return data.decode("utf-8")
    except UnicodeError as exc:
        raise error_cls(f"Text is not valid utf-8: {exc}", error_info={"data": data}) from exc


def request_parser() -> FrameParser[Request]:
    """
    Parses one request frame out of the chunks sent into the generator.

    Raises:
        MalformedRequestError: Empty or unknown action name, declared text length too big, or invalid UTF-8 text.
    """
    buffer = bytearray()
    (size,) = _ACTION_LENGTH.unpack((yield from _read_exactly(buffer, _ACTION_LENGTH.size)))
    if size == 0:
        raise MalformedRequestError("Empty action name")
    name = yield from _read_exactly(buffer, size)
    try:
        action = Action(name.decode("ascii"))
    except (UnicodeError, ValueError):
        raise MalformedRequestError(f"Unknown action {name!r}", error_info={"action": name}) from None
    text = yield from _read_text(buffer, MAX_TEXT_SIZE, MalformedRequestError)
    return Request(action, text), bytes(buffer)


def response_parser() -> FrameParser[str]:
    """
    Parses one response frame out of the chunks sent into the generator.

    Raises:
        MalformedResponseError: Declared text length too big, or invalid UTF-8 text.
    """
    buffer = bytearray()
    text = yield from _read_text(buffer, MAX_RESPONSE_SIZE, MalformedResponseError)
    return text, bytes(buffer)


def decode_request(data: bytes) -> Request:
    """
    Parses exactly one request frame.

    Raises:
        MalformedRequestError: `data` is truncated, oversized, has trailing bytes, or names an unknown action.
    """
    return _decode(request_parser(), data, MalformedRequestError)


def decode_response(data: bytes) -> str:
    """
    Parses exactly one response frame.

    Raises:
        MalformedResponseError: `data` is truncated, oversized, has trailing bytes, or is not valid UTF-8.
    """
    return _decode(response_parser(), data, MalformedResponseError)


def _decode(parser: FrameParser[_T], data: bytes, error_cls: type[DeserializeError]) -> _T:
    next(parser)
    try:
        parser.send(bytes(data))
    except StopIteration as exc:
        frame, remaining = exc.value
    else:
        parser.close()
        raise error_cls("Missing data to create frame", error_info={"data": data})
    if remaining:
        raise error_cls("Extra data caught", error_info={"frame": frame, "extra": remaining})
    return frame


@final
class FrameReader(Generic[_T]):
    """
    Turns the chunks received from a stream socket into frames.

    Example:
        >>> reader = FrameReader(response_parser)
        >>> reader.feed(b"\\x00\\x04ts") is None
        True
        >>> reader.feed(b"et")
        'tset'
    """

    __slots__ = ("__parser_factory", "__parser", "__remaining")

    def __init__(self, parser_factory: Callable[[], FrameParser[_T]]) -> None:
        """
        Parameters:
            parser_factory: Called to create the parser of each frame (:func:`request_parser` or :func:`response_parser`).
        """
        self.__parser_factory: Callable[[], FrameParser[_T]] = parser_factory
        self.__parser: FrameParser[_T] | None = None
        self.__remaining: bytes = b""

    def feed(self, chunk: bytes) -> _T | None:
        """
        Adds `chunk` to the frame being parsed.

        Bytes received past the end of a frame are kept for the next call:
        ``feed(b"")`` returns the next frame if it was already received.

        Raises:
            DeserializeError: Invalid frame. The reader starts over with the next chunk.

        Returns:
            the frame once it is complete, :data:`None` if more data is needed.
        """
        parser = self.__parser
        if parser is None:
            chunk, self.__remaining = self.__remaining + chunk, b""
            if not chunk:
                return None
            parser = self.__parser = self.__parser_factory()
            next(parser)
        try:
            parser.send(chunk)
        except StopIteration as exc:
            self.__parser = None
            frame, self.__remaining = exc.value
            return frame
        except Exception:
            self.__parser = None
            raise
        return None

    def clear(self) -> None:
        """Drops the frame being parsed and the bytes kept for the next one."""
        parser, self.__parser = self.__parser, None
        self.__remaining = b""
        if parser is not None:
            parser.close()
