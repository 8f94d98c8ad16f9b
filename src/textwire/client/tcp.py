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
"""TCP client module."""

from __future__ import annotations

__all__ = ["TCPNetworkClient"]

import contextlib
import errno as _errno
import logging
import os
import socket as _socket
import time
from typing import Any, Self

from ..codec import FrameReader, Request, encode_request, response_parser
from ..exceptions import ClientClosedError
from ..lowlevel._utils import validate_timeout
from ..lowlevel.constants import DEFAULT_CONNECT_TIMEOUT, DEFAULT_STREAM_BUFSIZE
from ..lowlevel.socket import SocketAddress, new_socket_address


class TCPNetworkClient:
    """
    A connection to a textwire server.

    Example:
        >>> from textwire.actions import Action
        >>> from textwire.codec import Request
        >>> with TCPNetworkClient(("localhost", 8080)) as client:
        ...     client.send_packet(Request(Action.REVERSE, "test"))
        ...     client.recv_packet(timeout=10)
        'tset'
    """

    __slots__ = ("__socket", "__reader", "__addr", "__peer", "__eof_reached", "__logger")

    def __init__(self, address: tuple[str, int], /, *, connect_timeout: float | None = DEFAULT_CONNECT_TIMEOUT) -> None:
        """
        Parameters:
            address: A pair of ``(host, port)`` for connection.
            connect_timeout: The connection timeout (in seconds).

        Raises:
            OSError: The connection cannot be established.
        """
        self.__socket: _socket.socket | None = None
        self.__logger: logging.Logger = logging.getLogger(__name__)

        host, port = address
        self.__logger.debug("Connecting to (%r, %d)...", host, port)
        socket = _socket.create_connection((host, port), timeout=connect_timeout)
        try:
            self.__addr: SocketAddress = new_socket_address(socket.getsockname())
            self.__peer: SocketAddress = new_socket_address(socket.getpeername())
            socket.settimeout(None)
        except BaseException:
            socket.close()
            raise

        self.__reader: FrameReader[str] = FrameReader(response_parser)
        self.__eof_reached: bool = False
        self.__socket = socket
        self.__logger.debug("Connection established: %s -> %s", self.__addr, self.__peer)

    def __del__(self) -> None:  # pragma: no cover
        try:
            socket: _socket.socket | None = self.__socket
        except AttributeError:
            return
        if socket is not None:
            socket.close()

    def __repr__(self) -> str:
        if self.__socket is None:
            return f"<{type(self).__name__} closed>"
        return f"<{type(self).__name__} {self.__addr} -> {self.__peer}>"

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def is_closed(self) -> bool:
        return self.__socket is None

    def close(self) -> None:
        """
        Closes the connection. Calling it again is a no-op.
        """
        if (socket := self.__socket) is None:
            return
        self.__socket = None
        self.__reader.clear()
        try:
            with contextlib.suppress(OSError):
                socket.shutdown(_socket.SHUT_RDWR)
        finally:
            socket.close()

    def send_packet(self, request: Request) -> None:
        """
        Sends `request` to the server. Blocks until all the data has been handed to the kernel.

        Raises:
            ClientClosedError: the client object is closed.
            EncodingError: `request` cannot be framed. Nothing has been sent.
            OSError: unrelated OS error occurred.
        """
        socket = self.__get_socket()
        data = encode_request(*request)
        socket.sendall(data)
        self.__logger.debug("%d byte(s) sent to %s", len(data), self.__peer)

    def recv_packet(self, timeout: float | None = None) -> str:
        """
        Waits for the response of the server.

        If `timeout` is not :data:`None`, the entire receive operation will take at most `timeout` seconds.

        Raises:
            ClientClosedError: the client object is closed.
            ConnectionAbortedError: the server closed the connection before a whole response was received.
            MalformedResponseError: invalid data received.
            OSError: unrelated OS error occurred.
            TimeoutError: the receive operation does not end up after `timeout` seconds.
        """
        socket = self.__get_socket()
        reader = self.__reader
        if (response := reader.feed(b"")) is not None:  # Already received with the previous one
            return response
        if self.__eof_reached:
            raise ConnectionAbortedError(_errno.ECONNABORTED, os.strerror(_errno.ECONNABORTED))

        deadline: float | None = None
        if timeout is not None:
            deadline = time.monotonic() + validate_timeout(timeout, name="timeout")
        try:
            while True:
                socket.settimeout(None if deadline is None else max(deadline - time.monotonic(), 0.0))
                try:
                    chunk: bytes = socket.recv(DEFAULT_STREAM_BUFSIZE)
                except (TimeoutError, BlockingIOError):
                    raise TimeoutError("recv_packet() timed out") from None
                if not chunk:
                    self.__eof_reached = True
                    self.__logger.debug("Received EOF from %s", self.__peer)
                    raise ConnectionAbortedError(_errno.ECONNABORTED, os.strerror(_errno.ECONNABORTED))
                self.__logger.debug("Received %d byte(s) from %s", len(chunk), self.__peer)
                if (response := reader.feed(chunk)) is not None:
                    return response
        finally:
            socket.settimeout(None)

    def __get_socket(self) -> _socket.socket:
        socket = self.__socket
        if socket is None:
            raise ClientClosedError("Closed client")
        return socket

    def get_local_address(self) -> SocketAddress:
        return self.__addr

    def get_remote_address(self) -> SocketAddress:
        return self.__peer
