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
"""TCP network server implementation module."""

from __future__ import annotations

__all__ = ["TCPNetworkServer"]

import contextlib
import logging
import selectors
import socket as _socket
import threading
import time
from typing import Any, Self, final

from ..codec import FrameReader, Request, encode_response, request_parser
from ..exceptions import ClientClosedError, MalformedRequestError, ServerAlreadyRunning, ServerClosedError
from ..lowlevel import _utils, constants
from ..lowlevel.socket import SocketAddress, new_socket_address
from .handler import ClientInterface, RequestHandler


class TCPNetworkServer:
    """
    A network server for TCP connections.

    Connections are served from a single selector loop, on the thread which calls :meth:`serve_forever`.
    Each connection carries exactly one request: it is closed as soon as the request has been handled.
    """

    __slots__ = (
        "__listener_socket",
        "__listener_lock",
        "__listener_addr",
        "__request_handler",
        "__shutdown_asked",
        "__is_shutdown",
        "__is_up",
        "__poll_interval",
        "__send_timeout",
        "__logger",
    )

    def __init__(
        self,
        host: str | None,
        port: int,
        request_handler: RequestHandler,
        *,
        poll_interval: float = constants.DEFAULT_POLL_INTERVAL,
        send_timeout: float | None = constants.DEFAULT_SEND_TIMEOUT,
        logger: logging.Logger | None = None,
    ) -> None:
        """
        Parameters:
            host: specify which network interface to which the server should bind.
                  :data:`None` or an empty string means all interfaces.
            port: specify which port the server should listen on. If the value is ``0``, a random unused port will be selected.
            request_handler: The request handler to use.

        Keyword Arguments:
            poll_interval: Maximum time (in seconds) the loop waits for an event before checking for a shutdown request.
            send_timeout: Maximum time (in seconds) spent writing a response. :data:`None` means no limit.
            logger: If given, the logger instance to use.

        Raises:
            OSError: The listener socket cannot be bound (port already in use, permission denied...).
            OverflowError: `port` is out of range.
        """
        if not isinstance(request_handler, RequestHandler):
            raise TypeError(f"Expected a RequestHandler object, got {request_handler!r}")
        poll_interval = _utils.validate_timeout(poll_interval, name="poll_interval")
        if send_timeout is not None:
            send_timeout = _utils.validate_timeout(send_timeout, name="send_timeout")

        self.__listener_socket: _socket.socket | None = None
        try:
            listener_socket: _socket.socket = _socket.create_server((host or "", port))
        except OSError as exc:
            raise _utils.convert_socket_bind_error(exc, (host or "", port)) from None
        try:
            listener_socket.setblocking(False)
            self.__listener_lock = threading.RLock()
            self.__listener_addr: SocketAddress = new_socket_address(listener_socket.getsockname())
            self.__request_handler: RequestHandler = request_handler
            self.__shutdown_asked: threading.Event = threading.Event()
            self.__is_shutdown: threading.Event = threading.Event()
            self.__is_shutdown.set()
            self.__is_up: threading.Event = threading.Event()
            self.__poll_interval: float = poll_interval
            self.__send_timeout: float | None = send_timeout
            self.__logger: logging.Logger = logger or logging.getLogger(__name__)
        except BaseException:
            listener_socket.close()
            raise

        self.__listener_socket = listener_socket

    def __del__(self) -> None:  # pragma: no cover
        try:
            listener_socket: _socket.socket | None = self.__listener_socket
        except AttributeError:
            return
        self.__listener_socket = None
        if listener_socket is not None:
            listener_socket.close()

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *args: Any) -> None:
        self.server_close()

    def is_closed(self) -> bool:
        return self.__listener_socket is None

    def is_serving(self) -> bool:
        return self.__is_up.is_set()

    def server_close(self) -> None:
        """
        Closes the listener socket. A running :meth:`serve_forever` stops at its next wake-up.
        """
        with self.__listener_lock:
            if (listener_socket := self.__listener_socket) is None:
                return
            self.__listener_socket = None
            listener_socket.close()

    def shutdown(self, timeout: float | None = None) -> None:
        """
        Asks for the server to stop, and waits for :meth:`serve_forever` to return.
        Returns immediately if the server is not running.
        """
        self.__shutdown_asked.set()
        try:
            self.__is_shutdown.wait(timeout=timeout)
        finally:
            self.__shutdown_asked.clear()

    def serve_forever(self) -> None:
        """
        Accepts and serves connections until :meth:`shutdown` or :meth:`server_close` is called.

        Raises:
            ServerClosedError: The server is closed.
            ServerAlreadyRunning: Another thread is already running the server.
        """
        if (listener_socket := self.__listener_socket) is None:
            raise ServerClosedError("Closed server")
        if not self.__is_shutdown.is_set():
            raise ServerAlreadyRunning("Server is already running")

        logger = self.__logger

        with contextlib.ExitStack() as server_exit_stack:
            server_exit_stack.callback(logger.info, "Server stopped")

            self.__is_shutdown.clear()
            server_exit_stack.callback(self.__is_shutdown.set)

            selector = server_exit_stack.enter_context(selectors.DefaultSelector())
            selector.register(listener_socket, selectors.EVENT_READ, None)

            # Close remaining connections before the selector
            server_exit_stack.callback(self.__close_all_connections, selector)

            self.__request_handler.service_init(self)

            self.__is_up.set()
            server_exit_stack.callback(self.__is_up.clear)
            logger.info("Start serving at %s", self.__listener_addr)

            while not self.__shutdown_asked.is_set() and self.__listener_socket is not None:
                ready = selector.select(timeout=self.__poll_interval)
                if self.__shutdown_asked.is_set():  # shutdown() called during select()
                    break
                for key, _ in ready:
                    if key.data is None:
                        self.__accept_new_connection(key.fileobj, selector)  # type: ignore[arg-type]
                    else:
                        key.data.on_readable()

    def __accept_new_connection(self, listener_socket: _socket.socket, selector: selectors.BaseSelector) -> None:
        logger = self.__logger

        with self.__listener_lock:
            if self.__listener_socket is None:  # listener closed while waiting for lock
                return
            try:
                client_socket, address = listener_socket.accept()
            except (BlockingIOError, InterruptedError, ConnectionError):
                return
            except OSError as exc:
                if exc.errno in constants.ACCEPT_CAPACITY_ERRNOS:
                    logger.error(
                        "accept returned %s (%s); retrying in %s seconds",
                        exc.errno,
                        exc.strerror,
                        constants.ACCEPT_CAPACITY_ERROR_SLEEP_TIME,
                        exc_info=True,
                    )
                    time.sleep(constants.ACCEPT_CAPACITY_ERROR_SLEEP_TIME)
                    return
                raise

        address = new_socket_address(address)
        logger.info("Accepted new connection (address = %s)", address)

        try:
            client_socket.setblocking(False)
            selector.register(client_socket, selectors.EVENT_READ, _Connection(client_socket, address, self, selector))
        except BaseException:
            client_socket.close()
            raise

    @staticmethod
    def __close_all_connections(selector: selectors.BaseSelector) -> None:
        for key in list(selector.get_map().values()):
            if isinstance(connection := key.data, _Connection):
                connection.close()

    def _handle_error(self, client: ClientInterface, exc: Exception) -> None:
        try:
            if self.__request_handler.handle_error(client, exc):
                return
        except Exception as handler_exc:
            self.__logger.error("Request handler failed to handle an error", exc_info=handler_exc)

        self.__logger.error("-" * 40)
        self.__logger.error("Exception occurred during processing of request from %s", client.address, exc_info=exc)
        self.__logger.error("-" * 40)

    def get_address(self) -> SocketAddress | None:
        """
        Returns the listener address, or :data:`None` if the server is closed.
        """
        if self.__listener_socket is None:
            return None
        return self.__listener_addr

    @property
    def request_handler(self) -> RequestHandler:
        """The request handler in use. Read-only attribute."""
        return self.__request_handler

    @property
    def send_timeout(self) -> float | None:
        """Maximum time spent writing a response. Read-only attribute."""
        return self.__send_timeout

    @property
    def logger(self) -> logging.Logger:
        """The server's logger. Read-only attribute."""
        return self.__logger


@final
class _Connection(ClientInterface):
    __slots__ = ("__socket", "__reader", "__server", "__selector", "__logger")

    def __init__(
        self,
        socket: _socket.socket,
        address: SocketAddress,
        server: TCPNetworkServer,
        selector: selectors.BaseSelector,
    ) -> None:
        super().__init__(address)
        self.__socket: _socket.socket | None = socket
        self.__reader: FrameReader[Request] = FrameReader(request_parser)
        self.__server: TCPNetworkServer = server
        self.__selector: selectors.BaseSelector = selector
        self.__logger: logging.Logger = server.logger

    def on_readable(self) -> None:
        if (socket := self.__socket) is None:
            return
        logger = self.__logger
        try:
            data: bytes = socket.recv(constants.DEFAULT_STREAM_BUFSIZE)
        except (BlockingIOError, InterruptedError):
            return
        except ConnectionError:
            self.close()
            return
        except OSError as exc:
            self.__error_and_close(exc)
            return

        if not data:  # EOF
            logger.debug("%s closed the connection before sending a whole request", self.address)
            self.close()
            return

        logger.debug("Received %d bytes from %s", len(data), self.address)
        request_handler = self.__server.request_handler
        try:
            request = self.__reader.feed(data)
        except MalformedRequestError as exc:
            logger.debug("Malformed request sent by %s: %s", self.address, exc)
            self.__call_and_close(request_handler.bad_request, self, exc)
            return
        if request is not None:
            logger.debug("Processing request sent by %s", self.address)
            self.__call_and_close(request_handler.handle, request, self)

    def __call_and_close(self, func: Any, *args: Any) -> None:
        try:
            func(*args)
        except Exception as exc:
            self.__error_and_close(exc)
        else:
            self.close()

    def __error_and_close(self, exc: Exception) -> None:
        try:
            self.__server._handle_error(self, exc)
        finally:
            self.close()

    def is_closed(self) -> bool:
        return self.__socket is None

    def close(self) -> None:
        if (socket := self.__socket) is None:
            return
        self.__socket = None
        try:
            with contextlib.suppress(KeyError, ValueError):
                self.__selector.unregister(socket)
            self.__reader.clear()
            with contextlib.suppress(OSError):
                socket.shutdown(_socket.SHUT_WR)
        finally:
            socket.close()
            self.__logger.info("%s disconnected", self.address)

    def send_packet(self, text: str, /) -> None:
        if (socket := self.__socket) is None:
            raise ClientClosedError("Closed client")
        data = encode_response(text)
        socket.settimeout(self.__server.send_timeout)
        try:
            socket.sendall(data)
        finally:
            socket.setblocking(False)
        self.__logger.debug("%d byte(s) sent to %s", len(data), self.address)
