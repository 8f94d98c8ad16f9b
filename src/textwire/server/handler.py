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
"""Network server request handler base classes module."""

from __future__ import annotations

__all__ = [
    "ClientInterface",
    "RequestHandler",
]

from abc import ABCMeta, abstractmethod
from typing import TYPE_CHECKING, Any, final

from ..lowlevel.socket import SocketAddress

if TYPE_CHECKING:
    from ..codec import Request
    from ..exceptions import MalformedRequestError


class ClientInterface(metaclass=ABCMeta):
    """
    The base class for a client interface, used by request handlers.
    """

    __slots__ = ("__addr", "__weakref__")

    def __init__(self, address: SocketAddress) -> None:
        """
        Parameters:
            address: The remote endpoint's address.
        """
        super().__init__()
        self.__addr: SocketAddress = address

    def __repr__(self) -> str:
        return f"<client with address {self.address} at {id(self):#x}{' closed' if self.is_closed() else ''}>"

    @abstractmethod
    def send_packet(self, text: str, /) -> None:
        """
        Sends `text` to the remote endpoint. Blocks until the whole response has been written,
        or until the server's send timeout expires.

        Raises:
            ClientClosedError: the client object is closed.
            EncodingError: `text` cannot be framed. Nothing has been sent.
            TimeoutError: the send operation does not end up before the server's send timeout.
            OSError: unrelated OS error occurred.
        """
        raise NotImplementedError

    @abstractmethod
    def is_closed(self) -> bool:
        raise NotImplementedError

    @abstractmethod
    def close(self) -> None:
        """
        Closes the connection. Calling it again is a no-op.
        """
        raise NotImplementedError

    @property
    @final
    def address(self) -> SocketAddress:
        """The remote endpoint's address. Read-only attribute."""
        return self.__addr


class RequestHandler(metaclass=ABCMeta):
    """
    The base class for a request handler, used by TCP network servers.
    """

    __slots__ = ("__weakref__",)

    def service_init(self, server: Any, /) -> None:
        """
        Called at the server startup. The default implementation does nothing.
        """
        pass

    @abstractmethod
    def handle(self, request: Request, client: ClientInterface, /) -> None:
        """
        Called to process the one request received from `client`.
        The connection is closed right after this method returns.
        """
        raise NotImplementedError

    def bad_request(self, client: ClientInterface, exc: MalformedRequestError, /) -> None:
        """
        Called when `client` sent a malformed request. Nothing is sent back, and the connection is closed
        right after this method returns. The default implementation does nothing.
        """
        pass

    def handle_error(self, client: ClientInterface, exc: Exception, /) -> bool:
        """
        Called when an unexpected exception is raised while processing a request of `client`.

        Returns:
            :data:`True` if the error has been handled, :data:`False` to let the server log it.
        """
        return False
