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
"""Socket address module."""

from __future__ import annotations

__all__ = ["SocketAddress", "new_socket_address"]

from typing import Any, NamedTuple


class SocketAddress(NamedTuple):
    """The ``(host, port)`` pair of a socket endpoint, as shown in logs."""

    host: str
    port: int

    def __str__(self) -> str:
        if ":" in self.host:
            return f"[{self.host}]:{self.port}"
        return f"{self.host}:{self.port}"


def new_socket_address(addr: tuple[Any, ...]) -> SocketAddress:
    """
    Keeps the host and the port of an address returned by :meth:`socket.socket.getsockname`
    or :meth:`socket.socket.getpeername`. IPv6 flow info and scope id are dropped.

    Example:
        >>> new_socket_address(("::1", 12345, 0, 0))
        SocketAddress(host='::1', port=12345)
    """
    host, port = addr[:2]
    return SocketAddress(host, port)
