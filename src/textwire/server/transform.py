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
"""Text transformation request handler module."""

from __future__ import annotations

__all__ = ["TextTransformRequestHandler"]

import logging
from collections.abc import Callable, Mapping
from typing import Any

from ..actions import ACTIONS, Action
from ..codec import Request
from ..exceptions import MalformedRequestError
from .handler import ClientInterface, RequestHandler


class TextTransformRequestHandler(RequestHandler):
    """
    Applies the requested action to the received text, and sends the result back.

    Example:
        >>> from textwire.server.tcp import TCPNetworkServer
        >>> with TCPNetworkServer(None, 8080, TextTransformRequestHandler()) as server:
        ...     server.serve_forever()
    """

    __slots__ = ("__same_output", "__actions", "__logger")

    def __init__(self, *, same_output: bool = False, actions: Mapping[Action, Callable[[str], str]] = ACTIONS) -> None:
        """
        Parameters:
            same_output: If :data:`True`, the received text is sent back untouched.
            actions: The dispatch table used to look up the transformation.
        """
        super().__init__()
        self.__same_output: bool = bool(same_output)
        self.__actions: Mapping[Action, Callable[[str], str]] = actions
        self.__logger: logging.Logger = logging.getLogger(__name__)

    def service_init(self, server: Any, /) -> None:
        if self.__same_output:
            self.__logger.info("Echo mode enabled: texts are sent back untouched")

    def handle(self, request: Request, client: ClientInterface, /) -> None:
        action, text = request
        if self.__same_output:
            client.send_packet(text)
            return
        try:
            func = self.__actions[action]
        except KeyError:
            self.__logger.error("No transformation registered for %r, closing connection with %s", action, client.address)
            client.close()
            return
        self.__logger.debug("%s: %s(%d characters)", client.address, action, len(text))
        client.send_packet(func(text))

    def bad_request(self, client: ClientInterface, exc: MalformedRequestError, /) -> None:
        self.__logger.debug("Dropping connection with %s: %s", client.address, exc)
        client.close()

    @property
    def same_output(self) -> bool:
        """Echo mode flag. Read-only attribute."""
        return self.__same_output
