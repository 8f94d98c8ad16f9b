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
"""Exceptions definition module."""

from __future__ import annotations

__all__ = [
    "ClientClosedError",
    "DeserializeError",
    "EncodingError",
    "MalformedRequestError",
    "MalformedResponseError",
    "ServerAlreadyRunning",
    "ServerClosedError",
    "UsageError",
]

from typing import Any


class ClientClosedError(ConnectionError):
    """Error raised when trying to do an operation on a closed client."""


class ServerClosedError(RuntimeError):
    """Error raised when trying to do an operation on a closed server."""


class ServerAlreadyRunning(RuntimeError):
    """The server is already running."""


class UsageError(Exception):
    """Error raised when the command line is invalid.

    Nothing has been sent over the network when this error is raised.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message: str = message


class EncodingError(Exception):
    """A request or a response cannot be framed (unknown action, text too long)."""

    def __init__(self, message: str, error_info: Any = None) -> None:
        """
        Parameters:
            message: Error message.
            error_info: Additional error data.
        """

        super().__init__(message)

        self.error_info: Any = error_info
        """Additional error data."""


class DeserializeError(Exception):
    """Received bytes are not a valid frame."""

    def __init__(self, message: str, error_info: Any = None) -> None:
        """
        Parameters:
            message: Error message.
            error_info: Additional error data.
        """

        super().__init__(message)

        self.error_info: Any = error_info
        """Additional error data."""


class MalformedRequestError(DeserializeError):
    """A request frame is truncated or cannot be parsed."""


class MalformedResponseError(DeserializeError):
    """A response frame is truncated or cannot be parsed."""
