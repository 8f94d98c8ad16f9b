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
"""textwire's constants module."""

from __future__ import annotations

__all__ = [
    "ACCEPT_CAPACITY_ERRNOS",
    "ACCEPT_CAPACITY_ERROR_SLEEP_TIME",
    "DEFAULT_CONNECT_TIMEOUT",
    "DEFAULT_HOST",
    "DEFAULT_POLL_INTERVAL",
    "DEFAULT_PORT",
    "DEFAULT_SEND_TIMEOUT",
    "DEFAULT_STREAM_BUFSIZE",
    "MAX_RESPONSE_SIZE",
    "MAX_TEXT_SIZE",
]

import errno as _errno
from typing import Final

# Port used by both the client and the server when none is given
DEFAULT_PORT: Final[int] = 8080

# Host the client connects to when none is given
DEFAULT_HOST: Final[str] = "localhost"

# Maximum size (in bytes) of the UTF-8 text of a request
MAX_TEXT_SIZE: Final[int] = 1024

# Maximum size (in bytes) of the UTF-8 text of a response
# The case mapping of a character is at most three times longer than the character itself
MAX_RESPONSE_SIZE: Final[int] = 3 * MAX_TEXT_SIZE

# Buffer size for a recv(2) operation
DEFAULT_STREAM_BUFSIZE: Final[int] = 16 * 1024  # 16KiB

# Number of seconds the client waits for the connection, then for the response
DEFAULT_CONNECT_TIMEOUT: Final[float] = 10.0

# Number of seconds the server waits for a response to be fully written
DEFAULT_SEND_TIMEOUT: Final[float] = 10.0

# Maximum time the server loop waits for an event before checking for a shutdown request
DEFAULT_POLL_INTERVAL: Final[float] = 0.1

# accept(2) errors meaning the process or the system ran out of resources
ACCEPT_CAPACITY_ERRNOS: Final[frozenset[int]] = frozenset({_errno.EMFILE, _errno.ENFILE, _errno.ENOMEM, _errno.ENOBUFS})

# Time to wait before calling accept(2) again after one of those errors
ACCEPT_CAPACITY_ERROR_SLEEP_TIME: Final[float] = 0.100
