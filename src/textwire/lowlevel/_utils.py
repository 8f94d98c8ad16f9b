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
from __future__ import annotations

__all__ = ["convert_socket_bind_error", "validate_timeout"]

import errno as _errno
import math


def convert_socket_bind_error(exc: OSError, addr: tuple[str, int]) -> OSError:
    """Adds `addr` to the message of a bind(2) failure. Errors without errno become EINVAL."""
    reason = exc.strerror if exc.errno else str(exc)
    msg = f"error while attempting to bind on address {addr!r}: {reason}"
    return OSError(exc.errno or _errno.EINVAL, msg).with_traceback(exc.__traceback__)


def validate_timeout(delay: float, *, name: str) -> float:
    delay = float(delay)
    if math.isnan(delay) or delay < 0:
        raise ValueError(f"{name!r} must be a non-negative number of seconds, got {delay!r}")
    return delay
