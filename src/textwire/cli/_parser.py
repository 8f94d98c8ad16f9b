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
"""Command line parsing tools shared by the client and the server."""

from __future__ import annotations

__all__ = [
    "CommandLineParser",
    "configure_logging",
    "port_number",
    "remote_port_number",
    "positive_float",
]

import argparse
import logging
import math
import re
import sys
from collections.abc import Iterable
from typing import IO, Any, NoReturn

from ..exceptions import UsageError

_PORT_PATTERN = re.compile(r"[0-9]{1,5}")


class _HelpFormatter(argparse.ArgumentDefaultsHelpFormatter):
    def add_usage(
        self,
        usage: str | None,
        actions: Iterable[argparse.Action],
        groups: Iterable[argparse._MutuallyExclusiveGroup],
        prefix: str | None = None,
    ) -> None:
        if prefix is None:
            prefix = "Usage: "
        super().add_usage(usage, actions, groups, prefix)


class CommandLineParser(argparse.ArgumentParser):
    """
    An :class:`argparse.ArgumentParser` which raises :exc:`.UsageError` instead of exiting.

    The help message is still printed to stdout, followed by a successful exit.
    """

    def __init__(self, **kwargs: Any) -> None:
        kwargs.setdefault("formatter_class", _HelpFormatter)
        super().__init__(**kwargs)

    def error(self, message: str) -> NoReturn:
        raise UsageError(message)

    def print_usage_error(self, exc: UsageError, file: IO[str] | None = None) -> None:
        """
        Prints the error message on the first line, followed by the usage text.
        """
        if file is None:
            file = sys.stderr
        print(f"error: {exc.message}", file=file)
        self.print_usage(file)


def _parse_port(value: str, minimum: int) -> int:
    if _PORT_PATTERN.fullmatch(value) is None or not (minimum <= (port := int(value)) <= 65535):
        raise argparse.ArgumentTypeError(f"invalid port number: {value!r}")
    return port


def port_number(value: str) -> int:
    """
    Parses a decimal TCP port number to listen on. ``0`` asks for a random unused port.

    Raises:
        argparse.ArgumentTypeError: `value` is not a decimal integer between 0 and 65535.
    """
    return _parse_port(value, 0)


def remote_port_number(value: str) -> int:
    """
    Parses a decimal TCP port number to connect to.

    Raises:
        argparse.ArgumentTypeError: `value` is not a decimal integer between 1 and 65535.
    """
    return _parse_port(value, 1)


def positive_float(value: str) -> float:
    try:
        result = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid number: {value!r}") from None
    if math.isnan(result) or result <= 0:
        raise argparse.ArgumentTypeError(f"must be a strictly positive number: {value!r}")
    return result


def configure_logging(level: int | str) -> None:
    logging.basicConfig(level=level, format="[ %(levelname)s ] [ %(name)s ] %(message)s", stream=sys.stderr)
