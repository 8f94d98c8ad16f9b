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
"""Text transformation client.

Usage::

    textwire-client [-h] [-v] [-p PORT] [--host HOST] [-t TIMEOUT] action text

Sends one request, prints the response on stdout and exits with status 0.
Any usage error or connection failure is reported on stderr, with exit status 1.
"""

from __future__ import annotations

__all__ = ["build_parser", "main", "run"]

import argparse
import logging
import sys
from collections.abc import Sequence

from ..actions import Action
from ..client.tcp import TCPNetworkClient
from ..codec import Request
from ..exceptions import EncodingError, MalformedResponseError, UsageError
from ..lowlevel.constants import DEFAULT_CONNECT_TIMEOUT, DEFAULT_HOST, DEFAULT_PORT, MAX_TEXT_SIZE
from ._parser import CommandLineParser, configure_logging, positive_float, remote_port_number

logger = logging.getLogger(__name__)


def build_parser() -> CommandLineParser:
    parser = CommandLineParser(
        prog="textwire-client",
        description="Send a text to a textwire server and print the transformed text.",
    )

    parser.add_argument(
        "-v",
        "--verbose",
        dest="log_level",
        action="store_const",
        const="DEBUG",
        default="WARNING",
        help="Increase verbose level",
    )
    parser.add_argument(
        "-p",
        "--port",
        type=remote_port_number,
        default=DEFAULT_PORT,
        help="Server port",
    )
    parser.add_argument(
        "--host",
        default=DEFAULT_HOST,
        help="Server host",
    )
    parser.add_argument(
        "-t",
        "--timeout",
        type=positive_float,
        default=DEFAULT_CONNECT_TIMEOUT,
        help="Connection and response timeout (in seconds)",
    )
    parser.add_argument(
        "action",
        choices=[action.value for action in Action],
        help="Transformation to apply",
    )
    parser.add_argument(
        "text",
        help=f"Text to transform (at most {MAX_TEXT_SIZE} bytes once encoded in UTF-8)",
    )

    return parser


def parse_args(parser: CommandLineParser, argv: Sequence[str] | None = None) -> argparse.Namespace:
    """
    Raises:
        UsageError: Invalid command line.
    """
    args = parser.parse_args(argv)
    try:
        size = len(args.text.encode("utf-8"))
    except UnicodeError:
        parser.error("argument text: not a valid UTF-8 string")
    if size > MAX_TEXT_SIZE:
        parser.error(f"argument text: too long ({size} bytes, maximum is {MAX_TEXT_SIZE})")
    args.action = Action(args.action)
    return args


def run(host: str, port: int, request: Request, timeout: float) -> str:
    """
    Sends `request` to the server and returns its response.

    Raises:
        OSError: Connection failure, including a connection closed without any response.
        TimeoutError: The server did not answer within `timeout` seconds.
        MalformedResponseError: Malformed response.
    """
    logger.debug("Connecting to %s:%d", host, port)
    with TCPNetworkClient((host, port), connect_timeout=timeout) as client:
        logger.debug("Connected to %s", client.get_remote_address())
        client.send_packet(request)
        logger.debug("Request sent, waiting for response...")
        try:
            response = client.recv_packet(timeout=timeout)
        except ConnectionAbortedError:
            raise ConnectionAbortedError("connection closed by server without response") from None
        except TimeoutError:
            raise TimeoutError(f"no response from server after {timeout} seconds") from None
        logger.debug("Response received (%d characters)", len(response))
        return response


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    try:
        args = parse_args(parser, argv)
    except UsageError as exc:
        parser.print_usage_error(exc)
        return 1

    configure_logging(args.log_level)

    try:
        response = run(args.host, args.port, Request(args.action, args.text), args.timeout)
    except MalformedResponseError as exc:
        print(f"error: malformed response: {exc}", file=sys.stderr)
        return 1
    except EncodingError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    except OSError as exc:
        print(f"error: {args.host}:{args.port}: {exc.strerror or exc}", file=sys.stderr)
        return 1

    print(response)
    return 0


if __name__ == "__main__":
    sys.exit(main())
