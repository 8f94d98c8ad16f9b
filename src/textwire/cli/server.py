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
"""Text transformation server.

Usage::

    textwire-server [-h] [-v] [-p PORT] [--host HOST] [--same-output]

Serves until interrupted (SIGINT or SIGTERM), then exits with status 0.
"""

from __future__ import annotations

__all__ = ["build_parser", "main"]

import logging
import signal
import sys
from collections.abc import Sequence

from ..exceptions import UsageError
from ..lowlevel.constants import DEFAULT_PORT
from ..server.tcp import TCPNetworkServer
from ..server.transform import TextTransformRequestHandler
from ._parser import CommandLineParser, configure_logging, port_number

logger = logging.getLogger(__name__)


def build_parser() -> CommandLineParser:
    parser = CommandLineParser(
        prog="textwire-server",
        description="Serve text transformations over TCP.",
    )

    parser.add_argument(
        "-v",
        "--verbose",
        dest="log_level",
        action="store_const",
        const="DEBUG",
        default="INFO",
        help="Increase verbose level",
    )
    parser.add_argument(
        "-p",
        "--port",
        type=port_number,
        default=DEFAULT_PORT,
        help="Listening port",
    )
    parser.add_argument(
        "--host",
        default=None,
        help="Listening interface, all interfaces if omitted",
    )
    parser.add_argument(
        "--same-output",
        action="store_true",
        help="Send back the received text untouched",
    )

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except UsageError as exc:
        parser.print_usage_error(exc)
        return 1

    configure_logging(args.log_level)

    request_handler = TextTransformRequestHandler(same_output=args.same_output)
    try:
        server = TCPNetworkServer(args.host, args.port, request_handler)
    except (OSError, OverflowError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    # SIGTERM stops the server the same way as SIGINT
    signal.signal(signal.SIGTERM, signal.default_int_handler)

    with server:
        try:
            server.serve_forever()
        except KeyboardInterrupt:
            logger.info("Interrupted by signal")

    return 0


if __name__ == "__main__":
    sys.exit(main())
