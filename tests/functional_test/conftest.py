from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import ExitStack
from socket import AF_INET, SOCK_STREAM, socket as Socket

import pytest


@pytest.fixture
def localhost_ip() -> str:
    return "127.0.0.1"


@pytest.fixture
def tcp_socket_factory() -> Iterator[Callable[[], Socket]]:
    socket_stack = ExitStack()

    def tcp_socket_factory() -> Socket:
        return socket_stack.enter_context(Socket(AF_INET, SOCK_STREAM))

    with socket_stack:
        yield tcp_socket_factory


@pytest.fixture
def listener(localhost_ip: str, tcp_socket_factory: Callable[[], Socket]) -> Socket:
    listener = tcp_socket_factory()
    listener.bind((localhost_ip, 0))
    listener.listen()
    return listener
