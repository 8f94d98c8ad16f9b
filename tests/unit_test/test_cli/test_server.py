from __future__ import annotations

import signal
from errno import EADDRINUSE
from typing import TYPE_CHECKING

from textwire.cli.server import build_parser, main
from textwire.lowlevel.constants import DEFAULT_PORT
from textwire.server.transform import TextTransformRequestHandler

import pytest

if TYPE_CHECKING:
    from unittest.mock import MagicMock

    from pytest_mock import MockerFixture


def test____build_parser____default_values() -> None:
    # Arrange
    parser = build_parser()

    # Act
    args = parser.parse_args([])

    # Assert
    assert args.host is None
    assert args.port == DEFAULT_PORT
    assert args.same_output is False
    assert args.log_level == "INFO"


class TestMain:
    @pytest.fixture(autouse=True)
    @staticmethod
    def mock_configure_logging(mocker: MockerFixture) -> MagicMock:
        return mocker.patch("textwire.cli.server.configure_logging", autospec=True)

    @pytest.fixture(autouse=True)
    @staticmethod
    def mock_signal(mocker: MockerFixture) -> MagicMock:
        return mocker.patch("signal.signal")

    @pytest.fixture
    @staticmethod
    def mock_server_cls(mocker: MockerFixture) -> MagicMock:
        return mocker.patch("textwire.cli.server.TCPNetworkServer")

    def test____main____serve_until_interrupted(self, mock_server_cls: MagicMock, mock_signal: MagicMock) -> None:
        # Arrange
        mock_server = mock_server_cls.return_value
        mock_server.__enter__.return_value = mock_server
        mock_server.serve_forever.side_effect = KeyboardInterrupt

        # Act
        exit_code = main(["--host", "localhost", "-p", "9000", "--same-output"])

        # Assert
        assert exit_code == 0
        mock_server_cls.assert_called_once()
        host, port, request_handler = mock_server_cls.call_args.args
        assert (host, port) == ("localhost", 9000)
        assert isinstance(request_handler, TextTransformRequestHandler)
        assert request_handler.same_output
        mock_signal.assert_called_once_with(signal.SIGTERM, signal.default_int_handler)
        mock_server.serve_forever.assert_called_once_with()
        mock_server.__exit__.assert_called_once()

    @pytest.mark.parametrize("argv", [["-p", "foobar"], ["extra"], ["--unknown"]], ids=repr)
    def test____main____usage_error(
        self,
        argv: list[str],
        mock_server_cls: MagicMock,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        # Arrange

        # Act
        exit_code = main(argv)

        # Assert
        assert exit_code == 1
        mock_server_cls.assert_not_called()
        lines = capsys.readouterr().err.splitlines()
        assert lines[0].startswith("error:")
        assert any(line.startswith("Usage:") for line in lines[1:])

    def test____main____bind_error(self, mock_server_cls: MagicMock, capsys: pytest.CaptureFixture[str]) -> None:
        # Arrange
        mock_server_cls.side_effect = OSError(EADDRINUSE, "Address already in use")

        # Act
        exit_code = main([])

        # Assert
        assert exit_code == 1
        assert capsys.readouterr().err.startswith("error: ")
