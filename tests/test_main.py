"""
Tests for instagram_api.__main__ routing between the login flow and API calls.
"""

import sys
from unittest.mock import patch

import pytest

from instagram_api.__main__ import API_COMMANDS, main


class TestRouting:

    @pytest.mark.parametrize(
        "argv",
        [
            ["instagram-api"],
            ["instagram-api", "bogus"],
            ["instagram-api", "--verbose"],
        ],
    )
    def test_unknown_or_missing_command_prints_usage(self, argv, capsys):
        with patch("sys.argv", argv):
            with pytest.raises(SystemExit) as exc_info:
                main()

        assert exc_info.value.code == 1
        err = capsys.readouterr().err
        assert err.startswith("Usage:")
        for command in API_COMMANDS:
            assert command in err

    def test_auth_runs_login_without_its_own_name(self):
        with patch("sys.argv", ["instagram-api", "auth", "--state", "s"]):
            with patch("instagram_api.auth.main") as mock_auth_main:
                main()

                mock_auth_main.assert_called_once()
                assert sys.argv == ["instagram-api", "--state", "s"]

    @pytest.mark.parametrize("command", API_COMMANDS)
    def test_api_command_goes_to_client(self, command):
        argv = ["instagram-api", "--access-token", "tok", command]
        with patch("sys.argv", argv):
            with patch("instagram_api.client.main") as mock_client_main:
                main()

                mock_client_main.assert_called_once()
                assert sys.argv == argv

    def test_token_value_is_not_mistaken_for_command(self):
        with patch("sys.argv", ["instagram-api", "--access-token", "IGQ", "media"]):
            with patch("instagram_api.client.main") as mock_client_main:
                main()

        mock_client_main.assert_called_once()
