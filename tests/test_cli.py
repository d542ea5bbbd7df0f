import httpx
import pytest
from rich.console import Console

from smarteru import cli
from smarteru.client import Client
from smarteru.mock import MockSmarterUServer
from smarteru.utils.telemetry import client_metrics


@pytest.fixture(autouse=True)
def _wide_console(monkeypatch):
    monkeypatch.setattr(cli, "console", Console(width=200))


def test_parse_args_get_user_by_email():
    args = cli._parse_args(["get-user", "--email", "test@test.com"])

    assert args.command == "get-user"
    assert args.email == "test@test.com"
    assert args.user_id is None
    assert cli._identifier(args).value == "test@test.com"


def test_parse_args_identifiers_are_exclusive():
    with pytest.raises(SystemExit):
        cli._parse_args(["user-groups", "--id", "1", "--email", "test@test.com"])


def test_parse_args_identifier_required():
    with pytest.raises(SystemExit):
        cli._parse_args(["get-user"])


def test_parse_args_list_users_defaults():
    args = cli._parse_args(["list-users"])

    assert args.page == 1
    assert args.page_size is None
    assert args.status == "All"
    assert args.teams is None
    assert args.mock is False


def test_parse_args_list_users_filters():
    args = cli._parse_args(
        ["--show-metrics", "list-users", "--status", "Active", "--team", "A", "--team", "B", "--name", "Ada"]
    )

    assert args.show_metrics is True
    assert args.status == "Active"
    assert args.teams == ["A", "B"]
    assert cli._contains(args.name).value == "Ada"


def test_mock_list_users(capsys):
    exit_code = cli.main(["--mock", "list-users"])

    output = capsys.readouterr().out
    assert exit_code == 0
    assert "Ada Lovelace" in output
    assert "Alan Turing" in output


def test_mock_user_groups(capsys):
    exit_code = cli.main(["--mock", "--show-metrics", "user-groups", "--email", "ada.lovelace@example.com"])

    output = capsys.readouterr().out
    assert exit_code == 0
    assert "Engineering" in output
    assert "MANAGE_USERS" in output
    assert "getUserGroups" in output


def test_mock_client_resets_seed_metrics():
    cli.build_mock_client()

    assert client_metrics.get_metrics() == {}


def test_error_returns_exit_code_one(capsys):
    exit_code = cli.main(["--mock", "get-user", "--id", "404"])

    output = capsys.readouterr().out
    assert exit_code == 1
    assert "User not found" in output


def test_missing_keys_return_exit_code_one(capsys):
    exit_code = cli.main(["get-user", "--id", "1"])

    output = capsys.readouterr().out
    assert exit_code == 1
    assert "Account API key" in output


def test_uses_injected_client(capsys):
    server = MockSmarterUServer(["account"], ["user"])
    client = Client("account", "user", http_client=httpx.Client(transport=server.transport()))

    exit_code = cli.SmarterUCLI(client).run(cli._parse_args(["list-users"]))

    assert exit_code == 0
    assert "0 user(s)" in capsys.readouterr().out


def test_invalid_page_returns_exit_code_one(capsys):
    exit_code = cli.main(["--mock", "list-users", "--page", "0"])

    assert exit_code == 1
    assert "page must be >= 1" in capsys.readouterr().out


def test_invalid_settings_return_exit_code_one(monkeypatch, capsys):
    monkeypatch.setenv("SMARTERU_TIMEOUT", "-1")

    exit_code = cli.main(["list-users"])

    output = capsys.readouterr().out
    assert exit_code == 1
    assert "Invalid configuration" in output
    assert "timeout" in output


def test_invalid_log_level_returns_exit_code_one(monkeypatch, capsys):
    monkeypatch.setenv("SMARTERU_LOG_LEVEL", "LOUD")

    exit_code = cli.main(["--mock", "get-user", "--id", "1"])

    assert exit_code == 1
    assert "log_level" in capsys.readouterr().out
