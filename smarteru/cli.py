"""``smarteru`` command: look up users and groups in a SmarterU account."""
from __future__ import annotations

import argparse
from typing import Any, Dict, List, Optional, Sequence

import httpx
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .client import Client
from .config.settings import get_settings
from .exceptions import SmarterUClientError
from .mock import MockSmarterUServer
from .models import GroupPermissions, Permission, User
from .queries import (
    GetUserGroupsQuery,
    GetUserQuery,
    ListUsersQuery,
    MatchTag,
    MatchType,
    UserIdentifier,
    UserStatusFilter,
)
from .utils.telemetry import client_metrics, setup_logging, setup_telemetry

console = Console()

MOCK_ACCOUNT_API = "mock-account"
MOCK_USER_API = "mock-user"


def _add_identifier_arguments(parser: argparse.ArgumentParser) -> None:
    identifier = parser.add_mutually_exclusive_group(required=True)
    identifier.add_argument("--id", dest="user_id", help="SmarterU user ID")
    identifier.add_argument("--email", help="User email address")
    identifier.add_argument("--employee-id", help="User employee ID")


def _parse_args(argv: Optional[Sequence[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="smarteru", description="SmarterU account utilities")
    parser.add_argument(
        "--mock",
        action="store_true",
        help="Run against an in-memory SmarterU server seeded with demo users",
    )
    parser.add_argument(
        "--trace",
        action="store_true",
        help="Export OpenTelemetry spans for each API call to the console",
    )
    parser.add_argument(
        "--show-metrics",
        action="store_true",
        help="Print per-method call metrics after the command finishes",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    get_parser = subparsers.add_parser("get-user", help="Show a single user's profile")
    _add_identifier_arguments(get_parser)

    groups_parser = subparsers.add_parser("user-groups", help="Show the groups a user belongs to")
    _add_identifier_arguments(groups_parser)

    list_parser = subparsers.add_parser("list-users", help="List users in the account")
    list_parser.add_argument("--page", type=int, default=1, help="Page number (default: 1)")
    list_parser.add_argument("--page-size", type=int, default=None, help="Users per page (max 1000)")
    list_parser.add_argument(
        "--status",
        choices=[status.value for status in UserStatusFilter],
        default=UserStatusFilter.ALL.value,
        help="Only list users with this status",
    )
    list_parser.add_argument("--group", dest="group_name", default=None, help="Only list members of this group")
    list_parser.add_argument("--team", dest="teams", action="append", default=None, help="Filter by team (repeatable)")
    list_parser.add_argument("--email", default=None, help="Email contains this value")
    list_parser.add_argument("--name", default=None, help="Name contains this value")
    list_parser.add_argument("--employee-id", default=None, help="Employee ID contains this value")

    return parser.parse_args(argv)


def _identifier(args: argparse.Namespace) -> UserIdentifier:
    if args.user_id:
        return UserIdentifier.by_id(args.user_id)
    if args.email:
        return UserIdentifier.by_email(args.email)
    return UserIdentifier.by_employee_id(args.employee_id)


def _contains(value: Optional[str]) -> Optional[MatchTag]:
    if not value:
        return None
    return MatchTag(match_type=MatchType.CONTAINS, value=value)


def build_mock_client() -> Client:
    """Client wired to a :class:`MockSmarterUServer` holding a few demo users."""

    server = MockSmarterUServer(account_api_keys=[MOCK_ACCOUNT_API], user_api_keys=[MOCK_USER_API])
    client = Client(
        MOCK_ACCOUNT_API,
        MOCK_USER_API,
        http_client=httpx.Client(transport=server.transport()),
    )
    demo_users = [
        User(
            email="ada.lovelace@example.com",
            employee_id="E100",
            given_name="Ada",
            surname="Lovelace",
            password="changeme",
            title="Analyst",
            home_group="Engineering",
            teams=["Platform"],
            groups=[
                GroupPermissions(
                    group_name="Engineering",
                    permissions=[Permission(action="Grant", code="MANAGE_USERS")],
                ),
                GroupPermissions(group_name="Research"),
            ],
        ),
        User(
            email="alan.turing@example.com",
            employee_id="E101",
            given_name="Alan",
            surname="Turing",
            password="changeme",
            title="Researcher",
            home_group="Research",
            teams=["Cryptography", "Platform"],
            groups=[GroupPermissions(group_name="Research")],
        ),
    ]
    for user in demo_users:
        client.create_user(user)
    client_metrics.reset()
    return client


class SmarterUCLI:
    def __init__(self, client: Optional[Client] = None):
        self.settings = get_settings()
        self.logger = setup_logging(self.settings.log_level)
        self.client = client or Client.from_settings(self.settings)

    def show_errors(self, errors: Dict[str, str]) -> None:
        for error_id, message in errors.items():
            console.print(f"[yellow]Warning {error_id}:[/yellow] {message}")

    def show_user(self, args: argparse.Namespace) -> None:
        result = self.client.get_user(GetUserQuery(_identifier(args)))
        user = result["Response"]

        table = Table(title=f"User {user['ID']}", show_header=True, header_style="bold magenta")
        table.add_column("Field", style="cyan")
        table.add_column("Value", style="green")
        for key, value in user.items():
            if isinstance(value, list):
                value = ", ".join(value)
            if value:
                table.add_row(key, str(value))

        console.print(table)
        self.show_errors(result["Errors"])

    def list_users(self, args: argparse.Namespace) -> None:
        query = ListUsersQuery(
            page=args.page,
            page_size=args.page_size,
            email=_contains(args.email),
            employee_id=_contains(args.employee_id),
            name=_contains(args.name),
            group_name=args.group_name,
            user_status=args.status,
            teams=args.teams,
        )
        result = self.client.list_users(query)
        users: List[Dict[str, Any]] = result["Response"]

        table = Table(title=f"Users (page {query.page})", show_header=True, header_style="bold magenta")
        table.add_column("ID", style="cyan")
        table.add_column("Name", style="green")
        table.add_column("Email")
        table.add_column("Employee ID")
        table.add_column("Status", style="yellow")
        table.add_column("Teams")
        for user in users:
            table.add_row(
                user["ID"],
                user["Name"],
                user["Email"],
                user["EmployeeID"],
                user["Status"],
                ", ".join(user["Teams"]),
            )

        console.print(table)
        console.print(f"[dim]{len(users)} user(s)[/dim]")
        self.show_errors(result["Errors"])

    def show_user_groups(self, args: argparse.Namespace) -> None:
        result = self.client.get_user_groups(GetUserGroupsQuery(_identifier(args)))

        table = Table(title="User Groups", show_header=True, header_style="bold magenta")
        table.add_column("Group", style="cyan")
        table.add_column("Identifier")
        table.add_column("Home Group", style="yellow")
        table.add_column("Permissions", style="green")
        for group in result["Response"]:
            table.add_row(
                group["Name"],
                group["Identifier"],
                "yes" if group["IsHomeGroup"] == "1" else "no",
                ", ".join(group["Permissions"]) or "-",
            )

        console.print(table)
        self.show_errors(result["Errors"])

    def show_metrics(self) -> None:
        console.print("\n[bold cyan]Client Metrics[/bold cyan]")

        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("Method", style="cyan")
        table.add_column("Calls", style="green")
        table.add_column("Last Outcome", style="yellow")

        for method, events in client_metrics.get_metrics().items():
            last_event = events[-1] if events else None
            table.add_row(method, str(len(events)), last_event["outcome"] if last_event else "N/A")

        console.print(table)

    def run(self, args: argparse.Namespace) -> int:
        handlers = {
            "get-user": self.show_user,
            "list-users": self.list_users,
            "user-groups": self.show_user_groups,
        }

        try:
            handlers[args.command](args)
        except (SmarterUClientError, ValueError) as exc:
            console.print(f"[red]Error: {escape(str(exc))}[/red]")
            self.logger.error("CLI error: %s", exc)
            return 1
        finally:
            if args.show_metrics:
                self.show_metrics()
            self.client.close()
        return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _parse_args(argv)
    try:
        cli = SmarterUCLI(build_mock_client() if args.mock else None)
    except ValidationError as exc:
        console.print(f"[red]Invalid configuration: {escape(str(exc))}[/red]")
        return 1
    if args.trace:
        setup_telemetry(api_url=cli.client.api_url)
    return cli.run(args)


if __name__ == "__main__":
    raise SystemExit(main())
