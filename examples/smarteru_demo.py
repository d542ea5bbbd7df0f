"""Create, update and look up a user against the in-memory SmarterU server."""

import httpx

from smarteru import Client, GetUserGroupsQuery, GetUserQuery, GroupPermissions, Permission, User, UserIdentifier
from smarteru.exceptions import SmarterUError
from smarteru.mock import MockSmarterUServer
from smarteru.queries import ListUsersQuery


def main() -> None:
    server = MockSmarterUServer(account_api_keys=["demo-account"], user_api_keys=["demo-user"])
    client = Client(
        "demo-account",
        "demo-user",
        http_client=httpx.Client(transport=server.transport()),
    )

    user = User(
        email="newuser@contoso.com",
        employee_id="E500",
        given_name="New",
        surname="User",
        password="changeme",
        home_group="Onboarding",
        teams=["Support"],
        groups=[
            GroupPermissions(
                group_name="Onboarding",
                permissions=[Permission(action="Grant", code="VIEW_LEARNER_RESULTS")],
            )
        ],
    )

    print("\n--- Create ---")
    print(client.create_user(user))

    print("\n--- Update ---")
    user.title = "Support Engineer"
    print(client.update_user(user))

    print("\n--- Lookup ---")
    identifier = UserIdentifier.by_email(user.email)
    print(client.get_user(GetUserQuery(identifier))["Response"])
    print(client.get_user_groups(GetUserGroupsQuery(identifier))["Response"])
    print(client.list_users(ListUsersQuery(page_size=10))["Response"])

    print("\n--- Duplicate create ---")
    try:
        client.create_user(user)
    except SmarterUError as exc:
        print(f"Rejected: {exc}")


if __name__ == "__main__":
    main()
