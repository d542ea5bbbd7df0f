"""Python client for the SmarterU LMS XML API."""

__version__ = "0.1.0"

from .client import Client  # noqa: E402
from .exceptions import HttpError, MissingValueError, SmarterUClientError, SmarterUError  # noqa: E402
from .models import GroupPermissions, Permission, User  # noqa: E402
from .queries import GetUserGroupsQuery, GetUserQuery, ListUsersQuery, UserIdentifier  # noqa: E402

__all__ = [
    "Client",
    "GetUserGroupsQuery",
    "GetUserQuery",
    "GroupPermissions",
    "HttpError",
    "ListUsersQuery",
    "MissingValueError",
    "Permission",
    "SmarterUClientError",
    "SmarterUError",
    "User",
    "UserIdentifier",
]
