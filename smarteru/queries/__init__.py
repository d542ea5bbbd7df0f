from .base import BaseQuery, build_envelope
from .get_user import GetUserGroupsQuery, GetUserQuery, IdentifierKind, UserIdentifier, UserLookupQuery
from .list_users import MAX_PAGE_SIZE, ListUsersQuery, SortField, SortOrder, UserStatusFilter
from .tags import DateRangeTag, MatchTag, MatchType

__all__ = [
    "BaseQuery",
    "DateRangeTag",
    "GetUserGroupsQuery",
    "GetUserQuery",
    "IdentifierKind",
    "ListUsersQuery",
    "MAX_PAGE_SIZE",
    "MatchTag",
    "MatchType",
    "SortField",
    "SortOrder",
    "UserIdentifier",
    "UserLookupQuery",
    "UserStatusFilter",
    "build_envelope",
]
