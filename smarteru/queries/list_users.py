"""The listUsers query: paging, sorting and filters."""
from __future__ import annotations

from enum import Enum
from typing import List, Optional, Union

from lxml import etree

from ..utils.xmltools import add_child, add_list
from .base import BaseQuery
from .tags import DateRangeTag, MatchTag

MAX_PAGE_SIZE = 1000


class SortField(str, Enum):
    NAME = "NAME"
    EMPLOYEE_ID = "EMPLOYEE_ID"


class SortOrder(str, Enum):
    ASC = "ASC"
    DESC = "DESC"


class UserStatusFilter(str, Enum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"
    ALL = "All"


class ListUsersQuery(BaseQuery):
    method = "listUsers"

    def __init__(
        self,
        page: int = 1,
        page_size: Optional[int] = None,
        sort_field: Union[SortField, str, None] = None,
        sort_order: Union[SortOrder, str, None] = None,
        email: Optional[MatchTag] = None,
        employee_id: Optional[MatchTag] = None,
        name: Optional[MatchTag] = None,
        group_name: Optional[str] = None,
        user_status: Union[UserStatusFilter, str] = UserStatusFilter.ALL,
        created_date: Optional[DateRangeTag] = None,
        modified_date: Optional[DateRangeTag] = None,
        teams: Optional[List[str]] = None,
        account_api: Optional[str] = None,
        user_api: Optional[str] = None,
    ) -> None:
        super().__init__(account_api=account_api, user_api=user_api)
        self.page = page
        self.page_size = page_size
        self.sort_field = sort_field
        self.sort_order = sort_order
        self.email = email
        self.employee_id = employee_id
        self.name = name
        self.group_name = group_name
        self.user_status = user_status
        self.created_date = created_date
        self.modified_date = modified_date
        self.teams = teams

    @property
    def page(self) -> int:
        return self._page

    @page.setter
    def page(self, value: int) -> None:
        if value < 1:
            raise ValueError("page must be >= 1")
        self._page = value

    @property
    def page_size(self) -> Optional[int]:
        return self._page_size

    @page_size.setter
    def page_size(self, value: Optional[int]) -> None:
        if value is not None:
            if value < 1:
                raise ValueError("page_size must be >= 1")
            value = min(value, MAX_PAGE_SIZE)
        self._page_size = value

    @property
    def sort_field(self) -> Optional[SortField]:
        return self._sort_field

    @sort_field.setter
    def sort_field(self, value: Union[SortField, str, None]) -> None:
        self._sort_field = SortField(value) if value else None

    @property
    def sort_order(self) -> Optional[SortOrder]:
        return self._sort_order

    @sort_order.setter
    def sort_order(self, value: Union[SortOrder, str, None]) -> None:
        self._sort_order = SortOrder(value) if value else None

    @property
    def user_status(self) -> UserStatusFilter:
        return self._user_status

    @user_status.setter
    def user_status(self, value: Union[UserStatusFilter, str]) -> None:
        self._user_status = UserStatusFilter(value)

    def build_parameters(self, parameters: etree._Element) -> None:
        user = add_child(parameters, "User")
        add_child(user, "Page", self.page)
        if self.page_size:
            add_child(user, "PageSize", self.page_size)
        if self.sort_field:
            add_child(user, "SortField", self.sort_field)
        if self.sort_order:
            add_child(user, "SortOrder", self.sort_order)

        filters = add_child(user, "Filters")
        match_filters = [
            ("Email", self.email),
            ("EmployeeID", self.employee_id),
            ("Name", self.name),
        ]
        if any(tag is not None for _, tag in match_filters):
            identifier = add_child(add_child(filters, "Users"), "UserIdentifier")
            for tag_name, tag in match_filters:
                if tag is None:
                    continue
                node = add_child(identifier, tag_name)
                add_child(node, "MatchType", tag.match_type)
                add_child(node, "Value", tag.value)

        if self.group_name:
            add_child(filters, "GroupName", self.group_name)
        add_child(filters, "UserStatus", self.user_status)

        for prefix, date_range in (("Created", self.created_date), ("Modified", self.modified_date)):
            if date_range is None:
                continue
            node = add_child(filters, f"{prefix}Date")
            add_child(node, f"{prefix}DateFrom", date_range.date_from)
            add_child(node, f"{prefix}DateTo", date_range.date_to)

        if self.teams:
            add_list(filters, "Teams", "TeamName", self.teams)
