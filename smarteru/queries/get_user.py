"""Single-user lookups: getUser and getUserGroups."""
from __future__ import annotations

from enum import Enum
from typing import Optional

from lxml import etree
from pydantic import BaseModel, ConfigDict

from ..exceptions import MissingValueError
from ..utils.xmltools import add_child
from .base import BaseQuery


class IdentifierKind(str, Enum):
    ID = "ID"
    EMAIL = "Email"
    EMPLOYEE_ID = "EmployeeID"


class UserIdentifier(BaseModel):
    """Which key a lookup uses. The kind's value is also the XML tag name."""

    model_config = ConfigDict(frozen=True)

    kind: IdentifierKind
    value: str

    @classmethod
    def by_id(cls, value: str) -> "UserIdentifier":
        return cls(kind=IdentifierKind.ID, value=value)

    @classmethod
    def by_email(cls, value: str) -> "UserIdentifier":
        return cls(kind=IdentifierKind.EMAIL, value=value)

    @classmethod
    def by_employee_id(cls, value: str) -> "UserIdentifier":
        return cls(kind=IdentifierKind.EMPLOYEE_ID, value=value)


class UserLookupQuery(BaseQuery):
    """A query keyed on one user: by ID, email or employee ID.

    Only one identifier is held at a time; assigning ``id``, ``email`` or
    ``employee_id`` replaces whichever was set before.
    """

    def __init__(
        self,
        identifier: Optional[UserIdentifier] = None,
        account_api: Optional[str] = None,
        user_api: Optional[str] = None,
    ) -> None:
        super().__init__(account_api=account_api, user_api=user_api)
        self.identifier = identifier

    def _value_for(self, kind: IdentifierKind) -> Optional[str]:
        if self.identifier is not None and self.identifier.kind is kind:
            return self.identifier.value
        return None

    @property
    def id(self) -> Optional[str]:
        return self._value_for(IdentifierKind.ID)

    @id.setter
    def id(self, value: str) -> None:
        self.identifier = UserIdentifier.by_id(value)

    @property
    def email(self) -> Optional[str]:
        return self._value_for(IdentifierKind.EMAIL)

    @email.setter
    def email(self, value: str) -> None:
        self.identifier = UserIdentifier.by_email(value)

    @property
    def employee_id(self) -> Optional[str]:
        return self._value_for(IdentifierKind.EMPLOYEE_ID)

    @employee_id.setter
    def employee_id(self, value: str) -> None:
        self.identifier = UserIdentifier.by_employee_id(value)

    def build_parameters(self, parameters: etree._Element) -> None:
        if self.identifier is None:
            raise MissingValueError(
                f"User identifier must be specified when creating a {type(self).__name__}."
            )
        user = add_child(parameters, "User")
        add_child(user, self.identifier.kind.value, self.identifier.value)


class GetUserQuery(UserLookupQuery):
    """Look up one user's full profile."""

    method = "getUser"


class GetUserGroupsQuery(UserLookupQuery):
    """Look up the groups (and group permissions) of one user."""

    method = "getUserGroups"
