"""User records and the group memberships attached to them."""
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import Field, model_validator

from .base import SmarterUModel


class UserStatus(str, Enum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"


class SendEmailTo(str, Enum):
    SUPERVISOR = "Supervisor"
    SELF = "Self"
    ALTERNATE = "Alternate"


class SendMailTo(str, Enum):
    PERSONAL = "Personal"
    ORGANIZATION = "Organization"


class AuthenticationType(str, Enum):
    SMARTERU = "SmarterU"
    EXTERNAL = "External"
    BOTH = "Both"


class Permission(SmarterUModel):
    """A single permission granted (or denied) within a group."""

    action: str
    code: str


_GROUP_IDENTIFIER_SIBLINGS = {"group_name": "group_id", "group_id": "group_name"}


class GroupPermissions(SmarterUModel):
    """A user's membership in one group and the permissions held there.

    The group is identified by ``group_name`` or ``group_id``, never both.
    Assigning one identifier clears the other.
    """

    group_name: Optional[str] = None
    group_id: Optional[str] = None
    permissions: List[Permission] = Field(default_factory=list)

    @model_validator(mode="after")
    def _single_identifier(self) -> "GroupPermissions":
        if self.group_name is not None and self.group_id is not None:
            raise ValueError("group_name and group_id are mutually exclusive")
        return self

    def __setattr__(self, name: str, value: Any) -> None:
        sibling = _GROUP_IDENTIFIER_SIBLINGS.get(name)
        if sibling is not None and value is not None:
            super().__setattr__(sibling, None)
        super().__setattr__(name, value)


class User(SmarterUModel):
    """A SmarterU learner account as sent to createUser / updateUser."""

    id: Optional[str] = None
    email: Optional[str] = None
    employee_id: Optional[str] = None
    given_name: Optional[str] = None
    surname: Optional[str] = None
    password: Optional[str] = None
    timezone: Optional[str] = None

    learner_notifications: bool = False
    supervisor_notifications: bool = False
    send_email_to: Optional[SendEmailTo] = None
    alternate_email: Optional[str] = None
    authentication_type: Optional[AuthenticationType] = None

    supervisors: List[str] = Field(default_factory=list)
    organization: Optional[str] = None
    teams: List[str] = Field(default_factory=list)
    # Stored for completeness; the serializer does not send these yet.
    custom_fields: List[Dict[str, Any]] = Field(default_factory=list)
    roles: List[Dict[str, Any]] = Field(default_factory=list)

    language: Optional[str] = None
    status: UserStatus = UserStatus.ACTIVE
    title: Optional[str] = None
    division: Optional[str] = None
    allow_feedback: bool = False
    phone_primary: Optional[str] = None
    phone_alternate: Optional[str] = None
    phone_mobile: Optional[str] = None
    fax: Optional[str] = None
    website: Optional[str] = None
    address1: Optional[str] = None
    address2: Optional[str] = None
    city: Optional[str] = None
    province: Optional[str] = None
    country: Optional[str] = None
    postal_code: Optional[str] = None
    send_mail_to: Optional[SendMailTo] = None
    receive_notifications: bool = True
    home_group: Optional[str] = None

    groups: List[GroupPermissions] = Field(default_factory=list)
    venues: List[Dict[str, Any]] = Field(default_factory=list)
    wages: List[Dict[str, Any]] = Field(default_factory=list)
