"""Render a :class:`~smarteru.models.User` as a createUser / updateUser request.

The ``<Info>`` and ``<Profile>`` blocks are described by field tables walked in
order, so tag order and omission rules live in one place.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, NamedTuple, Optional

from lxml import etree

from .models import GroupPermissions, User
from .queries.base import build_envelope
from .utils.xmltools import add_child, add_list, to_string

logger = logging.getLogger(__name__)

CREATE_USER = "createUser"
UPDATE_USER = "updateUser"


def _always(_value: Any) -> bool:
    return True


class UserField(NamedTuple):
    tag: str
    attribute: str
    present: Callable[[Any], bool] = bool
    item_tag: Optional[str] = None


INFO_FIELDS = (
    UserField("Email", "email", _always),
    UserField("EmployeeID", "employee_id", _always),
    UserField("GivenName", "given_name", _always),
    UserField("Surname", "surname", _always),
    UserField("Password", "password", _always),
    UserField("Timezone", "timezone"),
    UserField("LearnerNotifications", "learner_notifications", _always),
    UserField("SupervisorNotifications", "supervisor_notifications", _always),
    UserField("SendEmailTo", "send_email_to", _always),
    UserField("AlternateEmail", "alternate_email", _always),
    UserField("AuthenticationType", "authentication_type", _always),
)

# custom_fields and roles are not sent yet.
PROFILE_FIELDS = (
    UserField("Supervisors", "supervisors", item_tag="Supervisor"),
    UserField("Organization", "organization"),
    UserField("Teams", "teams", item_tag="Team"),
    UserField("Language", "language"),
    UserField("Status", "status"),
    UserField("Title", "title"),
    UserField("Division", "division"),
    UserField("AllowFeedback", "allow_feedback"),
    UserField("PhonePrimary", "phone_primary"),
    UserField("PhoneAlternate", "phone_alternate"),
    UserField("PhoneMobile", "phone_mobile"),
    UserField("Fax", "fax"),
    UserField("Website", "website"),
    UserField("Address1", "address1"),
    UserField("Address2", "address2"),
    UserField("City", "city"),
    UserField("Province", "province"),
    UserField("Country", "country"),
    UserField("PostalCode", "postal_code"),
    UserField("SendMailTo", "send_mail_to"),
    UserField("ReceiveNotifications", "receive_notifications"),
    UserField("HomeGroup", "home_group"),
)


def _write_fields(parent: etree._Element, user: User, fields) -> None:
    for field in fields:
        value = getattr(user, field.attribute)
        if not field.present(value):
            continue
        if field.item_tag is not None:
            add_list(parent, field.tag, field.item_tag, value)
        else:
            add_child(parent, field.tag, value)


def _write_group(parent: etree._Element, group: GroupPermissions) -> None:
    node = add_child(parent, "Group")
    if group.group_name:
        add_child(node, "GroupName", group.group_name)
    elif group.group_id:
        add_child(node, "GroupID", group.group_id)
    for permission in group.permissions:
        permission_node = add_child(node, "Permission")
        add_child(permission_node, "Action", permission.action)
        add_child(permission_node, "Code", permission.code)


def build_user_element(parameters: etree._Element, user: User) -> etree._Element:
    node = add_child(parameters, "User")
    _write_fields(add_child(node, "Info"), user, INFO_FIELDS)
    _write_fields(add_child(node, "Profile"), user, PROFILE_FIELDS)

    groups = add_child(node, "Groups")
    for group in user.groups:
        _write_group(groups, group)

    # Venues and wages are not supported by this client; the tags must still be present.
    add_child(node, "Venues")
    add_child(node, "Wages")
    return node


def user_to_xml(
    user: User,
    account_api: Optional[str],
    user_api: Optional[str],
    method: str,
) -> str:
    """Return the full request document for ``method`` (createUser or updateUser)."""

    if method not in (CREATE_USER, UPDATE_USER):
        raise ValueError(f"Users cannot be serialized for method {method!r}")

    root, parameters = build_envelope(account_api, user_api, method)
    build_user_element(parameters, user)
    logger.debug("Built %s request with %d group(s)", method, len(user.groups))
    return to_string(root)


__all__ = ["CREATE_USER", "UPDATE_USER", "INFO_FIELDS", "PROFILE_FIELDS", "build_user_element", "user_to_xml"]
