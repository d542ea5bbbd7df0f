"""Turn SmarterU response documents into plain Python structures.

Every response has the shape::

    <SmarterU>
        <Result>Success|Failed</Result>
        <Info>...</Info>
        <Errors><Error><ErrorID/><ErrorMessage/></Error>...</Errors>
    </SmarterU>

``Result = Failed`` is fatal and raises :class:`~smarteru.exceptions.SmarterUError`.
Errors that accompany a successful result are returned alongside the data.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Union

from lxml import etree

from .exceptions import SmarterUError
from .utils import xmltools

logger = logging.getLogger(__name__)

RESULT_SUCCESS = "Success"
RESULT_FAILED = "Failed"

# Response key -> response tag for the getUser projection.
_GET_USER_FIELDS = (
    ("ID", "ID"),
    ("Email", "Email"),
    ("EmployeeID", "EmployeeID"),
    ("CreatedDate", "CreatedDate"),
    ("ModifiedDate", "ModifiedDate"),
    ("GivenName", "GivenName"),
    ("Surname", "Surname"),
    ("Language", "Language"),
    ("AllowFeedback", "AllowFeedback"),
    ("Status", "Status"),
    ("AuthenticationType", "AuthenticationType"),
    ("Timezone", "Timezone"),
    ("AlternateEmail", "AlternateEmail"),
    ("HomeGroup", "HomeGroup"),
    ("Organization", "Organization"),
    ("Title", "Title"),
    ("Division", "Division"),
    ("PhonePrimary", "PhonePrimary"),
    ("PhoneAlternate", "PhoneAlternate"),
    ("PhoneMobile", "PhoneMobile"),
    ("SendMailTo", "SendMailTo"),
    ("SendEmailTo", "SendEmailTo"),
    ("Fax", "Fax"),
    ("Address1", "Address1"),
    ("Address2", "Address2"),
    ("City", "City"),
    ("PostalCode", "PostalCode"),
    ("Province", "Province"),
    ("Country", "Country"),
    ("LearnerNotifications", "SendWeeklyTaskReminder"),
    ("SupervisorNotifications", "SendWeeklyProgressSummary"),
    ("ReceiveNotifications", "ReceiveNotifications"),
)

_LIST_USER_FIELDS = (
    "ID",
    "Email",
    "EmployeeID",
    "GivenName",
    "Surname",
    "Status",
    "Title",
    "Division",
    "HomeGroup",
    "CreatedDate",
    "ModifiedDate",
)


def read_errors(root: etree._Element) -> Dict[str, str]:
    """Map each ``<Error>`` under ``<Errors>`` to ``{ErrorID: ErrorMessage}``."""

    errors: Dict[str, str] = {}
    for error in xmltools.children(xmltools.child(root, "Errors"), "Error"):
        errors[xmltools.text(error, "ErrorID")] = xmltools.text(error, "ErrorMessage")
    return errors


def load_document(body: Union[str, bytes]) -> etree._Element:
    try:
        root = xmltools.parse(body)
    except etree.XMLSyntaxError as exc:
        raise SmarterUError(f"SmarterU returned a malformed response: {exc}") from exc
    if root.tag != "SmarterU":
        raise SmarterUError(f"Unexpected root element <{root.tag}> in SmarterU response")
    return root


def _teams(user: etree._Element) -> List[str]:
    return xmltools.texts(xmltools.child(user, "Teams"), "Team")


def read_user_identity(info: etree._Element) -> Dict[str, str]:
    """Info payload of createUser / updateUser."""

    return {
        "Email": xmltools.text(info, "Email"),
        "EmployeeID": xmltools.text(info, "EmployeeID"),
    }


def read_user(info: etree._Element) -> Dict[str, Any]:
    """Info payload of getUser."""

    user = xmltools.child(info, "User")
    result: Dict[str, Any] = {key: xmltools.text(user, tag) for key, tag in _GET_USER_FIELDS}
    result["Teams"] = _teams(user)
    # Not read from the response yet.
    result["Supervisors"] = []
    result["Roles"] = []
    result["CustomFields"] = []
    result["Venues"] = []
    result["Wages"] = []
    return result


def read_user_list(info: etree._Element) -> List[Dict[str, Any]]:
    """Info payload of listUsers, in document order."""

    users = []
    for user in xmltools.children(xmltools.child(info, "Users"), "User"):
        entry: Dict[str, Any] = {tag: xmltools.text(user, tag) for tag in _LIST_USER_FIELDS}
        entry["Name"] = f"{entry['GivenName']} {entry['Surname']}"
        entry["Teams"] = _teams(user)
        users.append(entry)
    return users


def read_user_groups(info: etree._Element) -> List[Dict[str, Any]]:
    """Info payload of getUserGroups; one or many ``<Group>``s give the same shape."""

    groups = []
    for group in xmltools.children(xmltools.child(info, "UserGroups"), "Group"):
        groups.append({
            "Name": xmltools.text(group, "Name"),
            "Identifier": xmltools.text(group, "Identifier"),
            "IsHomeGroup": xmltools.text(group, "IsHomeGroup"),
            "Permissions": xmltools.texts(xmltools.child(group, "Permissions"), "Permission"),
        })
    return groups


InfoReader = Callable[[etree._Element], Any]


def parse_response(body: Union[str, bytes], read_info: InfoReader) -> Dict[str, Any]:
    """Classify a response body and return ``{"Response": ..., "Errors": {...}}``.

    Raises:
        SmarterUError: If the body is unreadable or ``Result`` is ``Failed``.
    """

    root = load_document(body)
    result = xmltools.text(root, "Result")
    errors = read_errors(root)

    if result == RESULT_FAILED:
        raise SmarterUError.from_errors(errors)
    if result != RESULT_SUCCESS:
        logger.warning("Unexpected SmarterU result %r; treating it as success", result)
    if errors:
        logger.info("SmarterU reported %d non-fatal error(s): %s", len(errors), ", ".join(errors))

    info = xmltools.child(root, "Info")
    if info is None:
        info = etree.Element("Info")
    return {"Response": read_info(info), "Errors": errors}


__all__ = [
    "RESULT_FAILED",
    "RESULT_SUCCESS",
    "load_document",
    "parse_response",
    "read_errors",
    "read_user",
    "read_user_groups",
    "read_user_identity",
    "read_user_list",
]
