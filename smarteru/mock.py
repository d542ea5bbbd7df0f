"""In-memory stand-in for the SmarterU endpoint, for tests and local development.

The server validates request packages the way SmarterU does (error codes
SU:01 to SU:11) and serves the user methods this client supports from an
in-memory store::

    server = MockSmarterUServer(account_api_keys=["account"], user_api_keys=["user"])
    client = Client("account", "user", http_client=httpx.Client(transport=server.transport()))
"""
from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple
from urllib.parse import parse_qs

import httpx
from lxml import etree

from .client import PACKAGE_FIELD
from .queries.tags import WIRE_DATE_FORMAT
from .utils import xmltools

logger = logging.getLogger(__name__)

SUPPORTED_METHODS = ("createUser", "getUser", "listUsers", "updateUser", "getUserGroups")

# Request <Info> tag -> stored/response tag
_INFO_TAGS = {
    "Email": "Email",
    "EmployeeID": "EmployeeID",
    "GivenName": "GivenName",
    "Surname": "Surname",
    "Timezone": "Timezone",
    "LearnerNotifications": "SendWeeklyTaskReminder",
    "SupervisorNotifications": "SendWeeklyProgressSummary",
    "SendEmailTo": "SendEmailTo",
    "AlternateEmail": "AlternateEmail",
    "AuthenticationType": "AuthenticationType",
}

_ENVELOPE_TAGS = (
    ("SU:05", "AccountAPI"),
    ("SU:06", "UserAPI"),
    ("SU:07", "Method"),
    ("SU:08", "Parameters"),
)


class MockSmarterUServer:
    def __init__(
        self,
        account_api_keys: Iterable[str] = (),
        user_api_keys: Iterable[str] = (),
        supported_methods: Iterable[str] = SUPPORTED_METHODS,
    ):
        self.account_api_keys: List[str] = list(account_api_keys)
        self.user_api_keys: List[str] = list(user_api_keys)
        self.supported_methods: List[str] = list(supported_methods)
        self.users: List[Dict[str, Any]] = []
        self.packages: List[str] = []
        self._next_id = 1
        self._handlers: Dict[str, Callable[[etree._Element], httpx.Response]] = {
            "createUser": self._create_user,
            "updateUser": self._update_user,
            "getUser": self._get_user,
            "listUsers": self._list_users,
            "getUserGroups": self._get_user_groups,
        }

    def add_account_api_key(self, key: str) -> "MockSmarterUServer":
        self.account_api_keys.append(key)
        return self

    def add_user_api_key(self, key: str) -> "MockSmarterUServer":
        self.user_api_keys.append(key)
        return self

    def add_supported_method(self, method: str) -> "MockSmarterUServer":
        self.supported_methods.append(method)
        return self

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    # ------------------------------------------------------------------
    # Request handling
    # ------------------------------------------------------------------
    def __call__(self, request: httpx.Request) -> httpx.Response:
        body = request.read()
        if not body:
            return self._failure({"SU:01": "No POST data detected"})

        form = parse_qs(body.decode("utf-8"), keep_blank_values=True)
        if PACKAGE_FIELD not in form:
            return self._failure({"SU:02": "Package parameter not found"})

        package = form[PACKAGE_FIELD][0]
        self.packages.append(package)
        try:
            root = xmltools.parse(package)
        except etree.XMLSyntaxError:
            return self._failure({"SU:03": "Package data is not properly formatted XML"})

        if root.tag != "SmarterU":
            return self._failure({"SU:04": "SmarterU root tag not found in Package data"})
        for error_id, tag in _ENVELOPE_TAGS:
            if root.find(tag) is None:
                return self._failure({error_id: f"{tag} tag not found in Package data"})

        parameters = root.find("Parameters")
        if not xmltools.children(parameters):
            return self._failure({"SU:09": "Parameters tag contains no information"})

        if (
            xmltools.text(root, "AccountAPI") not in self.account_api_keys
            or xmltools.text(root, "UserAPI") not in self.user_api_keys
        ):
            return self._failure({"SU:10": "User and Account API keys are invalid"})

        method = xmltools.text(root, "Method")
        if method not in self.supported_methods or method not in self._handlers:
            return self._failure({"SU:11": "Requested method does not exist"})

        logger.debug("Mock SmarterU handling %s", method)
        return self._handlers[method](parameters)

    # ------------------------------------------------------------------
    # Methods
    # ------------------------------------------------------------------
    def _create_user(self, parameters: etree._Element) -> httpx.Response:
        user = parameters.find("User")
        info = xmltools.child(user, "Info")
        email = xmltools.text(info, "Email")
        employee_id = xmltools.text(info, "EmployeeID")
        if not email and not employee_id:
            return self._failure({"MOCK:01": "Email or EmployeeID is required"})
        if self._find(email=email) or self._find(employee_id=employee_id):
            return self._failure({"MOCK:02": "User already exists"})

        today = date.today().isoformat()
        record: Dict[str, Any] = {
            "ID": str(self._next_id),
            "CreatedDate": today,
            "ModifiedDate": today,
            "Teams": [],
            "Groups": [],
        }
        self._next_id += 1
        self._apply(record, user)
        self.users.append(record)
        return self._success(self._identity_info(record))

    def _update_user(self, parameters: etree._Element) -> httpx.Response:
        user = parameters.find("User")
        info = xmltools.child(user, "Info")
        record = self._find(
            email=xmltools.text(info, "Email"),
            employee_id=xmltools.text(info, "EmployeeID"),
        )
        if record is None:
            return self._failure({"MOCK:03": "User not found"})

        self._apply(record, user)
        record["ModifiedDate"] = date.today().isoformat()
        return self._success(self._identity_info(record))

    def _get_user(self, parameters: etree._Element) -> httpx.Response:
        record = self._lookup(parameters)
        if record is None:
            return self._failure({"MOCK:03": "User not found"})

        info = etree.Element("Info")
        info.append(self._render_user(record, exclude=("Groups",)))
        return self._success(info)

    def _list_users(self, parameters: etree._Element) -> httpx.Response:
        query = parameters.find("User")
        filters = xmltools.child(query, "Filters")
        users = [record for record in self.users if self._matches_filters(record, filters)]

        page = int(xmltools.text(query, "Page") or 1)
        page_size = xmltools.text(query, "PageSize")
        if page_size:
            start = (page - 1) * int(page_size)
            users = users[start:start + int(page_size)]

        info = etree.Element("Info")
        container = xmltools.add_child(info, "Users")
        for record in users:
            container.append(self._render_user(record, exclude=("Groups",)))
        return self._success(info)

    def _get_user_groups(self, parameters: etree._Element) -> httpx.Response:
        record = self._lookup(parameters)
        if record is None:
            return self._failure({"MOCK:03": "User not found"})

        info = etree.Element("Info")
        container = xmltools.add_child(info, "UserGroups")
        for name, permissions in record["Groups"]:
            group = xmltools.add_child(container, "Group")
            xmltools.add_child(group, "Name", name)
            xmltools.add_child(group, "Identifier", name)
            xmltools.add_child(group, "IsHomeGroup", name == record.get("HomeGroup"))
            xmltools.add_list(group, "Permissions", "Permission", permissions)
        return self._success(info)

    # ------------------------------------------------------------------
    # Store helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _match(condition: Optional[etree._Element], actual: str) -> bool:
        if condition is None:
            return True
        value = xmltools.text(condition, "Value")
        if xmltools.text(condition, "MatchType") == "EXACT":
            return actual == value
        return value.lower() in actual.lower()

    @staticmethod
    def _in_range(node: Optional[etree._Element], prefix: str, actual: str) -> bool:
        if node is None:
            return True
        day = date.fromisoformat(actual)
        start = xmltools.text(node, f"{prefix}From")
        end = xmltools.text(node, f"{prefix}To")
        if start and day < datetime.strptime(start, WIRE_DATE_FORMAT).date():
            return False
        if end and day > datetime.strptime(end, WIRE_DATE_FORMAT).date():
            return False
        return True

    def _matches_filters(self, record: Dict[str, Any], filters: Optional[etree._Element]) -> bool:
        status = xmltools.text(filters, "UserStatus") or "All"
        if status != "All" and record.get("Status", "Active") != status:
            return False

        identifier = xmltools.child(xmltools.child(filters, "Users"), "UserIdentifier")
        name = f"{record.get('GivenName', '')} {record.get('Surname', '')}"
        if not (
            self._match(xmltools.child(identifier, "Email"), record.get("Email", ""))
            and self._match(xmltools.child(identifier, "EmployeeID"), record.get("EmployeeID", ""))
            and self._match(xmltools.child(identifier, "Name"), name)
        ):
            return False

        group_name = xmltools.text(filters, "GroupName")
        if group_name and group_name not in [group for group, _codes in record["Groups"]]:
            return False

        teams = xmltools.texts(xmltools.child(filters, "Teams"), "TeamName")
        if teams and not set(teams) & set(record["Teams"]):
            return False

        return (
            self._in_range(xmltools.child(filters, "CreatedDate"), "CreatedDate", record["CreatedDate"])
            and self._in_range(xmltools.child(filters, "ModifiedDate"), "ModifiedDate", record["ModifiedDate"])
        )

    def _find(
        self,
        user_id: Optional[str] = None,
        email: Optional[str] = None,
        employee_id: Optional[str] = None,
    ) -> Optional[Dict[str, Any]]:
        for record in self.users:
            if user_id and record["ID"] == user_id:
                return record
            if email and record.get("Email") == email:
                return record
            if employee_id and record.get("EmployeeID") == employee_id:
                return record
        return None

    def _lookup(self, parameters: etree._Element) -> Optional[Dict[str, Any]]:
        user = parameters.find("User")
        return self._find(
            user_id=xmltools.text(user, "ID"),
            email=xmltools.text(user, "Email"),
            employee_id=xmltools.text(user, "EmployeeID"),
        )

    @staticmethod
    def _apply(record: Dict[str, Any], user: etree._Element) -> None:
        for node in xmltools.children(xmltools.child(user, "Info")):
            tag = _INFO_TAGS.get(node.tag)
            if tag is not None:
                record[tag] = xmltools.text(node)

        profile = xmltools.child(user, "Profile")
        for node in xmltools.children(profile):
            if node.tag in ("Supervisors", "Teams"):
                continue
            record[node.tag] = xmltools.text(node)
        teams = xmltools.child(profile, "Teams")
        if teams is not None:
            record["Teams"] = xmltools.texts(teams, "Team")

        groups: List[Tuple[str, List[str]]] = []
        for group in xmltools.children(xmltools.child(user, "Groups"), "Group"):
            name = xmltools.text(group, "GroupName") or xmltools.text(group, "GroupID")
            codes = [xmltools.text(permission, "Code") for permission in xmltools.children(group, "Permission")]
            groups.append((name, codes))
        if groups:
            record["Groups"] = groups

    @staticmethod
    def _render_user(record: Dict[str, Any], exclude: Tuple[str, ...] = ()) -> etree._Element:
        node = etree.Element("User")
        for key, value in record.items():
            if key in exclude:
                continue
            if key == "Teams":
                xmltools.add_list(node, "Teams", "Team", value)
            else:
                xmltools.add_child(node, key, value)
        return node

    @staticmethod
    def _identity_info(record: Dict[str, Any]) -> etree._Element:
        info = etree.Element("Info")
        xmltools.add_child(info, "Email", record.get("Email", ""))
        xmltools.add_child(info, "EmployeeID", record.get("EmployeeID", ""))
        return info

    # ------------------------------------------------------------------
    # Response helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _document(result: str, info: Optional[etree._Element], errors: Dict[str, str]) -> httpx.Response:
        root = etree.Element("SmarterU")
        xmltools.add_child(root, "Result", result)
        root.append(info if info is not None else etree.Element("Info"))
        errors_node = xmltools.add_child(root, "Errors")
        for error_id, message in errors.items():
            error = xmltools.add_child(errors_node, "Error")
            xmltools.add_child(error, "ErrorID", error_id)
            xmltools.add_child(error, "ErrorMessage", message)
        return httpx.Response(
            200,
            content=xmltools.to_string(root).encode("utf-8"),
            headers={"Content-Type": "text/xml; charset=utf-8"},
        )

    def _success(self, info: etree._Element) -> httpx.Response:
        return self._document("Success", info, {})

    def _failure(self, errors: Dict[str, str]) -> httpx.Response:
        logger.debug("Mock SmarterU rejecting request: %s", errors)
        return self._document("Failed", None, errors)


__all__ = ["MockSmarterUServer", "SUPPORTED_METHODS"]
