"""The request envelope shared by every SmarterU call."""
from __future__ import annotations

import logging
from typing import Optional, Tuple

from lxml import etree

from ..exceptions import MissingValueError
from ..utils.xmltools import add_child, to_string

logger = logging.getLogger(__name__)


def build_envelope(
    account_api: Optional[str],
    user_api: Optional[str],
    method: str,
) -> Tuple[etree._Element, etree._Element]:
    """Return the ``<SmarterU>`` root and its empty ``<Parameters>`` element.

    The account key is checked before the user key, and both before any
    method-specific validation.
    """

    if not account_api:
        raise MissingValueError("Account API key must be set before creating a query.")
    if not user_api:
        raise MissingValueError("User API key must be set before creating a query.")

    root = etree.Element("SmarterU")
    add_child(root, "AccountAPI", account_api)
    add_child(root, "UserAPI", user_api)
    add_child(root, "Method", method)
    parameters = add_child(root, "Parameters")
    return root, parameters


class BaseQuery:
    """Common state for the query objects: the method name and optional API keys.

    Keys set on the query take precedence over the defaults passed to
    :meth:`to_xml` (normally the client's keys). The query is never mutated
    while rendering.
    """

    method: str = ""

    def __init__(self, account_api: Optional[str] = None, user_api: Optional[str] = None) -> None:
        self.account_api = account_api
        self.user_api = user_api

    def resolve_keys(
        self,
        default_account_api: Optional[str] = None,
        default_user_api: Optional[str] = None,
    ) -> Tuple[Optional[str], Optional[str]]:
        return (
            self.account_api or default_account_api,
            self.user_api or default_user_api,
        )

    def to_xml(
        self,
        default_account_api: Optional[str] = None,
        default_user_api: Optional[str] = None,
    ) -> str:
        account_api, user_api = self.resolve_keys(default_account_api, default_user_api)
        root, parameters = build_envelope(account_api, user_api, self.method)
        self.build_parameters(parameters)
        logger.debug("Built %s request", self.method)
        return to_string(root)

    def build_parameters(self, parameters: etree._Element) -> None:
        raise NotImplementedError
