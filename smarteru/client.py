"""Synchronous SmarterU API client built on top of httpx."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx
from opentelemetry import trace

from .config.settings import DEFAULT_API_URL, Settings, get_settings
from .exceptions import HttpError, SmarterUClientError
from .models import User
from .parser import (
    InfoReader,
    parse_response,
    read_user,
    read_user_groups,
    read_user_identity,
    read_user_list,
)
from .queries import GetUserGroupsQuery, GetUserQuery, ListUsersQuery
from .serializers import CREATE_USER, UPDATE_USER, user_to_xml
from .utils.telemetry import client_metrics

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

PACKAGE_FIELD = "package"


class Client:
    """Make SmarterU API calls and translate the responses.

    Every public method returns ``{"Response": ..., "Errors": {...}}`` where
    ``Errors`` holds non-fatal errors reported alongside a successful result.

    Raises (from every public method):
        MissingValueError: An API key or the user identifier is missing.
        HttpError: The HTTP request failed or returned a non-2xx status.
        SmarterUError: SmarterU answered with ``Result = Failed``.
    """

    def __init__(
        self,
        account_api: Optional[str] = None,
        user_api: Optional[str] = None,
        *,
        http_client: Optional[httpx.Client] = None,
        api_url: str = DEFAULT_API_URL,
        timeout: Optional[float] = 30.0,
    ) -> None:
        if not api_url:
            raise ValueError("api_url is required")

        self.account_api = account_api
        self.user_api = user_api
        self.api_url = api_url
        self.timeout = timeout
        self._http_client = http_client
        self._owns_http_client = http_client is None

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        *,
        http_client: Optional[httpx.Client] = None,
    ) -> "Client":
        settings = settings or get_settings()
        return cls(
            settings.account_api or None,
            settings.user_api or None,
            http_client=http_client,
            api_url=settings.api_url,
            timeout=settings.timeout,
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    @property
    def http_client(self) -> httpx.Client:
        if self._http_client is None:
            self._http_client = httpx.Client(timeout=self.timeout)
            self._owns_http_client = True
        return self._http_client

    @http_client.setter
    def http_client(self, http_client: httpx.Client) -> None:
        self._http_client = http_client
        self._owns_http_client = False

    def close(self) -> None:
        if self._http_client is not None and self._owns_http_client:
            self._http_client.close()
            self._http_client = None

    def __enter__(self) -> "Client":
        return self

    def __exit__(self, *_exc_info: Any) -> None:
        self.close()

    def _post(self, package: str) -> httpx.Response:
        try:
            response = self.http_client.post(self.api_url, data={PACKAGE_FIELD: package})
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise HttpError(
                str(exc),
                status_code=exc.response.status_code,
                response_body=exc.response.text,
            ) from exc
        except httpx.HTTPError as exc:
            raise HttpError(str(exc)) from exc
        return response

    def _call(self, method: str, build_package, read_info: InfoReader) -> Dict[str, Any]:
        with tracer.start_as_current_span(f"smarteru.{method}") as span:
            span.set_attribute("smarteru.method", method)
            try:
                package = build_package()
                response = self._post(package)
                result = parse_response(response.content, read_info)
            except SmarterUClientError as exc:
                span.set_attribute("smarteru.result", type(exc).__name__)
                client_metrics.record_event(method, "error", {"error": type(exc).__name__})
                logger.warning("SmarterU %s failed: %s", method, exc)
                raise

            span.set_attribute("smarteru.result", "Success")
            client_metrics.record_event(method, "success", {"warnings": len(result["Errors"])})
            logger.info("SmarterU %s succeeded with %d non-fatal error(s)", method, len(result["Errors"]))
            return result

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def create_user(self, user: User) -> Dict[str, Any]:
        return self._call(
            CREATE_USER,
            lambda: user_to_xml(user, self.account_api, self.user_api, CREATE_USER),
            read_user_identity,
        )

    def update_user(self, user: User) -> Dict[str, Any]:
        return self._call(
            UPDATE_USER,
            lambda: user_to_xml(user, self.account_api, self.user_api, UPDATE_USER),
            read_user_identity,
        )

    def get_user(self, query: GetUserQuery) -> Dict[str, Any]:
        return self._call(
            query.method,
            lambda: query.to_xml(self.account_api, self.user_api),
            read_user,
        )

    def list_users(self, query: ListUsersQuery) -> Dict[str, Any]:
        return self._call(
            query.method,
            lambda: query.to_xml(self.account_api, self.user_api),
            read_user_list,
        )

    def get_user_groups(self, query: GetUserGroupsQuery) -> Dict[str, Any]:
        return self._call(
            query.method,
            lambda: query.to_xml(self.account_api, self.user_api),
            read_user_groups,
        )


__all__ = ["Client", "PACKAGE_FIELD"]
