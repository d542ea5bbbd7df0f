import sys
from pathlib import Path
from typing import Callable, List
from urllib.parse import parse_qs

import httpx
import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from smarteru.client import Client  # noqa: E402
from smarteru.config.settings import reset_settings  # noqa: E402
from smarteru.models import GroupPermissions, Permission, User  # noqa: E402
from smarteru.utils.telemetry import client_metrics  # noqa: E402
from smarteru_fixtures import smarteru_response  # noqa: E402


class RecordingTransport:
    """Answers every request with a canned body and keeps the posted packages."""

    def __init__(self, body: str = "", status_code: int = 200):
        self.body = body or smarteru_response()
        self.status_code = status_code
        self.requests: List[httpx.Request] = []
        self.packages: List[str] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        form = parse_qs(request.read().decode("utf-8"))
        self.packages.extend(form.get("package", []))
        return httpx.Response(self.status_code, text=self.body)


@pytest.fixture(autouse=True)
def _clean_state(monkeypatch):
    for name in ("SMARTERU_ACCOUNT_API", "SMARTERU_USER_API", "SMARTERU_API_URL", "SMARTERU_TIMEOUT", "SMARTERU_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    reset_settings()
    client_metrics.reset()
    yield
    reset_settings()
    client_metrics.reset()


@pytest.fixture
def make_client() -> Callable[..., tuple]:
    def _make(body: str = "", status_code: int = 200, account_api="account", user_api="user"):
        transport = RecordingTransport(body, status_code)
        client = Client(
            account_api,
            user_api,
            http_client=httpx.Client(transport=httpx.MockTransport(transport)),
        )
        return client, transport

    return _make


@pytest.fixture
def full_user() -> User:
    return User(
        id="42",
        email="test@test.com",
        employee_id="E42",
        given_name="Test",
        surname="User",
        password="password",
        timezone="EST",
        learner_notifications=True,
        supervisor_notifications=True,
        send_email_to="Self",
        alternate_email="test2@test.com",
        authentication_type="External",
        supervisors=["Supervisor1", "Supervisor2"],
        organization="Organization",
        teams=["Team1", "Team2"],
        language="English",
        status="Active",
        title="Title",
        division="Division",
        allow_feedback=True,
        phone_primary="555-555-1111",
        phone_alternate="555-555-1212",
        phone_mobile="555-555-1313",
        fax="555-555-1414",
        website="https://example.com",
        address1="123 Main St",
        address2="Apt. 1",
        city="Anytown",
        province="Pennsylvania",
        country="United States",
        postal_code="12345",
        send_mail_to="Personal",
        receive_notifications=True,
        home_group="HomeGroup",
        groups=[
            GroupPermissions(
                group_name="Group1",
                permissions=[
                    Permission(action="Grant", code="MANAGE_USERS"),
                    Permission(action="Deny", code="MANAGE_GROUP"),
                ],
            ),
            GroupPermissions(group_id="G2"),
        ],
    )


@pytest.fixture
def minimal_user() -> User:
    return User(email="min@test.com", given_name="Min", surname="User", password="secret")
