import httpx
import pytest
from lxml import etree

from smarteru.client import Client
from smarteru.config.settings import DEFAULT_API_URL, Settings
from smarteru.exceptions import HttpError, MissingValueError, SmarterUError
from smarteru.queries import GetUserGroupsQuery, GetUserQuery, ListUsersQuery, UserIdentifier
from smarteru.utils.telemetry import client_metrics
from smarteru_fixtures import smarteru_response


def _package(transport) -> etree._Element:
    assert len(transport.packages) == 1
    return etree.fromstring(transport.packages[0].encode("utf-8"))


def test_create_user_posts_package_form(make_client, full_user):
    body = smarteru_response("<Email>test@test.com</Email><EmployeeID>E42</EmployeeID>")
    client, transport = make_client(body)

    result = client.create_user(full_user)

    assert result == {"Response": {"Email": "test@test.com", "EmployeeID": "E42"}, "Errors": {}}
    request = transport.requests[0]
    assert request.method == "POST"
    assert str(request.url) == DEFAULT_API_URL
    assert request.headers["content-type"] == "application/x-www-form-urlencoded"
    package = _package(transport)
    assert package.findtext("Method") == "createUser"
    assert package.findtext("Parameters/User/Info/Email") == "test@test.com"


def test_update_user_returns_non_fatal_errors(make_client, minimal_user):
    body = smarteru_response(
        "<Email>min@test.com</Email><EmployeeID></EmployeeID>",
        errors={"UU:01": "Warning"},
    )
    client, transport = make_client(body)

    result = client.update_user(minimal_user)

    assert result["Errors"] == {"UU:01": "Warning"}
    assert _package(transport).findtext("Method") == "updateUser"


def test_get_user(make_client):
    body = smarteru_response(
        "<User><ID>1</ID><Email>test@test.com</Email><Teams><Team>Team1</Team></Teams></User>"
    )
    client, transport = make_client(body)

    result = client.get_user(GetUserQuery(UserIdentifier.by_email("test@test.com")))

    assert result["Response"]["ID"] == "1"
    assert result["Response"]["Teams"] == ["Team1"]
    assert _package(transport).findtext("Parameters/User/Email") == "test@test.com"


def test_list_users(make_client):
    body = smarteru_response(
        "<Users><User><ID>1</ID><GivenName>Test</GivenName><Surname>User</Surname></User></Users>"
    )
    client, _transport = make_client(body)

    result = client.list_users(ListUsersQuery())

    assert len(result["Response"]) == 1
    assert result["Response"][0]["Name"] == "Test User"


def test_get_user_groups(make_client):
    body = smarteru_response(
        "<UserGroups><Group><Name>Group1</Name><Identifier>G1</Identifier>"
        "<IsHomeGroup>1</IsHomeGroup><Permissions><Permission>MANAGE_USERS</Permission>"
        "</Permissions></Group></UserGroups>"
    )
    client, transport = make_client(body)

    result = client.get_user_groups(GetUserGroupsQuery(UserIdentifier.by_id("1")))

    assert result["Response"][0]["Permissions"] == ["MANAGE_USERS"]
    assert _package(transport).findtext("Method") == "getUserGroups"


FAILED_CALLS = [
    ("createUser", lambda client, user: client.create_user(user)),
    ("updateUser", lambda client, user: client.update_user(user)),
    ("getUser", lambda client, user: client.get_user(GetUserQuery(UserIdentifier.by_email(user.email)))),
    ("listUsers", lambda client, user: client.list_users(ListUsersQuery())),
    (
        "getUserGroups",
        lambda client, user: client.get_user_groups(GetUserGroupsQuery(UserIdentifier.by_email(user.email))),
    ),
]


@pytest.mark.parametrize("method, call", FAILED_CALLS, ids=[method for method, _call in FAILED_CALLS])
def test_failed_result_raises_and_records_metric(make_client, minimal_user, method, call):
    body = smarteru_response(result="Failed", errors={"Error1": "Testing", "Error2": "123"})
    client, transport = make_client(body)

    with pytest.raises(SmarterUError) as exc_info:
        call(client, minimal_user)

    assert str(exc_info.value) == "Error1: Testing, Error2: 123"
    assert exc_info.value.errors == {"Error1": "Testing", "Error2": "123"}
    assert _package(transport).findtext("Method") == method
    events = client_metrics.get_metrics(method)
    assert events[-1]["outcome"] == "error"


def test_http_status_error_becomes_http_error(make_client):
    client, _transport = make_client("Not Found", status_code=404)

    with pytest.raises(HttpError) as exc_info:
        client.list_users(ListUsersQuery())

    assert exc_info.value.status_code == 404
    assert exc_info.value.response_body == "Not Found"


def test_transport_error_becomes_http_error():
    def _boom(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = Client("account", "user", http_client=httpx.Client(transport=httpx.MockTransport(_boom)))

    with pytest.raises(HttpError) as exc_info:
        client.get_user(GetUserQuery(UserIdentifier.by_id("1")))

    assert exc_info.value.status_code is None


def test_missing_keys_fail_before_any_request(make_client, minimal_user):
    client, transport = make_client(account_api=None)

    with pytest.raises(MissingValueError):
        client.create_user(minimal_user)
    with pytest.raises(MissingValueError):
        client.get_user(GetUserQuery())

    assert transport.requests == []


def test_query_keys_override_client_keys(make_client):
    client, transport = make_client(smarteru_response("<Users/>"))

    client.list_users(ListUsersQuery(account_api="other-account"))

    package = _package(transport)
    assert package.findtext("AccountAPI") == "other-account"
    assert package.findtext("UserAPI") == "user"


def test_success_records_metric(make_client):
    client, _transport = make_client(smarteru_response("<Users/>"))

    client.list_users(ListUsersQuery())

    events = client_metrics.get_metrics("listUsers")
    assert [event["outcome"] for event in events] == ["success"]


def test_from_settings_uses_configured_values():
    settings = Settings(account_api="acct", user_api="usr", api_url="https://example.test/api/", timeout=5)

    client = Client.from_settings(settings)

    assert client.account_api == "acct"
    assert client.user_api == "usr"
    assert client.api_url == "https://example.test/api/"
    assert client.timeout == 5


def test_close_leaves_injected_http_client_open():
    http_client = httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(200)))

    with Client("account", "user", http_client=http_client):
        pass

    assert http_client.is_closed is False
    http_client.close()


def test_close_closes_owned_http_client():
    client = Client("account", "user")
    owned = client.http_client

    client.close()

    assert owned.is_closed is True


def test_empty_api_url_rejected():
    with pytest.raises(ValueError):
        Client("account", "user", api_url="")


def test_calls_run_inside_a_span(make_client, monkeypatch):
    started = []

    class _FakeSpan:
        def __init__(self):
            self.attributes = {}

        def set_attribute(self, key, value):
            self.attributes[key] = value

        def __enter__(self):
            return self

        def __exit__(self, *_exc_info):
            return False

    class _FakeTracer:
        def start_as_current_span(self, name):
            span = _FakeSpan()
            started.append((name, span))
            return span

    monkeypatch.setattr("smarteru.client.tracer", _FakeTracer())
    client, _transport = make_client(smarteru_response("<Users/>"))

    client.list_users(ListUsersQuery())

    name, span = started[0]
    assert name == "smarteru.listUsers"
    assert span.attributes == {"smarteru.method": "listUsers", "smarteru.result": "Success"}
