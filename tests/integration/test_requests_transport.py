"""Integration tests for the requests-based scan transport (HTTP mocked)."""

import json
from unittest.mock import MagicMock

import pytest
import requests

from snippetscan.application.ports.scan_transport import ScanTransportPort
from snippetscan.domain.errors import InvalidInputError, ScanApiError
from snippetscan.domain.models.rules import Rule, RuleSet
from snippetscan.infrastructure.adapters.requests_scan_transport import RequestsScanTransport, include_assets
from snippetscan.infrastructure.config.settings import ApiSettings

WFP = "file=9799c4f790062136eac835d68b3904bb,38,src/main.c\n"


def make_response(status_code: int = 200, payload=None, reason: str = "OK") -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.ok = status_code < 400
    response.reason = reason
    if isinstance(payload, Exception):
        response.json.side_effect = payload
    else:
        response.json.return_value = payload
    return response


@pytest.fixture
def api_settings(isolated_env) -> ApiSettings:
    return ApiSettings(url="https://scan.example/direct", api_key="secret", retry_limit=2, retry_sleep_seconds=0)


def test_transport_satisfies_port(api_settings):
    assert isinstance(RequestsScanTransport(api_settings, session=MagicMock()), ScanTransportPort)


def test_posts_multipart_wfp(api_settings):
    session = MagicMock()
    session.post.return_value = make_response(payload={"src/main.c": [{"id": "none"}]})
    transport = RequestsScanTransport(api_settings, session=session)

    result = transport.scan(WFP, context="ci", scan_id=3)

    assert result == {"src/main.c": [{"id": "none"}]}
    args, kwargs = session.post.call_args
    assert args[0] == "https://scan.example/direct"
    assert kwargs["headers"]["x-api-key"] == "secret"
    assert kwargs["headers"]["user-agent"] == "snippetscan"
    assert kwargs["headers"]["Accept"] == "application/json"
    request_id = kwargs["headers"]["x-request-id"]
    assert kwargs["files"]["file"] == (f"{request_id}.wfp", WFP, "text/plain")
    assert kwargs["data"] == {"context": "ci"}
    assert kwargs["timeout"] == 120


def test_include_rules_are_sent_as_assets(api_settings):
    rules = RuleSet(include=(Rule(purl="pkg:github/scanoss/engine"), Rule(path="src/")))
    session = MagicMock()
    session.post.return_value = make_response(payload={})

    RequestsScanTransport(api_settings, rules=rules, session=session).scan(WFP)

    data = session.post.call_args.kwargs["data"]
    assert data["type"] == "identify"
    assert json.loads(data["assets"]) == {"components": [{"purl": "pkg:github/scanoss/engine"}]}


def test_include_assets_without_purls():
    assert include_assets(None) is None
    assert include_assets(RuleSet(include=(Rule(path="src/"),))) is None


def test_empty_wfp_is_rejected(api_settings):
    session = MagicMock()
    with pytest.raises(InvalidInputError):
        RequestsScanTransport(api_settings, session=session).scan("")
    session.post.assert_not_called()


def test_timeouts_are_retried(api_settings):
    session = MagicMock()
    session.post.side_effect = [requests.exceptions.Timeout(), make_response(payload={"a.c": []})]

    assert RequestsScanTransport(api_settings, session=session).scan(WFP) == {"a.c": []}
    assert session.post.call_count == 2


def test_retry_budget_exhausted(api_settings):
    session = MagicMock()
    session.post.side_effect = requests.exceptions.Timeout()

    with pytest.raises(ScanApiError) as exc_info:
        RequestsScanTransport(api_settings, session=session).scan(WFP)

    assert session.post.call_count == api_settings.retry_limit + 1
    assert "timed out" in str(exc_info.value)


def test_connection_error_is_not_retried(api_settings):
    session = MagicMock()
    session.post.side_effect = requests.exceptions.ConnectionError("refused")

    with pytest.raises(ScanApiError):
        RequestsScanTransport(api_settings, session=session).scan(WFP)
    assert session.post.call_count == 1


def test_service_limits(api_settings):
    session = MagicMock()
    session.post.return_value = make_response(503, reason="Service Unavailable")

    with pytest.raises(ScanApiError) as exc_info:
        RequestsScanTransport(api_settings, session=session).scan(WFP)

    assert exc_info.value.status_code == 503
    assert exc_info.value.hint == "Service limits exceeded"


def test_rejected_request(api_settings):
    session = MagicMock()
    session.post.return_value = make_response(401, reason="Unauthorized")

    with pytest.raises(ScanApiError) as exc_info:
        RequestsScanTransport(api_settings, session=session).scan(WFP)
    assert exc_info.value.status_code == 401


@pytest.mark.parametrize("payload", [ValueError("not json"), ["a", "list"]])
def test_undecodable_body(api_settings, payload):
    session = MagicMock()
    session.post.return_value = make_response(payload=payload)

    with pytest.raises(ScanApiError):
        RequestsScanTransport(api_settings, session=session).scan(WFP)
