"""Tests for notifier/senders/flowroute_sms.py — httpx.MockTransport backed."""
from __future__ import annotations

import base64
import json

import httpx
import pytest

from notifier.senders.flowroute_sms import FlowrouteSmsSender

TO = "14155551234"
FROM = "12065550100"


def _sender(handler, **overrides) -> FlowrouteSmsSender:
    values = dict(
        access_key="ak",
        secret_key="sk",
        from_number=FROM,
        base_url="https://api.flowroute.test/v2.1/",
        timeout_s=2.0,
        environment="production",
        client=httpx.Client(transport=httpx.MockTransport(handler)),
    )
    values.update(overrides)
    return FlowrouteSmsSender(**values)


def _no_request(request: httpx.Request) -> httpx.Response:
    raise AssertionError(f"unexpected request to {request.url}")


# ===========================================================================
# Production mode
# ===========================================================================

class TestSend:
    def test_accepted_returns_message_id(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(202, json={"data": {"id": "mdr2-39cadeace66e11e7aff806cd7f24ba2d"}})

        outcome = _sender(handler).send(TO, "Hello")

        assert outcome.ok
        assert outcome.provider_message_id == "mdr2-39cadeace66e11e7aff806cd7f24ba2d"

        request = seen[0]
        assert request.method == "POST"
        assert str(request.url) == "https://api.flowroute.test/v2.1/messages"
        assert request.headers["Content-Type"] == "application/vnd.api+json"
        assert request.headers["Accept"] == "application/vnd.api+json"
        expected_auth = base64.b64encode(b"ak:sk").decode()
        assert request.headers["Authorization"] == f"Basic {expected_auth}"
        assert json.loads(request.content) == {
            "data": {"type": "message", "attributes": {"to": TO, "from": FROM, "body": "Hello"}}
        }

    def test_missing_id_falls_back(self):
        outcome = _sender(lambda request: httpx.Response(202, json={"data": {}})).send(TO, "Hello")

        assert outcome.ok
        assert outcome.provider_message_id == "mdr2-unknown"

    def test_error_status_joins_details(self):
        def handler(request):
            return httpx.Response(
                422,
                json={"errors": [{"detail": "Invalid number"}, {"detail": "Body too long"}]},
            )

        outcome = _sender(handler).send(TO, "Hello")

        assert not outcome.ok
        assert outcome.reason == "flowroute status 422: Invalid number, Body too long"

    def test_error_status_with_plain_body(self):
        outcome = _sender(lambda request: httpx.Response(500, text="Internal Server Error")).send(TO, "Hello")

        assert outcome.reason == "flowroute status 500: Internal Server Error"

    def test_invalid_json_on_accept(self):
        outcome = _sender(lambda request: httpx.Response(202, content=b"not json")).send(TO, "Hello")

        assert not outcome.ok
        assert "invalid response body" in outcome.reason

    def test_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        outcome = _sender(handler).send(TO, "Hello")

        assert outcome.reason == "flowroute request timed out after 2.0s"

    def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        outcome = _sender(handler).send(TO, "Hello")

        assert not outcome.ok
        assert outcome.reason.startswith("flowroute request failed")


# ===========================================================================
# Validation
# ===========================================================================

class TestValidation:
    @pytest.mark.parametrize("to", ["4155551234", "+14155551234", "", "abc"])
    def test_invalid_to_number(self, to):
        outcome = _sender(_no_request).send(to, "Hello")
        assert outcome.reason == "invalid to number format"

    def test_empty_body(self):
        outcome = _sender(_no_request).send(TO, "")
        assert outcome.reason == "message body is empty"

    def test_missing_credentials(self):
        outcome = _sender(_no_request, access_key=None).send(TO, "Hello")
        assert outcome.reason == "flowroute credentials not configured"

    def test_missing_from_number(self):
        outcome = _sender(_no_request, from_number=None).send(TO, "Hello")
        assert outcome.reason == "flowroute from number not configured"

    def test_invalid_from_number(self):
        outcome = _sender(_no_request, from_number="555").send(TO, "Hello")
        assert outcome.reason == "invalid from number format"


# ===========================================================================
# Lower environments
# ===========================================================================

class TestNoop:
    @pytest.mark.parametrize("environment", ["local", "dev", "test", "sandbox"])
    def test_lower_environments_never_call_api(self, environment):
        sender = _sender(_no_request, environment=environment, access_key=None, secret_key=None, from_number=None)

        outcome = sender.send(TO, "Hello")

        assert sender.noop
        assert outcome.ok
        assert outcome.provider_message_id.startswith("mdr2-")

    def test_noop_still_validates(self):
        outcome = _sender(_no_request, environment="local").send("123", "Hello")
        assert outcome.reason == "invalid to number format"

    def test_production_is_not_noop(self):
        assert not _sender(_no_request).noop
