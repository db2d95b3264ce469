"""Flowroute SMS sender.

Sends messages through the Flowroute v2.1 messaging API
(``POST /messages``) as a JSON:API document with Basic authentication.
A ``202 Accepted`` response carries the provider message id in
``data.id``.

In lower environments (``local``, ``dev``, ``test``, ``sandbox``) the sender
validates its inputs and returns a fake ``mdr2-…`` id without touching the
network, so development never sends real SMS.

Numbers are 11-digit North American strings (e.g. ``"14155551234"``).
"""
from __future__ import annotations

import logging
import re
import uuid

import httpx

from notifier.core.constants import LOWER_ENVIRONMENTS
from notifier.senders.base import SendOutcome

logger = logging.getLogger(__name__)

_NANP_11_DIGITS = re.compile(r"^1\d{10}$")
_NOOP_FROM_NUMBER = "12061231234"


class FlowrouteSmsSender:
    """Synchronous client for the Flowroute messaging API.

    Parameters
    ----------
    access_key, secret_key:
        Basic-auth credentials.  Required outside lower environments.
    from_number:
        Sender number registered on the Flowroute account.
    environment:
        Deployment environment name; lower environments never send.
    client:
        Optional ``httpx.Client``; a short-lived client is used otherwise.
    """

    def __init__(
        self,
        *,
        access_key: str | None,
        secret_key: str | None,
        from_number: str | None,
        base_url: str = "https://api.flowroute.com/v2.1",
        timeout_s: float = 10.0,
        environment: str = "production",
        client: httpx.Client | None = None,
    ) -> None:
        self.access_key = access_key
        self.secret_key = secret_key
        self.from_number = from_number
        self.base_url = base_url.rstrip("/")
        self.timeout_s = timeout_s
        self.environment = environment
        self._client = client

    @property
    def noop(self) -> bool:
        return self.environment in LOWER_ENVIRONMENTS

    def send(self, recipient: str, body: str) -> SendOutcome:
        """Send one SMS.  Never raises for provider or transport errors."""
        invalid = _validate_number(recipient, "to") or _validate_body(body)
        if invalid:
            return SendOutcome.failure(invalid)

        if self.noop:
            from_number = self.from_number or _NOOP_FROM_NUMBER
            invalid = _validate_number(from_number, "from")
            if invalid:
                return SendOutcome.failure(invalid)
            fake_id = f"mdr2-{uuid.uuid4().hex}"
            logger.info(
                "Flowroute SMS no-op (environment=%s, body_length=%d, fake_message_id=%s)",
                self.environment,
                len(body),
                fake_id,
            )
            return SendOutcome.success(fake_id)

        if not self.access_key or not self.secret_key:
            return SendOutcome.failure("flowroute credentials not configured")
        if not self.from_number:
            return SendOutcome.failure("flowroute from number not configured")
        invalid = _validate_number(self.from_number, "from")
        if invalid:
            return SendOutcome.failure(invalid)

        return self._post_message(recipient, body)

    def _post_message(self, recipient: str, body: str) -> SendOutcome:
        payload = {
            "data": {
                "type": "message",
                "attributes": {"to": recipient, "from": self.from_number, "body": body},
            }
        }
        headers = {
            "Content-Type": "application/vnd.api+json",
            "Accept": "application/vnd.api+json",
        }
        auth = httpx.BasicAuth(self.access_key, self.secret_key)
        url = f"{self.base_url}/messages"

        try:
            if self._client is not None:
                response = self._client.post(url, json=payload, headers=headers, auth=auth, timeout=self.timeout_s)
            else:
                response = httpx.post(url, json=payload, headers=headers, auth=auth, timeout=self.timeout_s)
        except httpx.TimeoutException:
            logger.warning("Flowroute request timed out after %ss", self.timeout_s)
            return SendOutcome.failure(f"flowroute request timed out after {self.timeout_s}s")
        except httpx.HTTPError as exc:
            logger.warning("Flowroute request failed: %s", type(exc).__name__)
            return SendOutcome.failure(f"flowroute request failed: {exc}")

        if response.status_code != 202:
            logger.error("Flowroute API returned status %d", response.status_code)
            return SendOutcome.failure(
                f"flowroute status {response.status_code}: {_error_detail(response)}"
            )

        try:
            data = response.json()
        except ValueError:
            return SendOutcome.failure("flowroute returned an invalid response body")

        message_id = _message_id(data)
        if message_id == "mdr2-unknown":
            logger.warning("Unexpected Flowroute response format")
        logger.info("Sent SMS via Flowroute (message_id=%s)", message_id)
        return SendOutcome.success(message_id)


def _validate_number(number: str | None, field: str) -> str | None:
    if not number or not _NANP_11_DIGITS.match(number):
        return f"invalid {field} number format"
    return None


def _validate_body(body: str) -> str | None:
    if not isinstance(body, str) or not body:
        return "message body is empty"
    return None


def _message_id(data: object) -> str:
    if isinstance(data, dict) and isinstance(data.get("data"), dict) and data["data"].get("id"):
        return str(data["data"]["id"])
    return "mdr2-unknown"


def _error_detail(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text[:300]
    errors = data.get("errors") if isinstance(data, dict) else None
    if isinstance(errors, list) and errors:
        return ", ".join(
            str(error.get("detail", "Unknown error")) if isinstance(error, dict) else str(error)
            for error in errors
        )
    return str(data)[:300]
