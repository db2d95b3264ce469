"""Message routes — POST /messages/sms, POST /messages/email,
GET /users/{user_id}/messages.

Send endpoints are idempotent per ``(idempotency_key, template)``: repeating
a request returns 200 with ``already_sent=true`` and sends nothing.
"""
from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from notifier.api.deps import get_email_coordinator, get_ledger, get_sms_coordinator
from notifier.db.models import MessageIdempotency
from notifier.delivery.coordinator import SendCoordinator
from notifier.delivery.outcomes import Failure, OutcomeKind, Result
from notifier.ledger.idempotency_ledger import IdempotencyLedger

router = APIRouter(tags=["messages"])

_FAILURE_STATUS: dict[OutcomeKind, int] = {
    OutcomeKind.INVALID_RECIPIENT: 422,
    OutcomeKind.UNKNOWN_TEMPLATE: 422,
    OutcomeKind.SEND_FAILURE: 502,
    OutcomeKind.PERSISTENCE_FAILURE: 500,
    OutcomeKind.UNEXPECTED: 500,
}

# 5xx bodies never carry store or driver detail.
_GENERIC_DETAIL: dict[OutcomeKind, str] = {
    OutcomeKind.PERSISTENCE_FAILURE: "message could not be recorded",
    OutcomeKind.UNEXPECTED: "internal error",
}


class SendMessageRequest(BaseModel):
    recipient: str
    idempotency_key: str = Field(min_length=1, max_length=255)
    template: str = Field(min_length=1, max_length=128)
    params: dict[str, Any] = Field(default_factory=dict)
    user_id: str | None = Field(default=None, max_length=64)


def _send(coordinator: SendCoordinator, request: SendMessageRequest) -> JSONResponse:
    result = coordinator.send(
        request.recipient,
        request.idempotency_key,
        request.template,
        request.params,
        request.user_id,
    )
    return JSONResponse(status_code=_status_for(result), content=_serialize_result(result))


def _status_for(result: Result) -> int:
    if isinstance(result, Failure):
        return _FAILURE_STATUS.get(result.reason, 500)
    return 200


def _serialize_result(result: Result) -> dict:
    if isinstance(result, Failure):
        detail = _GENERIC_DETAIL.get(result.reason, result.detail)
        return {"status": "failed", "reason": result.reason.value, "detail": detail}
    return {
        "status": "sent",
        "already_sent": result.already_sent,
        "provider_message_id": result.provider_message_id,
    }


def _serialize_entry(entry: MessageIdempotency) -> dict:
    return {
        "id": str(entry.id),
        "message_type": entry.message_type.value,
        "template": entry.message_template,
        "idempotency_key": entry.idempotency_key,
        "rendered_message": entry.rendered_message,
        "created_at": entry.created_at.isoformat() if entry.created_at else None,
    }


@router.post("/messages/sms", summary="Send an SMS at most once per idempotency key")
def send_sms(
    request: SendMessageRequest,
    coordinator: SendCoordinator = Depends(get_sms_coordinator),
) -> JSONResponse:
    return _send(coordinator, request)


@router.post("/messages/email", summary="Send an email at most once per idempotency key")
def send_email(
    request: SendMessageRequest,
    coordinator: SendCoordinator = Depends(get_email_coordinator),
) -> JSONResponse:
    return _send(coordinator, request)


@router.get("/users/{user_id}/messages", summary="List messages sent to a user")
def list_user_messages(
    user_id: str,
    limit: int = 50,
    offset: int = 0,
    ledger: IdempotencyLedger = Depends(get_ledger),
):
    limit = max(1, min(limit, 200))
    offset = max(0, offset)
    entries = ledger.list_user_messages(user_id, limit=limit, offset=offset)
    return {
        "user_id": user_id,
        "total": ledger.count_user_messages(user_id),
        "messages": [_serialize_entry(entry) for entry in entries],
    }
