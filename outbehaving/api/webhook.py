"""GET/POST /webhook - chat-platform webhook acknowledger

GET answers the subscription handshake; POST logs the event and
acknowledges it without processing. Any other method is 405.
"""

import hmac
import json
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import PlainTextResponse

from outbehaving.api.dependencies import get_request_id, get_settings
from outbehaving.config import Settings
from outbehaving.infrastructure.observability.metrics import webhook_event_counter

logger = logging.getLogger(__name__)

router = APIRouter()

ACKNOWLEDGEMENT = "EVENT_RECEIVED"


def verify_subscription(mode: Optional[str], token: Optional[str], expected: Optional[str]) -> bool:
    """True when the handshake asks to subscribe with the shared secret"""
    if mode != "subscribe" or not token or not expected:
        return False
    return hmac.compare_digest(token.encode(), expected.encode())


@router.get("/webhook", response_class=PlainTextResponse)
def verify_webhook(
    hub_mode: Optional[str] = Query(default=None, alias="hub.mode"),
    hub_verify_token: Optional[str] = Query(default=None, alias="hub.verify_token"),
    hub_challenge: Optional[str] = Query(default=None, alias="hub.challenge"),
    settings: Settings = Depends(get_settings),
):
    if verify_subscription(hub_mode, hub_verify_token, settings.webhook_verify_token):
        webhook_event_counter.labels(kind="verified").inc()
        logger.info("Webhook verified")
        return PlainTextResponse(hub_challenge or "", status_code=200)

    webhook_event_counter.labels(kind="rejected").inc()
    logger.warning("Webhook verification failed", extra={"mode": hub_mode})
    return PlainTextResponse("Verification failed", status_code=403)


@router.post("/webhook", response_class=PlainTextResponse)
async def receive_event(request: Request, request_id: str = Depends(get_request_id)):
    raw = await request.body()
    try:
        payload = json.loads(raw or b"{}")
    except ValueError:
        payload = raw.decode("utf-8", errors="replace")
        logger.warning("Webhook body is not JSON", extra={"request_id": request_id})

    webhook_event_counter.labels(kind="received").inc()
    logger.info("Incoming message", extra={"request_id": request_id, "payload": payload})
    return PlainTextResponse(ACKNOWLEDGEMENT, status_code=200)


@router.api_route("/webhook", methods=["PUT", "PATCH", "DELETE"], response_class=PlainTextResponse)
def method_not_allowed():
    return PlainTextResponse("Method Not Allowed", status_code=405, headers={"Allow": "GET, POST"})
