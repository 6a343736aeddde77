"""LINE webhook endpoint.

The handler focuses on HTTP concerns: signature verification, body shape
and mapping the batch outcome onto a status code. Event semantics live in
the EventDispatcher service.
"""

import logging

from fastapi import APIRouter, Depends, Request, Response
from pydantic import ValidationError

from line_echo_bot.errors import BatchDispatchError
from line_echo_bot.middleware.signature import verify_line_signature
from line_echo_bot.models.events import WebhookPayload
from line_echo_bot.services.event_dispatcher import EventDispatcher

logger = logging.getLogger(__name__)
router = APIRouter()


def get_event_dispatcher(request: Request) -> EventDispatcher:
    """Dispatcher built at startup (overridable in tests)."""
    return request.app.state.event_dispatcher


@router.post("", dependencies=[Depends(verify_line_signature)])
async def handle_webhook(
    request: Request,
    dispatcher: EventDispatcher = Depends(get_event_dispatcher),
) -> Response:
    """Handle a batch of LINE webhook events.

    Responds 200 once every event has been handled, or 500 if the body has
    no event list or any event failed. The platform retries the whole
    delivery on 500.
    """
    logger.info("LINE webhook callback received")

    try:
        payload = WebhookPayload.model_validate_json(await request.body())
    except ValidationError as e:
        logger.error("Malformed webhook body: %s", e)
        return Response(status_code=500)

    if payload.destination:
        logger.info("Destination User ID: %s", payload.destination)

    try:
        await dispatcher.dispatch_batch(payload.events)
    except BatchDispatchError as e:
        logger.error("Webhook batch failed: %s", e)
        for failure in e.failures:
            logger.error(
                "Event failure: %s",
                failure,
                exc_info=(type(failure), failure, failure.__traceback__),
            )
        return Response(status_code=500)

    return Response(status_code=200)
