"""
Push Router
Endpoints the service worker calls to register and drop web push subscriptions,
and the fan-out used by the helpdesk to notify them.
"""
import json
import logging
from typing import Any

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from ...core.enums import UserRole
from ...core.exceptions import PermissionDenied, ServiceUnavailable, StorageError
from ...services.interfaces import PushSubscriptionStore
from ...services.push_notification_service import PushNotificationService
from ...utils.auth import get_session_user
from ..dependencies import get_push_notification_service, get_push_subscription_store
from ..schemas import push_subscription as push_schema
from ..schemas.common import ErrorResponse, SuccessResponse
from ..schemas.user import UserInfo

logger = logging.getLogger(__name__)

MISSING_SUBSCRIPTION_MESSAGE = "Missing subscription"

router = APIRouter(
    prefix="/push",
    tags=["push"],
    responses={
        400: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        405: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message).model_dump(),
    )


async def _read_json(request: Request) -> Any:
    # An empty body reads as {}
    raw = await request.body()
    return json.loads(raw or b"{}")


@router.post(
    "/subscribe",
    response_model=SuccessResponse,
    summary="Register a push subscription"
)
async def subscribe(
    request: Request,
    store: PushSubscriptionStore = Depends(get_push_subscription_store),
):
    """Create or refresh the subscription for an endpoint (one row per endpoint)."""
    try:
        body = await _read_json(request)
    except ValueError as e:
        return _error_response(status.HTTP_400_BAD_REQUEST, str(e))

    try:
        payload = push_schema.PushSubscribeRequest.model_validate(body)
    except ValidationError:
        return _error_response(status.HTTP_400_BAD_REQUEST, MISSING_SUBSCRIPTION_MESSAGE)

    keys = payload.subscription.keys.model_dump() if payload.subscription.keys else None
    try:
        await store.upsert(
            payload.subscription.endpoint,
            keys=keys,
            user_id=payload.user_id,
            user_agent=payload.user_agent,
        )
    except StorageError as e:
        return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, e.message)
    return SuccessResponse()


@router.post(
    "/unsubscribe",
    response_model=SuccessResponse,
    summary="Remove a push subscription"
)
async def unsubscribe(
    request: Request,
    store: PushSubscriptionStore = Depends(get_push_subscription_store),
):
    """
    Delete the subscription identified by its endpoint.

    Unknown endpoints are not an error. Store errors are passed through
    verbatim since this table holds no secrets.
    """
    try:
        body = await _read_json(request)
    except ValueError as e:
        return _error_response(status.HTTP_400_BAD_REQUEST, str(e))

    try:
        payload = push_schema.PushUnsubscribeRequest.model_validate(body)
    except ValidationError:
        return _error_response(status.HTTP_400_BAD_REQUEST, MISSING_SUBSCRIPTION_MESSAGE)

    try:
        await store.delete_by_endpoint(payload.subscription.endpoint)
    except StorageError as e:
        return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, e.message)

    logger.info("Push subscription removed: %s", payload.subscription.endpoint)
    return SuccessResponse()


@router.post(
    "/send",
    response_model=push_schema.PushSendResponse,
    summary="Send a push notification"
)
async def send(
    request: Request,
    current_user: UserInfo = Depends(get_session_user),
    service: PushNotificationService = Depends(get_push_notification_service),
):
    """
    Fan a notification out to the subscriptions of ``userId``.

    Agents and admins may target any user or, without ``userId``, every
    subscription. Clients may only notify themselves. Subscriptions the push
    service reports as gone (404/410) are deleted.
    """
    try:
        body = await _read_json(request)
    except ValueError as e:
        return _error_response(status.HTTP_400_BAD_REQUEST, str(e))

    try:
        payload = push_schema.PushSendRequest.model_validate(body)
    except ValidationError as e:
        return _error_response(status.HTTP_400_BAD_REQUEST, e.errors()[0]["msg"])

    if current_user.role == UserRole.CLIENT and payload.user_id != current_user.id:
        raise PermissionDenied("Clients can only notify themselves")

    try:
        result = await service.send(payload.user_id, payload.title, payload.message, payload.url)
    except ServiceUnavailable as e:
        return _error_response(e.status_code, e.message)
    except StorageError as e:
        return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, e.message)

    return push_schema.PushSendResponse(sent=result.sent, failed=result.failed, removed=result.removed)
