"""
Extension Router
Endpoints the browser extension uses to pair with, authenticate against and
sign out of the helpdesk backend.
"""
import logging
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Request, status
from fastapi.responses import JSONResponse

from ...config import settings
from ...core.exceptions import AuthFailure, HelpdeskAPIError, ValidationInputError
from ...services.extension_token_service import ExtensionTokenService
from ...utils.auth import get_session_user_id
from ..dependencies import get_extension_token_service
from ..schemas import extension_token as extension_token_schema
from ..schemas.common import ErrorResponse, SuccessResponse

logger = logging.getLogger(__name__)

SERVER_ERROR_MESSAGE = "Server error"
INVALID_TOKEN_MESSAGE = "Invalid token"
TOKEN_REQUIRED_MESSAGE = "Token is required"

router = APIRouter(
    prefix="/extension",
    tags=["extension"],
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message).model_dump(),
    )


def _exception_response(exc: HelpdeskAPIError) -> JSONResponse:
    return _error_response(exc.status_code, exc.message)


def _extract_token(body: Any) -> str:
    """Return the non-empty ``token`` field of a JSON body or raise ValidationInputError."""
    token = body.get("token") if isinstance(body, dict) else None
    if not isinstance(token, str) or not token.strip():
        raise ValidationInputError(TOKEN_REQUIRED_MESSAGE)
    return token.strip()


@router.post(
    "/validate",
    response_model=extension_token_schema.ValidateTokenResponse,
    summary="Validate an extension token"
)
async def validate_extension_token(
    request: Request,
    service: ExtensionTokenService = Depends(get_extension_token_service),
):
    """
    Validate the token presented by the browser extension.

    Returns the owning user and the token metadata. The token string is
    never echoed back.
    """
    try:
        body = await request.json()
    except ValueError as e:
        logger.warning("Unreadable body on /extension/validate: %s", e)
        return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, SERVER_ERROR_MESSAGE)

    try:
        token = _extract_token(body)
    except ValidationInputError as e:
        return _exception_response(e)

    try:
        result = await service.validate(token)
    except AuthFailure as e:
        logger.info("Extension token rejected: %s", e.message)
        message = INVALID_TOKEN_MESSAGE if settings.EXTENSION_TOKEN_UNIFORM_ERRORS else e.message
        return _error_response(status.HTTP_401_UNAUTHORIZED, message)
    except Exception as e:
        logger.error("Extension token validation failed: %s", e, exc_info=True)
        return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, SERVER_ERROR_MESSAGE)

    return extension_token_schema.ValidateTokenResponse(
        user=result.user,
        token_info=result.token_info,
    )


@router.post(
    "/token",
    response_model=extension_token_schema.IssueTokenResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Pair a browser extension"
)
async def issue_extension_token(
    token_request: Optional[extension_token_schema.IssueTokenRequest] = Body(None),
    user_id: str = Depends(get_session_user_id),
    service: ExtensionTokenService = Depends(get_extension_token_service),
):
    """
    Issue an extension token for the logged-in web session.

    The token is only returned once - the extension must store it.
    """
    name = token_request.name if token_request else None
    issued = await service.issue(user_id, name=name)
    return extension_token_schema.IssueTokenResponse(
        token=issued.token,
        token_info=issued.token_info,
    )


@router.post(
    "/revoke",
    response_model=SuccessResponse,
    summary="Revoke an extension token"
)
async def revoke_extension_token(
    request: Request,
    service: ExtensionTokenService = Depends(get_extension_token_service),
):
    """
    Revoke a token, e.g. when the extension signs out.

    Revoking an unknown or already revoked token still succeeds.
    """
    try:
        body = await request.json()
    except ValueError as e:
        raise ValidationInputError(f"Invalid JSON body: {e}") from e

    await service.revoke(_extract_token(body))
    return SuccessResponse()
