"""Map domain and gateway errors to HTTP responses."""

import logging

from fastapi import Request, status
from fastapi.responses import JSONResponse

from voicesign.database.exceptions import NotFoundError
from voicesign.domain_service import (
    AudioTooSmallForProfileError,
    EnrollmentError,
    InvalidVoiceFieldError,
    MissingVoiceRecordingError,
    NoAudioAvailableError,
    PhraseVerificationFailedError,
    SigningError,
)
from voicesign.gateways.exceptions import GatewayError

logger = logging.getLogger(__name__)


async def not_found_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Convert NotFoundError to a 404 response."""
    assert isinstance(exc, NotFoundError)
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"detail": str(exc)},
    )


async def signing_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Convert signing precondition failures.

    Validation problems with the submission are 400, a failed phrase match
    is 422 and state conflicts (already signed, not pending) are 409.
    """
    assert isinstance(exc, SigningError)
    content: dict[str, object] = {"detail": str(exc)}
    if isinstance(exc, PhraseVerificationFailedError):
        status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
        content["missingWords"] = exc.missing_words
    elif isinstance(exc, (MissingVoiceRecordingError, InvalidVoiceFieldError)):
        status_code = status.HTTP_400_BAD_REQUEST
    else:
        status_code = status.HTTP_409_CONFLICT
    return JSONResponse(status_code=status_code, content=content)


async def enrollment_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, EnrollmentError)
    if isinstance(exc, (NoAudioAvailableError, AudioTooSmallForProfileError)):
        status_code = status.HTTP_400_BAD_REQUEST
    elif exc.__cause__ is not None:
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    else:
        status_code = status.HTTP_400_BAD_REQUEST
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


async def gateway_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Convert upstream failures to 502 without leaking internals."""
    assert isinstance(exc, GatewayError)
    logger.error(f"Upstream failure on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content={"detail": f"Upstream service error: {exc}"},
    )
