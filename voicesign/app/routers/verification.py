"""Voice verification and profile diagnostics endpoints."""

import logging

from fastapi import APIRouter, HTTPException, Request, status

from voicesign.domain.audio_data import decode_audio_data

from ..dependencies import CurrentUserId, SigningStoreDep, VoiceProfileServiceDep
from ..schemas.verification import (
    CheckProfileRequest,
    CheckProfileResponse,
    VoiceVerificationRequest,
    VoiceVerificationResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/voice-verification", tags=["voice-verification"])

# Shortest base64 payload that can hold a usable sample
MIN_AUDIO_DATA_LENGTH = 100


@router.post("", response_model=VoiceVerificationResponse)
def verify_voice(
    request: VoiceVerificationRequest,
    http_request: Request,
    user_id: CurrentUserId,
    signing_store: SigningStoreDep,
    profile_service: VoiceProfileServiceDep,
) -> VoiceVerificationResponse:
    """Verify a voice sample against a user's active profile.

    Verifying someone other than the caller is only allowed for the owner
    of the document the check is made for.
    """
    target_user_id = request.user_id if request.user_id is not None else user_id
    if target_user_id != user_id:
        if request.document_id is None:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Not authorized to verify another user's voice",
            )
        document = signing_store.get_document(request.document_id)
        if document.owner_id != user_id:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Not authorized to verify voice for this document",
            )

    if len(request.audio_data) < MIN_AUDIO_DATA_LENGTH:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Audio data is too short or invalid",
        )
    try:
        audio = decode_audio_data(request.audio_data)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e

    result = profile_service.verify_user_voice(
        target_user_id,
        audio,
        ip_address=http_request.client.host if http_request.client else None,
        user_agent=http_request.headers.get("user-agent"),
    )
    return VoiceVerificationResponse(
        verified=result.verified,
        score=result.score,
        threshold=result.threshold,
        details=result.details,
        error=result.error,
    )


@router.post("/check-profile", response_model=CheckProfileResponse)
def check_profile(
    request: CheckProfileRequest,
    user_id: CurrentUserId,
    profile_service: VoiceProfileServiceDep,
) -> CheckProfileResponse:
    """Report whether a profile exists at the speaker service."""
    if request.profile_id:
        check = profile_service.check_profile(request.profile_id)
        return CheckProfileResponse(
            exists=check.exists,
            details=check.details,
            profile_id=request.profile_id,
            enrollment_status=check.enrollment_status,
        )

    if request.user_id is not None:
        if request.user_id != user_id:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Not authorized to check another user's profile",
            )
        return CheckProfileResponse(**profile_service.check_user_profile(user_id))

    raise HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail="Either profileId or userId is required",
    )
