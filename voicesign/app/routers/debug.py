"""Diagnostics for stored voice signatures."""

from typing import Any

from fastapi import APIRouter

from voicesign.domain_service import FieldSigningService

from ..dependencies import CurrentUserId, SigningStoreDep
from ..schemas.signing import TranscriptCheckRequest

router = APIRouter(prefix="/api/debug", tags=["debug"])


@router.post("/voice-transcript-check")
def voice_transcript_check(
    request: TranscriptCheckRequest,
    user_id: CurrentUserId,
    signing_store: SigningStoreDep,
) -> dict[str, Any]:
    """Report what was stored for a field's voice signature, without the audio."""
    return FieldSigningService(signing_store).transcript_diagnostics(request.field_id)
