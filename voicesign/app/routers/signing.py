"""Voice signature field signing endpoint."""

from fastapi import APIRouter

from ..dependencies import FieldSigningServiceDep
from ..schemas.signing import SignedFieldResponse, SignVoiceFieldRequest

router = APIRouter(prefix="/api/fields", tags=["fields"])


@router.post("/sign-voice", response_model=SignedFieldResponse)
def sign_voice_field(
    request: SignVoiceFieldRequest,
    signing_service: FieldSigningServiceDep,
) -> SignedFieldResponse:
    """Insert a voice signature into a field.

    The recipient is identified by the signing token, not by a session.
    """
    signed = signing_service.sign_voice_field(
        token=request.token,
        field_id=request.field_id,
        value=request.value,
        metadata=request.metadata,
        is_base64=request.is_base64,
    )
    return SignedFieldResponse.from_domain(signed)
