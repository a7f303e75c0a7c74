from typing import Any

from pydantic import Field

from ._base import CamelModel


class VoiceVerificationRequest(CamelModel):
    """Voice verification request."""

    audio_data: str = Field(
        ...,
        description="Voice sample (Base64 or Data URL)",
    )
    user_id: int | None = Field(
        None,
        description="User to verify, defaults to the caller",
    )
    document_id: int | None = Field(
        None,
        description="Document owned by the caller, required to verify another user",
    )


class VoiceVerificationResponse(CamelModel):
    verified: bool = Field(..., description="Verification passed")
    score: float = Field(..., description="Speaker similarity score (0.0-1.0)")
    threshold: float = Field(..., description="Minimum accepted score")
    details: dict[str, Any] = Field(default_factory=dict)
    error: str | None = None


class CheckProfileRequest(CamelModel):
    profile_id: str | None = Field(None, description="Speaker service profile ID")
    user_id: int | None = Field(None, description="User whose active profile is checked")


class CheckProfileResponse(CamelModel):
    exists: bool
    details: str
    profile_id: str | None = None
    enrollment_id: int | None = None
    enrollment_status: str | None = None
