"""Speech-to-text endpoint."""

from typing import Annotated

from fastapi import APIRouter, File, HTTPException, UploadFile, status

from ..dependencies import CurrentUserId, TranscriberDep
from ..schemas.signing import TranscriptionResponse
from ._uploads import read_upload

router = APIRouter(prefix="/api/voice-transcription", tags=["voice-transcription"])


@router.post("", response_model=TranscriptionResponse)
def transcribe(
    user_id: CurrentUserId,
    transcriber: TranscriberDep,
    audio: Annotated[UploadFile | None, File()] = None,
) -> TranscriptionResponse:
    """Transcribe an uploaded audio recording."""
    if audio is not None and not (audio.content_type or "").startswith("audio/"):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Uploaded file must be an audio recording",
        )
    _, data = read_upload(audio)
    return TranscriptionResponse(transcript=transcriber.transcribe(data))
