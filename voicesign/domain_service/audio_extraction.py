"""Audio extraction stage.

Turns an uploaded recording (video or audio container) into the mono
16 kHz PCM WAV that the speaker recognition service expects, and stores
it next to the recording.
"""

import logging
import shutil
import tempfile
from collections.abc import Callable
from pathlib import Path

from voicesign.domain.models import ProcessingStatus, VoiceEnrollment
from voicesign.domain.protocols import (
    EnrollmentStoreProtocol,
    MediaFetcherProtocol,
    StorageProtocol,
)
from voicesign.engine import EngineError, TranscodeResult, format_bytes, transcode_to_wav
from voicesign.gateways.exceptions import GatewayError

from .exceptions import ExtractionError
from .settings import settings

logger = logging.getLogger(__name__)


class AudioExtractionService:
    """Service for extracting enrollment audio from uploaded recordings."""

    def __init__(
        self,
        enrollment_store: EnrollmentStoreProtocol,
        storage: StorageProtocol,
        media_fetcher: MediaFetcherProtocol,
        transcode: Callable[[Path], TranscodeResult] = transcode_to_wav,
        presign_ttl: int = settings.presign_ttl_seconds,
        audio_folder: str = settings.extracted_audio_folder,
        scratch_prefix: str = settings.scratch_prefix,
    ) -> None:
        """Initialize audio extraction service.

        Args:
            enrollment_store: Store for enrollment records.
            storage: Object storage holding recordings and extracted audio.
            media_fetcher: Fetcher for presigned URLs.
            transcode: Function converting a file on disk to WAV.
            presign_ttl: Lifetime of retrieval URLs in seconds.
            audio_folder: Storage folder for extracted audio.
            scratch_prefix: Prefix of the per-invocation scratch directory.
        """
        self.enrollment_store = enrollment_store
        self.storage = storage
        self.media_fetcher = media_fetcher
        self.transcode = transcode
        self.presign_ttl = presign_ttl
        self.audio_folder = audio_folder
        self.scratch_prefix = scratch_prefix

    def fetch_stored_media(self, url: str) -> bytes:
        """Download a stored object through a short-lived URL.

        Falls back to a direct storage download when the URL cannot be
        issued or fetched. Foreign URLs are fetched as given.
        """
        key = self.storage.key_from_url(url)
        if key is None:
            return self.media_fetcher.fetch(url)

        try:
            signed_url = self.storage.get_url(key, expires_in=self.presign_ttl)
            return self.media_fetcher.fetch(signed_url)
        except GatewayError as e:
            logger.warning(f"Presigned download failed for {key}, downloading directly: {e}")
        return self.storage.download(key)

    def extract_audio(self, enrollment_id: int) -> str:
        """Extract audio for an enrollment.

        Returns the existing reference without re-processing when the
        enrollment already has extracted audio.

        Args:
            enrollment_id: Enrollment whose recording is processed.

        Returns:
            Reference of the extracted WAV.

        Raises:
            ExtractionError: If the recording cannot be fetched, decoded or stored.
                The enrollment is left in ERROR with the message.
        """
        enrollment = self.enrollment_store.get_enrollment(enrollment_id)
        if enrollment.audio_url:
            logger.info(f"Enrollment {enrollment_id} already has audio, skipping extraction")
            return enrollment.audio_url

        if not enrollment.video_url:
            message = f"Enrollment {enrollment_id} has no recording to extract audio from"
            self.enrollment_store.update_status(enrollment_id, ProcessingStatus.ERROR, message)
            raise ExtractionError(message)

        self.enrollment_store.update_status(enrollment_id, ProcessingStatus.PROCESSING)
        scratch_dir = Path(tempfile.mkdtemp(prefix=self.scratch_prefix))
        try:
            audio_url = self._extract(enrollment, enrollment.video_url, scratch_dir)
        except (GatewayError, EngineError, OSError) as e:
            message = f"Audio extraction failed: {e}"
            logger.error(f"Enrollment {enrollment_id}: {message}")
            self.enrollment_store.update_status(enrollment_id, ProcessingStatus.ERROR, message)
            raise ExtractionError(message) from e
        finally:
            self._cleanup(scratch_dir)
        return audio_url

    def _extract(self, enrollment: VoiceEnrollment, video_url: str, scratch_dir: Path) -> str:
        assert enrollment.id is not None
        data = self.fetch_stored_media(video_url)
        input_path = scratch_dir / "input"
        input_path.write_bytes(data)
        logger.info(f"Enrollment {enrollment.id}: recording is {format_bytes(len(data))}")

        result = self.transcode(input_path)
        logger.info(
            f"Enrollment {enrollment.id}: extracted {format_bytes(len(result.data))} "
            f"of audio ({result.duration_seconds:.1f}s)"
        )

        audio_url = self.storage.upload(
            result.data,
            f"{self.audio_folder}/{enrollment.public_id}.wav",
            content_type="audio/wav",
        )
        self.enrollment_store.mark_audio_extracted(
            enrollment.id,
            audio_url,
            video_duration=round(result.duration_seconds),
        )
        return audio_url

    def _cleanup(self, scratch_dir: Path) -> None:
        try:
            shutil.rmtree(scratch_dir)
        except OSError as e:
            logger.warning(f"Failed to remove scratch directory {scratch_dir}: {e}")
