"""HTTP client for the text-independent speaker verification service."""

import logging
from typing import Any

import httpx

from voicesign.domain.protocols.speaker_recognition import (
    ProfileCheck,
    ProfileEnrollment,
    RecognitionResult,
    VerificationOutcome,
)
from voicesign.engine.audio_format import detect_audio_content_type, leading_bytes_hex
from voicesign.gateways.exceptions import (
    AudioTooSmallError,
    SpeakerRecognitionApiError,
    SpeakerRecognitionError,
    SpeakerRecognitionNetworkError,
    SpeakerRecognitionTimeoutError,
)
from voicesign.gateways.settings import SpeakerRecognitionSettings

logger = logging.getLogger(__name__)

SUBSCRIPTION_KEY_HEADER = "Ocp-Apim-Subscription-Key"
PROFILES_PATH = "/text-independent/profiles"


def _parse_enrollment(
    profile_id: str, data: dict[str, Any], default_status: str = "Enrolled"
) -> ProfileEnrollment:
    try:
        return ProfileEnrollment(
            profile_id=str(data.get("profileId") or profile_id),
            enrollment_status=str(data.get("enrollmentStatus") or default_status),
            enrollments_count=int(data.get("enrollmentsCount") or 0),
            enrollments_length=float(data.get("enrollmentsLength") or 0.0),
            enrollments_speech_length=float(data.get("enrollmentsSpeechLength") or 0.0),
            remaining_enrollments_speech_length=float(
                data.get("remainingEnrollmentsSpeechLength") or 0.0
            ),
        )
    except (TypeError, ValueError) as e:
        raise SpeakerRecognitionError(f"Invalid profile data from speaker service: {e}") from e


def _error_message(response: httpx.Response) -> str:
    """Extract a readable message from an error response.

    Tries the structured error body first, then the raw text, then a
    generic status message.
    """
    fallback = f"API error: {response.status_code} {response.reason_phrase}"
    try:
        body = response.json()
    except ValueError:
        return response.text or fallback

    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if body.get("message"):
            return str(body["message"])
    return fallback


def _json_body(response: httpx.Response) -> dict[str, Any]:
    """Decode a success body, which must be a JSON object."""
    try:
        body = response.json()
    except ValueError as e:
        raise SpeakerRecognitionApiError(
            f"Invalid response from speaker service: {e}", response.status_code
        ) from e
    if not isinstance(body, dict):
        raise SpeakerRecognitionApiError(
            "Invalid response from speaker service: expected a JSON object",
            response.status_code,
        )
    return body


class HttpSpeakerRecognitionClient:
    """SpeakerRecognitionClientProtocol implementation over HTTPS."""

    def __init__(
        self,
        settings: SpeakerRecognitionSettings,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            settings: Endpoint, credentials and limits
            transport: Optional httpx transport, used by tests
        """
        if settings.subscription_key is None:
            raise ValueError("A subscription key is required for the HTTP client")
        self.settings = settings
        self.min_audio_bytes = settings.min_audio_bytes
        self._client = httpx.Client(
            base_url=settings.base_url,
            headers={SUBSCRIPTION_KEY_HEADER: settings.subscription_key.get_secret_value()},
            timeout=settings.timeout,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            response = self._client.request(method, path, **kwargs)
        except httpx.TimeoutException as e:
            logger.error(f"{method} {path} timed out after {self.settings.timeout}s")
            raise SpeakerRecognitionTimeoutError(
                f"Speaker recognition request timed out after {self.settings.timeout:g}s"
            ) from e
        except httpx.TransportError as e:
            logger.error(f"{method} {path} failed: {e}")
            raise SpeakerRecognitionNetworkError(
                f"Failed to connect to verification service: {e}"
            ) from e

        logger.debug(f"{method} {path} -> {response.status_code}")
        if response.is_error:
            message = _error_message(response)
            logger.warning(f"{method} {path} returned {response.status_code}: {message}")
            raise SpeakerRecognitionApiError(message, response.status_code)
        return response

    def _check_size(self, audio: bytes) -> None:
        if len(audio) < self.min_audio_bytes:
            raise AudioTooSmallError(
                f"Audio buffer is too small ({len(audio)} bytes, "
                f"minimum {self.min_audio_bytes})"
            )

    def _audio_headers(self, audio: bytes) -> dict[str, str]:
        content_type = detect_audio_content_type(audio)
        logger.info(
            f"Sending {len(audio)} bytes as {content_type} "
            f"(leading bytes: {leading_bytes_hex(audio)})"
        )
        return {"Content-Type": content_type}

    def create_profile(self) -> str:
        response = self._request(
            "POST", PROFILES_PATH, json={"locale": self.settings.locale}
        )
        profile_id = _json_body(response).get("profileId")
        if not profile_id:
            raise SpeakerRecognitionError("No profile ID returned from speaker service")
        logger.info(f"Created voice profile {profile_id}")
        return str(profile_id)

    def enroll(self, profile_id: str, audio: bytes) -> ProfileEnrollment:
        self._check_size(audio)
        response = self._request(
            "POST",
            f"{PROFILES_PATH}/{profile_id}/enrollments",
            content=audio,
            headers=self._audio_headers(audio),
        )
        enrollment = _parse_enrollment(profile_id, _json_body(response))
        logger.info(
            f"Enrolled audio into profile {profile_id}: {enrollment.enrollment_status}, "
            f"{enrollment.remaining_enrollments_speech_length}s remaining"
        )
        return enrollment

    def create_voice_profile(self, audio: bytes) -> ProfileEnrollment:
        """Create a profile and enroll it with one sample.

        The size check runs before the profile is allocated so that an
        undersized buffer never reaches the service. A profile whose first
        enrollment fails is deleted before the error is re-raised.
        """
        self._check_size(audio)
        profile_id = self.create_profile()
        try:
            return self.enroll(profile_id, audio)
        except SpeakerRecognitionError:
            logger.warning(f"Enrollment failed, deleting new voice profile {profile_id}")
            self.delete_profile(profile_id)
            raise

    def get_profile_status(self, profile_id: str) -> ProfileEnrollment:
        response = self._request("GET", f"{PROFILES_PATH}/{profile_id}")
        return _parse_enrollment(profile_id, _json_body(response), default_status="unknown")

    def check_profile_exists(self, profile_id: str) -> ProfileCheck:
        if not profile_id:
            return ProfileCheck(exists=False, details="No profile ID provided")
        try:
            response = self._client.get(f"{PROFILES_PATH}/{profile_id}")
        except httpx.HTTPError as e:
            logger.warning(f"Profile existence check failed for {profile_id}: {e}")
            return ProfileCheck(exists=False, details=str(e))

        if response.is_error:
            return ProfileCheck(
                exists=False,
                details=f"Service returned status {response.status_code}: {response.text}",
            )
        try:
            data = _json_body(response)
        except SpeakerRecognitionApiError as e:
            logger.warning(f"Profile existence check for {profile_id}: {e}")
            return ProfileCheck(exists=False, details=str(e))
        status = data.get("enrollmentStatus") or "unknown"
        return ProfileCheck(
            exists=True,
            details=f"Profile exists with status: {status}",
            enrollment_status=status,
            remaining_speech_length=data.get("remainingEnrollmentsSpeechLength"),
            raw=data,
        )

    def verify(
        self, profile_id: str, audio: bytes, check_status: bool = True
    ) -> VerificationOutcome:
        if len(audio) < self.min_audio_bytes:
            logger.warning(f"Audio sample too small to verify: {len(audio)} bytes")
            return VerificationOutcome(
                recognition_result=RecognitionResult.REJECT,
                score=0.0,
                profile_id=profile_id,
                error_details="Audio sample is too small to verify (less than 1KB)",
            )

        if check_status:
            try:
                status = self.get_profile_status(profile_id)
            except SpeakerRecognitionError as e:
                logger.warning(f"Profile status check failed, verifying anyway: {e}")
            else:
                if not status.is_enrolled:
                    return VerificationOutcome(
                        recognition_result=RecognitionResult.REJECT,
                        score=0.0,
                        profile_id=profile_id,
                        error_details=(
                            f"Profile {profile_id} is not properly enrolled "
                            f"(status: {status.enrollment_status})"
                        ),
                    )

        try:
            response = self._request(
                "POST",
                f"{PROFILES_PATH}/{profile_id}/verify",
                content=audio,
                headers=self._audio_headers(audio),
            )
            data = _json_body(response)
            score = float(data.get("score") or 0.0)
        except (SpeakerRecognitionError, TypeError, ValueError) as e:
            return VerificationOutcome(
                recognition_result=RecognitionResult.REJECT,
                score=0.0,
                profile_id=profile_id,
                error_details=str(e),
            )

        result = (
            RecognitionResult.ACCEPT
            if data.get("recognitionResult") == RecognitionResult.ACCEPT.value
            else RecognitionResult.REJECT
        )
        error_details = data.get("errorDetails")
        outcome = VerificationOutcome(
            recognition_result=result,
            score=score,
            profile_id=profile_id,
            error_details=str(error_details) if error_details is not None else None,
        )
        logger.info(
            f"Verification for profile {profile_id}: "
            f"{outcome.recognition_result.value} (score={outcome.score:.3f})"
        )
        return outcome

    def delete_profile(self, profile_id: str) -> bool:
        try:
            self._request("DELETE", f"{PROFILES_PATH}/{profile_id}")
        except SpeakerRecognitionError as e:
            logger.warning(f"Failed to delete voice profile {profile_id}: {e}")
            return False
        logger.info(f"Deleted voice profile {profile_id}")
        return True
