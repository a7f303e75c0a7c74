"""Gateway exceptions."""


class GatewayError(Exception):
    """Base exception for external collaborators."""

    pass


class SpeakerRecognitionError(GatewayError):
    """Speaker recognition service failure."""

    pass


class AudioTooSmallError(SpeakerRecognitionError):
    """Audio buffer is below the minimum size accepted by the service."""

    pass


class SpeakerRecognitionApiError(SpeakerRecognitionError):
    """Service answered with an error status."""

    def __init__(self, message: str, status_code: int) -> None:
        super().__init__(message)
        self.status_code = status_code


class SpeakerRecognitionNetworkError(SpeakerRecognitionError):
    """Service could not be reached."""

    pass


class SpeakerRecognitionTimeoutError(SpeakerRecognitionNetworkError):
    """Service did not answer within the configured timeout."""

    pass


class StorageError(GatewayError):
    """Object storage failure."""

    pass


class TranscriptionError(GatewayError):
    """Speech-to-text failure."""

    pass


class JobQueueError(GatewayError):
    """Background job could not be enqueued."""

    pass
