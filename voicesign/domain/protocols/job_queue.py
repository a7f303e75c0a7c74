"""Background job queue Protocol."""

from typing import Any, Protocol


class JobQueueProtocol(Protocol):
    """Protocol for enqueuing background jobs."""

    def enqueue(self, name: str, payload: dict[str, Any]) -> str:
        """Enqueue a job.

        Args:
            name: Job name, e.g. "internal.extract-audio"
            payload: JSON-serializable job payload

        Returns:
            Job id
        """
        ...
