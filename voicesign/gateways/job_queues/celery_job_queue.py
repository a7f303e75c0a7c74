import logging
from typing import Any

from celery import Celery
from kombu.exceptions import OperationalError

from voicesign.gateways.exceptions import JobQueueError
from voicesign.gateways.settings import CelerySettings

logger = logging.getLogger(__name__)


class CeleryJobQueue:
    """JobQueueProtocol implementation that sends jobs to the Celery worker."""

    def __init__(self, settings: CelerySettings, app: Celery | None = None) -> None:
        """Initialize the Celery client.

        Args:
            settings: Broker and result backend URLs
            app: Existing Celery app; a client-only app is created if omitted
        """
        self.queue = settings.task_default_queue
        if app is None:
            app = Celery(
                broker=settings.broker_url,
                backend=settings.result_backend,
            )
            app.conf.update(
                task_serializer="json",
                result_serializer="json",
                accept_content=["json"],
            )
        self._app = app

    def enqueue(self, name: str, payload: dict[str, Any]) -> str:
        """Send a job to the worker.

        Args:
            name: Registered task name
            payload: Keyword arguments for the task

        Returns:
            Celery task id
        """
        logger.info(f"Sending job {name}: {payload}")
        try:
            result = self._app.send_task(name, kwargs={"payload": payload}, queue=self.queue)
        except OperationalError as e:
            raise JobQueueError(f"Failed to enqueue {name}: {e}") from e
        return str(result.id)
