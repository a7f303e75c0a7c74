import logging
import uuid
from collections.abc import Callable, Mapping
from typing import Any

from voicesign.gateways.exceptions import JobQueueError

logger = logging.getLogger(__name__)

JobHandler = Callable[[dict[str, Any]], Any]


class DirectJobQueue:
    """JobQueueProtocol implementation that runs jobs inline (no Celery).

    Job failures are logged and not re-raised; the handler owns the failure
    state, the same as when running in the worker.
    """

    def __init__(self, handlers: Mapping[str, JobHandler]) -> None:
        self.handlers = handlers

    def enqueue(self, name: str, payload: dict[str, Any]) -> str:
        handler = self.handlers.get(name)
        if handler is None:
            raise JobQueueError(f"No handler registered for job {name}")

        job_id = str(uuid.uuid4())
        logger.info(f"Running job {name} ({job_id}) inline: {payload}")
        try:
            handler(payload)
        except Exception as e:
            logger.error(f"Job {name} ({job_id}) failed: {e}")
        return job_id
