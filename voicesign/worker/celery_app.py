"""Celery worker application."""

import logging
from typing import Any

from celery import Celery
from celery.signals import setup_logging
from sqlmodel import SQLModel

from voicesign.database.session import engine
from voicesign.domain_service import EXTRACT_AUDIO_JOB, PROCESS_PENDING_JOB, ExtractionError
from voicesign.gateways.settings import celery_settings

from .jobs import run_extract_audio, run_process_pending

logger = logging.getLogger(__name__)

celery_app = Celery(
    "voicesign",
    broker=celery_settings.broker_url,
    backend=celery_settings.result_backend,
)
celery_app.conf.update(
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    task_default_queue=celery_settings.task_default_queue,
    task_acks_late=True,
    worker_prefetch_multiplier=1,
)


@setup_logging.connect
def configure_logging(**kwargs: Any) -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(levelname)s:     %(name)s - %(message)s",
    )


@celery_app.task(
    name=EXTRACT_AUDIO_JOB,
    autoretry_for=(ExtractionError,),
    retry_backoff=True,
    max_retries=3,
)
def extract_audio_task(payload: dict[str, Any]) -> str:
    return run_extract_audio(payload)


@celery_app.task(name=PROCESS_PENDING_JOB)
def process_pending_task(payload: dict[str, Any]) -> int:
    results = run_process_pending(payload)
    return sum(1 for r in results if r.success)


def run_worker() -> None:
    """Run the Celery worker."""
    SQLModel.metadata.create_all(engine)
    celery_app.worker_main(["worker", "--loglevel=INFO"])
