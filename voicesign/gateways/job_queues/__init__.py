from .celery_job_queue import CeleryJobQueue
from .direct_job_queue import DirectJobQueue

__all__ = ["CeleryJobQueue", "DirectJobQueue"]
