"""
Celery worker for profile vector updates.

Start with: celery -A semantic_engine.tasks.celery_app worker --loglevel=info
For Windows development add --pool=solo.
"""
import logging

from celery import Celery
from celery.signals import worker_process_init, task_prerun, task_postrun
from pymongo.errors import PyMongoError

from semantic_engine.core.config import REDIS_URL
from semantic_engine.services.profile_store import get_profile_store

logger = logging.getLogger(__name__)

cel = Celery("vector_worker", broker=REDIS_URL, backend=REDIS_URL)

cel.conf.task_track_started = True
cel.conf.broker_connection_retry_on_startup = True
cel.conf.task_acks_late = True  # Acknowledge tasks after completion
cel.conf.task_reject_on_worker_lost = True  # Reject tasks if worker dies
cel.conf.task_serializer = "json"
cel.conf.result_serializer = "json"
cel.conf.accept_content = ["json"]

cel.conf.imports = ("semantic_engine.tasks.tasks",)

# Logging configuration
cel.conf.worker_log_format = "[%(asctime)s: %(levelname)s/%(processName)s] %(message)s"
cel.conf.worker_task_log_format = "[%(asctime)s: %(levelname)s/%(processName)s][%(task_name)s(%(task_id)s)] %(message)s"


@worker_process_init.connect
def ensure_indexes_on_worker_start(sender=None, **kwargs):
    """Each worker process makes sure the one-record-per-user index exists before taking tasks."""
    try:
        get_profile_store().ensure_indexes()
        logger.info("✅ MongoDB indexes ensured for worker process")
    except PyMongoError as e:
        logger.warning(f"⚠️ Failed to create MongoDB indexes: {e}")


@task_prerun.connect
def log_task_start(sender=None, task_id=None, task=None, **kwargs):
    logger.info(f"▶️ Task starting: {getattr(task, 'name', 'unknown')} (ID: {task_id})")


@task_postrun.connect
def log_task_done(sender=None, task_id=None, task=None, state=None, **kwargs):
    logger.info(f"✅ Task completed: {getattr(task, 'name', 'unknown')} (ID: {task_id}, State: {state})")
