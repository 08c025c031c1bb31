"""Tasks module - Celery tasks and worker configuration"""
from .celery_app import cel
from .tasks import update_user_vector_task, batch_update_vectors_task

__all__ = ['cel', 'update_user_vector_task', 'batch_update_vectors_task']
