"""
Celery utilities

Celery instance for background maintenance tasks, using Redis (REDIS_URL)
as broker and result backend.
"""

from celery import Celery

from murshid.config import REDIS_URL

# Create the Celery instance
celery = Celery(
    'murshid',
    broker=REDIS_URL,
    backend=REDIS_URL,
    include=['murshid.tasks']
)

# Default Celery configuration
celery_config = {
    'broker_url': REDIS_URL,
    'result_backend': REDIS_URL,
    'task_serializer': 'json',
    'accept_content': ['json'],
    'result_serializer': 'json',
    'timezone': 'UTC',
    'worker_max_tasks_per_child': 1000,  # recycle a worker child after 1000 tasks
    'task_routes': {
        'murshid.tasks.refresh_*': {'queue': 'maintenance'},
        'murshid.tasks.repair_*': {'queue': 'maintenance'},
    },
    'beat_schedule': {
        'refresh-tag-translations': {
            'task': 'murshid.tasks.refresh_tag_translations',
            'schedule': 60 * 60 * 6,
        },
        'repair-partial-cascades': {
            'task': 'murshid.tasks.repair_partial_cascades',
            'schedule': 60 * 30,
        },
    },
}

celery.conf.update(celery_config)

celery_app = celery
