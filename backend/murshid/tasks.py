from celery.utils.log import get_task_logger
from flask import has_app_context

from .celery_utils import celery_app
from murshid.errors import StoreError

logger = get_task_logger(__name__)

# Retry policy: at most 3 retries with exponential backoff
RETRY_KWARGS = {
    'max_retries': 3,
    'default_retry_delay': 60,  # 1 minute
    'autoretry_for': (StoreError,),  # store outages are worth retrying
    'retry_backoff': True,
    'retry_backoff_max': 60,
    'retry_jitter': True
}


def _in_app_context(job):
    """Run job inside an application context, creating the app in a worker."""
    if has_app_context():
        return job()
    from murshid import create_app
    app = create_app()
    with app.app_context():
        return job()


def _refresh_tags():
    from murshid.services import build_services
    entries = build_services().tags.refresh()
    logger.info(f"Tag translation cache holds {entries} entries")
    return entries


def _repair_cascades():
    from murshid.services import build_services
    results = build_services().cascade.repair_partial_cascades()
    for result in results:
        logger.info(f"Repaired {result.root_type} {result.root_id}: {dict(result.steps)}")
    return [result.to_dict() for result in results]


@celery_app.task(bind=True, **RETRY_KWARGS)
def refresh_tag_translations(self):
    """Rebuild the university / major tag translation map."""
    logger.info("[TASK_STARTED] refresh_tag_translations")
    return _in_app_context(_refresh_tags)


@celery_app.task(bind=True, **RETRY_KWARGS)
def repair_partial_cascades(self):
    """
    Re-run soft-delete cascades that stopped part way.

    Each cascade is replayed as the actor who deleted the root, with the
    root's reason and timestamp; steps are idempotent so finished parts are
    left untouched.
    """
    logger.info("[TASK_STARTED] repair_partial_cascades")
    return _in_app_context(_repair_cascades)
