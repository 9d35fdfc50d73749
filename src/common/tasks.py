"""Common tasks."""

import structlog
from celery import shared_task

from common import storage

logger = structlog.get_logger(__name__)


@shared_task(autoretry_for=(storage.StorageError,), retry_backoff=True, max_retries=5)
def delete_blobs(keys: list[str]) -> int:
    """Delete stored objects whose database records are already gone.

    Args:
        keys: Object keys to delete.

    Returns:
        The number of keys processed.
    """
    store = storage.get_blob_store()
    for key in keys:
        store.delete(key)
    logger.info("blobs_deleted", count=len(keys))
    return len(keys)
