"""Factory helpers for choosing a document store backend at startup."""

from __future__ import annotations

from uvguard import config
from uvguard.store.base import DocumentStore
from uvguard.store.memory import InMemoryDocumentStore
from utils.logging_utils import get_tagged_logger, mask_url

logger = get_tagged_logger(__name__, tag="store/factory")


DEFAULT_BACKEND_NAME = "memory"


def build_document_store(settings: config.Settings | None = None) -> DocumentStore:
    """Instantiate the configured document store."""
    settings = settings or config.settings
    backend = (settings.store_backend or DEFAULT_BACKEND_NAME).lower()

    if backend == "memory":
        logger.info("Using in-memory document store")
        return InMemoryDocumentStore()

    if backend == "redis":
        from .redis import RedisDocumentStore

        url = settings.store_redis_url
        if not url:
            raise ValueError("store_redis_url must be set for the Redis document store")
        logger.info("Using Redis document store", extra={"redis_url": mask_url(url)})
        return RedisDocumentStore.from_url(url, prefix=settings.store_prefix)

    raise ValueError(f"Unknown store backend '{backend}'")
