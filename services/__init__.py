# services/__init__.py

"""
Heatmap Tracker services

Wires the configured topic store to the topic service and owns their
lifecycle: the store is loaded on initialization and flushed on close.
"""

import logging
from datetime import date
from functools import partial
from typing import Callable, Optional

from core.storage import TopicStore, create_store
from utils.datetime_utils import today_local

from .topic_service import TopicService, apply_entry

logger = logging.getLogger(__name__)


class ServiceManager:
    """
    Explicitly scoped container for the store and the topic service

    Provides:
    - construction of the store from settings (or use of a given store)
    - one clock shared by every consumer
    - orderly close of the store
    """

    def __init__(self, settings, store: Optional[TopicStore] = None,
                 clock: Optional[Callable[[], date]] = None):
        self.settings = settings
        self.store = store
        self.clock = clock or partial(today_local, settings.TIMEZONE)
        self.topic_service: Optional[TopicService] = None
        self.initialized = False

    def initialize_services(self) -> "ServiceManager":
        """Load the store and build the services; errors propagate"""
        logger.info("🔧 Initializing services...")

        if self.store is None:
            self.store = create_store(
                backend=self.settings.STORAGE_BACKEND,
                data_file=self.settings.DATA_FILE,
                backup_dir=self.settings.BACKUP_DIR,
                max_backups=self.settings.MAX_BACKUPS,
                seed_sample_data=self.settings.SEED_SAMPLE_DATA,
                today=self.clock(),
                compress_backups=self.settings.COMPRESS_BACKUPS
            )

        self.topic_service = TopicService(self.store, self.clock)
        self.initialized = True
        logger.info(f"✅ Services ready ({len(self.store)} topics)")
        return self

    def health_check(self) -> dict:
        if not self.initialized:
            return {"status": "error", "services": {}}

        return {
            "status": "healthy",
            "services": {
                "store": {
                    "status": "healthy",
                    "backend": self.store.backend,
                    "topics_count": len(self.store),
                    "backups_count": len(self.store.list_backups())
                },
                "topic_service": {"status": "healthy", "today": self.clock().isoformat()}
            }
        }

    def close_services(self):
        logger.info("🛑 Closing services...")
        if self.store is not None:
            self.store.close()
        self.topic_service = None
        self.initialized = False
        logger.info("✅ Services closed")

    def __enter__(self):
        return self.initialize_services()

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close_services()


__all__ = [
    'ServiceManager',
    'TopicService',
    'apply_entry'
]
