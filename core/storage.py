#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Heatmap Tracker - Topic Storage
In-memory and JSON-file topic stores with backups and atomic saves

Stores are constructed explicitly and handed to whoever needs them. A file
store loads on construction and flushes on every write; a failed write is
rolled back so the in-memory map never diverges from what is on disk.

Version: 1.0.0
"""

import os
import json
import gzip
import shutil
import logging
import threading
from abc import ABC, abstractmethod
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from core.exceptions import PersistenceError, TopicNotFoundError, ValidationError
from core.models import Topic, record_errors
from core.sample_data import seed_sample_topics

logger = logging.getLogger(__name__)

BACKEND_MEMORY = "memory"
BACKEND_FILE = "file"
BACKENDS = (BACKEND_MEMORY, BACKEND_FILE)

# ===== PAYLOAD PARSING =====

def parse_topics(payload: Any) -> List[Topic]:
    """Validate a whole export payload before anything is applied"""
    if not isinstance(payload, list):
        raise ValidationError(
            "Import payload must be an array of topics",
            [{"index": None, "field": "payload", "message": "must be an array"}]
        )

    errors = []
    seen_ids = set()
    for index, record in enumerate(payload):
        problems = record_errors(record, index)
        errors.extend(problems)
        if problems:
            continue
        if record["id"] in seen_ids:
            errors.append({"index": index, "field": "id", "message": f"duplicate id {record['id']}"})
        seen_ids.add(record["id"])

    if errors:
        raise ValidationError("Invalid topic data format", errors)

    return [Topic.from_dict(record, index) for index, record in enumerate(payload)]

# ===== HELPER CLASSES =====

class BackupManager:
    """Timestamped copies of the data file"""

    def __init__(self, backup_dir: Path, max_backups: int = 10, compressed: bool = False):
        self.backup_dir = Path(backup_dir)
        self.max_backups = max_backups
        self.compressed = compressed

    def create_backup(self, source_file: Path) -> Optional[Path]:
        """Copy the source file aside; returns None when there is nothing to back up"""
        if not source_file.exists():
            logger.debug(f"Source file {source_file} does not exist, skipping backup")
            return None

        try:
            self.backup_dir.mkdir(parents=True, exist_ok=True)
            timestamp = datetime.now().strftime('%Y%m%d_%H%M%S_%f')
            backup_name = f"backup_{timestamp}.json"

            if self.compressed:
                backup_path = self.backup_dir / f"{backup_name}.gz"
                with open(source_file, 'rb') as f_in:
                    with gzip.open(backup_path, 'wb') as f_out:
                        shutil.copyfileobj(f_in, f_out)
            else:
                backup_path = self.backup_dir / backup_name
                shutil.copy2(source_file, backup_path)

        except OSError as e:
            logger.error(f"Failed to create backup of {source_file}: {e}")
            return None

        logger.info(f"Backup created: {backup_path}")
        self._cleanup_old_backups()
        return backup_path

    def list_backups(self) -> List[Dict[str, Any]]:
        """Backups, newest first"""
        if not self.backup_dir.exists():
            return []

        backups = []
        for backup_file in sorted(self.backup_dir.glob("backup_*.json*"), reverse=True):
            stat = backup_file.stat()
            backups.append({
                'name': backup_file.name,
                'path': str(backup_file),
                'size_bytes': stat.st_size,
                'compressed': backup_file.name.endswith('.gz')
            })
        return backups

    def _cleanup_old_backups(self) -> None:
        # Names embed the timestamp, so name order is age order
        backups = sorted(self.backup_dir.glob("backup_*.json*"), reverse=True)
        for backup in backups[self.max_backups:]:
            try:
                backup.unlink()
                logger.info(f"Removed old backup: {backup}")
            except OSError as e:
                logger.warning(f"Failed to remove old backup {backup}: {e}")

# ===== STORES =====

class TopicStore(ABC):
    """Topic CRUD plus whole-store export and import

    Every returned topic is a copy; callers cannot mutate the store by
    editing what they get back.
    """

    backend = ""

    def __init__(self):
        self._topics: Dict[str, Topic] = {}
        self._lock = threading.RLock()
        self.is_closed = False

    # ===== PUBLIC API =====

    def list_topics(self) -> List[Topic]:
        with self._lock:
            return [topic.copy() for topic in self._topics.values()]

    def get_topic(self, topic_id: str) -> Topic:
        with self._lock:
            topic = self._topics.get(topic_id)
            if topic is None:
                raise TopicNotFoundError(topic_id)
            return topic.copy()

    def create_topic(self, name: str, unit: str, data: Optional[Dict[str, float]] = None) -> Topic:
        topic = Topic.create(name=name, unit=unit, data=data)
        with self._lock:
            topics = dict(self._topics)
            topics[topic.id] = topic
            self._commit(topics)

        logger.info(f"Topic created: {topic.name} ({topic.id})")
        return topic.copy()

    def update_topic(self, topic_id: str, name: Optional[str] = None, unit: Optional[str] = None,
                     data: Optional[Dict[str, float]] = None) -> Topic:
        """Merge the given fields; ``data`` replaces the whole date map"""
        with self._lock:
            current = self._topics.get(topic_id)
            if current is None:
                raise TopicNotFoundError(topic_id)

            updated = Topic(
                id=current.id,
                name=current.name if name is None else name,
                unit=current.unit if unit is None else unit,
                data=dict(current.data) if data is None else dict(data)
            )
            topics = dict(self._topics)
            topics[topic_id] = updated
            self._commit(topics)

        logger.debug(f"Topic updated: {topic_id} ({updated.entry_count} entries)")
        return updated.copy()

    def delete_topic(self, topic_id: str) -> None:
        with self._lock:
            if topic_id not in self._topics:
                raise TopicNotFoundError(topic_id)
            topics = dict(self._topics)
            removed = topics.pop(topic_id)
            self._commit(topics)

        logger.info(f"Topic deleted: {removed.name} ({topic_id})")

    def export_data(self) -> List[Dict[str, Any]]:
        with self._lock:
            return [topic.to_dict() for topic in self._topics.values()]

    def import_data(self, payload: Any) -> List[Topic]:
        """Replace the entire store; nothing is applied if any record is invalid"""
        topics = parse_topics(payload)
        with self._lock:
            self._before_replace()
            self._commit({topic.id: topic for topic in topics})

        logger.info(f"Imported {len(topics)} topics")
        return [topic.copy() for topic in topics]

    def list_backups(self) -> List[Dict[str, Any]]:
        """Backups written before imports and clears, newest first"""
        return []

    def clear(self) -> None:
        with self._lock:
            self._before_replace()
            self._commit({})
        logger.info("All topics removed")

    def close(self) -> None:
        with self._lock:
            if not self.is_closed:
                self._flush()
                self.is_closed = True
        logger.debug(f"{self.__class__.__name__} closed")

    def __len__(self) -> int:
        return len(self._topics)

    def __contains__(self, topic_id: str) -> bool:
        return topic_id in self._topics

    # ===== INTERNALS =====

    def _commit(self, topics: Dict[str, Topic]) -> None:
        previous = self._topics
        self._topics = topics
        try:
            self._flush()
        except PersistenceError:
            self._topics = previous
            raise

    def _before_replace(self) -> None:
        """Hook run before the whole store is replaced"""
        pass

    @abstractmethod
    def _flush(self) -> None:
        """Make the current map durable"""


class MemoryTopicStore(TopicStore):
    """Process-local store; contents are lost on shutdown"""

    backend = BACKEND_MEMORY

    def __init__(self, topics: Optional[List[Topic]] = None):
        super().__init__()
        for topic in topics or []:
            self._topics[topic.id] = topic.copy()

    def _flush(self) -> None:
        pass


class JsonFileTopicStore(TopicStore):
    """Store persisted as a JSON array of topic records"""

    backend = BACKEND_FILE

    def __init__(self, data_file: Path, backup_dir: Optional[Path] = None, max_backups: int = 10,
                 compress_backups: bool = False):
        super().__init__()
        self.data_file = Path(data_file)
        self.backup_manager = BackupManager(
            backup_dir or self.data_file.parent / "backups", max_backups, compressed=compress_backups
        )
        self.save_count = 0
        self._load()

    @property
    def exists(self) -> bool:
        return self.data_file.exists()

    def _load(self) -> None:
        if not self.data_file.exists():
            logger.info(f"Data file {self.data_file} does not exist, starting with empty store")
            return

        try:
            with open(self.data_file, 'r', encoding='utf-8') as f:
                payload = json.load(f)
        except json.JSONDecodeError as e:
            logger.error(f"Data file is corrupted: {e}")
            raise PersistenceError(f"Data file {self.data_file} is corrupted: {e}") from e
        except OSError as e:
            raise PersistenceError(f"Failed to read {self.data_file}: {e}") from e

        try:
            topics = parse_topics(payload)
        except ValidationError as e:
            logger.error(f"Data file holds invalid topics: {e.errors}")
            raise PersistenceError(f"Data file {self.data_file} holds invalid topics") from e

        self._topics = {topic.id: topic for topic in topics}
        logger.info(f"Loaded {len(self._topics)} topics from {self.data_file}")

    def _flush(self) -> None:
        """Atomic save through a temporary file"""
        temp_file = self.data_file.with_name(self.data_file.name + '.tmp')
        records = [topic.to_dict() for topic in self._topics.values()]

        try:
            self.data_file.parent.mkdir(parents=True, exist_ok=True)
            with open(temp_file, 'w', encoding='utf-8') as f:
                json.dump(records, f, ensure_ascii=False, indent=2)
            os.replace(temp_file, self.data_file)
        except (OSError, TypeError, ValueError) as e:
            if temp_file.exists():
                temp_file.unlink()
            logger.error(f"Failed to save {self.data_file}: {e}")
            raise PersistenceError(f"Failed to save {self.data_file}: {e}") from e

        self.save_count += 1

    def list_backups(self) -> List[Dict[str, Any]]:
        return self.backup_manager.list_backups()

    def _before_replace(self) -> None:
        self.backup_manager.create_backup(self.data_file)

# ===== FACTORY =====

def create_store(backend: str = BACKEND_MEMORY, data_file: Optional[Path] = None,
                 backup_dir: Optional[Path] = None, max_backups: int = 10,
                 seed_sample_data: bool = False, today: Optional[date] = None,
                 compress_backups: bool = False) -> TopicStore:
    """Build the configured store; sample topics are only added to an empty store"""
    if backend == BACKEND_FILE:
        if data_file is None:
            raise ValueError("data_file is required for the file backend")
        store = JsonFileTopicStore(data_file, backup_dir=backup_dir, max_backups=max_backups,
                                   compress_backups=compress_backups)
    elif backend == BACKEND_MEMORY:
        store = MemoryTopicStore()
    else:
        raise ValueError(f"Unknown storage backend: {backend}")

    if seed_sample_data and len(store) == 0:
        seed_sample_topics(store, today or date.today())

    logger.info(f"Using {store.backend} store with {len(store)} topics")
    return store
