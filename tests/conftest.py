"""Shared test fixtures."""

from datetime import date
from pathlib import Path
from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from core.models import Topic
from core.storage import JsonFileTopicStore, MemoryTopicStore
from dashboard.app import create_app
from dashboard.config import DashboardSettings
from services import TopicService

# A Wednesday
TODAY = date(2024, 1, 10)


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def clock():
    return lambda: TODAY


@pytest.fixture
def coding_topic() -> Topic:
    """Three-day streak ending today plus an older entry."""
    return Topic(
        id="coding",
        name="Coding",
        unit="hours",
        data={
            "2024-01-08": 2,
            "2024-01-09": 4,
            "2024-01-10": 1,
            "2023-12-25": 8,
        },
    )


@pytest.fixture
def memory_store(coding_topic: Topic) -> MemoryTopicStore:
    return MemoryTopicStore([coding_topic])


@pytest.fixture
def empty_store() -> MemoryTopicStore:
    return MemoryTopicStore()


@pytest.fixture
def file_store(tmp_path: Path) -> JsonFileTopicStore:
    return JsonFileTopicStore(tmp_path / "topics.json", backup_dir=tmp_path / "backups", max_backups=3)


@pytest.fixture
def service(memory_store: MemoryTopicStore, clock) -> TopicService:
    return TopicService(memory_store, clock)


@pytest.fixture
def settings(tmp_path: Path) -> DashboardSettings:
    """Settings isolated from any local .env file."""
    return DashboardSettings(
        _env_file=None,
        ENVIRONMENT="testing",
        STORAGE_BACKEND="memory",
        DATA_FILE=tmp_path / "topics.json",
        BACKUP_DIR=tmp_path / "backups",
        MAX_UPLOAD_BYTES=64 * 1024,
    )


@pytest.fixture
def client(settings: DashboardSettings, memory_store: MemoryTopicStore, clock) -> Iterator[TestClient]:
    app = create_app(settings, store=memory_store, clock=clock)
    with TestClient(app) as test_client:
        yield test_client
