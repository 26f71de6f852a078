# core/sample_data.py

import random
import logging
from datetime import date, timedelta
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)

SAMPLE_TOPICS = [
    {"name": "Coding", "unit": "hours", "generate": True},
    {"name": "Reading", "unit": "pages", "generate": False},
    {"name": "Exercise", "unit": "minutes", "generate": False},
]


def generate_sample_data(today: date, days: int = 365, rng: Optional[random.Random] = None) -> Dict[str, int]:
    """Busy weekdays, occasional weekends, over the ``days`` ending today"""
    rng = rng or random.Random()
    data = {}
    start = today - timedelta(days=days - 1)

    for offset in range(days):
        day = start + timedelta(days=offset)
        value = 0

        if day.weekday() < 5:
            value = rng.randint(0, 8)
        elif rng.random() > 0.7:
            value = rng.randint(0, 3)

        if value > 0:
            data[day.isoformat()] = value

    return data


def seed_sample_topics(store, today: date, rng: Optional[random.Random] = None) -> List:
    """Create the demo topics in ``store`` and return them"""
    rng = rng or random.Random()
    created = []
    for sample in SAMPLE_TOPICS:
        data = generate_sample_data(today, rng=rng) if sample["generate"] else {}
        created.append(store.create_topic(sample["name"], sample["unit"], data))

    logger.info(f"Seeded {len(created)} sample topics")
    return created
