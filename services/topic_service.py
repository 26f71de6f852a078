# services/topic_service.py

import logging
from datetime import date
from typing import Callable, Dict, Mapping, Optional, Tuple, Union

from core.exceptions import ValidationError
from core.heatmap import LAYOUT_YEAR, LAYOUTS, HeatmapProjection, project
from core.models import Topic
from core.storage import TopicStore
from utils.validators import is_valid_date, is_valid_value

logger = logging.getLogger(__name__)

DateLike = Union[str, date]


def _date_key(day: DateLike) -> str:
    key = day.isoformat() if isinstance(day, date) else day
    if not is_valid_date(key):
        raise ValidationError(
            f"Invalid date: {key}",
            [{"index": None, "field": "date", "message": "must be a valid YYYY-MM-DD date"}]
        )
    return key


def apply_entry(data: Mapping[str, float], day: DateLike, value: float) -> Dict[str, float]:
    """Return a new map with one date set, or removed when the value is 0"""
    key = _date_key(day)
    if not is_valid_value(value):
        raise ValidationError(
            f"Invalid value for {key}: {value}",
            [{"index": None, "field": "value", "message": "must be a non-negative number"}]
        )

    new_data = dict(data)
    if value == 0:
        new_data.pop(key, None)
    else:
        new_data[key] = value
    return new_data


class TopicService:
    """Edit path and heatmap view over a topic store

    Edits are read-modify-write of the whole date map. Two edits of the same
    topic racing each other lose the earlier one; the tracker assumes a
    single user.
    """

    def __init__(self, store: TopicStore, clock: Callable[[], date] = date.today):
        self.store = store
        self.clock = clock

    def today(self) -> date:
        return self.clock()

    def record_entry(self, topic_id: str, day: DateLike, value: float) -> Topic:
        topic = self.store.get_topic(topic_id)
        new_data = apply_entry(topic.data, day, value)
        updated = self.store.update_topic(topic_id, data=new_data)
        logger.info(f"Entry {_date_key(day)} = {value} {topic.unit} for {topic.name}")
        return updated

    def clear_entry(self, topic_id: str, day: DateLike) -> Topic:
        return self.record_entry(topic_id, day, 0)

    def quick_add(self, topic_id: str, value: float, day: Optional[DateLike] = None) -> Topic:
        """Set a value for today unless another date is given"""
        return self.record_entry(topic_id, day or self.today(), value)

    def view(self, topic_id: str, layout: str = LAYOUT_YEAR) -> Tuple[Topic, HeatmapProjection]:
        if layout not in LAYOUTS:
            raise ValidationError(
                f"Unknown layout: {layout}",
                [{"index": None, "field": "layout", "message": f"must be one of {list(LAYOUTS)}"}]
            )
        topic = self.store.get_topic(topic_id)
        return topic, project(topic.data, self.today(), layout)
