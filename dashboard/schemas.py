import datetime as dt
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field, field_validator

from core.heatmap import HeatmapProjection
from core.models import NAME_MAX_LENGTH, UNIT_MAX_LENGTH, Topic

Number = Union[int, float]


# Request models
class TopicCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=NAME_MAX_LENGTH)
    unit: str = Field(..., min_length=1, max_length=UNIT_MAX_LENGTH)
    data: Dict[str, Number] = {}

    @field_validator('name', 'unit')
    @classmethod
    def strip_text(cls, v):
        if not v.strip():
            raise ValueError('must not be blank')
        return v.strip()


class TopicPatch(BaseModel):
    """Partial update; omitted fields stay unchanged, ``data`` replaces the map"""
    name: Optional[str] = Field(None, min_length=1, max_length=NAME_MAX_LENGTH)
    unit: Optional[str] = Field(None, min_length=1, max_length=UNIT_MAX_LENGTH)
    data: Optional[Dict[str, Number]] = None


class EntryUpdate(BaseModel):
    value: Number = Field(..., ge=0)


class QuickAdd(BaseModel):
    value: Number = Field(..., ge=0)
    date: Optional[dt.date] = None


# Response models
class TopicOut(BaseModel):
    id: str
    name: str
    unit: str
    data: Dict[str, Number] = {}

    @classmethod
    def from_topic(cls, topic: Topic) -> "TopicOut":
        return cls(**topic.to_dict())


class HeatmapCellOut(BaseModel):
    date: str
    value: Number
    level: int = Field(..., ge=0, le=5)


class TopicStatsOut(BaseModel):
    total_all_time: Number = 0
    total_this_week: Number = 0
    today_value: Number = 0
    current_streak: int = 0
    longest_streak: int = 0
    active_days: int = 0
    max_value: Number = 1


class MonthGridOut(BaseModel):
    year: int
    month: int
    name: str
    cells: List[Optional[HeatmapCellOut]] = []


class YearGridOut(BaseModel):
    year: int
    months: List[MonthGridOut] = []


class HeatmapOut(BaseModel):
    topic: TopicOut
    today: str
    layout: str
    max_value: Number
    cells: List[HeatmapCellOut]
    years: List[YearGridOut] = []
    stats: TopicStatsOut

    @classmethod
    def from_projection(cls, topic: Topic, projection: HeatmapProjection) -> "HeatmapOut":
        return cls(topic=TopicOut.from_topic(topic), **projection.to_dict())


class ImportResult(BaseModel):
    message: str
    topics: List[TopicOut]


class HealthCheck(BaseModel):
    status: str
    service: str
    version: str
    timestamp: float
    details: Dict[str, Any] = {}
