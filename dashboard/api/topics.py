from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status

from core.heatmap import LAYOUTS
from core.storage import TopicStore
from dashboard.config import DashboardSettings
from dashboard.dependencies import get_app_settings, get_store, get_topic_service
from dashboard.schemas import EntryUpdate, HeatmapOut, QuickAdd, TopicCreate, TopicOut, TopicPatch
from services import TopicService

router = APIRouter(prefix="/api/topics", tags=["topics"])

LAYOUT_PATTERN = "^(" + "|".join(LAYOUTS) + ")$"


@router.get("", response_model=List[TopicOut])
async def list_topics(store: TopicStore = Depends(get_store)):
    """
    All topics in insertion order
    """
    return [TopicOut.from_topic(topic) for topic in store.list_topics()]


@router.get("/{topic_id}", response_model=TopicOut)
async def get_topic(topic_id: str, store: TopicStore = Depends(get_store)):
    return TopicOut.from_topic(store.get_topic(topic_id))


@router.post("", response_model=TopicOut, status_code=status.HTTP_201_CREATED)
async def create_topic(payload: TopicCreate, store: TopicStore = Depends(get_store)):
    topic = store.create_topic(payload.name, payload.unit, payload.data)
    return TopicOut.from_topic(topic)


@router.patch("/{topic_id}", response_model=TopicOut)
async def update_topic(topic_id: str, payload: TopicPatch, store: TopicStore = Depends(get_store)):
    """
    Partial update. ``data``, when given, replaces the whole date map
    """
    topic = store.update_topic(topic_id, name=payload.name, unit=payload.unit, data=payload.data)
    return TopicOut.from_topic(topic)


@router.delete("/{topic_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_topic(topic_id: str, store: TopicStore = Depends(get_store)):
    store.delete_topic(topic_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put("/{topic_id}/entries/{entry_date}", response_model=TopicOut)
async def set_entry(
    topic_id: str,
    entry_date: date,
    payload: EntryUpdate,
    service: TopicService = Depends(get_topic_service)
):
    """
    Set the value of one date; a value of 0 removes the entry
    """
    return TopicOut.from_topic(service.record_entry(topic_id, entry_date, payload.value))


@router.delete("/{topic_id}/entries/{entry_date}", response_model=TopicOut)
async def clear_entry(
    topic_id: str,
    entry_date: date,
    service: TopicService = Depends(get_topic_service)
):
    return TopicOut.from_topic(service.clear_entry(topic_id, entry_date))


@router.post("/{topic_id}/quick-add", response_model=TopicOut)
async def quick_add(
    topic_id: str,
    payload: QuickAdd,
    service: TopicService = Depends(get_topic_service)
):
    """
    Set today's value, or the value of ``date`` when given
    """
    return TopicOut.from_topic(service.quick_add(topic_id, payload.value, payload.date))


@router.get("/{topic_id}/heatmap", response_model=HeatmapOut)
async def get_heatmap(
    topic_id: str,
    layout: Optional[str] = Query(None, pattern=LAYOUT_PATTERN),
    service: TopicService = Depends(get_topic_service),
    settings: DashboardSettings = Depends(get_app_settings)
):
    """
    Heatmap cells and statistics as of today
    """
    topic, projection = service.view(topic_id, layout or settings.DEFAULT_LAYOUT)
    return HeatmapOut.from_projection(topic, projection)
