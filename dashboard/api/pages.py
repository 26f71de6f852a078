import logging
from pathlib import Path
from typing import Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile, status
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from core.exceptions import TopicNotFoundError, TrackerError
from core.heatmap import LAYOUTS, MAX_LEVEL
from dashboard.api.data import parse_upload
from dashboard.config import DashboardSettings
from dashboard.dependencies import get_app_settings, get_topic_service
from services import TopicService
from utils.validators import is_valid_date

logger = logging.getLogger(__name__)

router = APIRouter(tags=["pages"], include_in_schema=False)

templates = Jinja2Templates(directory=str(Path(__file__).parent.parent / "templates"))


def back_to_index(topic_id: Optional[str] = None, layout: Optional[str] = None,
                  notice: Optional[str] = None, error: Optional[str] = None) -> RedirectResponse:
    """Post/redirect/get back to the dashboard carrying a one-shot notice"""
    params = {key: value for key, value in (
        ("topic", topic_id), ("layout", layout), ("notice", notice), ("error", error)
    ) if value}
    url = "/" + (f"?{urlencode(params)}" if params else "")
    return RedirectResponse(url=url, status_code=status.HTTP_303_SEE_OTHER)


def parse_number(text: str):
    """Form values arrive as text; keep whole numbers as int"""
    text = text.strip()
    try:
        return int(text)
    except ValueError:
        return float(text)


@router.get("/", response_class=HTMLResponse)
async def index(
    request: Request,
    topic: Optional[str] = None,
    layout: Optional[str] = None,
    edit: Optional[str] = None,
    notice: Optional[str] = None,
    error: Optional[str] = None,
    service: TopicService = Depends(get_topic_service),
    settings: DashboardSettings = Depends(get_app_settings)
):
    """Topic list plus the selected topic's heatmap and statistics"""
    if layout not in LAYOUTS:
        layout = settings.DEFAULT_LAYOUT

    topics = service.store.list_topics()
    current = next((t for t in topics if t.id == topic), topics[0] if topics else None)

    projection = None
    edit_cell = None
    if current is not None:
        current, projection = service.view(current.id, layout)
        if edit and is_valid_date(edit):
            edit_cell = projection.cell_for(edit)

    return templates.TemplateResponse(
        request,
        "index.html",
        {
            "settings": settings,
            "topics": topics,
            "topic": current,
            "projection": projection,
            "layout": layout,
            "layouts": LAYOUTS,
            "levels": range(MAX_LEVEL + 1),
            "edit_cell": edit_cell,
            "today": service.today().isoformat(),
            "notice": notice,
            "error": error
        }
    )


@router.post("/topics")
async def create_topic(
    name: str = Form(...),
    unit: str = Form(...),
    service: TopicService = Depends(get_topic_service)
):
    try:
        topic = service.store.create_topic(name, unit)
    except TrackerError as e:
        logger.warning(f"Topic not created: {e}")
        return back_to_index(error=f"Failed to create topic: {e}")
    return back_to_index(topic.id, notice="Topic created successfully")


@router.post("/topics/{topic_id}/delete")
async def delete_topic(topic_id: str, service: TopicService = Depends(get_topic_service)):
    try:
        service.store.delete_topic(topic_id)
    except TrackerError as e:
        logger.warning(f"Topic not deleted: {e}")
        return back_to_index(topic_id, error=f"Failed to delete topic: {e}")
    return back_to_index(notice="Topic deleted successfully")


@router.post("/topics/{topic_id}/entries")
async def save_entry(
    topic_id: str,
    entry_date: str = Form(..., alias="date"),
    value: str = Form(...),
    layout: Optional[str] = Form(None),
    service: TopicService = Depends(get_topic_service)
):
    """Edit form of a clicked cell"""
    try:
        service.record_entry(topic_id, entry_date, parse_number(value))
    except ValueError:
        return back_to_index(topic_id, layout, error=f"Not a number: {value}")
    except TopicNotFoundError as e:
        return back_to_index(error=str(e))
    except TrackerError as e:
        logger.warning(f"Entry not saved: {e}")
        return back_to_index(topic_id, layout, error=f"Failed to update entry: {e}")
    return back_to_index(topic_id, layout, notice="Entry updated successfully")


@router.post("/topics/{topic_id}/quick-add")
async def quick_add(
    topic_id: str,
    value: str = Form(...),
    layout: Optional[str] = Form(None),
    service: TopicService = Depends(get_topic_service)
):
    try:
        service.quick_add(topic_id, parse_number(value))
    except ValueError:
        return back_to_index(topic_id, layout, error=f"Not a number: {value}")
    except TopicNotFoundError as e:
        return back_to_index(error=str(e))
    except TrackerError as e:
        logger.warning(f"Quick add failed: {e}")
        return back_to_index(topic_id, layout, error=f"Failed to update entry: {e}")
    return back_to_index(topic_id, layout, notice="Entry updated successfully")


@router.post("/import")
async def import_file(
    file: UploadFile = File(...),
    service: TopicService = Depends(get_topic_service),
    settings: DashboardSettings = Depends(get_app_settings)
):
    content = await file.read()
    if len(content) > settings.MAX_UPLOAD_BYTES:
        return back_to_index(error="Failed to import data: file is too large")

    try:
        topics = service.store.import_data(parse_upload(content))
    except TrackerError as e:
        logger.warning(f"Import rejected: {e}")
        return back_to_index(error=f"Failed to import data: {e}")

    first = topics[0].id if topics else None
    return back_to_index(first, notice=f"Successfully imported {len(topics)} topics")
