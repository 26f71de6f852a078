import json
import logging

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from fastapi.responses import JSONResponse

from core.exceptions import ValidationError
from core.storage import TopicStore
from dashboard.config import DashboardSettings
from dashboard.dependencies import get_app_settings, get_store
from dashboard.schemas import ImportResult, TopicOut
from utils.datetime_utils import export_timestamp, now_local

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["data"])


def export_filename(settings: DashboardSettings) -> str:
    return f"heatmap-data-{export_timestamp(now_local(settings.TIMEZONE))}.json"


def parse_upload(content: bytes):
    """Decode an uploaded export file"""
    try:
        return json.loads(content.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ValidationError(
            "File is not valid JSON",
            [{"index": None, "field": "file", "message": str(e)}]
        ) from e


@router.get("/export")
async def export_data(
    store: TopicStore = Depends(get_store),
    settings: DashboardSettings = Depends(get_app_settings)
):
    """
    Every topic as a JSON array, served as a download
    """
    filename = export_filename(settings)
    logger.info(f"Exporting {len(store)} topics as {filename}")
    return JSONResponse(
        content=store.export_data(),
        headers={"Content-Disposition": f'attachment; filename="{filename}"'}
    )


@router.post("/import", response_model=ImportResult)
async def import_data(
    file: UploadFile = File(...),
    store: TopicStore = Depends(get_store),
    settings: DashboardSettings = Depends(get_app_settings)
):
    """
    Replace the whole store with the topics of an uploaded export file
    """
    content = await file.read()
    if len(content) > settings.MAX_UPLOAD_BYTES:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File is larger than {settings.MAX_UPLOAD_BYTES} bytes"
        )

    topics = store.import_data(parse_upload(content))
    return ImportResult(
        message="Data imported successfully",
        topics=[TopicOut.from_topic(topic) for topic in topics]
    )
