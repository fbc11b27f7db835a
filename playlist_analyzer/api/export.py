"""Report export endpoints."""

from typing import Any

import structlog
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from playlist_analyzer.api.playlist import get_playlist_fetcher, resolve_playlist_id
from playlist_analyzer.api.schemas import TabularExportResponse
from playlist_analyzer.core.filenames import export_filename
from playlist_analyzer.middleware.auth import require_api_key
from playlist_analyzer.services.exporter import to_json_document, to_tabular_rows
from playlist_analyzer.services.fetcher import PlaylistFetcher
from playlist_analyzer.services.stats import summarize

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/v1/export", tags=["export"])


@router.get(
    "/json",
    dependencies=[Depends(require_api_key)],
    responses={
        200: {"description": "JSON report as an attachment"},
        400: {"description": "Invalid playlist URL"},
        404: {"description": "Playlist not found or private"},
        502: {"description": "Upstream API failure"},
    },
)
async def export_json(
    playlist_id: str = Depends(resolve_playlist_id),  # noqa: B008
    fetcher: PlaylistFetcher = Depends(get_playlist_fetcher),  # noqa: B008
) -> JSONResponse:
    """
    Download the playlist analysis as a JSON document.

    The response carries a Content-Disposition header whose filename is
    derived from the playlist title.
    """
    aggregate = await fetcher.fetch(playlist_id)
    document = to_json_document(aggregate, summarize(aggregate))
    filename = export_filename(aggregate.title, "json")

    logger.info("export_generated", playlist_id=playlist_id, format="json", filename=filename)

    return JSONResponse(
        content=document,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get(
    "/tabular",
    response_model=TabularExportResponse,
    dependencies=[Depends(require_api_key)],
    responses={
        400: {"description": "Invalid playlist URL"},
        404: {"description": "Playlist not found or private"},
        502: {"description": "Upstream API failure"},
    },
)
async def export_tabular(
    playlist_id: str = Depends(resolve_playlist_id),  # noqa: B008
    fetcher: PlaylistFetcher = Depends(get_playlist_fetcher),  # noqa: B008
) -> Any:
    """
    Rows for the spreadsheet export.

    Three sheets: summary, video details and speed comparison, together
    with the suggested spreadsheet filename.
    """
    aggregate = await fetcher.fetch(playlist_id)
    report = to_tabular_rows(aggregate, summarize(aggregate))
    filename = export_filename(aggregate.title, "xlsx")

    logger.info("export_generated", playlist_id=playlist_id, format="tabular", filename=filename)

    return TabularExportResponse(
        suggested_spreadsheet_filename=filename,
        summary=report.summary,
        videos=report.videos,
        speed_comparison=report.speed_comparison,
    )
