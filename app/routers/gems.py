"""Hidden gems router: store snapshot, refresh and submission."""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status

from app.dependencies import (
    get_auth_session,
    get_coordinator,
    get_gem_store,
    get_notifier,
    get_submission_pipeline,
)
from app.enrichment import EnrichmentCoordinator, SubmissionPipeline
from app.errors import AuthRequired, CreateFailed, InvalidSubmission, UploadFailed
from app.models.gems import GemListResponse, GemRecord, GemSubmission, ImageUpload, MapMarker
from app.services.auth import AuthSession
from app.services.gem_store import GemStore
from app.services.notifier import Notification, Notifier

router = APIRouter(tags=["hidden-gems"])
logger = logging.getLogger(__name__)


def _snapshot(
    store: GemStore,
    coordinator: EnrichmentCoordinator,
    pipeline: SubmissionPipeline,
) -> GemListResponse:
    return GemListResponse(
        gems=list(store.snapshot()),
        loading=coordinator.loading,
        submitting=pipeline.in_progress,
    )


@router.get("/gems", response_model=GemListResponse)
async def list_gems(
    store: GemStore = Depends(get_gem_store),
    coordinator: EnrichmentCoordinator = Depends(get_coordinator),
    pipeline: SubmissionPipeline = Depends(get_submission_pipeline),
):
    """Current gems, most recent first, with photos filled in as they arrive."""
    return _snapshot(store, coordinator, pipeline)


@router.post("/gems/refresh", response_model=GemListResponse)
async def refresh_gems(
    store: GemStore = Depends(get_gem_store),
    coordinator: EnrichmentCoordinator = Depends(get_coordinator),
    pipeline: SubmissionPipeline = Depends(get_submission_pipeline),
):
    """Reload the list from the backend. Existing gems are kept on failure."""
    if not await coordinator.fetch_and_enrich():
        raise HTTPException(status_code=502, detail="Failed to load hidden gems")
    return _snapshot(store, coordinator, pipeline)


@router.get("/gems/markers", response_model=List[MapMarker])
async def gem_markers(store: GemStore = Depends(get_gem_store)):
    """Map markers for gems with coordinates."""
    return store.map_markers()


@router.post("/gems", response_model=GemRecord, status_code=status.HTTP_201_CREATED)
async def submit_gem(
    name: str = Form(""),
    description: Optional[str] = Form(None),
    address: Optional[str] = Form(None),
    lat: Optional[str] = Form(None),
    lng: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    session: AuthSession = Depends(get_auth_session),
    pipeline: SubmissionPipeline = Depends(get_submission_pipeline),
):
    """
    Share a new hidden gem.

    Accepts a multipart form with an optional image file. Coordinates are
    optional; without them the address is geocoded.
    """
    upload = None
    if image is not None and image.filename:
        upload = ImageUpload(
            filename=image.filename,
            content_type=image.content_type or "application/octet-stream",
            content=await image.read(),
        )

    form = GemSubmission(
        name=name,
        description=description,
        address=address,
        lat=lat,
        lng=lng,
        image=upload,
    )

    try:
        return await pipeline.submit(form, session)
    except AuthRequired as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=exc.user_message,
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc
    except InvalidSubmission as exc:
        raise HTTPException(status_code=422, detail=exc.user_message) from exc
    except (UploadFailed, CreateFailed) as exc:
        raise HTTPException(status_code=502, detail=exc.user_message) from exc


@router.get("/notifications", response_model=List[Notification])
async def pending_notifications(
    notifications: Notifier = Depends(get_notifier),
    session: AuthSession = Depends(get_auth_session),
):
    """Notifications not yet shown to the caller. Reading clears them."""
    return notifications.drain(session.notification_key)
