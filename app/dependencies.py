"""Dependencies for FastAPI routes."""
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from typing import Optional

from app.enrichment import (
    EnrichmentCoordinator,
    SubmissionPipeline,
    enrichment_coordinator,
    submission_pipeline,
)
from app.services.auth import ANONYMOUS_SESSION, AuthSession
from app.services.gem_store import GemStore, gem_store
from app.services.geocode_resolver import GeocodeResolver, geocode_resolver
from app.services.notifier import Notifier, notifier
from app.services.photo_resolver import PhotoResolver, photo_resolver


async def get_auth_session(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(
        HTTPBearer(auto_error=False)
    )
) -> AuthSession:
    """
    Build the caller's session from an optional bearer token.

    Missing or malformed tokens give an anonymous session; the submission
    pipeline decides what that means.
    """
    if credentials is None:
        return ANONYMOUS_SESSION
    return AuthSession(credentials.credentials)


def get_gem_store() -> GemStore:
    return gem_store


def get_notifier() -> Notifier:
    return notifier


def get_coordinator() -> EnrichmentCoordinator:
    return enrichment_coordinator


def get_submission_pipeline() -> SubmissionPipeline:
    return submission_pipeline


def get_photo_resolver() -> PhotoResolver:
    return photo_resolver


def get_geocode_resolver() -> GeocodeResolver:
    return geocode_resolver
