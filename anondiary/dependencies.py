"""FastAPI dependencies: device identity, generation client, pipeline."""

import uuid
from typing import Annotated

from fastapi import Depends, Header, Query, Request

from .config import Settings
from .database import Database
from .logging_config import get_logger
from .pipeline import EntryPipeline, GenerationClient

logger = get_logger("dependencies")


def resolve_device_id(*candidates: str | None) -> str:
    """First non-blank candidate, or a random id used for this request only."""
    for candidate in candidates:
        if candidate and candidate.strip():
            return candidate.strip()
    device_id = str(uuid.uuid4())
    logger.debug(f"No device id supplied, using ephemeral {device_id}")
    return device_id


async def get_device_id(
    x_device_id: Annotated[str | None, Header()] = None,
    device_id: Annotated[str | None, Query()] = None,
) -> str:
    """Device id from the ``X-Device-ID`` header, then the ``device_id`` query."""
    return resolve_device_id(x_device_id, device_id)


DeviceId = Annotated[str, Depends(get_device_id)]
# For POST, where the body may carry device_id and takes second place
DeviceHeader = Annotated[str | None, Header(alias="X-Device-ID")]


def get_app_settings(request: Request) -> Settings:
    """Settings the app was created with."""
    return request.app.state.settings


AppSettings = Annotated[Settings, Depends(get_app_settings)]


def get_generator(request: Request) -> GenerationClient:
    """Generation client opened in the app lifespan."""
    return request.app.state.generator


Generator = Annotated[GenerationClient, Depends(get_generator)]


def get_pipeline(db: Database, generator: Generator, settings: AppSettings) -> EntryPipeline:
    return EntryPipeline(db, generator, memory_context_limit=settings.memory_context_limit)


Pipeline = Annotated[EntryPipeline, Depends(get_pipeline)]
