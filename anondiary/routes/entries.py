"""Diary entry routes."""

from fastapi import APIRouter

from ..database import Database
from ..dependencies import DeviceHeader, DeviceId, Pipeline, resolve_device_id
from ..errors import NotFoundError
from ..logging_config import get_logger
from ..models import (
    ClearResponse,
    EntryDeleteResponse,
    EntryDetailResponse,
    EntryListResponse,
    EntryResponse,
    EntrySubmit,
)
from ..pipeline import ClearResult, resolve_command

logger = get_logger("routes.entries")
router = APIRouter(prefix="/api/entries", tags=["entries"])


@router.get("", response_model=EntryListResponse)
async def list_entries(device_id: DeviceId, db: Database):
    """All entries for the requesting device, newest first."""
    entries = db.list_entries(device_id)
    return EntryListResponse(entries=[EntryResponse.from_entry(e) for e in entries])


@router.get("/{entry_id}", response_model=EntryDetailResponse)
async def get_entry(entry_id: int, db: Database):
    """A single entry by id, regardless of device."""
    entry = db.get_entry(entry_id)
    if entry is None:
        raise NotFoundError(f"Entry {entry_id} not found")
    return EntryDetailResponse(entry=EntryResponse.from_entry(entry))


@router.post("", response_model=EntryResponse | ClearResponse)
async def submit_entry(body: EntrySubmit, pipeline: Pipeline, x_device_id: DeviceHeader = None):
    """
    Post to the diary.

    - ``options: "clear"`` wipes this device's entries and memories
    - ``options`` or ``sub`` of ``"memory"`` returns an unsaved memory dump
    - anything else is a normal entry, rewritten as greentext
    """
    device_id = resolve_device_id(x_device_id, body.device_id)
    logger.debug(f"Received post from {device_id}: fields={body.model_dump(exclude_none=True)}")

    command = resolve_command(
        device_id,
        content=body.content,
        options=body.options,
        name=body.name,
        sub=body.sub,
    )
    result = await pipeline.handle(command)
    if isinstance(result, ClearResult):
        return ClearResponse.from_result(result)
    return EntryResponse.from_entry(result)


@router.delete("/{entry_id}", response_model=EntryDeleteResponse)
async def delete_entry(entry_id: int, db: Database):
    """Delete an entry by id. Returns the number of rows removed."""
    changes = db.delete_entry(entry_id)
    logger.info(f"DELETE | entry={entry_id} | changes={changes}")
    return EntryDeleteResponse(changes=changes)
