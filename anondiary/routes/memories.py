"""Memory listing routes."""

from fastapi import APIRouter

from ..database import Database
from ..dependencies import DeviceId
from ..models import MemoryListResponse, MemoryResponse

router = APIRouter(prefix="/api/memories", tags=["memories"])


@router.get("", response_model=MemoryListResponse)
async def list_memories(device_id: DeviceId, db: Database):
    """Every memory of the requesting device with its source entry content."""
    memories = db.list_memories_with_source(device_id)
    return MemoryListResponse(memories=[MemoryResponse.from_memory(m) for m in memories])
