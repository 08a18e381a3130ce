"""Preset CRUD endpoints."""

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from reelsmith.api.dependencies import get_preset_store
from reelsmith.models.errors import NotFoundError
from reelsmith.storage.preset_store import PresetStore

router = APIRouter(prefix="/api", tags=["presets"])


class PresetRequest(BaseModel):
    name: str = Field(..., min_length=1)
    config: dict


@router.get("/presets")
async def list_presets(store: PresetStore = Depends(get_preset_store)):
    """All presets keyed by name."""
    return store.list()


@router.get("/presets/{name}")
async def get_preset(name: str, store: PresetStore = Depends(get_preset_store)):
    record = store.get_record(name)
    if record is None:
        raise NotFoundError(f"Preset '{name}' not found", details={"name": name})
    return record


@router.post("/presets")
async def save_preset(request: PresetRequest, store: PresetStore = Depends(get_preset_store)):
    """Create or replace a preset; the config is validated before it is stored."""
    return store.put(request.name, request.config)


@router.delete("/presets/{name}")
async def delete_preset(name: str, store: PresetStore = Depends(get_preset_store)):
    if not store.delete(name):
        raise NotFoundError(f"Preset '{name}' not found", details={"name": name})
    return {"message": "Preset deleted successfully"}
