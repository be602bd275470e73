import asyncio
import logging

from fastapi import APIRouter, Depends, HTTPException

from dependencies import get_dataset_id, get_deduplicator, get_feature_store
from engine.deduplicator import ProximityDeduplicator
from models.map_models import Marker
from models.schemas import MarkerCreateRequest, MarkerUpdateRequest, PlaceMarkerCreateRequest
from tools.dataset_client import DatasetClientError
from tools.geocoding_tool import GeocodingError, geocode_place
from utils.marker_store import find_marker, load_markers, save_marker

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/markers", response_model=list[Marker])
async def list_markers(store=Depends(get_feature_store), dataset_id: str = Depends(get_dataset_id)):
    try:
        return await load_markers(store, dataset_id)
    except DatasetClientError as e:
        logger.error(f"❌ Loading markers failed: {e}")
        raise HTTPException(status_code=502, detail="Failed to load markers")


@router.post("/markers", response_model=Marker)
async def create_marker(
    request: MarkerCreateRequest,
    deduplicator: ProximityDeduplicator = Depends(get_deduplicator),
):
    """Create a marker, or return the existing one for the same place."""
    try:
        return await deduplicator.resolve_or_create(request)
    except DatasetClientError as e:
        logger.error(f"❌ Creating marker failed: {e}")
        raise HTTPException(status_code=502, detail="Failed to create marker")


@router.post("/markers/v2", response_model=Marker)
async def create_marker_by_name(
    request: PlaceMarkerCreateRequest,
    deduplicator: ProximityDeduplicator = Depends(get_deduplicator),
):
    """Create a marker from a place name (geocoded first)."""
    try:
        coordinates = await asyncio.to_thread(geocode_place, request.name)
    except GeocodingError as e:
        logger.warning(f"⚠️ Geocoding failed for '{request.name}': {e}")
        raise HTTPException(status_code=404, detail=f"Place not found: {request.name}")

    create_request = MarkerCreateRequest(
        coordinates=coordinates,
        title=request.name,
        icon_type=request.icon_type,
        content=request.content,
    )
    try:
        return await deduplicator.resolve_or_create(create_request)
    except DatasetClientError as e:
        logger.error(f"❌ Creating marker failed: {e}")
        raise HTTPException(status_code=502, detail="Failed to create marker")


async def _get_or_404(store, dataset_id: str, marker_id: str) -> Marker:
    try:
        markers = await load_markers(store, dataset_id)
    except DatasetClientError as e:
        logger.error(f"❌ Loading markers failed: {e}")
        raise HTTPException(status_code=502, detail="Failed to load markers")

    marker = find_marker(markers, marker_id)
    if marker is None:
        raise HTTPException(status_code=404, detail="Marker not found")
    return marker


@router.get("/markers/{marker_id}", response_model=Marker)
async def get_marker(marker_id: str, store=Depends(get_feature_store), dataset_id: str = Depends(get_dataset_id)):
    return await _get_or_404(store, dataset_id, marker_id)


@router.put("/markers/{marker_id}", response_model=Marker)
async def update_marker(
    marker_id: str,
    request: MarkerUpdateRequest,
    store=Depends(get_feature_store),
    dataset_id: str = Depends(get_dataset_id),
):
    marker = await _get_or_404(store, dataset_id, marker_id)

    # only the fields sent by the client change
    if request.title is not None:
        marker.content.title = request.title
    if request.header_image is not None:
        marker.content.header_image = request.header_image
    if request.markdown_content is not None:
        marker.content.markdown_content = request.markdown_content
    if request.icon_type is not None:
        marker.content.icon_type = request.icon_type
    if request.next is not None:
        marker.content.next = list(dict.fromkeys(request.next))

    try:
        return await save_marker(store, dataset_id, marker)
    except DatasetClientError as e:
        logger.error(f"❌ Updating marker {marker_id} failed: {e}")
        raise HTTPException(status_code=502, detail="Failed to update marker")


@router.delete("/markers/{marker_id}")
async def delete_marker(marker_id: str, store=Depends(get_feature_store), dataset_id: str = Depends(get_dataset_id)):
    await _get_or_404(store, dataset_id, marker_id)
    try:
        await asyncio.to_thread(store.delete_feature, dataset_id, marker_id)
    except DatasetClientError as e:
        logger.error(f"❌ Deleting marker {marker_id} failed: {e}")
        raise HTTPException(status_code=502, detail="Failed to delete marker")

    # next references to this marker become broken edges and are ignored on read
    logger.info(f"Marker deleted: {marker_id}")
    return {"success": True, "id": marker_id}
