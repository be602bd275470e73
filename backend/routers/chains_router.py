import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException

from dependencies import get_dataset_id, get_feature_store
from engine.chain_graph import ChainValidationError, MarkerGraph
from models.schemas import ChainCreateRequest, ChainResponse
from tools.dataset_client import DatasetClientError
from utils.marker_store import load_markers, save_marker

logger = logging.getLogger(__name__)

router = APIRouter()


async def load_graph(store, dataset_id: str) -> MarkerGraph:
    try:
        return MarkerGraph(await load_markers(store, dataset_id))
    except DatasetClientError as e:
        logger.error(f"❌ Loading markers failed: {e}")
        raise HTTPException(status_code=502, detail="Failed to load markers")


def _chain_response(graph: MarkerGraph, marker_ids: list[str]) -> ChainResponse:
    start = graph.get(marker_ids[0])
    title = start.content.title if start else "Untitled itinerary"
    return ChainResponse(
        id=marker_ids[0],
        name=title,
        description=f"Itinerary starting at {title}",
        marker_ids=marker_ids,
        start_marker=marker_ids[0],
    )


@router.get("/chains", response_model=list[ChainResponse])
async def list_chains(store=Depends(get_feature_store), dataset_id: str = Depends(get_dataset_id)):
    graph = await load_graph(store, dataset_id)
    return [_chain_response(graph, chain) for chain in graph.derive_chains()]


@router.get("/chains/{marker_id}", response_model=list[list[str]])
async def chains_from_marker(marker_id: str, store=Depends(get_feature_store), dataset_id: str = Depends(get_dataset_id)):
    """Itineraries reachable from one marker (sidebar view)."""
    graph = await load_graph(store, dataset_id)
    if graph.get(marker_id) is None:
        raise HTTPException(status_code=404, detail="Marker not found")
    return graph.chains_from(marker_id)


@router.post("/chains", response_model=ChainResponse)
async def create_chain(
    request: ChainCreateRequest,
    store=Depends(get_feature_store),
    dataset_id: str = Depends(get_dataset_id),
):
    graph = await load_graph(store, dataset_id)
    try:
        updates = graph.link_sequence(request.marker_ids)
    except ChainValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    try:
        for marker_id, next_ids in updates.items():
            marker = graph.get(marker_id)
            marker.content.next = next_ids
            await save_marker(store, dataset_id, marker)
    except DatasetClientError as e:
        logger.error(f"❌ Saving chain links failed: {e}")
        raise HTTPException(status_code=502, detail="Failed to save chain")

    logger.info(f"✅ Chain linked: {' -> '.join(request.marker_ids)}")
    return ChainResponse(
        id=str(uuid.uuid4()),
        name=request.name or f"Itinerary ({len(request.marker_ids)} stops)",
        description=request.description or "",
        marker_ids=request.marker_ids,
        start_marker=request.marker_ids[0],
    )


@router.delete("/chains/{from_id}/{to_id}")
async def unlink_markers(
    from_id: str,
    to_id: str,
    store=Depends(get_feature_store),
    dataset_id: str = Depends(get_dataset_id),
):
    graph = await load_graph(store, dataset_id)
    try:
        next_ids = graph.unlink(from_id, to_id)
    except ChainValidationError as e:
        raise HTTPException(status_code=404, detail=str(e))

    marker = graph.get(from_id)
    if next_ids != marker.content.next:
        marker.content.next = next_ids
        try:
            await save_marker(store, dataset_id, marker)
        except DatasetClientError as e:
            logger.error(f"❌ Unlinking {from_id} -> {to_id} failed: {e}")
            raise HTTPException(status_code=502, detail="Failed to update chain")

    return {"success": True, "from": from_id, "next": next_ids}
