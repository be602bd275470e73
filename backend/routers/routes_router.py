import asyncio
import json
import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import StreamingResponse

from dependencies import get_dataset_id, get_directions_client, get_feature_store, get_route_resolver
from engine.highlight import build_connection_lines, compute_highlighted_edges
from engine.route_resolver import RouteResolver, links_for
from models.map_models import DirectionsResult
from models.schemas import (
    DirectionsRequest,
    HighlightRequest,
    HighlightResponse,
    PathsResponse,
    RouteStatusResponse,
)
from routers.chains_router import load_graph
from tools.directions_client import DirectionsClientError
from utils import fetch_timings

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/highlight", response_model=HighlightResponse)
async def highlight_edges(
    request: HighlightRequest,
    store=Depends(get_feature_store),
    dataset_id: str = Depends(get_dataset_id),
):
    graph = await load_graph(store, dataset_id)
    return HighlightResponse(edge_ids=compute_highlighted_edges(graph, request.highlighted_ids))


@router.post("/connection-lines")
async def connection_lines(
    request: HighlightRequest,
    store=Depends(get_feature_store),
    dataset_id: str = Depends(get_dataset_id),
    resolver: RouteResolver = Depends(get_route_resolver),
):
    """GeoJSON lines for every edge, flagged with highlight state."""
    graph = await load_graph(store, dataset_id)
    paths = None
    if request.with_paths:
        paths = await resolver.resolve_all_paths(links_for(graph.edges, graph.by_id))
    return build_connection_lines(graph, request.highlighted_ids, paths)


@router.post("/directions", response_model=DirectionsResult)
async def get_directions(request: DirectionsRequest, client=Depends(get_directions_client)):
    """Raw directions proxy (no cache, no fallback)."""
    if request.origin is None or request.destination is None:
        raise HTTPException(status_code=400, detail="origin and destination are required")

    try:
        return await asyncio.to_thread(client.get_route, request.origin, request.destination, request.mode)
    except DirectionsClientError as e:
        logger.error(f"❌ Directions failed: {e}")
        raise HTTPException(status_code=502, detail=f"Failed to get directions: {e}")


@router.post("/routes/paths", response_model=PathsResponse)
async def resolve_paths(
    store=Depends(get_feature_store),
    dataset_id: str = Depends(get_dataset_id),
    resolver: RouteResolver = Depends(get_route_resolver),
):
    graph = await load_graph(store, dataset_id)
    paths = await resolver.resolve_all_paths(links_for(graph.edges, graph.by_id))
    return PathsResponse(paths=paths)


@router.get("/routes/status", response_model=RouteStatusResponse)
async def route_status(resolver: RouteResolver = Depends(get_route_resolver)):
    return RouteStatusResponse(**resolver.status())


@router.get("/routes/status/stream")
async def route_status_stream(resolver: RouteResolver = Depends(get_route_resolver)):
    """
    SSE stream of resolver status.
    Pushes an event whenever busy/pending/cached changes.
    """

    async def event_generator():
        last_status = None
        try:
            while True:
                status = resolver.status()
                if status != last_status:
                    yield f"data: {json.dumps(status)}\n\n"
                    last_status = status
                await asyncio.sleep(1)
        except asyncio.CancelledError:
            # client disconnected
            return

    return StreamingResponse(event_generator(), media_type="text/event-stream")


@router.delete("/routes/cache")
async def clear_route_cache(resolver: RouteResolver = Depends(get_route_resolver)):
    resolver.clear_cache()
    return {"success": True}


@router.get("/routes/timings")
async def route_timings():
    return fetch_timings.get_and_reset()
