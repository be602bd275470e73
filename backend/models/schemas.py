from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, Dict, List
from models.map_models import Coordinates, LatLng, MarkerIconType


class MarkerCreateRequest(BaseModel):
    coordinates: Coordinates = Field(..., description="Marker position")
    title: str = Field(..., min_length=1, description="Place name")
    icon_type: MarkerIconType = Field(..., alias="iconType", description="Icon category")
    content: str = Field("", description="Markdown content")

    model_config = ConfigDict(populate_by_name=True)


class PlaceMarkerCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, description="Place name to geocode")
    icon_type: MarkerIconType = Field(..., alias="iconType", description="Icon category")
    content: str = Field("", description="Markdown content")

    model_config = ConfigDict(populate_by_name=True)


class MarkerUpdateRequest(BaseModel):
    title: Optional[str] = None
    header_image: Optional[str] = Field(None, alias="headerImage")
    markdown_content: Optional[str] = Field(None, alias="markdownContent")
    icon_type: Optional[MarkerIconType] = Field(None, alias="iconType")
    next: Optional[List[str]] = None

    model_config = ConfigDict(populate_by_name=True)


class ChainCreateRequest(BaseModel):
    marker_ids: List[str] = Field(..., alias="markerIds")
    name: Optional[str] = None
    description: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)


class ChainResponse(BaseModel):
    id: str
    name: str
    description: str = ""
    marker_ids: List[str] = Field(..., serialization_alias="markerIds")
    start_marker: str = Field(..., serialization_alias="startMarker")


class HighlightRequest(BaseModel):
    highlighted_ids: List[str] = Field(default_factory=list, alias="highlightedIds")
    with_paths: bool = Field(False, alias="withPaths")

    model_config = ConfigDict(populate_by_name=True)


class HighlightResponse(BaseModel):
    edge_ids: List[str] = Field(..., serialization_alias="edgeIds")


class DirectionsRequest(BaseModel):
    origin: Optional[LatLng] = None
    destination: Optional[LatLng] = None
    mode: str = "walking"


class PathsResponse(BaseModel):
    paths: Dict[str, List[LatLng]]


class RouteStatusResponse(BaseModel):
    busy: bool = Field(..., description="True while any directions fetch is outstanding")
    pending: int
    cached: int
