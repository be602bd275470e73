from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, str) and value:
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            pass
    return _utcnow()


def _isoformat(value: datetime) -> str:
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


class MarkerIconType(str, Enum):
    ACTIVITY = "activity"
    LOCATION = "location"
    HOTEL = "hotel"
    SHOPPING = "shopping"
    FOOD = "food"
    LANDMARK = "landmark"
    PARK = "park"
    NATURAL = "natural"
    CULTURE = "culture"


class Coordinates(BaseModel):
    """
    Marker position (WGS84 degrees)
    """
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)

    def to_lat_lng(self) -> "LatLng":
        return LatLng(lat=self.latitude, lng=self.longitude)


class LatLng(BaseModel):
    """
    A single path point, in the shape directions providers and map renderers use
    """
    lat: float
    lng: float


class MarkerContent(BaseModel):
    id: str
    title: str = "Untitled marker"
    header_image: Optional[str] = None
    icon_type: MarkerIconType = MarkerIconType.LOCATION
    markdown_content: str = ""
    next: List[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)


class Marker(BaseModel):
    """
    A marker as the engine sees it.
    Built from dataset features (coordinates [lng, lat]) via from_feature.
    """
    id: str
    coordinates: Coordinates
    content: MarkerContent

    @classmethod
    def from_feature(cls, feature: "DatasetFeature") -> "Marker":
        lng, lat = feature.geometry.coordinates[0], feature.geometry.coordinates[1]
        properties = feature.properties or {}
        metadata = properties.get("metadata") or {}
        icon_type = properties.get("iconType") or MarkerIconType.LOCATION.value
        if icon_type not in MarkerIconType._value2member_map_:
            icon_type = MarkerIconType.LOCATION.value

        return cls(
            id=feature.id,
            coordinates=Coordinates(latitude=lat, longitude=lng),
            content=MarkerContent(
                id=metadata.get("id") or feature.id,
                title=metadata.get("title") or "Untitled marker",
                header_image=properties.get("headerImage"),
                icon_type=icon_type,
                markdown_content=properties.get("markdownContent") or "",
                next=list(properties.get("next") or []),
                created_at=_parse_timestamp(metadata.get("createdAt")),
                updated_at=_parse_timestamp(metadata.get("updatedAt")),
            ),
        )

    def to_feature_properties(self, coordinate_hash: Optional[str] = None) -> Dict[str, Any]:
        metadata = {
            "id": self.id,
            "title": self.content.title,
            "description": "User created marker",
            "createdAt": _isoformat(self.content.created_at),
            "updatedAt": _isoformat(self.content.updated_at),
            "isPublished": True,
        }
        if coordinate_hash:
            metadata["coordinateHash"] = coordinate_hash

        return {
            "markdownContent": self.content.markdown_content,
            "headerImage": self.content.header_image,
            "iconType": self.content.icon_type.value,
            "next": list(self.content.next),
            "metadata": metadata,
        }


class Edge(BaseModel):
    """
    Directed predecessor -> successor link derived from Marker.content.next
    """
    from_id: str
    to_id: str

    @property
    def id(self) -> str:
        return f"{self.from_id}-{self.to_id}"


class PointGeometry(BaseModel):
    type: str = "Point"
    coordinates: List[float] = Field(..., min_length=2)


class DatasetFeature(BaseModel):
    """
    Feature as stored in the dataset (GeoJSON-like, [lng, lat] axis order)
    """
    id: str
    type: str = "Feature"
    geometry: PointGeometry
    properties: Dict[str, Any] = Field(default_factory=dict)


class FeatureCollection(BaseModel):
    type: str = "FeatureCollection"
    features: List[DatasetFeature] = Field(default_factory=list)


class DirectionsResult(BaseModel):
    path: List[LatLng]
    distance: float = 0
    duration: float = 0
