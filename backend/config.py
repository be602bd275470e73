from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Mapbox Datasets (marker feature store)
    MAPBOX_USERNAME: str = ""
    MAPBOX_SECRET_ACCESS_TOKEN: str = ""
    MAPBOX_DATASET_ID: str = ""
    MAPBOX_API_BASE_URL: str = "https://api.mapbox.com"

    # Google (directions / geocoding). Base URL can point at a reverse proxy
    GOOGLE_API_KEY: str = ""
    GOOGLE_API_BASE_URL: str = "https://maps.googleapis.com"
    DIRECTIONS_MODE: str = "walking"

    REQUEST_TIMEOUT: int = 10

    # Markers closer than this are treated as the same place
    DEDUP_RADIUS_METERS: float = 10.0

    ROUTE_CACHE_PATH: str = ".cache/route_cache.json"

    LOG_LEVEL: str = "INFO"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8080

    class Config:
        env_file = ".env"
        extra = "ignore"

settings = Settings()
