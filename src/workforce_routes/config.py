"""Application configuration and settings management."""

from typing import Any, Literal, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="WFR_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Workforce Routes API"
    api_prefix: str = "/api"

    mapbox_access_token: Optional[str] = Field(
        default=None,
        description="Mapbox access token used by the geocoding and directions clients.",
    )
    geocoding_base_url: str = Field(
        default="https://api.mapbox.com/geocoding/v5/mapbox.places",
        description="Base URL of the forward geocoding endpoint.",
    )
    geocoding_country: Optional[str] = Field(
        default=None,
        description="Optional ISO country filter passed to the geocoder (e.g., 'br').",
    )
    directions_provider: Literal["mapbox", "osrm"] = Field(
        default="mapbox",
        description="Routing backend. OSRM and Mapbox share the same route response format.",
    )
    directions_base_url: str = Field(
        default="https://api.mapbox.com/directions/v5",
        description="Base URL for the directions service (e.g., http://localhost:5000/route/v1 for OSRM).",
    )
    routing_profile: Literal["driving", "driving-traffic", "driving-hgv"] = Field(
        default="driving",
        description="Travel profile requested from the directions service.",
    )
    http_timeout_seconds: float = Field(default=15.0, gt=0.0)
    http_max_retries: int = Field(default=2, ge=0)
    http_backoff_seconds: float = Field(default=0.5, ge=0.0)

    records_api_base_url: str = Field(
        default="http://localhost:3001",
        description="Records API exposing lodgings, work sites, work orders and vehicles.",
    )

    map_default_center: tuple[float, float] = Field(
        default=(-49.4636, -18.9653),
        description="Initial map centre as (longitude, latitude).",
    )
    map_default_zoom: float = Field(default=12, ge=0)
    map_focus_zoom: float = Field(default=14, ge=0)
    route_fit_padding: int = Field(default=50, ge=0)
    route_layer_id: str = "main-route"
    route_line_color: str = "#007aff"
    route_line_width: int = Field(default=6, ge=1)
    lodging_marker_color: str = "#3b82f6"
    worksite_marker_color: str = "#ef4444"
    work_order_marker_color: str = "#6a0dad"

    max_sessions: int = Field(default=100, ge=1)

    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    # Supabase configuration
    supabase_url: Optional[str] = Field(
        default=None,
        description="Supabase project URL (e.g., https://xxx.supabase.co).",
    )
    supabase_key: Optional[str] = Field(
        default=None,
        description="Supabase service role key for backend operations.",
    )

    @field_validator("frontend_allowed_origins", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, str):
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return tuple(str(item) for item in parsed)
            except (json.JSONDecodeError, TypeError):
                pass
            if "," in value:
                return tuple(item.strip() for item in value.split(",") if item.strip())
            if value.strip():
                return (value.strip(),)
        return tuple()

    @field_validator("map_default_center", mode="before")
    @classmethod
    def _parse_center(cls, value: Any) -> tuple[float, float]:
        """Accept "lon,lat" strings or JSON arrays for the map centre."""
        if isinstance(value, str):
            try:
                parsed = json.loads(value)
            except (json.JSONDecodeError, TypeError):
                parsed = [item.strip() for item in value.split(",") if item.strip()]
            value = parsed
        if isinstance(value, (list, tuple)) and len(value) == 2:
            return (float(value[0]), float(value[1]))
        raise ValueError("map_default_center must be a (longitude, latitude) pair")


settings = Settings()
