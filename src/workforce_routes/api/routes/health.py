"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


def _get_geocoding_health_check():
    """Lazy import to avoid startup failures."""
    from ...services.geocoding.mapbox_client import check_health as geocoding_health_check
    return geocoding_health_check


@router.get("/health/geocoding", status_code=status.HTTP_200_OK)
def health_geocoding() -> dict:
    """Check geocoding service health."""
    try:
        geocoding_health_check = _get_geocoding_health_check()
        return {"service": "geocoding", "healthy": geocoding_health_check()}
    except Exception as e:
        return {"service": "geocoding", "healthy": False, "error": str(e)}
