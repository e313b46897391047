#!/usr/bin/env python3
"""Helper script to check and create the .env file for the mapping services."""

from pathlib import Path
import os
import sys

TEMPLATE = """# Mapbox (Required for geocoding and directions)
# Get a token from: https://account.mapbox.com/access-tokens/
WFR_MAPBOX_ACCESS_TOKEN=your-mapbox-token-here

# Directions backend: mapbox or osrm
WFR_DIRECTIONS_PROVIDER=mapbox
# For OSRM use e.g. http://localhost:5000/route/v1
# WFR_DIRECTIONS_BASE_URL=https://api.mapbox.com/directions/v5

# Records API exposing lodgings, work sites, work orders and vehicles
WFR_RECORDS_API_BASE_URL=http://localhost:3001

# Supabase (Optional - records are read from the database first when set)
# WFR_SUPABASE_URL=https://your-project-id.supabase.co
# WFR_SUPABASE_KEY=your-service-role-key-here

# API Configuration
WFR_API_PREFIX=/api
# WFR_FRONTEND_ALLOWED_ORIGINS - JSON array or comma-separated list
"""


def _mask(value: str) -> str:
    return value[:12] + "..." + value[-6:] if len(value) > 20 else value


def main() -> int:
    project_root = Path(__file__).parent
    env_file = project_root / ".env"

    print("=" * 60)
    print("Workforce Routes Environment Checker")
    print("=" * 60)
    print()

    if not env_file.exists():
        print(f"❌ .env file NOT found at: {env_file}")
        env_file.write_text(TEMPLATE, encoding="utf-8")
        print(f"✅ Created template .env file at: {env_file}")
        print("⚠️  Please edit .env and add your Mapbox access token!")
        return 1

    print(f"✅ Found .env file at: {env_file}")
    print()

    sys.path.insert(0, str(project_root / "src"))
    try:
        from workforce_routes.config import settings
    except Exception as e:
        print(f"❌ Error loading config: {e}")
        print("Make sure you're running this from the project root directory")
        return 1

    ok = True
    if settings.mapbox_access_token:
        print(f"✅ Mapbox token: {_mask(settings.mapbox_access_token)}")
    elif settings.directions_provider == "mapbox":
        print("❌ WFR_MAPBOX_ACCESS_TOKEN is not set (required for geocoding)")
        ok = False

    print(f"✅ Directions: {settings.directions_provider} at {settings.directions_base_url} ({settings.routing_profile})")
    print(f"✅ Records API: {settings.records_api_base_url}")

    if settings.supabase_url and settings.supabase_key:
        print(f"✅ Supabase: {settings.supabase_url[:30]}... key {_mask(settings.supabase_key)}")
    else:
        print("ℹ️  Supabase not configured; records come from the records API")

    for name in ("WFR_MAPBOX_ACCESS_TOKEN", "WFR_SUPABASE_URL"):
        if os.getenv(name):
            print(f"ℹ️  {name} is also set in the process environment and overrides .env")

    print()
    print("=" * 60)
    print("✅ SUCCESS: configuration looks complete" if ok else "❌ ERROR: configuration is incomplete")
    print("=" * 60)
    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
