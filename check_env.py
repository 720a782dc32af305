#!/usr/bin/env python3
"""Helper script to check and create the .env file for Routebook."""

from pathlib import Path
import sys

TEMPLATE = """# Storage backend: file, memory or supabase
ROUTEBOOK_STORAGE_BACKEND=file
ROUTEBOOK_DATA_ROOT=./data
ROUTEBOOK_STORAGE_KEY=routes_app_data

# Supabase (only used when ROUTEBOOK_STORAGE_BACKEND=supabase)
# ROUTEBOOK_SUPABASE_URL=https://your-project-id.supabase.co
# ROUTEBOOK_SUPABASE_KEY=your-service-role-key-here
# ROUTEBOOK_SUPABASE_TABLE=app_state

# Geocoding
# ROUTEBOOK_GEOCODER_BASE_URL=https://nominatim.openstreetmap.org
# ROUTEBOOK_LOCATION_LOOKUP_ENABLED=true

# API
ROUTEBOOK_API_PREFIX=/api
ROUTEBOOK_LOG_LEVEL=INFO
# ROUTEBOOK_FRONTEND_ALLOWED_ORIGINS=http://localhost:8081,http://localhost:19006
"""


def _mask(value: str | None) -> str:
    if not value:
        return "<not set>"
    if len(value) > 24:
        return value[:16] + "..." + value[-6:]
    return value


def main() -> int:
    project_root = Path(__file__).parent
    env_file = project_root / ".env"

    print("=" * 60)
    print("Routebook Environment Checker")
    print("=" * 60)
    print()

    if not env_file.exists():
        print(f"❌ .env file NOT found at: {env_file}")
        env_file.write_text(TEMPLATE, encoding="utf-8")
        print(f"✅ Created template .env file at: {env_file}")
        print()

    sys.path.insert(0, str(project_root / "src"))
    try:
        from routebook.config import settings
    except Exception as e:
        print(f"❌ Error loading config: {e}")
        print("Make sure you're running this from the project root directory")
        return 1

    print(f"Storage backend : {settings.storage_backend}")
    print(f"Storage key     : {settings.storage_key}")
    print(f"Data root       : {settings.data_root}")
    print(f"Geocoder        : {settings.geocoder_base_url}")
    print(f"Supabase URL    : {_mask(settings.supabase_url)}")
    print(f"Supabase key    : {_mask(settings.supabase_key)}")
    print()

    if settings.storage_backend == "supabase" and not (settings.supabase_url and settings.supabase_key):
        print("=" * 60)
        print("❌ ERROR: Supabase backend selected but credentials are missing")
        print("   Data will be written to the local data root instead.")
        print("=" * 60)
        return 1

    print("=" * 60)
    print("✅ SUCCESS: configuration looks usable")
    print("=" * 60)
    return 0


if __name__ == "__main__":
    sys.exit(main())
