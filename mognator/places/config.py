from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


@dataclass(frozen=True)
class PlacesConfig:
    base_url: str = os.getenv("MOGNATOR_PLACES_URL", "http://localhost:8787")
    timeout: float = 10.0
    default_radius: int = 1500
    max_results: int = 10
    cache_ttl: float = 300.0  # 5 minutes
    # Fallback search centre when the caller has no location (Tokyo Station).
    default_latitude: float = 35.6812
    default_longitude: float = 139.7671
    default_location_name: str = "Tokyo Station"


DEFAULT_PLACES_CONFIG = PlacesConfig()
