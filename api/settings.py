"""
Runtime configuration.

Values come from environment variables, optionally loaded from a .env file at
the project root. .env.example lists every variable.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

env_path = Path(__file__).parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

_STORES = ("memory", "supabase")


@dataclass(frozen=True, slots=True)
class Settings:
    car_store: str = "memory"
    cars_table: str = "cars"
    pricing_base_url: str = "http://localhost:8082"
    maps_base_url: str = "http://localhost:9191"
    downstream_timeout_seconds: float = 5.0
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if self.car_store not in _STORES:
            raise ValueError(f"CAR_STORE must be one of {_STORES}, got {self.car_store!r}")
        if self.downstream_timeout_seconds <= 0:
            raise ValueError("DOWNSTREAM_TIMEOUT_SECONDS must be > 0")

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            car_store=os.getenv("CAR_STORE", "memory").strip().lower(),
            cars_table=os.getenv("SUPABASE_CARS_TABLE", "cars"),
            pricing_base_url=os.getenv("PRICING_BASE_URL", "http://localhost:8082"),
            maps_base_url=os.getenv("MAPS_BASE_URL", "http://localhost:9191"),
            downstream_timeout_seconds=float(os.getenv("DOWNSTREAM_TIMEOUT_SECONDS", "5")),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )
