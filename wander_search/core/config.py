"""Configuration from environment variables (.env)."""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

SEARCH_BACKENDS = ("seed", "http")


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Config:
    project_root: Path
    logs_dir: Path
    log_level: str
    log_to_file: bool
    search_timeout_ms: int
    search_page_size: int
    search_backend: str  # "seed" (in-memory records) or "http" (JSON stores)
    places_store_url: str
    users_store_url: str
    hazards_store_url: str
    store_lookup_limit: int
    rank_dist_sigma_km: float
    weight_relevance: float
    weight_proximity: float
    http_host: str
    http_port: int

    @classmethod
    def load(cls) -> "Config":
        project_root = Path(__file__).parent.parent.parent
        return cls(
            project_root=project_root,
            logs_dir=Path(os.getenv("LOG_DIR", str(project_root / "logs"))),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            log_to_file=_env_bool("LOG_TO_FILE", True),
            search_timeout_ms=int(os.getenv("SEARCH_TIMEOUT_MS", "2000")),
            search_page_size=int(os.getenv("SEARCH_PAGE_SIZE", "50")),
            search_backend=os.getenv("SEARCH_BACKEND", "seed").strip().lower(),
            places_store_url=os.getenv("PLACES_STORE_URL", ""),
            users_store_url=os.getenv("USERS_STORE_URL", ""),
            hazards_store_url=os.getenv("HAZARDS_STORE_URL", ""),
            store_lookup_limit=int(os.getenv("STORE_LOOKUP_LIMIT", "200")),
            rank_dist_sigma_km=float(os.getenv("RANK_DIST_SIGMA_KM", "2.0")),
            weight_relevance=float(os.getenv("WEIGHT_RELEVANCE", "0.6")),
            weight_proximity=float(os.getenv("WEIGHT_PROXIMITY", "0.4")),
            http_host=os.getenv("HTTP_HOST", "127.0.0.1"),
            http_port=int(os.getenv("HTTP_PORT", "8080")),
        )

    @property
    def search_timeout_seconds(self) -> float:
        return self.search_timeout_ms / 1000.0

    def validate(self) -> list[str]:
        errors = []
        if self.search_timeout_ms <= 0:
            errors.append(f"SEARCH_TIMEOUT_MS must be positive, got {self.search_timeout_ms}")
        if self.search_page_size <= 0:
            errors.append(f"SEARCH_PAGE_SIZE must be positive, got {self.search_page_size}")
        if self.store_lookup_limit <= 0:
            errors.append(f"STORE_LOOKUP_LIMIT must be positive, got {self.store_lookup_limit}")
        if self.search_backend not in SEARCH_BACKENDS:
            errors.append(
                f"SEARCH_BACKEND must be one of {', '.join(SEARCH_BACKENDS)}, got '{self.search_backend}'"
            )
        elif self.search_backend == "http":
            for name, url in (
                ("PLACES_STORE_URL", self.places_store_url),
                ("USERS_STORE_URL", self.users_store_url),
                ("HAZARDS_STORE_URL", self.hazards_store_url),
            ):
                if not url.strip():
                    errors.append(f"{name} is required when SEARCH_BACKEND=http")
        return errors


config = Config.load()
