import os
from pydantic_settings import BaseSettings


def _parse_cors_origins() -> list[str] | None:
    """Parse CORS_ORIGINS env var as comma-separated string or JSON list."""
    raw = os.environ.get("CORS_ORIGINS")
    if not raw:
        return None
    if raw.startswith("["):
        import json
        return json.loads(raw)
    return [o.strip() for o in raw.split(",") if o.strip()]


class Settings(BaseSettings):
    admin_token: str = ""  # empty disables the admin endpoints
    cors_origins: list[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
    ]
    debug: bool = False

    # Data and scoring rules
    data_file: str = ""  # JSON export with persons and candidacies
    data_source: str = "platform"  # default adapter for person records: "platform" | "jne"
    rules_file: str = ""  # YAML with "scoring" and "weights" overrides
    reference_year: int = 2026  # year open-ended tenures are measured to

    recompute_workers: int = 4
    ranking_rate_limit: str = "120/minute"
    composite_rate_limit: str = "120/minute"
    composite_cache_size: int = 10000  # cached (subject, weight vector) composites

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


_cors_override = _parse_cors_origins()
settings = Settings(**{"cors_origins": _cors_override} if _cors_override else {})
