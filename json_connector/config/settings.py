# Configuration management

from pydantic_settings import BaseSettings  # type: ignore
from functools import lru_cache
from typing import List


class Settings(BaseSettings):
    # Application
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    debug: bool = False
    log_level: str = "INFO"
    log_json: bool = True

    # Cache store
    cache_backend: str = "inproc"  # inproc or redis
    redis_url: str = "redis://localhost:6379/0"
    redis_key_prefix: str = "json_connector:"
    cache_default_expiry_seconds: int = 300  # used when cache_expiry_time is not a number
    cache_store_default_ttl: int = 600  # store default when a put carries no TTL
    cache_max_ttl: int = 21600  # 6 hours
    cache_max_entry_bytes: int = 100 * 1024  # per-entry ceiling (~100KB)

    # Fetching
    fetch_timeout_seconds: float = 30.0
    fetch_retry_attempts: int = 3
    fetch_user_agent: str = "json-connector/0.1"

    # Security
    allowed_origins: List[str] = [
        "http://localhost:3000", "http://localhost:8000"]

    # Observability
    metrics_enabled: bool = True

    class Config:
        env_file = ".env"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    return Settings()
