from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "env_prefix": "AMCALC_"}

    # Calculation cache: "memory", "redis" or "none"
    cache_backend: str = "memory"
    cache_ttl_seconds: int = 86400
    cache_max_entries: int = 256  # In-memory backend only

    # Redis (only used when cache_backend == "redis")
    redis_url: str = "redis://localhost:6379/0"

    # App
    debug: bool = False
    log_level: str = "INFO"


settings = Settings()
