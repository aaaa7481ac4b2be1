from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Store
    store_backend: str = "sqlite"  # sqlite | redis | memory
    sqlite_path: str = "meetsync.db"
    redis_url: str = "redis://localhost:6379/0"

    # Registries
    presence_ttl_seconds: float = 10.0

    # Client cadence
    heartbeat_interval_seconds: float = 0.5
    roster_poll_interval_seconds: float = 0.5
    telemetry_poll_interval_seconds: float = 0.2
    lifecycle_poll_interval_seconds: float = 3.0
    detection_throttle_ms: int = 200
    no_face_miss_threshold: int = 8
    hold_stale_seconds: float = 3.0

    # Client transport
    api_base_url: str = "http://127.0.0.1:8000"
    request_timeout_seconds: float = 2.0

    # Server
    host: str = "127.0.0.1"
    port: int = 8000
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()
