"""Centralised application settings loaded from environment / .env file."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Sample provider
    provider_base_url: str = "http://localhost:8888/"
    provider_timeout_seconds: float = 10.0

    # Redis
    redis_url: str = "redis://localhost:6379/0"

    # Vehicle
    default_vehicle_id: str = "Vehicle_1"
    back_to_back_enabled: bool = True
    maximum_capacity: int = 5

    # Polling
    trip_poll_interval_seconds: float = 5.0  # matched-trip polling
    vehicle_poll_interval_seconds: float = 10.0  # fixed delay between vehicle fetches
    poller_lock_ttl_seconds: int = 60
    accept_trip_timeout_seconds: float = 30.0

    log_level: str = "INFO"

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()
