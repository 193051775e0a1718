"""Application configuration."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    app_name: str = "safetrail"
    debug: bool = False
    database_url: str = "sqlite:///./safetrail.db"
    api_prefix: str = "/api"

    # JWT
    jwt_secret: str = "change-me-in-production-use-openssl-rand-hex-32"
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 60 * 24 * 7  # 7 days

    # SMS provider: fast2sms | console
    sms_provider: str = "console"
    fast2sms_api_key: str = ""
    fast2sms_url: str = "https://www.fast2sms.com/dev/bulkV2"
    fast2sms_route: str = "q"
    sms_timeout_seconds: float = 10.0
    sms_send_delay_seconds: float = 1.0

    # SOS dispatch
    sos_dispatch_budget_seconds: float = 30.0
    alert_timezone: str = "UTC"
    maps_base_url: str = "https://www.google.com/maps"

    # Nearby places
    overpass_url: str = "https://overpass-api.de/api/interpreter"
    overpass_timeout_seconds: float = 25.0


settings = Settings()
