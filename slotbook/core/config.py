from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"

    BOOKINGS_API_BASE_URL: str | None = None
    BOOKINGS_API_TOKEN: str | None = None
    HTTP_TIMEOUT_SECONDS: float = 10.0

    BUSINESS_TIMEZONE: str = "UTC"
    BUSINESS_HOURS_START: str = "09:00"
    BUSINESS_HOURS_END: str = "18:00"
    SLOT_GRANULARITY_MINUTES: int = 15

    DEFAULT_BOOKING_TYPE: str = "manual_followup"
    BOOKING_SOURCE: str = "user_ui"


settings = Settings()
