from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"

    # Session persistence
    SESSION_ID: str = "servicebot_conversation"
    STORE_PROVIDER: str = "json"  # "json" | "memory"
    SESSION_DATA_DIR: str = "./data/sessions"
    SESSION_MAX_AGE_HOURS: float = 24.0

    # Booking backend
    BACKEND_PROVIDER: str = "mock"  # "mock" | "http"
    BACKEND_BASE_URL: str = "http://localhost:8080/api"
    BACKEND_API_KEY: str | None = None
    BACKEND_TIMEOUT_SECONDS: float = 10.0

    # Used when the backend cannot list its categories
    SERVICE_CATEGORIES: list[str] = ["Cleaning", "Plumbing", "Electrical", "HVAC", "Handyman"]


settings = Settings()
