from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "local"
    APP_NAME: str = "Modern Band API"
    # Comma-separated origins for CORS (e.g. https://modernband.in,https://admin.modernband.in). If empty, uses localhost defaults.
    CORS_ORIGINS: str = ""
    LOG_LEVEL: str = "INFO"

    # Booking backend (owns bookings, admins, employees, payments)
    API_URL: str = "http://localhost:8081/api"
    API_TIMEOUT_SECONDS: int = 20
    API_TOKEN: str = ""  # optional bearer token forwarded to employee/admin endpoints

    @field_validator("API_URL", mode="after")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Endpoints are joined as API_URL + '/path'."""
        return v.rstrip("/")

    # Admin console session
    SECRET_KEY: str
    ADMIN_SESSION_EXPIRE_MINUTES: int = 8 * 60

    # Booking wizard
    WIZARD_TTL_MINUTES: int = 60

    BUSINESS_NAME: str = "Modern Band"
    CURRENCY_SYMBOL: str = "Rs."


settings = Settings()
