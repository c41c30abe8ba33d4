from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env")

    APP_NAME: str = "MASJID-OFFICE"
    ORGANIZATION_NAME: str = "Al-Manar Mosque"
    ORGANIZATION_ADDRESS: str = "123 Main Street, Kandy"
    ORGANIZATION_CONTACT: str = "+94 77 123 4567"
    CURRENCY_LABEL: str = "Rs."
    DEFAULT_PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = 100
    VIEW_SESSION_TTL_SECONDS: int = 1800
    VIEW_SESSIONS_MAX: int = 200
    EXPORTS_MAX_ROWS: int = 5000
    METRICS_ENABLED: bool = True
    LOG_LEVEL: str = "INFO"


settings = Settings()
