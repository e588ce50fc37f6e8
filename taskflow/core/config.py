from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    DATABASE_URL: str = "postgresql://taskflow:taskflow@db:5432/taskflow"
    APP_ENV: str = "development"
    SECRET_KEY: str = "changeme-secret-key"

    # Comma-separated allowed origins, or "*" to allow all.
    # Example: "https://board.example.com,https://api.example.com"
    CORS_ORIGINS: str = "*"

    LOG_LEVEL: str = "INFO"
    # "text" or "json"
    LOG_FORMAT: str = "text"

    # Hourly due-date scan. Disable on all but one process when running
    # several workers, otherwise every worker scans.
    DUE_DATE_SCANNER_ENABLED: bool = True
    DUE_DATE_SCAN_INTERVAL_MINUTES: int = 60

    # Tasks in this status are never reported as overdue.
    DONE_STATUS: str = "Done"

    @property
    def cors_origins_list(self) -> list[str]:
        if self.CORS_ORIGINS.strip() == "*":
            return ["*"]
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


settings = Settings()
