from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "Invoicer"
    api_version: str = "1.0.0"
    environment: str = "development"

    # "memory" keeps everything in dicts, "sql" goes through SQLAlchemy
    storage_backend: str = "memory"
    database_url: str = "sqlite://"

    log_level: str = "INFO"
    cors_origins: str = "http://localhost:5173,http://127.0.0.1:5173"

    default_payment_terms: str = "Net 30"
    default_due_days: int = 30

    model_config = SettingsConfigDict(env_prefix="INVOICER_", case_sensitive=False, extra="forbid")

    @property
    def cors_origin_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


_settings_instance = None


def get_settings():
    """Return a singleton Settings instance."""
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance
