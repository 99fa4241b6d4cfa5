from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "correspondence"
    app_env: str = "development"

    database_url: str = "sqlite:///./correspondence.sqlite"

    # JWT
    JWT_SECRET: str = "change-me"
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRE_MINUTES: int = 60

    # Signs the flash-message cookie
    SESSION_SECRET: str = "change-me-too"

    # "en" or "id"
    app_locale: str = "en"

    storage_root: str = "./storage"
    default_page_size: int = 10

    log_level: str = "INFO"

    # Bootstrap admin, created on startup when both are set
    admin_email: str | None = None
    admin_password: str | None = None
    admin_name: str = "Administrator"

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


settings = Settings()
