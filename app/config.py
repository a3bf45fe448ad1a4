"""Configuration settings for the application."""
from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Hidden gems backend (list + create routes)
    hidden_gems_api_url: str = "http://127.0.0.1:5000/api"
    hidden_gems_api_timeout: float = 10.0

    # Google Maps web services (photos + geocoding)
    google_maps_api_key: Optional[str] = None
    lookup_timeout: float = 10.0
    geocode_region: Optional[str] = "in"
    photo_max_width: int = 800
    # When set, photo URLs point at our proxy instead of exposing the API key
    photo_proxy_url: Optional[str] = None
    photo_max_concurrency: int = 8

    # Supabase storage (user uploaded images)
    supabase_url: Optional[str] = None
    supabase_key: Optional[str] = None
    supabase_bucket: str = "hidden-gems"
    upload_timeout: float = 30.0
    max_image_bytes: int = 5 * 1024 * 1024

    # Load the gem list as soon as the service starts
    load_on_startup: bool = True

    # FastAPI Configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_reload: bool = True

    # CORS Configuration
    frontend_url: str = "http://localhost:5173"

    # Environment
    environment: str = "development"
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        case_sensitive = False


# Global settings instance
settings = Settings()
