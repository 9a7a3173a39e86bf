"""
Configuration management for Comic Cover

Loads environment variables and provides application settings.
"""

from pydantic_settings import BaseSettings
from typing import Optional
from functools import lru_cache

from .limits import POLL_INTERVAL_SECONDS, MAX_POLL_ATTEMPTS


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Application
    app_name: str = "Comic Cover"
    port: int = 3000
    log_level: str = "INFO"

    # CORS Configuration
    # Default "*" allows all origins (suitable for development)
    # For production set a comma-separated list:
    #   CORS_ALLOWED_ORIGINS=https://comiccover.app,https://www.comiccover.app
    cors_allowed_origins: str = "*"

    # =========================================================================
    # Replicate (image generation inference)
    # =========================================================================
    replicate_api_token: Optional[str] = None
    replicate_model: str = "black-forest-labs/flux-kontext-pro"

    # Fixed generation parameters sent with every prediction
    generation_aspect_ratio: str = "match_input_image"
    generation_output_format: str = "jpg"
    generation_guidance_scale: float = 3.5
    generation_num_inference_steps: int = 28
    generation_safety_tolerance: int = 2
    generation_prompt_upsampling: bool = True

    # Poll policy (attempt ceiling, not a wall-clock deadline)
    generation_poll_interval_seconds: float = POLL_INTERVAL_SECONDS
    generation_max_poll_attempts: int = MAX_POLL_ATTEMPTS

    # =========================================================================
    # OpenAI (dialogue lines and hero names)
    # =========================================================================
    openai_api_key: Optional[str] = None
    dialogue_model: str = "gpt-4o"
    dialogue_temperature: float = 0.7
    hero_name_model: str = "gpt-4o-mini"
    hero_name_fallback_model: str = "gpt-3.5-turbo"
    hero_name_temperature: float = 0.8

    # =========================================================================
    # Cloudinary (object storage / CDN)
    # =========================================================================
    cloudinary_cloud_name: Optional[str] = None
    cloudinary_api_key: Optional[str] = None
    cloudinary_api_secret: Optional[str] = None
    cloudinary_upload_preset: str = "comiccover"
    cloudinary_export_folder: str = "comic-exports"

    # =========================================================================
    # Client (CLI) configuration
    # =========================================================================
    api_base_url: str = "http://localhost:3000"
    client_profile_path: str = "~/.comic_cover/local_storage.json"

    # Debug Configuration
    debug_generation: bool = False  # Log every poll of every generation job
    debug_api_calls: bool = False   # Log chat completion call details
    debug_log_dir: str = "logs/debug"

    class Config:
        env_file = ".env"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Using lru_cache ensures we only load settings once.
    """
    return Settings()
