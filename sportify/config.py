"""Sportify configuration — loaded from environment variables."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_prefix": "SPORTIFY_", "env_file": ".env"}

    # Google Generative Language API
    google_api_key: str = ""
    api_base: str = "https://generativelanguage.googleapis.com/v1beta"
    text_model: str = "gemini-2.5-flash"

    # Image generation: "pollinations" (URL only) or "imagen" (hosted call)
    image_strategy: str = "pollinations"
    image_model: str = "imagen-4.0-generate-001"
    image_width: int = 2560
    image_height: int = 1440
    image_aspect_ratio: str = "16:9"
    image_mime_type: str = "image/jpeg"
    image_prompt_chars: int = 250

    # Pixels cut from the bottom of rendered images (provider watermark)
    watermark_band: int = 85

    request_timeout: float = 120.0

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"


settings = Settings()
