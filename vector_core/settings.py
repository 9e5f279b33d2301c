"""
vector_core/settings.py
-----------------------
Environment-configurable runtime settings for the vectorization engine.
Every field can be overridden with a VECTORS_* environment variable
(e.g. VECTORS_DEVICE=cuda) or a local .env file.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="VECTORS_",                   # allows env vars like VECTORS_LOG_DIR
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    root_dir: str = "."                          # host root handed to on_ready by the API
    default_models_dir: str = ".model_cache"     # used until the host configures one
    device: str = "cpu"                          # "cpu", "cuda" or "auto"
    normalize_embeddings: bool = True
    text_batch_size: int = 32
    batch_strict_fallback: bool = False          # raise instead of skipping in batch fallback
    log_dir: str = "logs"
    log_echo: bool = True


@lru_cache()
def get_settings() -> Settings:
    return Settings()
