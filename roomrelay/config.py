import logging
import os
from functools import lru_cache
from typing import List

from dotenv import load_dotenv
from pydantic import BaseModel, Field

load_dotenv(".env")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _split_origins(value: str) -> List[str]:
    return [origin.strip() for origin in value.split(",") if origin.strip()]


class Settings(BaseModel):
    host: str = Field(default_factory=lambda: os.getenv("RELAY_HOST", "0.0.0.0"))
    port: int = Field(default_factory=lambda: int(os.getenv("RELAY_PORT", "8080")))
    log_level: str = Field(
        default_factory=lambda: os.getenv("RELAY_LOG_LEVEL", "INFO"),
        description="Root log level for the relay loggers",
    )
    cors_origins: List[str] = Field(
        default_factory=lambda: _split_origins(os.getenv("RELAY_CORS_ORIGINS", "*")),
        description="Origins allowed by the CORS middleware",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


def configure_logging(level: str = "INFO") -> None:
    """Attach a single stream handler to the ``roomrelay`` logger."""
    root = logging.getLogger("roomrelay")
    root.setLevel(level.upper())
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)


__all__ = ["Settings", "get_settings", "configure_logging", "LOG_FORMAT"]
