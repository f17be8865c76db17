# roomchat/core/config.py
import os
from typing import List
from dotenv import load_dotenv


def _split(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings:
    """
    Setup environment variables.
        - DEFAULT_ROOMS comma separated rooms that exist at startup
        - HOST / PORT where uvicorn binds when run as a module
        - CORS_ORIGINS comma separated allowed origins ("*" for any)
        - LOG_LEVEL root log level (read by core.logging)
    """

    # Load environment variables from the .env file
    load_dotenv()

    DEFAULT_ROOMS: List[str] = _split(os.getenv("DEFAULT_ROOMS", "general,random,tech,sports"))

    HOST: str = os.getenv("HOST", "127.0.0.1")
    PORT: int = int(os.getenv("PORT", "5000"))

    CORS_ORIGINS: List[str] = _split(os.getenv("CORS_ORIGINS", "*"))

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

settings = Settings()
