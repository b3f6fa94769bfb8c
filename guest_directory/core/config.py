"""
Configuration settings for the guest directory client
"""

import os
from typing import List, Optional
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    """Application settings"""

    # Remote guest API
    API_BASE_URL: str = os.getenv("API_BASE_URL", "http://localhost:8080")
    REQUEST_TIMEOUT: Optional[float] = None  # no timeout unless configured

    # Identity
    IDENTITY_FILE: str = os.getenv("IDENTITY_FILE", ".guest_directory/identity.json")
    IDENTITY_HEADER: str = "user-racf"
    ROLE_CACHE_TTL: float = 5 * 60  # seconds
    PRIVILEGED_ROLES: List[str] = ["groom", "bride"]

    # Import
    ALLOWED_IMPORT_EXTENSIONS: List[str] = [".csv", ".xlsx"]

    # Admin surface
    ALLOW_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://localhost:8000",
    ]
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    class Config:
        env_file = ".env"

settings = Settings()
