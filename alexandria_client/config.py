import os
from dataclasses import dataclass
from typing import Optional
from dotenv import load_dotenv

load_dotenv()

@dataclass
class Settings:
    # Server Settings
    base_url: str = os.getenv("ALEXANDRIA_BASE_URL", "localhost:8000")
    timeout: float = float(os.getenv("ALEXANDRIA_TIMEOUT", "10"))
    insecure_scheme: str = os.getenv("ALEXANDRIA_INSECURE_SCHEME", "http")
    secure_scheme: str = os.getenv("ALEXANDRIA_SECURE_SCHEME", "https")

    # Credentials (only used by the CLI)
    user: Optional[str] = os.getenv("ALEXANDRIA_USER")
    password: Optional[str] = os.getenv("ALEXANDRIA_PASS")

    # Listing
    default_count: int = int(os.getenv("ALEXANDRIA_DEFAULT_COUNT", "20"))

    # Application Settings
    app_name: str = os.getenv("APP_NAME", "Alexandria Client")
    log_level: str = os.getenv("LOG_LEVEL", "WARNING").upper()
    debug: bool = os.getenv("DEBUG", "False").lower() in ("true", "1", "yes")


settings = Settings()
