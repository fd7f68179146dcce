"""Application settings and configuration."""

from pathlib import Path
from dataclasses import dataclass, field
from typing import Optional
import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# Package root directory
PACKAGE_ROOT = Path(__file__).parent.parent


@dataclass
class APIConfig:
    """Listing endpoint configuration settings."""

    base_url: str = field(
        default_factory=lambda: os.getenv("ROSTER_API_BASE_URL", "http://localhost:8000")
    )
    listing_path: str = field(
        default_factory=lambda: os.getenv("ROSTER_LISTING_PATH", "/employees")
    )
    request_timeout: float = field(
        default_factory=lambda: float(os.getenv("ROSTER_REQUEST_TIMEOUT", "30"))
    )
    api_token: Optional[str] = field(default_factory=lambda: os.getenv("ROSTER_API_TOKEN"))

    @property
    def headers(self) -> dict:
        """Default request headers, including the bearer token when configured."""
        headers = {"Accept": "application/json"}
        if self.api_token:
            headers["Authorization"] = f"Bearer {self.api_token}"
        return headers


@dataclass
class PreferencesConfig:
    """Client-local preferences cache settings."""

    path: Path = field(
        default_factory=lambda: Path(
            os.getenv("ROSTER_PREFERENCES_DIR", str(Path.home() / ".roster" / "preferences"))
        )
    )
    resource: str = "employees"


@dataclass
class SyncConfig:
    """Query synchronizer timing settings."""

    debounce_ms: int = field(
        default_factory=lambda: int(os.getenv("ROSTER_DEBOUNCE_MS", "500"))
    )
    reapply_delay_ms: int = 50

    @property
    def debounce_seconds(self) -> float:
        return self.debounce_ms / 1000

    @property
    def reapply_delay_seconds(self) -> float:
        return self.reapply_delay_ms / 1000


@dataclass
class AppConfig:
    """Application configuration settings."""

    name: str = field(default_factory=lambda: os.getenv("APP_NAME", "Roster"))
    version: str = field(default_factory=lambda: os.getenv("APP_VERSION", "1.0.0"))
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    exports_path: Path = field(
        default_factory=lambda: Path(os.getenv("ROSTER_EXPORTS_DIR", str(Path.cwd() / "exports")))
    )


@dataclass
class Config:
    """Main configuration container."""

    api: APIConfig = field(default_factory=APIConfig)
    preferences: PreferencesConfig = field(default_factory=PreferencesConfig)
    sync: SyncConfig = field(default_factory=SyncConfig)
    app: AppConfig = field(default_factory=AppConfig)

    def ensure_directories(self) -> None:
        """Create necessary directories if they don't exist."""
        self.preferences.path.mkdir(parents=True, exist_ok=True)
        self.app.exports_path.mkdir(parents=True, exist_ok=True)


# Global config instance
config = Config()
