import os
from pathlib import Path
from dotenv import load_dotenv
from typing import List, Optional

# Load .env robustly (try project root and CWD)
_ROOT = Path(__file__).resolve().parent
_candidates = [
    _ROOT / ".env",
    Path.cwd() / ".env",
]
for p in _candidates:
    if p.exists():
        load_dotenv(p, override=False)

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in _TRUE_VALUES


def _env_list(name: str, default: str = "") -> List[str]:
    raw = os.getenv(name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]


class Settings:
    """Service settings read from the environment.

    Keyword arguments override the environment, which is how tests and
    embedding hosts build an instance with their own asset root.
    """

    def __init__(self, **overrides) -> None:
        data_dir = Path(os.getenv("ASSET_DATA_DIR", "/var/lib/asset-store")).expanduser()

        # File Storage
        self.DATA_DIR: str = str(data_dir)
        self.ASSET_ROOT: str = os.getenv("ASSET_ROOT", str(data_dir / "uploads"))
        self.URL_PREFIX: str = os.getenv("ASSET_URL_PREFIX", "/assets")

        # Upload limits
        self.MAX_FILE_SIZE: int = int(os.getenv("ASSET_MAX_FILE_SIZE", str(10 * 1024 * 1024)))  # 10MB default
        self.ENFORCE_MAX_FILE_SIZE: bool = _env_bool("ASSET_ENFORCE_MAX_FILE_SIZE", True)
        self.ATOMIC_WRITES: bool = _env_bool("ASSET_ATOMIC_WRITES", True)

        # API Keys
        self.API_KEY: Optional[str] = os.getenv("API_KEY") or None
        self.USER_API_KEYS: List[str] = _env_list("USER_API_KEYS")
        self.ALLOW_NON_ADMIN_UPLOADS: bool = _env_bool("ASSET_ALLOW_NON_ADMIN_UPLOADS", False)

        # HTTP
        self.CORS_ORIGINS: List[str] = _env_list("CORS_ORIGINS", "*")
        self.HOST: str = os.getenv("HOST", "0.0.0.0")
        self.PORT: int = int(os.getenv("PORT", "8002"))

        # Observability
        self.LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

        for key, value in overrides.items():
            if not hasattr(self, key):
                raise AttributeError(f"Unknown setting: {key}")
            setattr(self, key, value)

        prefix = self.URL_PREFIX.strip("/")
        if not prefix:
            raise ValueError("ASSET_URL_PREFIX must name a path, e.g. /assets")
        self.URL_PREFIX = f"/{prefix}"


settings = Settings()
