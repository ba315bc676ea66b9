import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

# Load a local .env file if present.
load_dotenv()


def _env_bool(name: str, default: Optional[bool] = None) -> Optional[bool]:
    """Parse a boolean environment variable.

    Returns:
      - True/False if the env var is set to a recognizable value
      - default if unset or unrecognized

    Accepted truthy: 1, true, yes, y, on
    Accepted falsy:  0, false, no, n, off
    """

    raw = os.environ.get(name)
    if raw is None:
        return default
    v = raw.strip().lower()
    if v in ("1", "true", "yes", "y", "on"):
        return True
    if v in ("0", "false", "no", "n", "off"):
        return False
    return default


@dataclass(frozen=True)
class Config:
    """Runtime configuration.

    IMPORTANT: Provide secrets via environment variables or a .env file.
    Do not hardcode secrets in source code.
    """

    # -----------------
    # Core
    # -----------------
    NODE_ENV: str = os.environ.get("NODE_ENV", "development")
    API_HOST: str = os.environ.get("API_HOST", "0.0.0.0")
    API_PORT: int = int(os.environ.get("API_PORT", os.environ.get("PORT", "5000")))

    # -----------------
    # MongoDB
    # -----------------
    MONGODB_URI: str = os.environ.get("MONGODB_URI", "mongodb://localhost:27017/craftopia")
    # Used when the URI carries no database path.
    MONGODB_DB_NAME: str = os.environ.get("MONGODB_DB_NAME", "craftopia")
    MONGODB_MAX_POOL_SIZE: int = int(os.environ.get("MONGODB_MAX_POOL_SIZE", "10"))
    MONGODB_SERVER_SELECTION_TIMEOUT_MS: int = int(
        os.environ.get("MONGODB_SERVER_SELECTION_TIMEOUT_MS", "5000")
    )
    MONGODB_SOCKET_TIMEOUT_MS: int = int(os.environ.get("MONGODB_SOCKET_TIMEOUT_MS", "45000"))

    # -----------------
    # Auth (JWT)
    # -----------------
    # NOTE: In dev, this defaults to a fixed string so you can get started.
    # In production, you MUST set JWT_SECRET to a strong random value.
    # An explicitly blank JWT_SECRET refuses to start.
    JWT_SECRET: str = os.environ.get("JWT_SECRET", "dev_change_me")
    JWT_EXPIRE_MINUTES: int = int(os.environ.get("JWT_EXPIRE_MINUTES", "1440"))  # 24h

    # bcrypt cost factor. Lower it only for tests.
    BCRYPT_ROUNDS: int = int(os.environ.get("BCRYPT_ROUNDS", "12"))

    # Access token cookie (read as a fallback when no Authorization header is sent)
    AUTH_COOKIE_NAME: str = os.environ.get("AUTH_COOKIE_NAME", "token")
    # Refresh token cookie (httpOnly, SameSite=strict, 7 days)
    REFRESH_COOKIE_NAME: str = os.environ.get("REFRESH_COOKIE_NAME", "refreshToken")
    AUTH_COOKIE_PATH: str = os.environ.get("AUTH_COOKIE_PATH", "/")

    # If AUTH_COOKIE_SECURE is unset, secure cookies are used in production only.
    AUTH_COOKIE_SECURE: bool = (
        _env_bool("AUTH_COOKIE_SECURE", None)
        if _env_bool("AUTH_COOKIE_SECURE", None) is not None
        else NODE_ENV == "production"
    )

    # -----------------
    # CORS
    # -----------------
    CORS_ALLOW_ORIGINS: str = os.environ.get(
        "CORS_ALLOW_ORIGINS",
        "http://localhost:3000,http://localhost:5173,http://127.0.0.1:3000,http://127.0.0.1:5173",
    )

    # -----------------
    # Images (Cloudinary)
    # -----------------
    CLOUDINARY_CLOUD_NAME: str = os.environ.get("CLOUDINARY_CLOUD_NAME", "")
    CLOUDINARY_API_KEY: str = os.environ.get("CLOUDINARY_API_KEY", "")
    CLOUDINARY_API_SECRET: str = os.environ.get("CLOUDINARY_API_SECRET", "")
    CLOUDINARY_FOLDER: str = os.environ.get("CLOUDINARY_FOLDER", "craftopia/decors")
    CLOUDINARY_BASE_URL: str = os.environ.get("CLOUDINARY_BASE_URL", "https://api.cloudinary.com/v1_1")
    CLOUDINARY_TIMEOUT_SECONDS: float = float(os.environ.get("CLOUDINARY_TIMEOUT_SECONDS", "60"))

    # -----------------
    # Bootstrap super admin (scripts/create_super_admin.py)
    # -----------------
    SUPER_ADMIN_FIRST_NAME: str = os.environ.get("SUPER_ADMIN_FIRST_NAME", "Super")
    SUPER_ADMIN_LAST_NAME: str = os.environ.get("SUPER_ADMIN_LAST_NAME", "Admin")
    SUPER_ADMIN_EMAIL: str = os.environ.get("SUPER_ADMIN_EMAIL", "admin@craftopia.com")
    SUPER_ADMIN_PASSWORD: str = os.environ.get("SUPER_ADMIN_PASSWORD", "SuperAdmin123!")

    @property
    def is_development(self) -> bool:
        return (self.NODE_ENV or "").strip().lower() == "development"


def load_config() -> Config:
    return Config()
