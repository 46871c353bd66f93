"""
src/core/config.py
===================
Process configuration for the Vitrine API.

All settings are read ONCE from the environment (and a local .env file via
python-dotenv) into a frozen Settings object. The object is then handed to
every component constructor; nothing below this module calls os.getenv().

Variables:
    VITRINE_DATA_DIR    directory holding products.json and users.json
    JWT_SECRET          HS256 signing key for session tokens
    TOKEN_TTL_HOURS     token lifetime in hours (default 12)
    HOST / PORT         uvicorn bind address (scripts/serve.py)
    BCRYPT_ROUNDS       bcrypt cost factor (default 10)
    ADMIN_USERNAME      seeded admin account name   (default: admin)
    ADMIN_PASSWORD      seeded admin password       (default: admin123)
    ALLOWED_ORIGINS     comma-separated CORS origins (default: *)
    VITRINE_STATIC_DIR  static site root, mounted at / when it exists
    BACKUP_CORRUPT      rename unreadable collection files aside before reseeding
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path

from dotenv import load_dotenv

_ROOT = Path(__file__).resolve().parent.parent.parent

# Long enough for HS256 key-length checks, obviously not a real secret.
DEFAULT_JWT_SECRET = "insecure-default-secret-change-me-before-deploying"

PRODUCTS_FILENAME = "products.json"
USERS_FILENAME    = "users.json"


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    """Immutable configuration shared by every component."""

    data_dir:        Path      = _ROOT / "data"
    jwt_secret:      str       = DEFAULT_JWT_SECRET
    token_ttl:       timedelta = timedelta(hours=12)
    host:            str       = "0.0.0.0"
    port:            int       = 3000
    bcrypt_rounds:   int       = 10
    admin_username:  str       = "admin"
    admin_password:  str       = "admin123"
    allowed_origins: list[str] = field(default_factory=lambda: ["*"])
    static_dir:      Path      = _ROOT / "public"
    backup_corrupt:  bool      = True

    @property
    def products_file(self) -> Path:
        return self.data_dir / PRODUCTS_FILENAME

    @property
    def users_file(self) -> Path:
        return self.data_dir / USERS_FILENAME

    @property
    def uses_default_secret(self) -> bool:
        return self.jwt_secret == DEFAULT_JWT_SECRET

    @classmethod
    def from_env(cls) -> "Settings":
        """Build Settings from os.environ, after loading .env if present."""
        load_dotenv()

        raw_origins = os.getenv("ALLOWED_ORIGINS", "*")
        origins     = [o.strip() for o in raw_origins.split(",") if o.strip()]

        return cls(
            data_dir        = Path(os.getenv("VITRINE_DATA_DIR", str(_ROOT / "data"))),
            jwt_secret      = os.getenv("JWT_SECRET") or DEFAULT_JWT_SECRET,
            token_ttl       = timedelta(hours=float(os.getenv("TOKEN_TTL_HOURS", "12"))),
            host            = os.getenv("HOST", "0.0.0.0"),
            port            = int(os.getenv("PORT", "3000")),
            bcrypt_rounds   = int(os.getenv("BCRYPT_ROUNDS", "10")),
            admin_username  = os.getenv("ADMIN_USERNAME", "admin"),
            admin_password  = os.getenv("ADMIN_PASSWORD", "admin123"),
            allowed_origins = origins or ["*"],
            static_dir      = Path(os.getenv("VITRINE_STATIC_DIR", str(_ROOT / "public"))),
            backup_corrupt  = _env_bool("BACKUP_CORRUPT", True),
        )
